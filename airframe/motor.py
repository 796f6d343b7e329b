"""
Motor specification normalized to SI units.
"""
from dataclasses import dataclass
import logging

from .geometry import InvalidGeometry, parse_number, G_PER_KG
from .records import MotorRecord, is_blank

logger = logging.getLogger(__name__)

DEFAULT_PEAK_THRUST_TIME = 0.1  # s


class InvalidMotor(InvalidGeometry):
    """Raised when a motor record is missing or has non-numeric fields"""


@dataclass(frozen=True)
class MotorSpec:
    """
    Motor performance summary.

    The estimator treats thrust as constant at ``avg_thrust`` for
    ``burn_time``; ``peak_thrust`` is only used for the rod exit velocity.

    Attributes:
        initial_mass: Loaded motor mass (kg)
        propellant_mass: Propellant mass (kg)
        avg_thrust: Average thrust (N)
        peak_thrust: Peak thrust (N)
        peak_thrust_time: Time to peak thrust (s)
        burn_time: Burn duration (s)
    """

    initial_mass: float
    propellant_mass: float
    avg_thrust: float
    peak_thrust: float
    peak_thrust_time: float
    burn_time: float
    name: str = ""

    @property
    def impulse(self) -> float:
        """Total impulse (N*s)"""
        return self.avg_thrust * self.burn_time

    @property
    def burnout_mass(self) -> float:
        """Motor mass after the propellant is spent (kg)"""
        return self.initial_mass - self.propellant_mass


def build_motor(record: MotorRecord) -> MotorSpec:
    """
    Parse and validate a motor record into SI units.

    Blank peak thrust falls back to the average thrust and blank time to
    peak falls back to 0.1 s.

    Raises:
        InvalidMotor: If a required field is missing, non-numeric or negative
    """
    def number(value, field_name: str) -> float:
        parsed = parse_number(value, field_name, InvalidMotor)
        if parsed < 0:
            raise InvalidMotor(f"{field_name} must not be negative", field_name)
        return parsed

    avg_thrust = number(record.motor_avg_thrust_n, "motor_avg_thrust_n")

    if is_blank(record.motor_peak_thrust_n):
        peak_thrust = avg_thrust
    else:
        peak_thrust = number(record.motor_peak_thrust_n, "motor_peak_thrust_n")

    if is_blank(record.motor_peak_time_s):
        peak_time = DEFAULT_PEAK_THRUST_TIME
    else:
        peak_time = number(record.motor_peak_time_s, "motor_peak_time_s")

    motor = MotorSpec(
        initial_mass=number(record.motor_initial_mass_g, "motor_initial_mass_g") / G_PER_KG,
        propellant_mass=number(record.motor_propellant_mass_g, "motor_propellant_mass_g") / G_PER_KG,
        avg_thrust=avg_thrust,
        peak_thrust=peak_thrust,
        peak_thrust_time=peak_time,
        burn_time=number(record.motor_burn_time_s, "motor_burn_time_s"),
        name=record.name,
    )
    logger.debug(f"Built motor {motor.name or 'unnamed'}: {motor.impulse:.2f} N*s")
    return motor
