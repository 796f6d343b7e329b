"""
Raw rocket and motor records as entered by the user.

Records hold the form values exactly as typed (decimal strings in
centimeters and grams). They are converted to SI by ``build_geometry`` and
``build_motor``; nothing here does arithmetic.
"""

from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, List, Optional, Union

FieldValue = Union[str, int, float, None]


def is_blank(value: FieldValue) -> bool:
    """True for a missing form value (None or whitespace-only string)"""
    return value is None or (isinstance(value, str) and not value.strip())


class _Record:
    """Shared serialization for the record dataclasses"""

    # Fields that may be left empty when the record is saved
    OPTIONAL_FIELDS: tuple = ("id",)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        """Create from a stored mapping, ignoring keys this record does not define"""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def missing_fields(self) -> List[str]:
        """Names of required fields that are still blank"""
        return [
            f.name
            for f in fields(self)
            if f.name not in self.OPTIONAL_FIELDS and is_blank(getattr(self, f.name))
        ]


@dataclass
class RocketRecord(_Record):
    """Rocket definition as stored in the ``rockets`` collection"""

    OPTIONAL_FIELDS = ("id", "nose_cone_type")

    rocket_name: FieldValue = None
    dry_mass_g: FieldValue = None
    length_cm: FieldValue = None  # display only
    diameter_cm: FieldValue = None
    nose_cone_type: FieldValue = "ogive"
    nose_cone_length_cm: FieldValue = None
    cog_cm: FieldValue = None
    num_fins: FieldValue = None
    fin_root_chord_cm: FieldValue = None
    fin_tip_chord_cm: FieldValue = None
    fin_semi_span_cm: FieldValue = None
    fin_sweep_dist_cm: FieldValue = None
    nose_to_fin_dist_cm: FieldValue = None
    id: Optional[str] = None

    @property
    def name(self) -> str:
        return str(self.rocket_name or "")


@dataclass
class MotorRecord(_Record):
    """Motor definition as stored in the ``motors`` collection"""

    OPTIONAL_FIELDS = ("id", "motor_peak_thrust_n", "motor_peak_time_s")

    motor_name: FieldValue = None
    motor_initial_mass_g: FieldValue = None
    motor_propellant_mass_g: FieldValue = None
    motor_avg_thrust_n: FieldValue = None
    motor_peak_thrust_n: FieldValue = None  # defaults to average thrust
    motor_peak_time_s: FieldValue = None  # defaults to 0.1 s
    motor_burn_time_s: FieldValue = None
    id: Optional[str] = None

    @property
    def name(self) -> str:
        return str(self.motor_name or "")
