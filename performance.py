"""
Pre-flight performance estimator.

Closed-form 1-D point-mass model: constant average thrust with quadratic
drag during the burn, then an unpowered coast to apogee. Also reports the
static stability margin, thrust-to-weight ratio and launch rod checks.

Usage:
    from airframe import build_geometry, build_motor
    from performance import estimate

    result = estimate(build_geometry(rocket_record), build_motor(motor_record))
    if result.feasible:
        print(f"Apogee: {result.total_altitude:.1f} m")
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Union
import logging

import numpy as np

from airframe import (
    RocketRecord,
    MotorRecord,
    RocketGeometry,
    MotorSpec,
    build_geometry,
    build_motor,
)

logger = logging.getLogger(__name__)

GRAVITY = 9.80665  # m/s^2
AIR_DENSITY = 1.2  # kg/m^3
DRAG_COEFFICIENT = 0.75  # fixed for every airframe

SAFE_ROD_EXIT_VELOCITY = 10.0  # m/s
MIN_STABLE_CALIBERS = 1.0

INFEASIBLE_THRUST_MESSAGE = "Thrust is less than weight."


@dataclass(frozen=True)
class PerformanceEstimate:
    """
    Pre-flight estimate attached to a flight record.

    Attributes:
        total_altitude: Predicted apogee above the pad (m)
        max_velocity: Burnout velocity, the model's maximum (m/s)
        stability_margin_calibers: (CP - CG) / diameter
        launch_rod_exit_velocity: Speed leaving the rod at peak thrust (m/s)
        min_thrust_needed: Thrust for a 10 m/s rod exit on this rod (N)
        thrust_to_weight_ratio: Average thrust over loaded weight
        loaded_mass: Rocket plus loaded motor (kg)
        burnout_altitude: Altitude gained under power (m)
        coast_altitude: Altitude gained coasting after burnout (m)
        drag_parameter: k = 0.5 * rho * Cd * A (kg/m)
        launch_rod_length: Rod length used for the rod checks (m)
    """

    total_altitude: float
    max_velocity: float
    stability_margin_calibers: float
    launch_rod_exit_velocity: float
    min_thrust_needed: float
    thrust_to_weight_ratio: float
    loaded_mass: float
    burnout_altitude: float = 0.0
    coast_altitude: float = 0.0
    drag_parameter: float = 0.0
    launch_rod_length: float = 1.0

    feasible = True

    def is_stable(self, min_calibers: float = MIN_STABLE_CALIBERS) -> bool:
        return self.stability_margin_calibers >= min_calibers

    def rod_exit_is_safe(self, min_velocity: float = SAFE_ROD_EXIT_VELOCITY) -> bool:
        return self.launch_rod_exit_velocity >= min_velocity

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> str:
        lines = [
            "Pre-flight estimate:",
            f"  Altitude: {self.total_altitude:.2f} m "
            f"(boost {self.burnout_altitude:.2f} m + coast {self.coast_altitude:.2f} m)",
            f"  Max velocity: {self.max_velocity:.2f} m/s",
            f"  Stability: {self.stability_margin_calibers:.2f} cal",
            f"  Rod exit velocity: {self.launch_rod_exit_velocity:.2f} m/s "
            f"on a {self.launch_rod_length:.2f} m rod",
            f"  Min thrust needed: {self.min_thrust_needed:.2f} N",
            f"  T/W ratio: {self.thrust_to_weight_ratio:.2f}",
            f"  Loaded mass: {self.loaded_mass*1000:.1f} g",
        ]
        return "\n".join(lines)


@dataclass(frozen=True)
class InfeasibleThrust:
    """Estimate result for a vehicle whose average thrust cannot lift it"""

    loaded_mass: float
    weight: float
    avg_thrust: float
    error: str = INFEASIBLE_THRUST_MESSAGE

    feasible = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> str:
        return (
            f"Pre-flight estimate: {self.error} "
            f"({self.avg_thrust:.2f} N thrust vs {self.weight:.2f} N weight)"
        )


EstimateResult = Union[PerformanceEstimate, InfeasibleThrust]


def estimate_from_dict(data: Optional[Dict[str, Any]]) -> Optional[EstimateResult]:
    """Rebuild a stored estimate; ``None`` when the flight has none"""
    if not data:
        return None
    if "error" in data:
        return InfeasibleThrust(
            loaded_mass=float(data.get("loaded_mass", 0.0)),
            weight=float(data.get("weight", 0.0)),
            avg_thrust=float(data.get("avg_thrust", 0.0)),
            error=data["error"],
        )
    return PerformanceEstimate(**data)


def _altitude_model(thrust: float, mass: float, burn_time: float, k: float):
    """
    Burnout velocity and altitude gains for constant thrust and quadratic drag.

    Returns:
        (burnout_velocity, burnout_altitude, coast_altitude)
    """
    weight = mass * GRAVITY
    net_thrust = thrust - weight

    q = np.sqrt(net_thrust / k)
    x = 2.0 * k * q / mass
    decay = np.exp(-x * burn_time)
    velocity = q * (1.0 - decay) / (1.0 + decay)

    # Burnout altitude; a non-positive log argument means drag has eaten the margin
    numerator = net_thrust - k * velocity**2
    if numerator <= 0:
        burnout_altitude = 0.0
    else:
        burnout_altitude = (-mass / (2.0 * k)) * np.log(numerator / net_thrust)

    coast_altitude = (mass / (2.0 * k)) * np.log((weight + k * velocity**2) / weight)

    return float(velocity), float(burnout_altitude), float(coast_altitude)


def estimate(
    geometry: RocketGeometry,
    motor: MotorSpec,
    launch_rod_length: float = 1.0,
) -> EstimateResult:
    """
    Estimate flight performance before launch.

    Args:
        geometry: Rocket geometry in SI units
        motor: Motor specification in SI units
        launch_rod_length: Launch rod length (m)

    Returns:
        PerformanceEstimate, or InfeasibleThrust when thrust <= weight

    Raises:
        ValueError: If launch_rod_length is not positive
    """
    if launch_rod_length <= 0:
        raise ValueError(f"launch_rod_length must be positive, got {launch_rod_length}")

    mass = geometry.dry_mass + motor.initial_mass
    weight = mass * GRAVITY
    thrust = motor.avg_thrust

    if thrust <= weight:
        logger.info(
            f"Thrust {thrust:.2f} N does not exceed weight {weight:.2f} N; no estimate"
        )
        return InfeasibleThrust(loaded_mass=mass, weight=weight, avg_thrust=thrust)

    thrust_to_weight = thrust / weight
    min_thrust_needed = mass * (SAFE_ROD_EXIT_VELOCITY**2 / (2.0 * launch_rod_length) + GRAVITY)

    # Peak thrust may sit below the weight even when the average does not
    rod_accel = (motor.peak_thrust - weight) / mass
    rod_exit_velocity = float(np.sqrt(2.0 * rod_accel * launch_rod_length)) if rod_accel > 0 else 0.0

    area = np.pi * geometry.radius**2
    k = 0.5 * AIR_DENSITY * DRAG_COEFFICIENT * area
    velocity, burnout_altitude, coast_altitude = _altitude_model(
        thrust, mass, motor.burn_time, k
    )

    stability = (
        geometry.calculate_center_of_pressure() - geometry.center_of_gravity
    ) / geometry.diameter

    result = PerformanceEstimate(
        total_altitude=burnout_altitude + coast_altitude,
        max_velocity=velocity,
        stability_margin_calibers=float(stability),
        launch_rod_exit_velocity=rod_exit_velocity,
        min_thrust_needed=float(min_thrust_needed),
        thrust_to_weight_ratio=float(thrust_to_weight),
        loaded_mass=float(mass),
        burnout_altitude=burnout_altitude,
        coast_altitude=coast_altitude,
        drag_parameter=float(k),
        launch_rod_length=float(launch_rod_length),
    )
    logger.info(
        f"Estimated {result.total_altitude:.1f} m apogee, "
        f"{result.stability_margin_calibers:.2f} cal stability"
    )
    return result


def estimate_from_records(
    rocket: RocketRecord,
    motor: MotorRecord,
    launch_rod_length: float = 1.0,
) -> EstimateResult:
    """Build geometry and motor from raw records, then estimate"""
    return estimate(build_geometry(rocket), build_motor(motor), launch_rod_length)
