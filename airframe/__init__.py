"""
Rocket Airframe Module

Provides the rocket and motor records entered by the user and the SI models
built from them. The geometry model derives fin mid-chord length and the
Barrowman center of pressure used by the performance estimator.

Example usage:
    from airframe import RocketRecord, build_geometry

    record = RocketRecord(dry_mass_g="200", diameter_cm="5", ...)
    geometry = build_geometry(record)

    print(f"Center of pressure: {geometry.calculate_center_of_pressure() * 100:.2f} cm")
"""

from .records import RocketRecord, MotorRecord
from .geometry import (
    RocketGeometry,
    NoseConeType,
    InvalidGeometry,
    build_geometry,
)
from .motor import MotorSpec, InvalidMotor, build_motor

__all__ = [
    "RocketRecord",
    "MotorRecord",
    "RocketGeometry",
    "NoseConeType",
    "InvalidGeometry",
    "build_geometry",
    "MotorSpec",
    "InvalidMotor",
    "build_motor",
]
