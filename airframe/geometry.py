"""
Rocket geometry normalized to SI units.

Converts a user-entered ``RocketRecord`` (centimeters, grams) into an
immutable ``RocketGeometry`` and derives the static aerodynamic quantities
needed by the performance estimator: fin mid-chord length and the
Barrowman center of pressure.

All dimensions are in SI units (meters, kilograms) and measured from the
nose tip.
"""
from dataclasses import dataclass
from enum import Enum
import logging
import math

import numpy as np

from .records import RocketRecord, FieldValue, is_blank

logger = logging.getLogger(__name__)

CM_PER_M = 100.0
G_PER_KG = 1000.0

# Barrowman nose cone terms
CN_NOSE = 2.0


class InvalidGeometry(ValueError):
    """Raised when a rocket or motor record cannot produce a valid model"""

    def __init__(self, message: str, field_name: str = None):
        super().__init__(message)
        self.field_name = field_name


class NoseConeType(Enum):
    """Nose cone shapes supported by the center of pressure estimate"""
    OGIVE = "ogive"
    CONE = "cone"

    @property
    def cp_factor(self) -> float:
        """Nose center of pressure as a fraction of nose length"""
        return 0.666 if self is NoseConeType.CONE else 0.466

    @classmethod
    def parse(cls, value: FieldValue) -> "NoseConeType":
        if is_blank(value):
            return cls.OGIVE
        aliases = {
            "ogive": cls.OGIVE,
            "cone": cls.CONE,
            "conical": cls.CONE,
        }
        key = str(value).strip().lower()
        if key not in aliases:
            raise InvalidGeometry(
                f"nose_cone_type must be 'ogive' or 'cone', got {value!r}",
                "nose_cone_type",
            )
        return aliases[key]


def parse_number(value: FieldValue, field_name: str, error_cls=InvalidGeometry) -> float:
    """Parse a required decimal form value, rejecting blanks and non-finite input"""
    if is_blank(value):
        raise error_cls(f"{field_name} is required", field_name)
    if isinstance(value, bool):
        raise error_cls(f"{field_name} must be a number, got {value!r}", field_name)
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        raise error_cls(f"{field_name} must be a number, got {value!r}", field_name)
    if not math.isfinite(number):
        raise error_cls(f"{field_name} must be finite, got {value!r}", field_name)
    return number


def parse_count(value: FieldValue, field_name: str) -> int:
    """Parse a required non-negative integer form value"""
    number = parse_number(value, field_name)
    if number < 0 or number != int(number):
        raise InvalidGeometry(
            f"{field_name} must be a non-negative integer, got {value!r}", field_name
        )
    return int(number)


@dataclass(frozen=True)
class RocketGeometry:
    """
    Static rocket geometry in SI units.

    Attributes:
        dry_mass: Mass without motor (kg)
        diameter: Body tube outer diameter (m)
        nose_cone_type: Nose shape, selects the nose CP factor
        nose_cone_length: Nose cone length (m)
        center_of_gravity: CG distance from nose tip, unloaded (m)
        num_fins: Number of fins in the set
        fin_root_chord: Fin root chord (m)
        fin_tip_chord: Fin tip chord (m)
        fin_semi_span: Fin span from body surface to tip (m)
        fin_sweep_distance: Leading edge sweep, root LE to tip LE (m)
        nose_to_fin_distance: Nose tip to fin root leading edge (m)
    """

    dry_mass: float
    diameter: float
    nose_cone_type: NoseConeType
    nose_cone_length: float
    center_of_gravity: float
    num_fins: int
    fin_root_chord: float
    fin_tip_chord: float
    fin_semi_span: float
    fin_sweep_distance: float
    nose_to_fin_distance: float
    name: str = ""

    def __post_init__(self):
        if self.diameter <= 0:
            raise InvalidGeometry("diameter must be positive", "diameter_cm")
        if self.fin_root_chord + self.fin_tip_chord <= 0:
            raise InvalidGeometry(
                "fin root chord plus tip chord must be positive", "fin_root_chord_cm"
            )
        if self.fin_semi_span + self.radius <= 0:
            raise InvalidGeometry(
                "fin semi-span plus body radius must be positive", "fin_semi_span_cm"
            )

    @property
    def radius(self) -> float:
        """Body radius (m)"""
        return self.diameter / 2.0

    @property
    def fin_mid_chord_length(self) -> float:
        """
        Length of the line joining the root and tip chord midpoints (m).

        The root midpoint is the origin; the tip midpoint sits one semi-span
        outboard and shifted aft by the sweep.
        """
        dx = self.fin_semi_span
        dy = (self.fin_tip_chord / 2.0 + self.fin_sweep_distance) - self.fin_root_chord / 2.0
        return float(np.hypot(dx, dy))

    @property
    def nose_cp_position(self) -> float:
        return self.nose_cone_type.cp_factor * self.nose_cone_length

    @property
    def fin_normal_force_coefficient(self) -> float:
        """Fin set normal force slope including body interference"""
        cr, ct = self.fin_root_chord, self.fin_tip_chord
        interference = 1.0 + self.radius / (self.fin_semi_span + self.radius)
        span_term = 4.0 * self.num_fins * (self.fin_semi_span / self.diameter) ** 2
        chord_term = 1.0 + np.sqrt(1.0 + (2.0 * self.fin_mid_chord_length / (cr + ct)) ** 2)
        return float(interference * span_term / chord_term)

    @property
    def fin_cp_position(self) -> float:
        """Fin set center of pressure from nose tip (m)"""
        cr, ct = self.fin_root_chord, self.fin_tip_chord
        sweep_term = self.fin_sweep_distance / 3.0 * (cr + 2.0 * ct) / (cr + ct)
        chord_term = (1.0 / 6.0) * (cr + ct - (cr * ct) / (cr + ct))
        return self.nose_to_fin_distance + sweep_term + chord_term

    def calculate_center_of_pressure(self) -> float:
        """Center of pressure distance from nose tip (m), Barrowman nose + fins"""
        cn_fins = self.fin_normal_force_coefficient
        moment = CN_NOSE * self.nose_cp_position + cn_fins * self.fin_cp_position
        return moment / (CN_NOSE + cn_fins)

    def scaled(self, factor: float) -> "RocketGeometry":
        """
        Copy with every linear dimension multiplied by ``factor`` (mass unchanged).

        For similarity studies: stability in calibers does not change with scale.
        """
        return RocketGeometry(
            dry_mass=self.dry_mass,
            diameter=self.diameter * factor,
            nose_cone_type=self.nose_cone_type,
            nose_cone_length=self.nose_cone_length * factor,
            center_of_gravity=self.center_of_gravity * factor,
            num_fins=self.num_fins,
            fin_root_chord=self.fin_root_chord * factor,
            fin_tip_chord=self.fin_tip_chord * factor,
            fin_semi_span=self.fin_semi_span * factor,
            fin_sweep_distance=self.fin_sweep_distance * factor,
            nose_to_fin_distance=self.nose_to_fin_distance * factor,
            name=self.name,
        )

    def summary(self) -> str:
        """Return a human-readable summary of the geometry"""
        lines = [
            f"Rocket: {self.name or 'unnamed'}",
            f"  Diameter: {self.diameter*CM_PER_M:.2f} cm",
            f"  Dry mass: {self.dry_mass*G_PER_KG:.1f} g",
            f"  Nose cone: {self.nose_cone_type.value}, {self.nose_cone_length*CM_PER_M:.2f} cm",
            f"  CG position: {self.center_of_gravity*CM_PER_M:.2f} cm from nose",
            f"  Center of pressure: {self.calculate_center_of_pressure()*CM_PER_M:.2f} cm from nose",
            f"  Fins: {self.num_fins}x, mid chord={self.fin_mid_chord_length*CM_PER_M:.2f} cm",
        ]
        return "\n".join(lines)


def build_geometry(record: RocketRecord) -> RocketGeometry:
    """
    Parse and validate a rocket record into SI geometry.

    Args:
        record: Rocket record with centimeter/gram form values

    Returns:
        RocketGeometry

    Raises:
        InvalidGeometry: If a field is missing, non-numeric, or the
            geometry is degenerate
    """
    def cm(value: FieldValue, field_name: str) -> float:
        return parse_number(value, field_name) / CM_PER_M

    dry_mass = parse_number(record.dry_mass_g, "dry_mass_g") / G_PER_KG
    if dry_mass < 0:
        raise InvalidGeometry("dry_mass_g must not be negative", "dry_mass_g")

    geometry = RocketGeometry(
        dry_mass=dry_mass,
        diameter=cm(record.diameter_cm, "diameter_cm"),
        nose_cone_type=NoseConeType.parse(record.nose_cone_type),
        nose_cone_length=cm(record.nose_cone_length_cm, "nose_cone_length_cm"),
        center_of_gravity=cm(record.cog_cm, "cog_cm"),
        num_fins=parse_count(record.num_fins, "num_fins"),
        fin_root_chord=cm(record.fin_root_chord_cm, "fin_root_chord_cm"),
        fin_tip_chord=cm(record.fin_tip_chord_cm, "fin_tip_chord_cm"),
        fin_semi_span=cm(record.fin_semi_span_cm, "fin_semi_span_cm"),
        fin_sweep_distance=cm(record.fin_sweep_dist_cm, "fin_sweep_dist_cm"),
        nose_to_fin_distance=cm(record.nose_to_fin_dist_cm, "nose_to_fin_dist_cm"),
        name=record.name,
    )
    logger.debug(f"Built geometry for {geometry.name or 'unnamed rocket'}")
    return geometry
