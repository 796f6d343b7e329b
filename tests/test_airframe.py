"""
Tests for airframe module - rocket and motor records and SI geometry.
"""

import pytest


class TestRecords:
    """Tests for RocketRecord and MotorRecord."""

    def test_missing_fields(self):
        """Blank required fields are reported, optional ones are not."""
        from airframe import RocketRecord

        record = RocketRecord(rocket_name="Alpha", dry_mass_g="  ", nose_cone_type=None)
        missing = record.missing_fields()

        assert "dry_mass_g" in missing
        assert "diameter_cm" in missing
        assert "rocket_name" not in missing
        assert "nose_cone_type" not in missing
        assert "id" not in missing

    def test_motor_peak_fields_optional(self, motor_record):
        from airframe import MotorRecord

        record = MotorRecord(**{**motor_record.to_dict(), "motor_peak_thrust_n": None,
                                "motor_peak_time_s": ""})
        assert record.missing_fields() == []

    def test_from_dict_ignores_unknown_keys(self, rocket_record):
        from airframe import RocketRecord

        data = rocket_record.to_dict()
        data["launch_site"] = "Field 3"

        assert RocketRecord.from_dict(data) == rocket_record

    def test_name(self, rocket_record, motor_record):
        assert rocket_record.name == "Test Rocket"
        assert motor_record.name == "Test F20"


class TestNoseConeType:
    """Tests for NoseConeType parsing."""

    def test_parse(self):
        from airframe import NoseConeType

        assert NoseConeType.parse("ogive") is NoseConeType.OGIVE
        assert NoseConeType.parse(" Cone ") is NoseConeType.CONE
        assert NoseConeType.parse("conical") is NoseConeType.CONE
        assert NoseConeType.parse(None) is NoseConeType.OGIVE
        assert NoseConeType.parse("") is NoseConeType.OGIVE

    def test_unknown_shape(self):
        from airframe import NoseConeType, InvalidGeometry

        with pytest.raises(InvalidGeometry) as exc_info:
            NoseConeType.parse("parabolic")
        assert exc_info.value.field_name == "nose_cone_type"

    def test_cp_factor(self):
        from airframe import NoseConeType

        assert NoseConeType.CONE.cp_factor == 0.666
        assert NoseConeType.OGIVE.cp_factor == 0.466


class TestBuildGeometry:
    """Tests for converting a rocket record to SI geometry."""

    def test_unit_conversion(self, geometry):
        assert geometry.diameter == pytest.approx(0.05)
        assert geometry.radius == pytest.approx(0.025)
        assert geometry.dry_mass == pytest.approx(0.2)
        assert geometry.center_of_gravity == pytest.approx(0.35)
        assert geometry.nose_to_fin_distance == pytest.approx(0.40)
        assert geometry.num_fins == 3
        assert geometry.name == "Test Rocket"

    def test_numeric_values_accepted(self, rocket_record):
        """Numbers loaded from YAML work as well as form strings."""
        from airframe import RocketRecord, build_geometry

        data = rocket_record.to_dict()
        data.update(diameter_cm=5, dry_mass_g=200.0, num_fins=3)
        geometry = build_geometry(RocketRecord.from_dict(data))

        assert geometry.diameter == pytest.approx(0.05)

    @pytest.mark.parametrize("value", [None, "", "abc", "nan", "inf"])
    def test_bad_diameter(self, rocket_record, value):
        from airframe import RocketRecord, InvalidGeometry, build_geometry

        record = RocketRecord(**{**rocket_record.to_dict(), "diameter_cm": value})
        with pytest.raises(InvalidGeometry) as exc_info:
            build_geometry(record)
        assert exc_info.value.field_name == "diameter_cm"

    def test_zero_diameter(self, rocket_record):
        from airframe import RocketRecord, InvalidGeometry, build_geometry

        record = RocketRecord(**{**rocket_record.to_dict(), "diameter_cm": "0"})
        with pytest.raises(InvalidGeometry):
            build_geometry(record)

    def test_zero_chords(self, rocket_record):
        from airframe import RocketRecord, InvalidGeometry, build_geometry

        record = RocketRecord(
            **{**rocket_record.to_dict(), "fin_root_chord_cm": "0", "fin_tip_chord_cm": "0"}
        )
        with pytest.raises(InvalidGeometry):
            build_geometry(record)

    @pytest.mark.parametrize("semi_span", ["-2.5", "-4"])
    def test_semi_span_inside_body(self, rocket_record, semi_span):
        """Semi-span plus body radius must stay positive."""
        from airframe import RocketRecord, InvalidGeometry, build_geometry

        record = RocketRecord(**{**rocket_record.to_dict(), "fin_semi_span_cm": semi_span})
        with pytest.raises(InvalidGeometry) as exc_info:
            build_geometry(record)
        assert exc_info.value.field_name == "fin_semi_span_cm"

    def test_fractional_fin_count(self, rocket_record):
        from airframe import RocketRecord, InvalidGeometry, build_geometry

        record = RocketRecord(**{**rocket_record.to_dict(), "num_fins": "3.5"})
        with pytest.raises(InvalidGeometry) as exc_info:
            build_geometry(record)
        assert exc_info.value.field_name == "num_fins"

    def test_negative_mass(self, rocket_record):
        from airframe import RocketRecord, InvalidGeometry, build_geometry

        record = RocketRecord(**{**rocket_record.to_dict(), "dry_mass_g": "-1"})
        with pytest.raises(InvalidGeometry):
            build_geometry(record)

    def test_summary(self, geometry):
        summary = geometry.summary()
        assert "Test Rocket" in summary
        assert "5.00 cm" in summary


class TestCenterOfPressure:
    """Tests for fin geometry and the Barrowman center of pressure."""

    def test_symmetric_fin_mid_chord(self, geometry):
        """Equal root and tip chords with no sweep give mid chord = semi-span."""
        from dataclasses import replace

        for chord, span in [(0.05, 0.03), (0.08, 0.06), (0.1, 0.125)]:
            fin = replace(
                geometry,
                fin_root_chord=chord,
                fin_tip_chord=chord,
                fin_sweep_distance=0.0,
                fin_semi_span=span,
            )
            assert fin.fin_mid_chord_length == span

    def test_swept_mid_chord(self, geometry):
        from dataclasses import replace

        fin = replace(geometry, fin_sweep_distance=0.05)
        # tip midpoint 0.07 aft, root midpoint 0.04 aft
        assert fin.fin_mid_chord_length == pytest.approx((0.06**2 + 0.03**2) ** 0.5)

    def test_fin_coefficients(self, geometry):
        assert geometry.fin_normal_force_coefficient == pytest.approx(9.263, rel=1e-3)
        assert geometry.fin_cp_position == pytest.approx(0.42444, rel=1e-4)

    def test_center_of_pressure(self, geometry):
        cp = geometry.calculate_center_of_pressure()

        assert cp == pytest.approx(0.3615, abs=1e-3)
        # Between the nose CP and the fin CP
        assert geometry.nose_cp_position < cp < geometry.fin_cp_position
        assert cp > geometry.center_of_gravity

    def test_cone_moves_cp_aft(self, geometry):
        from dataclasses import replace
        from airframe import NoseConeType

        cone = replace(geometry, nose_cone_type=NoseConeType.CONE)

        assert cone.nose_cp_position == pytest.approx(0.666 * 0.15)
        assert cone.calculate_center_of_pressure() > geometry.calculate_center_of_pressure()

    def test_no_fins(self, geometry):
        from dataclasses import replace

        bare = replace(geometry, num_fins=0)

        assert bare.fin_normal_force_coefficient == 0.0
        assert bare.calculate_center_of_pressure() == pytest.approx(bare.nose_cp_position)

    def test_scaled(self, geometry):
        big = geometry.scaled(2.0)

        assert big.diameter == pytest.approx(0.10)
        assert big.dry_mass == geometry.dry_mass
        assert big.calculate_center_of_pressure() == pytest.approx(
            2.0 * geometry.calculate_center_of_pressure()
        )


class TestBuildMotor:
    """Tests for converting a motor record to SI."""

    def test_unit_conversion(self, motor):
        assert motor.initial_mass == pytest.approx(0.06)
        assert motor.propellant_mass == pytest.approx(0.03)
        assert motor.avg_thrust == 20.0
        assert motor.peak_thrust == 25.0
        assert motor.peak_thrust_time == 0.2
        assert motor.burn_time == 1.2
        assert motor.impulse == pytest.approx(24.0)
        assert motor.burnout_mass == pytest.approx(0.03)

    def test_peak_defaults(self, motor_record):
        from airframe import MotorRecord, build_motor

        record = MotorRecord(
            **{**motor_record.to_dict(), "motor_peak_thrust_n": "", "motor_peak_time_s": None}
        )
        motor = build_motor(record)

        assert motor.peak_thrust == motor.avg_thrust
        assert motor.peak_thrust_time == 0.1

    def test_missing_thrust(self, motor_record):
        from airframe import MotorRecord, InvalidMotor, InvalidGeometry, build_motor

        record = MotorRecord(**{**motor_record.to_dict(), "motor_avg_thrust_n": None})
        with pytest.raises(InvalidMotor) as exc_info:
            build_motor(record)

        assert isinstance(exc_info.value, InvalidGeometry)
        assert exc_info.value.field_name == "motor_avg_thrust_n"

    def test_negative_burn_time(self, motor_record):
        from airframe import MotorRecord, InvalidMotor, build_motor

        record = MotorRecord(**{**motor_record.to_dict(), "motor_burn_time_s": "-0.5"})
        with pytest.raises(InvalidMotor):
            build_motor(record)
