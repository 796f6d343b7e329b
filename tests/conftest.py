"""
Pytest fixtures for flight tool tests.
"""
import pytest

import yaml


BASE_PRESSURE_RAW = 405300  # 1013.25 hPa at 4 counts per Pa
CALIBRATION_ACCEL_RAW = 256  # 1 g at rest on the pad


def pressure_raw_at(altitude_m):
    """Raw pressure counts the flight computer would log at an altitude"""
    return int(round(BASE_PRESSURE_RAW * (1.0 - altitude_m / 44330.0) ** (1.0 / 0.1903)))


def build_csv(rows, header="time,pressure,unused,ax,ay,az"):
    """Join (time_ms, pressure_raw, unused, ax, ay, az) tuples into flight computer CSV"""
    lines = [header]
    lines.extend(",".join(str(v) for v in row) for row in rows)
    return "\n".join(lines) + "\n"


@pytest.fixture
def rocket_record():
    """Rocket record as typed into the form (cm, g)."""
    from airframe import RocketRecord

    return RocketRecord(
        rocket_name="Test Rocket",
        dry_mass_g="200",
        length_cm="60",
        diameter_cm="5",
        nose_cone_type="ogive",
        nose_cone_length_cm="15",
        cog_cm="35",
        num_fins="3",
        fin_root_chord_cm="8",
        fin_tip_chord_cm="4",
        fin_semi_span_cm="6",
        fin_sweep_dist_cm="2",
        nose_to_fin_dist_cm="40",
    )


@pytest.fixture
def motor_record():
    """Motor record as typed into the form (g, N, s)."""
    from airframe import MotorRecord

    return MotorRecord(
        motor_name="Test F20",
        motor_initial_mass_g="60",
        motor_propellant_mass_g="30",
        motor_avg_thrust_n="20",
        motor_peak_thrust_n="25",
        motor_peak_time_s="0.2",
        motor_burn_time_s="1.2",
    )


@pytest.fixture
def geometry(rocket_record):
    from airframe import build_geometry

    return build_geometry(rocket_record)


@pytest.fixture
def motor(motor_record):
    from airframe import build_motor

    return build_motor(motor_record)


@pytest.fixture
def rocket_yaml(tmp_path, rocket_record):
    path = tmp_path / "rocket.yaml"
    data = {k: v for k, v in rocket_record.to_dict().items() if k != "id"}
    path.write_text(yaml.safe_dump(data, sort_keys=False))
    return path


@pytest.fixture
def motor_yaml(tmp_path, motor_record):
    path = tmp_path / "motor.yaml"
    data = {k: v for k, v in motor_record.to_dict().items() if k != "id"}
    path.write_text(yaml.safe_dump(data, sort_keys=False))
    return path


@pytest.fixture
def flight_csv():
    """
    Synthetic 3 s flight sampled every 100 ms.

    6 g on the vertical axis until 1000 ms, free fall afterwards. The
    barometric altitude follows a parabola peaking at 100 m at 2500 ms.
    """
    rows = []
    for t in range(0, 3001, 100):
        altitude = 100.0 - 100.0 * ((t - 2500) / 2500.0) ** 2
        accel_z = CALIBRATION_ACCEL_RAW * 6 if 0 < t <= 1000 else 0
        if t == 0:
            accel_z = CALIBRATION_ACCEL_RAW
        rows.append((t, pressure_raw_at(altitude), 0, 3, -2, accel_z))
    return build_csv(rows)


@pytest.fixture
def flat_csv():
    """Rocket sitting on the pad: constant pressure and 1 g throughout."""
    rows = [(t, BASE_PRESSURE_RAW, 0, 0, 0, CALIBRATION_ACCEL_RAW) for t in range(0, 1001, 100)]
    return build_csv(rows)


@pytest.fixture
def flight_csv_file(tmp_path, flight_csv):
    path = tmp_path / "flight.csv"
    path.write_text(flight_csv)
    return path
