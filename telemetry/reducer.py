"""
Telemetry reduction: raw sensor counts to flight metrics.

The first data row calibrates the reduction. It is assumed to be logged
with the rocket at rest and vertical on the pad, so its pressure is the
ground reference and its vertical acceleration is gravity alone.

Per row:
    altitude       = 44330 * (1 - (p / p0) ^ 0.1903)     barometric, troposphere
    accel (g)      = raw / 256                            fixed sensor scale
    flight accel   = (accel_z - gravity_g) * 9.81         m/s^2, bias removed
    velocity      += flight accel * dt                    forward Euler

Boost end is the global maximum of velocity and apogee the global maximum
of altitude. A noise spike before burnout can produce an early velocity
maximum; that case is not guarded against.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Sequence, Tuple
import logging

import numpy as np
import pandas as pd

from .decoder import FlightTelemetrySample, decode_samples

logger = logging.getLogger(__name__)

COUNTS_PER_G = 256.0
PRESSURE_COUNTS_PER_PA = 4.0
PA_PER_HPA = 100.0
BARO_ALTITUDE_SCALE = 44330.0  # m
BARO_EXPONENT = 0.1903
ACCEL_G_TO_MS2 = 9.81


def pressure_hpa(pressure_raw) -> np.ndarray:
    """Convert raw pressure counts to hPa"""
    return (np.asarray(pressure_raw, dtype=float) / PRESSURE_COUNTS_PER_PA) / PA_PER_HPA


def barometric_altitude(pressure: np.ndarray, base_pressure: float) -> np.ndarray:
    """Altitude above the reference pressure level (m)"""
    return BARO_ALTITUDE_SCALE * (1.0 - np.power(pressure / base_pressure, BARO_EXPONENT))


@dataclass
class TelemetrySeries:
    """Reconstructed per-row flight history, one entry per decoded sample"""
    time_ms: np.ndarray
    altitude_m: np.ndarray
    accel_x_g: np.ndarray
    accel_y_g: np.ndarray
    accel_z_g: np.ndarray
    flight_accel_ms2: np.ndarray
    velocity_ms: np.ndarray

    @property
    def time_s(self) -> np.ndarray:
        return self.time_ms / 1000.0

    def __len__(self):
        return len(self.time_ms)

    def to_frame(self) -> pd.DataFrame:
        """Series as a DataFrame, e.g. for charting or CSV export"""
        return pd.DataFrame(
            {
                "time_ms": self.time_ms,
                "time_s": self.time_s,
                "altitude_m": self.altitude_m,
                "accel_x_g": self.accel_x_g,
                "accel_y_g": self.accel_y_g,
                "accel_z_g": self.accel_z_g,
                "flight_accel_ms2": self.flight_accel_ms2,
                "velocity_ms": self.velocity_ms,
            }
        )


@dataclass(frozen=True)
class FlightActuals:
    """Flight metrics derived from a full telemetry sequence"""
    max_altitude: float  # m
    max_g_force: float  # g, absolute vertical axis
    max_velocity: float  # m/s
    boost_altitude_gain: float  # m
    coast_altitude_gain: float  # m, negative if apogee precedes boost end
    apogee_time_ms: int
    boost_time_ms: int
    coast_time_ms: int  # negative if apogee precedes boost end

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FlightActuals":
        return cls(**data)

    def summary(self) -> str:
        lines = [
            "Flight actuals:",
            f"  Max altitude: {self.max_altitude:.2f} m at {self.apogee_time_ms} ms",
            f"  Max G-force: {self.max_g_force:.2f} G",
            f"  Top speed: {self.max_velocity:.2f} m/s",
            f"  Boost: {self.boost_altitude_gain:.2f} m in {self.boost_time_ms} ms",
            f"  Coast: {self.coast_altitude_gain:.2f} m in {self.coast_time_ms} ms",
        ]
        return "\n".join(lines)


def reconstruct(samples: Sequence[FlightTelemetrySample]) -> TelemetrySeries:
    """
    Rebuild altitude, acceleration and velocity histories from samples.

    The first sample is the calibration row. Velocity only integrates over
    strictly increasing timestamps; duplicate or out-of-order rows add
    nothing.
    """
    if not samples:
        raise ValueError("reconstruct requires at least one sample")

    raw = np.array(
        [
            (s.time_ms, s.pressure_raw, s.accel_x_raw, s.accel_y_raw, s.accel_z_raw)
            for s in samples
        ],
        dtype=float,
    )
    time_ms = raw[:, 0]
    accel_x_g = raw[:, 2] / COUNTS_PER_G
    accel_y_g = raw[:, 3] / COUNTS_PER_G
    accel_z_g = raw[:, 4] / COUNTS_PER_G

    pressure = pressure_hpa(raw[:, 1])
    altitude = barometric_altitude(pressure, pressure[0])

    gravity_g = accel_z_g[0]
    flight_accel = (accel_z_g - gravity_g) * ACCEL_G_TO_MS2

    velocity = np.zeros(len(samples))
    current = 0.0
    previous_time_s = time_ms[0] / 1000.0
    for i in range(len(samples)):
        time_s = time_ms[i] / 1000.0
        if time_s > previous_time_s:
            current += flight_accel[i] * (time_s - previous_time_s)
            previous_time_s = time_s
        velocity[i] = current

    return TelemetrySeries(
        time_ms=time_ms.astype(np.int64),
        altitude_m=altitude,
        accel_x_g=accel_x_g,
        accel_y_g=accel_y_g,
        accel_z_g=accel_z_g,
        flight_accel_ms2=flight_accel,
        velocity_ms=velocity,
    )


def summarize(series: TelemetrySeries) -> FlightActuals:
    """Detect boost end and apogee and report flight metrics"""
    boost_index = int(np.argmax(series.velocity_ms))
    apogee_index = int(np.argmax(series.altitude_m))

    boost_altitude = float(series.altitude_m[boost_index])
    apogee_altitude = float(series.altitude_m[apogee_index])
    boost_time = int(series.time_ms[boost_index])
    apogee_time = int(series.time_ms[apogee_index])

    if apogee_index < boost_index:
        logger.warning(
            f"Apogee (row {apogee_index}) precedes boost end (row {boost_index}); "
            f"coast metrics will be negative"
        )

    return FlightActuals(
        max_altitude=apogee_altitude,
        max_g_force=float(np.max(np.abs(series.accel_z_g))),
        max_velocity=float(series.velocity_ms[boost_index]),
        boost_altitude_gain=boost_altitude,
        coast_altitude_gain=apogee_altitude - boost_altitude,
        apogee_time_ms=apogee_time,
        boost_time_ms=boost_time,
        coast_time_ms=apogee_time - boost_time,
    )


def reduce_with_series(csv_text: str, strict: bool = True) -> Tuple[FlightActuals, TelemetrySeries]:
    """
    Reduce flight computer CSV, also returning the reconstructed series.

    Raises:
        MalformedTelemetry: See ``decode_samples``
    """
    decoded = decode_samples(csv_text, strict=strict)
    series = reconstruct(decoded.samples)
    actuals = summarize(series)
    logger.info(
        f"Reduced {len(series)} samples: apogee {actuals.max_altitude:.1f} m, "
        f"top speed {actuals.max_velocity:.1f} m/s"
    )
    return actuals, series


def reduce(csv_text: str, strict: bool = True) -> FlightActuals:
    """
    Reduce flight computer CSV to flight metrics.

    Args:
        csv_text: Header line plus data rows
        strict: Raise on malformed rows instead of skipping them

    Returns:
        FlightActuals

    Raises:
        MalformedTelemetry: If the CSV is structurally invalid
    """
    actuals, _ = reduce_with_series(csv_text, strict=strict)
    return actuals
