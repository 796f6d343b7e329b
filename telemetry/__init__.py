"""
Flight Computer Telemetry Module

Decodes raw flight computer CSV (barometric pressure and tri-axis
acceleration counts) and reduces it to actual flight metrics.

Example usage:
    from telemetry import reduce

    actuals = reduce(open("flight.csv").read())
    print(f"Apogee: {actuals.max_altitude:.1f} m at {actuals.apogee_time_ms} ms")
"""

from .decoder import (
    FlightTelemetrySample,
    DecodedTelemetry,
    RowIssue,
    MalformedTelemetry,
    decode_samples,
)
from .reducer import (
    FlightActuals,
    TelemetrySeries,
    reconstruct,
    summarize,
    reduce,
    reduce_with_series,
)

__all__ = [
    "FlightTelemetrySample",
    "DecodedTelemetry",
    "RowIssue",
    "MalformedTelemetry",
    "decode_samples",
    "FlightActuals",
    "TelemetrySeries",
    "reconstruct",
    "summarize",
    "reduce",
    "reduce_with_series",
]
