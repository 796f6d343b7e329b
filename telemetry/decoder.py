"""
Flight computer CSV decoder.

The flight computer logs one header line followed by rows of six
comma-separated integer sensor counts:

    time_ms, pressure_raw, (unused), accel_x_raw, accel_y_raw, accel_z_raw

Quoting and escaping are not supported. Each row becomes a
``FlightTelemetrySample``; rows that cannot be decoded are reported
individually as ``RowIssue`` values.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

NUM_FIELDS = 6


@dataclass(frozen=True)
class RowIssue:
    """A data row that could not be decoded"""
    line_number: int  # 1-based line in the source text, blank lines included
    reason: str

    def __str__(self):
        return f"line {self.line_number}: {self.reason}"


class MalformedTelemetry(ValueError):
    """Raised when flight computer CSV is structurally unusable"""

    def __init__(self, message: str, issues: List[RowIssue] = None):
        self.issues = list(issues or [])
        if self.issues:
            details = "; ".join(str(issue) for issue in self.issues[:5])
            if len(self.issues) > 5:
                details += f"; and {len(self.issues) - 5} more"
            message = f"{message} ({details})"
        super().__init__(message)


@dataclass(frozen=True)
class FlightTelemetrySample:
    """One decoded row of raw sensor counts"""
    time_ms: int
    pressure_raw: int
    unused: int
    accel_x_raw: int
    accel_y_raw: int
    accel_z_raw: int
    line_number: int = 0


@dataclass
class DecodedTelemetry:
    """Decoder output: valid samples in file order plus the rows that were skipped"""
    header: str
    samples: List[FlightTelemetrySample] = field(default_factory=list)
    issues: List[RowIssue] = field(default_factory=list)

    @property
    def calibration(self) -> FlightTelemetrySample:
        """First data row, taken with the rocket at rest on the pad"""
        return self.samples[0]


def _parse_count(text: str) -> int:
    """Parse a sensor count; integral decimals such as '12.0' are accepted"""
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        value = float(text)
        if not value.is_integer():
            raise ValueError(f"expected an integer count, got {text!r}")
        return int(value)


def decode_row(line: str, line_number: int) -> Tuple[Optional[FlightTelemetrySample], Optional[RowIssue]]:
    """
    Decode a single data row.

    Returns:
        (sample, None) on success or (None, issue) when the row is malformed
    """
    values = line.split(",")
    if len(values) < NUM_FIELDS:
        return None, RowIssue(
            line_number, f"expected {NUM_FIELDS} fields, found {len(values)}"
        )

    counts = []
    for index, text in enumerate(values[:NUM_FIELDS]):
        try:
            counts.append(_parse_count(text))
        except ValueError:
            return None, RowIssue(
                line_number, f"field {index + 1} is not a number: {text.strip()!r}"
            )

    sample = FlightTelemetrySample(*counts, line_number=line_number)
    if sample.pressure_raw <= 0:
        return None, RowIssue(line_number, f"pressure must be positive, got {sample.pressure_raw}")
    return sample, None


def decode_samples(csv_text: str, strict: bool = True) -> DecodedTelemetry:
    """
    Decode flight computer CSV text.

    Args:
        csv_text: Header line plus data rows; blank lines are ignored
        strict: Raise on any malformed row instead of skipping it

    Returns:
        DecodedTelemetry with at least one sample

    Raises:
        MalformedTelemetry: If there are no data rows, the calibration row
            is unusable, or (when strict) any row is malformed
    """
    lines = [
        (line_number, line.strip())
        for line_number, line in enumerate((csv_text or "").splitlines(), start=1)
        if line.strip()
    ]
    if len(lines) < 2:
        raise MalformedTelemetry("No data rows found; expected a header and at least one row")

    decoded = DecodedTelemetry(header=lines[0][1])
    for index, (line_number, line) in enumerate(lines[1:]):
        sample, issue = decode_row(line, line_number)
        if issue is None:
            decoded.samples.append(sample)
        elif index == 0:
            raise MalformedTelemetry("Calibration row is malformed", [issue])
        else:
            decoded.issues.append(issue)

    if decoded.issues:
        if strict:
            raise MalformedTelemetry(
                f"{len(decoded.issues)} malformed row(s)", decoded.issues
            )
        for issue in decoded.issues:
            logger.warning(f"Skipping telemetry {issue}")

    logger.debug(f"Decoded {len(decoded.samples)} telemetry samples")
    return decoded
