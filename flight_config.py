#!/usr/bin/env python3
"""
Flight Tool Configuration System

Groups the settings of the flight tool: where records are stored, the
pre-flight defaults and display thresholds, telemetry strictness and
logging. The aerodynamic constants of the estimator are fixed and are not
configurable.

Usage:
    from flight_config import FlightToolConfig, load_config

    # Load from YAML file
    config = load_config("flight_tool.yaml")

    # Or use the defaults
    config = FlightToolConfig()
"""

import logging
import yaml
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List
from pathlib import Path

from performance import MIN_STABLE_CALIBERS, SAFE_ROD_EXIT_VELOCITY


@dataclass
class StoreConfig:
    """Record storage settings"""

    path: str = "flight_log.yaml"  # YAML document holding all collections


@dataclass
class PreFlightConfig:
    """Pre-flight estimate defaults and display thresholds"""

    launch_rod_length: float = 1.0  # m
    min_stability_calibers: float = MIN_STABLE_CALIBERS
    min_rod_exit_velocity: float = SAFE_ROD_EXIT_VELOCITY  # m/s


@dataclass
class TelemetryConfig:
    """Telemetry reduction settings"""

    strict: bool = True  # Reject the whole CSV if any row is malformed


@dataclass
class LoggingConfig:
    """Logging settings for the command line tool"""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class FlightToolConfig:
    """Complete flight tool configuration"""

    store: StoreConfig = field(default_factory=StoreConfig)
    preflight: PreFlightConfig = field(default_factory=PreFlightConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return asdict(self)

    def save(self, path: str):
        """Save configuration to YAML file"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def load(cls, path: str) -> "FlightToolConfig":
        """Load configuration from YAML file; missing sections use defaults"""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        return cls(
            store=StoreConfig(**(data.get("store") or {})),
            preflight=PreFlightConfig(**(data.get("preflight") or {})),
            telemetry=TelemetryConfig(**(data.get("telemetry") or {})),
            logging=LoggingConfig(**(data.get("logging") or {})),
        )

    def validate(self) -> List[str]:
        """Validate configuration and return list of warnings/errors"""
        issues = []

        if self.preflight.launch_rod_length <= 0:
            issues.append(
                f"CRITICAL: preflight.launch_rod_length={self.preflight.launch_rod_length} "
                f"must be positive"
            )
        elif self.preflight.launch_rod_length < 0.5:
            issues.append(
                f"WARNING: launch_rod_length={self.preflight.launch_rod_length} m is very short"
            )

        if self.preflight.min_stability_calibers < 1.0:
            issues.append(
                f"WARNING: min_stability_calibers={self.preflight.min_stability_calibers} "
                f"is below the conventional 1.0 caliber"
            )

        if not isinstance(logging.getLevelName(self.logging.level.upper()), int):
            issues.append(f"CRITICAL: unknown logging.level {self.logging.level!r}")

        if not self.store.path:
            issues.append("CRITICAL: store.path is REQUIRED")

        return issues

    def configure_logging(self):
        """Install a root handler at the configured level"""
        logging.basicConfig(
            level=self.logging.level.upper(),
            format=self.logging.format,
        )


def load_config(path: str) -> FlightToolConfig:
    """Convenience function to load configuration"""
    return FlightToolConfig.load(path)


if __name__ == "__main__":
    config = FlightToolConfig()
    config.save("flight_tool.yaml")
    print("Created flight_tool.yaml")

    issues = config.validate()
    print("\nConfiguration validation:")
    if issues:
        for issue in issues:
            print(f"  {issue}")
    else:
        print("  All checks passed")
