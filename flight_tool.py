#!/usr/bin/env python3
"""
Flight Tool - pre-flight estimates and flight computer data reduction.

Usage:
    # Estimate performance from rocket and motor definitions
    python flight_tool.py estimate rocket.yaml motor.yaml --rod 1.5

    # Reduce flight computer CSV
    python flight_tool.py reduce flight.csv
    python flight_tool.py reduce flight.csv --lenient --series series.csv

    # Keep a flight log
    python flight_tool.py rocket add rocket.yaml
    python flight_tool.py motor add motor.yaml
    python flight_tool.py plan <rocket_id> <motor_id> --rod 1.0
    python flight_tool.py record <flight_id> flight.csv --status Success
    python flight_tool.py list
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from airframe import RocketRecord, MotorRecord, InvalidGeometry, build_geometry
from flight_config import FlightToolConfig, load_config
from flight_log import FlightLog, FlightLogError, YamlFileStore, FlightStatus
from performance import estimate_from_records
from telemetry import MalformedTelemetry, reduce_with_series


def _load_mapping(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a mapping of record fields")
    return data


def _print_estimate(result, config: FlightToolConfig):
    print(result.summary())
    if not result.feasible:
        return
    preflight = config.preflight
    if not result.is_stable(preflight.min_stability_calibers):
        print(f"  WARNING: stability below {preflight.min_stability_calibers:.1f} cal")
    if not result.rod_exit_is_safe(preflight.min_rod_exit_velocity):
        print(f"  WARNING: rod exit velocity below {preflight.min_rod_exit_velocity:.1f} m/s")


# ============================================================================
# Commands
# ============================================================================

def cmd_estimate(args, config: FlightToolConfig):
    rocket = RocketRecord.from_dict(_load_mapping(args.rocket))
    motor = MotorRecord.from_dict(_load_mapping(args.motor))
    rod = args.rod if args.rod is not None else config.preflight.launch_rod_length

    print(build_geometry(rocket).summary())
    print()
    _print_estimate(estimate_from_records(rocket, motor, rod), config)


def cmd_reduce(args, config: FlightToolConfig):
    csv_text = Path(args.csv).read_text()
    strict = config.telemetry.strict and not args.lenient
    actuals, series = reduce_with_series(csv_text, strict=strict)

    print(actuals.summary())
    if args.series:
        series.to_frame().to_csv(args.series, index=False)
        print(f"\nSaved {len(series)} samples to {args.series}")


def cmd_rocket_add(args, log: FlightLog):
    record = log.save_rocket(RocketRecord.from_dict(_load_mapping(args.file)))
    print(f"Saved rocket {record.name} as {record.id}")


def cmd_motor_add(args, log: FlightLog):
    record = log.save_motor(MotorRecord.from_dict(_load_mapping(args.file)))
    print(f"Saved motor {record.name} as {record.id}")


def cmd_plan(args, log: FlightLog, config: FlightToolConfig):
    rod = args.rod if args.rod is not None else config.preflight.launch_rod_length
    flight = log.plan_flight(args.rocket_id, args.motor_id, launch_rod_length=rod)
    print(f"Planned flight {flight.id}: {flight.rocket_name} / {flight.motor_name}")
    _print_estimate(flight.estimate, config)


def cmd_record(args, log: FlightLog, config: FlightToolConfig):
    csv_text = Path(args.csv).read_text()
    strict = config.telemetry.strict and not args.lenient
    flight = log.record_flight(
        args.flight_id, csv_text, status=args.status, notes=args.notes, strict=strict
    )
    print(f"Flight {flight.id} ({flight.status.value})")
    print(flight.actuals.summary())


def cmd_list(args, log: FlightLog):
    rockets = log.rockets()
    motors = log.motors()
    flights = log.flights()

    print(f"Rockets ({len(rockets)}):")
    for rocket in rockets:
        print(f"  {rocket.id}  {rocket.name}")
    print(f"Motors ({len(motors)}):")
    for motor in motors:
        print(f"  {motor.id}  {motor.name}")
    print(f"Flights ({len(flights)}):")
    for flight in flights:
        print(
            f"  {flight.id}  {flight.rocket_name} / {flight.motor_name}  "
            f"{flight.flight_date}  {flight.status.value}"
        )


# ============================================================================
# Main
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Model rocket flight tool - pre-flight estimates and telemetry reduction",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python flight_tool.py estimate rocket.yaml motor.yaml
    python flight_tool.py reduce flight.csv --series series.csv
    python flight_tool.py plan <rocket_id> <motor_id> --rod 1.5
        """
    )
    parser.add_argument("--config", "-c", help="Configuration YAML file")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    est_parser = subparsers.add_parser("estimate", help="Pre-flight performance estimate")
    est_parser.add_argument("rocket", help="Rocket record YAML file")
    est_parser.add_argument("motor", help="Motor record YAML file")
    est_parser.add_argument("--rod", type=float, help="Launch rod length (m)")

    red_parser = subparsers.add_parser("reduce", help="Reduce flight computer CSV")
    red_parser.add_argument("csv", help="Flight computer CSV file")
    red_parser.add_argument("--lenient", action="store_true", help="Skip malformed rows")
    red_parser.add_argument("--series", help="Write the reconstructed series to this CSV")

    for kind in ("rocket", "motor"):
        kind_parser = subparsers.add_parser(kind, help=f"Manage {kind}s in the flight log")
        kind_sub = kind_parser.add_subparsers(dest="action")
        add_parser = kind_sub.add_parser("add", help=f"Add or replace a {kind} from YAML")
        add_parser.add_argument("file", help=f"{kind.capitalize()} record YAML file")

    plan_parser = subparsers.add_parser("plan", help="Log a pending flight with estimate")
    plan_parser.add_argument("rocket_id")
    plan_parser.add_argument("motor_id")
    plan_parser.add_argument("--rod", type=float, help="Launch rod length (m)")

    rec_parser = subparsers.add_parser("record", help="Attach telemetry to a logged flight")
    rec_parser.add_argument("flight_id")
    rec_parser.add_argument("csv", help="Flight computer CSV file")
    rec_parser.add_argument("--status", choices=[s.value for s in FlightStatus])
    rec_parser.add_argument("--notes")
    rec_parser.add_argument("--lenient", action="store_true", help="Skip malformed rows")

    subparsers.add_parser("list", help="List rockets, motors and flights")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config) if args.config else FlightToolConfig()
    except (OSError, TypeError, yaml.YAMLError) as e:
        print(f"Error: cannot load config: {e}", file=sys.stderr)
        return 1

    issues = config.validate()
    for issue in issues:
        print(issue, file=sys.stderr)
    if any(issue.startswith("CRITICAL") for issue in issues):
        return 1
    config.configure_logging()

    log = FlightLog(YamlFileStore(config.store.path))

    try:
        if args.command == "estimate":
            cmd_estimate(args, config)
        elif args.command == "reduce":
            cmd_reduce(args, config)
        elif args.command == "rocket" and args.action == "add":
            cmd_rocket_add(args, log)
        elif args.command == "motor" and args.action == "add":
            cmd_motor_add(args, log)
        elif args.command == "plan":
            cmd_plan(args, log, config)
        elif args.command == "record":
            cmd_record(args, log, config)
        elif args.command == "list":
            cmd_list(args, log)
        else:
            parser.print_help()
            return 1
    except (
        InvalidGeometry, MalformedTelemetry, FlightLogError, ValueError, OSError, yaml.YAMLError
    ) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
