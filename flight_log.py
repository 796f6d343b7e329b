"""
Flight Log - rocket, motor and flight records over a key-value store.

The store is passed in explicitly; there is no module-level state. Three
collections are kept, each a list of plain mappings:

    rockets   RocketRecord.to_dict()
    motors    MotorRecord.to_dict()
    flights   FlightRecord.to_dict(), newest first

Usage:
    from flight_log import FlightLog, YamlFileStore

    log = FlightLog(YamlFileStore("flight_log.yaml"))
    rocket = log.save_rocket(RocketRecord(...))
    motor = log.save_motor(MotorRecord(...))
    flight = log.plan_flight(rocket.id, motor.id, launch_rod_length=1.0)
    log.record_flight(flight.id, csv_text, status="Success")
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol
import logging
import uuid

import yaml

from airframe import RocketRecord, MotorRecord, InvalidGeometry, InvalidMotor
from performance import EstimateResult, estimate_from_dict, estimate_from_records
from telemetry import FlightActuals, reduce

logger = logging.getLogger(__name__)

ROCKETS = "rockets"
MOTORS = "motors"
FLIGHTS = "flights"
COLLECTIONS = (ROCKETS, MOTORS, FLIGHTS)


class FlightLogError(Exception):
    """Raised for operations the flight log does not allow"""


class RecordNotFound(FlightLogError, KeyError):
    """Raised when a rocket, motor or flight id is unknown"""

    def __str__(self):
        return str(self.args[0]) if self.args else "record not found"


class FlightStatus(str, Enum):
    PENDING = "Pending"
    SUCCESS = "Success"
    FAILURE = "Failure"


class KeyValueStore(Protocol):
    """Persistence collaborator: one list of mappings per collection name"""

    def get(self, key: str) -> List[Dict[str, Any]]:
        ...

    def set(self, key: str, value: List[Dict[str, Any]]) -> None:
        ...


class MemoryStore:
    """In-process store, mainly for tests and one-shot scripts"""

    def __init__(self, data: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self._data = {key: list(value) for key, value in (data or {}).items()}

    def get(self, key: str) -> List[Dict[str, Any]]:
        return [dict(item) for item in self._data.get(key, [])]

    def set(self, key: str, value: List[Dict[str, Any]]) -> None:
        self._data[key] = [dict(item) for item in value]


class YamlFileStore:
    """All collections in a single YAML document, rewritten on every set"""

    def __init__(self, path: str):
        self.path = Path(path)

    def _load(self) -> Dict[str, List[Dict[str, Any]]]:
        if not self.path.exists():
            return {}
        with open(self.path, "r") as f:
            data = yaml.safe_load(f)
        return data or {}

    def get(self, key: str) -> List[Dict[str, Any]]:
        return list(self._load().get(key) or [])

    def set(self, key: str, value: List[Dict[str, Any]]) -> None:
        data = self._load()
        data[key] = list(value)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        logger.debug(f"Wrote {len(value)} {key} to {self.path}")


@dataclass
class FlightRecord:
    """A planned or flown flight"""

    id: str
    rocket_id: str
    motor_id: str
    rocket_name: str = ""
    motor_name: str = ""
    launch_rod_length: float = 1.0
    flight_date: str = ""
    status: FlightStatus = FlightStatus.PENDING
    estimate: Optional[EstimateResult] = None
    actuals: Optional[FlightActuals] = None
    notes: str = ""
    raw_data: str = ""
    weather: Optional[Dict[str, Any]] = None  # caller-supplied, stored as-is

    @property
    def is_pending(self) -> bool:
        return self.status == FlightStatus.PENDING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "flight_date": self.flight_date,
            "rocket_id": self.rocket_id,
            "motor_id": self.motor_id,
            "rocket_name": self.rocket_name,
            "motor_name": self.motor_name,
            "launch_rod_length": self.launch_rod_length,
            "status": self.status.value,
            "estimate": self.estimate.to_dict() if self.estimate is not None else None,
            "actuals": self.actuals.to_dict() if self.actuals is not None else None,
            "notes": self.notes,
            "raw_data": self.raw_data,
            "weather": self.weather,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FlightRecord":
        actuals = data.get("actuals")
        return cls(
            id=data["id"],
            rocket_id=data.get("rocket_id", ""),
            motor_id=data.get("motor_id", ""),
            rocket_name=data.get("rocket_name", ""),
            motor_name=data.get("motor_name", ""),
            launch_rod_length=float(data.get("launch_rod_length") or 1.0),
            flight_date=data.get("flight_date", ""),
            status=FlightStatus(data.get("status", FlightStatus.PENDING.value)),
            estimate=estimate_from_dict(data.get("estimate")),
            actuals=FlightActuals.from_dict(actuals) if actuals else None,
            notes=data.get("notes") or "",
            raw_data=data.get("raw_data") or "",
            weather=data.get("weather"),
        )


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class FlightLog:
    """
    Repository for rockets, motors and flights.

    Every operation reads the collection it needs from the store and writes
    it back, so several FlightLog instances over the same store agree.
    """

    store: KeyValueStore
    _id_factory: Any = field(default=_new_id, repr=False)
    _clock: Any = field(default=_now, repr=False)

    # === Rockets and motors ===

    def rockets(self) -> List[RocketRecord]:
        return [RocketRecord.from_dict(d) for d in self.store.get(ROCKETS)]

    def motors(self) -> List[MotorRecord]:
        return [MotorRecord.from_dict(d) for d in self.store.get(MOTORS)]

    def get_rocket(self, rocket_id: str) -> RocketRecord:
        return RocketRecord.from_dict(self._find(ROCKETS, rocket_id, "Rocket"))

    def get_motor(self, motor_id: str) -> MotorRecord:
        return MotorRecord.from_dict(self._find(MOTORS, motor_id, "Motor"))

    def save_rocket(self, record: RocketRecord) -> RocketRecord:
        """Insert or replace a rocket; every required field must be filled"""
        return self._save_item(ROCKETS, record, InvalidGeometry)

    def save_motor(self, record: MotorRecord) -> MotorRecord:
        """Insert or replace a motor; every required field must be filled"""
        return self._save_item(MOTORS, record, InvalidMotor)

    def delete_rocket(self, rocket_id: str) -> None:
        self._delete(ROCKETS, rocket_id, "Rocket")

    def delete_motor(self, motor_id: str) -> None:
        self._delete(MOTORS, motor_id, "Motor")

    # === Flights ===

    def flights(self) -> List[FlightRecord]:
        return [FlightRecord.from_dict(d) for d in self.store.get(FLIGHTS)]

    def get_flight(self, flight_id: str) -> FlightRecord:
        return FlightRecord.from_dict(self._find(FLIGHTS, flight_id, "Flight"))

    def plan_flight(
        self,
        rocket_id: str,
        motor_id: str,
        launch_rod_length: float = 1.0,
        weather: Optional[Dict[str, Any]] = None,
    ) -> FlightRecord:
        """
        Estimate performance and log a new pending flight.

        Raises:
            RecordNotFound: If the rocket or motor id is unknown
            InvalidGeometry: If the stored rocket or motor cannot be modelled
        """
        rocket = self.get_rocket(rocket_id)
        motor = self.get_motor(motor_id)
        flight = FlightRecord(
            id=self._id_factory(),
            rocket_id=rocket_id,
            motor_id=motor_id,
            rocket_name=rocket.name,
            motor_name=motor.name,
            launch_rod_length=launch_rod_length,
            flight_date=self._clock(),
            estimate=estimate_from_records(rocket, motor, launch_rod_length),
            weather=weather,
        )

        flights = self.store.get(FLIGHTS)
        flights.insert(0, flight.to_dict())
        self.store.set(FLIGHTS, flights)
        logger.info(f"Planned flight {flight.id}: {flight.rocket_name} / {flight.motor_name}")
        return flight

    def update_plan(
        self,
        flight_id: str,
        rocket_id: str,
        motor_id: str,
        launch_rod_length: float = 1.0,
    ) -> FlightRecord:
        """Change the rocket, motor or rod of a pending flight and re-estimate"""
        flight = self.get_flight(flight_id)
        if not flight.is_pending:
            raise FlightLogError(
                f"Flight {flight_id} is {flight.status.value}; only pending flights can be edited"
            )

        rocket = self.get_rocket(rocket_id)
        motor = self.get_motor(motor_id)
        flight.rocket_id = rocket_id
        flight.motor_id = motor_id
        flight.rocket_name = rocket.name
        flight.motor_name = motor.name
        flight.launch_rod_length = launch_rod_length
        flight.estimate = estimate_from_records(rocket, motor, launch_rod_length)
        self._replace_flight(flight)
        return flight

    def record_flight(
        self,
        flight_id: str,
        csv_text: str,
        status: Optional[str] = None,
        notes: Optional[str] = None,
        strict: bool = True,
    ) -> FlightRecord:
        """
        Reduce flight computer telemetry and attach the actuals.

        Status and notes are only taken while the flight is still pending;
        use ``save_report`` to change them afterwards.

        Raises:
            MalformedTelemetry: If the CSV cannot be reduced
        """
        flight = self.get_flight(flight_id)
        flight.actuals = reduce(csv_text, strict=strict)
        flight.raw_data = csv_text
        if flight.is_pending:
            if status is not None:
                flight.status = FlightStatus(status)
            if notes is not None:
                flight.notes = notes
        self._replace_flight(flight)
        logger.info(f"Recorded telemetry for flight {flight_id}")
        return flight

    def save_report(self, flight_id: str, status: str, notes: str = "") -> FlightRecord:
        """Set the outcome and notes of a flight"""
        flight = self.get_flight(flight_id)
        flight.status = FlightStatus(status)
        flight.notes = notes
        self._replace_flight(flight)
        return flight

    def delete_flight(self, flight_id: str) -> None:
        self._delete(FLIGHTS, flight_id, "Flight")

    # === Helpers ===

    def _find(self, collection: str, item_id: str, label: str) -> Dict[str, Any]:
        for item in self.store.get(collection):
            if item.get("id") == item_id:
                return item
        raise RecordNotFound(f"{label} {item_id!r} not found")

    def _save_item(self, collection: str, record, error_cls):
        missing = record.missing_fields()
        if missing:
            raise error_cls(
                f"Please fill out: {', '.join(missing)}", missing[0]
            )
        if not record.id:
            record.id = self._id_factory()

        items = self.store.get(collection)
        for index, item in enumerate(items):
            if item.get("id") == record.id:
                items[index] = record.to_dict()
                break
        else:
            items.append(record.to_dict())
        self.store.set(collection, items)
        logger.info(f"Saved {collection[:-1]} {record.name} ({record.id})")
        return record

    def _delete(self, collection: str, item_id: str, label: str) -> None:
        items = self.store.get(collection)
        remaining = [item for item in items if item.get("id") != item_id]
        if len(remaining) == len(items):
            raise RecordNotFound(f"{label} {item_id!r} not found")
        self.store.set(collection, remaining)
        logger.info(f"Deleted {label.lower()} {item_id}")

    def _replace_flight(self, flight: FlightRecord) -> None:
        flights = self.store.get(FLIGHTS)
        for index, item in enumerate(flights):
            if item.get("id") == flight.id:
                flights[index] = flight.to_dict()
                break
        else:
            raise RecordNotFound(f"Flight {flight.id!r} not found")
        self.store.set(FLIGHTS, flights)
