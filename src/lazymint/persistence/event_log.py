"""Append-only event log — the registry's record of emitted events.

Every successful mutating operation emits one or more events (Redeem,
Transfer, Withdraw, role and pause changes). They are appended here in
emission order, inside the same registry operation that produced them.
Rejected operations emit nothing.

Records are immutable once written. Each carries a SHA-256 hash over
its canonical JSON so a persisted log can be integrity-checked on load.
"""

from __future__ import annotations

import enum
import hashlib
import json
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional


class EventKind(str, enum.Enum):
    """Registry event names."""
    TRANSFER = "Transfer"
    REDEEM = "Redeem"
    WITHDRAW = "Withdraw"
    ROLE_GRANTED = "RoleGranted"
    ROLE_REVOKED = "RoleRevoked"
    PAUSED = "Paused"
    UNPAUSED = "Unpaused"
    MEMBERSHIP_ROOT_UPDATED = "MembershipRootUpdated"
    MINIMUM_PRICE_UPDATED = "MinimumPriceUpdated"


def _canonical_bytes(
    event_id: str,
    event_kind: str,
    timestamp_utc: str,
    actor_id: str,
    payload: dict[str, Any],
) -> bytes:
    return json.dumps(
        {
            "event_id": event_id,
            "event_kind": event_kind,
            "timestamp_utc": timestamp_utc,
            "actor_id": actor_id,
            "payload": payload,
        },
        sort_keys=True,
        ensure_ascii=False,
    ).encode("utf-8")


@dataclass(frozen=True)
class EventRecord:
    """A single immutable registry event.

    actor_id is the caller whose operation emitted the event.
    """
    event_id: str
    event_kind: EventKind
    timestamp_utc: str
    actor_id: str
    payload: dict[str, Any]
    event_hash: str  # SHA-256 of canonical JSON

    @staticmethod
    def create(
        event_id: str,
        event_kind: EventKind,
        actor_id: str,
        payload: dict[str, Any],
        timestamp_utc: Optional[datetime] = None,
    ) -> EventRecord:
        """Create a new event record with computed hash."""
        ts = timestamp_utc or datetime.now(timezone.utc)
        ts_str = ts.strftime("%Y-%m-%dT%H:%M:%SZ")
        digest = hashlib.sha256(
            _canonical_bytes(event_id, event_kind.value, ts_str, actor_id, payload)
        ).hexdigest()

        return EventRecord(
            event_id=event_id,
            event_kind=event_kind,
            timestamp_utc=ts_str,
            actor_id=actor_id,
            payload=payload,
            event_hash=f"sha256:{digest}",
        )


class EventLog:
    """Append-only event log with optional file persistence.

    Events can only be appended, never modified or deleted.
    The log can be persisted to a JSONL file (one JSON object per line)
    and loaded back for recovery.

    A batch is written to the file before it becomes visible in memory,
    so a failed write leaves the log exactly as it was.
    """

    def __init__(self, storage_path: Optional[Path] = None) -> None:
        self._events: list[EventRecord] = []
        self._storage_path = storage_path
        self._event_ids: set[str] = set()
        self._lock = threading.RLock()

        if storage_path and storage_path.exists():
            self._load_from_file(storage_path)

    def append(self, event: EventRecord) -> None:
        """Append an event to the log.

        Raises ValueError if event_id is a duplicate (replay protection).
        """
        self.append_all([event])

    def append_all(self, events: Iterable[EventRecord]) -> None:
        """Append a batch of events, all or none."""
        batch = list(events)
        with self._lock:
            seen = set(self._event_ids)
            for event in batch:
                if event.event_id in seen:
                    raise ValueError(f"Duplicate event ID: {event.event_id}")
                seen.add(event.event_id)

            if self._storage_path:
                self._append_to_file(batch)

            self._events.extend(batch)
            self._event_ids = seen

    def emit(
        self,
        actor_id: str,
        items: Iterable[tuple[EventKind, dict[str, Any]]],
    ) -> list[EventRecord]:
        """Create and append one record per (kind, payload), numbered by the log.

        Ids are evt_00000001, evt_00000002, ... in log order, so every
        producer sharing this log gets unique ids.
        """
        with self._lock:
            records = [
                EventRecord.create(
                    event_id=f"evt_{len(self._events) + offset:08d}",
                    event_kind=kind,
                    actor_id=actor_id,
                    payload=payload,
                )
                for offset, (kind, payload) in enumerate(items, 1)
            ]
            self.append_all(records)
            return records

    def events(self, kind: Optional[EventKind] = None) -> list[EventRecord]:
        """Return events, optionally filtered by kind."""
        if kind is None:
            return list(self._events)
        return [e for e in self._events if e.event_kind == kind]

    @property
    def count(self) -> int:
        return len(self._events)

    @property
    def last_event(self) -> Optional[EventRecord]:
        return self._events[-1] if self._events else None

    def _append_to_file(self, events: list[EventRecord]) -> None:
        lines = []
        for event in events:
            record = {
                "event_id": event.event_id,
                "event_kind": event.event_kind.value,
                "timestamp_utc": event.timestamp_utc,
                "actor_id": event.actor_id,
                "payload": event.payload,
                "event_hash": event.event_hash,
            }
            lines.append(json.dumps(record, sort_keys=True, ensure_ascii=False) + "\n")
        with self._storage_path.open("a", encoding="utf-8") as f:
            f.write("".join(lines))

    def _load_from_file(self, path: Path) -> None:
        """Load events from a JSONL file with integrity verification.

        Fail-closed: rejects tampered records (hash mismatch) and
        duplicate event IDs.
        """
        with path.open("r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                data = json.loads(line)

                event_id = data["event_id"]
                if event_id in self._event_ids:
                    raise ValueError(
                        f"Duplicate event ID on recovery (line {line_num}): {event_id}"
                    )

                canonical = _canonical_bytes(
                    event_id,
                    data["event_kind"],
                    data["timestamp_utc"],
                    data["actor_id"],
                    data["payload"],
                )
                expected_hash = f"sha256:{hashlib.sha256(canonical).hexdigest()}"
                if data["event_hash"] != expected_hash:
                    raise ValueError(
                        f"Integrity check failed (line {line_num}): event {event_id} "
                        f"hash mismatch"
                    )

                record = EventRecord(
                    event_id=event_id,
                    event_kind=EventKind(data["event_kind"]),
                    timestamp_utc=data["timestamp_utc"],
                    actor_id=data["actor_id"],
                    payload=data["payload"],
                    event_hash=data["event_hash"],
                )
                self._events.append(record)
                self._event_ids.add(event_id)
