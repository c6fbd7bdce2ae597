"""Persistence — append-only registry event log."""

from lazymint.persistence.event_log import EventKind, EventLog, EventRecord

__all__ = ["EventKind", "EventLog", "EventRecord"]
