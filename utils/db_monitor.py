from __future__ import annotations

import time
from typing import Optional

from flask import has_request_context
from pymongo.monitoring import CommandListener, CommandStartedEvent, CommandSucceededEvent, CommandFailedEvent

from .request_metrics import record_db_query

# Commands the sweet and user repositories actually issue
TRACKED_COMMANDS = {"find", "insert", "update", "delete", "findAndModify"}


class FlaskMongoCommandLogger(CommandListener):
    """Attributes Mongo command timings to the Flask request that issued them.

    pymongo listeners are process-wide, so commands issued outside a request
    (startup index creation, the admin script) are ignored.
    """

    def __init__(self) -> None:
        # request_id -> (start time, collection); the collection is only on the started event
        self._pending: dict[int, tuple[float, Optional[str]]] = {}

    def _finish(self, event) -> Optional[tuple[float, Optional[str]]]:
        pending = self._pending.pop(event.request_id, None)
        if pending is None:
            return None
        started, collection = pending
        return (time.perf_counter() - started) * 1000.0, collection

    def started(self, event: CommandStartedEvent) -> None:  # type: ignore[override]
        if not has_request_context() or event.command_name not in TRACKED_COMMANDS:
            return
        self._pending[event.request_id] = (time.perf_counter(), event.command.get(event.command_name))

    def succeeded(self, event: CommandSucceededEvent) -> None:  # type: ignore[override]
        done = self._finish(event)
        if done is None:
            return
        duration_ms, collection = done
        reply = event.reply or {}
        if event.command_name == "find":
            n_returned = len(reply.get("cursor", {}).get("firstBatch", []))
        else:
            n_returned = reply.get("n")
        record_db_query(event.command_name, collection=collection, duration_ms=duration_ms, n_returned=n_returned)

    def failed(self, event: CommandFailedEvent) -> None:  # type: ignore[override]
        done = self._finish(event)
        if done is None:
            return
        duration_ms, collection = done
        record_db_query(event.command_name, collection=collection, duration_ms=duration_ms, ok=False)


__all__ = ["FlaskMongoCommandLogger", "TRACKED_COMMANDS"]
