"""Per-request timing for the after_request perf line.

The Mongo listener in ``utils.db_monitor`` feeds ``record_db_query``; the
totals end up in the ``X-Request-Time-ms`` header and, when
``LOG_PERF_DETAILS`` is on, in one log line per request.
"""
from __future__ import annotations

import dataclasses
import logging
import time
from collections import Counter
from typing import Any, Dict, List, Optional

from flask import g, has_request_context, request

logger = logging.getLogger(__name__)

# A single Mongo round trip slower than this gets its own warning
SLOW_QUERY_MS = 250.0


@dataclasses.dataclass
class DBQuery:
    command_name: str
    collection: Optional[str]
    duration_ms: float
    ok: bool = True
    n_returned: Optional[int] = None


@dataclasses.dataclass
class RequestMetrics:
    started_ts: float
    db: List[DBQuery] = dataclasses.field(default_factory=list)
    total_ms: Optional[float] = None
    status_code: Optional[int] = None

    def summarize(self) -> Dict[str, Any]:
        return {
            "total_ms": self.total_ms,
            "db_ms": sum(q.duration_ms for q in self.db),
            "db_count": len(self.db),
            "db_failed": sum(1 for q in self.db if not q.ok),
            # e.g. {"sweets": 2, "users": 1}
            "collections": dict(Counter(q.collection or "?" for q in self.db)),
            "status_code": self.status_code,
        }


def _metrics() -> Optional[RequestMetrics]:
    if not has_request_context():
        return None
    if g.get("_req_metrics") is None:
        g._req_metrics = RequestMetrics(started_ts=time.perf_counter())
    return g._req_metrics


def start_request() -> None:
    _metrics()


def finish_request(status_code: int | None = None) -> Optional[Dict[str, Any]]:
    rm = _metrics()
    if not rm:
        return None
    rm.status_code = status_code
    rm.total_ms = (time.perf_counter() - rm.started_ts) * 1000.0
    return rm.summarize()


def record_db_query(
    command_name: str,
    *,
    collection: Optional[str],
    duration_ms: float,
    ok: bool = True,
    n_returned: Optional[int] = None,
) -> None:
    rm = _metrics()
    if not rm:
        return
    if duration_ms >= SLOW_QUERY_MS:
        logger.warning(
            "Slow Mongo %s on %s: %.1fms (%s %s)",
            command_name, collection, duration_ms, request.method, request.path,
        )
    rm.db.append(DBQuery(command_name, collection, duration_ms, ok, n_returned))


__all__ = ["DBQuery", "RequestMetrics", "SLOW_QUERY_MS", "start_request", "finish_request", "record_db_query"]
