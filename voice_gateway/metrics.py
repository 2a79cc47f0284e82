"""In-memory per-route gateway metrics since process start."""

from __future__ import annotations

OK = "ok"
CLIENT_ERROR = "client_error"
UPSTREAM_ERROR = "upstream_error"

_routes: dict[str, dict[str, int | float]] = {}


def _empty() -> dict[str, int | float]:
    return {
        "request_count": 0,
        CLIENT_ERROR: 0,
        UPSTREAM_ERROR: 0,
        "sum_latency_ms": 0.0,
    }


def record_request(route: str, latency_ms: float, outcome: str = OK) -> None:
    """Record one API request; outcome is ok, client_error or upstream_error."""
    counters = _routes.setdefault(route, _empty())
    counters["request_count"] += 1
    counters["sum_latency_ms"] += latency_ms
    if outcome in (CLIENT_ERROR, UPSTREAM_ERROR):
        counters[outcome] += 1


def _snapshot(counters: dict[str, int | float]) -> dict[str, int | float]:
    total = counters["request_count"]
    avg = counters["sum_latency_ms"] / total if total else 0.0
    return {
        "request_count": total,
        "client_error_count": counters[CLIENT_ERROR],
        "upstream_error_count": counters[UPSTREAM_ERROR],
        "latency_ms_avg": round(avg, 2),
    }


def get_metrics() -> dict:
    """Totals plus a per-route breakdown (for /metrics endpoint)."""
    totals = _empty()
    for counters in _routes.values():
        for key in totals:
            totals[key] += counters[key]
    summary = _snapshot(totals)
    summary["error_count"] = summary["client_error_count"] + summary["upstream_error_count"]
    summary["routes"] = {route: _snapshot(c) for route, c in sorted(_routes.items())}
    return summary


def reset_metrics() -> None:
    """Reset in-memory counters (for tests only)."""
    _routes.clear()
