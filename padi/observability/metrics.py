"""Prometheus metrics for Padi.

Counts ledger outcomes, compare-and-set conflicts, hydration results,
realtime reconnects and discarded stale responses.
"""

from prometheus_client import Counter, Histogram

LEDGER_OPERATIONS = Counter(
    "padi_ledger_operations_total",
    "Total number of ledger operations",
    labelnames=["operation", "outcome"],
)

LEDGER_ROLLBACKS = Counter(
    "padi_ledger_rollbacks_total",
    "Optimistic local changes restored after a failed persist",
    labelnames=["field"],
)

CAS_CONFLICTS = Counter(
    "padi_cas_conflicts_total",
    "Compare-and-set writes that lost a race and were retried",
    labelnames=["operation"],
)

HYDRATIONS = Counter(
    "padi_profile_hydrations_total",
    "Profile hydration attempts",
    labelnames=["outcome"],
)

HYDRATION_LATENCY = Histogram(
    "padi_profile_hydration_latency_seconds",
    "Profile hydration latency in seconds",
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

REALTIME_RECONNECTS = Counter(
    "padi_realtime_reconnects_total",
    "Realtime channel reconnect attempts",
)

REALTIME_EVENTS = Counter(
    "padi_realtime_events_total",
    "Realtime change events by type and merge outcome",
    labelnames=["event_type", "outcome"],
)

STALE_RESPONSES = Counter(
    "padi_stale_responses_discarded_total",
    "Async results discarded because their session was superseded",
    labelnames=["operation"],
)
