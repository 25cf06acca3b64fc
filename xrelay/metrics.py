"""
Prometheus metrics for the checkpoint relay.

Exposes reception outcomes and registry activity via HTTP /metrics.

Environment Variables:
    METRICS_ENABLED: Enable metrics server (true/false) - default: false
    METRICS_PORT: HTTP port for /metrics endpoint - default: 8080

Usage:
    from xrelay.metrics import init_metrics, track_reception

    init_metrics()
    track_reception("accepted")
"""

import logging
import threading
from contextlib import contextmanager
from typing import Generator, Optional

from prometheus_client import Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)

RECEPTIONS_TOTAL: Optional[Counter] = None
RECEPTION_DURATION: Optional[Histogram] = None
CHECKPOINTS_STORED: Optional[Counter] = None
EMITTER_CHANGES: Optional[Counter] = None

_metrics_initialized = False
_metrics_lock = threading.Lock()


def init_metrics() -> None:
    """
    Initialize Prometheus metrics (call once at startup).

    Thread-safe via module-level lock. Until this is called every
    track_* helper is a no-op.
    """
    global RECEPTIONS_TOTAL, RECEPTION_DURATION, CHECKPOINTS_STORED, EMITTER_CHANGES
    global _metrics_initialized

    with _metrics_lock:
        if _metrics_initialized:
            return

        # outcome: "accepted" or a RejectionReason value
        RECEPTIONS_TOTAL = Counter(
            "xrelay_receptions_total",
            "Total number of envelopes processed by the reception pipeline",
            labelnames=["outcome"],
        )

        RECEPTION_DURATION = Histogram(
            "xrelay_reception_duration_seconds",
            "Duration of reception pipeline runs in seconds",
            buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
        )

        CHECKPOINTS_STORED = Counter(
            "xrelay_checkpoints_stored_total",
            "Total number of checkpoints stored",
            labelnames=["source_chain_id"],
        )

        # action: added, removed
        EMITTER_CHANGES = Counter(
            "xrelay_trusted_emitter_changes_total",
            "Trusted emitter registry mutations",
            labelnames=["action"],
        )

        _metrics_initialized = True
        logger.info("Prometheus metrics initialized")


def start_metrics_server(enabled: bool, port: int) -> None:
    """
    Start Prometheus metrics HTTP server in background thread.

    Args:
        enabled: Whether to start metrics server (from METRICS_ENABLED env var)
        port: HTTP port for /metrics endpoint (from METRICS_PORT env var)
    """
    if not enabled:
        logger.info("Metrics server disabled (METRICS_ENABLED=false)")
        return

    init_metrics()

    try:
        start_http_server(port, addr="0.0.0.0")
        logger.info(f"Metrics server started on http://0.0.0.0:{port}/metrics")
    except OSError as e:
        logger.error(f"Failed to start metrics server: {e}")


@contextmanager
def track_reception_duration() -> Generator[None, None, None]:
    if RECEPTION_DURATION is None:
        yield
        return

    with RECEPTION_DURATION.time():
        yield


def track_reception(outcome: str) -> None:
    """
    Count one finished reception.

    Args:
        outcome: "accepted" or the rejection reason (e.g. "Replay")
    """
    if RECEPTIONS_TOTAL is not None:
        RECEPTIONS_TOTAL.labels(outcome=outcome).inc()


def track_checkpoint_stored(source_chain_id: int) -> None:
    if CHECKPOINTS_STORED is not None:
        CHECKPOINTS_STORED.labels(source_chain_id=str(source_chain_id)).inc()


def track_emitter_change(action: str, count: int = 1) -> None:
    if EMITTER_CHANGES is not None:
        EMITTER_CHANGES.labels(action=action).inc(count)
