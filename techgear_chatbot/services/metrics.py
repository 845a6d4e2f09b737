"""Per-call metrics for the remote model and the local tools.

Every chat-completion request and every tool execution is recorded here.

Design
------
* Data points are collected in a thread-safe in-memory buffer and flushed to
  CloudWatch by a daemon thread every ``FLUSH_INTERVAL_SECONDS`` when
  ``METRICS_ENABLED=true``.  Otherwise they are only logged at DEBUG level.
* Independently of CloudWatch, running success/failure counters are kept per
  ``service/operation`` so ``summary()`` can report them locally.

Usage
-----
>>> from techgear_chatbot.services.metrics import metrics
>>> metrics.record_success("azure_openai", "chat_completions", latency_ms=812.0)
>>> metrics.record_failure("tools", "query_inventory", error_type="OperationalError")
"""

from __future__ import annotations

import atexit
import logging
import os
import threading
import time
from collections import Counter
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

NAMESPACE = "TechGearChatbot"
FLUSH_INTERVAL_SECONDS = 60
MAX_BATCH_SIZE = 1_000  # CloudWatch API limit per PutMetricData call


class MetricsClient:
    """Batched CloudWatch publisher with local counters."""

    def __init__(self) -> None:
        self._enabled = os.getenv("METRICS_ENABLED", "false").lower() == "true"
        self._buffer: list[dict[str, Any]] = []
        self._successes: Counter[str] = Counter()
        self._failures: Counter[str] = Counter()
        self._lock = threading.Lock()
        self._cw_client = None

        if self._enabled:
            self._start_flush_thread()

    def _get_cw_client(self):
        """Create the boto3 CloudWatch client on first use."""
        if self._cw_client is None:
            import boto3

            self._cw_client = boto3.client("cloudwatch")
        return self._cw_client

    # ── Public API ────────────────────────────────────────────────────

    def record_success(self, service: str, operation: str, latency_ms: float) -> None:
        """Record a call that completed normally."""
        now = datetime.now(UTC)
        dims = [
            {"Name": "Service", "Value": service},
            {"Name": "Operation", "Value": operation},
        ]
        with self._lock:
            self._successes[f"{service}/{operation}"] += 1
            self._buffer.append(
                {
                    "MetricName": "Calls/Success",
                    "Dimensions": dims,
                    "Timestamp": now,
                    "Value": 1,
                    "Unit": "Count",
                }
            )
            self._buffer.append(
                {
                    "MetricName": "Calls/Latency",
                    "Dimensions": dims,
                    "Timestamp": now,
                    "Value": latency_ms,
                    "Unit": "Milliseconds",
                }
            )
        logger.debug("Metric: %s %s success latency=%.1fms", service, operation, latency_ms)

    def record_failure(
        self,
        service: str,
        operation: str,
        error_type: str,
        latency_ms: float = 0,
    ) -> None:
        """Record a failed call; latency is only published when known."""
        now = datetime.now(UTC)
        dims = [
            {"Name": "Service", "Value": service},
            {"Name": "Operation", "Value": operation},
        ]
        with self._lock:
            self._failures[f"{service}/{operation}"] += 1
            self._buffer.append(
                {
                    "MetricName": "Calls/Failure",
                    "Dimensions": dims + [{"Name": "ErrorType", "Value": error_type}],
                    "Timestamp": now,
                    "Value": 1,
                    "Unit": "Count",
                }
            )
            if latency_ms > 0:
                self._buffer.append(
                    {
                        "MetricName": "Calls/Latency",
                        "Dimensions": dims,
                        "Timestamp": now,
                        "Value": latency_ms,
                        "Unit": "Milliseconds",
                    }
                )
        logger.debug(
            "Metric: %s %s failure error=%s latency=%.1fms",
            service, operation, error_type, latency_ms,
        )

    def summary(self) -> dict[str, dict[str, int]]:
        """Counts since start-up, keyed by ``service/operation``."""
        with self._lock:
            keys = sorted(set(self._successes) | set(self._failures))
            return {
                key: {"success": self._successes[key], "failure": self._failures[key]}
                for key in keys
            }

    def flush(self) -> int:
        """Send buffered data points to CloudWatch.  Returns count sent."""
        with self._lock:
            if not self._buffer:
                return 0
            batch = self._buffer[:]
            self._buffer.clear()

        if not self._enabled:
            logger.debug("Metrics flush skipped (not enabled): %d items", len(batch))
            return 0

        sent = 0
        try:
            cw = self._get_cw_client()
            for i in range(0, len(batch), MAX_BATCH_SIZE):
                chunk = batch[i : i + MAX_BATCH_SIZE]
                cw.put_metric_data(Namespace=NAMESPACE, MetricData=chunk)
                sent += len(chunk)
            logger.info("Flushed %d metrics to CloudWatch", sent)
        except Exception:
            logger.exception("Failed to flush metrics to CloudWatch")
        return sent

    # ── Internal ──────────────────────────────────────────────────────

    def _start_flush_thread(self) -> None:
        def _loop():
            while True:
                time.sleep(FLUSH_INTERVAL_SECONDS)
                try:
                    self.flush()
                except Exception:
                    logger.exception("Metrics flush thread error")

        t = threading.Thread(target=_loop, daemon=True, name="metrics-flush")
        t.start()
        atexit.register(self.flush)
        logger.info("Metrics flush thread started (interval=%ds)", FLUSH_INTERVAL_SECONDS)


metrics = MetricsClient()
