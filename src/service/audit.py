from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from queue import Queue
from typing import Any, Protocol

PRICE_QUOTED_TOPIC = "price_quoted"
ESTIMATE_BUILT_TOPIC = "estimate_built"
FILTHINESS_ASSESSED_TOPIC = "filthiness_assessed"
MANUAL_REVIEW_TOPIC = "damage_manual_review"


class AuditSink(Protocol):
    def publish(self, topic: str, value: dict[str, Any], key: str | None = None) -> None: ...


class InMemoryAuditSink:
    """Per-topic queues; the default sink when no external audit log is wired in."""

    def __init__(self) -> None:
        self._queues: dict[str, Queue[dict[str, Any]]] = defaultdict(Queue)

    def publish(self, topic: str, value: dict[str, Any], key: str | None = None) -> None:
        self._queues[topic].put({"key": key, "value": value})

    def drain(self, topic: str) -> list[dict[str, Any]]:
        queue = self._queues[topic]
        events: list[dict[str, Any]] = []
        while not queue.empty():
            events.append(queue.get_nowait())
        return events


def audit_event(action: str, tenant: str, correlation: str, at: datetime, payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "action": action,
        "tenant_id": tenant,
        "correlation_id": correlation,
        "at": at.isoformat(),
        "payload": payload,
    }
