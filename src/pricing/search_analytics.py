from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Iterable

import pandas as pd

from pricing.data_models import round_minor

FAST_QUERY_MS = 500
SLOW_QUERY_MS = 2000
TOP_QUERIES = 10

RESULT_RANGES: tuple[tuple[int, float, str], ...] = (
    (0, 0, "0 results"),
    (1, 10, "1-10 results"),
    (11, 50, "11-50 results"),
    (51, math.inf, "50+ results"),
)

LOG_COLUMNS = ["query_text", "result_count", "execution_ms", "timestamp", "user_action"]


@dataclass(frozen=True)
class SearchLogEntry:
    query_text: str
    result_count: int
    execution_ms: float
    timestamp: datetime
    user_action: str | None = None  # "clicked", "refined", "abandoned"


def search_log_frame(entries: Iterable[SearchLogEntry]) -> pd.DataFrame:
    frame = pd.DataFrame([asdict(entry) for entry in entries], columns=LOG_COLUMNS)
    frame["timestamp"] = pd.to_datetime(frame["timestamp"], utc=True)
    return frame


def _utc(value: datetime) -> pd.Timestamp:
    stamp = pd.Timestamp(value)
    return stamp.tz_localize("UTC") if stamp.tzinfo is None else stamp.tz_convert("UTC")


def _window(frame: pd.DataFrame, date_start: datetime | None, date_end: datetime | None) -> pd.DataFrame:
    if date_start is not None:
        frame = frame[frame["timestamp"] >= _utc(date_start)]
    if date_end is not None:
        frame = frame[frame["timestamp"] <= _utc(date_end)]
    return frame


def popular_queries(frame: pd.DataFrame, limit: int = TOP_QUERIES) -> list[dict[str, Any]]:
    counts = frame.groupby("query_text", sort=False).size().sort_values(ascending=False, kind="stable")
    return [{"query": query, "count": int(count)} for query, count in counts.head(limit).items()]


def zero_result_queries(frame: pd.DataFrame, limit: int = TOP_QUERIES) -> list[str]:
    zero = frame.loc[frame["result_count"] == 0, "query_text"]
    return list(pd.unique(zero))[:limit]


def daily_searches(frame: pd.DataFrame) -> list[dict[str, Any]]:
    days = frame["timestamp"].dt.strftime("%Y-%m-%d")
    counts = days.groupby(days).size().sort_index()
    return [{"date": date, "count": int(count)} for date, count in counts.items()]


def performance_metrics(frame: pd.DataFrame) -> dict[str, Any]:
    by_range = []
    for low, high, label in RESULT_RANGES:
        in_range = frame[(frame["result_count"] >= low) & (frame["result_count"] <= high)]
        avg = float(in_range["execution_ms"].mean()) if len(in_range) else 0.0
        by_range.append({"result_range": label, "avg_time": round_minor(avg)})
    return {
        "fast_queries": int((frame["execution_ms"] < FAST_QUERY_MS).sum()),
        "slow_queries": int((frame["execution_ms"] > SLOW_QUERY_MS).sum()),
        "average_by_result_count": by_range,
    }


def summarize_search_logs(
    logs: pd.DataFrame | Iterable[SearchLogEntry],
    date_start: datetime | None = None,
    date_end: datetime | None = None,
) -> dict[str, Any]:
    """Aggregate search logs into the dashboard summary; both window bounds are inclusive."""
    frame = logs if isinstance(logs, pd.DataFrame) else search_log_frame(logs)
    frame = _window(frame, date_start, date_end)

    total = len(frame)
    return {
        "total_searches": total,
        "average_execution_time": float(frame["execution_ms"].mean()) if total else 0.0,
        "average_result_count": float(frame["result_count"].mean()) if total else 0.0,
        "popular_queries": popular_queries(frame),
        "zero_result_queries": zero_result_queries(frame),
        "search_trends": {
            "daily_searches": daily_searches(frame),
            "performance_metrics": performance_metrics(frame),
        },
    }
