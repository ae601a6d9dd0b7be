from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from pricing.composer import compose_price
from pricing.estimate import build_estimate
from pricing.relevance import ScoredResult, rank
from pricing.routing import DamageReviewRouter
from pricing.search_analytics import SearchLogEntry, summarize_search_logs
from pricing.surge import surge_factors
from pricing.weather import weather_factors
from service.audit import (
    ESTIMATE_BUILT_TOPIC,
    FILTHINESS_ASSESSED_TOPIC,
    MANUAL_REVIEW_TOPIC,
    PRICE_QUOTED_TOPIC,
    AuditSink,
    InMemoryAuditSink,
    audit_event,
)
from service.intake import (
    AssessmentRequest,
    EstimateRequest,
    InspectionIn,
    PricingRequest,
    SearchRequest,
    parse_payload,
)
from service.logging_config import configure_logging, request_context
from service.settings import ServiceSettings

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _result_dict(result: ScoredResult) -> dict[str, Any]:
    return {
        "id": result.record.id,
        "score": result.score,
        "score_breakdown": asdict(result.breakdown),
        "matched_terms": list(result.matched_terms),
        "summary": asdict(result.summary),
        "relevance_factors": list(result.relevance_factors),
    }


class PricingService:
    """Calling layer around the pricing core.

    Validates plain payloads, binds tenant and correlation ids for logging,
    and emits an audit event per result. Only this layer reads the clock.
    """

    def __init__(
        self,
        settings: ServiceSettings | None = None,
        audit_sink: AuditSink | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.settings = settings or ServiceSettings()
        self.audit_sink = audit_sink if audit_sink is not None else InMemoryAuditSink()
        self.clock = clock
        self.config = self.settings.estimate_config()
        self.relevance_config = self.settings.relevance_config()
        self.review_threshold = self.settings.review_confidence_threshold
        self.search_log: deque[SearchLogEntry] = deque(maxlen=self.settings.search_log_limit)

    def _emit(self, topic: str, tenant: str, correlation: str, payload: dict[str, Any], key: str | None = None) -> None:
        event = audit_event(topic, tenant, correlation, self.clock(), payload)
        try:
            self.audit_sink.publish(topic, event, key=key)
        except Exception:
            logger.exception("Audit publish to %s failed for tenant %s", topic, tenant)

    def quote(self, payload: dict[str, Any]) -> dict[str, Any]:
        request = parse_payload(PricingRequest, payload)
        config = self.config
        with request_context(request.tenant_id) as cid:
            filthiness = request.filthiness.to_assessment(request.at, config.filthiness)
            weather = request.weather.to_snapshot() if request.weather and config.weather_adjustments else None
            surge = request.surge.to_context(request.at, config.surge) if request.surge and config.surge_enabled else None

            result = compose_price(
                request.base_price,
                filthiness,
                weather,
                surge,
                weather_config=config.weather,
                surge_config=config.surge,
            )
            response = result.as_dict()
            response["filthiness"] = filthiness.as_dict()
            response["weather_factors"] = weather_factors(weather, config.weather) if weather else []
            response["surge_factors"] = surge_factors(surge) if surge else []

            logger.info(
                "Quoted %d -> %d (%s filthiness)",
                request.base_price,
                result.adjusted_price,
                filthiness.severity_level.value,
                extra={"extra_data": result.breakdown.as_dict()},
            )
            self._emit(PRICE_QUOTED_TOPIC, request.tenant_id, cid, response, key=request.vin)
            return response

    def estimate(self, payload: dict[str, Any]) -> dict[str, Any]:
        request = parse_payload(EstimateRequest, payload)
        with request_context(request.tenant_id) as cid:
            estimate_input = request.to_input(self.config.filthiness, self.config.surge)
            breakdown = build_estimate(estimate_input, self.config)

            router = DamageReviewRouter(confidence_threshold=self.review_threshold)
            router.route_all(estimate_input.damages)
            pending = router.drain()
            for damage in pending:
                self._emit(
                    MANUAL_REVIEW_TOPIC,
                    request.tenant_id,
                    cid,
                    {"zone_id": damage.zone_id, "type": damage.type.value, "confidence": damage.confidence},
                    key=request.vin,
                )

            response = breakdown.as_dict()
            response["damages_pending_review"] = len(pending)
            logger.info(
                "Estimate %s: total %d over %.2f h, %d damage(s) pending review",
                breakdown.service_type.value,
                breakdown.total,
                breakdown.total_hours,
                len(pending),
            )
            self._emit(ESTIMATE_BUILT_TOPIC, request.tenant_id, cid, response, key=request.vin)
            return response

    def assess(self, payload: dict[str, Any]) -> dict[str, Any]:
        request = parse_payload(AssessmentRequest, payload)
        with request_context(request.tenant_id) as cid:
            assessment = request.filthiness.to_assessment(request.at, self.config.filthiness)
            response = assessment.as_dict()
            logger.info("Filthiness %.1f classified as %s", assessment.overall_score, assessment.severity_level.value)
            self._emit(FILTHINESS_ASSESSED_TOPIC, request.tenant_id, cid, response, key=request.vin)
            return response

    def search(self, payload: dict[str, Any], candidates: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
        request = parse_payload(SearchRequest, payload)
        started = time.perf_counter()
        with request_context(request.tenant_id):
            inspections = [parse_payload(InspectionIn, candidate) for candidate in candidates]
            now = self.clock()
            results = rank(
                request.query,
                [i.to_record() for i in inspections],
                now=now,
                query_embedding=request.query_embedding,
                embeddings={i.id: i.embedding for i in inspections if i.embedding is not None},
                filters=request.to_filters(),
                key=request.sort_key,
                direction=request.direction,
                limit=request.limit or self.settings.search_result_limit,
                config=self.relevance_config,
            )
            elapsed_ms = (time.perf_counter() - started) * 1000
            self.search_log.append(
                SearchLogEntry(
                    query_text=request.query,
                    result_count=len(results),
                    execution_ms=elapsed_ms,
                    timestamp=now,
                )
            )
            logger.info("Search %r returned %d of %d candidates", request.query, len(results), len(inspections))
            return [_result_dict(result) for result in results]

    def search_analytics(self, date_start: datetime | None = None, date_end: datetime | None = None) -> dict[str, Any]:
        return summarize_search_logs(list(self.search_log), date_start, date_end)


def create_service(audit_sink: AuditSink | None = None) -> PricingService:
    settings = ServiceSettings()
    configure_logging(level=settings.log_level, fmt=settings.log_format)
    return PricingService(settings=settings, audit_sink=audit_sink)
