from __future__ import annotations

from dataclasses import dataclass
from queue import Queue
from typing import Iterable

from pricing.data_models import Damage


@dataclass
class DamageReviewRouter:
    confidence_threshold: float = 0.75

    def __post_init__(self) -> None:
        self.queue: Queue[Damage] = Queue()

    def needs_review(self, damage: Damage) -> bool:
        # a detection without a confidence score is treated as unverified
        return damage.confidence is None or damage.confidence < self.confidence_threshold

    def route(self, damage: Damage) -> bool:
        flagged = self.needs_review(damage)
        if flagged:
            self.queue.put(damage)
        return flagged

    def route_all(self, damages: Iterable[Damage]) -> list[Damage]:
        """Queue low-confidence damages and return the ones that can be priced as-is."""
        return [damage for damage in damages if not self.route(damage)]

    def drain(self) -> list[Damage]:
        pending: list[Damage] = []
        while not self.queue.empty():
            pending.append(self.queue.get_nowait())
        return pending
