"""Comparison sessions: which pairs to show, and in what order.

Small task lists are compared exhaustively. Larger ones concentrate effort
on the highest-rated tasks, where ordering matters most, and only sample
the rest.
"""

import logging
import math
import random
from collections.abc import Iterable
from typing import Optional

from prioritylib.domain.rating.rating import RatingOutcome
from prioritylib.domain.task.models import TaskRecord
from prioritylib.usecases.models import UseCaseResult
from prioritylib.usecases.tasks import TaskUseCases

logger = logging.getLogger(__name__)

EXHAUSTIVE_LIMIT = 5
MAX_TOP_CANDIDATES = 8
TOP_CANDIDATE_RATIO = 0.4
MAX_SAMPLES_PER_CANDIDATE = 3
MAX_REMAINING_PAIRS = 5

PAIR_MISMATCH_MESSAGE = "Choice does not match the current comparison pair"

ComparisonPair = tuple[TaskRecord, TaskRecord]


def _all_pairs(tasks: list[TaskRecord]) -> list[ComparisonPair]:
    return [(tasks[i], tasks[j]) for i in range(len(tasks)) for j in range(i + 1, len(tasks))]


def generate_comparison_pairs(
    tasks: Iterable[TaskRecord], rng: Optional[random.Random] = None
) -> list[ComparisonPair]:
    """Build a shuffled list of pairs to compare among the active tasks."""
    rng = rng or random.Random()
    active = [task for task in tasks if task.is_active]
    n = len(active)
    if n < 2:
        return []

    if n <= EXHAUSTIVE_LIMIT:
        pairs = _all_pairs(active)
        rng.shuffle(pairs)
        return pairs

    ranked = sorted(active, key=lambda t: t.importance_score, reverse=True)
    top_count = min(MAX_TOP_CANDIDATES, math.ceil(n * TOP_CANDIDATE_RATIO))
    top = ranked[:top_count]
    remaining = ranked[top_count:]

    pairs = _all_pairs(top)

    samples = min(MAX_SAMPLES_PER_CANDIDATE, max(1, len(remaining) // len(top)))
    for candidate in top:
        for sample in rng.sample(remaining, min(samples, len(remaining))):
            pairs.append((candidate, sample))

    if len(remaining) > 1:
        shuffled = list(remaining)
        rng.shuffle(shuffled)
        for i in range(min(MAX_REMAINING_PAIRS, len(shuffled) // 2)):
            pairs.append((shuffled[2 * i], shuffled[2 * i + 1]))

    rng.shuffle(pairs)
    logger.debug(f"Generated {len(pairs)} comparison pairs for {n} active tasks")
    return pairs


class ComparisonSession:
    """Walks a user through a queue of comparison pairs."""

    def __init__(
        self,
        use_cases: TaskUseCases,
        user_id: str,
        tasks: Iterable[TaskRecord],
        rng: Optional[random.Random] = None,
    ):
        self.use_cases = use_cases
        self.user_id = user_id
        self.comparison_count = 0
        self.error: Optional[str] = None
        self.last_outcome: Optional[RatingOutcome] = None
        self._pairs = generate_comparison_pairs(tasks, rng)

    @property
    def current_pair(self) -> Optional[ComparisonPair]:
        return self._pairs[0] if self._pairs else None

    @property
    def remaining_pairs(self) -> list[ComparisonPair]:
        return list(self._pairs)

    @property
    def is_complete(self) -> bool:
        return not self._pairs

    async def choose(self, winner: TaskRecord, loser: TaskRecord) -> UseCaseResult[RatingOutcome]:
        """Record a choice on the current pair. The queue advances only when it was stored."""
        self.error = None
        pair = self.current_pair
        if pair is None or {winner.id, loser.id} != {pair[0].id, pair[1].id}:
            self.error = PAIR_MISMATCH_MESSAGE
            return UseCaseResult.fail(PAIR_MISMATCH_MESSAGE)

        result = await self.use_cases.create_comparison(self.user_id, winner.id, loser.id)
        if result.success:
            self.comparison_count += 1
            self.last_outcome = result.data
            self._pairs.pop(0)
        else:
            self.error = result.error or "Failed to create comparison"
        return result

    def skip(self) -> None:
        """Move the current pair to the end of the queue."""
        if self._pairs:
            self._pairs.append(self._pairs.pop(0))
