"""
FSRS-5 memory model.

Pure functions over (stability, difficulty, retrievability). No dates, no
card states: the scheduler in ``core.py`` decides which formula applies.

    R(t, S)  = (1 + FACTOR * t / S) ** DECAY
    I(S)     = S / FACTOR * (r ** (1 / DECAY) - 1)       so that R(I, S) == r
"""

from __future__ import annotations

import math
import random
from typing import List, Optional, Sequence

from ..config import DEFAULT_PARAMETERS, FSRSDefaultConfig
from ..schemas import Rating

DECAY = -0.5
FACTOR = 0.9 ** (1 / DECAY) - 1  # 19/81: R(S, S) == 0.9

FUZZ_MIN_INTERVAL = 2.5
# (from, to, factor): wider relative spread for short intervals
FUZZ_RANGES = (
    (2.5, 7.0, 0.15),
    (7.0, 20.0, 0.1),
    (20.0, math.inf, 0.05),
)


class FSRSAlgorithm:
    """Stability/difficulty/interval formulas for one set of weights."""

    def __init__(self, weights: Optional[Sequence[float]] = None):
        w = list(weights) if weights else list(DEFAULT_PARAMETERS)
        if len(w) != len(DEFAULT_PARAMETERS):
            raise ValueError(f"FSRS weights must have {len(DEFAULT_PARAMETERS)} values, got {len(w)}")
        self.w: List[float] = w

    # --- Retrievability & intervals ---

    @staticmethod
    def forgetting_curve(elapsed_days: float, stability: float) -> float:
        """Probability of recall after ``elapsed_days`` for a memory of ``stability``."""
        if stability <= 0:
            return 0.0
        if elapsed_days <= 0:
            return 1.0
        return (1 + FACTOR * elapsed_days / stability) ** DECAY

    @staticmethod
    def next_interval(stability: float, request_retention: float, maximum_interval: int) -> int:
        """Whole days until retrievability falls to ``request_retention``; 1..maximum_interval."""
        raw = stability / FACTOR * (request_retention ** (1 / DECAY) - 1)
        return int(min(max(math.floor(raw + 0.5), 1), maximum_interval))

    # --- Difficulty ---

    @staticmethod
    def clamp_difficulty(difficulty: float) -> float:
        return min(max(difficulty, FSRSDefaultConfig.DIFFICULTY_MIN), FSRSDefaultConfig.DIFFICULTY_MAX)

    def init_difficulty(self, rating: Rating) -> float:
        return self.clamp_difficulty(self._raw_init_difficulty(rating))

    def _raw_init_difficulty(self, rating: Rating) -> float:
        return self.w[4] - math.exp(self.w[5] * (int(rating) - 1)) + 1

    def next_difficulty(self, difficulty: float, rating: Rating) -> float:
        """Again raises difficulty, Easy lowers it; damped near 10, pulled back toward D0(Easy)."""
        delta = -self.w[6] * (int(rating) - 3)
        damped = difficulty + delta * (10 - difficulty) / 9
        reverted = self.w[7] * self._raw_init_difficulty(Rating.Easy) + (1 - self.w[7]) * damped
        return self.clamp_difficulty(reverted)

    # --- Stability ---

    @staticmethod
    def clamp_stability(stability: float) -> float:
        return max(stability, FSRSDefaultConfig.STABILITY_MIN)

    def init_stability(self, rating: Rating) -> float:
        return self.clamp_stability(self.w[int(rating) - 1])

    def next_recall_stability(self, difficulty: float, stability: float, retrievability: float, rating: Rating) -> float:
        """Growth after a successful review; larger when recall was less likely."""
        hard_penalty = self.w[15] if rating == Rating.Hard else 1.0
        easy_bonus = self.w[16] if rating == Rating.Easy else 1.0
        growth = (
            math.exp(self.w[8])
            * (11 - difficulty)
            * stability ** -self.w[9]
            * (math.exp((1 - retrievability) * self.w[10]) - 1)
            * hard_penalty
            * easy_bonus
        )
        return self.clamp_stability(stability * (1 + growth))

    def next_forget_stability(self, difficulty: float, stability: float, retrievability: float) -> float:
        """Stability after a lapse; never above the pre-lapse value."""
        forgotten = (
            self.w[11]
            * difficulty ** -self.w[12]
            * ((stability + 1) ** self.w[13] - 1)
            * math.exp((1 - retrievability) * self.w[14])
        )
        return self.clamp_stability(min(forgotten, stability))

    def next_short_term_stability(self, stability: float, rating: Rating) -> float:
        """Same-day review inside the learning/relearning ladder."""
        return self.clamp_stability(stability * math.exp(self.w[17] * (int(rating) - 3 + self.w[18])))

    # --- Fuzz ---

    def apply_fuzz(self, interval: int, elapsed_days: int, maximum_interval: int, seed: str) -> int:
        """Spread a day interval over a small window. ``seed`` fixes the draw."""
        if interval < FUZZ_MIN_INTERVAL:
            return interval
        delta = 1.0
        for start, end, factor in FUZZ_RANGES:
            delta += factor * max(min(interval, end) - start, 0.0)
        min_ivl = max(2, math.floor(interval - delta + 0.5))
        max_ivl = min(math.floor(interval + delta + 0.5), maximum_interval)
        if interval > elapsed_days:
            min_ivl = max(min_ivl, elapsed_days + 1)
        min_ivl = min(min_ivl, max_ivl)
        draw = random.Random(seed).random()
        return int(math.floor(draw * (max_ivl - min_ivl + 1) + min_ivl))
