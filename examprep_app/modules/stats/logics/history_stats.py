from typing import Iterable

from examprep_app.modules.shared.utils.rounding import percentage, round_half_up
from ..schemas import HistoryStats


def calculate_history_stats(history: Iterable) -> HistoryStats:
    """
    Totals over exam history entries (anything with ``score`` and ``passed``).
    Pure: no DB, no Flask context.
    """
    entries = list(history)
    if not entries:
        return HistoryStats()

    total = len(entries)
    passed = sum(1 for e in entries if e.passed)
    return HistoryStats(
        total_exams=total,
        passed_exams=passed,
        average_score=round_half_up(sum(e.score for e in entries), total),
        best_score=max(e.score for e in entries),
        pass_rate=percentage(passed, total),
    )
