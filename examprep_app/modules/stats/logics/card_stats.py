import datetime
from typing import Iterable, Optional

from examprep_app.modules.fsrs.engine.core import FSRSEngine
from examprep_app.modules.fsrs.schemas import CardState, FSRSStats
from examprep_app.modules.shared.utils.time_utils import ensure_utc, utcnow

_STATE_FIELDS = {
    CardState.New: 'new_cards',
    CardState.Learning: 'learning_cards',
    CardState.Review: 'review_cards',
    CardState.Relearning: 'relearning_cards',
}


def calculate_card_stats(cards: Iterable, now: Optional[datetime.datetime] = None) -> FSRSStats:
    """Tally of a card population by state, plus how many are due at ``now``."""
    now = ensure_utc(now) if now else utcnow()
    stats = FSRSStats()
    for card in cards:
        stats.total_cards += 1
        field_name = _STATE_FIELDS[CardState(card.state)]
        setattr(stats, field_name, getattr(stats, field_name) + 1)
        if FSRSEngine.is_card_due(card, now):
            stats.due_now += 1
    return stats
