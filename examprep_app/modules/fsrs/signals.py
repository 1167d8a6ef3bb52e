from blinker import Namespace

# Define a signal namespace for FSRS
_signals = Namespace()

# Signal emitted after a card is reviewed and saved to DB
# Arguments:
# - sender: the SchedulerService class
# - profile_id: str
# - question_id: str
# - rating: int
# - source: 'study' | 'exam'
# - card: MemoryCard (new state)
card_reviewed = _signals.signal('card-reviewed')

# Signal emitted after a profile backup has been committed
# Arguments:
# - sender: the CardStore class
# - profile_id: str
# - cards: int
# - review_logs: int
profile_data_imported = _signals.signal('profile-data-imported')

# Signal emitted after every card, log and config of a profile is deleted
# Arguments:
# - sender: the CardStore class
# - profile_id: str
profile_data_cleared = _signals.signal('profile-data-cleared')
