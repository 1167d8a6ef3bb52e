from blinker import Namespace

_signals = Namespace()

# Signal emitted after an exam result is written to history
# Arguments:
# - sender: the ExamService class
# - session_id: str
# - user_id: str
# - result: ExamResult
exam_completed = _signals.signal('exam-completed')
