from examprep_app.core.error_handlers import ExamPrepError


class ExamError(ExamPrepError):
    """Base exception for the exam module."""

    def __init__(self, message: str, code: str = 'EXAM_ERROR', status_code: int = 400, details=None):
        super().__init__(message=message, code=code, status_code=status_code, details=details)


class QuestionNotFoundError(ExamError):
    """Raised when an answer names a question that is not part of the session."""

    def __init__(self, question_id: str, session_id: str = None):
        super().__init__(
            message=f"Question {question_id} not found in session",
            code='QUESTION_NOT_FOUND',
            status_code=404,
            details={'question_id': question_id, 'session_id': session_id}
        )
        self.question_id = question_id


class SessionNotFoundError(ExamError):
    """Raised when no in-flight exam session has the given id."""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Exam session {session_id} not found",
            code='SESSION_NOT_FOUND',
            status_code=404,
            details={'session_id': session_id}
        )
