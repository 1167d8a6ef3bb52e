from examprep_app.core.error_handlers import ExamPrepError


class FSRSError(ExamPrepError):
    """Base exception for FSRS module."""

    def __init__(self, message: str, code: str = 'FSRS_ERROR', status_code: int = 400, details=None):
        super().__init__(message=message, code=code, status_code=status_code, details=details)


class InvalidRatingError(FSRSError):
    """Raised when the provided rating is not valid (must be 1-4)."""

    def __init__(self, rating):
        super().__init__(
            message=f"Invalid rating {rating!r}: must be 1 (Again) to 4 (Easy)",
            code='INVALID_RATING',
            details={'rating': rating}
        )


class InvalidConfigError(FSRSError):
    """Raised when scheduler settings or a profile backup fail validation."""

    def __init__(self, message: str, errors=None):
        super().__init__(
            message=message,
            code='INVALID_CONFIG',
            details={'errors': errors} if errors else None
        )
