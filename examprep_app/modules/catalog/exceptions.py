from examprep_app.core.error_handlers import ExamPrepError


class CatalogError(ExamPrepError):
    """Raised when a catalog file cannot be read or is structurally invalid."""

    def __init__(self, message: str, errors=None):
        super().__init__(
            message=message,
            code='CATALOG_ERROR',
            status_code=500,
            details={'errors': errors} if errors else None
        )
