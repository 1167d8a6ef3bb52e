from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict

from flask import current_app
from pydantic import ValidationError as PydanticValidationError

from examprep_app.core.error_handlers import format_validation_errors
from ..exceptions import CatalogError
from ..schemas import CatalogSchema, ExamCatalog

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'examprep_catalog'


class CatalogService:
    """Loads the extracted question catalog and keeps it on the app."""

    @staticmethod
    def parse(data: Dict[str, Any]) -> ExamCatalog:
        try:
            return CatalogSchema.model_validate(data).to_catalog()
        except PydanticValidationError as e:
            raise CatalogError('Invalid question catalog', errors=format_validation_errors(e)) from e

    @staticmethod
    def load_file(path: str) -> ExamCatalog:
        try:
            with open(path, 'r', encoding='utf-8') as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogError(f'Could not read question catalog at {path}: {e}') from e
        catalog = CatalogService.parse(data)
        logger.info(
            "Loaded catalog %s: %d sections, %d questions",
            catalog.version or '<unversioned>', len(catalog.sections), len(catalog.all_questions)
        )
        return catalog

    @staticmethod
    def init_app(app) -> None:
        """Load the configured catalog; a missing file leaves an empty catalog."""
        path = app.config.get('CATALOG_PATH')
        if path and os.path.exists(path):
            catalog = CatalogService.load_file(path)
        else:
            app.logger.warning("No question catalog at %s, starting with an empty catalog", path)
            catalog = ExamCatalog()
        app.extensions[EXTENSION_KEY] = catalog

    @staticmethod
    def set_catalog(app, catalog: ExamCatalog) -> None:
        app.extensions[EXTENSION_KEY] = catalog

    @staticmethod
    def get_catalog() -> ExamCatalog:
        return current_app.extensions.get(EXTENSION_KEY) or ExamCatalog()
