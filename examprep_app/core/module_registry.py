"""Blueprint registration for the ExamPrep feature modules.

Every module exposes one JSON blueprint from ``routes/api.py``. The table at
the bottom of this file maps each one to its ``/api/<module>`` prefix, so
adding a module is one line here and nothing in the app factory.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from flask import Blueprint, Flask
from werkzeug.utils import import_string


@dataclass(frozen=True)
class ModuleDefinition:
    """Where a module's blueprint lives and the URL prefix it is mounted under."""

    import_path: str
    attribute: str
    url_prefix: Optional[str] = None

    def load_blueprint(self) -> Blueprint:
        """Import ``import_path`` and return its ``attribute`` blueprint."""

        module = import_string(self.import_path)
        blueprint = getattr(module, self.attribute, None)
        if not isinstance(blueprint, Blueprint):
            raise TypeError(
                "%s.%s should be a Flask Blueprint, found %r"
                % (self.import_path, self.attribute, type(blueprint))
            )
        return blueprint


def register_modules(app: Flask, modules: Sequence[ModuleDefinition]) -> None:
    """Mount each module's blueprint on ``app``."""

    for module in modules:
        blueprint = module.load_blueprint()
        app.register_blueprint(blueprint, url_prefix=module.url_prefix)
        app.logger.debug("Mounted %s at %s", blueprint.name, module.url_prefix or "/")


def register_default_modules(app: Flask) -> None:
    """Mount catalog, exam, fsrs, profile, study and stats."""

    register_modules(app, DEFAULT_MODULES)


DEFAULT_MODULES: Iterable[ModuleDefinition] = (
    ModuleDefinition("examprep_app.modules.catalog.routes.api", "catalog_api_bp", url_prefix="/api/catalog"),
    ModuleDefinition("examprep_app.modules.exam.routes.api", "exam_api_bp", url_prefix="/api/exam"),
    ModuleDefinition("examprep_app.modules.fsrs.routes.api", "fsrs_api_bp", url_prefix="/api/fsrs"),
    ModuleDefinition("examprep_app.modules.profile.routes.api", "profile_api_bp", url_prefix="/api/profile"),
    ModuleDefinition("examprep_app.modules.study.routes.api", "study_api_bp", url_prefix="/api/study"),
    ModuleDefinition("examprep_app.modules.stats.routes.api", "stats_api_bp", url_prefix="/api/stats"),
)
