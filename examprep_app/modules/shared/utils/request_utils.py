"""Request helpers shared by the JSON blueprints."""

from typing import Any, Dict, Type, TypeVar

from flask import current_app, request
from pydantic import BaseModel, ValidationError as PydanticValidationError

from examprep_app.core.error_handlers import ValidationError, format_validation_errors

ModelT = TypeVar('ModelT', bound=BaseModel)


def get_json_payload() -> Dict[str, Any]:
    """Request body as a dict; an empty or non-object body is an empty dict."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def validate_payload(model: Type[ModelT], data: Dict[str, Any]) -> ModelT:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError('Invalid request payload', errors=format_validation_errors(e)) from e


def get_profile_id() -> str:
    """Profile named by ``?profileId=``, else the configured local learner."""
    return request.args.get('profileId') or current_app.config.get('DEFAULT_PROFILE_ID', 'local')
