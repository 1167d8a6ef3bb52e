from flask import Blueprint, jsonify

from examprep_app.core.error_handlers import NotFoundError, success_response
from examprep_app.modules.shared.utils.request_utils import get_json_payload, validate_payload
from ..schemas import ProfilePayload
from ..services.profile_storage import get_profile_storage

profile_api_bp = Blueprint('profile_api', __name__)


@profile_api_bp.route('', methods=['GET'])
def get_profile():
    profile = get_profile_storage().load_user_profile()
    return jsonify(success_response({'profile': profile.to_dict() if profile else None}))


@profile_api_bp.route('', methods=['POST'])
def create_profile():
    """Input: { "name": str }. Replaces any existing profile."""
    payload = validate_payload(ProfilePayload, get_json_payload())
    storage = get_profile_storage()
    profile = storage.create_user_profile(payload.name)
    storage.save_user_profile(profile)
    return jsonify(success_response({'profile': profile.to_dict()}, 'Profile created')), 201


@profile_api_bp.route('/touch', methods=['POST'])
def touch_profile():
    storage = get_profile_storage()
    profile = storage.load_user_profile()
    if profile is None:
        raise NotFoundError('No profile saved', resource='profile')
    return jsonify(success_response({'profile': storage.update_last_active(profile).to_dict()}))


@profile_api_bp.route('', methods=['DELETE'])
def delete_profile():
    get_profile_storage().clear_user_profile()
    return jsonify(success_response(message='Profile cleared'))
