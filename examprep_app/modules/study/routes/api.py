from flask import Blueprint, jsonify, request

from examprep_app.core.error_handlers import NotFoundError, success_response
from examprep_app.modules.catalog.services.catalog_service import CatalogService
from examprep_app.modules.profile.services.profile_storage import get_profile_storage
from examprep_app.modules.shared.utils.request_utils import get_json_payload, get_profile_id, validate_payload
from ..engine.core import StudyEngine
from ..schemas import ALL_SECTIONS, ViewedPayload

study_api_bp = Blueprint('study_api', __name__)


def _restored_session(section_number):
    """A study session over ``section_number`` with the learner's saved progress loaded."""
    profile_id = get_profile_id()
    catalog = CatalogService.get_catalog()
    if section_number != ALL_SECTIONS and catalog.get_section(section_number) is None:
        raise NotFoundError(f'Section {section_number} not found', resource='section')
    session = StudyEngine.create_study_session(catalog, section_number, profile_id)
    StudyEngine.load_viewed_questions(session, get_profile_storage().load_study_progress(profile_id))
    return session, catalog


@study_api_bp.route('/questions', methods=['GET'])
def get_questions():
    """Questions of ``?section=N`` (0 or absent = all), answers included, with viewed flags."""
    session, _ = _restored_session(request.args.get('section', ALL_SECTIONS, type=int))
    return jsonify(success_response([
        {
            'id': q.id,
            'number': q.number,
            'question': q.question,
            'options': [{'letter': o.letter, 'text': o.text} for o in q.options],
            'correctAnswer': q.correct_answer,
            'viewed': q.id in session.viewed_questions,
        }
        for q in session.questions
    ]))


@study_api_bp.route('/progress', methods=['GET'])
def get_progress():
    session, catalog = _restored_session(request.args.get('section', ALL_SECTIONS, type=int))
    return jsonify(success_response({
        'sections': [p.to_dict() for p in StudyEngine.get_study_progress(session, catalog)],
        'total': StudyEngine.get_total_study_progress(session).to_dict(),
    }))


@study_api_bp.route('/viewed', methods=['POST'])
def mark_viewed():
    """Input: { "questionId": str }"""
    payload = validate_payload(ViewedPayload, get_json_payload())
    if payload.question_id not in CatalogService.get_catalog().question_index():
        raise NotFoundError(f'Question {payload.question_id} not found', resource='question')

    session, _ = _restored_session(ALL_SECTIONS)
    StudyEngine.mark_question_viewed(session, payload.question_id)
    get_profile_storage().save_study_progress(session.user_id, session.viewed_questions)
    return jsonify(success_response(StudyEngine.get_total_study_progress(session).to_dict()))


@study_api_bp.route('/progress', methods=['DELETE'])
def clear_progress():
    get_profile_storage().clear_study_progress(get_profile_id())
    return jsonify(success_response(message='Study progress cleared'))


@study_api_bp.route('/progress/migrate', methods=['POST'])
def migrate_progress():
    """Turn every viewed question into a memory card (existing cards are kept)."""
    from examprep_app.modules.fsrs.services.card_store import CardStore

    profile_id = get_profile_id()
    viewed = get_profile_storage().load_study_progress(profile_id)
    migrated = CardStore.migrate_viewed_questions(profile_id, viewed)
    return jsonify(success_response({'migrated': migrated, 'viewed': len(viewed)}))
