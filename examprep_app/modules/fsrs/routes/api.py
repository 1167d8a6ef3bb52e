from flask import Blueprint, jsonify

from examprep_app.core.error_handlers import ValidationError, success_response
from examprep_app.modules.shared.utils.request_utils import get_json_payload, get_profile_id, validate_payload
from examprep_app.modules.shared.utils.time_utils import to_iso, utcnow
from ..engine.core import FSRSEngine
from ..schemas import (
    ExamOutcomePayload,
    ExamPrepPayload,
    MigratePayload,
    ProfileBackup,
    ReviewPayload,
)
from ..services.card_store import CardStore
from ..services.scheduler_service import SchedulerService

fsrs_api_bp = Blueprint('fsrs_api', __name__)


def _card_response(card, now):
    data = card.to_dict()
    data['retrievability'] = round(SchedulerService.get_engine(card.profile_id).get_retrievability(card, now), 4)
    return data


@fsrs_api_bp.route('/review', methods=['POST'])
def process_review():
    """
    Process a card review.
    Input: { "questionId": str, "rating": int (1-4) }
    """
    payload = validate_payload(ReviewPayload, get_json_payload())
    now = utcnow()
    card = SchedulerService.review_card(get_profile_id(), payload.question_id, payload.rating, now)
    return jsonify(success_response(_card_response(card, now), 'Review processed successfully'))


@fsrs_api_bp.route('/review/exam', methods=['POST'])
def process_exam_outcome():
    """Input: { "questionId": str, "isCorrect": bool }"""
    payload = validate_payload(ExamOutcomePayload, get_json_payload())
    now = utcnow()
    card = SchedulerService.review_from_exam(get_profile_id(), payload.question_id, payload.is_correct, now)
    return jsonify(success_response(_card_response(card, now)))


@fsrs_api_bp.route('/preview/<question_id>', methods=['GET'])
def preview_intervals(question_id):
    """
    Get preview intervals for a specific question.
    Output: { "questionId": ..., "previews": { "1": {...}, ..., "4": {...} } }
    """
    previews = SchedulerService.get_schedule_preview(get_profile_id(), question_id)
    return jsonify(success_response({
        'questionId': question_id,
        'previews': {
            str(int(rating)): {**item.to_dict(), 'label': FSRSEngine.format_interval(item.interval_days)}
            for rating, item in previews.items()
        },
    }))


@fsrs_api_bp.route('/due', methods=['GET'])
def get_due_cards():
    queue = SchedulerService.get_due_queue(get_profile_id())
    return jsonify(success_response({
        'count': len(queue),
        'cards': [card.to_dict() for card in queue],
    }))


@fsrs_api_bp.route('/next', methods=['GET'])
def get_next_card():
    card = SchedulerService.get_next_due_card(get_profile_id())
    return jsonify(success_response({'card': card.to_dict() if card else None}))


@fsrs_api_bp.route('/stats', methods=['GET'])
def get_stats():
    return jsonify(success_response(SchedulerService.get_stats(get_profile_id()).to_dict()))


@fsrs_api_bp.route('/config', methods=['GET'])
def get_config():
    return jsonify(success_response(SchedulerService.get_config(get_profile_id()).to_dict()))


@fsrs_api_bp.route('/config', methods=['PUT'])
def update_config():
    config = SchedulerService.update_config(get_profile_id(), get_json_payload())
    return jsonify(success_response(config.to_dict(), 'Settings saved'))


@fsrs_api_bp.route('/config/exam-prep', methods=['POST'])
def set_exam_date():
    """Input: { "examDate": ISO-8601 }"""
    payload = validate_payload(ExamPrepPayload, get_json_payload())
    now = utcnow()
    config = SchedulerService.set_exam_date(get_profile_id(), payload.exam_date, now)
    return jsonify(success_response({
        'config': config.to_dict(),
        'daysUntilExam': FSRSEngine.get_days_until_exam(payload.exam_date, now),
        'examDate': to_iso(payload.exam_date),
    }))


@fsrs_api_bp.route('/migrate', methods=['POST'])
def migrate_viewed_questions():
    """Input: { "viewedQuestionIds": [str, ...] }"""
    payload = validate_payload(MigratePayload, get_json_payload())
    migrated = CardStore.migrate_viewed_questions(
        get_profile_id(), [str(qid) for qid in payload.viewed_question_ids]
    )
    return jsonify(success_response({'migrated': migrated}))


@fsrs_api_bp.route('/export', methods=['GET'])
def export_data():
    return jsonify(success_response(CardStore.export_profile_data(get_profile_id()).to_dict()))


@fsrs_api_bp.route('/import', methods=['POST'])
def import_data():
    try:
        backup = ProfileBackup.from_dict(get_json_payload())
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError('Invalid backup payload', errors=[str(e)]) from e
    CardStore.import_profile_data(get_profile_id(), backup)
    return jsonify(success_response({
        'cards': len(backup.cards),
        'reviewLogs': len(backup.review_logs),
    }, 'Backup imported'))


@fsrs_api_bp.route('/data', methods=['DELETE'])
def clear_data():
    CardStore.clear_profile_data(get_profile_id())
    return jsonify(success_response(message='FSRS data cleared'))
