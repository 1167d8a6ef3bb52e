from flask import Blueprint, jsonify

from examprep_app.core.error_handlers import success_response
from examprep_app.modules.catalog.services.catalog_service import CatalogService
from examprep_app.modules.profile.services.profile_storage import get_profile_storage
from examprep_app.modules.shared.utils.request_utils import get_json_payload, get_profile_id, validate_payload
from examprep_app.modules.shared.utils.time_utils import to_iso
from ..engine.core import ExamEngine
from ..schemas import AnswerPayload, CompletePayload, ExamConfigSchema
from ..services.exam_service import ExamService

exam_api_bp = Blueprint('exam_api', __name__)


def _public_question(question):
    # the correct letter stays server-side until the exam is scored
    return {
        'id': question.id,
        'number': question.number,
        'question': question.question,
        'options': [{'letter': o.letter, 'text': o.text} for o in question.options],
    }


def _session_to_dict(session):
    progress = ExamEngine.get_exam_progress(session)
    return {
        'id': session.id,
        'userId': session.user_id,
        'config': session.config.to_dict(),
        'questions': [_public_question(q) for q in session.questions],
        'answers': {qid: a.to_dict() for qid, a in session.answers.items()},
        'startedAt': to_iso(session.started_at),
        'completedAt': to_iso(session.completed_at),
        'progress': {
            'answered': progress.answered,
            'total': progress.total,
            'percentage': progress.percentage,
        },
        'unansweredQuestionIds': [q.id for q in ExamEngine.get_unanswered_questions(session)],
        'questionsBySection': {
            str(number): [q.id for q in questions]
            for number, questions in ExamEngine.get_questions_by_section(session, CatalogService.get_catalog()).items()
        },
    }


@exam_api_bp.route('/sessions', methods=['POST'])
def start_session():
    """
    Start an exam.
    Input (optional): { "questionsPerSection": {"1": 20, ...}, "shuffleQuestions": bool }
    """
    data = get_json_payload()
    config = validate_payload(ExamConfigSchema, data).to_config() if data else None
    session = ExamService.start_exam(get_profile_id(), config)
    return jsonify(success_response(_session_to_dict(session))), 201


@exam_api_bp.route('/sessions/<session_id>', methods=['GET'])
def get_session(session_id):
    return jsonify(success_response(_session_to_dict(ExamService.get_session(session_id))))


@exam_api_bp.route('/sessions/<session_id>/answers', methods=['POST'])
def record_answer(session_id):
    """Input: { "questionId": str, "selectedAnswer": str | null }"""
    payload = validate_payload(AnswerPayload, get_json_payload())
    answer = ExamService.answer(session_id, payload.question_id, payload.selected_answer)
    return jsonify(success_response(answer.to_dict()))


@exam_api_bp.route('/sessions/<session_id>/complete', methods=['POST'])
def complete_session(session_id):
    """Input (optional): { "updateMemory": bool }"""
    payload = validate_payload(CompletePayload, get_json_payload())
    result = ExamService.complete(session_id, update_memory=payload.update_memory)
    return jsonify(success_response(result.to_dict()))


@exam_api_bp.route('/history', methods=['GET'])
def get_history():
    history = get_profile_storage().get_user_history(get_profile_id())
    return jsonify(success_response([entry.to_dict() for entry in history]))


@exam_api_bp.route('/history', methods=['DELETE'])
def clear_history():
    get_profile_storage().clear_exam_history()
    return jsonify(success_response(message='Exam history cleared'))


@exam_api_bp.route('/config', methods=['GET'])
def get_config():
    return jsonify(success_response(ExamService.get_default_config().to_dict()))


@exam_api_bp.route('/config', methods=['PUT'])
def save_config():
    config = validate_payload(ExamConfigSchema, get_json_payload()).to_config()
    ExamService.save_default_config(config)
    return jsonify(success_response(config.to_dict(), 'Exam preferences saved'))
