from flask import Blueprint, jsonify

from examprep_app.core.error_handlers import success_response
from examprep_app.modules.fsrs.engine.core import FSRSEngine
from examprep_app.modules.fsrs.services.card_store import CardStore
from examprep_app.modules.profile.services.profile_storage import get_profile_storage
from examprep_app.modules.shared.utils.request_utils import get_profile_id
from examprep_app.modules.shared.utils.time_utils import to_iso, utcnow
from ..logics.card_stats import calculate_card_stats
from ..logics.history_stats import calculate_history_stats

stats_api_bp = Blueprint('stats_api', __name__)


@stats_api_bp.route('/overview', methods=['GET'])
def get_overview():
    """Exam history summary, card tally and the exam countdown for the current profile."""
    profile_id = get_profile_id()
    now = utcnow()
    config = CardStore.get_config(profile_id)

    exam = None
    if config.has_exam_date:
        exam = {
            'examDate': to_iso(config.exam_date),
            'daysUntilExam': FSRSEngine.get_days_until_exam(config.exam_date, now),
        }

    return jsonify(success_response({
        'history': calculate_history_stats(get_profile_storage().get_user_history(profile_id)).to_dict(),
        'cards': calculate_card_stats(CardStore.get_cards_for_profile(profile_id), now).to_dict(),
        'exam': exam,
    }))
