from flask import Blueprint, jsonify

from examprep_app.core.error_handlers import NotFoundError, success_response
from ..services.catalog_service import CatalogService

catalog_api_bp = Blueprint('catalog_api', __name__)


def _question_to_dict(question):
    return {
        'id': question.id,
        'number': question.number,
        'question': question.question,
        'options': [{'letter': o.letter, 'text': o.text} for o in question.options],
        'correctAnswer': question.correct_answer,
    }


@catalog_api_bp.route('', methods=['GET'])
def get_catalog_summary():
    catalog = CatalogService.get_catalog()
    return jsonify(success_response({
        'version': catalog.version,
        'extractedAt': catalog.extracted_at,
        'totalQuestions': len(catalog.all_questions),
        'sections': [
            {
                'sectionNumber': s.section_number,
                'title': s.title,
                'titleEn': s.title_en,
                'questionCount': len(s.questions),
            }
            for s in catalog.sections
        ],
    }))


@catalog_api_bp.route('/sections/<int:section_number>', methods=['GET'])
def get_section(section_number):
    section = CatalogService.get_catalog().get_section(section_number)
    if section is None:
        raise NotFoundError(f'Section {section_number} not found', resource='section')
    return jsonify(success_response({
        'sectionNumber': section.section_number,
        'title': section.title,
        'questions': [_question_to_dict(q) for q in section.questions],
    }))
