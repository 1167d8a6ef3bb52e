import datetime
import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from examprep_app import create_app, db
from examprep_app.config import Config
from examprep_app.modules.catalog.services.catalog_service import CatalogService


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'connect_args': {'check_same_thread': False}
    }
    LOG_TO_FILE = False
    LOG_LEVEL = 'DEBUG'
    # no catalog on disk; tests install one explicitly
    CATALOG_PATH = os.path.join(os.path.dirname(__file__), 'no-such-catalog.json')
    DEFAULT_PROFILE_ID = 'tester'


LETTERS = ['А', 'Б', 'В', 'Г']


def _question(section, number, correct):
    return {
        'id': f's{section}-q{number}',
        'number': number,
        'question': f'Section {section}, question {number}?',
        'options': [{'letter': letter, 'text': f'Option {letter}'} for letter in LETTERS],
        'correctAnswer': correct,
    }


CATALOG_DATA = {
    'version': '2024.1',
    'extractedAt': '2024-01-15T10:00:00Z',
    'sections': [
        {
            'metadata': {'sectionNumber': 1, 'title': 'Electrical engineering', 'titleEn': 'Electrical engineering'},
            'questions': [_question(1, n, 'А') for n in range(1, 6)],
        },
        {
            'metadata': {'sectionNumber': 2, 'title': 'Codes and abbreviations'},
            'questions': [_question(2, n, 'Б') for n in range(1, 4)],
        },
        {
            'metadata': {'sectionNumber': 3, 'title': 'Regulations'},
            'questions': [_question(3, n, 'В') for n in range(1, 3)],
        },
    ],
}


@pytest.fixture
def catalog_data():
    return CATALOG_DATA


@pytest.fixture
def catalog():
    return CatalogService.parse(CATALOG_DATA)


@pytest.fixture
def now():
    return datetime.datetime(2024, 3, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)


@pytest.fixture
def app(catalog):
    app = create_app(TestConfig)
    CatalogService.set_catalog(app, catalog)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()
