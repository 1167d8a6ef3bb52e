# File: examprep_app/config.py

import os
from dotenv import load_dotenv

load_dotenv()

# examprep_app/ sits one level below the project root
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))

DATABASE_PATH = os.path.join(BASE_DIR, "database", "examprep.db")


class Config:
    """Application configuration for the exam preparation service."""

    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY:
        SECRET_KEY = 'dev-secret-key-replace-in-production'

    SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI') or f'sqlite:///{DATABASE_PATH}'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'connect_args': {'timeout': 30},
    }
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Question catalog (already extracted, JSON)
    CATALOG_PATH = os.environ.get('CATALOG_PATH') or os.path.join(BASE_DIR, 'data', 'questions.json')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR') or os.path.join(BASE_DIR, 'logs')
    LOG_TO_FILE = os.environ.get('LOG_TO_FILE', 'true').lower() == 'true'

    # Single local learner; used when a request does not name a profile
    DEFAULT_PROFILE_ID = os.environ.get('DEFAULT_PROFILE_ID', 'local')

    EXAM_HISTORY_MAX_ENTRIES = 50
    DEFAULT_QUESTIONS_PER_SECTION = {1: 20, 2: 10, 3: 10}

    @classmethod
    def init_app(cls, app):
        """Create the directories the configuration points at."""
        uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
        if uri.startswith('sqlite:///'):
            os.makedirs(os.path.dirname(uri[len('sqlite:///'):]) or '.', exist_ok=True)
        if app.config.get('LOG_TO_FILE'):
            os.makedirs(app.config['LOG_DIR'], exist_ok=True)
