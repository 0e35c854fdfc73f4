import os
from dotenv import load_dotenv

# Load environment variables from .env file
BASE_DIR = os.path.abspath(os.path.dirname(__file__))
dotenv_path = os.path.join(BASE_DIR, '.env')

# Load the .env file from that specific path
load_dotenv(dotenv_path=dotenv_path)


class Config:
    """Base configuration class."""

    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-fallback-secret-key-change-in-prod'
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL') or 'sqlite:///' + os.path.join(BASE_DIR, 'datagrid.db')

    # Flask-SQLAlchemy settings
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_recycle': 280}
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Grid defaults, overridable per grid through the helper options

    GRID_SHOW_FILTER = os.getenv('GRID_SHOW_FILTER', 'always')
    GRID_SHOW_UPPER_PAGINATION_PANEL = os.getenv('GRID_SHOW_UPPER_PAGINATION_PANEL', 'false').lower() in ['true', 'on', '1']
    GRID_ALLOW_SHOWING_ALL_RECORDS = os.getenv('GRID_ALLOW_SHOWING_ALL_RECORDS', 'true').lower() in ['true', 'on', '1']
    GRID_REUSE_LAST_COLUMN_FOR_FILTER_ICONS = True
    GRID_DEFAULT_TABLE_CLASSES = ['table', 'table-bordered', 'table-striped']
    GRID_PAGINATION_THEME = os.getenv('GRID_PAGINATION_THEME', 'default')
    GRID_PER_PAGE = int(os.getenv('GRID_PER_PAGE', 20))

    # "Show all records" asks for confirmation above this number of records
    GRID_START_SHOWING_WARNING_FROM = 100
    # None means no limit
    GRID_SHOW_ALL_ALLOWED_UP_TO = int(os.environ['GRID_SHOW_ALL_ALLOWED_UP_TO']) if os.getenv('GRID_SHOW_ALL_ALLOWED_UP_TO') else None

    # Overrides for user-facing grid strings, keyed like datagrid.messages.MESSAGES
    GRID_MESSAGES = {}
