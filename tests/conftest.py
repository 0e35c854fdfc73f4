"""
Pytest configuration and fixtures.
"""
import sys
import os
from datetime import date, datetime

import pytest

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__) + '/..'))

from grid_models import Project, Task  # noqa: E402


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    from datagrid import create_app
    from config import Config

    # Use a temporary SQLite file for tests to ensure clean state and speed
    class TestConfig(Config):
        TESTING = True
        import tempfile
        db_fd, db_path = tempfile.mkstemp()
        SQLALCHEMY_DATABASE_URI = f'sqlite:///{db_path}'
        SERVER_NAME = 'localhost.localdomain'
        GRID_SHOW_FILTER = 'always'
        GRID_SHOW_UPPER_PAGINATION_PANEL = False
        GRID_ALLOW_SHOWING_ALL_RECORDS = True
        GRID_SHOW_ALL_ALLOWED_UP_TO = None
        GRID_PER_PAGE = 20

    app = create_app(TestConfig)

    # Initialize database
    with app.app_context():
        from datagrid import db
        db.session.configure(expire_on_commit=False)
        db.create_all()

    return app


@pytest.fixture(scope='function', autouse=True)
def clean_db(app):
    """Clean database between tests."""
    with app.app_context():
        from datagrid import db
        # Drop all tables and recreate them to ensure a clean slate
        db.drop_all()
        db.create_all()
    yield


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    with app.app_context():
        from datagrid import db
        yield db.session
        db.session.remove()


@pytest.fixture(scope='function')
def default_project(app, db_session):
    """Get or create a default Project for testing."""
    project = Project.query.filter_by(name='Website').first()
    if not project:
        project = Project(name='Website')
        db_session.add(project)
        db_session.commit()
    return project


@pytest.fixture(scope='function')
def tasks(app, db_session, default_project):
    """
    30 tasks: 'Task 01'..'Task 30', priority cycling 1..5,
    every third one done, due dates through January 2026,
    created in the afternoon of their due date.
    """
    created = []
    for i in range(1, 31):
        task = Task(
            title=f'Task {i:02d}',
            priority=(i - 1) % 5 + 1,
            done=(i % 3 == 0),
            due_date=date(2026, 1, i),
            created_at=datetime(2026, 1, i, 15, 30),
            status='closed' if i % 3 == 0 else 'open',
            project=default_project,
        )
        db_session.add(task)
        created.append(task)
    db_session.commit()
    return created


@pytest.fixture
def request_ctx(app, db_session):
    """Pushes a request context for the given query string; returns a function."""
    contexts = []

    def push(query_string=None, path='/tasks'):
        ctx = app.test_request_context(path, query_string=query_string or {})
        ctx.push()
        contexts.append(ctx)
        return ctx

    yield push

    for ctx in reversed(contexts):
        ctx.pop()
