import pytest

from catalog import create_app
from catalog.extensions import db as _db
from catalog.services import category_service


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def session(db):
    yield db.session


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_category(session):
    """Create a category through the service layer."""

    def _make(name, parent=None, **kwargs):
        return category_service.create_category(
            session, name, parent_id=parent.id if parent else None, **kwargs
        )

    return _make


@pytest.fixture
def chain(make_category):
    """Root A with child B with grandchild C."""
    a = make_category("A")
    b = make_category("B", parent=a)
    c = make_category("C", parent=b)
    return a, b, c
