import itertools

import pytest

from learnhub import create_app
from learnhub.extensions import db
from learnhub.models import User
from learnhub.roles import Role
from learnhub.utils.jwt_utils import create_access_token


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "SECRET_KEY": "test-secret-key-0123456789",
        "MAIL_API_URL": "",
        "AUTO_CREATE_TABLES": True,
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Run the test body inside an application context."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    seq = itertools.count(1)

    def _make(role=Role.STUDENT, **kw) -> int:
        n = next(seq)
        with app.app_context():
            u = User(
                name=kw.pop("name", f"User {n}"),
                email=kw.pop("email", f"user{n}@learnhub.test"),
                role=Role(role).value,
                **kw,
            )
            db.session.add(u)
            db.session.commit()
            return int(u.id)

    return _make


@pytest.fixture
def auth_headers(app):
    def _headers(user_id: int) -> dict:
        with app.app_context():
            token = create_access_token(user_id)
        return {"Authorization": f"Bearer {token}"}

    return _headers


def role_of(app, user_id: int) -> str:
    with app.app_context():
        return db.session.get(User, user_id).role
