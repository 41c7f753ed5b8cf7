import pytest
from flask_jwt_extended import create_access_token

from course_builder import create_app
from course_builder.domain.tree import Column, Document, Section, Widget
from course_builder.extensions import db
from course_builder.models.user import User
from course_builder.widgets.catalog import build_default_registry


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def sample_document():
    """One section, two half-width columns, three widgets."""
    return Document(sections=[
        Section(id="section_1", columns=[
            Column(id="col_1", width=50, widgets=[
                Widget(id="widget_1", type="heading", settings={"text": "Welcome", "level": "h1"}),
                Widget(id="widget_2", type="text", settings={"content": "Hello"}),
            ]),
            Column(id="col_2", width=50, widgets=[
                Widget(id="widget_3", type="button", settings={"text": "Enroll", "link_url": "/enroll"}),
            ]),
        ]),
    ])


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make(email="editor@example.com", password="s3cret-pass", role="editor", is_active=True):
        user = User()
        user.email = email
        user.role = role
        user.is_active = is_active
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture
def auth_headers(make_user):
    def _headers(role="editor"):
        user = make_user(email=f"{role}@example.com", role=role)
        token = create_access_token(identity=user.id, additional_claims={"role": role})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def editor_headers(auth_headers):
    return auth_headers("editor")
