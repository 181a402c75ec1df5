import pytest
from flask_jwt_extended import create_access_token

from donation_vote import create_app
from donation_vote.config import Config
from donation_vote.extensions import db
from donation_vote.models.target import Target
from donation_vote.services.factory import NOTIFIER_KEY


class RecordingNotifier:
    """Stands in for mail delivery; optionally blows up to simulate SMTP outages."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []
        self.operator_sent = []

    def notify(self, identity, template_kind, data):
        if self.fail:
            raise RuntimeError("smtp unavailable")
        self.sent.append((identity, template_kind, dict(data)))

    def notify_operator(self, template_kind, data):
        if self.fail:
            raise RuntimeError("smtp unavailable")
        self.operator_sent.append((template_kind, dict(data)))


@pytest.fixture
def app(tmp_path):
    # File-backed so threads get their own connections
    class _Config(Config):
        TESTING = True
        SECRET_KEY = "test-secret"
        JWT_SECRET_KEY = "test-jwt-secret-with-enough-length-for-hs256"
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'votes.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 30}}
        MAIL_DEFAULT_SENDER = "votes@example.com"
        MAIL_SUPPRESS_SEND = True
        VOTE_PAGE_URL = "https://shop.example.com/vote"
        PROTECTED_RESOURCES = ("vote-page",)
        HIDE_PROTECTED_RESOURCES = True
        NOTIFICATION_EMAIL_ENABLED = False

    app = create_app(_Config)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def notifier(app):
    recorder = RecordingNotifier()
    app.extensions[NOTIFIER_KEY] = recorder
    return recorder


@pytest.fixture
def client(app, notifier):
    return app.test_client()


@pytest.fixture
def operator_headers(app):
    token = create_access_token(identity="shop-webhook", additional_claims={"role": "OPERATOR"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def targets(app):
    db.session.add_all([
        Target(id=7, name="Platform Seven", status=Target.STATUS_PUBLISHED),
        Target(id=8, name="Platform Eight", status=Target.STATUS_PUBLISHED),
        Target(id=9, name="Draft Platform", status=Target.STATUS_DRAFT),
    ])
    db.session.commit()
    return {7: "Platform Seven", 8: "Platform Eight", 9: "Draft Platform"}
