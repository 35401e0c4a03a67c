from pathlib import Path
import sys
import os

import pytest
from flask import g

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Safety default for any module-level app creation during test imports.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from wevote import create_app
from wevote.extensions import db
from wevote.models import Ballot, BallotOption, Concern, User

HOUR_MS = 60 * 60 * 1000
NOW_MS = 1_700_000_000_000


@pytest.fixture()
def app(tmp_path: Path):
    db_file = tmp_path / "test.sqlite3"
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_file}",
            "SQLALCHEMY_ENGINE_OPTIONS": {},
            "RECEIPTS_SECRET": "test_secret",
            "SIGNING_KEY_PATH": "",
            "RATE_LIMIT_BALLOT_CREATE": (50, 6 * HOUR_MS),
        }
    )

    # The fixture keeps an app context pushed, which Flask reuses for test-client
    # requests; drop Flask-Login's per-context user cache so each request loads
    # its own session's user.
    @app.before_request
    def _reset_login_cache():
        g.pop("_login_user", None)

    with app.app_context():
        driver = db.engine.url.drivername
        if driver != "sqlite":
            raise RuntimeError(
                f"Test database must be SQLite, got '{driver}'. Refusing to run destructive test setup."
            )
        db.drop_all()
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def db_session(app):
    with app.app_context():
        yield db.session


def _make_user(db_session, username, **fields):
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash="hashed-password",
        **fields,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def creator(db_session):
    return _make_user(db_session, "creator1")


@pytest.fixture()
def voters(db_session):
    return [_make_user(db_session, f"voter{i}") for i in range(1, 6)]


@pytest.fixture()
def make_user(db_session):
    def factory(username, **fields):
        return _make_user(db_session, username, **fields)

    return factory


@pytest.fixture()
def concern(db_session, creator):
    concern = Concern(
        concern_id="concern-1",
        title="Fix the crossing on Main St",
        created_by=creator.id,
        created_at=NOW_MS,
    )
    db_session.add(concern)
    db_session.commit()
    return concern


@pytest.fixture()
def ballot_factory(db_session, creator):
    """Insert a ballot row directly, bypassing the creation service."""
    counter = {"n": 0}

    def factory(ballot_type="simple", option_ids=("A", "B", "C"), concern_id=None, **fields):
        counter["n"] += 1
        if concern_id is None:
            concern = Concern(
                concern_id=f"factory-concern-{counter['n']}",
                title=f"Concern {counter['n']}",
                created_by=creator.id,
                created_at=NOW_MS,
            )
            db_session.add(concern)
            concern_id = concern.concern_id
        ballot = Ballot(
            ballot_id=f"ballot-{counter['n']}",
            concern_id=concern_id,
            type=ballot_type,
            status="open",
            created_by=creator.id,
            start_at=NOW_MS,
            end_at=fields.pop("end_at", NOW_MS + 100 * 365 * 24 * HOUR_MS),
            min_tier=fields.pop("min_tier", "basic"),
            min_tier_rank=fields.pop("min_tier_rank", 1),
            created_at=NOW_MS,
            updated_at=NOW_MS,
            **fields,
        )
        db_session.add(ballot)
        for position, option_id in enumerate(option_ids):
            db_session.add(
                BallotOption(
                    ballot_id=ballot.ballot_id,
                    position=position,
                    option_key=option_id,
                    label=f"Option {option_id}",
                )
            )
        db_session.commit()
        return ballot

    return factory


def login_as(client, user):
    with client.session_transaction() as session:
        session["_user_id"] = str(user.id)
        session["_fresh"] = True
    return client


@pytest.fixture()
def auth_client(client, creator):
    return login_as(client, creator)


@pytest.fixture()
def client_for(app):
    def factory(user):
        return login_as(app.test_client(), user)

    return factory
