import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest


BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


class AppEnv:
    def __init__(self, app, client, mailer, dispatcher):
        self.app = app
        self.client = client
        self.mailer = mailer
        self.dispatcher = dispatcher

    @property
    def session_factory(self):
        return self.app.extensions["db_sessionmaker"]

    def token(self, role: str, user_id: str = "00000000-0000-4000-8000-000000000001") -> str:
        from factories import issue_token

        return issue_token(self.app, user_id=user_id, role=role)

    def headers(self, role: str = "mis", user_id: str = "00000000-0000-4000-8000-000000000001") -> dict:
        return {"Authorization": f"Bearer {self.token(role, user_id)}"}

    def drain_notifications(self) -> list:
        self.dispatcher.shutdown(wait=True)
        return self.mailer.sent


@pytest.fixture()
def app_client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    db_path = tmp_path / "test.db"

    monkeypatch.setenv("ENV", "testing")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path.as_posix()}")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    # Prevent accidental pollution from any existing env config.
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.delenv("CORS_ORIGINS", raising=False)

    from factories import FakeMailer
    from jobgenie import create_app
    from jobgenie.approvals import ApprovalWorkflow, NotificationDispatcher

    app = create_app()
    app.testing = True

    # Swap SMTP for an in-memory mailer so tests can assert on outgoing email.
    factory = app.extensions["db_sessionmaker"]
    mailer = FakeMailer()
    dispatcher = NotificationDispatcher(factory, mailer, executor=ThreadPoolExecutor(max_workers=2))
    app.extensions["notifications"].shutdown(wait=False)
    app.extensions["notifications"] = dispatcher
    app.extensions["approvals"] = ApprovalWorkflow(factory, dispatcher)

    with app.test_client() as client:
        yield AppEnv(app, client, mailer, dispatcher)

    dispatcher.shutdown(wait=True)


@pytest.fixture()
def session_factory(tmp_path: Path):
    from jobgenie import models  # noqa: F401
    from jobgenie.db import Base, create_db_engine, create_session_factory

    engine = create_db_engine(f"sqlite:///{(tmp_path / 'workflow.db').as_posix()}")
    Base.metadata.create_all(bind=engine)
    yield create_session_factory(engine)
    engine.dispose()
