import os
import tempfile

# must be set before anything from studymate is imported
_DB_DIR = tempfile.mkdtemp(prefix="studymate-tests-")
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["GENERATION_PROVIDER"] = "gemini"
os.environ["GEMINI_API_KEY"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from studymate.db.base import Base  # noqa: E402
from studymate.db.session import engine  # noqa: E402
from studymate.realtime import BroadcastHub  # noqa: E402
from studymate.services.generation import GenerationProxy  # noqa: E402
from studymate.services.records import RecordStore  # noqa: E402

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


class FakeLLM:
    """Scripted LLM client: returns queued replies in order, or raises `error`."""

    def __init__(self, replies=None, error=None):
        self.replies = list(replies or [])
        self.error = error
        self.calls = []

    def generate(self, prompt: str, temperature: float = 0.2) -> str:
        self.calls.append((prompt, temperature))
        if self.error is not None:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return "ok"


@pytest.fixture(scope="session", autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def store() -> RecordStore:
    return RecordStore(USER_ID)


@pytest.fixture
def other_store() -> RecordStore:
    return RecordStore(OTHER_USER_ID)


@pytest.fixture
def hub() -> BroadcastHub:
    return BroadcastHub()


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def proxy(fake_llm) -> GenerationProxy:
    return GenerationProxy(fake_llm)


@pytest.fixture
def client():
    from studymate.main import app

    with TestClient(app, headers={"X-User-Id": USER_ID}) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_proxy():
    def _make(replies=None, error=None):
        llm = FakeLLM(replies=replies, error=error)
        return GenerationProxy(llm), llm

    return _make
