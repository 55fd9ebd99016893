"""Shared fixtures: in-memory database and a scripted stand-in for the language model."""
import pytest
from sqlmodel import Session
from chatmem.chat.service import DESCRIPTION_PROMPT
from chatmem.db import init_db, make_engine
from chatmem.errors import ModelUnavailable

DESCRIPTION_MARKER = DESCRIPTION_PROMPT.split("{limit}")[0]


class ScriptedModel:
    """Answers arithmetic, titles conversations, echoes everything else. Records every call."""

    def __init__(self, description: str = "Quick math question", fail_on: str | None = None):
        self.description = description
        self.fail_on = fail_on
        self.calls = []

    @property
    def chat_calls(self):
        return [c for c in self.calls if not c[-1]["content"].startswith(DESCRIPTION_MARKER)]

    def complete(self, messages):
        self.calls.append([dict(m) for m in messages])
        last = messages[-1]["content"]
        is_description = last.startswith(DESCRIPTION_MARKER)

        if self.fail_on == "all" or (self.fail_on == "description" and is_description) or (
            self.fail_on == "reply" and not is_description
        ):
            raise ModelUnavailable("model is down")

        if is_description:
            return self.description
        if "2+2" in last:
            return "2+2 = 4"
        if "3+3" in last:
            return "3+3 = 6"
        return f"echo: {last}"


@pytest.fixture(name="engine")
def engine_fixture():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def model():
    return ScriptedModel()
