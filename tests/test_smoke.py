import os
import pytest
from unittest.mock import patch
from typer.testing import CliRunner
from chatmem.config import Settings
from chatmem.cli import app

runner = CliRunner()

def test_settings_load():
    """Verify defaults when only the API key is provided."""
    os.environ["OPENAI_API_KEY"] = "sk-test-dummy-key"
    try:
        settings = Settings(_env_file=None)
        assert settings.MEMORY_WINDOW_SIZE == 10
        assert settings.DESCRIPTION_MAX_CHARS == 30
        assert settings.DESCRIPTION_HARD_TRUNCATE is False
        assert settings.OPENAI_API_KEY.get_secret_value() == "sk-test-dummy-key"
    finally:
        del os.environ["OPENAI_API_KEY"]

def test_settings_reject_empty_window():
    with pytest.raises(ValueError):
        Settings(_env_file=None, MEMORY_WINDOW_SIZE=0)

def test_cli_doctor():
    """Verify the doctor command runs without error."""
    with patch("chatmem.cli.settings") as mock_settings:
        mock_settings.OPENAI_API_KEY.get_secret_value.return_value = "sk-test-dummy-key"
        mock_settings.OPENAI_MODEL_CHAT = "gpt-test"
        mock_settings.MEMORY_WINDOW_SIZE = 10
        mock_settings.DATABASE_URL = "sqlite://"

        result = runner.invoke(app, ["doctor"])
        assert result.exit_code == 0
        assert "chatmem Doctor" in result.stdout
        assert "OPENAI_API_KEY:           ✅ Set" in result.stdout
    assert "Not used by this DATABASE_URL" in result.stdout


@pytest.fixture
def cli_env(engine, model):
    with patch("chatmem.cli._engine", return_value=engine), \
         patch("chatmem.llm.openai_client.get_model_client", return_value=model):
        yield


def test_cli_conversation_flow(cli_env):
    result = runner.invoke(app, ["conversations", "start", "What is 2+2?"])
    assert result.exit_code == 0
    assert "2+2 = 4" in result.stdout
    conversation_id = result.stdout.splitlines()[0].split(": ", 1)[1].strip()

    result = runner.invoke(app, ["conversations", "send", conversation_id, "And 3+3?"])
    assert result.exit_code == 0
    assert "3+3 = 6" in result.stdout

    result = runner.invoke(app, ["conversations", "list"])
    assert f"{conversation_id}  Quick math question  (4 messages)" in result.stdout

    result = runner.invoke(app, ["conversations", "show", conversation_id])
    assert result.stdout.splitlines() == [
        "# Quick math question",
        "[USER] What is 2+2?",
        "[ASSISTANT] 2+2 = 4",
        "[USER] And 3+3?",
        "[ASSISTANT] 3+3 = 6",
    ]


def test_cli_unknown_conversation(cli_env):
    result = runner.invoke(app, ["conversations", "show", "nope"])
    assert result.exit_code == 1
    assert "Conversation not found" in result.stdout


def test_cli_stateless_chat(cli_env):
    result = runner.invoke(app, ["chat", "What is 2+2?"])
    assert result.exit_code == 0
    assert "2+2 = 4" in result.stdout


def test_cli_doctor_reports_data_dir_from_database_url(tmp_path):
    with patch("chatmem.cli.settings") as mock_settings:
        mock_settings.OPENAI_API_KEY = None
        mock_settings.DATABASE_URL = f"sqlite:///{tmp_path}/elsewhere/chat.db"

        result = runner.invoke(app, ["doctor"])
    assert result.exit_code == 0
    assert f"❌ Missing: {tmp_path / 'elsewhere'}" in result.stdout
