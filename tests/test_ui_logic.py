from unittest.mock import patch
from chatmem.db import database_dir
from chatmem.ui.validation import validate_schema, validate_db_connection, validate_data_dir, validate_model_config

def test_validation():
    errors = validate_schema()
    assert not errors

    with patch("chatmem.ui.validation.Session"):
        errors = validate_db_connection()
        assert not errors

def test_db_connection_failure_reported():
    with patch("chatmem.ui.validation.Session", side_effect=RuntimeError("no db")):
        errors = validate_db_connection()
    assert errors and "no db" in errors[0]

def test_database_dir_follows_url(tmp_path):
    assert database_dir(f"sqlite:///{tmp_path}/elsewhere/chat.db") == tmp_path / "elsewhere"
    assert database_dir("sqlite:///data/chatmem.db").as_posix() == "data"
    assert database_dir("sqlite://") is None
    assert database_dir("sqlite:///:memory:") is None
    assert database_dir("postgresql://user@localhost/chat") is None

def test_data_dir_missing(tmp_path):
    with patch("chatmem.ui.validation.settings") as mock_settings:
        mock_settings.DATABASE_URL = f"sqlite:///{tmp_path}/missing/chat.db"
        errors = validate_data_dir()
    assert errors and "missing" in errors[0]

def test_data_dir_writable(tmp_path):
    with patch("chatmem.ui.validation.settings") as mock_settings:
        mock_settings.DATABASE_URL = f"sqlite:///{tmp_path}/chat.db"
        assert validate_data_dir() == []

def test_data_dir_not_needed_in_memory():
    with patch("chatmem.ui.validation.settings") as mock_settings:
        mock_settings.DATABASE_URL = "sqlite://"
        assert validate_data_dir() == []

def test_model_config():
    with patch("chatmem.ui.validation.settings") as mock_settings:
        mock_settings.OPENAI_API_KEY = None
        assert validate_model_config() == ["OPENAI_API_KEY is not set."]
