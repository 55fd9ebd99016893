from typing import List
from sqlmodel import Session, select
from chatmem.config import settings
from chatmem.db import engine, database_dir
from chatmem.models.conversation import Conversation
from chatmem.models.message import Message

def validate_schema() -> List[str]:
    """Validate that required models have table definitions."""
    errors = []

    required_models = [Conversation, Message]
    for model in required_models:
        if not hasattr(model, "__table__"):
            errors.append(f"Model {model.__name__} is missing table definition.")

    return errors

def validate_data_dir() -> List[str]:
    """Validate the SQLite file's directory exists and is writable."""
    errors = []
    data_dir = database_dir(settings.DATABASE_URL)
    if data_dir is None:
        return errors

    if not data_dir.exists():
        errors.append(f"Data directory missing: {data_dir} (run `chatmem db init`)")
        return errors

    try:
        test_file = data_dir / ".write_test"
        test_file.touch()
        test_file.unlink()
    except Exception as e:
        errors.append(f"Cannot write to data directory {data_dir}: {e}")

    return errors

def validate_db_connection() -> List[str]:
    """Validate database connection and basic query capability."""
    errors = []
    try:
        with Session(engine) as session:
            session.exec(select(Conversation).limit(1)).first()
    except Exception as e:
        errors.append(f"Database connection failed: {e}")

    return errors

def validate_model_config() -> List[str]:
    errors = []
    if not (settings.OPENAI_API_KEY and settings.OPENAI_API_KEY.get_secret_value()):
        errors.append("OPENAI_API_KEY is not set.")
    return errors

def run_all_checks() -> List[str]:
    """Run all validation checks."""
    errors = []
    errors.extend(validate_schema())
    errors.extend(validate_data_dir())
    errors.extend(validate_db_connection())
    errors.extend(validate_model_config())
    return errors
