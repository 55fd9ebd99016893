import sys
import typer
from sqlmodel import Session
from chatmem.config import settings
from chatmem.db import database_dir
from chatmem.errors import ChatMemoryError, ConversationNotFound
from chatmem.logging import logger, get_request_id

app = typer.Typer(no_args_is_help=True)

@app.callback()
def main():
    """
    Chat with memory: stateless chat and persistent conversations.
    """
    pass

@app.command(name="doctor")
def doctor():
    """
    Check system configuration and environment health.
    """
    logger.info("Running doctor check...")

    print("\n🩺 chatmem Doctor\n")

    print(f"Python: {sys.version.split()[0]}")
    print(f"Prefix: {sys.prefix}")
    print(f"Request ID: {get_request_id()}")

    print("\n[Configuration]")
    print(f"OPENAI_MODEL_CHAT:        {settings.OPENAI_MODEL_CHAT}")
    print(f"MEMORY_WINDOW_SIZE:       {settings.MEMORY_WINDOW_SIZE}")
    print(f"DEFAULT_OWNER_ID:         {settings.DEFAULT_OWNER_ID}")
    print(f"DESCRIPTION_MAX_CHARS:    {settings.DESCRIPTION_MAX_CHARS}")
    print(f"DATABASE_URL:             {settings.DATABASE_URL}")

    # Mask API Key
    api_key_status = "✅ Set" if settings.OPENAI_API_KEY and settings.OPENAI_API_KEY.get_secret_value() else "❌ Missing"
    print(f"OPENAI_API_KEY:           {api_key_status}")

    data_dir = database_dir(settings.DATABASE_URL)
    if data_dir is None:
        print("\n[Data Directory]          ➖ Not used by this DATABASE_URL")
    elif data_dir.exists() and data_dir.is_dir():
        print(f"\n[Data Directory]          ✅ Found: {data_dir.absolute()}")
    else:
        print(f"\n[Data Directory]          ❌ Missing: {data_dir.absolute()} (run `chatmem db init`)")

    print("\nDoctor check complete.")


db_app = typer.Typer(help="Database management commands.")
app.add_typer(db_app, name="db")

@db_app.command("init")
def init():
    """Initialize the database tables."""
    from chatmem.db import init_db
    try:
        init_db()
        logger.info("Database initialized successfully.")
        print("✅ Database initialized.")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        print(f"❌ Failed: {e}")
        raise typer.Exit(code=1)


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the HTTP API with uvicorn."""
    import uvicorn
    uvicorn.run("chatmem.api.app:create_app", host=host, port=port, reload=reload, factory=True)


@app.command("chat")
def chat(message: str):
    """Send a one-off message with no memory."""
    from chatmem.chat.simple import SimpleChatService
    from chatmem.llm.openai_client import get_model_client
    try:
        reply = SimpleChatService(get_model_client()).chat(message)
    except ChatMemoryError as e:
        print(f"❌ {e}")
        raise typer.Exit(code=1)
    print(reply)


conv_app = typer.Typer(help="Persistent conversations with memory.")
app.add_typer(conv_app, name="conversations")


def _service(session: Session):
    from chatmem.chat.service import ConversationService
    from chatmem.llm.openai_client import get_model_client
    return ConversationService.from_session(session, get_model_client())


def _engine():
    from chatmem.db import engine, init_db
    init_db(engine)
    return engine


@conv_app.command("list")
def list_conversations(owner: str = typer.Option(None, help="Owner id (defaults to DEFAULT_OWNER_ID)")):
    """List conversations, newest first."""
    with Session(_engine()) as session:
        service = _service(session)
        items = service.list_conversations(owner_id=owner)
        if not items:
            print("No conversations yet.")
            return
        for item in items:
            print(f"{item.id}  {item.description}  ({service.message_count(item.id)} messages)")


@conv_app.command("show")
def show(conversation_id: str):
    """Print the full transcript of a conversation."""
    with Session(_engine()) as session:
        try:
            service = _service(session)
            conversation = service.get_conversation(conversation_id)
            messages = service.get_transcript(conversation_id)
        except ConversationNotFound as e:
            print(f"❌ {e}")
            raise typer.Exit(code=1)
        print(f"# {conversation.description}")
        for m in messages:
            print(f"[{m.role.value}] {m.content}")


@conv_app.command("start")
def start(message: str, owner: str = typer.Option(None, help="Owner id (defaults to DEFAULT_OWNER_ID)")):
    """Start a conversation with its first message."""
    with Session(_engine()) as session:
        try:
            started = _service(session).create_conversation_with_first_message(message, owner_id=owner)
        except ChatMemoryError as e:
            print(f"❌ {e}")
            raise typer.Exit(code=1)
    print(f"Conversation: {started.conversation_id}")
    print(f"Description:  {started.description}")
    print(started.reply)


@conv_app.command("send")
def send(conversation_id: str, message: str):
    """Continue an existing conversation."""
    with Session(_engine()) as session:
        try:
            reply = _service(session).send_message(conversation_id, message)
        except ChatMemoryError as e:
            print(f"❌ {e}")
            raise typer.Exit(code=1)
    print(reply)

if __name__ == "__main__":
    app()
