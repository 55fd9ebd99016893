import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional
from chatmem.config import settings

# Correlation ids for the current HTTP request / CLI invocation and the
# conversation whose turn is being handled
request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
conversation_id_ctx: ContextVar[Optional[str]] = ContextVar("conversation_id", default=None)

LOG_FORMAT = (
    "%(asctime)s | %(levelname)-8s | [%(request_id)s conv=%(conversation_id)s] | "
    "%(name)s:%(funcName)s:%(lineno)d - %(message)s"
)


def get_request_id() -> str:
    """Current request id, minting one for code running outside a request."""
    rid = request_id_ctx.get()
    if rid is None:
        rid = new_request_id()
    return rid


def new_request_id(rid: Optional[str] = None) -> str:
    """Start a request scope, reusing an incoming id if the caller sent one."""
    rid = rid or uuid.uuid4().hex[:12]
    request_id_ctx.set(rid)
    return rid


@contextmanager
def conversation_scope(conversation_id: str) -> Iterator[None]:
    """Tag every record logged inside the block with ``conversation_id``."""
    token = conversation_id_ctx.set(conversation_id)
    try:
        yield
    finally:
        conversation_id_ctx.reset(token)


class CorrelationFilter(logging.Filter):
    """Adds request_id and conversation_id attributes to each record."""
    def filter(self, record):
        record.request_id = get_request_id()
        record.conversation_id = conversation_id_ctx.get() or "-"
        return True


def configure_logging(level: str = "INFO"):
    root = logging.getLogger()
    root.setLevel(level)

    if root.handlers:
        root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(CorrelationFilter())
    root.addHandler(handler)

    # The SDK and its HTTP client log every request at INFO
    for noisy in ("httpx", "openai", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger("chatmem")
