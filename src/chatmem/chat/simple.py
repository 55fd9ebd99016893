from chatmem.llm.openai_client import ModelClient, complete_with
from chatmem.logging import logger
from chatmem.models.message import MessageRole


class SimpleChatService:
    """Stateless one-shot chat: no stored context, nothing persisted."""

    def __init__(self, model: ModelClient):
        self.model = model

    def chat(self, message: str) -> str:
        logger.info("Stateless chat request")
        return complete_with(self.model, [{"role": MessageRole.USER.model_role, "content": message}])
