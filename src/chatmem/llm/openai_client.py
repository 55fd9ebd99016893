"""
Model collaborator: turns an ordered list of {role, content} messages into a reply.

Everything above this module only sees ``ModelClient.complete`` and the
``ModelUnavailable`` error; SDK exceptions never leak past it.
"""
from functools import lru_cache
from typing import Dict, List, Optional, Protocol, Sequence
from openai import OpenAI, OpenAIError
from chatmem.config import settings
from chatmem.errors import ChatMemoryError, ModelUnavailable
from chatmem.logging import logger


class ModelClient(Protocol):
    def complete(self, messages: Sequence[Dict[str, str]]) -> str:
        ...


class OpenAIModelClient:
    """ModelClient backed by the OpenAI Chat Completions API."""

    def __init__(
        self,
        client: Optional[OpenAI] = None,
        model: Optional[str] = None,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        self._client = client
        self.model = model or settings.OPENAI_MODEL_CHAT
        self.system_prompt = system_prompt if system_prompt is not None else settings.SYSTEM_PROMPT
        self.temperature = temperature if temperature is not None else settings.OPENAI_TEMPERATURE

    @property
    def client(self) -> OpenAI:
        # Built on first use so importing the app never requires an API key
        if self._client is None:
            api_key = settings.OPENAI_API_KEY.get_secret_value() if settings.OPENAI_API_KEY else None
            try:
                self._client = OpenAI(
                    api_key=api_key,
                    timeout=settings.OPENAI_TIMEOUT_SECONDS,
                    max_retries=settings.OPENAI_MAX_RETRIES,
                )
            except OpenAIError as e:
                logger.error(f"OpenAI client could not be configured: {e}")
                raise ModelUnavailable("Language model is not configured") from e
        return self._client

    def build_messages(self, messages: Sequence[Dict[str, str]]) -> List[Dict[str, str]]:
        payload = [{"role": m["role"], "content": m["content"]} for m in messages]
        if self.system_prompt:
            payload.insert(0, {"role": "system", "content": self.system_prompt})
        return payload

    def complete(self, messages: Sequence[Dict[str, str]]) -> str:
        """
        Call the chat model with the given context.
        Raises ModelUnavailable on any upstream failure or an empty reply.
        """
        kwargs = {
            "model": self.model,
            "messages": self.build_messages(messages),
        }
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature

        try:
            response = self.client.chat.completions.create(**kwargs)
        except OpenAIError as e:
            logger.error(f"OpenAI Chat API call failed: {e}")
            raise ModelUnavailable("Language model request failed") from e

        if not response.choices:
            logger.error("OpenAI Chat API returned no choices")
            raise ModelUnavailable("Language model returned no reply")

        choice = response.choices[0]
        content = choice.message.content
        usage = response.usage
        logger.info(
            f"Model call: model={self.model} messages={len(kwargs['messages'])} "
            f"tokens={usage.total_tokens if usage else 0} finish_reason={choice.finish_reason}"
        )

        if not content or not content.strip():
            logger.error(f"OpenAI Chat API returned an empty reply (finish_reason={choice.finish_reason})")
            raise ModelUnavailable("Language model returned an empty reply")
        return content


def complete_with(model: ModelClient, messages: Sequence[Dict[str, str]]) -> str:
    """Call any ModelClient, folding unexpected failures into ModelUnavailable."""
    try:
        reply = model.complete(messages)
    except ChatMemoryError:
        raise
    except Exception as e:
        logger.exception(f"Model client {type(model).__name__} failed: {e}")
        raise ModelUnavailable("Language model request failed") from e

    if not isinstance(reply, str) or not reply.strip():
        raise ModelUnavailable("Language model returned an empty reply")
    return reply


@lru_cache(maxsize=1)
def get_model_client() -> OpenAIModelClient:
    return OpenAIModelClient()
