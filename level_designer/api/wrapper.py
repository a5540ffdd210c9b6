from openai import AsyncOpenAI
from typing import Dict
import asyncio
import json
import logging

from ..config import AIConfig
from ..constants import FAKE_LAYOUT

logger = logging.getLogger(__name__)

OLLAMA_BASE_URL = "http://localhost:11434/v1"


class LayoutClient:
    """Asynchronous wrapper for an OpenAI-compatible chat completion API."""

    def __init__(self, model_name: str, api_key: str, base_url: str = "", max_retries: int = 5,
                 temperature: float = 1.0):
        """
        Initialize an async API wrapper instance.

        Args:
            model_name: Name of the model to use
            api_key: API key for authentication
            base_url: OpenAI-compatible endpoint; empty for the OpenAI default
            max_retries: Maximum number of retry attempts for failed requests
            temperature: Sampling temperature
        """
        self.model_name = model_name
        self.api_key = api_key
        self.max_retries = max_retries
        self.temperature = temperature

        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url or None
        )

        self.stats = {
            "calls": 0,
            "errors": 0,
            "retries": 0
        }

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Send a prompt pair to the model and return the raw response text.

        Raises:
            Exception: The last API error once retries are exhausted
        """
        for attempt in range(self.max_retries):
            try:
                return await self._complete_once(system_prompt, user_prompt)

            except Exception as e:
                self.stats["errors"] += 1
                self.stats["retries"] += 1

                logger.warning(f"API call failed (attempt {attempt + 1}/{self.max_retries}): {str(e)}")

                if attempt == self.max_retries - 1:
                    raise

                # Exponential backoff before retrying
                retry_delay = 2 ** attempt
                await asyncio.sleep(retry_delay)

    async def _complete_once(self, system_prompt: str, user_prompt: str) -> str:
        completion = await self.client.chat.completions.create(
            model=self.model_name,
            messages=[
                {
                    'role': 'system',
                    'content': system_prompt
                },
                {
                    'role': 'user',
                    'content': user_prompt
                }
            ],
            response_format={"type": "json_object"},
            stream=False,
            temperature=self.temperature
        )

        self.stats["calls"] += 1
        return completion.choices[0].message.content or ""

    def get_stats(self) -> Dict[str, int]:
        """Get usage statistics for this API instance."""
        return self.stats.copy()


class FakeClient:
    """Offline client returning a canned response; wraps it like a provider would if asked."""

    def __init__(self, response: str = "", as_envelope: bool = False):
        self.response = response or json.dumps(FAKE_LAYOUT)
        self.as_envelope = as_envelope
        self.stats = {"calls": 0, "errors": 0, "retries": 0}

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.stats["calls"] += 1
        if self.as_envelope:
            return json.dumps({"choices": [{"message": {"role": "assistant", "content": self.response}}]})
        return self.response

    def get_stats(self) -> Dict[str, int]:
        return self.stats.copy()


def create_client(config: AIConfig):
    """Build the client for config.provider."""
    if config.provider == "openai":
        return LayoutClient(config.model, config.api_key, config.endpoint, config.max_retries, config.temperature)
    if config.provider == "ollama":
        # Ollama ignores the key but the SDK requires one
        return LayoutClient(config.model, config.api_key or "ollama", config.endpoint or OLLAMA_BASE_URL,
                            config.max_retries, config.temperature)
    return FakeClient()
