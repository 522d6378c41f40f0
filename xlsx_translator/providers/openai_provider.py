"""OpenAI provider for translation services."""

import asyncio
from typing import Sequence, Tuple
import logging

import openai
from openai import OpenAI

from .base_provider import BaseProvider
from ..errors import TranslationProviderError
from ..utils import shorten

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a spreadsheet translator. Translate ONLY the text provided. "
    "Do not add ANY formatting, explanations, quotes or extra words. "
    "Keep punctuation, numbers and special characters exactly as they appear in the original. "
    "When translations of terms are given, use them."
)


class OpenAIProvider(BaseProvider):
    """OpenAI translation provider."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        timeout: float = 90.0,
        requests_per_minute: int = 0,
        client=None
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: OpenAI chat model to use (default: gpt-4o)
            timeout: Request timeout in seconds
            requests_per_minute: Request start budget, 0 for unlimited
            client: Preconfigured OpenAI client, mainly for tests
        """
        super().__init__(api_key, model, timeout, requests_per_minute)
        self.client = client or OpenAI(api_key=api_key, timeout=timeout)

    async def translate_single(
        self,
        text: str,
        target_lang: str,
        glossary: Sequence[Tuple[str, str]] = ()
    ) -> str:
        """Translate a single text using the OpenAI chat completions API.

        Args:
            text: Text to translate
            target_lang: Target language name
            glossary: Known (source, target) pairs found inside the text

        Returns:
            Translated text

        Raises:
            TranslationProviderError: On any API failure or an empty answer
        """
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": self.build_prompt(text, target_lang, glossary)}
        ]

        try:
            # Streaming call runs in a worker thread; the client is synchronous.
            content = await asyncio.to_thread(self._complete, messages)
        except openai.OpenAIError as e:
            logger.error(f"Translation error for text '{shorten(text)}': {e}")
            raise TranslationProviderError(f"OpenAI request failed: {e}", text=text) from e

        if not content:
            raise TranslationProviderError("OpenAI returned an empty translation", text=text)

        logger.debug(f"Translated '{shorten(text)}' -> '{shorten(content)}'")
        return content

    def _complete(self, messages) -> str:
        stream = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=0,
            stream=True
        )

        content_list = []
        for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta
            if getattr(delta, "content", None) is not None:
                content_list.append(delta.content)

        return "".join(content_list).strip()
