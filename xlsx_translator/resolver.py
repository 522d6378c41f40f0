"""Resolve cell text to its translation via the dictionary or a provider."""

import asyncio
import logging
from typing import Dict

from .dictionary import DictionaryStore
from .errors import TranslationProviderError
from .providers import BaseProvider
from .utils import is_translatable, normalize_key, shorten

logger = logging.getLogger(__name__)


class TranslationResolver:
    """Translate text, preferring the dictionary over the provider.

    Provider results are written back into the dictionary so each unique
    text costs at most one provider call per run. Concurrent resolves of
    the same text share a single in-flight request.
    """

    def __init__(self, dictionary: DictionaryStore, provider: BaseProvider, target_lang: str = "Romanian"):
        self.dictionary = dictionary
        self.provider = provider
        self.target_lang = target_lang
        self.provider_calls = 0
        self.dictionary_hits = 0
        self._pending: Dict[str, asyncio.Future] = {}

    async def resolve(self, text: str) -> str:
        """Return the translation of text.

        Text that is empty or has no letters is returned unchanged without
        touching the dictionary or the provider.

        Raises:
            TranslationProviderError: If the provider fails; nothing is cached
        """
        if not isinstance(text, str) or not is_translatable(text):
            return text

        cached = self.dictionary.lookup(text)
        if cached is not None:
            self.dictionary_hits += 1
            return cached

        key = normalize_key(text)
        pending = self._pending.get(key)
        if pending is not None:
            return await pending

        task = asyncio.ensure_future(self._request(text))
        self._pending[key] = task
        try:
            return await task
        finally:
            self._pending.pop(key, None)

    async def _request(self, text: str) -> str:
        glossary = self.dictionary.glossary_for(text)
        self.provider_calls += 1
        logger.debug(f"Requesting translation for '{shorten(text)}' with {len(glossary)} glossary hints")

        translation = await self.provider.translate(text.strip(), self.target_lang, glossary)
        if not isinstance(translation, str) or not translation.strip():
            raise TranslationProviderError("Provider returned an empty translation", text=text)

        return self.dictionary.insert_if_absent(text, translation)

    def resolve_sync(self, text: str) -> str:
        """Synchronous wrapper for resolve."""
        return asyncio.run(self.resolve(text))
