"""Base provider class for translation services."""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple
import logging

logger = logging.getLogger(__name__)


class RequestPacer:
    """Spaces request starts to stay under a requests-per-minute budget.

    A budget of 0 disables pacing.
    """

    def __init__(self, requests_per_minute: int = 0):
        if requests_per_minute < 0:
            raise ValueError("requests_per_minute must be >= 0")
        self.interval = 60.0 / requests_per_minute if requests_per_minute else 0.0
        self._next_start = 0.0

    async def wait(self) -> None:
        if not self.interval:
            return
        # Reserve a slot before sleeping so concurrent callers queue up.
        now = time.monotonic()
        start = max(now, self._next_start)
        self._next_start = start + self.interval
        delay = start - now
        if delay > 0:
            logger.debug(f"Pacing provider request for {delay:.2f}s")
            await asyncio.sleep(delay)


class BaseProvider(ABC):
    """Abstract base class for translation providers."""

    def __init__(self, api_key: str, model: str, timeout: float = 90.0, requests_per_minute: int = 0):
        """Initialize the provider.

        Args:
            api_key: API key for the service
            model: Model name to use
            timeout: Request timeout in seconds
            requests_per_minute: Request start budget, 0 for unlimited
        """
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.pacer = RequestPacer(requests_per_minute)

    async def translate(
        self,
        text: str,
        target_lang: str,
        glossary: Sequence[Tuple[str, str]] = ()
    ) -> str:
        """Translate text, waiting for the request budget first.

        Args:
            text: Text to translate
            target_lang: Target language name, e.g. "Romanian"
            glossary: Known (source, target) pairs found inside the text

        Returns:
            Translated text

        Raises:
            TranslationProviderError: If the service fails or answers nothing
        """
        await self.pacer.wait()
        return await self.translate_single(text, target_lang, glossary)

    @abstractmethod
    async def translate_single(
        self,
        text: str,
        target_lang: str,
        glossary: Sequence[Tuple[str, str]] = ()
    ) -> str:
        """Translate a single text without pacing."""
        pass

    def build_prompt(self, text: str, target_lang: str, glossary: Sequence[Tuple[str, str]] = ()) -> str:
        """Render the translation prompt, listing glossary hints first."""
        lines: List[str] = []
        if glossary:
            lines.append("Considering the following translations:")
            lines.extend(f"{source} – {target}" for source, target in glossary)
            lines.append("")
        lines.append(f"Translate this into {target_lang}:")
        lines.append(text)
        lines.append("")
        lines.append(f"{target_lang}:")
        return "\n".join(lines)
