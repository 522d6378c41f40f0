import asyncio
import sys
from pathlib import Path

import openpyxl
import pytest

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from xlsx_translator.errors import TranslationProviderError
from xlsx_translator.providers import BaseProvider


class FakeProvider(BaseProvider):
    """Provider stub with fixed translations that records every request."""

    def __init__(self, translations=None, fail_on=(), delay=0.0):
        super().__init__(api_key="test-key", model="fake-model")
        self.translations = translations or {}
        self.fail_on = set(fail_on)
        self.delay = delay
        self.calls = []

    async def translate_single(self, text, target_lang, glossary=()):
        self.calls.append((text, target_lang, list(glossary)))
        if self.delay:
            await asyncio.sleep(self.delay)
        if text in self.fail_on:
            raise TranslationProviderError("rate limited", text=text)
        return self.translations.get(text, f"{text} ({target_lang})")

    @property
    def texts(self):
        return [text for text, _, _ in self.calls]


def make_workbook(path, sheets):
    """Write a workbook with one sheet per (name, rows) item."""
    workbook = openpyxl.Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        sheet = workbook.create_sheet(name)
        for row in rows:
            sheet.append(row)
    workbook.save(path)
    return path


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def dictionary_file(tmp_path):
    path = tmp_path / "terms.txt"
    path.write_text("Hello – Bonjour\nInvoice – Factură\n", encoding="utf-8")
    return path
