"""xlsx translator - translate spreadsheet text with a dictionary and an LLM."""

__version__ = "1.0.0"
__description__ = "Translate the text cells of an xlsx workbook using a dictionary of known terms and OpenAI."

from .dictionary import DictionaryStore, DictionaryEntry
from .resolver import TranslationResolver
from .translation import ExcelTranslator
from .cli import main

__all__ = ["DictionaryStore", "DictionaryEntry", "TranslationResolver", "ExcelTranslator", "main"]
