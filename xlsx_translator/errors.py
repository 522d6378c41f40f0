"""Exceptions raised by the xlsx translator."""

from typing import Optional


class XlsxTranslatorError(Exception):
    """Base class for all translator errors."""


class DictionaryLoadError(XlsxTranslatorError):
    """The dictionary file is missing, unreadable or malformed."""

    def __init__(self, path: str, reason: str, line: Optional[int] = None):
        self.path = path
        self.reason = reason
        self.line = line
        location = f"{path}, line {line}" if line is not None else path
        super().__init__(f"Cannot load dictionary '{location}': {reason}")


class SpreadsheetReadError(XlsxTranslatorError):
    """The source workbook could not be opened or read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read spreadsheet '{path}': {reason}")


class SpreadsheetWriteError(XlsxTranslatorError):
    """The destination workbook could not be written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write spreadsheet '{path}': {reason}")


class TranslationProviderError(XlsxTranslatorError):
    """The translation provider failed (auth, rate limit, network, bad response).

    ``address`` is filled in by the sheet walker once the failing cell is known.
    """

    def __init__(self, message: str, text: Optional[str] = None, address: Optional[str] = None):
        self.message = message
        self.text = text
        self.address = address
        super().__init__(message)

    def __str__(self) -> str:
        if self.address:
            return f"{self.message} (cell {self.address})"
        return self.message
