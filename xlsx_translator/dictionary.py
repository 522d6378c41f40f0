"""Dictionary of known translations, consulted before any provider call.

Dictionary files are UTF-8 text with one entry per line::

    source text – translated text

The separator is an EN DASH (U+2013); only the first one on a line splits it,
so translations may contain further dashes. Blank lines and lines starting
with ``#`` are ignored.
"""

import logging
import threading
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple

from .errors import DictionaryLoadError
from .utils import normalize_key

logger = logging.getLogger(__name__)

SEPARATOR = "–"
DUPLICATE_POLICIES = ("last", "first")


class DictionaryEntry(NamedTuple):
    source_text: str
    target_text: str


class DictionaryParseError(ValueError):
    """A dictionary line could not be parsed."""

    def __init__(self, line: int, reason: str):
        self.line = line
        self.reason = reason
        super().__init__(f"line {line}: {reason}")


def parse_entries(lines: Iterable[str]) -> Iterator[DictionaryEntry]:
    """Parse dictionary lines into entries.

    Args:
        lines: Lines of a dictionary file

    Yields:
        One DictionaryEntry per non-blank, non-comment line

    Raises:
        DictionaryParseError: If a line has no separator or an empty side
    """
    for number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        source, sep, target = stripped.partition(SEPARATOR)
        if not sep:
            raise DictionaryParseError(number, f"missing '{SEPARATOR}' separator")

        source = source.strip()
        target = target.strip()
        if not source or not target:
            raise DictionaryParseError(number, "empty source or target text")

        yield DictionaryEntry(source, target)


class DictionaryStore:
    """In-memory dictionary of source text to translated text.

    Keys are normalized (stripped and lower-cased). Reads are lock-free;
    writes take a lock so concurrent resolution cannot lose updates.
    """

    def __init__(self, entries: Optional[Dict[str, str]] = None):
        self._entries: Dict[str, str] = {}
        self._lock = threading.Lock()
        if entries:
            for source, target in entries.items():
                self.insert(source, target)

    @classmethod
    def from_entries(cls, entries: Iterable[Tuple[str, str]], duplicates: str = "last") -> "DictionaryStore":
        """Build a store from (source, target) pairs.

        Args:
            entries: Iterable of source/target pairs
            duplicates: "last" keeps the last translation seen for a key,
                "first" keeps the first

        Returns:
            A populated DictionaryStore
        """
        if duplicates not in DUPLICATE_POLICIES:
            raise ValueError(f"Unknown duplicate policy '{duplicates}', expected one of {DUPLICATE_POLICIES}")

        store = cls()
        for source, target in entries:
            key = normalize_key(source)
            if key in store._entries and store._entries[key] != target:
                logger.debug(f"Duplicate dictionary key '{source}' ({duplicates} wins)")
                if duplicates == "first":
                    continue
            store.insert(source, target)
        return store

    @classmethod
    def load(cls, path: str, duplicates: str = "last") -> "DictionaryStore":
        """Load a dictionary file.

        Args:
            path: Path to the dictionary file
            duplicates: Duplicate key policy, see from_entries

        Returns:
            A populated DictionaryStore

        Raises:
            DictionaryLoadError: If the file is missing, unreadable or malformed
        """
        try:
            with open(path, "r", encoding="utf-8-sig") as f:
                store = cls.from_entries(parse_entries(f), duplicates=duplicates)
        except DictionaryParseError as e:
            raise DictionaryLoadError(str(path), e.reason, line=e.line) from e
        except (OSError, UnicodeDecodeError) as e:
            raise DictionaryLoadError(str(path), str(e)) from e

        logger.info(f"Loaded {len(store)} dictionary entries from {path}")
        return store

    def lookup(self, text: str) -> Optional[str]:
        """Return the stored translation for text, or None."""
        if not isinstance(text, str) or not text.strip():
            return None
        return self._entries.get(normalize_key(text))

    def insert(self, text: str, translation: str) -> None:
        """Add or overwrite a translation for the rest of the run."""
        if not text.strip():
            return
        with self._lock:
            self._entries[normalize_key(text)] = translation

    def insert_if_absent(self, text: str, translation: str) -> str:
        """Add a translation unless one exists; return the one that is kept."""
        if not text.strip():
            return translation
        with self._lock:
            return self._entries.setdefault(normalize_key(text), translation)

    def glossary_for(self, text: str) -> List[DictionaryEntry]:
        """Entries whose source text appears inside text, sorted by key.

        Used as terminology hints when the text itself has to be sent to the
        provider.
        """
        key = normalize_key(text)
        if not key:
            return []
        return [
            DictionaryEntry(source, target)
            for source, target in sorted(self._entries.items())
            if source in key
        ]

    def items(self) -> List[Tuple[str, str]]:
        return sorted(self._entries.items())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, text) -> bool:
        return self.lookup(text) is not None
