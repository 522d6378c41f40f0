"""Core workbook translation: walk text cells, resolve them, write the result."""

import os
import time
import asyncio
import tempfile
import zipfile
from dataclasses import dataclass
from typing import Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple
import logging

import openpyxl
from openpyxl.utils.exceptions import IllegalCharacterError, InvalidFileException
from tqdm import tqdm

from .dictionary import DictionaryStore
from .errors import SpreadsheetReadError, SpreadsheetWriteError, TranslationProviderError
from .providers import BaseProvider
from .resolver import TranslationResolver
from .utils import FORMULA_STRING_PATTERN, is_formula, is_translatable, shorten

logger = logging.getLogger(__name__)


class CellAddress(NamedTuple):
    sheet_name: str
    coordinate: str

    def __str__(self) -> str:
        return f"{self.sheet_name}!{self.coordinate}"


@dataclass
class TranslationSummary:
    cells_seen: int = 0
    cells_translated: int = 0
    provider_calls: int = 0
    dictionary_hits: int = 0
    elapsed: float = 0.0


def iter_text_cells(
    workbook: openpyxl.Workbook,
    sheet_names: Optional[Sequence[str]] = None,
    skip_header: bool = False
) -> Iterator[Tuple[CellAddress, object]]:
    """Yield every cell holding non-empty text, row by row.

    Args:
        workbook: Loaded workbook
        sheet_names: Sheets to walk, in this order (default: all worksheets)
        skip_header: Leave the first row of each sheet alone

    Yields:
        (CellAddress, cell) pairs in sheet order, then row-major order
    """
    if sheet_names is None:
        sheet_names = [sheet.title for sheet in workbook.worksheets]

    first_row = 2 if skip_header else 1
    for sheet_name in sheet_names:
        sheet = workbook[sheet_name]
        for row in sheet.iter_rows(min_row=first_row):
            for cell in row:
                if isinstance(cell.value, str) and cell.value.strip():
                    yield CellAddress(sheet_name, cell.coordinate), cell


def formula_literals(formula: str) -> List[str]:
    """Translatable string literals inside a formula, unescaped."""
    literals = [m.group(1).replace('""', '"') for m in FORMULA_STRING_PATTERN.finditer(formula)]
    return [s for s in literals if is_translatable(s)]


def replace_formula_literals(formula: str, translations: Dict[str, str]) -> str:
    """Substitute translated string literals back into a formula."""
    def substitute(match):
        literal = match.group(1).replace('""', '"')
        translated = translations.get(literal, literal)
        return '"' + translated.replace('"', '""') + '"'

    return FORMULA_STRING_PATTERN.sub(substitute, formula)


class ExcelTranslator:
    """Workbook translator that preserves formatting."""

    def __init__(
        self,
        dictionary: DictionaryStore,
        provider: BaseProvider,
        target_lang: str = "Romanian",
        sheet_names: Optional[Sequence[str]] = None,
        skip_header: bool = False,
        max_concurrency: int = 1,
        show_progress: bool = True
    ):
        """Initialize the translator.

        Args:
            dictionary: Known translations, extended with provider results
            provider: Translation provider for dictionary misses
            target_lang: Target language name
            sheet_names: Sheets to translate (default: all worksheets)
            skip_header: Leave the first row of each sheet untranslated
            max_concurrency: Unique texts resolved at the same time
            show_progress: Display a progress bar
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")

        self.dictionary = dictionary
        self.provider = provider
        self.resolver = TranslationResolver(dictionary, provider, target_lang)
        self.sheet_names = list(sheet_names) if sheet_names else None
        self.skip_header = skip_header
        self.max_concurrency = max_concurrency
        self.show_progress = show_progress

    def load_workbook(self, path: str) -> openpyxl.Workbook:
        try:
            workbook = openpyxl.load_workbook(path, data_only=False)
        except (OSError, InvalidFileException, zipfile.BadZipFile, KeyError, ValueError) as e:
            raise SpreadsheetReadError(str(path), str(e)) from e

        worksheet_names = [sheet.title for sheet in workbook.worksheets]
        missing = [name for name in self.sheet_names or [] if name not in worksheet_names]
        if missing:
            raise SpreadsheetReadError(str(path), f"no worksheet named {', '.join(repr(m) for m in missing)}")

        logger.info(f"Found {len(workbook.sheetnames)} sheets: {', '.join(workbook.sheetnames)}")
        return workbook

    def save_workbook(self, workbook: openpyxl.Workbook, path: str) -> None:
        """Save to a temporary file next to path, then move it into place.

        Missing parent directories are created. The temporary file never
        outlives this call.
        """
        directory = os.path.dirname(os.path.abspath(path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".xlsx-translator-", suffix=".xlsx", dir=directory)
        except OSError as e:
            raise SpreadsheetWriteError(str(path), str(e)) from e
        os.close(fd)

        try:
            workbook.save(tmp_path)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError, KeyError) as e:
            raise SpreadsheetWriteError(str(path), str(e)) from e
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

        logger.info(f"Saved to {path}")

    async def translate_texts(self, occurrences: Dict[str, List[CellAddress]]) -> Dict[str, str]:
        """Resolve each unique text once.

        Args:
            occurrences: Unique text mapped to the cells it appears in,
                in first-seen order

        Returns:
            Dict mapping each text to its translation

        Raises:
            TranslationProviderError: For the first failing text, tagged with
                the first cell it appears in
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)
        total = sum(len(cells) for cells in occurrences.values())
        progress = tqdm(total=total, desc="Translating", unit="cell", disable=not self.show_progress)

        async def resolve(text: str, cells: List[CellAddress]) -> str:
            async with semaphore:
                try:
                    translation = await self.resolver.resolve(text)
                except TranslationProviderError as e:
                    if e.address is None:
                        e.address = str(cells[0])
                    raise
            progress.update(len(cells))
            return translation

        tasks = [asyncio.ensure_future(resolve(text, cells)) for text, cells in occurrences.items()]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        finally:
            progress.close()

        return dict(zip(occurrences, results))

    async def translate_workbook(self, workbook: openpyxl.Workbook) -> Tuple[int, int]:
        """Translate text cells of a loaded workbook in place.

        Returns:
            (text cells seen, cells whose value changed)
        """
        cells = list(iter_text_cells(workbook, self.sheet_names, self.skip_header))

        occurrences: Dict[str, List[CellAddress]] = {}
        for address, cell in cells:
            texts = formula_literals(cell.value) if is_formula(cell.value) else [cell.value]
            for text in texts:
                occurrences.setdefault(text, []).append(address)

        logger.info(f"Found {len(cells)} text cells, {len(occurrences)} unique texts")
        translations = await self.translate_texts(occurrences)

        cells_translated = 0
        for address, cell in cells:
            original = cell.value
            if is_formula(original):
                translated = replace_formula_literals(original, translations)
            else:
                translated = translations.get(original, original)

            if translated != original:
                try:
                    cell.value = translated
                except IllegalCharacterError as e:
                    raise TranslationProviderError(
                        f"Translation contains characters not allowed in worksheets: {translated!r}",
                        text=original,
                        address=str(address)
                    ) from e
                cells_translated += 1
                logger.debug(f"Cell {address} translated from '{shorten(original)}' to '{shorten(translated)}'")

        return len(cells), cells_translated

    async def translate_file(self, input_file: str, output_file: str) -> TranslationSummary:
        """Translate a workbook file while preserving formatting.

        Nothing is written unless every cell translated successfully.

        Args:
            input_file: Path to the source .xlsx file
            output_file: Path to the destination .xlsx file

        Returns:
            TranslationSummary for the run
        """
        logger.info(f"Starting translation of {input_file}")
        start_time = time.time()
        calls_before = self.resolver.provider_calls
        hits_before = self.resolver.dictionary_hits

        workbook = self.load_workbook(input_file)
        cells_seen, cells_translated = await self.translate_workbook(workbook)
        self.save_workbook(workbook, output_file)

        summary = TranslationSummary(
            cells_seen=cells_seen,
            cells_translated=cells_translated,
            provider_calls=self.resolver.provider_calls - calls_before,
            dictionary_hits=self.resolver.dictionary_hits - hits_before,
            elapsed=time.time() - start_time
        )
        logger.info(
            f"Translation completed. Translated {summary.cells_translated} of {summary.cells_seen} cells "
            f"({summary.provider_calls} provider calls, {summary.dictionary_hits} dictionary hits) "
            f"in {summary.elapsed:.2f} seconds"
        )
        return summary

    def translate_file_sync(self, input_file: str, output_file: str) -> TranslationSummary:
        """Synchronous wrapper for translate_file."""
        return asyncio.run(self.translate_file(input_file, output_file))
