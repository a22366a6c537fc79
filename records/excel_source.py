import logging
import zipfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from core.errors import CriticalStartupError
from records.models import NAME_AR, NAME_EN, MaterialRecord

logger = logging.getLogger(__name__)

HEADER_MARKERS = (NAME_EN, NAME_AR)


def _cell_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def find_header_row(rows: Sequence[Tuple[Any, ...]]) -> int:
    """
    Index of the first row naming one of the key columns.

    Template workbooks carry a title and instructions above the header;
    without a marker the first row is taken as the header.
    """
    for index, row in enumerate(rows):
        cells = {_cell_text(cell) for cell in row}
        if any(marker in cells for marker in HEADER_MARKERS):
            return index
    return 0


def rows_to_mappings(rows: Sequence[Tuple[Any, ...]]) -> List[Dict[str, Any]]:
    """Turns raw sheet rows into header -> value mappings, skipping blank rows."""
    if not rows:
        return []
    header_index = find_header_row(rows)
    header = [_cell_text(cell) for cell in rows[header_index]]

    mappings = []
    for row in rows[header_index + 1:]:
        if all(_cell_text(cell) == "" for cell in row):
            continue
        mapping = {
            column: value
            for column, value in zip(header, row)
            if column
        }
        mappings.append(mapping)
    return mappings


def select_eligible(rows: Iterable[Dict[str, Any]]) -> List[MaterialRecord]:
    """Builds records and drops those without an identifying name."""
    records = []
    for row in rows:
        record = MaterialRecord.from_row(len(records), row)
        if record.is_eligible():
            records.append(record)
        else:
            logger.debug(f"Skipping row without {NAME_EN}: {row}")
    return records


def read_sheet_rows(path: Path, sheet_name: Optional[str] = None) -> List[Tuple[Any, ...]]:
    """Reads every row of the first (or named) worksheet as cell values."""
    try:
        workbook = load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError, ValueError) as e:
        raise CriticalStartupError(f"Could not read Excel file {path}: {e}", cause=e) from e

    try:
        sheet = workbook[sheet_name] if sheet_name else workbook.worksheets[0]
        return [tuple(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


def load_records(path: Path, sheet_name: Optional[str] = None) -> List[MaterialRecord]:
    """
    Loads the batch of materials from an ``.xlsx`` workbook.

    Raises:
        CriticalStartupError: If the file is missing or unreadable, or holds
            no eligible record.
    """
    path = Path(path)
    logger.info(f"Reading Excel file {path}...")
    if not path.exists():
        raise CriticalStartupError(f"Excel file not found: {path}")

    records = select_eligible(rows_to_mappings(read_sheet_rows(path, sheet_name)))
    if not records:
        raise CriticalStartupError(f"No materials found in Excel file: {path}")

    logger.info(f"{len(records)} materials loaded")
    return records
