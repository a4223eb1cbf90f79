"""
Workbook Reader - Load a spreadsheet sheet into an immutable cell grid.

This module hides the spreadsheet container formats from the parser.
Legacy binary workbooks (.xls) are read with xlrd, XML workbooks
(.xlsx, .xlsm) with openpyxl. Both produce the same grid of typed cells.
"""

import io
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple, Union

import openpyxl
import xlrd
from openpyxl.utils.datetime import to_excel
from xlrd.biffh import XL_CELL_BLANK, XL_CELL_DATE, XL_CELL_EMPTY, XL_CELL_NUMBER, XL_CELL_TEXT

from services.exceptions import UnreadableFileError, UnsupportedFileKindError

logger = logging.getLogger(__name__)

DEFAULT_SHEET_INDEX = 0


class FileKind(str, Enum):
    """Spreadsheet container format."""
    XLS = 'xls'
    XLSX = 'xlsx'


EXTENSION_KINDS = {
    '.xls': FileKind.XLS,
    '.xlsx': FileKind.XLSX,
    '.xlsm': FileKind.XLSX,
}


class CellKind(str, Enum):
    """Kind of value stored in a sheet cell."""
    NUMERIC = 'numeric'
    TEXT = 'text'
    EMPTY = 'empty'
    UNSUPPORTED = 'unsupported'  # booleans, error values


@dataclass(frozen=True)
class RawCell:
    """A single cell as read from the workbook."""
    kind: CellKind
    value: Union[float, str, None] = None

    @property
    def is_empty(self) -> bool:
        return self.kind == CellKind.EMPTY


Row = Tuple[Optional[RawCell], ...]
Grid = Tuple[Row, ...]


def get_cell(grid: Grid, row: int, column: int) -> Optional[RawCell]:
    """
    Return the cell at (row, column), or None when it is absent.

    Positions past the end of the grid or of a short row, and cells of
    kind EMPTY, are all reported as absent.
    """
    if row < 0 or row >= len(grid):
        return None
    cells = grid[row]
    if column < 0 or column >= len(cells):
        return None
    cell = cells[column]
    if cell is None or cell.is_empty:
        return None
    return cell


def make_grid(rows: Iterable[Iterable[Optional[RawCell]]]) -> Grid:
    """
    Freeze rows into a grid, trimming trailing absent cells and rows.
    """
    frozen: List[Row] = []
    for row in rows:
        cells = list(row)
        while cells and (cells[-1] is None or cells[-1].is_empty):
            cells.pop()
        frozen.append(tuple(cells))

    while frozen and not frozen[-1]:
        frozen.pop()

    return tuple(frozen)


def detect_file_kind(filename: Optional[str]) -> FileKind:
    """
    Map a file name to its spreadsheet format by extension.

    Args:
        filename: Original upload file name

    Returns:
        Detected FileKind

    Raises:
        UnsupportedFileKindError: If the extension is missing or not recognized
    """
    ext = Path(filename or '').suffix.lower()
    kind = EXTENSION_KINDS.get(ext)
    if kind is None:
        raise UnsupportedFileKindError(f"Not recognized file type: {filename!r}")
    return kind


def convert_openpyxl_value(value: Any) -> Optional[RawCell]:
    """Classify a cell value loaded by openpyxl (data_only)."""
    if value is None:
        return None
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return RawCell(CellKind.UNSUPPORTED, None)
    if isinstance(value, (int, float)):
        return RawCell(CellKind.NUMERIC, float(value))
    if isinstance(value, str):
        return RawCell(CellKind.TEXT, value)
    # Dates are stored as serial numbers; read them back as such
    if isinstance(value, (datetime, date, time, timedelta)):
        return RawCell(CellKind.NUMERIC, float(to_excel(value)))
    logger.debug(f"Unsupported cell value type: {type(value).__name__}")
    return RawCell(CellKind.UNSUPPORTED, None)


def convert_xlrd_cell(cell: Any) -> Optional[RawCell]:
    """Classify an xlrd cell by its ctype."""
    if cell.ctype in (XL_CELL_EMPTY, XL_CELL_BLANK):
        return None
    if cell.ctype in (XL_CELL_NUMBER, XL_CELL_DATE):
        return RawCell(CellKind.NUMERIC, float(cell.value))
    if cell.ctype == XL_CELL_TEXT:
        return RawCell(CellKind.TEXT, cell.value)
    return RawCell(CellKind.UNSUPPORTED, None)


def _read_xlsx(content: bytes, sheet_index: int) -> Grid:
    try:
        wb = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise UnreadableFileError(f"openpyxl could not open workbook: {e}") from e

    try:
        if sheet_index < 0 or sheet_index >= len(wb.sheetnames):
            raise UnreadableFileError(
                f"Sheet index {sheet_index} out of range ({len(wb.sheetnames)} sheets)"
            )
        ws = wb[wb.sheetnames[sheet_index]]
        logger.debug(f"Reading sheet '{ws.title}'")
        try:
            rows = [
                [convert_openpyxl_value(v) for v in row]
                for row in ws.iter_rows(values_only=True)
            ]
        except Exception as e:
            raise UnreadableFileError(f"openpyxl could not read sheet rows: {e}") from e
    finally:
        wb.close()

    return make_grid(rows)


def _read_xls(content: bytes, sheet_index: int) -> Grid:
    try:
        wb = xlrd.open_workbook(file_contents=content)
    except Exception as e:
        raise UnreadableFileError(f"xlrd could not open workbook: {e}") from e

    if sheet_index < 0 or sheet_index >= wb.nsheets:
        raise UnreadableFileError(
            f"Sheet index {sheet_index} out of range ({wb.nsheets} sheets)"
        )
    ws = wb.sheet_by_index(sheet_index)
    logger.debug(f"Reading sheet '{ws.name}'")

    rows = [
        [convert_xlrd_cell(cell) for cell in ws.row(r)]
        for r in range(ws.nrows)
    ]
    return make_grid(rows)


def read_grid(content: bytes, filename: str, sheet_index: int = DEFAULT_SHEET_INDEX) -> Grid:
    """
    Read one sheet of a workbook into a grid.

    Args:
        content: Raw workbook bytes
        filename: Original file name, used to pick the format
        sheet_index: Zero-based index of the sheet to read

    Returns:
        Immutable grid of cells

    Raises:
        UnsupportedFileKindError: If the file name has no known extension
        UnreadableFileError: If the bytes cannot be decoded
    """
    kind = detect_file_kind(filename)
    logger.info(f"Reading {kind.value} workbook: {filename} ({len(content)} bytes)")

    if kind == FileKind.XLSX:
        grid = _read_xlsx(content, sheet_index)
    else:
        grid = _read_xls(content, sheet_index)

    logger.info(f"Loaded {len(grid)} rows from {filename}")
    return grid
