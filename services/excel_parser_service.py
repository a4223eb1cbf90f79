"""
Excel Parser Service - Framework-agnostic data file parsing.

Converts the first sheet of an uploaded workbook into typed columns.
Row 0 holds the column headers, row 1 defines each column's type, and
every row from row 1 down must match that type. Validation collects every
deviation before anything is built, so one upload reports all of its
problems at once.
"""

import logging
from typing import Callable, List, Optional

from backend.models.data_file import (
    ColumnType, DataFileColumn, FileParseError, NumericValue, ParseErrorKind,
    ParseResult, TextValue, TypedValue
)
from services.exceptions import ColumnBuildError, UnreadableFileError, UnsupportedFileKindError
from services.workbook_reader import (
    DEFAULT_SHEET_INDEX, CellKind, Grid, RawCell, detect_file_kind, get_cell, read_grid
)

logger = logging.getLogger(__name__)

DEFAULT_HEADER_ROW_INDEX = 0

INVALID_FILE_TYPE_MESSAGE = "Invalid file type"
UNREADABLE_FILE_MESSAGE = "Can't read file."


def infer_column_type(cell: Optional[RawCell]) -> ColumnType:
    """Map a cell's kind to the column type it implies."""
    if cell is None:
        return ColumnType.UNKNOWN
    if cell.kind == CellKind.NUMERIC:
        return ColumnType.NUMERIC
    if cell.kind == CellKind.TEXT:
        return ColumnType.TEXT
    return ColumnType.UNKNOWN


def _column_count(grid: Grid, header_row_index: int) -> int:
    if header_row_index >= len(grid):
        return 0
    return len(grid[header_row_index])


def _check_sheet_shape(grid: Grid, header_row_index: int, type_row_index: int) -> List[FileParseError]:
    if _column_count(grid, header_row_index) == 0:
        return [FileParseError.for_file(ParseErrorKind.EMPTY_SHEET, "Sheet has no header row")]
    if type_row_index >= len(grid):
        return [FileParseError.for_file(ParseErrorKind.EMPTY_SHEET, "Sheet has no data rows")]
    return []


def _scan_for_empty_cells(grid: Grid, column: int, first_row: int) -> List[FileParseError]:
    errors = []
    for row in range(first_row, len(grid)):
        if get_cell(grid, row, column) is None:
            errors.append(FileParseError.for_cell(
                ParseErrorKind.EMPTY_CELL, "Cell is empty", row, column
            ))
    return errors


def _validate_column(grid: Grid, column: int, type_row_index: int) -> List[FileParseError]:
    type_cell = get_cell(grid, type_row_index, column)

    if type_cell is None:
        errors = [FileParseError.for_cell(
            ParseErrorKind.EMPTY_CELL,
            "Cell is empty. Column can't be validated",
            type_row_index, column
        )]
        # Column type is unknown; only emptiness can still be checked
        return errors + _scan_for_empty_cells(grid, column, type_row_index + 1)

    expected_type = infer_column_type(type_cell)
    if expected_type == ColumnType.UNKNOWN:
        errors = [FileParseError.for_cell(
            ParseErrorKind.UNSUPPORTED_CELL_TYPE,
            "Cell type is not supported. Column can't be validated",
            type_row_index, column
        )]
        return errors + _scan_for_empty_cells(grid, column, type_row_index + 1)

    logger.debug(f"Column {column} inferred as {expected_type.value}")

    errors = []
    for row in range(type_row_index, len(grid)):
        cell = get_cell(grid, row, column)
        if cell is None:
            errors.append(FileParseError.for_cell(
                ParseErrorKind.EMPTY_CELL, "Cell is empty", row, column
            ))
        elif infer_column_type(cell) != expected_type:
            errors.append(FileParseError.for_cell(
                ParseErrorKind.TYPE_MISMATCH,
                "Cell type is different than first cell in this column",
                row, column
            ))
    return errors


def validate_sheet(
    grid: Grid,
    header_row_index: int = DEFAULT_HEADER_ROW_INDEX,
    type_row_index: Optional[int] = None
) -> List[FileParseError]:
    """
    Check that every column holds cells of a single type.

    Each column's type is taken from its cell in the type-defining row.
    Every cell from that row to the last row must be present and of the
    same type. The scan never stops early.

    Args:
        grid: Sheet cells
        header_row_index: Row holding the column headers
        type_row_index: Row defining column types (default: row after header)

    Returns:
        Errors in discovery order (column by column, top to bottom);
        empty if the sheet is valid
    """
    if type_row_index is None:
        type_row_index = header_row_index + 1

    shape_errors = _check_sheet_shape(grid, header_row_index, type_row_index)
    if shape_errors:
        return shape_errors

    errors: List[FileParseError] = []
    for column in range(_column_count(grid, header_row_index)):
        errors.extend(_validate_column(grid, column, type_row_index))
    return errors


def _header_name(cell: Optional[RawCell]) -> str:
    if cell is None:
        return ''
    if cell.kind == CellKind.NUMERIC and float(cell.value).is_integer():
        return str(int(cell.value))
    return str(cell.value) if cell.value is not None else ''


def _to_typed_value(cell: Optional[RawCell], column_type: ColumnType, row: int, column: int) -> TypedValue:
    cell_type = infer_column_type(cell)
    if cell_type != column_type:
        raise ColumnBuildError(
            f"Cell ({row}, {column}) is {cell_type.value}, expected {column_type.value}"
        )
    if column_type == ColumnType.NUMERIC:
        return NumericValue(float(cell.value))
    return TextValue(cell.value)


def build_columns(grid: Grid, header_row_index: int = DEFAULT_HEADER_ROW_INDEX) -> List[DataFileColumn]:
    """
    Convert a validated sheet into typed columns.

    Must only be called on a grid for which validate_sheet returned no
    errors.

    Raises:
        ColumnBuildError: If a cell does not match its column type
    """
    type_row_index = header_row_index + 1
    columns = []

    for column in range(_column_count(grid, header_row_index)):
        column_type = infer_column_type(get_cell(grid, type_row_index, column))
        if column_type == ColumnType.UNKNOWN:
            raise ColumnBuildError(f"Column {column} has no type-defining cell")

        values = [
            _to_typed_value(get_cell(grid, row, column), column_type, row, column)
            for row in range(type_row_index, len(grid))
        ]
        columns.append(DataFileColumn(
            name=_header_name(get_cell(grid, header_row_index, column)),
            data_type=column_type,
            values=values
        ))

    return columns


class ExcelParserService:
    """
    Parse uploaded spreadsheets into typed columns.

    The service holds configuration only; every call is independent.
    """

    def __init__(
        self,
        progress_callback: Optional[Callable[[str, float, str], None]] = None,
        sheet_index: int = DEFAULT_SHEET_INDEX,
        header_row_index: int = DEFAULT_HEADER_ROW_INDEX
    ):
        """
        Initialize parser service.

        Args:
            progress_callback: Optional callback for progress updates
                              Signature: callback(stage: str, percent: float, message: str)
            sheet_index: Zero-based index of the sheet to parse
            header_row_index: Zero-based index of the header row
        """
        self.progress_callback = progress_callback or (lambda *args: None)
        self.sheet_index = sheet_index
        self.header_row_index = header_row_index

    def _emit_progress(self, stage: str, percent: float, message: str):
        """Emit progress update via callback."""
        self.progress_callback(stage, percent, message)
        logger.debug(f"Parse progress: {stage} ({percent:.1f}%) - {message}")

    def parse_file(self, content: bytes, filename: str) -> ParseResult:
        """
        Parse an uploaded workbook.

        Args:
            content: Raw file bytes
            filename: Original file name; its extension selects the format

        Returns:
            ParseResult with columns on success, or the errors found.
            File-level failures produce exactly one error.
        """
        logger.info(f"Parsing file: {filename}")

        try:
            detect_file_kind(filename)
        except UnsupportedFileKindError as e:
            logger.warning(f"Rejected {filename}: {e}")
            return ParseResult.failed(FileParseError.for_file(
                ParseErrorKind.UNSUPPORTED_FILE_KIND, INVALID_FILE_TYPE_MESSAGE
            ))

        self._emit_progress('reading', 0, f"Reading {filename}")
        try:
            grid = read_grid(content, filename, self.sheet_index)
        except UnreadableFileError as e:
            logger.warning(f"Could not read {filename}: {e}")
            return ParseResult.failed(FileParseError.for_file(
                ParseErrorKind.UNREADABLE_FILE, UNREADABLE_FILE_MESSAGE
            ))

        return self.parse_grid(grid)

    def parse_grid(self, grid: Grid) -> ParseResult:
        """
        Validate a sheet grid and, if it is clean, build its columns.
        """
        self._emit_progress('validating', 30, f"Validating {len(grid)} rows")
        errors = validate_sheet(grid, self.header_row_index)
        if errors:
            logger.info(f"Validation failed with {len(errors)} errors")
            self._emit_progress('complete', 100, f"Found {len(errors)} errors")
            return ParseResult(columns=[], errors=errors)

        self._emit_progress('building', 60, 'Building columns')
        columns = build_columns(grid, self.header_row_index)

        logger.info(f"Parsed {len(columns)} columns, "
                    f"{len(columns[0].values) if columns else 0} rows each")
        self._emit_progress('complete', 100, f"Parsed {len(columns)} columns")
        return ParseResult(columns=columns, errors=[])
