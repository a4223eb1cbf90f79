"""
Data file models for parsed spreadsheet uploads.

This module defines the column-oriented representation produced by the
parser service, together with the positional errors reported when a
sheet cannot be converted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class ColumnType(str, Enum):
    """Data type of a parsed column."""
    NUMERIC = 'numeric'
    TEXT = 'text'
    UNKNOWN = 'unknown'  # Never a valid column type


class ParseErrorKind(str, Enum):
    """Classification of parse errors."""
    UNREADABLE_FILE = 'unreadable_file'
    UNSUPPORTED_FILE_KIND = 'unsupported_file_kind'
    EMPTY_SHEET = 'empty_sheet'
    EMPTY_CELL = 'empty_cell'
    TYPE_MISMATCH = 'type_mismatch'
    UNSUPPORTED_CELL_TYPE = 'unsupported_cell_type'


# Severity codes
FILE_ERROR_CODE = 0
CELL_ERROR_CODE = 1


@dataclass(frozen=True)
class NumericValue:
    """Numeric cell value."""
    value: float

    @property
    def data_type(self) -> ColumnType:
        return ColumnType.NUMERIC


@dataclass(frozen=True)
class TextValue:
    """Text cell value."""
    value: str

    @property
    def data_type(self) -> ColumnType:
        return ColumnType.TEXT


TypedValue = Union[NumericValue, TextValue]


@dataclass
class DataFileColumn:
    """
    A single parsed column.

    Holds one typed value per data row, index-aligned with every other
    column of the same result. All values share the column's data type.
    """

    name: str
    data_type: ColumnType
    values: List[TypedValue] = field(default_factory=list)

    def __post_init__(self):
        if self.data_type == ColumnType.UNKNOWN:
            raise ValueError(f"Column '{self.name}' cannot have type {self.data_type.value}")
        for value in self.values:
            if value.data_type != self.data_type:
                raise ValueError(
                    f"Column '{self.name}' of type {self.data_type.value} "
                    f"cannot hold {value.data_type.value} value {value.value!r}"
                )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'data_type': self.data_type.value,
            'values': [v.value for v in self.values]
        }


@dataclass(frozen=True)
class FileParseError:
    """
    Error reported while parsing a data file.

    Cell-level errors carry the zero-based row and column of the offending
    cell; file-level errors leave them unset.
    """

    code: int
    kind: ParseErrorKind
    message: str
    row: Optional[int] = None
    column: Optional[int] = None

    @classmethod
    def for_file(cls, kind: ParseErrorKind, message: str) -> 'FileParseError':
        """Create a file-level error (no coordinates)."""
        return cls(code=FILE_ERROR_CODE, kind=kind, message=message)

    @classmethod
    def for_cell(cls, kind: ParseErrorKind, message: str, row: int, column: int) -> 'FileParseError':
        """Create a positional error, prefixing the message with its location."""
        return cls(
            code=CELL_ERROR_CODE,
            kind=kind,
            message=f"[Line {row}, column {column}] {message}",
            row=row,
            column=column
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'kind': self.kind.value,
            'message': self.message,
            'row': self.row,
            'column': self.column
        }


@dataclass
class ParseResult:
    """
    Outcome of parsing one data file.

    Either ``columns`` is populated and ``errors`` is empty, or the other
    way round. Partially built columns are never returned.
    """

    columns: List[DataFileColumn] = field(default_factory=list)
    errors: List[FileParseError] = field(default_factory=list)

    def __post_init__(self):
        if self.columns and self.errors:
            raise ValueError("A parse result cannot hold both columns and errors")
        if not self.columns and not self.errors:
            raise ValueError("A parse result must hold either columns or errors")

    @property
    def success(self) -> bool:
        return not self.errors

    @classmethod
    def failed(cls, *errors: FileParseError) -> 'ParseResult':
        return cls(columns=[], errors=list(errors))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'columns': [c.to_dict() for c in self.columns],
            'errors': [e.to_dict() for e in self.errors]
        }
