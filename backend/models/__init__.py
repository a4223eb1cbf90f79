"""Models package for the data file parser."""
from backend.models.data_file import (
    ColumnType, ParseErrorKind, NumericValue, TextValue, TypedValue,
    DataFileColumn, FileParseError, ParseResult
)

__all__ = [
    'ColumnType', 'ParseErrorKind', 'NumericValue', 'TextValue', 'TypedValue',
    'DataFileColumn', 'FileParseError', 'ParseResult'
]
