"""
Tests for the data file parser.

Tests cover type inference, sheet validation, column building and the
end-to-end parse of uploaded workbooks.
"""

from datetime import datetime

import pytest

from backend.models.data_file import (
    ColumnType, DataFileColumn, FileParseError, NumericValue, ParseErrorKind,
    ParseResult, TextValue
)
from services.exceptions import ColumnBuildError
from services import excel_parser_service
from services.excel_parser_service import (
    ExcelParserService, build_columns, infer_column_type, validate_sheet
)
from services.workbook_reader import CellKind, RawCell


class TestInferColumnType:
    """Test mapping of cell kinds to column types."""

    def test_numeric_cell(self):
        assert infer_column_type(RawCell(CellKind.NUMERIC, 1.0)) == ColumnType.NUMERIC

    def test_text_cell(self):
        assert infer_column_type(RawCell(CellKind.TEXT, 'a')) == ColumnType.TEXT

    def test_empty_and_unsupported_are_unknown(self):
        assert infer_column_type(None) == ColumnType.UNKNOWN
        assert infer_column_type(RawCell(CellKind.EMPTY)) == ColumnType.UNKNOWN
        assert infer_column_type(RawCell(CellKind.UNSUPPORTED)) == ColumnType.UNKNOWN


class TestValidateSheet:
    """Test exhaustive validation of column types."""

    def test_valid_sheet_has_no_errors(self, make_sheet, people_rows):
        assert validate_sheet(make_sheet(people_rows)) == []

    def test_type_mismatch_is_positional(self, make_sheet, people_rows):
        """Text in a numeric column is reported at its row and column."""
        people_rows[3][1] = 'N/A'
        errors = validate_sheet(make_sheet(people_rows))

        assert len(errors) == 1
        assert errors[0].kind == ParseErrorKind.TYPE_MISMATCH
        assert (errors[0].row, errors[0].column) == (3, 1)
        assert errors[0].code == 1
        assert errors[0].message.startswith('[Line 3, column 1]')

    def test_empty_cell_is_reported(self, make_sheet, people_rows):
        people_rows[2][0] = None
        errors = validate_sheet(make_sheet(people_rows))

        assert [(e.kind, e.row, e.column) for e in errors] == [
            (ParseErrorKind.EMPTY_CELL, 2, 0)
        ]

    def test_errors_are_collected_column_by_column(self, make_sheet):
        """The scan continues after the first error, column-major."""
        rows = [
            ['A', 'B'],
            [1, 'x'],
            ['oops', None],
            [None, 5],
        ]
        errors = validate_sheet(make_sheet(rows))

        assert [(e.kind, e.row, e.column) for e in errors] == [
            (ParseErrorKind.TYPE_MISMATCH, 2, 0),
            (ParseErrorKind.EMPTY_CELL, 3, 0),
            (ParseErrorKind.EMPTY_CELL, 2, 1),
            (ParseErrorKind.TYPE_MISMATCH, 3, 1),
        ]

    def test_absent_type_cell_still_scans_for_empty_cells(self, make_sheet):
        """
        A column without a type-defining cell gets one error for it, then
        its remaining cells are only checked for emptiness.
        """
        rows = [
            ['Name', 'Age', 'Score'],
            ['Alice', 30, None],
            ['Bob', 25, None],
            ['Carol', 41, 'text is not compared'],
        ]
        errors = validate_sheet(make_sheet(rows))

        assert [(e.kind, e.row, e.column) for e in errors] == [
            (ParseErrorKind.EMPTY_CELL, 1, 2),
            (ParseErrorKind.EMPTY_CELL, 2, 2),
        ]
        assert "can't be validated" in errors[0].message

    def test_unsupported_type_cell(self, make_sheet):
        rows = [
            ['Flag', 'Count'],
            [True, 1],
            [False, 2],
        ]
        errors = validate_sheet(make_sheet(rows))

        assert [(e.kind, e.row, e.column) for e in errors] == [
            (ParseErrorKind.UNSUPPORTED_CELL_TYPE, 1, 0)
        ]

    def test_unsupported_cell_below_type_row_is_mismatch(self, make_sheet):
        rows = [
            ['Count'],
            [1],
            [True],
        ]
        errors = validate_sheet(make_sheet(rows))

        assert [(e.kind, e.row) for e in errors] == [(ParseErrorKind.TYPE_MISMATCH, 2)]

    def test_short_rows_read_as_empty(self, make_sheet):
        rows = [
            ['A', 'B', 'C'],
            [1, 2, 3],
            [4],
        ]
        errors = validate_sheet(make_sheet(rows))

        assert [(e.row, e.column) for e in errors] == [(2, 1), (2, 2)]

    def test_empty_sheet(self, make_sheet):
        errors = validate_sheet(make_sheet([]))

        assert len(errors) == 1
        assert errors[0].kind == ParseErrorKind.EMPTY_SHEET
        assert errors[0].code == 0

    def test_header_without_data_rows(self, make_sheet):
        errors = validate_sheet(make_sheet([['A', 'B']]))

        assert len(errors) == 1
        assert errors[0].kind == ParseErrorKind.EMPTY_SHEET
        assert errors[0].message == 'Sheet has no data rows'

    def test_columns_beyond_header_are_ignored(self, make_sheet):
        rows = [
            ['A'],
            [1, 'extra'],
            [2, 3.0],
        ]
        assert validate_sheet(make_sheet(rows)) == []


class TestBuildColumns:
    """Test conversion of validated sheets into typed columns."""

    def test_build_people(self, make_sheet, people_rows):
        columns = build_columns(make_sheet(people_rows))

        assert [c.name for c in columns] == ['Name', 'Age', 'Score']
        assert [c.data_type for c in columns] == [
            ColumnType.TEXT, ColumnType.NUMERIC, ColumnType.NUMERIC
        ]
        assert columns[0].values == [TextValue('Alice'), TextValue('Bob'), TextValue('Carol')]
        assert columns[1].values == [NumericValue(30.0), NumericValue(25.0), NumericValue(41.0)]
        assert columns[2].values[0] == NumericValue(95.5)

    def test_one_value_per_row_below_header(self, make_sheet, people_rows):
        columns = build_columns(make_sheet(people_rows))

        for column in columns:
            assert len(column.values) == len(people_rows) - 1

    def test_values_match_column_type(self, make_sheet, people_rows):
        for column in build_columns(make_sheet(people_rows)):
            assert all(v.data_type == column.data_type for v in column.values)

    def test_numeric_header_name(self, make_sheet):
        columns = build_columns(make_sheet([[2020, 'Region'], [1.5, 'EU']]))

        assert [c.name for c in columns] == ['2020', 'Region']

    def test_header_gap_keeps_column_position(self, make_sheet):
        """An empty header cell between named ones still yields a column."""
        rows = [
            ['Name', None, 'Score'],
            ['Alice', 30, 95.5],
            ['Bob', 25, 88.0],
        ]
        grid = make_sheet(rows)

        assert validate_sheet(grid) == []
        columns = build_columns(grid)
        assert [(c.name, c.data_type) for c in columns] == [
            ('Name', ColumnType.TEXT),
            ('', ColumnType.NUMERIC),
            ('Score', ColumnType.NUMERIC),
        ]
        assert [v.value for v in columns[1].values] == [30.0, 25.0]

    def test_unvalidated_sheet_raises(self, make_sheet, people_rows):
        """Building a sheet that would fail validation is an internal error."""
        people_rows[2][1] = 'N/A'

        with pytest.raises(ColumnBuildError):
            build_columns(make_sheet(people_rows))


class TestDataModels:
    """Test invariants enforced by the result models."""

    def test_column_rejects_unknown_type(self):
        with pytest.raises(ValueError):
            DataFileColumn(name='x', data_type=ColumnType.UNKNOWN)

    def test_column_rejects_mixed_values(self):
        with pytest.raises(ValueError):
            DataFileColumn(name='x', data_type=ColumnType.NUMERIC,
                           values=[NumericValue(1.0), TextValue('a')])

    def test_result_cannot_hold_columns_and_errors(self):
        column = DataFileColumn(name='x', data_type=ColumnType.TEXT, values=[TextValue('a')])
        error = FileParseError.for_file(ParseErrorKind.UNREADABLE_FILE, "Can't read file.")

        with pytest.raises(ValueError):
            ParseResult(columns=[column], errors=[error])

    def test_result_must_hold_columns_or_errors(self):
        with pytest.raises(ValueError):
            ParseResult(columns=[], errors=[])

    def test_to_dict(self):
        column = DataFileColumn(name='Age', data_type=ColumnType.NUMERIC, values=[NumericValue(30.0)])
        result = ParseResult(columns=[column])

        assert result.to_dict() == {
            'success': True,
            'columns': [{'name': 'Age', 'data_type': 'numeric', 'values': [30.0]}],
            'errors': []
        }


class TestExcelParserService:
    """Test end-to-end parsing of uploaded workbooks."""

    def test_parse_valid_workbook(self, make_xlsx, people_rows):
        result = ExcelParserService().parse_file(make_xlsx(people_rows), 'people.xlsx')

        assert result.success
        assert result.errors == []
        assert len(result.columns) == 3
        assert [v.value for v in result.columns[1].values] == [30.0, 25.0, 41.0]

    def test_parse_type_mismatch(self, make_xlsx, people_rows):
        people_rows[3][1] = 'N/A'
        result = ExcelParserService().parse_file(make_xlsx(people_rows), 'people.xlsx')

        assert not result.success
        assert result.columns == []
        assert len(result.errors) == 1
        assert result.errors[0].kind == ParseErrorKind.TYPE_MISMATCH
        assert (result.errors[0].row, result.errors[0].column) == (3, 1)

    def test_unsupported_file_kind_reads_nothing(self, monkeypatch):
        """A .csv upload is rejected before the reader is touched."""
        def fail_read(*args, **kwargs):
            raise AssertionError('reader must not be called')

        monkeypatch.setattr(excel_parser_service, 'read_grid', fail_read)
        result = ExcelParserService().parse_file(b'Name,Age\nAlice,30\n', 'data.csv')

        assert result.columns == []
        assert len(result.errors) == 1
        assert result.errors[0].kind == ParseErrorKind.UNSUPPORTED_FILE_KIND
        assert result.errors[0].message == 'Invalid file type'
        assert result.errors[0].code == 0

    def test_unreadable_file(self):
        result = ExcelParserService().parse_file(b'definitely not a workbook', 'broken.xlsx')

        assert result.columns == []
        assert [(e.kind, e.message) for e in result.errors] == [
            (ParseErrorKind.UNREADABLE_FILE, "Can't read file.")
        ]

    def test_absent_type_cell_in_workbook(self, make_xlsx):
        rows = [
            ['Name', 'Age', 'Score'],
            ['Alice', 30, None],
            ['Bob', 25, None],
            ['Carol', 41, 70.25],
        ]
        result = ExcelParserService().parse_file(make_xlsx(rows), 'people.xlsx')

        assert result.columns == []
        assert [(e.kind, e.row, e.column) for e in result.errors] == [
            (ParseErrorKind.EMPTY_CELL, 1, 2),
            (ParseErrorKind.EMPTY_CELL, 2, 2),
        ]

    def test_parse_is_idempotent(self, make_xlsx, people_rows):
        content = make_xlsx(people_rows)
        service = ExcelParserService()

        assert service.parse_file(content, 'people.xlsx') == service.parse_file(content, 'people.xlsx')

    def test_progress_callback(self, make_sheet, people_rows):
        stages = []
        service = ExcelParserService(progress_callback=lambda stage, percent, msg: stages.append(stage))

        service.parse_grid(make_sheet(people_rows))

        assert stages == ['validating', 'building', 'complete']

    def test_progress_callback_reports_reading(self, make_xlsx, people_rows):
        stages = []
        service = ExcelParserService(progress_callback=lambda stage, percent, msg: stages.append(stage))

        service.parse_file(make_xlsx(people_rows), 'people.xlsx')

        assert stages == ['reading', 'validating', 'building', 'complete']

    def test_parse_date_column(self, make_xlsx):
        """Date cells parse as numeric Excel serial numbers."""
        rows = [
            ['Day', 'Sales'],
            [datetime(2025, 1, 1), 10],
            [datetime(2025, 1, 2), 12],
        ]
        result = ExcelParserService().parse_file(make_xlsx(rows), 'sales.xlsx')

        assert result.success
        assert result.columns[0].data_type == ColumnType.NUMERIC
        assert [v.value for v in result.columns[0].values] == [45658.0, 45659.0]

    def test_custom_header_row(self, make_sheet):
        rows = [
            ['Quarterly report'],
            ['Region', 'Sales'],
            ['EU', 10],
            ['US', 12],
        ]
        result = ExcelParserService(header_row_index=1).parse_grid(make_sheet(rows))

        assert result.success
        assert [c.name for c in result.columns] == ['Region', 'Sales']
        assert [v.value for v in result.columns[1].values] == [10.0, 12.0]
