"""
Parse-related Pydantic schemas.

This module contains the response schemas for data file parsing.
"""

from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from backend.models.data_file import ColumnType, ParseErrorKind, ParseResult


class ParseErrorResponse(BaseModel):
    """A single parse error."""

    code: int = Field(..., description="Severity code: 0 for file errors, 1 for cell errors")
    kind: ParseErrorKind = Field(..., description="Error classification")
    message: str = Field(..., description="Human-readable error message")
    row: Optional[int] = Field(None, description="Zero-based row of the offending cell")
    column: Optional[int] = Field(None, description="Zero-based column of the offending cell")


class ColumnResponse(BaseModel):
    """A parsed column."""

    name: str = Field(..., description="Header cell text")
    data_type: ColumnType = Field(..., description="Column data type: numeric or text")
    values: List[Union[float, str]] = Field(..., description="One value per data row")


class ParseResultResponse(BaseModel):
    """Result of parsing an uploaded data file."""

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "success": False,
            "columns": [],
            "errors": [
                {
                    "code": 1,
                    "kind": "type_mismatch",
                    "message": "[Line 3, column 1] Cell type is different than first cell in this column",
                    "row": 3,
                    "column": 1
                }
            ]
        }
    })

    success: bool = Field(..., description="True when the file parsed without errors")
    columns: List[ColumnResponse] = Field(default_factory=list, description="Parsed columns")
    errors: List[ParseErrorResponse] = Field(default_factory=list, description="Errors found")

    @classmethod
    def from_result(cls, result: ParseResult) -> 'ParseResultResponse':
        return cls.model_validate(result.to_dict())
