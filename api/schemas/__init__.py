"""
Pydantic schemas for request/response validation.

This package contains all Pydantic models used for API response
serialization.
"""

from api.schemas.common import ErrorResponse, HealthCheckResponse
from api.schemas.parse_schema import ColumnResponse, ParseErrorResponse, ParseResultResponse

__all__ = [
    # Common
    'ErrorResponse',
    'HealthCheckResponse',

    # Parse
    'ColumnResponse',
    'ParseErrorResponse',
    'ParseResultResponse',
]
