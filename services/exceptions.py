"""Exceptions raised by the parser service layer."""


class FileParserError(Exception):
    """Base exception for data file parsing."""
    pass


class UnsupportedFileKindError(FileParserError):
    """Raised when the file name does not map to a known spreadsheet format."""
    pass


class UnreadableFileError(FileParserError):
    """Raised when the workbook bytes cannot be opened or decoded."""
    pass


class ColumnBuildError(FileParserError):
    """
    Raised when a cell no longer matches its column type while building.

    Indicates the validator and builder disagree; this is an internal
    failure, never reported back to the uploader as a parse error.
    """
    pass
