class XlsxGridError(Exception):
    """Base class for other exceptions."""


class ReferenceFormatError(XlsxGridError, ValueError):
    """Raised when a cell or range reference does not match the A1 grammar."""


class PackageError(XlsxGridError):
    """Raised when the input is not a readable spreadsheet package."""
