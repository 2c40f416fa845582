from typing import Mapping, Optional


class MalformedRecordError(ValueError):
    """Raised when an input row cannot be turned into a Transaction. Aborts the run."""

    def __init__(self, message: str, line_number: Optional[int] = None, row: Optional[Mapping] = None):
        self.line_number = line_number
        self.row = row
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
