"""Errors raised while reading a card-management statement extract."""

from typing import Optional


class StatementParseError(ValueError):
    """The extract is malformed.

    Carries the 1-based line number and zero-based field index of the value
    that could not be read, when known. A parse that raises this never
    yields a partial record.
    """

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        field_index: Optional[int] = None,
    ):
        self.line_number = line_number
        self.field_index = field_index
        location = []
        if line_number is not None:
            location.append(f"line {line_number}")
        if field_index is not None:
            location.append(f"field {field_index}")
        if location:
            message = f"{message} ({', '.join(location)})"
        super().__init__(message)
