"""Custom exceptions for tutor-insights.

Domain code prefers neutral defaults over raising; these exceptions cover the
caller contract violations and IO failures that cannot be safely defaulted.
"""

from __future__ import annotations


class TutorInsightsError(Exception):
    """Base exception for all tutor-insights errors."""

    pass


class InputValidationError(TutorInsightsError, ValueError):
    """Raised when caller-supplied arguments violate the call contract."""

    pass


class InvalidRatingFilterError(InputValidationError):
    """Raised when a rating filter is not a number with an optional trailing ``+``."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Rating filter {value!r} is not a number (expected e.g. '4' or '4.5+').")


class InvalidAnalysisTypeError(InputValidationError):
    """Raised when an analysis type is not one of the supported kinds."""

    def __init__(self, value: str) -> None:
        super().__init__(
            f"Analysis type {value!r} is not supported. "
            "Use one of: student, tutor, comparative, overall."
        )


class InvalidEntityTypeError(InputValidationError):
    """Raised when a comparison entity type is not ``student`` or ``tutor``."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Entity type {value!r} is not supported. Use 'student' or 'tutor'.")


class ComparisonTooSmallError(InputValidationError):
    """Raised when fewer than two entities are supplied for comparison."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"At least 2 entities are required to compare (got {count}).")


class InvalidPaginationError(InputValidationError):
    """Raised when a page number or page size is below 1."""

    def __init__(self, field_name: str, value: int) -> None:
        super().__init__(f"{field_name} must be a positive integer (got {value}).")


class InvalidTimeRangeError(InputValidationError):
    """Raised when a time range cannot be parsed or ends before it starts."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Invalid time range: {detail}")


class IncomingDataError(TutorInsightsError, ValueError):
    """Raised when inbound record data fails validation."""

    pass


class RecordFileError(TutorInsightsError):
    """Raised when a record file is not a JSON array or an object wrapping one."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"Record file {path} could not be loaded: {detail}")


class ConfigFileNotFoundError(TutorInsightsError):
    """Raised when an explicitly requested config file does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Config file not found: {path}")


class ConfigFileParseError(TutorInsightsError):
    """Raised when a config file is not valid TOML."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} is not valid TOML: {detail}")


class ConfigFileValidationError(TutorInsightsError):
    """Raised when a config file does not match the supported schema."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} failed validation: {detail}")
