"""
Centralized exception hierarchy for trip analysis errors.

The four core functions (distance, route distance, segmentation and
simplification) never raise on malformed geodata. These exceptions are
raised only at the ingestion boundary (strict mode) and when a
segmentation or simplification configuration is rejected.
"""


class TripAnalysisError(Exception):
    """Base exception for all trip analysis errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(TripAnalysisError):
    """Exception raised when input data validation fails."""


class InvalidTimestampError(ValidationError):
    """Exception raised when a point timestamp cannot be parsed."""


class InvalidCoordinateError(ValidationError):
    """Exception raised when a point has non-finite or out-of-range coordinates."""


class ConfigurationError(ValidationError):
    """Exception raised when a segmentation or simplification setting is invalid."""


TripAnalysisException = TripAnalysisError
ValidationException = ValidationError
