"""Error taxonomy for the work values pipeline."""


class WorkValuesError(Exception):
    """Base class for all work values errors."""
    pass


class ValidationError(WorkValuesError, ValueError):
    """Raised for malformed responses, resubmissions and invalid reference data."""
    pass


class IncompleteAssessmentError(WorkValuesError):
    """Raised when scores are requested before every round has a response."""
    pass


class AssessmentClosedError(WorkValuesError):
    """Raised when a response is submitted to a completed assessment."""
    pass


class CatalogUnavailableError(WorkValuesError):
    """Raised when the occupation catalog is missing or empty."""
    pass


class AssessmentNotFoundError(WorkValuesError, KeyError):
    """Raised when an assessment id is not in the store."""
    pass
