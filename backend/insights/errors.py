# insights/errors.py
"""Domain errors. Each carries the HTTP status the API answers with."""


class InsightsError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(InsightsError):
    """User input that can be corrected and resubmitted."""
    status_code = 422


class AuthError(InsightsError):
    status_code = 401


class Forbidden(InsightsError):
    status_code = 403


class NotFound(InsightsError):
    status_code = 404


class ExternalServiceError(InsightsError):
    """A hosted collaborator (storage, AI) failed; prior state is kept."""
    status_code = 502


class PersistenceError(ExternalServiceError):
    pass


class AnalysisError(ExternalServiceError):
    pass
