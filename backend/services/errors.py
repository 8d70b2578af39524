"""
errors.py — Domain errors raised by the service layer.
Routes translate them into HTTP responses via `status_code` and `message`.
"""


class NoteGymError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(NoteGymError):
    status_code = 400


class NotAuthorizedError(NoteGymError):
    status_code = 401


class ForbiddenError(NoteGymError):
    status_code = 403


class NotFoundError(NoteGymError):
    status_code = 404


class MissionStateError(NoteGymError):
    """The mission exists but its current state rejects the operation."""
    status_code = 400


class ConflictError(NoteGymError):
    """Another request changed the same record first."""
    status_code = 409


class InsufficientFundsError(NoteGymError):
    status_code = 400


class AnalysisUnavailableError(NoteGymError):
    status_code = 503
