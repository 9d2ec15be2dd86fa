"""Error classes shared by the services and rendered by the HTTP layer."""


class LeadboardError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(LeadboardError):
    """Missing row or a row owned by someone else; the two are never told apart."""

    status_code = 404


class ValidationError(LeadboardError):
    status_code = 400


class AuthError(LeadboardError):
    status_code = 401


class StorageError(LeadboardError):
    status_code = 500
