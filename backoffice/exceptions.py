"""
Domain errors.

Services raise these; routers roll back and re-raise; the
handlers in main.py turn them into {"error": ...} responses
with the status code carried by the class.
"""


class BackOfficeError(Exception):
    status_code = 500
    code: str | None = None

    def __init__(self, message: str, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_payload(self) -> dict:
        if self.code:
            payload = {"error": self.code, "message": self.message}
        else:
            payload = {"error": self.message}
        payload.update(self.extra)
        return payload


class UnauthenticatedError(BackOfficeError):
    status_code = 401


class AccountDeletedError(BackOfficeError):
    status_code = 403
    code = "ACCOUNT_DELETED"

    def __init__(self, message: str = (
        "Your account has been deleted by the administrator. "
        "Please contact support for assistance."
    )):
        super().__init__(message)


class AccountDeactivatedError(BackOfficeError):
    status_code = 403
    code = "ACCOUNT_DEACTIVATED"

    def __init__(self, message: str = (
        "Your account is temporarily deactivated by the administrator. "
        "Please contact support to reactivate your account."
    )):
        super().__init__(message)


class ForbiddenError(BackOfficeError):
    status_code = 403


class SelfModificationError(BackOfficeError):
    """An account tried to edit or delete its own staff record."""
    status_code = 400


class NotFoundError(BackOfficeError):
    status_code = 404


class InvalidInputError(BackOfficeError):
    status_code = 400


class ConflictError(BackOfficeError):
    status_code = 409


class OtpError(BackOfficeError):
    status_code = 400


class OtpNotFoundError(OtpError):
    pass


class OtpExpiredError(OtpError):
    pass


class OtpInvalidError(OtpError):
    def __init__(self, message: str, remaining_attempts: int):
        super().__init__(message, remainingAttempts=remaining_attempts)
        self.remaining_attempts = remaining_attempts


class OtpAttemptsExhaustedError(OtpError):
    pass


class UpstreamError(BackOfficeError):
    """Identity provider or email provider failure."""
    status_code = 502
