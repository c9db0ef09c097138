"""Custom exception hierarchy for the Notemarket API."""

from __future__ import annotations


class AppError(Exception):
    """Base application error with a stable machine-readable code."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Serialize the error in the API standard shape."""
        return {"error": self.message, "code": self.code}


class InsufficientPointsError(AppError):
    """Raised when a user tries to spend more points than they have."""

    def __init__(self, required: int | None = None, available: int | None = None) -> None:
        if required is not None and available is not None:
            message = f"Insufficient points: need {required}, have {available}"
        else:
            message = "Insufficient points"
        super().__init__(message=message, code="INSUFFICIENT_POINTS")


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str) -> None:
        super().__init__(message=f"{resource} not found", code="NOT_FOUND", status_code=404)


class ConflictError(AppError):
    """Raised on duplicate/conflicting operations."""

    def __init__(self, reason: str, code: str = "CONFLICT") -> None:
        super().__init__(message=reason, code=code, status_code=409)


class AlreadyPurchasedError(ConflictError):
    """Raised when the buyer already owns the note."""

    def __init__(self) -> None:
        super().__init__("You already own this note", code="ALREADY_PURCHASED")


class ExclusiveSoldError(AppError):
    """Raised when an exclusive note has left the marketplace."""

    def __init__(self) -> None:
        super().__init__(
            message="This exclusive note has already been sold and is no longer available.",
            code="EXCLUSIVE_SOLD",
            status_code=410,
        )


class SelfPurchaseError(AppError):
    def __init__(self) -> None:
        super().__init__(message="You can't purchase your own note", code="SELF_PURCHASE")


class NoteIsFreeError(AppError):
    def __init__(self) -> None:
        super().__init__(message="This note is free", code="NOTE_IS_FREE")


class NoteNotFreeError(AppError):
    def __init__(self) -> None:
        super().__init__(
            message="Donations are only available for free notes.",
            code="NOTE_NOT_FREE",
        )


class SelfDonationError(AppError):
    def __init__(self) -> None:
        super().__init__(message="You cannot donate to your own note.", code="SELF_DONATION")


class PromoCodeError(AppError):
    """Raised when a promo code cannot be redeemed."""

    def __init__(self, message: str, code: str = "INVALID_CODE") -> None:
        super().__init__(message=message, code=code)


class RateLimitedError(AppError):
    """Raised when a client exceeds the request budget of an endpoint."""

    def __init__(self, retry_after: int, headers: dict[str, str] | None = None) -> None:
        self.retry_after = retry_after
        self.headers = headers or {"Retry-After": str(retry_after)}
        super().__init__(
            message="Too many requests. Please try again later.",
            code="RATE_LIMITED",
            status_code=429,
        )


class StoreError(AppError):
    """Raised when the backing store fails; details stay in the server log."""

    def __init__(self) -> None:
        super().__init__(
            message="Operation failed, please try again",
            code="STORE_ERROR",
            status_code=503,
        )


class UnauthorizedError(AppError):
    """Raised when the caller is not authenticated."""

    def __init__(self, reason: str = "Unauthorized") -> None:
        super().__init__(message=reason, code="UNAUTHORIZED", status_code=401)


class InvalidInputError(AppError):
    """Raised for request payload or parameter validation issues."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="INVALID_INPUT", status_code=422)
