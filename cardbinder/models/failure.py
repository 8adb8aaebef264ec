"""
Failure classification.

Only structural and precondition failures are raised as exceptions. Row-level
and card-level import problems are returned as data (see RowFailure).

Every exception that can reach the API surface is a KnownError, which
carries a classification, a user-facing message and an HTTP status code.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    NOT_FOUND = "not_found"

    # Constraint violations
    LAYOUT_VIOLATION = "layout_violation"
    TRADE_VIOLATION = "trade_violation"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a serializable FailureDetail."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class LayoutError(KnownError):
    """
    Raised when a binder operation addresses a page or slot that does not exist,
    or tries to place a card into an occupied slot.

    This is a precondition failure local to the call; the binder is unchanged.
    """

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.LAYOUT_VIOLATION,
            message=message,
            detail=detail,
            suggestion="Reload the binder and pick an existing page and slot.",
            status_code=400,
        )


class BinderNotFoundError(KnownError):
    """Raised when a binder id does not exist in storage."""

    def __init__(self, binder_id: str):
        self.binder_id = binder_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message="Binder not found.",
            detail=f"binder_id={binder_id}",
            status_code=404,
        )


class TradeError(KnownError):
    """Raised when a trade transition is not allowed for its current state or actor."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(
            kind=FailureKind.TRADE_VIOLATION,
            message=message,
            status_code=status_code,
        )
