"""Service-specific errors.

Input and rule violations use Protean's ``ValidationError`` and missing
records use ``ObjectNotFoundError``. The subclasses here only exist where the
HTTP layer needs to tell a conflict or a permission problem apart from an
ordinary validation failure.
"""

from protean.exceptions import ValidationError


class ForbiddenError(ValidationError):
    """The caller is not allowed to act on this review (self-vote, non-owner edit)."""


class ConflictError(ValidationError):
    """The write would duplicate something that must be unique."""


class DuplicateReviewError(ConflictError):
    """The customer already holds a review for this product."""


class UpstreamUnavailableError(Exception):
    """A collaborating service could not be reached or answered garbage."""

    def __init__(self, service: str, detail: str) -> None:
        super().__init__(f"{service} unavailable: {detail}")
        self.service = service
        self.detail = detail
