"""Unified exception taxonomy.

Provides a shared base exception hierarchy for every stage of the
extraction pipeline. Every domain exception inherits from
``PipelineError`` and carries structured context fields that let the
session controller and the presentation layer tell a local input
problem apart from a remote failure.

Taxonomy categories
-------------------
- ``ValidationError``   — input/state violations, never retryable.
- ``TransientError``    — temporary failures (network, throttle), retryable.
- ``PermanentError``    — unrecoverable domain failures, not retryable.
- ``ContractError``     — payload/schema drift between stages, never retryable.

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for logging and for the session snapshot.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all extraction-domain errors.

    Attributes:
        message: Human-readable error description.
        stage: Pipeline stage where the error occurred
            (e.g. ``"region"``, ``"fetch"``, ``"export"``).
        code: Machine-readable error code (e.g. ``"INVALID_GEOMETRY"``).
        retryable: Whether the user may simply retry the operation.
        correlation_id: Session correlation identifier.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        correlation_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.correlation_id = correlation_id
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ContractError):
            return "contract"
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, TransientError):
            return "transient"
        if isinstance(self, PermanentError):
            return "permanent"
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "correlation_id": self.correlation_id,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(PipelineError):
    """Input or state validation failure. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class TransientError(PipelineError):
    """Temporary failure that may succeed on retry."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", True)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class PermanentError(PipelineError):
    """Unrecoverable domain failure. Not retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class ContractError(PipelineError):
    """Payload or schema drift between pipeline stages. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Domain errors shared across stages
# ---------------------------------------------------------------------------


class InvalidGeometry(ValidationError):
    """Raised when a drawn region has too few points or out-of-range coordinates."""

    default_stage = "region"
    default_code = "INVALID_GEOMETRY"


class NoActiveRegionError(ValidationError):
    """Raised when an operation needs an active region and none is set."""

    default_stage = "region"
    default_code = "NO_ACTIVE_REGION"


class InvalidFilterError(ValidationError):
    """Raised when a category filter contains a blank or non-string token."""

    default_stage = "query"
    default_code = "INVALID_FILTER"


class AlreadyInProgress(ValidationError):
    """Raised when an extraction is requested while another is in flight."""

    default_stage = "session"
    default_code = "EXTRACTION_IN_PROGRESS"


class NothingToExportError(ValidationError):
    """Raised when an export is requested without a ready result."""

    default_stage = "export"
    default_code = "NOTHING_TO_EXPORT"


class TransportError(TransientError):
    """Raised when the remote spatial data service call fails.

    Attributes:
        status_code: HTTP status of the failed response, or ``0`` when
            no response was received (timeout, connection error, ...).
    """

    default_stage = "fetch"
    default_code = "TRANSPORT_FAILED"

    def __init__(self, message: str = "", *, status_code: int = 0, **kwargs: object) -> None:
        self.status_code = status_code
        super().__init__(message, **kwargs)

    def to_error_dict(self) -> dict[str, object]:
        payload = super().to_error_dict()
        payload["status_code"] = self.status_code
        return payload


class ExportError(PermanentError):
    """Raised when a feature collection cannot be serialised for export."""

    default_stage = "export"
    default_code = "EXPORT_FAILED"
