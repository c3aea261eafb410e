"""Tests for the unified exception taxonomy.

Validates:
- PipelineError hierarchy and structured attributes
- Category classification (validation, transient, permanent, contract)
- ``to_error_dict()`` produces stable payload keys
- Every stage exception is a PipelineError with a default stage and code
"""

from __future__ import annotations

from typing import ClassVar

from osm_extract.activities.normalize_osm import ResponseFormatError
from osm_extract.core.config import ConfigValidationError
from osm_extract.core.exceptions import (
    AlreadyInProgress,
    ContractError,
    ExportError,
    InvalidFilterError,
    InvalidGeometry,
    NoActiveRegionError,
    NothingToExportError,
    PermanentError,
    PipelineError,
    TransientError,
    TransportError,
    ValidationError,
)
from osm_extract.providers.base import ProviderError


class TestPipelineErrorBase:
    """PipelineError base class behavior."""

    def test_default_attributes(self) -> None:
        err = PipelineError("boom")
        assert err.message == "boom"
        assert err.stage == ""
        assert err.code == ""
        assert err.retryable is False
        assert err.correlation_id == ""

    def test_custom_attributes(self) -> None:
        err = PipelineError(
            "fail",
            stage="fetch",
            code="TRANSPORT_FAILED",
            retryable=True,
            correlation_id="abc-123",
        )
        assert err.stage == "fetch"
        assert err.code == "TRANSPORT_FAILED"
        assert err.retryable is True
        assert err.correlation_id == "abc-123"

    def test_str_is_message(self) -> None:
        assert str(PipelineError("human-readable error")) == "human-readable error"

    def test_to_error_dict_keys(self) -> None:
        err = PipelineError("x", stage="s", code="C", retryable=True, correlation_id="id")
        d = err.to_error_dict()
        assert set(d.keys()) == {
            "category",
            "code",
            "stage",
            "message",
            "retryable",
            "correlation_id",
        }
        assert d["message"] == "x"
        assert d["retryable"] is True


class TestCategoryBases:
    """Category base classes set correct defaults."""

    def test_validation_error_not_retryable(self) -> None:
        err = ValidationError("bad input")
        assert err.retryable is False
        assert err.category == "validation"

    def test_transient_error_retryable(self) -> None:
        err = TransientError("timeout")
        assert err.retryable is True
        assert err.category == "transient"

    def test_permanent_error_not_retryable(self) -> None:
        err = PermanentError("gone")
        assert err.retryable is False
        assert err.category == "permanent"

    def test_contract_error_not_retryable(self) -> None:
        err = ContractError("schema drift")
        assert err.retryable is False
        assert err.category == "contract"

    def test_dynamic_category_from_retryable(self) -> None:
        assert PipelineError("x", retryable=True).category == "transient"
        assert PipelineError("x", retryable=False).category == "permanent"


class TestAllExceptionsArePipelineError:
    """Every custom exception inherits from PipelineError."""

    EXCEPTION_CLASSES: ClassVar[list[type[PipelineError]]] = [
        InvalidGeometry,
        NoActiveRegionError,
        InvalidFilterError,
        AlreadyInProgress,
        NothingToExportError,
        TransportError,
        ExportError,
        ResponseFormatError,
        ConfigValidationError,
        ProviderError,
    ]

    def test_all_subclass_pipeline_error(self) -> None:
        for cls in self.EXCEPTION_CLASSES:
            assert issubclass(cls, PipelineError), f"{cls.__name__} is not a PipelineError"


class TestStageExceptionStageAndCode:
    """Every stage exception has a default stage, code and category."""

    def test_invalid_geometry(self) -> None:
        err = InvalidGeometry("2 points")
        assert err.stage == "region"
        assert err.code == "INVALID_GEOMETRY"
        assert err.category == "validation"

    def test_already_in_progress(self) -> None:
        err = AlreadyInProgress("busy")
        assert err.stage == "session"
        assert err.code == "EXTRACTION_IN_PROGRESS"
        assert err.retryable is False

    def test_transport_error_is_transient(self) -> None:
        err = TransportError("HTTP 504", status_code=504)
        assert err.stage == "fetch"
        assert err.code == "TRANSPORT_FAILED"
        assert err.category == "transient"
        assert err.retryable is True
        assert err.status_code == 504

    def test_transport_error_default_status(self) -> None:
        assert TransportError("connection refused").status_code == 0

    def test_transport_error_dict_includes_status(self) -> None:
        d = TransportError("HTTP 429", status_code=429).to_error_dict()
        assert d["status_code"] == 429
        assert d["category"] == "transient"

    def test_export_error_is_permanent(self) -> None:
        err = ExportError("bad coordinates")
        assert err.stage == "export"
        assert err.category == "permanent"

    def test_response_format_error_is_contract(self) -> None:
        err = ResponseFormatError("no elements")
        assert err.stage == "normalize"
        assert err.category == "contract"

    def test_config_validation_error(self) -> None:
        err = ConfigValidationError("HTTP_TIMEOUT_S", -1, "must be > 0")
        assert err.stage == "config"
        assert err.code == "CONFIG_VALIDATION_FAILED"
        assert err.key == "HTTP_TIMEOUT_S"
        assert err.value == -1

    def test_provider_error(self) -> None:
        err = ProviderError("overpass", "unknown")
        assert err.provider == "overpass"
        assert err.code == "PROVIDER_ERROR"
        assert str(err) == "[overpass] unknown"
