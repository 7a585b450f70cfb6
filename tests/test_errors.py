"""
Unit tests for reconciliation errors and user-friendly formatting.
"""

import json

import pytest
from fieldrecon.errors import (
    PersistenceError,
    RegistryLoadError,
    ResponseParseError,
    ServiceCallError,
    ValidationError,
    ReconciliationError,
    format_user_friendly_error,
    get_error_category,
    format_error_for_logging,
    create_error_response,
)


def test_error_hierarchy():
    """All engine errors share a base class."""
    for cls in (RegistryLoadError, PersistenceError, ServiceCallError, ResponseParseError, ValidationError):
        assert issubclass(cls, ReconciliationError)


def test_format_registry_load_error():
    result = format_user_friendly_error(RegistryLoadError("Registry file not found: x.json"))

    assert "registry" in result["message"].lower()
    assert "FIELDRECON_REGISTRY_PATH" in result["suggestion"]
    assert result["severity"] == "critical"
    assert result["can_retry"] is False
    assert result["technical"] == "Registry file not found: x.json"


def test_format_timeout_error():
    """Pattern mapping applies to errors without a dedicated type."""
    result = format_user_friendly_error(TimeoutError("Request timeout after 300s"))

    assert "too long" in result["message"].lower()
    assert result["severity"] == "warning"
    assert result["can_retry"] is True


def test_format_invalid_json():
    try:
        json.loads("")
    except ValueError as e:
        result = format_user_friendly_error(e)
    assert "not valid json" in result["message"].lower()


def test_format_unknown_error():
    result = format_user_friendly_error(RuntimeError("Some random error"))

    assert "unexpected" in result["message"].lower()
    assert result["severity"] == "error"
    assert result["can_retry"] is True


def test_technical_details_override():
    result = format_user_friendly_error(RuntimeError("x"), technical_details="details")
    assert result["technical"] == "details"


@pytest.mark.parametrize("error,category", [
    (RegistryLoadError("x"), "registry"),
    (PersistenceError("x"), "registry"),
    (ServiceCallError("x"), "llm"),
    (ResponseParseError("x"), "llm"),
    (ValidationError("x"), "validation"),
    (FileNotFoundError("x"), "io"),
    (RuntimeError("x"), "unknown"),
])
def test_error_category(error, category):
    assert get_error_category(error) == category


def test_format_error_for_logging():
    formatted = format_error_for_logging(PersistenceError("disk full"), context="learn")

    assert "📍 Context: learn" in formatted
    assert "❌" in formatted
    assert "💡" in formatted
    assert "disk full" in formatted


def test_create_error_response():
    response = create_error_response(ServiceCallError("boom"), context="learn")

    assert response["success"] is False
    assert response["error"]["category"] == "llm"
    assert response["error"]["can_retry"] is True
    assert "stacktrace" not in response["error"]


def test_create_error_response_with_stacktrace():
    response = create_error_response(ValidationError("bad"), include_stacktrace=True)
    assert "stacktrace" in response["error"]
    assert response["error"]["technical_details"] == "bad"
