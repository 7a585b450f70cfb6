"""
Reconciliation errors and user-friendly error formatting.

Only RegistryLoadError and PersistenceError end an update run. The other
errors are raised and recovered inside a single batch or field.
"""

from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)


class ReconciliationError(Exception):
    """Base class for all field reconciliation errors"""

    # Set by reconcile_and_learn on fatal errors so callers can still report counts
    summary = None


class RegistryLoadError(ReconciliationError):
    """Registry file missing or unparseable"""
    pass


class PersistenceError(ReconciliationError):
    """Registry could not be written back"""
    pass


class ServiceCallError(ReconciliationError):
    """Completion service call failed"""
    pass


class ResponseParseError(ReconciliationError):
    """Completion response did not contain the expected JSON"""
    pass


class ValidationError(ReconciliationError):
    """Invalid data for a registry mutation (e.g. empty symbolic field name)"""
    pass


def format_user_friendly_error(
    error: Exception,
    context: str = "general",
    technical_details: Optional[str] = None
) -> Dict:
    """
    Convert technical error to user-friendly message.

    Args:
        error: The exception that occurred
        context: Context where error occurred (e.g., "compare", "learn")
        technical_details: Additional technical information

    Returns:
        Dictionary with keys message, suggestion, technical, severity, can_retry
    """
    error_str = str(error)

    for error_type, friendly_error in TYPE_MAPPINGS.items():
        if isinstance(error, error_type):
            result = friendly_error.copy()
            result["technical"] = technical_details or error_str
            return result

    for pattern, friendly_error in ERROR_MAPPINGS.items():
        if pattern.lower() in error_str.lower():
            result = friendly_error.copy()
            result["technical"] = technical_details or error_str
            logger.debug(f"Mapped error to user-friendly: {result['message']}")
            return result

    return {
        "message": "An unexpected error occurred during reconciliation",
        "suggestion": "Check the technical logs or try again",
        "technical": technical_details or error_str,
        "severity": "error",
        "can_retry": True
    }


TYPE_MAPPINGS = {
    RegistryLoadError: {
        "message": "The fundamental field registry could not be loaded",
        "suggestion": "Check FIELDRECON_REGISTRY_PATH and that the file is valid JSON",
        "severity": "critical",
        "can_retry": False
    },
    PersistenceError: {
        "message": "The updated registry could not be saved",
        "suggestion": "Check write permissions and free space in the registry directory",
        "severity": "critical",
        "can_retry": True
    },
    ServiceCallError: {
        "message": "The completion service did not respond",
        "suggestion": "Check the LLM provider settings (FIELDRECON_LLM_PROVIDER) and API key",
        "severity": "error",
        "can_retry": True
    },
    ResponseParseError: {
        "message": "The completion service returned an unexpected answer",
        "suggestion": "Try again or use a model that follows JSON instructions more reliably",
        "severity": "warning",
        "can_retry": True
    },
    ValidationError: {
        "message": "A registry change was rejected",
        "suggestion": "Provide a label that contains letters or digits",
        "severity": "warning",
        "can_retry": False
    },
}

ERROR_MAPPINGS = {
    "no such file": {
        "message": "File not found",
        "suggestion": "Check the path of the execution record",
        "severity": "error",
        "can_retry": False
    },
    "permission denied": {
        "message": "Permission denied",
        "suggestion": "Check file permissions or run with the right user",
        "severity": "error",
        "can_retry": False
    },
    "expecting value": {
        "message": "The execution record is not valid JSON",
        "suggestion": "Re-export the execution record from the automation run",
        "severity": "error",
        "can_retry": False
    },
    "timeout": {
        "message": "The completion service took too long to answer",
        "suggestion": "Try again or raise FIELDRECON_LLM_TIMEOUT",
        "severity": "warning",
        "can_retry": True
    },
}


def get_error_category(error: Exception) -> str:
    """
    Categorize error type.

    Returns:
        One of "registry", "llm", "validation", "io", "unknown"
    """
    if isinstance(error, (RegistryLoadError, PersistenceError)):
        return "registry"
    if isinstance(error, (ServiceCallError, ResponseParseError)):
        return "llm"
    if isinstance(error, ValidationError):
        return "validation"
    if isinstance(error, (OSError, ValueError)):
        return "io"
    return "unknown"


def format_error_for_logging(error: Exception, context: str = "") -> str:
    """Format error as a multi-line block for logs and CLI output."""
    friendly = format_user_friendly_error(error, context)

    lines = [
        f"❌ {friendly['message']}",
        f"💡 {friendly['suggestion']}",
        f"🔧 Technical: {friendly['technical']}"
    ]

    if context:
        lines.insert(0, f"📍 Context: {context}")

    return "\n".join(lines)


def create_error_response(
    error: Exception,
    context: str = "",
    include_stacktrace: bool = False
) -> Dict:
    """Create standardized error response for CLI JSON output."""
    import traceback

    friendly = format_user_friendly_error(error, context)

    response = {
        "success": False,
        "error": {
            "message": friendly["message"],
            "suggestion": friendly["suggestion"],
            "severity": friendly["severity"],
            "can_retry": friendly["can_retry"],
            "category": get_error_category(error),
        }
    }

    if include_stacktrace:
        response["error"]["stacktrace"] = traceback.format_exc()
        response["error"]["technical_details"] = friendly["technical"]

    return response
