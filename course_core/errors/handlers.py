# =============================================================================
# course_core/errors/handlers.py
# Page-level error reporting for the Streamlit screens
# =============================================================================

from __future__ import annotations
import functools
import traceback
from typing import Optional, Callable, TypeVar, Any
import streamlit as st

from course_core.logging import get_logger
from .exceptions import StudentCourseError

logger = get_logger(__name__)

T = TypeVar("T")

# Follow-up hint appended to the message shown for a given error code
RECOVERY_HINTS = {
    "NET_001": "Reconnect and try again. Saved courses and students stay readable offline.",
    "API_001": "The server did not accept the request.",
    "LOCAL_001": "Pick the image again or save without one.",
    "CONFIG_001": "Check the [api] section of .streamlit/secrets.toml.",
}


def describe(error: Exception, user_message: Optional[str] = None) -> tuple:
    """Return (code, message, details, recoverable) for any exception."""
    if isinstance(error, StudentCourseError):
        return error.code, user_message or error.message, error.details, error.recoverable
    details = {"traceback": traceback.format_exc()}
    return "UNKNOWN", user_message or str(error), details, True


def show_failure(message: str, code: Optional[str] = None, recoverable: bool = True) -> None:
    """Render one failure banner, with the recovery hint for its code."""
    prefix = "Error" if recoverable else "Critical Error"
    text = f"{prefix}: {message}"
    hint = RECOVERY_HINTS.get(code or "")
    if hint:
        text = f"{text}. {hint}"
    st.error(text)


def handle_error(
    error: Exception,
    show_user_message: bool = True,
    log_error: bool = True,
    user_message: Optional[str] = None,
) -> None:
    """
    Log an exception and report it on the current page.

    Args:
        error: The exception to handle
        show_user_message: Whether to render an st.error banner
        log_error: Whether to log the error
        user_message: Text shown instead of the exception message
    """
    code, message, details, recoverable = describe(error, user_message)

    if log_error:
        logger.error(f"[{code}] {message}", extra={"details": details}, exc_info=error)

    if not show_user_message:
        return

    show_failure(message, code, recoverable)
    if details and st.session_state.get("debug_mode", False):
        with st.expander("Error Details", expanded=False):
            st.json(details)


def report_result(result, action: str) -> bool:
    """
    Show a failed write result from a sync coordinator.

    Skipped writes (missing id) and cancelled ones stay silent, the former
    being logged by the coordinator already.

    Returns:
        True when the write went through
    """
    if result.success:
        return True
    if result.error_code != "TASK_001":
        show_failure(f"Could not {action}: {result.error}", result.error_code)
    return False


def safe_execute(
    func: Callable[..., T],
    *args,
    default: Optional[T] = None,
    error_message: Optional[str] = None,
    reraise: bool = False,
    **kwargs,
) -> Optional[T]:
    """
    Run a page callable, reporting any exception instead of crashing the run.

    Usage:
        result = safe_execute(
            lambda: service.submit(courses.read_all).result(),
            error_message="Failed to load courses",
        )
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        handle_error(e, user_message=error_message)
        if reraise:
            raise
        return default


class ErrorContext:
    """
    Guard a block of page code.

    Recoverable failures are reported and swallowed so the page keeps
    rendering; `failed` tells the page afterwards.

    Usage:
        with ErrorContext("Loading student 10") as ctx:
            result = students.read_one(10)
        if ctx.failed:
            st.stop()
    """

    def __init__(self, operation: str, recoverable: bool = True):
        self.operation = operation
        self.recoverable = recoverable
        self.failed = False

    def __enter__(self) -> ErrorContext:
        logger.debug(f"Page step: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None:
            return False

        self.failed = True
        user_message = None if isinstance(exc_val, StudentCourseError) else f"Error during: {self.operation}"
        handle_error(exc_val, user_message=user_message)
        return self.recoverable


def error_boundary(
    default_return: Any = None,
    error_message: Optional[str] = None,
    log: bool = True,
):
    """
    Decorator for render functions: a broken row must not take the page down.

    Usage:
        @error_boundary(error_message="Could not render the student list")
        def render_students(items):
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., Optional[T]]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Optional[T]:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                if log:
                    logger.error(f"Render step {func.__name__} failed: {e}", exc_info=True)
                if error_message:
                    st.error(error_message)
                return default_return

        return wrapper

    return decorator
