"""
Centralized error handling utilities.

Helpers for logging exceptions through Loguru and PostHog, for turning API
errors into ``{"error": ...}`` bodies, and for the ``{error}``/``{ok, data}``
action results the manage forms render inline.
"""

from functools import wraps
from typing import Any, Callable, Optional

from django.core.exceptions import PermissionDenied
from django.http import Http404
from loguru import logger
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from harbour_core.posthog_config import capture_exception


def action_error(message: str) -> dict:
    """Failed manage action, shown inline above the form."""
    return {"error": message}


def action_success(data: Any = None) -> dict:
    return {"ok": True, "data": data}


def first_form_error(form) -> Optional[str]:
    """
    First human-readable error of a bound form (and its formset, if any).

    Field errors read ``"<Label>: <message>"``, except required-field errors,
    which become ``"<Label> is required"``.
    """
    for name, errors in form.errors.items():
        data = errors.as_data()
        if name == "__all__":
            return data[0].messages[0]
        label = form.fields[name].label if name in form.fields else name
        label = label or name.replace("_", " ").capitalize()
        if data[0].code == "required":
            return f"{label} is required"
        return f"{label}: {data[0].messages[0]}"
    return None


def log_exception(context: str = "", reraise: bool = True):
    """
    Context manager and decorator for logging exceptions.

    Args:
        context: Additional context string for the log
        reraise: Whether to re-raise the exception

    Example:
        with log_exception("syncing greenhouse jobs", reraise=False):
            sync_jobs(source)
    """

    class ExceptionLogger:
        def __init__(self):
            self.context = context
            self.reraise = reraise

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_val is not None:
                logger.opt(exception=exc_val).error(
                    f"Exception in {self.context}" if self.context else "Exception occurred",
                    exception_type=exc_type.__name__,
                )
                capture_exception(exc_val, properties={"context": self.context})
                return not self.reraise
            return False

        def __call__(self, func: Callable) -> Callable:
            @wraps(func)
            def wrapper(*args, **kwargs):
                with self:
                    return func(*args, **kwargs)

            return wrapper

    return ExceptionLogger()


def api_exception_handler(exc, context):
    """
    DRF exception handler producing ``{"error": "..."}`` bodies.

    404s name the resource (``"Company not found"``) when the view exposes a
    ``resource_name``.
    """
    if isinstance(exc, Http404):
        view = context.get("view")
        resource = getattr(view, "resource_name", None)
        message = f"{resource} not found" if resource else "Not found"
        return Response({"error": message}, status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)
    if response is None:
        request = context.get("request")
        logger.opt(exception=exc).error(
            "Unhandled API exception",
            path=getattr(request, "path", "-"),
            exception_type=type(exc).__name__,
        )
        capture_exception(exc, properties={"path": getattr(request, "path", "-")})
        return Response(
            {"error": "Internal server error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    detail = response.data
    if isinstance(detail, dict) and "detail" in detail:
        message = str(detail["detail"])
    elif isinstance(detail, dict):
        field, messages = next(iter(detail.items()))
        message = f"{field}: {messages[0] if isinstance(messages, list) else messages}"
    elif isinstance(detail, list) and detail:
        message = str(detail[0])
    else:
        message = str(detail)
    response.data = {"error": message}
    return response
