import time
import uuid

from loguru import logger

from core.utils import get_client_ip
from harbour_core.posthog_config import capture_exception


class RequestLoggingMiddleware:
    """
    Bind a request id to every log line and write one access-log entry per
    request. The id is echoed back in the ``X-Request-ID`` header.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.META.get("HTTP_X_REQUEST_ID") or uuid.uuid4().hex[:12]
        request.request_id = request_id
        started = time.monotonic()

        with logger.contextualize(request_id=request_id):
            response = self.get_response(request)
            duration = round((time.monotonic() - started) * 1000, 1)

            user = getattr(request, "user", None)
            logger.bind(
                access_log=True,
                user=user.email if user is not None and user.is_authenticated else "anonymous",
                method=request.method,
                path=request.path,
                status=response.status_code,
                duration=duration,
            ).info("request")

        response["X-Request-ID"] = request_id
        return response


class ErrorTrackingMiddleware:
    """Report unhandled view exceptions to PostHog, then let Django handle them."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        user = getattr(request, "user", None)
        distinct_id = str(user.pk) if user is not None and user.is_authenticated else "anonymous"

        logger.opt(exception=exception).error(
            "Unhandled exception in request",
            path=request.path,
            method=request.method,
            user=distinct_id,
            exception_type=type(exception).__name__,
        )
        capture_exception(
            exception,
            distinct_id=distinct_id,
            properties={
                "request_path": request.path,
                "request_method": request.method,
                "ip_address": get_client_ip(request),
                "user_agent": request.META.get("HTTP_USER_AGENT", ""),
            },
        )
        return None
