"""
Invocation error normalization.

Turns whatever a runtime throws (a native exception, a structured error
from across the process boundary, or a raw string) into one canonical
shape, and renders it into a 500 response.
"""

import json
import logging
import traceback
from typing import Any, List, Mapping, Union

import httpx

from ..models.error import InvocationError
from .error_page import ErrorPageRenderer
from .exceptions import RuntimeInvocationFailure

logger = logging.getLogger("functions.errors")

REQUIRE_ESM_CODE = "ERR_REQUIRE_ESM"
REQUIRE_ESM_MESSAGE = (
    "a CommonJS file cannot import ES modules. Consider switching your function to ES "
    "modules. For more information, refer to https://ntl.fyi/functions-runtime."
)

RawError = Union[BaseException, InvocationError, Mapping[str, Any]]


def _exception_stack(exc: BaseException) -> List[str]:
    if exc.__traceback__ is None:
        return []
    lines = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return "".join(lines).splitlines()


def normalize_error(raw_error: RawError) -> InvocationError:
    if isinstance(raw_error, RuntimeInvocationFailure) and not isinstance(
        raw_error.payload, str
    ):
        raw_error = raw_error.payload

    if isinstance(raw_error, BaseException):
        normalized = InvocationError(
            error_type=type(raw_error).__name__,
            error_message=str(raw_error),
            stack_trace=_exception_stack(raw_error),
        )
        if getattr(raw_error, "code", None) == REQUIRE_ESM_CODE:
            return normalized.model_copy(update={"error_message": REQUIRE_ESM_MESSAGE})
        return normalized

    if not isinstance(raw_error, InvocationError):
        raw_error = InvocationError.model_validate(raw_error)

    # Format stack lines the way native stack traces are printed.
    return InvocationError(
        error_type=raw_error.error_type,
        error_message=raw_error.error_message,
        stack_trace=[f"    at {line}" for line in raw_error.stack_trace],
    )


def format_error(raw_error: RawError, accepts_html: bool) -> str:
    error = normalize_error(raw_error)

    if accepts_html:
        return json.dumps(
            {
                "errorType": error.error_type,
                "errorMessage": error.error_message,
                "trace": error.stack_trace,
            }
        )

    stack = "\n".join(error.stack_trace)
    return f"{error.error_type}: {error.error_message}\n {stack}"


def accepts_html(request: httpx.Request) -> bool:
    return "text/html" in request.headers.get("accept", "")


async def handle_error(
    raw_error: Union[RawError, str],
    accepts_html: bool,
    renderer: ErrorPageRenderer,
) -> httpx.Response:
    """
    Convert an invocation failure into a 500 response.

    Raw strings are used verbatim; anything else goes through format_error.
    Browser clients get an HTML page, everyone else plain text.
    """
    if isinstance(raw_error, RuntimeInvocationFailure) and isinstance(raw_error.payload, str):
        raw_error = raw_error.payload

    if isinstance(raw_error, str):
        error_string = raw_error
    else:
        error_string = format_error(raw_error, accepts_html)
    status = 500

    if accepts_html:
        try:
            body = await renderer.render(error_string, "function")
        except Exception as e:
            logger.error(
                f"Failed to render error page: {e}", extra={"error_type": type(e).__name__}
            )
        else:
            return httpx.Response(status, headers={"Content-Type": "text/html"}, text=body)

    return httpx.Response(status, text=error_string)
