"""
Custom exception classes.

Represent errors related to building and invoking functions.
"""

from typing import Any, Mapping, Union

from ..models.error import InvocationError


class FunctionError(Exception):
    """Base exception class for local functions."""

    pass


class FunctionBuildError(FunctionError):
    """Raised when a function could not be built."""

    def __init__(self, function_name: str, detail: str = ""):
        self.function_name = function_name
        self.detail = detail
        super().__init__(detail or f"Could not build function {function_name}")


class UnsupportedRuntimeError(FunctionBuildError):
    """Raised when a build needs a newer runtime than the one installed."""

    def __init__(self, function_name: str, required: str, installed: str):
        self.required = required
        self.installed = installed.lstrip("v")
        super().__init__(
            function_name,
            f"Function requires Node.js version {required} or above, but {self.installed} "
            "is installed. Refer to https://ntl.fyi/functions-runtime for information on "
            "how to update.",
        )


class RuntimeInvocationFailure(FunctionError):
    """
    Raised by a runtime when the function failed on the other side of the
    process boundary.

    The payload is either a raw string, which is rendered verbatim, or a
    structured invocation error.
    """

    def __init__(self, payload: Union[str, InvocationError, Mapping[str, Any]]):
        if not isinstance(payload, (str, InvocationError)):
            payload = InvocationError.model_validate(payload)
        self.payload = payload
        if isinstance(payload, str):
            message = payload
        else:
            message = f"{payload.error_type}: {payload.error_message}"
        super().__init__(message)
