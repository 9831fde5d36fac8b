"""
RequestContext management.
Use ContextVar to share the invocation id across async execution.
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional


# Context variable for the current function invocation (UUID).
_invocation_id_var: ContextVar[Optional[str]] = ContextVar("invocation_id", default=None)
# Context variable for the function being invoked or built.
_function_name_var: ContextVar[Optional[str]] = ContextVar("function_name", default=None)


def get_invocation_id() -> Optional[str]:
    """Get the current invocation id."""
    return _invocation_id_var.get()


def get_function_name() -> Optional[str]:
    """Get the function bound to the current context."""
    return _function_name_var.get()


@contextmanager
def function_context(function_name: str, invocation: bool = False) -> Iterator[Optional[str]]:
    """
    Bind a function (and optionally a fresh invocation id) for the duration
    of the block, restoring the previous values afterwards.
    """
    name_token = _function_name_var.set(function_name)
    id_token = None
    invocation_id = None
    if invocation:
        invocation_id = str(uuid.uuid4())
        id_token = _invocation_id_var.set(invocation_id)
    try:
        yield invocation_id
    finally:
        if id_token is not None:
            _invocation_id_var.reset(id_token)
        _function_name_var.reset(name_token)


def clear_context() -> None:
    """Clear the invocation context."""
    _invocation_id_var.set(None)
    _function_name_var.set(None)
