import uuid

import pytest

from services.common.core import request_context


def test_function_context_generates_uuid():
    """Ensure an invocation scope carries a UUIDv4 invocation id."""
    request_context.clear_context()

    with request_context.function_context("hello", invocation=True) as inv_id:
        try:
            assert str(uuid.UUID(inv_id)) == inv_id
        except ValueError:
            pytest.fail(f"Generated ID is not a valid UUID: {inv_id}")
        assert request_context.get_invocation_id() == inv_id


def test_function_context_ids_are_unique():
    with request_context.function_context("a", invocation=True) as first:
        pass
    with request_context.function_context("a", invocation=True) as second:
        pass
    assert first != second


def test_function_context_restores_previous_values():
    request_context.clear_context()

    with request_context.function_context("hello", invocation=True) as inv_id:
        assert request_context.get_function_name() == "hello"
        assert request_context.get_invocation_id() == inv_id

        with request_context.function_context("nested"):
            assert request_context.get_function_name() == "nested"
            # Without invocation=True the outer id is kept.
            assert request_context.get_invocation_id() == inv_id

        assert request_context.get_function_name() == "hello"

    assert request_context.get_function_name() is None
    assert request_context.get_invocation_id() is None


def test_function_context_restores_on_error():
    request_context.clear_context()

    with pytest.raises(RuntimeError):
        with request_context.function_context("hello", invocation=True):
            raise RuntimeError("boom")

    assert request_context.get_function_name() is None
    assert request_context.get_invocation_id() is None
