"""Public API surface: default instance, type guards and result helpers."""

from __future__ import annotations

import logging
from typing import Any

from hypothesis import given, settings
from hypothesis import strategies as st
import pytest

import safecall
from safecall import (
    NormalizedError,
    SafeResult,
    SafeUtilOptions,
    SafeUtils,
    create_safe_utils,
    is_failure,
    is_success,
    safe,
    safe_all,
    safe_async,
)

pytestmark = pytest.mark.unit


def test_default_instance_exposes_six_bound_operations() -> None:
    for name in (
        "safe",
        "safe_async",
        "safe_all",
        "safe_observable",
        "safe_observable_all",
        "safe_with_retries",
    ):
        op = getattr(safecall, name)
        assert callable(op)
        assert isinstance(op.__self__, SafeUtils)
        assert name in safecall.__all__


def test_default_safe_handles_sync_success() -> None:
    err, result = safe(lambda: 42)

    assert err is None
    assert result == 42
    assert is_failure((err, result)) is False


@pytest.mark.asyncio
async def test_default_async_operations(caplog: pytest.LogCaptureFixture) -> None:
    async def ok() -> int:
        return 1

    async def boom() -> int:
        raise ValueError("bad")

    with caplog.at_level(logging.CRITICAL, logger="safecall.errors"):
        assert await safe_async(ok) == (None, 1)
        results = await safe_all([ok(), boom()])

    assert results[0] == (None, 1)
    assert isinstance(results[1].error, ValueError)


def test_default_logger_writes_error_record(caplog: pytest.LogCaptureFixture) -> None:
    utils = create_safe_utils()

    with caplog.at_level(logging.ERROR, logger="safecall.errors"):
        err, _ = utils.safe(lambda: 1 / 0)

    records = [r for r in caplog.records if r.name == "safecall.errors"]
    assert len(records) == 1
    assert records[0].levelno == logging.ERROR
    assert "ZeroDivisionError" in records[0].getMessage()
    assert records[0].exc_info is not None
    assert records[0].exc_info[1] is err


def test_custom_logger_receives_normalized_error() -> None:
    sink: list[BaseException] = []
    utils = create_safe_utils(SafeUtilOptions(logger=sink.append))

    def fail() -> None:
        raise RuntimeError("An error occurred after all")

    err, _ = utils.safe(fail)

    assert sink == [err]
    assert str(sink[0]) == "An error occurred after all"


# =============================================================================
# Type guards
# =============================================================================


def test_is_success_on_success_pair() -> None:
    success: SafeResult[int] = SafeResult(None, 42)
    assert is_success(success)
    assert success.value == 42


def test_is_failure_on_failure_pair() -> None:
    failure = SafeResult(ValueError("Something went wrong"), None)
    assert is_failure(failure)
    assert str(failure.error) == "Something went wrong"


def test_guards_accept_plain_tuples() -> None:
    assert is_success((None, 0))
    assert is_failure((KeyError("k"), None))


@given(
    error=st.one_of(st.none(), st.builds(ValueError, st.text(max_size=5))),
    value=st.one_of(st.none(), st.integers(), st.text(max_size=5)),
)
@settings(max_examples=30, deadline=None, derandomize=True)
def test_guards_are_complementary(error: BaseException | None, value: Any) -> None:
    """Property: is_success(r) == not is_failure(r)."""
    result = SafeResult(error, None if error is not None else value)
    assert is_success(result) is (not is_failure(result))


# =============================================================================
# SafeResult helpers
# =============================================================================


def test_safe_result_unpacks_and_compares_like_a_pair() -> None:
    result = SafeResult.ok("data")
    err, data = result

    assert (err, data) == (None, "data")
    assert result == (None, "data")
    assert result.unwrap() == "data"


def test_safe_result_fail_normalizes_non_exceptions() -> None:
    result = SafeResult.fail({"code": 7})

    assert isinstance(result.error, NormalizedError)
    assert str(result.error) == str({"code": 7})
    assert result.value is None


def test_safe_result_unwrap_raises_stored_error() -> None:
    boom = KeyError("missing")
    with pytest.raises(KeyError) as exc:
        SafeResult(boom, None).unwrap()
    assert exc.value is boom
