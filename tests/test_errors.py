# tests/test_errors.py
from __future__ import annotations

import pytest

from dca.errors import (
    DCAError,
    DecodeError,
    InvalidAuthError,
    OpaqueProviderError,
    OrderTooSmallError,
    ProviderRejection,
    classify,
    error_context,
    raise_for_provider_errors,
)


def test_classify_known_messages():
    assert isinstance(classify("EGeneral:Invalid arguments:volume minimum not met"), OrderTooSmallError)
    assert isinstance(classify("EAPI:Invalid key"), InvalidAuthError)


def test_classify_unknown_message_is_opaque():
    err = classify("anything else")
    assert type(err) is OpaqueProviderError
    assert err.provider_message == "anything else"
    assert str(err) == "anything else"


def test_classify_requires_exact_match():
    assert type(classify("EAPI:Invalid key ")) is OpaqueProviderError


def test_raise_for_provider_errors_uses_first_entry():
    with pytest.raises(InvalidAuthError):
        raise_for_provider_errors(["EAPI:Invalid key", "EGeneral:Internal error"])


def test_raise_for_provider_errors_ignores_empty_list():
    raise_for_provider_errors([])
    raise_for_provider_errors(None)


def test_raise_for_provider_errors_rejects_non_list():
    with pytest.raises(DecodeError):
        raise_for_provider_errors("EAPI:Invalid key")


def test_error_context_preserves_identity():
    with pytest.raises(OrderTooSmallError) as info:
        with error_context("outer"):
            with error_context("inner"):
                raise classify("EGeneral:Invalid arguments:volume minimum not met")

    exc = info.value
    assert isinstance(exc, ProviderRejection)
    assert exc.context == ["outer", "inner"]
    assert str(exc).startswith("outer: inner: order is too small")


def test_error_context_ignores_foreign_exceptions():
    with pytest.raises(KeyError):
        with error_context("step"):
            raise KeyError("x")


def test_all_errors_share_base():
    assert issubclass(OpaqueProviderError, DCAError)
    assert issubclass(DecodeError, DCAError)
