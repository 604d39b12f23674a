from __future__ import annotations

from offerkit.util.errors import (
    DecodeFormatError,
    ErrorCode,
    InsufficientBalance,
    InsufficientFunds,
    MethodNotFound,
    OfferError,
    UpstreamQueryFailure,
)


def test_error_codes() -> None:
    assert InsufficientBalance("ab", 1, 2).code == ErrorCode.INSUFFICIENT_BALANCE
    assert InsufficientFunds().code == ErrorCode.INSUFFICIENT_FUNDS
    assert DecodeFormatError().code == ErrorCode.DECODE_FORMAT
    assert UpstreamQueryFailure().code == ErrorCode.UPSTREAM_QUERY
    assert MethodNotFound("foo").code == ErrorCode.METHOD_NOT_FOUND
    assert OfferError("boom").code == ErrorCode.UNKNOWN
    assert OfferError("rejected", ErrorCode.USER_REJECTED).code == ErrorCode.USER_REJECTED


def test_to_json_dict() -> None:
    error = InsufficientBalance("abcd", 10, 20)
    assert error.to_json_dict() == {
        "error": True,
        "code": 4100,
        "message": "Insufficient balance for abcd: have 10, offering 20",
    }
    assert InsufficientFunds().to_json_dict()["message"] == "INSUFFICIENT_FUNDS"
    assert MethodNotFound("foo").to_json_dict()["code"] == 4004
