from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    # request layer
    INVALID_PARAMS = 4000
    USER_REJECTED = 4002
    METHOD_NOT_FOUND = 4004

    # offer construction and transport
    INSUFFICIENT_BALANCE = 4100
    INSUFFICIENT_FUNDS = 4101
    DECODE_FORMAT = 4102
    UPSTREAM_QUERY = 4103

    UNKNOWN = 4999


class OfferError(Exception):
    code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: str = "", code: Optional[ErrorCode] = None) -> None:
        if code is not None:
            self.code = code
        self.message = message or self.code.name
        super().__init__(self.message)

    def to_json_dict(self) -> dict[str, Any]:
        return {"error": True, "code": self.code.value, "message": self.message}


class InsufficientBalance(OfferError):
    code = ErrorCode.INSUFFICIENT_BALANCE

    def __init__(self, asset_id: str, balance: int, amount: int) -> None:
        self.asset_id = asset_id
        self.balance = balance
        self.amount = amount
        super().__init__(f"Insufficient balance for {asset_id}: have {balance}, offering {amount}")


class InsufficientFunds(OfferError):
    code = ErrorCode.INSUFFICIENT_FUNDS


class DecodeFormatError(OfferError):
    code = ErrorCode.DECODE_FORMAT


class UpstreamQueryFailure(OfferError):
    code = ErrorCode.UPSTREAM_QUERY


class InvalidParams(OfferError):
    code = ErrorCode.INVALID_PARAMS


class MethodNotFound(OfferError):
    code = ErrorCode.METHOD_NOT_FOUND

    def __init__(self, method: str) -> None:
        super().__init__(f"Method not found: {method}")
