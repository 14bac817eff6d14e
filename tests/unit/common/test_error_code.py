"""Unit tests for ErrCode and ErrCodeError."""

import pytest

from wordbank.common.code import ErrCode, ErrCodeError


# ------------------------------------------------------------------
# ErrCode.with_messages / with_errors / with_details
# ------------------------------------------------------------------


class TestErrCode:
    def test_with_messages_creates_error(self) -> None:
        error = ErrCode.MODEL_NOT_FOUND.with_messages("Model 'gpt' not found")
        assert isinstance(error, ErrCodeError)
        assert error.code == ErrCode.MODEL_NOT_FOUND
        assert "Model 'gpt' not found" in error.messages

    def test_with_messages_drops_empty(self) -> None:
        error = ErrCode.UNKNOWN_ERROR.with_messages("msg1", "", "msg2")
        assert error.messages == ("msg1", "msg2")

    def test_with_errors_extracts_strings(self) -> None:
        error = ErrCode.UNKNOWN_ERROR.with_errors(ValueError("bad value"), RuntimeError("runtime fail"))
        assert error.messages == ("bad value", "runtime fail")

    def test_with_details_keeps_structured_data(self) -> None:
        error = ErrCode.INSUFFICIENT_BALANCE.with_details("short", required=10, available=3)
        assert error.details == {"required": 10, "available": 3}
        assert error.messages == ("short",)

    def test_only_concurrency_conflict_is_retryable(self) -> None:
        retryable = {code for code in ErrCode if code.retryable}
        assert retryable == {ErrCode.CONCURRENCY_CONFLICT}

    def test_title(self) -> None:
        assert ErrCode.BALANCE_NOT_FOUND.title == "Balance Not Found"


# ------------------------------------------------------------------
# ErrCodeError
# ------------------------------------------------------------------


class TestErrCodeError:
    def test_str_includes_code_and_messages(self) -> None:
        error = ErrCode.INVALID_PARAMETER.with_messages("Amount must be positive")
        assert str(error) == "[INVALID_PARAMETER(1001)] Amount must be positive"

    def test_str_without_messages(self) -> None:
        assert str(ErrCodeError(ErrCode.BALANCE_REQUIRED)) == "[BALANCE_REQUIRED(5001)]"

    def test_is_raisable(self) -> None:
        with pytest.raises(ErrCodeError) as exc_info:
            raise ErrCode.BALANCE_NOT_FOUND.with_messages("missing")
        assert exc_info.value.code is ErrCode.BALANCE_NOT_FOUND
        assert exc_info.value.retryable is False

    def test_as_dict_single_message(self) -> None:
        body = ErrCode.INVALID_PARAMETER.with_messages("bad").as_dict()
        assert body == {"code": 1001, "msg": "bad"}

    def test_as_dict_multiple_messages(self) -> None:
        body = ErrCode.INVALID_PARAMETER.with_messages("first", "second", "third").as_dict()
        assert body == {"code": 1001, "msg": "first", "info": ["second", "third"]}

    def test_as_dict_no_messages_uses_title(self) -> None:
        body = ErrCodeError(ErrCode.CONCURRENCY_CONFLICT).as_dict()
        assert body == {"code": 6000, "msg": "Concurrency Conflict", "info": []}

    def test_as_dict_includes_details(self) -> None:
        body = ErrCode.INSUFFICIENT_BALANCE.with_details("short", required=5).as_dict()
        assert body["details"] == {"required": 5}
