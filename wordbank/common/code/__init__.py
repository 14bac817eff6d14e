from .error_code import ErrCode, ErrCodeError

__all__ = ["ErrCode", "ErrCodeError"]
