"""Custom error classes."""
from enum import Enum


class CoinWalletError(Exception):
    """Base exception for coin wallet application."""
    pass


class AdapterErrorReason(str, Enum):
    """Reasons an adapter refuses an operation."""
    WRONG_PARAMETERS = "WRONG_PARAMETERS"
    NOT_SUPPORTED = "NOT_SUPPORTED"


class ValidationErrorReason(str, Enum):
    """Reasons an address or key fails chain-specific validation."""
    INVALID_ACCOUNT = "INVALID_ACCOUNT"
    INVALID_PRIVATE_KEY = "INVALID_PRIVATE_KEY"


class AdapterError(CoinWalletError):
    """Error raised by an adapter before any chain interaction."""

    def __init__(self, reason: AdapterErrorReason, message: str = ""):
        super().__init__(message or reason.value)
        self.reason = reason


class AdapterValidationError(CoinWalletError):
    """Address or key rejected by a chain-specific syntax check."""

    def __init__(self, reason: ValidationErrorReason, message: str = ""):
        super().__init__(message or reason.value)
        self.reason = reason


class EosKitError(CoinWalletError):
    """Error reported by the EOS node or its transport."""
    pass


class RestoreSettingsError(CoinWalletError):
    """Error related to restore settings negotiation."""
    pass


class UnsupportedCoinError(CoinWalletError):
    """No adapter exists for the requested coin."""
    pass


class WalletNotFoundError(CoinWalletError):
    """Requested wallet, coin or account is unknown."""
    pass
