"""Exception hierarchy for the yield engine."""


class YieldEngineError(Exception):
    """Base class for all yield engine errors."""


class ContractReadError(YieldEngineError):
    """An on-chain read failed (transport error, revert, missing accessor)."""

    def __init__(self, address: str, function: str, reason: str = ""):
        self.address = address
        self.function = function
        self.reason = reason
        message = f"{function}() on {address} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PriceUnavailableError(YieldEngineError):
    """The price service could not produce a quote."""


class MissingVaultIdentityError(YieldEngineError):
    """The vault address or its token address is missing."""


class OverrideConfigError(YieldEngineError):
    """The override table file is malformed."""
