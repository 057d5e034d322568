"""Shared exception hierarchy for hex_stakes."""


class HexStakesError(Exception):
    """Base exception for hex_stakes errors."""


# ── Core computation ─────────────────────────────────────────────────────────


class ConfigurationError(HexStakesError, ValueError):
    """Input that cannot be computed on, such as a zero-duration stake or a malformed packed range."""


class ArithmeticOverflow(HexStakesError, OverflowError):
    """Value does not fit the contract's uint256 range."""


class MissingDailyData(HexStakesError, LookupError):
    """Requested day is outside the decoded daily data range."""


# ── State ────────────────────────────────────────────────────────────────────


class AccountNotFoundError(HexStakesError, KeyError):
    """No account is registered under the given (address, chain) key."""


# ── Collaborators ────────────────────────────────────────────────────────────


class ChainAccessError(HexStakesError):
    """Contract call against the chain node failed."""


class PriceFeedError(HexStakesError):
    """Price feed request failed or returned an unexpected payload."""
