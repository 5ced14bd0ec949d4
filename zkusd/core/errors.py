"""Error taxonomy for the zkUSD kernels and shells.

Every rejection carries a stable ``ErrorCode`` so callers can tell a transient
conflict (e.g. a pending oracle submission) from a permanent authorization failure.

Pure kernels report rejections through ``StepResult.rejection``; ``step_or_raise()``
and the integration shells raise the matching ``ZkUsdError`` subclass.
"""

from __future__ import annotations

from enum import Enum, unique


@unique
class ErrorCode(Enum):
    """Stable error tags. The value is the human-readable message."""

    # Input validation
    AMOUNT_ZERO = "Transaction amount must be greater than zero"
    AMOUNT_EXCEEDS_DEBT = "Cannot repay more than the current outstanding debt amount"
    BALANCE_ZERO = "Vault balance must be greater than zero"

    # Authorization
    INVALID_SECRET = "Access denied: Invalid ownership secret provided"
    SENDER_NOT_WHITELISTED = "Sender is not in the oracle whitelist"
    INVALID_WHITELIST = "Whitelist does not match the registry whitelist"
    NOT_ADMIN = "Sender is not the protocol admin"
    INVALID_SIGNATURE = "Invalid signature"

    # Collateral safety
    INSUFFICIENT_COLLATERAL = "Requested amount exceeds the deposited collateral in the vault"
    INSUFFICIENT_BALANCE = "Requested amount exceeds the available balance"
    HEALTH_FACTOR_TOO_LOW = (
        "Vault would become undercollateralized (health factor < 100). "
        "Add more collateral or reduce debt first"
    )
    HEALTH_FACTOR_TOO_HIGH = "Cannot liquidate: Vault is sufficiently collateralized (health factor > 100)"

    # Oracle protocol
    PENDING_ACTION_EXISTS = "Sender already has a pending price submission"
    ORACLE_EXPIRED = "Price feed data has expired - please use current oracle data"
    MAX_PARTICIPANTS_EXCEEDED = "Maximum number of pending oracle submissions reached"

    # Global
    EMERGENCY_HALT = "Protocol is in emergency halt"

    # Arithmetic
    DIVISION_BY_ZERO = "Division by zero"
    OVERFLOW = "Value does not fit in u64"

    # Protocol state / handshake
    STALE_STATE = "Persisted state changed since it was read"
    INTERACTION_FLAG_NOT_SET = "Interaction flag is not set"
    INVALID_CAPABILITY = "Capability is unknown, already consumed, or does not match the call"
    BATCH_CONFLICT = "A vault may only mint or burn once per atomic batch"
    INVARIANT_VIOLATION = "Post-state violates one or more invariants"

    @property
    def tag(self) -> str:
        return self.name

    @property
    def message(self) -> str:
        return self.value


class ZkUsdError(Exception):
    """Base class for every protocol rejection."""

    def __init__(self, code: ErrorCode, detail: str | None = None) -> None:
        self.code = code
        self.detail = detail
        msg = code.message if detail is None else f"{code.message}: {detail}"
        super().__init__(msg)


class ValidationError(ZkUsdError):
    pass


class AuthorizationError(ZkUsdError):
    pass


class CollateralError(ZkUsdError):
    pass


class OracleError(ZkUsdError):
    pass


class HaltError(ZkUsdError):
    pass


class ArithmeticFault(ZkUsdError):
    pass


class ProtocolStateError(ZkUsdError):
    pass


_CATEGORY: dict[ErrorCode, type[ZkUsdError]] = {
    ErrorCode.AMOUNT_ZERO: ValidationError,
    ErrorCode.AMOUNT_EXCEEDS_DEBT: ValidationError,
    ErrorCode.BALANCE_ZERO: ValidationError,
    ErrorCode.INVALID_SECRET: AuthorizationError,
    ErrorCode.SENDER_NOT_WHITELISTED: AuthorizationError,
    ErrorCode.INVALID_WHITELIST: AuthorizationError,
    ErrorCode.NOT_ADMIN: AuthorizationError,
    ErrorCode.INVALID_SIGNATURE: AuthorizationError,
    ErrorCode.INSUFFICIENT_COLLATERAL: CollateralError,
    ErrorCode.INSUFFICIENT_BALANCE: CollateralError,
    ErrorCode.HEALTH_FACTOR_TOO_LOW: CollateralError,
    ErrorCode.HEALTH_FACTOR_TOO_HIGH: CollateralError,
    ErrorCode.PENDING_ACTION_EXISTS: OracleError,
    ErrorCode.ORACLE_EXPIRED: OracleError,
    ErrorCode.MAX_PARTICIPANTS_EXCEEDED: OracleError,
    ErrorCode.EMERGENCY_HALT: HaltError,
    ErrorCode.DIVISION_BY_ZERO: ArithmeticFault,
    ErrorCode.OVERFLOW: ArithmeticFault,
    ErrorCode.STALE_STATE: ProtocolStateError,
    ErrorCode.INTERACTION_FLAG_NOT_SET: ProtocolStateError,
    ErrorCode.INVALID_CAPABILITY: ProtocolStateError,
    ErrorCode.BATCH_CONFLICT: ProtocolStateError,
    ErrorCode.INVARIANT_VIOLATION: ProtocolStateError,
}


def error_for(code: ErrorCode, detail: str | None = None) -> ZkUsdError:
    """Build the exception instance matching ``code``'s category."""
    return _CATEGORY[code](code, detail)
