"""Engine errors. Every failure aborts the operation that raised it with no partial effect."""

from __future__ import annotations


class PredPoolError(Exception):
    """Base for all engine errors. The class name is the error code."""

    def __init__(self, message: str | None = None, **context: object) -> None:
        self.context = context
        super().__init__(message or type(self).__name__)

    @property
    def code(self) -> str:
        return type(self).__name__


# Authorization


class AuthorizationError(PredPoolError):
    """Caller lacks the required role or ownership."""


class OnlyOracle(AuthorizationError):
    pass


class OnlyMaintainer(AuthorizationError):
    pass


class OnlyBetOwner(AuthorizationError):
    pass


class OnlyPool(AuthorizationError):
    pass


class LiquidityNotOwned(AuthorizationError):
    """Raised by pool share bookkeeping, which lives outside the engine."""


# State legality


class StateError(PredPoolError):
    """Operation is not valid for the current lifecycle phase."""


class ConditionNotExists(StateError):
    pass


class ConditionAlreadyCreated(StateError):
    pass


class ConditionAlreadyResolved(StateError):
    pass


class ConditionNotStarted(StateError):
    pass


class ConditionStarted(StateError):
    pass


class DeadlineExceeded(ConditionStarted):
    """Bet deadline passed. Subclass of ConditionStarted so both can be caught together."""


class ConditionStopped(StateError):
    pass


class PaymentLocked(StateError):
    pass


class BetNotExists(StateError):
    pass


class CoreRetired(StateError):
    pass


# Input validity


class InputError(PredPoolError):
    """Malformed request parameters."""


class WrongOutcome(InputError):
    pass


class SameOutcomes(InputError):
    pass


class ZeroOdds(InputError):
    pass


class IncorrectTimestamp(InputError):
    pass


class WrongDataFormat(InputError):
    pass


class AmountMustNotBeZero(InputError):
    pass


class WrongFee(InputError):
    pass


# Economic policy


class EconomicError(PredPoolError):
    """Well-formed request that violates a pricing or risk guard."""


class SmallOdds(EconomicError):
    pass


class BigDifference(EconomicError):
    pass


class CantAcceptBet(EconomicError):
    pass


class NoWinNoPrize(EconomicError):
    pass


class NotEnoughLiquidity(EconomicError):
    pass


# Fixed-point arithmetic


class MathError(PredPoolError):
    """Integer arithmetic left its domain."""


class ArithmeticOverflow(MathError):
    pass


class DivisionByZero(MathError):
    pass
