"""Trading decision types shared by adapters, combinations and the engine."""

from dataclasses import dataclass
from enum import Enum


class StockAction(Enum):
    """Decision emitted for a single bar."""

    BUY = "BUY"
    SELL = "SELL"
    WAIT = "WAIT"

    @property
    def opens_position(self) -> bool:
        """Whether acting on this decision opens a tracked position."""
        return self is not StockAction.WAIT

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class TradingSignal:
    """Decision of an algorithm at the timestamp of the bar it evaluated."""

    time: int
    action: StockAction
