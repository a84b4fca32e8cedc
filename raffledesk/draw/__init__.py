"""Raffle winner draws, the company prize wheel and code helpers."""

from .codes import compose_raffle_code, normalize_code
from .engine import DrawOutcome, RaffleDrawEngine
from .locks import RaffleLocks
from .wheel import MIN_WHEEL_PRIZES, pick_uniform, spin

__all__ = [
    "DrawOutcome",
    "MIN_WHEEL_PRIZES",
    "RaffleDrawEngine",
    "RaffleLocks",
    "compose_raffle_code",
    "normalize_code",
    "pick_uniform",
    "spin",
]
