"""Company prize wheel."""

from __future__ import annotations

import random
from typing import Optional, Sequence, TypeVar

from ..errors import WheelUnavailableError

MIN_WHEEL_PRIZES = 2

T = TypeVar("T")


def pick_uniform(items: Sequence[T], rng: Optional[random.Random] = None) -> T:
    """Return one element of ``items``, every index equally likely."""
    if not items:
        raise ValueError("cannot pick from an empty sequence")
    source = rng or random
    return items[source.randrange(len(items))]


def spin(prizes: Sequence[T], rng: Optional[random.Random] = None) -> T:
    """Select the prize the wheel lands on.

    Spins are independent: a prize can come up on any number of spins.

    Raises
    ------
    WheelUnavailableError
        If fewer than :data:`MIN_WHEEL_PRIZES` prizes are configured.
    """
    if len(prizes) < MIN_WHEEL_PRIZES:
        raise WheelUnavailableError(
            "At least 2 prizes are required to spin the wheel."
        )
    return pick_uniform(prizes, rng)
