"""Winner draw for raffles."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..models import Participant
from .wheel import pick_uniform

logger = logging.getLogger(__name__)


@dataclass
class DrawOutcome:
    """Value object describing one completed draw.

    Attributes
    ----------
    participant : Participant
        The participant now flagged as winner.
    pool_size : int
        Number of eligible participants the winner was picked from.
    """

    participant: Participant
    pool_size: int


class RaffleDrawEngine:
    """Picks winners uniformly among a raffle's not-yet-won participants."""

    def __init__(
        self,
        session: Session,
        *,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Create a draw engine bound to a SQLAlchemy session.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session used for lookups and the winner update.
        rng : Optional[random.Random], default: None
            Random source; the module-level generator is used when omitted.
            Draws are not meant to be cryptographically unpredictable.
        clock : Optional[Callable[[], datetime]], default: None
            Returns the draw timestamp; defaults to the current UTC time.
        """

        self._session = session
        self._rng = rng
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def eligible(self, raffle_id: str) -> list[Participant]:
        """Participants of ``raffle_id`` whose winner flag is unset, oldest first."""
        return list(
            self._session.scalars(
                select(Participant)
                .where(
                    Participant.raffle_id == raffle_id,
                    Participant.is_winner.is_(False),
                )
                .order_by(Participant.created_at.asc(), Participant.id.asc())
            ).all()
        )

    def draw(self, raffle_id: str) -> Optional[DrawOutcome]:
        """Draw one winner for ``raffle_id``.

        Returns
        -------
        Optional[DrawOutcome]
            ``None`` when nobody is eligible, or when the picked participant was
            marked by a concurrent draw between the pick and the update.

        Notes
        -----
        The update only matches a row whose ``is_winner`` is still false, so a
        participant can never be marked twice even when two draws pick it.
        """
        pool = self.eligible(raffle_id)
        if not pool:
            return None

        picked = pick_uniform(pool, self._rng)
        result = self._session.execute(
            update(Participant)
            .where(Participant.id == picked.id, Participant.is_winner.is_(False))
            .values(is_winner=True, drawn_at=self._clock())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning(
                f"Participant {picked.id} of raffle {raffle_id} was no longer eligible"
            )
            return None

        winner = self._session.scalar(
            select(Participant)
            .where(Participant.id == picked.id)
            .execution_options(populate_existing=True)
        )
        if winner is None:
            return None
        return DrawOutcome(participant=winner, pool_size=len(pool))


__all__ = ["DrawOutcome", "RaffleDrawEngine"]
