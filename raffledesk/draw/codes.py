"""Helpers for raffle and check-in codes."""

from __future__ import annotations


def normalize_code(code: str) -> str:
    """Trim and upper-case a code typed by a user.

    Parameters
    ----------
    code : str
        Raw code as entered (raffle code, company code, personal code).
    """

    if code is None:
        raise ValueError("code must not be None")
    if not isinstance(code, str):
        raise TypeError("code must be a string")
    normalized = code.strip().upper()
    if not normalized:
        raise ValueError("code must not be empty")
    return normalized


def compose_raffle_code(organizer_code: str, suffix: str) -> str:
    """Build the globally unique raffle code.

    The organizer code is used as stored; only the user-chosen suffix is
    normalized, so ``("ABC", "promo4k")`` gives ``"ABCPROMO4K"``.
    """

    return f"{organizer_code or ''}{normalize_code(suffix)}"


__all__ = ["compose_raffle_code", "normalize_code"]
