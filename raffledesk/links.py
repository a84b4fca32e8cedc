"""Shareable entry points and their QR images."""

from __future__ import annotations

import io
import os
from typing import Optional
from urllib.parse import quote

import qrcode
from dotenv import load_dotenv

load_dotenv()

DEFAULT_PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:3000/")


def _base(base_url: Optional[str]) -> str:
    return base_url or DEFAULT_PUBLIC_BASE_URL


def company_wheel_link(company_id: str, base_url: Optional[str] = None) -> str:
    """Public wheel page of one company."""
    return f"{_base(base_url)}#/roleta/{quote(company_id, safe='')}"


def raffle_registration_link(code: str, base_url: Optional[str] = None) -> str:
    """Self-service registration page for the raffle with ``code``."""
    return f"{_base(base_url)}#/participar?code={quote(code, safe='')}"


def qr_png(data: str, *, box_size: int = 8, border: int = 2) -> bytes:
    """Render ``data`` as a PNG QR code."""
    qr = qrcode.QRCode(version=None, box_size=box_size, border=border)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()
