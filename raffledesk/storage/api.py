import os
from typing import Any, Mapping, Optional
from urllib.parse import quote

import requests
from dotenv import load_dotenv

DEFAULT_BUCKET = "gamerboxtriade"


class StorageClient:
    """Path-addressed object storage (Supabase Storage compatible REST API)."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        bucket: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: int = 45,
        session: Optional[requests.Session] = None,
    ):
        load_dotenv()
        url = base_url or os.getenv("STORAGE_BASE_URL")
        if not url:
            raise ValueError("Environment variable 'STORAGE_BASE_URL' is not set")

        self.base_url = url.rstrip("/")
        self.bucket = bucket or os.getenv("STORAGE_BUCKET", DEFAULT_BUCKET)
        self.api_key = api_key or os.getenv("STORAGE_API_KEY")
        self.session = session or requests.Session()
        self.timeout = timeout

    # -------- headers --------
    @property
    def auth_headers(self) -> Mapping[str, str]:
        if not self.api_key:
            return {"Accept": "application/json"}
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "apikey": self.api_key,
        }

    # -------- core request --------
    def _request(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        data: Optional[bytes] = None,
    ) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        r = self.session.request(
            method=method.upper(),
            url=url,
            headers=headers or self.auth_headers,
            data=data,
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.json() if r.content else None

    # -------- API callers --------
    def upload(
        self,
        object_path: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        """Store ``content`` at ``object_path`` and return its public URL."""
        self._request(
            "POST",
            f"/storage/v1/object/{self.bucket}/{quote(object_path)}",
            headers={**self.auth_headers, "Content-Type": content_type},
            data=content,
        )
        return self.public_url(object_path)

    def public_url(self, object_path: str) -> str:
        return (
            f"{self.base_url}/storage/v1/object/public/"
            f"{self.bucket}/{quote(object_path)}"
        )
