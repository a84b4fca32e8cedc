import json
import os
import unittest
from unittest.mock import patch

import requests

from raffledesk.errors import UploadError
from raffledesk.inputs import ImageUpload
from raffledesk.storage import (
    DEFAULT_IMAGE_URL,
    StorageClient,
    object_path_for,
    resolve_image,
    upload_image,
)


class DummyResponse:
    def __init__(self, json_data=None, status_code: int = 200):
        self._json = json_data
        self.status_code = status_code
        self.content = json.dumps(json_data).encode() if json_data is not None else b""

    def json(self):
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class DummySession:
    def __init__(self, response: DummyResponse):
        self.response = response
        self.calls = []

    def request(self, method, url, headers=None, data=None, timeout=None):
        self.calls.append(
            {"method": method, "url": url, "headers": headers, "data": data, "timeout": timeout}
        )
        return self.response


class TestStorageClient(unittest.TestCase):
    @patch("raffledesk.storage.api.load_dotenv")
    def test_requires_base_url(self, mock_load_dotenv):
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ValueError):
                StorageClient()

    @patch("raffledesk.storage.api.load_dotenv")
    def test_defaults(self, mock_load_dotenv):
        with patch.dict(os.environ, {}, clear=True):
            client = StorageClient(base_url="https://proj.supabase.co/", session=DummySession(DummyResponse()))
        self.assertEqual(client.base_url, "https://proj.supabase.co")
        self.assertEqual(client.bucket, "gamerboxtriade")
        self.assertEqual(client.auth_headers, {"Accept": "application/json"})

    def test_upload_posts_bytes_and_returns_public_url(self):
        session = DummySession(DummyResponse({"Key": "gamerboxtriade/public/1_a.png"}))
        client = StorageClient(
            base_url="https://proj.supabase.co",
            bucket="media",
            api_key="anon-key",
            session=session,
        )
        url = client.upload("public/1_a.png", b"img", "image/png")

        self.assertEqual(url, "https://proj.supabase.co/storage/v1/object/public/media/public/1_a.png")
        call = session.calls[0]
        self.assertEqual(call["method"], "POST")
        self.assertEqual(call["url"], "https://proj.supabase.co/storage/v1/object/media/public/1_a.png")
        self.assertEqual(call["data"], b"img")
        self.assertEqual(call["headers"]["Content-Type"], "image/png")
        self.assertEqual(call["headers"]["Authorization"], "Bearer anon-key")
        self.assertEqual(call["timeout"], 45)

    def test_http_error_becomes_upload_error(self):
        session = DummySession(DummyResponse({"error": "denied"}, status_code=403))
        client = StorageClient(base_url="https://proj.supabase.co", session=session)
        with self.assertLogs("raffledesk.storage.utils", level="ERROR"):
            with self.assertRaises(UploadError) as ctx:
                upload_image(client, ImageUpload("a.png", b"img"), clock_ms=lambda: 5)
        self.assertEqual(ctx.exception.message, "Photo upload failed.")


class TestImageResolution(unittest.TestCase):
    def test_object_path(self):
        self.assertEqual(object_path_for("my  logo 1.png", 1700000000000), "public/1700000000000_my_logo_1.png")

    def test_resolve_rules(self):
        self.assertEqual(resolve_image(None, None, creating=True), DEFAULT_IMAGE_URL)
        self.assertIsNone(resolve_image(None, None, creating=False))
        self.assertEqual(resolve_image(None, "https://x/y.png", creating=True), "https://x/y.png")
        with self.assertLogs("raffledesk.storage.utils", level="ERROR"):
            with self.assertRaises(UploadError):
                resolve_image(None, ImageUpload("a.png", b"x"), creating=True)


if __name__ == "__main__":
    unittest.main()
