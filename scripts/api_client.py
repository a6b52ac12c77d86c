"""Small httpx wrapper the content scripts use to talk to a running site."""
import logging
import os
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    pass


class SiteClient:
    def __init__(self, base_url: Optional[str] = None, timeout: float = 20.0) -> None:
        self.base_url = (base_url or os.getenv("API_BASE", "http://localhost:8000")).rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout)

    def __enter__(self) -> "SiteClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def login(self, username: str, password: str) -> None:
        resp = self._client.post("/api/auth", json={"username": username, "password": password})
        if resp.status_code != 200:
            raise ApiError(f"Login failed ({resp.status_code}): {resp.text}")
        logger.info("Logged in to %s as %s", self.base_url, username)

    def send(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        resp = self._client.request(method, path, **kwargs)
        if resp.status_code >= 400:
            raise ApiError(f"{method} {path} -> {resp.status_code}: {resp.text}")
        return resp.json()
