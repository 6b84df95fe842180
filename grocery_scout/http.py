from __future__ import annotations

from dataclasses import dataclass
import requests


@dataclass(frozen=True)
class HttpClient:
    """GET client for a keyed JSON API.

    Zenserp reads the key from an ``apikey`` header rather than a bearer
    token. Status codes are left to the caller.
    """

    base_url: str
    api_key: str
    timeout_s: float = 30.0

    def url_for(self, path: str) -> str:
        return self.base_url.rstrip("/") + "/" + path.lstrip("/")

    def headers(self) -> dict[str, str]:
        return {"apikey": self.api_key, "Accept": "application/json"}

    def get(self, path: str, *, params: dict | None = None) -> requests.Response:
        return requests.get(
            self.url_for(path),
            params=params,
            headers=self.headers(),
            timeout=self.timeout_s,
        )
