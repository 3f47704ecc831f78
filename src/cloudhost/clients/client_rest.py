# cloudhost/clients/client_rest.py
import time
from typing import Any, Optional
from urllib.parse import urljoin

import requests

import cloudhost.core.logger as logger
from cloudhost.core.config import Settings, load_settings


class ApiError(Exception):
    """An HTTP error response from the platform API."""

    def __init__(self, status_code: int, message: str, url: str = ""):
        super().__init__(f"API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.url = url


class ForbiddenError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


def _error_message(response) -> str:
    try:
        data = response.json()
    except ValueError:
        return (response.text or response.reason or "").strip()
    if isinstance(data, dict):
        return str(data.get("message") or data.get("detail") or data.get("title") or data)
    return str(data)


def raise_for_api_status(response):
    """Raise a typed ApiError for 4xx/5xx responses."""
    if response.status_code < 400:
        return
    message = _error_message(response)
    if response.status_code == 403:
        raise ForbiddenError(403, message, response.url)
    if response.status_code == 404:
        raise NotFoundError(404, message, response.url)
    raise ApiError(response.status_code, message, response.url)


class RestClient:
    """Thin JSON-over-HTTPS transport with bearer auth and transient retries."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or load_settings()

    @property
    def base_url(self) -> str:
        return self.settings.api_url

    def url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return urljoin(self.base_url + "/", path.lstrip("/"))

    def _headers(self) -> dict:
        token = self.settings.api_token
        if not token:
            raise EnvironmentError("⚠️ Missing CLOUDHOST_API_TOKEN in environment or .env file")
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {token}",
        }

    def request(self, method: str, path: str, json: Any = None, params: dict = None, verbose_only: bool = True) -> Any:
        """Perform an API request and return the decoded JSON body (None when empty)."""
        url = self.url(path)
        headers = self._headers()
        logger.log(f"{method} {url}", verbose_only=verbose_only)
        if json is not None and logger.VERBOSE:
            logger.log(f"Request body: {json}", verbose_only=True)

        retries = max(self.settings.retries, 0)
        last_exc = None
        for attempt in range(retries + 1):
            try:
                response = requests.request(
                    method,
                    url,
                    json=json,
                    params=params,
                    headers=headers,
                    timeout=self.settings.timeout,
                )
                if response.status_code >= 400 and logger.VERBOSE:
                    logger.log(f"Error payload ({response.status_code}): {response.text}", style="red", verbose_only=True)
                raise_for_api_status(response)
                if response.status_code == 204 or not response.content:
                    return None
                return response.json()
            except (requests.exceptions.ReadTimeout, requests.exceptions.ConnectionError) as exc:
                last_exc = exc
                if attempt >= retries:
                    raise
                backoff = 0.5 * (2 ** attempt)
                logger.log(f"Transient error ({exc.__class__.__name__}), retrying in {backoff:.1f}s", style="yellow", verbose_only=True)
                time.sleep(backoff)

        if last_exc:
            raise last_exc
        raise ApiError(0, "request failed", url)

    def get(self, path: str, params: dict = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def patch(self, path: str, json: Any = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
