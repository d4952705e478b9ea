"""Supabase REST adapter - HTTP client for the managed tables."""

import logging
import time
from typing import Callable

import requests

from ewpm.config import Config, load_config
from ewpm.errors import AuthenticationError, BackendError

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
BACKOFF_BASE = 0.5
BACKOFF_CAP = 4.0
REQUEST_TIMEOUT = 30

NON_RETRYABLE_MARKERS = ("Invalid", "Unauthorized")

Params = dict | list[tuple[str, str]]


def is_retryable(error: Exception) -> bool:
    """Network-looking failures are retried; auth and validation errors are not."""
    message = str(error)
    if any(marker in message for marker in NON_RETRYABLE_MARKERS):
        return False
    if isinstance(error, BackendError):
        return error.retryable
    return isinstance(error, (requests.ConnectionError, requests.Timeout))


def backoff_delay(attempt: int, base: float = BACKOFF_BASE, cap: float = BACKOFF_CAP) -> float:
    """Delay before retry number `attempt` (1-based), doubling up to the cap."""
    return min(cap, base * 2 ** (attempt - 1))


class SupabaseClient:
    """
    Thin PostgREST client.

    Reads are retried with bounded exponential backoff; writes are sent once.
    No business logic - just I/O.
    """

    def __init__(
        self,
        config: Config | None = None,
        session: requests.Session | None = None,
        max_attempts: int = MAX_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or load_config()
        if not self.config.supabase_url or not self.config.supabase_key:
            raise AuthenticationError(
                "Missing Supabase configuration. Set SUPABASE_URL and SUPABASE_KEY in ewpm.conf"
            )
        self.base_url = self.config.supabase_url.rstrip("/") + "/rest/v1"
        self.max_attempts = max_attempts
        self._sleep = sleep
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "apikey": self.config.supabase_key,
                "Authorization": f"Bearer {self.config.supabase_key}",
                "Content-Type": "application/json",
            }
        )

    def _raise_for_response(self, resp: requests.Response) -> None:
        if resp.ok:
            return
        try:
            body = resp.json()
        except ValueError:
            body = None
        # Proxies can answer with a JSON list or string instead of a PostgREST error object
        message = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
        message = message or resp.text or f"HTTP {resp.status_code}"
        if resp.status_code in (401, 403):
            raise AuthenticationError(f"Unauthorized: {message}", status_code=resp.status_code)
        retryable = resp.status_code >= 500 or resp.status_code == 429
        raise BackendError(message, status_code=resp.status_code, retryable=retryable)

    def _send(
        self,
        method: str,
        table: str,
        params: Params | None = None,
        json: dict | list | None = None,
        headers: dict | None = None,
    ) -> list[dict]:
        try:
            resp = self._session.request(
                method,
                f"{self.base_url}/{table}",
                params=params,
                json=json,
                headers=headers,
                timeout=REQUEST_TIMEOUT,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            raise BackendError(f"Network error talking to Supabase: {e}", retryable=True) from e

        self._raise_for_response(resp)
        if not resp.content:
            return []
        return resp.json()

    def select(self, table: str, params: Params | None = None) -> list[dict]:
        """GET rows, retrying transient failures."""
        attempt = 1
        while True:
            try:
                return self._send("GET", table, params=params)
            except BackendError as e:
                if attempt >= self.max_attempts or not is_retryable(e):
                    raise
                delay = backoff_delay(attempt)
                logger.warning(
                    f"Read from {table} failed (attempt {attempt}/{self.max_attempts}): {e}; "
                    f"retrying in {delay:.1f}s"
                )
                self._sleep(delay)
                attempt += 1

    def insert(self, table: str, rows: list[dict]) -> list[dict]:
        return self._send(
            "POST", table, json=rows, headers={"Prefer": "return=representation"}
        )

    def update(self, table: str, filters: Params, changes: dict) -> list[dict]:
        """PATCH matching rows and return them. An empty list means nothing matched."""
        return self._send(
            "PATCH",
            table,
            params=filters,
            json=changes,
            headers={"Prefer": "return=representation"},
        )

    def delete(self, table: str, filters: Params) -> None:
        self._send("DELETE", table, params=filters)


def in_filter(values: list[str]) -> str:
    """PostgREST `in` operator for a list of ids."""
    return "in.(" + ",".join(values) + ")"
