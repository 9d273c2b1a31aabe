"""
HTTP Endpoint Storage

The remote store is a single URL, typically a spreadsheet web app:

    GET  <endpoint>  -> JSON array of raw entries (oldest first)
    POST <endpoint>  <- form fields date, name, description, type, amount, balance

The endpoint is a dumb sink. It does not compute balances; the engine sends
the balance it computed alongside the entry.

TRADEOFFS:
- Reads are retried on transport errors, then handed back to the engine
  which falls back to local storage.
- Writes are NEVER retried: a POST that timed out may still have been
  recorded, and a retry would duplicate the entry.
"""

from collections.abc import Sequence
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from shop_ledger.models.entry import AnnotatedEntry, RawEntry
from shop_ledger.services.storage.interface import (
    LedgerStoreInterface,
    TransportError,
)


logger = structlog.get_logger(__name__)


class RemoteLedgerStore(LedgerStoreInterface):
    """
    Ledger store backed by an HTTP endpoint.

    No delete capability: remote edits and deletes are out of scope.
    """

    name = "remote"

    def __init__(
        self,
        endpoint: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
        fetch_attempts: int = 3,
        retry_wait: Optional[wait_base] = None,
    ):
        """
        Args:
            endpoint: URL of the remote store
            client: Shared httpx client. If None, one is opened per request.
            timeout: Per-request timeout in seconds (own client only)
            fetch_attempts: GET attempts before giving up
            retry_wait: tenacity wait strategy between GET attempts
        """
        self._endpoint = endpoint
        self._client = client
        self._timeout = timeout
        self._fetch_attempts = fetch_attempts
        self._retry_wait = retry_wait or wait_exponential(multiplier=1, min=2, max=10)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @asynccontextmanager
    async def _open_client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        # Spreadsheet web apps answer with a redirect to the real content
        async with httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
        ) as client:
            yield client

    async def _get(self) -> httpx.Response:
        async with self._open_client() as client:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._fetch_attempts),
                wait=self._retry_wait,
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    return await client.get(self._endpoint)
        raise TransportError("No attempt was made to read the remote ledger")

    async def fetch_all(self) -> list[RawEntry]:
        """Read every entry from the endpoint."""
        try:
            response = await self._get()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"Failed to read remote ledger: {e}")

        if not response.is_success:
            raise TransportError(
                f"Remote ledger answered with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"Remote ledger is not valid JSON: {e}")

        if not isinstance(data, list):
            raise TransportError(
                f"Remote ledger must be a JSON array, got {type(data).__name__}"
            )

        entries = []
        for position, item in enumerate(data):
            if not isinstance(item, dict):
                logger.warning(
                    "remote_row_skipped",
                    position=position,
                    row_type=type(item).__name__,
                )
                continue
            entries.append(RawEntry.model_validate(item))

        logger.debug("remote_ledger_read", entry_count=len(entries))
        return entries

    async def append(
        self,
        entry: AnnotatedEntry,
        history: Sequence[AnnotatedEntry],
    ) -> None:
        """Send one entry, with its balance, to the endpoint."""
        try:
            async with self._open_client() as client:
                response = await client.post(
                    self._endpoint,
                    data=entry.to_form_fields(),
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"Failed to save entry: {e}")

        if not response.is_success:
            raise TransportError(
                f"Remote ledger rejected the entry with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        logger.debug("remote_entry_written", date=entry.date, balance=str(entry.balance))
