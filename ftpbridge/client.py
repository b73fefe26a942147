"""Async client for the ftpbridge HTTP API.

The client does what the upload page does in a browser: converts ``.xlsx``
workbooks to CSV locally, uploads them, polls the listing endpoints and
deletes files from the inbox.
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncIterator, Dict, List, Optional, Sequence, Union
from urllib.parse import quote

import httpx
from loguru import logger

from .core.spreadsheet import convert_spreadsheet, is_spreadsheet
from .schemas.files import CsvUpload, FileEntry

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_POLL_INTERVAL = 6.0


class BridgeClientError(Exception):
    """Raised when the API answers with a non-success status."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


@dataclass
class DashboardSnapshot:
    """The four listings shown on the upload page."""

    processed: List[FileEntry] = field(default_factory=list)
    recents: List[FileEntry] = field(default_factory=list)
    inbox: List[FileEntry] = field(default_factory=list)
    processed_today: List[FileEntry] = field(default_factory=list)


class BridgeClient:
    """Thin async wrapper around the HTTP endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    async def __aenter__(self) -> "BridgeClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        response = await self._client.request(method, url, **kwargs)
        if response.is_error:
            logger.error(
                f"{method} {url} failed with {response.status_code}: {response.text}"
            )
            raise BridgeClientError(response.status_code, response.text)
        return response

    async def _list(self, url: str) -> List[FileEntry]:
        response = await self._request("GET", url)
        return [FileEntry.model_validate(item) for item in response.json()]

    async def list_recents(self) -> List[FileEntry]:
        return await self._list("/list/files/recents")

    async def list_inbox(self) -> List[FileEntry]:
        return await self._list("/list/files/dhl")

    async def list_processed(self) -> List[FileEntry]:
        return await self._list("/list/files/processados")

    async def list_processed_today(self) -> List[FileEntry]:
        return await self._list("/list/files/processados/today")

    async def read_processed_rows(self) -> List[Dict[str, str]]:
        response = await self._request("GET", "/list/files/processados/csv")
        return response.json()

    async def upload_csv(self, files: Sequence[CsvUpload]) -> str:
        """Upload already converted CSV files in one request."""
        parts = [
            ("files", (upload.filename, upload.content, "text/csv"))
            for upload in files
        ]
        response = await self._request("POST", "/upload/csv", files=parts)
        logger.info(f"Uploaded {[upload.filename for upload in files]}")
        return response.text

    async def upload_spreadsheets(self, paths: Sequence[Union[str, Path]]) -> str:
        """Convert ``.xlsx`` workbooks to CSV and upload them as one batch.

        Raises:
            ValueError: If any path is not an ``.xlsx`` file; nothing is sent
        """
        paths = [Path(path) for path in paths]
        if not paths:
            raise ValueError("No files selected.")
        rejected = [path.name for path in paths if not is_spreadsheet(path.name)]
        if rejected:
            raise ValueError(f"Please upload only XLSX files: {', '.join(rejected)}")

        converted = [
            convert_spreadsheet(path.name, path.read_bytes()) for path in paths
        ]
        return await self.upload_csv(converted)

    async def delete_file(self, filename: str) -> str:
        response = await self._request(
            "DELETE", f"/delete/file/{quote(filename, safe='')}"
        )
        return response.text

    async def delete_all(self) -> str:
        response = await self._request("DELETE", "/delete/all/dhl")
        return response.text

    async def fetch_dashboard(self) -> DashboardSnapshot:
        """Fetch the four listings concurrently; any failure fails the snapshot."""
        processed, recents, inbox, today = await asyncio.gather(
            self.list_processed(),
            self.list_recents(),
            self.list_inbox(),
            self.list_processed_today(),
        )
        return DashboardSnapshot(
            processed=processed,
            recents=recents,
            inbox=inbox,
            processed_today=today,
        )

    async def watch(
        self, interval: float = DEFAULT_POLL_INTERVAL
    ) -> AsyncIterator[DashboardSnapshot]:
        """Yield a fresh snapshot every ``interval`` seconds.

        Failed polls are logged and skipped.
        """
        while True:
            try:
                yield await self.fetch_dashboard()
            except (BridgeClientError, httpx.HTTPError) as e:
                logger.error(f"Error fetching files from server: {e}")
            await asyncio.sleep(interval)
