"""Airtable client for the animate_generation table.

pyairtable is synchronous, so every call is pushed onto a worker thread
with ``asyncio.to_thread`` to keep the poll loops of concurrent runs moving.
"""

import asyncio
import logging
from typing import Optional

from pyairtable import Api, Table
from requests.exceptions import HTTPError

from animate_generation.config import AnimateConfig
from animate_generation.errors import NotFoundError

logger = logging.getLogger(__name__)


class AnimationAirtableClient:
    """Client for the table holding one row per animation request."""

    def __init__(self, config: AnimateConfig, api: Optional[Api] = None):
        if not config.airtable_token and api is None:
            raise ValueError("AIRTABLE_TOKEN not found in configuration")
        if not config.airtable_base_id:
            raise ValueError("AIRTABLE_BASE_ID not found in configuration")

        self.base_id = config.airtable_base_id
        self.table_name = config.table_name
        self.api = api or Api(config.airtable_token)

        # Lazy-load table reference
        self._table = None

    @property
    def table(self) -> Table:
        """Get the animate_generation table."""
        if self._table is None:
            self._table = self.api.table(self.base_id, self.table_name)
        return self._table

    async def find(self, record_id: str) -> dict:
        """Get a single record's fields by record ID.

        Raises:
            NotFoundError: if Airtable answers 404 for the id.
        """
        try:
            record = await asyncio.to_thread(self.table.get, record_id)
        except HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                raise NotFoundError(f"Record {record_id} not found in {self.table_name}") from e
            raise
        return {"id": record["id"], **record.get("fields", {})}

    async def update(self, record_id: str, fields: dict) -> dict:
        """Merge ``fields`` into a record. Fields not named are left untouched."""
        record = await asyncio.to_thread(
            self.table.update, record_id, fields, typecast=True
        )
        return {"id": record["id"], **record.get("fields", {})}

    async def upload_attachment(
        self,
        record_id: str,
        field: str,
        filename: str,
        content: bytes,
        content_type: str,
    ) -> dict:
        """Upload raw bytes into an attachment field of a record."""
        logger.info(f"Uploading {len(content)} bytes to {field} on {record_id}")
        return await asyncio.to_thread(
            self.table.upload_attachment,
            record_id,
            field,
            filename,
            content=content,
            content_type=content_type,
        )
