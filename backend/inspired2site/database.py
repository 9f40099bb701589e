"""
Supabase sink for analysis records.

One independent insert per analysis; no reads, no updates. When
persistence is disabled the NullSink stands in and does nothing.
"""

import asyncio
from typing import Protocol

from inspired2site.config import Capabilities, Settings, get_settings
from inspired2site.models import Analysis


class AnalysisSink(Protocol):
    async def save_analysis(self, analysis: Analysis) -> dict: ...


class NullSink:
    async def save_analysis(self, analysis: Analysis) -> dict:
        return {}


class SupabaseSink:
    def __init__(self, url: str, key: str, table: str = "analyses"):
        if not url or not key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set in .env")
        self.url = url
        self.key = key
        self.table = table
        self._client = None

    def _get_client(self):
        if self._client is None:
            from supabase import create_client
            self._client = create_client(self.url, self.key)
        return self._client

    def _insert(self, row: dict) -> dict:
        result = self._get_client().table(self.table).insert(row).execute()
        return result.data[0] if result.data else {}

    async def save_analysis(self, analysis: Analysis) -> dict:
        """Insert {url, data} and return the inserted row."""
        row = {"url": analysis.url, "data": analysis.to_json()}
        return await asyncio.to_thread(self._insert, row)


def make_sink(capabilities: Capabilities, settings: Settings | None = None) -> AnalysisSink:
    if not capabilities.persistence_enabled:
        return NullSink()
    settings = settings or get_settings()
    return SupabaseSink(settings.supabase_url, settings.supabase_key, settings.analyses_table)
