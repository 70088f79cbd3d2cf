from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import httpx
from supabase import Client, PostgrestAPIError, create_client

from ..config.settings import SupabaseSettings
from ..domain.errors import UpstreamError

logger = logging.getLogger(__name__)


class SupabaseNotInitializedError(UpstreamError):
    """Raised when accessing the Supabase client without URL or key configured."""


@dataclass
class SupabaseGateway:
    """Thin wrapper around the Supabase Python client."""

    settings: SupabaseSettings
    _client: Optional[Client] = None

    def ensure_client(self) -> Client:
        if self._client is not None:
            return self._client
        if not self.settings.is_configured:
            raise SupabaseNotInitializedError("Supabase settings are missing URL or key.")
        self._client = create_client(self.settings.url, self.settings.key)
        return self._client

    def table(self, name: str):
        return self.ensure_client().table(name)

    def execute(self, query: Any) -> List[dict]:
        """Run a query builder and return its rows, surfacing failures as ``UpstreamError``."""

        try:
            response = query.execute()
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            logger.error("Supabase request failed: %s", exc)
            raise UpstreamError(f"Supabase request failed: {exc}") from exc
        return list(response.data or [])
