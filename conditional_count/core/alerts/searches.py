"""
Search Backend

The two operations a condition needs from the indexed-search backend, and an
implementation over the Elasticsearch/OpenSearch REST API.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

import httpx

from conditional_count.app.config import Settings, get_settings
from conditional_count.core.alerts.models import (
    CountResult,
    ResultMessage,
    SearchResult,
    Sorting,
)
from conditional_count.core.alerts.timeranges import AbsoluteRange
from conditional_count.core.exceptions import classify_search_exception

logger = logging.getLogger(__name__)

# Date format of the message timestamp field in the message indices
ES_DATE_FORMAT = "yyyy-MM-dd HH:mm:ss.SSS"


@runtime_checkable
class Searches(Protocol):
    """Count and search over stored messages. Implementations raise BackendQueryError."""

    def count(
        self,
        query: str,
        time_range: AbsoluteRange,
        filter: Optional[str] = None
    ) -> CountResult: ...

    def search(
        self,
        query: str,
        filter: Optional[str],
        time_range: AbsoluteRange,
        limit: int,
        offset: int,
        sorting: Sorting
    ) -> SearchResult: ...


def format_timestamp(value) -> str:
    """Render a UTC datetime in ES_DATE_FORMAT (millisecond precision)."""
    return value.strftime("%Y-%m-%d %H:%M:%S.") + f"{value.microsecond // 1000:03d}"


class ElasticsearchSearches:
    """
    Searches backed by an Elasticsearch/OpenSearch cluster.

    Blocking calls, no retries; timeouts come from settings.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.Client] = None
    ):
        """
        Initialize the search backend.

        Args:
            settings: Settings instance (defaults to get_settings())
            client: Preconfigured httpx client (built from settings if not provided)
        """
        self.settings = settings or get_settings()
        self._owns_client = client is None
        self._client = client or self._build_client()

    def _build_client(self) -> httpx.Client:
        auth = None
        if self.settings.search_username:
            auth = (self.settings.search_username, self.settings.search_password or "")
        return httpx.Client(
            base_url=self.settings.search_backend_url,
            timeout=httpx.Timeout(self.settings.search_timeout_seconds),
            auth=auth,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ElasticsearchSearches":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def count(
        self,
        query: str,
        time_range: AbsoluteRange,
        filter: Optional[str] = None
    ) -> CountResult:
        body = {"query": self._build_query(query, time_range, filter)}
        started = time.monotonic()
        data = self._post("_count", body)
        took_ms = int((time.monotonic() - started) * 1000)

        try:
            return CountResult(count=int(data["count"]), took_ms=took_ms)
        except (KeyError, TypeError, ValueError) as e:
            raise classify_search_exception(e) from e

    def search(
        self,
        query: str,
        filter: Optional[str],
        time_range: AbsoluteRange,
        limit: int,
        offset: int,
        sorting: Sorting
    ) -> SearchResult:
        body = {
            "query": self._build_query(query, time_range, filter),
            "size": limit,
            "from": offset,
            "sort": [{sorting.field: {"order": sorting.direction.value}}],
            "track_total_hits": True,
        }
        data = self._post("_search", body)

        try:
            hits = data["hits"]
            results = [
                ResultMessage(index=hit["_index"], message={**hit.get("_source", {}), "_id": hit["_id"]})
                for hit in hits["hits"]
            ]
            total = hits.get("total", len(results))
            if isinstance(total, dict):
                total = total.get("value", len(results))
            return SearchResult(
                results=results,
                total_results=int(total),
                took_ms=int(data.get("took", 0)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise classify_search_exception(e) from e

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _build_query(
        self,
        query: str,
        time_range: AbsoluteRange,
        filter: Optional[str]
    ) -> Dict[str, Any]:
        filters: List[Dict[str, Any]] = [{
            "range": {
                self.settings.search_timestamp_field: {
                    "gte": format_timestamp(time_range.from_),
                    "lte": format_timestamp(time_range.to),
                    "format": ES_DATE_FORMAT,
                }
            }
        }]
        if filter:
            filters.append({"query_string": {"query": filter}})

        if not query or query.strip() == "*":
            must: Dict[str, Any] = {"match_all": {}}
        else:
            must = {"query_string": {"query": query, "allow_leading_wildcard": True}}

        return {"bool": {"must": must, "filter": filters}}

    def _post(self, operation: str, body: Dict[str, Any]) -> Dict[str, Any]:
        path = f"/{self.settings.search_index_pattern}/{operation}"
        logger.debug(f"Search backend request {path}")
        try:
            response = self._client.post(path, json=body)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise classify_search_exception(e) from e
