"""Live-stats REST client - extended match details by secondary (betradar) id."""

from __future__ import annotations

from typing import Any

from matchfeed.ingestion.http import UpstreamClient


def extract_document(body: Any) -> Any | None:
    """Unwrap ``{doc: [{...}]}`` or ``{data: {...}}``; any other non-empty body is returned as-is."""
    if not body:
        return None
    if isinstance(body, dict):
        docs = body.get("doc")
        if isinstance(docs, list) and docs and docs[0]:
            return docs[0]
        if body.get("data"):
            return body["data"]
    return body


class LiveStatsClient:
    def __init__(self, upstream: UpstreamClient) -> None:
        self.upstream = upstream
        self.settings = upstream.settings

    def match_details_url(self, betradar_id: str, token: str) -> str:
        # Token is appended verbatim, not form-encoded.
        return f"{self.settings.live_stats_base}/match_detailsextended/{betradar_id}?T={token}"

    async def fetch_match_details(self, betradar_id: str, token: str) -> Any | None:
        return await self.upstream.get_json(
            self.match_details_url(betradar_id, token),
            headers=self.upstream.make_plain_headers(),
        )
