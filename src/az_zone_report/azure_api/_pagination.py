"""ARM pagination helper."""

from __future__ import annotations

import logging

import requests

from az_zone_report.errors import ZoneReportError

logger = logging.getLogger(__name__)


class MalformedResponseError(ZoneReportError):
    """An ARM list endpoint answered with something other than a ``value`` page."""


def _paginate(url: str, headers: dict[str, str], timeout: int = 30) -> list[dict]:
    """Fetch all pages from an ARM list endpoint and return the merged values."""
    items: list[dict] = []
    while url:
        resp = requests.get(url, headers=headers, timeout=timeout)
        resp.raise_for_status()
        try:
            data = resp.json()
        except ValueError as exc:
            raise MalformedResponseError(f"Response from {url} is not JSON") from exc
        if not isinstance(data, dict) or not isinstance(data.get("value", []), list):
            raise MalformedResponseError(f"Response from {url} has no 'value' list")
        items.extend(data.get("value", []))
        url = data.get("nextLink")
        if url:
            logger.debug("Following nextLink (%d items so far)", len(items))
    return items
