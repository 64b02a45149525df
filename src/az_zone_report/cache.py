"""Per-run cache of zone mappings keyed by subscription ID."""

from __future__ import annotations

from az_zone_report.models import ZoneMappingSet


class ZoneMappingCache:
    """Zone mappings resolved during one run.

    Created by the caller and handed to both jobs so that a composed run
    queries the locations of each subscription once.  Entries never expire;
    the cache lives as long as the run.
    """

    def __init__(self) -> None:
        self._entries: dict[str, ZoneMappingSet] = {}

    def get(self, subscription_id: str) -> ZoneMappingSet | None:
        return self._entries.get(subscription_id)

    def set(self, mapping: ZoneMappingSet) -> None:
        self._entries[mapping.subscriptionId] = mapping

    def __contains__(self, subscription_id: object) -> bool:
        return subscription_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
