"""Shared Azure ARM API helpers.

Every public function returns plain Python objects (dicts / lists) straight
from ARM; reshaping into report records happens in
:mod:`az_zone_report.zones` and :mod:`az_zone_report.reporter`.

This package re-exports all public names so that
``from az_zone_report.azure_api import X`` and
``from az_zone_report import azure_api`` both work.
"""

import requests as requests  # noqa: F401  # re-export for mock patching

# -- Auth & constants -------------------------------------------------------
from az_zone_report.azure_api._auth import (  # noqa: F401
    AZURE_MGMT_URL,
    _get_headers,
    credential,
    ensure_authenticated,
)

# -- Pagination --------------------------------------------------------------
from az_zone_report.azure_api._pagination import (  # noqa: F401
    MalformedResponseError,
    _paginate,
)

# -- Compute -----------------------------------------------------------------
from az_zone_report.azure_api.compute import (  # noqa: F401
    list_virtual_machines,
    resource_group_of,
)

# -- Discovery ---------------------------------------------------------------
from az_zone_report.azure_api.discovery import (  # noqa: F401
    get_subscription,
    list_locations,
    list_subscriptions,
    resolve_targets,
)
