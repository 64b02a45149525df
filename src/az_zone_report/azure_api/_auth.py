"""Authentication helpers for Azure ARM API calls."""

from __future__ import annotations

import logging

from azure.core.exceptions import ClientAuthenticationError
from azure.identity import DefaultAzureCredential

from az_zone_report.errors import NotAuthenticatedError

logger = logging.getLogger(__name__)

AZURE_MGMT_URL = "https://management.azure.com"

credential = DefaultAzureCredential()


def _get_headers(tenant_id: str | None = None) -> dict[str, str]:
    """Return authorization headers using *DefaultAzureCredential*.

    When *tenant_id* is provided the token is scoped to that tenant.
    """
    kwargs: dict[str, str] = {}
    if tenant_id:
        kwargs["tenant_id"] = tenant_id
    token = credential.get_token(f"{AZURE_MGMT_URL}/.default", **kwargs)
    return {
        "Authorization": f"Bearer {token.token}",
        "Content-Type": "application/json",
    }


def ensure_authenticated(tenant_id: str | None = None) -> None:
    """Raise :class:`NotAuthenticatedError` unless a token can be obtained.

    The ``azure`` loggers are silenced for the duration of the token request; the
    credential chain is very chatty when every source fails.
    """
    azure_logger = logging.getLogger("azure")
    previous_level = azure_logger.level
    azure_logger.setLevel(logging.CRITICAL)
    try:
        _get_headers(tenant_id)
    except ClientAuthenticationError as exc:
        target = f"tenant {tenant_id}" if tenant_id else "the default tenant"
        logger.debug("Token request failed: %s", exc)
        raise NotAuthenticatedError(
            f"No authenticated Azure session for {target}. Run 'az login' first."
        ) from exc
    finally:
        azure_logger.setLevel(previous_level)
