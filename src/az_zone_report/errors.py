"""Exceptions raised by az-zone-report.

``SetupError`` and its subclasses abort a run.  Everything else is handled
per subscription: logged, skipped, and the run continues.
"""


class ZoneReportError(Exception):
    """Base class for az-zone-report errors."""


class SetupError(ZoneReportError):
    """The run cannot start (no session, unknown subscription or tenant)."""


class NotAuthenticatedError(SetupError):
    """No Azure token could be obtained for the requested tenant."""


class SubscriptionNotFoundError(SetupError, LookupError):
    """The requested subscription does not exist in the tenant."""

    def __init__(self, subscription_id: str, tenant_id: str | None = None) -> None:
        self.subscription_id = subscription_id
        self.tenant_id = tenant_id
        where = f" in tenant {tenant_id}" if tenant_id else ""
        super().__init__(f"Subscription {subscription_id} not found{where}")


class DiscoveryError(SetupError):
    """The subscriptions to report on could not be listed."""
