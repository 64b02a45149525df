"""Tests for the ARM API helpers."""

from unittest.mock import patch

import pytest
import requests
from azure.core.exceptions import ClientAuthenticationError

from az_zone_report import azure_api
from az_zone_report.azure_api import MalformedResponseError
from az_zone_report.errors import (
    DiscoveryError,
    NotAuthenticatedError,
    SubscriptionNotFoundError,
)

# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


class TestPaginate:
    """Tests for nextLink handling."""

    def test_follows_next_link(self, mock_response):
        pages = [
            mock_response({"value": [{"n": 1}], "nextLink": "https://next"}),
            mock_response({"value": [{"n": 2}]}),
        ]
        with patch("az_zone_report.azure_api.requests.get", side_effect=pages) as get:
            items = azure_api._paginate("https://first", {})

        assert items == [{"n": 1}, {"n": 2}]
        assert get.call_args_list[1].args[0] == "https://next"

    def test_non_json_body_is_malformed(self, mock_response):
        resp = mock_response()
        resp.json.side_effect = ValueError("not json")
        with (
            patch("az_zone_report.azure_api.requests.get", return_value=resp),
            pytest.raises(MalformedResponseError),
        ):
            azure_api._paginate("https://first", {})

    def test_value_not_a_list_is_malformed(self, mock_response):
        with (
            patch(
                "az_zone_report.azure_api.requests.get",
                return_value=mock_response({"value": "oops"}),
            ),
            pytest.raises(MalformedResponseError),
        ):
            azure_api._paginate("https://first", {})


# ---------------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------------


class TestListSubscriptions:
    """Tests for subscription listing."""

    def test_keeps_provider_order_and_enabled_only(self, mock_response):
        payload = {
            "value": [
                {"subscriptionId": "s-z", "displayName": "Zulu", "state": "Enabled"},
                {"subscriptionId": "s-off", "displayName": "Off", "state": "Disabled"},
                {"subscriptionId": "s-a", "displayName": "Alpha", "state": "Enabled"},
            ]
        }
        with patch(
            "az_zone_report.azure_api.requests.get", return_value=mock_response(payload)
        ):
            subs = azure_api.list_subscriptions()

        assert [s["id"] for s in subs] == ["s-z", "s-a"]
        assert subs[0]["name"] == "Zulu"

    def test_filters_foreign_tenant(self, mock_response, _mock_credential):
        payload = {
            "value": [
                {"subscriptionId": "s-1", "displayName": "Mine", "state": "Enabled", "tenantId": "t1"},
                {"subscriptionId": "s-2", "displayName": "Guest", "state": "Enabled", "tenantId": "t2"},
            ]
        }
        with patch(
            "az_zone_report.azure_api.requests.get", return_value=mock_response(payload)
        ):
            subs = azure_api.list_subscriptions("t1")

        assert [s["id"] for s in subs] == ["s-1"]
        _mock_credential.get_token.assert_called_with(
            "https://management.azure.com/.default", tenant_id="t1"
        )


class TestGetSubscription:
    """Tests for single subscription lookup."""

    def test_returns_subscription(self, mock_response):
        payload = {"subscriptionId": "s-1", "displayName": "Prod", "state": "Enabled"}
        with patch(
            "az_zone_report.azure_api.requests.get", return_value=mock_response(payload)
        ):
            sub = azure_api.get_subscription("s-1")

        assert sub == {"id": "s-1", "name": "Prod", "tenantId": None, "state": "Enabled"}

    def test_404_raises_not_found(self, mock_response):
        with (
            patch(
                "az_zone_report.azure_api.requests.get",
                return_value=mock_response({"error": {}}, status_code=404),
            ),
            pytest.raises(SubscriptionNotFoundError) as exc_info,
        ):
            azure_api.get_subscription("missing")

        assert exc_info.value.subscription_id == "missing"

    def test_other_tenant_raises_not_found(self, mock_response):
        payload = {"subscriptionId": "s-1", "displayName": "X", "tenantId": "t2"}
        with (
            patch("az_zone_report.azure_api.requests.get", return_value=mock_response(payload)),
            pytest.raises(SubscriptionNotFoundError),
        ):
            azure_api.get_subscription("s-1", tenant_id="t1")

    def test_resolve_targets_single_subscription_skips_listing(self):
        with (
            patch(
                "az_zone_report.azure_api.discovery.get_subscription",
                return_value={"id": "s-1", "name": "One"},
            ) as get_one,
            patch("az_zone_report.azure_api.discovery.list_subscriptions") as list_all,
        ):
            targets = azure_api.resolve_targets("s-1")

        assert targets == [{"id": "s-1", "name": "One"}]
        get_one.assert_called_once()
        list_all.assert_not_called()

    @pytest.mark.parametrize("subscription_id", [None, "s-1"])
    def test_resolve_targets_wraps_transport_errors(self, subscription_id):
        with (
            patch(
                "az_zone_report.azure_api.requests.get",
                side_effect=requests.ConnectionError("network down"),
            ),
            pytest.raises(DiscoveryError, match="network down"),
        ):
            azure_api.resolve_targets(subscription_id)

    def test_resolve_targets_wraps_server_errors(self, mock_response):
        with (
            patch(
                "az_zone_report.azure_api.requests.get",
                return_value=mock_response({}, status_code=500),
            ),
            pytest.raises(DiscoveryError),
        ):
            azure_api.resolve_targets()

    def test_resolve_targets_wraps_malformed_listing(self, mock_response):
        with (
            patch(
                "az_zone_report.azure_api.requests.get",
                return_value=mock_response({"value": "oops"}),
            ),
            pytest.raises(DiscoveryError),
        ):
            azure_api.resolve_targets()

    def test_resolve_targets_keeps_not_found(self, mock_response):
        with (
            patch(
                "az_zone_report.azure_api.requests.get",
                return_value=mock_response({}, status_code=404),
            ),
            pytest.raises(SubscriptionNotFoundError),
        ):
            azure_api.resolve_targets("missing")


# ---------------------------------------------------------------------------
# Locations / compute
# ---------------------------------------------------------------------------


class TestListLocations:
    """Tests for region listing."""

    def test_returns_raw_locations(self, mock_response, prod_locations):
        with patch(
            "az_zone_report.azure_api.requests.get",
            return_value=mock_response({"value": prod_locations}),
        ) as get:
            locations = azure_api.list_locations("sub-prod")

        assert [loc["name"] for loc in locations] == ["westus", "eastus", "westeurope"]
        assert "/subscriptions/sub-prod/locations" in get.call_args.args[0]

    def test_404_raises_not_found(self, mock_response):
        with (
            patch(
                "az_zone_report.azure_api.requests.get",
                return_value=mock_response({}, status_code=404),
            ),
            pytest.raises(SubscriptionNotFoundError),
        ):
            azure_api.list_locations("missing")


class TestCompute:
    """Tests for VM inventory helpers."""

    def test_list_virtual_machines_requests_status(self, mock_response):
        with patch(
            "az_zone_report.azure_api.requests.get",
            return_value=mock_response({"value": [{"name": "vm1"}]}),
        ) as get:
            vms = azure_api.list_virtual_machines("sub-1")

        assert vms == [{"name": "vm1"}]
        url = get.call_args.args[0]
        assert "Microsoft.Compute/virtualMachines" in url
        assert "statusOnly=true" in url

    @pytest.mark.parametrize(
        ("resource_id", "expected"),
        [
            ("/subscriptions/s/resourceGroups/rg-web/providers/Microsoft.Compute/virtualMachines/vm", "rg-web"),
            ("/subscriptions/s/resourcegroups/RG-LOWER/providers/x/y/z", "RG-LOWER"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_resource_group_of(self, resource_id, expected):
        assert azure_api.resource_group_of(resource_id) == expected


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class TestEnsureAuthenticated:
    """Tests for the session check."""

    def test_passes_with_token(self, _mock_credential):
        azure_api.ensure_authenticated("tid-1")
        _mock_credential.get_token.assert_called_once()

    def test_raises_without_session(self, _mock_credential):
        _mock_credential.get_token.side_effect = ClientAuthenticationError("no creds")
        with pytest.raises(NotAuthenticatedError):
            azure_api.ensure_authenticated()
