"""Tests for subscription resolution and property writes."""

import pytest
from conftest import FakeApi, FakeOrganization, make_project

from cloudhost.clients.client_rest import ApiError
from cloudhost.clients.resources import Subscription
from cloudhost.core.errors import NotWritableError, ValidationError
from cloudhost.core.resolution import (
    UpdateStatus,
    coerce_value,
    cost_warning,
    resolve_subscription,
    set_property,
)

SUB = {"id": "42", "plan": "standard", "environments": 3, "storage": 5120}


class TestResolveSubscription:

    def test_direct_lookup_wins(self):
        api = FakeApi(subscriptions={"42": SUB}, organizations_enabled=True)
        subscription = resolve_subscription(api, "42")
        assert subscription.id == "42"
        assert ("list_organizations_with_member", "u1") not in api.calls

    def test_direct_forbidden_without_organizations_is_not_found(self):
        api = FakeApi(subscriptions={"42": SUB}, forbidden_direct=True)
        assert resolve_subscription(api, "42") is None

    def test_not_found_when_organizations_disabled(self):
        org = FakeOrganization("org1", "acme", subscriptions={"42": SUB})
        api = FakeApi(organizations=[org])
        assert resolve_subscription(api, "42") is None
        assert org.lookups == []

    def test_via_project_organization(self):
        org = FakeOrganization("org1", "acme", subscriptions={"42": SUB})
        api = FakeApi(organizations=[org], memberships=[], forbidden_direct=True, organizations_enabled=True)
        project = make_project("p1", organization_id="org1")
        subscription = resolve_subscription(api, "42", project)
        assert subscription.id == "42"
        assert ("list_organizations_with_member", "u1") not in api.calls

    def test_via_membership_scan_when_direct_forbidden(self):
        denied = FakeOrganization("org1", "denied", forbidden=True)
        empty = FakeOrganization("org2", "empty")
        owner = FakeOrganization("org3", "owner", subscriptions={"42": SUB})
        later = FakeOrganization("org4", "later", subscriptions={"42": SUB})
        api = FakeApi(organizations=[denied, empty, owner, later], forbidden_direct=True, organizations_enabled=True)

        subscription = resolve_subscription(api, "42")

        assert subscription.id == "42"
        assert denied.lookups == ["42"]
        assert empty.lookups == ["42"]
        assert owner.lookups == ["42"]
        assert later.lookups == []

    def test_project_organization_miss_falls_back_to_scan(self):
        project_org = FakeOrganization("org1", "project-org")
        member_org = FakeOrganization("org2", "member-org", subscriptions={"42": SUB})
        api = FakeApi(organizations=[project_org, member_org], memberships=[member_org], organizations_enabled=True)
        project = make_project("p1", organization_id="org1")

        assert resolve_subscription(api, "42", project).id == "42"
        assert project_org.lookups == ["42"]

    def test_no_reachable_path_returns_none(self):
        api = FakeApi(
            organizations=[FakeOrganization("org1", "a", forbidden=True), FakeOrganization("org2", "b")],
            forbidden_direct=True,
            organizations_enabled=True,
        )
        assert resolve_subscription(api, "42", make_project("p1")) is None

    def test_other_errors_propagate(self):
        api = FakeApi(organizations_enabled=True)

        def boom(subscription_id):
            raise ApiError(500, "server error")

        api.get_subscription = boom
        with pytest.raises(ApiError):
            resolve_subscription(api, "42")


class TestSetProperty:

    def _subscription(self, **overrides):
        data = dict(SUB, **overrides)
        subscription = Subscription(data)
        subscription.updates = []
        subscription.update = lambda values: subscription.updates.append(values)
        return subscription

    def test_rejects_non_writable_property(self):
        with pytest.raises(NotWritableError):
            set_property(self._subscription(), "status", "active", confirm=lambda q: True)

    def test_same_value_is_noop_without_prompt(self):
        subscription = self._subscription()
        prompts = []

        update = set_property(subscription, "storage", "5120", confirm=lambda q: prompts.append(q) or True)

        assert update.status == UpdateStatus.UNCHANGED
        assert update.ok
        assert prompts == []
        assert subscription.updates == []

    def test_change_requires_confirmation(self):
        subscription = self._subscription()
        prompts = []

        update = set_property(subscription, "environments", "5", confirm=lambda q: prompts.append(q) or True)

        assert update.status == UpdateStatus.UPDATED
        assert subscription.updates == [{"environments": 5}]
        assert len(prompts) == 1
        assert "may increase the cost" in prompts[0]

    def test_declined_confirmation_does_not_update(self):
        subscription = self._subscription()
        update = set_property(subscription, "plan", "large", confirm=lambda q: False)
        assert update.status == UpdateStatus.DECLINED
        assert not update.ok
        assert subscription.updates == []

    def test_invalid_integer_is_rejected(self):
        with pytest.raises(ValidationError):
            set_property(self._subscription(), "storage", "lots", confirm=lambda q: True)


def test_coerce_boolean_false_literal():
    assert coerce_value("flag", "false", bool) is False
    assert coerce_value("flag", "yes", bool) is True


def test_cost_warning_wording():
    assert "increase" in cost_warning(3, 5)
    assert "change" in cost_warning(5, 3)
    assert "change" in cost_warning("standard", "large")


@pytest.mark.parametrize("raw", ["1_0", "1e3", "0x10", "5.0", ""])
def test_coerce_integer_rejects_non_decimal_literals(raw):
    with pytest.raises(ValidationError):
        coerce_value("storage", raw, int)


def test_coerce_integer_accepts_plain_digits():
    assert coerce_value("storage", " 10240 ", int) == 10240
    assert coerce_value("environments", "-1", int) == -1
