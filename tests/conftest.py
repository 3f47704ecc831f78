"""Shared fixtures and in-memory fakes for the platform API."""

from pathlib import Path

import pytest

from cloudhost.clients.client_rest import ForbiddenError
from cloudhost.clients.resources import Project, Subscription
from cloudhost.core import logger, prompts
from cloudhost.core.config import Settings


def make_settings(tmp_path: Path = Path("/tmp/cloudhost-tests"), **overrides) -> Settings:
    values = dict(
        api_url="https://api.example.com",
        api_token="test-token",
        timeout=5.0,
        retries=0,
        organizations_enabled=False,
        cache_dir=tmp_path / "cache",
        cache_ttl=600.0,
        activity_timeout=None,
        poll_interval=0.0,
    )
    values.update(overrides)
    return Settings(**values)


def make_project(project_id, title="", host="eu.example.com", owner="u1", organization_id=None, **extra) -> Project:
    data = {
        "id": project_id,
        "title": title,
        "owner": owner,
        "endpoint": f"https://{host}/api/projects/{project_id}",
        "organization_id": organization_id,
    }
    data.update(extra)
    return Project(data)


class FakeActivity:
    def __init__(self, activity_id, result="success", complete_after=0):
        self.id = activity_id
        self.result = result
        self.state = "in_progress" if complete_after else "complete"
        self.description = f"deactivate {activity_id}"
        self._remaining = complete_after
        self.refreshes = 0

    def refresh(self):
        self.refreshes += 1
        self._remaining -= 1
        if self._remaining <= 0:
            self.state = "complete"
        return self

    def is_complete(self):
        return self.state == "complete"

    def succeeded(self):
        return self.is_complete() and self.result == "success"


class FakeEnvironment:
    def __init__(self, env_id, status="active", parent=None, merge_info=None,
                 fail_deactivate=False, fail_delete=False, status_after_refresh="inactive", activity_result="success"):
        self.id = env_id
        self.status = status
        self.parent = parent
        self.merge_info = merge_info or {}
        self.fail_deactivate = fail_deactivate
        self.fail_delete = fail_delete
        self.status_after_refresh = status_after_refresh
        self.activity_result = activity_result
        self.deactivated = False
        self.deleted = False
        self.refreshed = 0

    def is_active(self):
        return self.status == "active"

    def deactivate(self):
        if self.fail_deactivate:
            raise RuntimeError(f"cannot deactivate {self.id}")
        self.deactivated = True
        return FakeActivity(f"act-{self.id}", result=self.activity_result)

    def refresh(self):
        self.refreshed += 1
        self.status = self.status_after_refresh
        return self

    def delete(self):
        if self.fail_delete:
            raise RuntimeError(f"cannot delete {self.id}")
        self.deleted = True

    def __repr__(self):
        return f"<FakeEnvironment {self.id} {self.status}>"


class FakeOrganization:
    def __init__(self, org_id, name, subscriptions=None, forbidden=False):
        self.id = org_id
        self.name = name
        self.label = name.title()
        self.subscriptions = subscriptions or {}
        self.forbidden = forbidden
        self.lookups = []

    def get_subscription(self, subscription_id):
        self.lookups.append(subscription_id)
        if self.forbidden:
            raise ForbiddenError(403, "access denied")
        data = self.subscriptions.get(str(subscription_id))
        return Subscription(data) if data else None


class FakeApi:
    def __init__(self, projects=None, environments=None, subscriptions=None, organizations=None,
                 memberships=None, user_id="u1", organizations_enabled=False, forbidden_direct=False,
                 settings=None):
        self.projects = {p.id: p for p in (projects or [])}
        self.environments = dict(environments or {})
        self.subscriptions = subscriptions or {}
        self.organizations = {o.id: o for o in (organizations or [])}
        self.memberships = memberships if memberships is not None else list(self.organizations.values())
        self.user_id = user_id
        self.forbidden_direct = forbidden_direct
        self.settings = settings or make_settings(organizations_enabled=organizations_enabled)
        self.calls = []
        self.cleared = []

    @property
    def organizations_enabled(self):
        return self.settings.organizations_enabled

    def get_my_user_id(self):
        self.calls.append(("me",))
        return self.user_id

    def list_projects(self, refresh=None):
        self.calls.append(("list_projects", refresh))
        return dict(self.projects)

    def get_project(self, project_id, refresh=None):
        return self.projects.get(project_id)

    def list_environments(self, project, refresh=None):
        self.calls.append(("list_environments", project.id, refresh))
        return dict(self.environments)

    def clear_environments_cache(self, project):
        self.cleared.append(project.id)

    def get_subscription(self, subscription_id):
        self.calls.append(("get_subscription", subscription_id))
        if self.forbidden_direct:
            raise ForbiddenError(403, "access denied")
        data = self.subscriptions.get(str(subscription_id))
        return Subscription(data) if data else None

    def get_organization_by_id(self, organization_id):
        self.calls.append(("get_organization_by_id", organization_id))
        return self.organizations.get(organization_id)

    def get_organization_by_name(self, name):
        for org in self.organizations.values():
            if org.name == name:
                return org
        return None

    def list_organizations_with_member(self, user_id):
        self.calls.append(("list_organizations_with_member", user_id))
        return iter(self.memberships)

    def organization_label(self, organization):
        return f"{organization.label} ({organization.name})"


@pytest.fixture(autouse=True)
def reset_cli_state():
    logger.set_verbosity(quiet=False, verbose=False)
    prompts.set_interaction(assume_yes=False, interactive=True)
    yield
    logger.set_verbosity(quiet=False, verbose=False)
    prompts.set_interaction(assume_yes=False, interactive=True)
