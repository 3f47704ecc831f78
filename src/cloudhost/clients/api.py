"""
Platform API
------------
Resource Client facade used by the commands:
 - project and environment listings (with a refreshable file cache)
 - subscription and organization lookups
 - current user identity

Not-found responses for single-resource lookups are returned as None.
Forbidden responses propagate as ForbiddenError so callers can decide
whether access denial matters.
"""

from typing import Dict, Iterator, Optional
from urllib.parse import quote

from cloudhost.clients.client_rest import NotFoundError, RestClient
from cloudhost.clients.resources import Environment, Organization, Project, Subscription
from cloudhost.core.cache import FileCache
from cloudhost.core.config import Settings, load_settings
from cloudhost.core.logger import debug

PROJECTS_CACHE_KEY = "projects"


def environments_cache_key(project_id: str) -> str:
    return f"environments-{project_id}"


class PlatformApi:
    def __init__(self, settings: Optional[Settings] = None, client: Optional[RestClient] = None, cache: Optional[FileCache] = None):
        self.settings = settings or load_settings()
        self.client = client or RestClient(self.settings)
        self.cache = cache or FileCache(self.settings.cache_dir, self.settings.cache_ttl)
        self._me = None

    @property
    def organizations_enabled(self) -> bool:
        return self.settings.organizations_enabled

    # ---------------------- USER ---------------------- #

    def _get_me(self, refresh: bool = False) -> dict:
        if self._me is None or refresh:
            self._me = self.client.get("/me") or {}
        return self._me

    def get_my_user_id(self) -> str:
        return self._get_me().get("id")

    # ---------------------- PROJECTS ---------------------- #

    def list_projects(self, refresh: Optional[bool] = None) -> Dict[str, Project]:
        """Return the user's projects keyed by id. refresh=True bypasses the cache."""
        cached = None if refresh else self.cache.get(PROJECTS_CACHE_KEY)
        if cached is None:
            debug("Fetching the project list")
            cached = self._get_me(refresh=bool(refresh)).get("projects") or []
            self.cache.set(PROJECTS_CACHE_KEY, cached)
        else:
            debug("Using the cached project list")
        return {p["id"]: Project(p, self.client) for p in cached if p.get("id")}

    def get_project(self, project_id: str, refresh: Optional[bool] = None) -> Optional[Project]:
        projects = self.list_projects(refresh)
        if project_id not in projects and not refresh:
            projects = self.list_projects(True)
        return projects.get(project_id)

    # ---------------------- ENVIRONMENTS ---------------------- #

    def list_environments(self, project: Project, refresh: Optional[bool] = None) -> Dict[str, Environment]:
        """Return a project's environments keyed by id. refresh=True bypasses the cache."""
        key = environments_cache_key(project.id)
        cached = None if refresh else self.cache.get(key)
        if cached is None:
            debug(f"Fetching environments for project {project.id}")
            cached = self.client.get(f"{project.uri.rstrip('/')}/environments") or []
            self.cache.set(key, cached)
        return {e["id"]: Environment(e, self.client, project=project) for e in cached if e.get("id")}

    def clear_environments_cache(self, project: Project):
        self.cache.delete(environments_cache_key(project.id))

    # ---------------------- SUBSCRIPTIONS ---------------------- #

    def get_subscription(self, subscription_id) -> Optional[Subscription]:
        path = f"/subscriptions/{quote(str(subscription_id), safe='')}"
        try:
            data = self.client.get(path)
        except NotFoundError:
            return None
        return Subscription(data, self.client, uri=self.client.url(path)) if data else None

    # ---------------------- ORGANIZATIONS ---------------------- #

    def get_organization_by_id(self, organization_id) -> Optional[Organization]:
        return self._get_organization(quote(str(organization_id), safe=""))

    def get_organization_by_name(self, name: str) -> Optional[Organization]:
        return self._get_organization("name=" + quote(name, safe=""))

    def _get_organization(self, ref: str) -> Optional[Organization]:
        try:
            data = self.client.get(f"/organizations/{ref}")
        except NotFoundError:
            return None
        return Organization(data, self.client) if data else None

    def list_organizations_with_member(self, user_id: str) -> Iterator[Organization]:
        """Yield the organizations the user belongs to, following pagination links."""
        path = f"/users/{quote(str(user_id), safe='')}/organizations"
        while path:
            body = self.client.get(path) or {}
            for item in body.get("items") or []:
                yield Organization(item, self.client)
            path = ((body.get("_links") or {}).get("next") or {}).get("href")

    def organization_label(self, organization: Organization) -> str:
        return f"{organization.label} ({organization.name})" if organization.name else str(organization.id)


_api: Optional[PlatformApi] = None


def get_api() -> PlatformApi:
    """Process-wide PlatformApi built from the current settings."""
    global _api
    if _api is None:
        _api = PlatformApi()
    return _api
