"""
Resource Models
---------------
Wrappers around the JSON documents returned by the platform API.

Each model keeps the raw dictionary in `data` and a reference to the
RestClient used for follow-up calls (refresh, mutations). Models built from
cached data, or in tests, may carry `client=None` as long as no remote call
is made.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlparse

from cloudhost.clients.client_rest import NotFoundError

_MISSING = object()


class Resource:
    def __init__(self, data: Dict[str, Any], client=None, uri: Optional[str] = None):
        self.data = dict(data or {})
        self.client = client
        self._uri = uri

    @property
    def id(self) -> str:
        return self.data.get("id")

    @property
    def uri(self) -> str:
        return self._uri or self.link("self") or ""

    def link(self, rel: str) -> Optional[str]:
        return ((self.data.get("_links") or {}).get(rel) or {}).get("href")

    def get_property(self, name: str, required: bool = True, default: Any = None) -> Any:
        """Return a top-level property. Missing required properties raise KeyError."""
        value = self.data.get(name, _MISSING)
        if value is _MISSING:
            if required:
                raise KeyError(f"Property not found: {name}")
            return default
        return value

    def properties(self) -> Dict[str, Any]:
        """Public properties, without HAL links or embedded documents."""
        return {k: v for k, v in self.data.items() if not k.startswith("_")}

    def refresh(self):
        self.data = dict(self.client.get(self.uri) or {})
        return self

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.id}>"


class Project(Resource):

    @property
    def title(self) -> str:
        return self.data.get("title") or ""

    @property
    def owner(self) -> Optional[str]:
        return self.data.get("owner")

    @property
    def organization_id(self) -> Optional[str]:
        return self.data.get("organization_id") or None

    @property
    def subscription_id(self) -> Optional[str]:
        return self.data.get("subscription_id")

    @property
    def uri(self) -> str:
        return self._uri or self.data.get("endpoint") or self.link("self") or ""

    @property
    def host(self) -> Optional[str]:
        return urlparse(self.uri).hostname

    @property
    def console_url(self) -> str:
        return self.link("#ui") or self.uri

    def is_suspended(self) -> bool:
        return self.data.get("status") == "suspended"


class Activity(Resource):
    """A server-tracked asynchronous operation."""

    @property
    def state(self) -> str:
        return self.data.get("state") or ""

    @property
    def result(self) -> Optional[str]:
        return self.data.get("result")

    @property
    def description(self) -> str:
        return self.data.get("description") or self.data.get("type") or str(self.id)

    def is_complete(self) -> bool:
        return self.state in ("complete", "cancelled")

    def succeeded(self) -> bool:
        return self.state == "complete" and self.result == "success"


class Environment(Resource):

    def __init__(self, data, client=None, uri=None, project: Optional[Project] = None):
        super().__init__(data, client, uri)
        self.project = project

    @property
    def uri(self) -> str:
        if self._uri:
            return self._uri
        if self.link("self"):
            return self.link("self")
        if self.project is not None:
            return f"{self.project.uri.rstrip('/')}/environments/{quote(str(self.id), safe='')}"
        return ""

    @property
    def status(self) -> str:
        return self.data.get("status") or ""

    @property
    def parent(self) -> Optional[str]:
        return self.data.get("parent")

    @property
    def merge_info(self) -> Dict[str, Any]:
        return self.data.get("merge_info") or {}

    def is_active(self) -> bool:
        return self.status == "active"

    def deactivate(self) -> Optional[Activity]:
        """Start deactivation; returns the activity tracking it, if the API reported one."""
        body = self.client.post(f"{self.uri}/deactivate") or {}
        activities = _embedded_activities(body, self.client, self.project)
        return activities[0] if activities else None

    def delete(self):
        self.client.delete(self.uri)


class Subscription(Resource):

    @property
    def uri(self) -> str:
        if self._uri or self.link("self"):
            return self._uri or self.link("self")
        if self.client is not None:
            return self.client.url(f"/subscriptions/{quote(str(self.id), safe='')}")
        return ""

    def update(self, values: Dict[str, Any]):
        body = self.client.patch(self.uri, json=values)
        if isinstance(body, dict) and body.get("id"):
            self.data = body
        else:
            self.data.update(values)
        return self


class Organization(Resource):

    @property
    def name(self) -> str:
        return self.data.get("name") or ""

    @property
    def label(self) -> str:
        return self.data.get("label") or self.name

    def get_subscription(self, subscription_id) -> Optional[Subscription]:
        """Load a subscription owned by this organization (None when absent)."""
        path = f"/organizations/{quote(str(self.id), safe='')}/subscriptions/{quote(str(subscription_id), safe='')}"
        try:
            data = self.client.get(path)
        except NotFoundError:
            return None
        return Subscription(data, self.client, uri=self.client.url(path)) if data else None


def _embedded_activities(body: Dict[str, Any], client, project: Optional[Project]) -> List[Activity]:
    embedded = (body.get("_embedded") or {}).get("activities") or []
    activities = []
    for item in embedded:
        uri = None
        if project is not None and item.get("id") and not ((item.get("_links") or {}).get("self")):
            uri = f"{project.uri.rstrip('/')}/activities/{quote(str(item['id']), safe='')}"
        activities.append(Activity(item, client, uri=uri))
    return activities
