"""
Filters
-------
Named predicates over resource collections (dicts keyed by resource id) and
the stable sort used by list commands.

Filters are applied in the order they were declared; each one narrows the
collection. Unknown filter names are ignored.
"""

from numbers import Number
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar

from cloudhost.clients.resources import Environment, Project, Resource
from cloudhost.core.logger import debug

R = TypeVar("R", bound=Resource)
Predicate = Callable[[Any, Any], bool]


# ---------------------- PROJECT PREDICATES ---------------------- #

def _host(project: Project, value: str) -> bool:
    return project.host == value


def _title(project: Project, value: str) -> bool:
    return value.lower() in (project.title or "").lower()


def _my(project: Project, owner_id: str) -> bool:
    return project.owner == owner_id


def _org(project: Project, organization) -> bool:
    return project.organization_id == organization.id


# ---------------------- ENVIRONMENT PREDICATES ---------------------- #

def _inactive(environment: Environment, value: bool) -> bool:
    return (environment.status == "inactive") == bool(value)


def is_merged(environment: Environment) -> bool:
    """Merged: has a parent and is zero commits ahead of it."""
    merge_info = environment.merge_info
    if not environment.parent:
        return False
    if merge_info.get("commits_ahead") is None or merge_info.get("parent_ref") is None:
        return False
    return merge_info["commits_ahead"] == 0


def _merged(environment: Environment, value: bool) -> bool:
    return is_merged(environment) == bool(value)


def _exclude(resource: Resource, ids) -> bool:
    return resource.id not in set(ids or ())


PROJECT_FILTERS: Dict[str, Predicate] = {
    "host": _host,
    "title": _title,
    "my": _my,
    "org": _org,
}

ENVIRONMENT_FILTERS: Dict[str, Predicate] = {
    "inactive": _inactive,
    "merged": _merged,
    "exclude": _exclude,
}


def apply_filters(resources: Mapping[str, R], filters: Mapping[str, Any], predicates: Mapping[str, Predicate]) -> Dict[str, R]:
    """Return the resources matching every filter, keeping the input order."""
    result = dict(resources)
    for name, value in filters.items():
        if not result:
            break
        predicate = predicates.get(name)
        if predicate is None:
            debug(f"Ignoring unknown filter: {name}")
            continue
        result = {key: resource for key, resource in result.items() if predicate(resource, value)}
        debug(f"Filter --{name}: {len(result)} remaining")
    return result


def filter_projects(projects: Mapping[str, Project], filters: Mapping[str, Any]) -> Dict[str, Project]:
    return apply_filters(projects, filters, PROJECT_FILTERS)


def filter_environments(environments: Mapping[str, Environment], filters: Mapping[str, Any]) -> Dict[str, Environment]:
    return apply_filters(environments, filters, ENVIRONMENT_FILTERS)


# ---------------------- SORTING ---------------------- #

def _sort_value(resource: Resource, prop: str):
    if isinstance(getattr(type(resource), prop, None), property):
        value = getattr(resource, prop)
    else:
        value = resource.get_property(prop, required=False)
    if isinstance(value, Number) and not isinstance(value, bool):
        return (0, value, "")
    return (1, 0, "" if value is None else str(value).casefold())


def sort_resources(resources: Mapping[str, R], prop: Optional[str] = "title", reverse: bool = False) -> Dict[str, R]:
    """
    Stable sort by a property (numbers before strings, strings case-insensitive), keeping id keys.
    Reversal is applied to the sorted result, not to the comparison.
    """
    items = list(resources.items())
    if prop:
        items = sorted(items, key=lambda item: _sort_value(item[1], prop))
    if reverse:
        items.reverse()
    return dict(items)
