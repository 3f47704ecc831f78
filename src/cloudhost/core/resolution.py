"""
Subscription Resolution
-----------------------
Loads a subscription through the API paths the current user may have access
to, first success wins:

  1. direct lookup (project access list, owner, or admin);
  2. the project's own organization, when known;
  3. every organization the user is a member of.

Steps 2 and 3 require the organizations API. Access-denied responses are
treated as "not here" at every step; any other error propagates.

Also implements writing one of the writable subscription properties.
"""

from dataclasses import dataclass
from enum import Enum
from numbers import Number
from typing import Any, Callable, Iterator, Optional, Tuple

from cloudhost.clients.client_rest import ForbiddenError
from cloudhost.clients.resources import Project, Subscription
from cloudhost.core.errors import NotWritableError, ValidationError
from cloudhost.core.logger import debug

WRITABLE_PROPERTIES = {
    "plan": str,
    "environments": int,
    "storage": int,
}

Lookup = Callable[[], Optional[Subscription]]


def ignore_forbidden(lookup: Lookup) -> Optional[Subscription]:
    """Run a lookup, treating access denied as not found."""
    try:
        return lookup()
    except ForbiddenError as exc:
        debug(f"Access denied, ignoring: {exc.message or exc}")
        return None


def _lookups(api, subscription_id, project: Optional[Project]) -> Iterator[Tuple[str, Lookup]]:
    yield "directly", lambda: api.get_subscription(subscription_id)

    if not api.organizations_enabled:
        return

    debug(f"Failed to load the subscription {subscription_id} directly. Attempting to use the Organizations API.")

    organization_id = project.organization_id if project is not None else None
    if organization_id:
        def via_project_org():
            organization = api.get_organization_by_id(organization_id)
            return organization.get_subscription(subscription_id) if organization else None

        yield f"via the project's organization ({organization_id})", via_project_org

    for organization in api.list_organizations_with_member(api.get_my_user_id()):
        yield (
            f"through organization: {api.organization_label(organization)}",
            lambda org=organization: org.get_subscription(subscription_id),
        )


def resolve_subscription(api, subscription_id, project: Optional[Project] = None) -> Optional[Subscription]:
    """Return the subscription, or None when no lookup path can reach it."""
    for label, lookup in _lookups(api, subscription_id, project):
        subscription = ignore_forbidden(lookup)
        if subscription:
            debug(f"Loaded the subscription {label}")
            return subscription
    return None


# ---------------------- PROPERTY WRITES ---------------------- #

class UpdateStatus(str, Enum):
    UNCHANGED = "unchanged"
    UPDATED = "updated"
    DECLINED = "declined"


@dataclass
class PropertyUpdate:
    property: str
    old_value: Any
    new_value: Any
    status: UpdateStatus

    @property
    def ok(self) -> bool:
        return self.status != UpdateStatus.DECLINED


def coerce_value(property_name: str, raw_value: Any, value_type: type) -> Any:
    """Convert a command-line string into the property's declared type."""
    if value_type is bool:
        if isinstance(raw_value, str):
            return raw_value.strip().lower() not in ("false", "0", "")
        return bool(raw_value)
    invalid = ValidationError(f"Invalid value for property {property_name}: {raw_value!r} (expected {value_type.__name__})")
    # Plain decimal integers only.
    if value_type is int and isinstance(raw_value, str) and not raw_value.strip().lstrip("-").isdigit():
        raise invalid
    try:
        return value_type(raw_value)
    except (TypeError, ValueError):
        raise invalid


def cost_warning(old_value: Any, new_value: Any) -> str:
    increases = (
        isinstance(new_value, Number)
        and isinstance(old_value, Number)
        and new_value > old_value
    )
    return f"This action may {'increase' if increases else 'change'} the cost of your subscription."


def set_property(
    subscription: Subscription,
    name: str,
    raw_value: Any,
    confirm: Callable[[str], bool],
    format_value: Callable[[Any, str], str] = lambda value, _name: str(value),
) -> PropertyUpdate:
    """
    Change a writable property after confirmation.
    Setting a property to its current value is a no-op: no prompt, no request.
    """
    value_type = WRITABLE_PROPERTIES.get(name)
    if value_type is None:
        raise NotWritableError(name)

    value = coerce_value(name, raw_value, value_type)
    current = subscription.get_property(name, required=False)
    if current == value and type(current) is type(value):
        return PropertyUpdate(name, current, value, UpdateStatus.UNCHANGED)

    question = (
        f"{cost_warning(current, value)}\n"
        f"Are you sure you want to change property '{name}' from "
        f"{format_value(current, name)} to {format_value(value, name)}?"
    )
    if not confirm(question):
        return PropertyUpdate(name, current, value, UpdateStatus.DECLINED)

    subscription.update({name: value})
    return PropertyUpdate(name, current, value, UpdateStatus.UPDATED)
