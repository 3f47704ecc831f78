"""
Subscription Command Module
---------------------------
Reads or modifies subscription properties.

Writable properties: plan, environments, storage (in MiB).
"""

from typing import Optional

import typer

from cloudhost.clients.api import get_api
from cloudhost.core import prompts
from cloudhost.core.errors import CloudhostError, SubscriptionNotFoundError
from cloudhost.core.notifier import error, info, success
from cloudhost.core.output_manager import FORMATS, render_properties
from cloudhost.core.property_formatter import format_value, get_nested
from cloudhost.core.resolution import UpdateStatus, resolve_subscription, set_property

app = typer.Typer(help="Read or modify subscription properties.")


def load_subscription(api, subscription_id: Optional[str], project_id: Optional[str]):
    """Resolve the subscription from --id, or from the project's subscription."""
    project = None
    if not subscription_id:
        if not project_id:
            raise CloudhostError("Specify a subscription with --id (-s) or a project with --project (-p).")
        project = api.get_project(project_id)
        if not project:
            raise CloudhostError(f"Project not found: {project_id}")
        subscription_id = project.subscription_id
        if not subscription_id:
            raise SubscriptionNotFoundError(f"(none linked to project {project_id})")

    subscription = resolve_subscription(api, subscription_id, project)
    if not subscription:
        raise SubscriptionNotFoundError(subscription_id)
    return subscription


# ---------------------- INFO COMMAND ---------------------- #
@app.command("info")
def subscription_info(
    property_name: Optional[str] = typer.Argument(None, metavar="PROPERTY", help="The name of the property."),
    value: Optional[str] = typer.Argument(None, help="Set a new value for the property."),
    subscription_id: Optional[str] = typer.Option(None, "--id", "-s", help="The subscription ID."),
    project_id: Optional[str] = typer.Option(None, "--project", "-p", envvar="CLOUDHOST_PROJECT", help="The project ID."),
    fmt: str = typer.Option("table", "--format", "-f", help=f"Output format: {', '.join(FORMATS)}."),
):
    """
    Read or modify subscription properties.

    Examples:
        cloudhost subscription info -p abc123            # all properties
        cloudhost subscription info -p abc123 status     # one property
        cloudhost subscription info -s 1234 storage 10240
    """
    if fmt not in FORMATS:
        error(f"Invalid format: {fmt}. Use one of: {', '.join(FORMATS)}", exit_on_error=True)

    api = get_api()
    try:
        subscription = load_subscription(api, subscription_id, project_id)

        if not property_name:
            properties = subscription.properties()
            # JSON keeps native types; table and delimited rows are text.
            if fmt != "json":
                properties = {k: format_value(v, k) for k, v in properties.items()}
            render_properties(properties, fmt=fmt)
            return

        if value is not None:
            update = set_property(subscription, property_name, value, prompts.confirm, format_value)
            if update.status == UpdateStatus.UNCHANGED:
                info(f"Property {property_name} already set as: {format_value(update.new_value, property_name)}")
            elif not update.ok:
                raise typer.Exit(code=1)
            else:
                success(f"Property {property_name} set to: {format_value(update.new_value, property_name)}")
            return

        if property_name == "url":
            typer.echo(subscription.uri)
        else:
            try:
                current = get_nested(subscription.properties(), property_name)
            except KeyError:
                raise CloudhostError(f"Property not found: {property_name}")
            typer.echo(format_value(current, property_name))

    except typer.Exit:
        raise
    except CloudhostError as e:
        error(str(e), exit_on_error=True)
    except Exception as e:
        error(f"Error reading subscription: {e}")
        raise typer.Exit(code=1)
