"""
Projects Command Module
-----------------------
Lists the user's projects, with filters, sorting and output formats.

Columns shown:
  ID | Title | URL | Host
"""

from typing import Optional

import typer
from rich.markup import escape

from cloudhost.clients.api import get_api
from cloudhost.core.errors import CloudhostError, ValidationError
from cloudhost.core.filters import filter_projects, sort_resources
from cloudhost.core.logger import log
from cloudhost.core.notifier import error, info
from cloudhost.core.output_manager import FORMATS, export_data, is_machine_readable
from cloudhost.schemas.projects_schema import schema

app = typer.Typer(help="List projects on the hosting platform.")


def autocomplete_sort(ctx: typer.Context, incomplete: str):
    """Autocomplete for --sort."""
    return [f for f in schema.all_sortable_fields() if f.startswith(incomplete)]


def build_filters(api, host: Optional[str], title: Optional[str], my: bool, org: Optional[str]) -> dict:
    """Collect the filters in use, resolving --my and --org against the API."""
    filters = {}
    if host:
        filters["host"] = host
    if title is not None:
        filters["title"] = title
    if my:
        filters["my"] = api.get_my_user_id()
    if org is not None:
        if not api.organizations_enabled:
            raise ValidationError("The --org option requires the organizations API (set CLOUDHOST_ORGANIZATIONS=1).")
        organization = api.get_organization_by_name(org)
        if not organization:
            raise ValidationError(f"Organization not found: {org}")
        filters["org"] = organization
    return filters


def project_row(project, decorate: bool) -> dict:
    title = project.title or "[Untitled Project]"
    if decorate:
        title = escape(title)
        if project.is_suspended():
            title = f"{title} [yellow](suspended)[/yellow]"
    return {
        "id": project.id,
        "title": title,
        "url": project.console_url,
        "host": project.host or "",
    }


# ---------------------- LIST COMMAND ---------------------- #
@app.command("list")
def list_projects(
    pipe: bool = typer.Option(False, "--pipe", help="Output a simple list of project IDs."),
    host: Optional[str] = typer.Option(None, "--host", help="Filter by region hostname (exact match)."),
    title: Optional[str] = typer.Option(None, "--title", help="Filter by title (case-insensitive search)."),
    my: bool = typer.Option(False, "--my", help="Display only the projects you own."),
    org: Optional[str] = typer.Option(None, "--org", "-o", help="Filter by organization name."),
    refresh: int = typer.Option(1, "--refresh", help="Whether to refresh the list (1 or 0)."),
    sort: str = typer.Option("title", "--sort", help="A property to sort by.", autocompletion=autocomplete_sort),
    reverse: bool = typer.Option(False, "--reverse", help="Sort in reverse (descending) order."),
    fmt: str = typer.Option("table", "--format", "-f", help=f"Output format: {', '.join(FORMATS)}."),
    output: Optional[str] = typer.Option(None, "--output", help="Output file (for JSON, CSV or TSV export)."),
):
    """Get a list of all active projects."""
    if fmt not in FORMATS:
        error(f"Invalid format: {fmt}. Use one of: {', '.join(FORMATS)}", exit_on_error=True)

    api = get_api()
    try:
        log("Loading projects...", verbose_only=True)
        projects = api.list_projects(True if refresh else None)
        filters = build_filters(api, host, title, my, org)
    except typer.Exit:
        raise
    except CloudhostError as e:
        error(str(e), exit_on_error=True)
    except Exception as e:
        error(f"Error listing projects: {e}")
        raise typer.Exit(code=1)

    projects = filter_projects(projects, filters)
    projects = sort_resources(projects, sort, reverse=reverse)

    if pipe:
        for project_id in projects:
            typer.echo(project_id)
        return

    machine_readable = is_machine_readable(fmt)
    rows = [project_row(p, decorate=not machine_readable) for p in projects.values()]

    if machine_readable:
        export_data(rows, schema=schema, fmt=fmt, output=output)
        return

    if not projects:
        if filters:
            info(f"No projects found (filters in use: {', '.join('--' + name for name in filters)}).")
        else:
            info("You do not have any projects yet.")
        return

    if not filters:
        info("Your projects are:")

    export_data(rows, schema=schema, fmt=fmt, output=output, title="Projects")
    info("View a project's subscription by running: cloudhost subscription info -p [id]")
    info("Delete environments by running: cloudhost environments delete -p [id] [environment]")
