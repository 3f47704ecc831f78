"""
Environments Command Module
---------------------------
Deletes environments: an active environment is deactivated (it becomes
"inactive" and exists only as a Git branch, with no services, databases nor
files); the Git branch of an inactive environment can then be deleted too.
"""

from typing import Dict, List, Optional

import typer

from cloudhost.clients.api import get_api
from cloudhost.core import prompts
from cloudhost.core.deletion import EnvironmentDeleter
from cloudhost.core.filters import filter_environments
from cloudhost.core.logger import log
from cloudhost.core.notifier import error, info, summary

app = typer.Typer(help="Manage project environments.")


def select_environments(
    api,
    project,
    environments: Dict,
    ids: List[str],
    inactive: bool,
    merged: bool,
    exclude: List[str],
) -> Dict:
    """Build the candidate set: --inactive and --merged sets, or the named environments, minus --exclude."""
    selected = {}
    if inactive:
        found = filter_environments(environments, {"inactive": True})
        if not found:
            info("No inactive environments found.")
        selected.update(found)

    if merged:
        info("Finding environments merged with their parent")
        found = filter_environments(environments, {"merged": True})
        if not found:
            info("No merged environments found.")
        selected.update(found)

    if not inactive and not merged and ids:
        if any(env_id not in environments for env_id in ids):
            # Refresh the list once in case it is stale.
            environments = api.list_environments(project, refresh=True)
        for env_id in ids:
            if env_id not in environments:
                error(f"Environment not found: {env_id}")
            else:
                selected[env_id] = environments[env_id]

    return filter_environments(selected, {"exclude": exclude})


# ---------------------- DELETE COMMAND ---------------------- #
@app.command("delete")
def delete_environments(
    environment_ids: Optional[List[str]] = typer.Argument(None, help="The environment(s) to delete."),
    project_id: str = typer.Option(..., "--project", "-p", envvar="CLOUDHOST_PROJECT", help="The project ID."),
    environment: Optional[str] = typer.Option(None, "--environment", "-e", help="The environment ID."),
    delete_branch: bool = typer.Option(False, "--delete-branch", help="Delete the remote Git branch(es) too."),
    no_delete_branch: bool = typer.Option(False, "--no-delete-branch", help="Do not delete the remote Git branch(es)."),
    inactive: bool = typer.Option(False, "--inactive", help="Delete all inactive environments."),
    merged: bool = typer.Option(False, "--merged", help="Delete all merged environments."),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", help="Environments not to delete."),
    wait: bool = typer.Option(True, "--wait/--no-wait", help="Wait for the operation(s) to complete."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Maximum seconds to wait for activities."),
):
    """
    Delete one or more environments, and optionally their Git branches.

    Examples:
        cloudhost environments delete -p abc123 test example-1
        cloudhost environments delete -p abc123 --inactive
        cloudhost environments delete -p abc123 --merged --exclude main
    """
    if inactive and no_delete_branch:
        error("The option --no-delete-branch cannot be combined with --inactive.", exit_on_error=True)
    if delete_branch and no_delete_branch:
        error("The options --delete-branch and --no-delete-branch cannot be combined.", exit_on_error=True)

    api = get_api()
    settings = api.settings
    try:
        project = api.get_project(project_id)
        if not project:
            error(f"Project not found: {project_id}", exit_on_error=True)

        environments = api.list_environments(project)
        ids = [environment] if environment else list(environment_ids or [])
        candidates = select_environments(api, project, environments, ids, inactive, merged, exclude or [])

        if not candidates:
            error("No environment(s) to delete.")
            info("Specify environment IDs as arguments, or use --environment (-e), --inactive or --merged.")
            raise typer.Exit(code=1)

        log(f"Preparing to delete {len(candidates)} environment(s) in project {project.id}...")
        deleter = EnvironmentDeleter(
            api,
            project,
            confirm=prompts.confirm,
            interactive=prompts.is_interactive(),
            wait=wait,
            delete_branch=True if delete_branch else (False if no_delete_branch else None),
            timeout=timeout if timeout is not None else settings.activity_timeout,
            poll_interval=settings.poll_interval,
        )
        # Children are checked against the full, current environment list.
        result = deleter.run(candidates, api.list_environments(project))
    except typer.Exit:
        raise
    except Exception as e:
        error(f"Error deleting environments: {e}")
        raise typer.Exit(code=1)

    errors = [o for o in result.outcomes if o.is_error]
    summary(
        f"Environments: {result.deactivated} deactivated, {result.deleted} branch(es) deleted.",
        error_count=len(errors) + (1 if result.activity_failed else 0),
    )
    raise typer.Exit(code=result.exit_code)
