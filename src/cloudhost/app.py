import typer

from cloudhost.commands import environments
from cloudhost.commands import projects
from cloudhost.commands import subscription
from cloudhost.core.logger import set_verbosity
from cloudhost.core.prompts import set_interaction
from cloudhost.core.version import read_local_version

app = typer.Typer(help="Cloud hosting platform CLI", no_args_is_help=True)

app.add_typer(projects.app, name="projects", help="List projects.")
app.add_typer(environments.app, name="environments", help="Delete environments and their Git branches.")
app.add_typer(subscription.app, name="subscription", help="Read or modify subscription properties.")


def _print_version(value: bool):
    if value:
        typer.echo(f"cloudhost {read_local_version()}")
        raise typer.Exit()


# Global options
@app.callback()
def main(
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Silence non-error output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show verbose logs (API requests, lookup steps, etc.)."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Answer 'yes' to all prompts; disables interaction."),
    no_interaction: bool = typer.Option(False, "--no-interaction", help="Do not ask any interactive questions; accept defaults."),
    version: bool = typer.Option(False, "--version", callback=_print_version, is_eager=True, help="Show the version and exit."),
):
    set_verbosity(quiet=quiet, verbose=verbose)
    set_interaction(assume_yes=yes, interactive=not no_interaction)


if __name__ == "__main__":
    app()
