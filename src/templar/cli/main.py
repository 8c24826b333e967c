"""
Templar CLI Main Entry Point

Command-line interface for editing a workspace and running its requests.
"""

import asyncio
import sys
from pathlib import Path
from typing import NoReturn, Optional

import click

from .. import __version__
from ..core.config import get_config
from ..core.exceptions import (
    ConfigurationError,
    NotFoundError,
    TemplarException,
    format_error,
)
from ..core.logging import setup_logging
from ..core.models import Environment
from ..runner.session import RunSession
from ..runner.transcript import RequestTranscript
from ..workspace.store import WorkspaceStore
from ..workspace.workspace import Workspace


def _fail(message: str) -> NoReturn:
    click.echo(f"✗ {message}", err=True)
    sys.exit(1)


def _load(store: WorkspaceStore) -> Workspace:
    try:
        return store.load_or_create()
    except TemplarException as e:
        _fail(str(e))


def _save(store: WorkspaceStore, workspace: Workspace) -> None:
    try:
        store.save(workspace)
    except TemplarException as e:
        _fail(str(e))


def _environment(workspace: Workspace, name: Optional[str]) -> Environment:
    if name is None:
        return workspace.ensure_default_environment()
    env = workspace.find_environment(name)
    if env is None:
        _fail(f"Environment not found: {name}")
    return env


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--workspace",
    "-w",
    "workspace_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Workspace file (defaults to the configured path)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging level",
)
@click.pass_context
def cli(ctx: click.Context, workspace_path: Optional[Path], log_level: str):
    """
    Templar - HTTP request templates bound to environments.

    Requests are templates such as "GET {{host}}/ping"; environments hold the
    variables they are compiled with.
    """
    try:
        setup_logging(log_level=log_level.upper())
        ctx.obj = WorkspaceStore(workspace_path)
    except ConfigurationError as e:
        _fail(str(e))


@cli.command("init")
@click.argument("name")
@click.pass_obj
def init_workspace(store: WorkspaceStore, name: str):
    """
    Create a new workspace with a default "Dev" environment.

    Example:
        templar -w api.json init "My API"
    """
    if store.exists():
        _fail(f"Workspace already exists: {store.path}")

    workspace = Workspace(name=name)
    workspace.ensure_default_environment()
    _save(store, workspace)

    click.echo(f"✓ Created workspace: {name}")
    click.echo(f"  Path: {store.path}")


@cli.group()
def request():
    """Request template commands."""
    pass


@request.command("create")
@click.option("--name", "-n", default="Untitled", help="Request name")
@click.pass_obj
def create_request(store: WorkspaceStore, name: str):
    """Create an empty request."""
    workspace = _load(store)
    created = workspace.create_request(name)
    _save(store, workspace)
    click.echo(f"✓ Created request {created.id}: {created.name}")


@request.command("list")
@click.pass_obj
def list_requests(store: WorkspaceStore):
    """List requests in display order."""
    workspace = _load(store)
    requests = workspace.requests

    if not requests:
        click.echo("No requests found.")
        return

    for item in requests:
        click.echo(f"  {item.id:>4}  {item.name}")


@request.command("show")
@click.argument("request_id", type=int)
@click.pass_obj
def show_request(store: WorkspaceStore, request_id: int):
    """Print a request's template."""
    workspace = _load(store)
    try:
        item = workspace.request(request_id)
    except NotFoundError:
        _fail(f"Request not found: {request_id}")
    click.echo(item.template)


@request.command("rename")
@click.argument("request_id", type=int)
@click.argument("name")
@click.pass_obj
def rename_request(store: WorkspaceStore, request_id: int, name: str):
    """Rename a request."""
    workspace = _load(store)
    if not workspace.set_request_name(request_id, name):
        _fail(f"Request not found: {request_id}")
    _save(store, workspace)
    click.echo(f"✓ Renamed request {request_id}: {name}")


@request.command("edit")
@click.argument("request_id", type=int)
@click.option("--template", "-t", "template", default=None, help="Template text")
@click.option(
    "--file",
    "-f",
    "template_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read the template from a file",
)
@click.pass_obj
def edit_request(
    store: WorkspaceStore,
    request_id: int,
    template: Optional[str],
    template_file: Optional[Path],
):
    """
    Replace a request's template.

    Example:
        templar request edit 1 -t "GET {{host}}/ping"
    """
    if (template is None) == (template_file is None):
        raise click.UsageError("Pass exactly one of --template or --file")
    if template_file is not None:
        template = template_file.read_text(encoding="utf-8")

    workspace = _load(store)
    if not workspace.set_request_template(request_id, template):
        _fail(f"Request not found: {request_id}")
    _save(store, workspace)
    click.echo(f"✓ Saved template of request {request_id}")


@request.command("delete")
@click.argument("request_id", type=int)
@click.pass_obj
def delete_request(store: WorkspaceStore, request_id: int):
    """Delete a request."""
    workspace = _load(store)
    if not workspace.delete_request(request_id):
        _fail(f"Request not found: {request_id}")
    _save(store, workspace)
    click.echo(f"✓ Deleted request {request_id}")


@cli.group()
def env():
    """Environment commands."""
    pass


@env.command("create")
@click.argument("name")
@click.pass_obj
def create_environment(store: WorkspaceStore, name: str):
    """Create an empty environment."""
    workspace = _load(store)
    if workspace.find_environment(name) is not None:
        _fail(f"Environment already exists: {name}")
    created = workspace.create_environment(name)
    _save(store, workspace)
    click.echo(f"✓ Created environment {created.id}: {created.name}")


@env.command("list")
@click.pass_obj
def list_environments(store: WorkspaceStore):
    """List environments."""
    workspace = _load(store)
    environments = workspace.environments

    if not environments:
        click.echo("No environments found.")
        return

    for item in environments:
        click.echo(f"  {item.id:>4}  {item.name} ({len(item.variables)} variables)")


@env.command("show")
@click.argument("name")
@click.pass_obj
def show_environment(store: WorkspaceStore, name: str):
    """Print an environment's variables."""
    environment = _environment(_load(store), name)
    for key in sorted(environment.variables):
        click.echo(f"{key}={environment.variables[key]}")


@env.command("set")
@click.argument("name")
@click.argument("key")
@click.argument("value")
@click.pass_obj
def set_variable(store: WorkspaceStore, name: str, key: str, value: str):
    """
    Set a variable.

    Example:
        templar env set Dev host http://localhost:8080
    """
    workspace = _load(store)
    environment = _environment(workspace, name)
    environment.set(key, value)
    workspace.set_environ(environment.id, environment)
    _save(store, workspace)
    click.echo(f"✓ {name}: {key}={value}")


@env.command("unset")
@click.argument("name")
@click.argument("key")
@click.pass_obj
def unset_variable(store: WorkspaceStore, name: str, key: str):
    """Remove a variable."""
    workspace = _load(store)
    environment = _environment(workspace, name)
    if not environment.remove(key):
        _fail(f"Variable not defined in {name}: {key}")
    workspace.set_environ(environment.id, environment)
    _save(store, workspace)
    click.echo(f"✓ {name}: removed {key}")


@env.command("delete")
@click.argument("name")
@click.pass_obj
def delete_environment(store: WorkspaceStore, name: str):
    """Delete an environment."""
    workspace = _load(store)
    environment = _environment(workspace, name)
    workspace.delete_environment(environment.id)
    _save(store, workspace)
    click.echo(f"✓ Deleted environment {name}")


@cli.command("compile")
@click.argument("request_id", type=int)
@click.option("--env", "-e", "env_name", default=None, help="Environment name")
@click.pass_obj
def compile_request(store: WorkspaceStore, request_id: int, env_name: Optional[str]):
    """Print a request compiled against an environment."""
    workspace = _load(store)
    environment = _environment(workspace, env_name)
    session = RunSession(workspace)
    try:
        click.echo(session.compile_request(request_id, environment))
    except TemplarException as e:
        click.echo(format_error(e), err=True)
        sys.exit(1)


@cli.command("run")
@click.argument("request_id", type=int)
@click.option("--env", "-e", "env_name", default=None, help="Environment name")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Timeout in seconds",
)
@click.option(
    "--transcript/--no-transcript",
    default=False,
    help="Print the compiled request along with the response",
)
@click.pass_obj
def run_request(
    store: WorkspaceStore,
    request_id: int,
    env_name: Optional[str],
    timeout: Optional[float],
    transcript: bool,
):
    """
    Compile and execute a request, then print the raw response.

    Example:
        templar run 1 --env Dev --timeout 5
    """
    workspace = _load(store)
    environment = _environment(workspace, env_name)

    transcript_path = get_config().storage.transcript_path
    log = RequestTranscript(Path(transcript_path) if transcript_path else None)

    async def execute() -> str:
        async with RunSession(workspace, transcript=log) as session:
            return await session.run_request(request_id, environment, timeout=timeout)

    try:
        output = asyncio.run(execute())
    except TemplarException as e:
        _fail(str(e))

    click.echo(log.text if transcript else output)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
