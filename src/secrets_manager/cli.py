"""Command-line interface: list, search, get and create secrets."""

import json
import logging
from dataclasses import dataclass
from importlib.metadata import version as package_version
from pathlib import Path
from typing import Any, NoReturn

import typer

from secrets_manager import console
from secrets_manager.app import pick
from secrets_manager.aws.client import SecretsClient
from secrets_manager.aws.errors import SecretsManagerError
from secrets_manager.backends import MockBackend
from secrets_manager.config import ConfigError, Settings, load_config
from secrets_manager.domain.secrets import compact, to_choices, to_display
from secrets_manager.models import Choice, Parameter, ParameterError

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="secrets-manager",
    help="List, search, read and create AWS Secrets Manager secrets",
    no_args_is_help=True,
    add_completion=False,
)

# Module-level help strings for Typer options
_PROFILE_HELP = "AWS profile from ~/.aws/credentials (default: config, then 'default')"
_REGION_HELP = "AWS region (default: config, then the profile's region)"
_NAME_FILTER_HELP = "Filter results by name prefix (case-sensitive)"
_STAGE_HELP = "Staging label of the version to read (default: config, then AWSCURRENT)"
_SECRET_NAME_HELP = "Secret name, e.g. Acme/Production/Billing/Database/Credentials"


@dataclass
class State:
    """Options shared by every command, set by the app callback."""

    mock: bool = False
    settings: Settings | None = None


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(package_version("secrets-manager"))
        raise typer.Exit()


@app.callback()
def callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable debug logging"),
    mock: bool = typer.Option(False, "--mock", help="Use in-memory demo data instead of AWS"),
    version: bool = typer.Option(  # noqa: B008
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Secrets Manager from the terminal."""
    console.setup_logging(verbose)
    ctx.obj = State(mock=mock)


def _settings(ctx: typer.Context) -> Settings:
    state: State = ctx.obj
    if state.settings is None:
        try:
            state.settings = load_config()
        except ConfigError as exc:
            _fail(exc)
    return state.settings


def _client(ctx: typer.Context, profile: str | None, region: str | None) -> SecretsClient:
    """Build the client for this invocation, after argument parsing."""
    settings = _settings(ctx)
    profile = profile or settings.profile
    region = region or settings.region
    service = MockBackend() if ctx.obj.mock else None
    logger.debug("Using profile=%s region=%s mock=%s", profile, region, ctx.obj.mock)
    return SecretsClient(profile=profile, region=region, service=service)


def _fail(exc: Exception) -> NoReturn:
    console.error(str(exc))
    raise typer.Exit(code=1)


def _emit(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, default=str))


@app.command("list")
def list_secrets(
    ctx: typer.Context,
    name: str | None = typer.Option(None, "--name", "-n", help=_NAME_FILTER_HELP),
    verbose: bool = typer.Option(  # noqa: B008
        False, "--verbose-records", "-a", help="Include every attribute, not just the name"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", envvar="AWS_PROFILE", help=_PROFILE_HELP
    ),
    region: str | None = typer.Option(None, "--region", "-r", help=_REGION_HELP),
) -> None:
    """List account secrets. Secret values are not included."""
    client = _client(ctx, profile, region)
    try:
        records = client.search_secrets("name", [name]) if name else client.list_secrets()
    except SecretsManagerError as exc:
        _fail(exc)
    _emit([to_display(r if verbose else compact(r)) for r in records])


@app.command()
def search(
    ctx: typer.Context,
    name: str | None = typer.Option(None, "--name", "-n", help=_NAME_FILTER_HELP),
    stage: str | None = typer.Option(None, "--stage", "-s", help=_STAGE_HELP),
    profile: str | None = typer.Option(
        None, "--profile", "-p", envvar="AWS_PROFILE", help=_PROFILE_HELP
    ),
    region: str | None = typer.Option(None, "--region", "-r", help=_REGION_HELP),
) -> None:
    """Choose a secret from an optionally filtered list and print its value."""
    client = _client(ctx, profile, region)
    stage = stage or _settings(ctx).stage

    def load() -> list[Choice]:
        return to_choices(compact(r) for r in client.search_secrets("name", [name]))

    try:
        selected = pick("Select a secret", load)
        if selected is None:
            return
        value = client.get_secret(selected, stage)
    except SecretsManagerError as exc:
        _fail(exc)
    _emit(value.serialize())


@app.command()
def get(
    ctx: typer.Context,
    name: str = typer.Argument(..., help=_SECRET_NAME_HELP),
    stage: str | None = typer.Option(None, "--stage", "-s", help=_STAGE_HELP),
    profile: str | None = typer.Option(
        None, "--profile", "-p", envvar="AWS_PROFILE", help=_PROFILE_HELP
    ),
    region: str | None = typer.Option(None, "--region", "-r", help=_REGION_HELP),
) -> None:
    """Print the value of one secret."""
    client = _client(ctx, profile, region)
    try:
        value = client.get_secret(name, stage or _settings(ctx).stage)
    except SecretsManagerError as exc:
        _fail(exc)
    _emit(value.serialize())


@app.command()
def create(
    ctx: typer.Context,
    name: str | None = typer.Option(None, "--name", "-n", help=_SECRET_NAME_HELP),
    description: str | None = typer.Option(
        None, "--description", "-d", help="Usage or contextual description"
    ),
    secret: Path | None = typer.Option(  # noqa: B008
        None, "--secret", "-s", help="File whose contents become the secret value"
    ),
    local: bool = typer.Option(
        False, "--local", "-l", help="Pick the secret file from the current directory"
    ),
    overwrite: bool = typer.Option(
        False, "--overwrite", "-o", help="Replace the secret if the name already exists"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", envvar="AWS_PROFILE", help=_PROFILE_HELP
    ),
    region: str | None = typer.Option(None, "--region", "-r", help=_REGION_HELP),
) -> None:
    """Create a new secret from a file."""
    name = name or typer.prompt("Name")
    try:
        parameter = Parameter.create(name)
    except ParameterError as exc:
        _fail(exc)
    if description is None:
        description = typer.prompt("Description", default="")
    contents = _read_secret(secret, local)

    client = _client(ctx, profile, region)
    try:
        result = client.create_secret(parameter, description, contents, overwrite=overwrite)
    except SecretsManagerError as exc:
        _fail(exc)
    _emit({"ARN": result.id, "Name": result.name, "Version": result.version})


def _read_secret(path: Path | None, local: bool) -> str:
    """Return the secret payload: the contents of a given, picked or prompted file."""
    if path is None and local:
        cwd = Path.cwd()
        files = sorted(p.name for p in cwd.iterdir() if p.is_file())
        selected = pick("Select a file", lambda: [Choice(value=f, label=f) for f in files])
        if selected is None:
            raise typer.Exit()
        path = cwd / selected
    elif path is None:
        entered = typer.prompt("Relative or full system path", default="", show_default=False)
        if not entered:
            raise typer.Exit()
        path = Path(entered)

    path = path.expanduser()
    if not path.is_file():
        _fail(FileNotFoundError(f"File couldn't be found for secret creation: {path}"))
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _fail(exc)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
