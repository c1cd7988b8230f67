"""Typer CLI definition for heypanel."""

import asyncio
import locale
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from pathlib import Path
from typing import Any

import typer

from .activity import ActivityLog
from .api.errors import (
    AuthenticationMissing,
    CredentialRejected,
    MalformedResponse,
    RemoteApiError,
    TransportError,
)
from .api.models import ENGINE_VARIANTS, GenerationJob
from .config import ConfigError
from .credentials import CredentialStore
from .library.models import DiscoveryOptions
from .services import PanelServices, open_services

logger = logging.getLogger(__name__)

app = typer.Typer(help="Control panel for avatar-video generation")


def _report(debug: bool, label: str, error: Exception, message: str) -> None:
    if debug:
        typer.echo(f"Debug - {label}: {error!r}", err=True)
    else:
        typer.echo(f"Error: {message}", err=True)


def print_activity(activity: ActivityLog) -> None:
    """Print the transparency log, oldest entry first."""
    entries = activity.snapshot()
    typer.echo("=== Activity Log ===", err=True)
    if not entries:
        typer.echo("(no activity)", err=True)
    for entry in entries:
        typer.echo(entry.describe(), err=True)


def resolve_script(script: str | None, file: Path | None = None) -> str:
    """Return the script to speak, from the option or the file.

    Args:
        script: Script text from the CLI option
        file: File to read the script from when no text was given

    Returns:
        The stripped script

    Raises:
        ValueError: If neither source yields any text
    """
    text = script
    if text is None and file is not None:
        text = file.read_text()
    if not text or not text.strip():
        raise ValueError("No script provided. Use --script or --file.")
    return text.strip()


def run_operation(
    ctx: typer.Context, operation: Callable[[PanelServices], Awaitable[Any]]
) -> Any:
    """Run an async operation against fresh services and map errors to exit codes."""
    debug = ctx.obj.get("debug", False) if ctx.obj else False
    show_log = ctx.obj.get("show_log", False) if ctx.obj else False

    async def runner() -> Any:
        async with open_services() as services:
            try:
                return await operation(services)
            finally:
                if show_log:
                    print_activity(services.activity)

    try:
        return asyncio.run(runner())
    except ConfigError as e:
        _report(debug, "Config error", e, f"Invalid configuration: {e}")
    except AuthenticationMissing as e:
        _report(debug, "Authentication missing", e, f"{e} Run `heypanel unlock KEY`.")
    except CredentialRejected as e:
        _report(
            debug,
            "Credential rejected",
            e,
            "API key was rejected and the panel has been locked. Run `heypanel unlock KEY`.",
        )
    except RemoteApiError as e:
        _report(debug, "Remote API error", e, f"API returned {e.status}: {e}")
    except TransportError as e:
        _report(debug, "Transport error", e, f"Network failure: {e}")
    except MalformedResponse as e:
        _report(debug, "Malformed response", e, f"Unexpected response: {e}")
    except ValueError as e:
        _report(debug, "Invalid input", e, str(e))
    except OSError as e:
        _report(debug, "File system error", e, f"File error: {e}")
    raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show verbose errors and logging"),
    show_log: bool = typer.Option(
        False, "--show-log", help="Print the activity log after the command"
    ),
) -> None:
    """Control panel for avatar-video generation."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.debug(f"Keeping default collation: {e}")
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    ctx.obj = {"debug": debug, "show_log": show_log}


@app.command()
def unlock(
    key: str = typer.Argument(..., help="API key"),
    remember: bool = typer.Option(
        False, "--remember", help="Remember the key on this device"
    ),
) -> None:
    """Store the API key for subsequent commands."""
    if not key.strip():
        typer.echo("Error: Credential cannot be empty", err=True)
        raise typer.Exit(1)
    if not remember:
        # A session-only key would end with this process; any remembered key stays
        typer.echo(
            "Error: Nothing was stored. Use --remember to keep the key on this "
            "device, or set HEYPANEL_API_KEY for a session-only key.",
            err=True,
        )
        raise typer.Exit(1)

    CredentialStore().set(key, persist=True)
    typer.echo("Panel unlocked. Key remembered on this device.")


@app.command()
def lock() -> None:
    """Forget the stored API key."""
    CredentialStore().clear()
    typer.echo("Panel locked.")


@app.command()
def voices(ctx: typer.Context) -> None:
    """List available voices, custom voices first."""

    async def operation(services: PanelServices) -> None:
        for voice in await services.client.list_voices():
            language = f" ({voice.language})" if voice.language else ""
            typer.echo(f"[{voice.type}] {voice.name}{language}: {voice.voice_id}")

    run_operation(ctx, operation)


@app.command()
def library(
    ctx: typer.Context,
    group_id: str | None = typer.Argument(None, help="Avatar group to surface first"),
    refresh: bool = typer.Option(False, "--refresh", help="Ignore cached results"),
    no_groups: bool = typer.Option(
        False, "--no-groups", help="Skip enumerating every avatar group"
    ),
    keyword: list[str] = typer.Option(
        [], "-k", "--keyword", help="Name fragment that marks a priority asset"
    ),
    target: str | None = typer.Option(None, "--target", help="Asset id to surface first"),
) -> None:
    """Browse the merged media library."""

    async def operation(services: PanelServices) -> None:
        defaults = services.library.default_options
        options = DiscoveryOptions(
            include_groups=not no_groups,
            force_refresh=refresh,
            priority_keywords=tuple(keyword) or defaults.priority_keywords,
            target_asset_id=target,
            max_results=defaults.max_results,
        )
        result = await services.library.discover(group_id, options)
        for asset in result.assets:
            marker = "*" if asset.is_priority_target else " "
            stock = " [stock]" if asset.is_stock else ""
            typer.echo(f"{marker} {asset.display_name}: {asset.asset_id}{stock}")
        typer.echo(result.status, err=True)
        if result.degraded:
            raise typer.Exit(1)

    run_operation(ctx, operation)


@app.command()
def upload(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Image file to upload"),
    mime_type: str | None = typer.Option(
        None, "--type", help="Declared MIME type (overridden by file contents)"
    ),
) -> None:
    """Upload an image to use as a visual asset."""

    async def operation(services: PanelServices) -> None:
        data = file.read_bytes()
        result = await services.client.upload_asset(data, mime_type)
        typer.echo(f"Uploaded. Image key: {result.reference}")

    run_operation(ctx, operation)


@app.command()
def generate(
    ctx: typer.Context,
    image: str = typer.Option(..., "--image", help="Image key or talking photo id"),
    script: str | None = typer.Option(None, "--script", help="Text to speak"),
    file: Path | None = typer.Option(None, "-f", "--file", help="Read script from file"),
    voice: str | None = typer.Option(None, "-v", "--voice", help="Voice ID (from config if omitted)"),
    speed: float | None = typer.Option(None, "--speed", help="Speaking speed multiplier"),
    engine: str | None = typer.Option(
        None, "--engine", help=f"Engine variant: {' or '.join(ENGINE_VARIANTS)}"
    ),
    title: str | None = typer.Option(None, "--title", help="Video title"),
    motion_prompt: str | None = typer.Option(
        None, "--motion-prompt", help="Motion prompt for the simplified engine"
    ),
) -> None:
    """Submit a video generation job."""

    async def operation(services: PanelServices) -> None:
        text = resolve_script(script, file)
        defaults = services.config.generation
        job = GenerationJob(
            title=title or f"heypanel - {datetime.now():%H:%M:%S}",
            script=text,
            voice_id=voice or defaults.voice,
            visual_asset_ref=image,
            speed=speed if speed is not None else defaults.speed,
            engine_variant=engine or defaults.engine,
            orientation=defaults.orientation,
            motion_prompt=motion_prompt if motion_prompt is not None else defaults.motion_prompt,
        )
        submitted = await services.client.generate_video(job)
        typer.echo(f"Render started. Video ID: {submitted.video_id}")

    run_operation(ctx, operation)


@app.command()
def status(
    ctx: typer.Context,
    video_id: str = typer.Argument(..., help="Video ID returned by generate"),
    wait: bool = typer.Option(False, "--wait", help="Poll until the video finishes"),
    interval: float = typer.Option(10.0, "--interval", help="Seconds between polls"),
) -> None:
    """Check the status of a submitted video."""

    async def operation(services: PanelServices) -> None:
        job_status = await services.client.poll_status(video_id)
        while wait and not job_status.finished:
            typer.echo(f"{job_status.status}...", err=True)
            await asyncio.sleep(interval)
            job_status = await services.client.poll_status(video_id)

        typer.echo(f"Status: {job_status.status}")
        if job_status.video_url:
            typer.echo(f"Video: {job_status.video_url}")
        if job_status.error:
            typer.echo(f"Error: {job_status.error}", err=True)
            raise typer.Exit(1)

    run_operation(ctx, operation)
