"""Typer CLI entrypoints for eva-terminal."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import List, Optional

import click
import typer
from typer.core import TyperGroup

from evaterm.config import (
    ProjectConfigError,
    Settings,
    initialize_project_config,
    load_settings,
)
from evaterm.kernel.runtime import Runtime
from evaterm.repl import run_once, start_repl
from evaterm.ui.render import render_menu, render_notice, render_status_text


class EvaGroup(TyperGroup):
    """Treat a leading slash command as an implicit `run` command."""

    def resolve_command(self, ctx: click.Context, args: List[str]):
        if args and args[0].startswith("/"):
            run_command = self.get_command(ctx, "run")
            if run_command is not None:
                return "run", run_command, args
        return super().resolve_command(ctx, args)


app = typer.Typer(
    invoke_without_command=True,
    no_args_is_help=False,
    help="EVA terminal: typewriter command console for the portfolio API",
)
app.info.cls = EvaGroup


def _settings_from(ctx: typer.Context) -> Settings:
    parent_obj = ctx.obj or {}
    try:
        return load_settings(api_base_url=parent_obj.get("api_base_url"))
    except ProjectConfigError as exc:
        typer.echo(render_notice("error", str(exc)), err=True)
        raise typer.Exit(code=2)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    api_base_url: Optional[str] = typer.Option(
        None,
        "--api",
        help="API base URL (default from config or EVATERM_API_BASE_URL)",
    ),
) -> None:
    ctx.obj = ctx.obj or {}
    ctx.obj["api_base_url"] = api_base_url

    if ctx.invoked_subcommand is not None:
        return

    exit_code = start_repl(settings=_settings_from(ctx))
    raise typer.Exit(code=exit_code)


@app.command("init")
def init_cmd(
    force: bool = typer.Option(
        False,
        "--force",
        help="Recreate .evaterm_config (deletes the existing directory first)",
    ),
) -> None:
    try:
        config_root = initialize_project_config(force=force)
    except ProjectConfigError as exc:
        typer.echo(render_notice("error", str(exc)), err=True)
        raise typer.Exit(code=2)

    typer.echo(render_notice("success", "Initialized project config at: {0}".format(config_root)))


@app.command("run")
def run_cmd(
    ctx: typer.Context,
    commands: List[str] = typer.Argument(..., help="Terminal commands, e.g. /start /1 /help"),
    boot: bool = typer.Option(False, "--boot", help="Print the boot banner first"),
) -> None:
    """Run commands without animation and print the transcript."""
    cleaned = [entry for entry in commands if entry.strip()]
    if not cleaned:
        typer.echo(render_notice("error", "At least one command is required."), err=True)
        raise typer.Exit(code=2)

    exit_code = run_once(cleaned, settings=_settings_from(ctx), stream=sys.stdout, boot=boot)
    raise typer.Exit(code=exit_code)


@app.command("chat")
def chat_cmd(ctx: typer.Context) -> None:
    """Interactive terminal (Textual UI on a TTY, stdin commands otherwise)."""
    exit_code = start_repl(settings=_settings_from(ctx))
    raise typer.Exit(code=exit_code)


@app.command("menu")
def menu_cmd() -> None:
    """Print the numbered command matrix."""
    render_menu(sys.stdout)


@app.command("doctor")
def doctor_cmd(
    ctx: typer.Context,
    output_format: str = typer.Option("json", "--format", help="Output format: json|text"),
) -> None:
    normalized_format = output_format.strip().lower()
    if normalized_format not in {"json", "text"}:
        typer.echo(
            render_notice("error", "Unsupported format: {0}".format(output_format)),
            err=True,
        )
        raise typer.Exit(code=2)

    settings = _settings_from(ctx)

    async def _collect() -> dict:
        runtime = Runtime(settings)
        try:
            return runtime.status()
        finally:
            await runtime.aclose()

    report = asyncio.run(_collect())
    if normalized_format == "json":
        typer.echo(json.dumps(report, ensure_ascii=True, indent=2))
        return
    typer.echo(render_status_text(report))


if __name__ == "__main__":
    app()
