"""CLI entrypoint for draftwise."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import typer

from draftwise.gateway.client import create_gateway
from draftwise.gateway.filesystem import FileDraftGateway
from draftwise.gateway.types import GatewayError
from draftwise.logs import configure_logging
from draftwise.settings import Settings, load_dotenv
from draftwise.ui.console import get_console
from draftwise.ui.render import (
    render_banner,
    render_drafts,
    render_error,
    render_info,
    render_steps_overview,
    render_success,
    render_summary_table,
    render_validation_panel,
)
from draftwise.wizard.config import ConfigError, load_and_validate_wizard_config, load_wizard_config

app = typer.Typer(add_completion=False, help="Multi-step wizards with drafts and auto-save.")
config_app = typer.Typer(add_completion=False, help="Wizard config helpers and validation.")
drafts_app = typer.Typer(add_completion=False, help="Inspect and manage saved drafts.")
app.add_typer(config_app, name="config")
app.add_typer(drafts_app, name="drafts")


def _settings(ctx: typer.Context) -> Settings:
    root_ctx = ctx.find_root()
    if not isinstance(root_ctx.obj, Settings):
        root_ctx.obj = Settings.from_env()
    return root_ctx.obj


def _require_user(ctx: typer.Context, user: str | None) -> str:
    resolved = user or _settings(ctx).user_id
    if not resolved:
        render_error("A user id is required: pass --user or set DRAFTWISE_USER_ID.")
        raise typer.Exit(code=2)
    return resolved


def _gateway(settings: Settings) -> Any:
    try:
        return create_gateway(settings.gateway, **settings.gateway_kwargs())
    except ValueError as exc:
        render_error(str(exc))
        raise typer.Exit(code=2) from exc


async def _call(gateway: Any, method: str, *args: Any) -> Any:
    try:
        return await getattr(gateway, method)(*args)
    finally:
        await gateway.aclose()


@app.callback(invoke_without_command=True)
def root(ctx: typer.Context) -> None:
    """draftwise command line."""
    load_dotenv()
    settings = Settings.from_env()
    ctx.obj = settings
    configure_logging(settings.log_level)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


@config_app.command("validate")
def config_validate(path: str = typer.Option("wizard.json", "--path", "-p")) -> None:
    """Validate a wizard config file."""
    result = load_and_validate_wizard_config(Path(path))

    errors = [f"{issue.path}: {issue.message}" for issue in result.errors]
    warnings = [f"{issue.path}: {issue.message}" for issue in result.warnings]

    if errors:
        render_validation_panel("INVALID", errors, style="error")
        raise typer.Exit(code=1)

    if warnings:
        render_validation_panel("VALID (with warnings)", warnings, style="warning")
    else:
        render_validation_panel("VALID", ["No issues found."], style="success")


@config_app.command("show")
def config_show(path: str = typer.Option("wizard.json", "--path", "-p")) -> None:
    """Print the steps and persistence policy of a wizard config."""
    try:
        config = load_wizard_config(Path(path))
    except ConfigError as exc:
        render_error(str(exc))
        raise typer.Exit(code=1) from exc
    render_banner(config.title or config.id, f"{config.type} wizard · {len(config.steps)} steps")
    render_steps_overview([(step.step_id, step.title, step.optional) for step in config.steps])
    policy = config.persistence
    render_summary_table(
        {
            "Auto-save": "on" if policy.auto_save else "off",
            "Interval": f"{policy.auto_save_interval_ms} ms",
            "Silent failures": policy.max_silent_failures,
            "Final rule": "yes" if config.validation.final_rule is not None else "no",
        },
        title="Persistence",
    )


@drafts_app.command("list")
def drafts_list(
    ctx: typer.Context,
    user: str | None = typer.Option(None, "--user", "-u"),
    wizard_type: str | None = typer.Option(None, "--type", "-t"),
) -> None:
    """List drafts owned by a user."""
    settings = _settings(ctx)
    user_id = _require_user(ctx, user)
    try:
        records = asyncio.run(_call(_gateway(settings), "list_drafts", user_id, wizard_type))
    except GatewayError as exc:
        render_error(str(exc))
        raise typer.Exit(code=1) from exc
    render_drafts(records)


@drafts_app.command("show")
def drafts_show(
    ctx: typer.Context,
    draft_id: str = typer.Argument(...),
    user: str | None = typer.Option(None, "--user", "-u"),
) -> None:
    """Print the saved data of one draft."""
    settings = _settings(ctx)
    user_id = _require_user(ctx, user)
    try:
        loaded = asyncio.run(_call(_gateway(settings), "load_draft", draft_id, user_id))
    except GatewayError as exc:
        render_error(str(exc))
        raise typer.Exit(code=1) from exc
    render_summary_table({"Draft": loaded.draft_id, "Step": loaded.current_step_id}, title="Draft")
    get_console().print_json(json.dumps(loaded.form_data, ensure_ascii=True))


@drafts_app.command("delete")
def drafts_delete(
    ctx: typer.Context,
    draft_id: str = typer.Argument(...),
    user: str | None = typer.Option(None, "--user", "-u"),
) -> None:
    """Delete a draft."""
    settings = _settings(ctx)
    user_id = _require_user(ctx, user)
    try:
        asyncio.run(_call(_gateway(settings), "delete_draft", draft_id, user_id))
    except GatewayError as exc:
        render_error(str(exc))
        raise typer.Exit(code=1) from exc
    render_success(f"Deleted draft {draft_id}.")


@drafts_app.command("purge")
def drafts_purge(ctx: typer.Context) -> None:
    """Remove expired drafts from the drafts directory."""
    settings = _settings(ctx)
    if settings.gateway != "file":
        render_error("Purging expired drafts is only available for the file gateway.")
        raise typer.Exit(code=2)
    gateway = FileDraftGateway(base_dir=settings.drafts_dir, max_age=settings.draft_max_age)
    removed = gateway.clear_expired()
    render_info(f"Removed {removed} expired draft(s) from {settings.drafts_dir}.")


@app.command("run")
def run(
    ctx: typer.Context,
    config_path: str = typer.Option("wizard.json", "--config", "-c"),
    draft: str | None = typer.Option(None, "--draft", "-d"),
    user: str | None = typer.Option(None, "--user", "-u"),
) -> None:
    """Run a wizard interactively in the terminal."""
    from draftwise.ui.app import run_app

    settings = _settings(ctx)
    try:
        config = load_wizard_config(Path(config_path))
    except ConfigError as exc:
        render_error(str(exc))
        raise typer.Exit(code=1) from exc
    user_id = user or settings.user_id
    if draft and not user_id:
        render_error("Resuming a draft needs a user id: pass --user or set DRAFTWISE_USER_ID.")
        raise typer.Exit(code=2)

    gateway = _gateway(settings) if user_id else None
    result = run_app(
        config=config,
        user_id=user_id,
        draft_id=draft,
        drafts=gateway,
        publisher=gateway,
        close_gateways=True,
    )

    if result is None:
        render_info("Wizard closed without completing.")
        return
    if "published_id" in result:
        render_success(f"Published {result['published_id']}.")
        return
    render_success("Wizard completed.")
    get_console().print_json(json.dumps(result, ensure_ascii=True))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
