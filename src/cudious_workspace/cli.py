"""Command-line interface for the Cudious workspace."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.text import Text

from cudious_workspace.app.bootstrap import RuntimeComponents, build_runtime_components
from cudious_workspace.chat import (
    MODE_REGISTRY,
    ConversationStore,
    Message,
    Mode,
    Reaction,
    Role,
    SubmissionResult,
    ValidationError,
    WorkspaceSession,
    get_mode_settings,
    get_system_instruction,
    message_text,
    parse_mode,
)
from cudious_workspace.config import ConfigError, load_config
from cudious_workspace.diagnostics import run_diagnostics
from cudious_workspace.llm import check_ollama_connection, check_ollama_model, resolve_api_key
from cudious_workspace.utils.log_setup import configure_logging

console = Console()

DEFAULT_CONFIG_PATH = Path("configs/workspace_config.yaml")

_REACTION_COMMANDS = {":like": Reaction.APPROVE, ":dislike": Reaction.REJECT}
_REACTION_BADGES = {Reaction.APPROVE: "[green]👍 approved[/green]", Reaction.REJECT: "[red]👎 rejected[/red]"}


def render_assistant_message(
    content: str,
    *,
    title: str = "Cudious",
    boxed: bool = True,
    box_style: str = "rounded",
    reaction: Reaction = Reaction.NONE,
) -> None:
    """Render an assistant reply as markdown, optionally inside a panel."""
    markdown = Markdown(content)
    if boxed:
        box_styles = {
            "simple": box.SIMPLE,
            "rounded": box.ROUNDED,
            "square": box.SQUARE,
        }
        chosen_box = box_styles.get(box_style.lower(), box.ROUNDED)
        console.print(
            Panel(
                markdown,
                title=title,
                border_style="green",
                box=chosen_box,
                expand=True,
                padding=(0, 1),
            )
        )
    else:
        console.rule(title)
        console.print(markdown)
    if reaction is not Reaction.NONE:
        console.print(_REACTION_BADGES[reaction])


def render_empty_state(mode: Mode) -> None:
    settings = get_mode_settings(mode)
    console.print(f"[bold italic]{settings.tagline}[/]")
    console.print(f"[dim]{settings.description}[/dim]")
    for idx, suggestion in enumerate(settings.suggestions, start=1):
        console.print(f"  [cyan]{idx}.[/cyan] {suggestion}")
    console.print("[dim]Use :suggest <number> to send a suggestion.[/dim]\n")


def list_modes(active: Mode | None = None) -> str:
    lines = []
    for mode, settings in MODE_REGISTRY.items():
        marker = "*" if mode is active else "-"
        lines.append(f"{marker} {mode.value}: {settings.title} - {settings.tagline}")
    return "\n".join(lines)


def render_history(store: ConversationStore, *, ui_ref: dict[str, Any]) -> None:
    mode = store.active_mode
    history = store.active_log()
    title = get_mode_settings(mode).title
    if not history:
        console.print(f"[yellow]No messages in {title} yet.[/yellow]\n")
        return
    console.print(f"[bold]{title} History ({len(history)} messages)[/bold]\n")
    for idx, message in enumerate(history, start=1):
        if message.role is Role.USER:
            console.print(f"[dim]{idx}.[/dim] [bold blue]You:[/] {message.text}")
        else:
            console.print(f"[dim]{idx}.[/dim]")
            render_assistant_message(
                message.text,
                title=title,
                boxed=bool(ui_ref.get("boxed", True)),
                box_style=str(ui_ref.get("box_style", "rounded")),
                reaction=message.reaction,
            )


def render_submission(result: SubmissionResult, *, ui_ref: dict[str, Any]) -> None:
    title = get_mode_settings(result.mode).title
    if result.reply is None:
        console.print("[yellow]The model returned an empty reply.[/yellow]")
        return
    if result.failed:
        console.print(Panel(result.reply.text, title="[bold red]Error[/bold red]", border_style="red"))
        return
    render_assistant_message(
        result.reply.text,
        title=title,
        boxed=bool(ui_ref.get("boxed", True)),
        box_style=str(ui_ref.get("box_style", "rounded")),
    )


def submit_prompt(session: WorkspaceSession, text: str, *, ui_ref: dict[str, Any]) -> SubmissionResult | None:
    try:
        with console.status("[green]Generating...[/green]"):
            result = session.submit(text)
    except ValidationError as exc:
        console.print(f"[yellow]{exc}[/yellow]")
        return None
    render_submission(result, ui_ref=ui_ref)
    return result


def handle_cli_command(  # noqa: C901
    command: str,
    *,
    session: WorkspaceSession,
    ui_ref: dict[str, Any],
) -> bool:
    lowered = command.strip().lower()
    if lowered == ":help":
        _print_help_menu()
        return True
    if lowered == ":modes":
        console.print(list_modes(session.store.active_mode))
        return True
    if lowered.startswith(":mode"):
        _switch_mode(command, session)
        return True
    if lowered == ":history":
        render_history(session.store, ui_ref=ui_ref)
        return True
    if lowered == ":clear":
        title = get_mode_settings(session.store.active_mode).title
        session.clear()
        console.print(f"[cyan]Cleared {title}.[/]")
        return True
    head = lowered.split(maxsplit=1)[0] if lowered else ""
    if head in _REACTION_COMMANDS:
        _apply_reaction(command, session, _REACTION_COMMANDS[head])
        return True
    if head == ":copy":
        _copy_message(command, session.store)
        return True
    if head == ":export":
        _export_message(command, session.store)
        return True
    if head == ":suggest":
        _submit_suggestion(command, session, ui_ref)
        return True
    if head == ":box":
        _toggle_boolean_setting(command, ui_ref, "boxed", "Boxed answers")
        return True
    return False


def _print_help_menu() -> None:
    console.print(
        "Commands:\n"
        "  :mode <name>        - Switch mode (chat, architecture, code, specs, deployment)\n"
        "  :modes              - List available modes\n"
        "  :history            - Show the conversation for the current mode\n"
        "  :clear              - Clear the conversation for the current mode\n"
        "  :like <n>           - Toggle approval on assistant message n\n"
        "  :dislike <n>        - Toggle rejection on assistant message n\n"
        "  :copy <n>           - Print the raw text of message n\n"
        "  :export <n> <path>  - Write the raw text of message n to a file\n"
        "  :suggest <n>        - Send suggestion n for the current mode\n"
        "  :box on/off         - Toggle boxed rendering for answers\n"
        "  :exit               - End the session"
    )


def _switch_mode(command: str, session: WorkspaceSession) -> None:
    parts = command.split(maxsplit=1)
    if len(parts) != 2:
        console.print(f"Available modes: {', '.join(mode.value for mode in Mode)}")
        return
    try:
        mode = parse_mode(parts[1])
    except ValueError as exc:
        console.print(f"[yellow]{exc}[/yellow]")
        return
    session.select(mode)
    console.print(f"[cyan]Switched to {get_mode_settings(mode).title}.[/]")
    if not session.store.active_log():
        render_empty_state(mode)


def _parse_message_number(command: str, store: ConversationStore, usage: str) -> int | None:
    parts = command.split()
    if len(parts) < 2 or not parts[1].isdecimal():
        console.print(usage)
        return None
    index = int(parts[1]) - 1
    size = len(store.active_log())
    if index < 0 or index >= size:
        console.print(f"[yellow]No message {parts[1]}; this conversation has {size} message(s).[/yellow]")
        return None
    return index


def _apply_reaction(command: str, session: WorkspaceSession, reaction: Reaction) -> None:
    index = _parse_message_number(command, session.store, "Usage: :like <n> | :dislike <n>")
    if index is None:
        return
    target: Message = session.store.active_log()[index]
    if target.role is not Role.ASSISTANT:
        console.print("[yellow]Reactions apply to assistant messages only.[/yellow]")
        return
    updated = session.react(index, reaction)
    if updated.reaction is Reaction.NONE:
        console.print(f"[cyan]Reaction cleared on message {index + 1}.[/]")
    else:
        console.print(f"[cyan]Message {index + 1}:[/] {_REACTION_BADGES[updated.reaction]}")


def _copy_message(command: str, store: ConversationStore) -> None:
    index = _parse_message_number(command, store, "Usage: :copy <n>")
    if index is None:
        return
    console.print(Text(message_text(store, store.active_mode, index)))


def _export_message(command: str, store: ConversationStore) -> None:
    parts = command.split(maxsplit=2)
    if len(parts) != 3:
        console.print("Usage: :export <n> <path>")
        return
    index = _parse_message_number(command, store, "Usage: :export <n> <path>")
    if index is None:
        return
    target = Path(parts[2].strip().strip('"').strip("'")).expanduser()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(message_text(store, store.active_mode, index), encoding="utf-8")
    except OSError as exc:
        console.print(f"[red]Failed to export message {index + 1}:[/red] {exc}")
        return
    console.print(f"[green]Saved message {index + 1} to[/green] [cyan]{target}[/cyan]")


def _submit_suggestion(command: str, session: WorkspaceSession, ui_ref: dict[str, Any]) -> None:
    suggestions = get_mode_settings(session.store.active_mode).suggestions
    parts = command.split()
    if len(parts) != 2 or not parts[1].isdecimal() or not 1 <= int(parts[1]) <= len(suggestions):
        console.print(f"Usage: :suggest <1-{len(suggestions)}>")
        return
    suggestion = suggestions[int(parts[1]) - 1]
    console.print(f"[bold blue]You:[/] {suggestion}")
    submit_prompt(session, suggestion, ui_ref=ui_ref)


def _toggle_boolean_setting(command: str, ui_ref: dict[str, Any], key: str, label: str) -> None:
    parts = command.split(maxsplit=1)
    setting = parts[1].strip().lower() if len(parts) == 2 else ""
    if setting in {"on", "off"}:
        ui_ref[key] = setting == "on"
        console.print(f"[cyan]{label}: {'on' if ui_ref[key] else 'off'}[/]")
    else:
        console.print(f"Usage: :{key.replace('_', '')} on|off")


def _ensure_provider_ready(runtime: RuntimeComponents, skip_check: bool) -> None:
    if skip_check:
        return
    llm_settings = runtime.llm_settings
    provider = llm_settings.get("provider")
    if provider == "ollama":
        _ensure_ollama_ready(llm_settings)
        return
    env_name = llm_settings.get("api_key_env")
    if env_name and not resolve_api_key(llm_settings):
        console.print(
            Panel(
                f"[bold red]{env_name} is not set![/bold red]\n\n"
                f"The workspace needs an API key to reach the [cyan]{provider}[/cyan] provider.\n\n"
                "[bold]To fix this:[/bold]\n"
                f"  Run: [cyan]export {env_name}=<your key>[/cyan]\n\n"
                "You can skip this check with [cyan]--skip-provider-check[/cyan], "
                "but every request will fail with the fallback error message.",
                title="⚠️  Missing API Key",
                border_style="red",
            )
        )
        raise click.Abort()


def _ensure_ollama_ready(llm_settings: dict[str, Any]) -> None:
    base_url = llm_settings.get("base_url", "http://localhost:11434")
    model_name = llm_settings.get("model", "llama3.1:8b")
    if not check_ollama_connection(base_url):
        console.print(
            Panel(
                "[bold red]Ollama is not running![/bold red]\n\n"
                "[bold]To start Ollama:[/bold]\n"
                "  Run: [cyan]ollama serve[/cyan]\n\n"
                "You can skip this check with [cyan]--skip-provider-check[/cyan].",
                title="⚠️  Ollama Connection Error",
                border_style="red",
            )
        )
        raise click.Abort()
    model_installed, available_models = check_ollama_model(base_url, model_name)
    if model_installed:
        return
    available_list = "\n  - ".join(available_models) if available_models else "  (none installed)"
    console.print(
        Panel(
            f"[bold red]Model '{model_name}' is not installed![/bold red]\n\n"
            f"  Run: [cyan]ollama pull {model_name}[/cyan]\n\n"
            "[bold]Currently installed models:[/bold]\n"
            f"  {available_list}",
            title="⚠️  Model Not Found",
            border_style="yellow",
        )
    )
    raise click.Abort()


def _load_runtime(config_path: Path, mode: str | None) -> RuntimeComponents:
    try:
        workspace_config = load_config(config_path)
    except ConfigError as exc:
        raise click.BadParameter(str(exc), param_hint="--config") from exc
    logging_settings = workspace_config.logging_settings()
    configure_logging(logging_settings["level"], logging_settings["file"])
    return build_runtime_components(workspace_config, mode=parse_mode(mode) if mode else None)


_MODE_CHOICE = click.Choice([mode.value for mode in Mode])


@click.group()
def cli() -> None:
    """Cudious AI workspace CLI."""


@cli.command()
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=DEFAULT_CONFIG_PATH)
@click.option("--mode", type=_MODE_CHOICE, default=None, help="Mode to start in (defaults to config).")
@click.option("--skip-provider-check", is_flag=True, help="Skip checking provider credentials or reachability.")
def chat(config_path: Path, mode: str | None, skip_provider_check: bool) -> None:
    """Start an interactive chat session."""
    runtime = _load_runtime(config_path, mode)
    _ensure_provider_ready(runtime, skip_provider_check)
    session = runtime.session
    ui_settings = runtime.ui_settings or {}
    ui_ref: dict[str, Any] = {
        "boxed": bool(ui_settings.get("boxed_answers", True)),
        "box_style": str(ui_settings.get("box_style", "rounded")),
    }

    console.print("[bold green]CUDIOUS AI[/] [dim]workspace[/dim]")
    console.print(f"Type ':help' for available commands. Model: [cyan]{runtime.composer.model}[/]")
    console.print(list_modes(session.store.active_mode))
    console.print()
    render_empty_state(session.store.active_mode)

    while True:
        title = get_mode_settings(session.store.active_mode).title
        user_input = Prompt.ask(f"[bold blue]{title}[/]")
        stripped = user_input.strip()

        if not stripped:
            continue
        if stripped.lower() in {":exit", ":quit"}:
            console.print("[cyan]Ending session.[/]")
            break
        if handle_cli_command(stripped, session=session, ui_ref=ui_ref):
            continue
        submit_prompt(session, user_input, ui_ref=ui_ref)


@cli.command()
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=DEFAULT_CONFIG_PATH)
@click.option("--mode", type=_MODE_CHOICE, default=None, help="Mode whose instruction shapes the answer.")
@click.option("--raw", is_flag=True, help="Print the reply text without markdown rendering.")
@click.argument("prompt", nargs=-1, required=True)
def ask(config_path: Path, mode: str | None, raw: bool, prompt: tuple[str, ...]) -> None:
    """Send a single prompt and print the reply."""
    runtime = _load_runtime(config_path, mode)
    text = " ".join(prompt)
    try:
        result = runtime.session.submit(text)
    except ValidationError as exc:
        raise click.BadParameter(str(exc), param_hint="PROMPT") from exc
    if result.reply is None:
        console.print("[yellow]The model returned an empty reply.[/yellow]")
        return
    if raw:
        click.echo(result.reply.text)
    else:
        render_submission(result, ui_ref={"boxed": bool(runtime.ui_settings.get("boxed_answers", True))})
    if result.failed:
        raise click.exceptions.Exit(1)


@cli.command()
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=DEFAULT_CONFIG_PATH)
def doctor(config_path: Path) -> None:
    """Check provider credentials, reachability and optional dependencies."""
    try:
        workspace_config = load_config(config_path)
    except ConfigError as exc:
        raise click.BadParameter(str(exc), param_hint="--config") from exc
    styles = {"ok": "green", "warn": "yellow", "error": "red", "not_applicable": "dim"}
    results = run_diagnostics(workspace_config)
    for name, result in results.items():
        style = styles.get(result["status"], "white")
        console.print(f"[{style}]{result['status']:>14}[/] {name}: {result['details']}")
    if any(result["status"] == "error" for result in results.values()):
        raise click.exceptions.Exit(1)


@cli.command(name="modes")
def modes_command() -> None:
    """List the available workspace modes."""
    console.print(list_modes())


@cli.command(name="show-instruction")
@click.argument("mode", type=_MODE_CHOICE)
def show_instruction(mode: str) -> None:
    """Print the system instruction sent with requests in MODE."""
    click.echo(get_system_instruction(parse_mode(mode)))


if __name__ == "__main__":  # pragma: no cover
    cli()
