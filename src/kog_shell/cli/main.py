"""
Kog Shell CLI.

An interactive shell assistant: natural-language requests go to an LLM
which manipulates files through the sandboxed working-directory tools.
Tools can also be invoked directly, without any LLM.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from kog_shell import __version__
from kog_shell.chat.service import DEFAULT_SYSTEM_PROMPT, ChatService
from kog_shell.filesystem.config import ShellToolsConfig
from kog_shell.filesystem.tools import TOOL_DEFINITIONS, ShellTools
from kog_shell.llm.base import ToolCall
from kog_shell.llm.config import ProviderType
from kog_shell.llm.factory import get_provider, list_providers
from kog_shell.settings.config import KogShellConfig

load_dotenv()

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup rich logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def load_config(config_path: Optional[str], directory: Optional[str]) -> KogShellConfig:
    """Load configuration from a file (or the environment) and apply overrides."""
    if config_path:
        config = KogShellConfig.from_file(config_path)
    else:
        config = KogShellConfig.from_env()

    if directory:
        tools = ShellToolsConfig(
            **{**config.tools.model_dump(), "initial_directory": Path(directory)}
        )
        config = config.model_copy(update={"tools": tools})
    return config


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML/JSON configuration file (default: KOG_* environment variables)",
)
@click.option(
    "--directory",
    "-d",
    type=click.Path(file_okay=False),
    default=None,
    help="Initial working directory (default: current directory)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], directory: Optional[str], verbose: bool):
    """Kog Shell - an LLM shell assistant with sandboxed file tools."""
    setup_logging(verbose)
    try:
        ctx.obj = load_config(config_path, directory)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e))


def _apply_llm_overrides(
    config: KogShellConfig,
    provider: Optional[str],
    model: Optional[str],
    base_url: Optional[str],
) -> KogShellConfig:
    updates = {}
    if provider:
        updates["provider"] = ProviderType(provider)
        if base_url is None:
            updates["base_url"] = None
    if model:
        updates["model"] = model
    if base_url:
        updates["base_url"] = base_url
    if not updates:
        return config
    return config.model_copy(update={"llm": config.llm.model_copy(update=updates)})


def _build_service(config: KogShellConfig, tools: ShellTools) -> ChatService:
    provider = get_provider(config.llm.to_llm_config())
    return ChatService(
        provider,
        tools,
        max_tool_rounds=config.max_tool_rounds,
        system_prompt=config.system_prompt or DEFAULT_SYSTEM_PROMPT,
        on_tool_call=_print_tool_call,
    )


def _print_tool_call(call: ToolCall, result: str) -> None:
    first_line = result.splitlines()[0] if result else ""
    console.print(f"[dim]⚙ {call.name}({call.raw_arguments}) → {first_line}[/dim]")


llm_options = [
    click.option(
        "--provider",
        "-p",
        type=click.Choice(list_providers()),
        default=None,
        help="LLM provider to use (overrides config)",
    ),
    click.option("--model", "-m", default=None, help="Model name/identifier"),
    click.option("--base-url", "-u", default=None, help="API base URL"),
]


def with_llm_options(func):
    for option in reversed(llm_options):
        func = option(func)
    return func


@cli.command()
@with_llm_options
@click.pass_obj
def chat(
    config: KogShellConfig,
    provider: Optional[str],
    model: Optional[str],
    base_url: Optional[str],
):
    """
    Interactive chat with file tools.

    Type 'exit' or 'quit' to end the session.

    Examples:

        # LM Studio with default model
        kog-shell chat

        # Ollama, starting in ~/scratch
        kog-shell -d ~/scratch chat -p ollama -m llama3.1
    """
    config = _apply_llm_overrides(config, provider, model, base_url)
    tools = ShellTools(config.tools)

    console.print(
        Panel(
            f"[bold cyan]Kog Shell[/bold cyan]\n\n"
            f"Provider: [green]{config.llm.provider.value}[/green]\n"
            f"Model: [green]{config.llm.model}[/green]\n"
            f"Directory: [green]{tools.state.base}[/green]\n\n"
            f"Type [yellow]exit[/yellow] or [yellow]quit[/yellow] to end session.\n"
            f"Type [yellow]/help[/yellow] for commands.",
            title="Welcome",
        )
    )

    asyncio.run(_chat_loop(config, tools))


async def _chat_loop(config: KogShellConfig, tools: ShellTools) -> None:
    """Main chat loop."""
    service = _build_service(config, tools)

    try:
        while True:
            try:
                user_input = Prompt.ask("\n[bold blue]You[/bold blue]")

                if not user_input.strip():
                    continue

                command = user_input.strip().lower()
                if command in ("exit", "quit", "/exit", "/quit"):
                    console.print("[yellow]Goodbye![/yellow]")
                    break
                if command in ("/help", "help"):
                    _show_help()
                    continue
                if command == "/pwd":
                    console.print(tools.state.base)
                    continue
                if command == "/tools":
                    console.print(_tools_table())
                    continue

                with console.status("[bold green]Thinking..."):
                    reply = await service.exchange(user_input)

                console.print("\n[bold green]Assistant[/bold green]")
                console.print(Markdown(reply) if reply else "[dim](no reply)[/dim]")

            except KeyboardInterrupt:
                console.print("\n[yellow]Interrupted. Type 'exit' to quit.[/yellow]")
                continue
    finally:
        await service.provider.close()


def _show_help() -> None:
    help_text = """
[bold]Commands:[/bold]
  /help   - Show this help message
  /pwd    - Show the current working directory
  /tools  - List the tools the assistant can use
  /exit   - Exit the chat

[bold]Tips:[/bold]
  • Ask in plain language: "make a folder notes and put todo.txt in it"
  • Writes and deletes are confined to the current working directory
"""
    console.print(Panel(help_text, title="Help"))


@cli.command()
@click.argument("prompt")
@with_llm_options
@click.pass_obj
def ask(
    config: KogShellConfig,
    prompt: str,
    provider: Optional[str],
    model: Optional[str],
    base_url: Optional[str],
):
    """
    Send a single request and print the reply.

    Example:

        kog-shell ask "what files are in this directory?"
    """
    config = _apply_llm_overrides(config, provider, model, base_url)
    reply = asyncio.run(_single_exchange(config, prompt))
    console.print(Markdown(reply) if reply else "")


async def _single_exchange(config: KogShellConfig, prompt: str) -> str:
    service = _build_service(config, ShellTools(config.tools))
    try:
        return await service.exchange(prompt)
    finally:
        await service.provider.close()


def _parse_arguments(pairs: tuple[str, ...]) -> dict[str, str]:
    arguments = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="--arg")
        arguments[key] = value
    return arguments


@cli.command()
@click.argument("name", type=click.Choice(list(TOOL_DEFINITIONS)))
@click.option(
    "--arg",
    "-a",
    "pairs",
    multiple=True,
    help="Tool argument as key=value (repeatable), e.g. -a fileName=notes.txt",
)
@click.option("--overwrite", is_flag=True, default=False, help="Shortcut for -a overwrite=true")
@click.pass_obj
def tool(config: KogShellConfig, name: str, pairs: tuple[str, ...], overwrite: bool):
    """
    Invoke one tool directly and print its result.

    Examples:

        kog-shell tool listCurrentDirectory

        kog-shell tool writeFile -a fileName=notes.txt -a content=hello

        kog-shell tool movePath -a source=a.txt -a target=/tmp/a.txt --overwrite
    """
    arguments: dict[str, object] = dict(_parse_arguments(pairs))
    if overwrite:
        arguments["overwrite"] = True
    tools = ShellTools(config.tools)
    click.echo(tools.execute_tool(name, arguments))


def _tools_table() -> Table:
    table = Table(title="Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Arguments", style="green")
    table.add_column("Description")
    for name, (description, properties, required) in TOOL_DEFINITIONS.items():
        args = ", ".join(p if p in required else escape(f"[{p}]") for p in properties)
        table.add_row(name, args, description)
    return table


@cli.command()
def tools():
    """List the available tools."""
    console.print(_tools_table())


@cli.command()
def providers():
    """List available LLM providers."""
    console.print("\n[bold]Available Providers:[/bold]")
    for name in list_providers():
        console.print(f"  • {name}")


if __name__ == "__main__":
    cli()
