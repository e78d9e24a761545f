"""Tether CLI - query a tool server through Gemini function calling."""

import logging
import sys
from typing import Callable, Optional

import click
from rich.logging import RichHandler

from . import __version__
from .config import ConfigManager
from .errors import TetherError
from .session import Session
from .ui import (
    console,
    render_error,
    render_header,
    render_outcome,
    render_response,
    render_tool_call,
    render_tools,
    render_usage,
)

QUIT_COMMAND = "quit"


def setup_logging(verbose: bool = False) -> None:
    """Route log records through rich; DEBUG when verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def _prompt() -> str:
    return click.prompt("\nQuery", default="", show_default=False, prompt_suffix=": ")


def chat_loop(
    session: Session,
    read_query: Optional[Callable[[], str]] = None,
    show_usage: bool = False,
) -> int:
    """Read queries until ``quit`` and print each answer.

    A failing query is reported and the loop keeps going. Ctrl-C while a
    query is running ends the loop.

    Returns:
        Number of queries answered.
    """
    read_query = read_query or _prompt
    console.print("\nTether started!", style="bold")
    console.print(f"Type your queries or '{QUIT_COMMAND}' to exit.", style="dim")

    answered = 0
    while True:
        try:
            message = read_query()
        except (click.Abort, EOFError, KeyboardInterrupt):
            console.print()
            break

        if message.strip().lower() == QUIT_COMMAND:
            break
        if not message.strip():
            continue

        try:
            result = session.run(message)
        except KeyboardInterrupt:
            console.print()
            break
        except Exception as e:
            render_error(f"Error processing query: {e}")
            continue

        console.print()
        render_response(result.answer)
        if show_usage:
            render_usage(result.input_tokens, result.output_tokens)
        answered += 1

    return answered


@click.command()
@click.argument("server_script")
@click.option("--config", "-c", "config_path", help="Path to config.yaml")
@click.option("--model", "-m", help="Gemini model to use")
@click.option("--verbose", "-v", is_flag=True, help="Log tool traffic and model requests")
@click.version_option(__version__, prog_name="tether")
def cli(server_script, config_path, model, verbose):
    """Connect to the tool server at SERVER_SCRIPT and answer queries.

    SERVER_SCRIPT is a .py, .js or .ts file that speaks the tool protocol
    over stdio.
    """
    setup_logging(verbose)

    try:
        config = ConfigManager(config_path)
        with Session.open(
            server_script,
            config,
            model=model,
            on_call=lambda call: render_tool_call(call.name, call.args),
            on_outcome=lambda o: render_outcome(o.name, o.ok, o.result if o.ok else o.error),
        ) as session:
            render_header("TETHER", f"Model: {session.endpoint.config.model}")
            render_tools(session.tool_names)
            chat_loop(session, show_usage=verbose)
    except click.ClickException:
        raise
    except TetherError as e:
        render_error(str(e))
        sys.exit(1)
    except Exception as e:
        render_error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
