"""CLI entry point for savepage.

Config precedence: settings.default.toml -> settings.<env>.toml -> settings.local.toml
-> env vars (SAVEPAGE_* with double underscores) -> CLI flags.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from savepage import __version__
from savepage.exceptions import MissingURLError, SavePageError
from savepage.logging_config import configure_logging
from savepage.saver import PageSaver
from savepage.settings import get_settings
from savepage.validation import SUPPORTED_BROWSERS, build_request

APP_HELP = (
    "Open the given URL in a browser tab/window, perform a 'Save As' operation and close the tab/window. "
    "Requires xdotool and a running X11 session. "
    "Flags not given fall back to settings (SAVEPAGE_* env vars or config/settings.*.toml)."
)

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

app = typer.Typer(add_completion=False, help=APP_HELP, context_settings=CONTEXT_SETTINGS)
err_console = Console(stderr=True, soft_wrap=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"savepage {__version__}")
        raise typer.Exit()


@app.command(context_settings=CONTEXT_SETTINGS)
def save(
    ctx: typer.Context,
    url: Optional[str] = typer.Argument(None, help="The URL of the web page to be saved."),
    destination: Optional[str] = typer.Option(
        None,
        "--destination",
        "-d",
        help=(
            "Destination path. If a directory, the file is saved with its default name inside it, "
            "otherwise it is taken as the full path of the target file. [default: '.']"
        ),
    ),
    suffix: Optional[str] = typer.Option(
        None,
        "--suffix",
        "-s",
        help="Optional suffix for the target file name (ignored if --destination is a full path).",
    ),
    browser: Optional[str] = typer.Option(
        None,
        "--browser",
        "-b",
        help=f"Browser executable, one of {', '.join(SUPPORTED_BROWSERS)}. [default: google-chrome]",
    ),
    load_wait_time: Optional[str] = typer.Option(
        None,
        "--load-wait-time",
        help="Seconds to wait for the page to load before ctrl+s is pressed. [default: 4]",
    ),
    save_wait_time: Optional[str] = typer.Option(
        None,
        "--save-wait-time",
        help="Seconds to wait for the page to be saved before the tab is closed. [default: 8]",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every xdotool command."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
) -> None:
    """Save a web page through the browser's own "Save Page As" dialog."""
    settings = get_settings()
    configure_logging("DEBUG" if verbose or settings.debug else settings.logging.level, settings.logging.format)

    try:
        request = build_request(
            url,
            destination=destination if destination is not None else settings.output.destination,
            suffix=suffix if suffix is not None else settings.output.suffix,
            browser=browser if browser is not None else settings.browser.name,
            load_wait_time=load_wait_time if load_wait_time is not None else settings.timing.load_wait_time,
            save_wait_time=save_wait_time if save_wait_time is not None else settings.timing.save_wait_time,
        )
    except MissingURLError as exc:
        err_console.print(f"[red]ERROR:[/red] {escape(str(exc))}")
        typer.echo(ctx.get_help(), err=True)
        raise typer.Exit(code=1) from None
    except SavePageError as exc:
        err_console.print(f"[red]ERROR:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from None

    try:
        result = PageSaver(request, settings).run()
    except SavePageError as exc:
        err_console.print(f"[red]ERROR:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from None

    err_console.print(
        f"[green]✓[/green] Save confirmed in the browser for {escape(request.url)} -> {escape(str(result.destination))} "
        f"(not verified on disk)"
    )


def main() -> None:
    """Console-script entry point."""
    app()


if __name__ == "__main__":
    main()
