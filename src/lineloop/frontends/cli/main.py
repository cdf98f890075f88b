"""CLI entry point."""

from __future__ import annotations

import sys

import rich_click as click

from lineloop.core.errors import ConfigError

# Configure rich-click styling
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.USE_MARKDOWN = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = "Try running '--help' for more information."
click.rich_click.ERRORS_EPILOGUE = ""
click.rich_click.MAX_WIDTH = 100


@click.command()
@click.version_option(package_name="lineloop")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML config file (default: $LINELOOP_CONFIG)",
)
@click.option("--history-file", default=None, help="History file (default: ~/.lineloop_history)")
@click.option("--history-size", type=int, default=None, help="Maximum history entries kept")
@click.option("--history-bytes", type=int, default=None, help="Maximum history file size in bytes")
@click.option("--no-history", is_flag=True, help="Keep history in memory only")
@click.option(
    "--stack-traces/--no-stack-traces",
    default=None,
    help="Show full error detail (same as :e true)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Diagnostic log level (stderr)",
)
@click.option("--log-file", default=None, help="Also write diagnostic logs to this file")
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Diagnostic log format",
)
def cli(
    config_file: str | None,
    history_file: str | None,
    history_size: int | None,
    history_bytes: int | None,
    no_history: bool,
    stack_traces: bool | None,
    log_level: str | None,
    log_file: str | None,
    log_format: str | None,
) -> None:
    """Interactive read-eval-print loop.

    Type code at the **>** prompt. Incomplete statements continue on the
    next line; commands start with **:** (type **:h** for the list).

    **Examples:**

        lineloop

        lineloop --history-file ~/.cache/lineloop --stack-traces

        cat script.py | lineloop
    """
    from lineloop.core.config import load_config
    from lineloop.core.logging_config import configure_logging
    from lineloop.frontends.cli.repl import run_interactive

    try:
        configure_logging(level=log_level, format=log_format, file_path=log_file)  # type: ignore[arg-type]
        config = load_config(
            config_file,
            # "" disables the file; None means "not given"
            history_file="" if no_history else history_file,
            history_size=history_size,
            history_max_bytes=history_bytes,
            show_stack_traces=stack_traces,
        )
    except (ConfigError, ValueError, OSError) as e:
        click.echo(f"Error: {e}")
        sys.exit(1)

    sys.exit(run_interactive(config))


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
