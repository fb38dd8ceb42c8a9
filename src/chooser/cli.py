"""Typer CLI for chooser: demo window and a headless filter command."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from result import Err

from chooser.config import ChooserConfig
from chooser.data.loader import load_host
from chooser.services.controller import SelectionController
from chooser.ui.theme import strip_markup

app = typer.Typer(
    name="chooser",
    help="Chooser: searchable select widget with filtering, highlighting and multi-select.",
    invoke_without_command=True,
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.callback(invoke_without_command=True)
def demo(
    ctx: typer.Context,
    options_file: Annotated[
        Path | None,
        typer.Option("--options", "-o", help="JSON file with the options to show"),
    ] = None,
    multiple: Annotated[
        bool | None,
        typer.Option("--multiple/--single", help="Override the file's selection mode"),
    ] = None,
    max_selected: Annotated[
        int, typer.Option("--max-selected", help="Selection limit for multi mode (0 = none)")
    ] = 0,
    allow_deselect: Annotated[
        bool, typer.Option("--allow-deselect", help="Offer a clear control in single mode")
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Open the demo window."""
    if ctx.invoked_subcommand is not None:
        return
    _configure_logging(verbose)
    if options_file is None:
        typer.echo("Pass --options with a JSON option file to open the demo.", err=True)
        raise typer.Exit(1)
    loaded = load_host(options_file, multiple=multiple)
    if isinstance(loaded, Err):
        typer.echo(loaded.err_value, err=True)
        raise typer.Exit(1)
    config = ChooserConfig(
        max_selected_options=max_selected,
        allow_single_deselect=allow_deselect,
    )
    from chooser.ui.app import run_app

    run_app(loaded.ok_value, config, title=options_file.name)


@app.command(name="filter")
def filter_options(
    options_file: Annotated[Path, typer.Argument(help="JSON file with the options")],
    query: Annotated[str, typer.Argument(help="Search text")] = "",
    contains: Annotated[
        bool, typer.Option("--contains", help="Match anywhere instead of word starts")
    ] = False,
    case_sensitive: Annotated[bool, typer.Option("--case-sensitive")] = False,
    no_split_words: Annotated[
        bool, typer.Option("--no-split-words", help="Only match at the start of the text")
    ] = False,
    no_group_search: Annotated[
        bool, typer.Option("--no-group-search", help="Ignore group labels when matching")
    ] = False,
    max_shown: Annotated[int, typer.Option("--max-shown", help="Row limit (0 = none)")] = 0,
    multiple: Annotated[bool | None, typer.Option("--multiple/--single")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Print the results a query would show, with matches marked."""
    _configure_logging(verbose)
    loaded = load_host(options_file, multiple=multiple)
    if isinstance(loaded, Err):
        typer.echo(loaded.err_value, err=True)
        raise typer.Exit(1)

    config = ChooserConfig(
        search_contains=contains,
        case_sensitive_search=case_sensitive,
        enable_split_word_search=not no_split_words,
        group_search=not no_group_search,
        max_shown_results=max_shown,
    )
    controller = SelectionController(loaded.ok_value, config)
    controller.search(query)
    if not controller.open():
        typer.echo("Widget cannot open (disabled or at its selection limit).", err=True)
        raise typer.Exit(1)

    highlighted = controller.search_state.highlighted
    for row in controller.rows:
        text = row.html.replace("<em>", "[").replace("</em>", "]")
        match row.kind:
            case "group":
                typer.echo(strip_markup(text))
            case "no_results":
                typer.echo(strip_markup(text))
            case _:
                marker = ">" if row.array_index == highlighted else " "
                flags = "".join(
                    flag
                    for flag, present in (("*", row.selected), ("-", row.disabled))
                    if present
                )
                indent = "  " if row.group_option else ""
                typer.echo(f"{marker} {indent}{strip_markup(text)}{flags}")
