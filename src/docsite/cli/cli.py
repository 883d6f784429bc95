"""CLI entrypoint: Typer app definition and command registration"""

import typer

from docsite.cli.commands import (
    build_cmd, commit_cmd, diff_cmd, extract_cmd, history_cmd,
    init_cmd, lint_cmd, list_cmd, render_cmd, revert_cmd, setup_logging,
)


app = typer.Typer(name="docsite", no_args_is_help=True, help="Markdown documentation linting and site pipeline")

app.callback()(setup_logging)

app.command(name="build")(build_cmd)
app.command(name="extract")(extract_cmd)
app.command(name="lint")(lint_cmd)
app.command(name="commit")(commit_cmd)
app.command(name="render")(render_cmd)
app.command(name="list")(list_cmd)
app.command(name="history")(history_cmd)
app.command(name="diff")(diff_cmd)
app.command(name="revert")(revert_cmd)
app.command(name="init")(init_cmd)
