"""orgblocks CLI entry point."""

import sys

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import Config, parse_edit_style
from .errors import OrgBlocksError
from .expander import EditStyle, make_skeleton
from .header_args import header_defaults
from .logging import get_logger, init_logger

console = Console()


def _load_config() -> Config:
    try:
        config = Config.load()
    except OrgBlocksError as e:
        get_logger().log_error(f"config: {e}")
        console.print(f"[red]Error: {escape(str(e))}[/]")
        sys.exit(1)
    init_logger(config.log_events)
    return config


@click.group()
@click.version_option(version=__version__)
def main():
    """orgblocks - "<" block template completion for Org documents."""


@main.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--edit-style", "-s", type=click.Choice([s.value for s in EditStyle]),
              default=None, help="What to do after a block is inserted")
@click.option("--anywhere", is_flag=True, help="Complete \"<\" anywhere on a line")
@click.option("--load", "-l", "languages", multiple=True, help="Mark a language as loaded")
def edit(path, edit_style, anywhere, languages):
    """Edit an Org document with block completion."""
    config = _load_config()
    if edit_style:
        config.edit_style = parse_edit_style(edit_style)
    if anywhere:
        config.begin_line_only = False
    for lang in languages:
        config.tables.set_language_loaded(lang)

    from .editor import OrgEditor
    editor = OrgEditor(path, config)
    if editor.run() is None:
        console.print("[dim]Not saved.[/]")
    else:
        console.print(f"[green]Saved {path}[/]")


@main.command()
@click.argument("prefix", default="")
def candidates(prefix):
    """List completion candidates for PREFIX."""
    from .candidates import candidates as list_candidates

    config = _load_config()
    tables = config.tables
    names = list_candidates(prefix, tables.load_languages,
                            tables.structure_templates, tables.tangle_lang_exts)

    table = Table(title=f"Candidates for <{prefix}")
    table.add_column("Name", style="cyan")
    table.add_column("Kind", style="dim")
    for name in names:
        table.add_row(name, "template" if tables.is_template(name) else "language")
    console.print(table)


@main.command()
@click.argument("name")
@click.option("--lang-defaults/--no-lang-defaults", default=None,
              help="Append default header args to src blocks")
def expand(name, lang_defaults):
    """Show the block NAME expands to."""
    config = _load_config()
    if lang_defaults is None:
        lang_defaults = config.explicit_lang_defaults

    tables = config.tables
    suffix = ""
    if lang_defaults and not tables.is_template(name):
        suffix = header_defaults(name, tables.header_args)
    skeleton = make_skeleton(name, tables.structure_templates.values(), suffix)

    click.echo(skeleton.begin)
    click.echo(" " * config.content_indentation)
    click.echo(skeleton.end)


@main.command("config")
def show_config():
    """Show the effective configuration."""
    config = _load_config()
    console.print(f"[dim]Config: {Config.get_config_path()}[/]")
    console.print(yaml.safe_dump(config.to_dict(), sort_keys=False), markup=False)


if __name__ == "__main__":
    main()
