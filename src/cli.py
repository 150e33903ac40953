"""CLI interface for magazeen."""

import logging
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from magazeen.clustering import cluster_with_metrics
from magazeen.config import MagazeenConfig, load_config, merge_cli_overrides
from magazeen.content.scratch import apply_scratch, export_scratch
from magazeen.content.store import ContentStore
from magazeen.content.template import create_template
from magazeen.content.validation import (
    validate_article,
    validate_chat_highlight,
    validate_interest,
    validate_page_limit,
)
from magazeen.errors import MagazeenError
from magazeen.magazine.generator import MagazineGenerator

app = typer.Typer(
    name="magazeen",
    help="Collect articles, interests and Claude chats into a personal EPUB magazine.",
    no_args_is_help=True,
)
scratch_app = typer.Typer(help="Edit chat selection and order in a plain-text scratch file.")
app.add_typer(scratch_app, name="scratch")

console = Console()

END_MARKER = "END"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from magazeen import __version__

        console.print(f"magazeen {__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    logging.getLogger("magazeen").setLevel(level.upper())


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .magazeen.toml file."),
    ] = None,
    content_file: Annotated[
        Optional[Path],
        typer.Option("--content-file", help="Magazine content JSON file."),
    ] = None,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Logging level (debug, info, warning, error)."),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Magazeen - assemble a personal magazine from saved content."""
    config = merge_cli_overrides(
        load_config(config_file),
        content_file=content_file,
        log_level=log_level,
    )
    configure_logging(config.logging.level)
    ctx.obj = config


def _config(ctx: typer.Context) -> MagazeenConfig:
    return ctx.obj if isinstance(ctx.obj, MagazeenConfig) else load_config()


def _store(ctx: typer.Context) -> ContentStore:
    return ContentStore(_config(ctx).content_path)


def _fail(exc: Exception) -> None:
    console.print(f"[red]Error:[/red] {exc}")
    raise typer.Exit(1)


def _read_block(prompt: str) -> str:
    """Read lines from stdin until a line reading END (or EOF)."""
    console.print(f"{prompt} (type [bold]{END_MARKER}[/bold] on a new line to finish):")
    lines: list[str] = []
    for line in sys.stdin:
        if line.strip() == END_MARKER:
            break
        lines.append(line.rstrip("\n"))
    return "\n".join(lines)


# ── Adding content ───────────────────────────────────────────────


@app.command(name="add-article")
def add_article_cmd(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="Article title.")],
    category: Annotated[Optional[str], typer.Option("--category", help="Article category.")] = None,
    author: Annotated[Optional[str], typer.Option("--author", help="Article author.")] = None,
    tag: Annotated[
        Optional[list[str]],
        typer.Option("--tag", "-t", help="Tag for the article (repeatable)."),
    ] = None,
    content: Annotated[Optional[str], typer.Option("--content", help="Article HTML.")] = None,
    file: Annotated[
        Optional[Path],
        typer.Option("--file", "-f", help="Read the article HTML from a file.", exists=True, dir_okay=False),
    ] = None,
) -> None:
    """Add an article to the magazine."""
    config = _config(ctx)
    if file is not None:
        content = file.read_text(encoding="utf-8")
    elif content is None:
        content = _read_block("Enter article content")

    category = category or config.content.default_category
    try:
        validate_article(title, content, category, author, tag)
        article_id = _store(ctx).add_article(title, content, category, author, tag or [])
    except MagazeenError as exc:
        _fail(exc)
    console.print(f"[green]Added article[/green] {escape(repr(title))} ({article_id})")


@app.command(name="add-interest")
def add_interest_cmd(
    ctx: typer.Context,
    topic: Annotated[str, typer.Argument(help="Interest or topic.")],
    description: Annotated[str, typer.Argument(help="What draws you to it.")],
    priority: Annotated[str, typer.Option("--priority", "-p", help="low, medium or high.")] = "medium",
) -> None:
    """Record something you are currently exploring."""
    try:
        validate_interest(topic, description, priority)
        _store(ctx).add_interest(topic, description, priority)
    except MagazeenError as exc:
        _fail(exc)
    console.print(f"[green]Added interest[/green] {escape(repr(topic))}")


@app.command(name="add-highlight")
def add_highlight_cmd(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="Highlight title.")],
    category: Annotated[Optional[str], typer.Option("--category", help="Highlight category.")] = None,
    insights: Annotated[str, typer.Option("--insights", "-i", help="Key insights.")] = "",
    conversation: Annotated[
        Optional[str],
        typer.Option("--conversation", help="Conversation excerpt."),
    ] = None,
) -> None:
    """Save a highlight from a conversation."""
    config = _config(ctx)
    if conversation is None:
        conversation = _read_block("Enter conversation excerpt")
    category = category or config.content.default_category
    try:
        validate_chat_highlight(title, conversation, insights, category)
        _store(ctx).add_chat_highlight(title, conversation, insights, category)
    except MagazeenError as exc:
        _fail(exc)
    console.print(f"[green]Added chat highlight[/green] {escape(repr(title))}")


# ── Claude chats ─────────────────────────────────────────────────


@app.command(name="import-chats")
def import_chats_cmd(
    ctx: typer.Context,
    export: Annotated[Path, typer.Argument(help="Claude conversations JSON export.")],
) -> None:
    """Import chats from a Claude data export."""
    try:
        added = _store(ctx).import_claude_chats(export)
    except MagazeenError as exc:
        _fail(exc)
    if added:
        console.print(f"[green]Imported {added} new chat(s)[/green] from {export}")
    else:
        console.print(f"[yellow]No new chats imported[/yellow] from {export}")


@app.command(name="chats")
def chats_cmd(
    ctx: typer.Context,
    toggle: Annotated[
        Optional[list[str]],
        typer.Option("--toggle", help="Flip selection of a chat id (repeatable)."),
    ] = None,
    page: Annotated[int, typer.Option("--page", min=1, help="Page of the chat list.")] = 1,
    page_size: Annotated[int, typer.Option("--page-size", min=1)] = 10,
) -> None:
    """List imported chats and toggle which go into the magazine."""
    store = _store(ctx)
    for chat_id in toggle or []:
        try:
            chat = store.toggle_chat(chat_id)
        except KeyError:
            _fail(MagazeenError(f"Chat with ID {chat_id} not found"))
        state = "selected" if chat.selected else "deselected"
        console.print(f"Chat {escape(repr(chat.title))} {state}.")

    chats = store.content.claude_chats
    if not chats:
        console.print("[yellow]No Claude chats found.[/yellow] Import them with `magazeen import-chats`.")
        raise typer.Exit(0)

    total_pages = (len(chats) + page_size - 1) // page_size
    page = min(page, total_pages)
    start = (page - 1) * page_size

    table = Table(title=f"Claude chats (page {page}/{total_pages})")
    table.add_column("#", justify="right")
    table.add_column("Sel")
    table.add_column("Title")
    table.add_column("ID")
    for number, chat in enumerate(chats[start : start + page_size], start=start + 1):
        table.add_row(str(number), "[X]" if chat.selected else "[ ]", escape(chat.title), chat.id)
    console.print(table)
    console.print(f"Total chats: {len(chats)} (selected: {len(store.selected_chats())})")


# ── Inspection ───────────────────────────────────────────────────


@app.command(name="show")
def show_cmd(ctx: typer.Context) -> None:
    """Summarise the current magazine content."""
    store = _store(ctx)
    content = store.content

    console.print("[bold]Current Content[/bold]")
    console.print(f"  Articles: {len(content.articles)}")
    console.print(f"  Interests: {len(content.interests)}")
    console.print(f"  Chat Highlights: {len(content.chat_highlights)}")
    console.print(
        f"  Claude Chats: {len(content.claude_chats)} (Selected: {len(store.selected_chats())})"
    )

    if content.articles:
        console.print()
        console.print("[bold]Recent Articles:[/bold]")
        for article in content.articles[-3:]:
            console.print(f"  - {escape(article.title)} ({escape(article.category)}) - {article.word_count} words")

    if content.interests:
        console.print()
        console.print("[bold]Recent Interests:[/bold]")
        for interest in content.interests[-3:]:
            console.print(f"  - {escape(interest.topic)} ({interest.priority.value} priority)")

    info = store.page_limit_info()
    limit = str(info.page_limit) if info.has_limit else "none"
    console.print()
    console.print(f"Estimated pages: {info.current_pages} (limit: {limit}, {info.total_words} words)")


@app.command(name="page-limit")
def page_limit_cmd(
    ctx: typer.Context,
    limit: Annotated[
        Optional[int],
        typer.Argument(help="New page limit; 0 removes the limit. Omit to show."),
    ] = None,
) -> None:
    """Show or set the page limit."""
    store = _store(ctx)
    if limit is not None:
        try:
            validate_page_limit(limit or None)
        except MagazeenError as exc:
            _fail(exc)
        store.set_page_limit(limit)

    info = store.page_limit_info()
    if info.has_limit:
        console.print(
            f"Page limit: {info.page_limit} "
            f"({info.current_pages} used, {info.remaining_pages} remaining, "
            f"{info.words_per_page} words/page)"
        )
    else:
        console.print(f"No page limit ({info.current_pages} page(s), {info.total_words} words)")


@app.command(name="sections")
def sections_cmd(
    ctx: typer.Context,
    cluster: Annotated[
        Optional[bool],
        typer.Option("--cluster/--no-cluster", help="Group related content into sections."),
    ] = None,
    min_similarity: Annotated[
        Optional[float],
        typer.Option("--min-similarity", min=0, max=100, help="Clustering threshold (0-100)."),
    ] = None,
) -> None:
    """Preview how content would be grouped, without writing anything."""
    config = _config(ctx)
    store = _store(ctx)
    generator = MagazineGenerator(store, config)
    options = generator.resolve_options(cluster, min_similarity)
    result = cluster_with_metrics(store.to_content_items(), options)

    for section in result.sections:
        console.print(f"[bold]{escape(section.name)}[/bold] ({len(section.items)})")
        for item in section.items:
            category = item.category or "-"
            console.print(f"  - {escape(item.title)} [dim]({escape(category)})[/dim]")

    metrics = result.metrics
    if metrics.clustered:
        console.print(
            f"\n{metrics.total_items} item(s) in {metrics.cluster_count} section(s), "
            f"{metrics.average_cluster_size:.1f} per section"
        )


# ── Output ───────────────────────────────────────────────────────


@app.command(name="generate")
def generate_cmd(
    ctx: typer.Context,
    cluster: Annotated[
        Optional[bool],
        typer.Option("--cluster/--no-cluster", help="Group related content into sections."),
    ] = None,
    min_similarity: Annotated[
        Optional[float],
        typer.Option("--min-similarity", min=0, max=100, help="Clustering threshold (0-100)."),
    ] = None,
    output_dir: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Directory for the EPUB file."),
    ] = None,
) -> None:
    """Generate the magazine EPUB."""
    config = merge_cli_overrides(_config(ctx), output_dir=output_dir)
    generator = MagazineGenerator(_store(ctx), config)
    try:
        result = generator.generate(cluster, min_similarity)
    except (MagazeenError, OSError) as exc:
        _fail(exc)

    console.print(f"[bold green]Magazine generated:[/bold green] {result.path}")
    for section in result.sections:
        console.print(f"  - {escape(section.name)}: {len(section.items)} item(s)")


@app.command(name="template")
def template_cmd(
    ctx: typer.Context,
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing content file.")] = False,
) -> None:
    """Create a starter content file."""
    path = _config(ctx).content_path
    if path.exists() and not force:
        console.print(f"[yellow]{path} already exists.[/yellow] Use --force to overwrite it.")
        raise typer.Exit(1)
    create_template(path)
    console.print(f"[green]Template created![/green] Edit {path} to customize your magazine.")


@app.command(name="serve")
def serve_cmd(
    ctx: typer.Context,
    host: Annotated[Optional[str], typer.Option("--host", help="Interface to bind.")] = None,
    port: Annotated[Optional[int], typer.Option("--port", help="Port to listen on.")] = None,
) -> None:
    """Run the upload web app."""
    import uvicorn

    from magazeen.server import create_app

    config = merge_cli_overrides(_config(ctx), host=host, port=port)
    console.print(f"Server listening at http://{config.server.host}:{config.server.port}")
    uvicorn.run(create_app(config), host=config.server.host, port=config.server.port)


# ── Scratch file ─────────────────────────────────────────────────


@scratch_app.command(name="export")
def scratch_export_cmd(
    ctx: typer.Context,
    path: Annotated[Optional[Path], typer.Argument(help="Scratch file to write.")] = None,
) -> None:
    """Write chat selection and order to a scratch file."""
    target = path or _config(ctx).scratch_path
    try:
        result = export_scratch(_store(ctx), target)
    except MagazeenError as exc:
        _fail(exc)
    console.print(
        f"[green]Scratch file written:[/green] {result.path} "
        f"({result.total_chats} chats, {result.selected_chats} selected)"
    )


@scratch_app.command(name="apply")
def scratch_apply_cmd(
    ctx: typer.Context,
    path: Annotated[Optional[Path], typer.Argument(help="Scratch file to read.")] = None,
) -> None:
    """Apply chat selection and order from a scratch file."""
    source = path or _config(ctx).scratch_path
    try:
        result = apply_scratch(_store(ctx), source)
    except MagazeenError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        for line in getattr(exc, "errors", []):
            console.print(f"  {line}")
        raise typer.Exit(1)

    console.print(
        f"[green]Scratch file applied:[/green] {result.selected_count} selected, "
        f"{result.deselected_count} deselected"
    )
    if result.not_found_ids:
        console.print(f"[yellow]Not found:[/yellow] {', '.join(result.not_found_ids)}")


if __name__ == "__main__":
    app()
