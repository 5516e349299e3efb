"""CLI interface for forumstore."""

import json
import logging
import sys
from enum import StrEnum
from pathlib import Path
from typing import Annotated, Any, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from forumstore.config import ForumConfig, load_config, merge_cli_overrides
from forumstore.content.models import Post
from forumstore.content.repository import ChannelsRepo
from forumstore.errors import ForumStoreError
from forumstore.export.feed import ChannelURLMaker
from forumstore.storage.memory import MemoryDatastore

app = typer.Typer(
    name="forumstore",
    help="Manage channels and posts in a forum content store.",
    no_args_is_help=True,
)
channel_app = typer.Typer(help="Create and inspect channels.", no_args_is_help=True)
post_app = typer.Typer(help="Create, list and export posts.", no_args_is_help=True)
app.add_typer(channel_app, name="channel")
app.add_typer(post_app, name="post")

console = Console()
err_console = Console(stderr=True)


class ExportFormat(StrEnum):
    CSV = "csv"
    RSS = "rss"
    JSON = "json"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from forumstore import __version__

        console.print(f"forumstore {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .forumstore.toml file."),
    ] = None,
    store_dir: Annotated[
        Optional[Path],
        typer.Option("--store-dir", help="Directory holding the store file."),
    ] = None,
    org: Annotated[
        Optional[str],
        typer.Option("--org", help="Organization slug anchoring every key."),
    ] = None,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)."),
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
    """Forum content store - channels, posts and replies."""
    config = merge_cli_overrides(
        load_config(config_path),
        store_dir=store_dir,
        org=org,
        log_level=log_level,
    )
    logging.basicConfig(
        level=config.logging.level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    ctx.obj = config


def _repo(ctx: typer.Context) -> ChannelsRepo:
    config: ForumConfig = ctx.obj
    store = MemoryDatastore(config.store_directory)
    try:
        return ChannelsRepo(store, config.org.slug, list_limit=config.listing.limit)
    except ForumStoreError as exc:
        _fail(exc)


def _fail(exc: ForumStoreError) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {exc}")
    raise typer.Exit(code=1)


def _post_payload(post: Post) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": post.id,
        "createdAt": post.created_at.isoformat(),
        "parentPostID": post.parent_post_id,
        "commandType": post.command_type,
        "content": {"source": post.content.source},
    }
    if post.replies is not None:
        payload["replies"] = [_post_payload(reply) for reply in post.replies]
    return payload


# ── channel ──────────────────────────────────────────────────────


@channel_app.command("create")
def channel_create(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Channel slug, e.g. 'news'.")],
    description: Annotated[str, typer.Option("--description", "-d")] = "",
) -> None:
    """Create a channel."""
    try:
        channel = _repo(ctx).create_channel(slug, description)
    except ForumStoreError as exc:
        _fail(exc)
    console.print(f"Created channel [bold]{channel.slug}[/bold] ({channel.id})")


@channel_app.command("info")
def channel_info(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Channel slug.")],
) -> None:
    """Show a channel as JSON."""
    try:
        channel = _repo(ctx).get_channel_info(slug)
    except ForumStoreError as exc:
        _fail(exc)
    payload = {"id": channel.id, "slug": channel.slug, "description": channel.description}
    console.print_json(json.dumps(payload))


# ── post ─────────────────────────────────────────────────────────


@post_app.command("create")
def post_create(
    ctx: typer.Context,
    channel: Annotated[str, typer.Argument(help="Channel slug.")],
    source: Annotated[str, typer.Argument(help="Markdown source of the post.")],
    reply_to: Annotated[
        Optional[str],
        typer.Option("--reply-to", "-r", help="Id of the post being replied to."),
    ] = None,
    command_type: Annotated[str, typer.Option("--command-type")] = "",
) -> None:
    """Create a post, or a reply with --reply-to."""
    repo = _repo(ctx)
    try:
        if reply_to:
            post = repo.create_reply(channel, reply_to, source, command_type=command_type)
        else:
            post = repo.create_post(channel, source, command_type=command_type)
    except ForumStoreError as exc:
        _fail(exc)
    console.print(post.id, soft_wrap=True)


@post_app.command("list")
def post_list(
    ctx: typer.Context,
    channel: Annotated[str, typer.Argument(help="Channel slug.")],
) -> None:
    """List posts in a channel."""
    try:
        posts = _repo(ctx).list_posts_in_channel(channel)
    except ForumStoreError as exc:
        _fail(exc)

    table = Table(title=f"Posts in {channel}")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Created")
    table.add_column("Reply to")
    table.add_column("Content")
    for post in posts:
        table.add_row(post.id, str(post.created_at), post.parent_post_id, post.content.source)
    console.print(table)


@post_app.command("export")
def post_export(
    ctx: typer.Context,
    channel: Annotated[str, typer.Argument(help="Channel slug.")],
    fmt: Annotated[ExportFormat, typer.Option("--format", "-f")] = ExportFormat.CSV,
    replies: Annotated[
        bool,
        typer.Option("--replies/--no-replies", help="Group replies under their root posts."),
    ] = False,
    max_count: Annotated[
        Optional[int],
        typer.Option("--max-count", "-n", min=1, help="Number of posts scanned."),
    ] = None,
    base_url: Annotated[
        Optional[str],
        typer.Option("--base-url", help="Base URL for RSS links."),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write to a file instead of stdout."),
    ] = None,
) -> None:
    """Export a channel's posts as CSV, RSS or JSON."""
    config = merge_cli_overrides(ctx.obj, max_count=max_count, feed_base_url=base_url)
    connection = _repo(ctx).posts_connection(
        channel,
        include_replies=replies,
        max_count=config.listing.max_count,
    )

    sink = output.open("w", encoding="utf-8", newline="") if output else sys.stdout
    try:
        if fmt == ExportFormat.CSV:
            connection.write_to_csv(sink)
        elif fmt == ExportFormat.RSS:
            url_maker = ChannelURLMaker(config.feed.base_url, config.org.slug, channel)
            feed = connection.make_feed(
                url_maker, title=config.feed.title, description=config.feed.description
            )
            sink.write(feed.to_rss() + "\n")
        else:
            posts = [_post_payload(p) for p in connection.all()]
            sink.write(json.dumps(posts, indent=2) + "\n")
    except ForumStoreError as exc:
        _fail(exc)
    finally:
        if output:
            sink.close()

    if connection.stats.dropped_replies:
        err_console.print(
            f"[yellow]{connection.stats.dropped_replies} replies outside the "
            "scanned window were left out.[/yellow]"
        )


if __name__ == "__main__":
    app()
