#!/usr/bin/env python3
"""
SheetBlog - Spreadsheet-Backed Blog Content
===========================================

Operator CLI for checking configuration and inspecting the post pipeline.

Usage:
    python main.py --help                    # Show all commands
    python main.py check-config              # Validate configuration
    python main.py load                      # Load and list published posts
    python main.py load --search react       # Approximate search
    python main.py show SLUG                 # Show one post
    python main.py clear-cache               # Drop the cached snapshot
"""

import sys
import asyncio
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from sheetblog.config.settings import get_settings, load_settings
from sheetblog.processing.pipeline import PostPipeline, build_cache
from sheetblog.processing.views import (
    category_counts,
    filter_by_categories,
    search_posts,
    sort_by_date,
)
from sheetblog.utils.logging import configure_application_logging, get_logger_for_component
from sheetblog.utils.exceptions import ConfigurationError, get_user_friendly_message, handle_exception
from sheetblog.utils.validators import SourceValidator

console = Console()


def _setup_logging(debug: bool) -> None:
    settings = get_settings()
    configure_application_logging(
        log_level="DEBUG" if debug else settings.get_effective_log_level(),
        log_file=settings.logging.file_path,
        enable_console=settings.logging.console_logging,
        structured_logging=settings.logging.structured_logging,
        max_file_size=settings.logging.max_file_size_mb * 1024 * 1024,
        backup_count=settings.logging.backup_count,
    )


@click.group(invoke_without_command=True)
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, debug):
    """SheetBlog - spreadsheet-backed blog content pipeline."""
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        return

    _setup_logging(debug)


@cli.command()
def check_config():
    """Validate configuration and environment variables."""
    console.print("[bold blue]🔧 Checking SheetBlog Configuration[/bold blue]")

    try:
        settings = load_settings()
    except ConfigurationError as e:
        console.print(f"[bold red]❌ {escape(str(e))}[/bold red]")
        sys.exit(1)

    table = Table(title="Configuration Status")
    table.add_column("Component", style="cyan")
    table.add_column("Details")

    sources = settings.sources
    table.add_row("Primary source", sources.primary_url or "(not configured)")
    fallback_kind = "remote" if SourceValidator.is_remote(sources.fallback_url) else "local file"
    table.add_row("Fallback source", f"{sources.fallback_url} ({fallback_kind})")
    table.add_row("Request timeout", f"{sources.request_timeout_ms} ms")

    cache = settings.cache
    if cache.enabled:
        table.add_row("Cache", f"{cache.backend.value} '{cache.key}' ttl={cache.ttl_seconds}s at {cache.path}")
    else:
        table.add_row("Cache", "disabled")

    table.add_row("Last resort", settings.pipeline.last_resort.value)
    table.add_row("Log level", settings.get_effective_log_level())

    console.print(table)
    console.print("[bold green]✅ Configuration is valid[/bold green]")


@cli.command()
@click.option('--use-cache', is_flag=True, help='Serve a fresh cached snapshot when available')
@click.option('--category', '-c', multiple=True, help='Only posts in every given category')
@click.option('--search', '-s', default='', help='Approximate search term')
def load(use_cache, category, search):
    """Load published posts and list them newest first."""
    logger = get_logger_for_component("cli")
    try:
        posts = asyncio.run(PostPipeline().load_blog_posts(use_cache=use_cache))
    except Exception as e:
        error = handle_exception(e, logger, "load posts")
        console.print(f"[bold red]❌ {get_user_friendly_message(error)}[/bold red]")
        sys.exit(1)

    if search:
        posts = search_posts(posts, search)
    else:
        posts = sort_by_date(filter_by_categories(posts, category))

    table = Table(title=f"Published posts ({len(posts)})")
    table.add_column("Date", style="cyan")
    table.add_column("Slug")
    table.add_column("Title", style="green")
    table.add_column("Categories")
    table.add_column("★")

    for post in posts:
        table.add_row(post.date, post.slug, post.title, ", ".join(post.categories), "★" if post.featured else "")

    console.print(table)

    counts = category_counts(posts)
    if counts:
        console.print("Categories: " + ", ".join(f"{name} ({count})" for name, count in counts.items()))


@cli.command()
@click.argument('slug')
@click.option('--use-cache', is_flag=True, help='Serve a fresh cached snapshot when available')
def show(slug, use_cache):
    """Show a single published post by slug."""
    post = asyncio.run(PostPipeline().get_post_by_slug(slug, use_cache=use_cache))
    if post is None:
        console.print(f"[bold red]❌ No published post with slug '{slug}'[/bold red]")
        sys.exit(1)

    console.print(f"[bold green]{post.title}[/bold green]")
    console.print(f"{post.author} · {post.date} · {post.read_time}")
    console.print(f"Categories: {', '.join(post.categories) or '-'}")
    console.print(f"Image: {post.featured_image}")
    console.print()
    console.print(post.content, markup=False)


@cli.command()
def clear_cache():
    """Remove the cached post snapshot."""
    cache = build_cache(get_settings())
    if cache is None:
        console.print("[yellow]Cache is disabled[/yellow]")
        return

    cache.clear()
    console.print("[bold green]✅ Cache cleared[/bold green]")


if __name__ == '__main__':
    cli()
