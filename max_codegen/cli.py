import logging
import os

import click

from .aggregator import aggregate
from .chat import ChatModelError, handle_turn
from .memory import InMemoryConversationStore, get_store
from .sources import SOURCES, is_configured
from .summarize import FALLBACK_REPLY, summarize


@click.group()
@click.option("--log-level", default=None, help="Logging level (defaults to $LOG_LEVEL or INFO).")
def main(log_level):
    logging.basicConfig(
        level=(log_level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("query")
@click.option("--source", "sources", multiple=True, help="Adapter name; repeat to select several.")
@click.option("--no-summary", is_flag=True, default=False, help="Skip the model synopsis.")
def search(query, sources, no_summary):
    """Aggregate live results for QUERY."""
    results = aggregate(query, list(sources) or None)
    reply = FALLBACK_REPLY if no_summary else summarize(query, results)
    click.echo(reply)
    click.echo("")
    for i, r in enumerate(results.results, start=1):
        click.echo(f"{i:2d}. [{r.source}] {r.title}")
        if r.url:
            click.echo(f"    {r.url}")
    if results.images:
        click.echo("")
        click.echo("Images:")
        for url in results.images:
            click.echo(f"  {url}")


@main.command()
@click.argument("prompt")
@click.option("--user", "user_id", required=True, help="User id owning the conversation.")
@click.option("--project", default=None, help="Project name remembered with the conversation.")
@click.option("--memory", is_flag=True, default=False, help="Keep the conversation in memory only.")
def chat(prompt, user_id, project, memory):
    """Run one chat turn for --user."""
    store = InMemoryConversationStore() if memory else get_store()
    try:
        result = handle_turn(user_id, prompt, project=project, store=store)
    except ChatModelError as exc:
        raise click.ClickException(f"Chat model failed: {exc}")
    click.echo(result.reply)
    for card in result.news:
        click.echo(f"  - {card['title']} ({card['source']}) {card['url'] or ''}")


@main.command("sources")
def list_sources():
    """List adapters in merge priority order."""
    for name in SOURCES:
        state = "ready" if is_configured(name) else "missing credentials"
        click.echo(f"{name:12s} {state}")


if __name__ == "__main__":
    main()
