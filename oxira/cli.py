"""Click CLI entry point for Oxira.

Every tool command prints its result as JSON on stdout. Logs go to stderr.
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import click
from prometheus_client import generate_latest
from pydantic import BaseModel, ValidationError

from oxira.clients.brave import BraveSearchClient
from oxira.clients.tavily import TavilyClient
from oxira.config import Settings
from oxira.errors import NO_PROVIDER_MESSAGE, classify_error
from oxira.logging import configure_logging
from oxira.models.market import Geography
from oxira.search import Services
from oxira.tools import TOOLS

DIAGNOSE_QUERY = "project management software"


def _jsonable(result: Any) -> Any:
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json")
    if isinstance(result, list):
        return [_jsonable(item) for item in result]
    return result


def _emit(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _invoke(ctx: click.Context, tool_name: str, arguments: dict[str, Any]) -> None:
    settings: Settings = ctx.obj["settings"]
    tool = TOOLS[tool_name]

    if not settings.has_search_provider:
        click.echo(f"Error: {NO_PROVIDER_MESSAGE}", err=True)
        ctx.exit(1)

    try:
        request = tool.request_model.model_validate(arguments)
    except ValidationError as exc:
        _emit({"error": f"Invalid arguments for {tool_name}", "details": str(exc)})
        ctx.exit(2)

    services = Services.from_settings(settings)
    try:
        result = asyncio.run(tool.runner(**dict(request), services=services))
    except Exception as exc:
        _emit({"error": f"{tool.title} failed", "details": classify_error(exc)})
        ctx.exit(1)
    _emit(_jsonable(result))


def _print_metrics() -> None:
    click.echo(generate_latest().decode(), err=True, nl=False)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--metrics", "show_metrics", is_flag=True, help="Print Prometheus metrics to stderr on exit"
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, show_metrics: bool) -> None:
    """Oxira: market size, competitors, communities and pricing research."""
    ctx.ensure_object(dict)
    settings = Settings()
    log_level = "DEBUG" if verbose else settings.log_level
    configure_logging(log_level=log_level, log_format=settings.log_format)
    ctx.obj["settings"] = settings
    if show_metrics:
        ctx.call_on_close(_print_metrics)


_GEOGRAPHY = click.Choice([g.value for g in Geography], case_sensitive=False)


@cli.command("market-size")
@click.argument("industry")
@click.option("--geography", type=_GEOGRAPHY, default="global", help="Market geography")
@click.pass_context
def market_size(ctx: click.Context, industry: str, geography: str) -> None:
    """Estimate the total addressable market for an industry."""
    _invoke(ctx, "estimate_market_size", {"industry": industry, "geography": geography.lower()})


@cli.command()
@click.argument("industry")
@click.option("--product-type", default=None, help="Appended to queries, e.g. 'SaaS'")
@click.option("--max-results", default=5, type=int, help="Number of competitors (1-10)")
@click.pass_context
def competitors(
    ctx: click.Context, industry: str, product_type: str | None, max_results: int
) -> None:
    """Find product companies in an industry."""
    _invoke(
        ctx,
        "search_competitors",
        {"industry": industry, "product_type": product_type, "max_results": max_results},
    )


@cli.command()
@click.argument("target_audience")
@click.option("--topic", "topics", multiple=True, required=True, help="Topic phrase (repeatable)")
@click.pass_context
def communities(ctx: click.Context, target_audience: str, topics: tuple[str, ...]) -> None:
    """Find communities where a target audience gathers."""
    _invoke(ctx, "find_communities", {"target_audience": target_audience, "topics": list(topics)})


@cli.command()
@click.argument("url")
@click.option("--name", "competitor_name", default=None, help="Competitor label")
@click.pass_context
def pricing(ctx: click.Context, url: str, competitor_name: str | None) -> None:
    """Extract pricing from a pricing page or homepage."""
    _invoke(ctx, "extract_pricing", {"url": url, "competitor_name": competitor_name})


@cli.command()
@click.argument("business_idea")
@click.option("--segment", "target_segment", default=None, help="Target customer segment")
@click.option("--geography", type=_GEOGRAPHY, default="global", help="Market geography")
@click.option("--product-type", default=None, help="Product category, e.g. 'mobile app'")
@click.pass_context
def report(
    ctx: click.Context,
    business_idea: str,
    target_segment: str | None,
    geography: str,
    product_type: str | None,
) -> None:
    """Run the full research report for a business idea."""
    _invoke(
        ctx,
        "full_research_report",
        {
            "business_idea": business_idea,
            "target_segment": target_segment,
            "geography": geography.lower(),
            "product_type": product_type,
        },
    )


@cli.command("run")
@click.argument("tool_name", type=click.Choice(sorted(TOOLS)))
@click.argument("arguments", default="{}")
@click.pass_context
def run_tool(ctx: click.Context, tool_name: str, arguments: str) -> None:
    """Run a tool by name with a JSON object of arguments."""
    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"not valid JSON: {exc}", param_hint="ARGUMENTS") from exc
    if not isinstance(parsed, dict):
        raise click.BadParameter("must be a JSON object", param_hint="ARGUMENTS")
    _invoke(ctx, tool_name, parsed)


def _mask(key: str) -> str:
    if not key:
        return "-- not set"
    return f"set ({key[:4]}...)" if len(key) > 8 else "set"


@cli.command()
@click.pass_context
def diagnose(ctx: click.Context) -> None:
    """Show configured search providers and run one test search with each."""
    settings: Settings = ctx.obj["settings"]
    click.echo(f"  {'BRAVE_SEARCH_API_KEY':22s} {_mask(settings.brave_search_api_key)}")
    click.echo(f"  {'TAVILY_API_KEY':22s} {_mask(settings.tavily_api_key)}")

    providers = [
        BraveSearchClient(settings.brave_search_api_key, timeout=settings.search_timeout_seconds),
        TavilyClient(settings.tavily_api_key, timeout=settings.search_timeout_seconds),
    ]
    failures = 0
    for provider in providers:
        if not provider.is_available:
            continue
        try:
            hits = asyncio.run(provider.search(DIAGNOSE_QUERY, 3))
        except Exception as exc:
            failures += 1
            click.echo(f"  {provider.name:22s} ERROR {classify_error(exc)}")
            continue
        first = f" first: {hits[0].title} {hits[0].url}" if hits else ""
        click.echo(f"  {provider.name:22s} OK {len(hits)} results{first}")

    if not settings.has_search_provider:
        click.echo(NO_PROVIDER_MESSAGE, err=True)
        sys.exit(1)
    if failures:
        sys.exit(1)
