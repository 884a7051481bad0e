#!/usr/bin/env python3
"""
Developer CLI for namefinder.

Usage:
    nf find "keyword"           - Search for available brandable names
    nf check domain [domain..]  - Check availability of specific domains
    nf config PATH              - Write the default settings to PATH
"""

import asyncio
from pathlib import Path
from typing import Optional, Tuple

import click
from loguru import logger
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ..engine.availability import AvailabilityResolver
from ..engine.config import AutoFindSettings
from ..engine.errors import NameFinderError
from ..engine.models import (
    AutoFindControls, AutoFindRequest, AutoFindResult, KeywordInclusion, KeywordPosition, NameStyle,
)
from ..engine.orchestrator import AutoFindOrchestrator

console = Console()


def load_settings(config: Optional[str]) -> AutoFindSettings:
    return AutoFindSettings.load(Path(config) if config else None)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Show engine debug logs")
def cli(verbose: bool):
    """namefinder - brandable domain name discovery."""
    if not verbose:
        logger.remove()
        logger.add(lambda msg: console.print(msg, end="", markup=False, highlight=False), level="WARNING")


@cli.command()
@click.argument("keyword")
@click.option("--industry", "-i", help="Industry, e.g. 'Technology'")
@click.option("--vibe", "-b", type=click.Choice(["luxury", "futuristic", "playful", "trustworthy", "minimal"]))
@click.option("--max-length", "-l", default=10, help="Maximum name length (without TLD)")
@click.option("--target", "-n", default=5, help="How many available names to find")
@click.option("--style", "-s", type=click.Choice([s.value for s in NameStyle]), default=NameStyle.REAL_WORDS.value)
@click.option("--keyword-mode", type=click.Choice([k.value for k in KeywordInclusion]),
              default=KeywordInclusion.PARTIAL.value, help="How literally the keyword must appear")
@click.option("--position", type=click.Choice([p.value for p in KeywordPosition]),
              default=KeywordPosition.ANYWHERE.value, help="Where the keyword goes")
@click.option("--seed", help="Seed for reproducible generation")
@click.option("--two-word", is_flag=True, help="Prefer two-word brands")
@click.option("--allow-suffix", is_flag=True, help="Allow vibe-themed suffixes")
@click.option("--any", "show_any", is_flag=True, help="Show any available name, ignoring quality gates")
@click.option("--block", multiple=True, help="Substring to block (repeatable)")
@click.option("--config", "-c", type=click.Path(exists=True), help="Config file path")
def find(keyword: str,
         industry: Optional[str],
         vibe: Optional[str],
         max_length: int,
         target: int,
         style: str,
         keyword_mode: str,
         position: str,
         seed: Optional[str],
         two_word: bool,
         allow_suffix: bool,
         show_any: bool,
         block: Tuple[str, ...],
         config: Optional[str]):
    """Find available names for KEYWORD."""
    request = AutoFindRequest(
        keyword=keyword,
        industry=industry,
        vibe=vibe,
        max_length=max_length,
        target_count=target,
        controls=AutoFindControls(
            seed=seed,
            must_include_keyword=KeywordInclusion(keyword_mode),
            keyword_position=KeywordPosition(position),
            style=NameStyle(style),
            blocklist=list(block),
            prefer_two_word_brands=two_word,
            allow_vibe_suffix=allow_suffix,
            show_any_available=show_any,
        ),
    )

    try:
        orchestrator = AutoFindOrchestrator(settings=load_settings(config))
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            console=console
        ) as progress:
            progress.add_task(description="Searching...", total=None)
            result = asyncio.run(orchestrator.run(request))
    except NameFinderError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Search cancelled[/yellow]")
        return

    display_result(result)


def display_result(result: AutoFindResult):
    """Display picks and the run summary."""
    summary = result.summary

    if summary.validation_errors:
        console.print("[red]Invalid request:[/red]")
        for problem in summary.validation_errors:
            console.print(f"  • {problem}")
        return

    if result.picks:
        table = Table(title=f"Available names ({summary.elapsed_ms:.0f}ms)")
        table.add_column("Domain", style="cyan")
        table.add_column("Score", justify="right")
        table.add_column("Band", style="magenta")
        table.add_column("Meaning", no_wrap=False)
        table.add_column("Why it works", no_wrap=False)

        for pick in result.picks:
            band_color = {"high": "green", "medium": "yellow", "low": "red"}.get(pick.quality_band.value, "white")
            table.add_row(
                pick.domain or pick.name,
                f"{pick.score:.1f}",
                f"[{band_color}]{pick.quality_band.value}[/{band_color}]",
                pick.meaning_breakdown,
                pick.why_it_works,
            )
        console.print(table)
    else:
        console.print("[yellow]No available names found[/yellow]")

    console.print(f"\n{summary.explanation}")
    console.print(
        f"[dim]{summary.checking_progress} | attempts {summary.attempts}/{summary.max_attempts} | "
        f"hit rate {summary.availability_hit_rate:.1f}% | {summary.terminated_by.value}[/dim]"
    )

    if summary.relaxations_applied:
        console.print("\n[bold]Relaxations:[/bold]")
        for label in summary.relaxations_applied:
            console.print(f"  • {label}")

    if summary.top_rejected_reasons:
        reasons = ", ".join(f"{reason} ({count})" for reason, count in summary.top_rejected_reasons)
        console.print(f"\n[bold]Top rejections:[/bold] {reasons}")

    if summary.near_misses:
        console.print("\n[bold]Near misses:[/bold]")
        for miss in summary.near_misses:
            tlds = ", ".join(f".{tld}" for tld in miss.available_tlds)
            console.print(f"  • {miss.name} available on {tlds}")

    if summary.suggestions:
        console.print("\n[bold]Suggestions:[/bold]")
        for s in summary.suggestions:
            console.print(f"  • {s}")


@cli.command()
@click.argument("domains", nargs=-1, required=True)
@click.option("--config", "-c", type=click.Path(exists=True), help="Config file path")
def check(domains: Tuple[str, ...], config: Optional[str]):
    """Check availability of DOMAINS."""
    resolver = AvailabilityResolver.from_config(load_settings(config).resolver)
    results = asyncio.run(resolver.check_availability_batch(domains))

    table = Table(title="Availability")
    table.add_column("Domain", style="cyan")
    table.add_column("Available")
    table.add_column("Provider", style="magenta")
    table.add_column("Confidence")
    table.add_column("Latency", justify="right")
    table.add_column("Error", style="red")

    for r in results:
        table.add_row(
            r.domain,
            "[green]yes[/green]" if r.available else "[red]no[/red]",
            r.provider,
            r.confidence.value,
            f"{r.latency_ms:.0f}ms",
            r.error or "",
        )
    console.print(table)


@cli.command(name="config")
@click.argument("path", type=click.Path(dir_okay=False))
def write_config(path: str):
    """Write the default settings to PATH."""
    AutoFindSettings().save(Path(path))
    console.print(f"[green]✓[/green] Wrote default settings to {path}")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
