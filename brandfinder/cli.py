"""CLI interface for brandfinder."""

import asyncio
import json
import click
import logging
import warnings
from pathlib import Path
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn, TimeElapsedColumn

# Suppress noisy library warnings/errors (socket, whois, dns)
warnings.filterwarnings("ignore")
logging.getLogger("whois").setLevel(logging.CRITICAL)
logging.getLogger("dns").setLevel(logging.CRITICAL)

from . import __version__
from .checkers import AvailabilityService
from .config import DEFAULT_CONFIG_PATH, load_config
from .exceptions import BrandFinderError
from .generators import CandidateGenerator, GenerationOptions
from .lexicon import load_lexicon
from .models import KEYWORD_MODES, KEYWORD_POSITIONS, STYLES, SearchControls, SearchRequest
from .scoring import BrandScorer, MeaningEngine, ScoringContext
from .search import SearchOrchestrator
from .utils import WordValidator


console = Console()


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )
    logging.getLogger("whois").setLevel(logging.CRITICAL)
    logging.getLogger("dns").setLevel(logging.CRITICAL)


def write_json(output: str, payload):
    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(payload, f, indent=2)
    console.print(f"[green]Saved to {output}[/green]")


def build_controls(seed, keyword_mode, position, style, blocklist, allowlist, allow_hyphen,
                   allow_numbers, meaning_first, two_word, suffix, show_any) -> SearchControls:
    return SearchControls(
        seed=seed,
        must_include_keyword=keyword_mode,
        keyword_position=position,
        style=style,
        blocklist=blocklist or (),
        allowlist=allowlist or (),
        allow_hyphen=allow_hyphen,
        allow_numbers=allow_numbers,
        meaning_first=meaning_first,
        prefer_two_word_brands=two_word,
        allow_vibe_suffix=suffix,
        show_any_available=show_any,
    )


def scoring_context(request: SearchRequest, lexicon) -> ScoringContext:
    concepts = MeaningEngine(lexicon).select_concepts(request.keyword, request.industry, request.vibe)
    return ScoringContext(
        keyword_tokens=lexicon.parse_keyword_tokens(request.keyword),
        controls=request.controls,
        industry=request.industry,
        vibe=request.vibe,
        concepts=tuple(concepts),
    )


@click.group()
@click.version_option(version=__version__)
@click.option('--config', 'config_path', default=DEFAULT_CONFIG_PATH, help='Path to config YAML')
@click.option('--verbose', '-v', is_flag=True, help='Show debug logging')
@click.pass_context
def cli(ctx, config_path, verbose):
    """brandfinder - Find brandable names with an available domain."""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj['settings'] = load_config(config_path)


@cli.command()
@click.argument('keyword')
@click.option('--industry', '-i', default=None, help='Industry (e.g. "Technology & Software")')
@click.option('--vibe', default=None, help='Vibe (e.g. Minimal, Luxury, Playful)')
@click.option('--max-length', default=10, help='Maximum name length')
@click.option('--count', '-n', default=30, help='Number of names to show')
@click.option('--seed', default=None, help='Seed for reproducible output')
@click.option('--style', type=click.Choice(STYLES), default='real_words')
@click.option('--output', '-o', default=None, help='Output file (JSON)')
def generate(keyword, industry, vibe, max_length, count, seed, style, output):
    """Generate and rank name candidates without checking domains."""
    lexicon = load_lexicon()
    controls = SearchControls(seed=seed, style=style)
    request = SearchRequest(keyword=keyword, industry=industry, vibe=vibe,
                            max_length=max_length, controls=controls)
    validator = WordValidator(max_length=max_length, lexicon=lexicon)

    with console.status("[bold green]Generating names..."):
        pool = CandidateGenerator(lexicon).generate(request, GenerationOptions(max_length=max_length))
        survivors = [c for c in pool.candidates if validator.is_valid(c.name, controls)]
        ranked = BrandScorer(scoring_context(request, lexicon), lexicon=lexicon).rank(survivors)

    console.print(f"[green]Generated:[/green] {len(pool.candidates)} candidates, "
                  f"{len(survivors)} passed filters, {len(ranked)} passed the keyword gate")

    table = Table(title=f"Top names for '{keyword}'")
    table.add_column("Name", style="cyan")
    table.add_column("Score", justify="right", style="green")
    table.add_column("Band")
    table.add_column("Strategy", style="dim")
    table.add_column("Why it works")
    for pick in ranked[:count]:
        table.add_row(pick.name, f"{pick.score:.1f}", pick.quality_band, pick.strategy, pick.why_it_works)
    console.print(table)

    if output:
        write_json(output, [pick.to_dict() for pick in ranked[:count]])


@cli.command()
@click.argument('name')
@click.option('--keyword', '-k', default='', help='Keyword the name should reflect')
@click.option('--industry', '-i', default=None)
@click.option('--vibe', default=None)
@click.option('--style', type=click.Choice(STYLES), default='real_words')
def score(name, keyword, industry, vibe, style):
    """Score a single name."""
    lexicon = load_lexicon()
    request = SearchRequest(keyword=keyword, industry=industry, vibe=vibe,
                            controls=SearchControls(style=style))
    result = BrandScorer(scoring_context(request, lexicon), lexicon=lexicon).score_name(name)

    console.print(f"\n[bold]Name:[/bold] {result.name}")
    console.print(f"[bold green]Total Score:[/bold green] {result.score:.1f} ({result.quality_band})")
    console.print(f"[bold]Brandable:[/bold] {result.brandable_score}/10")
    console.print(f"[bold]Meaning:[/bold] {result.meaning_score}/100  {result.meaning_breakdown}")
    console.print(f"\n[bold]Breakdown:[/bold]")
    for factor, value in result.score_breakdown.items():
        console.print(f"  {factor.replace('_', ' ').capitalize():<18} {value}")
    console.print(f"\n[dim]{result.why_it_works}[/dim]")


@cli.command()
@click.argument('domains', nargs=-1, required=True)
@click.option('--tlds', '-t', default='com', help='TLDs for bare names (comma-separated)')
@click.option('--verify/--no-verify', default=None, help='Verify with WHOIS')
@click.option('--output', '-o', default=None, help='Output file (JSON)')
@click.pass_context
def check(ctx, domains, tlds, verify, output):
    """Check domain availability."""
    settings = ctx.obj['settings']
    tld_list = [t.strip().lstrip('.') for t in tlds.split(',') if t.strip()]
    targets = []
    for domain in domains:
        domain = domain.strip().lower()
        targets.extend([domain] if '.' in domain else [f"{domain}.{tld}" for tld in tld_list])

    service = AvailabilityService.from_settings(settings.availability)
    if verify is not None:
        service.verify_with_whois = verify

    availability = settings.availability
    with console.status(f"[bold green]Checking {len(targets)} domains..."):
        results = asyncio.run(service.check_availability(
            targets,
            concurrency=availability.concurrency,
            max_retries=availability.max_retries,
            backoff_ms=availability.backoff_ms,
            ttl_seconds=availability.ttl_seconds,
        ))

    table = Table(title="Availability")
    table.add_column("Domain", style="cyan")
    table.add_column("Available", justify="center")
    table.add_column("Method", style="dim")
    table.add_column("Error", style="yellow")
    for result in results:
        if result.error:
            icon = "[yellow]?[/yellow]"
        elif result.available:
            icon = "[green]Y[/green]"
        else:
            icon = "[red]N[/red]"
        table.add_row(result.domain, icon, result.method, result.error or "")
    console.print(table)

    if output:
        write_json(output, [result.to_dict() for result in results])


@cli.command()
@click.argument('keywords')
@click.option('--industry', '-i', default=None, help='Industry (e.g. "Sustainability")')
@click.option('--vibe', default=None, help='Vibe (e.g. Minimal, Luxury, Playful)')
@click.option('--max-length', default=None, type=int, help='Maximum name length')
@click.option('--target', '-n', default=None, type=int, help='Number of available names to find (1-10)')
@click.option('--seed', default=None, help='Seed for reproducible generation')
@click.option('--keyword-mode', type=click.Choice(KEYWORD_MODES), default='exact')
@click.option('--position', type=click.Choice(KEYWORD_POSITIONS), default='anywhere')
@click.option('--style', type=click.Choice(STYLES), default='real_words')
@click.option('--block', 'blocklist', multiple=True, help='Term names must not contain')
@click.option('--allow', 'allowlist', multiple=True, help='Root names must contain')
@click.option('--allow-hyphen', is_flag=True)
@click.option('--allow-numbers', is_flag=True)
@click.option('--meaning-first', is_flag=True, help='Prefer names with a clear meaning')
@click.option('--two-word', is_flag=True, help='Prefer two-word brands')
@click.option('--suffix', is_flag=True, help='Allow tasteful vibe suffixes')
@click.option('--show-any', is_flag=True, help='Check names below the quality floor too')
@click.option('--output', '-o', default=None, help='Output file (JSON)')
@click.pass_context
def find(ctx, keywords, industry, vibe, max_length, target, seed, keyword_mode, position, style,
         blocklist, allowlist, allow_hyphen, allow_numbers, meaning_first, two_word, suffix,
         show_any, output):
    """Full pipeline: generate, score, check and relax until enough names are free."""
    settings = ctx.obj['settings']
    controls = build_controls(seed, keyword_mode, position, style, blocklist, allowlist, allow_hyphen,
                              allow_numbers, meaning_first, two_word, suffix, show_any)
    request = SearchRequest(
        keyword=keywords,
        industry=industry,
        vibe=vibe,
        max_length=max_length or settings.search.max_length,
        target_count=target or settings.search.target_count,
        controls=controls,
    )
    orchestrator = SearchOrchestrator(AvailabilityService.from_settings(settings.availability), settings)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console
    ) as progress:
        task = progress.add_task("[cyan]Searching...", total=request.target_count)

        def update(stage_label, found, wanted, checked):
            progress.update(task, completed=found, total=wanted,
                            description=f"[cyan]{stage_label}[/cyan] ({checked} checked)")

        try:
            result = asyncio.run(orchestrator.run(request, on_progress=update))
        except BrandFinderError as e:
            progress.stop()
            console.print(f"[red]{e}[/red]")
            ctx.exit(1)

    summary = result.summary
    if result.picks:
        table = Table(title=f"Available .{settings.search.primary_tld} names")
        table.add_column("Domain", style="cyan bold")
        table.add_column("Score", justify="right", style="green")
        table.add_column("Band")
        table.add_column("Meaning", justify="right")
        table.add_column("Why it works")
        for pick in result.picks:
            table.add_row(f"{pick.name}.{settings.search.primary_tld}", f"{pick.score:.1f}",
                          pick.quality_band, f"{pick.meaning_score:.0f}", pick.why_it_works)
        console.print(table)
    else:
        console.print("[yellow]No available domains found.[/yellow]")

    console.print(f"\n[bold]{summary.explanation}[/bold]")
    console.print(f"\n[bold]Summary:[/bold]")
    console.print(f"  Stages run: {summary.attempts}/{summary.max_attempts}")
    console.print(f"  Generated: {summary.generated_candidates}, passed filters: {summary.passed_filters}")
    console.print(f"  Checked: {summary.checked_availability} (hit rate {summary.availability_hit_rate}%)")
    console.print(f"  Quality threshold: {summary.quality_threshold}")
    if summary.provider_errors:
        console.print(f"  Provider errors: [yellow]{summary.provider_errors}[/yellow]")
    if summary.relaxations_applied:
        console.print(f"  Relaxed: {', '.join(summary.relaxations_applied)}")
    if summary.top_rejected_reasons:
        reasons = ', '.join(f"{reason} ({count})" for reason, count in summary.top_rejected_reasons)
        console.print(f"  Top rejections: [dim]{reasons}[/dim]")

    if summary.near_misses:
        console.print("\n[bold blue]Near misses:[/bold blue]")
        for option in summary.near_misses:
            console.print(f"  {option.name}: " + ", ".join(f".{tld}" for tld in option.available_tlds))

    if summary.suggestions:
        console.print(f"\n[bold]Try:[/bold] {', '.join(summary.suggestions)}")

    if output:
        write_json(output, result.to_dict())


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
