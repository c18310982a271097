"""JobHackr CLI - CV analysis, job matching and automatic applications."""

import json
import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from jobhackr.analysis.keywords import DEFAULT_KEYWORDS_FILE
from jobhackr.analysis.text_analyzer import TextAnalyzer
from jobhackr.config import DATABASE_URL, DB_PATH, KEYWORDS_PATH, LOG_LEVEL, SUBSCRIPTION_LIMITS
from jobhackr.db.connection import get_connection, init_tables
from jobhackr.db.quotas import get_quota_status, set_subscription_tier
from jobhackr.jobs.search import search_all_sources
from jobhackr.jobs.sources import FileJobSource
from jobhackr.schemas.match import MatchResult
from jobhackr.schemas.quota import QuotaStatus, SubscriptionTier
from jobhackr.services.apply_service import match_jobs, run_auto_apply
from jobhackr.services.cv_service import analyze_cv_file
from jobhackr.services.profile_service import load_profile_file

app = typer.Typer(help="JobHackr - Rule-based job matching and auto-apply")
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@app.command(name="analyze-cv")
def analyze_cv(
    cv: Path = typer.Option(..., "--cv", "-c", help="Path to CV file (PDF or .txt)"),
    user_id: int | None = typer.Option(None, "--user-id", "-u", help="Owning user ID"),
    output_json: bool = typer.Option(False, "--json", help="Output the analysis as JSON"),
) -> None:
    """Analyze a CV and suggest job search criteria."""
    if not cv.exists():
        console.print(f"[red]Error: CV file not found: {cv}[/red]")
        raise typer.Exit(1)

    try:
        init_tables()
        analyzer = TextAnalyzer()
        analysis, was_cached = analyze_cv_file(cv, user_id=user_id, analyzer=analyzer)
        suggestion = analyzer.suggest_criteria(analysis)
    except Exception as e:
        console.print(f"[red]Error analyzing CV: {e}[/red]")
        raise typer.Exit(1)

    if output_json:
        output = {
            "analysis": analysis.model_dump(mode="json"),
            "suggested_criteria": suggestion.model_dump(mode="json"),
        }
        json.dump(obj=output, fp=sys.stdout, indent=2)
        sys.stdout.write("\n")
        return

    source = "cache" if was_cached else "fresh analysis"
    table = Table(title=f"CV Analysis ({source})")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Score", f"{analysis.score}/100")
    table.add_row("Experience", analysis.experience)
    table.add_row("Years", str(analysis.years_of_experience or "-"))
    table.add_row("Skills", ", ".join(analysis.skills) or "-")
    table.add_row("Job titles", ", ".join(analysis.job_titles) or "-")
    table.add_row("Industries", ", ".join(analysis.industries) or "-")
    table.add_row("Education", ", ".join(analysis.education) or "-")
    console.print(table)

    console.print(f"\n{analysis.summary}")
    if analysis.strengths:
        console.print("\n[cyan]Strengths:[/cyan]")
        for strength in analysis.strengths:
            console.print(f"  • {strength}")
    if analysis.improvements:
        console.print("\n[yellow]Improvements:[/yellow]")
        for improvement in analysis.improvements:
            console.print(f"  • {improvement}")
    if analysis.writing_suggestions:
        console.print("\n[yellow]Writing suggestions:[/yellow]")
        for tip in analysis.writing_suggestions:
            console.print(f"  • {tip}")

    salary = suggestion.suggested_salary_range
    console.print(
        f"\n[cyan]Suggested salary range:[/cyan] {salary.min:,} - {salary.max:,}"
    )


@app.command()
def match(
    profile: Path = typer.Option(..., "--profile", "-p", help="Path to profile JSON"),
    jobs: list[Path] = typer.Option(..., "--jobs", "-j", help="Path to a jobs JSON file"),
    top_n: int = typer.Option(10, "--top-n", "-n", help="Number of top matches to show"),
    output_json: bool = typer.Option(False, "--json", help="Output results as JSON"),
) -> None:
    """Score jobs against a candidate profile and display the top matches."""
    try:
        candidate = load_profile_file(profile)
        postings = search_all_sources([FileJobSource(path) for path in jobs], candidate)
        matches = match_jobs(postings, candidate, top_n=top_n)
    except Exception as e:
        console.print(f"[red]Error during matching: {e}[/red]")
        raise typer.Exit(1)

    if output_json:
        _output_json(matches=matches)
    else:
        _output_pretty(matches=matches)


@app.command()
def apply(
    user_id: int = typer.Option(..., "--user-id", "-u", help="User applying"),
    profile: Path = typer.Option(..., "--profile", "-p", help="Path to profile JSON"),
    jobs: list[Path] = typer.Option(..., "--jobs", "-j", help="Path to a jobs JSON file"),
    output_json: bool = typer.Option(False, "--json", help="Output the report as JSON"),
) -> None:
    """Score jobs and record applications within the user's quota."""
    try:
        init_tables()
        candidate = load_profile_file(profile)
        postings = search_all_sources([FileJobSource(path) for path in jobs], candidate)
        report = run_auto_apply(user_id, candidate, postings)
    except Exception as e:
        console.print(f"[red]Error during auto-apply: {e}[/red]")
        raise typer.Exit(1)

    if output_json:
        json.dump(obj=report.model_dump(mode="json"), fp=sys.stdout, indent=2)
        sys.stdout.write("\n")
        return

    gate = report.gate
    console.print(f"[bold cyan]Scored {report.jobs_scored} jobs[/bold cyan]")
    console.print(f"  Threshold: {gate.effective_threshold}")
    console.print(f"  Below threshold: {gate.below_threshold}")
    console.print(f"  Already applied: {gate.duplicates_skipped}")

    if report.submitted:
        console.print(f"\n[bold green]Applied to {len(report.submitted)} jobs![/bold green]")
        for result in report.submitted:
            console.print(
                f"  • {result.job.title} at {result.job.company or 'unknown'} "
                f"({result.match_score})"
            )
    else:
        console.print("\n[yellow]No applications submitted.[/yellow]")

    if gate.daily_limit_reached:
        console.print("[yellow]Application limit reached for this period.[/yellow]")

    _print_quota(report.quota)


@app.command()
def quota(
    user_id: int = typer.Option(..., "--user-id", "-u", help="User to inspect"),
) -> None:
    """Show a user's remaining application quota."""
    try:
        init_tables()
        status = get_quota_status(user_id)
    except Exception as e:
        console.print(f"[red]Error reading quota: {e}[/red]")
        raise typer.Exit(1)

    _print_quota(status)


@app.command(name="set-tier")
def set_tier(
    user_id: int = typer.Option(..., "--user-id", "-u", help="User to update"),
    tier: str = typer.Option(..., "--tier", "-t", help="free, weekly, monthly or premium"),
) -> None:
    """Change a user's subscription tier (resets the counters)."""
    try:
        new_tier = SubscriptionTier(tier)
    except ValueError:
        console.print(
            f"[red]Error: Unknown tier '{tier}'. "
            f"Expected one of: {', '.join(t.value for t in SubscriptionTier)}[/red]"
        )
        raise typer.Exit(1)

    try:
        init_tables()
        status = set_subscription_tier(user_id, new_tier)
    except Exception as e:
        console.print(f"[red]Error updating tier: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[bold green]User {user_id} is now on the {new_tier.value} tier[/bold green]")
    _print_quota(status)


@app.command()
def info() -> None:
    """Display system information and database stats."""
    console.print("[bold cyan]JobHackr System Information[/bold cyan]\n")

    is_cloud = DATABASE_URL is not None
    if not is_cloud and not DB_PATH.exists():
        console.print("[yellow]Database not found. Run 'jobhackr analyze-cv' first.[/yellow]")
        raise typer.Exit(0)

    try:
        counts = {}
        with get_connection() as db:
            cursor = db.cursor()
            for table_name in ("cv_analyses", "applications", "quota_counters"):
                cursor.execute(f"SELECT COUNT(*) FROM {table_name}")
                counts[table_name] = cursor.fetchone()[0]
    except Exception as e:
        console.print(f"[red]Error reading database: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Database Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    if is_cloud:
        table.add_row("Database", "PostgreSQL (cloud)")
    else:
        table.add_row("Database", str(DB_PATH))
    table.add_row("Keyword dictionaries", str(KEYWORDS_PATH or DEFAULT_KEYWORDS_FILE))
    table.add_row("CV analyses", str(counts["cv_analyses"]))
    table.add_row("Applications", str(counts["applications"]))
    table.add_row("Users with quota", str(counts["quota_counters"]))
    table.add_row("Tiers", ", ".join(SUBSCRIPTION_LIMITS))

    console.print(table)


def _print_quota(status: QuotaStatus) -> None:
    table = Table(title=f"Quota ({status.tier.value} tier)")
    table.add_column("Period", style="cyan")
    table.add_column("Used", style="green")
    table.add_column("Limit", style="green")
    table.add_row(
        "Today",
        str(status.used_today),
        "-" if status.daily_limit is None else str(status.daily_limit),
    )
    table.add_row(
        "This week",
        str(status.used_this_week),
        "-" if status.weekly_limit is None else str(status.weekly_limit),
    )
    console.print(table)

    console.print(f"  Applications left: {status.applications_left}")
    console.print(f"  Resets at: {status.reset_at:%Y-%m-%d %H:%M}")
    if status.reason:
        console.print(f"[yellow]{status.reason}[/yellow]")


def _output_json(matches: list[MatchResult]) -> None:
    """Output matches as JSON to stdout."""
    output = [match.model_dump(mode="json") for match in matches]
    json.dump(obj=output, fp=sys.stdout, indent=2)
    sys.stdout.write("\n")


def _output_pretty(matches: list[MatchResult]) -> None:
    """Output matches in pretty console format."""
    if not matches:
        console.print("[yellow]No jobs found.[/yellow]")
        return

    console.print(f"\n[bold green]Found {len(matches)} top matches![/bold green]\n")

    for i, match in enumerate(iterable=matches, start=1):
        job = match.job

        header = f"[bold]#{i} {job.title}[/bold]"
        if job.company:
            header += f" at {job.company}"

        content = []
        if job.location:
            content.append(f"[cyan]Location:[/cyan] {job.location}")

        verdict = "[green]apply[/green]" if match.should_apply else "[red]skip[/red]"
        content.append(f"[cyan]Match Score:[/cyan] {match.match_score}/100 ({verdict})")

        content.append("\n[cyan]Why:[/cyan]")
        for reason in match.match_reasons:
            content.append(f"  • {reason}")

        if match.missing_skills:
            content.append("\n[cyan]Skills to develop:[/cyan]")
            content.append(f"  {', '.join(match.missing_skills[:7])}")
            if len(match.missing_skills) > 7:
                content.append(f"  ... and {len(match.missing_skills) - 7} more")

        if job.url:
            content.append(f"\n[cyan]Apply:[/cyan] {job.url}")

        panel = Panel(
            renderable="\n".join(content),
            title=header,
            border_style="green" if i == 1 else "blue",
        )
        console.print(panel)
        console.print()


if __name__ == "__main__":
    app()
