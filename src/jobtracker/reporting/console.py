"""Rich-powered console output."""

from __future__ import annotations

from typing import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from jobtracker.analytics.aggregator import DerivedMetrics
from jobtracker.analytics.presenter import (
    INSIGHT_MESSAGES,
    funnel,
    insight_flags,
    metric_captions,
    monthly_trend,
)
from jobtracker.models import Job

_console = Console()

_INSIGHT_STYLES = {"positive": "bold green", "warning": "bold yellow", "info": "cyan"}
_BAR_WIDTH = 30


def print_banner() -> None:
    """Display the startup banner."""
    _console.print(
        Panel.fit(
            "[bold cyan]JobTracker[/bold cyan]  Job Search Analytics",
            border_style="cyan",
        )
    )


def print_error(message: str) -> None:
    _console.print(f"[bold red]Error:[/bold red] {message}")


def _bar(percent: float) -> str:
    filled = int(round(percent / 100 * _BAR_WIDTH))
    return "█" * filled


def print_metrics(metrics: DerivedMetrics) -> None:
    """Headline metrics with their captions."""
    captions = metric_captions(metrics)
    table = Table(title="Job Search Analytics", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("", style="dim")

    table.add_row("Applications", str(metrics.total), "")
    table.add_row("Response Rate", f"{metrics.response_rate}%", captions["responseRate"])
    table.add_row(
        "Avg. Time to Response",
        f"{metrics.avg_time_to_response} days",
        captions["avgTimeToResponse"],
    )
    table.add_row("Success Rate", f"{metrics.success_rate}%", captions["successRate"])
    table.add_row("Rejection Rate", f"{metrics.rejection_rate}%", captions["rejectionRate"])

    _console.print()
    _console.print(table)


def print_funnel(metrics: DerivedMetrics) -> None:
    table = Table(title="Application Funnel", header_style="bold magenta")
    table.add_column("Status", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("")
    for stage in funnel(metrics):
        table.add_row(
            stage["status"],
            str(stage["count"]),
            f"{stage['percentage']}%",
            f"[{stage['color']}]{_bar(stage['percentage'])}[/]",
        )
    _console.print(table)


def print_resume_performance(metrics: DerivedMetrics) -> None:
    if not metrics.resume_performance:
        _console.print("[dim]No resume data available[/dim]")
        return
    table = Table(title="Resume Performance", header_style="bold magenta")
    table.add_column("Version", style="cyan")
    table.add_column("Applications", justify="right")
    table.add_column("Response Rate", justify="right")
    table.add_column("Offer Rate", justify="right")
    for r in metrics.resume_performance:
        table.add_row(r.version, str(r.total), f"{r.response_rate}%", f"{r.offer_rate}%")
    _console.print(table)


def print_monthly_trend(metrics: DerivedMetrics) -> None:
    trend = monthly_trend(metrics)
    if not trend:
        _console.print("[dim]No application data available[/dim]")
        return
    table = Table(title="Monthly Application Trend", header_style="bold magenta")
    table.add_column("Month", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("")
    for bucket in trend:
        table.add_row(bucket["label"], str(bucket["count"]), _bar(bucket["height"]))
    _console.print(table)


def print_top_companies(metrics: DerivedMetrics) -> None:
    if not metrics.top_companies:
        _console.print("[dim]No company data available[/dim]")
        return
    table = Table(title="Top Applied Companies", header_style="bold magenta")
    table.add_column("#", justify="right")
    table.add_column("Company", style="cyan")
    table.add_column("Applications", justify="right")
    for rank, c in enumerate(metrics.top_companies, start=1):
        table.add_row(str(rank), c.company, str(c.count))
    _console.print(table)


def print_insights(metrics: DerivedMetrics) -> None:
    flags = insight_flags(metrics)
    if not flags:
        return
    _console.print("[bold]Key Insights[/bold]")
    for flag in flags:
        level, message = INSIGHT_MESSAGES[flag]
        _console.print(f"  [{_INSIGHT_STYLES[level]}]{message}[/]")
    _console.print()


def print_analytics_report(metrics: DerivedMetrics) -> None:
    """Full analytics report in the order a dashboard shows it."""
    print_metrics(metrics)
    print_resume_performance(metrics)
    print_funnel(metrics)
    print_monthly_trend(metrics)
    print_top_companies(metrics)
    print_insights(metrics)


def print_jobs(jobs: Sequence[Job], title: str = "Job Applications") -> None:
    table = Table(title=f"{title} ({len(jobs)})", header_style="bold magenta")
    table.add_column("Applied", style="dim")
    table.add_column("Company", style="cyan")
    table.add_column("Position")
    table.add_column("Status")
    table.add_column("Resume", style="dim")
    for job in jobs:
        table.add_row(
            job.applied_date.strftime("%b %d, %Y"),
            job.company,
            job.position,
            job.status,
            job.resume_version,
        )
    _console.print(table)
