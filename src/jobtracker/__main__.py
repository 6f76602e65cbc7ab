"""Entry point: ``python -m jobtracker``."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer

from jobtracker.analytics.aggregator import compute_analytics, filter_jobs, sort_jobs
from jobtracker.exceptions import JobTrackerError
from jobtracker.reporting.console import (
    print_analytics_report,
    print_banner,
    print_error,
    print_jobs,
)
from jobtracker.reporting.data_export import export_to_file
from jobtracker.settings import AppSettings
from jobtracker.storage.repository import JobTrackerStore

app = typer.Typer(help="Personal job-application tracker.")

_settings_option = typer.Option(
    None, "--settings", "-s", help="Path to settings.yaml (defaults to the project root)."
)


def _configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def _load(settings_path: Optional[Path]) -> AppSettings:
    try:
        settings = AppSettings.from_yaml(settings_path)
    except JobTrackerError as exc:
        print_error(str(exc))
        raise typer.Exit(1)
    _configure_logging(settings.log_level)
    return settings


@contextmanager
def _open_store(settings: AppSettings) -> Iterator[JobTrackerStore]:
    """Open the store, turning storage failures into a clean CLI exit."""
    try:
        store = JobTrackerStore(settings.db_path)
    except JobTrackerError as exc:
        print_error(str(exc))
        raise typer.Exit(1)
    try:
        yield store
    except JobTrackerError as exc:
        print_error(str(exc))
        raise typer.Exit(1)
    finally:
        store.close()


@app.command()
def serve(
    settings_path: Optional[Path] = _settings_option,
    host: Optional[str] = typer.Option(None, help="Bind address."),
    port: Optional[int] = typer.Option(None, help="Port to listen on."),
):
    """Run the REST API."""
    from jobtracker.api.server import serve as run_server

    settings = _load(settings_path)
    if host is not None:
        settings.host = host
    if port is not None:
        settings.port = port
    try:
        run_server(settings)
    except JobTrackerError as exc:
        print_error(str(exc))
        raise typer.Exit(1)


@app.command()
def report(
    settings_path: Optional[Path] = _settings_option,
    status: str = typer.Option("", help="Only jobs with this status."),
    company: str = typer.Option("", help="Only companies containing this text."),
    resume_version: str = typer.Option("", "--resume-version", help="Only this resume version."),
):
    """Print the analytics report for the stored jobs."""
    settings = _load(settings_path)
    with _open_store(settings) as store:
        jobs = store.list_jobs(status=status, company=company, resume_version=resume_version)
    print_banner()
    print_analytics_report(compute_analytics(jobs))


@app.command("jobs")
def list_jobs(
    settings_path: Optional[Path] = _settings_option,
    search: str = typer.Option("", help="Match company, position or location."),
    status: str = typer.Option("", help="Only jobs with this status."),
    sort: str = typer.Option("date-desc", help="date-desc, date-asc, company or status."),
):
    """List stored jobs."""
    settings = _load(settings_path)
    with _open_store(settings) as store:
        jobs = store.list_jobs()
    print_jobs(sort_jobs(filter_jobs(jobs, status=status, search=search), sort))


@app.command()
def export(
    settings_path: Optional[Path] = _settings_option,
    fmt: str = typer.Option("json", "--format", "-f", help="json or csv."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory."),
):
    """Export all jobs to a JSON or CSV file."""
    settings = _load(settings_path)
    if fmt not in ("json", "csv"):
        print_error(f"Unsupported format: {fmt}")
        raise typer.Exit(1)
    with _open_store(settings) as store:
        jobs = store.list_jobs()
    dest = export_to_file(jobs, output or settings.export_dir, fmt)
    typer.echo(f"Wrote {len(jobs)} job(s) to {dest}")


@app.command()
def seed(
    settings_path: Optional[Path] = _settings_option,
    jobs: int = typer.Option(100, "--jobs", "-n", min=0, help="Number of jobs to generate."),
    random_seed: Optional[int] = typer.Option(None, "--seed", help="Seed for reproducible data."),
):
    """Replace the store contents with synthetic sample data."""
    from jobtracker.seeding import seed_store

    settings = _load(settings_path)
    with _open_store(settings) as store:
        job_count, interview_count = seed_store(store, jobs, random_seed)
    typer.echo(f"Inserted {job_count} job(s) and {interview_count} interview(s).")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
