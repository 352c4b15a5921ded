"""Typer CLI entrypoint for briefly."""

import asyncio
from typing import Any

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from briefly.core.errors import AppError
from briefly.core.logging import setup_logging
from briefly.core.resources import Resources
from briefly.core.settings import get_settings
from briefly.schemas import SubmitRequest
from briefly.services.query import QueryService
from briefly.services.submission import SubmissionService
from briefly.services.summarizer import DspySummarizer

app_cli = typer.Typer(help="briefly command line interface")
console = Console()


@app_cli.command("health")
def health() -> None:
    """Show basic health / config info."""
    settings = get_settings()
    table = Table(title="briefly Health")
    table.add_column("Key")
    table.add_column("Value")
    table.add_row("environment", settings.environment)
    table.add_row("debug", str(settings.debug))
    table.add_row("redis_url", settings.redis_url)
    table.add_row("queue", settings.queue_name)
    table.add_row("llm_model", settings.llm_model)
    summarizer = DspySummarizer.from_settings(settings)
    credentials = "ok" if summarizer.is_configured else f"missing ({summarizer.provider_key_env})"
    table.add_row("llm_credentials", credentials)
    table.add_row("cache_ttl_seconds", str(settings.cache_ttl_seconds))
    table.add_row("job_max_retries", str(settings.job_max_retries))
    console.print(table)


@app_cli.command("init-db")
def init_db(drop: bool = typer.Option(False, help="Drop the jobs table first")) -> None:  # pragma: no cover - IO heavy
    """Create the jobs table."""

    async def _run() -> None:
        resources = Resources.open(get_settings())
        try:
            await resources.database.init_models(drop=drop)
        finally:
            await resources.close()

    asyncio.run(_run())
    console.print("[bold green]Database ready[/bold green]")


@app_cli.command("run-server")
def run_server(
    host: str = "0.0.0.0",
    port: int | None = None,
    reload: bool = False,
) -> None:  # pragma: no cover
    """Run the FastAPI server."""
    settings = get_settings()
    uvicorn.run("briefly.main:app", host=host, port=port or settings.port, reload=reload)


@app_cli.command("run-worker")
def run_worker(loglevel: str = "INFO") -> None:  # pragma: no cover
    """Run the single summarization consumer (one job at a time)."""
    from briefly.tasks.worker import app as worker_app

    settings = get_settings()
    setup_logging(loglevel)
    worker_app.worker_main([
        "worker",
        f"--loglevel={loglevel}",
        "--pool=solo",
        "--concurrency=1",
        "-Q",
        settings.queue_name,
    ])


def _run_with_resources(action: Any) -> Any:
    async def _run() -> Any:
        resources = Resources.open(get_settings())
        try:
            return await action(resources)
        finally:
            await resources.close()

    return asyncio.run(_run())


@app_cli.command("submit")
def submit(
    text: str | None = typer.Option(None, help="Raw text to summarize"),
    url: str | None = typer.Option(None, help="URL whose page should be summarized"),
) -> None:  # pragma: no cover - IO heavy
    """Create a job and enqueue it, like POST /submit."""
    fields = {key: value for key, value in {"text": text, "url": url}.items() if value is not None}

    async def _action(resources: Resources) -> Any:
        service = SubmissionService(resources.database.session_factory, resources.queue)
        return await service.submit(SubmitRequest(**fields))

    try:
        created = _run_with_resources(_action)
    except AppError as e:
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]Job queued:[/bold green] {created.job_id}")


@app_cli.command("status")
def status(job_id: str) -> None:  # pragma: no cover - IO heavy
    """Show the result (or progress) of a job, like GET /result/{job_id}."""

    async def _action(resources: Resources) -> Any:
        return await QueryService(resources.database.session_factory, resources.cache).get_result(job_id)

    try:
        view = _run_with_resources(_action)
    except AppError as e:
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        raise typer.Exit(code=1) from e
    console.print(view.model_dump(mode="json", by_alias=True))


def main() -> None:
    app_cli()


if __name__ == "__main__":
    main()
