import asyncio
import logging

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from codeagent.config import Settings
from codeagent.execution import create_sandbox_provider
from codeagent.persistence import HttpMessageStore, InMemoryMessageStore, MessageStore
from codeagent.runtime import FileStepStore, InMemoryStepStore, StepStore
from codeagent.runtime.worker import Event, Worker
from codeagent.workflows import CODE_AGENT_EVENT, create_code_agent_workflow

console = Console()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_message_store(settings: Settings) -> MessageStore:
    if settings.message_api_url:
        return HttpMessageStore(settings.message_api_url, api_key=settings.message_api_key)
    return InMemoryMessageStore()


def build_step_store(settings: Settings) -> StepStore:
    if settings.step_store_dir:
        return FileStepStore(settings.step_store_dir)
    return InMemoryStepStore()


def build_worker(settings: Settings) -> Worker:
    """Assemble the code-agent workflow and a Worker for it from settings."""
    if settings.sandbox == "local":
        sandbox_provider = create_sandbox_provider("local", root=settings.local_sandbox_root)
    else:
        sandbox_provider = create_sandbox_provider("e2b", template=settings.sandbox_template)

    workflow = create_code_agent_workflow(
        sandbox_provider=sandbox_provider,
        message_store=build_message_store(settings),
        settings=settings,
    )
    return Worker(
        [workflow],
        store=build_step_store(settings),
        max_concurrent_workflows=settings.max_concurrent_workflows,
        max_execution_records=settings.max_execution_records,
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Run the code agent."""
    load_dotenv()
    configure_logging(verbose)
    ctx.obj = Settings.from_env()


@main.command()
@click.argument("project_id")
@click.argument("instruction")
@click.option("--sandbox", type=click.Choice(["e2b", "local"]), help="Sandbox backend")
@click.option("--execution-id", help="Resume or name this execution")
@click.pass_obj
def run(
    settings: Settings,
    project_id: str,
    instruction: str,
    sandbox: str | None,
    execution_id: str | None,
) -> None:
    """Run the agent once on INSTRUCTION for PROJECT_ID."""
    if sandbox:
        settings = settings.model_copy(update={"sandbox": sandbox})

    console.print(
        Panel.fit(
            f"[bold blue]code-agent[/bold blue] [dim]({settings.sandbox} sandbox)[/dim]\n"
            f"{instruction}",
            border_style="blue",
        )
    )

    worker = build_worker(settings)
    event = Event(
        name=CODE_AGENT_EVENT,
        data={"projectId": project_id, "value": instruction},
        id=execution_id,
    )
    record = asyncio.run(worker.dispatch(event))

    if record.status != "completed":
        console.print(f"[red]Execution {record.execution_id} failed:[/red] {record.error}")
        raise SystemExit(1)

    result = record.result
    table = Table(show_header=False, box=None)
    table.add_row("[bold]Title[/bold]", result["title"])
    table.add_row("[bold]URL[/bold]", result["url"])
    table.add_row("[bold]Files[/bold]", "\n".join(sorted(result["files"])) or "[dim]none[/dim]")
    console.print(table)
    if result["summary"]:
        console.print(Panel(result["summary"], title="Summary", border_style="green"))
    else:
        console.print("[yellow]The agent did not finish the task.[/yellow]")


@main.command()
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", type=int, help="Port to listen on")
@click.pass_obj
def serve(settings: Settings, host: str, port: int | None) -> None:
    """Start the worker server."""
    from codeagent.runtime.worker_server import WorkerServer

    server = WorkerServer(build_worker(settings), host=host, port=port or settings.port)
    console.print(f"[green]Listening on {host}:{server.port}[/green]")
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
