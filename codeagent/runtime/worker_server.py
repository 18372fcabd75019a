"""FastAPI server that accepts trigger events for a Worker."""

import copy
import logging

import uvicorn
from fastapi import FastAPI, status
from fastapi.responses import JSONResponse
from uvicorn.config import LOGGING_CONFIG

from ..core.workflow import WorkflowNotFoundError
from .worker import Event, Worker

logger = logging.getLogger(__name__)


class WorkerServer:
    """HTTP front end for a Worker.

    Endpoints:
        POST /events                 start a run for an event (202, 404 or 429)
        GET  /executions/{id}        status and result of a run
        GET  /health                 liveness and load
    """

    def __init__(self, worker: Worker, host: str = "0.0.0.0", port: int = 8000):
        self.worker = worker
        self.host = host
        self.port = port
        self.app: FastAPI | None = None
        self.server: uvicorn.Server | None = None
        self._setup_app()

    def _setup_app(self):
        """Create the FastAPI app and register the event, execution and health routes."""
        self.app = FastAPI(title="Code Agent Worker")

        @self.app.post("/events")
        async def receive_event(event: Event):
            """Accept an event and run its workflow in the background."""
            if self.worker.is_at_capacity:
                return JSONResponse(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    content={"error": "Worker at capacity"},
                )
            try:
                record = self.worker.submit(event)
            except WorkflowNotFoundError as e:
                return JSONResponse(
                    status_code=status.HTTP_404_NOT_FOUND, content={"error": str(e)}
                )

            logger.info(
                "POST /events - event=%s, execution_id=%s, workflow_id=%s",
                event.name,
                record.execution_id,
                record.workflow_id,
            )
            return JSONResponse(
                status_code=status.HTTP_202_ACCEPTED,
                content={"status": "accepted", "execution_id": record.execution_id},
            )

        @self.app.get("/executions/{execution_id}")
        async def get_execution(execution_id: str):
            record = self.worker.get_execution(execution_id)
            if record is None:
                return JSONResponse(
                    status_code=status.HTTP_404_NOT_FOUND,
                    content={"error": "Execution not found", "execution_id": execution_id},
                )
            return record.model_dump(mode="json")

        @self.app.get("/health")
        async def health_check():
            """Liveness and current load."""
            return {
                "status": "healthy",
                "current_executions": len(self.worker.active_executions),
                "max_concurrent_workflows": self.worker.max_concurrent_workflows,
            }

    async def run(self):
        """Serve until shutdown, then wait for in-flight executions."""
        if not self.app:
            raise RuntimeError("FastAPI app not initialized")

        # Route module loggers through uvicorn's handler
        logging_config = copy.deepcopy(LOGGING_CONFIG)
        logging_config["loggers"].setdefault("", {})
        logging_config["loggers"][""].update(
            {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False,
            }
        )
        logging_config["loggers"]["httpx"] = {
            "handlers": ["default"],
            "level": "WARNING",
            "propagate": False,
        }

        config = uvicorn.Config(
            self.app,
            host=self.host,
            port=self.port,
            log_level="info",
            log_config=logging_config,
        )
        self.server = uvicorn.Server(config)
        try:
            await self.server.serve()
        finally:
            await self.worker.shutdown()

    async def shutdown(self):
        """Ask uvicorn to exit after the current requests."""
        if self.server:
            self.server.should_exit = True
