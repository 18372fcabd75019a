"""Runtime configuration read from environment variables.

Entry points call ``dotenv.load_dotenv()`` first, so values may also come
from a ``.env`` file.
"""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, Field

ENV_PREFIX = "CODEAGENT_"


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


class Settings(BaseModel):
    """Settings for the code agent workflow and its worker."""

    llm_provider: str = Field(default="openai", description="LLM provider name")
    model: str = Field(default="gpt-4.1", description="Model used by the coding agent")
    temperature: float = Field(default=0.1, description="Coding agent sampling temperature")
    aux_model: str = Field(default="gpt-4o", description="Model for title and response agents")

    sandbox: Literal["e2b", "local"] = Field(default="e2b", description="Sandbox backend")
    sandbox_template: str = Field(default="base", description="Sandbox template id")
    sandbox_timeout_seconds: int = Field(default=1800, description="Sandbox lifetime")
    sandbox_port: int = Field(default=3000, description="Port exposed as the fragment URL")
    local_sandbox_root: str | None = Field(
        default=None, description="Root directory for local sandboxes"
    )

    max_iter: int = Field(default=15, description="Maximum agent turns per run")
    history_limit: int = Field(default=5, description="Previous messages given to the agent")

    message_api_url: str | None = Field(
        default=None, description="REST message backend; in-memory store when unset"
    )
    message_api_key: str | None = Field(default=None, description="Bearer token for the backend")
    step_store_dir: str | None = Field(
        default=None, description="Directory for step checkpoints; in-memory when unset"
    )

    max_concurrent_workflows: int = Field(default=4, description="Worker concurrency limit")
    max_execution_records: int = Field(
        default=1000, ge=1, description="Finished execution records kept by the worker"
    )
    port: int = Field(default=8000, description="Worker server port")

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from ``CODEAGENT_*`` environment variables."""
        values = {
            "llm_provider": _env("LLM_PROVIDER"),
            "model": _env("MODEL"),
            "temperature": _env("TEMPERATURE"),
            "aux_model": _env("AUX_MODEL"),
            "sandbox": _env("SANDBOX"),
            "sandbox_template": _env("SANDBOX_TEMPLATE"),
            "sandbox_timeout_seconds": _env("SANDBOX_TIMEOUT_SECONDS"),
            "sandbox_port": _env("SANDBOX_PORT"),
            "local_sandbox_root": _env("LOCAL_SANDBOX_ROOT"),
            "max_iter": _env("MAX_ITER"),
            "history_limit": _env("HISTORY_LIMIT"),
            "message_api_url": _env("MESSAGE_API_URL"),
            "message_api_key": _env("MESSAGE_API_KEY"),
            "step_store_dir": _env("STEP_STORE_DIR"),
            "max_concurrent_workflows": _env("MAX_CONCURRENT_WORKFLOWS"),
            "max_execution_records": _env("MAX_EXECUTION_RECORDS"),
            "port": _env("PORT"),
        }
        return cls.model_validate({key: value for key, value in values.items() if value})
