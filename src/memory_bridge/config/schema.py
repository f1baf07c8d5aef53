from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..memory import DEFAULT_WINDOW_SIZE


class BackendKind(str, Enum):
    HTTP = "http"
    WORKFLOW = "workflow"


def _workflow_reference(v: Any) -> Any:
    # Workflow selectors hand over either a plain id or {"value": id, ...}
    if isinstance(v, dict):
        return v.get("value")
    return v


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    if isinstance(v, SecretStr) and not v.get_secret_value().strip():
        return None
    return v


class TransportFields(BaseModel):
    backend: BackendKind = BackendKind.HTTP
    api_url: Optional[str] = None
    workflow_id: Optional[str] = None
    api_key: Optional[SecretStr] = None
    context_window_length: int = DEFAULT_WINDOW_SIZE
    # None keeps the HTTP client's own default
    http_timeout: Optional[float] = None

    @field_validator("workflow_id", mode="before")
    @classmethod
    def resolve_workflow_reference(cls, v: Any) -> Any:
        return _blank_to_none(_workflow_reference(v))

    @field_validator("api_url", "api_key", mode="before")
    @classmethod
    def blank_is_unset(cls, v: Any) -> Any:
        return _blank_to_none(v)


class MemoryParameters(TransportFields):
    """
    Everything needed to build one memory instance.

    Raises:
        pydantic.ValidationError: When the selected backend lacks its target
            or the session id is empty.
    """

    session_id: str = Field(min_length=1)

    model_config = {"extra": "ignore"}

    @model_validator(mode="after")
    def check_backend_target(self) -> MemoryParameters:
        if self.backend is BackendKind.HTTP and not self.api_url:
            raise ValueError("api_url is required for the http backend")
        if self.backend is BackendKind.WORKFLOW and not self.workflow_id:
            raise ValueError("workflow_id is required for the workflow backend")
        return self


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: Optional[str] = None
    redact_credentials: bool = True

    model_config = {"extra": "ignore"}

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class MemorySettings(TransportFields, BaseSettings):
    """
    Root configuration object using pydantic-settings.

    Environment variables use the ``MEMORY_BRIDGE_`` prefix, nested values
    use ``__`` (e.g. ``MEMORY_BRIDGE_LOGGING__LEVEL=DEBUG``).
    """

    # workflow id -> command for SubprocessWorkflowRunner
    workflows: Dict[str, List[str]] = Field(default_factory=dict)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="MEMORY_BRIDGE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    def parameters_for(self, session_id: str) -> MemoryParameters:
        """Bind these settings to a session."""
        return MemoryParameters(
            backend=self.backend,
            api_url=self.api_url,
            workflow_id=self.workflow_id,
            api_key=self.api_key,
            context_window_length=self.context_window_length,
            http_timeout=self.http_timeout,
            session_id=session_id,
        )
