"""
Configuration Schemas.

Pydantic models defining the expected structure of each packaged YAML
settings file. If a YAML file has missing keys, wrong types, or unknown
fields, a clear ValidationError is raised at load time instead of a
cryptic KeyError deep in command code.

Each top-level class corresponds to one file in reclaim_cli/settings/:
    ApplicationSchema  → application.yaml
    LoggingSchema      → logging.yaml
"""

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ApiSchema(_StrictBase):
    base_url: str
    timeout_secs: int = Field(ge=1)
    user_agent: str


class ErrorsSchema(_StrictBase):
    body_limit: int = Field(ge=1)
    summary_limit: int = Field(ge=1)


class ApplicationSchema(_StrictBase):
    name: str
    description: str
    api: ApiSchema
    errors: ErrorsSchema


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class LoggingHandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: LoggingHandlersSchema
