"""`[observability]` table."""

from typing import Literal

from pydantic import BaseModel, Field


class LoggingConfig(BaseModel):
    """Arguments for `setup_logging`."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Lowest level emitted"
    )
    format: Literal["json", "console"] = Field(
        default="json", description="JSON lines, or colored console output in development"
    )
    redact_pii: bool = Field(
        default=True, description="Mask emails and credentials in log events"
    )


class ObservabilityConfig(BaseModel):
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
