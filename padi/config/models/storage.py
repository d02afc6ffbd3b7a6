"""Storage backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

BackendType = Literal["inmemory", "postgres"]
RealtimeBackendType = Literal["inmemory", "redis"]


class StorageConfig(BaseModel):
    """Backing store and realtime feed selection.

    Connection strings are read from environment variables, never from
    TOML files.
    """

    backend: BackendType = Field(
        default="inmemory", description="Profile and message store backend"
    )
    realtime_backend: RealtimeBackendType = Field(
        default="inmemory", description="Realtime feed backend"
    )
    min_pool_size: int = Field(
        default=2, gt=0, description="Minimum connections to keep open"
    )
    max_pool_size: int = Field(
        default=10, gt=0, description="Maximum connections in pool"
    )
    command_timeout: float = Field(
        default=30.0, gt=0, description="Default timeout for queries (seconds)"
    )
