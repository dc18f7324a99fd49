"""
Settings models for the Inspection Region Query system.

Pydantic models validating the ``store`` section of an environment
configuration.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator


class StoreSettings(BaseModel):
    """Connection settings for the point store backing region queries.

    The ``memory`` backend loads the bulk-load text files from
    ``data_directory`` into an in-process store; the ``postgresql`` backend
    connects to the inspection database using the remaining fields.
    """

    backend: Literal["memory", "postgresql"] = Field("memory", description="Point store implementation")
    data_directory: Optional[str] = Field(None, description="Directory holding points.txt, categories.txt and groups.txt")
    host: str = Field("localhost", description="PostgreSQL host")
    port: int = Field(5432, ge=1, le=65535, description="PostgreSQL port")
    dbname: str = Field("inspection_db", min_length=1, description="PostgreSQL database name")
    user: str = Field("postgres", min_length=1, description="PostgreSQL user")
    password_env_var: str = Field("RQ_DB_PASSWORD", min_length=1, description="Environment variable holding the database password")
    connect_timeout_seconds: int = Field(30, ge=1, le=600, description="Deadline for establishing a connection")
    max_retries: int = Field(3, ge=1, le=10, description="Connection attempts before giving up")

    @model_validator(mode='after')
    def validate_memory_backend(self) -> "StoreSettings":
        """The memory backend cannot start without a data directory."""
        if self.backend == "memory" and not self.data_directory:
            raise ValueError("data_directory is required for the memory backend")
        return self
