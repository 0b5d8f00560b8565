from pathlib import Path

from pydantic import BaseModel, Field, field_validator

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class NoteItem(BaseModel):
    name: str
    text: str


class ServerConfig(BaseModel):
    """Startup settings collected from the command line."""
    host: str = Field(min_length=1)
    port: int = Field(ge=1, le=65535)
    cache_dir: Path
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(LOG_LEVELS)}")
        return value
