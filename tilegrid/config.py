"""
Tilegrid Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class Config:
    """Application configuration loaded from environment variables."""

    # Archive storage
    ARCHIVE_DIR: Path = Path(os.getenv("TILEGRID_ARCHIVE_DIR", "map_archives"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors if values are unusable."""
        if cls.LOG_LEVEL not in LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got '{cls.LOG_LEVEL}'"
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Tilegrid Configuration:",
            f"  Archive Dir: {cls.ARCHIVE_DIR}",
            f"  Log Level: {cls.LOG_LEVEL}",
        ]
        return "\n".join(lines)
