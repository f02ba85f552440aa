"""
Engine configuration for contentmatch.

This module defines the EngineConfig dataclass that captures the tunable
parameters of the matching engine and its command line runner. Values come
from defaults, keyword arguments, or CONTENTMATCH_* environment variables
(optionally loaded from a .env file).
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

ENV_PREFIX = "CONTENTMATCH_"


@dataclass
class EngineConfig:
    """
    Configuration for the contentmatch engine.

    Attributes:
        log_level: Logging level name for the CLI (DEBUG, INFO, WARNING, ...).
        min_term_length: Shortest normalized glossary term used for label matching.
        fallback_category: Group name for recommendations without a category.
        output_dir: Directory where the CLI writes caches and audit reports.
    """

    log_level: str = "WARNING"
    min_term_length: int = 2
    fallback_category: str = "Other"
    output_dir: Path = field(default_factory=lambda: Path("output"))

    def __post_init__(self):
        """Normalize field types."""
        self.log_level = str(self.log_level).upper()

        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)

        self.min_term_length = int(self.min_term_length)
        if self.min_term_length < 1:
            raise ValueError(f"min_term_length must be >= 1, got {self.min_term_length}")

    @classmethod
    def from_env(cls, dotenv_path: Optional[Union[str, Path]] = None) -> "EngineConfig":
        """
        Create configuration from CONTENTMATCH_* environment variables.

        Args:
            dotenv_path: Optional .env file; when omitted, python-dotenv
                searches the working directory tree.

        Returns:
            EngineConfig with environment overrides applied.
        """
        load_dotenv(dotenv_path=dotenv_path)
        defaults = cls()
        return cls(
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level),
            min_term_length=int(os.getenv(f"{ENV_PREFIX}MIN_TERM_LENGTH", defaults.min_term_length)),
            fallback_category=os.getenv(f"{ENV_PREFIX}FALLBACK_CATEGORY", defaults.fallback_category),
            output_dir=Path(os.getenv(f"{ENV_PREFIX}OUTPUT_DIR", str(defaults.output_dir))),
        )


def configure_logging(level: str = "WARNING") -> None:
    """Configure root logging for command line use."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
