"""
=============================================================================
CONFIGURATION
=============================================================================

Settings shared by the WSGI adapter and the request builder.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │   1. Values passed to Config(...) in code                          │
    │   2. Environment variables (Config.from_env)                        │
    │   3. Defaults declared on the dataclass                             │
    └─────────────────────────────────────────────────────────────────────┘

Environment variables:

    MYRAGON_CHARSET         Body charset (default: utf-8)
    MYRAGON_MAX_BODY_SIZE   Largest accepted request body in bytes
    MYRAGON_LOG_LEVEL       Logging level (default: INFO)

=============================================================================
"""

import codecs
import logging
import os
from dataclasses import dataclass


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class Config:
    """Configuration for request decoding and response sending."""

    charset: str = "utf-8"
    """Charset used to decode form bodies and encode response bodies."""

    max_body_size: int = 10 * 1024 * 1024  # 10 MB
    """
    Largest request body read from the host, in bytes.
    Larger bodies are rejected with 413 Payload Too Large.
    """

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create configuration from MYRAGON_* environment variables.

        Usage:
            MYRAGON_LOG_LEVEL=DEBUG gunicorn app:app

            config = Config.from_env()
            config.validate()
        """
        return cls(
            charset=os.getenv("MYRAGON_CHARSET", "utf-8"),
            max_body_size=int(os.getenv("MYRAGON_MAX_BODY_SIZE", str(10 * 1024 * 1024))),
            log_level=os.getenv("MYRAGON_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """Validate configuration values, failing fast on the first bad one."""
        try:
            codecs.lookup(self.charset)
        except LookupError:
            raise ValueError(f"Unknown charset: {self.charset}") from None

        if self.max_body_size < 0:
            raise ValueError("max_body_size must be >= 0")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Invalid log level: {self.log_level}")


def configure_logging(config: Config) -> None:
    """
    Configure logging based on config.

    Installs a root handler via basicConfig and sets the level of the
    "myragon" logger, so host applications can keep their own setup.
    """
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )

    logging.getLogger("myragon").setLevel(level)
