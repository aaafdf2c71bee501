"""
Triport Configuration — Unified settings for the REST, MCP and CLI surfaces

Load order: env vars > ~/.triport/config.env > defaults
"""

import logging
import os
from pathlib import Path

from triport.core.errors import ConfigurationError


def _load_config_env():
    """Load key=value pairs from ~/.triport/config.env if it exists."""
    config_file = Path.home() / ".triport" / "config.env"
    if not config_file.exists():
        return
    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" in line:
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


# Load config.env before reading env vars
_load_config_env()

SUPPORTED_MCP_TRANSPORTS = ("stdio",)


class Config:
    # Application identity
    APP_NAME = "triport"
    APP_VERSION = "0.1.0"
    APP_DESCRIPTION = "One operation registry, exposed over REST, MCP and the command line."
    PROTOCOL_VERSION = "2024-11-05"

    # Paths
    DATA_DIR = Path(os.environ.get("TRIPORT_DATA_DIR", str(Path.home() / ".triport")))
    LOG_DIR = DATA_DIR / "logs"

    # Logging (NEVER to stdout — stdout carries MCP frames and CLI payloads)
    LOG_LEVEL = os.environ.get("TRIPORT_LOG_LEVEL", "INFO").upper()
    LOG_FILE = LOG_DIR / "triport.log"
    ERROR_LOG = LOG_DIR / "triport-errors.log"

    # REST surface
    REST_HOST = os.environ.get("TRIPORT_REST_HOST", "0.0.0.0")
    REST_PORT = os.environ.get("TRIPORT_REST_PORT", "3000")

    # MCP surface
    MCP_TRANSPORT = os.environ.get("TRIPORT_MCP_TRANSPORT", "stdio")

    @classmethod
    def ensure_dirs(cls):
        """Create required directories."""
        cls.DATA_DIR.mkdir(parents=True, exist_ok=True)
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)

    @classmethod
    def rest_port(cls) -> int:
        return int(cls.REST_PORT)

    @classmethod
    def validate(cls):
        """
        Check startup settings.
        Raises ConfigurationError listing every problem found.
        """
        problems = []

        try:
            port = int(cls.REST_PORT)
        except (TypeError, ValueError):
            problems.append(f"TRIPORT_REST_PORT must be an integer, got {cls.REST_PORT!r}")
        else:
            if not 0 < port < 65536:
                problems.append(f"TRIPORT_REST_PORT out of range: {port}")

        if cls.MCP_TRANSPORT not in SUPPORTED_MCP_TRANSPORTS:
            problems.append(
                f"TRIPORT_MCP_TRANSPORT must be one of {', '.join(SUPPORTED_MCP_TRANSPORTS)}, "
                f"got {cls.MCP_TRANSPORT!r}"
            )

        if not isinstance(logging.getLevelName(cls.LOG_LEVEL), int):
            problems.append(f"TRIPORT_LOG_LEVEL is not a logging level: {cls.LOG_LEVEL!r}")

        if problems:
            raise ConfigurationError("Invalid configuration", {"problems": problems})
