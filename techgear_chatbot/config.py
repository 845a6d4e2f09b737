"""Centralized configuration for the TechGear UK support chatbot.

Secret resolution order (per variable):
  1. Environment variable / ``.env`` file  (local dev)
  2. AWS SSM Parameter Store SecureString  (when ``AWS_EXECUTION_ENV`` is set)

The SSM paths follow the convention ``/techgear-chatbot/<VARIABLE_NAME>``.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# ── Feature flag: running on AWS? ────────────────────────────────────
_ON_AWS = bool(os.getenv("AWS_EXECUTION_ENV"))

_SSM_PREFIX = "/techgear-chatbot"


# ── Secret resolution ────────────────────────────────────────────────

def _get_ssm_parameter(name: str) -> str | None:
    """Fetch a SecureString from SSM Parameter Store.

    Returns ``None`` if the parameter does not exist or boto3 is
    unavailable.  Errors are logged but never raised so that the
    missing-value error below is the one the operator sees.
    """
    try:
        import boto3  # noqa: PLC0415 — only needed on AWS

        ssm = boto3.client("ssm")
        resp = ssm.get_parameter(Name=f"{_SSM_PREFIX}/{name}", WithDecryption=True)
        return resp["Parameter"]["Value"]
    except Exception:
        logger.debug("SSM lookup for %s failed (expected locally)", name)
        return None


def _require_env(name: str) -> str:
    """Return a config value from env-var or SSM, or raise a clear error."""
    value = os.getenv(name)
    if value and value.strip() and not value.startswith("your_"):
        return value.strip()

    if _ON_AWS:
        ssm_value = _get_ssm_parameter(name)
        if ssm_value:
            return ssm_value

    raise OSError(
        f"Missing required configuration: {name}. "
        f"Set it in .env (local) or SSM Parameter Store {_SSM_PREFIX}/{name} (AWS)."
    )


def _env_or_default(name: str, default: str) -> str:
    """Like ``os.getenv`` but a blank value also falls back to *default*."""
    value = os.getenv(name)
    return value.strip() if value and value.strip() else default


# ── Azure OpenAI ────────────────────────────────────────────────────
AZURE_OPENAI_KEY: str = _require_env("AZURE_OPENAI_KEY")
AZURE_OPENAI_ENDPOINT: str = _env_or_default(
    "AZURE_OPENAI_ENDPOINT", "https://greatcodeoff.openai.azure.com/",
)
AZURE_API_VERSION: str = _env_or_default("AZURE_API_VERSION", "2025-01-01-preview")
AZURE_OPENAI_MODEL: str = _env_or_default("AZURE_OPENAI_MODEL", "gpt-4o-mini")

# ── Data sources ────────────────────────────────────────────────────
KNOWLEDGE_BASE_PATH: str = _env_or_default("KNOWLEDGE_BASE_PATH", "knowledge_base.txt")
INVENTORY_DB_PATH: str = _env_or_default("INVENTORY_DB_PATH", "./inventory.db")

# ── Server ──────────────────────────────────────────────────────────
SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT: int = int(os.getenv("SERVER_PORT", "8000"))
CORS_ORIGINS: list[str] = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
).split(",")
