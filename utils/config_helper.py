"""Configuration helper utilities for accessing settings."""

import logging
import os
from pathlib import Path

import streamlit as st

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 30.0
DEFAULT_DATABASE_URL = "sqlite:///./channels.sqlite3"


def _get_secret(section: str, key: str):
    """Read `st.secrets[section][key]`, or None when it is not available."""
    try:
        if hasattr(st, "secrets") and section in st.secrets and key in st.secrets[section]:
            return st.secrets[section][key]
    except Exception:
        # No secrets.toml present, or it failed to parse
        logger.debug(f"Streamlit secrets unavailable for {section}.{key}")
    return None


def get_probe_timeout() -> float:
    """
    Get the transport timeout, in seconds, applied to each upstream probe.

    Checks in order:
    1. Environment variable CHANNEL_PROBE_TIMEOUT
    2. Streamlit secrets channel_testing.probe_timeout
    3. Default value of 30 seconds

    Returns:
        float: Timeout in seconds
    """
    env_value = os.getenv("CHANNEL_PROBE_TIMEOUT")
    if env_value:
        try:
            return float(env_value)
        except ValueError:
            logger.warning(f"Ignoring invalid CHANNEL_PROBE_TIMEOUT={env_value!r}")

    secret_value = _get_secret("channel_testing", "probe_timeout")
    if secret_value is not None:
        try:
            return float(secret_value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring invalid channel_testing.probe_timeout={secret_value!r}")

    return DEFAULT_PROBE_TIMEOUT


def get_database_url() -> str:
    """
    Get the SQLAlchemy URL of the database holding the channels table.

    Checks in order:
    1. Environment variable CHANNEL_DATABASE_URL
    2. Streamlit secrets sqlite.database (a file path)
    3. Default of ./channels.sqlite3
    """
    env_value = os.getenv("CHANNEL_DATABASE_URL")
    if env_value:
        return env_value

    database = _get_secret("sqlite", "database")
    if database:
        return f"sqlite:///{database}"

    return DEFAULT_DATABASE_URL


def get_log_dir() -> Path:
    env_value = os.getenv("CHANNEL_LOG_DIR")
    if env_value:
        return Path(env_value)
    return Path(__file__).with_name("logs")
