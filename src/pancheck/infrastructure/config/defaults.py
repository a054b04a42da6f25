"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

from pancheck.infrastructure.checkers.share_api import DEFAULT_USER_AGENT

_CHECKER_DEFAULTS: dict[str, Any] = {
    "enabled": True,
    "concurrency_limit": 5,
    "timeout_seconds": 15.0,
    "min_interval_seconds": 0.2,
    "admission_timeout_seconds": None,  # None -> timeout_seconds
    "redirect_timeout_seconds": 10.0,
    "max_redirects": 10,
    "password_min_length": 2,
    "password_max_length": 50,
}

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "pancheck",
    "environment": "dev",
    "http": {
        "user_agent": DEFAULT_USER_AGENT,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "checkers": {
        "quark": dict(_CHECKER_DEFAULTS),
        "uc": dict(_CHECKER_DEFAULTS),
    },
}
