"""Common infrastructure utilities."""

from __future__ import annotations

from .governor import ProviderGovernor
from .rate_limiter import TokenBucket

__all__ = [
    "ProviderGovernor",
    "TokenBucket",
]
