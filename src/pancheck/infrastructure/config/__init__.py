from __future__ import annotations

from .load import load_config
from .schema import AppConfig, CheckerConfig, CheckersConfig, EnvOverrides

__all__ = ["AppConfig", "CheckerConfig", "CheckersConfig", "EnvOverrides", "load_config"]
