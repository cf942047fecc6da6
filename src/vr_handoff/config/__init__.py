"""Shared configuration helpers and dataclasses."""

from ..exceptions import ConfigurationError
from .runtime import env_bool, env_float, env_list, env_str
from .settings import HandoffSettings, local_app_data_dir

__all__ = [
    "ConfigurationError",
    "HandoffSettings",
    "env_bool",
    "env_float",
    "env_list",
    "env_str",
    "local_app_data_dir",
]
