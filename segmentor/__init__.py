# segmentor/__init__.py
"""
Segmentor Package
"""
__version__ = "0.1.0"

from .utils import (
    # Directory paths
    project_root,
    config_path,
    raw_data_path,
    processed_data_path,
    reports_path,
    get_path,

    # Config
    load_yaml,
    load_environment,
    configure_logging,
)

from .core import *  # noqa: F401,F403
from .core import __all__ as _core_all

__all__ = [
    "project_root",
    "config_path",
    "raw_data_path",
    "processed_data_path",
    "reports_path",
    "get_path",
    "load_yaml",
    "load_environment",
    "configure_logging",
] + list(_core_all)
