# segmentor/utils.py

import os
import logging
from typing import Any, Dict, Optional

import pandas as pd  # type: ignore
import yaml  # type: ignore
from dotenv import load_dotenv  # type: ignore

logger = logging.getLogger(__name__)


# ============================================================
# 📁 DIRECTORY MANAGEMENT
# ============================================================

# Absolute path to this file
current_file = os.path.abspath(__file__)

# Project root = 1 level above the package (segmentor/utils.py → segmentor → project)
project_root = os.path.dirname(os.path.dirname(current_file))

# --- Project-level paths ---
data_path = os.path.join(project_root, "data")
reports_path = os.path.join(project_root, "reports")
config_path = os.path.join(project_root, "config")

# --- Data directories ---
raw_data_path = os.path.join(data_path, "raw")
processed_data_path = os.path.join(data_path, "processed")
segmentation_processed_path = os.path.join(processed_data_path, "segment")

# --- Reports ---
import_reports_path = os.path.join(reports_path, "import")
segment_reports_path = os.path.join(reports_path, "segment")


# ============================================================
# ⚙️ CONFIG UTILITIES
# ============================================================

def load_environment(env_file: Optional[str] = None) -> bool:
    """Load variables from ``.env`` (project root by default) without overriding the shell."""
    final_path = env_file or os.path.join(project_root, ".env")
    return load_dotenv(final_path, override=False)


def load_yaml(path: str) -> Dict[str, Any]:
    """General YAML loader with validation."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"❌ YAML file not found: {path}")

    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"❌ Invalid YAML in {path}: {e}")

    if config is None:
        raise ValueError(f"❌ YAML file empty: {path}")
    if not isinstance(config, dict):
        raise ValueError(f"❌ YAML root must be a mapping: {path}")

    logger.info(f"✅ Loaded YAML: {path}")
    return config


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging once.

    The level comes from ``level``, else ``SEGMENTOR_LOG_LEVEL``, else INFO.
    """
    load_environment()
    name = (level or os.getenv("SEGMENTOR_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ============================================================
#  REPORTING UTILITIES
# ============================================================

def export_frame(df: pd.DataFrame, output_dir: str, filename: str) -> str:
    """Write a DataFrame as CSV into ``output_dir`` and return the path."""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, filename)
    df.to_csv(path, index=False)
    logger.info(f"   ✅ Saved {filename}: {path} ({len(df):,} rows)")
    return path


# ============================================================
# 🔍 PATH RESOLVER
# ============================================================

def get_path(path_type: str) -> str:
    """
    Convenient path resolver with automatic directory creation.

    Returns any project directory path based on a keyword.
    """

    paths = {
        "project": project_root,
        "config": config_path,
        "data": data_path,
        "raw": raw_data_path,
        "processed": processed_data_path,
        "segmentation_processed": segmentation_processed_path,
        "reports": reports_path,
        "import_reports": import_reports_path,
        "segment_reports": segment_reports_path,
    }

    if path_type not in paths:
        raise ValueError(
            f"❌ Unknown path type '{path_type}'. Allowed values: {list(paths.keys())}"
        )

    resolved = os.path.abspath(paths[path_type])
    os.makedirs(resolved, exist_ok=True)
    return resolved
