"""
Runtime configuration - storage locations and collection name

Defaults can be overridden by environment variables or by passing explicit
paths to StudentStore / TranscriptExporter.
"""

import os
from pathlib import Path
from typing import Optional

# Single collection name that all student records are stored under
STORAGE_KEY = "transcript-students"

DATA_DIR_ENV = "TRANSCRIPTS_DATA_DIR"
OUTPUT_DIR_ENV = "TRANSCRIPTS_OUTPUT_DIR"

PACKAGE_ROOT = Path(__file__).parent
TEMPLATES_DIR = PACKAGE_ROOT / "templates"


def default_data_dir() -> Path:
    """Directory holding the JSON collection"""
    env_value = os.environ.get(DATA_DIR_ENV)
    if env_value:
        return Path(env_value).expanduser()
    return Path.home() / ".academic_transcripts"


def default_output_dir(data_dir: Optional[Path] = None) -> Path:
    """Directory exported transcripts are written to"""
    env_value = os.environ.get(OUTPUT_DIR_ENV)
    if env_value:
        return Path(env_value).expanduser()
    return (data_dir or default_data_dir()) / "output"
