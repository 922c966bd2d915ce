import json
from pathlib import Path
from typing import Any

import pandas as pd

from .logging_config import get_logger
from .settings import PROJECT_ROOT

logger = get_logger(__name__)

RESULTS_DIR = PROJECT_ROOT / "results"


def save_df(df: pd.DataFrame, name: str, results_dir: Path = RESULTS_DIR) -> Path | None:
    """
    Persist a DataFrame as CSV under results/<name>.csv.

    This intentionally keeps the storage layer minimal, but centralizes
    the filesystem layout so it can be replaced later (e.g., S3, DB, etc.).
    Returns None without writing when the frame is empty.
    """
    if df.empty:
        return None

    results_dir.mkdir(parents=True, exist_ok=True)
    out_path = results_dir / f"{name}.csv"
    df.to_csv(out_path, index=False)
    logger.info("saved", path=str(out_path), rows=len(df))
    return out_path


def save_json(data: Any, name: str, results_dir: Path = RESULTS_DIR) -> Path:
    """Persist JSON-serializable data under results/<name>.json."""
    results_dir.mkdir(parents=True, exist_ok=True)
    out_path = results_dir / f"{name}.json"
    out_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("saved", path=str(out_path))
    return out_path


def load_json(path: str | Path) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))
