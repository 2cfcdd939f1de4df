from __future__ import annotations

from pathlib import Path
from typing import Tuple

REPORT_SUFFIX = "_sync_report.xlsx"
LOG_SUFFIX = "_sync.log"


def derive_run_paths(store_file: Path) -> Tuple[Path, Path]:
    """
    Given the JSON store path, return (report_xlsx_path, log_path) in the same directory
    (e.g. /data/tenants.json -> /data/tenants_sync_report.xlsx, /data/tenants_sync.log).

    Raises FileNotFoundError if store_file doesn't exist (explicit early signal for CLI).
    """
    p = Path(store_file)
    if not p.exists():
        raise FileNotFoundError(p)

    stem = p.stem
    return p.with_name(f"{stem}{REPORT_SUFFIX}"), p.with_name(f"{stem}{LOG_SUFFIX}")
