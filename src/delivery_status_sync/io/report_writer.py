# src/delivery_status_sync/io/report_writer.py
from __future__ import annotations

import logging
import warnings
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from openpyxl import load_workbook

from delivery_status_sync.models.results import RunResult

TENANT_COLUMNS = ["Tenant", "State", "Detail", "Orders Scanned",
                  "Updated", "Unchanged", "Skipped", "Failed", "Errors"]
OUTCOME_COLUMNS = ["Tenant", "Order", "Provider", "Outcome", "Previous Status",
                   "Delivery Status", "Order Delivered", "Reason"]


def _summary_frame(run: RunResult) -> pd.DataFrame:
    report = run.to_report()
    rows = [{"Metric": k, "Value": v} for k, v in report.items() if k != "sampleErrors"]
    return pd.DataFrame(rows, columns=["Metric", "Value"])


def _tenants_frame(run: RunResult) -> pd.DataFrame:
    rows: List[Dict[str, Any]] = []
    for t in run.tenants:
        r = t.result
        rows.append({
            "Tenant": t.tenant_id,
            "State": t.state,
            "Detail": t.detail,
            "Orders Scanned": r.orders_scanned if r else 0,
            "Updated": r.updated if r else 0,
            "Unchanged": r.unchanged if r else 0,
            "Skipped": r.skipped if r else 0,
            "Failed": r.failed if r else 0,
            "Errors": r.error_count if r else int(t.state == "failed"),
        })
    return pd.DataFrame(rows, columns=TENANT_COLUMNS)


def _outcomes_frame(run: RunResult) -> pd.DataFrame:
    rows = [{
        "Tenant": tenant_id,
        "Order": w.order_id,
        "Provider": w.provider_id or "",
        "Outcome": w.outcome,
        "Previous Status": w.previous_status or "",
        "Delivery Status": w.delivery_status or "",
        "Order Delivered": "Y" if w.order_delivered else "",
        "Reason": w.reason or "",
    } for tenant_id, w in run.outcomes()]
    return pd.DataFrame(rows, columns=OUTCOME_COLUMNS)


def write_run_report(run: RunResult, path: Path, logger: Optional[logging.Logger] = None) -> Path:
    """
    Write the run report workbook:
      Summary  - the JSON report counters
      Tenants  - one row per scanned tenant (synced / skipped / failed)
      Outcomes - one row per reconciled order
      Errors   - the capped error sample
    """
    log = logger or logging.getLogger(__name__)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    errors = pd.DataFrame({"Error": list(run.sample_errors)}, columns=["Error"])

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        with pd.ExcelWriter(path, engine="openpyxl", mode="w") as xw:
            _summary_frame(run).to_excel(xw, sheet_name="Summary", index=False, na_rep="")
            _tenants_frame(run).to_excel(xw, sheet_name="Tenants", index=False, na_rep="")
            _outcomes_frame(run).to_excel(xw, sheet_name="Outcomes", index=False, na_rep="")
            errors.to_excel(xw, sheet_name="Errors", index=False, na_rep="")

    # Order ids like "00123" must stay text; also freeze the header rows.
    wb = load_workbook(path)
    for ws in wb.worksheets:
        ws.freeze_panes = "A2"
    ws = wb["Outcomes"]
    for col_idx, cell in enumerate(ws[1], start=1):
        if (cell.value or "") == "Order":
            for r in range(2, ws.max_row + 1):
                c = ws.cell(row=r, column=col_idx)
                c.value = "" if c.value is None else str(c.value)
                c.number_format = "@"
            break
    wb.save(path)

    log.info("Run report written: %s", path)
    return path
