# src/delivery_status_sync/cli.py
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config.env import EnvError, get_app_env
from .config.logging_config import get_logger
from .errors import TenantEnumerationFailure
from .io.paths import derive_run_paths

AUTO_REPORT = "auto"


def _positive_int(raw: str) -> int:
    try:
        v = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {raw!r}")
    if v <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {v}")
    return v


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="delivery-status-sync",
        description="Poll courier APIs for open orders of every tenant and reconcile delivery status.",
    )
    p.add_argument("--tenant-id", default=None, help="Only sync this tenant.")
    p.add_argument("--batch-size", type=_positive_int, default=None,
                   help="Max orders per tenant per run. Default: SYNC_BATCH_SIZE (50).")
    p.add_argument("--concurrency", type=_positive_int, default=None,
                   help="Orders reconciled in parallel per chunk. Default: SYNC_CONCURRENCY (5).")
    p.add_argument("--store", type=Path, default=None,
                   help="Path to the JSON document store. Default: SYNC_STORE_PATH.")
    p.add_argument(
        "--replay-file",
        type=Path,
        default=None,
        help="JSON file of recorded courier payloads ({provider: {consignment: body}}); no network calls.",
    )
    p.add_argument(
        "--report",
        nargs="?",
        const=AUTO_REPORT,
        default=None,
        help="Also write an xlsx run report. Without a value it goes next to the store file.",
    )
    p.add_argument(
        "--no-console",
        action="store_true",
        help="Disable console logging (file logging remains).",
    )
    p.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Default: LOG_LEVEL or INFO",
    )
    p.add_argument(
        "--strict-env",
        action="store_true",
        help="Require SYNC_STORE_PATH to be set in the environment; otherwise exit 2.",
    )
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Env first: the store path (and so the log path) may come from it.
    try:
        settings = get_app_env(strict=args.strict_env)
    except EnvError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    store_path = args.store or (Path(settings.SYNC_STORE_PATH) if settings.SYNC_STORE_PATH else None)
    if store_path is None:
        print("error: no store given (use --store or set SYNC_STORE_PATH)", file=sys.stderr)
        return 2

    try:
        default_report, log_path = derive_run_paths(store_path)
    except FileNotFoundError:
        print(f"error: store file not found: {store_path}", file=sys.stderr)
        return 2

    logger = get_logger(
        "delivery_status_sync",
        level=args.log_level,
        console=not args.no_console,
        log_file=log_path,
    )
    logger.debug("Logger initialized.")
    logger.info("Store: %s", store_path)
    logger.info("Log file: %s", log_path)

    # Lazy imports to keep --help fast
    from .api.registry import build_adapters
    from .pipelines.orchestrator import run_once
    from .store.json_file import JsonFileDocumentStore

    try:
        store = JsonFileDocumentStore(store_path)
    except ValueError as e:
        logger.error("Invalid store file %s: %s", store_path, e)
        return 2

    adapters = build_adapters(settings)
    if args.replay_file:
        from .api.replay import replay_adapters
        try:
            adapters = replay_adapters(args.replay_file, adapters)
        except ValueError as e:
            logger.error("Invalid replay file: %s", e)
            return 2
        logger.info("Replay mode enabled: %s", args.replay_file)

    try:
        run = run_once(
            store,
            tenant_id=args.tenant_id,
            batch_size=args.batch_size,
            concurrency=args.concurrency,
            adapters=adapters,
            settings=settings,
        )
    except TenantEnumerationFailure as e:
        logger.error("Run aborted: %s", e)
        return 1

    report = run.to_report()
    if args.report:
        from .io.report_writer import write_run_report
        report_path = default_report if args.report == AUTO_REPORT else Path(args.report)
        write_run_report(run, report_path, logger)

    print(json.dumps(report, indent=2))
    logger.info("Done.")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
