from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, UpdaterConfig, default_config, load_config
from ..excel.reader import SpreadsheetError, read_spreadsheet
from ..gateway.contract import ActionGateway, GatewayError
from ..gateway.proxy import ProxyGateway
from ..gateway.upstream import SafetyCultureGateway
from ..logging.init import log_summary, setup_logging
from ..models.wizard import Wizard
from ..services.mapping import MappingNotReadyError, MappingResolver
from ..services.orchestrator import UpdateOrchestrator
from ..services.progress import ProgressTracker
from ..services.summary import render_report, render_summary_line, summarize
from ..services.template import write_sample_template

"""CLI entrypoint.

Commands:
- validate-key: check the API key against the upstream service
- template:     write the sample CSV
- inspect:      print the header and first rows of a spreadsheet
- run:          validate key -> read file -> resolve mapping -> update rows

Exit codes: 0 every row succeeded, 2 at least one row failed, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

API_KEY_ENV = "SAFETYCULTURE_API_KEY"


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv (existing environment wins by default)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="action-updater",
        description="Bulk update SafetyCulture action statuses and notes from a spreadsheet",
    )
    p.add_argument("--config", type=Path, default=None, help=f"Config file (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    vk = sub.add_parser("validate-key", help="Check that the API key is accepted")
    vk.add_argument("--api-key", default=None, help=f"API key (default: ${API_KEY_ENV})")

    tp = sub.add_parser("template", help="Write the sample CSV template")
    tp.add_argument("output", nargs="?", type=Path, default=Path("sample_actions.csv"))
    tp.add_argument("--force", action="store_true", help="Overwrite an existing file")

    ins = sub.add_parser("inspect", help="Print spreadsheet columns and first rows then exit")
    ins.add_argument("file", type=Path)
    ins.add_argument("--rows", type=int, default=3)

    run = sub.add_parser("run", help="Update actions from a spreadsheet")
    run.add_argument("file", type=Path)
    run.add_argument("--api-key", default=None, help=f"API key (default: ${API_KEY_ENV})")
    run.add_argument("--id-column", default=None, help="Column holding the action id")
    run.add_argument("--status-column", default=None, help="Column holding the new status")
    run.add_argument("--notes-column", default=None, help="Column holding notes (optional)")
    run.add_argument("--skip-key-check", action="store_true", help="Do not validate the key before the run")
    return p.parse_args(argv)


def _resolve_config(path: Path | None, logger: logging.Logger) -> UpdaterConfig:
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    logger.debug("no config file at %s, using defaults", DEFAULT_CONFIG_PATH)
    return default_config()


def _build_gateway(cfg: UpdaterConfig) -> ActionGateway:
    if cfg.gateway.mode == "proxy":
        return ProxyGateway(cfg.gateway.base_url, timeout=cfg.gateway.timeout_seconds)
    return SafetyCultureGateway(cfg.gateway.base_url, timeout=cfg.gateway.timeout_seconds)


def _close_gateway(gateway: ActionGateway) -> None:
    close = getattr(gateway, "close", None)
    if callable(close):
        close()


def _api_key(args: argparse.Namespace) -> str:
    return (args.api_key or os.getenv(API_KEY_ENV) or "").strip()


def _check_key(gateway: ActionGateway, api_key: str, logger: logging.Logger) -> bool:
    try:
        result = gateway.validate_key(api_key)
    except GatewayError as e:
        logger.debug("key validation transport error: %s", e)
        logger.error("Failed to validate API key. Please try again.")
        return False
    if not result.valid:
        logger.error(result.message or "Invalid API key. Please check and try again.")
        return False
    logger.info(result.message)
    return True


def _cmd_validate_key(args: argparse.Namespace, cfg: UpdaterConfig, logger: logging.Logger) -> int:
    api_key = _api_key(args)
    if not api_key:
        logger.error(f"Please provide your SafetyCulture API key (--api-key or ${API_KEY_ENV})")
        return EXIT_FATAL
    gateway = _build_gateway(cfg)
    try:
        return EXIT_SUCCESS_ALL if _check_key(gateway, api_key, logger) else EXIT_FATAL
    finally:
        _close_gateway(gateway)


def _cmd_template(args: argparse.Namespace, logger: logging.Logger) -> int:
    try:
        path = write_sample_template(args.output, overwrite=args.force)
    except FileExistsError as e:
        logger.error(str(e))
        return EXIT_FATAL
    logger.info(f"sample template written: {path}")
    return EXIT_SUCCESS_ALL


def _cmd_inspect(args: argparse.Namespace, logger: logging.Logger) -> int:
    try:
        data = read_spreadsheet(args.file)
    except SpreadsheetError as e:
        logger.error(f"inspect: {e}")
        return EXIT_FATAL
    print(f"FILE: {args.file.name} sheet={data.sheet_name} rows={len(data.rows)}")
    print(f"  columns={data.columns}")
    for row in data.rows[: max(args.rows, 0)]:
        # datetime 等は isoformat で表示
        print("  ", {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in row.items()})
    return EXIT_SUCCESS_ALL


def _cmd_run(args: argparse.Namespace, cfg: UpdaterConfig, logger: logging.Logger) -> int:
    wizard = Wizard()
    api_key = _api_key(args)
    if not api_key:
        logger.error(f"Please provide your SafetyCulture API key (--api-key or ${API_KEY_ENV})")
        return EXIT_FATAL

    gateway = _build_gateway(cfg)
    try:
        if not args.skip_key_check and not _check_key(gateway, api_key, logger):
            return EXIT_FATAL
        wizard.key_validated(api_key)

        try:
            data = read_spreadsheet(args.file)
        except SpreadsheetError as e:
            logger.error(f"upload: {e}")
            return EXIT_FATAL
        wizard.file_loaded(len(data.rows))
        logger.info(f"Loaded {len(data.rows)} rows from {args.file.name} columns={data.columns}")

        resolver = MappingResolver(data.columns).apply(
            record_id_column=cfg.mapping.record_id_column,
            status_column=cfg.mapping.status_column,
            notes_column=cfg.mapping.notes_column,
        ).apply(
            record_id_column=args.id_column,
            status_column=args.status_column,
            notes_column=args.notes_column,
        )
        if not resolver.is_ready():
            missing = ", ".join(r.value for r in resolver.missing_roles())
            logger.error(f"mapping: missing or unknown column for {missing}; available columns: {data.columns}")
            return EXIT_FATAL

        wizard.start_processing(resolver.is_ready())
        with ProgressTracker(len(data.rows)) as progress:
            orchestrator = UpdateOrchestrator(gateway, progress=progress)
            try:
                report = orchestrator.run(data.rows, resolver, wizard.api_key, source_name=args.file.name)
            except MappingNotReadyError as e:
                logger.error(f"mapping: {e}")
                return EXIT_FATAL
        wizard.processing_done()
    finally:
        _close_gateway(gateway)

    for line in render_report(report):
        print(line)

    summary = summarize(report.outcomes)
    summary_line = render_summary_line(summary, report.elapsed_seconds)
    # log_summary adds the "SUMMARY " label itself
    log_summary(summary_line[len("SUMMARY "):])

    if summary.fail_count > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # None のときのみシステム引数を読む ([] はそのまま使う)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)

    _load_env_file(Path(".env"))

    try:
        cfg = _resolve_config(args.config, logger)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "validate-key":
        return _cmd_validate_key(args, cfg, logger)
    if args.command == "template":
        return _cmd_template(args, logger)
    if args.command == "inspect":
        return _cmd_inspect(args, logger)
    return _cmd_run(args, cfg, logger)
