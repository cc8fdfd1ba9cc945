from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..gateway.contract import ActionGateway, GatewayError
from ..models.processing_result import RunReport, UpdateOutcome
from ..models.session import ProcessingError, RunSession
from ..models.status import ErrorKind
from .mapping import FieldMapping, MappingNotReadyError, MappingResolver, cell_text
from .normalizer import DEFAULT_RULES, StatusRule, normalize_status
from .progress import ProgressObserver

logger = logging.getLogger(__name__)

"""Service orchestration for the bulk action updater.

Coordinates one run: for every row, in input order and strictly one at a
time, resolve the action id and status through the frozen column mapping,
normalize the status, call the gateway, and record exactly one outcome.

Failures are row-scoped. A missing id, an unknown status, an upstream error
or a transport failure becomes a failed outcome for that row and processing
continues with the next one. There is no retry within a run.
"""

__all__ = [
    "ProcessingError",
    "MappingNotReadyError",
    "UpdateOrchestrator",
    "process_all",
    "MISSING_ID_MESSAGE",
    "NETWORK_ERROR_MESSAGE",
]

MISSING_ID_MESSAGE = "Missing Action ID"
NETWORK_ERROR_MESSAGE = "Network error"
# Header occupies spreadsheet line 1, so data index 0 is line 2
ROW_NUMBER_OFFSET = 2


class UpdateOrchestrator:
    """Sequential row-processing engine.

    Owns the RunSession for the duration of each run. The gateway and the
    optional progress observer are collaborators; neither touches the session.
    """

    def __init__(
        self,
        gateway: ActionGateway,
        *,
        progress: ProgressObserver | None = None,
        rules: Sequence[StatusRule] = DEFAULT_RULES,
    ) -> None:
        self.gateway = gateway
        self.progress = progress
        self.rules = rules
        self.session = RunSession()

    def run(
        self,
        rows: Sequence[Mapping[str, Any]],
        resolver: MappingResolver,
        api_key: str,
        *,
        source_name: str | None = None,
    ) -> RunReport:
        """Process every row and return the finished report.

        Args:
            rows: Spreadsheet rows in file order
            resolver: Column mapping; must be ready
            api_key: Credential for every call of this run
            source_name: Uploaded file name (reporting only)

        Returns:
            RunReport with one outcome per input row, in input order

        Raises:
            MappingNotReadyError: If the mapping is not ready (nothing is processed)
        """
        mapping = resolver.freeze()
        context = self.session.start_run(api_key, len(rows), source_name=source_name)
        logger.info("run started rows=%d id_column=%s status_column=%s notes_column=%s",
                    len(rows), mapping.record_id_column, mapping.status_column, mapping.notes_column)

        try:
            for index, row in enumerate(rows):
                self.session.begin_row(index)
                if self.progress is not None:
                    self.progress.start_row(index, len(rows))

                outcome = self._process_row(index, row, mapping, context.api_key)

                self.session.record_outcome(outcome)
                if self.progress is not None:
                    self.progress.finish_row(outcome)
                if outcome.succeeded:
                    logger.debug("row=%d action=%s %s", outcome.row_number, outcome.record_label, outcome.message)
                else:
                    logger.warning("row=%d action=%s %s", outcome.row_number, outcome.record_label, outcome.message)
        except BaseException:
            # 例外で中断した run は破棄し、次の run() を開始できる状態に戻す
            logger.error("run aborted at row index=%d", self.session.cursor)
            self.session.abort_run()
            raise

        report = self.session.finish_run()
        logger.info("run finished rows=%d elapsed=%.3fs", report.total_rows, report.elapsed_seconds)
        return report

    def _process_row(
        self,
        index: int,
        row: Mapping[str, Any],
        mapping: FieldMapping,
        api_key: str,
    ) -> UpdateOutcome:
        row_number = index + ROW_NUMBER_OFFSET

        action_id = cell_text(row, mapping.record_id_column).strip()
        if not action_id:
            return UpdateOutcome(
                record_label=f"Row {row_number}",
                succeeded=False,
                message=MISSING_ID_MESSAGE,
                row_number=row_number,
                error_kind=ErrorKind.MISSING_IDENTIFIER,
            )

        raw_status = cell_text(row, mapping.status_column)
        status = normalize_status(raw_status, self.rules)
        if status is None:
            return UpdateOutcome(
                record_label=action_id,
                succeeded=False,
                message=f'Invalid status: "{raw_status}"',
                row_number=row_number,
                error_kind=ErrorKind.UNRESOLVABLE_STATUS,
            )

        notes = cell_text(row, mapping.notes_column)

        try:
            response = self.gateway.update_action(api_key, action_id, status.status_id, notes or None)
        except GatewayError as e:
            logger.debug("row=%d gateway error: %s", row_number, e)
            return UpdateOutcome(
                record_label=action_id,
                succeeded=False,
                message=NETWORK_ERROR_MESSAGE,
                row_number=row_number,
                error_kind=e.kind,
            )
        except Exception:
            # 想定外の例外もその行だけの失敗として扱い、処理は継続
            logger.exception("row=%d unexpected error while updating action=%s", row_number, action_id)
            return UpdateOutcome(
                record_label=action_id,
                succeeded=False,
                message=NETWORK_ERROR_MESSAGE,
                row_number=row_number,
                error_kind=ErrorKind.LOCAL_UNEXPECTED_ERROR,
            )

        if not response.success:
            return UpdateOutcome(
                record_label=action_id,
                succeeded=False,
                message=response.message or "Failed to update",
                row_number=row_number,
                error_kind=response.error_kind or ErrorKind.UPSTREAM_OTHER,
            )

        if response.partial:
            return UpdateOutcome(
                record_label=action_id,
                succeeded=True,
                message=f'Updated to "{status.label}", but failed to add notes',
                partial=True,
                row_number=row_number,
                error_kind=ErrorKind.PARTIAL_NOTES_FAILURE,
            )

        suffix = " with notes" if notes.strip() else ""
        return UpdateOutcome(
            record_label=action_id,
            succeeded=True,
            message=f'Updated to "{status.label}"{suffix}',
            row_number=row_number,
        )


def process_all(
    rows: Sequence[Mapping[str, Any]],
    resolver: MappingResolver,
    api_key: str,
    gateway: ActionGateway,
    *,
    progress: ProgressObserver | None = None,
    source_name: str | None = None,
) -> RunReport:
    """Run one orchestration pass with a fresh session.

    Raises:
        MappingNotReadyError: If the column mapping is not ready
    """
    orchestrator = UpdateOrchestrator(gateway, progress=progress)
    return orchestrator.run(rows, resolver, api_key, source_name=source_name)
