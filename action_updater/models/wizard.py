from __future__ import annotations

from enum import Enum

from .session import InvalidTransitionError

"""Presentation flow state machine (connect → upload → configure → process → done).

Separate from RunState: this one sequences what the operator
sees, RunState sequences row processing. Transitions are a fixed table; an
illegal move raises InvalidTransitionError.
"""

__all__ = [
    "WizardStep",
    "WizardEvent",
    "Wizard",
]


class WizardStep(Enum):
    API_KEY = "api-key"
    UPLOAD = "upload"
    MAPPING = "mapping"
    PROCESSING = "processing"
    COMPLETE = "complete"


class WizardEvent(Enum):
    KEY_VALIDATED = "key_validated"
    FILE_LOADED = "file_loaded"
    BACK_TO_UPLOAD = "back_to_upload"
    START_PROCESSING = "start_processing"
    PROCESSING_DONE = "processing_done"


_TRANSITIONS: dict[tuple[WizardStep, WizardEvent], WizardStep] = {
    (WizardStep.API_KEY, WizardEvent.KEY_VALIDATED): WizardStep.UPLOAD,
    (WizardStep.UPLOAD, WizardEvent.FILE_LOADED): WizardStep.MAPPING,
    (WizardStep.MAPPING, WizardEvent.BACK_TO_UPLOAD): WizardStep.UPLOAD,
    (WizardStep.MAPPING, WizardEvent.START_PROCESSING): WizardStep.PROCESSING,
    (WizardStep.PROCESSING, WizardEvent.PROCESSING_DONE): WizardStep.COMPLETE,
    (WizardStep.COMPLETE, WizardEvent.BACK_TO_UPLOAD): WizardStep.UPLOAD,
}


class Wizard:
    """Operator-facing step sequencer.

    Also holds the operator's current API key. Changing the key never touches
    a run in progress; the orchestrator captures the key when a run starts.
    """

    def __init__(self) -> None:
        self.step = WizardStep.API_KEY
        self.api_key = ""

    def _fire(self, event: WizardEvent) -> WizardStep:
        target = _TRANSITIONS.get((self.step, event))
        if target is None:
            raise InvalidTransitionError(
                f"cannot apply {event.value} in step {self.step.value}"
            )
        self.step = target
        return target

    def key_validated(self, api_key: str) -> WizardStep:
        self.api_key = api_key
        return self._fire(WizardEvent.KEY_VALIDATED)

    def file_loaded(self, row_count: int) -> WizardStep:
        # 空シートは UPLOAD のまま
        if row_count <= 0:
            return self.step
        return self._fire(WizardEvent.FILE_LOADED)

    def back_to_upload(self) -> WizardStep:
        return self._fire(WizardEvent.BACK_TO_UPLOAD)

    def start_processing(self, mapping_ready: bool) -> WizardStep:
        if not mapping_ready:
            raise InvalidTransitionError("column mapping is not ready")
        return self._fire(WizardEvent.START_PROCESSING)

    def processing_done(self) -> WizardStep:
        return self._fire(WizardEvent.PROCESSING_DONE)

    def change_api_key(self, api_key: str) -> None:
        self.api_key = api_key

    def reset(self) -> WizardStep:
        self.step = WizardStep.API_KEY
        self.api_key = ""
        return self.step
