"""Domain models for the bulk action updater.

This package contains the domain model classes used throughout the application:
canonical statuses, per-row outcomes, the run session and the wizard flow.
"""

from .processing_result import RunReport, RunSummary, UpdateOutcome
from .session import InvalidTransitionError, ProcessingError, RunSession, RunState
from .status import CanonicalStatus, ErrorKind
from .wizard import Wizard, WizardStep

__all__ = [
    # Status models
    "CanonicalStatus",
    "ErrorKind",
    # Processing models
    "UpdateOutcome",
    "RunReport",
    "RunSummary",
    "RunSession",
    "RunState",
    "ProcessingError",
    "InvalidTransitionError",
    # Presentation flow
    "Wizard",
    "WizardStep",
]
