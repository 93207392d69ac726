# -*- coding: utf-8 -*-
"""
Wizard Controller
=================
Step state machine behind every guarded multi-step form.

A host page supplies the ordered StepSpec list, the initial values, the
dependency rules and a commit function; the controller owns the
WorkflowInstance and handles:
- Field updates with derived-field recomputation
- Per-step validation gating forward navigation
- Submission with a reentrancy guard and retry after failure

Phases:
    EDITING --submit--> SUBMITTING --ok--> SUBMITTED (instance discarded)
                                   --err-> FAILED, then EDITING on the last step
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Mapping, Optional, Sequence

from PyQt5.QtCore import pyqtSignal

from controllers.base_controller import BaseController, OperationResult
from controllers.field_dependency_engine import FieldDependencyEngine, FieldDependencyRule
from controllers.mutation_coordinator import OptimisticMutationCoordinator
from services.exceptions import ConfigurationError
from services.notification_service import NotificationSink
from utils.logger import get_logger

logger = get_logger(__name__)

ValidateFn = Callable[[Mapping[str, Any]], Mapping[str, str]]
CommitFn = Callable[[Dict[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class StepSpec:
    """One wizard step: the fields it shows and its validator."""
    id: str
    fields: FrozenSet[str]
    validate: ValidateFn = lambda values: {}
    title: str = ""

    def __post_init__(self):
        object.__setattr__(self, "fields", frozenset(self.fields))

    def get_title(self) -> str:
        return self.title or self.id


class WorkflowPhase(str, Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    FAILED = "failed"


@dataclass
class WorkflowInstance:
    """Mutable state of one open wizard."""
    step_index: int = 0
    values: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)
    phase: WorkflowPhase = WorkflowPhase.EDITING
    last_error: Optional[Exception] = None


class WizardController(BaseController):
    """
    Drives one guarded multi-step workflow.

    Usage:
        wizard = WizardController(steps, {"terms": "Net 30"}, rules=rules)
        wizard.update_field("vendor", "Office Plus Supplies")
        if wizard.next():
            ...
        result = await wizard.submit(commit)
    """

    step_changed = pyqtSignal(int, int)  # old_index, new_index
    values_changed = pyqtSignal(object)  # dict of changed fields
    validation_failed = pyqtSignal(object)  # dict field -> message
    phase_changed = pyqtSignal(str)
    submitted = pyqtSignal(object)  # commit result

    def __init__(
        self,
        steps: Sequence[StepSpec],
        initial_values: Optional[Mapping[str, Any]] = None,
        rules: Sequence[FieldDependencyRule] = (),
        commit: Optional[CommitFn] = None,
        coordinator: Optional[OptimisticMutationCoordinator] = None,
        notifier: Optional[NotificationSink] = None,
        title: str = "",
        success_message: str = "",
        failure_message: str = "",
        parent=None
    ):
        """
        Args:
            steps: Ordered steps; immutable for the controller's lifetime
            initial_values: Values a fresh instance starts with
            rules: Field dependency rules (cycles raise ConfigurationError)
            commit: Default commit function used by ``submit()``
            coordinator: OptimisticMutationCoordinator that refetches the
                affected collection after a successful commit
            notifier: Where success/failure notifications go
            title: Workflow title used in log lines and messages
        """
        super().__init__(notifier=notifier, parent=parent)
        if not steps:
            raise ConfigurationError("A wizard needs at least one step")
        step_ids = [step.id for step in steps]
        if len(set(step_ids)) != len(step_ids):
            raise ConfigurationError(f"Duplicate step ids: {step_ids}")

        self._steps = tuple(steps)
        self._initial_values = dict(initial_values or {})
        self._engine = FieldDependencyEngine(rules)
        self._commit = commit
        self._coordinator = coordinator or OptimisticMutationCoordinator(notifier=self.notifier)
        self.title = title or "Wizard"
        self.success_message = success_message or f"{self.title} saved successfully"
        self.failure_message = failure_message or f"Failed to save {self.title.lower()}"

        self.instance = self._new_instance()
        self._submitting = False

    # ==================== Lifecycle ====================

    def _new_instance(self) -> WorkflowInstance:
        return WorkflowInstance(values=copy.deepcopy(self._initial_values))

    def initialize(self, initial_values: Optional[Mapping[str, Any]] = None):
        """Start a fresh instance at step 0 (optionally with new initial values)."""
        if initial_values is not None:
            self._initial_values = dict(initial_values)
        old_index = self.instance.step_index
        self.instance = self._new_instance()
        logger.info(f"{self.title}: initialized ({len(self._steps)} steps)")
        self.values_changed.emit(dict(self.instance.values))
        self.phase_changed.emit(self.instance.phase.value)
        if old_index != 0:
            self.step_changed.emit(old_index, 0)

    def cancel(self):
        """Discard entered data and start over."""
        logger.info(f"{self.title}: cancelled at step {self.instance.step_index}")
        self.initialize()

    # ==================== Properties ====================

    @property
    def steps(self) -> Sequence[StepSpec]:
        return self._steps

    @property
    def engine(self) -> FieldDependencyEngine:
        return self._engine

    @property
    def step_index(self) -> int:
        return self.instance.step_index

    @property
    def current_step(self) -> StepSpec:
        return self._steps[self.instance.step_index]

    @property
    def values(self) -> Dict[str, Any]:
        return dict(self.instance.values)

    @property
    def errors(self) -> Dict[str, str]:
        return dict(self.instance.errors)

    @property
    def phase(self) -> WorkflowPhase:
        return self.instance.phase

    def is_last_step(self) -> bool:
        return self.instance.step_index == len(self._steps) - 1

    def can_go_next(self) -> bool:
        return not self.is_last_step()

    def can_go_previous(self) -> bool:
        return self.instance.step_index > 0

    def get_progress_percentage(self) -> float:
        """Current progress (0.0 to 100.0)."""
        if len(self._steps) <= 1:
            return 100.0
        return (self.instance.step_index / (len(self._steps) - 1)) * 100.0

    # ==================== Editing ====================

    def update_field(self, name: str, value: Any):
        """
        Set a field, clear its error and recompute dependent fields.

        Derived targets are merged in one step and their errors cleared too.
        """
        instance = self.instance
        if instance.phase in (WorkflowPhase.SUBMITTING, WorkflowPhase.SUBMITTED):
            logger.debug(f"{self.title}: ignoring edit of '{name}' while {instance.phase.value}")
            return
        self._resume_editing()

        instance.values[name] = value
        instance.errors.pop(name, None)

        derived = self._engine.recompute(name, instance.values)
        instance.values.update(derived)
        for target in derived:
            instance.errors.pop(target, None)

        changed = {name: value}
        changed.update(derived)
        self.values_changed.emit(changed)

    def update_fields(self, updates: Mapping[str, Any]):
        """Apply several field updates in order."""
        for name, value in updates.items():
            self.update_field(name, value)

    def _set_phase(self, phase: WorkflowPhase):
        if self.instance.phase != phase:
            self.instance.phase = phase
            self.phase_changed.emit(phase.value)

    def _resume_editing(self):
        # Any interaction after a failed submit returns to editing
        if self.instance.phase == WorkflowPhase.FAILED:
            self._set_phase(WorkflowPhase.EDITING)

    # ==================== Navigation ====================

    def _validate_current(self) -> Dict[str, str]:
        step = self.current_step
        return {k: v for k, v in (step.validate(self.instance.values) or {}).items() if v}

    def next(self) -> bool:
        """
        Validate the current step and advance.

        Returns:
            True if the wizard moved forward. On validation failure the step
            index is unchanged and ``errors`` holds the validator's result.
            On the last step this is a no-op returning False.
        """
        if self.instance.phase in (WorkflowPhase.SUBMITTING, WorkflowPhase.SUBMITTED):
            return False
        self._resume_editing()

        errors = self._validate_current()
        if errors:
            self.instance.errors = errors
            logger.warning(
                f"{self.title}: step '{self.current_step.id}' validation failed: {sorted(errors)}"
            )
            self.validation_failed.emit(dict(errors))
            return False

        self.instance.errors = {}
        if self.is_last_step():
            logger.debug(f"{self.title}: cannot go next, already at last step")
            return False

        old_index = self.instance.step_index
        self.instance.step_index += 1
        logger.info(f"{self.title}: step {old_index} -> {self.instance.step_index}")
        self.step_changed.emit(old_index, self.instance.step_index)
        return True

    def back(self) -> bool:
        """Go to the previous step; values are kept and nothing is re-validated."""
        if self.instance.phase in (WorkflowPhase.SUBMITTING, WorkflowPhase.SUBMITTED):
            return False
        self._resume_editing()

        if not self.can_go_previous():
            logger.debug(f"{self.title}: cannot go back, already at first step")
            return False

        old_index = self.instance.step_index
        self.instance.step_index -= 1
        logger.info(f"{self.title}: step {old_index} -> {self.instance.step_index}")
        self.step_changed.emit(old_index, self.instance.step_index)
        return True

    # ==================== Submission ====================

    async def submit(self, commit: Optional[CommitFn] = None) -> Optional[OperationResult]:
        """
        Commit the collected values.

        Only valid on the last step. While a submission is pending further
        calls are no-ops returning None and never reach the commit function.
        On failure the step and values are kept, the phase is FAILED and
        calling ``submit`` again retries.

        Returns:
            OperationResult, or None for an ignored call (already submitting
            or submitted) and when the wizard was disposed mid-flight
        """
        commit = commit or self._commit
        if commit is None:
            raise ConfigurationError(f"{self.title}: no commit function configured")

        if self._submitting or self.instance.phase == WorkflowPhase.SUBMITTED:
            logger.debug(f"{self.title}: submit ignored, a submission is pending or done")
            return None

        if not self.is_last_step():
            return OperationResult.fail(message="Complete all steps before submitting")

        errors = self._validate_current()
        if errors:
            self.instance.errors = errors
            logger.warning(f"{self.title}: final step validation failed: {sorted(errors)}")
            self.validation_failed.emit(dict(errors))
            return OperationResult.fail(message="Validation failed", errors=list(errors.values()))

        instance = self.instance
        values = copy.deepcopy(instance.values)
        self._set_phase(WorkflowPhase.SUBMITTING)
        self._emit_started("submit")

        outcome: Dict[str, Any] = {}

        def on_success(result):
            outcome["result"] = result

        def on_failure(error):
            outcome["error"] = error

        self._submitting = True
        try:
            await self._coordinator.commit_single(
                lambda: commit(values),
                on_success=on_success,
                on_failure=on_failure,
                owner=self,
                success_message=self.success_message,
                failure_message=self.failure_message,
            )
        finally:
            self._submitting = False

        if not self.is_active:
            logger.debug(f"{self.title}: submit result dropped, wizard was closed")
            return None
        if instance is not self.instance:
            logger.debug(f"{self.title}: submit result dropped, wizard was cancelled")
            self._set_loading(False)
            return None

        if "error" in outcome:
            error = outcome["error"]
            instance.last_error = error
            self._set_phase(WorkflowPhase.FAILED)
            self._emit_error("submit", str(error))
            return OperationResult.fail(message=str(error))

        result = outcome.get("result")
        self._set_phase(WorkflowPhase.SUBMITTED)
        self._emit_completed("submit", True)
        logger.info(f"{self.title}: submitted")
        self.submitted.emit(result)
        return OperationResult.ok(data=result, message=self.success_message)
