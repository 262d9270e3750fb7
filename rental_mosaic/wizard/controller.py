"""
Wizard Controller

Drives a ``WizardInstance`` through its steps. Forward navigation is gated
by step validation, backward navigation never is, and jumps are limited to
steps already reached. Steps that carry a stage, and the final submit, hand
the accumulated values to an ``AsyncStageRunner`` and resume when it resolves.
"""

import asyncio
import logging
from typing import Dict, Any, Optional, Callable

from ..exceptions import AsyncStageError, InvalidTransitionError, StaleAsyncResultError, ErrorContext
from .state import WizardInstance, WizardStatus, WizardProgress
from .steps import WizardDefinition, ValidationResult

log = logging.getLogger(__name__)


class WizardController:
    """
    Step-sequencing state machine for one wizard run

    Transitions::

        in_progress --next (valid)--> in_progress
        in_progress --next on a stage step / submit--> awaiting_async
        awaiting_async --stage success--> in_progress (next step) | completed
        awaiting_async --stage failure--> in_progress (same step, retryable)
        any non-terminal --abort--> aborted
    """

    def __init__(self,
                 definition: WizardDefinition,
                 runner=None,
                 on_complete: Optional[Callable[[Dict[str, Any]], Any]] = None,
                 initial_values: Optional[Dict[str, Any]] = None,
                 module_id: Optional[str] = None):
        """
        Args:
            definition: Wizard definition to drive
            runner: ``AsyncStageRunner`` used for stage-bearing steps and submit
            on_complete: Called with the terminal stage data on success
            initial_values: Values pre-filled before the first step
            module_id: Mosaic module this run belongs to, for logging
        """
        self.definition = definition
        self.runner = runner
        self.on_complete = on_complete
        self.module_id = module_id or definition.wizard_id
        self.instance = WizardInstance(definition, initial_values)
        self._pending: Optional[asyncio.Future] = None

    # Read-only views of the instance

    @property
    def status(self) -> WizardStatus:
        return self.instance.status

    @property
    def values(self) -> Dict[str, Any]:
        return dict(self.instance.values)

    @property
    def errors(self) -> Dict[str, str]:
        return self.instance.errors

    @property
    def current_step_index(self) -> int:
        return self.instance.current_step_index

    @property
    def current_step(self):
        return self.instance.current_step

    @property
    def last_error(self) -> Optional[Dict[str, Any]]:
        return self.instance.last_error

    @property
    def result(self) -> Optional[Dict[str, Any]]:
        return self.instance.result

    @property
    def stale_results(self) -> int:
        return self.instance.stale_results

    @property
    def is_pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def progress(self) -> WizardProgress:
        return WizardProgress(self.instance.current_step_index + 1, self.instance.total_steps)

    def validate_current_step(self) -> ValidationResult:
        return self.instance.current_step.validate(self.instance.values)

    # Navigation

    def set_field(self, name: str, value: Any) -> bool:
        """Store a value; validation waits for the next ``next()``"""
        if not self._check_interactive('set_field'):
            return False

        self.instance.values[name] = value
        self.instance.clear_field_error(name)
        self.instance.touch()
        return True

    def set_fields(self, values: Dict[str, Any]) -> bool:
        if not self._check_interactive('set_fields'):
            return False

        for name, value in values.items():
            self.set_field(name, value)
        return True

    def next(self) -> bool:
        """
        Validate the current step and move forward

        On the last step this submits the wizard. On a step carrying a stage
        the move happens once the stage succeeds.

        Returns:
            True if the transition was accepted
        """
        if not self._check_interactive('next'):
            return False

        if self.instance.is_last_step:
            return self.submit()

        step = self.instance.current_step
        if not self._validate_step(step):
            return False

        if step.stage is not None:
            return self._start_stage(step.stage, terminal=False)

        self._advance()
        return True

    def prev(self) -> bool:
        """Move back one step without validating"""
        if not self._check_interactive('prev'):
            return False

        if self.instance.current_step_index == 0:
            return False

        self.instance.move_to(self.instance.current_step_index - 1)
        log.debug(f"Wizard '{self.module_id}' back to step {self.instance.current_step.name}")
        return True

    def go_to(self, step_index: int) -> bool:
        """Jump to a step that has already been reached"""
        if not self._check_interactive('go_to'):
            return False

        if not 0 <= step_index <= self.instance.highest_reached_index:
            InvalidTransitionError.report(
                f"Wizard '{self.module_id}' cannot jump to step {step_index}; "
                f"highest reached is {self.instance.highest_reached_index}",
                context=self._context('go_to'),
            )
            return False

        self.instance.move_to(step_index)
        return True

    def submit(self) -> bool:
        """
        Validate the last step and run the terminal stage

        Returns:
            True if the wizard completed or is now awaiting its stage
        """
        if not self._check_interactive('submit'):
            return False

        if not self.instance.is_last_step:
            InvalidTransitionError.report(
                f"Wizard '{self.module_id}' submitted from step "
                f"{self.instance.current_step.name}, not the last step",
                context=self._context('submit'),
            )
            return False

        if not self._validate_step(self.instance.current_step):
            return False

        if self.definition.stage is None:
            self._complete(dict(self.instance.values))
            return True

        return self._start_stage(self.definition.stage, terminal=True)

    def abort(self) -> bool:
        """Cancel the run; a stage still in flight is ignored when it resolves"""
        if self.instance.status.is_terminal:
            return False

        self.instance.status = WizardStatus.ABORTED
        self.instance.generation += 1
        self.instance.touch()
        log.info(f"Wizard '{self.module_id}' aborted at step {self.instance.current_step.name}")
        return True

    def dismiss_error(self):
        self.instance.last_error = None

    async def wait(self):
        """Wait for the pending stage, if any"""
        pending = self._pending
        if pending is not None:
            await pending
            if self._pending is pending:
                self._pending = None

    def to_dict(self) -> Dict[str, Any]:
        data = self.instance.to_dict()
        data['module_id'] = self.module_id
        data['progress'] = self.progress().to_dict()
        return data

    # Internals

    def _check_interactive(self, operation: str) -> bool:
        if self.instance.status == WizardStatus.IN_PROGRESS:
            return True

        InvalidTransitionError.report(
            f"Wizard '{self.module_id}' ignored {operation}() while {self.instance.status.value}",
            context=self._context(operation),
        )
        return False

    def _validate_step(self, step) -> bool:
        result = step.validate(self.instance.values)
        self.instance.set_errors(step.name, result.errors)
        if not result.valid:
            log.warning(f"Wizard '{self.module_id}' step '{step.name}' invalid: {sorted(result.errors)}")
        return result.valid

    def _advance(self):
        self.instance.move_to(self.instance.current_step_index + 1)
        log.info(f"Wizard '{self.module_id}' moved to step {self.instance.current_step.name}")

    def _start_stage(self, stage, terminal: bool) -> bool:
        # Fails with RuntimeError outside a running loop, before any state change
        asyncio.get_running_loop()
        if self.runner is None:
            raise RuntimeError(f"Wizard '{self.module_id}' has no stage runner for '{stage.name}'")

        self.instance.status = WizardStatus.AWAITING_ASYNC
        self.instance.last_error = None
        self.instance.touch()
        log.info(f"Wizard '{self.module_id}' awaiting stage '{stage.name}'")

        coro = self._run_stage(stage, dict(self.instance.values), self.instance.generation, terminal)
        self._pending = asyncio.ensure_future(coro)
        return True

    async def _run_stage(self, stage, values: Dict[str, Any], generation: int, terminal: bool):
        try:
            result = await self.runner.run(stage, values)
        except asyncio.CancelledError:
            if generation == self.instance.generation and self.instance.status == WizardStatus.AWAITING_ASYNC:
                self.instance.status = WizardStatus.IN_PROGRESS
            raise

        if generation != self.instance.generation:
            self.instance.stale_results += 1
            StaleAsyncResultError.report(
                stage.name, generation, self.instance.generation,
                context=self._context('stage'),
            )
            return

        if not result.ok:
            error = AsyncStageError(stage.name, result.error_kind, result.message,
                                    context=self._context('stage'))
            self.instance.status = WizardStatus.IN_PROGRESS
            self.instance.last_error = error.to_banner()
            self.instance.touch()
            return

        if terminal:
            self._complete(result.data)
        else:
            self.instance.values.update(result.data)
            self.instance.status = WizardStatus.IN_PROGRESS
            self._advance()

    def _complete(self, data: Dict[str, Any]):
        self.instance.result = dict(data)
        self.instance.status = WizardStatus.COMPLETED
        self.instance.touch()
        log.info(f"Wizard '{self.module_id}' completed")
        if self.on_complete is not None:
            self.on_complete(dict(data))

    def _context(self, operation: str) -> ErrorContext:
        return ErrorContext(
            module_id=self.module_id,
            wizard_id=self.definition.wizard_id,
            step_id=self.instance.current_step.name,
            operation=operation,
        )
