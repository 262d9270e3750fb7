"""
Asynchronous Stage Runner

Runs one stage at a time under a timeout and converts every provider
failure into a ``StageResult``. Provider exceptions never escape ``run``.
"""

import asyncio
import logging
from typing import Dict, Any, Optional

from marshmallow import ValidationError

from ..exceptions import StageErrorKind, StageInFlightError
from ..providers.base import ProviderRegistry, ProviderRejectedError
from .base import Stage, StageResult

log = logging.getLogger(__name__)


class AsyncStageRunner:
    """
    Executes stages for a single wizard run

    At most one stage is in flight per runner; a second ``run`` while one is
    pending raises ``StageInFlightError`` before the provider is called.
    """

    def __init__(self, providers: ProviderRegistry, timeout: float = 30.0):
        """
        Args:
            providers: Provider registry passed to each stage
            timeout: Maximum wait for a provider answer, in seconds
        """
        self.providers = providers
        self.timeout = timeout
        self._in_flight: Optional[str] = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None

    async def run(self, stage: Stage, values: Dict[str, Any]) -> StageResult:
        """
        Run a stage against the wizard values

        Args:
            stage: Stage to execute
            values: Snapshot of the accumulated wizard values

        Returns:
            StageResult with the stage data or the failure kind

        Raises:
            StageInFlightError: If another stage is still running on this runner
        """
        if self._in_flight is not None:
            raise StageInFlightError(stage.name)

        self._in_flight = stage.name
        log.info(f"Stage '{stage.name}' started (timeout {self.timeout}s)")
        try:
            return await self._execute(stage, values)
        finally:
            self._in_flight = None

    async def _execute(self, stage: Stage, values: Dict[str, Any]) -> StageResult:
        try:
            raw = await asyncio.wait_for(stage.invoke(self.providers, values), timeout=self.timeout)
            data = stage.build_result(stage.parse(raw), values)
        except asyncio.TimeoutError:
            log.warning(f"Stage '{stage.name}' timed out after {self.timeout}s")
            return StageResult.failure(StageErrorKind.TIMEOUT, f"No answer within {self.timeout:g} seconds")
        except ValidationError as e:
            log.warning(f"Stage '{stage.name}' got a malformed answer: {e.messages}")
            return StageResult.failure(StageErrorKind.INVALID_RESPONSE, "The service returned an unexpected answer")
        except ProviderRejectedError as e:
            log.warning(f"Stage '{stage.name}' rejected: {e}")
            return StageResult.failure(StageErrorKind.REJECTED, str(e))
        except Exception as e:
            log.exception(f"Stage '{stage.name}' failed with an unexpected provider error")
            return StageResult.failure(StageErrorKind.REJECTED, str(e) or type(e).__name__)

        log.info(f"Stage '{stage.name}' succeeded")
        return StageResult.success(data)
