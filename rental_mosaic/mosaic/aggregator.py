"""
Workflow Aggregator

Collects the output of completed modules into one workflow result. The
running ``total_cost`` always equals the summed price of the completed
modules, because ``record`` is the only way a module gets in.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Any, Optional, Mapping, Tuple

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkflowResult:
    """Immutable snapshot of a workflow."""

    completed_modules: Tuple[str, ...]
    module_data: Dict[str, Dict[str, Any]]
    total_cost: float
    completed_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'completed_modules': list(self.completed_modules),
            'module_data': {key: dict(value) for key, value in self.module_data.items()},
            'total_cost': self.total_cost,
            'completed_at': self.completed_at.isoformat(),
        }


class WorkflowAggregator:
    """Ordered record of completed modules, their data and their cost."""

    def __init__(self, prices: Mapping[str, float]):
        """
        Args:
            prices: Price of every module that may be recorded
        """
        self._prices = dict(prices)
        self._completed: List[str] = []
        self._module_data: Dict[str, Dict[str, Any]] = {}
        self._total_cost = 0
        self._delivered: Optional[WorkflowResult] = None

    @property
    def completed_modules(self) -> Tuple[str, ...]:
        return tuple(self._completed)

    @property
    def module_data(self) -> Dict[str, Dict[str, Any]]:
        return {key: dict(value) for key, value in self._module_data.items()}

    @property
    def total_cost(self) -> float:
        return self._total_cost

    @property
    def delivered(self) -> Optional[WorkflowResult]:
        """The first finalized result, if any"""
        return self._delivered

    def is_completed(self, module_id: str) -> bool:
        return module_id in self._module_data

    def price(self, module_id: str) -> float:
        try:
            return self._prices[module_id]
        except KeyError:
            raise KeyError(f"Unknown module '{module_id}'") from None

    def record(self, module_id: str, data: Optional[Dict[str, Any]] = None):
        """
        Record a completed module

        Recording a module again replaces its data without adding its price
        a second time.

        Raises:
            KeyError: If the module has no known price
        """
        price = self.price(module_id)
        if module_id not in self._module_data:
            self._completed.append(module_id)
            self._total_cost += price
            log.info(f"Module '{module_id}' completed, total cost {self._total_cost}")
        else:
            log.info(f"Module '{module_id}' completed again, data replaced")
        self._module_data[module_id] = dict(data or {})

    def finalize(self) -> WorkflowResult:
        """
        Snapshot the workflow

        Every call returns a new snapshot; the first one is kept as the
        delivered result.
        """
        result = WorkflowResult(
            completed_modules=self.completed_modules,
            module_data=self.module_data,
            total_cost=self._total_cost,
        )
        if self._delivered is None:
            self._delivered = result
            log.info(f"Workflow finalized with modules {list(result.completed_modules)}")
        return result
