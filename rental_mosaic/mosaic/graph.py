"""
Module Dependency Graph

Governs which mosaic modules can be opened. A module's status is never
stored: it is derived on every call from the aggregator's completed set,
the module's dependencies and its configured lock.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Any, Optional, Iterable, Tuple

from ..exceptions import CatalogError, InvalidTransitionError, ErrorContext, ErrorSeverity
from .aggregator import WorkflowAggregator
from .catalog import DEFAULT_MODULES

log = logging.getLogger(__name__)


class ModuleStatus(Enum):
    LOCKED = "locked"
    AVAILABLE = "available"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ModuleDescriptor:
    """Static description of one module."""

    id: str
    price: float = 0
    dependencies: Tuple[str, ...] = ()
    required: bool = False
    locked: bool = False
    title: str = ''
    description: str = ''
    wizard: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ModuleDescriptor':
        return cls(
            id=data['id'],
            price=data.get('price', 0),
            dependencies=tuple(data.get('dependencies') or ()),
            required=bool(data.get('required', False)),
            locked=bool(data.get('locked', False)),
            title=data.get('title') or data['id'],
            description=data.get('description', ''),
            wizard=data.get('wizard'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'price': self.price,
            'dependencies': list(self.dependencies),
            'required': self.required,
            'locked': self.locked,
            'wizard': self.wizard,
        }


def validate_catalog(modules: Iterable[ModuleDescriptor]) -> List[str]:
    """
    Check that modules form a valid dependency DAG

    Returns:
        List of validation error messages
    """
    modules = list(modules)
    errors = []
    ids = [module.id for module in modules]
    known = set(ids)

    for module_id in sorted({module_id for module_id in ids if ids.count(module_id) > 1}):
        errors.append(f"Module '{module_id}' is defined more than once")

    for module in modules:
        if not isinstance(module.price, (int, float)) or isinstance(module.price, bool) or module.price < 0:
            errors.append(f"Module '{module.id}' must have a non-negative price")
        for dependency in module.dependencies:
            if dependency not in known:
                errors.append(f"Module '{module.id}' depends on unknown module '{dependency}'")
            elif dependency == module.id:
                errors.append(f"Module '{module.id}' depends on itself")

    edges = {module.id: [dep for dep in module.dependencies if dep in known] for module in modules}
    cycle = _find_cycle(edges)
    if cycle:
        errors.append(f"Circular module dependency: {' -> '.join(cycle)}")

    return errors


def _find_cycle(edges: Dict[str, List[str]]) -> Optional[List[str]]:
    """Depth-first search returning one dependency cycle, or None"""
    visiting, done = set(), set()
    path: List[str] = []

    def visit(node: str) -> Optional[List[str]]:
        visiting.add(node)
        path.append(node)
        for dependency in edges.get(node, ()):
            if dependency in visiting:
                return path[path.index(dependency):] + [dependency]
            if dependency not in done:
                cycle = visit(dependency)
                if cycle:
                    return cycle
        visiting.discard(node)
        done.add(node)
        path.pop()
        return None

    for node in edges:
        if node not in done:
            cycle = visit(node)
            if cycle:
                return cycle
    return None


class ModuleGraph:
    """
    Dependency graph over mosaic modules

    Listing order is configuration order. The aggregator is the single
    owner of the completed set; ``complete`` is the only way to add to it.
    """

    def __init__(self, modules: Iterable[ModuleDescriptor],
                 aggregator: Optional[WorkflowAggregator] = None):
        """
        Raises:
            CatalogError: On duplicate ids, negative prices, unknown
                dependencies or dependency cycles
        """
        modules = list(modules)
        errors = validate_catalog(modules)
        if errors:
            raise CatalogError("; ".join(errors))

        self._modules: Dict[str, ModuleDescriptor] = {module.id: module for module in modules}
        self.aggregator = aggregator or WorkflowAggregator(
            {module.id: module.price for module in modules})

    @classmethod
    def from_config(cls, modules: Optional[List[Dict[str, Any]]] = None) -> 'ModuleGraph':
        """Build a graph from module dicts, defaulting to the built-in catalog"""
        return cls(ModuleDescriptor.from_dict(data) for data in (modules or DEFAULT_MODULES))

    @property
    def modules(self) -> List[ModuleDescriptor]:
        return list(self._modules.values())

    @property
    def completed_modules(self) -> Tuple[str, ...]:
        return self.aggregator.completed_modules

    @property
    def total_cost(self) -> float:
        return self.aggregator.total_cost

    def __contains__(self, module_id: str) -> bool:
        return module_id in self._modules

    def descriptor(self, module_id: str) -> ModuleDescriptor:
        try:
            return self._modules[module_id]
        except KeyError:
            raise KeyError(f"Unknown module '{module_id}'") from None

    def status_of(self, module_id: str) -> ModuleStatus:
        module = self.descriptor(module_id)
        if self.aggregator.is_completed(module_id):
            return ModuleStatus.COMPLETED
        if module.locked:
            return ModuleStatus.LOCKED
        if all(self.aggregator.is_completed(dep) for dep in module.dependencies):
            return ModuleStatus.AVAILABLE
        return ModuleStatus.LOCKED

    def available_modules(self) -> List[ModuleDescriptor]:
        return [module for module in self._modules.values()
                if self.status_of(module.id) == ModuleStatus.AVAILABLE]

    def complete(self, module_id: str, data: Optional[Dict[str, Any]] = None) -> bool:
        """
        Mark a module completed with its result data

        Returns:
            False, without recording anything, if the module is locked
        """
        if self.status_of(module_id) == ModuleStatus.LOCKED:
            InvalidTransitionError.report(
                f"Module '{module_id}' is locked and cannot be completed",
                severity=ErrorSeverity.HIGH,
                context=ErrorContext(module_id=module_id, operation='complete'),
            )
            return False

        self.aggregator.record(module_id, data)
        return True

    def to_list(self) -> List[Dict[str, Any]]:
        items = []
        for module in self._modules.values():
            item = module.to_dict()
            item['status'] = self.status_of(module.id).value
            items.append(item)
        return items
