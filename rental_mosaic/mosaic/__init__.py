from .aggregator import WorkflowAggregator, WorkflowResult
from .catalog import DEFAULT_MODULES
from .graph import ModuleDescriptor, ModuleGraph, ModuleStatus, validate_catalog
from .session import MosaicSession, SessionRegistry

__all__ = [
    'WorkflowAggregator',
    'WorkflowResult',
    'DEFAULT_MODULES',
    'ModuleDescriptor',
    'ModuleGraph',
    'ModuleStatus',
    'validate_catalog',
    'MosaicSession',
    'SessionRegistry',
]
