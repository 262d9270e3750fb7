__version__ = "0.1.0"

from .config import MosaicConfig, get_mosaic_config  # noqa: E402
from .exceptions import (  # noqa: E402
    MosaicError, AsyncStageError, InvalidTransitionError,
    StaleAsyncResultError, StageInFlightError, CatalogError, SessionNotFoundError,
    StageErrorKind,
)
from .mosaic import (  # noqa: E402
    ModuleDescriptor, ModuleGraph, ModuleStatus, WorkflowAggregator, WorkflowResult,
    MosaicSession, SessionRegistry,
)
from .providers import ProviderRegistry, ProviderRejectedError, simulated_providers  # noqa: E402
from .stages import AsyncStageRunner, Stage, StageResult  # noqa: E402
from .wizard import (  # noqa: E402
    StepDefinition, WizardDefinition, ValidationResult, StepValidator,
    WizardController, WizardInstance, WizardStatus, WizardProgress, WIZARDS,
)
