"""
Mosaic Session

One user's "build your own deal" workflow: the module graph, the wizards
currently open on it and the provider registry they share. Sessions live
in a ``SessionRegistry`` until they expire.
"""

import uuid
import logging
import threading
from datetime import datetime, timedelta
from typing import Dict, List, Any, Optional, Callable

from ..config import MosaicConfig
from ..exceptions import InvalidTransitionError, SessionNotFoundError, ErrorContext
from ..providers.base import ProviderRegistry
from ..providers.simulated import simulated_providers
from ..stages.runner import AsyncStageRunner
from ..wizard.controller import WizardController
from ..wizard.definitions import get_wizard, initial_values
from .aggregator import WorkflowResult
from .graph import ModuleGraph, ModuleStatus

log = logging.getLogger(__name__)


class MosaicSession:
    """
    Orchestrates the wizards of one workflow

    Each open module has its own controller and stage runner, so stages of
    different modules may run concurrently. A wizard that completes hands its
    data to the graph and is discarded.
    """

    def __init__(self,
                 graph: ModuleGraph,
                 providers: ProviderRegistry,
                 config: Optional[MosaicConfig] = None,
                 property_context: Optional[Dict[str, Any]] = None,
                 on_complete: Optional[Callable[[WorkflowResult], Any]] = None,
                 session_id: Optional[str] = None):
        """
        Args:
            graph: Module graph owning the completed set
            providers: Providers used by every stage of this session
            config: Mosaic configuration (stage timeout, expiry)
            property_context: Property the deal is about, used to pre-fill wizards
            on_complete: Receives the first finalized workflow result
            session_id: Explicit id, generated when omitted
        """
        self.session_id = session_id or str(uuid.uuid4())
        self.graph = graph
        self.providers = providers
        self.config = config or MosaicConfig()
        self.property_context = dict(property_context or {})
        self.on_complete = on_complete
        self.lock = threading.RLock()
        self.created_at = datetime.utcnow()
        self.updated_at = self.created_at
        self._open: Dict[str, WizardController] = {}

    @property
    def expires_at(self) -> datetime:
        return self.updated_at + timedelta(days=self.config.expiration_days)

    @property
    def open_modules(self) -> List[str]:
        return list(self._open)

    @property
    def finalized(self) -> bool:
        return self.graph.aggregator.delivered is not None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.utcnow()) > self.expires_at

    def touch(self):
        self.updated_at = datetime.utcnow()

    def modules(self) -> List[Dict[str, Any]]:
        """Module descriptors with their current status, in catalog order"""
        return self.graph.to_list()

    def controller(self, module_id: str) -> Optional[WizardController]:
        return self._open.get(module_id)

    def open_module(self, module_id: str) -> Optional[WizardController]:
        """
        Open the wizard of an available module

        Returns:
            The module's controller (the existing one when already open), or
            None when the module is not available or has no wizard
        """
        self.touch()
        existing = self._open.get(module_id)
        if existing is not None:
            if not existing.status.is_terminal:
                return existing
            del self._open[module_id]

        descriptor = self.graph.descriptor(module_id)
        status = self.graph.status_of(module_id)
        if status != ModuleStatus.AVAILABLE:
            InvalidTransitionError.report(
                f"Module '{module_id}' is {status.value} and cannot be opened",
                context=self._context(module_id, 'open_module'),
            )
            return None

        definition = get_wizard(descriptor.wizard) if descriptor.wizard else None
        if definition is None:
            InvalidTransitionError.report(
                f"Module '{module_id}' has no wizard",
                context=self._context(module_id, 'open_module'),
            )
            return None

        controller = WizardController(
            definition,
            runner=AsyncStageRunner(self.providers, timeout=self.config.stage_timeout),
            on_complete=lambda data, module_id=module_id: self._module_completed(module_id, data),
            initial_values=initial_values(
                definition.wizard_id, self.property_context, self.graph.aggregator.module_data),
            module_id=module_id,
        )
        self._open[module_id] = controller
        log.info(f"Session {self.session_id} opened module '{module_id}'")
        return controller

    def close_module(self, module_id: str) -> bool:
        """Abort and discard an open wizard"""
        self.touch()
        controller = self._open.pop(module_id, None)
        if controller is None:
            return False

        controller.abort()
        log.info(f"Session {self.session_id} closed module '{module_id}'")
        return True

    def finalize(self) -> Optional[WorkflowResult]:
        """
        Snapshot the workflow

        Returns:
            The workflow result, or None while no module is completed
        """
        self.touch()
        if not self.graph.completed_modules:
            InvalidTransitionError.report(
                f"Session {self.session_id} cannot be finalized before any module is completed",
                context=self._context(None, 'finalize'),
            )
            return None

        first = not self.finalized
        result = self.graph.aggregator.finalize()
        if first and self.on_complete is not None:
            self.on_complete(result)
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            'session_id': self.session_id,
            'property': dict(self.property_context),
            'modules': self.modules(),
            'completed_modules': list(self.graph.completed_modules),
            'total_cost': self.graph.total_cost,
            'open_modules': self.open_modules,
            'finalized': self.finalized,
            'created_at': self.created_at.isoformat(),
            'expires_at': self.expires_at.isoformat(),
        }

    def _module_completed(self, module_id: str, data: Dict[str, Any]):
        self._open.pop(module_id, None)
        self.graph.complete(module_id, data)
        self.touch()

    def _context(self, module_id: Optional[str], operation: str) -> ErrorContext:
        return ErrorContext(session_id=self.session_id, module_id=module_id, operation=operation)


class SessionRegistry:
    """Thread-safe in-memory store of mosaic sessions with idle expiry."""

    def __init__(self, config: Optional[MosaicConfig] = None,
                 providers_factory: Optional[Callable[[], ProviderRegistry]] = None):
        """
        Args:
            config: Configuration applied to every new session
            providers_factory: Builds the providers of a new session; the
                simulated providers are used when omitted
        """
        self.config = config or MosaicConfig()
        self.providers_factory = providers_factory or (
            lambda: simulated_providers(self.config.simulated_delay, self.config.provider_seed))
        self._sessions: Dict[str, MosaicSession] = {}
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._sessions)

    def create(self, property_context: Optional[Dict[str, Any]] = None,
               on_complete: Optional[Callable[[WorkflowResult], Any]] = None) -> MosaicSession:
        session = MosaicSession(
            graph=ModuleGraph.from_config(self.config.modules),
            providers=self.providers_factory(),
            config=self.config,
            property_context=property_context,
            on_complete=on_complete,
        )
        with self._lock:
            self._sessions[session.session_id] = session
        log.info(f"Created mosaic session {session.session_id}")
        return session

    def get(self, session_id: str) -> MosaicSession:
        """
        Raises:
            SessionNotFoundError: If the session does not exist or has expired
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None and session.is_expired():
                del self._sessions[session_id]
                log.info(f"Mosaic session {session_id} expired")
                session = None
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def delete(self, session_id: str):
        """
        Raises:
            SessionNotFoundError: If the session does not exist
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)

        with session.lock:
            for module_id in session.open_modules:
                session.close_module(module_id)
        log.info(f"Deleted mosaic session {session_id}")

    def cleanup_expired(self) -> int:
        """Drop expired sessions and return how many were removed"""
        now = datetime.utcnow()
        with self._lock:
            expired = [sid for sid, session in self._sessions.items() if session.is_expired(now)]
            for session_id in expired:
                del self._sessions[session_id]

        if expired:
            log.info(f"Cleaned up {len(expired)} expired mosaic sessions")
        return len(expired)
