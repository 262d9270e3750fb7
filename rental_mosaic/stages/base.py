"""
Stage Base Classes

A stage is one asynchronous provider call made on behalf of a wizard: it
invokes the provider, its schema checks the answer, and ``build_result``
turns the answer into the data handed back to the wizard.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Any, Optional

from marshmallow import Schema

from ..exceptions import StageErrorKind


@dataclass
class StageResult:
    """Outcome of one stage run: ``data`` on success, ``error_kind`` otherwise."""

    ok: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error_kind: Optional[StageErrorKind] = None
    message: str = ""

    @classmethod
    def success(cls, data: Dict[str, Any]) -> 'StageResult':
        return cls(ok=True, data=dict(data))

    @classmethod
    def failure(cls, kind: StageErrorKind, message: str = "") -> 'StageResult':
        return cls(ok=False, error_kind=kind, message=message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ok': self.ok,
            'data': dict(self.data),
            'error_kind': self.error_kind.value if self.error_kind else None,
            'message': self.message,
        }


class Stage(ABC):
    """
    Base class for provider stages.

    Subclasses set ``name`` and ``schema`` and implement ``invoke``. A
    stage whose provider returns a list sets ``many = True``.
    """

    name: str = "stage"
    schema: Optional[Schema] = None
    many: bool = False

    @abstractmethod
    async def invoke(self, providers, values: Dict[str, Any]) -> Any:
        """Call the provider with the wizard values and return its raw answer."""
        pass

    def parse(self, raw: Any) -> Any:
        """
        Load the raw answer through the schema

        Raises:
            marshmallow.ValidationError: If the answer is malformed
        """
        if self.schema is None:
            return raw
        return self.schema.load(raw, many=self.many)

    def build_result(self, data: Any, values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Shape the loaded answer into wizard data

        Raises:
            ProviderRejectedError: If the answer is well-formed but negative
        """
        return data

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.name}>"
