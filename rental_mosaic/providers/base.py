"""
External Provider Interfaces

Abstract collaborators called by wizard stages. Each returns a plain result
object after an asynchronous delay; concrete providers (real services or the
simulated ones) are injected through a ``ProviderRegistry``.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Any, Optional

log = logging.getLogger(__name__)


class ProviderRejectedError(Exception):
    """A provider refused the request (bad data, declined signature, etc.)."""
    pass


class ScoringProvider(ABC):
    """Credit bureau lookup for a prospective tenant."""

    @abstractmethod
    async def score_person(self, full_name: str, passport: str, birth_date: str) -> Dict[str, Any]:
        """
        Returns:
            ``{score, risk_level, factors, bureau_data, recommendations}``
        """
        pass


class SignatureProvider(ABC):
    """Electronic signature with a one-time verification code."""

    @abstractmethod
    async def send_verification_code(self, signer_id: str, channel: str) -> None:
        pass

    @abstractmethod
    async def confirm_signature(self, document_id: str, code: str) -> Dict[str, Any]:
        """
        Returns:
            ``{signed, signed_at, certificate_id}``
        """
        pass


class ContentOptimizationProvider(ABC):
    """Rewrites a listing draft for publication."""

    @abstractmethod
    async def optimize(self, draft: Dict[str, Any]) -> Dict[str, Any]:
        """
        Returns:
            ``{title, description, tags, highlights}``
        """
        pass


class ListingPublishProvider(ABC):
    """Publishes listing content to rental platforms."""

    @abstractmethod
    async def publish(self, content: Dict[str, Any], platform_ids: List[str]) -> List[Dict[str, Any]]:
        """
        Returns:
            One ``{platform_id, published, listing_url, views, contacts}`` per platform
        """
        pass


class ContractProvider(ABC):
    """Renders a rental contract document."""

    @abstractmethod
    async def generate_contract(self, template_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Returns:
            ``{contract_id, file_name, content}``
        """
        pass


class InventoryProvider(ABC):
    """Photo recognition and hand-over act generation for property inventory."""

    @abstractmethod
    async def analyze_photos(self, photos: List[str]) -> Dict[str, Any]:
        """
        Returns:
            ``{items: [{name, category, condition, estimated_value, confidence}]}``
        """
        pass

    @abstractmethod
    async def generate_act(self, items: List[Dict[str, Any]], values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Returns:
            ``{act_id, file_name}``
        """
        pass


@dataclass
class ProviderRegistry:
    """The set of providers available to one mosaic session."""

    scoring: Optional[ScoringProvider] = None
    signature: Optional[SignatureProvider] = None
    content: Optional[ContentOptimizationProvider] = None
    listing: Optional[ListingPublishProvider] = None
    contract: Optional[ContractProvider] = None
    inventory: Optional[InventoryProvider] = None

    def require(self, name: str):
        """
        Get a configured provider

        Raises:
            ProviderRejectedError: If no provider is configured under ``name``
        """
        provider = getattr(self, name, None)
        if provider is None:
            log.error(f"No '{name}' provider configured")
            raise ProviderRejectedError(f"No '{name}' provider configured")
        return provider
