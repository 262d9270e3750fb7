from .base import (
    ProviderRejectedError, ProviderRegistry, ScoringProvider, SignatureProvider,
    ContentOptimizationProvider, ListingPublishProvider, ContractProvider, InventoryProvider,
)
from .simulated import simulated_providers

__all__ = [
    'ProviderRejectedError',
    'ProviderRegistry',
    'ScoringProvider',
    'SignatureProvider',
    'ContentOptimizationProvider',
    'ListingPublishProvider',
    'ContractProvider',
    'InventoryProvider',
    'simulated_providers',
]
