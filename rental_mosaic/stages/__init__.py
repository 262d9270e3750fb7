from .base import Stage, StageResult
from .runner import AsyncStageRunner
from .builtin import (
    ContractGenerationStage, ScoringStage, PhotoAnalysisStage, InventoryActStage,
    SendVerificationCodeStage, ConfirmSignatureStage, ContentOptimizationStage,
    PublishListingStage,
)

__all__ = [
    'Stage',
    'StageResult',
    'AsyncStageRunner',
    'ContractGenerationStage',
    'ScoringStage',
    'PhotoAnalysisStage',
    'InventoryActStage',
    'SendVerificationCodeStage',
    'ConfirmSignatureStage',
    'ContentOptimizationStage',
    'PublishListingStage',
]
