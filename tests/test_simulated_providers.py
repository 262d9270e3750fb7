"""
Tests for the simulated providers and the error hierarchy
"""

import asyncio
import logging
import pytest

from rental_mosaic.exceptions import (
    AsyncStageError, CatalogError, InvalidTransitionError, SessionNotFoundError, StaleAsyncResultError,
    StageErrorKind, RecoveryAction,
)
from rental_mosaic.providers.base import ProviderRejectedError, ProviderRegistry
from rental_mosaic.providers.simulated import simulated_providers
from rental_mosaic.stages.runner import AsyncStageRunner
from rental_mosaic.stages.builtin import (
    ContractGenerationStage, PhotoAnalysisStage, PublishListingStage, ScoringStage,
)

from fakes import CONTRACT_VALUES, SCORING_VALUES


class TestSimulatedProviders:

    def test_same_seed_same_answers(self):
        async def score(seed):
            providers = simulated_providers(seed=seed)
            return await providers.scoring.score_person('Ivanov Ivan', '1234 567890', '1990-01-01')

        assert asyncio.run(score(3)) == asyncio.run(score(3))

    @pytest.mark.parametrize('stage,values', [
        (ScoringStage(), SCORING_VALUES),
        (ContractGenerationStage(), CONTRACT_VALUES),
        (PhotoAnalysisStage(), {'photos': ['a.jpg', 'b.jpg', 'c.jpg']}),
        (PublishListingStage(), {'title': 'Flat', 'description': 'Nice', 'platform_ids': ['cian', 'yandex']}),
    ])
    def test_answers_pass_response_schemas(self, stage, values):
        runner = AsyncStageRunner(simulated_providers(seed=1), timeout=1)

        result = asyncio.run(runner.run(stage, dict(values)))

        assert result.ok, result.message

    def test_signature_accepts_six_digit_codes_only(self):
        async def confirm(code):
            providers = simulated_providers(seed=1)
            return await providers.signature.confirm_signature('doc-1', code)

        assert asyncio.run(confirm('123456'))['signed'] is True
        assert asyncio.run(confirm('12ab56'))['signed'] is False

    def test_registry_require(self):
        with pytest.raises(ProviderRejectedError):
            ProviderRegistry().require('scoring')


class TestErrors:

    def test_stage_error_banner(self):
        error = AsyncStageError('score_tenant', StageErrorKind.TIMEOUT, 'No answer')

        assert error.to_banner() == {
            'stage': 'score_tenant', 'kind': 'timeout', 'message': 'No answer', 'retryable': True}
        assert error.should_retry()

    def test_error_to_dict(self):
        error = InvalidTransitionError('cannot jump')
        data = error.to_dict()['error']

        assert data['code'] == 'INVALID_TRANSITION'
        assert data['category'] == 'navigation'
        assert error.recovery_action == RecoveryAction.IGNORE
        assert not error.should_retry()

    def test_report_logs_and_returns_the_error(self, caplog):
        with caplog.at_level(logging.INFO, logger='rental_mosaic.exceptions'):
            error = StaleAsyncResultError.report('score_tenant', 1, 2)

        assert isinstance(error, StaleAsyncResultError)
        assert error.generation == 1
        assert "[STALE_ASYNC_RESULT] Dropped late result of stage 'score_tenant'" in caplog.text

    def test_catalog_error_is_a_value_error(self):
        assert isinstance(CatalogError('bad'), ValueError)

    def test_session_not_found_message(self):
        error = SessionNotFoundError('abc')

        assert isinstance(error, KeyError)
        assert str(error) == "Mosaic session 'abc' does not exist or has expired"
