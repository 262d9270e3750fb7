"""
Tests for AsyncStageRunner error conversion, timeouts and the in-flight guard
"""

import asyncio
import pytest
from unittest.mock import AsyncMock

from rental_mosaic.exceptions import StageErrorKind, StageInFlightError
from rental_mosaic.providers.base import ProviderRegistry, ProviderRejectedError, ScoringProvider
from rental_mosaic.stages.base import StageResult
from rental_mosaic.stages.builtin import (
    ScoringStage, PublishListingStage, ConfirmSignatureStage, score_label, overall_assessment,
)
from rental_mosaic.stages.runner import AsyncStageRunner

from fakes import SCORING_VALUES, FakeScoringProvider, SlowScoringProvider, fake_providers


def scoring_mock(**kwargs):
    provider = AsyncMock(spec=ScoringProvider)
    provider.score_person = AsyncMock(**kwargs)
    return provider


def run_scoring(provider, timeout=1.0):
    runner = AsyncStageRunner(ProviderRegistry(scoring=provider), timeout=timeout)
    return asyncio.run(runner.run(ScoringStage(), dict(SCORING_VALUES)))


class TestStageResults:
    """Test conversion of provider outcomes into StageResult"""

    def test_success(self):
        provider = scoring_mock(return_value={'score': 850, 'risk_level': 'low', 'extra': 'dropped'})

        result = run_scoring(provider)

        assert result.ok is True
        assert result.error_kind is None
        assert result.data['score'] == 850
        assert result.data['score_label'] == 'excellent'
        assert result.data['assessment']['deposit_months'] == 1
        assert result.data['factors'] == {}
        assert 'extra' not in result.data
        provider.score_person.assert_awaited_once_with('Иванов Иван', '1234 567890', '1990-01-01')

    def test_timeout(self):
        result = run_scoring(SlowScoringProvider(delay=5), timeout=0.05)

        assert result == StageResult.failure(StageErrorKind.TIMEOUT, result.message)
        assert result.ok is False

    def test_provider_rejection(self):
        result = run_scoring(scoring_mock(side_effect=ProviderRejectedError('Passport not found')))

        assert result.error_kind == StageErrorKind.REJECTED
        assert result.message == 'Passport not found'

    def test_unexpected_provider_exception_is_contained(self):
        result = run_scoring(scoring_mock(side_effect=ConnectionError('bureau unreachable')))

        assert result.error_kind == StageErrorKind.REJECTED
        assert 'bureau unreachable' in result.message

    @pytest.mark.parametrize('response', [
        {'score': 1500, 'risk_level': 'low'},
        {'score': 700, 'risk_level': 'extreme'},
        {'risk_level': 'low'},
        ['not', 'a', 'mapping'],
        None,
    ])
    def test_malformed_response(self, response):
        result = run_scoring(scoring_mock(return_value=response))

        assert result.error_kind == StageErrorKind.INVALID_RESPONSE

    def test_missing_provider_is_rejected(self):
        runner = AsyncStageRunner(ProviderRegistry(), timeout=1)

        result = asyncio.run(runner.run(ScoringStage(), dict(SCORING_VALUES)))

        assert result.error_kind == StageErrorKind.REJECTED

    def test_publish_requires_one_published_platform(self):
        runner = AsyncStageRunner(fake_providers(), timeout=1)
        values = {'title': 'Flat', 'description': 'Nice', 'platform_ids': ['avito', 'cian']}

        result = asyncio.run(runner.run(PublishListingStage(), values))

        assert result.ok
        assert result.data['published_count'] == 2
        assert result.data['total_views'] == 20

    def test_unsigned_confirmation_is_rejected(self):
        runner = AsyncStageRunner(fake_providers(), timeout=1)
        values = {'document_id': 'd-1', 'signer_id': 's-1', 'verification_code': '000000'}

        result = asyncio.run(runner.run(ConfirmSignatureStage(), values))

        assert result.error_kind == StageErrorKind.REJECTED

    def test_result_to_dict(self):
        assert StageResult.failure(StageErrorKind.TIMEOUT, 'late').to_dict() == {
            'ok': False, 'data': {}, 'error_kind': 'timeout', 'message': 'late'}


class TestInFlightGuard:

    def test_second_run_while_pending_is_rejected(self):
        async def scenario():
            scoring = FakeScoringProvider()
            scoring.gate = asyncio.Event()
            runner = AsyncStageRunner(fake_providers(scoring=scoring), timeout=1)

            first = asyncio.ensure_future(runner.run(ScoringStage(), dict(SCORING_VALUES)))
            await asyncio.sleep(0)
            in_flight = runner.in_flight
            with pytest.raises(StageInFlightError):
                await runner.run(ScoringStage(), dict(SCORING_VALUES))

            scoring.gate.set()
            result = await first
            return runner, scoring, in_flight, result

        runner, scoring, in_flight, result = asyncio.run(scenario())

        assert in_flight is True
        assert len(scoring.calls) == 1
        assert result.ok
        assert runner.in_flight is False

    def test_runner_is_free_after_failure(self):
        async def scenario():
            runner = AsyncStageRunner(fake_providers(scoring=SlowScoringProvider()), timeout=0.05)
            first = await runner.run(ScoringStage(), dict(SCORING_VALUES))
            runner.providers.scoring = FakeScoringProvider()
            second = await runner.run(ScoringStage(), dict(SCORING_VALUES))
            return first, second

        first, second = asyncio.run(scenario())

        assert first.error_kind == StageErrorKind.TIMEOUT
        assert second.ok


class TestScoringAssessment:

    @pytest.mark.parametrize('score,label', [(1000, 'excellent'), (800, 'excellent'), (799, 'good'),
                                             (650, 'good'), (649, 'risky'), (0, 'risky')])
    def test_score_label(self, score, label):
        assert score_label(score) == label

    def test_assessment_depends_on_risk(self):
        assert overall_assessment(820, 'low')['rating'] == 'excellent'
        assert overall_assessment(820, 'medium')['rating'] == 'satisfactory'
        assert overall_assessment(600, 'high')['guarantor_required'] is True
