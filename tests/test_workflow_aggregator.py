"""
Tests for WorkflowAggregator
"""

import pytest
from datetime import datetime

from rental_mosaic.mosaic.aggregator import WorkflowAggregator, WorkflowResult


class TestWorkflowAggregator:

    def test_duplicate_record_is_not_double_counted(self):
        aggregator = WorkflowAggregator({'A': 100, 'B': 50})

        aggregator.record('A', {})
        aggregator.record('B', {})
        aggregator.record('A', {})

        assert aggregator.completed_modules == ('A', 'B')
        assert aggregator.total_cost == 150

    def test_rerecord_overwrites_data(self):
        aggregator = WorkflowAggregator({'A': 100})

        aggregator.record('A', {'version': 1})
        aggregator.record('A', {'version': 2})

        assert aggregator.module_data == {'A': {'version': 2}}

    def test_total_cost_invariant_over_sequences(self):
        prices = {'A': 100, 'B': 50, 'C': 0, 'D': 18000}
        aggregator = WorkflowAggregator(prices)

        for module_id in ['C', 'A', 'C', 'D', 'A', 'B', 'D', 'B']:
            aggregator.record(module_id, {})
            assert aggregator.total_cost == sum(prices[m] for m in aggregator.completed_modules)

        assert aggregator.completed_modules == ('C', 'A', 'D', 'B')

    def test_unknown_module(self):
        aggregator = WorkflowAggregator({'A': 100})

        with pytest.raises(KeyError):
            aggregator.record('Z', {})
        assert aggregator.completed_modules == ()

    def test_module_data_is_a_copy(self):
        aggregator = WorkflowAggregator({'A': 100})
        aggregator.record('A', {'x': 1})

        aggregator.module_data['A']['x'] = 99

        assert aggregator.module_data == {'A': {'x': 1}}

    def test_finalize_snapshots(self):
        aggregator = WorkflowAggregator({'A': 100, 'B': 50})
        aggregator.record('A', {'doc': 'a'})

        first = aggregator.finalize()
        aggregator.record('B', {})
        second = aggregator.finalize()

        assert isinstance(first, WorkflowResult)
        assert first.completed_modules == ('A',)
        assert first.total_cost == 100
        assert second.completed_modules == ('A', 'B')
        assert second.total_cost == 150
        assert aggregator.delivered is first
        assert isinstance(first.completed_at, datetime)

    def test_result_to_dict(self):
        aggregator = WorkflowAggregator({'A': 100})
        aggregator.record('A', {'doc': 'a'})

        data = aggregator.finalize().to_dict()

        assert data['completed_modules'] == ['A']
        assert data['module_data'] == {'A': {'doc': 'a'}}
        assert data['total_cost'] == 100
        assert 'completed_at' in data
