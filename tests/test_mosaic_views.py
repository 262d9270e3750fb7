"""
Tests for the mosaic JSON API blueprint
"""

import pytest

from rental_mosaic.app import create_app
from rental_mosaic.config import get_mosaic_config
from rental_mosaic.mosaic.session import SessionRegistry

from fakes import CONTRACT_VALUES, SCORING_VALUES, fake_providers


@pytest.fixture
def app():
    registry = SessionRegistry(get_mosaic_config('testing'), providers_factory=fake_providers)
    app = create_app({'TESTING': True}, registry=registry)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session_id(client):
    response = client.post('/api/mosaic/sessions', json={'property': {'title': 'Loft', 'monthly_rent': 60000}})
    assert response.status_code == 201
    return response.get_json()['session_id']


def module_url(session_id, module_id, action=''):
    url = f'/api/mosaic/sessions/{session_id}/modules/{module_id}'
    return f'{url}/{action}' if action else url


class TestSessions:

    def test_create_session(self, client):
        response = client.post('/api/mosaic/sessions', json={'property': {'title': 'Loft'}})

        assert response.status_code == 201
        data = response.get_json()
        assert data['property'] == {'title': 'Loft'}
        assert data['total_cost'] == 0
        assert [m['status'] for m in data['modules']][:4] == ['available', 'available', 'available', 'locked']

    def test_create_session_without_body(self, client):
        response = client.post('/api/mosaic/sessions')

        assert response.status_code == 201
        assert response.get_json()['property'] == {}

    def test_get_session_lists_open_wizards(self, client, session_id):
        client.post(module_url(session_id, 'scoring', 'open'))

        data = client.get(f'/api/mosaic/sessions/{session_id}').get_json()

        assert data['open_modules'] == ['scoring']
        assert data['wizards']['scoring']['current_step'] == 'applicant'

    def test_unknown_session(self, client):
        response = client.get('/api/mosaic/sessions/does-not-exist')

        assert response.status_code == 404
        assert response.get_json()['error']['code'] == 'SESSION_NOT_FOUND'

    def test_delete_session(self, client, session_id):
        assert client.delete(f'/api/mosaic/sessions/{session_id}').status_code == 204
        assert client.get(f'/api/mosaic/sessions/{session_id}').status_code == 404


class TestWizards:

    def test_open_locked_module_conflicts(self, client, session_id):
        response = client.post(module_url(session_id, 'signature', 'open'))

        assert response.status_code == 409
        assert response.get_json()['error']['status'] == 'locked'

    def test_open_unknown_module(self, client, session_id):
        assert client.post(module_url(session_id, 'teleport', 'open')).status_code == 404

    def test_wizard_not_open(self, client, session_id):
        assert client.get(module_url(session_id, 'scoring')).status_code == 404
        assert client.post(module_url(session_id, 'scoring', 'next')).status_code == 404

    def test_open_prefills_contract(self, client, session_id):
        data = client.post(module_url(session_id, 'contract', 'open')).get_json()

        assert data['values']['property_title'] == 'Loft'
        assert data['values']['monthly_rent'] == 60000
        assert data['progress'] == {'current': 1, 'total': 6, 'percentage': 17}

    def test_scoring_flow_and_finalize(self, client, session_id):
        assert client.post(f'/api/mosaic/sessions/{session_id}/finalize').status_code == 409

        client.post(module_url(session_id, 'scoring', 'open'))
        response = client.post(module_url(session_id, 'scoring', 'fields'), json={'values': SCORING_VALUES})
        assert response.get_json()['values']['full_name'] == SCORING_VALUES['full_name']

        data = client.post(module_url(session_id, 'scoring', 'next')).get_json()
        assert data['moved'] is True
        assert data['wizard']['status'] == 'completed'
        assert data['wizard']['result']['score'] == 720

        session = client.get(f'/api/mosaic/sessions/{session_id}').get_json()
        assert session['completed_modules'] == ['scoring']
        assert session['open_modules'] == []

        result = client.post(f'/api/mosaic/sessions/{session_id}/finalize').get_json()
        assert result['completed_modules'] == ['scoring']
        assert result['module_data']['scoring']['score_label'] == 'good'

    def test_invalid_step_returns_errors(self, client, session_id):
        client.post(module_url(session_id, 'scoring', 'open'))
        client.post(module_url(session_id, 'scoring', 'fields'), json={'values': {'passport': '12'}})

        data = client.post(module_url(session_id, 'scoring', 'submit')).get_json()

        assert data['moved'] is False
        assert data['wizard']['status'] == 'in_progress'
        assert set(data['wizard']['errors']) == {'full_name', 'passport', 'birth_date'}

    def test_contract_navigation(self, client, session_id):
        client.post(module_url(session_id, 'contract', 'open'))
        client.post(module_url(session_id, 'contract', 'fields'), json={'values': CONTRACT_VALUES})
        for _ in range(3):
            assert client.post(module_url(session_id, 'contract', 'next')).get_json()['moved'] is True

        forward = client.post(module_url(session_id, 'contract', 'goto'), json={'step_index': 5}).get_json()
        back = client.post(module_url(session_id, 'contract', 'goto'), json={'step_index': 1}).get_json()
        prev = client.post(module_url(session_id, 'contract', 'prev')).get_json()

        assert forward['moved'] is False
        assert forward['wizard']['current_step'] == 'tenant'
        assert back['moved'] is True
        assert prev['wizard']['current_step'] == 'template'

    def test_goto_requires_step_index(self, client, session_id):
        client.post(module_url(session_id, 'contract', 'open'))

        response = client.post(module_url(session_id, 'contract', 'goto'), json={'step_index': 'far'})

        assert response.status_code == 400
        assert 'step_index' in response.get_json()['error']['fields']

    def test_fields_requires_values(self, client, session_id):
        client.post(module_url(session_id, 'contract', 'open'))

        assert client.post(module_url(session_id, 'contract', 'fields'), json={}).status_code == 400

    def test_abort(self, client, session_id):
        client.post(module_url(session_id, 'inventory', 'open'))

        data = client.post(module_url(session_id, 'inventory', 'abort')).get_json()

        assert data['status'] == 'aborted'
        assert client.get(module_url(session_id, 'inventory')).status_code == 404
