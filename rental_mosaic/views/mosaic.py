"""
Mosaic JSON API

Flask blueprint exposing mosaic sessions and their wizards. Views are
synchronous; wizard stages are awaited within the request through
``run_async``.
"""

import logging

from flask import Blueprint, current_app, jsonify, request
from marshmallow import ValidationError

from ..exceptions import SessionNotFoundError
from ..utils.async_bridge import run_async
from .schemas import SessionCreateSchema, FieldsUpdateSchema, GotoSchema

log = logging.getLogger(__name__)

mosaic_bp = Blueprint('mosaic', __name__, url_prefix='/api/mosaic')

session_create_schema = SessionCreateSchema()
fields_update_schema = FieldsUpdateSchema()
goto_schema = GotoSchema()


def get_registry():
    """Session registry installed by ``init_app``."""
    return current_app.extensions['mosaic']


def _error(code: str, message: str, status: int, /, **extra):
    body = {'error': {'code': code, 'message': message}}
    body['error'].update(extra)
    return jsonify(body), status


def _load(schema):
    return schema.load(request.get_json(silent=True) or {})


def _open_controller(session, module_id):
    controller = session.controller(module_id)
    if controller is None:
        return None, _error('MODULE_NOT_OPEN', f"Module '{module_id}' has no open wizard", 404)
    return controller, None


async def _perform(controller, action):
    moved = action(controller)
    await controller.wait()
    return moved


def _wizard_action(session_id, module_id, action):
    session = get_registry().get(session_id)
    with session.lock:
        controller, error = _open_controller(session, module_id)
        if error:
            return error
        moved = run_async(_perform(controller, action))
        return jsonify({'moved': moved, 'wizard': controller.to_dict()})


@mosaic_bp.errorhandler(SessionNotFoundError)
def session_not_found(error):
    return jsonify(error.to_dict()), 404


@mosaic_bp.errorhandler(ValidationError)
def invalid_request(error):
    return _error('INVALID_REQUEST', 'Request body is invalid', 400, fields=error.messages)


@mosaic_bp.route('/sessions', methods=['POST'])
def create_session():
    """Start a new mosaic workflow."""
    data = _load(session_create_schema)
    session = get_registry().create(property_context=data['property_context'])
    return jsonify(session.to_dict()), 201


@mosaic_bp.route('/sessions/<session_id>', methods=['GET'])
def get_session(session_id):
    session = get_registry().get(session_id)
    with session.lock:
        data = session.to_dict()
        data['wizards'] = {
            module_id: session.controller(module_id).to_dict()
            for module_id in session.open_modules
        }
    return jsonify(data)


@mosaic_bp.route('/sessions/<session_id>', methods=['DELETE'])
def delete_session(session_id):
    get_registry().delete(session_id)
    return '', 204


@mosaic_bp.route('/sessions/<session_id>/modules/<module_id>/open', methods=['POST'])
def open_module(session_id, module_id):
    """Open the wizard of an available module."""
    session = get_registry().get(session_id)
    with session.lock:
        if module_id not in session.graph:
            return _error('MODULE_NOT_FOUND', f"Unknown module '{module_id}'", 404)

        controller = session.open_module(module_id)
        if controller is None:
            status = session.graph.status_of(module_id).value
            return _error('MODULE_NOT_AVAILABLE', f"Module '{module_id}' cannot be opened", 409,
                          status=status)
        return jsonify(controller.to_dict())


@mosaic_bp.route('/sessions/<session_id>/modules/<module_id>', methods=['GET'])
def get_wizard(session_id, module_id):
    session = get_registry().get(session_id)
    with session.lock:
        controller, error = _open_controller(session, module_id)
        if error:
            return error
        return jsonify(controller.to_dict())


@mosaic_bp.route('/sessions/<session_id>/modules/<module_id>/fields', methods=['POST'])
def set_fields(session_id, module_id):
    data = _load(fields_update_schema)
    session = get_registry().get(session_id)
    with session.lock:
        controller, error = _open_controller(session, module_id)
        if error:
            return error
        controller.set_fields(data['values'])
        return jsonify(controller.to_dict())


@mosaic_bp.route('/sessions/<session_id>/modules/<module_id>/next', methods=['POST'])
def next_step(session_id, module_id):
    return _wizard_action(session_id, module_id, lambda controller: controller.next())


@mosaic_bp.route('/sessions/<session_id>/modules/<module_id>/prev', methods=['POST'])
def previous_step(session_id, module_id):
    return _wizard_action(session_id, module_id, lambda controller: controller.prev())


@mosaic_bp.route('/sessions/<session_id>/modules/<module_id>/goto', methods=['POST'])
def goto_step(session_id, module_id):
    data = _load(goto_schema)
    return _wizard_action(session_id, module_id, lambda controller: controller.go_to(data['step_index']))


@mosaic_bp.route('/sessions/<session_id>/modules/<module_id>/submit', methods=['POST'])
def submit(session_id, module_id):
    return _wizard_action(session_id, module_id, lambda controller: controller.submit())


@mosaic_bp.route('/sessions/<session_id>/modules/<module_id>/abort', methods=['POST'])
def abort(session_id, module_id):
    session = get_registry().get(session_id)
    with session.lock:
        controller, error = _open_controller(session, module_id)
        if error:
            return error
        session.close_module(module_id)
        return jsonify(controller.to_dict())


@mosaic_bp.route('/sessions/<session_id>/finalize', methods=['POST'])
def finalize(session_id):
    """Return the workflow result of the completed modules."""
    session = get_registry().get(session_id)
    with session.lock:
        result = session.finalize()
        if result is None:
            return _error('NOTHING_COMPLETED', 'Complete at least one module before finalizing', 409)
        return jsonify(result.to_dict())
