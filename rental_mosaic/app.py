"""
Flask integration for the mosaic workflow core.
"""

import logging
from typing import Dict, Any, Optional

from flask import Flask

from .cli import mosaic
from .config import MosaicConfig
from .mosaic.session import SessionRegistry
from .views.mosaic import mosaic_bp

log = logging.getLogger(__name__)


def init_app(app: Flask, registry: Optional[SessionRegistry] = None) -> SessionRegistry:
    """
    Register the mosaic API and commands on an application

    Args:
        app: Flask application
        registry: Session registry to use; built from ``app.config`` when omitted

    Returns:
        The installed session registry

    Raises:
        ValueError: If the ``MOSAIC_*`` configuration is invalid
    """
    if registry is None:
        registry = SessionRegistry(MosaicConfig.from_app_config(app.config))

    app.extensions['mosaic'] = registry
    app.register_blueprint(mosaic_bp)
    app.cli.add_command(mosaic)

    log.info(f"Mosaic workflow initialized (stage timeout {registry.config.stage_timeout}s)")
    return registry


def create_app(config: Optional[Dict[str, Any]] = None, registry: Optional[SessionRegistry] = None) -> Flask:
    """Application factory serving the mosaic API alone"""
    app = Flask(__name__)
    app.config.from_mapping(MOSAIC_PRESET='demo')
    if config:
        app.config.update(config)

    init_app(app, registry)
    return app
