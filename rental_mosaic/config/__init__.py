"""
Mosaic Configuration Package

Configuration classes and utilities for the mosaic workflow core.
"""

from .mosaic import (
    MosaicConfig,
    MOSAIC_CONFIG_PRESETS,
    APP_CONFIG_KEYS,
    get_mosaic_config,
)

__all__ = [
    'MosaicConfig',
    'MOSAIC_CONFIG_PRESETS',
    'APP_CONFIG_KEYS',
    'get_mosaic_config',
]
