"""
Mosaic Workflow Configuration

Configuration for the wizard core: stage timeouts, simulated provider
behaviour, session expiry and module catalog overrides. Values can be built
directly, taken from a named preset, or read from a Flask ``app.config``.
"""

import dataclasses
from typing import Dict, List, Optional, Any, Mapping
from dataclasses import dataclass, field


# Flask config keys read by ``MosaicConfig.from_app_config``
APP_CONFIG_KEYS = {
    'MOSAIC_STAGE_TIMEOUT': 'stage_timeout',
    'MOSAIC_SIMULATED_DELAY': 'simulated_delay',
    'MOSAIC_PROVIDER_SEED': 'provider_seed',
    'MOSAIC_SESSION_EXPIRATION_DAYS': 'expiration_days',
    'MOSAIC_MODULES': 'modules',
}


@dataclass
class MosaicConfig:
    """Complete configuration of the mosaic workflow core"""

    # Maximum wait for one provider call, in seconds
    stage_timeout: float = 30.0

    # Artificial latency of the simulated providers, in seconds
    simulated_delay: float = 0.0
    provider_seed: Optional[int] = None

    # Idle sessions are dropped after this many days
    expiration_days: int = 7

    # Optional replacement for the default module catalog
    modules: Optional[List[Dict[str, Any]]] = None

    def validate_config(self) -> List[str]:
        """
        Validate the configuration and return any issues found

        Returns:
            List of validation error messages
        """
        errors = []

        if self.stage_timeout <= 0:
            errors.append("Stage timeout must be positive")

        if self.simulated_delay < 0:
            errors.append("Simulated delay cannot be negative")

        if self.expiration_days < 1:
            errors.append("Session expiration must be at least 1 day")

        if self.modules is not None:
            if not isinstance(self.modules, list):
                errors.append("Module catalog override must be a list")
            else:
                for index, module in enumerate(self.modules):
                    if not isinstance(module, dict) or not module.get('id'):
                        errors.append(f"Module entry {index} must be a mapping with an 'id'")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'MosaicConfig':
        """Create configuration from dictionary, ignoring unknown keys"""
        known = {f.name for f in dataclasses.fields(cls)}
        return cls(**{key: value for key, value in config_dict.items() if key in known})

    @classmethod
    def from_app_config(cls, app_config: Mapping[str, Any]) -> 'MosaicConfig':
        """
        Build configuration from a Flask config mapping

        ``MOSAIC_PRESET`` selects the base preset; individual ``MOSAIC_*``
        keys override it.

        Args:
            app_config: Flask ``app.config`` or any mapping

        Returns:
            MosaicConfig instance

        Raises:
            ValueError: If the resulting configuration is invalid
        """
        base = get_mosaic_config(app_config.get('MOSAIC_PRESET', 'default'))
        overrides = {
            attr: app_config[key]
            for key, attr in APP_CONFIG_KEYS.items()
            if key in app_config
        }
        config = dataclasses.replace(base, **overrides)

        errors = config.validate_config()
        if errors:
            raise ValueError(f"Invalid mosaic configuration: {'; '.join(errors)}")
        return config


# Pre-defined configuration presets
MOSAIC_CONFIG_PRESETS = {
    "demo": MosaicConfig(
        stage_timeout=30.0,
        simulated_delay=2.0,
    ),

    "testing": MosaicConfig(
        stage_timeout=1.0,
        simulated_delay=0.0,
        provider_seed=42,
    ),
}


def get_mosaic_config(preset_name: str = "default") -> MosaicConfig:
    """
    Get a mosaic configuration by preset name

    Args:
        preset_name: Name of the preset configuration

    Returns:
        A fresh MosaicConfig instance
    """
    if preset_name == "default":
        return MosaicConfig()

    if preset_name not in MOSAIC_CONFIG_PRESETS:
        raise ValueError(f"Unknown preset '{preset_name}'. Available presets: {list(MOSAIC_CONFIG_PRESETS.keys())}")

    return dataclasses.replace(MOSAIC_CONFIG_PRESETS[preset_name])
