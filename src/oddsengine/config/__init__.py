"""Engine configuration."""

from oddsengine.config.settings import EngineConfig, configure_logging, get_config

__all__ = ["EngineConfig", "configure_logging", "get_config"]
