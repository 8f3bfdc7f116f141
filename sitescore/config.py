"""
Configuration module for sitescore.

This module contains the AScoreConfig class, which manages configuration
settings for the AScore algorithm and the file pipeline around it.
"""

import logging
from typing import Dict, Any, Optional

from .ascore.constants import DEFAULT_CONFIG, PPM_UNITS

logger = logging.getLogger(__name__)


class AScoreConfig:
    """
    Configuration class for AScore.

    Holds fragment mass tolerance, its unit and the limits applied before
    permutations are scored.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize a new AScoreConfig instance.

        Args:
            config_dict: Optional dictionary containing configuration settings
        """
        self.config = DEFAULT_CONFIG.copy()

        if config_dict:
            self.update(config_dict)

    def update(self, config_dict: Dict[str, Any]) -> None:
        """
        Update configuration with new settings.

        Args:
            config_dict: Dictionary containing new configuration settings
        """
        for key, value in config_dict.items():
            if key in self.config:
                self.config[key] = value
            else:
                logger.warning(f"Unknown configuration key: {key}")

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.config[key] = value

    @property
    def fragment_tolerance_ppm(self) -> bool:
        """True when the fragment mass tolerance is given in ppm."""
        return str(self.config["fragment_mass_unit"]).lower() == PPM_UNITS

    def to_dict(self) -> Dict[str, Any]:
        return self.config.copy()

    def __getitem__(self, key: str) -> Any:
        return self.config[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.config[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self.config
