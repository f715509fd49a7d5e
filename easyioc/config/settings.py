"""
Container settings.

Values come from the environment, with a `.env` file loaded first.
"""

import os
from typing import Optional, Dict, Any, List
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings:
    """
    Container settings.

    Centralizes all configuration values.
    """

    def __init__(self):
        """Initialize settings from environment and defaults."""
        # Discovery Settings
        self.base_packages: List[str] = _split_packages(os.getenv('IOC_BASE_PACKAGES', ''))

        # Observability Settings
        self.enable_metrics = os.getenv('IOC_ENABLE_METRICS', 'true').lower() == 'true'

        # Logging Settings
        self.log_level = os.getenv('LOG_LEVEL', 'INFO')
        self.log_format = os.getenv(
            'LOG_FORMAT',
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    def validate(self) -> bool:
        """
        Validate the settings.

        Returns:
            True if every base package is a dotted module path, False otherwise
        """
        for package in self.base_packages:
            if not all(part.isidentifier() for part in package.split('.')):
                return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return {
            'base_packages': list(self.base_packages),
            'enable_metrics': self.enable_metrics,
            'log_level': self.log_level,
        }


def _split_packages(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(',') if part.strip()]


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Optional[Settings]):
    """Set the global settings instance (useful for testing)."""
    global _settings
    _settings = settings
