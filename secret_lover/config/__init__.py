"""Configuration for secret-lover.

Example:
    >>> from secret_lover.config import SecretLoverSettings
    >>> settings = SecretLoverSettings.from_yaml("config.yaml")
    >>> settings.namespace
    'secret-lover'
"""

from secret_lover.config.settings import DEFAULT_CONFIG_PATH, SecretLoverSettings

__all__ = ["DEFAULT_CONFIG_PATH", "SecretLoverSettings"]
