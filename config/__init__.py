"""Configuration for po-auto-translate."""

from .settings import ConfigurationError, TranslationConfig

__all__ = [
    'ConfigurationError',
    'TranslationConfig',
]
