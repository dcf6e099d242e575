"""File-based dynamic configuration provider for a routing control plane."""

__version__ = "0.1.0"

from .types import (
    Backend,
    Certificate,
    ConfigMessage,
    Configuration,
    Fragment,
    Frontend,
    HealthCheck,
    LoadBalancer,
    Route,
    Server,
    TLSConfiguration,
)
from .errors import (
    ProviderError,
    ConfigNotFoundError,
    ConfigIOError,
    ConfigParseError,
    WatchSetupError,
    WatchAddError,
)
from .settings import ProviderSettings, SettingsValidationError
from .pool import StopSignal, WorkerPool
from .provider import FileProvider, PROVIDER_NAME

__all__ = [
    'Backend',
    'Certificate',
    'ConfigMessage',
    'Configuration',
    'Fragment',
    'Frontend',
    'HealthCheck',
    'LoadBalancer',
    'Route',
    'Server',
    'TLSConfiguration',
    'ProviderError',
    'ConfigNotFoundError',
    'ConfigIOError',
    'ConfigParseError',
    'WatchSetupError',
    'WatchAddError',
    'ProviderSettings',
    'SettingsValidationError',
    'StopSignal',
    'WorkerPool',
    'FileProvider',
    'PROVIDER_NAME',
]
