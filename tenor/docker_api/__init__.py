"""
Docker engine adapter - Pure Python implementation without external dependencies
Works with Docker daemon via Unix socket (Linux/macOS)
"""

from .client import DockerEngine
from .context import ConnectionTarget, resolve_target
from .exceptions import classify_status
from .http_client import DockerHTTPClient

__all__ = [
    'DockerEngine',
    'DockerHTTPClient',
    'ConnectionTarget',
    'classify_status',
    'resolve_target',
]
