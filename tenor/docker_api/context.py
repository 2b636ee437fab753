"""
Connection target resolution

Finds the Docker daemon socket: explicit path, DOCKER_HOST, the current
docker CLI context, then the platform default.
"""

import hashlib
import json
import logging
import os
import platform
from dataclasses import dataclass
from typing import Mapping, Optional

from ..engine.exceptions import UserActionableError

logger = logging.getLogger(__name__)

DEFAULT_SOCKET = '/var/run/docker.sock'
UNIX_SCHEME = 'unix://'
REMOTE_SCHEMES = ('tcp://', 'http://', 'https://', 'ssh://', 'npipe://')


@dataclass(frozen=True)
class ConnectionTarget:
    """Docker daemon endpoint (Unix domain socket only)"""

    socket_path: str

    @classmethod
    def parse(cls, host: str) -> 'ConnectionTarget':
        """
        Parse a Docker host string

        Args:
            host: ``unix:///path``, a bare socket path, or a remote URL

        Returns:
            ConnectionTarget for the socket

        Raises:
            UserActionableError: for remote (TCP/TLS/SSH) hosts
        """
        host = host.strip()
        if host.startswith(UNIX_SCHEME):
            path = host[len(UNIX_SCHEME):]
        elif host.startswith(REMOTE_SCHEMES):
            raise UserActionableError(
                f"Remote Docker hosts are not supported: {host}",
                hint="Only Unix socket connections are currently supported",
            )
        else:
            path = host
        if not path:
            raise UserActionableError(f"Invalid Docker host: {host!r}")
        return cls(socket_path=path)

    @property
    def url(self) -> str:
        return f"{UNIX_SCHEME}{self.socket_path}"

    def __str__(self):
        return self.url


def default_socket_path() -> str:
    """Platform default socket path"""
    if platform.system() == "Darwin":
        # Docker Desktop socket, fallback to the classic location
        desktop_socket = os.path.expanduser('~/.docker/run/docker.sock')
        if os.path.exists(desktop_socket):
            return desktop_socket
    return DEFAULT_SOCKET


def docker_config_dir(environ: Optional[Mapping[str, str]] = None) -> str:
    environ = os.environ if environ is None else environ
    return environ.get('DOCKER_CONFIG') or os.path.expanduser('~/.docker')


def current_context_name(config_dir: str,
                         environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Name of the active docker CLI context, None for the default context"""
    environ = os.environ if environ is None else environ
    name = environ.get('DOCKER_CONTEXT')
    if not name:
        config_file = os.path.join(config_dir, 'config.json')
        if not os.path.exists(config_file):
            return None
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                name = json.load(f).get('currentContext')
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(f"Could not read docker config {config_file}: {e}")
            return None
    if not name or name == 'default':
        return None
    return name


def context_host(name: str, config_dir: str) -> Optional[str]:
    """
    Docker endpoint host of a named context

    Contexts are stored by the docker CLI under
    ``contexts/meta/<sha256(name)>/meta.json``.
    """
    digest = hashlib.sha256(name.encode('utf-8')).hexdigest()
    meta_file = os.path.join(config_dir, 'contexts', 'meta', digest, 'meta.json')
    try:
        with open(meta_file, 'r', encoding='utf-8') as f:
            meta = json.load(f)
        return meta['Endpoints']['docker']['Host']
    except FileNotFoundError:
        logger.warning(f"Docker context '{name}' not found in {config_dir}")
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.warning(f"Could not read docker context '{name}': {e}")
    return None


def resolve_target(explicit: Optional[str] = None,
                   environ: Optional[Mapping[str, str]] = None,
                   config_dir: Optional[str] = None) -> ConnectionTarget:
    """
    Resolve the connection target

    Args:
        explicit: Socket path or host given by the user or settings
        environ: Environment mapping (default: os.environ)
        config_dir: Docker CLI config directory (default: DOCKER_CONFIG or ~/.docker)

    Returns:
        ConnectionTarget
    """
    environ = os.environ if environ is None else environ

    if explicit:
        logger.debug(f"Using explicit Docker host {explicit}")
        return ConnectionTarget.parse(explicit)

    docker_host = environ.get('DOCKER_HOST')
    if docker_host:
        logger.debug(f"Using DOCKER_HOST {docker_host}")
        return ConnectionTarget.parse(docker_host)

    config_dir = config_dir or docker_config_dir(environ)
    name = current_context_name(config_dir, environ)
    if name:
        host = context_host(name, config_dir)
        if host:
            logger.debug(f"Using docker context '{name}' ({host})")
            return ConnectionTarget.parse(host)

    return ConnectionTarget(socket_path=default_socket_path())
