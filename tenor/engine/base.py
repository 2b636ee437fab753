"""
Engine contract - operations any container runtime adapter implements
"""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import AsyncIterator, FrozenSet, List, Optional, Tuple, Union

from .domain import (
    Container,
    ContainerDetail,
    ContainerFilter,
    ContainerId,
    DeleteContainerOptions,
    Image,
    ImageDetail,
    ImageFilter,
    ImageId,
    Network,
    NetworkDetail,
    NetworkFilter,
    NetworkId,
    Volume,
    VolumeDetail,
    VolumeFilter,
    VolumeName,
)
from .exceptions import UserActionableError

# Grace period before forceful termination, in seconds
Timeout = Union[int, float, timedelta]


class Capability(enum.Enum):
    """Optional engine capabilities"""

    LOGS = 'logs'
    STATS = 'stats'
    EXEC = 'exec'


class LogStreamKind(enum.Enum):
    STDOUT = 'stdout'
    STDERR = 'stderr'


@dataclass(frozen=True)
class LogEvent:
    line: str
    stream: LogStreamKind = LogStreamKind.STDOUT
    timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class LogOptions:
    follow: bool = False
    since: Optional[datetime] = None
    timestamps: bool = False
    tail: Optional[int] = None


@dataclass(frozen=True)
class StatsEvent:
    timestamp: datetime
    cpu_percent: float = 0.0
    memory_usage: int = 0
    memory_limit: int = 0
    network_rx: int = 0
    network_tx: int = 0
    block_read: int = 0
    block_write: int = 0


@dataclass(frozen=True)
class ExecSpec:
    cmd: Tuple[str, ...]
    tty: bool = False
    attach_stdin: bool = False
    env: Tuple[str, ...] = ()
    user: Optional[str] = None


@dataclass(frozen=True)
class ExecHandle:
    id: str


@dataclass(frozen=True)
class EngineInfo:
    """Static descriptive metadata of the connected daemon"""

    version: str
    api_version: str
    os: str
    arch: str


class UnsupportedStream:
    """
    Empty stream returned for a capability the adapter does not implement

    It iterates like any other stream but yields nothing; ``supported`` is
    False so callers can tell it apart from a stream that simply had no data.
    """

    supported = False

    def __init__(self, capability: Capability):
        self.capability = capability

    def __aiter__(self):
        return self

    async def __anext__(self):
        raise StopAsyncIteration

    def __repr__(self):
        return f"<UnsupportedStream: {self.capability.value}>"


def timeout_seconds(timeout: Optional[Timeout]) -> Optional[int]:
    """Whole seconds of a grace period, None when no timeout was given"""
    if timeout is None:
        return None
    if isinstance(timeout, timedelta):
        timeout = timeout.total_seconds()
    if timeout < 0:
        raise UserActionableError(
            f"Timeout must not be negative: {timeout}",
            hint="Pass a grace period of zero or more seconds",
        )
    return int(timeout)


class Engine(ABC):
    """
    Container engine contract

    All operations are coroutines and independent of each other; no ordering
    is assumed between calls. Failures are raised as EngineError subclasses.
    """

    @property
    def capabilities(self) -> FrozenSet[Capability]:
        """Optional capabilities this engine really implements"""
        return frozenset()

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    # Containers

    @abstractmethod
    async def list_containers(self, filter: Optional[ContainerFilter] = None) -> List[Container]:
        """List containers; an empty list when nothing matches"""

    @abstractmethod
    async def inspect_container(self, id: ContainerId) -> ContainerDetail:
        """Detailed container information"""

    @abstractmethod
    async def start_container(self, id: ContainerId) -> None:
        ...

    @abstractmethod
    async def stop_container(self, id: ContainerId, timeout: Optional[Timeout] = None) -> None:
        ...

    @abstractmethod
    async def restart_container(self, id: ContainerId, timeout: Optional[Timeout] = None) -> None:
        ...

    @abstractmethod
    async def delete_container(self, id: ContainerId,
                               options: Optional[DeleteContainerOptions] = None) -> None:
        ...

    @abstractmethod
    async def stream_logs(self, id: ContainerId, options: Optional[LogOptions] = None) -> AsyncIterator[LogEvent]:
        """Log stream, or an UnsupportedStream"""

    @abstractmethod
    async def stream_stats(self, id: ContainerId) -> AsyncIterator[StatsEvent]:
        """Stats stream, or an UnsupportedStream"""

    @abstractmethod
    async def create_exec(self, id: ContainerId, spec: ExecSpec) -> ExecHandle:
        ...

    # Images

    @abstractmethod
    async def list_images(self, filter: Optional[ImageFilter] = None) -> List[Image]:
        ...

    @abstractmethod
    async def inspect_image(self, id: ImageId) -> ImageDetail:
        ...

    @abstractmethod
    async def remove_image(self, id: ImageId, force: bool = False) -> None:
        ...

    @abstractmethod
    async def pull_image(self, reference: str) -> None:
        ...

    # Volumes

    @abstractmethod
    async def list_volumes(self, filter: Optional[VolumeFilter] = None) -> List[Volume]:
        ...

    @abstractmethod
    async def inspect_volume(self, name: VolumeName) -> VolumeDetail:
        ...

    @abstractmethod
    async def remove_volume(self, name: VolumeName, force: bool = False) -> None:
        ...

    # Networks

    @abstractmethod
    async def list_networks(self, filter: Optional[NetworkFilter] = None) -> List[Network]:
        ...

    @abstractmethod
    async def inspect_network(self, id: NetworkId) -> NetworkDetail:
        ...

    @abstractmethod
    async def remove_network(self, id: NetworkId) -> None:
        ...

    # System

    @abstractmethod
    async def ping(self) -> None:
        """Succeeds iff the daemon is reachable and answers its liveness probe"""

    @abstractmethod
    async def engine_info(self) -> EngineInfo:
        ...

    async def close(self) -> None:
        """Release adapter resources"""
