"""
Engine layer - runtime-independent contract, domain model and error taxonomy
"""

from .base import (
    Capability,
    Engine,
    EngineInfo,
    ExecHandle,
    ExecSpec,
    LogEvent,
    LogOptions,
    LogStreamKind,
    StatsEvent,
    UnsupportedStream,
)
from .domain import (
    EPOCH,
    Container,
    ContainerDetail,
    ContainerFilter,
    ContainerId,
    ContainerState,
    DeleteContainerOptions,
    Image,
    ImageDetail,
    ImageFilter,
    ImageId,
    IpamConfig,
    IpamSubnet,
    Mount,
    Network,
    NetworkDetail,
    NetworkFilter,
    NetworkId,
    NetworkSettings,
    PortMapping,
    PortProtocol,
    Volume,
    VolumeDetail,
    VolumeFilter,
    VolumeName,
)
from .exceptions import BugError, EngineError, RetryableError, UserActionableError

__all__ = [
    'Capability',
    'Engine',
    'EngineInfo',
    'ExecHandle',
    'ExecSpec',
    'LogEvent',
    'LogOptions',
    'LogStreamKind',
    'StatsEvent',
    'UnsupportedStream',
    'EPOCH',
    'Container',
    'ContainerDetail',
    'ContainerFilter',
    'ContainerId',
    'ContainerState',
    'DeleteContainerOptions',
    'Image',
    'ImageDetail',
    'ImageFilter',
    'ImageId',
    'IpamConfig',
    'IpamSubnet',
    'Mount',
    'Network',
    'NetworkDetail',
    'NetworkFilter',
    'NetworkId',
    'NetworkSettings',
    'PortMapping',
    'PortProtocol',
    'Volume',
    'VolumeDetail',
    'VolumeFilter',
    'VolumeName',
    'BugError',
    'EngineError',
    'RetryableError',
    'UserActionableError',
]
