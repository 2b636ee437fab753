"""
Domain model - daemon-independent resource types and filters
"""

import enum
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Dict, NewType, Optional, Sequence, Tuple

ContainerId = NewType('ContainerId', str)
ImageId = NewType('ImageId', str)
NetworkId = NewType('NetworkId', str)
VolumeName = NewType('VolumeName', str)

Labels = Dict[str, str]
LabelPairs = Sequence[Tuple[str, str]]

# Fallback instant for timestamps the daemon sent in an unreadable form
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class ContainerState(enum.Enum):
    """Closed set of container states"""

    RUNNING = 'running'
    EXITED = 'exited'
    PAUSED = 'paused'
    RESTARTING = 'restarting'
    DEAD = 'dead'
    UNKNOWN = 'unknown'

    def __str__(self) -> str:
        return self.value.capitalize()


class PortProtocol(enum.Enum):
    """Transport protocol of a port mapping"""

    TCP = 'tcp'
    UDP = 'udp'

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PortMapping:
    """Container port, optionally published on the host"""

    container_port: int
    host_port: Optional[int] = None
    host_ip: Optional[str] = None
    protocol: PortProtocol = PortProtocol.TCP

    def __str__(self) -> str:
        target = f"{self.container_port}/{self.protocol}"
        if self.host_port is None:
            return target
        host = f"{self.host_ip}:" if self.host_ip else ''
        return f"{host}{self.host_port}->{target}"


def _summary_of(detail, summary_cls):
    """Build the summary-shaped value carried by a detail instance"""
    names = [f.name for f in fields(summary_cls)]
    return summary_cls(**{name: getattr(detail, name) for name in names})


@dataclass(frozen=True)
class Container:
    """Container summary (list views)"""

    id: ContainerId
    name: str
    image: str
    state: ContainerState
    status: str
    created_at: datetime
    labels: Labels = field(default_factory=dict)
    ports: Tuple[PortMapping, ...] = ()

    @property
    def short_id(self) -> str:
        return self.id[:12]


@dataclass(frozen=True)
class Mount:
    """Mount point inside a container"""

    source: str
    destination: str
    mode: str = ''
    rw: bool = True


@dataclass(frozen=True)
class NetworkSettings:
    """Networks a container is attached to"""

    networks: Tuple[str, ...] = ()
    ip_address: Optional[str] = None


@dataclass(frozen=True)
class ContainerDetail(Container):
    """Detailed container information"""

    command: Tuple[str, ...] = ()
    entrypoint: Tuple[str, ...] = ()
    env: Tuple[str, ...] = ()
    mounts: Tuple[Mount, ...] = ()
    network_settings: NetworkSettings = field(default_factory=NetworkSettings)

    def summary(self) -> Container:
        return _summary_of(self, Container)


@dataclass(frozen=True)
class Image:
    """Image summary"""

    id: ImageId
    repo_tags: Tuple[str, ...]
    size: int
    created_at: datetime
    labels: Labels = field(default_factory=dict)

    @property
    def short_id(self) -> str:
        return self.id.split(':', 1)[-1][:12]


@dataclass(frozen=True)
class ImageDetail(Image):
    """Detailed image information"""

    architecture: str = ''
    os: str = ''

    def summary(self) -> Image:
        return _summary_of(self, Image)


@dataclass(frozen=True)
class Volume:
    """Volume summary (volumes are identified by name)"""

    name: VolumeName
    driver: str
    mountpoint: str
    labels: Labels = field(default_factory=dict)


@dataclass(frozen=True)
class VolumeDetail(Volume):
    """Detailed volume information"""

    scope: str = ''
    created_at: Optional[datetime] = None
    options: Dict[str, str] = field(default_factory=dict)

    def summary(self) -> Volume:
        return _summary_of(self, Volume)


@dataclass(frozen=True)
class IpamSubnet:
    subnet: str
    gateway: Optional[str] = None


@dataclass(frozen=True)
class IpamConfig:
    driver: str
    config: Tuple[IpamSubnet, ...] = ()


@dataclass(frozen=True)
class Network:
    """Network summary"""

    id: NetworkId
    name: str
    driver: str
    scope: str
    internal: bool = False
    labels: Labels = field(default_factory=dict)


@dataclass(frozen=True)
class NetworkDetail(Network):
    """Detailed network information"""

    ipam: Optional[IpamConfig] = None
    attachable: bool = False
    containers: Tuple[ContainerId, ...] = ()

    def summary(self) -> Network:
        return _summary_of(self, Network)


@dataclass(frozen=True)
class ContainerFilter:
    """
    Container list filter

    Every field is optional; an unset field does not restrict the list.
    A state of UNKNOWN is treated as unset.
    """

    name: Optional[str] = None
    state: Optional[ContainerState] = None
    labels: LabelPairs = ()


@dataclass(frozen=True)
class ImageFilter:
    reference: Optional[str] = None
    dangling: Optional[bool] = None
    labels: LabelPairs = ()


@dataclass(frozen=True)
class VolumeFilter:
    name: Optional[str] = None
    dangling: Optional[bool] = None
    labels: LabelPairs = ()


@dataclass(frozen=True)
class NetworkFilter:
    name: Optional[str] = None
    labels: LabelPairs = ()


@dataclass(frozen=True)
class DeleteContainerOptions:
    """Options for container removal"""

    force: bool = False
    remove_volumes: bool = False
