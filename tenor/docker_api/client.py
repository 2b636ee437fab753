"""
Docker Engine - Engine contract implemented over the Docker HTTP API
"""

import logging
from typing import AsyncIterator, List, Optional

from ..engine.base import (
    Capability,
    Engine,
    EngineInfo,
    ExecHandle,
    ExecSpec,
    LogEvent,
    LogOptions,
    StatsEvent,
    Timeout,
    UnsupportedStream,
)
from ..engine.domain import (
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
from ..engine.exceptions import UserActionableError
from . import mapper
from .containers import ContainerCollection
from .context import ConnectionTarget
from .http_client import DockerHTTPClient
from .images import ImageCollection
from .networks import NetworkCollection
from .volumes import VolumeCollection

logger = logging.getLogger(__name__)


class DockerEngine(Engine):
    """
    Docker adapter

    Stateless apart from the transport it was built with; safe to share
    between concurrent callers.
    """

    def __init__(self, http: DockerHTTPClient):
        """
        Initialize Docker engine

        Args:
            http: Transport bound to the daemon socket
        """
        self.http = http
        self.containers = ContainerCollection(http)
        self.images = ImageCollection(http)
        self.volumes = VolumeCollection(http)
        self.networks = NetworkCollection(http)

    @classmethod
    def from_target(cls, target: ConnectionTarget, timeout: float = 60,
                    max_concurrency: int = 0,
                    api_version: Optional[str] = None) -> 'DockerEngine':
        """Build the engine and its transport for a connection target"""
        http = DockerHTTPClient.from_target(
            target,
            timeout=timeout,
            max_concurrency=max_concurrency,
            api_version=api_version,
        )
        return cls(http)

    def __repr__(self):
        return f"<DockerEngine: unix://{self.http.socket_path}>"

    # Containers

    async def list_containers(self, filter: Optional[ContainerFilter] = None) -> List[Container]:
        return await self.containers.list(filter)

    async def inspect_container(self, id: ContainerId) -> ContainerDetail:
        return await self.containers.get(id)

    async def start_container(self, id: ContainerId) -> None:
        await self.containers.start(id)

    async def stop_container(self, id: ContainerId, timeout: Optional[Timeout] = None) -> None:
        await self.containers.stop(id, timeout=timeout)

    async def restart_container(self, id: ContainerId, timeout: Optional[Timeout] = None) -> None:
        await self.containers.restart(id, timeout=timeout)

    async def delete_container(self, id: ContainerId,
                               options: Optional[DeleteContainerOptions] = None) -> None:
        await self.containers.remove(id, options)

    async def stream_logs(self, id: ContainerId,
                          options: Optional[LogOptions] = None) -> AsyncIterator[LogEvent]:
        # TODO: decode the multiplexed /containers/{id}/logs stream
        logger.debug(f"Log streaming not supported, container {id}")
        return UnsupportedStream(Capability.LOGS)

    async def stream_stats(self, id: ContainerId) -> AsyncIterator[StatsEvent]:
        logger.debug(f"Stats streaming not supported, container {id}")
        return UnsupportedStream(Capability.STATS)

    async def create_exec(self, id: ContainerId, spec: ExecSpec) -> ExecHandle:
        raise UserActionableError(
            "Exec is not implemented by the Docker engine",
            hint="Use `docker exec` from a terminal instead",
        )

    # Images

    async def list_images(self, filter: Optional[ImageFilter] = None) -> List[Image]:
        return await self.images.list(filter)

    async def inspect_image(self, id: ImageId) -> ImageDetail:
        return await self.images.get(id)

    async def remove_image(self, id: ImageId, force: bool = False) -> None:
        await self.images.remove(id, force=force)

    async def pull_image(self, reference: str) -> None:
        await self.images.pull(reference)

    # Volumes

    async def list_volumes(self, filter: Optional[VolumeFilter] = None) -> List[Volume]:
        return await self.volumes.list(filter)

    async def inspect_volume(self, name: VolumeName) -> VolumeDetail:
        return await self.volumes.get(name)

    async def remove_volume(self, name: VolumeName, force: bool = False) -> None:
        await self.volumes.remove(name, force=force)

    # Networks

    async def list_networks(self, filter: Optional[NetworkFilter] = None) -> List[Network]:
        return await self.networks.list(filter)

    async def inspect_network(self, id: NetworkId) -> NetworkDetail:
        return await self.networks.get(id)

    async def remove_network(self, id: NetworkId) -> None:
        await self.networks.remove(id)

    # System

    async def ping(self) -> None:
        """Ping Docker daemon"""
        await self.http.get_text('/_ping')

    async def engine_info(self) -> EngineInfo:
        """Get Docker version info"""
        data = await self.http.get('/version', expect=dict)
        return mapper.engine_info_from_version(data)
