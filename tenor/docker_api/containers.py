"""
Docker Containers API
"""

import logging
from typing import List, Optional

from ..engine.base import Timeout, timeout_seconds
from ..engine.domain import (
    Container,
    ContainerDetail,
    ContainerFilter,
    ContainerId,
    DeleteContainerOptions,
)
from . import mapper
from .http_client import DockerHTTPClient
from .query import build_filters, label_tokens, segment, state_token

logger = logging.getLogger(__name__)


class ContainerCollection:
    """Docker Containers collection"""

    def __init__(self, http: DockerHTTPClient):
        self.http = http

    @staticmethod
    def list_params(filter: Optional[ContainerFilter] = None) -> dict:
        """
        Query parameters for listing containers

        Args:
            filter: Name, state and label conditions

        Returns:
            Ordered query parameters; ``filters`` is None when unfiltered
        """
        filter = filter or ContainerFilter()
        status = state_token(filter.state)
        filters = build_filters(
            label=label_tokens(filter.labels),
            name=[filter.name] if filter.name else None,
            status=[status] if status else None,
        )
        return {'all': True, 'filters': filters}

    async def list(self, filter: Optional[ContainerFilter] = None) -> List[Container]:
        """
        List containers, including stopped ones

        Args:
            filter: Optional conditions, applied by the daemon

        Returns:
            List of Container values (empty when nothing matches)
        """
        data = await self.http.get('/containers/json', params=self.list_params(filter),
                                   expect=list)
        return [mapper.container_from_summary(c) for c in data]

    async def get(self, container_id: ContainerId) -> ContainerDetail:
        """Inspect container by ID or name"""
        data = await self.http.get(f'/containers/{segment(container_id)}/json', expect=dict)
        return mapper.container_detail_from_inspect(data)

    async def start(self, container_id: ContainerId):
        """Start container"""
        await self.http.post_no_response(f'/containers/{segment(container_id)}/start')
        logger.info(f"Container {container_id} started")

    async def stop(self, container_id: ContainerId, timeout: Optional[Timeout] = None):
        """Stop container; without a timeout the daemon default applies"""
        params = {'t': timeout_seconds(timeout)}
        await self.http.post_no_response(f'/containers/{segment(container_id)}/stop',
                                         params=params)
        logger.info(f"Container {container_id} stopped")

    async def restart(self, container_id: ContainerId, timeout: Optional[Timeout] = None):
        """Restart container"""
        params = {'t': timeout_seconds(timeout)}
        await self.http.post_no_response(f'/containers/{segment(container_id)}/restart',
                                         params=params)
        logger.info(f"Container {container_id} restarted")

    async def remove(self, container_id: ContainerId,
                     options: Optional[DeleteContainerOptions] = None):
        """Remove container"""
        options = options or DeleteContainerOptions()
        params = {
            'force': True if options.force else None,
            'v': True if options.remove_volumes else None,
        }
        await self.http.delete(f'/containers/{segment(container_id)}', params=params)
        logger.info(f"Container {container_id} removed")
