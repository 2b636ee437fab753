"""
Docker Networks API
"""

import logging
from typing import List, Optional

from ..engine.domain import Network, NetworkDetail, NetworkFilter, NetworkId
from . import mapper
from .http_client import DockerHTTPClient
from .query import build_filters, label_tokens, segment

logger = logging.getLogger(__name__)


class NetworkCollection:
    """Docker Networks Collection"""

    def __init__(self, http: DockerHTTPClient):
        self.http = http

    @staticmethod
    def list_params(filter: Optional[NetworkFilter] = None) -> dict:
        filter = filter or NetworkFilter()
        filters = build_filters(
            label=label_tokens(filter.labels),
            name=[filter.name] if filter.name else None,
        )
        return {'filters': filters}

    async def list(self, filter: Optional[NetworkFilter] = None) -> List[Network]:
        """
        List networks

        Args:
            filter: Name and label conditions (e.g. NetworkFilter(name='mynet'))

        Returns:
            List of Network values
        """
        data = await self.http.get('/networks', params=self.list_params(filter), expect=list)
        return [mapper.network_from_summary(n) for n in data]

    async def get(self, network_id: NetworkId) -> NetworkDetail:
        """Inspect network by ID or name"""
        data = await self.http.get(f'/networks/{segment(network_id)}', expect=dict)
        return mapper.network_detail_from_inspect(data)

    async def remove(self, network_id: NetworkId):
        """Remove network"""
        await self.http.delete(f'/networks/{segment(network_id)}')
        logger.info(f"Network {network_id} removed")
