"""
Docker Volumes API
"""

import logging
from typing import List, Optional

from ..engine.domain import Volume, VolumeDetail, VolumeFilter, VolumeName
from . import mapper
from .http_client import DockerHTTPClient
from .query import build_filters, label_tokens, segment

logger = logging.getLogger(__name__)


class VolumeCollection:
    """Docker Volumes collection"""

    def __init__(self, http: DockerHTTPClient):
        self.http = http

    @staticmethod
    def list_params(filter: Optional[VolumeFilter] = None) -> dict:
        filter = filter or VolumeFilter()
        dangling = None
        if filter.dangling is not None:
            dangling = ['true' if filter.dangling else 'false']
        filters = build_filters(
            dangling=dangling,
            label=label_tokens(filter.labels),
            name=[filter.name] if filter.name else None,
        )
        return {'filters': filters}

    async def list(self, filter: Optional[VolumeFilter] = None) -> List[Volume]:
        """List volumes"""
        data = await self.http.get('/volumes', params=self.list_params(filter), expect=dict)
        return mapper.volumes_from_list(data)

    async def get(self, name: VolumeName) -> VolumeDetail:
        """Inspect volume by name"""
        data = await self.http.get(f'/volumes/{segment(name)}', expect=dict)
        return mapper.volume_detail_from_inspect(data)

    async def remove(self, name: VolumeName, force: bool = False):
        """Remove volume"""
        params = {'force': True if force else None}
        await self.http.delete(f'/volumes/{segment(name)}', params=params)
        logger.info(f"Volume {name} removed")
