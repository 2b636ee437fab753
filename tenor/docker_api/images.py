"""
Docker Images API
"""

import logging
from typing import Dict, List, Optional

from ..engine.domain import Image, ImageDetail, ImageFilter, ImageId
from ..engine.exceptions import UserActionableError
from . import mapper
from .http_client import DockerHTTPClient
from .query import build_filters, image_segment, label_tokens

logger = logging.getLogger(__name__)

DEFAULT_TAG = 'latest'


def split_reference(reference: str) -> Dict[str, str]:
    """
    Pull parameters for an image reference

    A reference without tag or digest gets the ``latest`` tag; otherwise the
    daemon would pull every tag of the repository.

    Args:
        reference: e.g. ``nginx``, ``nginx:1.25``, ``localhost:5000/app@sha256:...``

    Returns:
        Query parameters for ``POST /images/create``
    """
    name = reference.rsplit('/', 1)[-1]
    if '@' in reference or ':' in name:
        return {'fromImage': reference}
    return {'fromImage': reference, 'tag': DEFAULT_TAG}


class ImageCollection:
    """Docker Images collection"""

    def __init__(self, http: DockerHTTPClient):
        self.http = http

    @staticmethod
    def list_params(filter: Optional[ImageFilter] = None) -> dict:
        filter = filter or ImageFilter()
        dangling = None
        if filter.dangling is not None:
            dangling = ['true' if filter.dangling else 'false']
        filters = build_filters(
            dangling=dangling,
            label=label_tokens(filter.labels),
            reference=[filter.reference] if filter.reference else None,
        )
        return {'filters': filters}

    async def list(self, filter: Optional[ImageFilter] = None) -> List[Image]:
        """
        List images

        Args:
            filter: Reference, dangling and label conditions

        Returns:
            List of Image values
        """
        data = await self.http.get('/images/json', params=self.list_params(filter), expect=list)
        return [mapper.image_from_summary(i) for i in data]

    async def get(self, name: ImageId) -> ImageDetail:
        """Inspect image by name or ID"""
        data = await self.http.get(f'/images/{image_segment(name)}/json', expect=dict)
        return mapper.image_detail_from_inspect(data)

    async def remove(self, name: ImageId, force: bool = False):
        """Remove image"""
        params = {'force': True if force else None}
        await self.http.delete(f'/images/{image_segment(name)}', params=params)
        logger.info(f"Image {name} removed")

    async def pull(self, reference: str):
        """
        Pull image from registry

        The progress stream is read to completion; an error reported inside
        the stream fails the pull even though the status was 200.

        Args:
            reference: Image reference
        """
        if not reference.strip():
            raise UserActionableError("Image reference must not be empty")

        logger.info(f"Pulling image {reference}...")
        messages = await self.http.post_stream('/images/create', params=split_reference(reference))
        for message in messages:
            detail = message.get('errorDetail')
            error = message.get('error') or (detail.get('message') if isinstance(detail, dict) else detail)
            if error:
                raise UserActionableError(
                    f"Failed to pull {reference}: {error}",
                    hint="Check the image reference and registry credentials",
                )
        logger.info(f"Image {reference} pulled")
