"""
Docker query building - path segments and the ``filters`` parameter
"""

from typing import Dict, List, Optional
from urllib.parse import quote

from ..engine.domain import ContainerState, LabelPairs

# Domain state -> daemon status token. UNKNOWN has no token on purpose:
# it is never sent, the status filter is omitted instead.
STATE_TOKENS = {
    ContainerState.RUNNING: 'running',
    ContainerState.EXITED: 'exited',
    ContainerState.PAUSED: 'paused',
    ContainerState.RESTARTING: 'restarting',
    ContainerState.DEAD: 'dead',
}


def segment(value: str, safe: str = '') -> str:
    """Percent-encode one path segment"""
    return quote(str(value), safe=safe)


def image_segment(reference: str) -> str:
    """Image references keep their registry path, tag and digest separators"""
    return quote(str(reference), safe='/:@')


def label_tokens(labels: LabelPairs) -> List[str]:
    """("k", "v") -> "k=v"; an empty value only requires the key"""
    return [f"{key}={value}" if value else key for key, value in labels]


def state_token(state: Optional[ContainerState]) -> Optional[str]:
    if state is None:
        return None
    return STATE_TOKENS.get(state)


def build_filters(**conditions: Optional[List[str]]) -> Optional[Dict[str, List[str]]]:
    """
    Build the Docker ``filters`` object

    Empty or None conditions are dropped; returns None when nothing is left
    so the parameter is omitted entirely.
    """
    filters = {key: values for key, values in conditions.items() if values}
    return filters or None
