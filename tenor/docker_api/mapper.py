"""
Docker wire DTO -> domain model mapping

Pure functions without I/O. Missing optional fields fall back to defaults;
only a DTO that is not a JSON object at all is reported, as a BugError.
"""

import re
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Tuple

from ..engine.base import EngineInfo
from ..engine.domain import (
    EPOCH,
    Container,
    ContainerDetail,
    ContainerId,
    ContainerState,
    Image,
    ImageDetail,
    ImageId,
    IpamConfig,
    IpamSubnet,
    Labels,
    Mount,
    Network,
    NetworkDetail,
    NetworkId,
    NetworkSettings,
    PortMapping,
    PortProtocol,
    Volume,
    VolumeDetail,
    VolumeName,
)
from ..engine.exceptions import BugError

_STATES = {state.value: state for state in ContainerState if state is not ContainerState.UNKNOWN}

# 2024-01-01T10:20:30.123456789+02:00 / ...Z
_RFC3339 = re.compile(
    r'^(\d{4}-\d{2}-\d{2})[Tt ](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:?\d{2})$'
)


def _require_object(dto: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(dto, Mapping):
        raise BugError(f"Malformed {kind} object: expected JSON object, got {type(dto).__name__}")
    return dto


def _object(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _str(value: Any, default: str = '') -> str:
    return value if isinstance(value, str) else default


def _int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return default
    return default


def _optional_int(value: Any) -> Optional[int]:
    if value in (None, '') or isinstance(value, bool):
        return None
    result = _int(value, default=-1)
    return None if result < 0 else result


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _str_tuple(value: Any) -> Tuple[str, ...]:
    """Cmd/Entrypoint/Env may be null, a list or (older daemons) one string"""
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list):
        return tuple(item for item in value if isinstance(item, str))
    return ()


# ---------------------------------------------------------------- scalar rules

def display_name(names: Any) -> str:
    """First name with exactly one leading '/' stripped"""
    if not isinstance(names, list) or not names:
        return ''
    return strip_name(_str(names[0]))


def strip_name(name: str) -> str:
    return name[1:] if name.startswith('/') else name


def state_from_status(status: Any) -> ContainerState:
    """Summary responses: one status string compared case-insensitively"""
    if not isinstance(status, str):
        return ContainerState.UNKNOWN
    return _STATES.get(status.lower(), ContainerState.UNKNOWN)


def state_from_flags(state: Any) -> ContainerState:
    """
    Detail responses: independent boolean flags

    Precedence running > paused > restarting > dead, otherwise exited.
    """
    if not isinstance(state, Mapping):
        return ContainerState.UNKNOWN
    if state.get('Running') is True:
        return ContainerState.RUNNING
    if state.get('Paused') is True:
        return ContainerState.PAUSED
    if state.get('Restarting') is True:
        return ContainerState.RESTARTING
    if state.get('Dead') is True:
        return ContainerState.DEAD
    return ContainerState.EXITED


def timestamp_from_epoch(value: Any) -> datetime:
    """Summary responses: epoch seconds"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return EPOCH
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return EPOCH


def parse_timestamp(value: Any) -> datetime:
    """
    Detail responses: RFC 3339 text

    Docker sends nanosecond precision, which is truncated to microseconds.
    An unparsable value maps to EPOCH.
    """
    if not isinstance(value, str):
        return EPOCH
    match = _RFC3339.match(value.strip())
    if not match:
        return EPOCH
    date, time, fraction, offset = match.groups()
    micros = (fraction or '')[:6].ljust(6, '0')
    if offset in ('Z', 'z'):
        offset = '+00:00'
    elif ':' not in offset:
        offset = f"{offset[:3]}:{offset[3:]}"
    try:
        parsed = datetime.fromisoformat(f"{date}T{time}.{micros}{offset}")
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return EPOCH


def created_from_inspect(value: Any) -> datetime:
    """
    Creation instant of an inspected container or image

    List responses only carry whole epoch seconds, so the detail instant is
    truncated to the same precision.
    """
    return parse_timestamp(value).replace(microsecond=0)


def labels_from(value: Any) -> Labels:
    """Absent or null labels map to an empty mapping; keys are sorted"""
    if not isinstance(value, Mapping):
        return {}
    return {str(key): '' if value[key] is None else str(value[key]) for key in sorted(value)}


def protocol_from(value: Any) -> PortProtocol:
    return PortProtocol.UDP if value == 'udp' else PortProtocol.TCP


# ---------------------------------------------------------------- containers

def port_from_summary(dto: Any) -> PortMapping:
    dto = _object(dto)
    return PortMapping(
        container_port=_int(dto.get('PrivatePort')),
        host_port=_optional_int(dto.get('PublicPort')),
        host_ip=_optional_str(dto.get('IP')),
        protocol=protocol_from(dto.get('Type')),
    )


def sorted_ports(ports) -> Tuple[PortMapping, ...]:
    """Deterministic port order shared by summary and detail mapping"""
    return tuple(sorted(
        ports,
        key=lambda p: (p.container_port, p.protocol.value, p.host_ip or '', p.host_port or 0),
    ))


def ports_from_bindings(value: Any) -> Tuple[PortMapping, ...]:
    """
    Detail responses: NetworkSettings.Ports

    ``{"80/tcp": [{"HostIp": "0.0.0.0", "HostPort": "8080"}], "443/tcp": null}``
    """
    ports: List[PortMapping] = []
    for key in sorted(_object(value)):
        port, _, proto = str(key).partition('/')
        container_port = _int(port)
        protocol = protocol_from(proto)
        bindings = value[key]
        if not isinstance(bindings, list) or not bindings:
            ports.append(PortMapping(container_port, protocol=protocol))
            continue
        for binding in bindings:
            binding = _object(binding)
            ports.append(PortMapping(
                container_port=container_port,
                host_port=_optional_int(binding.get('HostPort')),
                host_ip=_optional_str(binding.get('HostIp')),
                protocol=protocol,
            ))
    return sorted_ports(ports)


def container_from_summary(dto: Any) -> Container:
    """Map one entry of ``GET /containers/json``"""
    dto = _require_object(dto, 'container')
    ports = dto.get('Ports')
    return Container(
        id=ContainerId(_str(dto.get('Id'))),
        name=display_name(dto.get('Names')),
        image=_str(dto.get('Image')),
        state=state_from_status(dto.get('State')),
        status=_str(dto.get('Status')),
        created_at=timestamp_from_epoch(dto.get('Created')),
        labels=labels_from(dto.get('Labels')),
        ports=sorted_ports(port_from_summary(p) for p in ports) if isinstance(ports, list) else (),
    )


def mount_from(dto: Any) -> Mount:
    dto = _object(dto)
    return Mount(
        source=_str(dto.get('Source')),
        destination=_str(dto.get('Destination')),
        mode=_str(dto.get('Mode')),
        rw=dto.get('RW') is not False,
    )


def network_settings_from(dto: Any) -> NetworkSettings:
    """IP address from the top-level field, else the first attached network"""
    dto = _object(dto)
    networks = _object(dto.get('Networks'))
    ip_address = _optional_str(dto.get('IPAddress'))
    if ip_address is None:
        for name in sorted(networks):
            ip_address = _optional_str(_object(networks[name]).get('IPAddress'))
            if ip_address:
                break
    return NetworkSettings(
        networks=tuple(sorted(str(name) for name in networks)),
        ip_address=ip_address,
    )


def container_detail_from_inspect(dto: Any) -> ContainerDetail:
    """Map ``GET /containers/{id}/json``"""
    dto = _require_object(dto, 'container detail')
    config = _object(dto.get('Config'))
    state = dto.get('State')
    network_settings = _object(dto.get('NetworkSettings'))
    mounts = dto.get('Mounts')
    return ContainerDetail(
        id=ContainerId(_str(dto.get('Id'))),
        name=strip_name(_str(dto.get('Name'))),
        image=_str(config.get('Image')),
        state=state_from_flags(state),
        status=_str(_object(state).get('Status')),
        created_at=created_from_inspect(dto.get('Created')),
        labels=labels_from(config.get('Labels')),
        ports=ports_from_bindings(network_settings.get('Ports')),
        command=_str_tuple(config.get('Cmd')),
        entrypoint=_str_tuple(config.get('Entrypoint')),
        env=_str_tuple(config.get('Env')),
        mounts=tuple(mount_from(m) for m in mounts) if isinstance(mounts, list) else (),
        network_settings=network_settings_from(network_settings),
    )


# ---------------------------------------------------------------- images

def _repo_tags(value: Any) -> Tuple[str, ...]:
    # Untagged images report "<none>:<none>" on older daemons
    return tuple(tag for tag in _str_tuple(value) if tag != '<none>:<none>')


def image_from_summary(dto: Any) -> Image:
    """Map one entry of ``GET /images/json``"""
    dto = _require_object(dto, 'image')
    return Image(
        id=ImageId(_str(dto.get('Id'))),
        repo_tags=_repo_tags(dto.get('RepoTags')),
        size=_int(dto.get('Size')),
        created_at=timestamp_from_epoch(dto.get('Created')),
        labels=labels_from(dto.get('Labels')),
    )


def image_detail_from_inspect(dto: Any) -> ImageDetail:
    """Map ``GET /images/{name}/json``"""
    dto = _require_object(dto, 'image detail')
    config = _object(dto.get('Config'))
    return ImageDetail(
        id=ImageId(_str(dto.get('Id'))),
        repo_tags=_repo_tags(dto.get('RepoTags')),
        size=_int(dto.get('Size')),
        created_at=created_from_inspect(dto.get('Created')),
        labels=labels_from(config.get('Labels')),
        architecture=_str(dto.get('Architecture')),
        os=_str(dto.get('Os')),
    )


# ---------------------------------------------------------------- volumes

def volumes_from_list(dto: Any) -> List[Volume]:
    """Map ``GET /volumes`` (``{"Volumes": [...] | null, "Warnings": ...}``)"""
    dto = _require_object(dto, 'volume list')
    volumes = dto.get('Volumes')
    if volumes is None:
        return []
    if not isinstance(volumes, list):
        raise BugError(f"Malformed volume list: expected array, got {type(volumes).__name__}")
    return [volume_from_summary(v) for v in volumes]


def volume_from_summary(dto: Any) -> Volume:
    dto = _require_object(dto, 'volume')
    return Volume(
        name=VolumeName(_str(dto.get('Name'))),
        driver=_str(dto.get('Driver')),
        mountpoint=_str(dto.get('Mountpoint')),
        labels=labels_from(dto.get('Labels')),
    )


def volume_detail_from_inspect(dto: Any) -> VolumeDetail:
    """Map ``GET /volumes/{name}``"""
    dto = _require_object(dto, 'volume detail')
    created_at = dto.get('CreatedAt')
    return VolumeDetail(
        name=VolumeName(_str(dto.get('Name'))),
        driver=_str(dto.get('Driver')),
        mountpoint=_str(dto.get('Mountpoint')),
        labels=labels_from(dto.get('Labels')),
        scope=_str(dto.get('Scope')),
        created_at=parse_timestamp(created_at) if created_at else None,
        options=labels_from(dto.get('Options')),
    )


# ---------------------------------------------------------------- networks

def network_from_summary(dto: Any) -> Network:
    """Map one entry of ``GET /networks``"""
    dto = _require_object(dto, 'network')
    return Network(
        id=NetworkId(_str(dto.get('Id'))),
        name=_str(dto.get('Name')),
        driver=_str(dto.get('Driver')),
        scope=_str(dto.get('Scope')),
        internal=dto.get('Internal') is True,
        labels=labels_from(dto.get('Labels')),
    )


def ipam_from(dto: Any) -> Optional[IpamConfig]:
    if not isinstance(dto, Mapping):
        return None
    config = dto.get('Config')
    subnets = []
    if isinstance(config, list):
        for entry in config:
            entry = _object(entry)
            subnets.append(IpamSubnet(
                subnet=_str(entry.get('Subnet')),
                gateway=_optional_str(entry.get('Gateway')),
            ))
    return IpamConfig(driver=_str(dto.get('Driver')), config=tuple(subnets))


def network_detail_from_inspect(dto: Any) -> NetworkDetail:
    """Map ``GET /networks/{id}``"""
    dto = _require_object(dto, 'network detail')
    summary = network_from_summary(dto)
    containers = _object(dto.get('Containers'))
    return NetworkDetail(
        id=summary.id,
        name=summary.name,
        driver=summary.driver,
        scope=summary.scope,
        internal=summary.internal,
        labels=summary.labels,
        ipam=ipam_from(dto.get('IPAM')),
        attachable=dto.get('Attachable') is True,
        containers=tuple(ContainerId(str(c)) for c in sorted(containers)),
    )


# ---------------------------------------------------------------- system

def engine_info_from_version(dto: Any) -> EngineInfo:
    """Map ``GET /version``"""
    dto = _require_object(dto, 'version')
    return EngineInfo(
        version=_str(dto.get('Version')),
        api_version=_str(dto.get('ApiVersion')),
        os=_str(dto.get('Os')),
        arch=_str(dto.get('Arch')),
    )
