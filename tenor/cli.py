"""
CLI - command line interface
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, List, Optional, Sequence, Tuple

from .docker_api import DockerEngine, resolve_target
from .engine import (
    ContainerFilter,
    ContainerId,
    ContainerState,
    DeleteContainerOptions,
    Engine,
    EngineError,
    ImageFilter,
    ImageId,
    NetworkFilter,
    NetworkId,
    VolumeFilter,
    VolumeName,
)
from .settings_manager import DEFAULT_SETTINGS, SettingsManager

logger = logging.getLogger(__name__)

ACTIONS = [
    'list', 'inspect', 'start', 'stop', 'restart', 'remove',
    'images', 'inspect-image', 'pull', 'remove-image',
    'volumes', 'inspect-volume', 'remove-volume',
    'networks', 'inspect-network', 'remove-network',
    'check',
    'config', 'config-set', 'config-reset',
]

# Actions that only touch the settings file
SETTINGS_ACTIONS = {'config', 'config-set', 'config-reset'}

# Actions that operate on one resource
NEEDS_ID = {
    'inspect', 'start', 'stop', 'restart', 'remove',
    'inspect-image', 'remove-image',
    'inspect-volume', 'remove-volume',
    'inspect-network', 'remove-network',
}


def parse_label(value: str) -> Tuple[str, str]:
    """KEY=VALUE (or KEY) -> label pair"""
    key, _, label_value = value.partition('=')
    if not key:
        raise argparse.ArgumentTypeError(f"invalid label filter: {value!r}")
    return key, label_value


def parse_setting(value: str) -> Tuple[str, Any]:
    """KEY=VALUE -> setting; text settings keep VALUE, others read it as JSON"""
    key, sep, raw = value.partition('=')
    if not key or not sep:
        raise argparse.ArgumentTypeError(f"invalid setting: {value!r}")
    if isinstance(DEFAULT_SETTINGS.get(key), str):
        return key, raw
    try:
        return key, json.loads(raw)
    except ValueError:
        return key, raw


class TenorCLI:
    """Engine CLI interface"""

    def __init__(self, engine: Engine):
        """
        Initialize CLI

        Args:
            engine: Any Engine implementation
        """
        self.engine = engine

    async def list_containers(self, name: Optional[str] = None,
                              state: Optional[ContainerState] = None,
                              labels: Sequence[Tuple[str, str]] = ()):
        """List containers"""
        containers = await self.engine.list_containers(
            ContainerFilter(name=name, state=state, labels=tuple(labels))
        )

        if not containers:
            logger.info("No containers found")
            return

        print(f"{'NAME':<30} {'STATE':<12} {'STATUS':<25} {'IMAGE':<40} {'ID':<15}")
        print("-" * 125)

        for c in containers:
            print(f"{c.name:<30} {str(c.state):<12} {c.status:<25} {c.image:<40} {c.short_id:<15}")

        print(f"\nTotal: {len(containers)}")

    async def inspect_container(self, container_id: str):
        """Show container details"""
        detail = await self.engine.inspect_container(ContainerId(container_id))

        print(f"ID:         {detail.id}")
        print(f"Name:       {detail.name}")
        print(f"Image:      {detail.image}")
        print(f"State:      {detail.state} ({detail.status})")
        print(f"Created:    {detail.created_at.isoformat()}")
        print(f"Command:    {' '.join(detail.command)}")
        print(f"Entrypoint: {' '.join(detail.entrypoint)}")
        print(f"IP address: {detail.network_settings.ip_address or '-'}")
        print(f"Networks:   {', '.join(detail.network_settings.networks) or '-'}")
        if detail.ports:
            print("Ports:")
            for port in detail.ports:
                print(f"  {port}")
        if detail.mounts:
            print("Mounts:")
            for mount in detail.mounts:
                mode = 'rw' if mount.rw else 'ro'
                print(f"  {mount.source} -> {mount.destination} ({mode})")
        if detail.labels:
            print("Labels:")
            for key, value in detail.labels.items():
                print(f"  {key}={value}")

    async def start_container(self, container_id: str):
        """Start container"""
        logger.info(f"Starting container {container_id}...")
        await self.engine.start_container(ContainerId(container_id))
        logger.info(f"✓ Container {container_id} started")

    async def stop_container(self, container_id: str, timeout: Optional[int] = None):
        """Stop container"""
        logger.info(f"Stopping container {container_id}...")
        await self.engine.stop_container(ContainerId(container_id), timeout=timeout)
        logger.info(f"✓ Container {container_id} stopped")

    async def restart_container(self, container_id: str, timeout: Optional[int] = None):
        """Restart container"""
        logger.info(f"Restarting container {container_id}...")
        await self.engine.restart_container(ContainerId(container_id), timeout=timeout)
        logger.info(f"✓ Container {container_id} restarted")

    async def remove_container(self, container_id: str, force: bool = False,
                               volumes: bool = False):
        """Remove container"""
        logger.info(f"Removing container {container_id}...")
        await self.engine.delete_container(
            ContainerId(container_id),
            DeleteContainerOptions(force=force, remove_volumes=volumes),
        )
        logger.info(f"✓ Container {container_id} removed")

    async def list_images(self, name: Optional[str] = None,
                          labels: Sequence[Tuple[str, str]] = ()):
        """List images"""
        images = await self.engine.list_images(ImageFilter(reference=name, labels=tuple(labels)))

        if not images:
            logger.info("No images found")
            return

        print(f"{'TAGS':<50} {'SIZE (MB)':>10} {'CREATED':<20} {'ID':<15}")
        print("-" * 98)

        for i in images:
            tags = ', '.join(i.repo_tags) or '<none>'
            created = i.created_at.strftime('%Y-%m-%d %H:%M')
            print(f"{tags:<50} {i.size / 1024 / 1024:>10.1f} {created:<20} {i.short_id:<15}")

        print(f"\nTotal: {len(images)}")

    async def inspect_image(self, image_id: str):
        """Show image details"""
        detail = await self.engine.inspect_image(ImageId(image_id))

        print(f"ID:       {detail.id}")
        print(f"Tags:     {', '.join(detail.repo_tags) or '<none>'}")
        print(f"Size:     {detail.size}")
        print(f"Created:  {detail.created_at.isoformat()}")
        print(f"Platform: {detail.os}/{detail.architecture}")

    async def pull_image(self, reference: str):
        """Pull image"""
        logger.info(f"Pulling image {reference}...")
        await self.engine.pull_image(reference)
        logger.info(f"✓ Image {reference} pulled")

    async def remove_image(self, image_id: str, force: bool = False):
        """Remove image"""
        await self.engine.remove_image(ImageId(image_id), force=force)
        logger.info(f"✓ Image {image_id} removed")

    async def list_volumes(self, name: Optional[str] = None,
                           labels: Sequence[Tuple[str, str]] = ()):
        """List volumes"""
        volumes = await self.engine.list_volumes(VolumeFilter(name=name, labels=tuple(labels)))

        if not volumes:
            logger.info("No volumes found")
            return

        print(f"{'NAME':<40} {'DRIVER':<15} {'MOUNTPOINT':<60}")
        print("-" * 115)

        for v in volumes:
            print(f"{v.name:<40} {v.driver:<15} {v.mountpoint:<60}")

        print(f"\nTotal: {len(volumes)}")

    async def inspect_volume(self, name: str):
        """Show volume details"""
        detail = await self.engine.inspect_volume(VolumeName(name))

        print(f"Name:       {detail.name}")
        print(f"Driver:     {detail.driver}")
        print(f"Scope:      {detail.scope}")
        print(f"Mountpoint: {detail.mountpoint}")
        if detail.created_at:
            print(f"Created:    {detail.created_at.isoformat()}")

    async def remove_volume(self, name: str, force: bool = False):
        """Remove volume"""
        await self.engine.remove_volume(VolumeName(name), force=force)
        logger.info(f"✓ Volume {name} removed")

    async def list_networks(self, name: Optional[str] = None,
                            labels: Sequence[Tuple[str, str]] = ()):
        """List networks"""
        networks = await self.engine.list_networks(NetworkFilter(name=name, labels=tuple(labels)))

        if not networks:
            logger.info("Networks not found")
            return

        print(f"{'NAME':<25} {'DRIVER':<15} {'SCOPE':<10} {'INTERNAL':<10} {'ID':<15}")
        print("-" * 78)

        for n in networks:
            internal = 'yes' if n.internal else 'no'
            print(f"{n.name:<25} {n.driver:<15} {n.scope:<10} {internal:<10} {n.id[:12]:<15}")

        print(f"\nTotal: {len(networks)}")

    async def inspect_network(self, network_id: str):
        """Show network details"""
        detail = await self.engine.inspect_network(NetworkId(network_id))

        print(f"ID:         {detail.id}")
        print(f"Name:       {detail.name}")
        print(f"Driver:     {detail.driver}")
        print(f"Scope:      {detail.scope}")
        print(f"Internal:   {'yes' if detail.internal else 'no'}")
        if detail.ipam:
            for subnet in detail.ipam.config:
                print(f"Subnet:     {subnet.subnet} (gateway {subnet.gateway or '-'})")
        print(f"Containers: {len(detail.containers)}")

    async def remove_network(self, network_id: str):
        """Remove network"""
        await self.engine.remove_network(NetworkId(network_id))
        logger.info(f"✓ Network {network_id} removed")

    async def check(self):
        """Check engine connection"""
        await self.engine.ping()
        info = await self.engine.engine_info()

        print("Docker information:")
        print(f"  Server: {info.version or 'Unknown'}")
        print(f"  API: {info.api_version or 'Unknown'}")
        print(f"  Platform: {info.os or 'Unknown'}/{info.arch or 'Unknown'}")

    async def dispatch(self, args: argparse.Namespace, stop_timeout: Optional[int] = None):
        """Run one parsed action"""
        action = args.action
        state = ContainerState(args.state) if args.state else None
        timeout = args.timeout if args.timeout is not None else stop_timeout

        if action == 'list':
            await self.list_containers(name=args.name, state=state, labels=args.label)
        elif action == 'inspect':
            await self.inspect_container(args.id)
        elif action == 'start':
            await self.start_container(args.id)
        elif action == 'stop':
            await self.stop_container(args.id, timeout=timeout)
        elif action == 'restart':
            await self.restart_container(args.id, timeout=timeout)
        elif action == 'remove':
            await self.remove_container(args.id, force=args.force, volumes=args.volumes)
        elif action == 'images':
            await self.list_images(name=args.name, labels=args.label)
        elif action == 'inspect-image':
            await self.inspect_image(args.id)
        elif action == 'pull':
            await self.pull_image(args.image)
        elif action == 'remove-image':
            await self.remove_image(args.id, force=args.force)
        elif action == 'volumes':
            await self.list_volumes(name=args.name, labels=args.label)
        elif action == 'inspect-volume':
            await self.inspect_volume(args.id)
        elif action == 'remove-volume':
            await self.remove_volume(args.id, force=args.force)
        elif action == 'networks':
            await self.list_networks(name=args.name, labels=args.label)
        elif action == 'inspect-network':
            await self.inspect_network(args.id)
        elif action == 'remove-network':
            await self.remove_network(args.id)
        elif action == 'check':
            await self.check()

    async def run(self, args: argparse.Namespace, stop_timeout: Optional[int] = None):
        try:
            await self.dispatch(args, stop_timeout=stop_timeout)
        finally:
            await self.engine.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='tenor',
        description='tenor - container engine manager',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Usage examples:
  %(prog)s list                                    # List containers
  %(prog)s list --state running --label app=web
  %(prog)s stop --id my-container --timeout 5
  %(prog)s remove --id my-container --force --volumes
  %(prog)s pull --image nginx:1.25
  %(prog)s check                                   # Check Docker connection
  %(prog)s config-set --set request_timeout=30 --set docker_socket_path=/run/docker.sock
"""
    )

    parser.add_argument('action', choices=ACTIONS, help='Action')

    # Resource parameters
    parser.add_argument('--id', help='Container/image/network ID or name, volume name')
    parser.add_argument('--image', help='Image reference to pull')

    # Filters
    parser.add_argument('--name', help='Filter by name')
    parser.add_argument('--state', choices=[s.value for s in ContainerState if s is not ContainerState.UNKNOWN],
                        help='Filter containers by state')
    parser.add_argument('--label', type=parse_label, action='append', default=[],
                        metavar='KEY=VALUE', help='Filter by label (repeatable)')

    # Action parameters
    parser.add_argument('--timeout', type=int, help='Stop/restart grace period in seconds')
    parser.add_argument('--force', action='store_true', help='Force action')
    parser.add_argument('--volumes', action='store_true', help='Also remove anonymous volumes')
    parser.add_argument('--set', type=parse_setting, action='append', default=[],
                        metavar='KEY=VALUE', help='Setting to store (repeatable, config-set)')

    # Connection
    parser.add_argument('--socket', help='Docker socket path or unix:// host')
    parser.add_argument('--verbose', action='store_true', help='Debug logging')

    return parser


def build_engine(settings: SettingsManager, socket: Optional[str] = None) -> DockerEngine:
    """Resolve the connection target and build the Docker engine"""
    target = resolve_target(socket or settings.get('docker_socket_path') or None)
    logger.debug(f"Connecting to {target}")
    return DockerEngine.from_target(
        target,
        timeout=settings.get_int('request_timeout'),
        max_concurrency=settings.get_int('max_concurrent_requests'),
        api_version=settings.get('api_version') or None,
    )


def run_settings_action(args: argparse.Namespace, settings: SettingsManager) -> int:
    """Show, change or reset the settings file"""
    if args.action == 'config':
        print(f"Settings file: {settings.settings_file}")
        for key, value in sorted(settings.get_all().items()):
            print(f"  {key} = {json.dumps(value)}")
        return 0

    if args.action == 'config-set':
        saved = settings.update(dict(args.set))
    else:
        saved = settings.reset_to_defaults()

    if not saved:
        logger.error(f"Error: could not write {settings.settings_file}")
        return 1
    logger.info(f"✓ Settings saved to {settings.settings_file}")
    return 0


def run_cli(argv: Optional[List[str]] = None, engine: Optional[Engine] = None,
            settings: Optional[SettingsManager] = None) -> int:
    """
    Start CLI application

    Args:
        argv: Arguments (default: sys.argv)
        engine: Engine to use instead of the resolved Docker engine
        settings: Settings to use instead of the user settings file

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.action in NEEDS_ID and not args.id:
        parser.error(f"{args.action} requires --id")
    if args.action == 'pull' and not args.image:
        parser.error("pull requires --image")
    if args.action == 'config-set':
        if not args.set:
            parser.error("config-set requires --set KEY=VALUE")
        unknown = SettingsManager.unknown_keys(key for key, _ in args.set)
        if unknown:
            parser.error(f"unknown settings: {', '.join(unknown)}")

    settings = settings or SettingsManager()
    level = 'DEBUG' if args.verbose else str(settings.get('log_level', 'INFO')).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format='%(message)s')

    if args.action in SETTINGS_ACTIONS:
        return run_settings_action(args, settings)

    stop_timeout = settings.get_optional_int('stop_timeout')

    try:
        engine = engine or build_engine(settings, socket=args.socket)
        asyncio.run(TenorCLI(engine).run(args, stop_timeout=stop_timeout))
    except KeyboardInterrupt:
        logger.info("\n\nInterrupted by user")
        return 130
    except EngineError as e:
        logger.error(f"Error: {e.message}")
        if e.hint:
            logger.error(f"Hint: {e.hint}")
        return 1
    return 0


def main():
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
