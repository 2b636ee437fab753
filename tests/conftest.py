import json
import os
import shutil
import socketserver
import tempfile
import threading
from http.server import BaseHTTPRequestHandler
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

import pytest

from tenor.docker_api import DockerEngine, DockerHTTPClient


class FakeDockerDaemon:
    """Canned Docker API responses served on a Unix socket"""

    def __init__(self, socket_path: str):
        self.socket_path = socket_path
        self.routes: Dict[Tuple[str, str], Tuple[int, bytes, str]] = {}
        self.requests: List[Tuple[str, str, bytes]] = []

    def route(self, method: str, path: str, status: int = 200, body: Any = None,
              raw: Optional[bytes] = None, content_type: str = 'application/json'):
        if raw is None:
            raw = b'' if body is None else json.dumps(body).encode('utf-8')
        self.routes[(method, path)] = (status, raw, content_type)

    @property
    def last_path(self) -> str:
        return urlsplit(self.requests[-1][1]).path

    @property
    def last_query(self) -> Dict[str, List[str]]:
        return parse_qs(urlsplit(self.requests[-1][1]).query)

    @property
    def last_raw_query(self) -> str:
        return urlsplit(self.requests[-1][1]).query


class _Handler(BaseHTTPRequestHandler):
    protocol_version = 'HTTP/1.1'

    def _handle(self):
        daemon = self.server.daemon_state
        length = int(self.headers.get('Content-Length') or 0)
        body = self.rfile.read(length) if length else b''
        daemon.requests.append((self.command, self.path, body))

        path = urlsplit(self.path).path
        default = (404, b'{"message":"page not found"}', 'application/json')
        status, payload, content_type = daemon.routes.get((self.command, path), default)

        self.send_response(status)
        self.send_header('Content-Type', content_type)
        self.send_header('Content-Length', str(len(payload)))
        self.send_header('Connection', 'close')
        self.end_headers()
        if payload and status != 304:
            self.wfile.write(payload)

    do_GET = _handle
    do_POST = _handle
    do_DELETE = _handle

    def log_message(self, format, *args):
        pass


@pytest.fixture
def socket_dir():
    # AF_UNIX paths are length limited, keep them short
    path = tempfile.mkdtemp(prefix='tenor-')
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def daemon(socket_dir):
    socket_path = os.path.join(socket_dir, 'docker.sock')
    state = FakeDockerDaemon(socket_path)

    server = socketserver.ThreadingUnixStreamServer(socket_path, _Handler)
    server.daemon_threads = True
    server.daemon_state = state
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    yield state

    server.shutdown()
    server.server_close()
    thread.join(timeout=5)


@pytest.fixture
def http(daemon):
    return DockerHTTPClient(daemon.socket_path, timeout=5)


@pytest.fixture
def engine(http):
    return DockerEngine(http)


@pytest.fixture
def container_summary():
    return {
        'Id': 'abc123def4567890',
        'Names': ['/web'],
        'Image': 'nginx:latest',
        'State': 'running',
        'Status': 'Up 5 minutes',
        'Created': 1700000000,
        'Labels': {'tier': 'front', 'app': 'web'},
        'Ports': [
            {'IP': '0.0.0.0', 'PrivatePort': 80, 'PublicPort': 8080, 'Type': 'tcp'},
            {'PrivatePort': 53, 'Type': 'udp'},
        ],
    }


@pytest.fixture
def container_inspect():
    return {
        'Id': 'abc123def4567890',
        'Name': '/web',
        'Created': '2023-11-14T22:13:20.123456789Z',
        'Config': {
            'Image': 'nginx:latest',
            'Cmd': ['nginx', '-g', 'daemon off;'],
            'Entrypoint': ['/docker-entrypoint.sh'],
            'Env': ['PATH=/usr/bin'],
            'Labels': {'tier': 'front', 'app': 'web'},
        },
        'State': {
            'Status': 'running',
            'Running': True,
            'Paused': False,
            'Restarting': False,
            'Dead': False,
        },
        'Mounts': [
            {'Source': '/srv/html', 'Destination': '/usr/share/nginx/html', 'Mode': 'ro', 'RW': False},
        ],
        'NetworkSettings': {
            'IPAddress': '172.17.0.2',
            'Networks': {'bridge': {'IPAddress': '172.17.0.2'}},
            'Ports': {
                '80/tcp': [{'HostIp': '0.0.0.0', 'HostPort': '8080'}],
                '53/udp': None,
            },
        },
    }
