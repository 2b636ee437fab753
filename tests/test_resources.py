"""Tests for images, volumes, networks and system operations of the Docker engine."""

import json

import pytest

from tenor.docker_api.images import ImageCollection, split_reference
from tenor.engine import (
    BugError,
    Capability,
    ExecSpec,
    ImageFilter,
    ImageId,
    NetworkFilter,
    NetworkId,
    UserActionableError,
    VolumeFilter,
    VolumeName,
)


class TestSplitReference:
    @pytest.mark.parametrize("reference,params", [
        ('nginx', {'fromImage': 'nginx', 'tag': 'latest'}),
        ('nginx:1.25', {'fromImage': 'nginx:1.25'}),
        ('library/nginx', {'fromImage': 'library/nginx', 'tag': 'latest'}),
        ('localhost:5000/app', {'fromImage': 'localhost:5000/app', 'tag': 'latest'}),
        ('localhost:5000/app:dev', {'fromImage': 'localhost:5000/app:dev'}),
        ('app@sha256:abc', {'fromImage': 'app@sha256:abc'}),
    ])
    def test_reference(self, reference, params):
        assert split_reference(reference) == params


class TestImages:
    def test_list_params(self):
        params = ImageCollection.list_params(
            ImageFilter(reference='nginx', dangling=False, labels=(('team', 'web'),))
        )
        assert params['filters'] == {
            'dangling': ['false'], 'label': ['team=web'], 'reference': ['nginx'],
        }

    @pytest.mark.asyncio
    async def test_list(self, daemon, engine):
        daemon.route('GET', '/images/json', body=[
            {'Id': 'sha256:abc', 'RepoTags': ['nginx:latest'], 'Size': 5, 'Created': 0},
        ])
        images = await engine.list_images(ImageFilter(dangling=True))
        assert images[0].repo_tags == ('nginx:latest',)
        assert json.loads(daemon.last_query['filters'][0]) == {'dangling': ['true']}

    @pytest.mark.asyncio
    async def test_inspect_keeps_reference_separators(self, daemon, engine):
        daemon.route('GET', '/images/registry.local:5000/app:dev/json', body={
            'Id': 'sha256:abc', 'Architecture': 'amd64', 'Os': 'linux',
        })
        detail = await engine.inspect_image(ImageId('registry.local:5000/app:dev'))
        assert detail.architecture == 'amd64'

    @pytest.mark.asyncio
    async def test_remove(self, daemon, engine):
        daemon.route('DELETE', '/images/nginx:latest', body=[{'Untagged': 'nginx:latest'}])
        await engine.remove_image(ImageId('nginx:latest'), force=True)
        assert daemon.last_raw_query == 'force=true'

    @pytest.mark.asyncio
    async def test_remove_in_use(self, daemon, engine):
        daemon.route('DELETE', '/images/nginx', status=409,
                     body={'message': 'image is being used by running container'})
        with pytest.raises(UserActionableError, match='being used'):
            await engine.remove_image(ImageId('nginx'))

    @pytest.mark.asyncio
    async def test_pull(self, daemon, engine):
        daemon.route('POST', '/images/create',
                     raw=b'{"status":"Pulling from library/alpine"}\n{"status":"Downloaded"}\n')
        await engine.pull_image('alpine')
        assert daemon.last_query == {'fromImage': ['alpine'], 'tag': ['latest']}

    @pytest.mark.asyncio
    async def test_pull_error_in_stream(self, daemon, engine):
        daemon.route('POST', '/images/create', raw=(
            b'{"status":"Pulling"}\n'
            b'{"errorDetail":{"message":"manifest unknown"},"error":"manifest unknown"}\n'
        ))
        with pytest.raises(UserActionableError, match='manifest unknown'):
            await engine.pull_image('nosuch:tag')

    @pytest.mark.asyncio
    async def test_pull_error_detail_not_an_object(self, daemon, engine):
        daemon.route('POST', '/images/create', raw=b'{"errorDetail":"rate limited"}\n')
        with pytest.raises(UserActionableError, match='rate limited'):
            await engine.pull_image('alpine')

    @pytest.mark.asyncio
    async def test_pull_ignores_empty_error_detail(self, daemon, engine):
        daemon.route('POST', '/images/create', raw=b'{"status":"Done","errorDetail":null}\n')
        await engine.pull_image('alpine')

    @pytest.mark.asyncio
    async def test_remove_missing(self, daemon, engine):
        daemon.route('DELETE', '/images/ghost:1', status=404,
                     body={'message': 'No such image: ghost:1'})
        with pytest.raises(UserActionableError) as exc:
            await engine.remove_image(ImageId('ghost:1'))
        assert 'No such image: ghost:1' in exc.value.message

    @pytest.mark.asyncio
    async def test_pull_empty_reference(self, engine):
        with pytest.raises(UserActionableError):
            await engine.pull_image('  ')


class TestVolumes:
    @pytest.mark.asyncio
    async def test_list(self, daemon, engine):
        daemon.route('GET', '/volumes', body={
            'Volumes': [{'Name': 'data', 'Driver': 'local', 'Mountpoint': '/v/data'}],
            'Warnings': None,
        })
        volumes = await engine.list_volumes(VolumeFilter(name='data'))
        assert [v.name for v in volumes] == ['data']
        assert json.loads(daemon.last_query['filters'][0]) == {'name': ['data']}

    @pytest.mark.asyncio
    async def test_list_null(self, daemon, engine):
        daemon.route('GET', '/volumes', body={'Volumes': None})
        assert await engine.list_volumes() == []

    @pytest.mark.asyncio
    async def test_list_wrong_shape(self, daemon, engine):
        daemon.route('GET', '/volumes', body=[])
        with pytest.raises(BugError):
            await engine.list_volumes()

    @pytest.mark.asyncio
    async def test_inspect_and_remove(self, daemon, engine):
        daemon.route('GET', '/volumes/data', body={'Name': 'data', 'Scope': 'local'})
        daemon.route('DELETE', '/volumes/data', status=204)
        detail = await engine.inspect_volume(VolumeName('data'))
        assert detail.scope == 'local'
        assert detail.created_at is None
        await engine.remove_volume(VolumeName('data'))
        assert daemon.requests[-1][0] == 'DELETE'

    @pytest.mark.asyncio
    async def test_remove_missing(self, daemon, engine):
        daemon.route('DELETE', '/volumes/ghost', status=404,
                     body={'message': 'get ghost: no such volume'})
        with pytest.raises(UserActionableError) as exc:
            await engine.remove_volume(VolumeName('ghost'))
        assert 'no such volume' in exc.value.message
        assert exc.value.status_code == 404


class TestNetworks:
    @pytest.mark.asyncio
    async def test_list(self, daemon, engine):
        daemon.route('GET', '/networks', body=[
            {'Id': 'n1', 'Name': 'bridge', 'Driver': 'bridge', 'Scope': 'local'},
        ])
        networks = await engine.list_networks(NetworkFilter(labels=(('env', 'dev'),)))
        assert networks[0].name == 'bridge'
        assert json.loads(daemon.last_query['filters'][0]) == {'label': ['env=dev']}

    @pytest.mark.asyncio
    async def test_inspect(self, daemon, engine):
        daemon.route('GET', '/networks/n1', body={
            'Id': 'n1', 'Name': 'backend', 'IPAM': {'Driver': 'default', 'Config': []},
        })
        detail = await engine.inspect_network(NetworkId('n1'))
        assert detail.ipam.config == ()

    @pytest.mark.asyncio
    async def test_remove_missing(self, daemon, engine):
        with pytest.raises(UserActionableError, match='page not found'):
            await engine.remove_network(NetworkId('missing'))


class TestSystem:
    @pytest.mark.asyncio
    async def test_ping(self, daemon, engine):
        daemon.route('GET', '/_ping', raw=b'OK', content_type='text/plain')
        await engine.ping()

    @pytest.mark.asyncio
    async def test_engine_info(self, daemon, engine):
        daemon.route('GET', '/version', body={
            'Version': '24.0.7', 'ApiVersion': '1.43', 'Os': 'linux', 'Arch': 'amd64',
        })
        info = await engine.engine_info()
        assert info.version == '24.0.7'
        assert info.api_version == '1.43'

    @pytest.mark.asyncio
    async def test_optional_capabilities(self, engine):
        assert engine.capabilities == frozenset()
        assert not engine.supports(Capability.LOGS)

        logs = await engine.stream_logs('web')
        assert logs.supported is False
        assert [event async for event in logs] == []

        stats = await engine.stream_stats('web')
        assert stats.capability is Capability.STATS
        assert [event async for event in stats] == []

    @pytest.mark.asyncio
    async def test_exec_unsupported(self, engine):
        with pytest.raises(UserActionableError, match='Exec'):
            await engine.create_exec('web', ExecSpec(cmd=('sh',)))

    @pytest.mark.asyncio
    async def test_close(self, engine):
        await engine.close()
