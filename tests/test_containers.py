"""Tests for the Docker containers API against a fake daemon."""

import json
from datetime import timedelta

import pytest

from tenor.docker_api.containers import ContainerCollection
from tenor.engine import (
    ContainerFilter,
    ContainerId,
    ContainerState,
    DeleteContainerOptions,
    UserActionableError,
)


class TestListParams:
    def test_unfiltered(self):
        assert ContainerCollection.list_params() == {'all': True, 'filters': None}

    def test_state(self):
        params = ContainerCollection.list_params(ContainerFilter(state=ContainerState.EXITED))
        assert params['filters'] == {'status': ['exited']}

    def test_unknown_state_omits_status(self):
        params = ContainerCollection.list_params(ContainerFilter(state=ContainerState.UNKNOWN))
        assert params['filters'] is None

    def test_name_and_labels(self):
        params = ContainerCollection.list_params(
            ContainerFilter(name='web', labels=(('app', 'web'), ('managed', '')))
        )
        assert params['filters'] == {'label': ['app=web', 'managed'], 'name': ['web']}


class TestList:
    @pytest.mark.asyncio
    async def test_running_filter_query(self, daemon, engine, container_summary):
        daemon.route('GET', '/containers/json', body=[container_summary])
        containers = await engine.list_containers(ContainerFilter(state=ContainerState.RUNNING))

        assert daemon.last_query['all'] == ['true']
        assert json.loads(daemon.last_query['filters'][0]) == {'status': ['running']}
        assert len(containers) == 1
        assert containers[0].name == 'web'
        assert containers[0].state is ContainerState.RUNNING

    @pytest.mark.asyncio
    async def test_unfiltered_query(self, daemon, engine):
        daemon.route('GET', '/containers/json', body=[])
        assert await engine.list_containers() == []
        assert daemon.last_raw_query == 'all=true'

    @pytest.mark.asyncio
    async def test_unknown_state_sends_no_status(self, daemon, engine):
        daemon.route('GET', '/containers/json', body=[])
        await engine.list_containers(ContainerFilter(state=ContainerState.UNKNOWN))
        assert 'filters' not in daemon.last_query


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start(self, daemon, engine):
        daemon.route('POST', '/containers/web/start', status=204)
        await engine.start_container(ContainerId('web'))
        assert daemon.last_path == '/containers/web/start'

    @pytest.mark.asyncio
    async def test_start_already_started(self, daemon, engine):
        daemon.route('POST', '/containers/web/start', status=304)
        await engine.start_container(ContainerId('web'))

    @pytest.mark.asyncio
    async def test_stop_with_timeout(self, daemon, engine):
        daemon.route('POST', '/containers/web/stop', status=204)
        await engine.stop_container(ContainerId('web'), timeout=5)
        assert daemon.last_raw_query == 't=5'

    @pytest.mark.asyncio
    async def test_stop_with_timedelta(self, daemon, engine):
        daemon.route('POST', '/containers/web/stop', status=204)
        await engine.stop_container(ContainerId('web'), timeout=timedelta(seconds=7.9))
        assert daemon.last_raw_query == 't=7'

    @pytest.mark.asyncio
    async def test_stop_without_timeout(self, daemon, engine):
        daemon.route('POST', '/containers/web/stop', status=204)
        await engine.stop_container(ContainerId('web'))
        assert daemon.last_raw_query == ''

    @pytest.mark.asyncio
    async def test_negative_timeout_rejected(self, daemon, engine):
        with pytest.raises(UserActionableError, match="must not be negative"):
            await engine.stop_container(ContainerId('web'), timeout=-1)
        with pytest.raises(UserActionableError):
            await engine.restart_container(ContainerId('web'), timeout=timedelta(seconds=-2))
        assert daemon.requests == []

    @pytest.mark.asyncio
    async def test_restart(self, daemon, engine):
        daemon.route('POST', '/containers/web/restart', status=204)
        await engine.restart_container(ContainerId('web'), timeout=3)
        assert daemon.last_path == '/containers/web/restart'
        assert daemon.last_raw_query == 't=3'

    @pytest.mark.asyncio
    async def test_delete_options(self, daemon, engine):
        daemon.route('DELETE', '/containers/web', status=204)
        await engine.delete_container(
            ContainerId('web'), DeleteContainerOptions(force=True, remove_volumes=True)
        )
        assert daemon.requests[-1][0] == 'DELETE'
        assert daemon.last_raw_query == 'force=true&v=true'

    @pytest.mark.asyncio
    async def test_delete_defaults(self, daemon, engine):
        daemon.route('DELETE', '/containers/web', status=204)
        await engine.delete_container(ContainerId('web'))
        assert daemon.last_raw_query == ''

    @pytest.mark.asyncio
    async def test_delete_missing(self, daemon, engine):
        daemon.route('DELETE', '/containers/ghost', status=404,
                     body={'message': 'No such container: ghost'})
        with pytest.raises(UserActionableError) as exc:
            await engine.delete_container(ContainerId('ghost'))
        assert 'No such container: ghost' in exc.value.message

    @pytest.mark.asyncio
    async def test_delete_running_conflict(self, daemon, engine):
        daemon.route('DELETE', '/containers/web', status=409,
                     body={'message': 'You cannot remove a running container'})
        with pytest.raises(UserActionableError, match='Conflict'):
            await engine.delete_container(ContainerId('web'))

    @pytest.mark.asyncio
    async def test_id_is_path_encoded(self, daemon, engine):
        daemon.route('POST', '/containers/a%2Fb/start', status=204)
        await engine.start_container(ContainerId('a/b'))
        assert daemon.requests[-1][1].startswith('/containers/a%2Fb/start')


class TestInspect:
    @pytest.mark.asyncio
    async def test_inspect(self, daemon, engine, container_inspect):
        daemon.route('GET', '/containers/web/json', body=container_inspect)
        detail = await engine.inspect_container(ContainerId('web'))
        assert detail.id == 'abc123def4567890'
        assert detail.name == 'web'
        assert detail.network_settings.ip_address == '172.17.0.2'
        assert str(detail.ports[1]) == '0.0.0.0:8080->80/tcp'
