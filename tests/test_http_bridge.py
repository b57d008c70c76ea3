"""
Tests for HttpHostBridge against an in-process aiohttp host.
"""
import asyncio

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from multi_install.host.http_bridge import HttpHostBridge, HostApiError
from multi_install.integrations.cooperating_addon import COOPERATING_ADDON_ID, detect


def build_host_app(state):
    """Fake host library manager API."""
    routes = web.RouteTableDef()

    @routes.post('/api/games/{game_id}/install')
    async def install(request):
        game_id = request.match_info['game_id']
        if game_id == 'broken':
            return web.Response(status=500, text="install backend crashed")
        state['installs'].append(game_id)
        return web.Response(status=202)

    @routes.get('/api/games/{game_id}')
    async def game(request):
        game_id = request.match_info['game_id']
        return web.json_response({'id': game_id, 'is_installed': game_id in state['installed']})

    @routes.post('/api/dialogs/confirm')
    async def confirm(request):
        state['prompts'].append(await request.json())
        return web.json_response({'result': state['answer']})

    @routes.post('/api/dialogs/error')
    async def error(request):
        state['errors'].append(await request.json())
        return web.Response(status=204)

    @routes.get('/api/addons')
    async def addons(request):
        return web.json_response([
            {'id': 'some-other-addon', 'name': 'Other'},
            {'id': COOPERATING_ADDON_ID, 'name': 'Achievements'},
        ])

    @routes.get('/api/addons/{addon_id}/settings')
    async def get_settings(request):
        return web.json_response(state['addon_settings'])

    @routes.patch('/api/addons/{addon_id}/settings')
    async def patch_settings(request):
        state['addon_settings'].update(await request.json())
        return web.json_response(state['addon_settings'])

    @routes.post('/api/addons/{addon_id}/refresh')
    async def refresh(request):
        state['refreshes'].append((await request.json())['game_ids'])
        return web.Response(status=204)

    @routes.get('/api/events')
    async def events(request):
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        for event in state['events']:
            await ws.send_json(event)
        async for _ in ws:
            pass
        return ws

    app = web.Application()
    app.add_routes(routes)
    return app


@pytest.fixture
def host_state():
    return {
        'installs': [],
        'installed': {'g1'},
        'prompts': [],
        'answer': 'yes',
        'errors': [],
        'addon_settings': {'auto_import': True, 'auto_import_on_installed': True},
        'refreshes': [],
        'events': [
            {'event': 'library_updated'},
            {'event': 'game_installed'},
            {'event': 'game_installed', 'game_id': 'g7'},
        ],
    }


@pytest_asyncio.fixture
async def bridge(host_state):
    server = TestServer(build_host_app(host_state))
    await server.start_server()
    bridge = HttpHostBridge(f"http://{server.host}:{server.port}", reconnect_delay=0.05)
    yield bridge
    await bridge.close()
    await server.close()


@pytest.mark.asyncio
async def test_install_game_posts_request(bridge, host_state):
    await bridge.install_game('g2')
    assert host_state['installs'] == ['g2']


@pytest.mark.asyncio
async def test_error_status_raises(bridge):
    with pytest.raises(HostApiError) as exc_info:
        await bridge.install_game('broken')
    assert exc_info.value.status == 500
    assert "install backend crashed" in exc_info.value.message


@pytest.mark.asyncio
async def test_is_game_installed(bridge):
    assert await bridge.is_game_installed('g1') == True
    assert await bridge.is_game_installed('g2') == False


@pytest.mark.asyncio
async def test_confirm_yes_and_no(bridge, host_state):
    assert await bridge.confirm("Title", "Proceed?") == True
    host_state['answer'] = 'no'
    assert await bridge.confirm("Title", "Proceed?") == False
    assert host_state['prompts'][0]['message'] == "Proceed?"
    assert host_state['prompts'][0]['buttons'] == 'yes_no'


@pytest.mark.asyncio
async def test_show_error(bridge, host_state):
    await bridge.show_error("Title", "Something broke")
    assert host_state['errors'] == [{'title': "Title", 'message': "Something broke"}]


@pytest.mark.asyncio
async def test_addon_override_restore_and_refresh(bridge, host_state):
    handle = await detect(bridge)
    assert handle is not None
    assert handle.addon.name == 'Achievements'

    await handle.override()
    assert host_state['addon_settings'] == {'auto_import': False, 'auto_import_on_installed': False}

    await handle.restore()
    assert host_state['addon_settings'] == {'auto_import': True, 'auto_import_on_installed': True}

    await handle.request_refresh({'g3', 'g1'})
    assert host_state['refreshes'] == [['g1', 'g3']]


@pytest.mark.asyncio
async def test_event_stream_forwards_installed_games(bridge):
    received = []
    done = asyncio.Event()

    async def on_installed(game_id):
        received.append(game_id)
        done.set()

    bridge.subscribe_installed(on_installed)
    await bridge.start()
    await asyncio.wait_for(done.wait(), timeout=5)

    assert received == ['g7']


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_stop_others(bridge):
    received = []
    done = asyncio.Event()

    def broken(game_id):
        raise RuntimeError("subscriber broke")

    def on_installed(game_id):
        received.append(game_id)
        done.set()

    bridge.subscribe_installed(broken)
    bridge.subscribe_installed(on_installed)
    await bridge.start()
    await asyncio.wait_for(done.wait(), timeout=5)

    assert received == ['g7']


@pytest.mark.asyncio
async def test_event_listener_retries_when_host_unreachable():
    bridge = HttpHostBridge("http://127.0.0.1:9", reconnect_delay=0.01)
    await bridge.start()
    await asyncio.sleep(0.1)
    assert bridge._listener_task is not None
    assert bridge._listener_task.done() == False
    await bridge.close()
    assert bridge._listener_task is None
