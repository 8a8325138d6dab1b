from datetime import datetime, timedelta


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert b'Blend In' in res.data


def test_health(client, registry):
    registry.create_lobby('host')
    res = client.get('/api/health')
    assert res.status_code == 200
    data = res.get_json()
    assert data['status'] == 'healthy'
    assert data['active_lobbies'] == 1


def test_active_lobbies(client, registry):
    code = registry.create_lobby('host')
    registry.join_lobby(code, 'p1', 'Ada')
    lobbies = client.get('/api/lobbies/active').get_json()['lobbies']
    assert [(l['code'], l['player_count'], l['phase']) for l in lobbies] == [(code, 1, 'waiting')]


def test_lobby_snapshot(client, registry):
    code = registry.create_lobby('host')
    registry.join_lobby(code, 'p1', 'Ada')
    registry.get_lobby(code).start_round('host', 'Pizza')

    res = client.get(f'/api/lobbies/{code.lower()}')
    assert res.status_code == 200
    lobby = res.get_json()['lobby']
    assert lobby['code'] == code
    assert lobby['phase'] == 'submission'
    assert lobby['round'] == 1
    assert 'topic' not in lobby
    assert 'faker_id' not in lobby


def test_unknown_lobby_is_404(client):
    res = client.get('/api/lobbies/NOPE')
    assert res.status_code == 404
    assert res.get_json()['error'] == 'LobbyNotFound'


def test_cleanup_removes_idle_lobbies(flask_app, client, registry):
    connection_manager = flask_app.extensions['blend_in']['connection_manager']
    idle = registry.create_lobby('h1')
    busy = registry.create_lobby('h2')
    connection_manager.associate('h1', idle)
    connection_manager.associate('h2', busy)
    registry.join_lobby(busy, 'p1', 'Ada')

    assert client.post('/api/lobbies/cleanup').get_json()['removed'] == 0

    registry.get_lobby(idle).empty_since = datetime.now() - timedelta(hours=2)
    data = client.post('/api/lobbies/cleanup').get_json()
    assert data['removed'] == 1
    assert data['codes'] == [idle]
    assert idle not in registry
    assert busy in registry
    # The host connection no longer points at the reaped lobby
    assert connection_manager.pop_connection('h1') == []
    assert connection_manager.pop_connection('h2') == [busy]
