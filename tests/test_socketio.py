import conftest
from app import create_app


def drain(sio_client):
    """Received (event, payload) pairs since the last drain."""
    return [(pkt['name'], pkt['args'][0] if pkt['args'] else None) for pkt in sio_client.get_received()]


def payloads(events, name):
    return [payload for event, payload in events if event == name]


def create_lobby(sio_factory):
    host = sio_factory()
    host.emit('create_lobby')
    created = payloads(drain(host), 'lobby_created')
    assert len(created) == 1
    return host, created[0]['code'], created[0]['host_id']


def join(sio_factory, code, name):
    player = sio_factory()
    player.emit('join_lobby', {'code': code, 'name': name})
    joined = payloads(drain(player), 'joined_lobby')
    assert len(joined) == 1
    return player, joined[0]['player']['id']


def test_create_and_join(sio_factory, registry):
    host, code, host_id = create_lobby(sio_factory)
    assert code in registry
    assert registry.get_lobby(code).host_id == host_id

    player, player_id = join(sio_factory, code.lower(), '  Ada ')
    updates = payloads(drain(host), 'lobby_update')
    assert updates[-1]['players'] == [{'id': player_id, 'name': 'Ada', 'score': 0}]
    assert updates[-1]['phase'] == 'waiting'


def test_full_round_over_socketio(sio_factory, registry):
    host, code, _ = create_lobby(sio_factory)
    clients = {}
    for name in ('Ada', 'Bob', 'Cy'):
        sio_client, player_id = join(sio_factory, code, name)
        clients[player_id] = sio_client
    drain(host)

    host.emit('start_round', {'code': code, 'topic': 'Pizza'})
    roles = {}
    turn_order = None
    for player_id, sio_client in clients.items():
        events = drain(sio_client)
        role = payloads(events, 'role_assignment')[0]
        roles[player_id] = role
        turn_order = payloads(events, 'round_started')[0]['turn_order']
    fakers = [pid for pid, role in roles.items() if role['role'] == 'faker']
    assert len(fakers) == 1
    faker_id = fakers[0]
    assert roles[faker_id]['topic'] is None
    assert 'Pizza' not in roles[faker_id]['decoys']
    assert all(role['topic'] == 'Pizza' for pid, role in roles.items() if pid != faker_id)
    assert turn_order == list(clients)

    for player_id in turn_order:
        clients[player_id].emit('submit_word', {'code': code, 'word': f'clue {player_id[:4]}'})

    host_events = drain(host)
    assert len(payloads(host_events, 'word_submitted')) == 3
    assert payloads(host_events, 'discussion_start')[0]['duration_remaining'] == 3
    assert [p['time_left'] for p in payloads(host_events, 'discussion_tick')] == [2, 1, 0]
    assert len(payloads(host_events, 'start_voting')) == 1
    assert registry.get_lobby(code).phase.value == 'voting'

    others = [pid for pid in clients if pid != faker_id]
    for voter in others:
        clients[voter].emit('submit_vote', {'code': code, 'target_id': faker_id})
    clients[faker_id].emit('submit_vote', {'code': code, 'target_id': others[0]})

    results = payloads(drain(host), 'round_results')
    assert len(results) == 1
    assert results[0]['caught'] is True
    assert results[0]['faker_id'] == faker_id
    assert results[0]['topic'] == 'Pizza'
    assert results[0]['scores'] == {pid: (0 if pid == faker_id else 2) for pid in clients}

    host.emit('next_round', {'code': code})
    started = payloads(drain(host), 'round_started')
    assert started[0]['round'] == 2


def test_errors_go_to_originator_only(sio_factory):
    host, code, _ = create_lobby(sio_factory)
    ada, ada_id = join(sio_factory, code, 'Ada')
    bob, bob_id = join(sio_factory, code, 'Bob')
    host.emit('start_round', {'code': code})
    drain(host)
    drain(ada)
    drain(bob)
    bob.emit('submit_word', {'code': code, 'word': 'early'})
    errors = payloads(drain(bob), 'error')
    assert [e['kind'] for e in errors] == ['NotYourTurn']
    assert payloads(drain(ada), 'error') == []

    ada.emit('submit_vote', {'code': code, 'target_id': bob_id})
    assert [e['kind'] for e in payloads(drain(ada), 'error')] == ['WrongPhase']


def test_non_host_start_is_rejected(sio_factory, registry):
    host, code, _ = create_lobby(sio_factory)
    ada, _ = join(sio_factory, code, 'Ada')
    ada.emit('start_round', {'code': code})
    errors = payloads(drain(ada), 'error')
    assert [e['kind'] for e in errors] == ['NotHost']
    assert registry.get_lobby(code).round_number == 0


def test_unknown_lobby_reports_error(sio_factory):
    player = sio_factory()
    player.emit('join_lobby', {'code': 'NOPE', 'name': 'Ada'})
    errors = payloads(drain(player), 'error')
    assert [e['kind'] for e in errors] == ['LobbyNotFound']


def test_malformed_payload_is_dropped(sio_factory, registry):
    host, code, _ = create_lobby(sio_factory)
    player = sio_factory()
    player.emit('join_lobby', {'code': code})
    player.emit('join_lobby', 'not a dict')
    player.emit('submit_word', {'code': code})
    assert drain(player) == []
    assert registry.get_lobby(code).players == []


def test_host_disconnect_closes_lobby(sio_factory, registry):
    host, code, _ = create_lobby(sio_factory)
    ada, _ = join(sio_factory, code, 'Ada')
    bob, _ = join(sio_factory, code, 'Bob')
    host.emit('start_round', {'code': code})
    drain(ada)

    host.disconnect()
    closed = payloads(drain(ada), 'lobby_closed')
    assert closed == [{'code': code, 'reason': 'host_left'}]
    assert code not in registry

    bob.emit('submit_word', {'code': code, 'word': 'late'})
    assert [e['kind'] for e in payloads(drain(bob), 'error')] == ['LobbyNotFound']


def test_player_leave_updates_roster(sio_factory, registry):
    host, code, _ = create_lobby(sio_factory)
    ada, ada_id = join(sio_factory, code, 'Ada')
    bob, bob_id = join(sio_factory, code, 'Bob')
    drain(host)

    bob.emit('leave_lobby', {'code': code})
    assert payloads(drain(bob), 'left_lobby') == [{'code': code}]
    assert payloads(drain(host), 'lobby_update')[-1]['players'] == [{'id': ada_id, 'name': 'Ada', 'score': 0}]

    ada.disconnect()
    assert payloads(drain(host), 'lobby_update')[-1]['players'] == []
    assert code in registry


def test_stranger_leave_is_rejected(sio_factory, registry):
    host, code, _ = create_lobby(sio_factory)
    ada, ada_id = join(sio_factory, code, 'Ada')
    stranger = sio_factory()

    stranger.emit('leave_lobby', {'code': code})
    events = drain(stranger)
    assert [e['kind'] for e in payloads(events, 'error')] == ['UnknownPlayer']
    assert payloads(events, 'left_lobby') == []
    assert registry.get_lobby(code).player_ids == [ada_id]


class ShortLimitsConfig(conftest.TestConfig):
    MAX_WORD_LENGTH = 5
    MAX_TOPIC_LENGTH = 6


def test_word_and_topic_limits_follow_config():
    application, socketio = create_app(ShortLimitsConfig, scheduler=conftest.InlineScheduler())
    assert application.extensions['blend_in']['rules'].max_word_length == 5
    host = socketio.test_client(application)
    ada = socketio.test_client(application)
    bob = socketio.test_client(application)
    try:
        host.emit('create_lobby')
        code = payloads(drain(host), 'lobby_created')[0]['code']
        ada.emit('join_lobby', {'code': code, 'name': 'Ada'})
        bob.emit('join_lobby', {'code': code, 'name': 'Bob'})
        drain(host)

        host.emit('start_round', {'code': code, 'topic': 'Haunted House'})
        roles = payloads(drain(ada), 'role_assignment') + payloads(drain(bob), 'role_assignment')
        assert [r['topic'] for r in roles if r['role'] == 'truth'] == ['Haunte']

        ada.emit('submit_word', {'code': code, 'word': 'spaghetti'})
        assert payloads(drain(host), 'word_submitted')[0]['word'] == 'spagh'
    finally:
        for sio_client in (host, ada, bob):
            sio_client.disconnect()
