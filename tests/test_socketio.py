import pytest


def events(client, name):
    return [message['args'][0] for message in client.get_received() if message['name'] == name]


@pytest.fixture()
def presenter(sio_factory):
    client = sio_factory()
    ack = client.emit('session:create', {}, callback=True)
    assert ack['success']
    client.code = ack['session_code']
    return client


def join(sio_factory, code, name):
    client = sio_factory()
    ack = client.emit('participant:join', {'code': code, 'name': name}, callback=True)
    assert ack['success'], ack
    client.identity = ack
    return client


def test_create_session_sends_state_and_catalog(sio_factory):
    client = sio_factory()
    ack = client.emit('session:create', {}, callback=True)

    assert ack['success']
    assert len(ack['session_code']) == 6

    received = client.get_received()
    names = [message['name'] for message in received]
    assert 'session:state' in names
    assert 'catalog:list' in names

    state = next(m['args'][0] for m in received if m['name'] == 'session:state')
    assert state['id'] == ack['session_code']
    assert state['status'] == 'lobby'
    assert state['participants'] == []


def test_participant_join_returns_identity(presenter, sio_factory):
    alice = join(sio_factory, presenter.code.lower(), 'Alice')

    assert alice.identity['is_master'] is True
    assert alice.identity['is_active'] is True
    assert alice.identity['participant_id']
    assert alice.identity['token']

    states = events(presenter, 'session:state')
    assert [p['name'] for p in states[-1]['participants']] == ['Alice']


def test_join_unknown_session_reports_error(sio_factory):
    client = sio_factory()
    ack = client.emit('participant:join', {'code': 'NOPE00', 'name': 'Alice'}, callback=True)

    assert ack == {'success': False, 'error': 'Session not found'}
    assert events(client, 'session:error') == [{'message': 'Session not found'}]


def test_non_master_request_is_ignored_without_error(presenter, sio_factory):
    join(sio_factory, presenter.code, 'Alice')
    bob = join(sio_factory, presenter.code, 'Bob')
    bob.get_received()

    assert bob.emit('game:select', {'game_id': 'buzz-race'}, callback=True)['success'] is False
    assert bob.emit('game:start', callback=True) == {'success': False}
    assert events(bob, 'session:error') == []


def test_start_with_too_few_players_reports_to_master(presenter, sio_factory):
    alice = join(sio_factory, presenter.code, 'Alice')

    assert alice.emit('game:select', {'game_id': 'buzz-race'}, callback=True)['success']
    ack = alice.emit('game:start', callback=True)

    assert ack == {'success': False, 'error': 'Need at least 2 players to start'}
    assert events(alice, 'session:error') == [{'message': 'Need at least 2 players to start'}]


def test_game_runs_over_the_wire(presenter, sio_factory):
    alice = join(sio_factory, presenter.code, 'Alice')
    bob = join(sio_factory, presenter.code, 'Bob')

    alice.emit('game:select', {'game_id': 'buzz-race'}, callback=True)
    assert alice.emit('game:start', callback=True) == {'success': True}

    state = events(presenter, 'session:state')[-1]
    assert state['status'] == 'playing'
    assert state['join_visible'] is False
    assert state['game_state']['phase'] == 'playing'

    assert bob.emit('game:action', {'type': 'buzz'}, callback=True) == {'success': True}
    assert events(presenter, 'session:state')[-1]['game_state']['last_buzz']['participant_id'] == \
        bob.identity['participant_id']

    assert alice.emit('game:end', callback=True) == {'success': True}
    state = events(presenter, 'session:state')[-1]
    assert state['status'] == 'lobby'
    assert state['game_state'] is None


def test_visibility_toggle(presenter, sio_factory):
    alice = join(sio_factory, presenter.code, 'Alice')

    assert alice.emit('visibility:toggle', {}, callback=True) == {'success': True, 'join_visible': False}
    assert events(presenter, 'session:state')[-1]['join_visible'] is False


def test_master_disconnect_promotes_next(presenter, sio_factory):
    alice = join(sio_factory, presenter.code, 'Alice')
    join(sio_factory, presenter.code, 'Bob')

    alice.disconnect()

    participants = events(presenter, 'session:state')[-1]['participants']
    assert [(p['name'], p['connected'], p['is_master']) for p in participants] == [
        ('Alice', False, False),
        ('Bob', True, True)
    ]


def test_rejoin_with_token(presenter, sio_factory):
    alice = join(sio_factory, presenter.code, 'Alice')
    identity = alice.identity
    alice.disconnect()

    again = sio_factory()
    ack = again.emit('participant:join', {
        'code': presenter.code,
        'participant_id': identity['participant_id'],
        'token': identity['token']
    }, callback=True)

    assert ack['success']
    assert ack['participant_id'] == identity['participant_id']
    assert ack['is_master'] is True
    participants = events(presenter, 'session:state')[-1]['participants']
    assert len(participants) == 1 and participants[0]['connected']


def test_second_presenter_supersedes_first(presenter, sio_factory):
    other = sio_factory()
    ack = other.emit('session:join', {'code': presenter.code}, callback=True)

    assert ack == {'success': True, 'session_code': presenter.code}
    assert events(presenter, 'presenter:superseded') == [{'code': presenter.code}]


def test_catalog_list(sio_factory):
    client = sio_factory()
    ack = client.emit('catalog:list', callback=True)

    assert ack['success']
    assert [game['id'] for game in ack['games']] == ['word-category', 'buzz-race', 'ai-drawing', 'group-story']
    assert events(client, 'catalog:list')[0] == ack['games']


def test_visibility_accepts_plain_bool(presenter, sio_factory):
    alice = join(sio_factory, presenter.code, 'Alice')

    assert alice.emit('visibility:toggle', False, callback=True) == {'success': True, 'join_visible': False}
    assert alice.emit('visibility:toggle', False, callback=True) == {'success': True, 'join_visible': False}
    assert events(presenter, 'session:state')[-1]['join_visible'] is False

    assert alice.emit('visibility:toggle', True, callback=True) == {'success': True, 'join_visible': True}
