import json
import os

import pytest

from lobby.errors import PersistenceError


def _read(path):
    with open(path, encoding='utf-8') as fh:
        return json.load(fh)


def test_every_mutation_rewrites_snapshot(client, register, snapshot_path):
    host, h = register('Host')
    snap = _read(snapshot_path)
    assert set(snap) == {'users', 'sessions', 'rooms', 'history'}
    assert [u['username'] for u in snap['users']] == ['Host']
    assert snap['users'][0]['passwordHash'] != 'pw'
    assert list(snap['sessions'].values()) == [h['id']]

    guest, g = register('Guest')
    code = client.post('/api/rooms', json={'maxPlayers': 2}, headers=host).get_json()['room']['id']
    snap = _read(snapshot_path)
    assert snap['rooms'][code]['maxPlayers'] == 2
    assert snap['rooms'][code]['revision'] == 0

    client.post(f'/api/rooms/{code}/join', headers=guest)
    client.post(f'/api/rooms/{code}/start', json={'state': {'deck': [1, 2]}}, headers=host)
    snap = _read(snapshot_path)
    assert snap['rooms'][code]['revision'] == 2
    assert snap['rooms'][code]['started'] is True
    assert snap['rooms'][code]['state'] == {'deck': [1, 2]}

    client.post(f'/api/rooms/{code}/state', json={'state': {'deck': []}, 'reportWinnerId': h['id']}, headers=guest)
    snap = _read(snapshot_path)
    assert snap['rooms'][code]['revision'] == 3
    assert snap['rooms'][code]['started'] is False
    assert len(snap['history']) == 1
    assert snap['history'][0]['winner'] == 'Host'
    stats = {u['username']: u['stats'] for u in snap['users']}
    assert stats['Host']['wins'] == 1
    assert stats['Guest']['vs'] == {'Host': {'wins': 0, 'losses': 1}}


def test_state_survives_restart(make_app, snapshot_path):
    first = make_app()
    client = first.test_client()
    res = client.post('/api/register', json={'username': 'Keep', 'password': 'pw'})
    token = res.get_json()['token']
    headers = {'Authorization': f'Bearer {token}'}
    code = client.post('/api/rooms', json={}, headers=headers).get_json()['room']['id']
    first.extensions['lobby'].store.flush()

    second = make_app()
    client = second.test_client()
    me = client.get('/api/me', headers=headers)
    assert me.status_code == 200
    assert me.get_json()['user']['username'] == 'Keep'
    room = client.get(f'/api/rooms/{code}', headers=headers).get_json()['room']
    assert room['youAreHost'] is True
    assert room['revision'] == 0
    # password verification survives the reload too
    assert client.post('/api/login', json={'username': 'keep', 'password': 'pw'}).status_code == 200
    # revisions continue from the stored value
    other = client.post('/api/register', json={'username': 'Other', 'password': 'pw'}).get_json()['token']
    joined = client.post(f'/api/rooms/{code}/join', headers={'Authorization': f'Bearer {other}'})
    assert joined.get_json()['room']['revision'] == 1


def test_legacy_user_without_stats_gets_defaults(make_app, snapshot_path):
    with open(snapshot_path, 'w', encoding='utf-8') as fh:
        json.dump({
            'users': [{'id': 'u1', 'username': 'Old', 'passwordHash': 'x'}],
            'sessions': {'tok': 'u1'},
            'rooms': {},
            'history': [],
        }, fh)
    client = make_app().test_client()
    res = client.get('/api/me', headers={'Authorization': 'Bearer tok'})
    assert res.status_code == 200
    assert res.get_json()['user']['stats'] == {'wins': 0, 'losses': 0, 'vs': {}}


def test_corrupt_snapshot_fails_startup(make_app, snapshot_path):
    with open(snapshot_path, 'w', encoding='utf-8') as fh:
        fh.write('{"users": [')
    with pytest.raises(PersistenceError):
        make_app()


def test_sink_failure_surfaces_as_server_error(client, register, flask_app, tmp_path):
    host, _ = register('Host')
    guest, _ = register('Guest')
    code = client.post('/api/rooms', json={}, headers=host).get_json()['room']['id']

    sink = flask_app.extensions['lobby'].store.sink
    good_path = sink.path
    sink.path = str(tmp_path / 'missing-dir' / 'db.json')
    res = client.post(f'/api/rooms/{code}/join', headers=guest)
    assert res.status_code == 500
    assert 'cannot write snapshot' in res.get_json()['error']

    # the in-memory mutation is not rolled back
    sink.path = good_path
    room = client.get(f'/api/rooms/{code}', headers=host).get_json()['room']
    assert len(room['players']) == 2
    assert room['revision'] == 1


def test_sql_backend_round_trip(make_app, tmp_path):
    uri = f"sqlite:///{tmp_path / 'lobby.db'}"
    first = make_app(SNAPSHOT_BACKEND='sql', SQLALCHEMY_DATABASE_URI=uri)
    client = first.test_client()
    token = client.post('/api/register', json={'username': 'Sql', 'password': 'pw'}).get_json()['token']
    headers = {'Authorization': f'Bearer {token}'}
    code = client.post('/api/rooms', json={'maxPlayers': 3}, headers=headers).get_json()['room']['id']

    second = make_app(SNAPSHOT_BACKEND='sql', SQLALCHEMY_DATABASE_URI=uri)
    snap = second.extensions['lobby'].store.snapshot()
    assert [u['username'] for u in snap['users']] == ['Sql']
    assert snap['rooms'][code]['maxPlayers'] == 3
    res = second.test_client().get(f'/api/rooms/{code}', headers=headers)
    assert res.status_code == 200


def test_unknown_backend_rejected(make_app):
    with pytest.raises(ValueError):
        make_app(SNAPSHOT_BACKEND='redis')


def test_store_reset_command(flask_app, register, snapshot_path):
    register('Gone')
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['store-reset', '--seed'])
    assert result.exit_code == 0
    assert 'seeded' in result.output
    snap = _read(snapshot_path)
    assert sorted(u['username'] for u in snap['users']) == ['testuser1', 'testuser2', 'testuser3']
    assert snap['rooms'] == {}

    result = runner.invoke(args=['store-summary'])
    assert result.exit_code == 0
    assert 'users:   3' in result.output
    assert 'matches: 0' in result.output


def test_no_temp_files_left_behind(client, register, snapshot_path):
    register('Tidy')
    leftovers = [name for name in os.listdir(os.path.dirname(snapshot_path)) if name.startswith('.snapshot-')]
    assert leftovers == []


def test_store_summary_counts_active_rooms(flask_app, lifecycle, new_user):
    host, guest = new_user('host'), new_user('guest')
    code = lifecycle.create_room(host, 2)['id']
    lifecycle.create_room(guest, 2)
    lifecycle.join(code, guest)
    lifecycle.start(code, host, {})

    result = flask_app.test_cli_runner().invoke(args=['store-summary'])
    assert result.exit_code == 0
    assert 'rooms:   2 (1 active)' in result.output
