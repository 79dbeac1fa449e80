import json


def _create_room_over_socket(sio_client, user_id='U1'):
    sio_client.send(json.dumps({'type': 'CREATE_ROOM', 'payload': {'userId': user_id}}), namespace='/ws')
    received = sio_client.get_received('/ws')
    created = json.loads(received[-1]['args'])
    return created['payload']['roomId']


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_health_counts_rooms_and_connections(client, sio_client):
    _create_room_over_socket(sio_client)
    data = client.get('/health').get_json()
    assert data['status'] == 'ok'
    assert data['rooms'] == 1
    assert data['connections'] == 1


def test_room_state(client, sio_client):
    code = _create_room_over_socket(sio_client)
    res = client.get(f'/api/rooms/{code.lower()}')
    assert res.status_code == 200
    room = res.get_json()
    assert room['id'] == code
    assert room['state'] == 'lobby'
    assert room['players'] == [{'id': 'U1', 'displayName': 'Guest_U1', 'isReady': False}]


def test_room_state_not_found(client):
    res = client.get('/api/rooms/ZZZZZZ')
    assert res.status_code == 404
    assert res.get_json() == {'error': 'Room not found'}


def test_list_rooms(client, sio_client):
    assert client.get('/api/rooms').get_json() == []
    code = _create_room_over_socket(sio_client)
    assert client.get('/api/rooms').get_json() == [
        {'id': code, 'state': 'lobby', 'playerCount': 1, 'connected': 1}
    ]
