from complaintdesk.models import User, UserRole
from extensions import db


def register(client, **overrides):
    body = {
        'name': 'Sindhu',
        'email': 'sindhu@example.com',
        'password': 'password123',
        'door_number': 'A101',
    }
    body.update(overrides)
    return client.post('/api/auth/register', json=body)


def test_register_creates_resident(client):
    response = register(client)

    assert response.status_code == 201
    data = response.get_json()
    assert data['user']['role'] == 'user'
    assert data['user']['door_number'] == 'A101'
    assert data['access_token']
    assert 'password' not in data['user']
    assert 'password_hash' not in data['user']


def test_register_requires_door_number(client):
    response = register(client, door_number=None)

    assert response.status_code == 400
    assert response.get_json()['error'] == 'ValidationError'


def test_register_rejects_short_password(client):
    response = register(client, password='12345')

    assert response.status_code == 400
    assert 'at least 6' in response.get_json()['message']


def test_register_rejects_duplicate_email(client):
    register(client)
    response = register(client, door_number='B202')

    assert response.status_code == 409
    assert response.get_json()['error'] == 'Conflict'


def test_register_rejects_duplicate_door_number(client):
    register(client)
    response = register(client, email='uma@example.com')

    assert response.status_code == 409
    assert 'door number' in response.get_json()['message']


def test_register_cannot_request_admin_role(client):
    response = register(client, role='admin')

    assert response.status_code == 400


def test_admin_looking_email_stays_user(client, app):
    response = register(client, email='admin@gmail.com')
    assert response.get_json()['user']['role'] == 'user'

    login = client.post('/api/auth/login', json={'email': 'admin@gmail.com', 'password': 'password123'})
    assert login.get_json()['user']['role'] == 'user'

    with app.app_context():
        assert User.query.filter_by(email='admin@gmail.com').one().role == UserRole.USER


def test_login_and_me(client):
    register(client)

    response = client.post('/api/auth/login', json={'email': 'Sindhu@Example.com', 'password': 'password123'})
    assert response.status_code == 200
    token = response.get_json()['access_token']

    me = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
    assert me.status_code == 200
    assert me.get_json()['user']['email'] == 'sindhu@example.com'


def test_login_with_wrong_password(client):
    register(client)

    response = client.post('/api/auth/login', json={'email': 'sindhu@example.com', 'password': 'nope'})

    assert response.status_code == 401
    assert response.get_json()['error'] == 'Unauthorized'


def test_missing_token_is_unauthorized(client):
    response = client.get('/api/complaints')

    assert response.status_code == 401
    assert response.get_json()['error'] == 'Unauthorized'


def test_token_for_deleted_user_is_rejected(client, app, make_user, auth):
    user_id = make_user('Ghost', 'ghost@example.com', door_number='Z999')
    headers = auth(user_id)
    with app.app_context():
        db.session.delete(db.session.get(User, user_id))
        db.session.commit()

    response = client.get('/api/auth/me', headers=headers)

    assert response.status_code == 401


def test_role_comes_from_store_not_token(client, app, resident, auth):
    headers = auth(resident)

    assert client.get('/api/admin/stats', headers=headers).status_code == 403

    with app.app_context():
        db.session.get(User, resident).role = UserRole.ADMIN
        db.session.commit()

    assert client.get('/api/admin/stats', headers=headers).status_code == 200
