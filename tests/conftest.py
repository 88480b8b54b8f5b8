import pytest
from flask_jwt_extended import create_access_token

from complaintdesk import create_app
from complaintdesk.models import User, UserRole
from extensions import db


@pytest.fixture
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Create an account and return its id"""
    def _make(name, email, door_number=None, role=UserRole.USER, password='secret123'):
        with app.app_context():
            user = User(
                name=name,
                email=email,
                password=password,
                door_number=door_number,
                role=role,
            )
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make


@pytest.fixture
def auth(app):
    """Authorization headers for a user id"""
    def _headers(user_id):
        with app.app_context():
            token = create_access_token(identity=str(user_id))
        return {'Authorization': f'Bearer {token}'}
    return _headers


@pytest.fixture
def resident(make_user):
    return make_user('Sindhu', 'sindhu@example.com', door_number='A101')


@pytest.fixture
def neighbour(make_user):
    return make_user('Uma', 'uma@example.com', door_number='B202')


@pytest.fixture
def admin(make_user):
    return make_user('Admin', 'admin@example.com', role=UserRole.ADMIN)


@pytest.fixture
def file_complaint(client, auth):
    """File a complaint over HTTP as ``user_id`` and return its JSON"""
    def _file(user_id, **overrides):
        body = {
            'title': 'Leaky faucet',
            'description': 'Kitchen tap drips all night',
            'category': 'Plumbing',
            'priority': 'medium',
        }
        body.update(overrides)
        response = client.post('/api/complaints', json=body, headers=auth(user_id))
        assert response.status_code == 201, response.get_json()
        return response.get_json()['complaint']
    return _file


@pytest.fixture
def set_status(client, auth, admin):
    """Admin status update helper returning the raw response"""
    def _set(complaint_id, **body):
        return client.put(f'/api/admin/complaints/{complaint_id}', json=body, headers=auth(admin))
    return _set


@pytest.fixture
def foreign_keys(app):
    """Enforce foreign keys on the shared in-memory SQLite connection"""
    with app.app_context():
        with db.engine.connect() as conn:
            conn.exec_driver_sql('PRAGMA foreign_keys=ON')
    yield
    with app.app_context():
        with db.engine.connect() as conn:
            conn.exec_driver_sql('PRAGMA foreign_keys=OFF')
