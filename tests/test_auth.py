# tests/test_auth.py
from smartbrain.repositories.login_history_repository import LoginHistoryRepository
from smartbrain.repositories.user_repository import UserRepository


def register(client, name='Test User', email='test@example.com', password='testpass'):
    return client.post('/api/register', json={'name': name, 'email': email, 'password': password})


def test_register(client):
    response = register(client)
    assert response.status_code == 201
    assert response.json['email'] == 'test@example.com'
    assert response.json['entries'] == 0
    assert response.json['isAuthorized'] is False
    assert 'password_hash' not in response.json
    assert 'passwordHash' not in response.json


def test_register_duplicate_email(client):
    register(client)
    response = register(client, name='Someone Else')
    assert response.status_code == 400
    assert response.json['error'] == 'User with this email already exists'


def test_register_invalid_email(client):
    response = register(client, email='not-an-email')
    assert response.status_code == 400
    assert response.json['field'] == 'email'


def test_register_short_password(client):
    response = register(client, password='abc')
    assert response.status_code == 400
    assert response.json['field'] == 'password'


def test_register_missing_fields(client):
    response = client.post('/api/register', json={'email': 'test@example.com'})
    assert response.status_code == 400
    assert response.json['error'] == 'Missing required fields'


def test_login(client):
    register(client)

    response = client.post('/api/login', json={'email': 'test@example.com', 'password': 'testpass'})
    assert response.status_code == 200
    assert 'accessToken' in response.json
    assert response.json['name'] == 'Test User'

    user = UserRepository().get_user_by_email('test@example.com')
    history = LoginHistoryRepository().list_for_user(user.id)
    assert [attempt.success for attempt in history] == [True]
    assert history[0].ip_address == '127.0.0.1'


def test_login_wrong_password_is_recorded(client):
    register(client)

    response = client.post('/api/login', json={'email': 'test@example.com', 'password': 'wrongpass'})
    assert response.status_code == 401
    assert response.json['error'] == 'Invalid email or password'

    user = UserRepository().get_user_by_email('test@example.com')
    history = LoginHistoryRepository().list_for_user(user.id)
    assert [attempt.success for attempt in history] == [False]


def test_login_unknown_email(client):
    response = client.post('/api/login', json={'email': 'nobody@example.com', 'password': 'testpass'})
    assert response.status_code == 401


def test_current_user(client):
    register(client)
    login_response = client.post('/api/login', json={'email': 'test@example.com', 'password': 'testpass'})
    token = login_response.json['accessToken']

    response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
    assert response.status_code == 200
    assert response.json['email'] == 'test@example.com'
    assert response.json['name'] == 'Test User'


def test_current_user_requires_token(client):
    response = client.get('/api/auth/me')
    assert response.status_code == 401
