from datetime import datetime, timedelta

import pytest

from models import db, User, AdminSession
from utils.error_handling import Conflict, Forbidden, Unauthorized, ValidationError
from utils.security import create_access_token, decode_access_token
from utils.user_service import UserService
from tests.conftest import ADMIN_CREDENTIALS, auth_header


def signup(client, **overrides):
    payload = {'fullName': 'Ravi Kumar', 'email': 'ravi@example.com', 'password': 'secret123'}
    payload.update(overrides)
    return client.post('/api/users/signup', json=payload)


def test_signup_issues_user_token(client, app):
    response = signup(client)
    assert response.status_code == 201
    body = response.get_json()
    assert body['tokenType'] == 'Bearer'
    assert body['user']['username'] == 'ravi.kumar'
    assert body['user']['role'] == 'USER'
    assert body['user']['emailVerified'] is False

    with app.app_context():
        claims = decode_access_token(body['token'])
        assert claims['role'] == 'USER'
        assert 'sid' not in claims


def test_signup_rejects_duplicate_email(client):
    signup(client)
    response = signup(client, email='RAVI@example.com', fullName='Other Ravi')
    assert response.status_code == 409


def test_signup_validation(client):
    assert signup(client, password='123').status_code == 400
    assert signup(client, email='nope').status_code == 400


def test_login(client):
    signup(client)
    response = client.post('/api/users/login', json={'email': 'ravi@example.com', 'password': 'secret123'})
    assert response.status_code == 200
    assert response.get_json()['user']['lastLogin'] is not None

    wrong = client.post('/api/users/login', json={'email': 'ravi@example.com', 'password': 'wrong'})
    assert wrong.status_code == 401
    assert wrong.get_json()['message'] == 'Invalid password'

    unknown = client.post('/api/users/login', json={'email': 'ghost@example.com', 'password': 'secret123'})
    assert unknown.status_code == 401


def test_me_requires_token(client, user_headers):
    assert client.get('/api/users/me').status_code == 401
    assert client.get('/api/users/me', headers=auth_header('garbage')).status_code == 401
    assert client.get('/api/users/me', headers=user_headers).get_json()['email'] == 'jane@example.com'


def test_password_reset_token_is_single_use(client, app):
    signup(client)
    assert client.post('/api/users/forgot-password', json={'email': 'ravi@example.com'}).status_code == 200
    assert client.post('/api/users/forgot-password', json={'email': 'ghost@example.com'}).status_code == 200

    with app.app_context():
        token = User.query.filter_by(email='ravi@example.com').one().reset_password_token
    assert token

    payload = {'token': token, 'newPassword': 'brandnew1'}
    assert client.post('/api/users/reset-password', json=payload).status_code == 200
    assert client.post('/api/users/reset-password', json=payload).status_code == 400

    login = client.post('/api/users/login', json={'email': 'ravi@example.com', 'password': 'brandnew1'})
    assert login.status_code == 200


def test_verify_email(client, app):
    signup(client)
    with app.app_context():
        token = User.query.filter_by(email='ravi@example.com').one().verification_token

    assert client.post(f'/api/users/verify-email?token={token}').status_code == 200
    assert client.post(f'/api/users/verify-email?token={token}').status_code == 400

    with app.app_context():
        assert User.query.filter_by(email='ravi@example.com').one().email_verified is True


def test_expired_verification_token(client, app):
    signup(client)
    with app.app_context():
        user = User.query.filter_by(email='ravi@example.com').one()
        user.verification_token_expiry = datetime.utcnow() - timedelta(minutes=1)
        token = user.verification_token
        db.session.commit()

    response = client.post('/api/users/verify-email', json={'token': token})
    assert response.status_code == 400


def test_google_login_creates_account_once(client):
    payload = {'googleId': 'g-123', 'email': 'meera@example.com', 'name': 'Meera Shah'}
    first = client.post('/api/users/google-login', json=payload).get_json()
    second = client.post('/api/users/google-login', json=payload).get_json()
    assert first['user']['id'] == second['user']['id']
    assert first['user']['authProvider'] == 'GOOGLE'
    assert first['user']['emailVerified'] is True


def test_admin_login_returns_session(client, app):
    body = client.post('/api/auth/login', json=ADMIN_CREDENTIALS).get_json()
    assert body['sessionId']
    assert body['expiresAt']

    with app.app_context():
        claims = decode_access_token(body['token'])
        assert claims['sid'] == body['sessionId']
        assert claims['role'] == 'ADMIN'


def test_second_admin_login_invalidates_first(client, app):
    first = client.post('/api/auth/login', json=ADMIN_CREDENTIALS).get_json()
    second = client.post('/api/auth/login', json=ADMIN_CREDENTIALS).get_json()

    with app.app_context():
        assert UserService.validate_admin_session(first['sessionId']) is False
        assert UserService.validate_admin_session(second['sessionId']) is True
        assert AdminSession.query.filter_by(active=True).count() == 1

    assert client.get('/admin/ideas', headers=auth_header(first['token'])).status_code == 401
    assert client.get('/admin/ideas', headers=auth_header(second['token'])).status_code == 200


def test_validate_endpoint(client, admin_token, user_token):
    valid = client.get('/api/auth/validate', headers=auth_header(admin_token)).get_json()
    assert valid['valid'] is True
    assert valid['username'] == 'admin'

    assert client.post('/api/auth/validate', headers=auth_header(user_token)).get_json()['valid'] is False
    assert client.post('/api/auth/validate').get_json()['valid'] is False


def test_logout_closes_admin_session(client, admin_headers):
    assert client.post('/api/auth/logout', headers=admin_headers).status_code == 200
    assert client.get('/admin/ideas', headers=admin_headers).status_code == 401


def test_admin_login_rejects_regular_users(client, user_token):
    response = client.post('/api/auth/login', json={'usernameOrEmail': 'jane@example.com', 'password': 'secret123'})
    assert response.status_code == 403

    bad = client.post('/api/auth/login', json={'usernameOrEmail': 'admin', 'password': 'nope'})
    assert bad.status_code == 401


def test_admin_routes_guarded(client, user_headers, admin_headers):
    assert client.get('/admin/ideas').status_code == 401
    assert client.get('/admin/ideas', headers=user_headers).status_code == 403
    assert client.get('/admin/upload-history', headers=admin_headers).status_code == 200


def test_admin_token_without_session_is_not_admin(client, app):
    with app.app_context():
        admin = User.query.filter_by(username='admin').one()
        token = create_access_token(admin)
    assert client.get('/admin/ideas', headers=auth_header(token)).status_code == 403


def test_public_reads_and_protected_writes(client, user_headers):
    assert client.get('/api/ideas').status_code == 200
    assert client.get('/api/main-categories').status_code == 200
    assert client.get('/health').get_json()['status'] == 'UP'
    assert client.get('/api/dashboard/').status_code == 401
    assert client.get('/api/dashboard/', headers=user_headers).status_code == 200


def test_preflight_passes_guard(client):
    response = client.options('/admin/ideas', headers={
        'Origin': 'http://localhost:3000',
        'Access-Control-Request-Method': 'GET',
    })
    assert response.status_code == 200


class TestUserService:

    def test_base_username(self):
        assert UserService.base_username('Jane Doe') == 'jane.doe'
        assert UserService.base_username('  Émile   Zola ') == 'mile.zola'
        assert UserService.base_username('123 Go') == 'user.123.go'
        assert UserService.base_username('') == 'user'
        assert len(UserService.base_username('a' * 40)) == 20

    def test_generate_username_adds_suffix(self, app_ctx):
        service = UserService()
        service.signup({'fullName': 'Jane Doe', 'email': 'a@example.com', 'password': 'secret123'})
        assert service.generate_username('Jane Doe') == 'jane.doe1'

    def test_signup_conflict(self, app_ctx):
        service = UserService()
        service.signup({'fullName': 'Jane Doe', 'email': 'a@example.com', 'password': 'secret123'})
        with pytest.raises(Conflict):
            service.signup({'fullName': 'Jane Doe', 'email': 'a@example.com', 'password': 'secret123'})

    def test_admin_login_errors(self, app_ctx):
        service = UserService()
        service.signup({'fullName': 'Jane Doe', 'email': 'a@example.com', 'password': 'secret123'})
        with pytest.raises(Forbidden):
            service.admin_login({'usernameOrEmail': 'a@example.com', 'password': 'secret123'})
        with pytest.raises(Unauthorized):
            service.admin_login({'usernameOrEmail': 'admin', 'password': 'wrong'})
        with pytest.raises(ValidationError):
            service.admin_login({'usernameOrEmail': 'admin'})

    def test_ensure_default_admin_is_idempotent(self, app_ctx):
        assert UserService.ensure_default_admin() is None
        assert User.query.filter_by(role='ADMIN').count() == 1

    def test_expired_admin_session(self, app_ctx):
        session = AdminSession(user_id=1, session_id='expired', active=True,
                               expires_at=datetime.utcnow() - timedelta(seconds=1))
        db.session.add(session)
        db.session.commit()
        assert UserService.validate_admin_session('expired') is False
