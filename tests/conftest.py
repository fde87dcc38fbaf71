import io

import pytest

from app import create_app
from models import db
from utils.data_initializer import seed_categories
from utils.user_service import UserService

ADMIN_CREDENTIALS = {'usernameOrEmail': 'admin', 'password': 'admin123'}


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'SECRET_KEY': 'test-secret-key',
        'SEED_SAMPLE_DATA': False,
        'MAIL_SUPPRESS_SEND': True,
    })
    with app.app_context():
        db.create_all()
        seed_categories()
        UserService.ensure_default_admin()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


def auth_header(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def admin_token(client):
    response = client.post('/api/auth/login', json=ADMIN_CREDENTIALS)
    assert response.status_code == 200
    return response.get_json()['token']


@pytest.fixture
def admin_headers(admin_token):
    return auth_header(admin_token)


@pytest.fixture
def user_token(client):
    response = client.post('/api/users/signup', json={
        'fullName': 'Jane Doe',
        'email': 'jane@example.com',
        'password': 'secret123',
    })
    assert response.status_code == 201
    return response.get_json()['token']


@pytest.fixture
def user_headers(user_token):
    return auth_header(user_token)


def upload(client, headers, content, filename):
    if isinstance(content, str):
        content = content.encode('utf-8')
    return client.post(
        '/admin/upload-ideas',
        headers=headers,
        data={'file': (io.BytesIO(content), filename)},
        content_type='multipart/form-data',
    )


def idea_payload(**overrides):
    payload = {
        'title': 'Mobile Coffee Cart',
        'description': 'Serve specialty coffee at office parks',
        'category': 'Food & Beverage',
        'sector': 'Food Truck',
        'investmentNeeded': 40000,
        'difficultyLevel': 'Easy',
        'location': 'Urban',
        'timeToMarket': '1-3 months',
        'targetAudience': ['Youth', 'Urban'],
        'specialAdvantages': ['Low rent'],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_idea(client, admin_headers):
    def _create(**overrides):
        response = client.post('/api/ideas', json=idea_payload(**overrides), headers=admin_headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()['idea']
    return _create
