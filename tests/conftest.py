"""
Pytest configuration for the chess-signup application.

Provides fixtures for:
- An application wired to an in-memory SQLite database
- A test client with CSRF disabled
- Admin and non-admin accounts
"""

import pytest
from werkzeug.security import generate_password_hash

from chess_signup import create_app
from chess_signup.extensions import db
from chess_signup.models.auth import User, User_Roles, ROLE_ADMIN

PASSWORD = 'correct-horse'


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'WTF_CSRF_ENABLED': False,
        'SECRET_KEY': 'test-secret',
    })

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def create_user(app, email, admin=False):
    with app.app_context():
        user = User(email=email, password=generate_password_hash(PASSWORD))
        db.session.add(user)
        db.session.commit()
        if admin:
            db.session.add(User_Roles(user_id=user.id, role=ROLE_ADMIN))
            db.session.commit()
        return {'id': user.id, 'email': email, 'password': PASSWORD}


@pytest.fixture
def admin_user(app):
    return create_user(app, 'organizer@chessclub.ma', admin=True)


@pytest.fixture
def plain_user(app):
    return create_user(app, 'player@chessclub.ma')


def sign_in(client, user):
    return client.post('/auth/login', data={
        'email': user['email'],
        'password': user['password'],
    })
