"""Authentication Models - admin accounts and their role assignments.

Key Models:
    User: An account that can sign in to the admin area
    User_Roles: Role rows keyed by user; an 'admin' row grants dashboard access

Roles are deliberately kept out of the session: the access gate looks them up
on demand, so revoking a role takes effect on the next page load.
"""

from datetime import datetime

import pytz

from ..extensions import db

ROLE_ADMIN = 'admin'


def _utcnow():
    return datetime.now(pytz.UTC)


class User(db.Model):
    """Account used for the admin sign-in.

    Columns:
        id: Primary key
        email: Unique sign-in email (stored trimmed and lowercase)
        password: Hashed password (werkzeug.security)
        created_at: Account creation time (UTC)
    """
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password = db.Column(db.String(500), nullable=False)
    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False)

    roles = db.relationship('User_Roles', backref='user', lazy=True, cascade='all, delete-orphan')

    def __repr__(self):
        return f'<User {self.email}>'


class User_Roles(db.Model):
    __tablename__ = 'user_roles'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    role = db.Column(db.String(20), nullable=False)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'role', name='uq_user_roles_user_role'),
    )
