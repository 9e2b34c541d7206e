"""Authentication Service - admin sign-in backed by the Flask session cookie.

One ``AuthService`` instance lives in ``chess_signup.extensions`` for the whole
process and is shared by every request. It exposes the operations the admin
pages rely on:

    get_session()                  current AuthSession or None
    subscribe(callback)            session-change notifications, returns an
                                   unsubscribe callable
    sign_in_with_password(...)     verify credentials and start a session
    sign_up(..., redirect_to)      create an account, start a session
    sign_out()                     end the session
    has_role(user_id, role)        role lookup in the user_roles table

Session changes are announced on the ``session_changed`` blinker signal with
one of the events SIGNED_IN, SIGNED_OUT or SESSION_EXPIRED. Subscribers only
hear about changes to their own browser session.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

import pytz
from blinker import Namespace
from flask import has_request_context, session
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

logger = logging.getLogger(__name__)

_signals = Namespace()
session_changed = _signals.signal('session-changed')

SIGNED_IN = 'SIGNED_IN'
SIGNED_OUT = 'SIGNED_OUT'
SESSION_EXPIRED = 'SESSION_EXPIRED'

_SESSION_KEYS = ('user_id', 'auth_token', 'signed_in_at')


class AuthError(Exception):
    """Invalid credentials, duplicate account or missing session."""


@dataclass(frozen=True)
class AuthSession:
    user_id: int
    email: str
    token: str
    signed_in_at: datetime


def _session_owner():
    # The session proxy resolves to one object per request
    if has_request_context():
        return session._get_current_object()
    return None


class AuthService:
    """Process-wide authentication client."""

    def __init__(self, app=None):
        self.session_lifetime = timedelta(hours=8)
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.session_lifetime = app.permanent_session_lifetime
        app.extensions['auth_service'] = self

    def subscribe(self, callback: Callable[[str, Optional[AuthSession]], None]) -> Callable[[], None]:
        """Call ``callback(event, auth_session)`` on every session change.

        Returns a callable that removes the subscription.
        """
        owner = _session_owner()

        def receiver(sender, event, auth_session, owner_session=None):
            if owner_session is owner:
                callback(event, auth_session)

        session_changed.connect(receiver, sender=self, weak=False)

        def unsubscribe():
            session_changed.disconnect(receiver, sender=self)

        return unsubscribe

    def _notify(self, event, auth_session):
        session_changed.send(
            self,
            event=event,
            auth_session=auth_session,
            owner_session=_session_owner(),
        )

    def get_session(self) -> Optional[AuthSession]:
        """Return the signed-in session, clearing it if it has expired or its
        account no longer exists."""
        from ..models.auth import User

        user_id = session.get('user_id')
        if not user_id:
            return None

        signed_in_at = session.get('signed_in_at')
        if signed_in_at is None or self._is_expired(signed_in_at):
            logger.info(f"Session for user {user_id} expired")
            self._clear_session()
            self._notify(SESSION_EXPIRED, None)
            return None

        user = User.query.get(user_id)
        if user is None:
            logger.warning(f"Session references missing user {user_id}, signing out")
            self._clear_session()
            self._notify(SIGNED_OUT, None)
            return None

        return AuthSession(
            user_id=user.id,
            email=user.email,
            token=session.get('auth_token'),
            signed_in_at=datetime.fromtimestamp(signed_in_at, tz=pytz.UTC),
        )

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        from ..models.auth import User

        email = (email or '').strip().lower()
        user = User.query.filter_by(email=email).first()

        if not user or not check_password_hash(user.password, password or ''):
            logger.info(f"Failed sign-in attempt for {email}")
            raise AuthError('Invalid email or password')

        auth_session = self._start_session(user)
        logger.info(f"User {user.id} signed in")
        self._notify(SIGNED_IN, auth_session)
        return auth_session

    def sign_up(self, email: str, password: str, redirect_to: str = '/admin/'):
        """Create an account without any role and sign it in.

        Returns ``(auth_session, redirect_to)``.
        """
        from ..extensions import db
        from ..models.auth import User

        email = (email or '').strip().lower()
        if User.query.filter_by(email=email).first():
            raise AuthError('An account with this email already exists')

        user = User(email=email, password=generate_password_hash(password))
        try:
            db.session.add(user)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error creating account for {email}: {e}")
            raise AuthError('Could not create the account. Please try again.') from e
        logger.info(f"Created account {user.id}")

        auth_session = self._start_session(user)
        self._notify(SIGNED_IN, auth_session)
        return auth_session, redirect_to

    def sign_out(self):
        user_id = session.get('user_id')
        self._clear_session()
        if user_id:
            logger.info(f"User {user_id} signed out")
        self._notify(SIGNED_OUT, None)

    def has_role(self, user_id: int, role: str) -> bool:
        from ..models.auth import User_Roles

        row = User_Roles.query.filter_by(user_id=user_id, role=role).limit(1).first()
        return row is not None

    def _start_session(self, user) -> AuthSession:
        now = datetime.now(pytz.UTC)
        token = secrets.token_urlsafe(32)

        session.clear()
        session.permanent = True
        session['user_id'] = user.id
        session['auth_token'] = token
        session['signed_in_at'] = now.timestamp()

        return AuthSession(user_id=user.id, email=user.email, token=token, signed_in_at=now)

    def _clear_session(self):
        for key in _SESSION_KEYS:
            session.pop(key, None)

    def _is_expired(self, signed_in_at) -> bool:
        started = datetime.fromtimestamp(signed_in_at, tz=pytz.UTC)
        return datetime.now(pytz.UTC) - started > self.session_lifetime
