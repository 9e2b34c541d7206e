"""Admin Access Gate - decides what an admin page may show and do.

States:
    ANONYMOUS               no session; the page redirects to sign-in
    AUTHENTICATING          credentials submitted, waiting for the answer
    AUTHENTICATED_NO_ROLE   signed in, no admin role (access-denied message)
    AUTHENTICATED_ADMIN     signed in with an admin role row
    ERROR                   the session or role lookup itself failed

Lifecycle:
    gate = AdminAccessGate(auth, registration_store)
    with gate:                      # mount(): subscribe, then check session
        if gate.requires_sign_in:
            return redirect_to_login(...)
        gate.load_registrations()   # only does anything for admins
        ...
    # teardown(): subscription released, late notifications ignored

The session-change subscription is always registered before the initial
session check, so a change that lands while the check runs is still applied.
Registrations can only be fetched or bulk-deleted from AUTHENTICATED_ADMIN.
Store failures are recorded on ``gate.error`` instead of being raised.
"""

import enum
import logging
from typing import List, Optional

from .auth_service import AuthError
from .registration_filter import CATEGORY_ALL, filter_registrations
from .registration_store import PersistenceError

logger = logging.getLogger(__name__)

ADMIN_ROLE = 'admin'


class AuthorizationError(Exception):
    """Signed in, but without the admin role."""


class GateState(enum.Enum):
    ANONYMOUS = 'anonymous'
    AUTHENTICATING = 'authenticating'
    AUTHENTICATED_NO_ROLE = 'authenticated_no_role'
    AUTHENTICATED_ADMIN = 'authenticated_admin'
    ERROR = 'error'


class AdminAccessGate:
    """Session and role driven access control for one admin view."""

    def __init__(self, auth, store):
        self._auth = auth
        self._store = store
        self._unsubscribe = None
        self._torn_down = False

        self.state = GateState.ANONYMOUS
        self.auth_session = None
        self.error: Optional[str] = None
        self.registrations: List = []
        self.fetch_count = 0

    def __enter__(self):
        self.mount()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.teardown()
        return False

    @property
    def requires_sign_in(self) -> bool:
        return self.state == GateState.ANONYMOUS

    @property
    def is_authenticated(self) -> bool:
        return self.state in (GateState.AUTHENTICATED_NO_ROLE, GateState.AUTHENTICATED_ADMIN)

    @property
    def is_admin(self) -> bool:
        return self.state == GateState.AUTHENTICATED_ADMIN

    @property
    def access_denied(self) -> bool:
        return self.state == GateState.AUTHENTICATED_NO_ROLE

    def mount(self):
        if self._unsubscribe is None:
            self._unsubscribe = self._auth.subscribe(self._on_session_change)

        try:
            auth_session = self._auth.get_session()
        except Exception as e:
            logger.error(f"Session check failed: {e}")
            self._set_error('Could not check your session. Please try again.')
            return self
        self._apply_session(auth_session)
        return self

    def teardown(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._torn_down = True

    def sign_in(self, email, password) -> bool:
        """Submit credentials; True when a session was established."""
        if self._torn_down:
            return False

        self.state = GateState.AUTHENTICATING
        self.error = None
        try:
            auth_session = self._auth.sign_in_with_password(email, password)
        except AuthError as e:
            self.state = GateState.ANONYMOUS
            self.auth_session = None
            self.error = str(e)
            return False

        # The session-change notification may already have resolved the role
        if self.state == GateState.AUTHENTICATING:
            self._apply_session(auth_session)
        return self.is_authenticated

    def _on_session_change(self, event, auth_session):
        if self._torn_down:
            return
        logger.debug(f"Session change: {event}")
        self._apply_session(auth_session)

    def _apply_session(self, auth_session):
        if self._torn_down:
            return

        if auth_session is None:
            self.state = GateState.ANONYMOUS
            self.auth_session = None
            self._forget_registrations()
            return

        already_resolved = (
            self.is_authenticated
            and self.auth_session is not None
            and self.auth_session.user_id == auth_session.user_id
        )
        self.auth_session = auth_session
        if already_resolved:
            return

        self._forget_registrations()
        self.state = GateState.AUTHENTICATED_NO_ROLE
        self._check_role()

    def _check_role(self):
        try:
            is_admin = self._auth.has_role(self.auth_session.user_id, ADMIN_ROLE)
        except Exception as e:
            logger.error(f"Role lookup failed for user {self.auth_session.user_id}: {e}")
            self._set_error('Could not verify your permissions. Please try again.')
            return

        if self._torn_down:
            return
        if is_admin:
            self.state = GateState.AUTHENTICATED_ADMIN
        else:
            logger.info(f"User {self.auth_session.user_id} denied admin access")
            self.state = GateState.AUTHENTICATED_NO_ROLE

    def _forget_registrations(self):
        # Rows loaded for an admin never outlive that admin state
        self.registrations = []
        self.fetch_count = 0

    def _set_error(self, message):
        if self._torn_down:
            return
        self._forget_registrations()
        self.state = GateState.ERROR
        self.error = message

    def _require_admin(self):
        if not self.is_admin:
            raise AuthorizationError('Admin access required')

    def load_registrations(self) -> List:
        """Fetch registrations once per view; no-op unless admin."""
        if not self.is_admin or self.fetch_count:
            return self.registrations

        self.fetch_count += 1
        try:
            registrations = list(self._store.fetch_all())
        except PersistenceError as e:
            self.error = e.message
            return self.registrations

        if not self._torn_down:
            self.registrations = registrations
        return self.registrations

    def delete_all(self, confirmed: bool) -> bool:
        """Bulk-delete every registration.

        Requires the admin state and an explicit confirmation. On success the
        in-memory list is emptied without re-fetching; on failure it is left
        untouched and the message is stored on ``error``.
        """
        self._require_admin()

        if not confirmed:
            self.error = 'Please confirm that you want to delete every registration.'
            return False

        try:
            deleted = self._store.delete_all()
        except PersistenceError as e:
            self.error = e.message
            return False

        logger.warning(f"User {self.auth_session.user_id} deleted {deleted} registrations")
        if not self._torn_down:
            self.registrations = []
        return True

    def visible_registrations(self, query: str = '', category: str = CATEGORY_ALL) -> List:
        return filter_registrations(self.registrations, query, category)
