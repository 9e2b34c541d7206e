"""Registration Store - the three operations the app performs on ``registrations``.

    insert        insert one validated record
    fetch_all     select every row, newest first
    delete_all    delete every row created after the epoch sentinel

Each operation is a single independent statement with its own commit. Any
SQLAlchemy failure is rolled back and re-raised as ``PersistenceError`` so the
calling view can surface it as a flash message.
"""

import logging
from datetime import datetime

import pytz
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models.registrations import Registration

logger = logging.getLogger(__name__)

# Every real row is newer than this, so "created_at > sentinel" deletes all rows
EPOCH_SENTINEL = datetime(1970, 1, 1, tzinfo=pytz.UTC)


class PersistenceError(Exception):
    """An insert, select or delete against the store failed."""

    def __init__(self, operation, message):
        super().__init__(message)
        self.operation = operation
        self.message = message


class RegistrationStore:
    """Thin wrapper over the ``registrations`` table.

    The access gate receives one of these so tests can hand it a fake.
    """

    def insert(self, record) -> Registration:
        registration = Registration(
            group_code=record.group_code,
            full_name=record.full_name,
            phone=record.phone,
            email=record.email,
        )
        try:
            db.session.add(registration)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error inserting registration: {e}")
            raise PersistenceError('insert', 'Could not save your registration.') from e

        logger.info(f"Registration {registration.id} saved for group {registration.group_code}")
        return registration

    def fetch_all(self):
        try:
            return (
                Registration.query
                .order_by(Registration.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error fetching registrations: {e}")
            raise PersistenceError('select', 'Could not load registrations.') from e

    def delete_all(self) -> int:
        try:
            deleted = (
                Registration.query
                .filter(Registration.created_at > EPOCH_SENTINEL)
                .delete(synchronize_session=False)
            )
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error deleting registrations: {e}")
            raise PersistenceError('delete', 'Could not delete registrations.') from e

        logger.warning(f"Bulk delete removed {deleted} registrations")
        return deleted


registration_store = RegistrationStore()
