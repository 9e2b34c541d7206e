"""Registration Model - tournament entries submitted through the public form.

Rows are only ever inserted after passing the registration validator, read
by the admin dashboard newest first, and removed by the dashboard's bulk
delete. There is no per-row update or delete.

Columns:
    id: Opaque identifier assigned on insert (UUID string)
    created_at: Insert timestamp (UTC), used for dashboard ordering
    group_code: One of the DEV/ID group codes
    full_name: Trimmed participant name
    phone: Normalized Moroccan phone (digits, optional leading '+')
    email: Normalized school email (13 digits @ofppt-edu.ma)
"""

import uuid
from datetime import datetime

import pytz

from ..extensions import db


def _new_registration_id():
    return str(uuid.uuid4())


def _utcnow():
    return datetime.now(pytz.UTC)


class Registration(db.Model):
    __tablename__ = 'registrations'

    id = db.Column(db.String(36), primary_key=True, default=_new_registration_id)
    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False, index=True)

    group_code = db.Column(db.String(20), nullable=False)
    full_name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(20), nullable=False)
    email = db.Column(db.String(255), nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'group_code': self.group_code,
            'full_name': self.full_name,
            'phone': self.phone,
            'email': self.email,
        }

    def __repr__(self):
        return f'<Registration {self.id} {self.group_code}>'
