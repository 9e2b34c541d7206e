from flask_sqlalchemy import SQLAlchemy
from flask_wtf.csrf import CSRFProtect

from .utils.auth_service import AuthService

db = SQLAlchemy()
csrf = CSRFProtect()
auth = AuthService()  # Sign-in, sign-up, sign-out and session-change notifications
