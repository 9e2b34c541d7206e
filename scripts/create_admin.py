#!/usr/bin/env python3
"""
Create an admin account, or grant the admin role to an existing one.

Usage:
  python scripts/create_admin.py --email organizer@example.com --password 'secret-pass'
  python scripts/create_admin.py --email organizer@example.com          # existing account

The password is only used when the account does not exist yet.
"""

import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chess_signup import create_app
from chess_signup.extensions import db
from chess_signup.models.auth import User, User_Roles, ROLE_ADMIN
from werkzeug.security import generate_password_hash


def parse_args():
    p = argparse.ArgumentParser(description="Grant admin access to the registrations dashboard")
    p.add_argument('--email', required=True, help='Account email')
    p.add_argument('--password', help='Password for a new account (8-72 characters)')
    return p.parse_args()


def main():
    args = parse_args()
    email = args.email.strip().lower()

    app = create_app()
    with app.app_context():
        user = User.query.filter_by(email=email).first()
        if not user:
            if not args.password or not 8 <= len(args.password) <= 72:
                print('Account does not exist; pass --password with 8-72 characters to create it.')
                return 1
            user = User(email=email, password=generate_password_hash(args.password))
            db.session.add(user)
            db.session.commit()
            print(f'Account created: {email}')

        if User_Roles.query.filter_by(user_id=user.id, role=ROLE_ADMIN).first():
            print(f'{email} is already an admin')
            return 0

        db.session.add(User_Roles(user_id=user.id, role=ROLE_ADMIN))
        db.session.commit()
        print(f'Admin role granted to {email}')
    return 0


if __name__ == '__main__':
    sys.exit(main())
