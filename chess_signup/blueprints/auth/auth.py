"""
Authentication Blueprint

Admin sign-in, sign-up and sign-out. Every page here honours a 'redirect'
query parameter naming where to go once a session exists (default /admin).

Routes:
    login():  /auth/login   GET form, POST credentials
    signup(): /auth/signup  GET form, POST new account
    logout(): /auth/logout  POST, ends the session
"""

import logging

from flask import Blueprint, render_template, request, redirect, url_for, flash

from chess_signup.extensions import auth
from chess_signup.forms import AdminLoginForm, AdminSignupForm, first_form_error
from chess_signup.utils.access_gate import AdminAccessGate
from chess_signup.utils.auth_helpers import safe_redirect_target
from chess_signup.utils.auth_service import AuthError
from chess_signup.utils.registration_store import registration_store

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, template_folder='templates')


def _redirect_target():
    return safe_redirect_target(request.args.get('redirect'))


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    """
    Handle admin sign-in.

    GET: Display the sign-in form, or go straight to the redirect target when
         a session already exists
    POST: Validate the form and sign in; the session-change notification moves
          the gate out of the anonymous state and the user is sent on

    Returns:
        Rendered sign-in template, or a redirect to the target location
    """
    redirect_to = _redirect_target()
    form = AdminLoginForm()

    with AdminAccessGate(auth, registration_store) as gate:
        if gate.is_authenticated:
            return redirect(redirect_to)

        if request.method == 'POST':
            if not form.validate_on_submit():
                logger.info("Sign-in form rejected")
                flash(first_form_error(form) or 'Invalid form submission', 'error')
                return render_template('auth/login.html', form=form, redirect_to=redirect_to), 400

            if gate.sign_in(form.email.data, form.password.data):
                flash("Welcome back, you are signed in.", 'success')
                return redirect(redirect_to)

            flash(f"Sign-in failed: {gate.error}", 'error')
            return render_template('auth/login.html', form=form, redirect_to=redirect_to), 401

    return render_template('auth/login.html', form=form, redirect_to=redirect_to)


@auth_bp.route('/signup', methods=['GET', 'POST'])
def signup():
    """
    Create an admin-area account and send it to the redirect target.

    New accounts carry no role; an existing admin has to grant one before the
    dashboard shows any data.
    """
    redirect_to = _redirect_target()
    form = AdminSignupForm()

    if request.method == 'POST':
        if not form.validate_on_submit():
            flash(first_form_error(form) or 'Invalid form submission', 'error')
            return render_template('auth/signup.html', form=form, redirect_to=redirect_to), 400

        try:
            _, target = auth.sign_up(form.email.data, form.password.data, redirect_to=redirect_to)
        except AuthError as e:
            flash(str(e), 'error')
            return render_template('auth/signup.html', form=form, redirect_to=redirect_to), 409

        flash("Account created. You are signed in.", 'success')
        return redirect(target)

    return render_template('auth/signup.html', form=form, redirect_to=redirect_to)


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """
    End the current session and return to the sign-in page.

    Returns:
        redirect: Redirect response to the sign-in page
    """
    auth.sign_out()
    flash("You have been signed out.", 'info')
    return redirect(url_for('auth.login'))
