"""Admin Blueprint - registrations dashboard and bulk delete.

Every route builds an AdminAccessGate for the duration of the request:

    anonymous      -> redirect to /auth/login?redirect=<requested path>
    no admin role  -> access-denied page (403), registrations never fetched
    gate error     -> error page (503)
    admin          -> registrations fetched once, filtered for display

Query Parameters (dashboard):
    q:     free-text search over full name, email and group code
    group: 'all' | 'DEV' | 'ID'
"""

import logging

from flask import Blueprint, render_template, request, flash

from chess_signup.extensions import auth
from chess_signup.utils.access_gate import AdminAccessGate, GateState
from chess_signup.utils.auth_helpers import redirect_to_login
from chess_signup.utils.registration_filter import CATEGORIES, CATEGORY_ALL
from chess_signup.utils.registration_store import registration_store

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__, template_folder='templates')


def _filters():
    query = request.values.get('q', '')
    category = request.values.get('group', CATEGORY_ALL)
    if category not in CATEGORIES:
        category = CATEGORY_ALL
    return query, category


def _render_gate(gate, status=200):
    """Render the dashboard for whatever state the gate ended up in."""
    if gate.state == GateState.ERROR:
        return render_template('admin/error.html', message=gate.error), 503

    if gate.access_denied:
        return render_template('admin/access_denied.html', email=gate.auth_session.email), 403

    query, category = _filters()
    visible = gate.visible_registrations(query, category)

    return render_template(
        'admin/dashboard.html',
        registrations=visible,
        total=len(gate.registrations),
        query=query,
        category=category,
        categories=CATEGORIES,
        email=gate.auth_session.email,
    ), status


@admin_bp.route('/')
def index():
    """Registrations dashboard.

    Returns:
        Dashboard, access-denied or error page, or a redirect to sign-in
    """
    with AdminAccessGate(auth, registration_store) as gate:
        if gate.requires_sign_in:
            return redirect_to_login()

        gate.load_registrations()
        if gate.is_admin and gate.error:
            flash(gate.error, 'error')
        return _render_gate(gate)


@admin_bp.route('/delete_all', methods=['POST'])
def delete_all():
    """Delete every registration after an explicit confirmation.

    Form Fields:
        confirm: must be 'yes'

    On success the dashboard is rendered with an empty list straight away; on
    failure it is rendered with the rows that were loaded before the attempt.
    """
    with AdminAccessGate(auth, registration_store) as gate:
        if gate.requires_sign_in:
            return redirect_to_login(next_url='/admin/')

        if not gate.is_admin:
            logger.warning("Bulk delete refused: account is not an admin")
            return _render_gate(gate)

        gate.load_registrations()
        if gate.error:
            flash(gate.error, 'error')
            return _render_gate(gate, 503)

        confirmed = request.form.get('confirm') == 'yes'
        if gate.delete_all(confirmed):
            flash("All registrations have been deleted.", 'success')
            return _render_gate(gate)

        flash(f"Delete failed: {gate.error}", 'error')
        return _render_gate(gate, 400 if not confirmed else 503)
