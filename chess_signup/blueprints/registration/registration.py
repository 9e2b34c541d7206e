"""Registration Blueprint - the public tournament registration form.

Routes:
    index(): GET shows the form, POST validates and stores a registration

Submission flow:
    1. Copy the posted values into a RegistrationFormState
    2. Run the validation pipeline (normalization, then field rules)
    3. On failure: flash the first violated rule and re-render with the
       entered values and per-field messages
    4. On success: insert into the registrations table, flash a confirmation
       and redirect to an empty form
    5. If the insert fails: flash the store message, keep the entered values
"""

import logging

from flask import Blueprint, render_template, request, redirect, url_for, flash

from chess_signup.utils.registration_validator import GROUP_OPTIONS, RegistrationFormState
from chess_signup.utils.registration_store import PersistenceError, registration_store

logger = logging.getLogger(__name__)

registration_bp = Blueprint('registration', __name__, template_folder='templates')


def _render_form(form_state, status=200):
    return render_template(
        'registration/index.html',
        form=form_state,
        group_options=GROUP_OPTIONS,
    ), status


@registration_bp.route('/', methods=['GET', 'POST'])
def index():
    form_state = RegistrationFormState()

    if request.method == 'POST':
        form_state.update(request.form)
        result = form_state.submit()

        if not result.is_valid:
            logger.info(f"Registration rejected on field {result.first_error.field}")
            flash(result.first_error.message, 'error')
            return _render_form(form_state, 400)

        try:
            registration_store.insert(result.record)
        except PersistenceError as e:
            flash(f"Registration failed: {e.message} Please try again or contact the organizer.", 'error')
            return _render_form(form_state, 503)

        flash("Registration submitted. Good luck in the tournament!", 'success')
        return redirect(url_for('registration.index'))

    return _render_form(form_state)
