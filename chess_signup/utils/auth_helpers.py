"""
Authentication Helper Utilities

Helpers for sending anonymous visitors to the admin sign-in page with a
'redirect' parameter, so they land back on the page they asked for once
signed in.
"""

from flask import redirect, url_for, request, flash

DEFAULT_REDIRECT = '/admin/'


def safe_redirect_target(target, default=DEFAULT_REDIRECT):
    """
    Return ``target`` if it is a local path, otherwise ``default``.

    Only paths starting with a single '/' are accepted; absolute URLs and
    protocol-relative '//host' targets are replaced with the default.
    """
    if not target or not target.startswith('/') or target.startswith('//'):
        return default
    if '\\' in target:
        return default
    return target


def redirect_to_login(message="Please sign in to access the admin dashboard.", next_url=None):
    """
    Redirect to the sign-in page carrying the originally requested location.

    Args:
        message (str): Flash message to display, or None for no message
        next_url (str, optional): Location to return to after signing in.
                                 If None, uses the current request path
                                 (including its query string)

    Returns:
        redirect: Redirect response to the sign-in page
    """
    if message:
        flash(message, "error")

    if next_url is None:
        next_url = request.full_path if request.query_string else request.path

    return redirect(url_for('auth.login', redirect=next_url))
