#!/usr/bin/env python3
"""
Dev Theme Admin - Flask Web Application

Keeps a development copy of the live theme and swaps content between them.
Features:
- Promote dev-theme to the live theme (old live kept as <theme>-bk)
- Capture the live theme into dev-theme (old dev kept as dev-theme-bk)
- Per-user "Dev Theme" switch on the profile page
- Theme assets served from the live or dev directory depending on the user
"""

import os
import sys
import hmac
import secrets
import logging
from flask import Flask, render_template, request, jsonify, redirect, url_for, abort, send_from_directory, session
from werkzeug.exceptions import NotFound

# Add parent directory for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from devtheme.config import Settings
from devtheme.auth import Caller, can_deploy, can_edit_profile, parse_capabilities
from devtheme.errors import ConfigurationError, DeployError
from devtheme.paths import DEV_THEME_NAME, current_slot, theme_paths
from devtheme.preferences import PreferenceStore, CHECKED
from devtheme.resolution import resolve_theme, page_title
from devtheme.swap import SwapEngine, OPERATIONS, PROMOTE, CAPTURE

logger = logging.getLogger(__name__)

app = Flask(__name__)

CSRF_FIELD = 'csrf_token'
CSRF_HEADER = 'X-CSRF-Token'

# Global settings (loaded on startup)
_settings = None


def get_settings():
    """Get application settings."""
    global _settings
    if _settings is None:
        _settings = Settings.get()
    return _settings


def get_preference_store():
    """Preference store backed by the configured database."""
    return PreferenceStore(get_settings()['preferences_database'])


# =============================================================================
# Request Identity
# =============================================================================

def get_current_caller():
    """
    Build the Caller for this request from the proxy-supplied headers.
    Returns None when no valid user id is present.
    """
    settings = get_settings()
    raw_id = request.headers.get(settings['user_header'], '').strip()
    if not raw_id.isdigit():
        return None
    capabilities = parse_capabilities(request.headers.get(settings['roles_header'], ''))
    return Caller(int(raw_id), capabilities)


def current_user_dev_enabled():
    """Whether the requesting user has the dev theme switched on."""
    caller = get_current_caller()
    if caller is None:
        return False
    return get_preference_store().is_dev_enabled(caller.user_id)


def require_deploy_permission():
    """Abort with 403 unless the caller may deploy."""
    caller = get_current_caller()
    if not can_deploy(caller, app.config.get('DEPLOY_EXTRA_CONDITION')):
        logger.warning(f"Deploy access denied for {caller.user_id if caller else 'anonymous'}")
        abort(403)
    return caller


# =============================================================================
# Form Tokens
# =============================================================================

def ensure_secret_key():
    """Sign the session cookie with the configured key, or a per-process one."""
    if app.secret_key:
        return
    key = get_settings().get('secret_key')
    if not key:
        logger.warning("No [Browser] secret_key set; form tokens will not survive a restart")
        key = secrets.token_hex(32)
    app.secret_key = key


def get_csrf_token():
    """Token for this browser session, created on first use."""
    if CSRF_FIELD not in session:
        session[CSRF_FIELD] = secrets.token_urlsafe(32)
    return session[CSRF_FIELD]


@app.before_request
def check_csrf_token():
    """Reject any POST that does not echo the session's form token."""
    ensure_secret_key()
    if request.method != 'POST':
        return

    expected = session.get(CSRF_FIELD, '')
    sent = request.form.get(CSRF_FIELD) or request.headers.get(CSRF_HEADER, '')
    if not expected or not hmac.compare_digest(expected.encode(), sent.encode()):
        logger.warning(f"Rejected POST to {request.path}: missing or wrong form token")
        abort(400)


@app.context_processor
def inject_title_helpers():
    return {
        'page_title': page_title,
        'dev_mode': current_user_dev_enabled(),
        'csrf_token': get_csrf_token,
    }


# =============================================================================
# Status Helpers
# =============================================================================

def directory_status(settings, slot):
    """Existence of every managed directory for the slot."""
    paths = theme_paths(settings['themes_directory'], slot)
    return {
        field: {'path': path, 'exists': os.path.isdir(path)}
        for field, path in paths._asdict().items()
    }


def success_notice(operation, slot_name):
    if operation == PROMOTE:
        return f"Dev Theme deployed successfully to main theme ({DEV_THEME_NAME} -> {slot_name})"
    return f"Main Theme deployed successfully to Dev Theme ({slot_name} -> {DEV_THEME_NAME})"


def failure_notice(operation, detail):
    label = 'dev theme to main theme' if operation == PROMOTE else 'main theme to dev theme'
    return f"Deploying {label} did not complete: {detail}"


def run_operation(operation):
    """Run a swap operation with the current settings. Returns the report."""
    engine = SwapEngine.from_settings(get_settings())
    return engine.run(operation)


# =============================================================================
# Flask Routes
# =============================================================================

@app.route('/')
def index():
    """Options page - deploy buttons and directory status."""
    require_deploy_permission()
    settings = get_settings()

    try:
        slot = current_slot(settings)
    except ConfigurationError as e:
        return render_template('index.html', title='DEV Theme', error=str(e),
                               slot=None, status={}, notices=[]), 500

    notices = []
    action_success = request.args.get('action_success', '')
    action_failed = request.args.get('action_failed', '')
    if action_success in OPERATIONS:
        notices.append(('updated', success_notice(action_success, slot.name)))
    if action_failed in OPERATIONS:
        detail = request.args.get('error') or 'failed steps: ' + request.args.get('failed', 'unknown')
        notices.append(('error', failure_notice(action_failed, detail)))

    return render_template('index.html',
                           title='DEV Theme',
                           slot=slot,
                           status=directory_status(settings, slot),
                           notices=notices,
                           promote=PROMOTE,
                           capture=CAPTURE)


@app.route('/deploy/<operation>', methods=['POST'])
def deploy(operation):
    """Run promote or capture, then redirect back to the options page."""
    if operation not in OPERATIONS:
        abort(404)
    require_deploy_permission()

    try:
        report = run_operation(operation)
    except DeployError as e:
        logger.error(f"{operation} aborted: {e}")
        return redirect(url_for('index', action_failed=operation, error=str(e)))

    if report.ok:
        return redirect(url_for('index', action_success=operation))
    failed = ','.join(s.name for s in report.failed_steps)
    return redirect(url_for('index', action_failed=operation, failed=failed))


@app.route('/profile/<int:user_id>', methods=['GET', 'POST'])
def profile(user_id):
    """Show and update a user's Dev Theme switch."""
    caller = get_current_caller()
    if not can_edit_profile(caller, user_id):
        logger.warning(f"Profile {user_id} access denied for {caller.user_id if caller else 'anonymous'}")
        abort(403)

    store = get_preference_store()
    if request.method == 'POST':
        store.set_dev_enabled(user_id, request.form.get('devtheme_activate', '') == CHECKED)
        return redirect(url_for('profile', user_id=user_id, updated=1))

    return render_template('profile.html',
                           title='Profile',
                           user_id=user_id,
                           activate=store.is_dev_enabled(user_id),
                           updated=bool(request.args.get('updated')))


@app.route('/theme/<path:filename>')
def serve_theme_file(filename):
    """Serve a theme asset from the live or dev directory for this user."""
    settings = get_settings()
    dev_enabled = current_user_dev_enabled()
    selection = resolve_theme(settings['template'], settings['stylesheet'], dev_enabled)

    # Child theme first, then its parent
    for name in dict.fromkeys([selection.stylesheet, selection.template]):
        if not name:
            continue
        directory = os.path.abspath(os.path.join(settings['themes_directory'], name))
        try:
            response = send_from_directory(directory, filename)
        except NotFound:
            continue
        response.headers['X-Theme-Target'] = selection.target
        return response
    return "File not found", 404


@app.route('/api/status')
def api_status():
    """API endpoint for slot and directory status."""
    require_deploy_permission()
    settings = get_settings()
    try:
        slot = current_slot(settings)
    except ConfigurationError as e:
        return jsonify({'success': False, 'error': str(e)}), 500

    return jsonify({
        'success': True,
        'slot': slot.name,
        'is_child': slot.is_child,
        'directories': directory_status(settings, slot),
        'dev_users': get_preference_store().dev_users(),
        'csrf_token': get_csrf_token(),
    })


@app.route('/api/deploy/<operation>', methods=['POST'])
def api_deploy(operation):
    """API to trigger promote or capture."""
    if operation not in OPERATIONS:
        abort(404)
    require_deploy_permission()

    try:
        report = run_operation(operation)
    except DeployError as e:
        return jsonify({'success': False, 'error': str(e)})
    return jsonify({'success': report.ok, 'report': report.to_dict()})


# =============================================================================
# Main
# =============================================================================

def create_app(settings_path=None, extra_condition=None):
    """
    Create and configure the Flask app.

    extra_condition: optional callable(caller) -> bool that must also allow
    a caller before deploys run.
    """
    global _settings
    if settings_path:
        _settings = Settings.reload(settings_path)

    app.config['DEPLOY_EXTRA_CONDITION'] = extra_condition
    if get_settings().get('secret_key'):
        app.secret_key = get_settings()['secret_key']
    ensure_secret_key()
    get_preference_store().init_db()

    return app


if __name__ == '__main__':
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )
    settings = get_settings()
    create_app()

    print("Starting Dev Theme admin...")
    print(f"Themes: {settings['themes_directory']}")
    print(f"Preferences: {settings['preferences_database']}")

    app.run(
        host=settings['host'],
        port=settings['port'],
        debug=settings['debug']
    )
