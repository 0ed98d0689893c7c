"""
Form actions for the lead capture forms

Each action takes the form-encoded field set and the request headers and
returns a tagged result value instead of an HTTP status. The same functions
back the /actions/* routes, which always answer 200 with that value.

The routes are CSRF protected: a page fetches a token from
GET /actions/csrf-token and sends it back as the csrf_token form field or
the X-CSRFToken header, together with the session cookie.
"""

from typing import Any, Dict, Mapping

from flask import Blueprint, current_app, jsonify, request
from flask_wtf.csrf import generate_csrf

from core.rate_limiter import get_client_ip
from core.results import to_action_result

actions_bp = Blueprint('actions', __name__)


def _run_action(kind: str, raw: Dict[str, Any], headers: Mapping[str, str]) -> Dict[str, Any]:
    pipeline = current_app.pipelines[kind]
    result = pipeline.submit(raw, get_client_ip(headers))
    return to_action_result(result)


def submit_contact_action(form: Mapping[str, str], headers: Mapping[str, str]) -> Dict[str, Any]:
    """Contact form action"""
    raw = {
        'name': form.get('name'),
        'email': form.get('email'),
        'message': form.get('message'),
    }
    return _run_action('contact', raw, headers)


def submit_careers_action(form: Mapping[str, str], headers: Mapping[str, str]) -> Dict[str, Any]:
    """Careers application action; an empty message counts as not provided"""
    raw = {
        'name': form.get('name'),
        'email': form.get('email'),
        'position': form.get('position'),
    }
    if form.get('message'):
        raw['message'] = form.get('message')

    return _run_action('careers', raw, headers)


def submit_report_action(form: Mapping[str, str], headers: Mapping[str, str]) -> Dict[str, Any]:
    """Report download action"""
    raw = {
        'email': form.get('email'),
    }
    return _run_action('report', raw, headers)


@actions_bp.route('/contact', methods=['POST'])
def contact_action():
    return jsonify(submit_contact_action(request.form, request.headers))


@actions_bp.route('/careers', methods=['POST'])
def careers_action():
    return jsonify(submit_careers_action(request.form, request.headers))


@actions_bp.route('/report', methods=['POST'])
def report_action():
    return jsonify(submit_report_action(request.form, request.headers))


@actions_bp.route('/csrf-token', methods=['GET'])
def csrf_token():
    """Issue a CSRF token bound to the caller's session cookie"""
    response = jsonify({'csrf_token': generate_csrf()})
    response.headers['Cache-Control'] = 'no-store'
    return response
