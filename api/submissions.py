# api/submissions.py
"""
JSON endpoints for the lead capture forms
"""

from flask import Blueprint, current_app, jsonify, request

from core.rate_limiter import get_client_ip
from core.results import (
    Accepted, Rejected, RateLimited, PipelineResult, INTERNAL_ERROR_MESSAGE
)
from middleware.security import rate_limit_headers

submissions_bp = Blueprint('submissions', __name__)


def to_http_response(result: PipelineResult):
    """
    Map a pipeline outcome to a JSON response and status code
    """
    if isinstance(result, Accepted):
        return jsonify({
            'success': True,
            'message': result.message,
            'id': result.id
        }), 201

    if isinstance(result, Rejected):
        return jsonify({
            'success': False,
            'errors': result.errors_as_dicts()
        }), 400

    if isinstance(result, RateLimited):
        response = jsonify({
            'success': False,
            'message': result.message,
            'limit': result.limit,
            'remaining': result.remaining,
            'reset': result.reset_at
        })
        return rate_limit_headers(response, result), 429

    return jsonify({'success': False, 'message': INTERNAL_ERROR_MESSAGE}), 500


def handle_submission(kind: str):
    """Run the JSON request body through the pipeline for one kind"""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        # Anything but a JSON object is validated as an empty submission
        payload = {}

    pipeline = current_app.pipelines[kind]
    result = pipeline.submit(payload, get_client_ip(request.headers))
    return to_http_response(result)


@submissions_bp.route('/contact', methods=['POST'])
def submit_contact():
    """Contact form submission"""
    return handle_submission('contact')


@submissions_bp.route('/careers', methods=['POST'])
def submit_careers():
    """Career application submission"""
    return handle_submission('careers')


@submissions_bp.route('/report', methods=['POST'])
def submit_report():
    """Report download request"""
    return handle_submission('report')
