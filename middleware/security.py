# middleware/security.py
"""
Response middleware: security and rate limit headers
"""

import math
import time

from flask import current_app


def security_headers(response):
    """Add configured security headers to all responses"""
    for header, value in current_app.config.get('SECURITY_HEADERS', {}).items():
        response.headers.setdefault(header, value)

    return response


def rate_limit_headers(response, result):
    """
    Add quota headers for a rate-limited outcome

    Args:
        response: Flask response object
        result: RateLimited outcome carrying limit, remaining and reset_at
    """
    response.headers['X-RateLimit-Limit'] = str(result.limit)
    response.headers['X-RateLimit-Remaining'] = str(result.remaining)
    response.headers['X-RateLimit-Reset'] = str(result.reset_at)

    retry_after = math.ceil(result.reset_at / 1000 - time.time())
    response.headers['Retry-After'] = str(max(retry_after, 0))

    return response
