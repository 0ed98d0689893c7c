"""
Tests for the JSON submission endpoints.
"""

import pytest

from core.results import NotificationError, StorageError


class TestContactEndpoint:

    def test_accepted(self, client, store, notifier, valid_contact):
        response = client.post('/api/contact', json=valid_contact)

        assert response.status_code == 201
        assert response.get_json() == {
            'success': True,
            'message': 'Contact form submitted successfully',
            'id': 'record-123'
        }
        store.create.assert_called_once_with('contact', valid_contact)
        assert notifier.send.call_args.kwargs['to'] == 'jane@example.com'

    def test_rejected(self, client, store):
        response = client.post('/api/contact', json={'name': 'A', 'email': 'invalid-email'})

        assert response.status_code == 400
        body = response.get_json()
        assert body['success'] is False
        assert body['errors'] == [
            {'field': 'name', 'message': 'Name must be at least 2 characters'},
            {'field': 'email', 'message': 'Invalid email address'},
            {'field': 'message', 'message': 'Message is required'},
        ]
        store.create.assert_not_called()

    def test_storage_failure(self, client, store, valid_contact):
        store.create.side_effect = StorageError('FATAL: password authentication failed for user "leads"')

        response = client.post('/api/contact', json=valid_contact)

        assert response.status_code == 500
        assert response.get_json() == {'success': False, 'message': 'Internal server error'}
        assert b'password authentication' not in response.data

    def test_notification_failure(self, client, notifier, valid_contact):
        notifier.send.side_effect = NotificationError('535 Authentication credentials invalid')

        response = client.post('/api/contact', json=valid_contact)

        assert response.status_code == 500
        assert b'535' not in response.data

    @pytest.mark.parametrize('body,content_type', [
        ('not json at all', 'application/json'),
        ('["a", "b"]', 'application/json'),
        ('name=Jane', 'application/x-www-form-urlencoded'),
    ])
    def test_non_object_body_is_validated_as_empty(self, client, body, content_type):
        response = client.post('/api/contact', data=body, content_type=content_type)

        assert response.status_code == 400
        fields = [e['field'] for e in response.get_json()['errors']]
        assert fields == ['name', 'email', 'message']


class TestCareersEndpoint:

    def test_message_omitted(self, client, valid_career):
        del valid_career['message']

        response = client.post('/api/careers', json=valid_career)

        assert response.status_code == 201
        assert response.get_json()['message'] == 'Application submitted successfully'

    def test_message_empty(self, client, store, valid_career):
        valid_career['message'] = ''

        response = client.post('/api/careers', json=valid_career)

        assert response.status_code == 201
        assert store.create.call_args.args[1]['message'] == ''

    def test_message_null(self, client, store, valid_career):
        valid_career['message'] = None

        response = client.post('/api/careers', json=valid_career)

        assert response.status_code == 400
        assert response.get_json()['errors'] == [
            {'field': 'message', 'message': 'Message must be a string'}
        ]
        store.create.assert_not_called()


class TestReportEndpoint:

    def test_accepted(self, client, notifier):
        response = client.post('/api/report', json={'email': 'user.name@example.co.uk'})

        assert response.status_code == 201
        assert response.get_json()['message'] == 'Report download link sent to your email'
        assert notifier.send.call_args.kwargs['subject'] == 'Your Report is Ready'

    def test_notification_failure_is_not_tolerated(self, client, notifier):
        notifier.send.side_effect = NotificationError('provider down')

        response = client.post('/api/report', json={'email': 'user@example.com'})

        assert response.status_code == 500


class TestRateLimiting:

    def test_quota_exhausted(self, limited_app, store, valid_contact):
        client = limited_app.test_client()
        headers = {'X-Forwarded-For': '203.0.113.7, 10.0.0.1'}

        assert client.post('/api/contact', json=valid_contact, headers=headers).status_code == 201
        assert client.post('/api/contact', json=valid_contact, headers=headers).status_code == 201
        response = client.post('/api/contact', json={'name': 'A'}, headers=headers)

        assert response.status_code == 429
        body = response.get_json()
        assert body['success'] is False
        assert body['message'] == 'Too many requests. Please try again later.'
        assert body['limit'] == 2
        assert body['remaining'] == 0
        assert isinstance(body['reset'], int)
        assert 'errors' not in body
        assert response.headers['X-RateLimit-Limit'] == '2'
        assert response.headers['X-RateLimit-Remaining'] == '0'
        assert int(response.headers['Retry-After']) >= 0
        assert store.create.call_count == 2

    def test_other_callers_unaffected(self, limited_app):
        client = limited_app.test_client()
        payload = {'email': 'jane@example.com'}

        for _ in range(3):
            client.post('/api/report', json=payload, headers={'X-Real-IP': '198.51.100.4'})

        assert client.post('/api/report', json=payload, headers={'X-Real-IP': '198.51.100.4'}).status_code == 429
        assert client.post('/api/report', json=payload, headers={'X-Real-IP': '198.51.100.5'}).status_code == 201

    def test_kinds_have_independent_counters(self, limited_app, valid_career, valid_contact):
        client = limited_app.test_client()

        assert client.post('/api/careers', json=valid_career).status_code == 201
        assert client.post('/api/careers', json=valid_career).status_code == 429
        assert client.post('/api/contact', json=valid_contact).status_code == 201

    def test_disabled_limiter_never_limits(self, client, valid_career):
        for _ in range(10):
            assert client.post('/api/careers', json=valid_career).status_code == 201


class TestApplication:

    def test_health(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json()['status'] == 'healthy'

    def test_detailed_health_reports_disabled_rate_limit(self, client):
        response = client.get('/health/detailed')

        assert response.get_json()['components']['rate_limit'] == 'disabled'

    def test_detailed_health_with_limiter(self, limited_app):
        response = limited_app.test_client().get('/health/detailed')

        assert response.status_code == 200
        assert response.get_json()['components']['rate_limit'] == 'healthy'

    def test_security_headers(self, client):
        response = client.get('/health')

        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert response.headers['X-Frame-Options'] == 'DENY'

    def test_unknown_route_is_json(self, client):
        response = client.get('/api/newsletter')

        assert response.status_code == 404
        assert response.get_json()['success'] is False

    def test_wrong_method(self, client):
        response = client.get('/api/contact')

        assert response.status_code == 405


def test_sqlite_backed_app_round_trip(notifier):
    from app import create_app

    app = create_app('testing', notifier=notifier)
    client = app.test_client()

    response = client.post('/api/report', json={'email': 'jane@example.com'})

    assert response.status_code == 201
    assert response.get_json()['id']
    assert client.get('/health/detailed').get_json()['components']['database'] == 'healthy'
