"""
Tests for submission field rules.
"""

import pytest

from core.schemas import (
    CONTACT_SCHEMA, CAREERS_SCHEMA, REPORT_SCHEMA, is_valid_email
)


class TestEmailRule:
    """Address grammar accepted by every submission kind."""

    @pytest.mark.parametrize('address', [
        'user@example.com',
        'user+tag@example.com',
        'user.name@example.co.uk',
    ])
    def test_accepts_standard_addresses(self, address):
        assert is_valid_email(address)

    @pytest.mark.parametrize('address', [
        'invalid-email',
        'user@',
        'userexample.com',
        'user @example.com',
        '',
        'user@bücher.de',
        'user@例え.jp',
        'üser@example.com',
    ])
    def test_rejects_malformed_and_international_addresses(self, address):
        assert not is_valid_email(address)

    @pytest.mark.parametrize('address', [
        'user@sub.example.local',
        'user@localhost',
        'user@mail.test',
        'user@host.invalid',
    ])
    def test_rejects_special_use_and_dotless_domains(self, address):
        assert not is_valid_email(address)

    def test_special_use_domain_is_a_field_error(self):
        record, errors = REPORT_SCHEMA.validate({'email': 'jane@office.local'})

        assert record is None
        assert [e.to_dict() for e in errors] == [
            {'field': 'email', 'message': 'Invalid email address'}
        ]

    def test_report_schema_reports_invalid_email(self):
        record, errors = REPORT_SCHEMA.validate({'email': 'invalid-email'})

        assert record is None
        assert [e.to_dict() for e in errors] == [
            {'field': 'email', 'message': 'Invalid email address'}
        ]


class TestContactSchema:

    def test_valid_input_yields_record(self, valid_contact):
        record, errors = CONTACT_SCHEMA.validate(valid_contact)

        assert errors == []
        assert record == valid_contact

    def test_missing_field_is_named(self, valid_contact):
        del valid_contact['name']

        record, errors = CONTACT_SCHEMA.validate(valid_contact)

        assert record is None
        assert errors[0].field == 'name'
        assert errors[0].message == 'Name is required'

    def test_short_values_fail_with_constraint_message(self):
        record, errors = CONTACT_SCHEMA.validate({
            'name': 'A',
            'email': 'a@example.com',
            'message': 'short'
        })

        assert record is None
        messages = {e.field: e.message for e in errors}
        assert messages == {
            'name': 'Name must be at least 2 characters',
            'message': 'Message must be at least 10 characters',
        }

    def test_collects_all_violations_in_one_pass(self):
        record, errors = CONTACT_SCHEMA.validate({'name': '', 'email': 'nope'})

        assert record is None
        assert [e.field for e in errors] == ['name', 'email', 'message']

    def test_values_are_not_trimmed(self):
        raw = {'name': '  ', 'email': 'jane@example.com', 'message': '  padded message  '}

        record, errors = CONTACT_SCHEMA.validate(raw)

        assert errors == []
        assert record['name'] == '  '
        assert record['message'] == '  padded message  '

    def test_non_string_values_are_rejected(self):
        record, errors = CONTACT_SCHEMA.validate({
            'name': 123,
            'email': 'jane@example.com',
            'message': ['not', 'a', 'string']
        })

        assert record is None
        assert {e.field: e.message for e in errors} == {
            'name': 'Name must be a string',
            'message': 'Message must be a string',
        }

    def test_unknown_keys_are_dropped(self, valid_contact):
        valid_contact['admin'] = True

        record, errors = CONTACT_SCHEMA.validate(valid_contact)

        assert errors == []
        assert 'admin' not in record

    def test_non_mapping_input_is_treated_as_empty(self):
        record, errors = CONTACT_SCHEMA.validate(['name', 'email'])

        assert record is None
        assert [e.field for e in errors] == ['name', 'email', 'message']

    def test_validation_is_repeatable(self):
        raw = {'name': 'A', 'email': 'bad'}

        first = CONTACT_SCHEMA.validate(raw)
        second = CONTACT_SCHEMA.validate(raw)

        assert first == second
        assert raw == {'name': 'A', 'email': 'bad'}


class TestCareersSchema:

    def test_message_may_be_omitted(self, valid_career):
        del valid_career['message']

        record, errors = CAREERS_SCHEMA.validate(valid_career)

        assert errors == []
        assert 'message' not in record

    def test_empty_message_is_accepted_verbatim(self, valid_career):
        valid_career['message'] = ''

        record, errors = CAREERS_SCHEMA.validate(valid_career)

        assert errors == []
        assert record['message'] == ''

    def test_explicit_null_message_is_rejected(self, valid_career):
        valid_career['message'] = None

        record, errors = CAREERS_SCHEMA.validate(valid_career)

        assert record is None
        assert [e.to_dict() for e in errors] == [
            {'field': 'message', 'message': 'Message must be a string'}
        ]

    def test_short_position(self, valid_career):
        valid_career['position'] = 'X'

        _, errors = CAREERS_SCHEMA.validate(valid_career)

        assert [e.to_dict() for e in errors] == [
            {'field': 'position', 'message': 'Position is required'}
        ]

    def test_null_required_field(self, valid_career):
        valid_career['name'] = None

        _, errors = CAREERS_SCHEMA.validate(valid_career)

        assert [e.to_dict() for e in errors] == [
            {'field': 'name', 'message': 'Name is required'}
        ]


class TestReportSchema:

    def test_only_email_is_kept(self):
        record, errors = REPORT_SCHEMA.validate({'email': 'user@example.com', 'name': 'ignored'})

        assert errors == []
        assert record == {'email': 'user@example.com'}

    def test_missing_email(self):
        record, errors = REPORT_SCHEMA.validate({})

        assert record is None
        assert errors[0].field == 'email'
