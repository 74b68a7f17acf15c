from unittest import mock

import requests
from django.test import SimpleTestCase

from accounts.identity import IdentityClient, session_user_from_identity
from accounts import permissions as perms

VERIFY_PAYLOAD = {
    'valid': True,
    'user': {
        'id': 7,
        'email': 'awa.diallo@univ.test',
        'firstName': 'Awa',
        'lastName': 'Diallo',
        'matricule': 'GI-2024-007',
        'role': 'enseignant',
        'permissions': ['requetes:view-all', 'notes:edit'],
        'departement': {'code': 'GI', 'nom': 'Génie informatique'},
        'promotion': {'code': 'GI3'},
    },
}


def _response(status=200, payload=None, json_error=False):
    response = mock.Mock(ok=200 <= status < 300, status_code=status)
    if json_error:
        response.json.side_effect = ValueError('not json')
    else:
        response.json.return_value = payload
    return response


class IdentityClientTests(SimpleTestCase):
    def setUp(self):
        self.http = mock.Mock()
        self.identity = IdentityClient(base_url='http://identity.test/', timeout=2, session=self.http)

    def test_verify_returns_user(self):
        self.http.post.return_value = _response(payload=VERIFY_PAYLOAD)
        self.assertEqual(self.identity.verify('tok')['email'], 'awa.diallo@univ.test')

        args, kwargs = self.http.post.call_args
        self.assertEqual(args[0], 'http://identity.test/api/verify')
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer tok')
        self.assertEqual(kwargs['timeout'], 2.0)

    def test_verify_failures_return_none(self):
        cases = [
            _response(status=401, payload={'valid': False}),
            _response(payload={'valid': False}),
            _response(payload={'valid': True}),
            _response(json_error=True),
        ]
        for response in cases:
            self.http.post.return_value = response
            self.assertIsNone(self.identity.verify('tok'))

        self.http.post.side_effect = requests.ConnectionError('refused')
        self.assertIsNone(self.identity.verify('tok'))
        self.assertIsNone(self.identity.verify(''))

    def test_login_and_logout(self):
        self.http.post.return_value = _response(payload={'token': 'abc'})
        self.assertEqual(self.identity.login('a@univ.test', 'secret'), 'abc')
        self.assertEqual(self.http.post.call_args[1]['json'], {'email': 'a@univ.test', 'password': 'secret'})

        self.http.post.return_value = _response(status=401, payload={})
        self.assertIsNone(self.identity.login('a@univ.test', 'wrong'))
        self.assertFalse(self.identity.logout('abc'))


class SessionUserMappingTests(SimpleTestCase):
    def test_identity_payload_maps_to_session_user(self):
        user = session_user_from_identity(VERIFY_PAYLOAD['user'], token='tok')

        self.assertEqual(user.id, '7')
        self.assertEqual(user.role, 'teacher')
        self.assertEqual(user.full_name, 'Awa Diallo')
        self.assertEqual(user.department_code, 'GI')
        self.assertEqual(user.program_code, 'GI3')
        self.assertTrue(user.has_permission(perms.RESOLVE))
        self.assertTrue(user.has_permission(perms.VIEW_ALL))
        self.assertNotIn('notes:edit', user.permissions)
        self.assertFalse(user.has_permission(perms.CREATE))

    def test_plain_string_department_and_missing_program(self):
        user = session_user_from_identity({'id': 'u1', 'role': 'etudiant', 'departement': 'GC'})
        self.assertEqual(user.department_code, 'GC')
        self.assertIsNone(user.program_code)
        self.assertEqual(user.role, 'student')
