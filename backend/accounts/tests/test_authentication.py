from unittest import mock

from django.test import TestCase, override_settings
from rest_framework.test import APIClient, APIRequestFactory

from accounts.authentication import IdentityServiceAuthentication
from accounts.identity import IdentityClient
from accounts.models import UserProfile
from accounts.tests.test_identity import VERIFY_PAYLOAD


class IdentityServiceAuthenticationTests(TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()
        self.auth = IdentityServiceAuthentication()

    def test_bearer_token_authenticates_and_syncs_profile(self):
        request = self.factory.get('/api/requests/', HTTP_AUTHORIZATION='Bearer tok')
        with mock.patch.object(IdentityClient, 'verify', return_value=VERIFY_PAYLOAD['user']) as verify:
            user, token = self.auth.authenticate(request)

        verify.assert_called_once_with('tok')
        self.assertEqual(token, 'tok')
        self.assertEqual(user.id, '7')
        self.assertEqual(user.role, 'teacher')

        profile = UserProfile.objects.get(user_id='7')
        self.assertEqual(profile.role, 'teacher')
        self.assertEqual(profile.department_code, 'GI')
        self.assertEqual(profile.program_code, 'GI3')

    @override_settings(AUTH_TOKEN_COOKIE='auth_token')
    def test_cookie_fallback(self):
        request = self.factory.get('/api/requests/')
        request.COOKIES['auth_token'] = 'cookie-tok'
        with mock.patch.object(IdentityClient, 'verify', return_value=VERIFY_PAYLOAD['user']) as verify:
            self.assertIsNotNone(self.auth.authenticate(request))
        verify.assert_called_once_with('cookie-tok')

    def test_failed_verification_is_unauthenticated(self):
        request = self.factory.get('/api/requests/', HTTP_AUTHORIZATION='Bearer expired')
        with mock.patch.object(IdentityClient, 'verify', return_value=None):
            self.assertIsNone(self.auth.authenticate(request))
        self.assertIsNone(self.auth.authenticate(self.factory.get('/api/requests/')))
        self.assertFalse(UserProfile.objects.exists())

    def test_profile_sync_updates_existing_row(self):
        UserProfile.objects.create(user_id='7', role='student', department_code='OLD')
        request = self.factory.get('/', HTTP_AUTHORIZATION='Bearer tok')
        with mock.patch.object(IdentityClient, 'verify', return_value=VERIFY_PAYLOAD['user']):
            self.auth.authenticate(request)
        profile = UserProfile.objects.get(user_id='7')
        self.assertEqual(profile.department_code, 'GI')
        self.assertEqual(UserProfile.objects.count(), 1)


class AuthEndpointTests(TestCase):
    def test_login_sets_cookie_and_returns_user(self):
        with mock.patch.object(IdentityClient, 'login', return_value='tok'), \
                mock.patch.object(IdentityClient, 'verify', return_value=VERIFY_PAYLOAD['user']):
            response = APIClient().post('/api/auth/login/', {'email': 'awa.diallo@univ.test', 'password': 'x'}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['token'], 'tok')
        self.assertEqual(response.data['user']['role'], 'teacher')
        self.assertIn('requetes:resolve', response.data['user']['permissions'])
        self.assertEqual(response.cookies['auth_token'].value, 'tok')
        self.assertTrue(response.cookies['auth_token']['httponly'])

    def test_bad_credentials(self):
        with mock.patch.object(IdentityClient, 'login', return_value=None):
            response = APIClient().post('/api/auth/login/', {'email': 'a@univ.test', 'password': 'x'}, format='json')
        self.assertEqual(response.status_code, 401)

    def test_me_through_bearer_token(self):
        with mock.patch.object(IdentityClient, 'verify', return_value=VERIFY_PAYLOAD['user']):
            response = APIClient().get('/api/auth/me/', HTTP_AUTHORIZATION='Bearer tok')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['department_code'], 'GI')

    def test_logout_clears_cookie(self):
        with mock.patch.object(IdentityClient, 'logout', return_value=True) as logout:
            response = APIClient().post('/api/auth/logout/', HTTP_AUTHORIZATION='Bearer tok')
        logout.assert_called_once_with('tok')
        self.assertEqual(response.status_code, 204)
        self.assertEqual(response.cookies['auth_token'].value, '')
