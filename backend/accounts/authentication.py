from django.conf import settings
from rest_framework import authentication

from accounts.identity import IdentityClient, session_user_from_identity
from accounts.services import sync_user_profile


def get_request_token(request):
    """Bearer token from the Authorization header, falling back to the auth cookie."""
    header = authentication.get_authorization_header(request).decode('latin-1')
    parts = header.split()
    if len(parts) == 2 and parts[0].lower() == 'bearer':
        return parts[1]
    cookie_name = getattr(settings, 'AUTH_TOKEN_COOKIE', 'auth_token')
    return request.COOKIES.get(cookie_name) or None


class IdentityServiceAuthentication(authentication.BaseAuthentication):
    """Authenticate requests against the external identity service.

    Any verification failure leaves the request unauthenticated; permission
    classes then decide between 401 and 403.
    """
    client_class = IdentityClient

    def authenticate(self, request):
        token = get_request_token(request)
        if not token:
            return None

        data = self.client_class().verify(token)
        if data is None:
            return None

        user = session_user_from_identity(data, token=token)
        sync_user_profile(user)
        return (user, token)

    def authenticate_header(self, request):
        return 'Bearer'
