import logging

from django.conf import settings
from django.db.models import Q
from django.http import Http404
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts import permissions as perms
from accounts.authentication import get_request_token
from accounts.identity import IdentityClient, session_user_from_identity
from accounts.models import Department, UserProfile
from accounts.permissions import normalize_role
from accounts.permissions_api import HasPermissionCode
from accounts.serializers import (
    DepartmentSerializer,
    DirectoryProfileSerializer,
    LoginSerializer,
    MeSerializer,
    ProfileSerializer,
)
from accounts.services import sync_user_profile, update_profile

log = logging.getLogger(__name__)


def _set_token_cookie(response, token):
    response.set_cookie(
        getattr(settings, 'AUTH_TOKEN_COOKIE', 'auth_token'),
        token,
        max_age=getattr(settings, 'AUTH_TOKEN_COOKIE_MAX_AGE', 60 * 60 * 24 * 7),
        httponly=True,
        secure=not settings.DEBUG,
        samesite='Strict',
        path='/',
    )


class LoginView(APIView):
    """Exchange credentials with the identity service and keep the token in a cookie."""
    permission_classes = (permissions.AllowAny,)
    authentication_classes = ()

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        client = IdentityClient()
        token = client.login(serializer.validated_data['email'], serializer.validated_data['password'])
        if not token:
            return Response({'detail': 'Invalid credentials'}, status=status.HTTP_401_UNAUTHORIZED)

        payload = {'token': token}
        data = client.verify(token)
        if data is not None:
            user = session_user_from_identity(data, token=token)
            sync_user_profile(user)
            payload['user'] = MeSerializer(user).data
        else:
            log.warning('Token issued at login could not be verified; profile sync skipped')

        response = Response(payload)
        _set_token_cookie(response, token)
        return response


class LogoutView(APIView):
    permission_classes = (permissions.AllowAny,)
    authentication_classes = ()

    def post(self, request):
        token = get_request_token(request)
        if token and not IdentityClient().logout(token):
            log.info('Identity service logout failed; clearing local cookie anyway')

        response = Response(status=status.HTTP_204_NO_CONTENT)
        response.delete_cookie(getattr(settings, 'AUTH_TOKEN_COOKIE', 'auth_token'), path='/')
        return response


class MeView(APIView):
    permission_classes = (permissions.IsAuthenticated,)

    def get(self, request):
        return Response(MeSerializer(request.user).data)


class ProfileView(APIView):
    """The signed-in user's own directory row."""
    permission_classes = (permissions.IsAuthenticated,)

    def _profile(self, request):
        profile = UserProfile.objects.filter(user_id=request.user.id).first()
        if profile is None:
            # Authentication normally syncs the row; recreate it if that failed.
            profile = sync_user_profile(request.user)
        if profile is None:
            raise Http404('Profile not found')
        return profile

    def get(self, request, *args, **kwargs):
        return Response(ProfileSerializer(self._profile(request)).data)

    def patch(self, request, *args, **kwargs):
        profile = self._profile(request)
        serializer = ProfileSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        update_profile(profile, serializer.validated_data, request.user.id)
        return Response(ProfileSerializer(profile).data)


class DirectoryListView(APIView):
    """Searchable user directory for administrators and directors."""
    permission_classes = (permissions.IsAuthenticated,)

    def get(self, request, *args, **kwargs):
        if not request.user.has_any_permission(perms.SYSTEM_MANAGE, perms.VIEW_ALL):
            return Response({'detail': 'Not authorized to browse the directory'}, status=status.HTTP_403_FORBIDDEN)

        qs = UserProfile.objects.all()
        role = request.query_params.get('role')
        if role:
            qs = qs.filter(role=normalize_role(role))
        department = request.query_params.get('department_code')
        if department:
            qs = qs.filter(department_code=department)
        if request.query_params.get('active') in ('1', 'true'):
            qs = qs.filter(is_active=True)
        term = (request.query_params.get('q') or '').strip()
        if term:
            qs = qs.filter(
                Q(last_name__icontains=term) | Q(first_name__icontains=term)
                | Q(email__icontains=term) | Q(matricule__icontains=term)
            )
        return Response({'results': DirectoryProfileSerializer(qs, many=True).data, 'count': qs.count()})


class DirectoryDetailView(APIView):
    permission_classes = (permissions.IsAuthenticated, HasPermissionCode)
    required_permission_code = perms.SYSTEM_MANAGE

    def get(self, request, user_id: str, *args, **kwargs):
        profile = get_object_or_404(UserProfile, user_id=user_id)
        return Response(DirectoryProfileSerializer(profile).data)

    def patch(self, request, user_id: str, *args, **kwargs):
        profile = get_object_or_404(UserProfile, user_id=user_id)
        serializer = DirectoryProfileSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        update_profile(profile, serializer.validated_data, request.user.id)
        return Response(DirectoryProfileSerializer(profile).data)


class DepartmentAccessMixin:
    """Anyone signed in may read departments; only system managers write them."""
    permission_classes = (permissions.IsAuthenticated, HasPermissionCode)

    @property
    def required_permission_code(self):
        return '' if self.request.method in permissions.SAFE_METHODS else perms.SYSTEM_MANAGE


class DepartmentListView(DepartmentAccessMixin, APIView):
    def get(self, request, *args, **kwargs):
        qs = Department.objects.all()
        return Response({'results': DepartmentSerializer(qs, many=True).data, 'count': qs.count()})

    def post(self, request, *args, **kwargs):
        serializer = DepartmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        department = serializer.save()
        log.info('%s', {'event': 'department_created', 'code': department.code, 'actor': request.user.id})
        return Response(DepartmentSerializer(department).data, status=status.HTTP_201_CREATED)


class DepartmentDetailView(DepartmentAccessMixin, APIView):
    def get(self, request, code: str, *args, **kwargs):
        return Response(DepartmentSerializer(get_object_or_404(Department, code=code.upper())).data)

    def patch(self, request, code: str, *args, **kwargs):
        department = get_object_or_404(Department, code=code.upper())
        serializer = DepartmentSerializer(department, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        department = serializer.save()
        log.info('%s', {'event': 'department_updated', 'code': department.code, 'actor': request.user.id})
        return Response(DepartmentSerializer(department).data)
