from rest_framework import permissions


class HasPermissionCode(permissions.BasePermission):
    """Grants access when the session user holds the view's `required_permission_code`.

    Wildcard (`*`) holders pass every check, see `SessionUser.has_permission`.
    """
    message = 'You do not have the permission required for this action.'

    def has_permission(self, request, view):
        user = getattr(request, 'user', None)
        if user is None or not getattr(user, 'is_authenticated', False):
            return False

        code = getattr(view, 'required_permission_code', '')
        if not code:
            return True

        check = getattr(user, 'has_permission', None)
        return bool(check and check(code))
