from rest_framework.permissions import BasePermission


def is_admin(user):
    return bool(user and user.is_authenticated and (user.role == 'Admin' or user.is_superuser))


class IsAdmin(BasePermission):
    message = 'Admin permissions required'

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsMember(BasePermission):
    message = 'Only members can perform this action'

    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.role == 'Member'


class IsOwnerOrAdmin(BasePermission):
    def has_object_permission(self, request, view, obj):
        if is_admin(request.user):
            return True
        return getattr(obj, 'member_id', None) == request.user.id
