"""
Custom permissions for the Order Lifecycle module.
"""

from rest_framework.permissions import BasePermission, SAFE_METHODS


class IsOrganizationMember(BasePermission):
    """
    Allows access only to authenticated users that belong to an organization.

    Every order endpoint is tenant-scoped, so a user without an organization
    has nothing to see.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return bool(getattr(user, 'organization_id', None))


class CanManageStatusPills(BasePermission):
    """
    Members may read status pills; only owners and admins may change them.
    """

    def has_permission(self, request, view):
        if not IsOrganizationMember().has_permission(request, view):
            return False

        if request.method in SAFE_METHODS:
            return True

        return bool(getattr(request.user, 'is_elevated', False))
