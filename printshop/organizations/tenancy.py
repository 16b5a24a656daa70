"""
Tenant context resolution for authenticated requests.
"""

from rest_framework.exceptions import PermissionDenied


class MissingOrganizationContext(PermissionDenied):
    """Raised when an authenticated request carries no organization."""

    default_detail = "Missing organization context"
    default_code = "missing_organization"


def get_request_organization_id(request):
    """
    Resolve the organization id for an authenticated request.

    Args:
        request: DRF or Django request with an authenticated user

    Returns:
        Organization UUID

    Raises:
        MissingOrganizationContext: If the user has no organization
    """
    user = getattr(request, 'user', None)
    organization_id = getattr(user, 'organization_id', None) if user else None
    if not organization_id:
        raise MissingOrganizationContext()
    return organization_id


class TenantScopedViewMixin:
    """Gives DRF views the caller's organization id."""

    @property
    def organization_id(self):
        return get_request_organization_id(self.request)
