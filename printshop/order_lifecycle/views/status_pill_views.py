"""
Status pill views for the Order Lifecycle.
"""

import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response

from organizations.tenancy import TenantScopedViewMixin
from ..exceptions import StatusPillException
from ..models import OrderStatusPill
from ..permissions import CanManageStatusPills
from ..serializers.status_pill_serializers import StatusPillSerializer, StatusPillUpdateSerializer
from ..services import StatusPillService

logger = logging.getLogger(__name__)


def pill_error_response(error: StatusPillException):
    http_status = (
        status.HTTP_404_NOT_FOUND if error.code == 'STATUS_PILL_NOT_FOUND' else status.HTTP_400_BAD_REQUEST
    )
    body = {'success': False, 'code': error.code, 'message': error.message}
    if error.details:
        body['details'] = error.details
    return Response(body, status=http_status)


class StatusPillViewSet(TenantScopedViewMixin, viewsets.ModelViewSet):
    """
    ViewSet for organization status pills.

    Any member may list pills; owners and admins manage them.
    """

    serializer_class = StatusPillSerializer
    permission_classes = [CanManageStatusPills]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        return OrderStatusPill.objects.for_organization(self.organization_id)

    def _service(self):
        return StatusPillService()

    def list(self, request, *args, **kwargs):
        state_scope = request.query_params.get('stateScope') or request.query_params.get('state')
        include_inactive = request.query_params.get('includeInactive') in ('1', 'true', 'True')
        pills = self._service().list(self.organization_id, state_scope, active_only=not include_inactive)
        return Response({
            'success': True,
            'data': StatusPillSerializer(pills, many=True).data
        })

    def create(self, request, *args, **kwargs):
        serializer = StatusPillSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            pill = self._service().create(self.organization_id, serializer.validated_data, actor=request.user)
        except StatusPillException as e:
            return pill_error_response(e)

        return Response({
            'success': True,
            'data': StatusPillSerializer(pill).data
        }, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        serializer = StatusPillUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            pill = self._service().update(
                self.organization_id, kwargs['pk'], serializer.validated_data, actor=request.user
            )
        except StatusPillException as e:
            return pill_error_response(e)

        return Response({
            'success': True,
            'data': StatusPillSerializer(pill).data
        })

    def update(self, request, *args, **kwargs):
        return self.partial_update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        try:
            self._service().delete(self.organization_id, kwargs['pk'], actor=request.user)
        except StatusPillException as e:
            return pill_error_response(e)

        return Response({'success': True})

    @action(detail=True, methods=['post'], url_path='make-default')
    def make_default(self, request, pk=None):
        """Promote a pill to the default of its state scope."""
        try:
            pill = self._service().set_default(self.organization_id, pk, actor=request.user)
        except StatusPillException as e:
            return pill_error_response(e)

        return Response({
            'success': True,
            'data': StatusPillSerializer(pill).data
        })
