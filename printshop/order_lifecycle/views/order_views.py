"""
Order views for the Order Lifecycle.
"""

import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response

from organizations.tenancy import TenantScopedViewMixin
from ..exceptions import BusinessException, OrderLockedException, OrderNotFoundException, StatusPillException
from ..models import Order
from ..permissions import IsOrganizationMember
from ..serializers.order_serializers import (
    OrderListSerializer, OrderDetailSerializer, OrderAuditEntrySerializer,
    TransitionRequestSerializer, StateTransitionRequestSerializer,
    CompleteProductionRequestSerializer, StatusPillAssignSerializer,
    BulkLineItemStatusSerializer, OrderDetailsUpdateSerializer,
)
from ..services import AuditLogger, StatusPillService, get_order_state_service

logger = logging.getLogger(__name__)

LOCKED_CODES = ('ORDER_LOCKED', 'ORDER_LOCKED_SETTING_DISABLED')


def error_status_for(code, conflict_codes=()):
    """HTTP status for a rejected service result."""
    if code == 'NOT_FOUND':
        return status.HTTP_404_NOT_FOUND
    if code in LOCKED_CODES:
        return status.HTTP_403_FORBIDDEN
    if code in conflict_codes:
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def server_error(message):
    return Response({
        'success': False,
        'message': message
    }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class OrderViewSet(TenantScopedViewMixin, viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for orders.

    Read access plus the lifecycle actions. Every change goes through
    OrderStateService or StatusPillService.
    """

    permission_classes = [IsOrganizationMember]

    def get_serializer_class(self):
        """Return appropriate serializer based on action."""
        if self.action == 'list':
            return OrderListSerializer
        return OrderDetailSerializer

    def get_queryset(self):
        """Orders of the caller's organization only."""
        return Order.objects.for_organization(self.organization_id).prefetch_related('line_items')

    def _result_response(self, result, conflict_codes=()):
        if result.success:
            body = {
                'success': True,
                'data': OrderDetailSerializer(result.data).data if result.data is not None else None,
                'message': result.message,
            }
            if result.warnings:
                body['warnings'] = result.warnings
            return Response(body)

        body = {
            'success': False,
            'code': result.code,
            'message': result.message,
        }
        body.update(result.details)
        return Response(body, status=error_status_for(result.code, conflict_codes))

    @action(detail=True, methods=['post'])
    def transition(self, request, pk=None):
        """Change the legacy status of an order."""
        serializer = TransitionRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = get_order_state_service().transition(
                self.organization_id,
                pk,
                serializer.validated_data['toStatus'],
                reason=serializer.validated_data.get('reason'),
                actor=request.user,
            )
        except Exception:
            logger.exception(f"Order {pk} status transition failed")
            return server_error("Failed to transition order status")

        return self._result_response(result)

    @action(detail=True, methods=['patch'], url_path='state')
    def change_state(self, request, pk=None):
        """Change the canonical state of an order."""
        serializer = StateTransitionRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = get_order_state_service().transition_state(
                self.organization_id,
                pk,
                serializer.validated_data['nextState'],
                actor=request.user,
                notes=serializer.validated_data.get('notes'),
            )
        except Exception:
            logger.exception(f"Order {pk} state transition failed")
            return server_error("Failed to transition order state")

        return self._result_response(result)

    @action(detail=True, methods=['post'], url_path='complete-production')
    def complete_production(self, request, pk=None):
        """Complete production, optionally marking remaining line items done."""
        serializer = CompleteProductionRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = get_order_state_service().complete_production(
                self.organization_id,
                pk,
                actor=request.user,
                auto_mark_remaining_done=serializer.validated_data['autoMarkRemainingDone'],
            )
        except Exception:
            logger.exception(f"Order {pk} complete-production failed")
            return server_error("Failed to complete production")

        response = self._result_response(result, conflict_codes=('LINE_ITEMS_NOT_COMPLETE',))
        if result.success:
            response.data['didAutoMark'] = result.did_auto_mark
            response.data['autoMarkedCount'] = result.auto_marked_count
        return response

    @action(detail=True, methods=['patch'], url_path='status-pill')
    def status_pill(self, request, pk=None):
        """Set or clear the order's status pill."""
        serializer = StatusPillAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        value = serializer.validated_data.get('value')

        try:
            order = StatusPillService().assign(self.organization_id, pk, value, actor=request.user)
        except OrderNotFoundException as e:
            return Response({'success': False, 'code': e.code, 'message': e.message},
                            status=status.HTTP_404_NOT_FOUND)
        except OrderLockedException as e:
            return Response({'success': False, 'code': e.code, 'message': e.message},
                            status=status.HTTP_403_FORBIDDEN)
        except StatusPillException as e:
            return Response({'success': False, 'code': e.code, 'message': e.message},
                            status=status.HTTP_400_BAD_REQUEST)
        except Exception:
            logger.exception(f"Order {pk} status pill update failed")
            return server_error("Failed to update status pill")

        return Response({
            'success': True,
            'data': OrderDetailSerializer(order).data,
            'message': f'Status pill set to "{value}"' if value else 'Status pill cleared',
        })

    @action(detail=True, methods=['post'], url_path='line-items/bulk-status')
    def bulk_line_item_status(self, request, pk=None):
        """Set the status of several line items at once."""
        serializer = BulkLineItemStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = get_order_state_service().update_line_item_statuses(
                self.organization_id,
                pk,
                serializer.validated_data['status'],
                actor=request.user,
                line_item_ids=serializer.validated_data.get('lineItemIds'),
            )
        except Exception:
            logger.exception(f"Order {pk} bulk line item update failed")
            return server_error("Failed to update line items")

        response = self._result_response(result)
        if result.success:
            response.data['updatedCount'] = result.details.get('updatedCount', 0)
        return response

    @action(detail=True, methods=['patch'], url_path='details')
    def update_details(self, request, pk=None):
        """Edit priority, dates, notes or shipping method."""
        serializer = OrderDetailsUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = get_order_state_service().update_order_details(
                self.organization_id, pk, serializer.validated_data, actor=request.user
            )
        except Exception:
            logger.exception(f"Order {pk} details update failed")
            return server_error("Failed to update order")

        return self._result_response(result)

    @action(detail=True, methods=['get'], url_path='audit-log')
    def audit_log(self, request, pk=None):
        """Operational audit trail of the order."""
        try:
            order = get_order_state_service().get_order_or_raise(self.organization_id, pk)
        except BusinessException as e:
            return Response({'success': False, 'code': e.code, 'message': e.message},
                            status=status.HTTP_404_NOT_FOUND)

        entries = AuditLogger().list_order_entries(
            self.organization_id, order.id, action_type=request.query_params.get('actionType')
        )
        return Response({
            'success': True,
            'data': OrderAuditEntrySerializer(entries, many=True).data
        })

    @action(detail=True, methods=['get'], url_path='available-transitions')
    def available_transitions(self, request, pk=None):
        """Statuses and states the order can move to next."""
        result = get_order_state_service().get_available_transitions(self.organization_id, pk)
        if not result.success:
            return self._result_response(result)

        return Response({
            'success': True,
            'data': result.details
        })
