from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts import permissions as perms
from accounts.permissions_api import HasPermissionCode
from accounts.serializers import UserProfileSerializer
from academic_requests.models import Request
from academic_requests.serializers import (
    AuditLogSerializer,
    DecisionSerializer,
    ProcessSerializer,
    RejectValidationSerializer,
    RequestCreateSerializer,
    RequestDetailSerializer,
    RequestListSerializer,
    ResubmitSerializer,
    RouteSerializer,
    ValidateSerializer,
)
from academic_requests.services import access_control, audit_service, lifecycle, queue_service, routing


LIST_FILTERS = ('status', 'validation_status', 'request_type')


def _apply_filters(qs, params):
    for name in LIST_FILTERS:
        value = params.get(name)
        if value:
            qs = qs.filter(**{name: value})
    return qs


class RequestListCreateView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, *args, **kwargs):
        qs = _apply_filters(access_control.visible_requests(request.user), request.query_params)
        return Response(RequestListSerializer(qs, many=True).data)

    def post(self, request, *args, **kwargs):
        serializer = RequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        requete = lifecycle.create_request(request.user, **serializer.validated_data)
        return Response(RequestDetailSerializer(requete).data, status=status.HTTP_201_CREATED)


class MyRequestsView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, *args, **kwargs):
        qs = _apply_filters(Request.objects.filter(created_by=request.user.id), request.query_params)
        return Response(RequestListSerializer(qs, many=True).data)


class RequestStatsView(APIView):
    permission_classes = (IsAuthenticated, HasPermissionCode)
    required_permission_code = perms.VIEW_ALL

    def get(self, request, *args, **kwargs):
        return Response(queue_service.status_counts())


class HandlerChoicesView(APIView):
    """Handlers a requester may route a grade inquiry to."""
    permission_classes = (IsAuthenticated,)

    def get(self, request, *args, **kwargs):
        grade_type = routing.normalize_grade_type(request.query_params.get('grade_type'))
        if grade_type is None:
            return Response({'detail': 'grade_type must be CC or SN'}, status=status.HTTP_400_BAD_REQUEST)
        handlers = routing.eligible_handlers(request.user, grade_type)
        return Response({
            'grade_type': grade_type,
            'routed_to_role': routing.handler_role_for_grade_type(grade_type),
            'handlers': UserProfileSerializer(handlers, many=True).data,
        })


class RequestDetailView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, id: int, *args, **kwargs):
        requete = get_object_or_404(Request.objects.prefetch_related('attachments'), pk=id)

        if not access_control.can_view_request(requete, request.user):
            return Response({'detail': 'Not authorized to view this request'}, status=status.HTTP_403_FORBIDDEN)

        return Response(RequestDetailSerializer(requete).data)


class ValidateRequestView(APIView):
    permission_classes = (IsAuthenticated,)

    def post(self, request, id: int, *args, **kwargs):
        requete = get_object_or_404(Request, pk=id)
        serializer = ValidateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        requete = lifecycle.validate_request(requete, request.user, **serializer.validated_data)
        return Response(RequestDetailSerializer(requete).data)


class RejectValidationView(APIView):
    permission_classes = (IsAuthenticated,)

    def post(self, request, id: int, *args, **kwargs):
        requete = get_object_or_404(Request, pk=id)
        serializer = RejectValidationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        requete = lifecycle.reject_validation(requete, request.user, serializer.validated_data.get('reason'))
        return Response(RequestDetailSerializer(requete).data)


class ResubmitRequestView(APIView):
    permission_classes = (IsAuthenticated,)

    def post(self, request, id: int, *args, **kwargs):
        requete = get_object_or_404(Request, pk=id)
        serializer = ResubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        requete = lifecycle.resubmit_request(requete, request.user, **serializer.validated_data)
        return Response(RequestDetailSerializer(requete).data)


class RouteRequestView(APIView):
    permission_classes = (IsAuthenticated,)

    def post(self, request, id: int, *args, **kwargs):
        requete = get_object_or_404(Request, pk=id)
        serializer = RouteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        requete = routing.route_request(requete, request.user, **serializer.validated_data)
        return Response(RequestDetailSerializer(requete).data)


class ProcessRequestView(APIView):
    permission_classes = (IsAuthenticated,)

    def post(self, request, id: int, *args, **kwargs):
        requete = get_object_or_404(Request, pk=id)
        serializer = ProcessSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        requete = lifecycle.start_processing(requete, request.user, serializer.validated_data.get('comment'))
        return Response(RequestDetailSerializer(requete).data)


class DecideRequestView(APIView):
    permission_classes = (IsAuthenticated,)

    def post(self, request, id: int, *args, **kwargs):
        requete = get_object_or_404(Request, pk=id)
        serializer = DecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            requete = lifecycle.decide_request(
                requete, request.user,
                serializer.validated_data['decision'],
                serializer.validated_data.get('comment'),
            )
        except ValueError as exc:
            return Response({'detail': str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(RequestDetailSerializer(requete).data)


class RequestHistoryView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, id: int, *args, **kwargs):
        requete = get_object_or_404(Request, pk=id)

        if not access_control.can_view_history(request.user):
            return Response({'detail': 'Not authorized to view request history'}, status=status.HTTP_403_FORBIDDEN)

        return Response({
            'request_id': requete.id,
            'status': requete.status,
            'timeline': AuditLogSerializer(audit_service.history_for(requete), many=True).data,
        })
