from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from academic_requests.serializers import RequestListSerializer
from academic_requests.services import queue_service


class HandlerQueueView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, *args, **kwargs):
        qs = queue_service.handler_queue(request.user)
        return Response({'results': RequestListSerializer(qs, many=True).data, 'count': qs.count()})


class ValidationQueueView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, *args, **kwargs):
        qs = queue_service.validation_queue(request.user)
        return Response({'results': RequestListSerializer(qs, many=True).data, 'count': qs.count()})
