from django.http import Http404
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from academic_requests.models import Notification
from academic_requests.serializers import NotificationSerializer
from academic_requests.services import notification_service


class NotificationListView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, *args, **kwargs):
        qs = Notification.objects.filter(user_id=request.user.id)
        if request.query_params.get('unread') in ('1', 'true'):
            qs = qs.filter(is_read=False)
        return Response({
            'results': NotificationSerializer(qs, many=True).data,
            'unread_count': Notification.objects.filter(user_id=request.user.id, is_read=False).count(),
        })


class NotificationReadView(APIView):
    permission_classes = (IsAuthenticated,)

    def post(self, request, id: int, *args, **kwargs):
        if not notification_service.mark_read(request.user.id, id):
            raise Http404('Notification not found')
        return Response({'id': id, 'is_read': True})


class NotificationReadAllView(APIView):
    permission_classes = (IsAuthenticated,)

    def post(self, request, *args, **kwargs):
        return Response({'updated': notification_service.mark_all_read(request.user.id)})
