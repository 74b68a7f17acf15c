from .attachment import AttachmentSerializer
from .audit import AuditLogSerializer
from .notification import NotificationSerializer
from .request import (
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

__all__ = [
    'AttachmentSerializer',
    'AuditLogSerializer',
    'NotificationSerializer',
    'DecisionSerializer',
    'ProcessSerializer',
    'RejectValidationSerializer',
    'RequestCreateSerializer',
    'RequestDetailSerializer',
    'RequestListSerializer',
    'ResubmitSerializer',
    'RouteSerializer',
    'ValidateSerializer',
]
