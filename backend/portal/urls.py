from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.http import HttpResponse
from django.urls import include, path

urlpatterns = [
    path('favicon.ico', lambda request: HttpResponse(status=204), name='favicon'),
    path('admin/', admin.site.urls),
    path('api/auth/', include('accounts.urls')),
    path('api/requests/', include('academic_requests.urls')),
    path('api/attachments/', include('academic_requests.attachments_urls')),
    path('api/notifications/', include('academic_requests.notifications_urls')),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
