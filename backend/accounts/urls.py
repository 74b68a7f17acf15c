from django.urls import path

from .views import (
    DepartmentDetailView,
    DepartmentListView,
    DirectoryDetailView,
    DirectoryListView,
    LoginView,
    LogoutView,
    MeView,
    ProfileView,
)

urlpatterns = [
    path('login/', LoginView.as_view(), name='login'),
    path('logout/', LogoutView.as_view(), name='logout'),
    path('me/', MeView.as_view(), name='me'),
    path('profile/', ProfileView.as_view(), name='profile'),
    path('users/', DirectoryListView.as_view(), name='directory-list'),
    path('users/<str:user_id>/', DirectoryDetailView.as_view(), name='directory-detail'),
    path('departments/', DepartmentListView.as_view(), name='department-list'),
    path('departments/<str:code>/', DepartmentDetailView.as_view(), name='department-detail'),
]
