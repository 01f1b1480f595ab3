from django.urls import path

from . import views

urlpatterns = [
    path('tiny-sync', views.tiny_sync_view, name='tiny-sync'),
    path('user-roles', views.user_roles_view, name='user-roles'),
]
