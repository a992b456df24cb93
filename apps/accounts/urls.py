from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'users'

router = DefaultRouter()
router.register(r'users', views.UserViewSet, basename='user')

urlpatterns = [
    # Authentication
    path('login/', views.login, name='login'),
    path('logout/', views.logout, name='logout'),

    # Current user
    path('user/', views.get_current_user, name='current-user'),
    path('change-password/', views.change_password, name='change-password'),

    # Staff management (admin)
    # GET/POST          /api/auth/users/
    # GET/PATCH/DELETE  /api/auth/users/{id}/
    path('', include(router.urls)),
]
