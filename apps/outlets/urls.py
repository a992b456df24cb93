from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'outlets'

router = DefaultRouter()
router.register(r'', views.OutletViewSet, basename='outlet')

urlpatterns = [
    # GET    /api/outlets/         - List outlets
    # POST   /api/outlets/         - Create outlet (admin)
    # GET    /api/outlets/{id}/    - Outlet details
    # PUT    /api/outlets/{id}/    - Update outlet (admin)
    # PATCH  /api/outlets/{id}/    - Partial update (admin)
    # DELETE /api/outlets/{id}/    - Delete outlet, unassigning staff (admin)
    path('', include(router.urls)),
]
