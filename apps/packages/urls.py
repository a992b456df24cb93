from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'packages'

router = DefaultRouter()
router.register(r'templates', views.PackageTemplateViewSet, basename='template')
router.register(r'customer', views.CustomerPackageViewSet, basename='customer-package')

urlpatterns = [
    # GET    /api/packages/templates/                          - List templates
    # POST   /api/packages/templates/                          - Create template (admin)
    # DELETE /api/packages/templates/{id}/                     - Delete template (admin)
    # GET    /api/packages/customer/                           - List packages (outlet-scoped)
    # POST   /api/packages/customer/                           - Assign package (outlet user)
    # GET    /api/packages/customer/lookup/?mobile=            - Find by mobile
    # GET    /api/packages/customer/{id}/                      - Package details
    # POST   /api/packages/customer/{id}/redeem/               - Redeem services (outlet user)
    # GET    /api/packages/customer/{id}/history/              - Redemption history
    # GET    /api/packages/customer/{id}/invoice/              - Sale invoice PNG
    # GET    /api/packages/customer/{id}/bill/{transaction_id}/ - Bill PNG
    path('', include(router.urls)),
]
