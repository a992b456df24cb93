from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'vouchers'

router = DefaultRouter()
router.register(r'', views.VoucherViewSet, basename='voucher')

urlpatterns = [
    # GET    /api/vouchers/                 - List vouchers (outlet-scoped)
    # POST   /api/vouchers/                 - Issue voucher (outlet user)
    # GET    /api/vouchers/lookup/?q=       - Check status by id or mobile
    # GET    /api/vouchers/export/          - CSV export of filtered list
    # GET    /api/vouchers/{id}/            - Voucher details
    # POST   /api/vouchers/{id}/redeem/     - Redeem (outlet user)
    # GET    /api/vouchers/{id}/card/       - Branded PNG card
    path('', include(router.urls)),
]
