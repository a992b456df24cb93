from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    # Monthly stats, scoped to the caller's outlet (admins may pick one)
    path('vouchers/', views.voucher_stats, name='voucher-stats'),
    path('packages/', views.package_stats, name='package-stats'),

    # Home screen
    path('dashboard/', views.dashboard, name='dashboard'),
]
