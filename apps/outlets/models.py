# ==========================================
# apps/outlets/models.py
# ==========================================

from django.db import models
import uuid


class Outlet(models.Model):
    """Physical branch location scoping staff, vouchers and packages."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    location = models.CharField(max_length=200, blank=True)
    address = models.TextField(blank=True)
    code = models.CharField(max_length=20, unique=True, db_index=True)
    gstin = models.CharField(max_length=20, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'outlets'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.code})"

    def has_staff(self, user):
        return user.outlet_id == self.id
