"""
Outlet management service.

Handles outlet CRUD operations with proper transaction safety.
"""

import logging
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction

from apps.outlets.models import Outlet

from .exceptions import OutletNotFoundError, DuplicateOutletCodeError

logger = logging.getLogger(__name__)


def _normalize_code(code: str) -> str:
    return code.strip().upper()


@transaction.atomic
def create_outlet(
    *,
    name: str,
    code: str,
    location: str = '',
    address: str = '',
    gstin: str = '',
    phone: str = ''
) -> Outlet:
    """
    Create a new outlet.

    Args:
        name: Display name of the branch
        code: Short unique branch code (stored upper-case)
        location: Area / city
        address: Postal address, may span several lines
        gstin: GST identification number printed on bills
        phone: Contact phone printed on bills

    Returns:
        Created Outlet instance

    Raises:
        DuplicateOutletCodeError: If the code is already taken
    """
    code = _normalize_code(code)
    if Outlet.objects.filter(code=code).exists():
        raise DuplicateOutletCodeError(f"Outlet code {code} is already in use")

    outlet = Outlet.objects.create(
        name=name,
        code=code,
        location=location,
        address=address,
        gstin=gstin,
        phone=phone,
    )
    logger.info("Created outlet %s (%s)", outlet.code, outlet.id)
    return outlet


def get_outlet_by_id(*, outlet_id: UUID) -> Outlet:
    """
    Get an outlet by ID.

    Raises:
        OutletNotFoundError: If outlet doesn't exist
    """
    try:
        return Outlet.objects.get(id=outlet_id)
    except Outlet.DoesNotExist:
        raise OutletNotFoundError(f"Outlet with ID {outlet_id} not found")


@transaction.atomic
def update_outlet(
    *,
    outlet_id: UUID,
    name: Optional[str] = None,
    code: Optional[str] = None,
    location: Optional[str] = None,
    address: Optional[str] = None,
    gstin: Optional[str] = None,
    phone: Optional[str] = None
) -> Outlet:
    """
    Update outlet details.

    Uses select_for_update to prevent concurrent modifications.

    Raises:
        OutletNotFoundError: If outlet doesn't exist
        DuplicateOutletCodeError: If the new code belongs to another outlet
    """
    try:
        outlet = (
            Outlet.objects
            .select_for_update()
            .get(id=outlet_id)
        )
    except Outlet.DoesNotExist:
        raise OutletNotFoundError(f"Outlet with ID {outlet_id} not found")

    update_fields = ['updated_at']

    if code is not None:
        code = _normalize_code(code)
        if Outlet.objects.filter(code=code).exclude(id=outlet.id).exists():
            raise DuplicateOutletCodeError(f"Outlet code {code} is already in use")
        outlet.code = code
        update_fields.append('code')

    for field, value in [
        ('name', name),
        ('location', location),
        ('address', address),
        ('gstin', gstin),
        ('phone', phone),
    ]:
        if value is not None:
            setattr(outlet, field, value)
            update_fields.append(field)

    outlet.save(update_fields=update_fields)

    return outlet


@transaction.atomic
def delete_outlet(*, outlet_id: UUID) -> int:
    """
    Delete an outlet and unassign it from its staff.

    Vouchers and customer packages keep their history; their outlet
    reference is nulled by the foreign key.

    Returns:
        Number of users that were unassigned

    Raises:
        OutletNotFoundError: If outlet doesn't exist
    """
    try:
        outlet = (
            Outlet.objects
            .select_for_update()
            .get(id=outlet_id)
        )
    except Outlet.DoesNotExist:
        raise OutletNotFoundError(f"Outlet with ID {outlet_id} not found")

    User = get_user_model()
    unassigned = User.objects.filter(outlet=outlet).update(outlet=None)

    code = outlet.code
    outlet.delete()
    logger.info("Deleted outlet %s, unassigned %d user(s)", code, unassigned)

    return unassigned
