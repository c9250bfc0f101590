"""Tenant resolution for incoming requests"""

import logging
from typing import Optional

from fastapi import Header, HTTPException

from .config import DEFAULT_TENANT_ID
from .shared.validators import validate_uuid

logger = logging.getLogger(__name__)


async def get_tenant_id(x_tenant_id: Optional[str] = Header(None)) -> str:
    """Tenant for the current request, taken from the X-Tenant-ID header"""
    if not x_tenant_id:
        return DEFAULT_TENANT_ID

    tenant_id = x_tenant_id.strip()
    if not validate_uuid(tenant_id):
        logger.warning(f"⚠️ Rejected malformed tenant id: {tenant_id}")
        raise HTTPException(status_code=400, detail="Invalid X-Tenant-ID header")
    return tenant_id
