from fastapi import Header, HTTPException
from typing import Optional

def get_tenant_id(x_tenant_id: str = Header(...)) -> str:
    if not x_tenant_id:
        raise HTTPException(status_code=400, detail="X-Tenant-ID header is missing")
    return x_tenant_id

def get_user_id(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    """Who is acting, as forwarded by the auth gateway. Only stamped on created_by/updated_by."""
    return x_user_id
