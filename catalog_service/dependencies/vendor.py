"""
Vendor identity for vendor-scoped endpoints.

Authentication happens upstream; the gateway forwards the authenticated
vendor's id in a header.
"""

from fastapi import Request

from catalog_service.core.config import config
from catalog_service.core.errors import ErrorResponse
from catalog_service.utils.validators import to_object_id


async def get_vendor_id(request: Request) -> str:
    """Read and validate the vendor id header"""
    vendor_id = (request.headers.get(config.vendor_id_header) or "").strip()
    if not vendor_id:
        raise ErrorResponse(
            f"Missing {config.vendor_id_header} header",
            status_code=401,
            details={"field": config.vendor_id_header},
        )
    if to_object_id(vendor_id) is None:
        raise ErrorResponse(
            "Invalid vendor id",
            status_code=401,
            details={"field": config.vendor_id_header, "value": vendor_id},
        )
    return vendor_id
