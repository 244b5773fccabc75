"""
Public site API routes
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from storefront.config.settings import get_settings
from storefront.services.backend_client import BackendAPIError, BackendClient
from storefront.services.service_factory import get_backend_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["site"])


class SiteSettingsResponse(BaseModel):
    logo: str


@router.get("/site-settings", response_model=SiteSettingsResponse)
async def site_settings(backend: BackendClient = Depends(get_backend_client)):
    """Logo from the backend, the bundled logo when unavailable"""
    logo = get_settings().DEFAULT_LOGO_URL
    try:
        data = await backend.get_site_settings()
        if data.get("logo"):
            logo = data["logo"]
    except (BackendAPIError, ValueError) as e:
        logger.error(f"Error fetching settings: {e}")
    return SiteSettingsResponse(logo=logo)


class EnquiryRequest(BaseModel):
    """Contact page / product enquiry form"""
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    phone: str = ""
    message: str = Field(..., min_length=1)
    product_id: Optional[str] = Field(None, alias="productId")

    class Config:
        populate_by_name = True


@router.post("/enquiries", status_code=201)
async def submit_enquiry(
    req: EnquiryRequest,
    backend: BackendClient = Depends(get_backend_client)
):
    """Public enquiry; forwarded without admin credentials"""
    try:
        await backend.submit_enquiry(req.model_dump(by_alias=True, exclude_none=True))
    except BackendAPIError as e:
        logger.error(f"Enquiry error: {e}")
        raise HTTPException(status_code=502, detail="Failed to send enquiry. Please try again.")

    logger.info(f"Enquiry submitted (product={req.product_id})")
    return {"status": "sent"}
