"""
BrandColor v1 API Routes
Implements /v1/brand-colors and supporting routes.
"""
from typing import Optional

from fastapi import APIRouter, Query

from app.schemas import BrandColorResponse, MetricsResponse
from app.services.brand.resolver import resolve_brand_colors
from app.services.reliability import Deadline
from app.utils.metrics import get_metrics

router = APIRouter(prefix="/v1", tags=["Brand Colors"])


@router.get("/brand-colors",
            response_model=BrandColorResponse,
            response_model_exclude_none=True,
            summary="Resolve Brand Colors",
            description="Derive primary and secondary brand colors from a domain")
def get_brand_colors(
    domain: str = Query(..., min_length=1, max_length=253, description="Bare hostname, e.g. nike.com"),
    timeout_s: Optional[float] = Query(None, gt=0, le=60, description="Overall deadline in seconds")
):
    """
    Resolve brand colors for a domain.

    - **domain**: hostname without scheme or path
    - **timeout_s**: optional cap on total fetch time

    Always returns 200; fields that could not be determined are omitted.
    """
    domain = domain.strip().lower()
    deadline = Deadline(timeout_s) if timeout_s else None
    result = resolve_brand_colors(domain, deadline=deadline)
    return BrandColorResponse(domain=domain, **result.as_dict())


@router.get("/metrics", response_model=MetricsResponse)
def brand_color_metrics():
    """In-process resolution metrics."""
    return get_metrics().get_summary()

