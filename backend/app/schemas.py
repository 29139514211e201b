"""
BrandColor API Schemas
Pydantic models for resolution results and HTTP responses.
"""
from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field


HEX_PATTERN = r"^#[0-9A-F]{6}$"


class BrandColorResult(BaseModel):
    """
    Primary/secondary color pair resolved for one domain.

    Either field may be absent; absence means "not determined".
    """
    model_config = ConfigDict(frozen=True)

    primary: Optional[str] = Field(
        None,
        pattern=HEX_PATTERN,
        description="Primary brand color as #RRGGBB"
    )
    secondary: Optional[str] = Field(
        None,
        pattern=HEX_PATTERN,
        description="Secondary brand color as #RRGGBB"
    )

    @property
    def is_empty(self) -> bool:
        return self.primary is None and self.secondary is None

    def as_dict(self) -> Dict[str, str]:
        """Populated fields only, for merging into a brand profile record."""
        return self.model_dump(exclude_none=True)


class BrandColorResponse(BaseModel):
    """Response for a single-domain resolution."""
    domain: str = Field(..., description="Domain the colors were resolved for")
    primary: Optional[str] = Field(None, description="Primary brand color, if found")
    secondary: Optional[str] = Field(None, description="Secondary brand color, if found")


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("brandcolor-resolver", description="Service name")


class MetricsResponse(BaseModel):
    """In-process metrics summary."""
    uptime_seconds: float
    counters: Dict[str, int]
    timing_stats: Dict[str, Dict[str, Any]]

