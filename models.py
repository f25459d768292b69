"""Pydantic models for the Hotel Records Scraper"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Tuple


class HotelRecord(BaseModel):
    """One hotel as extracted from its detail page"""
    url: str = Field(..., description="Canonical detail-page address")
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "url": "https://www.marriott.com/en-us/hotels/deljw-jw-marriott-hotel-new-delhi-aerocity/overview/",
                "name": "JW Marriott Hotel New Delhi Aerocity",
                "address": "Asset Area 4, Hospitality District, Delhi, 110037 India",
                "phone": "+91 11 4521 2121",
                "email": None,
                "latitude": 28.5529,
                "longitude": 77.1196
            }
        }


class ListingCandidate(BaseModel):
    """A hotel card read from a dynamically rendered search page"""
    index: int = Field(..., ge=1, description="1-based position in the listing")
    name: str
    property_code: str = Field(..., description="Site-assigned code (MARSHA) used in the detail URL")
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    class Config:
        frozen = True


class RetryPolicy(BaseModel):
    """Bounded retry with linear backoff"""
    max_attempts: int = Field(3, ge=1)
    base_delay: float = Field(6.0, ge=0.0, description="Seconds slept after the first failed attempt")
    request_timeout: float = Field(30.0, gt=0.0, description="Per-attempt timeout in seconds")
    backoff_multiplier: float = Field(1.0, ge=0.0)
    jitter: Optional[Tuple[float, float]] = Field(None, description="Uniform extra delay range in seconds")

    @model_validator(mode="after")
    def _check_jitter(self):
        if self.jitter is not None:
            low, high = self.jitter
            if low < 0 or high < low:
                raise ValueError("jitter must be a (low, high) range with 0 <= low <= high")
        return self

    def delay_for(self, attempt: int) -> float:
        """Backoff slept after attempt number `attempt` (1-based), jitter excluded."""
        return self.base_delay * self.backoff_multiplier * attempt


class ReadinessWait(BaseModel):
    """Polling rules for pages that render their content asynchronously"""
    loading_selector: str
    content_selector: str
    poll_interval: float = Field(2.0, gt=0.0)
    timeout: float = Field(40.0, gt=0.0)


class HotelSearchRequest(BaseModel):
    """Request model for a dynamic (search page) scrape"""
    city: str = Field(..., min_length=1)
    country: str = Field(..., min_length=2, description="ISO country code")
    check_in: str = Field(..., description="Check-in date YYYY-MM-DD")
    check_out: str = Field(..., description="Check-out date YYYY-MM-DD")
    headless: bool = True

    class Config:
        json_schema_extra = {
            "example": {
                "city": "Delhi",
                "country": "IN",
                "check_in": "2025-09-29",
                "check_out": "2025-09-30",
                "headless": True
            }
        }


class ListingCrawlRequest(BaseModel):
    """Request model for a static listing page scrape"""
    url: str = Field(..., description="Listing page to discover detail links from")


class ScrapeResponse(BaseModel):
    """Records collected by one run"""
    source: str
    listing_url: str
    total: int
    records: List[HotelRecord]
    processing_time_seconds: Optional[float] = None


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    browser_headless: bool
    max_attempts: int
