"""Request/response schemas for the prediction gateway."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class PredictionRequest(BaseModel):
    specs: str = Field(..., description="Free-text product description")


class PriceRange(BaseModel):
    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)

    @model_validator(mode="after")
    def check_order(self) -> "PriceRange":
        if self.min > self.max:
            raise ValueError("range_inr.min must not exceed range_inr.max")
        return self


class PredictionResult(BaseModel):
    predicted_price_inr: float = Field(..., ge=0)
    range_inr: PriceRange
    confidence: float = Field(..., ge=0, le=1)
    product: str
    category: str
    specs_extracted: Dict[str, str] = Field(default_factory=dict)
    explanation_bullets: List[str] = Field(..., min_length=3, max_length=8)
    anomalies: List[str] = Field(default_factory=list)
    market_sources: List[str] = Field(default_factory=list)
    last_updated: Optional[str] = Field(default=None, description="ISO-8601 timestamp")


class ErrorEnvelope(BaseModel):
    error: str
    code: Optional[str] = None
    details: Optional[str] = None
    raw_response: Optional[str] = Field(default=None, max_length=200)
    allowed_methods: Optional[List[str]] = None
