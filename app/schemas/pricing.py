from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from app.core.enums import AdjustmentType, MarketPosition


class PricingRuleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    condition: dict
    adjustment: float
    adjustment_type: AdjustmentType
    priority: int = 100


class PricingRuleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    condition: Optional[dict] = None
    adjustment: Optional[float] = None
    adjustment_type: Optional[AdjustmentType] = None
    priority: Optional[int] = None
    is_active: Optional[bool] = None


class PricingRule(BaseModel):
    id: str
    name: str
    condition: dict
    adjustment: float
    adjustment_type: AdjustmentType
    priority: int = 100
    is_active: bool = True
    created_at: datetime
    updated_at: Optional[datetime] = None


class PriceSuggestion(BaseModel):
    vehicle_id: int
    vehicle_name: str
    current_price: int
    suggested_price: int
    reasoning: str
    confidence: int
    market_position: MarketPosition
    market_average: float
    days_on_market: int
