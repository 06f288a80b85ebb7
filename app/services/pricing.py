import logging
import math
import secrets
import time
from collections import defaultdict
from datetime import datetime, timezone
from typing import Optional, List, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from app.core.enums import VehicleStatus, MarketPosition
from app.models.base import as_utc
from app.models.vehicle import Vehicle
from app.schemas.pricing import PricingRule, PricingRuleCreate, PricingRuleUpdate, PriceSuggestion
from app.services import settings_store

logger = logging.getLogger(__name__)

RULE_PREFIX = "pricing_rule."
RULE_CATEGORY = "pricing_rules"

SUGGESTION_SAMPLE = 20
SUGGESTION_LIMIT = 10
MARKET_DEVIATION_PCT = 15.0
PREMIUM_FACTOR = 1.05
COMPETITIVE_FACTOR = 0.98
STALE_LISTING_DAYS = 60
STALE_LISTING_FACTOR = 0.95
HIGH_MILEAGE = 100000
HIGH_MILEAGE_FACTOR = 0.92
PRICE_STEP = 500


def _rule_key(rule_id: str) -> str:
    return f"{RULE_PREFIX}{rule_id}"


async def list_rules(db: AsyncSession) -> List[PricingRule]:
    documents = await settings_store.list_documents(db, RULE_PREFIX, RULE_CATEGORY)
    rules = []
    for document in documents:
        try:
            rules.append(PricingRule.model_validate(document))
        except ValueError as e:
            logger.warning(f"Skipping malformed pricing rule {document.get('id')}: {e}")
    return sorted(rules, key=lambda r: r.priority)


async def create_rule(db: AsyncSession, payload: PricingRuleCreate) -> PricingRule:
    rule = PricingRule(
        id=f"rule_{int(time.time() * 1000)}_{secrets.token_hex(5)}",
        name=payload.name,
        condition=payload.condition,
        adjustment=payload.adjustment,
        adjustment_type=payload.adjustment_type,
        priority=payload.priority,
        is_active=True,
        created_at=datetime.now(timezone.utc),
    )
    await settings_store.put_document(db, _rule_key(rule.id), rule.model_dump(mode="json"), RULE_CATEGORY)
    return rule


async def update_rule(db: AsyncSession, rule_id: str, payload: PricingRuleUpdate) -> Optional[PricingRule]:
    document = await settings_store.get_document(db, _rule_key(rule_id))
    if document is None:
        return None
    merged = {
        **document,
        **payload.model_dump(mode="json", exclude_unset=True, exclude_none=True),
        "id": rule_id,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    rule = PricingRule.model_validate(merged)
    await settings_store.put_document(db, _rule_key(rule_id), rule.model_dump(mode="json"), RULE_CATEGORY)
    return rule


def market_key(make: str, model: str, year: int) -> str:
    """Vehicles are grouped by make, model and two-year bucket."""
    return f"{make}_{model}_{(year // 2) * 2}"


async def market_averages(db: AsyncSession) -> Dict[str, float]:
    res = await db.execute(
        select(Vehicle.make, Vehicle.model, Vehicle.year, Vehicle.price)
        .where(Vehicle.status.in_([VehicleStatus.AVAILABLE, VehicleStatus.SOLD]))
    )
    groups: Dict[str, List[int]] = defaultdict(list)
    for make, model, year, price in res.all():
        groups[market_key(make, model, year)].append(price)
    return {key: sum(prices) / len(prices) for key, prices in groups.items()}


def round_to_step(value: float, step: int = PRICE_STEP) -> int:
    # half rounds up
    return int(math.floor(value / step + 0.5) * step)


def suggest_price(vehicle: Vehicle, market_avg: float, now: datetime) -> Optional[PriceSuggestion]:
    """Price suggestion for one vehicle, or None when the change is not meaningful."""
    suggested = market_avg
    reasoning = ""
    confidence = 70

    price_diff = (vehicle.price - market_avg) / market_avg * 100
    if abs(price_diff) > MARKET_DEVIATION_PCT:
        if price_diff > 0:
            suggested = market_avg * PREMIUM_FACTOR
            reasoning = (
                f"Current price is {abs(price_diff):.1f}% above market average. "
                "Adjusting to maintain premium positioning while improving competitiveness."
            )
        else:
            suggested = market_avg * COMPETITIVE_FACTOR
            reasoning = (
                f"Current price is {abs(price_diff):.1f}% below market average. "
                "Slight increase recommended to maximize profit while staying competitive."
            )
        confidence = 85

    days_on_market = (now - as_utc(vehicle.created_at)).days
    if days_on_market > STALE_LISTING_DAYS:
        suggested *= STALE_LISTING_FACTOR
        reasoning += (
            f" Vehicle has been on market for {days_on_market} days. "
            "Price reduction recommended to increase buyer interest."
        )
        confidence = min(confidence + 10, 95)

    if vehicle.mileage > HIGH_MILEAGE:
        suggested *= HIGH_MILEAGE_FACTOR
        reasoning += " High mileage adjustment applied."

    if vehicle.price > market_avg * 1.1:
        position = MarketPosition.ABOVE
    elif vehicle.price < market_avg * 0.9:
        position = MarketPosition.BELOW
    else:
        position = MarketPosition.COMPETITIVE

    suggested_price = round_to_step(suggested)
    if abs(suggested_price - vehicle.price) < PRICE_STEP:
        return None

    return PriceSuggestion(
        vehicle_id=vehicle.id,
        vehicle_name=f"{vehicle.make} {vehicle.model} {vehicle.year}",
        current_price=vehicle.price,
        suggested_price=suggested_price,
        reasoning=reasoning.strip() or "Price optimization based on market analysis.",
        confidence=confidence,
        market_position=position,
        market_average=round(market_avg, 2),
        days_on_market=days_on_market,
    )


async def pricing_suggestions(db: AsyncSession, now: Optional[datetime] = None) -> List[PriceSuggestion]:
    now = now or datetime.now(timezone.utc)
    res = await db.execute(
        select(Vehicle)
        .where(Vehicle.status == VehicleStatus.AVAILABLE)
        .order_by(Vehicle.id)
        .limit(SUGGESTION_SAMPLE)
    )
    vehicles = res.scalars().all()
    averages = await market_averages(db)

    suggestions = []
    for vehicle in vehicles:
        market_avg = averages.get(market_key(vehicle.make, vehicle.model, vehicle.year), vehicle.price)
        suggestion = suggest_price(vehicle, market_avg, now)
        if suggestion:
            suggestions.append(suggestion)

    suggestions.sort(key=lambda s: abs(s.suggested_price - s.current_price), reverse=True)
    return suggestions[:SUGGESTION_LIMIT]
