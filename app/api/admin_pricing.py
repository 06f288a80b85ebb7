import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.pricing import PricingRuleCreate, PricingRuleUpdate
from app.core.audit_decorator import audit_log
from app.core.auth_utils import check_not_found, rate_limited_admin
from app.core.enums import AuditAction
from app.core.response_builders import success_response
from app.services import pricing

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin/pricing", tags=["admin"])


@router.get("/rules")
async def list_pricing_rules(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    rules = await pricing.list_rules(db)
    return success_response({"rules": rules, "total": len(rules)})


@router.post("/rules")
@audit_log(AuditAction.CREATE_PRICING_RULE, "pricing_rules")
async def create_pricing_rule(
    payload: PricingRuleCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    rule = await pricing.create_rule(db, payload)
    await db.commit()
    logger.info(f"Pricing rule {rule.id} created by user {current_user.id}")
    return success_response(rule, "Pricing rule created successfully")


@router.put("/rules/{rule_id}")
@audit_log(AuditAction.UPDATE_PRICING_RULE, "pricing_rules")
async def update_pricing_rule(
    rule_id: str,
    update: PricingRuleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    rule = await pricing.update_rule(db, rule_id, update)
    check_not_found(rule, "Pricing rule", rule_id)
    await db.commit()
    return success_response(rule, "Pricing rule updated successfully")


@router.get("/suggestions")
async def get_pricing_suggestions(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    suggestions = await pricing.pricing_suggestions(db)
    return success_response({"suggestions": suggestions, "total": len(suggestions)})
