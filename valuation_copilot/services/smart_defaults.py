from typing import Dict

from ..core.cache import cache_result
from ..core.config import Sector, Region, CACHE_TTL_SECONDS, BERKUS_SEED_RELATIONSHIPS
from ..models.valuation import (
    ValuationContext,
    BerkusInputs,
    BerkusDefaults,
    VCDefaults,
    ScorecardWeights,
    SmartDefaults
)


@cache_result(ttl_seconds=CACHE_TTL_SECONDS)
def get_smart_defaults(context: ValuationContext) -> SmartDefaults:
    """Resolve methodology caps, multiples and weights for a sector/region.

    AI gets higher idea/tech caps, exit multiples and ROI targets; Tier 1
    talent raises the team cap; Consumer shifts weight onto marketing.
    """
    is_ai = context.sector == Sector.AI_DEEPTECH
    is_tier1 = context.region == Region.US_TIER1

    if is_ai:
        exit_multiple = 25
    elif context.sector == Sector.SAAS:
        exit_multiple = 12
    else:
        exit_multiple = 8

    return SmartDefaults(
        berkus=BerkusDefaults(
            idea_cap=2_000_000 if is_ai else 1_500_000,
            tech_cap=3_000_000 if is_ai else 2_000_000,
            team_cap=3_500_000 if is_tier1 else 3_000_000,
        ),
        vc=VCDefaults(
            exit_multiple=exit_multiple,
            roi_target=30 if is_ai else 20,
        ),
        scorecard=ScorecardWeights(
            team=0.30,
            opportunity=0.30 if is_ai else 0.25,
            product=0.20 if is_ai else 0.15,
            competition=0.10,
            marketing=0.20 if context.sector == Sector.CONSUMER else 0.10,
            investment_need=0.05,
            other=0.05,
        ),
    )


def seed_berkus_inputs(defaults: SmartDefaults) -> BerkusInputs:
    """Starting Berkus values: half of each cap, a fixed relationships credit, no sales."""
    return BerkusInputs(
        idea_value=defaults.berkus.idea_cap / 2,
        prototype_value=defaults.berkus.tech_cap / 2,
        team_value=defaults.berkus.team_cap / 2,
        relationships_value=BERKUS_SEED_RELATIONSHIPS,
        sales_value=0,
    )


def berkus_input_limits(defaults: SmartDefaults, inputs: BerkusInputs) -> Dict[str, float]:
    """Upper bounds for editing the capped Berkus milestones.

    Caps are advisory: a stored value above its cap (e.g. from a loaded deal)
    raises the bound instead of being clipped to it.
    """
    return {
        "idea_value": max(defaults.berkus.idea_cap, inputs.idea_value),
        "prototype_value": max(defaults.berkus.tech_cap, inputs.prototype_value),
        "team_value": max(defaults.berkus.team_cap, inputs.team_value),
    }
