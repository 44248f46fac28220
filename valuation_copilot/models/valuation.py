from dataclasses import dataclass, field
from typing import Dict, Any, Tuple

from ..core.config import Sector, Region, RISK_CATEGORIES, RISK_SCORE_RANGE


@dataclass(frozen=True)
class ValuationContext:
    """Sector and region the smart defaults are keyed on."""
    sector: Sector = Sector.SAAS
    region: Region = Region.US_TIER1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sector": self.sector.value,
            "region": self.region.value
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ValuationContext':
        return cls(
            sector=Sector(data["sector"]),
            region=Region(data["region"])
        )


@dataclass(frozen=True)
class BerkusInputs:
    """Dollar value credited to each of the five Berkus milestones."""
    idea_value: float = 0.0
    prototype_value: float = 0.0
    team_value: float = 0.0
    relationships_value: float = 0.0
    sales_value: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ideaValue": self.idea_value,
            "prototypeValue": self.prototype_value,
            "teamValue": self.team_value,
            "relationshipsValue": self.relationships_value,
            "salesValue": self.sales_value
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BerkusInputs':
        return cls(
            idea_value=data["ideaValue"],
            prototype_value=data["prototypeValue"],
            team_value=data["teamValue"],
            relationships_value=data["relationshipsValue"],
            sales_value=data["salesValue"]
        )


@dataclass(frozen=True)
class ScorecardInputs:
    """Market median plus seven relative-strength multipliers (1.0 = at market)."""
    market_average: float = 10_000_000
    team_score: float = 1.0
    opportunity_score: float = 1.0
    product_score: float = 1.0
    competition_score: float = 1.0
    marketing_score: float = 1.0
    investment_need_score: float = 1.0
    other_score: float = 1.0

    def scores(self) -> Dict[str, float]:
        """Scores keyed by the weight names used in ``ScorecardWeights``."""
        return {
            "team": self.team_score,
            "opportunity": self.opportunity_score,
            "product": self.product_score,
            "competition": self.competition_score,
            "marketing": self.marketing_score,
            "investment_need": self.investment_need_score,
            "other": self.other_score
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "marketAverage": self.market_average,
            "teamScore": self.team_score,
            "opportunityScore": self.opportunity_score,
            "productScore": self.product_score,
            "competitionScore": self.competition_score,
            "marketingScore": self.marketing_score,
            "investmentNeedScore": self.investment_need_score,
            "otherScore": self.other_score
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScorecardInputs':
        return cls(
            market_average=data["marketAverage"],
            team_score=data["teamScore"],
            opportunity_score=data["opportunityScore"],
            product_score=data["productScore"],
            competition_score=data["competitionScore"],
            marketing_score=data["marketingScore"],
            investment_need_score=data["investmentNeedScore"],
            other_score=data["otherScore"]
        )


@dataclass(frozen=True)
class RiskFactorInputs:
    """Base valuation adjusted by a fixed amount per point across the risk categories.

    ``risk_scores`` holds one score in [-2, +2] per entry of ``RISK_CATEGORIES``,
    in the same order.
    """
    base_valuation: float = 10_000_000
    risk_scores: Tuple[int, ...] = field(default_factory=lambda: (0,) * len(RISK_CATEGORIES))
    adjustment_per_point: float = 250_000

    def __post_init__(self):
        scores = tuple(self.risk_scores)
        if len(scores) != len(RISK_CATEGORIES):
            raise ValueError(
                f"Expected {len(RISK_CATEGORIES)} risk scores, got {len(scores)}"
            )
        object.__setattr__(self, "risk_scores", scores)

    def with_score(self, category: str, score: int) -> 'RiskFactorInputs':
        """Copy of these inputs with the score for ``category`` replaced."""
        index = RISK_CATEGORIES.index(category)
        scores = list(self.risk_scores)
        scores[index] = score
        return RiskFactorInputs(
            base_valuation=self.base_valuation,
            risk_scores=tuple(scores),
            adjustment_per_point=self.adjustment_per_point
        )

    @staticmethod
    def score_options() -> Tuple[int, ...]:
        """Every whole score a category can take, lowest first."""
        low, high = RISK_SCORE_RANGE
        return tuple(range(low, high + 1))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "baseValuation": self.base_valuation,
            "riskScores": list(self.risk_scores),
            "adjustmentPerPoint": self.adjustment_per_point
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RiskFactorInputs':
        return cls(
            base_valuation=data["baseValuation"],
            risk_scores=tuple(data["riskScores"]),
            adjustment_per_point=data["adjustmentPerPoint"]
        )


@dataclass(frozen=True)
class VCMethodInputs:
    exit_revenue: float = 10_000_000
    exit_multiple: float = 12
    required_roi: float = 20
    investment_amount: float = 2_000_000

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exitRevenue": self.exit_revenue,
            "exitMultiple": self.exit_multiple,
            "requiredROI": self.required_roi,
            "investmentAmount": self.investment_amount
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VCMethodInputs':
        return cls(
            exit_revenue=data["exitRevenue"],
            exit_multiple=data["exitMultiple"],
            required_roi=data["requiredROI"],
            investment_amount=data["investmentAmount"]
        )


@dataclass(frozen=True)
class VCResult:
    pre_money: float
    post_money: float
    terminal_value: float

    @property
    def is_negative(self) -> bool:
        """True when the ROI target cannot be met at this investment size."""
        return self.pre_money < 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "preMoney": self.pre_money,
            "postMoney": self.post_money,
            "terminalValue": self.terminal_value
        }


@dataclass(frozen=True)
class CostToDuplicateInputs:
    labor_cost: float = 0.0
    ip_cost: float = 0.0
    equipment_cost: float = 0.0
    opportunity_cost_percent: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "laborCost": self.labor_cost,
            "ipCost": self.ip_cost,
            "equipmentCost": self.equipment_cost,
            "opportunityCostPercent": self.opportunity_cost_percent
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CostToDuplicateInputs':
        return cls(
            labor_cost=data["laborCost"],
            ip_cost=data["ipCost"],
            equipment_cost=data["equipmentCost"],
            opportunity_cost_percent=data["opportunityCostPercent"]
        )


@dataclass(frozen=True)
class BerkusDefaults:
    idea_cap: float
    tech_cap: float
    team_cap: float


@dataclass(frozen=True)
class VCDefaults:
    exit_multiple: float
    roi_target: float


@dataclass(frozen=True)
class ScorecardWeights:
    team: float
    opportunity: float
    product: float
    competition: float
    marketing: float
    investment_need: float
    other: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "team": self.team,
            "opportunity": self.opportunity,
            "product": self.product,
            "competition": self.competition,
            "marketing": self.marketing,
            "investment_need": self.investment_need,
            "other": self.other
        }

    @property
    def total(self) -> float:
        return sum(self.to_dict().values())


@dataclass(frozen=True)
class SmartDefaults:
    """Methodology parameters derived from a ``ValuationContext``."""
    berkus: BerkusDefaults
    vc: VCDefaults
    scorecard: ScorecardWeights


@dataclass(frozen=True)
class TriangulationSummary:
    berkus: float
    scorecard: float
    risk_factor: float
    vc_method: float
    cost_to_duplicate: float
    average: float
    low: float
    high: float
    gut_check_adjustment: float = 0.0

    @property
    def floor(self) -> float:
        """Cost-to-duplicate is reported as the floor, not averaged in."""
        return self.cost_to_duplicate

    @property
    def adjusted_average(self) -> float:
        return self.average + self.gut_check_adjustment

    def method_values(self) -> Dict[str, float]:
        return {
            "Berkus": self.berkus,
            "Scorecard": self.scorecard,
            "Risk Factor": self.risk_factor,
            "VC Method": self.vc_method,
            "Cost Base": self.cost_to_duplicate
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "methods": self.method_values(),
            "average": self.average,
            "recommended_range": {"low": self.low, "high": self.high},
            "floor": self.floor,
            "gut_check_adjustment": self.gut_check_adjustment,
            "adjusted_average": self.adjusted_average
        }
