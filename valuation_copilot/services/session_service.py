import json
import logging
import uuid
from dataclasses import replace
from datetime import date
from typing import Any, Dict, List, Optional

from ..core.config import (
    DEAL_INDEX_KEY,
    DEAL_KEY_PREFIX,
    INITIAL_SCORECARD,
    INITIAL_VC,
    INITIAL_COST_TO_DUPLICATE,
    VALUATION_DEFAULTS
)
from ..core.database import KeyValueStore
from ..models.conversation import GutCheckResult
from ..models.deal import DealRecord, DealSummary
from ..models.valuation import (
    ValuationContext,
    BerkusInputs,
    ScorecardInputs,
    RiskFactorInputs,
    VCMethodInputs,
    VCResult,
    CostToDuplicateInputs,
    SmartDefaults,
    TriangulationSummary
)
from ..utils.validation import validate_snapshot
from .smart_defaults import get_smart_defaults, seed_berkus_inputs
from .valuation_service import (
    calculate_berkus,
    calculate_scorecard,
    calculate_risk_factor,
    calculate_vc,
    calculate_cost_to_duplicate,
    generate_sensitivity_analysis,
    triangulate
)

logger = logging.getLogger(__name__)


class DealRepository:
    """Named deal snapshots over an opaque key/value store.

    The index of ``{id, name, date}`` entries lives under its own key so deals
    can be listed without loading their payloads.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def list_deals(self) -> List[DealSummary]:
        raw = self.store.get(DEAL_INDEX_KEY)
        if not raw:
            return []
        try:
            return [DealSummary.from_dict(entry) for entry in json.loads(raw)]
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning("Saved deal index is unreadable: %s", e)
            return []

    def save(self, name: str, data: Dict[str, Any]) -> DealRecord:
        record = DealRecord(
            id=uuid.uuid4().hex,
            name=name,
            date=date.today().isoformat(),
            data=data
        )
        self.store.set(f"{DEAL_KEY_PREFIX}{record.id}", json.dumps(record.to_dict()))

        index = self.list_deals() + [record.summary]
        self.store.set(DEAL_INDEX_KEY, json.dumps([entry.to_dict() for entry in index]))
        logger.info("Saved deal %r as %s", name, record.id)
        return record

    def load(self, deal_id: str) -> Optional[DealRecord]:
        raw = self.store.get(f"{DEAL_KEY_PREFIX}{deal_id}")
        if raw is None:
            logger.warning("No saved deal with id %s", deal_id)
            return None
        try:
            record = DealRecord.from_dict(json.loads(raw))
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning("Saved deal %s is malformed: %s", deal_id, e)
            return None
        if not validate_snapshot(record.data):
            logger.warning("Saved deal %s is missing snapshot fields", deal_id)
            return None
        return record


class ValuationSession:
    """Holds every methodology input and the sector/region context for one user.

    Reads go through properties; writes go through the ``set_*`` methods, which
    replace the whole object. A sector change re-applies the VC smart defaults
    and seeds Berkus if it has not been filled in yet.
    """

    def __init__(self, repository: Optional[DealRepository] = None,
                 context: Optional[ValuationContext] = None):
        self.repository = repository
        self._context = context or ValuationContext()

        defaults = get_smart_defaults(self._context)
        self._berkus_inputs = seed_berkus_inputs(defaults)
        self._scorecard_inputs = ScorecardInputs(**INITIAL_SCORECARD)
        self._vc_inputs = VCMethodInputs(
            exit_multiple=defaults.vc.exit_multiple,
            required_roi=defaults.vc.roi_target,
            **INITIAL_VC
        )
        self._risk_factor_inputs = RiskFactorInputs(
            base_valuation=VALUATION_DEFAULTS["market_median"],
            adjustment_per_point=VALUATION_DEFAULTS["risk_adjustment_step"]
        )
        self._cost_to_duplicate_inputs = CostToDuplicateInputs(**INITIAL_COST_TO_DUPLICATE)
        self._gut_check: Optional[GutCheckResult] = None

    # --- Context ---
    @property
    def context(self) -> ValuationContext:
        return self._context

    def set_context(self, context: ValuationContext) -> None:
        _check_type(context, ValuationContext)
        sector_changed = context.sector != self._context.sector
        self._context = context
        if sector_changed:
            self._apply_sector_defaults()

    def _apply_sector_defaults(self) -> None:
        defaults = self.smart_defaults
        self._vc_inputs = replace(
            self._vc_inputs,
            exit_multiple=defaults.vc.exit_multiple,
            required_roi=defaults.vc.roi_target
        )
        if self._berkus_inputs.idea_value == 0 and self._berkus_inputs.team_value == 0:
            self._berkus_inputs = seed_berkus_inputs(defaults)

    @property
    def smart_defaults(self) -> SmartDefaults:
        return get_smart_defaults(self._context)

    # --- Inputs ---
    @property
    def berkus_inputs(self) -> BerkusInputs:
        return self._berkus_inputs

    def set_berkus_inputs(self, inputs: BerkusInputs) -> None:
        _check_type(inputs, BerkusInputs)
        self._berkus_inputs = inputs

    @property
    def scorecard_inputs(self) -> ScorecardInputs:
        return self._scorecard_inputs

    def set_scorecard_inputs(self, inputs: ScorecardInputs) -> None:
        _check_type(inputs, ScorecardInputs)
        self._scorecard_inputs = inputs

    @property
    def vc_inputs(self) -> VCMethodInputs:
        return self._vc_inputs

    def set_vc_inputs(self, inputs: VCMethodInputs) -> None:
        _check_type(inputs, VCMethodInputs)
        self._vc_inputs = inputs

    @property
    def risk_factor_inputs(self) -> RiskFactorInputs:
        return self._risk_factor_inputs

    def set_risk_factor_inputs(self, inputs: RiskFactorInputs) -> None:
        _check_type(inputs, RiskFactorInputs)
        self._risk_factor_inputs = inputs

    @property
    def cost_to_duplicate_inputs(self) -> CostToDuplicateInputs:
        return self._cost_to_duplicate_inputs

    def set_cost_to_duplicate_inputs(self, inputs: CostToDuplicateInputs) -> None:
        _check_type(inputs, CostToDuplicateInputs)
        self._cost_to_duplicate_inputs = inputs

    @property
    def gut_check(self) -> Optional[GutCheckResult]:
        return self._gut_check

    def set_gut_check(self, result: Optional[GutCheckResult]) -> None:
        if result is not None:
            _check_type(result, GutCheckResult)
        self._gut_check = result

    # --- Valuations ---
    @property
    def berkus_valuation(self) -> float:
        return calculate_berkus(self._berkus_inputs)

    @property
    def scorecard_valuation(self) -> float:
        return calculate_scorecard(self._scorecard_inputs, self._context)

    @property
    def vc_result(self) -> VCResult:
        return calculate_vc(self._vc_inputs)

    @property
    def vc_valuation(self) -> float:
        return self.vc_result.pre_money

    @property
    def risk_factor_valuation(self) -> float:
        return calculate_risk_factor(self._risk_factor_inputs)

    @property
    def cost_to_duplicate_valuation(self) -> float:
        return calculate_cost_to_duplicate(self._cost_to_duplicate_inputs)

    def triangulation(self) -> TriangulationSummary:
        adjustment = self._gut_check.suggested_adjustment if self._gut_check else 0.0
        return triangulate(
            berkus=self.berkus_valuation,
            scorecard=self.scorecard_valuation,
            risk_factor=self.risk_factor_valuation,
            vc_method=self.vc_valuation,
            cost_to_duplicate=self.cost_to_duplicate_valuation,
            gut_check_adjustment=adjustment
        )

    def sensitivity(self) -> List[List[float]]:
        return generate_sensitivity_analysis(self._vc_inputs)

    def gateway_context(self) -> Dict[str, Any]:
        """Context payload sent along with questions to the AI gateway."""
        return {
            **self._context.to_dict(),
            "vcInputs": self._vc_inputs.to_dict(),
            "scorecardInputs": self._scorecard_inputs.to_dict()
        }

    # --- Snapshots ---
    def snapshot(self) -> Dict[str, Any]:
        return {
            "context": self._context.to_dict(),
            "berkusInputs": self._berkus_inputs.to_dict(),
            "scorecardInputs": self._scorecard_inputs.to_dict(),
            "vcInputs": self._vc_inputs.to_dict(),
            "riskFactorValuation": self.risk_factor_valuation,
            "costToDuplicateValuation": self.cost_to_duplicate_valuation,
            "riskFactorInputs": self._risk_factor_inputs.to_dict(),
            "costToDuplicateInputs": self._cost_to_duplicate_inputs.to_dict(),
            "gutCheck": self._gut_check.to_dict() if self._gut_check else None
        }

    def restore(self, data: Dict[str, Any]) -> None:
        """Replace every field from a snapshot; sector defaults are not re-applied."""
        if not validate_snapshot(data):
            raise ValueError("Snapshot is missing required fields")

        context = ValuationContext.from_dict(data["context"])
        berkus_inputs = BerkusInputs.from_dict(data["berkusInputs"])
        scorecard_inputs = ScorecardInputs.from_dict(data["scorecardInputs"])
        vc_inputs = VCMethodInputs.from_dict(data["vcInputs"])

        if "riskFactorInputs" in data:
            risk_factor_inputs = RiskFactorInputs.from_dict(data["riskFactorInputs"])
        else:
            # Older snapshots only carry the scalar; rebuild inputs that reproduce it
            risk_factor_inputs = RiskFactorInputs(
                base_valuation=data["riskFactorValuation"],
                adjustment_per_point=VALUATION_DEFAULTS["risk_adjustment_step"]
            )
        if "costToDuplicateInputs" in data:
            cost_to_duplicate_inputs = CostToDuplicateInputs.from_dict(data["costToDuplicateInputs"])
        else:
            cost_to_duplicate_inputs = CostToDuplicateInputs(labor_cost=data["costToDuplicateValuation"])

        # The gut check belongs to the deal it was run on
        gut_check = GutCheckResult.from_dict(data["gutCheck"]) if data.get("gutCheck") else None

        self._context = context
        self._berkus_inputs = berkus_inputs
        self._scorecard_inputs = scorecard_inputs
        self._vc_inputs = vc_inputs
        self._risk_factor_inputs = risk_factor_inputs
        self._cost_to_duplicate_inputs = cost_to_duplicate_inputs
        self._gut_check = gut_check

    # --- Deals ---
    def _require_repository(self) -> DealRepository:
        if self.repository is None:
            raise RuntimeError("This session has no deal repository configured")
        return self.repository

    def save_deal(self, name: str) -> DealSummary:
        return self._require_repository().save(name, self.snapshot()).summary

    def load_deal(self, deal_id: str) -> bool:
        record = self._require_repository().load(deal_id)
        if record is None:
            return False
        try:
            self.restore(record.data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Could not restore deal %s: %s", deal_id, e)
            return False
        logger.info("Loaded deal %r", record.name)
        return True

    def saved_deals(self) -> List[DealSummary]:
        return self._require_repository().list_deals()


def _check_type(value, expected):
    if not isinstance(value, expected):
        raise TypeError(f"Expected {expected.__name__}, got {type(value).__name__}")
