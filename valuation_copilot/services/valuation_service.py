from typing import List, Optional

import pandas as pd

from ..core.config import DEFAULT_SCORECARD_WEIGHTS, SENSITIVITY_FACTORS
from ..models.valuation import (
    ValuationContext,
    BerkusInputs,
    ScorecardInputs,
    RiskFactorInputs,
    VCMethodInputs,
    VCResult,
    CostToDuplicateInputs,
    TriangulationSummary
)
from .smart_defaults import get_smart_defaults


def _divide(numerator, denominator):
    # IEEE semantics instead of ZeroDivisionError: x/0 -> +/-inf, 0/0 -> nan
    if denominator == 0:
        if numerator == 0:
            return float("nan")
        return float("inf") if numerator > 0 else float("-inf")
    return numerator / denominator


def calculate_berkus(inputs: BerkusInputs) -> float:
    return (
        inputs.idea_value
        + inputs.prototype_value
        + inputs.team_value
        + inputs.relationships_value
        + inputs.sales_value
    )


def calculate_scorecard(inputs: ScorecardInputs, context: Optional[ValuationContext] = None) -> float:
    if context is not None:
        weights = get_smart_defaults(context).scorecard.to_dict()
    else:
        weights = DEFAULT_SCORECARD_WEIGHTS

    scores = inputs.scores()
    total_weight = sum(weights.values())
    factor_sum = sum(scores[name] * weight for name, weight in weights.items())

    # Weights need not sum to 1; dividing by their total normalizes them
    return inputs.market_average * _divide(factor_sum, total_weight)


def calculate_risk_factor(inputs: RiskFactorInputs) -> float:
    total_score = sum(inputs.risk_scores)
    return inputs.base_valuation + total_score * inputs.adjustment_per_point


def calculate_vc(inputs: VCMethodInputs) -> VCResult:
    terminal_value = inputs.exit_revenue * inputs.exit_multiple
    post_money = _divide(terminal_value, inputs.required_roi)
    pre_money = post_money - inputs.investment_amount
    return VCResult(pre_money=pre_money, post_money=post_money, terminal_value=terminal_value)


def calculate_cost_to_duplicate(inputs: CostToDuplicateInputs) -> float:
    base_cost = inputs.labor_cost + inputs.ip_cost + inputs.equipment_cost
    return base_cost * (1 + inputs.opportunity_cost_percent)


def generate_sensitivity_analysis(inputs: VCMethodInputs) -> List[List[float]]:
    """Pre-money values for ROI (rows) x exit multiple (columns), low/base/high.

    The centre cell is always the base case.
    """
    rois = [inputs.required_roi * factor for factor in SENSITIVITY_FACTORS]
    multiples = [inputs.exit_multiple * factor for factor in SENSITIVITY_FACTORS]

    matrix = []
    for roi in rois:
        row = []
        for multiple in multiples:
            terminal_value = inputs.exit_revenue * multiple
            row.append(_divide(terminal_value, roi) - inputs.investment_amount)
        matrix.append(row)
    return matrix


def sensitivity_frame(inputs: VCMethodInputs) -> pd.DataFrame:
    """The sensitivity matrix as a DataFrame labelled with the ROI and multiple used."""
    matrix = generate_sensitivity_analysis(inputs)
    index = pd.Index([inputs.required_roi * f for f in SENSITIVITY_FACTORS], name="required_roi")
    columns = pd.Index([inputs.exit_multiple * f for f in SENSITIVITY_FACTORS], name="exit_multiple")
    return pd.DataFrame(matrix, index=index, columns=columns)


def triangulate(berkus, scorecard, risk_factor, vc_method, cost_to_duplicate, gut_check_adjustment=0.0):
    """Combine the five methods into an average and a recommended range.

    Cost-to-duplicate is a floor, so it is excluded from the average and range.
    """
    market_methods = [berkus, scorecard, risk_factor, vc_method]
    average = sum(market_methods) / len(market_methods)

    return TriangulationSummary(
        berkus=berkus,
        scorecard=scorecard,
        risk_factor=risk_factor,
        vc_method=vc_method,
        cost_to_duplicate=cost_to_duplicate,
        average=average,
        low=min(market_methods),
        high=max(market_methods),
        gut_check_adjustment=gut_check_adjustment
    )
