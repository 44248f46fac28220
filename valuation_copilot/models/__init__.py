"""
Models package for the valuation copilot.
Contains valuation inputs, conversation types and saved-deal records.
"""

from .valuation import (
    ValuationContext,
    BerkusInputs,
    ScorecardInputs,
    RiskFactorInputs,
    VCMethodInputs,
    VCResult,
    CostToDuplicateInputs,
    BerkusDefaults,
    VCDefaults,
    ScorecardWeights,
    SmartDefaults,
    TriangulationSummary
)
from .conversation import (
    ConversationState,
    Handled,
    Deferred,
    CommandResult,
    ChatMessage,
    GatewayReply,
    GutCheckResult,
    grounding_sources
)
from .deal import DealSummary, DealRecord

__all__ = [
    'ValuationContext',
    'BerkusInputs',
    'ScorecardInputs',
    'RiskFactorInputs',
    'VCMethodInputs',
    'VCResult',
    'CostToDuplicateInputs',
    'BerkusDefaults',
    'VCDefaults',
    'ScorecardWeights',
    'SmartDefaults',
    'TriangulationSummary',
    'ConversationState',
    'Handled',
    'Deferred',
    'CommandResult',
    'ChatMessage',
    'GatewayReply',
    'GutCheckResult',
    'grounding_sources',
    'DealSummary',
    'DealRecord'
]
