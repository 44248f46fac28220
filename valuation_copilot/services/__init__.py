"""
Services package for the valuation copilot.
Contains the valuation formulas, smart defaults, session state and the copilot interpreter.
"""

from .valuation_service import (
    calculate_berkus,
    calculate_scorecard,
    calculate_risk_factor,
    calculate_vc,
    calculate_cost_to_duplicate,
    generate_sensitivity_analysis,
    sensitivity_frame,
    triangulate
)
from .smart_defaults import get_smart_defaults, seed_berkus_inputs, berkus_input_limits
from .session_service import ValuationSession, DealRepository
from .copilot_service import process_command
from .chat_service import CopilotChat, PendingRequest, run_gut_check

__all__ = [
    'calculate_berkus',
    'calculate_scorecard',
    'calculate_risk_factor',
    'calculate_vc',
    'calculate_cost_to_duplicate',
    'generate_sensitivity_analysis',
    'sensitivity_frame',
    'triangulate',
    'get_smart_defaults',
    'seed_berkus_inputs',
    'berkus_input_limits',
    'ValuationSession',
    'DealRepository',
    'process_command',
    'CopilotChat',
    'PendingRequest',
    'run_gut_check'
]
