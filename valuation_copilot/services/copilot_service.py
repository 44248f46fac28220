"""
Copilot command interpreter.

Maps one line of user text, the valuation session and the current
conversation state to a reply and the next state. Two layers:

- a guided interview (sector -> region -> exit revenue -> team), started from
  IDLE by phrases like "evaluate" or "pitch";
- single-shot setter commands ("switch to AI sector", "we are raising 2M"),
  tried in IDLE before handing the question to the AI gateway.

Keyword matching is plain substring search over the lower-cased text. Every
table below is ordered and first match wins, so the order is part of the
behaviour: "software marketplace" is a Marketplace, "saas ai" is AI.

The interpreter performs no I/O. A ``Deferred`` result tells the caller to
ask the AI gateway; the interpreter never calls it.
"""

import logging
from dataclasses import replace
from typing import Callable, List, Optional, Tuple

from ..core.config import Sector, Region, ConversationStep, BERKUS_MAX_VALUE
from ..models.conversation import ConversationState, Handled, Deferred, CommandResult, IDLE
from ..utils.data_processing import extract_number, format_currency
from .session_service import ValuationSession

logger = logging.getLogger(__name__)

ASKING_SECTOR = ConversationState(ConversationStep.ASKING_SECTOR)
ASKING_REGION = ConversationState(ConversationStep.ASKING_REGION)
ASKING_REVENUE = ConversationState(ConversationStep.ASKING_REVENUE)
ASKING_TEAM = ConversationState(ConversationStep.ASKING_TEAM)

SECTOR_PROMPT = (
    "That sounds exciting! I'd love to help you evaluate it. First, what **Sector** is the "
    "startup in? (e.g., SaaS, AI, Hardware...)"
)
SECTOR_RETRY = "I didn't quite catch that sector. Could you say SaaS, AI, Marketplace, Hardware, or Consumer?"
REGION_PROMPT = "Next, where are they based? (e.g., US, Europe, Emerging Markets)"
REVENUE_PROMPT = (
    "Now, let's look at the potential. What is the **Projected Annual Revenue** at exit "
    "(e.g., in 5-7 years)?"
)
REGION_FALLBACK = "I'll assume US Tier 1 for now. \n\nWhat is the **Projected Annual Revenue** at exit?"
REVENUE_RETRY = "I need a number for the revenue (e.g., '50M' or '10 million')."
TEAM_PROMPT = "Finally, how strong is the **Management Team**? (Weak, Average, Strong, or All-Star)"
INTERVIEW_DONE = (
    "Great! I've updated the Team scores across the models. \n\nYou can now see the "
    "**Triangulated Valuation** in the Summary tab. \n\nFeel free to ask me for **Insights** "
    "or **Recommendations** now!"
)
START_OVER = "I'm not sure what to do next. Let's start over."
HELP_TEXT = (
    "I can control the valuation engine for you. Try saying:\n"
    "- 'Switch to AI sector'\n"
    "- 'Set exit revenue to 50M'\n"
    "- 'Maximize the team score'\n"
    "- 'We are raising 2M'"
)

Predicate = Callable[[str], bool]
Action = Callable[[str, ValuationSession], Optional[Handled]]
Rule = Tuple[Predicate, Action]


def _contains_any(text: str, *keywords: str) -> bool:
    return any(keyword in text for keyword in keywords)


def _mentions(*keywords: str) -> Predicate:
    return lambda text: _contains_any(text, *keywords)


def _first_match(text, table):
    """First entry of ``table`` whose keyword tuple (entry[0]) occurs in ``text``."""
    for entry in table:
        if _contains_any(text, *entry[0]):
            return entry
    return None


# --- Interview tables ---

INTERVIEW_SECTORS = [
    (("ai", "deep", "tech"), Sector.AI_DEEPTECH),
    (("market",), Sector.MARKETPLACE),
    (("hard",), Sector.HARDWARE),
    (("consumer", "app"), Sector.CONSUMER),
    (("saas", "software"), Sector.SAAS),
]

INTERVIEW_REGIONS = [
    (("sf", "nyc", "tier 1", "valley"), Region.US_TIER1),
    (("us", "austin", "miami"), Region.US_TIER2),
    (("eu", "uk", "london", "berlin"), Region.EU_TIER1),
    (("emerging", "asia", "latam"), Region.EMERGING),
]

# (keywords, scorecard team score, Berkus team value)
TEAM_BUCKETS = [
    (("all-star", "amazing", "best"), 1.5, 500_000),
    (("strong", "good"), 1.25, 350_000),
    (("weak", "bad"), 0.7, 100_000),
]
AVERAGE_TEAM = 1.0, 0


def _is_interview_trigger(text: str) -> bool:
    return _contains_any(text, "pitch", "evaluate") or ("idea" in text and "have" in text)


def _handle_idle(text: str, session: ValuationSession) -> CommandResult:
    if _is_interview_trigger(text):
        return Handled(SECTOR_PROMPT, ASKING_SECTOR)

    reply = match_single_shot(text, session)
    if reply is not None:
        return reply
    return Deferred(IDLE)


def _handle_sector(text: str, session: ValuationSession) -> CommandResult:
    match = _first_match(text, INTERVIEW_SECTORS)
    if match is None:
        return Handled(SECTOR_RETRY, ASKING_SECTOR)

    sector = match[1]
    session.set_context(replace(session.context, sector=sector))
    return Handled(f"Got it, I've switched to **{sector.value}** mode. \n\n{REGION_PROMPT}", ASKING_REGION)


def _handle_region(text: str, session: ValuationSession) -> CommandResult:
    match = _first_match(text, INTERVIEW_REGIONS)
    if match is None:
        # Unlike sector and revenue, an unrecognised region is not re-asked
        session.set_context(replace(session.context, region=Region.US_TIER1))
        return Handled(REGION_FALLBACK, ASKING_REVENUE)

    session.set_context(replace(session.context, region=match[1]))
    return Handled(f"Understood. \n\n{REVENUE_PROMPT}", ASKING_REVENUE)


def _handle_revenue(text: str, session: ValuationSession) -> CommandResult:
    revenue = extract_number(text)
    if not revenue:
        return Handled(REVENUE_RETRY, ASKING_REVENUE)

    session.set_vc_inputs(replace(session.vc_inputs, exit_revenue=revenue))
    return Handled(f"Noted {format_currency(revenue)} revenue. \n\n{TEAM_PROMPT}", ASKING_TEAM)


def _handle_team(text: str, session: ValuationSession) -> CommandResult:
    match = _first_match(text, TEAM_BUCKETS)
    team_score, berkus_team = (match[1], match[2]) if match else AVERAGE_TEAM

    scorecard_inputs = replace(session.scorecard_inputs, team_score=team_score)
    berkus_inputs = replace(session.berkus_inputs, team_value=berkus_team)
    session.set_scorecard_inputs(scorecard_inputs)
    session.set_berkus_inputs(berkus_inputs)
    return Handled(INTERVIEW_DONE, IDLE)


_STEP_HANDLERS = {
    ConversationStep.IDLE: _handle_idle,
    ConversationStep.ASKING_SECTOR: _handle_sector,
    ConversationStep.ASKING_REGION: _handle_region,
    ConversationStep.ASKING_REVENUE: _handle_revenue,
    ConversationStep.ASKING_TEAM: _handle_team,
}


# --- Single-shot commands ---

SECTOR_SWITCHES = [
    (("ai", "deep tech"), Sector.AI_DEEPTECH,
     "I've switched the sector to AI / Deep Tech. All valuation models have been updated "
     "with higher tech risk caps and exit multiples."),
    (("saas",), Sector.SAAS, "Switched to SaaS mode. Standard revenue multiples applied."),
    (("marketplace",), Sector.MARKETPLACE, "Switched to Marketplace mode."),
    (("hardware",), Sector.HARDWARE, "Switched to Hardware mode."),
    (("consumer",), Sector.CONSUMER, "Switched to Consumer App mode."),
]

REGION_SWITCHES = [
    (("tier 1", "sf", "nyc"), Region.US_TIER1, "Region set to US Tier 1 (SF/NYC)."),
    (("eu", "europe"), Region.EU_TIER1, "Region set to EU Tier 1."),
]

BERKUS_MAX_TARGETS = [
    (("idea",), "idea_value", "I've maximized the 'Sound Idea' value in the Berkus method."),
    (("prototype",), "prototype_value", "Prototype value set to max."),
    (("team",), "team_value", "Management Team value set to max."),
]


def _switch_sector(text, session):
    match = _first_match(text, SECTOR_SWITCHES)
    if match is None:
        return None
    session.set_context(replace(session.context, sector=match[1]))
    return Handled(match[2], IDLE)


def _switch_region(text, session):
    match = _first_match(text, REGION_SWITCHES)
    if match is None:
        return None
    session.set_context(replace(session.context, region=match[1]))
    return Handled(match[2], IDLE)


def _maximize_berkus(text, session):
    match = _first_match(text, BERKUS_MAX_TARGETS)
    if match is None:
        return None
    session.set_berkus_inputs(replace(session.berkus_inputs, **{match[1]: BERKUS_MAX_VALUE}))
    return Handled(match[2], IDLE)


def _update_exit_revenue(text, session):
    value = extract_number(text)
    if not value:
        return None
    session.set_vc_inputs(replace(session.vc_inputs, exit_revenue=value))
    return Handled(f"Updated projected exit revenue to {format_currency(value)}.", IDLE)


def _update_investment(text, session):
    value = extract_number(text)
    if not value:
        return None
    session.set_vc_inputs(replace(session.vc_inputs, investment_amount=value))
    return Handled(f"Updated investment amount to {format_currency(value)}.", IDLE)


def _show_help(text, session):
    return Handled(HELP_TEXT, IDLE)


SINGLE_SHOT_RULES: List[Rule] = [
    (_mentions("sector", "mode"), _switch_sector),
    (_mentions("region"), _switch_region),
    (lambda text: _contains_any(text, "berkus", "idea", "prototype", "team") and "max" in text,
     _maximize_berkus),
    (_mentions("revenue", "exit"), _update_exit_revenue),
    (_mentions("investment", "raising"), _update_investment),
    (_mentions("help", "what can you do"), _show_help),
]


def match_single_shot(text: str, session: ValuationSession) -> Optional[Handled]:
    """Apply the first single-shot command that matches ``text``.

    ``text`` must already be lower-cased. A rule whose gate matches but whose
    action declines (no sub-keyword, no number) lets later rules try.
    Returns None when nothing applied.
    """
    for predicate, action in SINGLE_SHOT_RULES:
        if not predicate(text):
            continue
        reply = action(text, session)
        if reply is not None:
            return reply
    return None


def process_command(command: str, session: ValuationSession,
                    conversation_state: ConversationState) -> CommandResult:
    """Interpret one line of user input against the session and conversation state."""
    text = command.lower()
    step = getattr(conversation_state, "step", None)
    handler = _STEP_HANDLERS.get(step)
    if handler is None:
        logger.warning("Unknown conversation step %r; resetting to IDLE", step)
        return Handled(START_OVER, IDLE)

    result = handler(text, session)
    logger.debug("Copilot %s -> %s (deferred=%s)", step.name, result.next_state.step.name,
                 result.defer_to_external_ai)
    return result
