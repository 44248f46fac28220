from types import SimpleNamespace

import pytest

from valuation_copilot.core.config import Sector, Region, ConversationStep
from valuation_copilot.models.conversation import ConversationState, Deferred, Handled
from valuation_copilot.services.copilot_service import (
    ASKING_REGION,
    ASKING_REVENUE,
    ASKING_SECTOR,
    ASKING_TEAM,
    HELP_TEXT,
    INTERVIEW_DONE,
    REGION_FALLBACK,
    REVENUE_RETRY,
    SECTOR_PROMPT,
    SECTOR_RETRY,
    START_OVER,
    match_single_shot,
    process_command,
)


def run(session, *lines, state=None):
    """Feed lines through the interpreter, returning the last result."""
    state = state or ConversationState()
    result = None
    for line in lines:
        result = process_command(line, session, state)
        state = result.next_state
    return result


class TestInterview:
    def test_full_walkthrough(self, session, idle):
        result = process_command("I want to evaluate my idea", session, idle)
        assert result == Handled(SECTOR_PROMPT, ASKING_SECTOR)

        result = process_command("We're in AI", session, result.next_state)
        assert result.next_state == ASKING_REGION
        assert "**AI/DeepTech**" in result.text
        assert session.context.sector == Sector.AI_DEEPTECH

        result = process_command("We're in Berlin", session, result.next_state)
        assert result.next_state == ASKING_REVENUE
        assert session.context.region == Region.EU_TIER1

        result = process_command("about 50M", session, result.next_state)
        assert result.next_state == ASKING_TEAM
        assert result.text.startswith("Noted $50,000,000 revenue.")
        assert session.vc_inputs.exit_revenue == 50_000_000

        result = process_command("strong team", session, result.next_state)
        assert result == Handled(INTERVIEW_DONE, ConversationState(ConversationStep.IDLE))
        assert session.scorecard_inputs.team_score == 1.25
        assert session.berkus_inputs.team_value == 350_000

    @pytest.mark.parametrize("line", ["Here is my pitch", "I have an idea", "please EVALUATE this"])
    def test_triggers(self, session, idle, line):
        assert process_command(line, session, idle).next_state == ASKING_SECTOR

    def test_trigger_wins_over_commands(self, session, idle):
        result = process_command("evaluate my ai sector startup", session, idle)
        assert result.next_state == ASKING_SECTOR
        assert session.context.sector == Sector.SAAS

    def test_sector_change_reapplies_vc_defaults(self, session):
        run(session, "we're in ai", state=ASKING_SECTOR)
        assert session.vc_inputs.exit_multiple == 25
        assert session.vc_inputs.required_roi == 30

    @pytest.mark.parametrize("line, sector", [
        ("software and marketplace", Sector.MARKETPLACE),
        ("saas ai", Sector.AI_DEEPTECH),
        ("deep learning", Sector.AI_DEEPTECH),
        ("hardware robots", Sector.HARDWARE),
        ("a consumer brand", Sector.CONSUMER),
        ("b2b software", Sector.SAAS),
    ])
    def test_sector_priority(self, session, line, sector):
        run(session, line, state=ASKING_SECTOR)
        assert session.context.sector == sector

    def test_unknown_sector_is_asked_again(self, session):
        result = run(session, "not sure yet", state=ASKING_SECTOR)
        assert result == Handled(SECTOR_RETRY, ASKING_SECTOR)
        assert session.context.sector == Sector.SAAS

    @pytest.mark.parametrize("line, region", [
        ("silicon valley", Region.US_TIER1),
        ("austin", Region.US_TIER2),
        ("london", Region.EU_TIER1),
        ("latam", Region.EMERGING),
    ])
    def test_region_keywords(self, session, line, region):
        result = run(session, line, state=ASKING_REGION)
        assert result.next_state == ASKING_REVENUE
        assert session.context.region == region

    def test_unknown_region_falls_back_to_tier1(self, session):
        run(session, "london", state=ASKING_REGION)
        result = run(session, "on the moon", state=ASKING_REGION)
        assert result == Handled(REGION_FALLBACK, ASKING_REVENUE)
        assert session.context.region == Region.US_TIER1

    @pytest.mark.parametrize("line", ["not sure", "0"])
    def test_revenue_needs_a_nonzero_number(self, session, line):
        result = run(session, line, state=ASKING_REVENUE)
        assert result == Handled(REVENUE_RETRY, ASKING_REVENUE)
        assert session.vc_inputs.exit_revenue == 10_000_000

    @pytest.mark.parametrize("line, team_score, team_value", [
        ("an all-star crew", 1.5, 500_000),
        ("pretty good", 1.25, 350_000),
        ("weak", 0.7, 100_000),
        ("they are average", 1.0, 0),
    ])
    def test_team_buckets(self, session, line, team_score, team_value):
        result = run(session, line, state=ASKING_TEAM)
        assert result.next_state.is_idle
        assert session.scorecard_inputs.team_score == team_score
        assert session.berkus_inputs.team_value == team_value


class TestSingleShot:
    def test_switch_sector(self, session, idle):
        result = process_command("Switch to AI sector", session, idle)
        assert isinstance(result, Handled)
        assert result.text.startswith("I've switched the sector to AI / Deep Tech.")
        assert session.context.sector == Sector.AI_DEEPTECH
        assert session.vc_inputs.exit_multiple == 25

    def test_switch_sector_by_mode(self, session, idle):
        process_command("switch to hardware mode", session, idle)
        assert session.context.sector == Sector.HARDWARE
        result = process_command("SWITCH TO SAAS MODE", session, idle)
        assert result.text == "Switched to SaaS mode. Standard revenue multiples applied."
        assert session.context.sector == Sector.SAAS

    def test_set_region(self, session, idle):
        result = process_command("set region to europe", session, idle)
        assert result == Handled("Region set to EU Tier 1.", idle)
        assert session.context.region == Region.EU_TIER1

    @pytest.mark.parametrize("line, field", [
        ("maximize the idea value", "idea_value"),
        ("maximize the prototype", "prototype_value"),
        ("max out the team score", "team_value"),
    ])
    def test_maximize_berkus(self, session, idle, line, field):
        process_command(line, session, idle)
        assert getattr(session.berkus_inputs, field) == 500_000

    def test_set_exit_revenue(self, session, idle):
        result = process_command("Set exit revenue to 50M", session, idle)
        assert result.text == "Updated projected exit revenue to $50,000,000."
        assert session.vc_inputs.exit_revenue == 50_000_000

    def test_set_investment(self, session, idle):
        result = process_command("We are raising 2M", session, idle)
        assert result.text == "Updated investment amount to $2,000,000."
        assert session.vc_inputs.investment_amount == 2_000_000
        assert session.context.sector == Sector.SAAS

    def test_first_matching_rule_wins(self, session, idle):
        process_command("set the sector to ai and revenue to 5m", session, idle)
        assert session.context.sector == Sector.AI_DEEPTECH
        assert session.vc_inputs.exit_revenue == 10_000_000

    @pytest.mark.parametrize("line", ["help", "what can you do?"])
    def test_help(self, session, idle, line):
        assert process_command(line, session, idle) == Handled(HELP_TEXT, idle)

    def test_command_without_number_is_deferred(self, session, idle):
        result = process_command("set revenue", session, idle)
        assert isinstance(result, Deferred)
        assert result.defer_to_external_ai
        assert result.next_state.is_idle
        assert session.vc_inputs.exit_revenue == 10_000_000

    def test_sector_without_known_sector_falls_through(self, session, idle):
        assert process_command("change the sector", session, idle) == Deferred(idle)
        assert session.context.sector == Sector.SAAS

    def test_market_question_is_deferred(self, session, idle):
        before = session.snapshot()
        result = process_command("What is a good exit multiple for SaaS?", session, idle)
        assert isinstance(result, Deferred)
        assert session.snapshot() == before

    def test_match_single_shot_returns_none(self, session):
        assert match_single_shot("nothing here", session) is None


def test_unknown_step_starts_over(session):
    result = process_command("hello", session, SimpleNamespace(step="bogus"))
    assert result == Handled(START_OVER, ConversationState())
