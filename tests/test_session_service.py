import json
from dataclasses import replace

import pytest

from valuation_copilot.core.config import Sector, Region, DEAL_INDEX_KEY, DEAL_KEY_PREFIX
from valuation_copilot.models.conversation import GutCheckResult
from valuation_copilot.models.valuation import BerkusInputs, ValuationContext, VCMethodInputs
from valuation_copilot.services.session_service import DealRepository, ValuationSession


class TestInitialState:
    def test_starts_from_saas_tier1_defaults(self, session):
        assert session.context == ValuationContext(Sector.SAAS, Region.US_TIER1)
        assert session.berkus_inputs == BerkusInputs(750_000, 1_000_000, 1_750_000, 250_000, 0)
        assert session.vc_inputs.exit_multiple == 12
        assert session.vc_inputs.required_roi == 20
        assert session.scorecard_inputs.team_score == 1.25
        assert session.gut_check is None

    def test_valuations(self, session):
        assert session.berkus_valuation == 3_750_000
        assert session.vc_valuation == pytest.approx(10_000_000 * 12 / 20 - 2_000_000)
        assert session.risk_factor_valuation == 10_000_000
        assert session.cost_to_duplicate_valuation == pytest.approx(684_000)
        # team 1.25 at 30% weight
        assert session.scorecard_valuation == pytest.approx(10_750_000)


class TestSetters:
    def test_setters_replace_whole_object(self, session):
        inputs = VCMethodInputs(exit_revenue=1, exit_multiple=2, required_roi=3, investment_amount=4)
        session.set_vc_inputs(inputs)
        assert session.vc_inputs is inputs

    def test_setters_reject_wrong_type(self, session):
        with pytest.raises(TypeError):
            session.set_berkus_inputs({"ideaValue": 1})
        with pytest.raises(TypeError):
            session.set_context("AI")

    def test_sector_change_applies_vc_defaults(self, session):
        session.set_vc_inputs(replace(session.vc_inputs, exit_multiple=3, exit_revenue=42))
        session.set_context(replace(session.context, sector=Sector.AI_DEEPTECH))
        assert session.vc_inputs.exit_multiple == 25
        assert session.vc_inputs.required_roi == 30
        assert session.vc_inputs.exit_revenue == 42

    def test_region_change_keeps_vc_inputs(self, session):
        session.set_vc_inputs(replace(session.vc_inputs, exit_multiple=3))
        session.set_context(replace(session.context, region=Region.EMERGING))
        assert session.vc_inputs.exit_multiple == 3

    def test_sector_change_seeds_empty_berkus(self, session):
        session.set_berkus_inputs(BerkusInputs())
        session.set_context(replace(session.context, sector=Sector.AI_DEEPTECH))
        assert session.berkus_inputs.idea_value == 1_000_000
        assert session.berkus_inputs.team_value == 1_750_000

    def test_sector_change_keeps_filled_berkus(self, session):
        filled = BerkusInputs(idea_value=1)
        session.set_berkus_inputs(filled)
        session.set_context(replace(session.context, sector=Sector.HARDWARE))
        assert session.berkus_inputs == filled

    def test_gut_check_shifts_average(self, session):
        before = session.triangulation()
        session.set_gut_check(GutCheckResult(80, 500_000, "Strong traction."))
        after = session.triangulation()
        assert after.average == before.average
        assert after.adjusted_average == pytest.approx(before.average + 500_000)

    def test_gateway_context(self, session):
        context = session.gateway_context()
        assert context["sector"] == "SaaS"
        assert context["region"] == "US_Tier1"
        assert context["vcInputs"]["requiredROI"] == 20
        assert context["scorecardInputs"]["teamScore"] == 1.25


class TestSnapshots:
    def test_restore_reproduces_valuations(self, session):
        session.set_context(ValuationContext(Sector.CONSUMER, Region.EU_TIER1))
        session.set_vc_inputs(replace(session.vc_inputs, exit_revenue=30_000_000))
        snapshot = json.loads(json.dumps(session.snapshot()))

        other = ValuationSession()
        other.restore(snapshot)
        assert other.context == session.context
        assert other.vc_inputs == session.vc_inputs
        assert other.triangulation() == session.triangulation()

    def test_restore_legacy_scalars(self, session):
        snapshot = session.snapshot()
        del snapshot["riskFactorInputs"]
        del snapshot["costToDuplicateInputs"]
        snapshot["riskFactorValuation"] = 7_000_000
        snapshot["costToDuplicateValuation"] = 300_000

        session.restore(snapshot)
        assert session.risk_factor_valuation == 7_000_000
        assert session.cost_to_duplicate_valuation == 300_000

    def test_invalid_restore_changes_nothing(self, session):
        snapshot = session.snapshot()
        snapshot["context"]["sector"] = "Crypto"
        before = session.snapshot()
        with pytest.raises(ValueError):
            session.restore(snapshot)
        assert session.snapshot() == before

    def test_incomplete_snapshot_is_rejected(self, session):
        with pytest.raises(ValueError):
            session.restore({"context": {"sector": "SaaS", "region": "US_Tier1"}})


class TestDeals:
    def test_save_and_list(self, session, store):
        summary = session.save_deal("Acme Seed")
        assert summary.name == "Acme Seed"
        assert session.saved_deals() == [summary]
        assert f"{DEAL_KEY_PREFIX}{summary.id}" in store

    def test_ids_are_unique(self, session):
        first = session.save_deal("Same name")
        second = session.save_deal("Same name")
        assert first.id != second.id
        assert len(session.saved_deals()) == 2

    def test_load_restores_saved_state(self, session):
        session.set_context(ValuationContext(Sector.HARDWARE, Region.EMERGING))
        summary = session.save_deal("Robots")
        session.set_context(ValuationContext(Sector.SAAS, Region.US_TIER1))

        assert session.load_deal(summary.id) is True
        assert session.context == ValuationContext(Sector.HARDWARE, Region.EMERGING)

    def test_gut_check_does_not_leak_into_loaded_deal(self, session):
        summary = session.save_deal("Before gut check")
        saved_average = session.triangulation().adjusted_average

        session.set_gut_check(GutCheckResult(90, 2_000_000, "Oversubscribed round."))
        assert session.load_deal(summary.id) is True
        assert session.gut_check is None
        assert session.triangulation().adjusted_average == pytest.approx(saved_average)

    def test_gut_check_is_saved_with_deal(self, session):
        result = GutCheckResult(40, -500_000, "Key engineer leaving.")
        session.set_gut_check(result)
        summary = session.save_deal("With gut check")

        session.set_gut_check(None)
        assert session.load_deal(summary.id) is True
        assert session.gut_check == GutCheckResult(40.0, -500_000.0, "Key engineer leaving.")

    def test_load_unknown_id(self, session):
        before = session.snapshot()
        assert session.load_deal("missing") is False
        assert session.snapshot() == before

    def test_load_malformed_record(self, session, store):
        store.set(f"{DEAL_KEY_PREFIX}broken", "{not json")
        assert session.load_deal("broken") is False

    def test_load_record_missing_fields(self, session, store):
        record = {"id": "partial", "name": "Partial", "date": "2024-01-01", "data": {"context": {}}}
        store.set(f"{DEAL_KEY_PREFIX}partial", json.dumps(record))
        assert session.load_deal("partial") is False

    def test_unreadable_index_lists_nothing(self, store):
        store.set(DEAL_INDEX_KEY, "oops")
        assert DealRepository(store).list_deals() == []

    def test_deals_need_a_repository(self):
        session = ValuationSession()
        with pytest.raises(RuntimeError):
            session.save_deal("Nowhere")
        with pytest.raises(RuntimeError):
            session.saved_deals()
