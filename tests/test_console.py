from warehouse_putaway.inbound.inbound_models import InboundCandidate
from warehouse_putaway.putaway.errors import DataUnavailable
from warehouse_putaway.putaway.override_gate import OverrideGate
from warehouse_putaway.putaway.putaway_models import OverrideReason, SuggestionRequest
from warehouse_putaway.putaway.suggestion_usecase import suggest_locations
from warehouse_putaway.presentation.console import (
    render_data_unavailable,
    render_inbound_candidates,
    render_override_prompt,
    render_suggestions,
)
from warehouse_putaway.presentation.messages import REASON_MESSAGES


def test_every_reason_has_a_message():
    assert set(REASON_MESSAGES) == set(OverrideReason)


class TestRenderSuggestions:
    def test_normal_result(self, make_location, single_request, provider_factory, settings):
        provider = provider_factory([make_location("L1", code="A-01", used=10.0, account_cluster=True)])
        text = render_suggestions(suggest_locations(single_request(), provider, settings))

        assert "A-01" in text
        assert "BEST FIT" in text
        assert "ACCOUNT" in text
        assert "OVERFLOW" not in text

    def test_overflow_banner(self, make_location, single_request, provider_factory, settings):
        provider = provider_factory([make_location("L1", code="A-01", used=95.0)])
        text = render_suggestions(suggest_locations(single_request(), provider, settings))

        assert "OVERFLOW: no location stays under 90% utilization" in text
        assert "BEST FIT" not in text

    def test_no_suggestions_differs_from_unavailable(self, single_request, provider_factory, settings):
        empty = render_suggestions(suggest_locations(single_request(), provider_factory([]), settings))
        unavailable = render_data_unavailable(DataUnavailable("timeout"))

        assert "No suggestions" in empty
        assert "DATA UNAVAILABLE" in unavailable
        assert "Refresh" in unavailable
        assert empty != unavailable

    def test_mixed_source_note(self, make_item, make_location, provider_factory, settings):
        request = SuggestionRequest.batch([
            make_item("I1", 1.0, source_location_id="S1"),
            make_item("I2", 1.0, source_location_id="S2"),
        ])
        text = render_suggestions(suggest_locations(request, provider_factory([make_location("L1")]), settings))
        assert "more than one source location" in text


class TestRenderOverridePrompt:
    def test_lists_all_blocking_reasons_and_note(self, make_item, make_location):
        request = SuggestionRequest.batch([
            make_item("I1", 6.0, source_location_id="S1"),
            make_item("I2", 6.0, source_location_id="S2"),
        ])
        session = OverrideGate().open(request, make_location("L1", code="B-07", used=95.0, flag_compliant=False))
        text = render_override_prompt(session)

        assert "B-07 would be 107.0% full" in text
        assert "does not support every handling flag" in text
        assert "5.00 cuft free but 12.00 cuft is needed" in text
        assert "Note: this batch is coming from more than one source location." in text
        assert "Move Anyway" in text
        assert "Cancel" in text
        assert text.index("handling flag") < text.index("Note:")


def test_render_inbound_candidates(make_shipment):
    candidate = InboundCandidate(
        shipment=make_shipment("S1", shipment_number="SHP-100", vendor_name="Acme", expected_pieces=3),
        confidence_score=90,
        confidence_label="Account + Vendor Match",
        match_tier="tier_2",
    )
    text = render_inbound_candidates("DOCK-1", [candidate])
    assert "SHP-100" in text
    assert "HIGH" in text
    assert "tier_2" in text
    assert "No matching" in render_inbound_candidates("DOCK-1", [])
