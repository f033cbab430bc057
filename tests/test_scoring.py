import math

from warehouse_putaway.putaway.scoring import (
    affinity_score,
    build_candidates,
    exceeds_available,
    fits_normally,
    leftover_cuft,
    projected_utilization,
    rank_key,
    score_location,
)


class TestCapacity:
    def test_projected_utilization(self, make_location):
        loc = make_location("L1", capacity=100.0, used=85.0)
        assert projected_utilization(loc, 10.0) == 0.95

    def test_unmeasured_location_never_fits(self, make_location):
        loc = make_location("L0", capacity=0.0, used=0.0)
        assert math.isinf(projected_utilization(loc, 1.0))
        assert not fits_normally(loc, 0.0)

    def test_threshold_is_strict(self, make_location):
        loc = make_location("L1", capacity=100.0, used=80.0)
        assert fits_normally(loc, 9.0)
        assert not fits_normally(loc, 10.0)

    def test_exceeds_available(self, make_location):
        loc = make_location("L1", capacity=100.0, used=95.0)
        assert exceeds_available(loc, 10.0)
        assert not exceeds_available(loc, 5.0)

    def test_available_never_negative(self, make_location):
        loc = make_location("L1", capacity=100.0, used=120.0)
        assert loc.available_cuft == 0.0
        assert leftover_cuft(loc, 10.0) == -10.0


class TestScore:
    def test_affinity_uses_weights(self, make_location, settings):
        loc = make_location("L1", account_cluster=True, sku_or_vendor_match=True, group_match=True)
        assert affinity_score(loc, settings) == 7.0

    def test_affinity_weights_are_configurable(self, make_location, settings):
        tuned = settings.model_copy(update={"group_weight": 10.0})
        loc = make_location("L1", group_match=True)
        assert affinity_score(loc, tuned) == 10.0

    def test_overflow_location_gets_no_bonus(self, make_location, settings):
        full = make_location("L1", capacity=100.0, used=95.0, account_cluster=True)
        # headroom only: 1 - 1.05
        assert score_location(full, 10.0, settings) == -0.05

    def test_fitting_compliant_score(self, make_location, settings):
        loc = make_location("L1", capacity=100.0, used=40.0, account_cluster=True)
        assert score_location(loc, 10.0, settings) == 104.5


class TestRankKey:
    def test_compliance_outranks_affinity(self, make_location, settings):
        compliant = make_location("A", used=50.0)
        mismatch = make_location(
            "B", used=10.0, flag_compliant=False,
            account_cluster=True, sku_or_vendor_match=True, group_match=True,
        )
        ordered = sorted([mismatch, compliant], key=lambda l: rank_key(l, 10.0, settings))
        assert [l.location_id for l in ordered] == ["A", "B"]

    def test_affinity_outranks_headroom(self, make_location, settings):
        roomy = make_location("A", used=0.0)
        cluster = make_location("B", used=60.0, account_cluster=True)
        ordered = sorted([roomy, cluster], key=lambda l: rank_key(l, 10.0, settings))
        assert [l.location_id for l in ordered] == ["B", "A"]

    def test_headroom_then_id(self, make_location, settings):
        locs = [make_location("C", used=30.0), make_location("B", used=10.0), make_location("A", used=10.0)]
        ordered = sorted(locs, key=lambda l: rank_key(l, 10.0, settings))
        assert [l.location_id for l in ordered] == ["A", "B", "C"]

    def test_prefer_tight_fit(self, make_location, settings):
        tight = settings.model_copy(update={"prefer_tight_fit": True})
        locs = [make_location("A", used=0.0), make_location("B", used=70.0)]
        ordered = sorted(locs, key=lambda l: rank_key(l, 10.0, tight))
        assert [l.location_id for l in ordered] == ["B", "A"]


class TestBuildCandidates:
    def test_percentages_and_best_fit(self, make_location, settings):
        locs = [make_location("A", capacity=200.0, used=50.0), make_location("B", capacity=100.0, used=40.0)]
        candidates = build_candidates(locs, 10.0, settings, overflow=False)

        first = candidates[0]
        assert first.rank == 0
        assert first.best_fit
        assert first.utilization_pct == 25.0
        assert first.projected_utilization_pct == 30.0
        assert first.available_cuft == 150.0
        assert first.leftover_cuft == 140.0
        assert not candidates[1].best_fit

    def test_overflow_has_no_best_fit(self, make_location, settings):
        locs = [make_location("A", used=95.0)]
        candidates = build_candidates(locs, 10.0, settings, overflow=True)
        assert candidates[0].overflow
        assert not candidates[0].best_fit
