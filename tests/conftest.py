"""
Shared fixtures: in-memory locations, items, fake providers and an
alerting double. Nothing here touches a database.
"""
from datetime import datetime, timedelta

import pytest

from warehouse_putaway.inbound.inbound_models import ExpectedShipment
from warehouse_putaway.putaway.errors import DataUnavailable
from warehouse_putaway.putaway.putaway_models import ItemSpec, Location, SuggestionRequest
from warehouse_putaway.utils.config import PutawaySettings


class FakeLocationProvider:
    """Returns a fixed snapshot and records every fetch."""

    def __init__(self, locations=None, error=None):
        self.locations = list(locations or [])
        self.error = error
        self.calls = []

    def fetch_locations(self, request):
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return list(self.locations)


class RecordingAlerting:
    def __init__(self, fail=False):
        self.fail = fail
        self.count = 0

    def notify_blocking(self):
        self.count += 1
        if self.fail:
            raise RuntimeError("speaker unplugged")


class FakeInboundSource:
    def __init__(self, shipments=None, linked=None, error=None):
        self.shipments = list(shipments or [])
        self.linked = set(linked or [])
        self.error = error

    def fetch_open_shipments(self, now):
        if self.error is not None:
            raise self.error
        return list(self.shipments)

    def fetch_linked_ids(self, dock_intake_id):
        return set(self.linked)


@pytest.fixture
def settings():
    """Defaults, independent of any PUTAWAY_* variables on the machine."""
    return PutawaySettings(
        top_n=3,
        account_cluster_min_cuft=35.0,
        account_cluster_weight=4.0,
        sku_vendor_weight=2.0,
        group_weight=1.0,
        headroom_weight=1.0,
        compliance_weight=100.0,
        prefer_tight_fit=False,
        debounce_ms=200,
        inbound_max_candidates=5,
        inbound_lookback_days=90,
    )


@pytest.fixture
def make_location():
    def _make(location_id, capacity=100.0, used=0.0, **kwargs):
        kwargs.setdefault("code", f"LOC-{location_id}")
        return Location(location_id=location_id, capacity_cuft=capacity, used_cuft=used, **kwargs)

    return _make


@pytest.fixture
def make_item():
    def _make(item_id="I1", volume=10.0, **kwargs):
        return ItemSpec(item_id=item_id, volume_cuft=volume, **kwargs)

    return _make


@pytest.fixture
def single_request(make_item):
    def _make(volume=10.0, **kwargs):
        return SuggestionRequest.single(make_item("I1", volume, **kwargs))

    return _make


@pytest.fixture
def provider_factory():
    return FakeLocationProvider


@pytest.fixture
def failing_provider():
    return FakeLocationProvider(error=DataUnavailable("warehouse database offline"))


@pytest.fixture
def alerting():
    return RecordingAlerting()


@pytest.fixture
def failing_alerting():
    return RecordingAlerting(fail=True)


@pytest.fixture
def now():
    return datetime(2026, 3, 15, 12, 0, 0)


@pytest.fixture
def make_shipment(now):
    def _make(shipment_id, days_old=1, **kwargs):
        kwargs.setdefault("shipment_number", f"SHP-{shipment_id}")
        kwargs.setdefault("inbound_kind", "expected")
        return ExpectedShipment(
            shipment_id=shipment_id,
            created_at=now - timedelta(days=days_old),
            **kwargs,
        )

    return _make


@pytest.fixture
def inbound_source_factory():
    return FakeInboundSource
