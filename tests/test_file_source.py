from datetime import datetime
from textwrap import dedent

import pytest

from warehouse_putaway.data.files import CsvInboundSource, CsvLocationSource
from warehouse_putaway.putaway.errors import DataUnavailable, InvalidRequest
from warehouse_putaway.putaway.putaway_models import SuggestionRequest


def _write(path, text):
    path.write_text(dedent(text).lstrip(), encoding="utf-8")


@pytest.fixture
def data_dir(tmp_path):
    _write(tmp_path / "locations.csv", """
        id,code,warehouse_id,length_in,width_in,usable_height_in,capacity_cuft,group_code,deleted_at
        L1,A-01,W1,48,48,75,,AISLE-A,
        L2,A-02,W1,,,,50,AISLE-A,
        L3,Z-01,W2,48,48,75,,AISLE-Z,
    """)
    _write(tmp_path / "items.csv", """
        id,account_id,item_code,vendor,size,location_id,deleted_at
        I1,ACC-A,SKU-1,Acme,30,L1,
        I2,ACC-A,SKU-2,Acme,12.5,L2,
        NEW,ACC-A,SKU-1,Acme,8,,
    """)
    return tmp_path


class TestCsvLocationSource:
    def test_round_trip_to_locations(self, data_dir, settings):
        source = CsvLocationSource(data_dir, warehouse_id="W1", settings=settings)
        request = SuggestionRequest.single(source.load_items(["NEW"])[0])
        by_id = {l.location_id: l for l in source.fetch_locations(request)}

        assert sorted(by_id) == ["L1", "L2"]
        assert by_id["L1"].capacity_cuft == 100.0
        assert by_id["L1"].used_cuft == 30.0
        assert by_id["L2"].used_cuft == 12.5
        assert by_id["L1"].sku_or_vendor_match
        # no item flags file and no location flag file
        assert by_id["L1"].flag_compliant

    def test_without_warehouse_filter(self, data_dir, settings):
        source = CsvLocationSource(data_dir, settings=settings)
        request = SuggestionRequest.single(source.load_items(["NEW"])[0])
        assert len(source.fetch_locations(request)) == 3

    def test_item_flags_file(self, data_dir, settings):
        _write(data_dir / "item_flags.csv", """
            item_id,service_code
            NEW,COLD
        """)
        _write(data_dir / "location_flag_links.csv", """
            location_id,service_code
            L2,COLD
        """)
        source = CsvLocationSource(data_dir, warehouse_id="W1", settings=settings)
        request = SuggestionRequest.single(source.load_items(["NEW"])[0])
        by_id = {l.location_id: l for l in source.fetch_locations(request)}

        assert not by_id["L1"].flag_compliant
        assert by_id["L2"].flag_compliant

    def test_missing_required_file(self, tmp_path, settings):
        source = CsvLocationSource(tmp_path, settings=settings)
        with pytest.raises(DataUnavailable):
            source.load_items(["I1"])

    def test_empty_id_list(self, data_dir, settings):
        with pytest.raises(InvalidRequest):
            CsvLocationSource(data_dir, settings=settings).load_items([])


class TestCsvInboundSource:
    def test_shipments_and_links(self, tmp_path):
        _write(tmp_path / "shipments.csv", """
            id,shipment_number,inbound_kind,account_id,account_name,vendor_name,expected_pieces,eta_start,eta_end,created_at,inbound_status,deleted_at
            S1,SHP-1,manifest,ACC-A,Acme Corp,Acme Freight,12,,,2026-03-01T10:00:00,open,
            S2,SHP-2,expected,ACC-B,Globex,Globex,3,,,2026-03-02T10:00:00,,
        """)
        _write(tmp_path / "shipment_external_refs.csv", """
            shipment_id,normalized_value
            S1,bol-555
        """)
        _write(tmp_path / "inbound_links.csv", """
            dock_intake_id,linked_shipment_id
            DOCK-1,S2
        """)
        source = CsvInboundSource(tmp_path)
        shipments = {s.shipment_id: s for s in source.fetch_open_shipments(datetime(2026, 3, 15))}

        assert shipments["S1"].external_refs == frozenset({"BOL555"})
        assert shipments["S1"].expected_pieces == 12
        assert shipments["S1"].created_at == datetime(2026, 3, 1, 10, 0)
        assert shipments["S2"].inbound_status is None
        assert source.fetch_linked_ids("DOCK-1") == {"S2"}
        assert source.fetch_linked_ids("DOCK-2") == set()

    def test_missing_shipments_file(self, tmp_path):
        with pytest.raises(DataUnavailable):
            CsvInboundSource(tmp_path).fetch_open_shipments(datetime(2026, 3, 15))
