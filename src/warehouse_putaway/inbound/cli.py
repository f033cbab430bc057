import argparse
import logging
import sys
from typing import List, Optional

from warehouse_putaway.data.files import CsvInboundSource
from warehouse_putaway.inbound.inbound_models import InboundQuery
from warehouse_putaway.inbound.matching_usecase import match_dock_intake
from warehouse_putaway.presentation.console import render_data_unavailable, render_inbound_candidates
from warehouse_putaway.putaway.errors import DataUnavailable, InvalidRequest
from warehouse_putaway.utils.config import PutawaySettings
from warehouse_putaway.utils.logger import set_console_level

EXIT_INVALID_REQUEST = 2
EXIT_DATA_UNAVAILABLE = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Match a dock intake to open manifests / expected shipments"
    )

    parser.add_argument("dock_intake_id", help="Dock intake shipment id")
    parser.add_argument("--account", default=None, help="Account id captured at the dock")
    parser.add_argument("--vendor", default=None, help="Vendor / shipper name")
    parser.add_argument("--ref", default=None, help="BOL, PO or tracking number")
    parser.add_argument("--pieces", type=int, default=None, help="Piece count received")

    parser.add_argument("--source", choices=["csv", "sql"], default="csv")
    parser.add_argument("--data-dir", default="data", help="CSV export directory (--source csv)")

    parser.add_argument(
        "--link",
        type=int,
        default=None,
        metavar="N",
        help="Link the Nth candidate to the dock intake (--source sql)",
    )
    parser.add_argument("--actor", default=None, help="User id recorded on the link")

    parser.add_argument("-v", "--verbose", action="store_true", help="Echo INFO log lines to the console")

    return parser


def run(args) -> int:
    settings = PutawaySettings()

    if args.source == "sql":
        from warehouse_putaway.data.inbound import SqlInboundSource

        source = SqlInboundSource(lookback_days=settings.inbound_lookback_days)
    else:
        source = CsvInboundSource(args.data_dir)

    query = InboundQuery(
        account_id=args.account,
        vendor_name=args.vendor,
        ref_value=args.ref,
        pieces=args.pieces,
    )
    candidates = match_dock_intake(args.dock_intake_id, query, source, settings)
    print(render_inbound_candidates(args.dock_intake_id, candidates))

    if args.link is None:
        return 0

    if not 1 <= args.link <= len(candidates):
        raise InvalidRequest(f"--link must be between 1 and {len(candidates)}")
    if args.source != "sql":
        raise InvalidRequest("--link needs --source sql")

    from warehouse_putaway.data.inbound import InboundLinkWriter

    chosen = candidates[args.link - 1]
    InboundLinkWriter(linked_by=args.actor).link(args.dock_intake_id, chosen)
    print(f"Linked {chosen.shipment.shipment_number} to dock intake {args.dock_intake_id}.")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_console_level(logging.INFO)

    try:
        return run(args)
    except InvalidRequest as e:
        print(f"Invalid request: {e}", file=sys.stderr)
        return EXIT_INVALID_REQUEST
    except DataUnavailable as e:
        print(render_data_unavailable(e), file=sys.stderr)
        return EXIT_DATA_UNAVAILABLE


if __name__ == "__main__":
    sys.exit(main())
