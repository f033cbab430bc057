import argparse
import logging
import sys
from typing import Callable, List, Optional

from warehouse_putaway.data.files import CsvLocationSource
from warehouse_putaway.putaway.alerts import TerminalAlerting
from warehouse_putaway.putaway.commit import build_move_command, commit_move
from warehouse_putaway.putaway.errors import CommitRefused, DataUnavailable, InvalidRequest
from warehouse_putaway.putaway.override_gate import OverrideGate
from warehouse_putaway.putaway.putaway_models import Location, SuggestionRequest
from warehouse_putaway.putaway.session import SuggestionSession
from warehouse_putaway.presentation.console import (
    render_data_unavailable,
    render_override_prompt,
    render_suggestions,
)
from warehouse_putaway.utils.config import PutawaySettings
from warehouse_putaway.utils.logger import get_logger, set_console_level

logger = get_logger(__name__)

EXIT_INVALID_REQUEST = 2
EXIT_DATA_UNAVAILABLE = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Suggest storage locations for received items"
    )

    parser.add_argument("item_ids", nargs="+", help="One item id, or several for a batch")

    parser.add_argument(
        "--source",
        choices=["csv", "sql"],
        default="csv",
        help="Where location data comes from",
    )
    parser.add_argument("--data-dir", default="data", help="CSV export directory (--source csv)")
    parser.add_argument("--warehouse", default=None, help="Warehouse id")

    parser.add_argument(
        "--move-to",
        default=None,
        help="Destination location code or id; runs the override check and commits the move",
    )
    parser.add_argument("--actor", default=None, help="User id recorded on movements (--source sql)")
    parser.add_argument("--top", type=int, default=None, help="Number of suggestions (default from settings)")

    parser.add_argument("-v", "--verbose", action="store_true", help="Echo INFO log lines to the console")

    return parser


def _build_source(args, settings: PutawaySettings):
    if args.source == "sql":
        if not args.warehouse:
            raise InvalidRequest("--warehouse is required with --source sql")
        # Imported lazily so CSV runs do not need an ODBC driver
        from warehouse_putaway.data.locations import SqlLocationSource

        return SqlLocationSource(args.warehouse, settings)
    return CsvLocationSource(args.data_dir, warehouse_id=args.warehouse, settings=settings)


def _find_destination(locations: List[Location], key: str) -> Location:
    for loc in locations:
        if key in (loc.location_id, loc.code):
            return loc
    raise InvalidRequest(f"Destination location not found or not measured: {key}")


def _ask_override(prompt_fn: Callable[[str], str]) -> bool:
    answer = prompt_fn("Choose [M]ove Anyway / [C]ancel: ").strip().lower()
    return answer in ("m", "move", "move anyway")


def run(args, prompt_fn: Callable[[str], str] = input) -> int:
    settings = PutawaySettings()
    if args.top is not None:
        if args.top < 1:
            raise InvalidRequest("--top must be at least 1")
        settings = settings.model_copy(update={"top_n": args.top})

    source = _build_source(args, settings)

    items = source.load_items(args.item_ids)
    if len(items) == 1:
        request = SuggestionRequest.single(items[0], warehouse_id=args.warehouse)
    else:
        request = SuggestionRequest.batch(items, warehouse_id=args.warehouse)

    result = SuggestionSession(source, settings).run(request)
    print(render_suggestions(result))

    if not args.move_to:
        return 0

    # Same snapshot the operator was shown
    destination = _find_destination(list(result.snapshot), args.move_to)
    gate_session = OverrideGate(TerminalAlerting()).open(request, destination)

    if gate_session.requires_confirmation:
        print(render_override_prompt(gate_session))
        if _ask_override(prompt_fn):
            gate_session.confirm()
        else:
            gate_session.cancel()

    decision = gate_session.decision
    if not decision.accepted:
        print(f"Move to {destination.code} cancelled.")
        return 0

    if args.source == "sql":
        from warehouse_putaway.data.movements import SqlMoveCommitter

        moved = commit_move(decision, SqlMoveCommitter(actor_id=args.actor))
        print(f"Moved {moved} item(s) to {destination.code}.")
    else:
        command = build_move_command(decision)
        print(
            f"CSV source is read-only. Move not written: "
            f"{', '.join(command.item_ids)} -> {destination.code}"
            + (" (override confirmed)" if command.override_confirmed else "")
        )
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
    except CommitRefused as e:
        logger.error("Commit refused: %s", e)
        print(f"Move not committed: {e}", file=sys.stderr)
        return EXIT_INVALID_REQUEST


if __name__ == "__main__":
    sys.exit(main())
