"""
CLI entry point for the listing ranker.

Inspection and dry-run tool over a JSONL data directory: parses arguments,
wires components and prints results as tables.
"""

import argparse
import math
import sys
from argparse import Namespace
from pathlib import Path

from prettytable import PrettyTable

from .engine import EngineConfig, RankingEngine
from .exceptions import RankingError
from .inference import Relation
from .logging_config import get_logger, setup_logging
from .session import RankingSession
from .storage.jsonl_storage import JSONLStorage
from .voters.sim_voter import SimulatedVoter

_RELATION_SYMBOLS = {
    Relation.DIRECT: "D",
    Relation.INFERRED: "I",
    Relation.UNKNOWN: "?",
}


def parse_args(argv: list[str] | None = None) -> Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Listing Ranker - pairwise preference ranking with transitive inference"
    )
    _ = parser.add_argument("--data-dir", required=True, help="Directory for JSONL/JSON storage")
    _ = parser.add_argument(
        "--max-group-items",
        type=int,
        default=300,
        help="Group size above which a scale warning is logged (default: 300)",
    )
    _ = parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    _ = parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set logging level (default: WARNING)",
    )
    _ = parser.add_argument("--log-file", help="Optional rotating log file")

    commands = parser.add_subparsers(dest="command", required=True)

    add_group = commands.add_parser("add-group", help="Create or replace a group")
    _ = add_group.add_argument("group_id")
    _ = add_group.add_argument("--items", nargs="+", required=True, help="Item IDs in canonical order")
    _ = add_group.add_argument("--members", nargs="+", required=True, help="Member user IDs")

    next_cmd = commands.add_parser("next", help="Show the next pair a user should compare")
    _ = next_cmd.add_argument("user_id")

    record = commands.add_parser("record", help="Record that WINNER beats LOSER")
    _ = record.add_argument("user_id")
    _ = record.add_argument("winner_id")
    _ = record.add_argument("loser_id")

    order = commands.add_parser("order", help="Show a user's current order")
    _ = order.add_argument("user_id")

    matrix = commands.add_parser("matrix", help="Show a user's pairwise relation matrix")
    _ = matrix.add_argument("user_id")

    rankings = commands.add_parser("rankings", help="Show a group's aggregated ranking")
    _ = rankings.add_argument("group_id")

    reset = commands.add_parser("reset", help="Delete a user's comparisons and order")
    _ = reset.add_argument("user_id")

    prune = commands.add_parser("prune", help="Remove items from a group and prune member data")
    _ = prune.add_argument("group_id")
    _ = prune.add_argument("--items", nargs="+", required=True, help="Item IDs to remove")

    simulate = commands.add_parser("simulate", help="Run a session with a simulated voter")
    _ = simulate.add_argument("user_id")
    _ = simulate.add_argument(
        "--scores",
        nargs="+",
        required=True,
        help="Latent preference per item as ITEM=SCORE (higher is preferred)",
    )
    _ = simulate.add_argument("--noise", type=float, default=0.0, help="Voter noise 0-1 (default: 0)")
    _ = simulate.add_argument("--seed", type=int, default=None, help="Voter random seed")
    _ = simulate.add_argument("--budget", type=int, default=1000, help="Maximum comparisons (default: 1000)")

    return parser.parse_args(argv)


def parse_scores(pairs: list[str]) -> dict[str, float]:
    """Parse ITEM=SCORE arguments."""
    scores = dict[str, float]()
    for pair in pairs:
        item_id, sep, value = pair.rpartition("=")
        if not sep or not item_id:
            raise ValueError(f"Expected ITEM=SCORE, got {pair!r}")
        scores[item_id] = float(value)
    return scores


def print_order(engine: RankingEngine, user_id: str) -> None:
    order = engine.current_order(user_id)
    if order is None:
        print(f"No order recorded for {user_id}")
        return
    table = PrettyTable()
    table.field_names = ["Rank", "Item ID"]
    table.align["Rank"] = "r"
    for rank, item_id in enumerate(order.ordered_item_ids, 1):
        table.add_row([rank, item_id])
    print(table)
    status = "complete" if order.is_complete else "incomplete"
    print(f"{len(order)}/{order.total_item_count} items ranked ({status})")


def print_matrix(engine: RankingEngine, user_id: str) -> None:
    matrix = engine.pairwise_relations(user_id)
    table = PrettyTable()
    table.field_names = ["", *matrix.item_ids]
    for item_a in matrix.item_ids:
        table.add_row([item_a, *(_RELATION_SYMBOLS[matrix.relation(item_a, b)] for b in matrix.item_ids)])
    print(table)
    print(f"D = direct, I = inferred, ? = unknown; {matrix.count_unknown() // 2} unknown pairs")


def print_rankings(engine: RankingEngine, group_id: str) -> None:
    table = PrettyTable()
    table.field_names = ["Rank", "Item ID", "Score", "Ranked by"]
    table.align["Rank"] = "r"
    table.align["Score"] = "r"
    for entry in engine.group_rankings(group_id):
        score = "-" if math.isinf(entry.total_score) else f"{entry.total_score:.0f}"
        table.add_row([entry.rank, entry.item_id, score, f"{entry.contributing_users}/{entry.total_users}"])
    print(table)


def run_command(args: Namespace, storage: JSONLStorage, engine: RankingEngine) -> None:
    """Dispatch one parsed command."""
    if args.command == "add-group":
        storage.save_group(args.group_id, args.items, args.members)
        _ = engine.refresh_group_orders(args.group_id)
        print(f"Group {args.group_id}: {len(args.items)} items, {len(args.members)} members")
        print(f"Estimated comparisons per member: {engine.estimated_total_comparisons(args.group_id)}")
    elif args.command == "next":
        pair = engine.next_pair(args.user_id)
        if pair is None:
            print("All comparisons complete")
        else:
            print(f"{pair[0]} vs {pair[1]}")
    elif args.command == "record":
        _ = engine.record_comparison(args.user_id, args.winner_id, args.loser_id)
        print_order(engine, args.user_id)
    elif args.command == "order":
        print_order(engine, args.user_id)
    elif args.command == "matrix":
        print_matrix(engine, args.user_id)
    elif args.command == "rankings":
        print_rankings(engine, args.group_id)
    elif args.command == "reset":
        engine.reset_user(args.user_id)
        print(f"Reset all comparisons and rankings for {args.user_id}")
    elif args.command == "prune":
        removed = set(args.items)
        items = [i for i in storage.load_group_items(args.group_id) if i not in removed]
        storage.save_group(args.group_id, items, storage.load_group_members(args.group_id))
        touched = engine.prune_items(args.group_id, args.items)
        print(f"Removed {len(removed)} items, pruned data of {touched} members")
    elif args.command == "simulate":
        voter = SimulatedVoter(parse_scores(args.scores), noise=args.noise, seed=args.seed)
        result = RankingSession(engine, voter, budget=args.budget).run(args.user_id)
        print(f"Comparisons made: {result.comparisons_made} (finished: {result.finished})")
        print_order(engine, args.user_id)
    else:
        raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = parse_args(argv)
    setup_logging(level=args.log_level, debug=args.debug, log_file=args.log_file)
    logger = get_logger("main")

    try:
        storage = JSONLStorage(Path(args.data_dir))
        engine = RankingEngine(storage, EngineConfig(max_group_items=args.max_group_items))
        run_command(args, storage, engine)
    except (RankingError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        print("\nInterrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
