"""Run a tag match between two personality-driven agents.

Example usage (four rounds, seeded, with the communication bus):

    uv run python -m examples.tag_match.run --rounds 4 --seed 42 --communication

    uv run python -m examples.tag_match.run --match duel

By default the match runs on a simulated clock: each tick advances time by
``1 / ai_update_rate`` seconds without waiting. Pass ``--realtime`` to tick
against the wall clock instead.
"""

from __future__ import annotations

import argparse
import asyncio
import random
from typing import Optional

from tagverse import (
    CommunicativeGame,
    Config,
    GameCoordinator,
    ManualClock,
    MatchLoader,
    RoundSummary,
    personality_preset,
)
from tagverse.logging_utils import log_info


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Two-agent tag match")
    parser.add_argument("--rounds", type=int, default=None, help="Rounds to play (overrides config)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible matches")
    parser.add_argument("--match", type=str, default=None, help="Match file name under examples/matches")
    parser.add_argument("--p1", type=str, default="strategic", help="Personality preset for p1")
    parser.add_argument("--p2", type=str, default="aggressive", help="Personality preset for p2")
    parser.add_argument(
        "--communication",
        action="store_true",
        help="Attach the communication bus (agents exchange messages every tick)",
    )
    parser.add_argument("--debug", action="store_true", help="Print every decision")
    parser.add_argument("--realtime", action="store_true", help="Tick against the wall clock")
    return parser.parse_args()


def print_round(summary: RoundSummary) -> None:
    print(
        f"  Round {summary.round_number}: chaser={summary.chaser} "
        f"ended by {summary.cause.value} after {summary.duration_ms / 1000:.1f}s "
        f"(p1 {summary.p1_outcome}, p2 {summary.p2_outcome})"
    )


def build_coordinator(args: argparse.Namespace, clock: Optional[ManualClock]) -> tuple:
    if args.match:
        match = MatchLoader().load(args.match)
        log_info(f"Loaded match '{match.name}'")
        rng = random.Random(args.seed) if args.seed is not None else None
        coordinator = match.build_coordinator(clock=clock, rng=rng)
        communication = match.communication
    else:
        Config.validate()
        rng = random.Random(args.seed) if args.seed is not None else random.Random()
        coordinator = GameCoordinator(
            Config.tag_game_config(),
            personality_preset(args.p1),
            personality_preset(args.p2),
            clock=clock,
            rng=rng,
        )
        communication = Config.communication_config() if args.communication else None

    overrides = {}
    if args.rounds is not None:
        overrides["max_rounds"] = args.rounds
    if args.debug:
        overrides["debug"] = True
    if overrides:
        coordinator.update_config(**overrides)
    return coordinator, communication


async def run_match(args: argparse.Namespace) -> None:
    clock = None if args.realtime else ManualClock()
    coordinator, communication = build_coordinator(args, clock)
    coordinator.round_listeners.append(print_round)

    game = None
    if communication is not None or args.communication:
        game = CommunicativeGame(coordinator, config=communication)

    sleep = None
    if clock is not None:
        async def sleep(seconds: float) -> None:
            clock.advance(seconds * 1000)

    result = await coordinator.run(sleep=sleep)

    print(f"Played {result['rounds']} rounds.")
    for agent in coordinator.agents:
        data = agent.learning_data
        print(
            f"  {agent.id}: chaser wins {data.wins_as_chaser}, evader wins {data.wins_as_evader}, "
            f"ledger {[record.strategy for record in agent.memory.successful_strategies]}"
        )

    if game is not None:
        stats = game.get_communication_stats()["system"]
        print(f"  Messages in history: {stats.total_messages}")
        for message_type, count in sorted(stats.messages_by_type.items()):
            print(f"    {message_type}: {count}")
        game.dispose()


def main() -> None:
    args = parse_args()
    asyncio.run(run_match(args))


if __name__ == "__main__":
    main()
