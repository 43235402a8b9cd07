import argparse
import asyncio
import logging
import random
from enum import Enum
from typing import Dict, Optional, Tuple

from .errors import CasinoError
from .models import BlackjackAction, GameConfig, PokerAction, RouletteAction, RpsChoice, Variant
from .registry import game_type
from .session import GameSession
from .settlement import InMemoryLedger

LOGGER = logging.getLogger("casino")

PLAYER_ID = "you"

COMMANDS: Dict[str, Enum] = {
    "hit": BlackjackAction.HIT,
    "stand": BlackjackAction.STAND,
    "double": BlackjackAction.DOUBLE_DOWN,
    "select": PokerAction.SELECT_CARD,
    "confirm": PokerAction.CONFIRM_DISCARD,
    "rock": RpsChoice.ROCK,
    "paper": RpsChoice.PAPER,
    "scissors": RpsChoice.SCISSORS,
    "fixed": RouletteAction.SELECT_FIXED_RISK,
    "escalating": RouletteAction.SELECT_ESCALATING_RISK,
    "pull": RouletteAction.PULL_TRIGGER,
    "cash": RouletteAction.CASH_OUT,
}


def parse_command(line: str) -> Tuple[Enum, Optional[int]]:
    """Turn ``select 3`` or ``hit`` into an action; card slots are 1-based."""
    parts = line.strip().lower().split()
    if not parts or parts[0] not in COMMANDS:
        raise ValueError(f"Unknown command {line.strip()!r}; try one of {', '.join(COMMANDS)}")
    index = int(parts[1]) - 1 if len(parts) > 1 else None
    return COMMANDS[parts[0]], index


async def play(args: argparse.Namespace) -> int:
    variant = Variant(args.variant.upper())
    cls = game_type(variant)
    if args.ai and not cls.supports_ai:
        print(f"{cls.name} is played alone; drop --ai")
        return 1
    if 1 + args.ai > cls.max_players:
        print(f"{cls.name} seats at most {cls.max_players} players")
        return 1
    config = GameConfig(
        min_players=max(cls.min_players, 1 + args.ai),
        max_players=cls.max_players,
        decks_per_player=args.decks_per_player,
        turn_timeout_ms=args.turn_timeout_ms,
        dealer_delay_ms=args.dealer_delay_ms,
    )
    rng = random.Random(args.seed) if args.seed is not None else None
    session = GameSession(variant, config=config, rng=rng)
    ledger = InMemoryLedger(balances={PLAYER_ID: args.balance})

    await session.join(PLAYER_ID, args.wager)
    for _ in range(args.ai):
        await session.add_ai()
    await session.set_ready(PLAYER_ID)
    if not session.started:
        print(f"{cls.name} needs at least {cls.min_players} players; add opponents with --ai")
        return 1

    loop = asyncio.get_running_loop()
    while not session.game.is_complete():
        await session.run_automation()
        if session.game.is_complete():
            break
        print(session.view(PLAYER_ID))
        line = await loop.run_in_executor(None, input, "> ")
        try:
            action, index = parse_command(line)
            await session.act(PLAYER_ID, action, index)
        except (ValueError, CasinoError) as exc:
            print(f"! {exc}")

    print(session.view(PLAYER_ID))
    applied = await session.finish(ledger)
    for player_id, amount in applied:
        print(f"{player_id}: {amount:+d} (balance {ledger.balance(player_id)})")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Play a casino game at the terminal")
    parser.add_argument("variant", choices=[variant.value.lower() for variant in Variant])
    parser.add_argument("--wager", type=int, default=10)
    parser.add_argument("--balance", type=int, default=1_000)
    parser.add_argument("--ai", type=int, default=0, help="Number of AI opponents to seat")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--decks-per-player", type=int, default=1)
    parser.add_argument("--turn-timeout-ms", type=int, default=60_000)
    parser.add_argument("--dealer-delay-ms", type=int, default=500)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))
    try:
        raise SystemExit(asyncio.run(play(args)))
    except KeyboardInterrupt:
        LOGGER.info("Interrupted; leaving the table")


if __name__ == "__main__":
    main()
