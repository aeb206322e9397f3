"""
Recovery Controller
----

Exports from the hosting platforms are frequently malformed (clock/eval markup, NAGs, stray braces, broken header blocks ...).
Rather than aborting on the first problem, a game is replayed by progressively more permissive tiers:

1. strict:  regular PGN reading + strict SAN matching
2. cleaned: aggressive markup stripping + strict SAN matching
3. manual:  no header detection, movetext is everything after the first blank line + strict SAN matching
4. lenient: the tokens of tiers 2 and 3, matched leniently

A complete replay ends the cascade right away. Otherwise the longest replay wins (earliest tier on a tie), as long as it got
past the initial position. If no tier did, the game is reported as failed (still with its initial position).
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Mapping, Optional

from src.chess.sequencer import sequence
from src.chess.tokenizer import (
    TokenizedGame,
    clean_tokenize,
    manual_tokenize,
    read_headers,
    tokenize,
)
from src.core.models import GameFenResult, GameInfo, RawGame
from src.core.shared_types import MatchMode, Tier

logger = logging.getLogger(__name__)

TokenizeFn = Callable[[str, Optional[Mapping[str, str]]], TokenizedGame]


@dataclass(frozen=True)
class RecoveryTier:
    """One level of the cascade: where the tokens come from + how they are matched"""

    tier: Tier
    tokenizers: tuple[TokenizeFn, ...]
    mode: MatchMode


RECOVERY_TIERS: tuple[RecoveryTier, ...] = (
    RecoveryTier(Tier.STRICT, (tokenize,), MatchMode.STRICT),
    RecoveryTier(Tier.CLEANED, (clean_tokenize,), MatchMode.STRICT),
    RecoveryTier(Tier.MANUAL, (manual_tokenize,), MatchMode.STRICT),
    RecoveryTier(Tier.LENIENT, (clean_tokenize, manual_tokenize), MatchMode.LENIENT),
)


class RecoveryController:
    """Replays a single game through the recovery tiers."""

    def __init__(
        self,
        tiers: tuple[RecoveryTier, ...] = RECOVERY_TIERS,
        lenient_tier: bool = True,
    ) -> None:
        self.tiers = tuple(
            tier for tier in tiers if lenient_tier or tier.mode != MatchMode.LENIENT
        )
        if not any(tier.tokenizers for tier in self.tiers):
            raise ValueError("At least one recovery tier with a tokenizer is required.")

    def run(self, raw_game: RawGame) -> GameFenResult:
        """Never raises for an unplayable move: every outcome is described by the returned result."""
        game_info = GameInfo.from_headers(
            {**read_headers(raw_game.pgn), **raw_game.headers}
        )

        attempts: list[GameFenResult] = []
        for recovery_tier in self.tiers:
            for tokenizer in recovery_tier.tokenizers:
                result = self._attempt(raw_game, recovery_tier, tokenizer, game_info)
                if result.complete:
                    logger.debug(
                        "Game replayed completely by tier %s (%d moves)",
                        recovery_tier.tier,
                        result.applied_moves,
                    )
                    return result

                attempts.append(result)
                logger.debug(
                    "Tier %s stopped after %d of %d moves at %r, escalating",
                    recovery_tier.tier,
                    result.applied_moves,
                    result.total_tokens,
                    result.stopped_at,
                )

        # max() returns the first of equal attempts: the earliest tier wins a tie
        best = max(attempts, key=lambda attempt: attempt.applied_moves)
        if best.applied_moves > 0:
            logger.info(
                "Partial replay: %d of %d moves (tier %s), stopped at %r",
                best.applied_moves,
                best.total_tokens,
                best.tier_used,
                best.stopped_at,
            )
            return best

        logger.warning(
            "All recovery tiers exhausted for %s vs %s: %s",
            game_info.white,
            game_info.black,
            best.error,
        )
        return replace(
            best,
            tier_used=Tier.FAILED,
            error=f"All recovery tiers exhausted. Last error: {best.error}",
        )

    def _attempt(
        self,
        raw_game: RawGame,
        recovery_tier: RecoveryTier,
        tokenizer: TokenizeFn,
        game_info: GameInfo,
    ) -> GameFenResult:
        tokenized = tokenizer(raw_game.pgn, raw_game.headers)
        result = sequence(tokenized.initial_fen, tokenized.tokens, recovery_tier.mode)
        return replace(result, tier_used=recovery_tier.tier, game_info=game_info)
