"""Computer move selection."""

from __future__ import annotations

import random
from collections.abc import Iterable
from typing import Protocol

from othello.engine import Board, Move, Player


class MoveStrategy(Protocol):
    def choose(self, board: Board, player: Player, moves: Iterable[Move]) -> Move: ...


class RandomMoveStrategy:
    """Uniform choice over the legal moves."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def choose(self, board: Board, player: Player, moves: Iterable[Move]) -> Move:
        # Sorted so a seeded generator replays the same game
        candidates = sorted(moves)
        if not candidates:
            raise ValueError(f"No legal moves for {player.value}")
        return self.rng.choice(candidates)
