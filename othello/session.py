"""Game session: board ownership, turn handoff, and turn events."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from othello.engine import (
    Board,
    IllegalMove,
    Move,
    Player,
    apply_move,
    count_pieces,
    enumerate_legal_moves,
    flips_for_move,
    new_board,
)
from othello.strategy import MoveStrategy

logger = logging.getLogger(__name__)

PASS_RULES = ("reference", "standard")


class GameStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    GAME_OVER = "game_over"


@dataclass
class MoveResult:
    player: Player
    move: Move
    flipped: list[Move]


@dataclass
class TurnChanged:
    player: Player
    legal_moves: set[Move]
    forced: bool = False


@dataclass
class GameEnded:
    winner: Player | None
    score: dict[Player, int] = field(default_factory=dict)


SessionEvent = TurnChanged | GameEnded


class GameSession:
    """One human-vs-computer game.

    The board is replaced only through ``play``. Observers registered with
    ``on_turn_changed`` receive a TurnChanged or GameEnded event after every
    handoff.

    ``pass_rule`` decides what happens when the side to move has no legal
    move. "reference" hands the turn to Black whichever side is stuck and
    never ends the game. "standard" passes to the other side and ends the
    game once neither side can move.
    """

    def __init__(self, computer: Player = Player.WHITE, pass_rule: str = "reference"):
        if pass_rule not in PASS_RULES:
            raise ValueError(f"Unknown pass rule: {pass_rule!r}")
        self.board: Board = new_board()
        self.current_player: Player = Player.BLACK
        self.computer: Player = computer
        self.pass_rule = pass_rule
        self.status: GameStatus = GameStatus.IN_PROGRESS
        self.winner: Player | None = None
        self.move_count: int = 0
        self.last_move: Move | None = None
        self._listeners: list[Callable[[SessionEvent], None]] = []

    @property
    def human(self) -> Player:
        return self.computer.opponent

    @property
    def is_game_over(self) -> bool:
        return self.status is GameStatus.GAME_OVER

    def on_turn_changed(self, callback: Callable[[SessionEvent], None]):
        self._listeners.append(callback)

    def legal_moves(self) -> set[Move]:
        return enumerate_legal_moves(self.board, self.current_player)

    def is_computer_turn(self) -> bool:
        return not self.is_game_over and self.current_player == self.computer

    def score(self) -> dict[Player, int]:
        return count_pieces(self.board)

    def play(self, move: Move, player: Player | None = None) -> MoveResult:
        """Apply ``move`` for ``player`` (the side to move by default) and hand off the turn.

        Raises IllegalMove, with the session unchanged, when the game is over,
        when ``player`` is not the side to move, or when the move captures nothing.
        """
        player = player or self.current_player
        if self.is_game_over:
            raise IllegalMove(move, player, "Game is already over")
        if player != self.current_player:
            raise IllegalMove(move, player, "Not your turn")

        flipped = flips_for_move(self.board, player, move)
        self.board = apply_move(self.board, player, move)
        self.move_count += 1
        self.last_move = move

        self._hand_off(player.opponent)
        return MoveResult(player=player, move=move, flipped=flipped)

    def play_computer(self, strategy: MoveStrategy) -> MoveResult | None:
        """Let ``strategy`` move for the computer, with legality checked now.

        Returns None, after applying the pass rule, when the computer has no move.
        """
        if not self.is_computer_turn():
            return None

        moves = enumerate_legal_moves(self.board, self.computer)
        if not moves:
            self._no_legal_move(self.computer)
            return None

        move = strategy.choose(self.board, self.computer, moves)
        logger.debug("Computer (%s) chose %s out of %d moves", self.computer.value, move, len(moves))
        return self.play(move, self.computer)

    def _hand_off(self, player: Player):
        self.current_player = player
        moves = enumerate_legal_moves(self.board, player)
        if moves:
            self._emit(TurnChanged(player=player, legal_moves=moves))
        else:
            self._no_legal_move(player)

    def _no_legal_move(self, stuck: Player):
        if self.pass_rule == "reference":
            # The turn always goes back to Black, even when Black is the one stuck
            logger.info("%s has no legal move, turn forced to black", stuck.value)
            self.current_player = Player.BLACK
            moves = enumerate_legal_moves(self.board, Player.BLACK)
            self._emit(TurnChanged(player=Player.BLACK, legal_moves=moves, forced=True))
            return

        other = stuck.opponent
        moves = enumerate_legal_moves(self.board, other)
        if moves:
            logger.info("%s passes", stuck.value)
            self.current_player = other
            self._emit(TurnChanged(player=other, legal_moves=moves, forced=True))
            return

        score = self.score()
        self.status = GameStatus.GAME_OVER
        if score[Player.BLACK] > score[Player.WHITE]:
            self.winner = Player.BLACK
        elif score[Player.WHITE] > score[Player.BLACK]:
            self.winner = Player.WHITE
        else:
            self.winner = None
        logger.info("Game over, winner=%s score=%s", self.winner, score)
        self._emit(GameEnded(winner=self.winner, score=score))

    def _emit(self, event: SessionEvent):
        for callback in self._listeners:
            callback(event)
