"""Othello rules: board state, legal-move detection, and piece flipping."""

from __future__ import annotations

from enum import Enum

BOARD_SIZE = 8

# Orthogonal steps followed by diagonal steps
DIRECTIONS = [
    (-1, 0),
    (1, 0),
    (0, -1),
    (0, 1),
    (-1, -1),
    (-1, 1),
    (1, -1),
    (1, 1),
]


class Player(str, Enum):
    BLACK = "black"
    WHITE = "white"

    @property
    def opponent(self) -> Player:
        return Player.WHITE if self is Player.BLACK else Player.BLACK


Cell = Player | None
Board = list[list[Cell]]
Move = tuple[int, int]


class OthelloError(Exception):
    """Base class for rule engine errors."""


class IllegalMove(OthelloError):
    def __init__(self, move: Move, player: Player, reason: str = "Move flips no pieces"):
        self.move = move
        self.player = player
        self.reason = reason
        super().__init__(f"{player.value} cannot play {move}: {reason}")


class InvalidCoordinate(OthelloError):
    def __init__(self, move: Move):
        self.move = move
        super().__init__(f"Coordinates out of bounds: {move}")


def new_board() -> Board:
    board: Board = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    board[3][3] = Player.WHITE
    board[3][4] = Player.BLACK
    board[4][3] = Player.BLACK
    board[4][4] = Player.WHITE
    return board


def copy_board(board: Board) -> Board:
    return [list(row) for row in board]


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def _bounded_run(board: Board, player: Player, row: int, col: int, dr: int, dc: int) -> list[Move]:
    """Opponent cells from (row, col) along (dr, dc), if a ``player`` cell closes them.

    Returns an empty list when the run reaches the edge or an empty cell first.
    """
    run: list[Move] = []
    r, c = row + dr, col + dc
    while in_bounds(r, c) and board[r][c] is not None and board[r][c] != player:
        run.append((r, c))
        r += dr
        c += dc

    if run and in_bounds(r, c) and board[r][c] == player:
        return run
    return []


def is_legal_move(board: Board, player: Player, move: Move) -> bool:
    row, col = move
    if not in_bounds(row, col) or board[row][col] is not None:
        return False
    return any(_bounded_run(board, player, row, col, dr, dc) for dr, dc in DIRECTIONS)


def enumerate_legal_moves(board: Board, player: Player) -> set[Move]:
    """Every empty cell where ``player`` would capture at least one run."""
    moves: set[Move] = set()
    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            if is_legal_move(board, player, (row, col)):
                moves.add((row, col))
    return moves


def flips_for_move(board: Board, player: Player, move: Move) -> list[Move]:
    """Cells recolored if ``player`` places at ``move``; empty if the move is illegal."""
    row, col = move
    if not in_bounds(row, col) or board[row][col] is not None:
        return []

    flips: list[Move] = []
    for dr, dc in DIRECTIONS:
        flips.extend(_bounded_run(board, player, row, col, dr, dc))
    return flips


def apply_move(board: Board, player: Player, move: Move) -> Board:
    """Place ``player`` at ``move`` and flip every bounded run.

    The input board is never mutated; the updated board is returned.
    Raises InvalidCoordinate or IllegalMove, leaving ``board`` untouched.
    """
    row, col = move
    if not in_bounds(row, col):
        raise InvalidCoordinate(move)
    if board[row][col] is not None:
        raise IllegalMove(move, player, "Cell is already occupied")

    # All runs are collected before any flip is written back
    flips = flips_for_move(board, player, move)
    if not flips:
        raise IllegalMove(move, player)

    updated = copy_board(board)
    updated[row][col] = player
    for r, c in flips:
        updated[r][c] = player
    return updated


def count_pieces(board: Board) -> dict[Player, int]:
    counts = {Player.BLACK: 0, Player.WHITE: 0}
    for row in board:
        for cell in row:
            if cell is not None:
                counts[cell] += 1
    return counts
