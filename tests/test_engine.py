"""Unit tests for the rule engine: legal moves, placement, and flips."""

import random

import pytest

from othello.engine import (
    BOARD_SIZE,
    IllegalMove,
    InvalidCoordinate,
    Player,
    apply_move,
    copy_board,
    count_pieces,
    enumerate_legal_moves,
    flips_for_move,
    new_board,
)
from othello.strategy import RandomMoveStrategy

B, W = Player.BLACK, Player.WHITE


def empty_board():
    return [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]


class TestInitialBoard:
    def test_four_starting_discs(self):
        board = new_board()
        occupied = {
            (r, c): board[r][c]
            for r in range(BOARD_SIZE)
            for c in range(BOARD_SIZE)
            if board[r][c] is not None
        }
        assert occupied == {(3, 3): W, (3, 4): B, (4, 3): B, (4, 4): W}

    def test_black_opening_moves(self):
        assert enumerate_legal_moves(new_board(), B) == {(2, 3), (3, 2), (4, 5), (5, 4)}

    def test_white_opening_moves(self):
        assert enumerate_legal_moves(new_board(), W) == {(2, 4), (3, 5), (4, 2), (5, 3)}

    def test_opponent(self):
        assert B.opponent is W
        assert W.opponent is B


class TestLegalMoves:
    def test_no_moves_without_opponent_run(self):
        board = empty_board()
        board[0][0] = B
        board[0][1] = B
        assert enumerate_legal_moves(board, B) == set()

    def test_run_reaching_edge_is_not_legal(self):
        board = empty_board()
        board[0][1] = W
        board[0][2] = W
        # Scanning left from (0,3) ends on the empty (0,0)
        assert (0, 3) not in enumerate_legal_moves(board, B)

    def test_long_run(self):
        board = empty_board()
        board[7][0] = B
        for c in range(1, 7):
            board[7][c] = W
        assert enumerate_legal_moves(board, B) == {(7, 7)}

    def test_occupied_cells_never_legal(self):
        board = new_board()
        for row, col in enumerate_legal_moves(board, B) | enumerate_legal_moves(board, W):
            assert board[row][col] is None


class TestApplyMove:
    def test_first_move_flips_center(self):
        board = new_board()
        updated = apply_move(board, B, (2, 3))
        assert updated[2][3] == B
        assert updated[3][3] == B
        assert count_pieces(updated) == {B: 4, W: 1}

    def test_input_board_not_mutated(self):
        board = new_board()
        snapshot = copy_board(board)
        apply_move(board, B, (2, 3))
        assert board == snapshot

    def test_illegal_move_leaves_board_unchanged(self):
        board = new_board()
        snapshot = copy_board(board)
        with pytest.raises(IllegalMove):
            apply_move(board, B, (0, 0))
        assert board == snapshot

    def test_occupied_cell_rejected(self):
        board = new_board()
        with pytest.raises(IllegalMove) as exc_info:
            apply_move(board, B, (3, 3))
        assert "occupied" in exc_info.value.reason

    def test_out_of_bounds(self):
        board = new_board()
        with pytest.raises(InvalidCoordinate):
            apply_move(board, B, (8, 0))
        with pytest.raises(InvalidCoordinate):
            apply_move(board, B, (0, -1))

    def test_only_bounded_runs_flip(self):
        board = empty_board()
        # Bounded: right (2 discs) and up (1 disc)
        board[4][5], board[4][6], board[4][7] = W, W, B
        board[3][4], board[2][4] = W, B
        # Blocked: left ends on an empty cell, down ends at the edge,
        # down-right ends on an empty cell
        board[4][3], board[4][2] = W, W
        board[5][4], board[6][4], board[7][4] = W, W, W
        board[5][5] = W
        # Own colour immediately up-left
        board[3][3] = B

        assert sorted(flips_for_move(board, B, (4, 4))) == [(3, 4), (4, 5), (4, 6)]

        updated = apply_move(board, B, (4, 4))
        assert updated[4][4] == B
        for cell in [(3, 4), (4, 5), (4, 6)]:
            assert updated[cell[0]][cell[1]] == B
        for cell in [(4, 3), (4, 2), (5, 4), (6, 4), (7, 4), (5, 5)]:
            assert updated[cell[0]][cell[1]] == W

    def test_flips_for_illegal_move_is_empty(self):
        assert flips_for_move(new_board(), B, (0, 0)) == []
        assert flips_for_move(new_board(), B, (3, 3)) == []


class TestRandomPlayout:
    def test_cells_never_return_to_empty(self):
        strategy = RandomMoveStrategy(random.Random(7))
        board = new_board()
        player = B
        occupied = {(3, 3), (3, 4), (4, 3), (4, 4)}

        for _ in range(BOARD_SIZE * BOARD_SIZE):
            moves = enumerate_legal_moves(board, player)
            if not moves:
                player = player.opponent
                moves = enumerate_legal_moves(board, player)
                if not moves:
                    break

            move = strategy.choose(board, player, moves)
            board = apply_move(board, player, move)
            occupied.add(move)

            for row, col in occupied:
                assert board[row][col] is not None

            # Re-enumerating for the other side always yields a set
            assert isinstance(enumerate_legal_moves(board, player.opponent), set)
            player = player.opponent

        counts = count_pieces(board)
        assert counts[B] + counts[W] == len(occupied)
