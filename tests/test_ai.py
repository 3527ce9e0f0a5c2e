"""Tests for the computer opponent's three strategies."""

import random

import pytest

from tictactoe.ai import Difficulty, MoveSelector, hard_move, minimax, select_move
from tictactoe.game import EMPTY, Board, TicTacToeGame, evaluate, other


def cells(layout):
    return Board.from_string(layout).cells


@pytest.mark.parametrize("difficulty", [Difficulty.NORMAL, Difficulty.HARD])
def test_blocks_open_pair(difficulty):
    assert select_move(cells("XX......."), difficulty) == 2


@pytest.mark.parametrize("difficulty", [Difficulty.NORMAL, Difficulty.HARD])
def test_completes_own_line(difficulty):
    assert select_move(cells("OO.XX...X"), difficulty) == 2


def test_normal_prefers_win_over_block():
    # O can win at 5 while X threatens 2; the win comes first.
    board = cells("XX.OO.X..")
    assert select_move(board, Difficulty.NORMAL) == 5


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_only_empty_cells_are_chosen(difficulty):
    rng = random.Random(1234)
    for layout in ("X........", "XO.X.....", "XOXOX.O..", "XOXXOO.X."):
        board = cells(layout)
        for _ in range(1 if difficulty is Difficulty.HARD else 20):
            idx = select_move(board, difficulty, rng)
            assert board[idx] == EMPTY


def test_easy_is_uniform_over_empty_cells():
    rng = random.Random(7)
    board = cells("X...O...X")
    seen = {select_move(board, Difficulty.EASY, rng) for _ in range(200)}
    assert seen == {1, 2, 3, 5, 6, 7}


def test_selection_does_not_touch_board():
    for difficulty in Difficulty:
        board = Board.from_string("X...O...X")
        before = board.cells.copy()
        select_move(board, difficulty)
        assert board.cells == before


def test_minimax_restores_board():
    board = cells("X...O....")
    before = list(board)
    minimax(board, True)
    assert board == before
    minimax(board, False)
    assert board == before


def test_minimax_scores_terminal_boards():
    assert minimax(cells("OOOXX.X.."), True) == 10
    assert minimax(cells("XXXOO.O.."), False) == -10
    assert minimax(cells("XOXXOOOXX"), True) == 0


def test_minimax_sees_forced_loss():
    # X has a fork; whatever O does, X wins.
    assert minimax(cells("X.X.O...X"), True) == -10


def test_hard_is_deterministic():
    board = cells("X...O...X")
    moves = {select_move(board, Difficulty.HARD) for _ in range(3)}
    assert len(moves) == 1


def test_hard_first_move_is_corner_or_center():
    idx = select_move(Board(), Difficulty.HARD)
    assert idx in (0, 2, 4, 6, 8)


def test_hard_defends_against_corner_opening():
    # Anything but the centre loses against a corner opening.
    assert select_move(cells("X........"), Difficulty.HARD) == 4


def test_precondition_violations_are_fatal():
    with pytest.raises(RuntimeError):
        select_move(cells("XOXXOOOXX"), Difficulty.EASY)
    with pytest.raises(RuntimeError):
        select_move(cells("XXXOO...."), Difficulty.HARD)


def test_unknown_difficulty_rejected():
    with pytest.raises(ValueError):
        select_move(Board(), "impossible")


def test_selector_accepts_plain_strings():
    selector = MoveSelector(difficulty="normal")
    assert selector.difficulty is Difficulty.NORMAL
    assert selector.choose(cells("XX.......")) == 2


def test_hard_versus_hard_is_a_draw():
    x_player = MoveSelector(difficulty=Difficulty.HARD, player="X")
    o_player = MoveSelector(difficulty=Difficulty.HARD, player="O")
    board = Board()
    mover = "X"
    while not evaluate(board.cells).is_terminal:
        selector = x_player if mover == "X" else o_player
        board.place(mover, selector.choose(board))
        mover = other(mover)
    assert evaluate(board.cells).winner is None


def test_hard_never_loses_to_any_line_of_play():
    selector = MoveSelector(difficulty=Difficulty.HARD)
    cache = {}
    lost = []

    def explore(game):
        if game.is_over:
            if game.winner == "X":
                lost.append("".join(game.board.cells))
            return
        for idx in game.available_moves():
            child = TicTacToeGame(
                board=Board(cells=game.board.cells.copy()),
                current_player=game.current_player,
            )
            child.play_human_move(idx)
            if not child.is_over:
                key = tuple(child.board.cells)
                if key not in cache:
                    cache[key] = selector.choose(child.board)
                child.play_move(cache[key])
            explore(child)

    explore(TicTacToeGame())
    assert lost == []


def test_hard_strategy_on_full_board_is_fatal():
    with pytest.raises(RuntimeError):
        hard_move(cells("XOXXOOOXX"), "O", random.Random())
