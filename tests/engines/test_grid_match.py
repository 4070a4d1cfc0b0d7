from collections import Counter

from helpers import has_floating_gap, has_run, parse_board
from tilepuzzle.engines.grid_match import (
    EMPTY,
    GridOptions,
    SwapRejection,
    are_adjacent,
    attempt_swap,
    collapse_board,
    count_tiles,
    create_grid,
    find_matches,
    find_valid_swaps,
    has_any_tiles,
    is_cleared,
    resolve_board,
)
from tilepuzzle.utils.seeded_rng import Mulberry32, shuffle_in_place

SIX = ("A", "B", "C", "D", "E", "F")

NO_RUNS = parse_board([
    "BCDB",
    "CDBC",
    "AABA",
])


def test_create_grid_fills_board_and_keeps_remaining_bag():
    options = GridOptions(rows=6, cols=6, tile_set=SIX, bag_multiplier=3)
    state = create_grid(options, seed=1234)
    assert len(state.board) == 6 and all(len(row) == 6 for row in state.board)
    assert count_tiles(state.board) == 36
    assert len(state.bag) == 6 * 6 * 3 - 36
    supply = Counter(cell for row in state.board for cell in row) + Counter(state.bag)
    assert supply == Counter({symbol: 18 for symbol in SIX})


def test_create_grid_is_reproducible_for_a_seed():
    options = GridOptions(rows=5, cols=4, tile_set=SIX)
    assert create_grid(options, seed=99) == create_grid(options, seed=99)
    assert create_grid(options, seed=99) != create_grid(options, seed=100)


def test_create_grid_accepts_an_injected_source():
    options = GridOptions(rows=3, cols=3, tile_set=SIX)
    first = create_grid(options, rng=Mulberry32(5))
    second = create_grid(options, rng=Mulberry32(5))
    assert first == second


def test_create_grid_leaves_cells_empty_when_bag_runs_out():
    options = GridOptions(rows=2, cols=3, tile_set=SIX, bag_multiplier=0)
    state = create_grid(options, seed=3)
    assert state.bag == ()
    assert all(cell is EMPTY for row in state.board for cell in row)
    assert not has_any_tiles(state.board)
    assert is_cleared(state.board, state.bag)


def test_adjacency():
    assert are_adjacent((0, 0), (0, 1))
    assert are_adjacent((2, 3), (1, 3))
    assert not are_adjacent((0, 0), (1, 1))
    assert not are_adjacent((0, 0), (0, 2))
    assert not are_adjacent((1, 1), (1, 1))


def test_non_adjacent_swap_is_rejected_without_changes():
    bag = ("E", "F")
    for a, b in [((0, 0), (0, 2)), ((0, 0), (1, 1)), ((2, 3), (2, 3)), ((0, 0), (2, 0))]:
        result = attempt_swap(NO_RUNS, bag, a, b)
        assert result.valid is False
        assert result.reason is SwapRejection.NOT_ADJACENT
        assert result.cleared == 0
        assert result.board == NO_RUNS
        assert result.bag == bag


def test_equal_neighbours_swap_is_reverted():
    board = parse_board([
        "ABCD",
        "ABDC",
        "CDAB",
    ])
    result = attempt_swap(board, ("E",), (0, 0), (1, 0))
    assert result.valid is False
    assert result.reason is SwapRejection.NO_MATCH
    assert result.board == board
    assert result.bag == ("E",)


def test_matchless_swap_is_reverted():
    result = attempt_swap(NO_RUNS, ("E",), (0, 0), (0, 1))
    assert result.valid is False
    assert result.reason is SwapRejection.NO_MATCH
    assert result.board == NO_RUNS


def test_swap_clears_collapses_and_refills_from_bag_end():
    result = attempt_swap(NO_RUNS, ("E", "F", "G"), (2, 2), (2, 3))
    assert result.valid is True
    assert result.reason is None
    assert result.cleared == 3
    assert result.rounds == 1
    assert result.bag == ()
    assert result.board == parse_board([
        "GFEB",
        "BCDC",
        "CDBB",
    ])


def test_cascade_counts_every_round():
    board = parse_board([
        "BCB",
        "CAC",
        "ADA",
    ])
    result = attempt_swap(board, ("Q", "K", "K", "K"), (1, 1), (2, 1))
    assert result.valid is True
    assert result.cleared == 6
    assert result.rounds == 2
    assert result.bag == ()
    assert result.board == parse_board([
        "Q..",
        "BCB",
        "CDC",
    ])
    assert not has_floating_gap(result.board)


def test_clearing_everything_with_empty_bag_wins():
    board = parse_board([
        "AAB",
        "BBA",
    ])
    result = attempt_swap(board, (), (0, 2), (1, 2))
    assert result.valid is True
    assert result.cleared == 6
    assert not has_any_tiles(result.board)
    assert is_cleared(result.board, result.bag)


def test_find_matches_deduplicates_crossing_runs():
    board = parse_board([
        "AAA",
        "ABC",
        "ACB",
    ])
    assert find_matches(board) == [(0, 0), (0, 1), (0, 2), (1, 0), (2, 0)]


def test_find_matches_ignores_empty_runs():
    board = parse_board([
        "...",
        "AB.",
    ])
    assert find_matches(board) == []


def test_collapse_keeps_relative_order():
    board = parse_board([
        "A.",
        ".B",
        "C.",
    ])
    collapsed, bag = collapse_board(board, ())
    assert collapsed == parse_board([
        "..",
        "A.",
        "CB",
    ])
    assert bag == ()


def test_six_by_six_swap_completes_bottom_row():
    board = parse_board([
        "ABCDEF",
        "CDEFAB",
        "EFABCD",
        "ABCDEF",
        "CDAFEB",
        "AABFCD",
    ])
    assert not has_run(board)
    bag = list(SIX * 12)
    shuffle_in_place(bag, Mulberry32(7))
    result = attempt_swap(board, tuple(bag), (4, 2), (5, 2))
    assert result.valid is True
    assert result.cleared >= 3
    assert not has_floating_gap(result.board)
    assert not has_run(result.board)


def test_find_valid_swaps_only_lists_clearing_swaps():
    swaps = find_valid_swaps(NO_RUNS)
    assert ((2, 2), (2, 3)) in swaps
    for a, b in swaps:
        assert attempt_swap(NO_RUNS, (), a, b).valid


def test_cascades_terminate_and_conserve_tiles_on_large_boards():
    options = GridOptions(rows=20, cols=20, tile_set=SIX, bag_multiplier=3)
    for seed in (1, 2):
        state = create_grid(options, seed=seed)
        settled = resolve_board(state.board, state.bag)
        assert not has_run(settled.board)
        board, bag = settled.board, settled.bag
        for _ in range(8):
            swaps = find_valid_swaps(board)
            if not swaps:
                break
            a, b = swaps[0]
            result = attempt_swap(board, bag, a, b)
            assert result.valid
            drawn = len(bag) - len(result.bag)
            assert count_tiles(result.board) == count_tiles(board) - result.cleared + drawn
            assert not has_run(result.board)
            assert not has_floating_gap(result.board)
            board, bag = result.board, result.bag


def test_gap_helper_flags_hanging_tiles_only():
    assert has_floating_gap(parse_board(["A.", ".B"]))
    assert not has_floating_gap(parse_board(["..", "A.", "AB"]))


def test_gravity_holds_once_the_bag_runs_dry():
    options = GridOptions(rows=20, cols=20, tile_set=SIX, bag_multiplier=1)
    for seed in (1, 2):
        state = create_grid(options, seed=seed)
        assert state.bag == ()
        settled = resolve_board(state.board, state.bag)
        assert settled.cleared > 0
        assert count_tiles(settled.board) == 400 - settled.cleared
        assert not has_run(settled.board)
        assert not has_floating_gap(settled.board)
        board = settled.board
        for _ in range(8):
            swaps = find_valid_swaps(board)
            if not swaps:
                break
            a, b = swaps[0]
            result = attempt_swap(board, (), a, b)
            assert result.valid
            assert result.bag == ()
            assert count_tiles(result.board) == count_tiles(board) - result.cleared
            assert not has_run(result.board)
            assert not has_floating_gap(result.board)
            board = result.board
