from pathlib import Path

# Match-3 board
MATCH3_ROWS = 6
MATCH3_COLS = 6
MATCH3_TILE_SET = ("🍎", "🍋", "🍇", "🍒", "🥝", "🍊")
MATCH3_BAG_MULTIPLIER = 3
# Loss once either limit is reached.
MATCH3_MAX_INVALID_MOVES = 8
MATCH3_MAX_MOVES = 40
SCORE_PER_TILE = 10

# Layered stack
STACK_COLUMNS = 9
STACK_MIN_ROWS = 5
STACK_MAX_ROWS = 9
STACK_MAX_HEIGHT = 3
STACK_TILE_SET = (
    "🐑", "🐱", "🐶", "🐷", "🐔", "🐸", "🐙", "🐝",
    "🐠", "🌽", "🥕", "🍅", "🍆", "🥑", "🍄", "🍇",
)
STACK_SLOT_LIMIT = 7

# Statistics
STATS_FILE = Path.home() / ".tilepuzzle" / "stats.json"
MATCH3_STATS_KEY = "match3-stats"
STACK_STATS_KEY = "sheep-stats"
