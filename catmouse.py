"""
Cat and Mouse - The Grand Chase!
Collect every piece of cheese while the cat hunts you down the shortest path.
Built with Pygame | the engine runs headless, the App is a thin front end
"""

import argparse
import heapq
import itertools
import logging
import math
import random
import sys
from collections import deque, namedtuple
from enum import Enum, auto

import pygame

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
TILE = 25
COLS, ROWS = 23, 23
WIDTH, HEIGHT = COLS * TILE, ROWS * TILE
FPS = 60
TITLE = "Cat and Mouse - The Grand Chase!"

TUNNEL_ROW = 11
PLAYER_START = (1, 1)
CAT_START = (11, 11)

NUM_CHEESE = 12
NUM_POWERUPS = 1
ATTEMPTS_PER_CELL = 10

# Cat timing (milliseconds)
INITIAL_DELAY_MS = 350
MIN_DELAY_MS = 150
SLOW_BONUS_MS = 100
SLOW_DURATION_MS = 5000
LEVEL_WON_DELAY_MS = 2000
INTRO_DELAY_MS = 3500

# Colours
BACKGROUND   = (13, 13, 38)
WALL_FILL    = (0, 0, 255)
WALL_OUTLINE = (0, 0, 128)
CHEESE_COLOR = (255, 204, 0)
CHEESE_HOLE  = (204, 150, 0)
POWERUP_BLUE = (51, 153, 255)
MOUSE_GREY   = (170, 170, 180)
MOUSE_PINK   = (255, 170, 190)
CAT_ORANGE   = (235, 140, 40)
BLACK        = (0, 0, 0)
WHITE        = (255, 255, 255)
SLOW_BLUE    = (128, 204, 255)
LOSE_RED     = (153, 0, 0)
WIN_GREEN    = (0, 128, 26)

# Directions
UP    = (0, -1)
DOWN  = (0, 1)
LEFT  = (-1, 0)
RIGHT = (1, 0)

# Neighbour expansion order; fixes which shortest path the cat takes
SEARCH_ORDER = (UP, DOWN, LEFT, RIGHT)


class GameState(Enum):
    INTRO          = auto()
    START_MENU     = auto()
    PLAYING        = auto()
    PAUSED         = auto()
    GAME_OVER      = auto()
    LEVEL_WON      = auto()
    GAME_WON_FINAL = auto()


class Event(Enum):
    INTRO_DONE          = auto()
    START               = auto()
    PAUSE               = auto()
    RESUME              = auto()
    RESET               = auto()
    CAUGHT              = auto()
    LEVEL_COMPLETE      = auto()
    LAST_LEVEL_COMPLETE = auto()
    ADVANCE             = auto()
    QUIT                = auto()


class Action(Enum):
    NEW_GAME         = auto()
    BANK_SCORE       = auto()
    SCHEDULE_ADVANCE = auto()
    NEXT_LEVEL       = auto()
    SUSPEND          = auto()
    RESUME_TICKS     = auto()
    QUIT             = auto()


class MoveOutcome(Enum):
    REJECTED       = auto()
    MOVED          = auto()
    ATE_CHEESE     = auto()
    GOT_POWERUP    = auto()
    LEVEL_COMPLETE = auto()


class PowerupKind(Enum):
    SLOW_CAT = auto()


# ---------------------------------------------------------------------------
# Maze layouts  (23 x 23, row 11 is the tunnel row)
# 1=wall, 0=path, 4=powerup spawn, 3=sealed cell (loads as wall)
# ---------------------------------------------------------------------------
WALL = 1
PATH = 0
POWERUP_SPAWN = 4

TILE_CHARS = {'0': PATH, '1': WALL, '3': WALL, '4': POWERUP_SPAWN}
WALKABLE = (PATH, POWERUP_SPAWN)

LAYOUT_1 = (
    "11111111111111111111111",
    "10001000000000000010001",
    "10101011111011111010101",
    "10000000100000100000001",
    "11101010101110101010111",
    "10001010101310101010001",
    "10101010101110101010101",
    "10001010000000001010001",
    "11111010111111101011111",
    "10000010000000001000001",
    "10111110111011101111101",
    "00000000100000100000000",  # tunnel row
    "10111110111111101111101",
    "10000010000000001000001",
    "11111010111111101011111",
    "10001010000000001010001",
    "10101010101110101010101",
    "10001010101310101010001",
    "11101010101110101010111",
    "10000000100000100000001",
    "10101011111011111010101",
    "10001000000000000010001",
    "11111111111111111111111",
)

LAYOUT_2 = (
    "11111111111111111111111",
    "10000000000100000000001",
    "10111011110101111101101",
    "10001000000000000101001",
    "11101110111111110101101",
    "10000010000000010000001",
    "10111011110101011111101",
    "10100000010101000000101",
    "10101111010101111110101",
    "10000001000001000010001",
    "11111101111011101011111",
    "00000000000000000000000",  # tunnel row
    "11111101111011101011111",
    "10000001000001000010001",
    "10101111010101111110101",
    "10100000010101000000101",
    "10111011110101011111101",
    "10001000000000010000001",
    "11101110111111110101101",
    "10001000000100000101001",
    "10111011110101111101101",
    "10000000000100000000001",
    "11111111111111111111111",
)

LAYOUT_3 = (
    "11111111111111111111111",
    "10100010001010001000101",
    "10101010101010100010101",
    "10001000101010111010001",
    "10111110101010001011101",
    "10001000100011101000101",
    "11101011101000101110101",
    "10001000001010100000101",
    "10111111101010111110101",
    "10100000101010001000101",
    "10101110101011101011101",
    "00001000000000100000000",  # tunnel row
    "10101110101011101011101",
    "10100000101010001000101",
    "10111111101010111110101",
    "10001000001010100000101",
    "11101011101000101110101",
    "10001000100011101000101",
    "10111110101010001011101",
    "10001000101010111010001",
    "10101010101010100010101",
    "10100010001010001000101",
    "11111111111111111111111",
)

LEVEL_LAYOUTS = (LAYOUT_1, LAYOUT_2, LAYOUT_3)

# Returned by load_level past the last layout
NO_MORE_LEVELS = None


# ---------------------------------------------------------------------------
# Maze model
# ---------------------------------------------------------------------------
class Maze:
    """Immutable tile grid for one level, with the tunnel-wrap rule."""

    def __init__(self, layout, tunnel_row=TUNNEL_ROW):
        grid = []
        for row_str in layout:
            row = []
            for ch in row_str:
                if ch not in TILE_CHARS:
                    raise ValueError(f"unknown tile character {ch!r}")
                row.append(TILE_CHARS[ch])
            grid.append(tuple(row))
        if not grid or any(len(row) != len(grid[0]) for row in grid):
            raise ValueError("layout rows must be non-empty and of equal length")
        self.grid = tuple(grid)
        self.rows = len(grid)
        self.cols = len(grid[0])
        self.tunnel_row = tunnel_row

    def in_bounds(self, pos):
        col, row = pos
        return 0 <= col < self.cols and 0 <= row < self.rows

    def tile(self, pos):
        col, row = pos
        return self.grid[row][col]

    def is_path(self, pos):
        """Return True if the cell at pos is on the grid and walkable."""
        return self.in_bounds(pos) and self.tile(pos) in WALKABLE

    def wrap(self, pos):
        """Carry an off-grid column across the tunnel row; other rows are left alone."""
        col, row = pos
        if row == self.tunnel_row:
            if col < 0:
                col = self.cols - 1
            elif col >= self.cols:
                col = 0
        return col, row

    def neighbors(self, pos):
        """Walkable cells one step away, in SEARCH_ORDER."""
        col, row = pos
        result = []
        for dx, dy in SEARCH_ORDER:
            candidate = self.wrap((col + dx, row + dy))
            if self.is_path(candidate):
                result.append(candidate)
        return result

    def path_tiles(self):
        """Walkable cells in row-major order."""
        return [(col, row)
                for row in range(self.rows)
                for col in range(self.cols)
                if self.grid[row][col] in WALKABLE]


def load_level(level, layouts=LEVEL_LAYOUTS):
    """Build the maze for a 1-based level number, or NO_MORE_LEVELS."""
    if not 1 <= level <= len(layouts):
        return NO_MORE_LEVELS
    return Maze(layouts[level - 1])


# ---------------------------------------------------------------------------
# Level population
# ---------------------------------------------------------------------------
class Powerup(namedtuple("Powerup", "col row kind", defaults=(PowerupKind.SLOW_CAT,))):
    __slots__ = ()

    @property
    def pos(self):
        return self.col, self.row


def populate_level(maze, player_start, cat_start, cheese_count, powerup_count, rng):
    """Scatter cheese, then powerups, over free path tiles by rejection sampling.

    Draws are uniform over maze.path_tiles(). Each pool gets its own budget of rows * cols * ATTEMPTS_PER_CELL draws.
    Falling short is accepted: the level just has fewer items.
    """
    max_attempts = maze.rows * maze.cols * ATTEMPTS_PER_CELL
    starts = {player_start, cat_start}
    candidates = maze.path_tiles()
    taken = set()

    def draw(count):
        chosen = []
        attempts = 0
        while candidates and len(chosen) < count and attempts < max_attempts:
            attempts += 1
            pos = rng.choice(candidates)
            if pos not in starts and pos not in taken:
                taken.add(pos)
                chosen.append(pos)
        return chosen

    cheese = set(draw(cheese_count))
    powerups = [Powerup(col, row) for col, row in draw(powerup_count)]

    if len(cheese) < cheese_count:
        logger.warning("Could only place %d of %d cheese", len(cheese), cheese_count)
    if len(powerups) < powerup_count:
        logger.warning("Could only place %d of %d powerups", len(powerups), powerup_count)
    return cheese, powerups


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------
class Session:
    """All mutable game state. Owned by the Engine and handed to each component."""

    def __init__(self):
        self.maze = None
        self.level = 1
        self.score = 0
        self.total_score = 0
        self.player = PLAYER_START
        self.cat = CAT_START
        self.cheese = set()
        self.initial_cheese = 0
        self.powerups = []
        self.cat_delay_ms = INITIAL_DELAY_MS
        self.slow_remaining_ms = 0
        self.epoch = 0

    @property
    def is_slowed(self):
        return self.slow_remaining_ms > 0

    @property
    def collected_fraction(self):
        if self.initial_cheese <= 0:
            return 0.0
        return self.score / self.initial_cheese

    def bump_epoch(self):
        self.epoch += 1
        return self.epoch


Snapshot = namedtuple(
    "Snapshot",
    "state maze player cat cheese powerups level score total_score slowed",
)


# ---------------------------------------------------------------------------
# Difficulty
# ---------------------------------------------------------------------------
def delay_for(fraction):
    """Cat tick interval for the share of cheese collected so far.

    Square-root curve: the first few pieces speed the cat up the most.
    """
    fraction = min(max(fraction, 0.0), 1.0)
    delay = MIN_DELAY_MS + int((INITIAL_DELAY_MS - MIN_DELAY_MS) * (1.0 - math.sqrt(fraction)))
    return max(MIN_DELAY_MS, delay)


# ---------------------------------------------------------------------------
# Slow power-up effect
# ---------------------------------------------------------------------------
def activate_slow(session):
    session.slow_remaining_ms = SLOW_DURATION_MS
    session.cat_delay_ms = max(session.cat_delay_ms, INITIAL_DELAY_MS + SLOW_BONUS_MS)
    logger.debug("Cat slowed! Delay: %dms", session.cat_delay_ms)


def tick_slow(session, elapsed_ms):
    """Age the slow effect. Returns True on the tick it wears off.

    On expiry the delay is recomputed from current progress, since cheese
    may have been collected while the cat was frozen.
    """
    if not session.is_slowed:
        return False
    session.slow_remaining_ms -= elapsed_ms
    if session.slow_remaining_ms > 0:
        return False
    session.slow_remaining_ms = 0
    session.cat_delay_ms = delay_for(session.collected_fraction)
    logger.debug("Cat slowdown ended! Delay restored to: %dms", session.cat_delay_ms)
    return True


# ---------------------------------------------------------------------------
# Player
# ---------------------------------------------------------------------------
def attempt_move(session, direction):
    """Move the mouse one cell and resolve whatever it lands on."""
    col, row = session.player
    target = session.maze.wrap((col + direction[0], row + direction[1]))
    if not session.maze.is_path(target):
        return MoveOutcome.REJECTED
    session.player = target

    if target in session.cheese:
        session.cheese.discard(target)
        session.score += 1
        logger.info("Collected Cheese! Level Score: %d (Current Total: %d)",
                    session.score, session.total_score + session.score)
        # while slowed the curve waits for tick_slow to catch up
        if not session.is_slowed:
            session.cat_delay_ms = delay_for(session.collected_fraction)
            logger.debug("Cat speed adjusted! New delay: %dms", session.cat_delay_ms)
        if not session.cheese:
            return MoveOutcome.LEVEL_COMPLETE
        return MoveOutcome.ATE_CHEESE

    for powerup in session.powerups:
        if powerup.pos != target:
            continue
        if powerup.kind is PowerupKind.SLOW_CAT and not session.is_slowed:
            session.powerups.remove(powerup)
            logger.info("Powerup Collected: Cat Slowdown!")
            activate_slow(session)
            return MoveOutcome.GOT_POWERUP
        break

    return MoveOutcome.MOVED


# ---------------------------------------------------------------------------
# Cat pathfinding
# ---------------------------------------------------------------------------
def shortest_path(maze, start, target):
    """Breadth-first search from start to target.

    Returns the cells after start up to and including target, [] when
    already there, or None when the target cannot be reached.
    """
    if start == target:
        return []

    parent = {start: None}
    queue = deque([start])
    found = False
    while queue and not found:
        current = queue.popleft()
        for nxt in maze.neighbors(current):
            if nxt in parent:
                continue
            parent[nxt] = current
            if nxt == target:
                found = True
                break
            queue.append(nxt)

    if not found:
        return None

    path = []
    pos = target
    while pos != start:
        path.append(pos)
        pos = parent[pos]
    path.reverse()
    return path


def cat_step(maze, cat, target):
    """Next cell on the cat's shortest path, or None to hold position."""
    path = shortest_path(maze, cat, target)
    if not path:
        return None
    return path[0]


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------
TRANSITIONS = {
    (GameState.INTRO, Event.INTRO_DONE):
        (GameState.START_MENU, ()),
    (GameState.START_MENU, Event.START):
        (GameState.PLAYING, (Action.NEW_GAME,)),
    (GameState.PLAYING, Event.PAUSE):
        (GameState.PAUSED, (Action.SUSPEND,)),
    (GameState.PAUSED, Event.RESUME):
        (GameState.PLAYING, (Action.RESUME_TICKS,)),
    (GameState.PLAYING, Event.RESET):
        (GameState.PLAYING, (Action.NEW_GAME,)),
    (GameState.PLAYING, Event.CAUGHT):
        (GameState.GAME_OVER, (Action.BANK_SCORE,)),
    (GameState.PLAYING, Event.LEVEL_COMPLETE):
        (GameState.LEVEL_WON, (Action.BANK_SCORE, Action.SCHEDULE_ADVANCE)),
    (GameState.PLAYING, Event.LAST_LEVEL_COMPLETE):
        (GameState.GAME_WON_FINAL, (Action.BANK_SCORE,)),
    (GameState.LEVEL_WON, Event.ADVANCE):
        (GameState.PLAYING, (Action.NEXT_LEVEL,)),
    (GameState.LEVEL_WON, Event.RESET):
        (GameState.PLAYING, (Action.NEW_GAME,)),
    (GameState.GAME_OVER, Event.RESET):
        (GameState.PLAYING, (Action.NEW_GAME,)),
}


def next_state(state, event):
    """Resolve (state, event) to (next state, actions). Unlisted pairs are no-ops."""
    if event is Event.QUIT:
        return state, (Action.QUIT,)
    return TRANSITIONS.get((state, event), (state, ()))


# ---------------------------------------------------------------------------
# Tick scheduling
# ---------------------------------------------------------------------------
class TaskScheduler:
    """One-shot timers on the engine clock, stamped with the session epoch.

    A task whose epoch no longer matches the session is dropped when it
    comes due, so bumping the epoch cancels everything in flight.
    """

    def __init__(self, session):
        self.session = session
        self.now_ms = 0
        self._queue = []
        self._counter = itertools.count()

    def schedule(self, delay_ms, callback):
        if delay_ms < 0:
            raise ValueError(f"delay must be non-negative, got {delay_ms}")
        heapq.heappush(self._queue, (self.now_ms + delay_ms, next(self._counter),
                                     self.session.epoch, callback))

    def run_due(self, now_ms):
        while self._queue and self._queue[0][0] <= now_ms:
            _due, _, epoch, callback = heapq.heappop(self._queue)
            if epoch != self.session.epoch:
                logger.debug("Dropping stale task from epoch %d (now %d)", epoch, self.session.epoch)
                continue
            # reschedules from inside a callback count from the frame time,
            # so a long frame fires each recurring task at most once
            self.now_ms = now_ms
            callback()
        self.now_ms = now_ms

    def pending(self):
        return len(self._queue)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
class Engine:
    """Owns the session and the game state; every intent goes through here."""

    def __init__(self, rng=None, layouts=LEVEL_LAYOUTS, player_start=PLAYER_START,
                 cat_start=CAT_START, cheese_count=NUM_CHEESE, powerup_count=NUM_POWERUPS):
        if not layouts:
            raise ValueError("at least one level layout is required")
        self.rng = rng if rng is not None else random.Random()
        self.layouts = layouts
        self.player_start = player_start
        self.cat_start = cat_start
        self.cheese_count = cheese_count
        self.powerup_count = powerup_count

        self.session = Session()
        self.scheduler = TaskScheduler(self.session)
        self.state = GameState.INTRO
        self.running = True
        self.clock_ms = 0

        # the board behind the intro; items are placed when a game starts
        self.session.maze = load_level(1, self.layouts)
        self.session.player = self.player_start
        self.session.cat = self.cat_start
        self.scheduler.schedule(INTRO_DELAY_MS, self.skip_intro)

    # -- intents ------------------------------------------------------------
    def skip_intro(self):
        self.dispatch(Event.INTRO_DONE)

    def start_game(self):
        self.dispatch(Event.START)

    def pause(self):
        self.dispatch(Event.PAUSE)

    def resume(self):
        self.dispatch(Event.RESUME)

    def toggle_pause(self):
        if self.state is GameState.PLAYING:
            self.pause()
        elif self.state is GameState.PAUSED:
            self.resume()

    def reset(self):
        self.dispatch(Event.RESET)

    def quit(self):
        self.dispatch(Event.QUIT)

    def move(self, direction):
        if self.state is not GameState.PLAYING:
            return MoveOutcome.REJECTED
        outcome = attempt_move(self.session, direction)
        if outcome is MoveOutcome.LEVEL_COMPLETE:
            self._complete_level()
        return outcome

    # -- clock --------------------------------------------------------------
    def update(self, elapsed_ms):
        """Advance the engine clock by one frame and fire due timers."""
        self.clock_ms += elapsed_ms
        if self.state is GameState.PLAYING:
            tick_slow(self.session, elapsed_ms)
        self.scheduler.run_due(self.clock_ms)

    def snapshot(self):
        s = self.session
        return Snapshot(
            state=self.state,
            maze=s.maze,
            player=s.player,
            cat=s.cat,
            cheese=frozenset(s.cheese),
            powerups=tuple(s.powerups),
            level=s.level,
            score=s.score,
            total_score=s.total_score,
            slowed=s.is_slowed,
        )

    # -- transitions --------------------------------------------------------
    def dispatch(self, event):
        new_state, actions = next_state(self.state, event)
        if new_state is not self.state:
            logger.debug("%s -> %s on %s", self.state.name, new_state.name, event.name)
        self.state = new_state
        for action in actions:
            self._apply(action)
        return new_state

    def _apply(self, action):
        s = self.session
        if action is Action.NEW_GAME:
            logger.info("--- Game Reset! ---")
            s.bump_epoch()
            s.total_score = 0
            self._init_level(1)
            self._schedule_cat()
        elif action is Action.BANK_SCORE:
            s.total_score += s.score
            s.score = 0
        elif action is Action.SCHEDULE_ADVANCE:
            self.scheduler.schedule(LEVEL_WON_DELAY_MS, self._advance)
        elif action is Action.NEXT_LEVEL:
            s.bump_epoch()
            self._init_level(s.level + 1)
            self._schedule_cat()
        elif action is Action.SUSPEND:
            s.bump_epoch()
            logger.info("Game Paused.")
        elif action is Action.RESUME_TICKS:
            s.bump_epoch()
            self._schedule_cat()
            logger.info("Game Resumed.")
        elif action is Action.QUIT:
            self.running = False

    def _advance(self):
        self.dispatch(Event.ADVANCE)

    def _complete_level(self):
        s = self.session
        if load_level(s.level + 1, self.layouts) is NO_MORE_LEVELS:
            self.dispatch(Event.LAST_LEVEL_COMPLETE)
            logger.info("You beat all levels! YOU WIN! Final Score: %d", s.total_score)
        else:
            self.dispatch(Event.LEVEL_COMPLETE)
            logger.info("Level %d Complete! Proceeding to Level %d", s.level, s.level + 1)

    def _init_level(self, level):
        s = self.session
        s.maze = load_level(level, self.layouts)
        s.level = level
        s.score = 0
        s.cat_delay_ms = INITIAL_DELAY_MS
        s.cheese, s.powerups = populate_level(s.maze, self.player_start, self.cat_start,
                                              self.cheese_count, self.powerup_count, self.rng)
        s.initial_cheese = len(s.cheese)
        s.player = self.player_start
        s.cat = self.cat_start
        s.slow_remaining_ms = 0

        if s.cheese or s.powerups:
            logger.info("Level %d started. Collect %d cheese! Cat Delay: %dms",
                        level, s.initial_cheese, s.cat_delay_ms)
        else:
            logger.warning("No items placed for level %d.", level)

    # -- cat ----------------------------------------------------------------
    def _schedule_cat(self):
        self.scheduler.schedule(self.session.cat_delay_ms, self._cat_tick)

    def _cat_tick(self):
        # a slowed cat keeps ticking but stands completely still
        s = self.session
        if self.state is not GameState.PLAYING:
            return
        if not s.is_slowed:
            step = cat_step(s.maze, s.cat, s.player)
            if step is not None:
                s.cat = step
            if s.cat == s.player:
                logger.info("Caught by the cat! Game Over. Current Level Score: %d", s.score)
                self.dispatch(Event.CAUGHT)
                logger.info("Final Total Score: %d", s.total_score)
                return
        self._schedule_cat()


# ---------------------------------------------------------------------------
# Draw helpers
# ---------------------------------------------------------------------------
def cell_rect(col, row):
    return pygame.Rect(col * TILE, row * TILE, TILE, TILE)


def cell_center(col, row):
    return col * TILE + TILE // 2, row * TILE + TILE // 2


def draw_wall_segment(surface, col, row, maze):
    """Draw a wall tile, outlined on the sides that face open cells."""
    rect = cell_rect(col, row)
    pygame.draw.rect(surface, WALL_OUTLINE, rect)
    pygame.draw.rect(surface, WALL_FILL, rect.inflate(-4, -4))

    for dx, dy in SEARCH_ORDER:
        nc, nr = col + dx, row + dy
        if maze.in_bounds((nc, nr)) and maze.tile((nc, nr)) == WALL:
            # bridge into the neighbouring wall
            bridge = rect.inflate(-4, -4).move(dx * 2, dy * 2)
            pygame.draw.rect(surface, WALL_FILL, bridge)


def draw_cheese(surface, col, row):
    x, y = cell_center(col, row)
    r = int(TILE * 0.35)
    points = [(x - r, y + r // 2), (x + r, y + r // 2), (x + r, y - r // 3), (x - r // 3, y - r)]
    pygame.draw.polygon(surface, CHEESE_COLOR, points)
    pygame.draw.circle(surface, CHEESE_HOLE, (x + 2, y), 2)
    pygame.draw.circle(surface, CHEESE_HOLE, (x - 3, y + 3), 1)


def draw_powerup(surface, col, row, phase):
    x, y = cell_center(col, row)
    radius = TILE * 0.7 * 0.4
    pygame.draw.circle(surface, POWERUP_BLUE, (x, y), int(radius))
    sparkle = radius * (0.6 + 0.2 * math.sin(phase))
    pygame.draw.circle(surface, WHITE, (x, y), max(1, int(sparkle)))


def draw_mouse(surface, col, row):
    x, y = cell_center(col, row)
    r = TILE // 2 - 3
    pygame.draw.circle(surface, MOUSE_GREY, (x - r + 2, y - r + 2), r // 2)
    pygame.draw.circle(surface, MOUSE_GREY, (x + r - 2, y - r + 2), r // 2)
    pygame.draw.circle(surface, MOUSE_PINK, (x - r + 2, y - r + 2), r // 4)
    pygame.draw.circle(surface, MOUSE_PINK, (x + r - 2, y - r + 2), r // 4)
    pygame.draw.circle(surface, MOUSE_GREY, (x, y + 1), r)
    pygame.draw.circle(surface, BLACK, (x - 3, y), 2)
    pygame.draw.circle(surface, BLACK, (x + 3, y), 2)


def draw_cat(surface, col, row, slowed):
    x, y = cell_center(col, row)
    r = TILE // 2 - 1
    color = SLOW_BLUE if slowed else CAT_ORANGE
    pygame.draw.polygon(surface, color, [(x - r, y - 2), (x - r + 2, y - r - 2), (x - 2, y - r + 3)])
    pygame.draw.polygon(surface, color, [(x + r, y - 2), (x + r - 2, y - r - 2), (x + 2, y - r + 3)])
    pygame.draw.circle(surface, color, (x, y + 1), r - 1)
    pygame.draw.circle(surface, BLACK, (x - 4, y - 1), 2)
    pygame.draw.circle(surface, BLACK, (x + 4, y - 1), 2)


# ---------------------------------------------------------------------------
# Front end
# ---------------------------------------------------------------------------
class App:
    KEY_DIRECTIONS = {
        pygame.K_UP: UP, pygame.K_w: UP,
        pygame.K_DOWN: DOWN, pygame.K_s: DOWN,
        pygame.K_LEFT: LEFT, pygame.K_a: LEFT,
        pygame.K_RIGHT: RIGHT, pygame.K_d: RIGHT,
    }

    def __init__(self, engine):
        pygame.init()
        self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
        pygame.display.set_caption(TITLE)
        self.clock = pygame.time.Clock()
        self.engine = engine

        # Fonts
        self.font_large = pygame.font.Font(None, 40)
        self.font_medium = pygame.font.Font(None, 26)
        self.font_small = pygame.font.Font(None, 20)

    def handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.engine.quit()
            elif event.type == pygame.KEYDOWN:
                self.handle_key(event.key)

    def handle_key(self, key):
        engine = self.engine
        if key == pygame.K_ESCAPE:
            engine.quit()
        elif engine.state is GameState.INTRO:
            engine.skip_intro()
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            engine.start_game()
        elif key == pygame.K_p:
            engine.toggle_pause()
        elif key == pygame.K_r:
            engine.reset()
        elif key in self.KEY_DIRECTIONS:
            engine.move(self.KEY_DIRECTIONS[key])

    def draw(self, snap):
        self.screen.fill(BACKGROUND)

        if snap.state in (GameState.PLAYING, GameState.PAUSED):
            self._draw_board(snap)
        if snap.state is GameState.PLAYING:
            self._draw_hud(snap)

        if snap.state is GameState.PAUSED:
            self._draw_overlay((0, 0, 0, 150), [
                (self.font_large, "PAUSED", WHITE),
                (self.font_small, "Press 'P' to Resume", WHITE),
            ])
        elif snap.state is GameState.GAME_OVER:
            self._draw_overlay(LOSE_RED + (180,), [
                (self.font_large, "GAME OVER!", WHITE),
                (self.font_medium, f"Final Score: {snap.total_score}", WHITE),
                (self.font_small, "Press 'R' to Restart", WHITE),
            ])
        elif snap.state is GameState.LEVEL_WON:
            self._draw_overlay(WIN_GREEN + (180,), [
                (self.font_large, f"LEVEL {snap.level} COMPLETE!", WHITE),
                (self.font_medium, f"Total Score: {snap.total_score}", WHITE),
                (self.font_small, "Loading next level...", WHITE),
            ])
        elif snap.state is GameState.GAME_WON_FINAL:
            self._draw_overlay(WIN_GREEN + (180,), [
                (self.font_large, "YOU BEAT THE GAME!", WHITE),
                (self.font_medium, f"Grand Total Score: {snap.total_score}", WHITE),
                (self.font_small, "Press ESC to Quit", WHITE),
            ])
        elif snap.state is GameState.INTRO:
            self._draw_lines(HEIGHT * 0.45, [
                (self.font_medium, "A Game Of", (204, 204, 255)),
                (self.font_large, "Cat and Mouse", WHITE),
            ])
        elif snap.state is GameState.START_MENU:
            self._draw_lines(HEIGHT * 0.15, [
                (self.font_large, TITLE, WHITE),
                (self.font_medium, "Press ENTER to Start", (204, 255, 204)),
                (self.font_medium, "--- INSTRUCTIONS ---", (178, 178, 230)),
                (self.font_small, "WASD or Arrow Keys to Move", WHITE),
                (self.font_small, "P to Pause / Resume", WHITE),
                (self.font_small, "R to Reset Game", WHITE),
                (self.font_small, "ESC to Quit", WHITE),
                (self.font_small, "Collect all the cheese to advance. Avoid the cat, it gets faster!", (204, 204, 204)),
                (self.font_small, "Blue items will temporarily freeze the cat.", (204, 204, 204)),
            ])

        pygame.display.flip()

    def _draw_board(self, snap):
        maze = snap.maze
        for row in range(maze.rows):
            for col in range(maze.cols):
                if maze.grid[row][col] == WALL:
                    draw_wall_segment(self.screen, col, row, maze)

        for col, row in snap.cheese:
            draw_cheese(self.screen, col, row)
        # sparkle phase lives here, not in the engine
        phase = pygame.time.get_ticks() * 0.005
        for powerup in snap.powerups:
            draw_powerup(self.screen, powerup.col, powerup.row, phase)

        draw_mouse(self.screen, *snap.player)
        draw_cat(self.screen, *snap.cat, snap.slowed)

    def _draw_hud(self, snap):
        """Level, score and cheese left, drawn over the top wall row."""
        left = self.font_small.render(
            f"Level: {snap.level}   Total Score: {snap.total_score + snap.score}", True, WHITE)
        self.screen.blit(left, (TILE, 6))

        right = self.font_small.render(f"Cheese Left: {len(snap.cheese)}", True, CHEESE_COLOR)
        self.screen.blit(right, (WIDTH - right.get_width() - TILE, 6))

        if snap.slowed:
            txt = self.font_small.render("SLOWED!", True, SLOW_BLUE)
            self.screen.blit(txt, (WIDTH // 2 - txt.get_width() // 2, 6))

    def _draw_overlay(self, rgba, lines):
        overlay = pygame.Surface((WIDTH, HEIGHT), pygame.SRCALPHA)
        overlay.fill(rgba)
        self.screen.blit(overlay, (0, 0))
        self._draw_lines(HEIGHT * 0.40, lines)

    def _draw_lines(self, y, lines):
        for font, text, color in lines:
            txt = font.render(text, True, color)
            self.screen.blit(txt, (WIDTH // 2 - txt.get_width() // 2, int(y)))
            y += txt.get_height() + 12

    def run(self):
        while self.engine.running:
            self.handle_events()
            elapsed = self.clock.tick(FPS)
            self.engine.update(elapsed)
            self.draw(self.engine.snapshot())

        pygame.quit()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=TITLE)
    parser.add_argument("--seed", type=int, default=None,
                        help="seed for item placement (default: time-based)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.info("Controls: WASD/Arrows move, P pause/resume, R reset, ENTER start, ESC quit")

    engine = Engine(rng=random.Random(args.seed))
    App(engine).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
