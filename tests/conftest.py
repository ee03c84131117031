import random

import pytest

import catmouse

OPEN_ROOM = (
    "11111",
    "10001",
    "10001",
    "10001",
    "11111",
)

CORRIDOR = (
    "111111111",
    "100000001",
    "111111111",
)


@pytest.fixture
def make_session():
    """Build a Session on a hand-written layout with items at fixed spots."""

    def _make(layout=OPEN_ROOM, player=(1, 1), cat=(3, 3), cheese=(), powerups=(),
              tunnel_row=catmouse.TUNNEL_ROW):
        session = catmouse.Session()
        session.maze = catmouse.Maze(layout, tunnel_row=tunnel_row)
        session.player = player
        session.cat = cat
        session.cheese = set(cheese)
        session.initial_cheese = len(session.cheese)
        session.powerups = [catmouse.Powerup(col, row) for col, row in powerups]
        return session

    return _make


@pytest.fixture
def corridor_engine():
    """Engine on a straight corridor: mouse at (1, 1), cat five cells away at (6, 1)."""

    def _make(levels=1, cheese_count=1, powerup_count=0):
        return catmouse.Engine(
            rng=random.Random(7),
            layouts=(CORRIDOR,) * levels,
            player_start=(1, 1),
            cat_start=(6, 1),
            cheese_count=cheese_count,
            powerup_count=powerup_count,
        )

    return _make
