"""End-to-end tests for the Engine: intents, timers and scoring."""

import logging
import random

import pytest

import catmouse
from catmouse import (
    CAT_START,
    INITIAL_DELAY_MS,
    INTRO_DELAY_MS,
    LEVEL_LAYOUTS,
    LEVEL_WON_DELAY_MS,
    NO_MORE_LEVELS,
    NUM_CHEESE,
    NUM_POWERUPS,
    PLAYER_START,
    RIGHT,
    SLOW_DURATION_MS,
    Engine,
    GameState,
    Maze,
    MoveOutcome,
    Powerup,
    delay_for,
    load_level,
    populate_level,
)


def start(engine):
    engine.skip_intro()
    engine.start_game()
    assert engine.state is GameState.PLAYING
    return engine.session


def place_single_cheese(session, pos):
    session.cheese = {pos}
    session.initial_cheese = 1
    session.powerups = []


class TestIntroAndMenu:
    def test_intro_advances_on_its_own(self, corridor_engine):
        engine = corridor_engine()
        engine.update(INTRO_DELAY_MS - 1)
        assert engine.state is GameState.INTRO
        engine.update(1)
        assert engine.state is GameState.START_MENU

    def test_intro_shows_the_maze_without_items(self, caplog):
        with caplog.at_level(logging.INFO, logger="catmouse"):
            engine = Engine(rng=random.Random(11))
        assert engine.session.maze.grid == Maze(LEVEL_LAYOUTS[0]).grid
        assert engine.session.cheese == set()
        assert engine.session.powerups == []
        assert "started" not in caplog.text

    def test_start_places_items_from_a_fresh_rng(self, caplog):
        engine = Engine(rng=random.Random(11))
        with caplog.at_level(logging.INFO, logger="catmouse"):
            session = start(engine)
        cheese, powerups = populate_level(load_level(1), PLAYER_START, CAT_START,
                                          NUM_CHEESE, NUM_POWERUPS, random.Random(11))
        assert session.cheese == cheese
        assert session.powerups == powerups
        assert caplog.text.count("Level 1 started") == 1

    def test_start_ignored_during_intro(self, corridor_engine):
        engine = corridor_engine()
        engine.start_game()
        assert engine.state is GameState.INTRO

    def test_moves_ignored_outside_play(self, corridor_engine):
        engine = corridor_engine()
        engine.skip_intro()
        assert engine.move(RIGHT) is MoveOutcome.REJECTED
        assert engine.session.player == (1, 1)

    def test_start_resets_level_and_score(self, corridor_engine):
        engine = corridor_engine(levels=2)
        engine.session.total_score = 9
        engine.session.level = 2
        session = start(engine)
        assert session.level == 1
        assert session.score == 0
        assert session.total_score == 0
        assert session.cat_delay_ms == INITIAL_DELAY_MS

    def test_quit_stops_the_loop(self, corridor_engine):
        engine = corridor_engine()
        start(engine)
        engine.quit()
        assert engine.running is False
        assert engine.state is GameState.PLAYING


class TestLevelCompletion:
    def test_single_cheese_completes_level_and_banks_score(self, corridor_engine):
        engine = corridor_engine(levels=2)
        session = start(engine)
        place_single_cheese(session, (2, 1))

        assert engine.move(RIGHT) is MoveOutcome.LEVEL_COMPLETE
        assert engine.state is GameState.LEVEL_WON
        assert session.cheese == set()
        assert session.total_score == 1
        assert session.score == 0

        engine.update(LEVEL_WON_DELAY_MS - 1)
        assert engine.state is GameState.LEVEL_WON
        engine.update(1)
        assert engine.state is GameState.PLAYING
        assert session.level == 2
        assert session.total_score == 1
        assert session.score == 0
        assert session.player == (1, 1)
        assert session.cat == (6, 1)

    def test_cat_frozen_during_level_won(self, corridor_engine):
        engine = corridor_engine(levels=2)
        session = start(engine)
        place_single_cheese(session, (2, 1))
        engine.move(RIGHT)
        engine.update(LEVEL_WON_DELAY_MS - 1)
        assert session.cat == (6, 1)

    def test_last_level_wins_the_game(self, corridor_engine):
        engine = corridor_engine(levels=1)
        session = start(engine)
        place_single_cheese(session, (2, 1))
        engine.move(RIGHT)
        assert engine.state is GameState.GAME_WON_FINAL
        assert session.total_score == 1

        engine.reset()
        engine.update(LEVEL_WON_DELAY_MS * 2)
        assert engine.state is GameState.GAME_WON_FINAL

    def test_last_level_is_decided_by_the_loader(self, corridor_engine, monkeypatch):
        engine = corridor_engine(levels=3)
        session = start(engine)
        real_load_level = catmouse.load_level
        monkeypatch.setattr(catmouse, "load_level", lambda level, layouts=LEVEL_LAYOUTS:
                            NO_MORE_LEVELS if level > 1 else real_load_level(level, layouts))
        place_single_cheese(session, (2, 1))
        engine.move(RIGHT)
        assert engine.state is GameState.GAME_WON_FINAL

    def test_reset_during_level_won_cancels_advance(self, corridor_engine):
        engine = corridor_engine(levels=2)
        session = start(engine)
        place_single_cheese(session, (2, 1))
        engine.move(RIGHT)
        engine.reset()
        assert engine.state is GameState.PLAYING
        assert session.total_score == 0
        engine.update(LEVEL_WON_DELAY_MS)
        assert session.level == 1

    def test_real_levels_advance_in_order(self):
        engine = Engine(rng=random.Random(5))
        session = start(engine)
        for level in (1, 2):
            assert session.maze.grid == Maze(LEVEL_LAYOUTS[level - 1]).grid
            place_single_cheese(session, (2, 1))
            session.player = (1, 1)
            assert engine.move(RIGHT) is MoveOutcome.LEVEL_COMPLETE
            engine.update(LEVEL_WON_DELAY_MS)
        assert session.level == 3
        assert session.maze.grid == Maze(LEVEL_LAYOUTS[2]).grid
        assert session.total_score == 2


class TestCatTicks:
    def test_caught_ends_game_and_banks_score(self, corridor_engine):
        engine = corridor_engine()
        session = start(engine)
        session.score = 4
        session.initial_cheese = 10

        for expected_col in (5, 4, 3, 2):
            engine.update(INITIAL_DELAY_MS)
            assert session.cat == (expected_col, 1)
            assert engine.state is GameState.PLAYING

        engine.update(INITIAL_DELAY_MS)
        assert session.cat == session.player
        assert engine.state is GameState.GAME_OVER
        assert session.total_score == 4
        assert session.score == 0

    def test_cat_stops_after_game_over_and_reset_restarts(self, corridor_engine):
        engine = corridor_engine()
        session = start(engine)
        for _ in range(5):
            engine.update(INITIAL_DELAY_MS)
        assert engine.state is GameState.GAME_OVER
        engine.update(INITIAL_DELAY_MS * 5)
        assert engine.state is GameState.GAME_OVER

        engine.reset()
        assert engine.state is GameState.PLAYING
        assert session.cat == (6, 1)
        assert session.total_score == 0

    def test_long_frame_moves_cat_one_cell(self, corridor_engine):
        engine = corridor_engine()
        session = start(engine)
        engine.update(2000)
        assert session.cat == (5, 1)
        assert engine.state is GameState.PLAYING

        engine.update(INITIAL_DELAY_MS - 1)
        assert session.cat == (5, 1)
        engine.update(1)
        assert session.cat == (4, 1)

    def test_resets_leave_a_single_live_tick(self, corridor_engine):
        engine = corridor_engine()
        session = start(engine)
        for _ in range(3):
            engine.reset()
        engine.update(INITIAL_DELAY_MS)
        assert session.cat == (5, 1)

    def test_pause_suspends_and_resume_restarts_interval(self, corridor_engine):
        engine = corridor_engine()
        session = start(engine)
        engine.pause()
        assert engine.state is GameState.PAUSED
        engine.update(1000)
        assert session.cat == (6, 1)
        assert engine.move(RIGHT) is MoveOutcome.REJECTED

        epoch = session.epoch
        engine.toggle_pause()
        assert engine.state is GameState.PLAYING
        assert session.epoch > epoch
        engine.update(INITIAL_DELAY_MS - 1)
        assert session.cat == (6, 1)
        engine.update(1)
        assert session.cat == (5, 1)

    def test_unreachable_player_cat_holds(self):
        engine = Engine(rng=random.Random(1), layouts=(("11111", "10101", "11111"),),
                        player_start=(1, 1), cat_start=(3, 1), cheese_count=0, powerup_count=0)
        session = start(engine)
        engine.update(INITIAL_DELAY_MS * 4)
        assert session.cat == (3, 1)
        assert engine.state is GameState.PLAYING


class TestSlowPowerup:
    def test_slowed_cat_stands_still_then_resumes(self, corridor_engine):
        engine = corridor_engine()
        session = start(engine)
        place_single_cheese(session, (7, 1))
        session.powerups = [Powerup(2, 1)]

        assert engine.move(RIGHT) is MoveOutcome.GOT_POWERUP
        engine.update(INITIAL_DELAY_MS + 100)
        assert session.cat == (6, 1)
        assert engine.snapshot().slowed

        engine.update(SLOW_DURATION_MS)
        assert not engine.snapshot().slowed
        assert session.cat_delay_ms == delay_for(0.0)
        assert session.cat == (5, 1)

        for expected_col in (4, 3):
            engine.update(INITIAL_DELAY_MS)
            assert session.cat == (expected_col, 1)
        engine.update(INITIAL_DELAY_MS)
        assert session.cat == session.player
        assert engine.state is GameState.GAME_OVER

    def test_slow_timer_does_not_age_while_paused(self, corridor_engine):
        engine = corridor_engine()
        session = start(engine)
        place_single_cheese(session, (7, 1))
        session.powerups = [Powerup(2, 1)]
        engine.move(RIGHT)
        engine.pause()
        engine.update(SLOW_DURATION_MS * 2)
        assert session.slow_remaining_ms == SLOW_DURATION_MS


class TestSnapshot:
    def test_snapshot_reflects_session(self, corridor_engine):
        engine = corridor_engine()
        session = start(engine)
        place_single_cheese(session, (3, 1))
        engine.move(RIGHT)
        snap = engine.snapshot()
        assert snap.state is GameState.PLAYING
        assert snap.player == (2, 1)
        assert snap.cat == (6, 1)
        assert snap.cheese == frozenset({(3, 1)})
        assert snap.level == 1
        assert snap.score == 0
        assert snap.total_score == 0
        assert snap.slowed is False
        assert snap.maze is session.maze

    def test_snapshot_is_detached(self, corridor_engine):
        engine = corridor_engine()
        session = start(engine)
        place_single_cheese(session, (3, 1))
        snap = engine.snapshot()
        session.cheese.clear()
        assert snap.cheese == frozenset({(3, 1)})

    def test_snapshot_powerups_are_immutable(self, corridor_engine):
        engine = corridor_engine()
        session = start(engine)
        session.powerups = [Powerup(3, 1)]
        snap = engine.snapshot()
        with pytest.raises(AttributeError):
            snap.powerups[0].col = 4
        assert session.powerups[0].pos == (3, 1)
        assert snap.powerups == (Powerup(3, 1),)
