import numpy as np
import pytest

from game.platformer.config import TINT_RED, TINT_YELLOW, make_config
from game.platformer.entities import FrameInput, GameState
from game.platformer.errors import RestartUnavailableError, UnknownCollectibleError
from game.platformer.gameplay import COLLECTIBLES, HAZARDS, PLAYER, GameplayLoop, GameSession


def collect_all(loop):
    for cup in loop.collectibles:
        loop.on_collect(cup.index)


class TestCreate:
    def test_scene_layout(self, loop, engine):
        assert len(engine.platforms) == 4
        assert len(engine.group(PLAYER)) == 1
        assert len(engine.group(COLLECTIBLES)) == 12
        assert engine.group(HAZARDS) == []
        assert engine.texts[0].text == "Score: 0"
        assert len(engine.buttons) == 1

    def test_collectibles_spaced_along_top(self, loop):
        xs = [c.home_x for c in loop.collectibles]
        assert xs == [12 + 70 * i for i in range(12)]
        for cup in loop.collectibles:
            assert cup.body.y == 0
            assert 0.4 <= cup.bounce_y <= 0.8
            assert cup.body.bounce == (0.0, cup.bounce_y)

    def test_player_setup(self, loop):
        body = loop.player.body
        assert (body.x, body.y) == (100, 450)
        assert body.bounce == (0.2, 0.2)
        assert body.collide_world_bounds
        assert loop.player.alive

    def test_animations_registered(self, loop, engine):
        assert engine.animations["left"] == ("dude", [0, 1, 2, 3], 10, -1)
        assert engine.animations["idle"] == ("dude", [4], 20, 0)
        assert engine.animations["right"] == ("dude", [5, 6, 7, 8], 10, -1)

    def test_initial_state(self, loop):
        assert loop.score == 0
        assert loop.state is GameState.PLAYING
        assert loop.count_active() == 12


class TestFrameUpdate:
    def test_left(self, loop):
        loop.on_frame_update(FrameInput(left=True))
        assert loop.player.body.vx == -160
        assert loop.player.body.animation == "left"

    def test_right(self, loop):
        loop.on_frame_update(FrameInput(right=True))
        assert loop.player.body.vx == 160
        assert loop.player.body.animation == "right"

    def test_left_wins_over_right(self, loop):
        loop.on_frame_update(FrameInput(left=True, right=True))
        assert loop.player.body.vx == -160

    def test_no_keys_idles(self, loop):
        loop.on_frame_update(FrameInput(right=True))
        loop.on_frame_update(FrameInput())
        assert loop.player.body.vx == 0
        assert loop.player.body.animation == "idle"

    def test_jump_when_grounded(self, loop, engine):
        engine.on_ground = True
        loop.on_frame_update(FrameInput(up=True))
        assert loop.player.body.vy == -330

    def test_no_jump_when_airborne(self, loop, engine):
        engine.on_ground = False
        loop.on_frame_update(FrameInput(up=True))
        assert loop.player.body.vy == 0


class TestCollect:
    def test_collect_one(self, loop):
        loop.on_collect(3)
        assert loop.score == 10
        assert not loop.collectibles[3].active
        assert not loop.collectibles[3].body.enabled
        assert loop.count_active() == 11

    def test_score_text_follows_score(self, loop, engine):
        loop.on_collect(0)
        loop.on_collect(1)
        assert engine.texts[0].text == "Score: 20"

    def test_collect_same_id_twice(self, loop):
        loop.on_collect(5)
        loop.on_collect(5)
        assert loop.score == 10
        assert loop.count_active() == 11

    def test_unknown_id(self, loop):
        with pytest.raises(UnknownCollectibleError):
            loop.on_collect(12)
        with pytest.raises(KeyError):
            loop.on_collect(-1)

    def test_full_clear(self, loop, engine):
        collect_all(loop)
        assert loop.score == 120
        assert loop.count_active() == 12
        assert len(loop.hazards) == 1
        assert len(engine.group(HAZARDS)) == 1
        assert loop.clears == 1
        for cup in loop.collectibles:
            assert cup.body.enabled
            assert (cup.body.x, cup.body.y) == (cup.home_x, 0)

    def test_spawn_happens_once_after_last_collect(self, loop, monkeypatch):
        spawned = []
        original = loop.spawn_hazard

        def spy():
            # Runs once the set is back
            spawned.append(loop.count_active())
            return original()

        monkeypatch.setattr(loop, "spawn_hazard", spy)

        for i, cup in enumerate(reversed(loop.collectibles)):
            loop.on_collect(cup.index)
            if i < 11:
                assert spawned == []
        assert spawned == [12]

    def test_every_cup_disabled_before_reactivation(self, loop, engine):
        collect_all(loop)
        events = [e[0] for e in engine.log if e[0] in ("disable", "enable")]
        assert events == ["disable"] * 12 + ["enable"] * 12

    def test_order_does_not_matter(self, engine):
        order = np.random.default_rng(3).permutation(12)
        game = GameplayLoop(engine, rng=np.random.default_rng(0))
        game.create()
        for idx in order:
            game.on_collect(int(idx))
        assert game.score == 120
        assert len(game.hazards) == 1

    def test_two_clears_two_hazards(self, loop):
        collect_all(loop)
        collect_all(loop)
        assert loop.score == 240
        assert len(loop.hazards) == 2
        assert loop.clears == 2

    def test_overlap_callback_routes_to_collect(self, loop, engine):
        callback = engine.contact_callback(PLAYER, COLLECTIBLES)
        cup = loop.collectibles[7]
        callback(loop.player.body, cup.body)
        callback(loop.player.body, cup.body)
        assert loop.score == 10
        assert not cup.active


class TestSpawnHazard:
    def test_ranges(self, loop):
        for _ in range(300):
            hazard = loop.spawn_hazard()
            assert 100 <= hazard.x <= 700
            assert 100 <= hazard.y <= 300
            assert -200 <= hazard.vx <= 200
            assert hazard.vy == 20
            assert hazard.bounce == 1.0
            assert hazard.body.vx == hazard.vx
            assert hazard.body.vy == 20
            assert hazard.body.collide_world_bounds
            assert hazard.body.bounce == (1.0, 1.0)

    def test_seeded_spawns_repeat(self, engine):
        def spawn_positions(seed):
            game = GameplayLoop(engine, rng=np.random.default_rng(seed))
            return [(h.x, h.y, h.vx) for h in (game.spawn_hazard() for _ in range(5))]

        assert spawn_positions(11) == spawn_positions(11)

    def test_pointer_tints(self, loop):
        hazard = loop.spawn_hazard()
        handlers = hazard.body.handlers

        handlers["hover"]()
        assert hazard.body.tint == TINT_RED
        handlers["hover_end"]()
        assert hazard.body.tint is None
        handlers["click"]()
        assert hazard.body.tint == TINT_YELLOW
        assert hazard.tint == TINT_YELLOW

    def test_pointer_has_no_gameplay_effect(self, loop):
        hazard = loop.spawn_hazard()
        for name in ("hover", "click", "hover_end"):
            hazard.body.handlers[name]()
        assert loop.state is GameState.PLAYING
        assert loop.score == 0


class TestHazardHit:
    def test_hit_ends_game(self, loop, engine):
        loop.on_hazard_hit()
        assert loop.state is GameState.OVER
        assert loop.game_over
        assert engine.paused
        assert loop.player.body.tint == TINT_RED
        assert loop.player.body.animation == "idle"
        assert not loop.player.alive

    def test_hit_replays_idle_from_start(self, loop, engine):
        loop.on_frame_update(FrameInput())
        loop.on_hazard_hit()
        last = [e for e in engine.log if e[0] == "animation"][-1]
        assert last == ("animation", loop.player.body, "idle", False)

    def test_frozen_after_hit(self, loop, engine):
        engine.on_ground = True
        loop.on_frame_update(FrameInput(right=True))
        loop.on_hazard_hit()
        body = loop.player.body
        frozen = (body.vx, body.vy, body.animation)
        log_size = len(engine.log)

        for frame_input in (FrameInput(left=True), FrameInput(right=True, up=True), FrameInput(up=True)):
            loop.on_frame_update(frame_input)

        assert (body.vx, body.vy, body.animation) == frozen
        assert len(engine.log) == log_size

    def test_no_score_after_hit(self, loop):
        loop.on_collect(0)
        loop.on_hazard_hit()
        loop.on_collect(1)
        assert loop.score == 10
        assert loop.collectibles[1].active

    def test_collider_callback_routes_to_hit(self, loop, engine):
        hazard = loop.spawn_hazard()
        engine.contact_callback(PLAYER, HAZARDS)(loop.player.body, hazard.body)
        assert loop.game_over

    def test_second_hit_is_noop(self, loop, engine):
        loop.on_hazard_hit()
        loop.on_hazard_hit()
        assert loop.state is GameState.OVER


class TestRestart:
    def test_loop_without_session(self, engine):
        game = GameplayLoop(engine, rng=np.random.default_rng(0))
        with pytest.raises(RestartUnavailableError):
            game.on_restart_request()

    def test_button_restarts_session(self, session, engine):
        old = session.loop
        resets_before = engine.resets
        for cup in old.collectibles[:5]:
            old.on_collect(cup.index)
        old.on_hazard_hit()

        engine.buttons[0].handlers["click"]()

        assert session.loop is not old
        assert session.restarts == 1
        assert engine.resets == resets_before + 1
        assert not engine.paused
        assert session.score == 0
        assert not session.game_over
        assert session.loop.count_active() == 12
        assert engine.texts[0].text == "Score: 0"
        assert len(engine.group(COLLECTIBLES)) == 12

    def test_reset_with_seed_is_repeatable(self, engine):
        s = GameSession(engine, seed=5)
        first = [c.bounce_y for c in s.reset().collectibles]
        second = [c.bounce_y for c in s.reset().collectibles]
        assert first == second


class TestSession:
    def test_tick_polls_input_then_steps(self, session, engine):
        session.tick(FrameInput(left=True))
        assert engine.steps == 1
        assert session.ticks == 1
        assert session.loop.player.body.vx == -160

    def test_custom_config(self, engine):
        s = GameSession(engine, seed=1, config=make_config(collectible_count=3, score_per_collectible=5))
        loop = s.reset()
        collect_all(loop)
        assert loop.score == 15
        assert len(loop.hazards) == 1
