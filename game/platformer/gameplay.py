"""
Gameplay loop for the coffee platformer
---------------------------------------
- Player runs left/right and jumps when standing on something
- 12 cafe cups give 10 points each; clearing them all brings the whole set
  back and spawns one more bouncing bomb
- Touching a bomb pauses the world and ends the game until a restart

GameplayLoop owns score and game state only. Every physical effect is an
Engine command; collisions come back as callbacks dispatched inside
Engine.step(), one at a time.
"""

from __future__ import annotations

import os
from typing import Callable, Dict, List, Optional

import numpy as np

from .config import ANIMATIONS, ASSETS, SPRITESHEET, TINT_RED, TINT_YELLOW, make_config
from .engine import PLATFORMS, Engine
from .entities import Collectible, FrameInput, GameState, Hazard, Player
from .errors import RestartUnavailableError, UnknownCollectibleError

PLAYER = "player"
COLLECTIBLES = "cafe"
HAZARDS = "bombs"


class GameplayLoop:
    """Score, collectibles, bombs and the PLAYING -> OVER transition"""

    def __init__(
        self,
        engine: Engine,
        rng: Optional[np.random.Generator] = None,
        config: Optional[dict] = None,
        restart_handler: Optional[Callable[[], object]] = None,
    ):
        self.engine = engine
        self.rng = rng if rng is not None else np.random.default_rng()
        self.config = config if config is not None else make_config()
        self.restart_handler = restart_handler

        self.score = 0
        self.state = GameState.PLAYING
        self.clears = 0

        self.player: Player = None  # type: ignore
        self.collectibles: List[Collectible] = []
        self.hazards: List[Hazard] = []
        self._collectible_by_body: Dict[int, Collectible] = {}
        self._score_text = None

    @property
    def game_over(self) -> bool:
        return self.state is GameState.OVER

    # ----------------------------
    # Scene lifecycle
    # ----------------------------

    def preload(self):
        asset_dir = self.config["asset_dir"]
        for key, asset in ASSETS.items():
            path = os.path.join(asset_dir, asset["file"]) if asset_dir else None
            self.engine.load_texture(key, asset["size"], asset["color"], asset["shape"], path=path)
        self.engine.load_spritesheet(
            SPRITESHEET["key"], SPRITESHEET["frame_size"], SPRITESHEET["frames"], SPRITESHEET["color"]
        )

    def create(self):
        cfg = self.config
        engine = self.engine

        engine.add_image(cfg["width"] / 2, cfg["height"] / 2, "sky")
        for x, y, scale in cfg["platforms"]:
            engine.add_platform(x, y, "ground", scale=scale)

        # Player
        px, py = cfg["player_start"]
        bounce = cfg["player_bounce"]
        body = engine.add_sprite(
            px, py, SPRITESHEET["key"], PLAYER,
            bounce=(bounce, bounce), collide_world_bounds=True, frame=ANIMATIONS["idle"]["frames"][0],
        )
        self.player = Player(body=body)

        for key, anim in ANIMATIONS.items():
            engine.create_animation(
                key, SPRITESHEET["key"], anim["frames"], anim["frame_rate"], repeat=anim["repeat"]
            )
        engine.add_collider(PLAYER, PLATFORMS)

        # Cafe cups along the top edge
        x0, y0 = cfg["collectible_start"]
        lo, hi = cfg["collectible_bounce_range"]
        for i in range(cfg["collectible_count"]):
            x = x0 + i * cfg["collectible_step_x"]
            bounce_y = float(self.rng.uniform(lo, hi))
            cup_body = engine.add_sprite(x, y0, "cafe", COLLECTIBLES, bounce=(0.0, bounce_y))
            cup = Collectible(index=i, home_x=x, bounce_y=bounce_y, body=cup_body)
            self.collectibles.append(cup)
            self._collectible_by_body[id(cup_body)] = cup
        engine.add_collider(COLLECTIBLES, PLATFORMS)
        engine.add_overlap(PLAYER, COLLECTIBLES, self._on_player_overlaps_cup)

        # Bombs
        engine.add_collider(HAZARDS, PLATFORMS)
        engine.add_collider(PLAYER, HAZARDS, self._on_player_hits_bomb)

        # HUD
        tx, ty = cfg["score_text_pos"]
        self._score_text = engine.add_text(
            tx, ty, self._score_label(), font_size=cfg["score_font_size"], color=cfg["score_color"]
        )
        bx, by = cfg["restart_button_pos"]
        engine.add_button(bx, by, "restartButton", self.on_restart_request)

    # ----------------------------
    # Engine callbacks
    # ----------------------------

    def _on_player_overlaps_cup(self, player_body, cup_body):
        self.on_collect(self._collectible_by_body[id(cup_body)].index)

    def _on_player_hits_bomb(self, player_body, bomb_body):
        self.on_hazard_hit()

    # ----------------------------
    # Operations
    # ----------------------------

    def on_frame_update(self, frame_input: FrameInput):
        if self.game_over:
            return

        speed = self.config["player_speed"]
        body = self.player.body

        if frame_input.left:
            self.engine.set_velocity(body, vx=-speed)
            self._play(body, "left")
        elif frame_input.right:
            self.engine.set_velocity(body, vx=speed)
            self._play(body, "right")
        else:
            self.engine.set_velocity(body, vx=0.0)
            self._play(body, "idle")

        # Single impulse; gravity brings the player back down
        if frame_input.up and self.engine.is_on_ground(body):
            self.engine.set_velocity(body, vy=-self.config["jump_speed"])

    def _play(self, body, key: str, ignore_if_playing: bool = True):
        self.engine.play_animation(body, key, ignore_if_playing=ignore_if_playing)
        self.player.animation = key

    def on_collect(self, collectible_id: int):
        if not 0 <= collectible_id < len(self.collectibles):
            raise UnknownCollectibleError(collectible_id)
        if self.game_over:
            return

        cup = self.collectibles[collectible_id]
        # Overlaps can fire again for a cup that was already taken this tick
        if not cup.active:
            return

        self.engine.disable_body(cup.body)
        cup.active = False
        self.score += self.config["score_per_collectible"]
        self.engine.set_text(self._score_text, self._score_label())

        if self.count_active() == 0:
            for c in self.collectibles:
                self.engine.enable_body(c.body, c.home_x, 0)
                c.active = True
            self.clears += 1
            self.spawn_hazard()

    def count_active(self) -> int:
        return sum(1 for c in self.collectibles if c.active)

    def spawn_hazard(self) -> Hazard:
        cfg = self.config
        x = int(self.rng.integers(cfg["hazard_x_range"][0], cfg["hazard_x_range"][1], endpoint=True))
        y = int(self.rng.integers(cfg["hazard_y_range"][0], cfg["hazard_y_range"][1], endpoint=True))
        vx = int(self.rng.integers(cfg["hazard_vx_range"][0], cfg["hazard_vx_range"][1], endpoint=True))
        vy = cfg["hazard_vy"]
        bounce = cfg["hazard_bounce"]

        body = self.engine.add_sprite(x, y, "bomb", HAZARDS, bounce=(bounce, bounce), collide_world_bounds=True)
        self.engine.set_velocity(body, vx=vx, vy=vy)

        hazard = Hazard(index=len(self.hazards), x=x, y=y, vx=vx, vy=vy, bounce=bounce, body=body)
        self.hazards.append(hazard)

        self.engine.set_pointer_handlers(
            body,
            on_hover=lambda: self._tint_hazard(hazard, TINT_RED),
            on_hover_end=lambda: self._tint_hazard(hazard, None),
            on_click=lambda: self._tint_hazard(hazard, TINT_YELLOW),
        )
        return hazard

    def _tint_hazard(self, hazard: Hazard, color):
        if color is None:
            self.engine.clear_tint(hazard.body)
        else:
            self.engine.set_tint(hazard.body, color)
        hazard.tint = color

    def on_hazard_hit(self):
        if self.game_over:
            return
        self.engine.pause()
        self.engine.set_tint(self.player.body, TINT_RED)
        self._play(self.player.body, "idle", ignore_if_playing=False)
        self.player.alive = False
        self.state = GameState.OVER

    def on_restart_request(self):
        if self.restart_handler is None:
            raise RestartUnavailableError("restart requested without an owning session")
        return self.restart_handler()

    def _score_label(self) -> str:
        return f"Score: {self.score}"


class GameSession:
    """Owns the engine and one GameplayLoop at a time; reset() starts over"""

    def __init__(self, engine: Engine, seed: Optional[int] = None, config: Optional[dict] = None):
        self.engine = engine
        self.seed = seed
        self.config = config if config is not None else make_config()
        self.loop: GameplayLoop = None  # type: ignore
        self.restarts = 0
        self.ticks = 0

    def reset(self, seed: Optional[int] = None, rng: Optional[np.random.Generator] = None) -> GameplayLoop:
        if self.loop is not None:
            self.restarts += 1
        if seed is not None:
            self.seed = seed
        if rng is None:
            rng = np.random.default_rng(self.seed)

        self.engine.reset()
        self.ticks = 0
        self.loop = GameplayLoop(self.engine, rng=rng, config=self.config, restart_handler=self.reset)
        self.loop.preload()
        self.loop.create()
        return self.loop

    def tick(self, frame_input: FrameInput = FrameInput()):
        """One frame: input poll, then physics with collision callbacks"""
        self.loop.on_frame_update(frame_input)
        self.engine.step()
        self.ticks += 1

    @property
    def score(self) -> int:
        return self.loop.score

    @property
    def game_over(self) -> bool:
        return self.loop.game_over
