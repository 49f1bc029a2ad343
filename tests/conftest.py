"""
Shared fixtures: a recording Engine that performs no simulation
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np
import pytest

from game.platformer.config import make_config
from game.platformer.engine import Engine
from game.platformer.gameplay import GameplayLoop, GameSession


@dataclass(eq=False)
class FakeBody:
    group: str
    x: float
    y: float
    texture: str
    vx: float = 0.0
    vy: float = 0.0
    bounce: Tuple[float, float] = (0.0, 0.0)
    collide_world_bounds: bool = False
    enabled: bool = True
    tint: Optional[Tuple[int, int, int]] = None
    animation: Optional[str] = None
    handlers: Dict[str, Callable] = field(default_factory=dict)


@dataclass(eq=False)
class FakeText:
    x: float
    y: float
    text: str


class FakeEngine(Engine):
    def __init__(self):
        self.resets = 0
        self.textures: Dict[str, Any] = {}
        self.sheets: Dict[str, Any] = {}
        self.animations: Dict[str, Any] = {}
        self.reset()
        self.resets = 0

    def reset(self):
        self.resets += 1
        self.images: List[FakeBody] = []
        self.platforms: List[FakeBody] = []
        self.bodies: List[FakeBody] = []
        self.texts: List[FakeText] = []
        self.buttons: List[FakeBody] = []
        self.colliders: List[Tuple[Any, Any, Optional[Callable]]] = []
        self.overlaps: List[Tuple[Any, Any, Callable]] = []
        self.log: List[Tuple] = []
        self.on_ground = False
        self.steps = 0
        self._paused = False

    def step(self):
        self.steps += 1

    @property
    def paused(self):
        return self._paused

    def pause(self):
        self._paused = True

    def load_texture(self, key, size, color, shape="rect", path=None):
        self.textures[key] = (size, color, shape, path)

    def load_spritesheet(self, key, frame_size, frames, color):
        self.sheets[key] = (frame_size, frames, color)

    def create_animation(self, key, texture_key, frames, frame_rate, repeat=0):
        self.animations[key] = (texture_key, list(frames), frame_rate, repeat)

    def add_image(self, x, y, texture_key):
        body = FakeBody("background", x, y, texture_key)
        self.images.append(body)
        return body

    def add_platform(self, x, y, texture_key, scale=1.0):
        body = FakeBody("platforms", x, y, texture_key)
        self.platforms.append(body)
        return body

    def add_sprite(self, x, y, texture_key, group, bounce=(0.0, 0.0), collide_world_bounds=False, frame=0):
        body = FakeBody(group, x, y, texture_key, bounce=bounce, collide_world_bounds=collide_world_bounds)
        self.bodies.append(body)
        return body

    def set_velocity(self, body, vx=None, vy=None):
        if vx is not None:
            body.vx = vx
        if vy is not None:
            body.vy = vy
        self.log.append(("velocity", body, vx, vy))

    def get_velocity(self, body):
        return body.vx, body.vy

    def get_position(self, body):
        return body.x, body.y

    def is_on_ground(self, body):
        return self.on_ground

    def disable_body(self, body):
        body.enabled = False
        body.vx = body.vy = 0.0
        self.log.append(("disable", body))

    def enable_body(self, body, x, y):
        body.enabled = True
        body.x, body.y = x, y
        body.vx = body.vy = 0.0
        self.log.append(("enable", body))

    def play_animation(self, body, key, ignore_if_playing=True):
        body.animation = key
        self.log.append(("animation", body, key, ignore_if_playing))

    def set_tint(self, body, color):
        body.tint = color

    def clear_tint(self, body):
        body.tint = None

    def add_text(self, x, y, text, font_size=16, color=(0, 0, 0)):
        label = FakeText(x, y, text)
        self.texts.append(label)
        return label

    def set_text(self, handle, text):
        handle.text = text

    def add_collider(self, first, second, callback=None):
        self.colliders.append((first, second, callback))

    def add_overlap(self, first, second, callback):
        self.overlaps.append((first, second, callback))

    def set_pointer_handlers(self, body, on_hover=None, on_hover_end=None, on_click=None):
        body.handlers = {"hover": on_hover, "hover_end": on_hover_end, "click": on_click}

    def add_button(self, x, y, texture_key, on_click):
        body = FakeBody("ui", x, y, texture_key)
        body.handlers = {"click": on_click}
        self.buttons.append(body)
        return body

    # Helpers for tests

    def group(self, name):
        return [b for b in self.bodies if b.group == name]

    def contact_callback(self, first, second):
        for a, b, callback in self.colliders + self.overlaps:
            if (a, b) == (first, second) and callback is not None:
                return callback
        raise LookupError(f"no callback between {first} and {second}")


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def loop(engine):
    game = GameplayLoop(engine, rng=np.random.default_rng(1234), config=make_config())
    game.preload()
    game.create()
    return game


@pytest.fixture
def session(engine):
    s = GameSession(engine, seed=7)
    s.reset()
    return s
