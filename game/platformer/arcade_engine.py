"""
ArcadeEngine - Engine implementation on top of Arcade
-----------------------------------------------------
- Every dynamic body runs its own arcade.PhysicsEnginePlatformer against the
  static platform SpriteList (gravity, landing, can_jump)
- Bounce and world bounds are applied after each platformer update
- Overlaps/colliders are checked after movement, in registration order
- Textures are generated with Pillow unless an image file is available

Arcade works in y-up pixels per frame; the Engine interface speaks canvas
coordinates (y-down) in pixels per second. Conversion happens here only.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import arcade
from PIL import Image, ImageDraw

from .engine import PLATFORMS, Color, ContactCallback, Engine

WHITE = (255, 255, 255)


class Body(arcade.Sprite):
    """Arcade sprite carrying the per-body physics settings"""

    def __init__(self, texture: arcade.Texture, x: float, y: float, group: str, scale: float = 1.0):
        super().__init__(texture, scale=scale, center_x=x, center_y=y)
        self.group = group
        self.enabled = True
        self.bounce_x = 0.0
        self.bounce_y = 0.0
        self.collide_world_bounds = False
        self.collides_with_platforms = False
        self.physics: Optional[arcade.PhysicsEnginePlatformer] = None

        # Animation state
        self.animation: Optional[str] = None
        self.anim_time = 0.0

        # Pointer state
        self.on_hover: Optional[Callable[[], None]] = None
        self.on_hover_end: Optional[Callable[[], None]] = None
        self.on_click: Optional[Callable[[], None]] = None
        self.hovered = False


@dataclass(eq=False)
class TextLabel:
    x: float
    y: float
    text: str
    font_size: int
    color: Color


@dataclass
class Animation:
    frames: List[arcade.Texture]
    frame_rate: float
    repeat: int


def make_texture(name: str, size: Tuple[int, int], color: Color, shape: str = "rect") -> arcade.Texture:
    """Solid-colour placeholder texture"""
    image = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    box = (0, 0, size[0] - 1, size[1] - 1)
    fill = tuple(color) + (255,)
    if shape == "ellipse":
        draw.ellipse(box, fill=fill)
    else:
        draw.rectangle(box, fill=fill)
    return arcade.Texture(image, hash=f"platformer-{name}")


def make_player_frame(name: str, size: Tuple[int, int], color: Color, frame: int, frames: int) -> arcade.Texture:
    """Player frame: body plus an eye showing the facing and a stepping leg"""
    w, h = size
    image = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    fill = tuple(color) + (255,)
    draw.rectangle((4, 0, w - 5, h - 9), fill=fill)

    front = frames // 2
    eye_y = 8
    if frame < front:
        draw.rectangle((6, eye_y, 10, eye_y + 4), fill=(255, 255, 255, 255))
    elif frame > front:
        draw.rectangle((w - 11, eye_y, w - 7, eye_y + 4), fill=(255, 255, 255, 255))
    else:
        draw.rectangle((9, eye_y, 13, eye_y + 4), fill=(255, 255, 255, 255))
        draw.rectangle((w - 14, eye_y, w - 10, eye_y + 4), fill=(255, 255, 255, 255))

    # Legs alternate while walking
    stride = 0 if frame == front else (frame % 2) * 4
    draw.rectangle((6 + stride, h - 9, 12 + stride, h - 1), fill=fill)
    draw.rectangle((w - 13 - stride, h - 9, w - 7 - stride, h - 1), fill=fill)
    return arcade.Texture(image, hash=f"platformer-{name}-{frame}")


class ArcadeEngine(Engine):
    """Engine backed by Arcade; steps headless, draws when a window exists"""

    def __init__(self, width: int = 800, height: int = 600, gravity: float = 300.0, fps: int = 60):
        self.width = width
        self.height = height
        self.gravity = gravity
        self.fps = fps

        # Pixels per frame^2, arcade convention (applied downward)
        self.gravity_per_frame = gravity / (fps * fps)

        self._textures: Dict[str, arcade.Texture] = {}
        self._sheets: Dict[str, List[arcade.Texture]] = {}
        self._animations: Dict[str, Animation] = {}
        self.reset()

    # ----------------------------
    # Coordinate helpers
    # ----------------------------

    def _ay(self, y: float) -> float:
        return self.height - y

    def _per_frame(self, v: float) -> float:
        return v / self.fps

    # ----------------------------
    # Lifecycle
    # ----------------------------

    def reset(self) -> None:
        # Textures survive resets; everything living in the scene does not
        self.background = arcade.SpriteList(lazy=True)
        self.platforms = arcade.SpriteList(lazy=True, use_spatial_hash=True)
        self.actors = arcade.SpriteList(lazy=True)
        self.ui = arcade.SpriteList(lazy=True)
        self._no_walls = arcade.SpriteList(lazy=True)

        self._groups: Dict[str, List[Body]] = {}
        self._platform_groups = set()
        self._contacts: List[Tuple[Any, Any, Optional[ContactCallback]]] = []
        self._pointer_bodies: List[Body] = []
        self._buttons: List[Body] = []
        self.texts: List[TextLabel] = []
        self._paused = False

    @property
    def paused(self) -> bool:
        return self._paused

    def pause(self) -> None:
        self._paused = True

    def step(self) -> None:
        self._animate(1.0 / self.fps)
        if self._paused:
            return

        for group in self._groups.values():
            for body in group:
                if body.enabled:
                    self._move(body)

        self._dispatch_contacts()

    def _move(self, body: Body):
        if body.physics is None:
            walls = self.platforms if body.collides_with_platforms else self._no_walls
            body.physics = arcade.PhysicsEnginePlatformer(
                body, walls=walls, gravity_constant=self.gravity_per_frame
            )

        start_x = body.center_x
        prev_vx = body.change_x
        # The platformer engine applies gravity before moving
        falling_vy = body.change_y - self.gravity_per_frame

        hits = body.physics.update()

        if hits:
            # Vertical contact zeroes change_y
            if body.change_y == 0 and falling_vy != 0:
                body.change_y = self._bounced(-falling_vy, body.bounce_y)
            # Horizontal contact leaves the sprite short of its target
            if prev_vx != 0 and abs(body.center_x - (start_x + prev_vx)) > 1e-6:
                body.change_x = self._bounced(-prev_vx, body.bounce_x)

        if body.collide_world_bounds:
            self._keep_in_world(body)

    def _bounced(self, v: float, bounce: float) -> float:
        v *= bounce
        # Tiny rebounds jitter on the ground
        if abs(v) < self.gravity_per_frame * 2:
            return 0.0
        return v

    def _keep_in_world(self, body: Body):
        if body.left < 0:
            body.left = 0
            if body.change_x < 0:
                body.change_x = self._bounced(-body.change_x, body.bounce_x)
        elif body.right > self.width:
            body.right = self.width
            if body.change_x > 0:
                body.change_x = self._bounced(-body.change_x, body.bounce_x)

        if body.bottom < 0:
            body.bottom = 0
            if body.change_y < 0:
                body.change_y = self._bounced(-body.change_y, body.bounce_y)
        elif body.top > self.height:
            body.top = self.height
            if body.change_y > 0:
                body.change_y = self._bounced(-body.change_y, body.bounce_y)

    def _members(self, target: Any) -> List[Body]:
        if isinstance(target, str):
            return [b for b in self._groups.get(target, []) if b.enabled]
        return [target] if target.enabled else []

    def _dispatch_contacts(self):
        for first, second, callback in list(self._contacts):
            if callback is None:
                continue
            for a in self._members(first):
                for b in self._members(second):
                    # An earlier callback this frame may have disabled either body or paused the world
                    if self._paused or not (a.enabled and b.enabled):
                        continue
                    if arcade.check_for_collision(a, b):
                        callback(a, b)

    def _animate(self, dt: float):
        for body in self.actors:
            if body.animation is None:
                continue
            anim = self._animations[body.animation]
            body.anim_time += dt
            idx = int(body.anim_time * anim.frame_rate)
            if anim.repeat == -1:
                idx %= len(anim.frames)
            else:
                idx = min(idx, len(anim.frames) - 1)
            texture = anim.frames[idx]
            if body.texture is not texture:
                body.texture = texture

    # ----------------------------
    # Assets
    # ----------------------------

    def load_texture(self, key, size, color, shape="rect", path=None):
        if path and os.path.exists(path):
            self._textures[key] = arcade.load_texture(path)
        else:
            self._textures[key] = make_texture(key, size, color, shape)

    def load_spritesheet(self, key, frame_size, frames, color):
        self._sheets[key] = [
            make_player_frame(key, frame_size, color, i, frames) for i in range(frames)
        ]

    def create_animation(self, key, texture_key, frames, frame_rate, repeat=0):
        sheet = self._sheets[texture_key]
        self._animations[key] = Animation(
            frames=[sheet[i] for i in frames], frame_rate=frame_rate, repeat=repeat
        )

    def _texture(self, key: str, frame: int = 0) -> arcade.Texture:
        if key in self._sheets:
            return self._sheets[key][frame]
        return self._textures[key]

    # ----------------------------
    # Bodies
    # ----------------------------

    def add_image(self, x, y, texture_key):
        body = Body(self._texture(texture_key), x, self._ay(y), group="background")
        self.background.append(body)
        return body

    def add_platform(self, x, y, texture_key, scale=1.0):
        body = Body(self._texture(texture_key), x, self._ay(y), group=PLATFORMS, scale=scale)
        self.platforms.append(body)
        return body

    def add_sprite(self, x, y, texture_key, group, bounce=(0.0, 0.0), collide_world_bounds=False, frame=0):
        body = Body(self._texture(texture_key, frame), x, self._ay(y), group=group)
        body.bounce_x, body.bounce_y = bounce
        body.collide_world_bounds = collide_world_bounds
        body.collides_with_platforms = group in self._platform_groups
        self._groups.setdefault(group, []).append(body)
        self.actors.append(body)
        return body

    def set_velocity(self, body, vx=None, vy=None):
        if vx is not None:
            body.change_x = self._per_frame(vx)
        if vy is not None:
            body.change_y = -self._per_frame(vy)

    def get_velocity(self, body):
        return body.change_x * self.fps, -body.change_y * self.fps

    def get_position(self, body):
        return body.center_x, self.height - body.center_y

    def is_on_ground(self, body):
        if body.physics is None or not body.enabled:
            return False
        return body.physics.can_jump()

    def disable_body(self, body):
        if not body.enabled:
            return
        body.enabled = False
        body.change_x = 0.0
        body.change_y = 0.0
        body.hovered = False
        body.remove_from_sprite_lists()

    def enable_body(self, body, x, y):
        body.center_x = x
        body.center_y = self._ay(y)
        body.change_x = 0.0
        body.change_y = 0.0
        if not body.enabled:
            body.enabled = True
            self.actors.append(body)

    # ----------------------------
    # Visuals
    # ----------------------------

    def play_animation(self, body, key, ignore_if_playing=True):
        if ignore_if_playing and body.animation == key:
            return
        anim = self._animations[key]
        body.animation = key
        body.anim_time = 0.0
        body.texture = anim.frames[0]

    def set_tint(self, body, color):
        body.color = color

    def clear_tint(self, body):
        body.color = WHITE

    def add_text(self, x, y, text, font_size=16, color=(0, 0, 0)):
        label = TextLabel(x=x, y=y, text=text, font_size=font_size, color=color)
        self.texts.append(label)
        return label

    def set_text(self, handle, text):
        handle.text = text

    # ----------------------------
    # Event wiring
    # ----------------------------

    def add_collider(self, first, second, callback=None):
        for target in (first, second):
            other = second if target is first else first
            if other != PLATFORMS:
                continue
            if isinstance(target, str):
                self._platform_groups.add(target)
                bodies = self._groups.get(target, [])
            else:
                bodies = [target]
            for body in bodies:
                body.collides_with_platforms = True
                body.physics = None
        self._contacts.append((first, second, callback))

    def add_overlap(self, first, second, callback):
        self._contacts.append((first, second, callback))

    def set_pointer_handlers(self, body, on_hover=None, on_hover_end=None, on_click=None):
        body.on_hover = on_hover
        body.on_hover_end = on_hover_end
        body.on_click = on_click
        if body not in self._pointer_bodies:
            self._pointer_bodies.append(body)

    def add_button(self, x, y, texture_key, on_click):
        body = Body(self._texture(texture_key), x, self._ay(y), group="ui")
        body.on_click = on_click
        self.ui.append(body)
        self._buttons.append(body)
        return body

    # ----------------------------
    # Pointer input (canvas coordinates)
    # ----------------------------

    def pointer_move(self, x: float, y: float) -> None:
        point = (x, self._ay(y))
        for body in list(self._pointer_bodies):
            if not body.enabled:
                continue
            inside = body.collides_with_point(point)
            if inside and not body.hovered:
                body.hovered = True
                if body.on_hover:
                    body.on_hover()
            elif not inside and body.hovered:
                body.hovered = False
                if body.on_hover_end:
                    body.on_hover_end()

    def pointer_down(self, x: float, y: float) -> None:
        point = (x, self._ay(y))
        for button in list(self._buttons):
            if button.collides_with_point(point):
                # Buttons may reset the whole scene
                button.on_click()
                return
        for body in list(self._pointer_bodies):
            if body.enabled and body.on_click and body.collides_with_point(point):
                body.on_click()

    # ----------------------------
    # Drawing (needs an active window)
    # ----------------------------

    def draw(self) -> None:
        self.background.draw()
        self.platforms.draw()
        self.actors.draw()
        self.ui.draw()
        for label in self.texts:
            arcade.draw_text(
                label.text, label.x, self._ay(label.y), label.color,
                label.font_size, anchor_y="top",
            )

    def group(self, name: str) -> Sequence[Body]:
        return list(self._groups.get(name, []))
