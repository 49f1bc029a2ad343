"""
Engine interface used by the gameplay loop
------------------------------------------
The gameplay loop never touches sprites, physics or rendering directly; it
issues commands to an Engine and receives collision/pointer callbacks from
it. Positions are canvas coordinates (origin top-left, y down) and
velocities are pixels per second.

Targets for colliders/overlaps are either a body handle returned by
``add_sprite`` or a group name (``"platforms"`` is the static group).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Sequence, Tuple

Color = Tuple[int, int, int]
ContactCallback = Callable[[Any, Any], None]

PLATFORMS = "platforms"


class Engine(ABC):
    """External collaborator: sprites, physics, animation, input, drawing"""

    # ----------------------------
    # Lifecycle
    # ----------------------------

    @abstractmethod
    def reset(self) -> None:
        """Drop every body, text, handler and registration; unpause"""

    @abstractmethod
    def step(self) -> None:
        """Advance one frame and dispatch collider/overlap callbacks"""

    @property
    @abstractmethod
    def paused(self) -> bool:
        ...

    @abstractmethod
    def pause(self) -> None:
        """Halt all physics simulation globally"""

    # ----------------------------
    # Assets
    # ----------------------------

    @abstractmethod
    def load_texture(self, key: str, size: Tuple[int, int], color: Color,
                     shape: str = "rect", path: Optional[str] = None) -> None:
        ...

    @abstractmethod
    def load_spritesheet(self, key: str, frame_size: Tuple[int, int],
                         frames: int, color: Color) -> None:
        ...

    @abstractmethod
    def create_animation(self, key: str, texture_key: str, frames: Sequence[int],
                         frame_rate: float, repeat: int = 0) -> None:
        ...

    # ----------------------------
    # Bodies
    # ----------------------------

    @abstractmethod
    def add_image(self, x: float, y: float, texture_key: str) -> Any:
        """Background image without a physics body"""

    @abstractmethod
    def add_platform(self, x: float, y: float, texture_key: str, scale: float = 1.0) -> Any:
        """Static body in the ``platforms`` group"""

    @abstractmethod
    def add_sprite(self, x: float, y: float, texture_key: str, group: str,
                   bounce: Tuple[float, float] = (0.0, 0.0),
                   collide_world_bounds: bool = False, frame: int = 0) -> Any:
        """Dynamic body affected by gravity"""

    @abstractmethod
    def set_velocity(self, body: Any, vx: Optional[float] = None,
                     vy: Optional[float] = None) -> None:
        ...

    @abstractmethod
    def get_velocity(self, body: Any) -> Tuple[float, float]:
        ...

    @abstractmethod
    def get_position(self, body: Any) -> Tuple[float, float]:
        ...

    @abstractmethod
    def is_on_ground(self, body: Any) -> bool:
        """True when the body rests on a supporting surface"""

    @abstractmethod
    def disable_body(self, body: Any) -> None:
        """Stop simulating and hide the body"""

    @abstractmethod
    def enable_body(self, body: Any, x: float, y: float) -> None:
        """Show the body again at (x, y) with zero velocity"""

    # ----------------------------
    # Visuals
    # ----------------------------

    @abstractmethod
    def play_animation(self, body: Any, key: str, ignore_if_playing: bool = True) -> None:
        ...

    @abstractmethod
    def set_tint(self, body: Any, color: Color) -> None:
        ...

    @abstractmethod
    def clear_tint(self, body: Any) -> None:
        ...

    @abstractmethod
    def add_text(self, x: float, y: float, text: str, font_size: int = 16,
                 color: Color = (0, 0, 0)) -> Any:
        ...

    @abstractmethod
    def set_text(self, handle: Any, text: str) -> None:
        ...

    # ----------------------------
    # Event wiring
    # ----------------------------

    @abstractmethod
    def add_collider(self, first: Any, second: Any,
                     callback: Optional[ContactCallback] = None) -> None:
        """Solid contact; colliding with PLATFORMS makes bodies land on them"""

    @abstractmethod
    def add_overlap(self, first: Any, second: Any, callback: ContactCallback) -> None:
        """Non-solid contact reported through callback(first_body, second_body)"""

    @abstractmethod
    def set_pointer_handlers(self, body: Any,
                             on_hover: Optional[Callable[[], None]] = None,
                             on_hover_end: Optional[Callable[[], None]] = None,
                             on_click: Optional[Callable[[], None]] = None) -> None:
        ...

    @abstractmethod
    def add_button(self, x: float, y: float, texture_key: str,
                   on_click: Callable[[], None]) -> Any:
        ...
