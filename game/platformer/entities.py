"""
Game entity dataclasses
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple


class GameState(Enum):
    """Gameplay state: PLAYING until the player touches a bomb"""
    PLAYING = "playing"
    OVER = "over"


@dataclass(frozen=True)
class FrameInput:
    """Directional keys held during one frame"""
    left: bool = False
    right: bool = False
    up: bool = False


@dataclass(eq=False)
class Player:
    """Player sprite controlled by the cursor keys"""
    body: Any
    alive: bool = True
    animation: str = "idle"


@dataclass(eq=False)
class Collectible:
    """Cafe cup; reactivated with the whole set once all are collected"""
    index: int
    home_x: float
    bounce_y: float
    body: Any = None
    active: bool = True


@dataclass(eq=False)
class Hazard:
    """Bomb bouncing around the world"""
    index: int
    x: float
    y: float
    vx: float
    vy: float
    bounce: float = 1.0
    body: Any = None
    tint: Optional[Tuple[int, int, int]] = None
