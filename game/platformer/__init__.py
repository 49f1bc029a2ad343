"""2D Game module - Coffee platformer

PlatformerEnv and the Arcade window live in game.platformer.platformer_env;
importing them pulls in Arcade and a GL context provider.
"""

from .gameplay import GameplayLoop, GameSession
from .entities import FrameInput, GameState

__all__ = ['GameplayLoop', 'GameSession', 'FrameInput', 'GameState']
