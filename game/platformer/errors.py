"""
Exceptions raised by the platformer game
"""


class PlatformerError(Exception):
    """Base class for platformer errors"""


class ConfigError(PlatformerError, ValueError):
    """Unknown config key or invalid value"""


class UnknownCollectibleError(PlatformerError, KeyError):
    """Collect event for an id that is not part of the collectible set"""


class RestartUnavailableError(PlatformerError, RuntimeError):
    """Restart requested on a loop that has no owning session"""
