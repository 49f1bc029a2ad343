"""
Game configuration for the coffee platformer
All positions are canvas coordinates: origin top-left, y grows downward,
velocities in pixels per second.
"""

import copy

from .errors import ConfigError

# Tints (RGB)
TINT_RED = (255, 0, 0)
TINT_YELLOW = (255, 255, 0)

GAME_CONFIG = {
    # World
    "width": 800,
    "height": 600,
    "gravity": 300.0,
    "fps": 60,

    # Player
    "player_start": (100, 450),
    "player_bounce": 0.2,
    "player_speed": 160.0,
    "jump_speed": 330.0,

    # Collectibles (cafe cups)
    "collectible_count": 12,
    "collectible_start": (12, 0),
    "collectible_step_x": 70,
    "collectible_bounce_range": (0.4, 0.8),
    "score_per_collectible": 10,

    # Hazards (bombs)
    "hazard_x_range": (100, 700),
    "hazard_y_range": (100, 300),
    "hazard_vx_range": (-200, 200),
    "hazard_vy": 20.0,
    "hazard_bounce": 1.0,

    # Static platforms: (x, y, scale)
    "platforms": [
        (400, 568, 2.0),
        (600, 400, 1.0),
        (50, 250, 1.0),
        (750, 220, 1.0),
    ],

    # HUD
    "score_text_pos": (16, 16),
    "score_font_size": 32,
    "score_color": (0, 0, 0),
    "restart_button_pos": (750, 30),

    # Optional directory with sky.png, platform.png, ... overriding generated textures
    "asset_dir": None,
}

# Generated placeholder textures: key -> size, colour, shape and optional file name
ASSETS = {
    "sky": {"size": (800, 600), "color": (120, 190, 255), "shape": "rect", "file": "sky.png"},
    "ground": {"size": (400, 32), "color": (70, 140, 60), "shape": "rect", "file": "platform.png"},
    "cafe": {"size": (24, 22), "color": (111, 78, 55), "shape": "ellipse", "file": "cafe.png"},
    "bomb": {"size": (14, 14), "color": (40, 40, 40), "shape": "ellipse", "file": "bomb.png"},
    "restartButton": {"size": (80, 32), "color": (200, 60, 60), "shape": "rect", "file": "restart_button.png"},
}

# Player spritesheet: 9 frames of 32x48, 0-3 facing left, 4 front, 5-8 facing right
SPRITESHEET = {
    "key": "dude",
    "frame_size": (32, 48),
    "frames": 9,
    "color": (150, 80, 200),
}

ANIMATIONS = {
    "left": {"frames": [0, 1, 2, 3], "frame_rate": 10, "repeat": -1},
    "idle": {"frames": [4], "frame_rate": 20, "repeat": 0},
    "right": {"frames": [5, 6, 7, 8], "frame_rate": 10, "repeat": -1},
}

_RANGE_KEYS = (
    "collectible_bounce_range",
    "hazard_x_range",
    "hazard_y_range",
    "hazard_vx_range",
)


def make_config(**overrides) -> dict:
    """Copy of GAME_CONFIG with overrides applied and validated"""
    config = copy.deepcopy(GAME_CONFIG)
    for key, value in overrides.items():
        if key not in config:
            raise ConfigError(f"Unknown config key: {key}")
        config[key] = value

    for key in _RANGE_KEYS:
        lo, hi = config[key]
        if lo > hi:
            raise ConfigError(f"{key} must be (low, high), got {config[key]}")

    if config["collectible_count"] < 1:
        raise ConfigError("collectible_count must be at least 1")
    if config["width"] <= 0 or config["height"] <= 0 or config["fps"] <= 0:
        raise ConfigError("width, height and fps must be positive")

    return config
