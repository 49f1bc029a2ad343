"""
PlatformerEnv - the coffee platformer as an RL environment
----------------------------------------------------------
- Arcade for simulation/rendering through ArcadeEngine
- Gymnasium API over a GameSession
- Discrete MultiDiscrete action space: [move(3), jump(2)]
- Vector observation: player state + K nearest cups + M nearest bombs
- Episode ends when a bomb hits the player

Also runnable by hand:
    python -m game.platformer.platformer_env          # play with the arrow keys
    python -m game.platformer.platformer_env --random # watch a random policy
"""

from __future__ import annotations

import argparse
import time
from typing import Any, Dict, Optional

import arcade
import gymnasium as gym
import numpy as np
from gymnasium import spaces

from .arcade_engine import ArcadeEngine
from .config import make_config
from .entities import FrameInput
from .gameplay import GameSession
from .utils import clamp, nearest, seed_everything

DEFAULT_REWARDS = {
    "R_COLLECT": 1.0,   # per cup
    "R_CLEAR": 2.0,     # per full set
    "R_TIME": 0.001,    # per step
    "R_DEATH": 5.0,     # bomb hit
}


def make_engine(config: dict) -> ArcadeEngine:
    return ArcadeEngine(
        width=config["width"], height=config["height"],
        gravity=config["gravity"], fps=config["fps"],
    )


class PlatformerEnv(gym.Env):
    """Coffee platformer environment using Arcade"""

    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 30}

    def __init__(
        self,
        render_mode: Optional[str] = None,
        frame_skip: int = 2,
        max_steps: int = 3000,
        k_collectibles: int = 4,
        m_hazards: int = 3,
        reward_config: Optional[Dict[str, float]] = None,
        **game_overrides,
    ):
        super().__init__()

        assert render_mode is None or render_mode in self.metadata["render_modes"], \
            f"Unsupported render_mode: {render_mode}"
        assert frame_skip >= 1, "frame_skip must be at least 1"
        self.render_mode = render_mode

        self.config = make_config(**game_overrides)
        self.width = self.config["width"]
        self.height = self.config["height"]
        self.frame_skip = frame_skip
        self.max_steps = max_steps
        self.k_collectibles = k_collectibles
        self.m_hazards = m_hazards
        self.rewards = dict(DEFAULT_REWARDS)
        if reward_config:
            self.rewards.update({k: v for k, v in reward_config.items() if k.startswith("R_")})

        self.metadata = dict(self.metadata, render_fps=self.config["fps"] // frame_skip)

        # move: 0 idle, 1 left, 2 right / jump: 0/1
        self.action_space = spaces.MultiDiscrete([3, 2])

        # Player: pos(2) vel(2) on_ground(1) active fraction(1)
        # Each cup: rel pos(2); each bomb: rel pos(2) vel(2)
        obs_dim = 2 + 2 + 1 + 1 + (self.k_collectibles * 2) + (self.m_hazards * 4)
        self.observation_space = spaces.Box(
            low=-1.0, high=1.0, shape=(obs_dim,), dtype=np.float32
        )

        self.session = GameSession(make_engine(self.config), config=self.config)
        self._window: Optional[PlatformerWindow] = None
        self._step_count = 0

    # ----------------------------
    # Gym API
    # ----------------------------

    def reset(self, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        seed_everything(seed)

        self._step_count = 0
        self.session.reset(rng=self.np_random)
        if self._window is not None:
            self._window.session = self.session

        return self._get_obs(), self._get_info()

    def step(self, action):
        move, jump = int(action[0]), int(action[1])
        frame_input = FrameInput(left=move == 1, right=move == 2, up=bool(jump))

        loop = self.session.loop
        score_before = loop.score
        clears_before = loop.clears

        for _ in range(self.frame_skip):
            self.session.tick(frame_input)
            if loop.game_over:
                break

        collected = (loop.score - score_before) / self.config["score_per_collectible"]
        cleared = loop.clears - clears_before

        reward = self.rewards["R_COLLECT"] * collected
        reward += self.rewards["R_CLEAR"] * cleared
        reward -= self.rewards["R_TIME"]
        if loop.game_over:
            reward -= self.rewards["R_DEATH"]

        terminated = loop.game_over
        self._step_count += 1
        truncated = self._step_count >= self.max_steps

        obs = self._get_obs()
        info = self._get_info()

        if self.render_mode == "human":
            self.render()

        return obs, float(reward), terminated, truncated, info

    # ----------------------------
    # Observation / info
    # ----------------------------

    def _get_obs(self) -> np.ndarray:
        engine = self.session.engine
        loop = self.session.loop
        cfg = self.config

        px, py = engine.get_position(loop.player.body)
        pvx, pvy = engine.get_velocity(loop.player.body)
        speed = max(1e-6, cfg["player_speed"])
        jump = max(1e-6, cfg["jump_speed"])
        bomb_speed = max(1e-6, abs(cfg["hazard_vx_range"][0]), abs(cfg["hazard_vx_range"][1]))

        obs_parts = [
            clamp(px / self.width * 2 - 1, -1, 1),
            clamp(py / self.height * 2 - 1, -1, 1),
            clamp(pvx / speed, -1, 1),
            clamp(pvy / jump, -1, 1),
            1.0 if engine.is_on_ground(loop.player.body) else -1.0,
            loop.count_active() / max(1, len(loop.collectibles)) * 2 - 1,
        ]

        cups = [engine.get_position(c.body) for c in loop.collectibles if c.active]
        cups = nearest((px, py), cups, self.k_collectibles)
        for i in range(self.k_collectibles):
            if i < len(cups):
                cx, cy = cups[i]
                obs_parts += [
                    clamp((cx - px) / self.width, -1, 1),
                    clamp((cy - py) / self.height, -1, 1),
                ]
            else:
                obs_parts += [0.0, 0.0]

        bombs = [engine.get_position(h.body) + engine.get_velocity(h.body) for h in loop.hazards]
        bombs = nearest((px, py), bombs, self.m_hazards)
        for i in range(self.m_hazards):
            if i < len(bombs):
                bx, by, bvx, bvy = bombs[i]
                obs_parts += [
                    clamp((bx - px) / self.width, -1, 1),
                    clamp((by - py) / self.height, -1, 1),
                    clamp(bvx / bomb_speed, -1, 1),
                    clamp(bvy / jump, -1, 1),
                ]
            else:
                obs_parts += [0.0, 0.0, 0.0, 0.0]

        return np.array(obs_parts, dtype=np.float32)

    def _get_info(self) -> Dict[str, Any]:
        loop = self.session.loop
        return {
            "score": loop.score,
            "active_collectibles": loop.count_active(),
            "num_hazards": len(loop.hazards),
            "clears": loop.clears,
            "game_over": loop.game_over,
            "step": self._step_count,
        }

    # ----------------------------
    # Rendering with Arcade
    # ----------------------------

    def render(self):
        if self.render_mode is None:
            return None

        if self._window is None:
            self._window = PlatformerWindow(
                self.session, interactive=False, visible=self.render_mode == "human"
            )

        self._window.switch_to()
        self._window.dispatch_events()
        self._window.on_draw()

        if self.render_mode == "human":
            self._window.flip()
            return None

        image = arcade.get_image(0, 0, self.width, self.height)
        return np.asarray(image.convert("RGB"), dtype=np.uint8)

    def close(self):
        if self._window is not None:
            self._window.close()
            self._window = None


class PlatformerWindow(arcade.Window):
    """Arcade window for playing or watching a GameSession"""

    def __init__(self, session: GameSession, title: str = "Coffee Platformer",
                 interactive: bool = True, visible: bool = True):
        engine = session.engine
        super().__init__(engine.width, engine.height, title, visible=visible)
        self.session = session
        self.interactive = interactive
        self.keys = set()

        self.GAME_OVER_C = (200, 30, 30)

    def frame_input(self) -> FrameInput:
        return FrameInput(
            left=arcade.key.LEFT in self.keys,
            right=arcade.key.RIGHT in self.keys,
            up=arcade.key.UP in self.keys,
        )

    def on_key_press(self, key, modifiers):
        self.keys.add(key)
        if key == arcade.key.ESCAPE:
            self.close()

    def on_key_release(self, key, modifiers):
        self.keys.discard(key)

    def on_update(self, delta_time):
        if self.interactive:
            self.session.tick(self.frame_input())

    def on_mouse_motion(self, x, y, dx, dy):
        self.session.engine.pointer_move(x, self.height - y)

    def on_mouse_press(self, x, y, button, modifiers):
        self.session.engine.pointer_down(x, self.height - y)

    def on_draw(self):
        """Draw the current game state"""
        self.clear()
        self.session.engine.draw()

        if self.session.game_over:
            arcade.draw_text(
                "GAME OVER", self.width / 2, self.height / 2, self.GAME_OVER_C, 48,
                anchor_x="center", anchor_y="center",
            )


# ----------------------------
# Entry points
# ----------------------------

def play(seed: Optional[int] = None):
    """Open a window and play with the keyboard"""
    config = make_config()
    session = GameSession(make_engine(config), seed=seed, config=config)
    session.reset()

    PlatformerWindow(session)
    print("Arrow keys to move and jump, click the red button to restart, ESC to quit.")
    arcade.run()


def run_random_episode(render: bool = True, seed: Optional[int] = 42):
    """Run a random episode for testing"""
    env = PlatformerEnv(render_mode="human" if render else None)
    obs, info = env.reset(seed=seed)
    env.action_space.seed(seed)

    terminated = False
    truncated = False
    total = 0.0

    while not (terminated or truncated):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total += reward
        if render:
            time.sleep(1 / env.metadata["render_fps"])

    print(f"Random episode return: {total:.2f} | score {info['score']} | "
          f"clears {info['clears']} | steps {info['step']}")

    env.close()
    return total, info


def main():
    parser = argparse.ArgumentParser(description="Coffee platformer")
    parser.add_argument("--random", action="store_true", help="Run a random-policy episode instead of playing")
    parser.add_argument("--no-render", action="store_true", help="With --random, run without a window")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    args = parser.parse_args()

    if args.random:
        run_random_episode(render=not args.no_render, seed=args.seed)
    else:
        play(seed=args.seed)


if __name__ == "__main__":
    main()
