"""
Custom callback for tracking platformer metrics during training.
Records: score, full clears, bombs on screen, whether the episode ended on a bomb.
"""

import os
import csv
from typing import Dict, List, Any, Optional

import numpy as np
from stable_baselines3.common.callbacks import BaseCallback


class MetricsCallback(BaseCallback):
    """
    Callback to track and log task-specific metrics per episode.
    Saves to CSV and mirrors the numbers to the SB3 logger (TensorBoard).
    """

    def __init__(
        self,
        log_dir: str,
        algo_name: str,
        verbose: int = 1,
    ):
        super().__init__(verbose)
        self.log_dir = log_dir
        self.algo_name = algo_name

        self.episode_rewards: List[float] = []
        self.episode_lengths: List[int] = []
        self.episode_scores: List[int] = []
        self.episode_clears: List[int] = []
        self.episode_deaths: List[bool] = []

        self.csv_path: Optional[str] = None
        self.csv_file = None
        self.csv_writer = None

    def _on_training_start(self) -> None:
        os.makedirs(self.log_dir, exist_ok=True)
        self.csv_path = os.path.join(self.log_dir, f"{self.algo_name}_metrics.csv")

        self.csv_file = open(self.csv_path, "w", newline="")
        self.csv_writer = csv.writer(self.csv_file)
        self.csv_writer.writerow([
            "timestep", "episode", "reward", "length",
            "score", "clears", "hazards", "game_over"
        ])
        self.csv_file.flush()

        if self.verbose > 0:
            print(f"[MetricsCallback] Logging to {self.csv_path}")

    def _on_step(self) -> bool:
        infos = self.locals.get("infos", [])
        dones = self.locals.get("dones", [])

        for info, done in zip(infos, dones):
            # Monitor adds the "episode" entry on the final step
            if not (done and "episode" in info):
                continue
            self.record_episode(info)

        return True

    def record_episode(self, info: Dict[str, Any]) -> None:
        ep_info = info["episode"]
        ep_reward = float(ep_info["r"])
        ep_length = int(ep_info["l"])
        score = int(info.get("score", 0))
        clears = int(info.get("clears", 0))
        hazards = int(info.get("num_hazards", 0))
        game_over = bool(info.get("game_over", False))

        self.episode_rewards.append(ep_reward)
        self.episode_lengths.append(ep_length)
        self.episode_scores.append(score)
        self.episode_clears.append(clears)
        self.episode_deaths.append(game_over)

        if self.csv_writer:
            self.csv_writer.writerow([
                self.num_timesteps,
                len(self.episode_rewards),
                ep_reward,
                ep_length,
                score,
                clears,
                hazards,
                int(game_over),
            ])
            self.csv_file.flush()

        if getattr(self, "model", None) is not None:
            self.logger.record("custom/episode_score", score)
            self.logger.record("custom/episode_clears", clears)

        if self.verbose > 0 and len(self.episode_rewards) % 10 == 0:
            avg_reward = sum(self.episode_rewards[-10:]) / 10
            avg_score = sum(self.episode_scores[-10:]) / 10
            print(f"[{self.algo_name}] Episode {len(self.episode_rewards)}, "
                  f"Timestep {self.num_timesteps}, "
                  f"Avg Reward (10 ep): {avg_reward:.2f}, Avg Score: {avg_score:.1f}")

    def _on_training_end(self) -> None:
        if self.csv_file:
            self.csv_file.close()
            self.csv_file = None
            if self.verbose > 0:
                print(f"[MetricsCallback] Saved {len(self.episode_rewards)} episodes to {self.csv_path}")

    def get_summary(self) -> Dict[str, Any]:
        if not self.episode_rewards:
            return {}

        return {
            "mean_reward": float(np.mean(self.episode_rewards)),
            "std_reward": float(np.std(self.episode_rewards)),
            "mean_length": float(np.mean(self.episode_lengths)),
            "total_episodes": len(self.episode_rewards),
            "mean_score": float(np.mean(self.episode_scores)),
            "mean_clears": float(np.mean(self.episode_clears)),
            "death_rate": float(np.mean(self.episode_deaths)),
        }
