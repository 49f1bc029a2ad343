"""
Training script for the coffee platformer using Stable-Baselines3
Supports PPO and DQN with per-episode score/clear tracking.
"""

import os
import argparse
from typing import Optional

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from stable_baselines3 import PPO, DQN
from stable_baselines3.common.vec_env import DummyVecEnv, VecNormalize
from stable_baselines3.common.callbacks import CheckpointCallback, EvalCallback
from stable_baselines3.common.monitor import Monitor

from game.platformer.platformer_env import PlatformerEnv
from rl.configs.platformer_config import (
    ENV_CONFIG, PPO_CONFIG, DQN_CONFIG, TRAINING_CONFIG, REWARD_CONFIGS,
    EXPERIMENT_CONFIG, get_experiment_matrix,
)
from rl.metrics_callback import MetricsCallback


class MultiDiscreteToDiscreteWrapper(gym.ActionWrapper):
    """
    Wrapper to convert MultiDiscrete action space to Discrete for DQN.
    Flattens MultiDiscrete([3, 2]) to Discrete(6).
    """

    def __init__(self, env):
        super().__init__(env)
        self.orig_action_space = env.action_space
        self._nvec = env.action_space.nvec
        self.n_total = int(np.prod(self._nvec))
        self.action_space = spaces.Discrete(self.n_total)

    def action(self, action):
        """Convert flat discrete action to MultiDiscrete."""
        indices = []
        remaining = int(action)
        for n in reversed(self._nvec):
            indices.append(remaining % n)
            remaining //= n
        return np.array(list(reversed(indices)), dtype=np.int64)


def make_env(seed: Optional[int] = None, wrap_for_dqn: bool = False,
             reward_config: Optional[dict] = None):
    """Factory function to create the environment"""
    def _init():
        env = PlatformerEnv(reward_config=reward_config, **ENV_CONFIG)
        if wrap_for_dqn:
            env = MultiDiscreteToDiscreteWrapper(env)
        env = Monitor(env, info_keywords=("score", "clears", "num_hazards", "game_over"))
        if seed is not None:
            env.reset(seed=seed)
        return env
    return _init


def _banner(text: str):
    print(f"\n{'='*60}")
    print(text)
    print(f"{'='*60}\n")


def _report(algo: str, final_path: str, metrics_callback: MetricsCallback):
    print(f"\n{'='*60}")
    print(f"{algo} Training complete! Model saved to {final_path}")
    summary = metrics_callback.get_summary()
    if summary:
        print(f"Mean Reward: {summary['mean_reward']:.2f} ± {summary['std_reward']:.2f}")
        print(f"Mean Score: {summary['mean_score']:.1f} | Death rate: {summary['death_rate']:.2f}")
        print(f"Total Episodes: {summary['total_episodes']}")
    print(f"{'='*60}\n")


def train_ppo(
    total_timesteps: int = None,
    save_dir: str = "./models/ppo",
    log_dir: str = "./logs/ppo",
    tensorboard_log: str = "./tensorboard_logs/ppo",
    n_envs: int = 4,
    reward_config: Optional[dict] = None,
    seed: int = 0,
    experiment_name: str = "ppo",
):
    """Train PPO agent on the platformer environment"""

    if total_timesteps is None:
        total_timesteps = TRAINING_CONFIG["total_timesteps"]

    os.makedirs(save_dir, exist_ok=True)
    os.makedirs(log_dir, exist_ok=True)

    _banner(f"Training PPO ({experiment_name}) for {total_timesteps:,} timesteps "
            f"on {n_envs} parallel environments")

    env = DummyVecEnv([make_env(seed=seed + i, reward_config=reward_config) for i in range(n_envs)])
    env = VecNormalize(env, norm_obs=True, norm_reward=True)

    eval_env = DummyVecEnv([make_env(seed=seed + 100, reward_config=reward_config)])
    eval_env = VecNormalize(eval_env, norm_obs=True, norm_reward=False, training=False)

    checkpoint_callback = CheckpointCallback(
        save_freq=max(1, TRAINING_CONFIG["save_freq"] // n_envs),
        save_path=save_dir,
        name_prefix=f"{experiment_name}_platformer",
    )

    eval_callback = EvalCallback(
        eval_env,
        best_model_save_path=save_dir,
        log_path=log_dir,
        eval_freq=max(1, TRAINING_CONFIG["eval_freq"] // n_envs),
        deterministic=True,
        render=False,
    )

    metrics_callback = MetricsCallback(log_dir=log_dir, algo_name=experiment_name, verbose=1)

    model = PPO(env=env, tensorboard_log=tensorboard_log, seed=seed, **PPO_CONFIG)
    model.learn(
        total_timesteps=total_timesteps,
        callback=[checkpoint_callback, eval_callback, metrics_callback],
    )

    final_path = os.path.join(save_dir, f"{experiment_name}_platformer_final")
    model.save(final_path)
    env.save(os.path.join(save_dir, "vec_normalize.pkl"))

    _report("PPO", final_path, metrics_callback)
    return model, metrics_callback


def train_dqn(
    total_timesteps: int = None,
    save_dir: str = "./models/dqn",
    log_dir: str = "./logs/dqn",
    tensorboard_log: str = "./tensorboard_logs/dqn",
    reward_config: Optional[dict] = None,
    seed: int = 0,
    experiment_name: str = "dqn",
):
    """Train DQN agent on the platformer environment"""

    if total_timesteps is None:
        total_timesteps = TRAINING_CONFIG["total_timesteps"]

    os.makedirs(save_dir, exist_ok=True)
    os.makedirs(log_dir, exist_ok=True)

    _banner(f"Training DQN ({experiment_name}) for {total_timesteps:,} timesteps "
            f"with MultiDiscrete->Discrete wrapper (6 actions)")

    env = DummyVecEnv([make_env(seed=seed, wrap_for_dqn=True, reward_config=reward_config)])
    eval_env = DummyVecEnv([make_env(seed=seed + 100, wrap_for_dqn=True, reward_config=reward_config)])

    checkpoint_callback = CheckpointCallback(
        save_freq=TRAINING_CONFIG["save_freq"],
        save_path=save_dir,
        name_prefix=f"{experiment_name}_platformer",
    )

    eval_callback = EvalCallback(
        eval_env,
        best_model_save_path=save_dir,
        log_path=log_dir,
        eval_freq=TRAINING_CONFIG["eval_freq"],
        deterministic=True,
        render=False,
    )

    metrics_callback = MetricsCallback(log_dir=log_dir, algo_name=experiment_name, verbose=1)

    model = DQN(env=env, tensorboard_log=tensorboard_log, seed=seed, **DQN_CONFIG)
    model.learn(
        total_timesteps=total_timesteps,
        callback=[checkpoint_callback, eval_callback, metrics_callback],
    )

    final_path = os.path.join(save_dir, f"{experiment_name}_platformer_final")
    model.save(final_path)

    _report("DQN", final_path, metrics_callback)
    return model, metrics_callback


TRAINERS = {
    "ppo": train_ppo,
    "dqn": train_dqn,
}


def run_matrix(n_envs: int = 4):
    """Run every (reward config, timesteps, algorithm) combination for each seed"""
    experiments = get_experiment_matrix()
    print(f"Running {len(experiments)} experiments x {len(EXPERIMENT_CONFIG['seeds'])} seeds")

    for exp in experiments:
        for seed in EXPERIMENT_CONFIG["seeds"]:
            name = f"{exp['name']}_s{seed}"
            kwargs = dict(
                total_timesteps=exp["timesteps"],
                save_dir=os.path.join(TRAINING_CONFIG["model_dir"], name),
                log_dir=os.path.join(TRAINING_CONFIG["log_dir"], name),
                tensorboard_log=os.path.join(TRAINING_CONFIG["tensorboard_log"], name),
                reward_config=exp["reward_params"],
                seed=seed,
                experiment_name=name,
            )
            if exp["algorithm"] == "ppo":
                kwargs["n_envs"] = n_envs
            TRAINERS[exp["algorithm"]](**kwargs)


def main():
    parser = argparse.ArgumentParser(description="Train RL agent on the coffee platformer")
    parser.add_argument(
        "--algo",
        type=str,
        default="ppo",
        choices=["ppo", "dqn", "all"],
        help="RL algorithm to use (default: ppo)",
    )
    parser.add_argument(
        "--timesteps",
        type=int,
        default=None,
        help=f"Total timesteps to train (default: {TRAINING_CONFIG['total_timesteps']})",
    )
    parser.add_argument(
        "--n-envs",
        type=int,
        default=4,
        help="Number of parallel environments for PPO (default: 4)",
    )
    parser.add_argument(
        "--reward-config",
        type=str,
        default="baseline",
        choices=sorted(REWARD_CONFIGS),
        help="Reward shaping variant (default: baseline)",
    )
    parser.add_argument(
        "--matrix",
        action="store_true",
        help="Run the full experiment matrix instead of a single run",
    )

    args = parser.parse_args()

    if args.matrix:
        run_matrix(n_envs=args.n_envs)
        return

    reward_config = REWARD_CONFIGS[args.reward_config]
    if args.algo in ("ppo", "all"):
        train_ppo(total_timesteps=args.timesteps, n_envs=args.n_envs, reward_config=reward_config)
    if args.algo in ("dqn", "all"):
        train_dqn(total_timesteps=args.timesteps, reward_config=reward_config)


if __name__ == "__main__":
    main()
