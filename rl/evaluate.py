"""
Evaluation script for trained platformer agents
"""

import argparse
from typing import Optional

import numpy as np

from stable_baselines3 import PPO, DQN
from stable_baselines3.common.vec_env import DummyVecEnv, VecNormalize

from game.platformer.platformer_env import PlatformerEnv
from rl.configs.platformer_config import ENV_CONFIG, EXPERIMENT_CONFIG
from rl.train import MultiDiscreteToDiscreteWrapper

ALGOS = {
    "ppo": PPO,
    "dqn": DQN,
}


def _summarize(title: str, rewards, lengths, scores):
    stats = {
        "mean_reward": float(np.mean(rewards)),
        "std_reward": float(np.std(rewards)),
        "mean_length": float(np.mean(lengths)),
        "mean_score": float(np.mean(scores)),
        "max_score": int(np.max(scores)),
        "episode_rewards": list(rewards),
        "episode_scores": list(scores),
    }
    print("\n" + "=" * 50)
    print(f"{title} ({len(rewards)} episodes):")
    print(f"Mean Reward: {stats['mean_reward']:.2f} ± {stats['std_reward']:.2f}")
    print(f"Mean Episode Length: {stats['mean_length']:.1f}")
    print(f"Mean Score: {stats['mean_score']:.1f} (best {stats['max_score']})")
    print("=" * 50)
    return stats


def evaluate_model(
    model_path: str,
    algo: str = "ppo",
    n_episodes: int = EXPERIMENT_CONFIG["n_eval_episodes"],
    render: bool = True,
    seed: Optional[int] = None,
    vec_normalize_path: Optional[str] = None,
):
    """
    Evaluate a trained model

    Args:
        model_path: Path to the saved model
        algo: Algorithm used ('ppo' or 'dqn')
        n_episodes: Number of episodes to evaluate
        render: Whether to render the environment
        seed: Random seed for evaluation
        vec_normalize_path: Path to VecNormalize stats (for PPO)
    """
    if algo not in ALGOS:
        raise ValueError(f"Unknown algorithm: {algo}")
    model = ALGOS[algo].load(model_path)

    base_env = PlatformerEnv(render_mode="human" if render else None, **ENV_CONFIG)
    env = MultiDiscreteToDiscreteWrapper(base_env) if algo == "dqn" else base_env
    env = DummyVecEnv([lambda: env])

    if vec_normalize_path:
        env = VecNormalize.load(vec_normalize_path, env)
        env.training = False
        env.norm_reward = False

    episode_rewards = []
    episode_lengths = []
    episode_scores = []

    for episode in range(n_episodes):
        if seed is not None:
            env.seed(seed + episode)
        obs = env.reset()

        total_reward = 0.0
        steps = 0
        while True:
            action, _ = model.predict(obs, deterministic=True)
            obs, reward, done, info = env.step(action)
            total_reward += float(reward[0])
            steps += 1
            if done[0]:
                break

        # DummyVecEnv auto-resets; the final info still carries the finished episode
        score = info[0].get("score", 0)
        episode_rewards.append(total_reward)
        episode_lengths.append(steps)
        episode_scores.append(score)

        print(f"Episode {episode + 1}/{n_episodes}: "
              f"Reward = {total_reward:.2f}, Score = {score}, Length = {steps}")

    env.close()
    return _summarize("Evaluation Results", episode_rewards, episode_lengths, episode_scores)


def compare_with_random(n_episodes: int = EXPERIMENT_CONFIG["n_eval_episodes"], seed: Optional[int] = None):
    """
    Evaluate a random policy baseline
    """
    print("Evaluating random policy baseline...")

    env = PlatformerEnv(render_mode=None, **ENV_CONFIG)
    env.action_space.seed(seed)

    episode_rewards = []
    episode_lengths = []
    episode_scores = []

    for episode in range(n_episodes):
        obs, info = env.reset(seed=seed + episode if seed is not None else None)

        terminated = False
        truncated = False
        total_reward = 0.0
        steps = 0

        while not (terminated or truncated):
            action = env.action_space.sample()
            obs, reward, terminated, truncated, info = env.step(action)
            total_reward += reward
            steps += 1

        episode_rewards.append(total_reward)
        episode_lengths.append(steps)
        episode_scores.append(info["score"])

    env.close()
    return _summarize("Random Policy Results", episode_rewards, episode_lengths, episode_scores)


def main():
    parser = argparse.ArgumentParser(description="Evaluate trained platformer agent")
    parser.add_argument("model_path", type=str, help="Path to the trained model")
    parser.add_argument(
        "--algo",
        type=str,
        default="ppo",
        choices=sorted(ALGOS),
        help="Algorithm used to train the model (default: ppo)",
    )
    parser.add_argument(
        "--n-episodes",
        type=int,
        default=EXPERIMENT_CONFIG["n_eval_episodes"],
        help=f"Number of evaluation episodes (default: {EXPERIMENT_CONFIG['n_eval_episodes']})",
    )
    parser.add_argument("--no-render", action="store_true", help="Disable rendering")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument(
        "--vec-normalize",
        type=str,
        default=None,
        help="Path to VecNormalize stats file (for PPO)",
    )
    parser.add_argument(
        "--compare-random",
        action="store_true",
        help="Also evaluate random policy for comparison",
    )

    args = parser.parse_args()

    results = evaluate_model(
        model_path=args.model_path,
        algo=args.algo,
        n_episodes=args.n_episodes,
        render=not args.no_render,
        seed=args.seed,
        vec_normalize_path=args.vec_normalize,
    )

    if args.compare_random:
        print("\n")
        random_results = compare_with_random(n_episodes=args.n_episodes, seed=args.seed)
        improvement = results["mean_reward"] - random_results["mean_reward"]
        print(f"\nImprovement over random: {improvement:.2f}")


if __name__ == "__main__":
    main()
