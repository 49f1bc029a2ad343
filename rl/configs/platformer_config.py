"""
Training configuration for the coffee platformer environment
Reward shaping variants, algorithm hyperparameters and the experiment matrix
"""

# Environment parameters
ENV_CONFIG = {
    # "render_mode": None,  # Don't render during training
    "frame_skip": 2,
    "max_steps": 3000,  # 100s at 30 decisions per second
    "k_collectibles": 4,
    "m_hazards": 3,
}

# ==============================================================================
# REWARD SHAPING CONFIGURATIONS
# ==============================================================================

# Reward Config 1: BASELINE
REWARD_CONFIG_BASELINE = {
    "name": "baseline",
    "description": "Collect cups, clear the set, avoid bombs",
    "R_COLLECT": 1.0,    # Reward per cup
    "R_CLEAR": 2.0,      # Bonus per full set (also spawns a bomb)
    "R_TIME": 0.001,     # Small time penalty
    "R_DEATH": 5.0,      # Bomb hit
}

# Reward Config 2: CAUTIOUS (dodging matters more than speed)
REWARD_CONFIG_CAUTIOUS = {
    "name": "cautious",
    "description": "Heavier bomb penalty, no time pressure",
    "R_COLLECT": 1.0,
    "R_CLEAR": 1.0,
    "R_TIME": 0.0,
    "R_DEATH": 20.0,
}

# Reward Config 3: GREEDY (clear sets fast, accept risk)
REWARD_CONFIG_GREEDY = {
    "name": "greedy",
    "description": "Large clear bonus and time pressure",
    "R_COLLECT": 1.0,
    "R_CLEAR": 10.0,
    "R_TIME": 0.005,
    "R_DEATH": 2.0,
}

REWARD_CONFIGS = {
    "baseline": REWARD_CONFIG_BASELINE,
    "cautious": REWARD_CONFIG_CAUTIOUS,
    "greedy": REWARD_CONFIG_GREEDY,
}

# ==============================================================================
# TIMESTEP CONFIGURATIONS
# ==============================================================================

TIMESTEP_CONFIGS = {
    "short": 50_000,
    "medium": 300_000,
    "long": 1_000_000,
}

# ==============================================================================
# ALGORITHM HYPERPARAMETERS
# ==============================================================================

PPO_CONFIG = {
    "policy": "MlpPolicy",
    "learning_rate": 3e-4,
    "n_steps": 1024,
    "batch_size": 256,
    "n_epochs": 10,
    "gamma": 0.99,
    "gae_lambda": 0.95,
    "clip_range": 0.2,
    "ent_coef": 0.01,
    "vf_coef": 0.5,
    "max_grad_norm": 0.5,
    "verbose": 1,
}

DQN_CONFIG = {
    "policy": "MlpPolicy",
    "learning_rate": 1e-4,
    "buffer_size": 100_000,
    "learning_starts": 1000,
    "batch_size": 128,
    "tau": 1.0,
    "gamma": 0.99,
    "train_freq": 4,
    "gradient_steps": 1,
    "target_update_interval": 1000,
    "exploration_fraction": 0.1,
    "exploration_initial_eps": 1.0,
    "exploration_final_eps": 0.05,
    "verbose": 1,
}

# ==============================================================================
# TRAINING SETTINGS
# ==============================================================================

TRAINING_CONFIG = {
    "total_timesteps": 300_000,
    "save_freq": 10_000,
    "eval_freq": 5_000,
    "log_dir": "./logs",
    "model_dir": "./models",
    "tensorboard_log": "./tensorboard_logs",
}

# ==============================================================================
# EXPERIMENT CONFIGURATION
# ==============================================================================

EXPERIMENT_CONFIG = {
    "seeds": [42, 123, 456],
    "n_eval_episodes": 10,
    "algorithms": ["dqn", "ppo"],
    "reward_configs": ["baseline", "cautious", "greedy"],
    "timestep_configs": ["short", "medium"],
}


def get_experiment_matrix():
    """
    Generate all experiment configurations.
    Returns list of dicts with: algo, reward_config, timesteps, experiment_name
    """
    experiments = []

    for reward_name in EXPERIMENT_CONFIG["reward_configs"]:
        for timestep_name in EXPERIMENT_CONFIG["timestep_configs"]:
            for algo in EXPERIMENT_CONFIG["algorithms"]:
                experiments.append({
                    "name": f"{algo}_{reward_name}_{timestep_name}",
                    "algorithm": algo,
                    "reward_config": reward_name,
                    "reward_params": REWARD_CONFIGS[reward_name],
                    "timestep_config": timestep_name,
                    "timesteps": TIMESTEP_CONFIGS[timestep_name],
                })

    return experiments


if __name__ == "__main__":
    experiments = get_experiment_matrix()
    print(f"Total experiments: {len(experiments)}")
    print("-" * 70)
    for exp in experiments:
        print(f"  {exp['name']:35} | {exp['timesteps']:>10,} steps")
    print("-" * 70)
