"""
Environment Layer - Gymnasium 兼容环境

Modules:
    climbing_env: 主环境类
    observation: 观测空间与动作编码
    reward: 奖励函数
"""
from .climbing_env import (
    ClimbingEnv,
    make_env,
)

from .observation import (
    Observation,
    ObservationBuilder,
    ActionEncoder,
    get_action_encoder,
)

from .reward import (
    RewardType,
    RewardConfig,
    RewardCalculator,
    create_reward_calculator,
)

__all__ = [
    # env
    "ClimbingEnv",
    "make_env",
    # observation
    "Observation",
    "ObservationBuilder",
    "ActionEncoder",
    "get_action_encoder",
    # reward
    "RewardType",
    "RewardConfig",
    "RewardCalculator",
    "create_reward_calculator",
]
