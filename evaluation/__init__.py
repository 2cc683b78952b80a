"""
Evaluation Layer - 智能体与对战

Modules:
    evaluator: 智能体 (人类 / CPU / 随机)
    arena: 对战竞技场
"""
from .evaluator import (
    Agent,
    HumanAgent,
    CpuAgent,
    RandomAgent,
)
from .arena import (
    RoundResult,
    Arena,
)

__all__ = [
    # evaluator
    "Agent",
    "HumanAgent",
    "CpuAgent",
    "RandomAgent",
    # arena
    "RoundResult",
    "Arena",
]
