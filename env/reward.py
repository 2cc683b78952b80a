"""
奖励函数

支持两种奖励设计:
- 终局奖励 (sparse): 按出完名次线性插值
- 过程奖励 (shaped): 终局奖励 + 每出一张牌的小奖励
"""
from dataclasses import dataclass
from typing import Dict, Optional
from enum import Enum

from core.state import GameState


class RewardType(Enum):
    """奖励类型"""
    SPARSE = "sparse"      # 仅终局奖励
    SHAPED = "shaped"      # 过程奖励


@dataclass
class RewardConfig:
    """奖励配置"""
    reward_type: RewardType = RewardType.SPARSE
    win_reward: float = 1.0     # 第一名
    lose_reward: float = -1.0   # 最后一名
    card_bonus: float = 0.01    # 每出一张牌


class RewardCalculator:
    """
    奖励计算器

    根据配置计算不同类型的奖励
    """

    def __init__(self, config: Optional[RewardConfig] = None):
        self.config = config or RewardConfig()

    def compute(
        self,
        state: GameState,
        player: int,
        prev_hand_size: Optional[int] = None,
    ) -> float:
        """
        计算奖励

        Args:
            state: 当前状态
            player: 计算奖励的玩家
            prev_hand_size: 动作前该玩家的手牌数 (用于 shaped 奖励)

        Returns:
            奖励值
        """
        reward = self._finish_reward(state, player)

        if self.config.reward_type == RewardType.SHAPED and prev_hand_size is not None:
            cards_played = prev_hand_size - state.hand_size(player)
            if cards_played > 0:
                reward += cards_played * self.config.card_bonus

        return reward

    def _finish_reward(self, state: GameState, player: int) -> float:
        """
        名次奖励：玩家出完 (或对局结束) 时给予

        Returns:
            第一名 win_reward，最后一名 lose_reward，中间名次线性插值；
            尚未出完返回 0
        """
        if player not in state.finish_order:
            return 0.0

        position = state.finish_order.index(player)
        last = max(state.player_count - 1, 1)
        frac = position / last
        return self.config.win_reward + (self.config.lose_reward - self.config.win_reward) * frac

    def compute_all(self, state: GameState) -> Dict[int, float]:
        """所有玩家的名次奖励"""
        return {i: self._finish_reward(state, i) for i in range(state.player_count)}


def create_reward_calculator(
    reward_type: str = "sparse",
    **kwargs
) -> RewardCalculator:
    """
    工厂函数：创建奖励计算器

    Args:
        reward_type: 奖励类型 ("sparse", "shaped")
        **kwargs: 其他配置参数

    Returns:
        RewardCalculator 实例
    """
    config = RewardConfig(
        reward_type=RewardType(reward_type),
        **kwargs
    )
    return RewardCalculator(config)
