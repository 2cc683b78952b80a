"""
爬梯出牌游戏 Gymnasium 环境

遵循标准 Gymnasium API，学习者占一个座位，其余座位由内置智能体驱动
"""
from dataclasses import replace
from typing import Dict, Any, Tuple, Optional, List, Union
import logging

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from core.actions import Combination
from core.cards import ENCODING_DIM, cards_to_str
from core.config import RoundConfig
from core.state import GameState, PlayRejected

from evaluation.evaluator import Agent, CpuAgent

from .observation import ObservationBuilder, get_action_encoder
from .reward import RewardCalculator, RewardConfig, RewardType

logger = logging.getLogger(__name__)


class ClimbingEnv(gym.Env):
    """
    爬梯出牌 Gymnasium 环境

    API:
    - reset() -> observation, info
    - step(action) -> observation, reward, terminated, truncated, info

    step 只处理学习者的一个动作，之后其他座位依次行动，
    直到再次轮到学习者或学习者已出完
    """

    metadata = {
        "render_modes": ["human", "ansi"],
        "name": "Climbing-v0",
    }

    def __init__(
        self,
        render_mode: Optional[str] = None,
        reward_type: str = "sparse",
        agent_seat: int = 0,
        opponents: Optional[List[Agent]] = None,
        config: Optional[RoundConfig] = None,
        seed: Optional[int] = None,
    ):
        """
        Args:
            render_mode: 渲染模式 ("human", "ansi", None)
            reward_type: 奖励类型 ("sparse", "shaped")
            agent_seat: 学习者的座位
            opponents: 其他座位的智能体 (默认为 CPU)，按座位顺序排列
            config: 对局配置
            seed: 随机种子
        """
        super().__init__()

        self.render_mode = render_mode
        self.config = config or RoundConfig(seed=seed)
        self._seed = seed if seed is not None else self.config.seed

        player_count = self.config.player_count
        if not 0 <= agent_seat < player_count:
            raise ValueError(f"Invalid agent_seat: {agent_seat}")
        self.agent_seat = agent_seat

        other_seats = [i for i in range(player_count) if i != agent_seat]
        if opponents is None:
            opponents = [CpuAgent(f"cpu_{i}", seed=self._seed) for i in other_seats]
        if len(opponents) != len(other_seats):
            raise ValueError(
                f"Expected {len(other_seats)} opponents, got {len(opponents)}"
            )
        self._opponents: Dict[int, Agent] = dict(zip(other_seats, opponents))

        # 观测构建器
        self._obs_builder = ObservationBuilder(player_count)

        # 奖励计算器
        self._reward_calculator = RewardCalculator(
            RewardConfig(reward_type=RewardType(reward_type))
        )

        # 动作编码器
        self._action_encoder = get_action_encoder()

        self._state: Optional[GameState] = None

        self._define_spaces()

    def _define_spaces(self):
        """定义观测和动作空间"""
        n = self.config.player_count

        self.action_space = spaces.Discrete(self._action_encoder.num_actions)

        self.observation_space = spaces.Dict({
            "hand": spaces.Box(0, 1, shape=(ENCODING_DIM,), dtype=np.float32),
            "table": spaces.Box(0, 1, shape=(ENCODING_DIM,), dtype=np.float32),
            "played_cards": spaces.Box(0, 1, shape=(n, ENCODING_DIM), dtype=np.float32),
            "cards_left": spaces.Box(0, 1, shape=(n,), dtype=np.float32),
            "position": spaces.Box(0, 1, shape=(n,), dtype=np.float32),
            "finished": spaces.Box(0, 1, shape=(n,), dtype=np.float32),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        重置环境

        Args:
            seed: 随机种子
            options: 额外选项

        Returns:
            (observation, info) 元组
        """
        super().reset(seed=seed)

        game_seed = seed if seed is not None else self._seed
        self._state = GameState.initial(replace(self.config, seed=game_seed))
        for seat, agent in self._opponents.items():
            agent.reset(None if game_seed is None else game_seed + seat)

        self._play_opponents()

        obs = self._build_observation()
        info = self._build_info()

        if self.render_mode == "human":
            self.render()

        return obs, info

    def step(
        self,
        action: Union[int, Combination, None],
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        执行学习者的动作

        Args:
            action: 动作索引、Combination 或 None (过牌)

        Returns:
            (observation, reward, terminated, truncated, info) 元组
        """
        if self._state is None:
            raise RuntimeError("Environment not reset. Call reset() first.")
        if self._agent_done():
            raise RuntimeError("Episode is over. Call reset() first.")

        combination = self._decode_action(action)

        if not self._is_valid_action(combination):
            # 非法动作：给予惩罚并保持状态
            obs = self._build_observation()
            info = self._build_info()
            info["error"] = "Invalid action"
            return obs, -1.0, False, False, info

        prev_hand_size = self._state.hand_size(self.agent_seat)
        if combination is None:
            self._state.submit_pass(self.agent_seat)
        else:
            self._state.submit_play(self.agent_seat, combination)

        self._play_opponents()

        obs = self._build_observation()
        terminated = self._agent_done()
        reward = self._reward_calculator.compute(
            self._state, self.agent_seat, prev_hand_size
        )
        info = self._build_info()

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, False, info

    def _decode_action(self, action: Union[int, Combination, None]) -> Optional[Combination]:
        """解码动作"""
        if action is None or isinstance(action, Combination):
            return action
        if isinstance(action, (int, np.integer)):
            hand = self._state.get_hand(self.agent_seat)
            return self._action_encoder.decode(int(action), hand.cards)
        raise ValueError(f"Invalid action type: {type(action)}")

    def _is_valid_action(self, combination: Optional[Combination]) -> bool:
        """验证动作合法性"""
        return combination in self.get_legal_actions()

    def _agent_done(self) -> bool:
        return self._state.is_finished or self.agent_seat in self._state.finish_order

    def _play_opponents(self) -> None:
        """其他座位依次行动，直到轮到学习者"""
        state = self._state
        while not self._agent_done() and state.current_player != self.agent_seat:
            idx = state.current_player
            table = state.table
            hand = state.get_hand(idx)
            move = self._opponents[idx].act(hand, table)

            if move is not None:
                result = state.submit_play(idx, move)
                if not isinstance(result, PlayRejected):
                    continue
                logger.warning(
                    f"Opponent {idx} made an illegal move ({result.reason.value})"
                )

            if table.is_empty:
                state.submit_play(idx, hand.playable_combinations(table)[0])
            else:
                state.submit_pass(idx)

    def _build_observation(self) -> Dict[str, np.ndarray]:
        """构建观测"""
        obs = self._obs_builder.build(self._state, self.agent_seat)
        return obs.to_dict()

    def _build_info(self) -> Dict[str, Any]:
        """构建 info 字典"""
        legal_actions = self.get_legal_actions()

        info = {
            "current_player": self._state.current_player,
            "step_count": self._state.step_count,
            "sweep_count": self._state.sweep_count,
            "finish_order": list(self._state.finish_order),
            "legal_actions": legal_actions,
            "legal_action_mask": self._action_encoder.build_legal_mask(legal_actions),
            "legal_action_indices": self._action_encoder.get_legal_action_indices(legal_actions),
        }

        if self.agent_seat in self._state.finish_order:
            info["position"] = self._state.finish_order.index(self.agent_seat)

        return info

    def render(self) -> Optional[str]:
        """渲染环境"""
        if self.render_mode == "ansi" or self.render_mode == "human":
            return self._render_text()
        return None

    def _render_text(self) -> str:
        """文本渲染"""
        lines = []
        lines.append("=" * 50)
        lines.append(f"Current Player: {self._state.current_player}")

        for i in range(self._state.player_count):
            hand = self._state.get_hand(i)
            marker = "*" if i == self.agent_seat else " "
            lines.append(f"{marker}P{i}: {cards_to_str(hand.cards)} ({len(hand)})")

        table = self._state.table
        if table.is_empty:
            lines.append("Table: (empty)")
        else:
            lines.append(f"Table: {table.last_combination} by P{table.owner_index}")

        if self._state.finish_order:
            lines.append(f"Finish Order: {self._state.finish_order}")

        lines.append("=" * 50)

        output = "\n".join(lines)
        if self.render_mode == "human":
            print(output)
        return output

    def close(self):
        """关闭环境"""
        pass

    @property
    def state(self) -> Optional[GameState]:
        """获取当前状态 (用于调试)"""
        return self._state

    def get_legal_actions(self) -> List[Optional[Combination]]:
        """
        学习者当前的合法动作

        Returns:
            组合列表，场上有牌时末尾附加 None (过牌)；不轮到学习者时为空
        """
        if self._state is None or self._agent_done():
            return []
        if self._state.current_player != self.agent_seat:
            return []

        actions: List[Optional[Combination]] = list(
            self._state.legal_combinations(self.agent_seat)
        )
        if not self._state.table.is_empty:
            actions.append(None)
        return actions

    def sample_action(self) -> int:
        """随机采样一个合法动作的索引"""
        indices = self._action_encoder.get_legal_action_indices(self.get_legal_actions())
        if not indices:
            return self._action_encoder.PASS_INDEX
        return int(self.np_random.choice(indices))


def make_env(
    env_id: str = "Climbing-v0",
    **kwargs
) -> ClimbingEnv:
    """
    工厂函数：创建环境

    Args:
        env_id: 环境 ID
        **kwargs: 环境参数

    Returns:
        ClimbingEnv 实例
    """
    return ClimbingEnv(**kwargs)
