"""
对战竞技场

用若干智能体驱动一局游戏直到结束
"""
from typing import List, Optional, Tuple
from dataclasses import dataclass, replace
import logging

from core.config import RoundConfig
from core.hooks import EightCutRule, RuleRegistry
from core.state import GameState, PlayRejected

from .evaluator import Agent

logger = logging.getLogger(__name__)


@dataclass
class RoundResult:
    """对局结果"""
    agents: Tuple[str, ...]
    finish_order: List[int]
    length: int
    sweeps: int
    eight_cuts: int
    rejections: int = 0
    truncated: bool = False

    @property
    def winner(self) -> Optional[str]:
        """最先出完的智能体"""
        if not self.finish_order:
            return None
        return self.agents[self.finish_order[0]]

    def __repr__(self) -> str:
        order = ", ".join(self.agents[i] for i in self.finish_order)
        return (
            f"RoundResult(order=[{order}], length={self.length}, "
            f"sweeps={self.sweeps}, eight_cuts={self.eight_cuts})"
        )


class Arena:
    """
    对战竞技场

    一次只处理一个动作；被拒绝的出牌按过牌处理 (空场时改出最小单张)
    """

    def __init__(
        self,
        config: Optional[RoundConfig] = None,
        registry: Optional[RuleRegistry] = None,
        max_steps: int = 1000,
    ):
        self.config = config or RoundConfig()
        self.registry = registry
        self.max_steps = max_steps

    def play_round(self, agents: List[Agent], seed: Optional[int] = None) -> RoundResult:
        """
        进行一局

        Args:
            agents: 每个座位一个智能体
            seed: 随机种子 (覆盖配置中的种子)

        Returns:
            对局结果
        """
        assert len(agents) == self.config.player_count, (
            f"Need exactly {self.config.player_count} agents"
        )

        config = self.config if seed is None else replace(self.config, seed=seed)
        state = GameState.initial(config, self.registry)
        # 智能体的随机选择也由本局种子决定，第 i 个座位使用 seed + i
        for i, agent in enumerate(agents):
            agent.reset(None if config.seed is None else config.seed + i)

        eight_cuts = 0
        rejections = 0

        while not state.is_finished and state.step_count < self.max_steps:
            idx = state.current_player
            table = state.table
            hand = state.get_hand(idx)
            move = agents[idx].act(hand, table)

            if move is None:
                if table.is_empty:
                    # 空场不能过牌，强制出最小单张
                    move = hand.playable_combinations(table)[0]
                else:
                    state.submit_pass(idx)
                    continue

            result = state.submit_play(idx, move)
            if isinstance(result, PlayRejected):
                rejections += 1
                logger.warning(
                    f"{agents[idx].name} made an illegal move ({result.reason.value}), treated as pass"
                )
                if table.is_empty:
                    state.submit_play(idx, hand.playable_combinations(table)[0])
                else:
                    state.submit_pass(idx)
                continue

            if EightCutRule.name in result.applied_rules:
                eight_cuts += 1

        truncated = not state.is_finished
        if truncated:
            logger.warning(f"Round truncated after {state.step_count} steps")

        return RoundResult(
            agents=tuple(agent.name for agent in agents),
            finish_order=list(state.finish_order),
            length=state.step_count,
            sweeps=state.sweep_count,
            eight_cuts=eight_cuts,
            rejections=rejections,
            truncated=truncated,
        )

    def play_rounds(
        self,
        agents: List[Agent],
        n_rounds: int = 1,
        seed: Optional[int] = None,
    ) -> List[RoundResult]:
        """
        连续进行多局 (各局相互独立，不做跨局计分)

        Args:
            agents: 智能体
            n_rounds: 局数
            seed: 起始种子，第 i 局使用 seed + i

        Returns:
            对局结果列表
        """
        results = []
        for i in range(n_rounds):
            round_seed = None if seed is None else seed + i
            results.append(self.play_round(agents, round_seed))
            logger.info(f"Round {i + 1}/{n_rounds}: {results[-1]}")
        return results
