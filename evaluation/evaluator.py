"""
智能体

所有智能体共享同一能力: 给定手牌和场上状态，给出要出的组合或过牌 (None)
"""
from typing import Iterable, List, Optional
import logging
import random

import numpy as np

from core.cards import Card
from core.actions import Combination
from core.hand import Hand
from core.state import TableState
from core.strategy import CpuStrategy

logger = logging.getLogger(__name__)


class Agent:
    """智能体基类"""

    def __init__(self, name: str = "agent"):
        self.name = name

    def act(self, hand: Hand, table: TableState) -> Optional[Combination]:
        """选择动作，None 表示过牌"""
        raise NotImplementedError

    def reset(self, seed: Optional[int] = None):
        """
        重置状态

        Args:
            seed: 本局的随机种子，None 时沿用构造时的种子
        """


class HumanAgent(Agent):
    """
    人类玩家

    界面层直接持有该对象，把玩家选中的牌写入 selection；
    act 只返回外部已选好的组合，不做任何判断
    """

    def __init__(self, name: str = "human"):
        super().__init__(name)
        self.selection: List[Card] = []

    def select(self, cards: Iterable[Card]) -> None:
        self.selection = list(cards)

    def toggle(self, card: Card) -> None:
        """选中 / 取消选中一张牌"""
        if card in self.selection:
            self.selection.remove(card)
        else:
            self.selection.append(card)

    def clear_selection(self) -> None:
        self.selection.clear()

    def act(self, hand: Hand, table: TableState) -> Optional[Combination]:
        if not self.selection:
            return None
        combination = Combination.from_cards(self.selection)
        self.clear_selection()
        return combination

    def reset(self, seed: Optional[int] = None):
        self.clear_selection()


class CpuAgent(Agent):
    """CPU 玩家 (固定启发式)"""

    def __init__(
        self,
        name: str = "cpu",
        seed: Optional[int] = None,
        strategy: Optional[CpuStrategy] = None,
    ):
        super().__init__(name)
        self._seed = seed
        self.strategy = strategy or CpuStrategy(seed=seed)

    def act(self, hand: Hand, table: TableState) -> Optional[Combination]:
        return self.strategy.preview(hand.cards, table)

    def reset(self, seed: Optional[int] = None):
        seed = seed if seed is not None else self._seed
        if seed is not None:
            self.strategy.rng = random.Random(seed)


class RandomAgent(Agent):
    """随机智能体 (在合法组合与过牌中均匀选择)"""

    def __init__(self, name: str = "random", seed: Optional[int] = None):
        super().__init__(name)
        self._seed = seed
        self._rng = np.random.default_rng(seed)

    def act(self, hand: Hand, table: TableState) -> Optional[Combination]:
        options: List[Optional[Combination]] = list(hand.playable_combinations(table))
        # 空场时不能过牌
        if not table.is_empty:
            options.append(None)
        if not options:
            return None
        idx = self._rng.integers(len(options))
        return options[idx]

    def reset(self, seed: Optional[int] = None):
        self._rng = np.random.default_rng(seed if seed is not None else self._seed)
