"""
CPU 出牌策略

固定的启发式:
- 空场: 优先出最短的阶梯 (同长度随机)，没有阶梯则出最小的单张
- 场上是同牌面组合 (N 张, 牌面 R): 取手中张数 >= N 且牌面 > R 的最小牌面，出 N 张
- 场上是阶梯 (N 张, 最大牌面 R): 取长度为 N 且最大牌面 > R 的阶梯中最大牌面最小的一个
- 都没有则过牌
"""
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, TYPE_CHECKING
import logging
import random

from .cards import Card, sort_cards
from .actions import Combination, CombinationKind, ComboGenerator, GROUP_KINDS
from .hand import Hand
from .rules import RuleEngine

if TYPE_CHECKING:
    from .state import TableState

logger = logging.getLogger(__name__)


class CpuStrategy:
    """
    CPU 出牌策略

    随机源可注入，保证测试可复现
    """

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        self.rng = rng or random.Random(seed)

    def preview(self, cards: Iterable[Card], table: Optional['TableState']) -> Optional[Combination]:
        """
        选择要出的组合 (不修改手牌)

        Args:
            cards: 手牌
            table: 场上状态

        Returns:
            要出的组合，None 表示过牌
        """
        cards = sort_cards(cards)
        if not cards:
            return None

        last = table.last_combination if table is not None else None
        generator = ComboGenerator(cards)

        if last is None:
            choice = self._choose_lead(generator)
        elif last.kind == CombinationKind.STAIR:
            choice = self._choose_stair_response(generator, last)
        else:
            choice = self._choose_group_response(generator, last)

        # 启发式只会生成合法组合，这里再确认一次
        if choice is not None and not RuleEngine.can_play(table, choice):
            logger.warning(f"Strategy produced unplayable combination {choice}")
            return None
        return choice

    def select_move(self, hand: Hand, table: Optional['TableState']) -> Optional[Combination]:
        """
        选择并确定出牌，从手牌中移除选中的牌

        Args:
            hand: 手牌 (会被修改)
            table: 场上状态

        Returns:
            要出的组合，None 表示过牌
        """
        choice = self.preview(hand.cards, table)
        if choice is not None:
            hand.remove_cards(choice.cards)
        return choice

    def _choose_lead(self, generator: ComboGenerator) -> Combination:
        stairs = generator.gen_stairs()
        if stairs:
            shortest = min(len(s) for s in stairs)
            candidates = [s for s in stairs if len(s) == shortest]
            return self.rng.choice(candidates)

        lowest = generator.hand[0]
        return Combination((lowest,), CombinationKind.SINGLE)

    @staticmethod
    def _choose_group_response(generator: ComboGenerator, last: Combination) -> Optional[Combination]:
        size = len(last)
        by_rank: Dict[int, List[Card]] = defaultdict(list)
        for card in generator.hand:
            by_rank[card.rank].append(card)

        for rank in sorted(by_rank):
            same = by_rank[rank]
            if rank > last.rank and len(same) >= size:
                return Combination(tuple(same[:size]), GROUP_KINDS[size])
        return None

    @staticmethod
    def _choose_stair_response(generator: ComboGenerator, last: Combination) -> Optional[Combination]:
        stairs = [s for s in generator.gen_stairs(len(last)) if s.rank > last.rank]
        if not stairs:
            return None
        # 最大牌面最小者优先，相同时按花色顺序
        return min(stairs, key=lambda s: (s.rank, s.cards[0].sort_key))
