"""
牌型定义与组合生成器

共有 5 种合法牌型 (另有 INVALID 表示非法组合):
单张、对子、三张、四张、阶梯 (同花色 3-4 张连续)
"""
from enum import IntEnum
from dataclasses import dataclass
from typing import List, Tuple, Optional, Iterable, Dict
from collections import defaultdict

from .cards import Card, Suit, SUIT_ORDER, sort_cards


class CombinationKind(IntEnum):
    """牌型"""
    INVALID = 0     # 非法组合
    SINGLE = 1      # 单张
    PAIR = 2        # 对子
    TRIPLE = 3      # 三张
    FOUR_CARD = 4   # 四张
    STAIR = 5       # 阶梯 (同花色连续)


# 同牌面组合的牌型 (按张数)
GROUP_KINDS: Dict[int, CombinationKind] = {
    1: CombinationKind.SINGLE,
    2: CombinationKind.PAIR,
    3: CombinationKind.TRIPLE,
    4: CombinationKind.FOUR_CARD,
}

MIN_STAIR_LEN = 3
MAX_STAIR_LEN = 4
MAX_GROUP_SIZE = 4


@dataclass(frozen=True, slots=True)
class Combination:
    """
    不可变的出牌组合

    Attributes:
        cards: 组合中的牌 (已按牌面、花色排序)
        kind: 牌型
    """
    cards: Tuple[Card, ...]
    kind: CombinationKind

    @classmethod
    def from_cards(cls, cards: Iterable[Card], kind: Optional[CombinationKind] = None) -> 'Combination':
        """从牌列表创建组合，未指定牌型时自动检测"""
        sorted_cards = tuple(sort_cards(cards))
        if kind is None:
            from .rules import RuleEngine
            kind = RuleEngine.classify(list(sorted_cards))
        return cls(cards=sorted_cards, kind=kind)

    @property
    def is_valid(self) -> bool:
        return self.kind != CombinationKind.INVALID

    @property
    def is_stair(self) -> bool:
        return self.kind == CombinationKind.STAIR

    @property
    def rank(self) -> int:
        """
        比较用的主牌面值

        同牌面组合取共同牌面，阶梯取最大牌面
        """
        if not self.cards or self.kind == CombinationKind.INVALID:
            return 0
        if self.kind == CombinationKind.STAIR:
            return self.cards[-1].rank
        return self.cards[0].rank

    def contains_rank(self, rank: int) -> bool:
        return any(c.rank == rank for c in self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def __str__(self) -> str:
        return ' '.join(str(c) for c in self.cards)


class ComboGenerator:
    """
    组合生成器

    根据手牌枚举所有合法牌型的组合，不修改手牌
    """

    def __init__(self, hand_cards: Iterable[Card]):
        """
        Args:
            hand_cards: 手牌
        """
        self.hand = sort_cards(hand_cards)

        self.by_rank: Dict[int, List[Card]] = defaultdict(list)
        self.by_suit: Dict[Suit, List[Card]] = defaultdict(list)

        for card in self.hand:
            self.by_rank[card.rank].append(card)
            # 王不参与阶梯
            if not card.is_joker:
                self.by_suit[card.suit].append(card)

    def gen_singles(self) -> List[Combination]:
        """生成所有单张 (含王)"""
        return [Combination((card,), CombinationKind.SINGLE) for card in self.hand]

    def gen_groups(self, size: int = 0) -> List[Combination]:
        """
        生成同牌面组合 (对子 / 三张 / 四张)

        对每个至少 2 张的牌面，依次取前 2..min(4, 张数) 张

        Args:
            size: 指定张数，0 表示 2-4 张全部生成
        """
        result = []
        for rank in sorted(self.by_rank):
            same = self.by_rank[rank]
            if len(same) < 2:
                continue
            for n in range(2, min(MAX_GROUP_SIZE, len(same)) + 1):
                if size and n != size:
                    continue
                result.append(Combination(tuple(same[:n]), GROUP_KINDS[n]))
        return result

    @staticmethod
    def _split_runs(cards: List[Card]) -> List[List[Card]]:
        """将同花色已排序的牌切分为极大连续段"""
        runs: List[List[Card]] = []
        for card in cards:
            if runs and card.rank == runs[-1][-1].rank + 1:
                runs[-1].append(card)
            else:
                runs.append([card])
        return runs

    def gen_stairs(self, required_len: int = 0) -> List[Combination]:
        """
        生成阶梯

        对每个花色的极大连续段，取所有长度 3 和 4 的连续子段

        Args:
            required_len: 要求的精确长度，0 表示 3 和 4 都生成
        """
        from .rules import RuleEngine

        result = []
        for suit in sorted(self.by_suit, key=SUIT_ORDER.get):
            for run in self._split_runs(self.by_suit[suit]):
                for length in range(MIN_STAIR_LEN, MAX_STAIR_LEN + 1):
                    if required_len and length != required_len:
                        continue
                    for start in range(len(run) - length + 1):
                        seq = run[start:start + length]
                        if RuleEngine.is_stair(seq):
                            result.append(Combination(tuple(seq), CombinationKind.STAIR))
        return result

    def generate_all(self) -> List[Combination]:
        """
        生成手牌中的所有合法组合 (主动出牌)

        Returns:
            组合列表，不含 INVALID
        """
        return self.gen_singles() + self.gen_groups() + self.gen_stairs()

    def generate_responses(self, last: Optional[Combination]) -> List[Combination]:
        """
        生成能打过场上组合的所有组合

        Args:
            last: 场上的组合，None 表示场空

        Returns:
            合法组合列表 (不含过牌)
        """
        if last is None:
            return self.generate_all()

        from .rules import RuleEngine

        if last.kind == CombinationKind.SINGLE:
            candidates = self.gen_singles()
        elif last.kind == CombinationKind.STAIR:
            candidates = self.gen_stairs(len(last))
        else:
            candidates = self.gen_groups(len(last))

        return [c for c in candidates if RuleEngine.compare(c, last) == 1]
