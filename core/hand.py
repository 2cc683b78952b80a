"""
手牌

一名玩家持有的、可变的牌集合
"""
from collections import Counter
from typing import Iterable, Iterator, List, Optional, Set, TYPE_CHECKING

from .cards import Card, sort_cards
from .actions import Combination, ComboGenerator

if TYPE_CHECKING:
    from .state import TableState


class Hand:
    """
    手牌

    出牌时移除的牌必须在手中，否则属于程序错误 (断言失败)
    """

    def __init__(self, cards: Iterable[Card] = ()):
        self._cards: List[Card] = list(cards)

    @property
    def cards(self) -> List[Card]:
        """手牌副本"""
        return list(self._cards)

    def add(self, card: Card) -> None:
        """收到一张牌"""
        self._cards.append(card)

    def sort(self) -> None:
        """按牌面排序 (显示用)"""
        self._cards = sort_cards(self._cards)

    def contains_all(self, cards: Iterable[Card]) -> bool:
        """
        检查手中是否持有全部这些牌

        同一张牌出现两次时也视为不持有
        """
        needed = Counter(cards)
        held = Counter(self._cards)
        return all(held[card] >= count for card, count in needed.items())

    def remove_cards(self, cards: Iterable[Card]) -> None:
        """
        从手牌中移除出掉的牌

        Args:
            cards: 要移除的牌，必须全部在手中
        """
        cards = list(cards)
        assert self.contains_all(cards), f"Cards {cards} not held in {self._cards}"
        for card in cards:
            self._cards.remove(card)

    def combinations(self) -> List[Combination]:
        """手牌中的所有合法组合"""
        return ComboGenerator(self._cards).generate_all()

    def playable_combinations(self, table: Optional['TableState']) -> List[Combination]:
        """
        能打到场上的所有组合

        Args:
            table: 场上状态 (None 或空场表示可以任意出牌)

        Returns:
            组合列表
        """
        last = table.last_combination if table is not None else None
        return ComboGenerator(self._cards).generate_responses(last)

    def playable_cards(self, table: Optional['TableState']) -> Set[Card]:
        """至少属于一个可出组合的牌 (用于界面高亮)"""
        playable: Set[Card] = set()
        for combo in self.playable_combinations(table):
            playable.update(combo.cards)
        return playable

    def is_empty(self) -> bool:
        return not self._cards

    def __contains__(self, card: object) -> bool:
        return card in self._cards

    def __iter__(self) -> Iterator[Card]:
        return iter(list(self._cards))

    def __len__(self) -> int:
        return len(self._cards)

    def __repr__(self) -> str:
        return f"Hand({' '.join(str(c) for c in self._cards)})"
