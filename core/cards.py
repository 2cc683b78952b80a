"""
牌的定义与编码

本游戏使用 52 张牌 (可选 1 张王):
- 3-10, J, Q, K, A, 2 各 4 张 (2 最大, A 次之)
- 王只能作为单张打出, 强度 100
"""
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import List, Tuple, Dict, Optional, Iterable
import random

import numpy as np


class Suit(Enum):
    """花色 (比较大小时不考虑花色，仅用于阶梯分组)"""
    SPADE = "S"
    HEART = "H"
    DIAMOND = "D"
    CLUB = "C"
    JOKER = "X"


class Rank(IntEnum):
    """牌面值 (2 大于 A)"""
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14
    TWO = 15
    JOKER = 100


# 普通花色 (发牌顺序)
SUITS: Tuple[Suit, ...] = (Suit.SPADE, Suit.HEART, Suit.DIAMOND, Suit.CLUB)

# 普通牌面值 3..15
NORMAL_RANKS: Tuple[int, ...] = tuple(range(Rank.THREE, Rank.TWO + 1))

SUIT_ORDER: Dict[Suit, int] = {
    Suit.SPADE: 0, Suit.HEART: 1, Suit.DIAMOND: 2, Suit.CLUB: 3, Suit.JOKER: 4,
}

# 牌面值到显示字符的映射
RANK_TO_STR: Dict[int, str] = {
    3: '3', 4: '4', 5: '5', 6: '6', 7: '7',
    8: '8', 9: '9', 10: '10', 11: 'J', 12: 'Q',
    13: 'K', 14: 'A', 15: '2',
}

STR_TO_RANK: Dict[str, int] = {v: k for k, v in RANK_TO_STR.items()}

STR_TO_SUIT: Dict[str, Suit] = {s.value: s for s in SUITS}


@dataclass(frozen=True, slots=True)
class Card:
    """
    不可变的一张牌

    以值 (花色 + 牌面) 判等，可哈希

    Attributes:
        suit: 花色
        rank: 牌面值 (3..15，王为 100)
    """
    suit: Suit
    rank: int

    @property
    def is_joker(self) -> bool:
        return self.suit == Suit.JOKER

    @property
    def sort_key(self) -> Tuple[int, int]:
        """排序键: 先牌面后花色"""
        return (self.rank, SUIT_ORDER[self.suit])

    def __str__(self) -> str:
        if self.is_joker:
            return "JK"
        return f"{self.suit.value}{RANK_TO_STR[self.rank]}"

    def __repr__(self) -> str:
        return f"Card({self})"


JOKER = Card(Suit.JOKER, Rank.JOKER)

# 完整牌组 (52 张，按牌面从小到大)
FULL_DECK: Tuple[Card, ...] = tuple(
    Card(suit, rank) for rank in NORMAL_RANKS for suit in SUITS
)

# one-hot 编码维度: 13 种牌面 × 4 花色 + 王
ENCODING_DIM = len(NORMAL_RANKS) * len(SUITS) + 1


def sort_cards(cards: Iterable[Card]) -> List[Card]:
    """按牌面、花色排序"""
    return sorted(cards, key=lambda c: c.sort_key)


def card_to_index(card: Card) -> int:
    """牌在 53 维编码中的位置"""
    if card.is_joker:
        return ENCODING_DIM - 1
    return (card.rank - Rank.THREE) * len(SUITS) + SUIT_ORDER[card.suit]


def cards_to_array(cards: Iterable[Card]) -> np.ndarray:
    """
    将牌列表转换为 53 维 one-hot 向量

    编码方式:
    - 前 52 维: 13 种牌面 × 4 花色 (按牌面展开)
    - 最后 1 维: 王

    Args:
        cards: 牌列表

    Returns:
        53 维 numpy 数组
    """
    array = np.zeros(ENCODING_DIM, dtype=np.float32)
    for card in cards:
        array[card_to_index(card)] = 1
    return array


def array_to_cards(array: np.ndarray) -> List[Card]:
    """
    将 53 维数组转换回牌列表

    Args:
        array: 53 维 numpy 数组

    Returns:
        排序后的牌列表
    """
    cards = []
    for idx in np.flatnonzero(array[:ENCODING_DIM - 1] > 0):
        rank = Rank.THREE + int(idx) // len(SUITS)
        suit = SUITS[int(idx) % len(SUITS)]
        cards.append(Card(suit, rank))
    if array[ENCODING_DIM - 1] > 0:
        cards.append(JOKER)
    return sort_cards(cards)


def cards_to_str(cards: Iterable[Card]) -> str:
    """
    将牌列表转换为可读字符串

    Returns:
        如 "S3 H3 D10 JK"
    """
    return ' '.join(str(c) for c in sort_cards(cards))


def str_to_cards(s: str) -> List[Card]:
    """
    将字符串转换为牌列表

    Args:
        s: 以空格分隔的牌字符串，如 "S3 H4 JK"

    Returns:
        牌列表 (保持输入顺序)
    """
    cards = []
    for token in s.split():
        token = token.upper()
        if token == "JK":
            cards.append(JOKER)
            continue
        suit = STR_TO_SUIT.get(token[0])
        rank = STR_TO_RANK.get(token[1:])
        if suit is None or rank is None:
            raise ValueError(f"Invalid card string: {token!r}")
        cards.append(Card(suit, rank))
    return cards


class Deck:
    """
    牌堆

    每局创建一次，发牌后丢弃
    """

    def __init__(self, include_joker: bool = False, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self._cards: List[Card] = list(FULL_DECK)
        if include_joker:
            self._cards.append(JOKER)

    def shuffle(self) -> None:
        """原地洗牌"""
        self._rng.shuffle(self._cards)

    def deal(self, players: int) -> List[List[Card]]:
        """
        轮流发牌 (第 i 张给 i % players 号玩家)

        Args:
            players: 玩家数

        Returns:
            各玩家的牌列表
        """
        if players <= 0:
            raise ValueError(f"Cannot deal to {players} players")
        hands: List[List[Card]] = [[] for _ in range(players)]
        for i, card in enumerate(self._cards):
            hands[i % players].append(card)
        self._cards = []
        return hands

    def __len__(self) -> int:
        return len(self._cards)
