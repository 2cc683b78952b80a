"""
规则引擎 - 牌型检测、大小比较、合法性验证

所有方法都是纯函数，无状态，可用于试探性判断
"""
from enum import Enum
from typing import List, Optional, Sequence, TYPE_CHECKING

from .cards import Card
from .actions import Combination, CombinationKind, ComboGenerator, GROUP_KINDS, MIN_STAIR_LEN, MAX_STAIR_LEN, MAX_GROUP_SIZE

if TYPE_CHECKING:
    from .state import TableState


class RejectionReason(Enum):
    """出牌被拒绝的原因 (可恢复，不修改任何状态)"""
    INVALID_COMBINATION_SHAPE = "invalid_combination_shape"  # 非法牌型
    KIND_MISMATCH = "kind_mismatch"                          # 牌型或张数与场上不同
    RANK_TOO_LOW = "rank_too_low"                            # 打不过场上
    NOT_PLAYERS_TURN = "not_players_turn"                    # 不是该玩家的回合
    CARD_NOT_IN_HAND = "card_not_in_hand"                    # 手中没有这些牌
    ROUND_FINISHED = "round_finished"                        # 本局已结束


class RuleEngine:
    """
    规则引擎

    提供牌型检测、大小比较、合法性验证等功能
    所有方法都是静态方法，无状态
    """

    @staticmethod
    def is_consecutive(ranks: Sequence[int]) -> bool:
        """
        检查牌面值列表是否连续

        Args:
            ranks: 已排序的牌面值列表

        Returns:
            是否连续
        """
        for i in range(len(ranks) - 1):
            if ranks[i + 1] - ranks[i] != 1:
                return False
        return True

    @staticmethod
    def is_stair(cards: Sequence[Card]) -> bool:
        """
        阶梯判定: 3-4 张、同一花色、牌面严格连续

        王不属于任何花色，不能组成阶梯
        """
        if len(cards) < MIN_STAIR_LEN or len(cards) > MAX_STAIR_LEN:
            return False
        if any(c.is_joker for c in cards):
            return False

        suit = cards[0].suit
        if any(c.suit != suit for c in cards):
            return False

        ranks = sorted(c.rank for c in cards)
        # 全部相同的情况已由同牌面分支处理，这里仍显式排除
        if ranks[0] == ranks[-1]:
            return False
        return RuleEngine.is_consecutive(ranks)

    @staticmethod
    def classify(cards: Sequence[Card]) -> CombinationKind:
        """
        检测牌型

        结果只取决于牌的 (花色, 牌面) 多重集合，与输入顺序无关

        Args:
            cards: 牌列表

        Returns:
            牌型枚举值
        """
        if not cards:
            return CombinationKind.INVALID

        n = len(cards)

        # 单张 (含王)
        if n == 1:
            return CombinationKind.SINGLE

        # 同牌面: 对子 / 三张 / 四张，超过四张非法
        if all(c.rank == cards[0].rank for c in cards):
            if n > MAX_GROUP_SIZE:
                return CombinationKind.INVALID
            return GROUP_KINDS[n]

        if RuleEngine.is_stair(cards):
            return CombinationKind.STAIR

        return CombinationKind.INVALID

    @staticmethod
    def get_rank(combination: Combination) -> int:
        """
        获取组合的比较键

        Args:
            combination: 组合

        Returns:
            同牌面组合返回共同牌面，阶梯返回最大牌面，王为 100
        """
        return combination.rank

    @staticmethod
    def compare(a: Combination, b: Combination) -> int:
        """
        比较两个组合的大小

        Args:
            a: 组合 a
            b: 组合 b (通常是场上的牌)

        Returns:
            1 if a > b, -1 if a < b, 0 if 相等或不可比较
        """
        if not a.is_valid or not b.is_valid:
            return 0

        # 不同牌型不可比较
        if a.kind != b.kind:
            return 0

        # 张数不同不可比较 (3 张阶梯与 4 张阶梯)
        if len(a) != len(b):
            return 0

        a_rank = RuleEngine.get_rank(a)
        b_rank = RuleEngine.get_rank(b)

        if a_rank > b_rank:
            return 1
        elif a_rank < b_rank:
            return -1
        return 0

    @staticmethod
    def check_play(table: Optional['TableState'], candidate: Combination) -> Optional[RejectionReason]:
        """
        检查组合能否打到场上

        Args:
            table: 场上状态 (None 等同于空场)
            candidate: 要出的组合

        Returns:
            可以出牌返回 None，否则返回拒绝原因
        """
        # 牌型以牌本身为准，不信任调用方标注的 kind
        kind = RuleEngine.classify(candidate.cards)
        if kind == CombinationKind.INVALID or kind != candidate.kind:
            return RejectionReason.INVALID_COMBINATION_SHAPE

        last = table.last_combination if table is not None else None

        # 空场: 任何合法牌型都可以出
        if last is None:
            return None

        if candidate.kind != last.kind or len(candidate) != len(last):
            return RejectionReason.KIND_MISMATCH

        if RuleEngine.compare(candidate, last) != 1:
            return RejectionReason.RANK_TOO_LOW

        return None

    @staticmethod
    def can_play(table: Optional['TableState'], candidate: Combination) -> bool:
        """判断组合能否打到场上 (无副作用)"""
        return RuleEngine.check_play(table, candidate) is None

    @staticmethod
    def can_beat(hand: List[Card], table: Optional['TableState']) -> bool:
        """
        检查手牌是否有能出的组合

        Args:
            hand: 手牌
            table: 场上状态

        Returns:
            是否有可出的组合
        """
        last = table.last_combination if table is not None else None
        return bool(ComboGenerator(hand).generate_responses(last))
