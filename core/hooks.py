"""
特殊规则

每次成功出牌后按注册顺序检查所有规则，条件成立的规则依次生效。
规则可以清空场上的牌，或让出牌者保留出牌权。
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Set, TYPE_CHECKING
import logging

from .cards import Rank
from .actions import Combination

if TYPE_CHECKING:
    from .state import TableState, TurnState

logger = logging.getLogger(__name__)


@dataclass
class RuleContext:
    """
    规则可修改的状态记录

    Attributes:
        table: 出牌后的场上状态
        turn: 出牌后的回合状态 (尚未轮转)
        player_index: 出牌的玩家
    """
    table: 'TableState'
    turn: 'TurnState'
    player_index: int


class Rule(ABC):
    """特殊规则基类"""

    name: str = "rule"

    @abstractmethod
    def can_apply(self, played: Combination, ctx: RuleContext) -> bool:
        """规则是否适用 (无副作用)"""

    @abstractmethod
    def apply(self, played: Combination, ctx: RuleContext) -> None:
        """应用规则 (修改 ctx)"""


class EightCutRule(Rule):
    """
    8 切

    出的牌中含有 8 时清空场上，出牌者继续出牌
    """

    name = "eight_cut"

    def can_apply(self, played: Combination, ctx: RuleContext) -> bool:
        return played.contains_rank(Rank.EIGHT)

    def apply(self, played: Combination, ctx: RuleContext) -> None:
        logger.info(f"Eight-cut by player {ctx.player_index}")
        ctx.table.clear()
        ctx.turn.keep_turn = True


def default_rules() -> List[Rule]:
    """默认规则集"""
    return [EightCutRule()]


class RuleRegistry:
    """
    规则注册表

    规则按注册顺序求值，彼此不互斥。注册表在对局之间不保存任何状态，
    只有各规则的开关。
    """

    def __init__(self, rules: Optional[Iterable[Rule]] = None, disabled: Iterable[str] = ()):
        """
        Args:
            rules: 规则列表 (None 使用默认规则集)
            disabled: 关闭的规则名
        """
        self._rules: List[Rule] = []
        self._disabled: Set[str] = set()

        for rule in (default_rules() if rules is None else rules):
            self.register(rule)
        for name in disabled:
            self.disable(name)

    def register(self, rule: Rule) -> None:
        """在末尾注册一条规则"""
        if any(r.name == rule.name for r in self._rules):
            raise ValueError(f"Rule already registered: {rule.name}")
        self._rules.append(rule)

    def _check_known(self, name: str) -> None:
        if not any(r.name == name for r in self._rules):
            raise ValueError(f"Unknown rule: {name}")

    def enable(self, name: str) -> None:
        self._check_known(name)
        self._disabled.discard(name)

    def disable(self, name: str) -> None:
        self._check_known(name)
        self._disabled.add(name)

    def is_enabled(self, name: str) -> bool:
        return name not in self._disabled

    @property
    def rules(self) -> List[Rule]:
        """已启用的规则 (注册顺序)"""
        return [r for r in self._rules if r.name not in self._disabled]

    def evaluate(self, played: Combination, ctx: RuleContext) -> List[str]:
        """
        对一次成功出牌求值所有规则

        所有条件先基于出牌后的状态判断，再在副本上依次应用效果，
        全部成功后一次性写回 ctx.table / ctx.turn。

        Args:
            played: 刚出的组合
            ctx: 状态记录

        Returns:
            生效的规则名列表
        """
        applicable = [rule for rule in self.rules if rule.can_apply(played, ctx)]
        if not applicable:
            return []

        work = RuleContext(
            table=replace(ctx.table),
            turn=replace(ctx.turn),
            player_index=ctx.player_index,
        )
        for rule in applicable:
            logger.debug(f"Applying rule {rule.name} to {played}")
            rule.apply(played, work)

        ctx.table = work.table
        ctx.turn = work.turn
        return [rule.name for rule in applicable]

    def __len__(self) -> int:
        return len(self._rules)
