"""
游戏状态与回合状态机

- 出牌: 校验 -> 移除手牌 -> 更新场上 -> 特殊规则 -> 轮转 (或保留出牌权)
- 过牌: 连续过牌数 +1，其余仍在场的玩家全部过牌后流局，
  出牌权回到最后出牌的玩家

单线程: 同一时刻只处理一个动作，状态只有引擎一个写入方
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union
import logging
import random

from .cards import Card, Deck
from .actions import Combination
from .config import RoundConfig
from .hand import Hand
from .hooks import RuleContext, RuleRegistry
from .rules import RuleEngine, RejectionReason

logger = logging.getLogger(__name__)


class Phase(Enum):
    """对局阶段"""
    PLAYING = "playing"    # 出牌阶段
    FINISHED = "finished"  # 对局结束


@dataclass
class TableState:
    """
    场上状态

    Attributes:
        last_combination: 场上最近的组合，None 表示空场 (可任意出牌)
        owner_index: 打出该组合的玩家
    """
    last_combination: Optional[Combination] = None
    owner_index: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.last_combination is None

    def clear(self) -> None:
        self.last_combination = None
        self.owner_index = None


@dataclass
class TurnState:
    """
    回合状态

    Attributes:
        current_player_index: 当前行动玩家
        consecutive_passes: 连续过牌数
        last_player_index: 最近成功出牌的玩家 (只在出牌时更新)
        keep_turn: 规则设置的临时标记，下一次轮转时保留出牌权
    """
    current_player_index: int = 0
    consecutive_passes: int = 0
    last_player_index: Optional[int] = None
    keep_turn: bool = False


@dataclass(frozen=True)
class PlayOutcome:
    """
    成功出牌的结果 (描述本次变化，供界面播放动画)

    Attributes:
        player_index: 出牌玩家
        combination: 打出的组合
        table: 规则生效后的场上状态
        turn: 轮转后的回合状态
        applied_rules: 生效的规则名
        player_finished: 该玩家是否出完
        round_finished: 对局是否结束
    """
    player_index: int
    combination: Combination
    table: TableState
    turn: TurnState
    applied_rules: Tuple[str, ...] = ()
    player_finished: bool = False
    round_finished: bool = False

    @property
    def ok(self) -> bool:
        return True

    @property
    def cards_removed(self) -> Tuple[Card, ...]:
        return self.combination.cards


@dataclass(frozen=True)
class PlayRejected:
    """被拒绝的出牌 (状态没有任何变化，同一玩家可以重试)"""
    player_index: int
    reason: RejectionReason
    combination: Optional[Combination] = None

    @property
    def ok(self) -> bool:
        return False


PlayResult = Union[PlayOutcome, PlayRejected]


class GameState:
    """
    一局游戏的状态

    Attributes:
        config: 对局配置
        registry: 特殊规则注册表
        phase: 对局阶段
        finish_order: 出完牌的玩家顺序
        play_history: 出牌历史 ((player, cards), ...)，过牌记为空元组
        step_count: 已处理的动作数
        sweep_count: 流局次数
    """

    def __init__(
        self,
        hands: Sequence[Hand],
        config: Optional[RoundConfig] = None,
        registry: Optional[RuleRegistry] = None,
    ):
        """
        Args:
            hands: 各玩家手牌
            config: 对局配置 (默认按手牌数推断玩家数)
            registry: 规则注册表 (None 时按 config.disabled_rules 新建)
        """
        if config is None:
            config = RoundConfig(player_count=len(hands))
        if len(hands) != config.player_count:
            raise ValueError(
                f"Expected {config.player_count} hands, got {len(hands)}"
            )

        self.config = config
        self.registry = registry if registry is not None else RuleRegistry(
            disabled=config.disabled_rules
        )

        self._hands: List[Hand] = list(hands)
        self._table = TableState()
        self._turn = TurnState(current_player_index=config.starting_player)

        self.phase = Phase.PLAYING
        self.finish_order: List[int] = []
        self.play_history: List[Tuple[int, Tuple[Card, ...]]] = []
        self.step_count = 0
        self.sweep_count = 0

        for i, hand in enumerate(self._hands):
            if hand.is_empty():
                self.finish_order.append(i)
        if self._turn.current_player_index in self.finish_order:
            self._turn.current_player_index = self._next_active(self._turn.current_player_index)
        self._check_round_end()

    @classmethod
    def initial(
        cls,
        config: Optional[RoundConfig] = None,
        registry: Optional[RuleRegistry] = None,
    ) -> 'GameState':
        """
        洗牌、发牌，创建初始状态

        Args:
            config: 对局配置
            registry: 规则注册表

        Returns:
            初始状态 (出牌阶段)
        """
        config = config or RoundConfig()
        deck = Deck(include_joker=config.include_joker, rng=random.Random(config.seed))
        deck.shuffle()

        hands = [Hand(cards) for cards in deck.deal(config.player_count)]
        for hand in hands:
            hand.sort()

        logger.info(
            f"Round started: {config.player_count} players, "
            f"hand sizes {[len(h) for h in hands]}"
        )
        return cls(hands, config, registry)

    # ------------------------------------------------------------------
    # 只读访问
    # ------------------------------------------------------------------

    @property
    def player_count(self) -> int:
        return self.config.player_count

    @property
    def table(self) -> TableState:
        """场上状态 (副本)"""
        return replace(self._table)

    @property
    def turn(self) -> TurnState:
        """回合状态 (副本)"""
        return replace(self._turn)

    @property
    def current_player(self) -> int:
        return self._turn.current_player_index

    @property
    def is_finished(self) -> bool:
        return self.phase == Phase.FINISHED

    def get_hand(self, player_index: int) -> Hand:
        """指定玩家的手牌 (副本，只应展示给该玩家)"""
        self._check_index(player_index)
        return Hand(self._hands[player_index].cards)

    def hand_size(self, player_index: int) -> int:
        self._check_index(player_index)
        return len(self._hands[player_index])

    def hand_sizes(self) -> List[int]:
        return [len(h) for h in self._hands]

    def active_players(self) -> List[int]:
        """仍有手牌的玩家"""
        return [i for i in range(self.player_count) if i not in self.finish_order]

    def legal_combinations(self, player_index: int) -> List[Combination]:
        """指定玩家当前能打到场上的所有组合"""
        self._check_index(player_index)
        return self._hands[player_index].playable_combinations(self._table)

    # ------------------------------------------------------------------
    # 动作
    # ------------------------------------------------------------------

    def submit_play(
        self,
        player_index: int,
        cards: Union[Combination, Iterable[Card]],
    ) -> PlayResult:
        """
        提交出牌

        Args:
            player_index: 出牌玩家
            cards: 要出的组合或牌

        Returns:
            成功返回 PlayOutcome，否则返回 PlayRejected (状态不变)
        """
        self._check_index(player_index)
        combination = cards if isinstance(cards, Combination) else Combination.from_cards(cards)

        reason = self._check_submission(player_index, combination)
        if reason is not None:
            logger.info(f"Player {player_index} rejected: {reason.value} ({combination})")
            return PlayRejected(player_index, reason, combination)

        hand = self._hands[player_index]
        hand.remove_cards(combination.cards)

        self._table = TableState(last_combination=combination, owner_index=player_index)
        self._turn.consecutive_passes = 0
        self._turn.last_player_index = player_index
        self.play_history.append((player_index, combination.cards))
        self.step_count += 1
        logger.info(f"Player {player_index} played {combination} ({combination.kind.name})")

        # 特殊规则看到的是本次出牌后的场上状态
        ctx = RuleContext(table=self._table, turn=self._turn, player_index=player_index)
        applied = self.registry.evaluate(combination, ctx)
        self._table = ctx.table
        self._turn = ctx.turn

        player_finished = hand.is_empty()
        if player_finished:
            self.finish_order.append(player_index)
            logger.info(f"Player {player_index} finished (position {len(self.finish_order)})")

        self._advance_after_play(player_index)
        self._check_round_end()

        return PlayOutcome(
            player_index=player_index,
            combination=combination,
            table=self.table,
            turn=self.turn,
            applied_rules=tuple(applied),
            player_finished=player_finished,
            round_finished=self.is_finished,
        )

    def submit_pass(self, player_index: int) -> TurnState:
        """
        提交过牌

        Args:
            player_index: 过牌玩家

        Returns:
            过牌后的回合状态
        """
        self._check_index(player_index)
        if self.is_finished:
            raise ValueError("Round is finished")
        if player_index != self._turn.current_player_index:
            raise ValueError(
                f"Not player {player_index}'s turn "
                f"(current: {self._turn.current_player_index})"
            )
        if self._table.is_empty:
            raise ValueError("Cannot pass on an empty table")

        self._turn.consecutive_passes += 1
        self.play_history.append((player_index, ()))
        self.step_count += 1
        logger.info(
            f"Player {player_index} passed "
            f"({self._turn.consecutive_passes} consecutive)"
        )

        if self._turn.consecutive_passes >= self._passes_to_sweep():
            self._sweep()
        else:
            self._turn.current_player_index = self._next_active(player_index)

        return self.turn

    # ------------------------------------------------------------------
    # 内部
    # ------------------------------------------------------------------

    def _check_index(self, player_index: int) -> None:
        if not 0 <= player_index < self.player_count:
            raise ValueError(f"Invalid player index: {player_index}")

    def _check_submission(self, player_index: int, combination: Combination) -> Optional[RejectionReason]:
        if self.is_finished:
            return RejectionReason.ROUND_FINISHED
        if player_index != self._turn.current_player_index:
            return RejectionReason.NOT_PLAYERS_TURN
        if not self._hands[player_index].contains_all(combination.cards):
            return RejectionReason.CARD_NOT_IN_HAND
        return RuleEngine.check_play(self._table, combination)

    def _next_active(self, player_index: int) -> int:
        """下一位仍有手牌的玩家"""
        for step in range(1, self.player_count + 1):
            candidate = (player_index + step) % self.player_count
            if candidate not in self.finish_order:
                return candidate
        return player_index

    def _passes_to_sweep(self) -> int:
        """流局所需的连续过牌数: 除最后出牌者外仍在场的玩家数"""
        others = [i for i in self.active_players() if i != self._turn.last_player_index]
        return max(len(others), 1)

    def _advance_after_play(self, player_index: int) -> None:
        if self._turn.keep_turn:
            self._turn.keep_turn = False
            if player_index in self.finish_order:
                self._turn.current_player_index = self._next_active(player_index)
            else:
                self._turn.current_player_index = player_index
            logger.debug(f"Player {self._turn.current_player_index} keeps the lead")
        else:
            self._turn.current_player_index = self._next_active(player_index)

    def _sweep(self) -> None:
        """流局: 清空场上，出牌权回到最后出牌的玩家"""
        self._table.clear()
        self._turn.consecutive_passes = 0
        self.sweep_count += 1

        last = self._turn.last_player_index
        if last is None:
            leader = 0 if 0 not in self.finish_order else self._next_active(0)
        elif last in self.finish_order:
            leader = self._next_active(last)
        else:
            leader = last
        self._turn.current_player_index = leader
        logger.info(f"Table swept, player {leader} leads")

    def _check_round_end(self) -> None:
        active = self.active_players()
        if len(active) > 1 or self.phase == Phase.FINISHED:
            return
        self.finish_order.extend(active)
        self.phase = Phase.FINISHED
        logger.info(f"Round finished, order {self.finish_order}")


def start_round(
    player_count: int = 4,
    seed: Optional[int] = None,
    registry: Optional[RuleRegistry] = None,
    **kwargs,
) -> GameState:
    """
    开始一局

    Args:
        player_count: 玩家数
        seed: 随机种子
        registry: 规则注册表
        **kwargs: 其他 RoundConfig 字段

    Returns:
        初始状态，手牌与回合状态可通过 get_hand / turn 访问
    """
    config = RoundConfig(player_count=player_count, seed=seed, **kwargs)
    return GameState.initial(config, registry)
