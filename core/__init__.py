"""
Core Layer - 纯游戏逻辑 (无 ML 依赖)

Modules:
    cards: 牌定义、编码与发牌
    actions: 牌型与组合生成
    rules: 规则引擎
    hand: 手牌
    hooks: 特殊规则
    state: 游戏状态与回合状态机
    strategy: CPU 出牌策略
    config: 对局配置
"""
from .cards import (
    Suit,
    Rank,
    Card,
    Deck,
    JOKER,
    FULL_DECK,
    ENCODING_DIM,
    sort_cards,
    cards_to_array,
    array_to_cards,
    cards_to_str,
    str_to_cards,
)

from .actions import (
    CombinationKind,
    Combination,
    ComboGenerator,
    MIN_STAIR_LEN,
    MAX_STAIR_LEN,
    MAX_GROUP_SIZE,
)

from .rules import RuleEngine, RejectionReason

from .hand import Hand

from .hooks import (
    Rule,
    RuleContext,
    EightCutRule,
    RuleRegistry,
    default_rules,
)

from .state import (
    Phase,
    TableState,
    TurnState,
    PlayOutcome,
    PlayRejected,
    PlayResult,
    GameState,
    start_round,
)

from .strategy import CpuStrategy

from .config import RoundConfig

__all__ = [
    # cards
    "Suit",
    "Rank",
    "Card",
    "Deck",
    "JOKER",
    "FULL_DECK",
    "ENCODING_DIM",
    "sort_cards",
    "cards_to_array",
    "array_to_cards",
    "cards_to_str",
    "str_to_cards",
    # actions
    "CombinationKind",
    "Combination",
    "ComboGenerator",
    "MIN_STAIR_LEN",
    "MAX_STAIR_LEN",
    "MAX_GROUP_SIZE",
    # rules
    "RuleEngine",
    "RejectionReason",
    # hand
    "Hand",
    # hooks
    "Rule",
    "RuleContext",
    "EightCutRule",
    "RuleRegistry",
    "default_rules",
    # state
    "Phase",
    "TableState",
    "TurnState",
    "PlayOutcome",
    "PlayRejected",
    "PlayResult",
    "GameState",
    "start_round",
    # strategy
    "CpuStrategy",
    # config
    "RoundConfig",
]
