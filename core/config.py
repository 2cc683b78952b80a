"""
对局配置

只保存在内存中，不对应任何文件格式
"""
from dataclasses import dataclass
from typing import Optional, Tuple

MIN_PLAYERS = 2
MAX_PLAYERS = 4


@dataclass
class RoundConfig:
    """
    单局配置

    Attributes:
        player_count: 玩家数 (2-4)
        starting_player: 首个出牌的玩家
        include_joker: 是否加入王
        seed: 随机种子 (洗牌与 CPU 的随机选择)
        disabled_rules: 关闭的特殊规则名
    """
    player_count: int = 4
    starting_player: int = 0
    include_joker: bool = False
    seed: Optional[int] = None
    disabled_rules: Tuple[str, ...] = ()

    def __post_init__(self):
        if not MIN_PLAYERS <= self.player_count <= MAX_PLAYERS:
            raise ValueError(
                f"player_count must be between {MIN_PLAYERS} and {MAX_PLAYERS}, "
                f"got {self.player_count}"
            )
        if not 0 <= self.starting_player < self.player_count:
            raise ValueError(f"Invalid starting_player: {self.starting_player}")
        self.disabled_rules = tuple(self.disabled_rules)

    @classmethod
    def from_dict(cls, d: dict) -> 'RoundConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered)
