"""
观察空间与动作编码

将游戏状态转换为 numpy 特征，并把出牌组合映射到固定的离散动作空间
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
import numpy as np

from core.cards import Card, JOKER, FULL_DECK, NORMAL_RANKS, SUITS, ENCODING_DIM, sort_cards, cards_to_array
from core.actions import Combination, CombinationKind, GROUP_KINDS, MIN_STAIR_LEN, MAX_STAIR_LEN, MAX_GROUP_SIZE
from core.state import GameState

@dataclass
class Observation:
    """
    结构化观测

    Attributes:
        hand: 自己的手牌 (53,)
        table: 场上的组合 (53,)
        played_cards: 各玩家已出牌累计 (P, 53)
        cards_left: 各玩家剩余牌数 (P,)
        position: 位置编码 (P,) one-hot
        finished: 各玩家是否已出完 (P,)
        passes: 连续过牌数
    """
    hand: np.ndarray
    table: np.ndarray
    played_cards: np.ndarray
    cards_left: np.ndarray
    position: np.ndarray
    finished: np.ndarray
    passes: int

    def to_dict(self) -> Dict[str, np.ndarray]:
        """转换为字典格式"""
        return {
            "hand": self.hand,
            "table": self.table,
            "played_cards": self.played_cards,
            "cards_left": self.cards_left,
            "position": self.position,
            "finished": self.finished,
        }

    def to_flat_array(self) -> np.ndarray:
        """展平为单一向量"""
        return np.concatenate([
            self.hand,
            self.table,
            self.played_cards.flatten(),
            self.cards_left,
            self.position,
            self.finished,
            np.array([self.passes], dtype=np.float32),
        ])


class ObservationBuilder:
    """
    观测构建器

    负责将 GameState 转换为 Observation (只包含视角玩家可见的信息)
    """

    def __init__(self, player_count: int = 4):
        self.player_count = player_count
        # 手牌数归一化: 53 张平均发下去时的最大手牌数
        self.max_hand_size = -(-ENCODING_DIM // player_count)

    def build(self, state: GameState, perspective: Optional[int] = None) -> Observation:
        """
        从游戏状态构建观测

        Args:
            state: 游戏状态
            perspective: 视角玩家 (默认为当前玩家)

        Returns:
            Observation 对象
        """
        if perspective is None:
            perspective = state.current_player

        hand = cards_to_array(state.get_hand(perspective).cards)

        table_state = state.table
        if table_state.is_empty:
            table = np.zeros(ENCODING_DIM, dtype=np.float32)
        else:
            table = cards_to_array(table_state.last_combination.cards)

        position = np.zeros(self.player_count, dtype=np.float32)
        position[perspective] = 1

        finished = np.zeros(self.player_count, dtype=np.float32)
        for idx in state.finish_order:
            finished[idx] = 1

        return Observation(
            hand=hand,
            table=table,
            played_cards=self._encode_played_cards(state),
            cards_left=np.array(state.hand_sizes(), dtype=np.float32) / self.max_hand_size,
            position=position,
            finished=finished,
            passes=state.turn.consecutive_passes,
        )

    def _encode_played_cards(self, state: GameState) -> np.ndarray:
        """
        编码各玩家已出的牌

        Returns:
            (P, 53) 数组
        """
        result = np.zeros((self.player_count, ENCODING_DIM), dtype=np.float32)
        for player, cards in state.play_history:
            for card in cards:
                result[player] += cards_to_array([card])
        return result


ActionKey = Tuple


class ActionEncoder:
    """
    动作编码器

    动作空间 (共 177 个):
    - PASS: 1
    - 单张: 53 (52 张 + 王)
    - 同牌面组合: 3 × 13 (对子 / 三张 / 四张 × 牌面)
    - 阶梯: 4 花色 × (11 种 3 张 + 10 种 4 张)

    同牌面组合只记录张数与牌面，解码时从手牌中按花色顺序取牌
    """

    PASS_INDEX = 0

    def __init__(self):
        self._key_to_idx: Dict[ActionKey, int] = {}
        self._idx_to_key: Dict[int, ActionKey] = {}
        self._build_action_space()

    def _add(self, key: ActionKey) -> None:
        idx = len(self._key_to_idx)
        self._key_to_idx[key] = idx
        self._idx_to_key[idx] = key

    def _build_action_space(self):
        self._add(("pass",))

        for card in FULL_DECK + (JOKER,):
            self._add(("single", card))

        for size in range(2, MAX_GROUP_SIZE + 1):
            for rank in NORMAL_RANKS:
                self._add(("group", size, rank))

        for suit in SUITS:
            for length in range(MIN_STAIR_LEN, MAX_STAIR_LEN + 1):
                for top in NORMAL_RANKS[length - 1:]:
                    self._add(("stair", suit, length, top))

    @property
    def num_actions(self) -> int:
        """动作空间大小"""
        return len(self._key_to_idx)

    @staticmethod
    def key_of(combination: Optional[Combination]) -> Optional[ActionKey]:
        if combination is None:
            return ("pass",)
        if combination.kind == CombinationKind.SINGLE:
            return ("single", combination.cards[0])
        if combination.kind == CombinationKind.STAIR:
            return ("stair", combination.cards[0].suit, len(combination), combination.rank)
        if combination.kind == CombinationKind.INVALID:
            return None
        return ("group", len(combination), combination.rank)

    def encode(self, combination: Optional[Combination]) -> int:
        """
        将组合编码为索引

        Args:
            combination: 组合，None 表示过牌

        Returns:
            动作索引，未找到返回 -1
        """
        key = self.key_of(combination)
        return self._key_to_idx.get(key, -1)

    def decode(self, idx: int, hand_cards: Iterable[Card] = ()) -> Optional[Combination]:
        """
        将索引解码为组合

        Args:
            idx: 动作索引
            hand_cards: 手牌 (同牌面组合从中取牌，不足时取标准花色顺序的牌)

        Returns:
            组合，None 表示过牌
        """
        if idx not in self._idx_to_key:
            raise ValueError(
                f"Invalid action index: {idx}. "
                f"Valid range: 0-{self.num_actions - 1}"
            )

        key = self._idx_to_key[idx]
        tag = key[0]

        if tag == "pass":
            return None

        if tag == "single":
            return Combination((key[1],), CombinationKind.SINGLE)

        if tag == "group":
            _, size, rank = key
            same = [c for c in sort_cards(hand_cards) if c.rank == rank]
            if len(same) < size:
                same = [Card(suit, rank) for suit in SUITS]
            return Combination(tuple(same[:size]), GROUP_KINDS[size])

        _, suit, length, top = key
        cards = tuple(Card(suit, rank) for rank in range(top - length + 1, top + 1))
        return Combination(cards, CombinationKind.STAIR)

    def get_legal_action_indices(self, legal_actions: List[Optional[Combination]]) -> List[int]:
        """合法动作的索引列表"""
        indices = []
        for action in legal_actions:
            idx = self.encode(action)
            if idx >= 0:
                indices.append(idx)
        return indices

    def build_legal_mask(self, legal_actions: List[Optional[Combination]]) -> np.ndarray:
        """
        构建合法动作掩码

        Args:
            legal_actions: 合法组合列表 (None 表示过牌)

        Returns:
            (num_actions,) 数组
        """
        mask = np.zeros(self.num_actions, dtype=np.float32)
        for idx in self.get_legal_action_indices(legal_actions):
            mask[idx] = 1
        return mask


# 全局单例
_action_encoder: Optional[ActionEncoder] = None


def get_action_encoder() -> ActionEncoder:
    """获取全局动作编码器"""
    global _action_encoder
    if _action_encoder is None:
        _action_encoder = ActionEncoder()
    return _action_encoder
