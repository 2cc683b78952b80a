"""手牌测试"""
import pytest

from core.cards import JOKER, str_to_cards
from core.actions import Combination, CombinationKind
from core.hand import Hand
from core.state import TableState


def table_of(s: str) -> TableState:
    return TableState(last_combination=Combination.from_cards(str_to_cards(s)), owner_index=1)


class TestHand:
    """Hand 基本操作"""

    def test_cards_is_copy(self):
        hand = Hand(str_to_cards("S3 H4"))
        hand.cards.append(JOKER)
        assert len(hand) == 2

    def test_add_and_sort(self):
        hand = Hand()
        for card in str_to_cards("S9 H3 D5"):
            hand.add(card)
        hand.sort()
        assert [c.rank for c in hand] == [3, 5, 9]

    def test_contains(self):
        hand = Hand(str_to_cards("S3 H4"))
        assert str_to_cards("S3")[0] in hand
        assert str_to_cards("D3")[0] not in hand

    def test_contains_all(self):
        hand = Hand(str_to_cards("S3 H3 H4"))
        assert hand.contains_all(str_to_cards("S3 H3"))
        assert not hand.contains_all(str_to_cards("S3 D3"))

    def test_contains_all_duplicates(self):
        hand = Hand(str_to_cards("S3 H4"))
        assert not hand.contains_all(str_to_cards("S3 S3"))

    def test_remove_cards(self):
        hand = Hand(str_to_cards("S3 H3 H4"))
        hand.remove_cards(str_to_cards("S3 H3"))
        assert hand.cards == str_to_cards("H4")

    def test_remove_missing_card_asserts(self):
        hand = Hand(str_to_cards("S3"))
        with pytest.raises(AssertionError):
            hand.remove_cards(str_to_cards("H3"))
        assert len(hand) == 1

    def test_is_empty(self):
        hand = Hand(str_to_cards("S3"))
        assert not hand.is_empty()
        hand.remove_cards(str_to_cards("S3"))
        assert hand.is_empty()


class TestPlayable:
    """可出组合 / 可出牌"""

    def test_combinations(self):
        hand = Hand(str_to_cards("S3 H3 S4 S5"))
        kinds = sorted(c.kind for c in hand.combinations())
        assert kinds.count(CombinationKind.SINGLE) == 4
        assert kinds.count(CombinationKind.PAIR) == 1
        assert kinds.count(CombinationKind.STAIR) == 1

    def test_playable_combinations_empty_table(self):
        hand = Hand(str_to_cards("S3 H3"))
        assert len(hand.playable_combinations(TableState())) == 3
        assert len(hand.playable_combinations(None)) == 3

    def test_playable_combinations_against_pair(self):
        hand = Hand(str_to_cards("S3 H3 S9 H9 DK"))
        combos = hand.playable_combinations(table_of("S5 H5"))
        assert [c.rank for c in combos] == [9]

    def test_playable_cards(self):
        hand = Hand(str_to_cards("S3 H3 S9 H9 DK"))
        cards = hand.playable_cards(table_of("S5 H5"))
        assert cards == set(str_to_cards("S9 H9"))

    def test_playable_cards_none(self):
        hand = Hand(str_to_cards("S3 H4"))
        assert hand.playable_cards(table_of("S2")) == set()
