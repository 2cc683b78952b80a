"""智能体与竞技场测试"""
import pytest

from core.cards import str_to_cards
from core.actions import Combination
from core.config import RoundConfig
from core.hand import Hand
from core.state import TableState


def combo(s: str) -> Combination:
    return Combination.from_cards(str_to_cards(s))


def table_of(s: str) -> TableState:
    return TableState(last_combination=combo(s), owner_index=1)


class TestHumanAgent:
    """HumanAgent 测试"""

    def test_returns_selection(self):
        from evaluation import HumanAgent

        agent = HumanAgent()
        agent.select(str_to_cards("H3 S3"))
        move = agent.act(Hand(str_to_cards("S3 H3 D9")), TableState())
        assert move == combo("S3 H3")
        assert agent.selection == []

    def test_empty_selection_is_pass(self):
        from evaluation import HumanAgent

        agent = HumanAgent()
        assert agent.act(Hand(str_to_cards("S3")), table_of("S9")) is None

    def test_toggle(self):
        from evaluation import HumanAgent

        agent = HumanAgent()
        card = str_to_cards("S3")[0]
        agent.toggle(card)
        assert agent.selection == [card]
        agent.toggle(card)
        assert agent.selection == []

    def test_no_validation(self):
        from evaluation import HumanAgent

        agent = HumanAgent()
        agent.select(str_to_cards("S3 H9"))
        move = agent.act(Hand(str_to_cards("S3 H9")), TableState())
        assert not move.is_valid


class TestCpuAgent:
    """CpuAgent 测试"""

    def test_act(self):
        from evaluation import CpuAgent

        agent = CpuAgent(seed=0)
        hand = Hand(str_to_cards("S3 HK"))
        assert agent.act(hand, table_of("S9")) == combo("HK")
        assert len(hand) == 2

    def test_pass(self):
        from evaluation import CpuAgent

        agent = CpuAgent(seed=0)
        assert agent.act(Hand(str_to_cards("S3")), table_of("S9")) is None

    def test_reset_reseeds(self):
        from evaluation import CpuAgent

        agent = CpuAgent(seed=3)
        hand = Hand(str_to_cards("S3 S4 S5 H7 H8 H9 D10 DJ DQ"))
        first = [agent.act(hand, TableState()) for _ in range(5)]
        agent.reset()
        second = [agent.act(hand, TableState()) for _ in range(5)]
        assert first == second

    def test_reset_with_seed(self):
        from evaluation import CpuAgent

        hand = Hand(str_to_cards("S3 S4 S5 H7 H8 H9 D10 DJ DQ"))
        a, b = CpuAgent(seed=1), CpuAgent()
        a.reset(8)
        b.reset(8)
        assert [a.act(hand, TableState()) for _ in range(5)] == [b.act(hand, TableState()) for _ in range(5)]


class TestRandomAgent:
    """RandomAgent 测试"""

    def test_act_legal(self):
        from evaluation import RandomAgent

        agent = RandomAgent(seed=0)
        hand = Hand(str_to_cards("S3 H9 DK SA"))
        table = table_of("S9")
        legal = hand.playable_combinations(table)
        for _ in range(20):
            move = agent.act(hand, table)
            assert move is None or move in legal

    def test_never_passes_on_empty_table(self):
        from evaluation import RandomAgent

        agent = RandomAgent(seed=1)
        hand = Hand(str_to_cards("S3 H3"))
        for _ in range(20):
            assert agent.act(hand, TableState()) is not None

    def test_no_options(self):
        from evaluation import RandomAgent

        agent = RandomAgent(seed=0)
        assert agent.act(Hand(str_to_cards("S3")), table_of("S9")) is None


class TestArena:
    """Arena 测试"""

    def test_cpu_round_finishes(self):
        from evaluation import Arena, CpuAgent

        arena = Arena(RoundConfig())
        agents = [CpuAgent(f"cpu_{i}", seed=i) for i in range(4)]
        result = arena.play_round(agents, seed=1)

        assert not result.truncated
        assert sorted(result.finish_order) == [0, 1, 2, 3]
        assert result.winner == agents[result.finish_order[0]].name
        assert result.length > 0
        assert result.rejections == 0

    def test_random_round_finishes(self):
        from evaluation import Arena, RandomAgent

        arena = Arena(RoundConfig(player_count=3))
        agents = [RandomAgent(f"random_{i}", seed=i) for i in range(3)]
        result = arena.play_round(agents, seed=2)
        assert sorted(result.finish_order) == [0, 1, 2]

    def test_idle_humans_finish(self):
        from evaluation import Arena, HumanAgent

        arena = Arena(RoundConfig(player_count=2))
        result = arena.play_round([HumanAgent("a"), HumanAgent("b")], seed=0)
        assert not result.truncated
        assert result.rejections == 0

    def test_illegal_moves_counted(self):
        from evaluation import Agent, Arena, CpuAgent

        class BadAgent(Agent):
            def act(self, hand, table):
                # 总是出不成牌型的两张
                cards = hand.cards
                if len(cards) >= 2 and cards[0].rank != cards[1].rank:
                    return Combination.from_cards(cards[:2])
                return None

        arena = Arena(RoundConfig(player_count=2))
        result = arena.play_round([BadAgent("bad"), CpuAgent("cpu", seed=0)], seed=4)
        assert not result.truncated
        assert result.rejections > 0

    def test_deterministic(self):
        from evaluation import Arena, CpuAgent

        arena = Arena(RoundConfig())
        agents = [CpuAgent(f"cpu_{i}", seed=i) for i in range(4)]
        a = arena.play_round(agents, seed=7)
        b = arena.play_round(agents, seed=7)
        assert a.finish_order == b.finish_order
        assert a.length == b.length

    @pytest.mark.parametrize("seed", range(12))
    def test_round_seed_drives_cpu_choices(self, seed):
        """未设种子的 CPU 也由本局种子决定随机选择"""
        from evaluation import Arena, CpuAgent

        arena = Arena(RoundConfig())
        results = [arena.play_round([CpuAgent() for _ in range(4)], seed=seed) for _ in range(3)]
        assert all(r.finish_order == results[0].finish_order for r in results)
        assert all(r.length == results[0].length for r in results)

    def test_shared_agent_reproducible(self):
        from evaluation import Arena, CpuAgent

        arena = Arena(RoundConfig())
        a = arena.play_round([CpuAgent()] * 4, seed=5)
        b = arena.play_round([CpuAgent()] * 4, seed=5)
        assert a.finish_order == b.finish_order
        assert a.length == b.length

    def test_eight_cut_disabled(self):
        from evaluation import Arena, CpuAgent

        arena = Arena(RoundConfig(disabled_rules=("eight_cut",)))
        agents = [CpuAgent(f"cpu_{i}", seed=i) for i in range(4)]
        result = arena.play_round(agents, seed=3)
        assert result.eight_cuts == 0

    def test_agent_count_mismatch(self):
        from evaluation import Arena, CpuAgent

        arena = Arena(RoundConfig())
        with pytest.raises(AssertionError):
            arena.play_round([CpuAgent()], seed=0)

    def test_play_rounds(self):
        from evaluation import Arena, CpuAgent

        arena = Arena(RoundConfig(player_count=3))
        agents = [CpuAgent(f"cpu_{i}", seed=i) for i in range(3)]
        results = arena.play_rounds(agents, n_rounds=3, seed=10)
        assert len(results) == 3
        assert all(not r.truncated for r in results)
