"""环境层测试"""
import pytest
import numpy as np

from core.cards import ENCODING_DIM, str_to_cards
from core.actions import Combination
from core.config import RoundConfig
from core.hand import Hand
from core.state import GameState


def finished_state() -> GameState:
    """四人依次出完: 顺序 [0, 1, 2, 3]"""
    hands = [Hand(str_to_cards(h)) for h in ("S3", "H4", "D5", "C6 C7")]
    state = GameState(hands, RoundConfig())
    state.submit_play(0, str_to_cards("S3"))
    state.submit_play(1, str_to_cards("H4"))
    state.submit_play(2, str_to_cards("D5"))
    return state


class TestObservationBuilder:
    """ObservationBuilder 测试"""

    def test_build(self):
        from env.observation import ObservationBuilder

        builder = ObservationBuilder(4)
        state = GameState.initial(RoundConfig(seed=42))
        obs = builder.build(state)

        assert obs.hand.shape == (ENCODING_DIM,)
        assert obs.hand.sum() == 13
        assert obs.table.sum() == 0
        assert obs.played_cards.shape == (4, ENCODING_DIM)
        assert obs.position.shape == (4,)
        assert obs.position.sum() == 1  # one-hot
        assert obs.cards_left.max() <= 1

    def test_after_play(self):
        from env.observation import ObservationBuilder

        builder = ObservationBuilder(4)
        state = GameState.initial(RoundConfig(seed=42))
        move = next(c for c in state.legal_combinations(0) if not c.contains_rank(8))
        state.submit_play(0, move)
        obs = builder.build(state, perspective=1)

        assert obs.position[1] == 1
        assert obs.table.sum() == len(move)
        assert obs.played_cards[0].sum() == len(move)
        assert obs.hand.sum() == state.hand_size(1)

    def test_finished_flags(self):
        from env.observation import ObservationBuilder

        builder = ObservationBuilder(4)
        obs = builder.build(finished_state(), perspective=0)
        assert obs.finished.tolist() == [1, 1, 1, 1]

    def test_to_dict(self):
        from env.observation import ObservationBuilder

        builder = ObservationBuilder(4)
        obs = builder.build(GameState.initial(RoundConfig(seed=42)))
        obs_dict = obs.to_dict()

        assert set(obs_dict) == {"hand", "table", "played_cards", "cards_left", "position", "finished"}

    def test_to_flat_array(self):
        from env.observation import ObservationBuilder

        builder = ObservationBuilder(4)
        flat = builder.build(GameState.initial(RoundConfig(seed=42))).to_flat_array()

        assert isinstance(flat, np.ndarray)
        assert flat.ndim == 1
        assert flat.shape == (ENCODING_DIM * 2 + 4 * ENCODING_DIM + 4 * 3 + 1,)


class TestRewardCalculator:
    """RewardCalculator 测试"""

    def test_not_finished(self):
        from env.reward import RewardCalculator

        calc = RewardCalculator()
        state = GameState.initial(RoundConfig(seed=42))
        assert calc.compute(state, 0) == 0.0

    def test_finish_positions(self):
        from env.reward import RewardCalculator

        calc = RewardCalculator()
        state = finished_state()
        rewards = [calc.compute(state, i) for i in range(4)]
        assert rewards == pytest.approx([1.0, 1 / 3, -1 / 3, -1.0])

    def test_compute_all(self):
        from env.reward import RewardCalculator

        rewards = RewardCalculator().compute_all(finished_state())
        assert rewards[0] == 1.0
        assert rewards[3] == -1.0

    def test_two_players(self):
        from env.reward import RewardCalculator

        hands = [Hand(str_to_cards("S3")), Hand(str_to_cards("H4 H5"))]
        state = GameState(hands)
        state.submit_play(0, str_to_cards("S3"))
        calc = RewardCalculator()
        assert calc.compute(state, 0) == 1.0
        assert calc.compute(state, 1) == -1.0

    def test_shaped_card_bonus(self):
        from env.reward import create_reward_calculator

        calc = create_reward_calculator("shaped", card_bonus=0.1)
        state = GameState.initial(RoundConfig(seed=42))
        single = next(c for c in state.legal_combinations(0) if len(c) == 1)
        state.submit_play(0, single)
        assert calc.compute(state, 0, prev_hand_size=13) == pytest.approx(0.1)

    def test_sparse_ignores_cards(self):
        from env.reward import create_reward_calculator

        calc = create_reward_calculator("sparse")
        state = GameState.initial(RoundConfig(seed=42))
        state.submit_play(0, state.legal_combinations(0)[0])
        assert calc.compute(state, 0, prev_hand_size=13) == 0.0


class TestClimbingEnv:
    """ClimbingEnv 测试"""

    def test_reset(self):
        from env import ClimbingEnv

        env = ClimbingEnv(seed=42)
        obs, info = env.reset(seed=42)

        assert set(obs) == set(env.observation_space.spaces)
        assert obs["hand"].shape == (ENCODING_DIM,)
        assert info["current_player"] == 0
        assert info["legal_action_mask"].shape == (env.action_space.n,)
        assert info["legal_action_mask"].sum() == len(info["legal_action_indices"])

    def test_agent_seat_waits_for_opponents(self):
        from env import ClimbingEnv

        env = ClimbingEnv(agent_seat=2, seed=1)
        _, info = env.reset(seed=1)
        assert info["current_player"] == 2
        assert env.state.step_count >= 2

    def test_step_before_reset(self):
        from env import ClimbingEnv

        env = ClimbingEnv()
        with pytest.raises(RuntimeError):
            env.step(0)

    def test_illegal_action(self):
        from env import ClimbingEnv

        env = ClimbingEnv(seed=42)
        _, info = env.reset(seed=42)
        size = env.state.hand_size(0)

        # 空场不能过牌
        obs, reward, terminated, truncated, info = env.step(0)
        assert reward == -1.0
        assert not terminated
        assert "error" in info
        assert env.state.hand_size(0) == size

    def test_invalid_index(self):
        from env import ClimbingEnv

        env = ClimbingEnv(seed=42)
        env.reset(seed=42)
        with pytest.raises(ValueError):
            env.step(env.action_space.n)

    def test_legal_step(self):
        from env import ClimbingEnv

        env = ClimbingEnv(seed=42)
        _, info = env.reset(seed=42)
        action = info["legal_action_indices"][0]
        size = env.state.hand_size(0)

        obs, reward, terminated, truncated, info = env.step(action)
        assert "error" not in info
        assert env.state.hand_size(0) < size

    def test_combination_action(self):
        from env import ClimbingEnv

        env = ClimbingEnv(seed=42)
        _, info = env.reset(seed=42)
        move = info["legal_actions"][0]
        assert isinstance(move, Combination)
        _, _, _, _, info = env.step(move)
        assert "error" not in info

    def test_full_episode(self):
        from env import ClimbingEnv

        env = ClimbingEnv(seed=7)
        obs, info = env.reset(seed=7)
        terminated = False
        steps = 0

        while not terminated and steps < 500:
            action = info["legal_action_indices"][0]
            obs, reward, terminated, truncated, info = env.step(action)
            assert "error" not in info
            steps += 1

        assert terminated
        assert "position" in info
        assert -1.0 <= reward <= 1.0

    def test_reset_seed_drives_opponents(self):
        """reset 的种子同时决定发牌与对手的随机选择"""
        from env import ClimbingEnv

        histories = []
        for ctor_seed in (1, 2):
            env = ClimbingEnv(seed=ctor_seed)
            _, info = env.reset(seed=9)
            terminated = False
            steps = 0
            while not terminated and steps < 500:
                _, _, terminated, _, info = env.step(info["legal_action_indices"][0])
                steps += 1
            assert terminated
            histories.append(list(env.state.play_history))
        assert histories[0] == histories[1]

    def test_sample_action_is_legal(self):
        from env import ClimbingEnv

        env = ClimbingEnv(seed=3)
        _, info = env.reset(seed=3)
        assert env.sample_action() in info["legal_action_indices"]

    def test_opponent_count(self):
        from env import ClimbingEnv
        from evaluation import CpuAgent

        with pytest.raises(ValueError):
            ClimbingEnv(opponents=[CpuAgent()])

    def test_random_opponents(self):
        from env import ClimbingEnv
        from evaluation import RandomAgent

        env = ClimbingEnv(
            config=RoundConfig(player_count=3),
            opponents=[RandomAgent(seed=1), RandomAgent(seed=2)],
        )
        obs, info = env.reset(seed=5)
        assert obs["position"].shape == (3,)

    def test_render(self):
        from env import ClimbingEnv

        env = ClimbingEnv(render_mode="ansi", seed=0)
        env.reset(seed=0)
        text = env.render()
        assert "P0" in text
        assert "Table" in text

    def test_make_env(self):
        from env import make_env, ClimbingEnv

        assert isinstance(make_env(reward_type="shaped"), ClimbingEnv)
