"""对局配置测试"""
import pytest

from core.config import RoundConfig


class TestRoundConfig:
    """RoundConfig 测试"""

    def test_defaults(self):
        config = RoundConfig()
        assert config.player_count == 4
        assert config.starting_player == 0
        assert not config.include_joker
        assert config.seed is None
        assert config.disabled_rules == ()

    @pytest.mark.parametrize("count", [1, 5])
    def test_invalid_player_count(self, count):
        with pytest.raises(ValueError):
            RoundConfig(player_count=count)

    def test_invalid_starting_player(self):
        with pytest.raises(ValueError):
            RoundConfig(player_count=3, starting_player=3)

    def test_disabled_rules_tuple(self):
        config = RoundConfig(disabled_rules=["eight_cut"])
        assert config.disabled_rules == ("eight_cut",)

    def test_from_dict_ignores_unknown(self):
        config = RoundConfig.from_dict({"player_count": 3, "seed": 7, "unknown": 1})
        assert config.player_count == 3
        assert config.seed == 7
