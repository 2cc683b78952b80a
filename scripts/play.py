#!/usr/bin/env python3
"""
对战脚本

Usage:
    python scripts/play.py --mode watch               # 观看 CPU 对战
    python scripts/play.py --mode play                # 与 CPU 对战
    python scripts/play.py --mode watch --opponent random --seed 7
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List
import time

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from core.cards import cards_to_str, str_to_cards
from core.config import RoundConfig
from core.hooks import EightCutRule
from core.state import GameState, PlayRejected
from evaluation import Agent, CpuAgent, HumanAgent, RandomAgent

logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
)
logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Climbing card game")

    parser.add_argument(
        "--mode",
        type=str,
        default="watch",
        choices=["watch", "play"],
        help="Mode: watch CPU players or play against them",
    )
    parser.add_argument(
        "--opponent",
        type=str,
        default="cpu",
        choices=["cpu", "random"],
        help="Opponent type",
    )
    parser.add_argument("--players", type=int, default=4, help="Number of players (2-4)")
    parser.add_argument("--joker", action="store_true", help="Add a joker to the deck")
    parser.add_argument("--no-eight-cut", action="store_true", help="Disable the eight-cut rule")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--delay", type=float, default=0.5, help="Delay between moves")
    parser.add_argument("--games", type=int, default=1, help="Number of games")
    parser.add_argument("--verbose", action="store_true", help="Show engine logs")

    return parser.parse_args()


def print_game_state(state: GameState, viewer: int = -1):
    """打印游戏状态 (只展示 viewer 的手牌)"""
    print("\n" + "=" * 60)
    print(f"当前玩家: P{state.current_player}")
    print("-" * 60)

    for i in range(state.player_count):
        if i == viewer:
            print(f"[P{i}] 手牌 ({state.hand_size(i)}): {cards_to_str(state.get_hand(i).cards)}")
        else:
            print(f" P{i}  手牌数: {state.hand_size(i)}")

    table = state.table
    if table.is_empty:
        print("\n场上: (空)")
    else:
        print(f"\n场上: {table.last_combination} (P{table.owner_index})")

    print("=" * 60)


def create_agents(args, count: int) -> List[Agent]:
    """创建智能体"""
    agents: List[Agent] = []
    for i in range(count):
        seed = None if args.seed is None else args.seed + i
        if args.opponent == "random":
            agents.append(RandomAgent(f"Random_{i}", seed=seed))
        else:
            agents.append(CpuAgent(f"CPU_{i}", seed=seed))
    return agents


def make_config(args, game_idx: int) -> RoundConfig:
    return RoundConfig(
        player_count=args.players,
        include_joker=args.joker,
        seed=None if args.seed is None else args.seed + game_idx,
        disabled_rules=(EightCutRule.name,) if args.no_eight_cut else (),
    )


def apply_move(state: GameState, agent: Agent) -> str:
    """
    让智能体行动一次

    Returns:
        动作描述
    """
    idx = state.current_player
    table = state.table
    hand = state.get_hand(idx)
    move = agent.act(hand, table)

    if move is None:
        if table.is_empty:
            move = hand.playable_combinations(table)[0]
        else:
            state.submit_pass(idx)
            return "Pass"

    result = state.submit_play(idx, move)
    if isinstance(result, PlayRejected):
        return f"非法出牌 ({result.reason.value})"

    text = str(result.combination)
    if EightCutRule.name in result.applied_rules:
        text += "  [八切!]"
    if result.player_finished:
        text += "  [出完]"
    return text


def print_result(state: GameState, names: List[str]):
    print("\n" + "=" * 60)
    print("游戏结束!")
    for pos, idx in enumerate(state.finish_order):
        print(f"  第 {pos + 1} 名: {names[idx]}")
    print(f"总步数: {state.step_count}  流局: {state.sweep_count}")
    print("=" * 60)


def watch_game(args):
    """观看 CPU 对战"""
    agents = create_agents(args, args.players)

    for game_idx in range(args.games):
        print(f"\n{'='*60}")
        print(f"Game {game_idx + 1}/{args.games}")
        print("=" * 60)

        config = make_config(args, game_idx)
        state = GameState.initial(config)
        for i, agent in enumerate(agents):
            agent.reset(None if config.seed is None else config.seed + i)

        while not state.is_finished:
            print_game_state(state)
            idx = state.current_player
            text = apply_move(state, agents[idx])
            print(f"\n{agents[idx].name} 出牌: {text}")
            time.sleep(args.delay)

        print_result(state, [a.name for a in agents])


def read_human_move(state: GameState, human: HumanAgent) -> bool:
    """
    读取玩家输入并写入 human.selection

    Returns:
        False 表示退出
    """
    player = state.current_player
    table = state.table

    while True:
        choice = input("\n输入要出的牌 (如 'S3 H3')，'p' 过牌，'h' 提示，'q' 退出: ").strip()
        if choice.lower() == 'q':
            return False
        if choice.lower() == 'h':
            combos = state.get_hand(player).playable_combinations(table)
            if not combos:
                print("没有能出的牌，只能过牌")
            for combo in combos[:20]:
                print(f"  {combo} ({combo.kind.name})")
            continue
        if choice.lower() == 'p':
            if table.is_empty:
                print("空场不能过牌")
                continue
            human.clear_selection()
            return True
        try:
            human.select(str_to_cards(choice))
        except ValueError as e:
            print(e)
            continue
        return True


def play_game(args):
    """与 CPU 对战 (玩家固定为 P0)"""
    human = HumanAgent("你")
    player_idx = 0

    for game_idx in range(args.games):
        agents: List[Agent] = [human] + create_agents(args, args.players - 1)
        config = make_config(args, game_idx)
        for i, agent in enumerate(agents):
            agent.reset(None if config.seed is None else config.seed + i)

        print(f"\n{'='*60}")
        print(f"Game {game_idx + 1}/{args.games}")
        print("=" * 60)

        state = GameState.initial(config)

        while not state.is_finished:
            idx = state.current_player
            if idx == player_idx:
                print_game_state(state, viewer=player_idx)
                if not read_human_move(state, human):
                    print("退出游戏")
                    return
                text = apply_move(state, human)
                print(f"\n你出牌: {text}")
            else:
                text = apply_move(state, agents[idx])
                print(f"\n{agents[idx].name} 出牌: {text}")
                time.sleep(args.delay)

        print_result(state, [a.name for a in agents])
        if state.finish_order[0] == player_idx:
            print("恭喜你赢了!")


def main():
    args = parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    print("=" * 60)
    print("爬梯出牌游戏")
    print("=" * 60)

    if args.mode == "watch":
        watch_game(args)
    elif args.mode == "play":
        play_game(args)


if __name__ == "__main__":
    main()
