import argparse
import datetime
import hashlib
import logging
import os
import sys
from typing import List, Optional

from tabulate import tabulate

from fair_dice.core.config import GameConfig
from fair_dice.core.die import DiceSet, parse_dice
from fair_dice.core.engine import GameEngine, COMPUTER, USER
from fair_dice.core.errors import ConfigurationError, VerificationError
from fair_dice.estimators import ESTIMATOR_MAP
from fair_dice.persistence import csv_io

EXAMPLE = "python UI/cli.py 2,2,4,4,9,9 1,1,6,6,8,8 3,3,5,5,7,7"


class ExitGame(Exception):
    """Raised when the player enters X at any prompt."""
    pass


def render_help_table(matrix, dice_set: DiceSet) -> str:
    """
    Render the win-probability matrix: rows are the user's die, columns the computer's die,
    each cell the probability that the row die beats the column die.
    """
    names = dice_set.names()
    rows = []
    for a in names:
        row = [a]
        for b in names:
            p = matrix[(a, b)]
            row.append("-" if p is None else f"{p * 100:.2f}%")
        rows.append(row)
    return tabulate(rows, headers=["User dice v"] + names, tablefmt="grid")


def show_help(engine: GameEngine):
    print("\nProbability of the win for the user:")
    print(render_help_table(engine.help_matrix(), engine.dice_set))


def prompt_choice(prompt: str, options: List[str], engine: GameEngine, input_fn=input) -> int:
    """
    Print a numbered menu and return the chosen option index.
    'X' raises ExitGame, '?' prints the help table; anything else invalid re-prompts.
    """
    while True:
        print(prompt)
        for i, option in enumerate(options):
            print(f"{i} - {option}")
        print("X - exit")
        print("? - help")
        answer = input_fn("Your selection: ").strip()
        if answer.upper() == "X":
            raise ExitGame()
        if answer == "?":
            show_help(engine)
            continue
        try:
            choice = int(answer)
        except ValueError:
            print("Invalid selection.")
            continue
        if 0 <= choice < len(options):
            return choice
        print("Invalid selection.")


def fair_draw(engine: GameEngine, commitment: str, max_value: int, prompt: str, input_fn=input) -> int:
    print(f"I selected a random value in the range 0..{max_value} (HMAC={commitment}).")
    return prompt_choice(prompt, [str(i) for i in range(max_value + 1)], engine, input_fn)


def play_round(engine: GameEngine, input_fn=input):
    """
    Play one round against the computer in the terminal.
    Raises:
        ExitGame: If the player exits.
        VerificationError: If any reveal fails verification.
    """
    print("Let's determine who makes the first move.")
    commitment = engine.start_first_move()
    guess = fair_draw(engine, commitment, 1, "Try to guess my selection.", input_fn)
    draw = engine.resolve_first_move(guess)
    print(f"My selection: {draw.index} (KEY={draw.key_hex}).")
    print(f"{'You' if engine.first_player == USER else 'I'} make the first move.")

    if engine.first_player == COMPUTER:
        print(f"I choose the {engine.computer_choose_first()} dice.")
        options = engine.available_dice()
        pick = prompt_choice("Choose your dice:", options, engine, input_fn)
        engine.choose_user_die(options[pick])
    else:
        options = engine.available_dice()
        pick = prompt_choice("Choose your dice:", options, engine, input_fn)
        _, computer_die = engine.choose_user_die(options[pick])
        print(f"I choose the {computer_die} dice.")
    print(f"You choose the {engine.user_die} dice.")

    for who in ("My", "Your"):
        print(f"It's time for {who.lower()} roll.")
        commitment = engine.start_roll()
        number = fair_draw(engine, commitment, 5, "Add your number modulo 6.", input_fn)
        draw, value = engine.resolve_roll(number)
        print(f"My number is {draw.index} (KEY={draw.key_hex}).")
        print(f"The fair number generation result is {draw.announcement()}.")
        print(f"{who} roll result is {value}.")

    c, u = engine.rolls[COMPUTER], engine.rolls[USER]
    winner = engine.winner()
    if winner == COMPUTER:
        print(f"I win ({c} > {u}).")
    elif winner == USER:
        print(f"You win ({u} > {c}).")
    else:
        print(f"Tie ({u} = {c}).")


def save_transcript(engine: GameEngine, path: str):
    timestamp = datetime.datetime.now(datetime.timezone.utc).isoformat()
    raw_id = f"cli_{timestamp}_{os.getpid()}"
    game_id = hashlib.sha256(raw_id.encode()).hexdigest()[:16]
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    n = csv_io.append_transcript(engine.recorder.events(), path, game_id, timestamp)
    print(f"[{n} protocol events saved to {path} as game {game_id}]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Provably fair non-transitive dice game",
                                     epilog=f"Example: {EXAMPLE}")
    parser.add_argument("dice", nargs="*", help="Dice as 6 comma-separated integers each (at least 3)")
    parser.add_argument("--estimator", type=str, default="exact", choices=sorted(ESTIMATOR_MAP),
                        help="How the help table probabilities are computed")
    parser.add_argument("--trials", type=int, default=5000, help="Samples per pair for monte_carlo")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the help table sampler and the computer's die pick")
    parser.add_argument("--transcript", type=str, default=None, help="Append the protocol events to this CSV file")
    parser.add_argument("--verbose", action="store_true", help="Log protocol steps")
    return parser


def main(argv: Optional[List[str]] = None, input_fn=input) -> int:
    """
    Run the game. Returns the process exit code:
    0 on a finished game or an exit, 1 on a configuration or verification failure.
    """
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    cfg = GameConfig(estimator=args.estimator, trials_per_pair=args.trials, rng_seed=args.seed)
    try:
        dice_set = parse_dice(args.dice, cfg)
    except ConfigurationError as e:
        print(f"Error: {e}")
        print(f"Example: {EXAMPLE}")
        return 1

    engine = GameEngine(dice_set, cfg)
    try:
        engine.help_matrix()
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    code = 0
    try:
        play_round(engine, input_fn)
    except ExitGame:
        print("Exiting. Farewell, mortal.")
    except (KeyboardInterrupt, EOFError):
        print("\nExiting.")
    except VerificationError as e:
        print(f"Commitment verification failed: {e}")
        code = 1
    if args.transcript:
        save_transcript(engine, args.transcript)
    return code


if __name__ == "__main__":
    sys.exit(main())
