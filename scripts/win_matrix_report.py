"""
Compute the pairwise win-probability matrix for a set of dice and save it as CSV plus a heatmap chart.
Usage: python scripts/win_matrix_report.py 2,2,4,4,9,9 1,1,6,6,8,8 3,3,5,5,7,7 --estimator exact --data-dir data
"""
import os
import math
import argparse
from typing import Dict, List, Optional, Tuple

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from fair_dice.core.config import GameConfig
from fair_dice.core.die import DiceSet, parse_dice
from fair_dice.core.errors import ConfigurationError
from fair_dice.estimators import ESTIMATOR_MAP, choose_estimator
from fair_dice.persistence import csv_io


def matrix_grid(matrix: Dict[Tuple[str, str], Optional[float]], names: List[str]) -> List[List[float]]:
    """Rows/columns in display order; diagonal cells become NaN so they render blank."""
    return [[float('nan') if matrix[(a, b)] is None else matrix[(a, b)] for b in names] for a in names]


def plot_matrix(matrix, dice_set: DiceSet, out_path: str, title: str):
    names = dice_set.names()
    grid = matrix_grid(matrix, names)
    size = max(4, int(len(names) * 1.4))
    fig, ax = plt.subplots(figsize=(size + 1, size))
    im = ax.imshow(grid, cmap='RdYlGn', vmin=0.0, vmax=1.0)
    ax.set_xticks(range(len(names)))
    ax.set_yticks(range(len(names)))
    ax.set_xticklabels(names, rotation=45, ha='right', fontsize=8)
    ax.set_yticklabels(names, fontsize=8)
    ax.set_xlabel('Opponent die')
    ax.set_ylabel('Die')
    for i, row in enumerate(grid):
        for j, val in enumerate(row):
            if not math.isnan(val):
                ax.text(j, i, f"{val * 100:.1f}%", ha='center', va='center', fontsize=8)
    fig.colorbar(im, ax=ax, label='P(row beats column)')
    ax.set_title(title)
    fig.tight_layout()
    fig.savefig(out_path)
    plt.close(fig)


def non_transitive_cycles(matrix, names: List[str]) -> List[Tuple[str, str, str]]:
    """Triples (a, b, c) with a beating b, b beating c and c beating a, each listed once."""
    def beats(x, y):
        return (matrix[(x, y)] or 0.0) > 0.5

    cycles = []
    for i, a in enumerate(names):
        for b in names[i + 1:]:
            for c in names[i + 1:]:
                if len({a, b, c}) == 3 and beats(a, b) and beats(b, c) and beats(c, a):
                    cycles.append((a, b, c))
    return cycles


def run_report(tokens: List[str], estimator_name: str, trials: int, seed: Optional[int], data_dir: str):
    cfg = GameConfig(estimator=estimator_name, trials_per_pair=trials, rng_seed=seed)
    dice_set = parse_dice(tokens, cfg)
    estimator = choose_estimator(estimator_name, config=cfg)
    matrix = estimator.compute_matrix(dice_set)

    os.makedirs(data_dir, exist_ok=True)
    matrix_csv = os.path.join(data_dir, 'win_matrix.csv')
    chart_png = os.path.join(data_dir, 'win_matrix.png')
    csv_io.write_matrix(matrix, matrix_csv)
    plot_matrix(matrix, dice_set, chart_png, f'Win probability ({estimator_name})')

    for a, b, c in non_transitive_cycles(matrix, dice_set.names()):
        print(f"Non-transitive cycle: {a} > {b} > {c} > {a}")
    print(f"Win matrix: {matrix_csv}")
    print(f"Win matrix chart: {chart_png}")
    return matrix


def main():
    parser = argparse.ArgumentParser(description='Compute and plot the pairwise win-probability matrix')
    parser.add_argument('dice', nargs='+', help='Dice as 6 comma-separated integers each')
    parser.add_argument('--estimator', type=str, default='exact', choices=sorted(ESTIMATOR_MAP))
    parser.add_argument('--trials', type=int, default=5000, help='Samples per pair for monte_carlo')
    parser.add_argument('--seed', type=int, default=None)
    parser.add_argument('--data-dir', type=str, default='data', help='Directory to save csv and charts')
    args = parser.parse_args()

    try:
        run_report(args.dice, args.estimator, args.trials, args.seed, args.data_dir)
    except ConfigurationError as e:
        raise SystemExit(f"Error: {e}")


if __name__ == '__main__':
    main()
