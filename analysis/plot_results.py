"""
Analysis and visualization.
Plots the generated world for a seed, and the metrics files written by the
server and clients (tick times, relay rate, room events, outcomes).
"""

import json
import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Polygon, Rectangle

from common.config import GROUND_Y, CHUNK_SIZE, WORLD_SEED, CANVAS_HEIGHT
from common.world import WorldGenerator, is_jump_possible


def load_metrics(filepath: str) -> dict:
    """Load a metrics JSON file."""
    with open(filepath) as f:
        return json.load(f)


def jump_stats(world: WorldGenerator, num_chunks: int) -> dict:
    """Gap/height statistics between consecutive platforms."""
    platforms = world.platforms_in_range(0, (num_chunks - 1) * CHUNK_SIZE)
    gaps = []
    rises = []
    feasible = 0
    for prev, cur in zip(platforms, platforms[1:]):
        gap = cur.x - prev.right
        rise = abs(cur.y - prev.y)
        gaps.append(gap)
        rises.append(rise)
        if is_jump_possible(gap, rise):
            feasible += 1
    return {
        'platforms': len(platforms),
        'gaps': gaps,
        'rises': rises,
        'feasible_fraction': feasible / len(gaps) if gaps else 1.0,
    }


def plot_world_layout(seed: int = WORLD_SEED, num_chunks: int = 12,
                      output_dir: str = 'analysis'):
    """Draw platforms, spikes and valleys of the first ``num_chunks`` chunks."""
    os.makedirs(output_dir, exist_ok=True)
    world = WorldGenerator(seed)
    chunks = [world.chunk(i) for i in range(num_chunks)]
    width = num_chunks * CHUNK_SIZE

    fig, axes = plt.subplots(2, 1, figsize=(16, 8),
                             gridspec_kw={'height_ratios': [3, 1]})
    fig.suptitle(f'World Layout (seed {seed})', fontsize=14, fontweight='bold')

    # ── 1. Terrain ──
    ax = axes[0]
    ax.add_patch(Rectangle((0, GROUND_Y), width, CANVAS_HEIGHT - GROUND_Y,
                           color='#4E7849'))
    for chunk in chunks:
        ax.axvline(x=chunk.start_x, color='grey', linewidth=0.5, alpha=0.4)
        for valley in chunk.valleys:
            ax.add_patch(Rectangle((valley.x, GROUND_Y), valley.width,
                                   CANVAS_HEIGHT - GROUND_Y, color='white'))
        for spike in chunk.spikes:
            ax.add_patch(Polygon([(spike.x, spike.y),
                                  (spike.x + spike.width / 2, spike.y - spike.height),
                                  (spike.x + spike.width, spike.y)],
                                 color='#C83C3C'))
        for platform in chunk.platforms:
            ax.add_patch(Rectangle((platform.x, platform.y), platform.width,
                                   platform.height, color='#8B5E34'))
    ax.set_xlim(0, width)
    ax.set_ylim(CANVAS_HEIGHT, 0)
    ax.set_xlabel('World x')
    ax.set_ylabel('y (down)')

    # ── 2. Gaps between consecutive platforms ──
    ax = axes[1]
    stats = jump_stats(world, num_chunks)
    if stats['gaps']:
        ax.bar(range(len(stats['gaps'])), stats['gaps'], color='#2196F3',
               label='Horizontal gap')
        ax.plot(range(len(stats['rises'])), stats['rises'], color='red',
                marker='o', linewidth=1, label='Height change')
        ax.legend(fontsize=9)
    ax.set_title(f"Platform transitions ({stats['feasible_fraction'] * 100:.0f}% "
                 f"within raw jump envelope)")
    ax.set_xlabel('Transition')
    ax.set_ylabel('Units')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    path = os.path.join(output_dir, f'world_layout_{seed}.png')
    plt.savefig(path, dpi=150)
    print(f"[ANALYSIS] Saved: {path}")
    plt.close()
    return path


def plot_tick_times(data: dict, output_dir: str = 'analysis'):
    """Plot client tick processing times."""
    os.makedirs(output_dir, exist_ok=True)
    ticks = data.get('tick_times', [])
    if not ticks:
        return

    fig, ax = plt.subplots(figsize=(10, 4))
    tick_nums = [t['tick'] for t in ticks]
    durations = [t['duration_ms'] for t in ticks]
    ax.plot(tick_nums, durations, linewidth=0.5, color='#FF5722')
    mean_d = np.mean(durations)
    ax.axhline(y=mean_d, color='blue', linestyle='--',
               label=f'Mean: {mean_d:.3f} ms')
    ax.set_title('Simulation Tick Time')
    ax.set_xlabel('Tick')
    ax.set_ylabel('Duration (ms)')
    ax.legend()
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    path = os.path.join(output_dir, 'tick_time_analysis.png')
    plt.savefig(path, dpi=150)
    print(f"[ANALYSIS] Saved: {path}")
    plt.close()


def plot_session_activity(data: dict, output_dir: str = 'analysis'):
    """Plot relay rate and room lifecycle events over time."""
    os.makedirs(output_dir, exist_ok=True)
    relays = data.get('relayed_moves', [])
    events = data.get('room_events', [])
    if not relays and not events:
        return

    fig, axes = plt.subplots(2, 1, figsize=(10, 7), sharex=True)
    fig.suptitle('Relay Server Activity', fontsize=13)

    ax = axes[0]
    if relays:
        ax.plot([r['t'] for r in relays], [r['per_second'] for r in relays],
                color='#4CAF50', linewidth=1.2)
    ax.set_title('Relayed player-move per second')
    ax.set_ylabel('Moves/s')
    ax.grid(True, alpha=0.3)

    ax = axes[1]
    kinds = sorted({e['event'] for e in events})
    for row, kind in enumerate(kinds):
        times = [e['t'] for e in events if e['event'] == kind]
        ax.scatter(times, [row] * len(times), s=18, label=kind)
    ax.set_yticks(range(len(kinds)))
    ax.set_yticklabels(kinds)
    ax.set_title('Room events')
    ax.set_xlabel('Time (s)')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    path = os.path.join(output_dir, 'session_activity.png')
    plt.savefig(path, dpi=150)
    print(f"[ANALYSIS] Saved: {path}")
    plt.close()


def analyze_all(filepath: str, output_dir: str = 'analysis'):
    """Run all analysis on a metrics file."""
    print(f"[ANALYSIS] Loading {filepath}...")
    data = load_metrics(filepath)

    plot_tick_times(data, output_dir)
    plot_session_activity(data, output_dir)

    # Print summary
    print("\n=== Metrics Summary ===")
    ticks = [t['duration_ms'] for t in data.get('tick_times', [])]
    if ticks:
        print(f"  Tick Time:  mean={np.mean(ticks):.3f} ms, "
              f"P95={np.percentile(ticks, 95):.3f} ms, "
              f"max={np.max(ticks):.3f} ms")

    rates = [r['per_second'] for r in data.get('relayed_moves', [])]
    if rates:
        print(f"  Relay:      mean={np.mean(rates):.1f} moves/s")

    outcomes = data.get('outcomes', [])
    if outcomes:
        scores = [o['score'] for o in outcomes]
        print(f"  Games:      {len(outcomes)}, best score {max(scores)}")
        for reason in sorted({o['reason'] for o in outcomes}):
            count = sum(1 for o in outcomes if o['reason'] == reason)
            print(f"    {reason}: {count}")


def main():
    import argparse
    parser = argparse.ArgumentParser(description='Plot world layouts and game metrics')
    parser.add_argument('file', nargs='?', help='Metrics JSON file to analyze')
    parser.add_argument('--seed', type=int, default=WORLD_SEED,
                        help='World seed to draw')
    parser.add_argument('--chunks', type=int, default=12,
                        help='Number of chunks to draw')
    parser.add_argument('--output', default='analysis', help='Output directory')
    args = parser.parse_args()

    plot_world_layout(args.seed, args.chunks, args.output)
    if args.file:
        analyze_all(args.file, args.output)


if __name__ == '__main__':
    main()
