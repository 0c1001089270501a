#!/usr/bin/env python3
"""
Run the weather field for a while and report what happened.
Optionally drives it over Perlin terrain (needs the 'terrain' extra),
records the run and renders a snapshot.
"""

import sys
import os
import logging
from pathlib import Path

# Add src to path
sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from planet_weather.simulation import WeatherRunner, WeatherVisualizer


def print_strike(event):
    print(f"  LIGHTNING: cell {event.cell_index} at T={event.time:.1f}s "
          f"({event.bolt.segment_count} segments, {len(event.bolt.branches)} branches)")


def main():
    """Main entry point for the weather demo."""

    import argparse

    parser = argparse.ArgumentParser(
        description='Run the planetary weather simulation'
    )
    parser.add_argument('--config', default='configs/weather/default_weather.yaml',
                        help='Weather YAML file')
    parser.add_argument('--duration', type=float, default=120.0,
                        help='Simulated seconds')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed')
    parser.add_argument('--terrain', action='store_true',
                        help='Use Perlin terrain (water below water_level)')
    parser.add_argument('--record', default=None,
                        help='Save recording to this JSON file')
    parser.add_argument('--plot', default=None,
                        help='Save a snapshot figure to this image file')
    parser.add_argument('--debug', action='store_true',
                        help='Log cell transitions')

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING,
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    print("\n" + "="*70)
    print("PLANETARY WEATHER SIMULATION")
    print("="*70)
    print(f"Duration: {args.duration:.0f}s")
    print(f"Seed: {args.seed}")
    print(f"Terrain: {'perlin' if args.terrain else 'flat'}")

    terrain = None
    if args.terrain:
        from planet_weather.simulation.terrain_sampler import PerlinTerrainSampler
        terrain = PerlinTerrainSampler({'seed': args.seed or 42})
        print(f"Water fraction: {terrain.water_fraction(0.5):.1%}")

    config = args.config if Path(args.config).exists() else None
    if config is None:
        print(f"Config not found ({args.config}), using defaults")

    runner = WeatherRunner(
        config=config,
        terrain_sampler=terrain,
        seed=args.seed,
        verbose=True,
        record=args.record is not None or args.plot is not None,
        record_interval=10
    )
    runner.add_listener(on_lightning_strike=print_strike)
    runner.setup()

    print("\nStarting weather run...")
    print("-"*70)
    results = runner.run(args.duration)

    print("\n" + "="*70)
    print("WEATHER RESULTS")
    print("="*70)

    metrics = results['metrics']
    print(f"\nFinal Status: {results['state']}")
    print(f"Final Summary: {results['final_summary']}")
    print(f"Total Steps: {metrics['total_steps']}")

    print("\nEvents:")
    print(f"  Summary changes: {metrics['summary_changes']}")
    print(f"  Lightning strikes: {metrics['lightning_strikes']}")

    print("\nTime under each summary:")
    for summary, seconds in metrics['summary_durations'].items():
        print(f"  {summary:6s}: {seconds:6.1f}s")

    print("\nPerformance:")
    print(f"  Mean Step Time: {metrics['mean_step_time_ms']:.2f}ms")
    print(f"  Max Step Time: {metrics['max_step_time_ms']:.2f}ms")

    if args.record:
        runner.save_recording(args.record)

    if args.plot:
        visualizer = WeatherVisualizer(
            weather_field=runner.field,
            recording={'frames': runner.recording_data, 'events': list(runner.events)}
        )
        visualizer.save(args.plot)
        visualizer.close()
        print(f"Snapshot saved to {args.plot}")


if __name__ == "__main__":
    main()
