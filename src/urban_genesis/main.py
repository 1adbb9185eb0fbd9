"""Main entry point for headless city generation."""

import argparse
import logging

from .config import Config, SubdivisionMode, WorldConfig
from .simulation import World


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="urban-genesis", description="Generate a procedural city.")
    parser.add_argument("--seed", type=int, default=None, help="random seed (default: random)")
    parser.add_argument("--width", type=int, default=None, help="world width")
    parser.add_argument("--height", type=int, default=None, help="world height")
    parser.add_argument("--hubs", type=int, default=None, help="number of urban hubs")
    parser.add_argument("--waves", type=int, default=None, help="number of agent waves")
    parser.add_argument(
        "--subdivision",
        choices=[m.value for m in SubdivisionMode],
        default=None,
        help="block subdivision mode",
    )
    parser.add_argument("--trips", type=int, default=None, help="traffic trips to sample")
    parser.add_argument("-v", "--verbose", action="store_true", help="log progress")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Config:
    """Default configuration with command-line overrides applied."""
    config = Config.default()
    config.world = WorldConfig(
        width=args.width if args.width is not None else config.world.width,
        height=args.height if args.height is not None else config.world.height,
        seed=args.seed,
    )
    if args.hubs is not None:
        config.growth.hub_count = args.hubs
    if args.waves is not None:
        config.growth.ant_waves = args.waves
    if args.subdivision is not None:
        config.structure.subdivision_mode = SubdivisionMode(args.subdivision)
    if args.trips is not None:
        config.traffic.max_trips = args.trips
    return config


def main(argv: list[str] | None = None) -> None:
    """Generate a city and print a summary."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = build_config(args)
    world = World(config)

    print("Generating city...")
    print(f"  Seed: {world.seed}")
    print(f"  World size: {config.world.width}x{config.world.height}")
    print(f"  Hubs requested: {config.growth.hub_count}")
    print(f"  Waves: {config.growth.ant_waves}")
    print()

    state = world.generate()
    stats = world.stats

    print("Done.")
    print(f"  Rivers: {stats.rivers}, water bodies: {len(state.geography.water_bodies)}")
    print(f"  Hubs: {stats.hubs}, exits: {stats.exits}")
    print(f"  Roads: {stats.road_segments} segments, {stats.road_length:.0f} units")
    print(f"  Bridges: {stats.bridges}")
    print(f"  Blocks: {stats.shapes} ({len(state.processed_shapes)} subdivided)")
    print(f"  Arterials: {stats.arterials}")
    print(f"  Notable shapes: {len(state.geography.notable_shapes)}")
    print(f"  Traffic trips: {stats.trips} over {len(state.usage)} road segments")
    print(f"  Agent ticks: {stats.tick}")


if __name__ == "__main__":
    main()
