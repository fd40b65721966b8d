"""Command-line entry points for inspecting replication animation data."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
from collections import Counter
from pathlib import Path
import sys

# Allow `python cli/main.py ...` execution from IDEs by adding repo root to sys.path.
if __package__ in {None, ""}:
    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

from animation.animation_data import AnimationData
from configs.loader import ConfigLoader, ConfigValidationError, StudyConfig
from readers.filesystem import FileSystemContentAccessor, StudyRootNotFoundError
from visualization.plotting import plot_statistic

DEFAULT_CONFIG = "configs/example_study.yaml"


def build_animation_data(config: StudyConfig) -> AnimationData:
    """Build an ``AnimationData`` reading from the configured study root."""
    reader = FileSystemContentAccessor(config.study_root)
    return AnimationData(
        reader,
        replications_dir=config.replications_dir,
        concurrent_loads=config.concurrent_loads,
    )


def _load_config(args: argparse.Namespace) -> StudyConfig:
    if args.study:
        return StudyConfig.from_mapping({"study_root": args.study}, base_dir=Path.cwd())
    return ConfigLoader.load(args.config or DEFAULT_CONFIG)


async def _open_study(
    config: StudyConfig,
    replication: int | None,
    activate: bool,
) -> AnimationData | None:
    data = build_animation_data(config)
    await data.discover_replications()
    if not activate:
        return data

    if not data.available_replications:
        print("No replications found.", file=sys.stderr)
        return None

    target = replication
    if target is None:
        target = config.default_replication
    if target is None:
        target = min(data.available_replications)

    activation = data.set_active_replication(target)
    if config.activation_timeout is not None:
        activation = asyncio.wait_for(activation, timeout=config.activation_timeout)
    if not await activation:
        print(f"Unknown replication: {target}", file=sys.stderr)
        return None
    return data


def _print_replications(data: AnimationData) -> None:
    print(f"Replications ({len(data.available_replications)}):")
    for replication_id in sorted(data.available_replications):
        metadata = data.available_replications[replication_id].metadata
        name = metadata.name or "(unnamed)"
        print(f"- {replication_id}: {name} ({metadata.duration:g} {metadata.time_unit})")

    if data.model_layout is not None:
        print(f"Model layout: loaded (simulation {data.model_layout.simulation_id})")
    else:
        print("Model layout: not loaded")
    print(f"Shared visual config: {'loaded' if data.shared_visual_config is not None else 'not loaded'}")


def _print_inspection(data: AnimationData) -> None:
    manifest = data.get_active_manifest()
    if manifest is None:
        return

    print(f"Active replication: {data.get_active_replication_id()}")
    print(json.dumps(dataclasses.asdict(manifest.metadata), indent=2))

    print(f"Entity path files ({len(manifest.entity_path_files)}):")
    for index, ref in enumerate(manifest.entity_path_files, start=1):
        print(f"  {index}. {ref.file_path} [{ref.entry_time_start} - {ref.entry_time_end}]")

    counts = Counter(data.get_entity_path(entity_id).type for entity_id in data.get_loaded_entity_ids())
    print(f"Entities loaded: {sum(counts.values())}")
    for entity_type, count in sorted(counts.items()):
        print(f"  {entity_type}: {count}")

    keys = data.get_loaded_statistic_keys()
    print(f"Statistics loaded: {len(keys)}")
    for stat_type, component_id, metric_name in keys:
        print(f"  {stat_type} / {component_id or '-'} / {metric_name}")


def _run_stat(data: AnimationData, args: argparse.Namespace) -> int:
    stat_file = data.get_statistic(args.type, args.component, args.metric)
    if stat_file is None:
        print(
            f"No statistic for type={args.type} component={args.component} metric={args.metric}",
            file=sys.stderr,
        )
        return 1

    print(json.dumps(dataclasses.asdict(stat_file.summary), indent=2))

    if args.at is not None:
        value = data.get_statistic_value_at_time(args.type, args.component, args.metric, args.at)
        shown = "not available" if value is None else f"{value:g}"
        print(f"Value at t={args.at:g}: {shown}")

    if args.start is not None or args.end is not None:
        start = args.start if args.start is not None else float("-inf")
        end = args.end if args.end is not None else float("inf")
        points = data.get_statistic_time_series_for_range(args.type, args.component, args.metric, start, end)
        print(f"Time series points in range: {len(points)}")
        for point in points:
            print(f"  t={point.time:g}, value={point.value:g}")
    return 0


def _run_entity(data: AnimationData, entity_id: str) -> int:
    entity = data.get_entity_path(entity_id)
    if entity is None:
        print(f"No entity path for id {entity_id}", file=sys.stderr)
        return 1

    print(f"{entity_id} ({entity.type}), {len(entity.path)} point(s)")
    for point in entity.path:
        suffix = f" event={point.event}" if point.event else ""
        print(f"  clock={point.clock:g} x={point.x:g} y={point.y:g} state={point.state}{suffix}")
    return 0


def _add_study_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config")
    parser.add_argument("--study")
    parser.add_argument("--log-level", type=str.upper, choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])


def _add_statistic_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--replication", type=int)
    parser.add_argument("--type", required=True)
    parser.add_argument("--metric", required=True)
    parser.add_argument("--component")


def run_cli(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="animdata")
    sub = parser.add_subparsers(dest="command", required=True)

    replications_cmd = sub.add_parser("replications")
    _add_study_arguments(replications_cmd)

    inspect_cmd = sub.add_parser("inspect")
    _add_study_arguments(inspect_cmd)
    inspect_cmd.add_argument("--replication", type=int)

    stat_cmd = sub.add_parser("stat")
    _add_study_arguments(stat_cmd)
    _add_statistic_arguments(stat_cmd)
    stat_cmd.add_argument("--at", type=float)
    stat_cmd.add_argument("--start", type=float)
    stat_cmd.add_argument("--end", type=float)

    entity_cmd = sub.add_parser("entity")
    _add_study_arguments(entity_cmd)
    entity_cmd.add_argument("--replication", type=int)
    entity_cmd.add_argument("--id", required=True)

    plot_cmd = sub.add_parser("plot")
    _add_study_arguments(plot_cmd)
    _add_statistic_arguments(plot_cmd)
    plot_cmd.add_argument("--out", default="artifacts/statistic.png")

    args = parser.parse_args(argv)

    try:
        config = _load_config(args)
    except ConfigValidationError as exc:
        print(f"Invalid config: {exc}", file=sys.stderr)
        return 1

    logging.basicConfig(level=args.log_level or config.log_level)

    activate = args.command != "replications"
    try:
        data = asyncio.run(_open_study(config, getattr(args, "replication", None), activate))
    except StudyRootNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except asyncio.TimeoutError:
        print(f"Activation timed out after {config.activation_timeout:g}s", file=sys.stderr)
        return 1
    if data is None:
        return 1

    if args.command == "replications":
        _print_replications(data)
        return 0

    if args.command == "inspect":
        _print_inspection(data)
        return 0

    if args.command == "stat":
        return _run_stat(data, args)

    if args.command == "entity":
        return _run_entity(data, args.id)

    if args.command == "plot":
        stat_file = data.get_statistic(args.type, args.component, args.metric)
        if stat_file is None:
            print(f"No statistic for type={args.type} metric={args.metric}", file=sys.stderr)
            return 1
        print(plot_statistic(stat_file, args.out))
        return 0

    return 1


if __name__ == "__main__":
    raise SystemExit(run_cli())
