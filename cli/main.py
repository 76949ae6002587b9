"""Command line entry point for AdaptNets training runs."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable

from adaptnets.data import read_pels, write_pels
from adaptnets.training import pipelines


def _format_result(result: pipelines.RunResult) -> str:
    return json.dumps(result.to_dict(), sort_keys=True)


def _parse_vector(text: str) -> list[float]:
    try:
        return [float(part) for part in text.split(",") if part.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Expected comma separated numbers such as '0.2,-1.2', got {text!r}"
        ) from exc


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--seed", type=int, help="Seed used for weight randomization")
    parser.add_argument("--run-dir", help="Directory receiving metrics, weights and manifest")
    parser.add_argument("--max-iterations", type=int, help="Override the iteration cap")
    parser.add_argument("--error-threshold", type=float, help="Override the error threshold")
    parser.add_argument(
        "--progress-period",
        type=int,
        help="Iterations between progress records (zero disables them)",
    )
    parser.add_argument(
        "--save-period",
        type=int,
        help="Iterations between weight snapshots (zero saves only after training)",
    )
    parser.add_argument(
        "--randomize",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Randomize every weight before training, including configured ones",
    )
    parser.add_argument("--enable-plots", action="store_true", help="Write loss.png")
    parser.add_argument(
        "--infer",
        type=_parse_vector,
        action="append",
        help="Comma separated inputs to run through the trained network (repeatable)",
    )
    parser.add_argument("--infer-file", type=Path, help="Pel file with inputs to run after training")
    parser.add_argument("--output-file", type=Path, help="Write --infer-file outputs as a pel file")
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity for training progress",
    )
    return parser.parse_args(argv)


def _apply_overrides(config: dict, args: argparse.Namespace) -> dict:
    train_cfg = config.setdefault("train", {})
    overrides = {
        "seed": args.seed,
        "run_dir": args.run_dir,
        "max_iterations": args.max_iterations,
        "error_threshold": args.error_threshold,
        "progress_period": args.progress_period,
        "save_period": args.save_period,
        "randomize": args.randomize,
    }
    for key, value in overrides.items():
        if value is not None:
            train_cfg[key] = value
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    return config


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = pipelines.load_preset(args.preset)
    config = json.loads(json.dumps(config))

    if args.config:
        override = pipelines.load_config(args.config)
        if {"model", "data", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = pipelines.merge(config, override)

    config = _apply_overrides(config, args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    run = pipelines.run_pipeline(config)
    print(_format_result(run))

    network = run.network
    for inputs in args.infer or []:
        outputs = network.infer(inputs)
        print(json.dumps({"inputs": inputs, "outputs": outputs.tolist()}))

    if args.infer_file:
        outputs = network.infer(read_pels(args.infer_file, network.input_width))
        if args.output_file:
            write_pels(args.output_file, outputs)
            print(f"Outputs written to {args.output_file}")
        else:
            print(json.dumps({"inputs": str(args.infer_file), "outputs": outputs.tolist()}))


if __name__ == "__main__":
    main()
