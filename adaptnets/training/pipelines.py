"""Pipeline assembly: configuration -> network -> adaptive training -> artifacts."""

from __future__ import annotations

import json
import logging
import time
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Sequence

from .. import data
from ..core.errors import ConfigurationError
from ..core.network import Network
from ..core.types import Hyperparameters, TrainingSet, TrainResult
from ..reporting.artifacts import CheckpointWriter, load_checkpoint, save_checkpoint, write_manifest
from ..reporting.metrics import CsvSink, JsonlSink, MetricsCapture
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .trainer import AdaptiveTrainer

logger = logging.getLogger(__name__)

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor": {
        "model": {
            "topology": [2, 5, 1],
            "activation": "logistic",
            "random_range": [-1.5, 1.5],
        },
        "data": {"name": "truth_table", "options": {"function": "xor"}},
        "train": {
            "learning_rate": 1.0,
            "rate_modifier": 2.0,
            "rate_floor": 1e-6,
            "rate_ceiling": 50.0,
            "error_threshold": 0.01,
            "max_iterations": 100000,
            "seed": 0,
            "progress_period": 1000,
            "save_period": 0,
            "run_dir": "runs/xor",
            "enable_plots": False,
        },
    },
    "and": {
        "model": {
            "topology": [2, 4, 1],
            "activation": "logistic",
            "random_range": [-1.5, 1.5],
        },
        "data": {"name": "truth_table", "options": {"function": "and"}},
        "train": {
            "learning_rate": 1.0,
            "rate_modifier": 2.0,
            "rate_floor": 1e-6,
            "rate_ceiling": 50.0,
            "error_threshold": 0.01,
            "max_iterations": 100000,
            "seed": 0,
            "progress_period": 1000,
            "run_dir": "runs/and",
        },
    },
    "or": {
        "model": {
            "topology": [2, 4, 1],
            "activation": "logistic",
            "random_range": [-1.5, 1.5],
        },
        "data": {"name": "truth_table", "options": {"function": "or"}},
        "train": {
            "learning_rate": 1.0,
            "rate_modifier": 2.0,
            "rate_floor": 1e-6,
            "rate_ceiling": 50.0,
            "error_threshold": 0.01,
            "max_iterations": 100000,
            "seed": 0,
            "progress_period": 1000,
            "run_dir": "runs/or",
        },
    },
    "sum-linear": {
        "model": {
            "topology": [2, 1],
            "activation": "linear",
            "random_range": [-1.0, 1.0],
            "weights": {"entries": [[0, 0, 0, 1.0], [0, 1, 0, 1.0]]},
        },
        "data": {
            "name": "cases",
            "options": {
                "cases": [
                    [[0.3, 0.4], [0.7]],
                    [[0.1, 0.2], [0.3]],
                    [[1.0, -1.0], [0.0]],
                ]
            },
        },
        "train": {
            "learning_rate": 0.1,
            "rate_modifier": 1.0,
            "rate_floor": 1e-6,
            "error_threshold": 1e-6,
            "max_iterations": 100,
            "seed": 0,
            "progress_period": 10,
            "run_dir": "runs/sum-linear",
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None
_REQUIRED_SECTIONS = {"model", "data", "train"}


@dataclass(frozen=True)
class RunResult:
    """Paths and outcome of :func:`run_pipeline`."""

    result: TrainResult
    network: Network
    run_dir: str
    metrics_path: str
    manifest_path: str
    summary_path: str
    weights_path: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "reason": self.result.reason.value,
            "iterations": self.result.iterations,
            "learning_rate": self.result.learning_rate,
            "max_error": self.result.max_error,
            "reverts": self.result.reverts,
            "metrics": self.metrics_path,
            "manifest": self.manifest_path,
            "summary": self.summary_path,
            "weights": self.weights_path,
        }


# ----------------------------------------------------------------------
# Presets and config files


def load_config(path: str | Path) -> Mapping[str, object]:
    """Read a JSON or YAML config file into a mapping."""

    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in {".yaml", ".yml", ".json"}:
        raise ValueError(f"Unsupported config file type: {path.suffix}")
    text = path.read_text()
    if suffix in {".yaml", ".yml"}:
        import yaml

        loaded = yaml.safe_load(text) or {}
    else:
        loaded = json.loads(text or "{}")

    if not isinstance(loaded, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return loaded


def merge(base: dict, override: Mapping[str, object]) -> dict:
    """Recursively merge ``override`` into ``base``."""

    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            base[key] = merge(dict(base[key]), value)
        else:
            base[key] = deepcopy(value)
    return base


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                loaded = load_config(file)
                missing = _REQUIRED_SECTIONS - set(loaded)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                found[file.stem] = json.loads(json.dumps(loaded))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Dict[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return dict(file_overrides[name])
    try:
        return deepcopy(dict(_PRESETS[name]))
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


# ----------------------------------------------------------------------
# Builders


def build_hyperparameters(train_cfg: Mapping[str, object], model_cfg: Mapping[str, object]) -> Hyperparameters:
    ceiling = train_cfg.get("rate_ceiling")
    low, high = model_cfg.get("random_range", (-1.0, 1.0))  # type: ignore[misc]
    return Hyperparameters(
        learning_rate=float(train_cfg.get("learning_rate", 1.0)),
        rate_modifier=float(train_cfg.get("rate_modifier", 2.0)),
        rate_floor=float(train_cfg.get("rate_floor", 1e-6)),
        rate_ceiling=float(ceiling) if ceiling is not None else None,
        error_threshold=float(train_cfg.get("error_threshold", 0.01)),
        max_iterations=int(train_cfg.get("max_iterations", 100_000)),
        random_range=(float(low), float(high)),
    )


def _weight_spec(weights_cfg: Mapping[str, object] | None):
    if not weights_cfg:
        return None
    if "entries" in weights_cfg:
        entries = {}
        for entry in weights_cfg["entries"]:  # type: ignore[union-attr]
            if len(entry) != 4:
                raise ConfigurationError(f"Weight entry must be [n, j, i, value], got {entry!r}")
            n, j, i, value = entry
            entries[(int(n), int(j), int(i))] = float(value)
        return entries
    if "dense" in weights_cfg:
        return weights_cfg["dense"]
    if "checkpoint" in weights_cfg:
        state = load_checkpoint(str(weights_cfg["checkpoint"]))
        return [state[f"W{idx}"] for idx in range(len(state))]
    raise ConfigurationError(
        "model.weights must contain one of 'entries', 'dense' or 'checkpoint'"
    )


def build_network(model_cfg: Mapping[str, object], seed: int | None = None) -> Network:
    topology = model_cfg.get("topology")
    if topology is None:
        raise ConfigurationError("model.topology is required")
    return Network(
        topology=list(topology),  # type: ignore[arg-type]
        activation=str(model_cfg.get("activation", "logistic")),
        weights=_weight_spec(model_cfg.get("weights")),  # type: ignore[arg-type]
        random_range=model_cfg.get("random_range", (-1.0, 1.0)),  # type: ignore[arg-type]
        seed=seed,
    )


def build_training_set(data_cfg: Mapping[str, object], topology: Sequence[int]) -> TrainingSet:
    name = data_cfg.get("name")
    if name is None:
        raise ConfigurationError("data.name is required")
    options = dict(data_cfg.get("options", {}))  # type: ignore[arg-type]
    return data.get(str(name), topology, **options)


# ----------------------------------------------------------------------
# Running


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Build and train the network described by ``config``, writing artifacts."""

    missing = _REQUIRED_SECTIONS - set(config)
    if missing:
        raise KeyError(f"Config is missing required sections: {', '.join(sorted(missing))}")
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    seed = train_cfg.get("seed")
    seed = int(seed) if seed is not None else None
    hyperparameters = build_hyperparameters(train_cfg, model_cfg)
    network = build_network(model_cfg, seed=seed)
    training_set = build_training_set(data_cfg, network.topology)
    if bool(train_cfg.get("randomize", False)):
        network.randomize(hyperparameters.random_range)

    run_dir = _resolve_run_dir(train_cfg, str(data_cfg["name"]))
    run_dir.mkdir(parents=True, exist_ok=True)
    progress_period = int(train_cfg.get("progress_period", 0))
    save_period = int(train_cfg.get("save_period", 0))

    _print_startup_summary(
        source=str(data_cfg["name"]),
        network=network,
        examples=len(training_set),
        hyperparameters=hyperparameters,
    )

    weights_path = run_dir / "weights.npz"
    jsonl = JsonlSink(run_dir / "metrics.jsonl", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv")
    capture = MetricsCapture()
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    callbacks: list[object] = [jsonl, csv_sink, capture, plots]
    if save_period > 0:
        callbacks.append(CheckpointWriter(weights_path))

    trainer = AdaptiveTrainer(
        network,
        hyperparameters,
        callbacks=callbacks,
        progress_period=progress_period,
        snapshot_period=save_period,
    )
    result = trainer.run(training_set)

    save_checkpoint(weights_path, network.export_weights())
    safe_config = json.loads(json.dumps(config))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        training_set=training_set.provenance,
        result=result,
    )
    summary_path = write_summary(jsonl.path, run_dir / "summary.json", result=result)
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    _print_results(training_set, network, result)
    return RunResult(
        result=result,
        network=network,
        run_dir=str(run_dir),
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
        weights_path=str(weights_path),
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], source: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / source


def _print_startup_summary(
    *,
    source: str,
    network: Network,
    examples: int,
    hyperparameters: Hyperparameters,
) -> None:
    hp = hyperparameters
    print("=== AdaptNets run ===")
    print(f"Training set  : {source} ({examples} examples)")
    print(f"Topology      : {list(network.topology)}")
    print(f"Activation    : {network.activation.name}")
    print(f"Parameters    : {network.parameter_count()}")
    print(f"Learning rate : {hp.learning_rate} (x{hp.rate_modifier}, floor {hp.rate_floor})")
    print(f"Threshold     : {hp.error_threshold}")
    print(f"Max iterations: {hp.max_iterations}")
    print("=====================")


def _print_results(training_set: TrainingSet, network: Network, result: TrainResult) -> None:
    print(f"Training ended: {result.reason.value}")
    print(f"Iterations    : {result.iterations}")
    print(f"Learning rate : {result.learning_rate}")
    logger.debug("Per-example results follow")
    for example, error in zip(training_set, result.errors):
        outputs = network.infer(example.inputs)
        logger.debug(
            "inputs=%s outputs=%s error=%g", example.inputs.tolist(), outputs.tolist(), error
        )


__all__ = [
    "RunResult",
    "build_hyperparameters",
    "build_network",
    "build_training_set",
    "load_config",
    "load_preset",
    "merge",
    "presets",
    "run_pipeline",
]
