"""Config-driven training runs for layernet."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from dataclasses import replace
from pathlib import Path
from typing import Dict, Mapping, Sequence, Tuple

from ..core.network import LayeredNetwork
from ..core.types import RunResult
from ..data.examples import TrainingSet
from ..data.persistence import load_examples
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .trainer import Trainer

_XOR = [
    {"Input": [0.0, 0.0], "Target": [0.0]},
    {"Input": [0.0, 1.0], "Target": [1.0]},
    {"Input": [1.0, 0.0], "Target": [1.0]},
    {"Input": [1.0, 1.0], "Target": [0.0]},
]

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-sigmoid": {
        "model": {"layers": [2, 4, 1], "randomize": True},
        "data": {"examples": _XOR},
        "train": {
            "epochs": 1000,
            "lr": 0.5,
            "seed": 7,
            "shuffle": True,
            "run_dir": "runs/xor-sigmoid",
            "enable_plots": False,
        },
    },
    "identity-linear": {
        "model": {
            "layers": [2, 2],
            "activations": ["linear", "linear"],
            "randomize": True,
        },
        "data": {
            "examples": [
                {"Input": [1.0, 0.0], "Target": [1.0, 0.0]},
                {"Input": [0.0, 1.0], "Target": [0.0, 1.0]},
                {"Input": [1.0, 2.0], "Target": [1.0, 2.0]},
                {"Input": [-0.5, 0.5], "Target": [-0.5, 0.5]},
            ]
        },
        "train": {
            "epochs": 200,
            "lr": 0.05,
            "seed": 0,
            "run_dir": "runs/identity-linear",
            "enable_plots": False,
        },
    },
    "softmax-onehot": {
        "model": {
            "layers": [2, 4, 2],
            "activations": {"1": "tanh", "2": "softmax"},
            "randomize": True,
            "softmax_derivative": "diagonal",
        },
        "data": {
            "examples": [
                {"Input": [0.9, 0.1], "Target": [1.0, 0.0]},
                {"Input": [0.8, 0.3], "Target": [1.0, 0.0]},
                {"Input": [0.1, 0.9], "Target": [0.0, 1.0]},
                {"Input": [0.2, 0.7], "Target": [0.0, 1.0]},
            ]
        },
        "train": {
            "epochs": 300,
            "lr": 0.2,
            "seed": 3,
            "shuffle": True,
            "run_dir": "runs/softmax-onehot",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def read_config_file(path: Path) -> Mapping[str, object]:
    """Decode a JSON or YAML config file into a mapping."""

    suffix = path.suffix.lower()
    if suffix not in {".yaml", ".yml", ".json"}:
        raise ValueError(f"Unsupported config file type: {path.suffix}")
    text = path.read_text()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text or "{}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = read_config_file(file)
                missing = {"model", "data", "train"} - set(data)
                if missing:
                    raise KeyError(
                        f"Preset {file.name} is missing required sections: "
                        f"{', '.join(sorted(missing))}"
                    )
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    available = presets()
    if name not in available:
        raise KeyError(f"Unknown preset: {name}")
    return available[name]


def merge_config(base: dict, override: Mapping[str, object]) -> dict:
    """Recursively merge ``override`` into ``base`` and return ``base``."""

    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            base[key] = merge_config(dict(base[key]), value)
        else:
            base[key] = value
    return base


def build_network(model_cfg: Mapping[str, object], seed: int | None = None) -> LayeredNetwork:
    """Construct a network from the ``model`` section of a config."""

    if "layers" not in model_cfg:
        raise KeyError("Model config requires `layers`")
    network = LayeredNetwork(
        list(model_cfg["layers"]),  # type: ignore[arg-type]
        randomize=bool(model_cfg.get("randomize", True)),
        seed=model_cfg.get("seed", seed),  # type: ignore[arg-type]
        randomize_output_bias=bool(model_cfg.get("randomize_output_bias", False)),
        softmax_derivative=str(model_cfg.get("softmax_derivative", "diagonal")),  # type: ignore[arg-type]
    )
    activations = model_cfg.get("activations") or {}
    if isinstance(activations, Mapping):
        pairs = [(int(idx), kind) for idx, kind in activations.items()]
    else:
        pairs = list(enumerate(activations))  # type: ignore[arg-type]
    for idx, kind in pairs:
        network.set_activation(idx, str(kind))
    return network


def load_data(data_cfg: Mapping[str, object]) -> Tuple[TrainingSet, Mapping[str, object]]:
    """Return the training set described by the ``data`` section and its provenance."""

    if "path" in data_cfg:
        path = Path(str(data_cfg["path"]))
        examples = load_examples(path)
        return examples, {"source": "file", "path": str(path), "examples": len(examples)}
    if "examples" in data_cfg:
        examples = TrainingSet.from_records(data_cfg["examples"])  # type: ignore[arg-type]
        return examples, {"source": "inline", "examples": len(examples)}
    raise KeyError("Data config requires either `path` or `examples`")


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    seed = int(train_cfg.get("seed", 0))
    epochs = int(train_cfg.get("epochs", 1))
    lr = float(train_cfg.get("lr", 0.01))
    early_stopping = train_cfg.get("early_stopping_patience")
    early_stopping = int(early_stopping) if early_stopping is not None else None

    network = build_network(model_cfg, seed=seed)
    examples, provenance = load_data(data_cfg)
    examples.check_compatible(network.input_count, network.output_count)

    run_dir = _resolve_run_dir(train_cfg)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        layers=network.layer_sizes,
        functions=[f.value for f in network.functions],
        examples=len(examples),
        epochs=epochs,
        lr=lr,
        param_count=network.parameter_count(),
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    trainer = Trainer(network, lr, callbacks=[jsonl, csv_sink, plots])

    result = trainer.run(
        examples,
        epochs=epochs,
        seed=seed,
        shuffle=bool(train_cfg.get("shuffle", False)),
        early_stopping_patience=early_stopping,
        checkpoint_dir=run_dir,
    )
    plots.close()

    safe_config = json.loads(json.dumps(config))
    manifest = write_manifest(run_dir / "manifest.json", config=safe_config, data_provenance=provenance)
    summary_path = write_summary(jsonl.path, run_dir / "summary.json")
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    return replace(
        result,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object]) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    return Path("runs") / time.strftime("%Y%m%d-%H%M%S")


def _print_startup_summary(
    *,
    layers: Sequence[int],
    functions: Sequence[str],
    examples: int,
    epochs: int,
    lr: float,
    param_count: int,
) -> None:
    print("=== layernet run ===")
    print(f"Layers        : {list(layers)}")
    print(f"Activations   : {list(functions)}")
    print(f"Examples      : {examples}")
    print(f"Epochs        : {epochs}")
    print(f"Learning rate : {lr}")
    print(f"Parameters    : {param_count}")
    print("====================")


__all__ = [
    "build_network",
    "load_data",
    "load_preset",
    "merge_config",
    "presets",
    "read_config_file",
    "run_pipeline",
]
