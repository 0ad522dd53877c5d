"""Command line entry point for layernet.

Runs a preset or config file end to end, or opens an interactive console that
creates a network, feeds it values, manages training data and trains it.
"""

from __future__ import annotations

import argparse
import json
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence, TypeVar

from layernet.core.errors import CommandError, LayerNetError
from layernet.session import Session
from layernet.training import pipelines

T = TypeVar("T")

HELP_TEXT = """\
Press [h] for help
Press [c] to create a new layered network
Press [p] to print the current network
Press [f] to feed values into the network
Press [t] to train the network through back propagation
Press [l] to load training data from a json file
Press [s] to save training data to a json file
Press [a] to add training data
Press [d] to print the current training data
Press [q] to exit"""


# ----------------------------------------------------------------------
# Input parsing


def parse_int_list(text: str) -> List[int]:
    """Parse ``"[10, 4, 2]"`` (brackets optional) into a list of ints."""

    return [int(item) for item in _split_items(text)]


def parse_float_list(text: str, count: int | None = None) -> List[float]:
    values = [float(item) for item in _split_items(text)]
    if count is not None and len(values) != count:
        raise ValueError(f"Expected {count} elements but read was {len(values)}")
    return values


def _split_items(text: str) -> List[str]:
    items = [item.strip() for item in text.strip().strip("[]").split(",")]
    if not any(items):
        raise ValueError("Expected a comma separated list of numbers")
    return items


def format_values(values: Iterable[float]) -> str:
    return "[" + ", ".join(f"{value:.4f}" for value in values) + "]"


class Console:
    """Line-based console I/O with a bounded retry budget per prompt."""

    def __init__(
        self,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
        attempts: int = 3,
    ) -> None:
        self.read = read
        self.write = write
        self.attempts = attempts

    def prompt(self, text: str, parse: Callable[[str], T]) -> T:
        for _ in range(self.attempts):
            raw = self.read(f"{text}: ")
            try:
                return parse(raw)
            except ValueError as exc:
                self.write(f"Invalid input ({exc}). Please try again...")
        raise CommandError(f"No valid input after {self.attempts} attempts")


# ----------------------------------------------------------------------
# Interactive commands


def _cmd_help(session: Session, console: Console) -> None:
    console.write(HELP_TEXT)


def _cmd_create(session: Session, console: Console) -> None:
    layers = console.prompt(
        "Enter array of layers with count of neurons (e.g. [10, 4, 4, 2])", parse_int_list
    )
    network = session.create_network(layers)
    console.write(f"Created network with layers {list(network.layer_sizes)}")


def _cmd_print(session: Session, console: Console) -> None:
    console.write(session.require_network().describe())


def _cmd_feed(session: Session, console: Console) -> None:
    network = session.require_network()
    values = console.prompt(
        "Enter input values as array of doubles ([0.1, 0.25, ...])",
        lambda text: parse_float_list(text, network.input_count),
    )
    console.write(f"Result: {format_values(network.predict(values))}")


def _cmd_train(session: Session, console: Console) -> None:
    session.require_network()
    session.require_examples()
    lr = console.prompt("Enter learning rate", float)
    start = time.perf_counter()
    total_error = session.train_pass(lr)
    elapsed_ms = (time.perf_counter() - start) * 1000.0
    console.write(
        f"Training finished {len(session.examples)} runs after {elapsed_ms:.0f} ms. "
        f"Residual sum: {total_error:.4f}"
    )


def _cmd_load(session: Session, console: Console) -> None:
    path = console.prompt("Enter file", _parse_path)
    examples = session.load(path)
    console.write(f"Loaded {len(examples)} examples from {path}")


def _cmd_save(session: Session, console: Console) -> None:
    path = console.prompt("Enter file", _parse_path)
    session.save(path)
    console.write(f"Saved {len(session.examples)} examples to {path}")


def _cmd_add(session: Session, console: Console) -> None:
    network = session.require_network()
    inputs = console.prompt("Input", lambda text: parse_float_list(text, network.input_count))
    target = console.prompt("Output", lambda text: parse_float_list(text, network.output_count))
    session.add_example(inputs, target)


def _cmd_data(session: Session, console: Console) -> None:
    for example in session.require_examples():
        console.write(
            f"Input: {format_values(example.input)} -> Target: {format_values(example.target)}"
        )


def _parse_path(text: str) -> Path:
    text = text.strip()
    if not text:
        raise ValueError("A file path is required")
    return Path(text)


COMMANDS: Dict[str, Callable[[Session, Console], None]] = {
    "h": _cmd_help,
    "c": _cmd_create,
    "p": _cmd_print,
    "f": _cmd_feed,
    "t": _cmd_train,
    "l": _cmd_load,
    "s": _cmd_save,
    "a": _cmd_add,
    "d": _cmd_data,
}


def run_interactive(session: Session, console: Console) -> None:
    """Dispatch console commands against ``session`` until quit or end of input."""

    console.write("layernet console")
    console.write(HELP_TEXT)
    while True:
        try:
            key = console.read("\nSelect command: ").strip().lower()
        except EOFError:
            break
        if key in {"q", "quit", "exit"}:
            break
        handler = COMMANDS.get(key)
        if handler is None:
            console.write(f"Unknown command {key!r}; press [h] for help")
            continue
        try:
            handler(session, console)
        except EOFError:
            break
        except (LayerNetError, ValueError, OSError) as exc:
            console.write(f"Error: {exc}")


# ----------------------------------------------------------------------
# Batch runs


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor-sigmoid",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--data", type=Path, help="JSON file of Input/Target examples")
    parser.add_argument("--epochs", type=int, help="Override the number of epochs")
    parser.add_argument("--lr", type=float, help="Override the learning rate")
    parser.add_argument("--seed", type=int, help="Seed for initialisation and shuffling")
    parser.add_argument("--run-dir", type=Path, help="Directory for run artifacts")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write a loss curve to the run directory"
    )
    parser.add_argument(
        "--interactive", action="store_true", help="Open the interactive console"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "steps": result.steps,
        "final_loss": result.final_loss,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "summary": result.summary_path,
        "checkpoint": result.checkpoint_path,
    }
    return json.dumps(payload, sort_keys=True)


def resolve_config(args: argparse.Namespace) -> dict:
    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))

    if args.config:
        override = pipelines.read_config_file(args.config)
        if {"model", "data", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = pipelines.merge_config(config, override)

    train_cfg = config.setdefault("train", {})
    if args.data:
        config["data"] = {"path": str(args.data)}
    if args.epochs is not None:
        train_cfg["epochs"] = int(args.epochs)
    if args.lr is not None:
        train_cfg["lr"] = float(args.lr)
    if args.seed is not None:
        train_cfg["seed"] = int(args.seed)
    if args.run_dir is not None:
        train_cfg["run_dir"] = str(args.run_dir)
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    return config


def main(argv: Sequence[str] | None = None, console: Console | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    if args.interactive:
        run_interactive(Session(seed=args.seed), console or Console())
        return

    config = resolve_config(args)
    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)
    print(_format_result(result))


if __name__ == "__main__":
    main()
