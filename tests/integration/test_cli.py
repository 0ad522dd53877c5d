import json
from pathlib import Path

import pytest

from cli.main import Console, main, parse_float_list, parse_int_list


def _scripted(lines):
    pending = list(lines)
    output = []

    def read(prompt: str) -> str:
        if not pending:
            raise EOFError
        return pending.pop(0)

    return Console(read=read, write=output.append), output


def test_cli_preset_run(tmp_path, capsys):
    run_dir = tmp_path / "run"
    main(["--preset", "identity-linear", "--epochs", "5", "--run-dir", str(run_dir)])
    payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert payload["epochs"] == 5
    assert (run_dir / "metrics.jsonl").exists()
    assert (run_dir / "manifest.json").exists()
    assert Path(payload["checkpoint"]).exists()


def test_cli_data_override_and_dump(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    data = tmp_path / "xor.json"
    data.write_text(json.dumps([{"Input": [0.0, 1.0], "Target": [1.0]}]))
    main(["--data", str(data), "--epochs", "2", "--seed", "5", "--dump-config", "cfg.json"])
    config = json.loads((tmp_path / "cfg.json").read_text())
    assert config["data"] == {"path": str(data)}
    assert config["train"]["seed"] == 5
    assert (tmp_path / "runs" / "xor-sigmoid" / "metrics.jsonl").exists()


def test_cli_list_presets(capsys):
    with pytest.raises(SystemExit):
        main(["--list-presets"])
    assert "xor-sigmoid" in capsys.readouterr().out.split()


def test_interactive_session(tmp_path):
    data_file = tmp_path / "data" / "examples.json"
    console, output = _scripted(
        [
            "c", "[2, 3, 1]",
            "f", "[0.1, 0.2]",
            "a", "[0.1, 0.2]", "[1.0]",
            "a", "0.5, 0.5", "[0.0]",
            "d",
            "t", "0.1",
            "s", str(data_file),
            "l", str(data_file),
            "p",
            "q",
        ]
    )
    main(["--interactive", "--seed", "0"], console=console)

    assert any(line.startswith("Result: [") for line in output)
    assert "Input: [0.1000, 0.2000] -> Target: [1.0000]" in output
    assert any(line.startswith("Training finished 2 runs") for line in output)
    assert any(line.startswith("3 Layers: => [2] [3] [1]") for line in output)
    assert json.loads(data_file.read_text())[1]["Input"] == [0.5, 0.5]
    assert not any(line.startswith("Error:") for line in output)


def test_interactive_errors_do_not_end_session():
    console, output = _scripted(["f", "x", "c", "a", "b", "c", "c", "[2, 1]", "f", "[1, 2, 3]", "[1, 2]"])
    main(["--interactive"], console=console)

    assert "Error: No network has been created yet" in output
    assert "Unknown command 'x'; press [h] for help" in output
    assert "Error: No valid input after 3 attempts" in output
    assert any("Expected 2 elements but read was 3" in line for line in output)
    assert any(line.startswith("Result: [") for line in output)


def test_parsers():
    assert parse_int_list("[10, 4, 4, 2]") == [10, 4, 4, 2]
    assert parse_float_list("0.5,-1") == [0.5, -1.0]
    with pytest.raises(ValueError):
        parse_float_list("[1, 2]", count=3)
    with pytest.raises(ValueError):
        parse_int_list("[]")
