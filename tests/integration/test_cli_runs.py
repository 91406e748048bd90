import json
from pathlib import Path

import pytest

from cli.main import main


def test_list_presets(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--list-presets"])
    assert excinfo.value.code == 0
    names = capsys.readouterr().out.split()
    assert "sine-sigmoid-adam" in names
    assert "gabor-gelu-adam" in names


def test_cli_preset_with_overrides(tmp_path, capsys):
    run_dir = tmp_path / "run"
    dump = tmp_path / "resolved.json"
    main(
        [
            "--preset",
            "identity-tanh-sgd",
            "--epochs",
            "4",
            "--optimizer",
            "momentum",
            "--lr",
            "0.05",
            "--run-dir",
            str(run_dir),
            "--dump-config",
            str(dump),
        ]
    )
    out = capsys.readouterr().out.strip().splitlines()
    assert out[0] == "=== nnscope run ==="
    result = json.loads(out[-1])
    assert result["epochs"] == 4
    assert Path(result["manifest"]).exists()
    resolved = json.loads(dump.read_text())
    assert resolved["train"]["optimizer"] == "momentum"
    assert resolved["train"]["lr"] == 0.05
    assert (run_dir / "metrics.jsonl").exists()


def test_cli_yaml_overlay(tmp_path, capsys):
    overlay = tmp_path / "overlay.yaml"
    overlay.write_text(
        "model:\n  activation: elu\ntrain:\n  epochs: 2\n  run_dir: " + str(tmp_path / "yaml-run") + "\n"
    )
    main(["--preset", "sine-sigmoid-adam", "--config", str(overlay), "--enable-plots"])
    result = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert result["epochs"] == 2
    config = json.loads((tmp_path / "yaml-run" / "config.json").read_text())
    assert config["model"]["activation"] == "elu"
    assert config["model"]["hidden"] == [8, 8]
    assert (tmp_path / "yaml-run" / "loss.png").exists()
