import json

import pytest

from brchpredict.cli import main


@pytest.fixture
def alternating_trace(tmp_path):
    path = tmp_path / "alt.txt"
    assert main(['--generate', str(path), '--pattern', 'alternating', '--branches', '1000']) == 0
    return path


def test_generate_trace(alternating_trace, capsys):
    assert alternating_trace.exists()
    assert "#" in alternating_trace.read_text().splitlines()[0]


def test_simulate_with_preset(alternating_trace, tmp_path, capsys):
    report = tmp_path / "brchPredict.txt"
    assert main([str(alternating_trace), '-p', 'bht', '-o', str(report)]) == 0

    assert report.read_text().splitlines() == [
        "takenCorrect: 0",
        "takenIncorrect: 1",
        "notTakenCorrect: 499",
        "notTakenIncorrect: 500",
        "Precision: 49.9",
    ]
    assert "Precision: 49.9" in capsys.readouterr().out


def test_simulate_with_config_file(alternating_trace, tmp_path):
    config = tmp_path / "cfg.yaml"
    config.write_text(
        "simulation:\n"
        "  warmup_branches: 1\n"
        "predictors:\n"
        "  tiny:\n"
        "    type: bht\n"
        "    entries_log: 2\n"
    )
    report = tmp_path / "report.txt"
    results_json = tmp_path / "results" / "run.json"

    rc = main([str(alternating_trace), '-c', str(config), '-p', 'tiny',
               '-o', str(report), '--results', str(results_json)])

    assert rc == 0
    data = json.loads(results_json.read_text())
    assert data['branches_simulated'] == 999
    assert data['stats']['taken_incorrect'] == 0


def test_max_branches_option(alternating_trace, tmp_path):
    report = tmp_path / "report.txt"
    assert main([str(alternating_trace), '-p', 'tage', '-n', '100', '-o', str(report)]) == 0
    counts = [int(line.split(": ")[1]) for line in report.read_text().splitlines()[:4]]
    assert sum(counts) == 100


def test_missing_trace_fails(tmp_path, capsys):
    assert main([str(tmp_path / "missing.txt"), '-o', str(tmp_path / "r.txt")]) == 1
    assert "Error:" in capsys.readouterr().err


def test_unknown_predictor_fails(alternating_trace, capsys):
    assert main([str(alternating_trace), '-p', 'oracle']) == 1
    assert "Unknown predictor" in capsys.readouterr().err


def test_trace_required_without_generate():
    with pytest.raises(SystemExit):
        main([])


def test_zero_log_interval_rejected(alternating_trace, tmp_path, capsys):
    config = tmp_path / "cfg.yaml"
    config.write_text("simulation:\n  log_interval: 0\n  verbose: true\n")
    rc = main([str(alternating_trace), '-c', str(config), '-p', 'bht',
               '-o', str(tmp_path / "r.txt")])
    assert rc == 1
    assert "log_interval" in capsys.readouterr().err


def test_negative_warmup_option_rejected(alternating_trace, tmp_path):
    assert main([str(alternating_trace), '-p', 'bht', '-w', '-3',
                 '-o', str(tmp_path / "r.txt")]) == 1
