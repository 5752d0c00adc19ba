"""
Tests for the training pipeline and the CLI
"""

import json
import logging

import numpy as np
import pytest

from config_schema import TspSomConfig
from main import TspSomPipeline, main
from som_core.samples import SampleMap


def pipeline_config(tmp_path, **training):
    config = TspSomConfig().model_dump()
    config["training"].update({"iterations": 200, "print_every": 50, "seed": 4})
    config["training"].update(training)
    config["render"]["output_dir"] = str(tmp_path / "img")
    return config


@pytest.fixture
def samples():
    rng = np.random.default_rng(8)
    return SampleMap.from_array(rng.uniform(0, 100, size=(15, 2)))


@pytest.fixture
def tsp_file(tmp_path):
    path = tmp_path / "cities.tsp"
    path.write_text("4\n0 0\n100 0\n100 100\n0 100\n")
    return path


class TestTspSomPipeline:
    def test_run_samples(self, tmp_path, samples):
        pipeline = TspSomPipeline(pipeline_config(tmp_path))
        report = pipeline.run_samples(samples)

        assert report.sample_count == 15
        assert report.iterations == 200
        assert report.ring_size > 1
        assert report.ring_size == len(report.tour)
        assert report.tour_length > 0.0
        assert report.pruned is False
        assert report.pruned_size == report.ring_size
        assert report.stats["train_steps"] == 200

    def test_snapshots(self, tmp_path, samples):
        report = TspSomPipeline(pipeline_config(tmp_path)).run_samples(samples)

        # Initial image plus one every 50 of 200 steps
        assert len(report.snapshots) == 5
        assert (tmp_path / "img" / "0.png").exists()
        assert (tmp_path / "img" / "200.png").exists()

    def test_render_disabled(self, tmp_path, samples):
        config = pipeline_config(tmp_path)
        config["render"]["enabled"] = False
        report = TspSomPipeline(config).run_samples(samples)
        assert report.snapshots == []
        assert not (tmp_path / "img").exists()

    def test_reproducible(self, tmp_path, samples):
        first = TspSomPipeline(pipeline_config(tmp_path)).run_samples(samples)
        second = TspSomPipeline(pipeline_config(tmp_path)).run_samples(samples)
        assert first.tour == second.tour
        assert first.tour_length == second.tour_length

    def test_prune(self, tmp_path, samples):
        report = TspSomPipeline(pipeline_config(tmp_path, prune=True)).run_samples(samples)
        assert report.pruned is True
        assert report.pruned_size <= report.ring_size

    def test_rejects_zero_iterations(self, tmp_path, samples):
        with pytest.raises(ValueError):
            TspSomPipeline(pipeline_config(tmp_path, iterations=0)).run_samples(samples)

    def test_run_from_file(self, tmp_path, tsp_file):
        report = TspSomPipeline(pipeline_config(tmp_path)).run(str(tsp_file))
        assert report.file_path == str(tsp_file.resolve())
        assert report.bounds == {"left": 0.0, "right": 100.0, "top": 0.0, "bottom": 100.0}

    def test_report_is_json_serializable(self, tmp_path, samples):
        report = TspSomPipeline(pipeline_config(tmp_path)).run_samples(samples)
        data = json.loads(json.dumps(report.to_dict()))
        assert data["ring_size"] == report.ring_size
        assert len(data["tour"]) == report.ring_size


class TestCLI:
    def test_json_output(self, tmp_path, tsp_file, capsys):
        code = main([
            str(tsp_file), "-l", "100", "--seed", "1", "--no-render", "--json",
            "--config", str(tmp_path / "none.yaml"),
        ])
        assert code == 0

        data = json.loads(capsys.readouterr().out)
        assert data["iterations"] == 100
        assert data["seed"] == 1
        assert data["snapshots"] == []

    def test_renders_into_output_dir(self, tmp_path, tsp_file):
        out = tmp_path / "frames"
        code = main([
            str(tsp_file), "-l", "40", "-p", "20", "--seed", "2",
            "-o", str(out), "--json", "--config", str(tmp_path / "none.yaml"),
        ])
        assert code == 0
        assert sorted(p.name for p in out.iterdir()) == ["0.png", "20.png", "40.png"]

    def test_table_output(self, tmp_path, tsp_file, capsys):
        code = main([
            str(tsp_file), "-l", "30", "--no-render", "--prune", "--describe",
            "--config", str(tmp_path / "none.yaml"),
        ])
        assert code == 0
        out = capsys.readouterr().out
        assert "Tour Length" in out
        assert "Neural net ::" in out

    def test_missing_file(self, tmp_path):
        code = main([
            str(tmp_path / "missing.tsp"), "--no-render",
            "--config", str(tmp_path / "none.yaml"),
        ])
        assert code == 1

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "bad.tsp"
        path.write_text("2\n0 0\n")
        code = main([
            str(path), "--no-render", "--config", str(tmp_path / "none.yaml"),
        ])
        assert code == 1

    def test_zero_iterations(self, tmp_path, tsp_file):
        code = main([
            str(tsp_file), "-l", "0", "--no-render",
            "--config", str(tmp_path / "none.yaml"),
        ])
        assert code == 1

    @pytest.mark.parametrize("option", [
        ["-p", "-3"], ["--seed", "-1"], ["-d", "-2"],
    ])
    def test_negative_options_rejected(self, tmp_path, tsp_file, option):
        out = tmp_path / "frames"
        code = main([
            str(tsp_file), "-l", "10", "-o", str(out), "--json",
            "--config", str(tmp_path / "none.yaml"), *option,
        ])
        assert code == 1
        assert not out.exists()

    def test_config_logged_at_info(self, tmp_path, tsp_file, caplog):
        config = tmp_path / "config.yaml"
        config.write_text("tspsom:\n  training:\n    iterations: 5\n")
        caplog.set_level(logging.INFO)

        code = main([str(tsp_file), "--no-render", "--json", "--config", str(config)])

        assert code == 0
        assert "Config validated successfully" in caplog.text

    def test_debug_level_raises_root_logger(self, tmp_path, tsp_file, caplog):
        caplog.set_level(logging.WARNING)
        code = main([
            str(tsp_file), "-l", "5", "-d", "1", "--no-render", "--json",
            "--config", str(tmp_path / "none.yaml"),
        ])
        assert code == 0
        assert logging.getLogger().level == logging.DEBUG
