import json
import numpy as np
from tools.codec_runner import CodecRunner
from tools.sources import get_source
from golden_fractal_codec import PatternSelector
import quick_codec


def make_runner(tmp_path, **kwargs):
    return CodecRunner("Test Runner", data_size=200, n_trials=3,
                       fig_dir=tmp_path, **kwargs)


def test_runner_collects_metrics(tmp_path):
    runner = make_runner(tmp_path)
    gen = get_source("fibonacci_repeat").gen_fn
    chunks = [gen(rng, runner.data_size) for rng in runner.trial_rngs()]
    metrics = runner.collect(chunks)

    assert metrics['failures'] == 0
    assert len(metrics['compression_ratio']) == 3
    assert len(metrics['mean_squared_error']) == 3
    assert all(r >= 0 for r in metrics['compression_ratio'])
    summary = runner.summarize(metrics)
    assert 'compression_ratio' in summary
    assert 'failures' in summary


def test_runner_counts_failures(tmp_path):
    runner = make_runner(tmp_path)
    chunks = [np.full(50, 2.0), np.array([1.0, 2.0])]
    metrics = runner.collect(chunks)
    assert metrics['failures'] == 2
    assert metrics['compression_ratio'] == []
    assert 'n/a' in runner.summarize(metrics)


def test_runner_compare_needs_three_values(tmp_path):
    runner = make_runner(tmp_path)
    d, p = runner.compare({'mean_squared_error': [1.0]}, {'mean_squared_error': [2.0]})
    assert np.isnan(d) and np.isnan(p)

    d, p = runner.compare({'mean_squared_error': [1.0, 1.1, 0.9, 1.05]},
                          {'mean_squared_error': [5.0, 5.2, 4.9, 5.1]})
    assert d < 0
    assert p < 0.01


def test_runner_saves_reconstruction_figure(tmp_path):
    runner = make_runner(tmp_path)
    data = get_source("sine").gen_fn(np.random.default_rng(0), 200)
    result, analysis = runner.run_one(data)
    assert result.success
    assert analysis is not None

    fig, axes = runner.create_figure(1, rows=1, cols=1, figsize=(6, 4))
    runner.plot_reconstruction(axes[0], data, runner.codec.decode(result), "sine")
    out = runner.save(fig, "sine_reconstruction")
    assert out.exists()
    assert out.stat().st_size > 0


def test_cli_generate_and_save(tmp_path, capsys):
    out = tmp_path / "encoded.json"
    code = quick_codec.main(["--generate", "200", "--source", "fibonacci_repeat",
                             "--save", str(out)])
    assert code == 0
    printed = capsys.readouterr().out
    assert "COMPRESSION ANALYSIS" in printed

    payload = json.loads(out.read_text())
    assert payload["success"] is True
    assert payload["encoded"]["header"]["original_length"] == 200


def test_cli_reads_comma_separated_file(tmp_path, capsys):
    series = tmp_path / "series.txt"
    series.write_text("1, 1, 2, 3, 5, 8, 13, 21,\n1, 1, 2, 3, 5, 8, 13, 21\n")
    assert quick_codec.main([str(series), "--verbose"]) == 0
    printed = capsys.readouterr().out
    assert "Scale" in printed


def test_cli_verbose_ranks_once(tmp_path, capsys, monkeypatch):
    """The verbose table reuses the ranking computed by encode."""
    calls = []
    original_rank = PatternSelector.rank

    def counting_rank(self, data):
        calls.append(len(data))
        return original_rank(self, data)

    monkeypatch.setattr(PatternSelector, "rank", counting_rank)
    series = tmp_path / "series.txt"
    series.write_text(" ".join(["1 1 2 3 5 8 13 21"] * 2))
    assert quick_codec.main([str(series), "--verbose"]) == 0
    assert calls == [16]
    printed = capsys.readouterr().out
    assert "Clusters" in printed


def test_cli_no_pattern_exits_nonzero(tmp_path, capsys):
    series = tmp_path / "irregular.txt"
    series.write_text("3 1 4 1 5 9 2 6 5 3 5 2 9 7 9 3 2 3 8 4")
    assert quick_codec.main([str(series)]) == 1
    assert "FAILED" in capsys.readouterr().out


def test_cli_bad_input(tmp_path, capsys):
    assert quick_codec.main([str(tmp_path / "missing.txt")]) == 1

    junk = tmp_path / "junk.txt"
    junk.write_text("1 2 three 4")
    assert quick_codec.main([str(junk)]) == 1

    short = tmp_path / "short.txt"
    short.write_text("1 2")
    assert quick_codec.main([str(short)]) == 1
    assert "Error" in capsys.readouterr().err
