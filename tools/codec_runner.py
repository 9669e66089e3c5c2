"""
Codec Runner — shared boilerplate for batch codec experiments.

Encodes and analyzes many chunks, collects metric lists, compares conditions
and renders reconstruction figures, so experiment scripts only need to
provide data generators.

Usage:
    from tools.codec_runner import CodecRunner

    runner = CodecRunner("Fractal Signals", data_size=500)

    chunks = [gen(rng, runner.data_size) for rng in runner.trial_rngs()]
    metrics = runner.collect(chunks)
    print(runner.summarize(metrics))

    fig, axes = runner.create_figure(2, rows=1, cols=2)
    runner.plot_reconstruction(axes[0], chunks[0], decoded, "Trial 0")
    runner.save(fig, "fractal_signals")

Run as a script to sweep every registered source.
"""

import sys
import time
import warnings
import numpy as np
from pathlib import Path
from scipy import stats as sp_stats

_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(_ROOT))
from golden_fractal_codec import GoldenRatioFractalCodec, CodecConfig, InvalidSequenceError

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib import gridspec

METRIC_NAMES = [
    'compression_ratio',
    'size_saving_percent',
    'mean_squared_error',
    'peak_signal_to_noise_ratio_db',
    'selected_scale',
    'patterns_found',
    'processing_time_ms',
]


class CodecRunner:
    """Reusable batch runner with the codec and figure boilerplate baked in."""

    def __init__(self, name, data_size=500, n_trials=10, seed=42,
                 config=None, fig_dir=None):
        self.name = name
        self.data_size = data_size
        self.n_trials = n_trials
        self.seed = seed
        self.codec = GoldenRatioFractalCodec(config or CodecConfig())
        self.fig_dir = Path(fig_dir) if fig_dir is not None else _ROOT / "figures"
        self.fig_dir.mkdir(parents=True, exist_ok=True)

        print(f"Runner: {name}")
        print(f"  data_size={data_size}, trials={n_trials}, seed={seed}")

    # ----------------------------------------------------------
    # RNG helpers
    # ----------------------------------------------------------
    def trial_rngs(self, offset=0):
        """Return a list of n_trials independent RNGs."""
        return [np.random.default_rng(self.seed + offset + i)
                for i in range(self.n_trials)]

    # ----------------------------------------------------------
    # Data collection
    # ----------------------------------------------------------
    def run_one(self, chunk):
        """Encode one chunk. Returns (result, analysis or None)."""
        result = self.codec.encode(chunk)
        if not result.success:
            return result, None
        return result, self.codec.analyze(chunk, result)

    def collect(self, chunks):
        """Encode and analyze chunks, return {metric_name: [values]}.

        Non-finite values (PSNR of a perfect reconstruction) are dropped.
        Chunks with no detectable pattern or rejected input count under
        'failures'.
        """
        out = {m: [] for m in METRIC_NAMES}
        out['failures'] = 0
        for chunk in chunks:
            try:
                _, analysis = self.run_one(chunk)
            except InvalidSequenceError:
                out['failures'] += 1
                continue
            if analysis is None:
                out['failures'] += 1
                continue
            for m, v in analysis.to_dict().items():
                if m in out and v is not None and np.isfinite(v):
                    out[m].append(v)
        return out

    @staticmethod
    def summarize(metrics):
        """One line per metric: mean ± std over the collected values."""
        lines = []
        for m in METRIC_NAMES:
            vals = np.array(metrics.get(m, []), dtype=float)
            if len(vals) == 0:
                lines.append(f"  {m:32s} n/a")
                continue
            lines.append(f"  {m:32s} {np.mean(vals):12.4f} ± {np.std(vals):.4f} "
                         f"(n={len(vals)})")
        lines.append(f"  {'failures':32s} {metrics.get('failures', 0)}")
        return "\n".join(lines)

    # ----------------------------------------------------------
    # Statistics
    # ----------------------------------------------------------
    @staticmethod
    def cohens_d(a, b):
        """Pooled-std Cohen's d."""
        na, nb = len(a), len(b)
        sa, sb = np.std(a, ddof=1), np.std(b, ddof=1)
        ps = np.sqrt(((na - 1) * sa**2 + (nb - 1) * sb**2) / (na + nb - 2))
        if ps < 1e-15:
            diff = np.mean(a) - np.mean(b)
            return 0.0 if abs(diff) < 1e-15 else np.sign(diff) * float('inf')
        return (np.mean(a) - np.mean(b)) / ps

    def compare(self, data_a, data_b, metric='mean_squared_error'):
        """Welch t-test of one metric between two conditions. Returns (d, p)."""
        a = np.array(data_a.get(metric, []), dtype=float)
        b = np.array(data_b.get(metric, []), dtype=float)
        if len(a) < 3 or len(b) < 3:
            return float('nan'), float('nan')
        d = self.cohens_d(a, b)
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', RuntimeWarning)
            _, p = sp_stats.ttest_ind(a, b, equal_var=False)
        return d, float(p)

    # ----------------------------------------------------------
    # Timing
    # ----------------------------------------------------------
    def timed(self, label):
        """Context manager for timing blocks."""
        return _Timer(label)

    # ----------------------------------------------------------
    # Figure helpers
    # ----------------------------------------------------------
    @staticmethod
    def _apply_dark_theme():
        plt.rcParams.update({
            'figure.facecolor': '#181818',
            'axes.facecolor': '#181818',
            'axes.edgecolor': '#444444',
            'axes.labelcolor': 'white',
            'text.color': 'white',
            'xtick.color': '#cccccc',
            'ytick.color': '#cccccc',
        })

    @staticmethod
    def dark_ax(ax):
        """Apply dark theme to a single axis."""
        ax.set_facecolor('#181818')
        for spine in ax.spines.values():
            spine.set_color('#444444')
        ax.tick_params(colors='#cccccc', labelsize=7)
        return ax

    def create_figure(self, n_panels, title=None, rows=2, cols=3,
                      figsize=(20, 14)):
        """Create a dark-themed figure with gridspec panels."""
        self._apply_dark_theme()
        fig = plt.figure(figsize=figsize, facecolor='#181818')
        gs = gridspec.GridSpec(rows, cols, figure=fig, hspace=0.35,
                               wspace=0.35, left=0.06, right=0.97,
                               top=0.90, bottom=0.08)
        fig.suptitle(title or self.name, fontsize=15, fontweight='bold',
                     color='white')

        axes = []
        for i in range(min(n_panels, rows * cols)):
            r, c = divmod(i, cols)
            ax = fig.add_subplot(gs[r, c])
            self.dark_ax(ax)
            axes.append(ax)
        return fig, axes

    def plot_reconstruction(self, ax, original, decoded, title,
                            color='#e74c3c'):
        """Overlay original and decoded sequences, shading the error."""
        x = np.arange(len(original))
        ax.plot(x, original, '-', color='#cccccc', linewidth=1.2,
                label='original')
        ax.plot(x, decoded, '--', color=color, linewidth=1.2,
                label='decoded')
        ax.fill_between(x, original, decoded, alpha=0.2, color=color)
        ax.set_xlabel('offset', fontsize=10)
        ax.set_title(title, fontsize=11)
        ax.legend(fontsize=8, facecolor='#222222', edgecolor='#444444',
                  labelcolor='#cccccc')

    def save(self, fig, name=None):
        """Save figure to the figure directory."""
        name = name or self.name.lower().replace(' ', '_')
        out = self.fig_dir / f"{name}.png"
        fig.savefig(out, dpi=120, facecolor='#181818')
        plt.close(fig)
        print(f"\nFigure saved: {out}")
        return out


class _Timer:
    """Simple timing context manager."""
    def __init__(self, label):
        self.label = label

    def __enter__(self):
        self.t0 = time.time()
        print(f"  {self.label}...", end=" ", flush=True)
        return self

    def __exit__(self, *args):
        elapsed = time.time() - self.t0
        print(f"{elapsed:.1f}s")
        self.elapsed = elapsed


def main():
    from tools.sources import get_sources, DOMAIN_COLORS

    runner = CodecRunner("Codec Source Sweep")
    sources = get_sources()
    fig, axes = runner.create_figure(len(sources), rows=3, cols=3)

    for ax, s in zip(axes, sources):
        chunks = [s.gen_fn(rng, runner.data_size) for rng in runner.trial_rngs()]
        with runner.timed(s.name):
            metrics = runner.collect(chunks)
        print(runner.summarize(metrics))

        result, _ = runner.run_one(chunks[0])
        if result.success:
            decoded = runner.codec.decode(result)
            runner.plot_reconstruction(ax, chunks[0], decoded,
                                       f"{s.name} (scale {result.selected_scale})",
                                       color=DOMAIN_COLORS.get(s.domain, '#e74c3c'))
        else:
            ax.plot(chunks[0], color='#cccccc', linewidth=1.2)
            ax.set_title(f"{s.name} (no pattern)", fontsize=11)

    runner.save(fig, "codec_source_sweep")


if __name__ == "__main__":
    main()
