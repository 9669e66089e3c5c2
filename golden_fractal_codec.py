"""
Golden Ratio Fractal Codec

A lossy self-similarity codec for one-dimensional numeric sequences. Recurring
sub-sequences are searched for at multiple golden-ratio scales; repeated
segments are replaced by references to a single stored master instance and
the sequence is reconstructed approximately from that compact form.

PIPELINE (leaves first):

    ScaleSampler       - segment sizes floor(L * r^k), k = 1..max_scales, r = 1/φ
    Segmenter          - overlapping windows advanced by floor(S * r)
    SimilarityMatcher  - upper-triangular Pearson scan, clusters at r > 0.99
    RatioEstimator     - analytical saving of master + references vs. raw copies
    PatternSelector    - runs the above per scale, ranks by estimated ratio
    Encoder            - masters, references and residuals for the best scale
    Decoder            - masters, then references, then residuals (last wins)
    QualityAnalyzer    - MSE / PSNR of the reconstruction

LIMITATIONS:
    The similarity search is O(n_segments^2 * segment_size) per scale and the
    whole sequence must fit in memory. Inputs beyond a few thousand samples
    slow down quadratically; pre-chunk them. The compressed size is an
    analytical estimate, no bit stream is produced.

Usage:
    from golden_fractal_codec import GoldenRatioFractalCodec

    codec = GoldenRatioFractalCodec()
    result = codec.encode(data)
    if result.success:
        decoded = codec.decode(result)
        print(codec.analyze(data, result).summary())

    # Alternate constants
    from golden_fractal_codec import CodecConfig
    codec = GoldenRatioFractalCodec(CodecConfig(correlation_threshold=0.05))

    # Individual stages
    segments = Segmenter().segment(data, segment_size=8)
    clusters = SimilarityMatcher().find_clusters(segments)
"""

import logging
import math
import time
import warnings
import numpy as np
from dataclasses import dataclass, field, asdict, fields
from typing import List, Dict, Any, Optional, Tuple, Union

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

PHI = (1 + math.sqrt(5)) / 2
PHI_INV = 1 / PHI  # ≈ 0.618

NO_PATTERN_MESSAGE = "No suitable fractal patterns found"


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class CodecConfig:
    """Constants shared by every pipeline stage.

    Parameters
    ----------
    ratio : float
        Geometric ratio applied to the input length (scales) and to the
        segment size (window step). Defaults to the inverse golden ratio.
    correlation_threshold : float
        Two segments match when their Pearson correlation exceeds
        ``1 - correlation_threshold``.
    max_scales : int
        Highest scale index sampled.
    min_segment_size : int
        Smallest segment that supports a meaningful correlation. Inputs
        shorter than this are rejected.
    fill_value : float
        Decoded value for positions no record covers.
    header_cost, sample_cost, reference_cost, residual_cost : int
        Cost model of the encoded-size estimate. ``reference_cost`` is also
        the per-match cost used by the ratio estimator.
    large_input_warning : int
        Inputs longer than this emit a RuntimeWarning.
    """
    ratio: float = PHI_INV
    correlation_threshold: float = 0.01
    max_scales: int = 8
    min_segment_size: int = 4
    fill_value: float = 0.0
    header_cost: int = 32
    sample_cost: int = 4
    reference_cost: int = 12
    residual_cost: int = 8
    large_input_warning: int = 4096

    def __post_init__(self):
        if not 0.0 < self.ratio < 1.0:
            raise ValueError(f"ratio must be in (0, 1), got {self.ratio}")
        if not 0.0 <= self.correlation_threshold < 1.0:
            raise ValueError(
                f"correlation_threshold must be in [0, 1), got {self.correlation_threshold}")
        if self.max_scales < 1:
            raise ValueError(f"max_scales must be >= 1, got {self.max_scales}")
        if self.min_segment_size < 2:
            raise ValueError(f"min_segment_size must be >= 2, got {self.min_segment_size}")
        for name in ('header_cost', 'sample_cost', 'reference_cost', 'residual_cost'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")

    @property
    def min_correlation(self) -> float:
        """Correlation a match must exceed."""
        return 1.0 - self.correlation_threshold

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'CodecConfig':
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown config options: {sorted(unknown)}")
        return cls(**values)


# =============================================================================
# ERRORS
# =============================================================================

class CodecError(Exception):
    """Base class for codec errors."""


class InvalidSequenceError(CodecError, ValueError):
    """Input sequence is empty, too short, or holds NaN/infinite samples."""


class NoPatternFound(CodecError):
    """No scale produced a single cluster."""


class InvalidDecodeInput(CodecError, ValueError):
    """Decode was asked to operate on a failed or inconsistent encoding."""


def validate_sequence(data, config: Optional['CodecConfig'] = None,
                      stacklevel: int = 2) -> np.ndarray:
    """Return ``data`` as a 1-D float64 array, rejecting unusable input.

    ``stacklevel`` is passed to the large-input warning so it points at the
    user's call rather than at codec internals.
    """
    config = config or CodecConfig()
    arr = np.asarray(data, dtype=float)
    if arr.ndim != 1:
        arr = arr.flatten()
    if arr.size == 0:
        raise InvalidSequenceError("Input sequence is empty")
    if not np.all(np.isfinite(arr)):
        bad = int(np.count_nonzero(~np.isfinite(arr)))
        raise InvalidSequenceError(f"Input sequence holds {bad} NaN/infinite samples")
    if arr.size < config.min_segment_size:
        raise InvalidSequenceError(
            f"Input of {arr.size} samples is shorter than the minimum "
            f"segment size {config.min_segment_size}")
    if arr.size > config.large_input_warning:
        warnings.warn(
            f"Input of {arr.size} samples: similarity search is quadratic in the "
            f"segment count, consider pre-chunking", RuntimeWarning, stacklevel=stacklevel)
    return arr


# =============================================================================
# DATA MODEL
# =============================================================================

@dataclass(frozen=True)
class Scale:
    """One candidate segment size."""
    index: int
    segment_size: int


@dataclass(eq=False)
class Segment:
    """A value-owning copy of data[offset:offset + len(values)]."""
    offset: int
    values: np.ndarray

    @property
    def size(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class Match:
    offset: int
    correlation: float
    segment_index: int


@dataclass(eq=False)
class Cluster:
    """A master segment and the later segments that correlate with it."""
    master: Segment
    master_index: int
    matches: List[Match] = field(default_factory=list)

    @property
    def match_count(self) -> int:
        return len(self.matches)


@dataclass(eq=False)
class ScaleResult:
    """Clusters found at one scale, with their estimated compression ratio."""
    scale: int
    segment_size: int
    clusters: List[Cluster]
    compression_ratio: float

    @property
    def n_matches(self) -> int:
        return sum(c.match_count for c in self.clusters)

    def __repr__(self):
        return (f"ScaleResult(scale={self.scale}, segment_size={self.segment_size}, "
                f"clusters={len(self.clusters)}, matches={self.n_matches}, "
                f"ratio={self.compression_ratio:.4f})")


@dataclass(frozen=True)
class EncodedHeader:
    segment_size: int
    scale: int
    original_length: int
    ratio: float = PHI_INV


@dataclass(frozen=True, eq=False)
class MasterSegment:
    offset: int
    values: np.ndarray
    cluster_index: int


@dataclass(frozen=True)
class Reference:
    master_index: int
    offset: int
    correlation: float


@dataclass(frozen=True)
class Residual:
    offset: int
    value: float


@dataclass(frozen=True, eq=False)
class EncodedStructure:
    """The persisted artifact of one encode call. Never mutated after creation.

    Every offset in [0, original_length) lies in a master's range, a
    reference's range or the residual list. Overlaps are resolved at decode
    time: masters, then references, then residuals, later writes win.
    """
    header: EncodedHeader
    masters: Tuple[MasterSegment, ...]
    references: Tuple[Reference, ...]
    residuals: Tuple[Residual, ...]

    def coverage_counts(self) -> np.ndarray:
        """How many records reach each offset."""
        n = self.header.original_length
        counts = np.zeros(n, dtype=int)
        for m in self.masters:
            counts[m.offset:min(m.offset + len(m.values), n)] += 1
        for ref in self.references:
            if 0 <= ref.master_index < len(self.masters):
                size = len(self.masters[ref.master_index].values)
                counts[ref.offset:min(ref.offset + size, n)] += 1
        for r in self.residuals:
            if r.offset < n:
                counts[r.offset] += 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "header": asdict(self.header),
            "masters": [
                {"offset": m.offset, "cluster_index": m.cluster_index,
                 "values": [float(v) for v in m.values]}
                for m in self.masters
            ],
            "references": [asdict(r) for r in self.references],
            "residuals": [asdict(r) for r in self.residuals],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'EncodedStructure':
        try:
            header = EncodedHeader(**payload["header"])
            masters = tuple(
                MasterSegment(offset=int(m["offset"]),
                              values=_frozen(np.asarray(m["values"], dtype=float)),
                              cluster_index=int(m["cluster_index"]))
                for m in payload["masters"])
            references = tuple(Reference(**r) for r in payload["references"])
            residuals = tuple(Residual(**r) for r in payload["residuals"])
        except (KeyError, TypeError) as e:
            raise InvalidDecodeInput(f"Malformed encoded structure: {e}") from e
        return cls(header=header, masters=masters, references=references,
                   residuals=residuals)


@dataclass
class EncodeResult:
    """Tagged outcome of ``Encoder.encode``. Check ``success`` before ``encoded``."""
    success: bool
    original_length: int
    original_size: int
    compressed_size: int
    compression_ratio: float
    encoded: Optional[EncodedStructure] = None
    message: str = ""
    patterns_found: int = 0
    selected_scale: Optional[int] = None
    processing_time_ms: float = 0.0
    # Every scale with a cluster, best first; not serialized
    ranking: List['ScaleResult'] = field(default_factory=list, repr=False)

    @classmethod
    def failure(cls, original_length: int, original_size: int,
                message: str = NO_PATTERN_MESSAGE,
                processing_time_ms: float = 0.0) -> 'EncodeResult':
        return cls(success=False, original_length=original_length,
                   original_size=original_size, compressed_size=original_size,
                   compression_ratio=0.0, message=message,
                   processing_time_ms=processing_time_ms)

    def summary(self) -> str:
        lines = ["=" * 60, "GOLDEN RATIO FRACTAL ENCODING", "=" * 60]
        if not self.success:
            lines.append(f"FAILED: {self.message}")
            lines.append(f"Original size:     {self.original_size}")
            return "\n".join(lines)
        enc = self.encoded
        lines += [
            f"Original length:   {self.original_length} samples",
            f"Original size:     {self.original_size}",
            f"Compressed size:   {self.compressed_size}",
            f"Compression ratio: {self.compression_ratio:.2%}",
            f"Scale used:        {self.selected_scale} "
            f"(segment size {enc.header.segment_size})",
            f"Patterns found:    {self.patterns_found}",
            f"Records:           {len(enc.masters)} masters, "
            f"{len(enc.references)} references, {len(enc.residuals)} residuals",
            f"Processing time:   {self.processing_time_ms:.2f}ms",
        ]
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "success": self.success,
            "original_length": self.original_length,
            "original_size": self.original_size,
            "compressed_size": self.compressed_size,
            "compression_ratio": self.compression_ratio,
            "processing_time_ms": self.processing_time_ms,
        }
        if self.success:
            out.update(encoded=self.encoded.to_dict(),
                       patterns_found=self.patterns_found,
                       selected_scale=self.selected_scale)
        else:
            out["message"] = self.message
        return out


@dataclass
class CompressionAnalysis:
    """Reconstruction quality of one encoding."""
    compression_ratio: float
    size_saving_percent: float
    mean_squared_error: float
    peak_signal_to_noise_ratio_db: float
    selected_scale: int
    processing_time_ms: float
    patterns_found: int

    def summary(self) -> str:
        lines = ["=" * 60, "COMPRESSION ANALYSIS", "=" * 60,
                 f"Compression ratio:  {self.compression_ratio:.2%}",
                 f"Size saving:        {self.size_saving_percent:.2f}%",
                 f"Mean squared error: {self.mean_squared_error:.6f}",
                 f"PSNR:               {self.peak_signal_to_noise_ratio_db:.2f} dB",
                 f"Scale used:         {self.selected_scale}",
                 f"Processing time:    {self.processing_time_ms:.2f}ms",
                 f"Patterns found:     {self.patterns_found}"]
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


# =============================================================================
# SCALE SAMPLER
# =============================================================================

class ScaleSampler:
    """Segment sizes floor(L * r^k) for k = 1..max_scales, stopping below min size."""

    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or CodecConfig()

    def sample(self, length: int) -> List[Scale]:
        scales = []
        for k in range(1, self.config.max_scales + 1):
            size = int(math.floor(length * self.config.ratio ** k))
            if size < self.config.min_segment_size:
                break
            scales.append(Scale(index=k, segment_size=size))
        return scales


# =============================================================================
# SEGMENTER
# =============================================================================

class Segmenter:
    """Overlapping windows of a fixed size, advanced by a golden-ratio step."""

    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or CodecConfig()

    def step(self, segment_size: int) -> int:
        # floor(S * r) is 0 for tiny S; a zero step would never advance
        return max(1, int(math.floor(segment_size * self.config.ratio)))

    def segment(self, data, segment_size: int) -> List[Segment]:
        data = np.asarray(data, dtype=float)
        if segment_size < 1:
            raise ValueError(f"segment_size must be >= 1, got {segment_size}")
        step = self.step(segment_size)
        return [Segment(offset=offset, values=data[offset:offset + segment_size].copy())
                for offset in range(0, len(data) - segment_size + 1, step)]


# =============================================================================
# SIMILARITY MATCHER
# =============================================================================

def correlation_matrix(windows: np.ndarray) -> np.ndarray:
    """Pairwise Pearson correlation of the rows of ``windows``.

    Rows with zero variance correlate 0 with everything, themselves included.
    Results are clipped to [-1, 1]. Centered rows are rescaled to unit
    peak before the products, so large finite samples cannot overflow.
    """
    windows = np.asarray(windows, dtype=float)
    if windows.ndim != 2:
        raise ValueError(f"Expected a 2-D array of windows, got shape {windows.shape}")
    n = windows.shape[0]
    if n == 0:
        return np.zeros((0, 0))

    # Exact check: centering identical floats can leave round-off noise
    constant = np.ptp(windows, axis=1) == 0
    centered = windows - windows.mean(axis=1, keepdims=True)
    centered[constant] = 0.0
    peaks = np.max(np.abs(centered), axis=1, keepdims=True)
    centered = centered / np.where(peaks > 0, peaks, 1.0)
    norms = np.sqrt(np.sum(centered * centered, axis=1))

    num = centered @ centered.T
    den = np.outer(norms, norms)
    corr = np.where(den > 0, num / np.where(den > 0, den, 1.0), 0.0)
    return np.clip(corr, -1.0, 1.0)


def pearson_correlation(a, b) -> float:
    """Pearson coefficient of two equal-length vectors; 0 when either is constant."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.shape != b.shape or a.ndim != 1 or a.size == 0:
        return 0.0
    return float(correlation_matrix(np.vstack([a, b]))[0, 1])


class SimilarityMatcher:
    """
    Groups segments into (master, matches) clusters.

    Segment i is compared against every later segment j > i only. Segment i
    becomes a master when at least one such j correlates above
    ``1 - correlation_threshold``; clusters come out in ascending master
    offset. A segment can be a match of an earlier master and a master of
    its own later matches at the same time.
    """

    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or CodecConfig()

    def find_clusters(self, segments: List[Segment]) -> List[Cluster]:
        if len(segments) < 2:
            return []
        sizes = {s.size for s in segments}
        if len(sizes) != 1:
            raise ValueError(f"Segments must share one size, got sizes {sorted(sizes)}")

        corr = correlation_matrix(np.vstack([s.values for s in segments]))
        min_corr = self.config.min_correlation

        clusters = []
        for i, master in enumerate(segments):
            later = np.nonzero(corr[i, i + 1:] > min_corr)[0] + i + 1
            if len(later) == 0:
                continue
            matches = [Match(offset=segments[j].offset,
                             correlation=float(corr[i, j]),
                             segment_index=int(j))
                       for j in later]
            clusters.append(Cluster(master=master, master_index=i, matches=matches))
        return clusters


# =============================================================================
# RATIO ESTIMATOR
# =============================================================================

class RatioEstimator:
    """
    Estimated fraction of space saved by a cluster set.

    Per cluster: original = S * (1 + matches), compressed = S + matches *
    reference_cost. The ratio is total saved over total original, floored at
    0 since references cost more than they save when S < reference_cost.
    This is a selection-time estimate, never checked against the encoded size.
    """

    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or CodecConfig()

    def estimate(self, clusters: List[Cluster], segment_size: int) -> float:
        total_saved = 0
        total_original = 0
        for cluster in clusters:
            original = segment_size * (1 + cluster.match_count)
            compressed = segment_size + cluster.match_count * self.config.reference_cost
            total_saved += original - compressed
            total_original += original
        if total_original <= 0:
            return 0.0
        return max(0.0, total_saved / total_original)


# =============================================================================
# PATTERN SELECTOR
# =============================================================================

class PatternSelector:
    """Runs sampler -> segmenter -> matcher -> estimator at every scale and ranks."""

    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or CodecConfig()
        self.sampler = ScaleSampler(self.config)
        self.segmenter = Segmenter(self.config)
        self.matcher = SimilarityMatcher(self.config)
        self.estimator = RatioEstimator(self.config)

    def evaluate_scale(self, data: np.ndarray, scale: Scale) -> ScaleResult:
        segments = self.segmenter.segment(data, scale.segment_size)
        clusters = self.matcher.find_clusters(segments)
        ratio = self.estimator.estimate(clusters, scale.segment_size)
        logger.debug("scale %d: size=%d segments=%d clusters=%d ratio=%.4f",
                     scale.index, scale.segment_size, len(segments), len(clusters), ratio)
        return ScaleResult(scale=scale.index, segment_size=scale.segment_size,
                           clusters=clusters, compression_ratio=ratio)

    def rank(self, data) -> List[ScaleResult]:
        """ScaleResults with at least one cluster, best estimated ratio first.

        Ties keep ascending scale order.
        """
        data = np.asarray(data, dtype=float)
        results = []
        for scale in self.sampler.sample(len(data)):
            result = self.evaluate_scale(data, scale)
            if result.clusters:
                results.append(result)
        return sorted(results, key=lambda r: -r.compression_ratio)

    def select(self, data) -> ScaleResult:
        ranked = self.rank(data)
        if not ranked:
            raise NoPatternFound(NO_PATTERN_MESSAGE)
        return ranked[0]


# =============================================================================
# ENCODER
# =============================================================================

class Encoder:
    """Builds the EncodedStructure for the best-ranked scale."""

    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or CodecConfig()
        self.selector = PatternSelector(self.config)

    def build_structure(self, data, scale_result: ScaleResult) -> EncodedStructure:
        """Masters and references in cluster order, then residuals for the rest."""
        data = np.asarray(data, dtype=float)
        n = len(data)
        size = scale_result.segment_size
        covered = np.zeros(n, dtype=bool)

        masters = []
        references = []
        for cluster_index, cluster in enumerate(scale_result.clusters):
            master = cluster.master
            masters.append(MasterSegment(offset=master.offset,
                                         values=_frozen(master.values.copy()),
                                         cluster_index=cluster_index))
            master_index = len(masters) - 1
            covered[master.offset:master.offset + size] = True
            for match in cluster.matches:
                references.append(Reference(master_index=master_index,
                                            offset=match.offset,
                                            correlation=match.correlation))
                covered[match.offset:match.offset + size] = True

        residuals = tuple(Residual(offset=int(i), value=float(data[i]))
                          for i in np.nonzero(~covered)[0])

        header = EncodedHeader(segment_size=size, scale=scale_result.scale,
                               original_length=n, ratio=self.config.ratio)
        return EncodedStructure(header=header, masters=tuple(masters),
                                references=tuple(references), residuals=residuals)

    def estimate_size(self, structure: EncodedStructure) -> int:
        c = self.config
        return (c.header_cost
                + len(structure.masters) * structure.header.segment_size * c.sample_cost
                + len(structure.references) * c.reference_cost
                + len(structure.residuals) * c.residual_cost)

    def encode(self, data) -> EncodeResult:
        return self._encode(data, stacklevel=4)

    def _encode(self, data, stacklevel: int) -> EncodeResult:
        start = time.perf_counter()
        data = validate_sequence(data, self.config, stacklevel=stacklevel)
        original_size = len(data) * self.config.sample_cost

        ranked = self.selector.rank(data)
        if not ranked:
            logger.info("encode of %d samples: %s", len(data), NO_PATTERN_MESSAGE)
            return EncodeResult.failure(
                original_length=len(data), original_size=original_size,
                processing_time_ms=(time.perf_counter() - start) * 1000.0)

        best = ranked[0]
        structure = self.build_structure(data, best)
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.info("encoded %d samples at scale %d (size %d): %d masters, "
                    "%d references, %d residuals",
                    len(data), best.scale, best.segment_size, len(structure.masters),
                    len(structure.references), len(structure.residuals))
        return EncodeResult(success=True,
                            original_length=len(data),
                            original_size=original_size,
                            compressed_size=self.estimate_size(structure),
                            compression_ratio=best.compression_ratio,
                            encoded=structure,
                            patterns_found=len(ranked),
                            selected_scale=best.scale,
                            processing_time_ms=elapsed_ms,
                            ranking=ranked)


# =============================================================================
# DECODER
# =============================================================================

class Decoder:
    """
    Rebuilds a sequence of the declared original length.

    Write order is masters, then references, then residuals; later writes
    win on overlap. Writes are clamped to the output length. Positions no
    record touches hold ``config.fill_value``.
    """

    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or CodecConfig()

    def decode(self, encoded: Union[EncodeResult, EncodedStructure]) -> np.ndarray:
        if isinstance(encoded, EncodeResult):
            if not encoded.success or encoded.encoded is None:
                raise InvalidDecodeInput("Cannot decode failed encoding")
            structure = encoded.encoded
        elif isinstance(encoded, EncodedStructure):
            structure = encoded
        else:
            raise InvalidDecodeInput(
                f"Expected EncodeResult or EncodedStructure, got {type(encoded).__name__}")
        return self.decode_structure(structure)

    def decode_structure(self, structure: EncodedStructure) -> np.ndarray:
        n = structure.header.original_length
        out = np.full(n, self.config.fill_value, dtype=float)

        for master in structure.masters:
            self._place(out, master.offset, master.values)

        for ref in structure.references:
            if not 0 <= ref.master_index < len(structure.masters):
                raise InvalidDecodeInput(
                    f"Reference at offset {ref.offset} points to missing master "
                    f"{ref.master_index}")
            self._place(out, ref.offset, structure.masters[ref.master_index].values)

        for residual in structure.residuals:
            if 0 <= residual.offset < n:
                out[residual.offset] = residual.value
        return out

    @staticmethod
    def _place(out: np.ndarray, offset: int, values: np.ndarray):
        if offset < 0 or offset >= len(out):
            return
        end = min(offset + len(values), len(out))
        out[offset:end] = values[:end - offset]


# =============================================================================
# QUALITY ANALYZER
# =============================================================================

def mean_squared_error(original, decoded) -> float:
    original = np.asarray(original, dtype=float)
    decoded = np.asarray(decoded, dtype=float)
    # Decoder always emits the declared length
    assert original.shape == decoded.shape, (
        f"length mismatch: original {original.shape}, decoded {decoded.shape}")
    diff = original - decoded
    return float(np.mean(diff * diff))


def peak_signal_to_noise_ratio(original, mse: float) -> float:
    """20 * log10(max(original) / sqrt(mse)) in dB.

    Infinite for a perfect reconstruction, -inf for a zero peak. NaN when
    max(original) < 0, where the logarithm is undefined.
    """
    if mse == 0:
        return float('inf')
    peak = float(np.max(original))
    if peak < 0:
        return float('nan')
    if peak == 0:
        return float('-inf')
    return 20.0 * math.log10(peak / math.sqrt(mse))


class QualityAnalyzer:
    """Decodes an encoding and measures it against the original input."""

    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or CodecConfig()
        self.decoder = Decoder(self.config)

    def analyze(self, original, result: EncodeResult) -> CompressionAnalysis:
        if not isinstance(result, EncodeResult) or not result.success:
            raise InvalidDecodeInput("Cannot analyze failed encoding")
        original = np.asarray(original, dtype=float)
        decoded = self.decoder.decode(result)
        mse = mean_squared_error(original, decoded)
        psnr = peak_signal_to_noise_ratio(original, mse)
        saving = 0.0
        if result.original_size > 0:
            saving = (result.original_size - result.compressed_size) / result.original_size * 100
        return CompressionAnalysis(
            compression_ratio=result.compression_ratio,
            size_saving_percent=saving,
            mean_squared_error=mse,
            peak_signal_to_noise_ratio_db=psnr,
            selected_scale=result.selected_scale,
            processing_time_ms=result.processing_time_ms,
            patterns_found=result.patterns_found,
        )


# =============================================================================
# FACADE
# =============================================================================

class GoldenRatioFractalCodec:
    """
    Main interface: encode, decode and analyze with one shared config.

    Usage:
        codec = GoldenRatioFractalCodec()
        result = codec.encode(data)
        if result.success:
            analysis = codec.analyze(data, result)
    """

    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or CodecConfig()
        self.encoder = Encoder(self.config)
        self.decoder = Decoder(self.config)
        self.analyzer = QualityAnalyzer(self.config)

    @property
    def selector(self) -> PatternSelector:
        return self.encoder.selector

    def detect_patterns(self, data) -> List[ScaleResult]:
        """Ranked scale results, best first (diagnostic)."""
        return self.selector.rank(validate_sequence(data, self.config, stacklevel=3))

    def encode(self, data) -> EncodeResult:
        return self.encoder._encode(data, stacklevel=4)

    def decode(self, encoded: Union[EncodeResult, EncodedStructure]) -> np.ndarray:
        return self.decoder.decode(encoded)

    def analyze(self, original, result: EncodeResult) -> CompressionAnalysis:
        return self.analyzer.analyze(original, result)
