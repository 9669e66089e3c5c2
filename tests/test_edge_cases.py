import pytest
import numpy as np
from golden_fractal_codec import (
    CodecConfig,
    CodecError,
    GoldenRatioFractalCodec,
    InvalidDecodeInput,
    InvalidSequenceError,
    NoPatternFound,
    validate_sequence,
)

FIB_TWICE = [1, 1, 2, 3, 5, 8, 13, 21, 1, 1, 2, 3, 5, 8, 13, 21]


@pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
def test_non_finite_samples_rejected(bad):
    """NaN/inf would poison the correlation math; fail fast instead."""
    data = np.array(FIB_TWICE, dtype=float)
    data[5] = bad
    with pytest.raises(InvalidSequenceError):
        GoldenRatioFractalCodec().encode(data)


def test_empty_and_short_inputs_rejected():
    codec = GoldenRatioFractalCodec()
    with pytest.raises(InvalidSequenceError):
        codec.encode([])
    with pytest.raises(InvalidSequenceError):
        codec.encode([1.0, 2.0, 3.0])
    with pytest.raises(InvalidSequenceError):
        codec.detect_patterns([1.0])


def test_short_but_valid_input_finds_nothing():
    """Length 6: floor(6 * 0.618) = 3 is already below the minimum segment size."""
    result = GoldenRatioFractalCodec().encode([1, 2, 3, 1, 2, 3])
    assert not result.success


def test_multidimensional_input_flattened():
    codec = GoldenRatioFractalCodec()
    flat = codec.encode(FIB_TWICE)
    grid = codec.encode(np.array(FIB_TWICE).reshape(2, 8))
    assert grid.success
    assert grid.selected_scale == flat.selected_scale
    np.testing.assert_array_equal(codec.decode(grid), codec.decode(flat))


def test_integer_input_accepted():
    data = validate_sequence(np.array(FIB_TWICE, dtype=np.uint8))
    assert data.dtype == float
    assert len(data) == 16


def test_large_input_warns():
    config = CodecConfig(large_input_warning=10)
    data = np.resize([1.0, 4.0, 2.0, 8.0], 40)
    with pytest.warns(RuntimeWarning):
        GoldenRatioFractalCodec(config).encode(data)


def test_large_input_warning_points_at_caller():
    config = CodecConfig(large_input_warning=10)
    data = np.resize([1.0, 4.0, 2.0, 8.0], 40)
    codec = GoldenRatioFractalCodec(config)
    for call in (codec.encode, codec.encoder.encode, codec.detect_patterns):
        with pytest.warns(RuntimeWarning) as record:
            call(data)
        assert record[0].filename == __file__, call.__name__


def test_error_hierarchy():
    assert issubclass(InvalidSequenceError, CodecError)
    assert issubclass(InvalidSequenceError, ValueError)
    assert issubclass(InvalidDecodeInput, ValueError)
    assert issubclass(NoPatternFound, CodecError)


@pytest.mark.parametrize("kwargs", [
    {"ratio": 0.0},
    {"ratio": 1.0},
    {"ratio": 1.618},
    {"correlation_threshold": 1.0},
    {"correlation_threshold": -0.1},
    {"max_scales": 0},
    {"min_segment_size": 1},
    {"reference_cost": -1},
])
def test_invalid_config_rejected(kwargs):
    with pytest.raises(ValueError):
        CodecConfig(**kwargs)


def test_config_round_trip():
    config = CodecConfig(correlation_threshold=0.05, max_scales=5)
    restored = CodecConfig.from_dict(config.to_dict())
    assert restored == config
    assert restored.min_correlation == pytest.approx(0.95)
    with pytest.raises(ValueError):
        CodecConfig.from_dict({"golden": 1.6})


def test_alternate_ratio_changes_scales():
    """Components take their constants from the config, not module globals."""
    codec = GoldenRatioFractalCodec(CodecConfig(ratio=0.5))
    sizes = [s.segment_size for s in codec.selector.sampler.sample(64)]
    assert sizes == [32, 16, 8, 4]
    assert codec.selector.segmenter.step(8) == 4
