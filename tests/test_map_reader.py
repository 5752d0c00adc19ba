"""
Tests for sample ingestion and the sample map
"""

import numpy as np
import pytest

from som_core.map_reader import SampleFormatError, parse_samples, read_sample_map
from som_core.samples import SampleMap
from som_core.vector import Vector


class TestParseSamples:
    def test_valid_file(self):
        samples = parse_samples(["3\n", "0 0\n", "10.5 -2\n", "4 7.25\n"])
        assert samples.items == 3
        assert list(samples) == [Vector(0.0, 0.0), Vector(10.5, -2.0), Vector(4.0, 7.25)]

    def test_whitespace_separated(self):
        samples = parse_samples(["2", "1.0\t2.0", "   3.0    4.0  "])
        assert list(samples) == [Vector(1.0, 2.0), Vector(3.0, 4.0)]

    def test_extra_lines_ignored(self):
        samples = parse_samples(["1", "1 1", "not a sample"])
        assert samples.items == 1

    def test_missing_count(self):
        with pytest.raises(SampleFormatError):
            parse_samples([])

    @pytest.mark.parametrize("header", ["abc", "2.5", ""])
    def test_bad_count(self, header):
        with pytest.raises(SampleFormatError) as exc:
            parse_samples([header, "1 1", "2 2"])
        assert exc.value.line_number == 1

    @pytest.mark.parametrize("header", ["0", "-3"])
    def test_count_must_be_positive(self, header):
        with pytest.raises(SampleFormatError):
            parse_samples([header])

    @pytest.mark.parametrize("line", ["1", "1 2 3", "x 2", "1,2", "nan 1", "inf 0"])
    def test_malformed_pair(self, line):
        with pytest.raises(SampleFormatError) as exc:
            parse_samples(["2", "0 0", line])
        assert exc.value.line_number == 3

    def test_too_few_samples(self):
        with pytest.raises(SampleFormatError) as exc:
            parse_samples(["3", "0 0", "1 1"])
        assert exc.value.line_number is None

    def test_is_value_error(self):
        assert issubclass(SampleFormatError, ValueError)


class TestReadSampleMap:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "cities.tsp"
        path.write_text("2\n1 2\n3 4\n")
        samples = read_sample_map(path)
        assert list(samples) == [Vector(1.0, 2.0), Vector(3.0, 4.0)]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_sample_map(tmp_path / "missing.tsp")

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "bad.tsp"
        path.write_text("2\n1 2\nthree 4\n")
        with pytest.raises(SampleFormatError):
            read_sample_map(str(path))

    def test_invalid_utf8(self, tmp_path):
        path = tmp_path / "binary.tsp"
        path.write_bytes(b"2\n0 0\n\xff\xfe 1\n")
        with pytest.raises(SampleFormatError) as exc:
            read_sample_map(path)
        assert exc.value.line_number == 3

    def test_trailing_garbage_not_decoded(self, tmp_path):
        path = tmp_path / "cities.tsp"
        path.write_bytes(b"1\n5 6\n\xff\xfe\n")
        assert list(read_sample_map(path)) == [Vector(5.0, 6.0)]

    def test_crlf_line_endings(self, tmp_path):
        path = tmp_path / "cities.tsp"
        path.write_bytes(b"2\r\n1 2\r\n3 4\r\n")
        assert list(read_sample_map(path)) == [Vector(1.0, 2.0), Vector(3.0, 4.0)]


class TestSampleMap:
    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            SampleMap([])

    def test_bounds(self):
        samples = SampleMap([Vector(2.0, 8.0), Vector(-1.0, 3.0), Vector(5.0, 4.0)])
        bounds = samples.bounds()
        assert bounds.top_left == Vector(-1.0, 3.0)
        assert bounds.bottom_right == Vector(5.0, 8.0)
        assert bounds.center == Vector(2.0, 5.5)
        assert bounds.width == 6.0
        assert bounds.height == 5.0

    def test_bounds_of_single_sample(self):
        bounds = SampleMap([Vector(3.0, 3.0)]).bounds()
        assert bounds.center == Vector(3.0, 3.0)
        assert bounds.width == 0.0

    def test_from_array(self):
        samples = SampleMap.from_array(np.array([[0, 1], [2, 3]]))
        assert samples[1] == Vector(2.0, 3.0)
        np.testing.assert_array_equal(samples.as_array(), [[0.0, 1.0], [2.0, 3.0]])

    def test_from_array_shape(self):
        with pytest.raises(ValueError):
            SampleMap.from_array(np.zeros((3, 3)))

    def test_describe(self):
        text = SampleMap([Vector(1.0, 2.0)]).describe()
        assert text.splitlines() == [
            "Sample Map ::",
            "  items : 1",
            "  0 : (1.000000, 2.000000)",
        ]
