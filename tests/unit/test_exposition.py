"""Tests for the exposition-format parser."""

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from mcmonitor.core.exposition import iter_samples, parse_exposition, parse_labels
from mcmonitor.core.models import MetricTable

metric_names = st.from_regex(r"[a-zA-Z_:][a-zA-Z0-9_:]{0,20}", fullmatch=True)
finite_values = st.floats(
    allow_nan=False, allow_infinity=False, min_value=-1e12, max_value=1e12
)


@pytest.mark.core
@pytest.mark.tier(0)
class TestLineFiltering:
    """Tests for skipped and dropped lines."""

    def test_returns_metric_table(self) -> None:
        """Parser returns a MetricTable instance."""
        assert isinstance(parse_exposition("up 1"), MetricTable)

    def test_empty_text_gives_empty_table(self) -> None:
        """Empty input produces no entries."""
        assert parse_exposition("") == {}

    def test_skips_comments_and_blank_lines(self) -> None:
        """HELP/TYPE metadata and blank lines are ignored."""
        text = "# HELP up Whether up\n# TYPE up gauge\n\n   \nup 1\n"
        assert parse_exposition(text) == {"up": 1.0}

    def test_drops_lines_not_matching_shape(self) -> None:
        """Malformed lines are dropped without error."""
        text = "9bad 1\nno_value\n{x=\"y\"} 3\nvalid 2\n"
        assert parse_exposition(text) == {"valid": 2.0}

    def test_ignores_trailing_timestamp(self) -> None:
        """A timestamp after the value is not part of the value."""
        table = parse_exposition("requests 12 1700000000000")
        assert table == {"requests": 12.0}

    def test_accepts_colons_in_names(self) -> None:
        """Recording-rule style names with colons parse."""
        table = parse_exposition("job:requests:rate5m 0.5")
        assert table["job:requests:rate5m"] == 0.5

    def test_empty_braces_are_unlabeled(self) -> None:
        """``name{} value`` behaves like an unlabeled line."""
        table = parse_exposition("up{} 1")
        assert table == {"up": 1.0}


@pytest.mark.core
@pytest.mark.tier(0)
class TestValues:
    """Tests for numeric value handling."""

    def test_parses_scientific_notation(self) -> None:
        table = parse_exposition("bytes 1.5e+09")
        assert table["bytes"] == 1.5e9

    def test_parses_infinities(self) -> None:
        table = parse_exposition("a +Inf\nb -Inf")
        assert table["a"] == math.inf
        assert table["b"] == -math.inf

    def test_non_numeric_token_yields_nan(self) -> None:
        """An unparsable value is kept as NaN."""
        table = parse_exposition("broken abc")
        assert math.isnan(table["broken"])

    def test_nan_total_restarts_from_zero(self) -> None:
        """A NaN running total counts as 0 for the next labeled line."""
        text = 'm{k="a"} abc\nm{k="b"} 4'
        table = parse_exposition(text)
        assert table["m_total"] == 4.0


@pytest.mark.core
@pytest.mark.tier(0)
class TestBareNames:
    """Tests for first-wins storage under the bare metric name."""

    def test_first_occurrence_wins(self) -> None:
        """A repeated unlabeled name keeps the first value."""
        table = parse_exposition("up 1\nup 0")
        assert table["up"] == 1.0

    def test_unlabeled_then_labeled(self) -> None:
        """Bare name keeps the unlabeled value; total has only the labeled one."""
        table = parse_exposition('m 5\nm{k="a"} 7')
        assert table["m"] == 5.0
        assert table["m_total"] == 7.0

    def test_labeled_line_sets_bare_name_when_absent(self) -> None:
        """The first labeled line populates the bare name."""
        table = parse_exposition('m{k="a"} 7\nm{k="b"} 9')
        assert table["m"] == 7.0

    def test_zero_counts_as_present(self) -> None:
        """A zero bare value is not replaced by a later line."""
        table = parse_exposition('m 0\nm{k="a"} 7')
        assert table["m"] == 0.0


@pytest.mark.core
@pytest.mark.tier(0)
class TestLabeledSeries:
    """Tests for label-derived keys."""

    def test_total_sums_labeled_values(self) -> None:
        table = parse_exposition('m{k="a"} 2\nm{k="b"} 3')
        assert table["m_total"] == 5.0

    def test_per_label_value_keys(self) -> None:
        table = parse_exposition('m{k="a"} 2\nm{k="b"} 3')
        assert table["m_a"] == 2.0
        assert table["m_b"] == 3.0

    def test_concatenated_suffix_in_encounter_order(self) -> None:
        """Multi-label lines get a key joining every label value."""
        table = parse_exposition('req{method="GET",code="200"} 11')
        assert table["req_GET_200"] == 11.0
        assert table["req_GET"] == 11.0
        assert table["req_200"] == 11.0
        assert table["req_total"] == 11.0

    def test_per_label_key_last_write_wins(self) -> None:
        """Lines sharing one label value overwrite that value's key."""
        text = 'req{method="GET",code="200"} 11\nreq{method="GET",code="500"} 2'
        table = parse_exposition(text)
        assert table["req_GET"] == 2.0
        assert table["req_GET_200"] == 11.0
        assert table["req_GET_500"] == 2.0

    def test_label_values_with_spaces(self) -> None:
        """Label values may contain spaces (e.g. GC names)."""
        text = 'jvm_gc_collection_seconds_count{gc="G1 Young Generation"} 12'
        table = parse_exposition(text)
        assert table["jvm_gc_collection_seconds_count_G1 Young Generation"] == 12.0

    def test_empty_label_value_only_feeds_total(self) -> None:
        """A label list with no usable pairs contributes to the total only."""
        table = parse_exposition('m{k=""} 4')
        assert table == {"m": 4.0, "m_total": 4.0}

    def test_total_adds_to_existing_unlabeled_total_metric(self) -> None:
        """An exported ``<name>_total`` sample seeds the accumulator."""
        table = parse_exposition('m_total 10\nm{k="a"} 1')
        assert table["m_total"] == 11.0


@pytest.mark.core
@pytest.mark.tier(0)
class TestHelpers:
    """Tests for label parsing and sample iteration."""

    def test_parse_labels_keeps_encounter_order(self) -> None:
        labels = parse_labels('b="2",a="1"')
        assert list(labels) == ["b", "a"]

    def test_parse_labels_repeated_key_takes_last_value(self) -> None:
        assert parse_labels('a="1",a="2"') == {"a": "2"}

    def test_iter_samples_marks_labeled_lines(self) -> None:
        samples = list(iter_samples('up 1\nm{k="a"} 2'))
        assert [s.labeled for s in samples] == [False, True]
        assert samples[1].labels == {"k": "a"}


@pytest.mark.core
@pytest.mark.tier(0)
class TestProperties:
    """Property-based checks over generated exposition text."""

    @given(st.dictionaries(metric_names, finite_values, min_size=1, max_size=15))
    def test_unlabeled_lines_round_trip_without_totals(
        self, series: dict[str, float]
    ) -> None:
        """Unlabeled text yields exactly its values and no derived keys."""
        text = "\n".join(f"{name} {value!r}" for name, value in series.items())
        assert parse_exposition(text) == series

    @given(
        metric_names,
        st.lists(
            st.tuples(
                st.from_regex(r"[a-z]{1,8}", fullmatch=True).filter(
                    lambda label: label != "total"
                ),
                finite_values,
            ),
            min_size=1,
            max_size=10,
            unique_by=lambda pair: pair[0],
        ),
    )
    def test_total_is_sum_of_labeled_values(
        self, name: str, series: list[tuple[str, float]]
    ) -> None:
        """``<name>_total`` is the sum over labeled lines with distinct values."""
        text = "\n".join(f'{name}{{k="{label}"}} {value!r}' for label, value in series)
        table = parse_exposition(text)
        assert table[f"{name}_total"] == pytest.approx(
            sum(value for _, value in series), rel=1e-9, abs=1e-6
        )
        for label, value in series:
            assert table[f"{name}_{label}"] == value
