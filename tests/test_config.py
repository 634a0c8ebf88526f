"""
Unit tests for config.py.
"""
import pytest

from ppinet.config import AnalysisConfig, GraphConfig, LouvainParams


class TestLouvainParams:
    def test_defaults(self):
        params = LouvainParams()
        assert params.resolution == 1.0
        assert params.tolerance == 1e-9
        assert params.max_passes is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"resolution": -0.1},
            {"resolution": float("nan")},
            {"tolerance": -1.0},
            {"max_passes": 0},
        ],
    )
    def test_rejects_out_of_range(self, kwargs):
        with pytest.raises(ValueError):
            LouvainParams(**kwargs)


class TestAnalysisConfig:
    def test_for_string_db(self):
        config = AnalysisConfig.for_string_db(min_score=400)
        assert config.delimiter == " "
        assert config.score_column == 2
        assert config.min_score == 400
        assert config.weight_column is None

    def test_from_mapping_nested(self):
        config = AnalysisConfig.from_mapping(
            {
                "delimiter": ",",
                "graph": {"allow_self_loops": True, "duplicates": "sum"},
                "louvain": {"resolution": 0.8},
                "betweenness_workers": 4,
            }
        )
        assert config.delimiter == ","
        assert config.graph == GraphConfig(allow_self_loops=True, duplicates="sum")
        assert config.louvain.resolution == 0.8
        assert config.betweenness_workers == 4

    def test_from_mapping_ignores_unknown_keys(self):
        config = AnalysisConfig.from_mapping({"colour": "red"})
        assert config == AnalysisConfig()

    def test_invalid_workers(self):
        with pytest.raises(ValueError):
            AnalysisConfig(betweenness_workers=0)
