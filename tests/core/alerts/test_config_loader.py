"""
Condition Definition Loader Tests
"""

import textwrap

import pytest

from conditional_count.core.alerts.config_loader import AlertConfigLoader


def write_alerts(base_path, name, content):
    alerts_path = base_path / "alerts"
    alerts_path.mkdir(parents=True, exist_ok=True)
    (alerts_path / name).write_text(textwrap.dedent(content), encoding="utf-8")


@pytest.fixture
def config_path(tmp_path):
    write_alerts(tmp_path, "web.yml", """
        version: "1.0"
        conditions:
          - id: errors
            title: Too many errors
            stream_id: s1
            tags: [web]
            parameters:
              query: "level:3"
              time: 5
              threshold_type: more
              threshold: 10
          - id: quiet
            stream_id: s2
            enabled: false
            parameters:
              query: "*"
              threshold_type: LESS
              threshold: 1
    """)
    write_alerts(tmp_path, "infra.yaml", """
        conditions:
          - id: heartbeat
            stream_id: s1
            created_at: "2024-01-01T00:00:00Z"
            creator_user_id: admin
            parameters:
              query: "heartbeat"
              threshold_type: LESS
              threshold: 1
    """)
    return tmp_path


class TestAlertConfigLoader:

    def test_loads_all_files(self, config_path):
        loader = AlertConfigLoader(config_path)

        conditions = loader.load_all_conditions()

        assert [c.id for c in conditions] == ["errors", "quiet", "heartbeat"]
        errors = conditions[0]
        assert errors.title == "Too many errors"
        assert errors.parameters["threshold_type"] == "more"
        assert errors.enabled is True
        assert conditions[2].created_at.year == 2024

    def test_lookups(self, config_path):
        loader = AlertConfigLoader(config_path)

        assert loader.get_condition_by_id("quiet").stream_id == "s2"
        assert loader.get_condition_by_id("missing") is None
        assert [c.id for c in loader.get_conditions_for_stream("s1")] == ["errors", "heartbeat"]
        assert [c.id for c in loader.get_conditions_by_tag("web")] == ["errors"]
        assert [c.id for c in loader.get_enabled_conditions()] == ["errors", "heartbeat"]

    def test_results_are_cached_until_cleared(self, config_path):
        loader = AlertConfigLoader(config_path)
        first = loader.load_all_conditions()

        write_alerts(config_path, "more.yml", """
            conditions:
              - id: late
                stream_id: s3
                parameters: {query: x, threshold_type: MORE}
        """)

        assert loader.load_all_conditions() is first
        loader.clear_cache()
        assert "late" in [c.id for c in loader.load_all_conditions()]

    def test_missing_directory(self, tmp_path):
        assert AlertConfigLoader(tmp_path / "nowhere").load_all_conditions() == []

    def test_invalid_files_are_skipped(self, tmp_path, caplog):
        write_alerts(tmp_path, "a_broken.yml", "conditions: [ {id: x, ")
        write_alerts(tmp_path, "b_invalid.yml", """
            conditions:
              - title: no id or stream
        """)
        write_alerts(tmp_path, "c_good.yml", """
            conditions:
              - id: ok
                stream_id: s1
        """)

        conditions = AlertConfigLoader(tmp_path).load_all_conditions()

        assert [c.id for c in conditions] == ["ok"]
        assert "a_broken.yml" in caplog.text
        assert "b_invalid.yml" in caplog.text

    def test_empty_file(self, tmp_path):
        write_alerts(tmp_path, "empty.yml", "")

        assert AlertConfigLoader(tmp_path).load_all_conditions() == []

    def test_duplicate_ids_keep_first(self, tmp_path):
        write_alerts(tmp_path, "a.yml", """
            conditions:
              - {id: dup, stream_id: first}
        """)
        write_alerts(tmp_path, "b.yml", """
            conditions:
              - {id: dup, stream_id: second}
        """)

        conditions = AlertConfigLoader(tmp_path).load_all_conditions()

        assert len(conditions) == 1
        assert conditions[0].stream_id == "first"

    @pytest.mark.parametrize("content", ["- id: listed\n  stream_id: s1\n", "just a string\n", "42\n"])
    def test_non_mapping_files_are_skipped(self, tmp_path, caplog, content):
        write_alerts(tmp_path, "a_shape.yml", content)
        write_alerts(tmp_path, "b_good.yml", """
            conditions:
              - id: ok
                stream_id: s1
        """)

        conditions = AlertConfigLoader(tmp_path).load_all_conditions()

        assert [c.id for c in conditions] == ["ok"]
        assert "a_shape.yml" in caplog.text
