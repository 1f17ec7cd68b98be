"""Tests for configuration loading, validation and discovery."""

from pathlib import Path

import pytest

from logscope.core.config import CONFIG_FILENAME, Config, ConfigError, ConfigLoader


class TestConfigDefaults:
    """Tests for the default configuration."""

    def test_load_none_returns_defaults(self):
        config = ConfigLoader().load(None)
        assert config.stream.interval == 5.0
        assert config.stream.producer is None
        assert config.buffer.max_entries == 1000
        assert config.buffer.max_events == 500
        assert set(config.filter.levels) == {"INFO", "WARN", "ERROR"}
        assert config.filter.time_range == "1h"
        assert config.output.format == "text"
        assert config.patterns.custom == []

    def test_from_empty_dict(self):
        assert Config.from_dict({}) == Config()


class TestConfigLoading:
    """Tests for loading a single file."""

    def test_full_file(self, tmp_path):
        path = tmp_path / "logscope.toml"
        path.write_text("""
[stream]
interval = 2.5
scenario = "crashloop-1"
event_probability = 0.0

[buffer]
max_entries = 50

[filter]
levels = ["error", "warn"]
time_range = "5m"

[output]
color = false
format = "count"

[[patterns.custom]]
pattern = "disk full"
classification = "critical"
description = "Disk exhausted"
suggestion = "Free up space"
""")
        config = ConfigLoader().load(path)
        assert config.stream.interval == 2.5
        assert config.stream.scenario == "crashloop-1"
        assert config.buffer.max_entries == 50
        assert config.buffer.max_events == 500
        assert config.filter.levels == ["ERROR", "WARN"]
        assert config.filter.time_range == "5m"
        assert config.output.color is False
        assert config.output.format == "count"
        assert config.patterns.custom[0].matches("DISK FULL")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader().load(tmp_path / "nope.toml")

    def test_invalid_toml_reports_line(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text('[stream]\ninterval = 5\nscenario = "unterminated\n')
        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader().load(path)
        assert exc_info.value.line == 3
        assert exc_info.value.path == path

    @pytest.mark.parametrize("content,fragment", [
        ("[stream]\ninterval = 0\n", "interval"),
        ("[stream]\nevent_probability = 1.5\n", "event_probability"),
        ("[buffer]\nmax_entries = 0\n", "buffer sizes"),
        ('[filter]\nlevels = ["LOUD"]\n', "Unknown level"),
        ('[filter]\ntime_range = "2d"\n', "time_range"),
        ('[output]\nformat = "xml"\n', "output.format"),
        ('[stream]\ninterval = "soon"\n', "soon"),
    ])
    def test_invalid_values(self, tmp_path, content, fragment):
        path = tmp_path / "logscope.toml"
        path.write_text(content)
        with pytest.raises(ConfigError, match=fragment):
            ConfigLoader().load(path)

    def test_invalid_custom_pattern(self, tmp_path):
        path = tmp_path / "logscope.toml"
        path.write_text("""
[[patterns.custom]]
pattern = "[oops"
classification = "critical"
description = "Broken"
""")
        with pytest.raises(ConfigError, match="Invalid custom pattern #1"):
            ConfigLoader().load(path)

    def test_error_message_includes_path(self, tmp_path):
        path = tmp_path / "logscope.toml"
        path.write_text("[buffer]\nmax_events = -1\n")
        with pytest.raises(ConfigError, match="Error in"):
            ConfigLoader().load(path)


class TestConfigDiscovery:
    """Tests for config discovery and merging."""

    def test_no_configs(self, tmp_path):
        assert ConfigLoader().discover_configs(tmp_path) == []

    def test_discovery_order(self, tmp_path, monkeypatch):
        home = Path.home()
        user_config = home / ".config" / "logscope" / "config.toml"
        user_config.parent.mkdir(parents=True)
        user_config.write_text("[stream]\ninterval = 1\n")

        repo = tmp_path / "repo"
        work = repo / "sub"
        work.mkdir(parents=True)
        (repo / ".git").mkdir()
        (repo / CONFIG_FILENAME).write_text("[stream]\ninterval = 2\n")
        (work / CONFIG_FILENAME).write_text("[stream]\ninterval = 3\n")
        monkeypatch.delenv("LOGSCOPE_GIT_ROOT")

        configs = ConfigLoader().discover_configs(work)
        assert configs == [user_config, repo / CONFIG_FILENAME, work / CONFIG_FILENAME]

    def test_local_and_git_root_deduplicated(self, tmp_path, monkeypatch):
        (tmp_path / CONFIG_FILENAME).write_text("")
        monkeypatch.setenv("LOGSCOPE_GIT_ROOT", str(tmp_path))
        assert len(ConfigLoader().discover_configs(tmp_path)) == 1

    def test_merge_later_wins(self, tmp_path, monkeypatch):
        repo = tmp_path / "repo"
        repo.mkdir()
        (repo / CONFIG_FILENAME).write_text(
            '[stream]\ninterval = 2\nscenario = "imagepull-1"\n[output]\ncolor = false\n'
        )
        local = repo / "sub"
        local.mkdir()
        (local / CONFIG_FILENAME).write_text("[stream]\ninterval = 3\n")
        monkeypatch.setenv("LOGSCOPE_GIT_ROOT", str(repo))

        config = ConfigLoader().load_merged(local)
        assert config.stream.interval == 3
        assert config.stream.scenario == "imagepull-1"
        assert config.output.color is False

    def test_extra_file_overrides_all(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("[stream]\ninterval = 3\n")
        extra = tmp_path / "extra.toml"
        extra.write_text("[stream]\ninterval = 9\n")
        config = ConfigLoader().load_merged(tmp_path, extra=extra)
        assert config.stream.interval == 9

    def test_extra_file_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader().load_merged(tmp_path, extra=tmp_path / "missing.toml")

    def test_deep_merge(self):
        loader = ConfigLoader()
        merged = loader._deep_merge(
            {"stream": {"interval": 1, "scenario": "generic"}, "filter": {"levels": ["ERROR"]}},
            {"stream": {"interval": 2}, "filter": {"levels": ["INFO"]}},
        )
        assert merged == {
            "stream": {"interval": 2, "scenario": "generic"},
            "filter": {"levels": ["INFO"]},
        }
