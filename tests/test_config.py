"""
Tests for configuration loading — config.yml and backend files.
"""

import textwrap
from pathlib import Path

import pytest

from upm.backends.prober import AvailabilityProber
from upm.backends.registry import build_registry
from upm.core.config.backend_loader import discover_backends, load_backend
from upm.core.config.loader import (
    ConfigError,
    default_config_path,
    find_config_file,
    load_settings,
)
from upm.core.models import Action, Arity, Settings


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch):
    """Keep the user's real config out of every test."""
    monkeypatch.delenv("UPM_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))


@pytest.fixture
def config_yml(tmp_path: Path) -> Path:
    content = textwrap.dedent("""\
        parallel: false
        max_workers: 2
        timeout: 30
        escalation: [doas]
        managers:
          exclude: [snap]
        aliases:
          apt:
            fd: fd-find
        backend_dirs:
          - backends.d
    """)
    path = tmp_path / "config.yml"
    path.write_text(content)
    return path


class TestFindConfigFile:
    def test_explicit_wins(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("UPM_CONFIG", str(tmp_path / "env.yml"))
        assert find_config_file(tmp_path / "cli.yml") == (tmp_path / "cli.yml", True)

    def test_env_var(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("UPM_CONFIG", str(tmp_path / "env.yml"))
        assert find_config_file() == (tmp_path / "env.yml", True)

    def test_default_location(self, tmp_path: Path):
        path = default_config_path()
        assert path == tmp_path / "xdg" / "upm" / "config.yml"
        assert find_config_file() == (None, False)

        path.parent.mkdir(parents=True)
        path.write_text("parallel: true\n")
        assert find_config_file() == (path, False)


class TestLoadSettings:
    def test_no_file_gives_defaults(self):
        settings = load_settings()
        assert settings.parallel is True
        assert settings.backends == []

    def test_full_file(self, config_yml: Path):
        settings = load_settings(config_yml)
        assert settings.parallel is False
        assert settings.max_workers == 2
        assert settings.timeout == 30
        assert settings.escalation == ["doas"]
        assert settings.managers.exclude == ["snap"]
        assert settings.aliases == {"apt": {"fd": "fd-find"}}

    def test_backend_dirs_relative_to_file(self, config_yml: Path):
        settings = load_settings(config_yml)
        assert settings.backend_dirs == [str((config_yml.parent / "backends.d").resolve())]

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("")
        assert load_settings(path).parallel is True

    def test_missing_explicit_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Config file not found"):
            load_settings(tmp_path / "nope.yml")

    def test_missing_env_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("UPM_CONFIG", str(tmp_path / "nope.yml"))
        with pytest.raises(ConfigError, match="Config file not found"):
            load_settings()

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("managers: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_settings(path)

    def test_invalid_values(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("max_workers: 0\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_settings(path)

    def test_inline_backend_validated(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text(textwrap.dedent("""\
            backends:
              - name: broken
                actions:
                  install:
                    args: [install]
        """))
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_settings(path)


class TestBackendLoader:
    def test_name_from_stem(self, tmp_path: Path):
        path = tmp_path / "yay.yml"
        path.write_text(textwrap.dedent("""\
            privilege: false
            actions:
              install:
                args: [-S, --noconfirm, "{packages}"]
              update:
                args: [-Syu]
                arity: none
        """))
        backend = load_backend(path)
        assert backend.name == "yay"
        assert backend.executable == "yay"
        assert backend.template(Action.UPDATE).arity == Arity.NONE

    def test_explicit_name(self, tmp_path: Path):
        path = tmp_path / "whatever.yaml"
        path.write_text("name: pipx\n")
        assert load_backend(path).name == "pipx"

    def test_invalid_definition(self, tmp_path: Path):
        path = tmp_path / "bad.yml"
        path.write_text("actions:\n  fly:\n    args: [up]\n")
        with pytest.raises(ConfigError, match="Invalid backend definition"):
            load_backend(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "bad.yml"
        path.write_text("[1, 2]\n")
        with pytest.raises(ConfigError, match="not a mapping"):
            load_backend(path)

    def test_discover_precedence(self, tmp_path: Path):
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        (first / "yay.yml").write_text("description: first\n")
        (second / "yay.yml").write_text("description: second\n")
        (second / "paru.yaml").write_text("description: paru\n")
        (second / "notes.txt").write_text("ignored\n")

        backends = discover_backends([first, tmp_path / "missing", second])
        assert [b.name for b in backends] == ["yay", "paru"]
        assert backends[0].description == "first"

    def test_discover_sorted_within_directory(self, tmp_path: Path):
        for name in ("zz", "aa", "mm"):
            (tmp_path / f"{name}.yml").write_text("{}\n")
        assert [b.name for b in discover_backends([tmp_path])] == ["aa", "mm", "zz"]

    def test_relative_executable_next_to_file(self, tmp_path: Path, monkeypatch, fake_bin):
        backends_d, make = fake_bin
        wrapper = make("wrapper.sh", 'echo "wrapped $*"')
        (backends_d / "wrapped.yml").write_text(textwrap.dedent("""\
            executable: ./wrapper.sh
            actions:
              install:
                args: [install, "{packages}"]
        """))
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        monkeypatch.chdir(elsewhere)

        backend = load_backend(backends_d / "wrapped.yml")
        assert backend.executable == str(wrapper.resolve())

        registry = build_registry(Settings(backend_dirs=[str(backends_d)]))
        active = AvailabilityProber(search_path=str(elsewhere)).probe(registry)
        assert active.names() == ["wrapped"]
        assert active.location("wrapped") == str(wrapper.resolve())

    def test_other_executables_left_alone(self, tmp_path: Path):
        path = tmp_path / "yay.yml"
        path.write_text("executable: yay-bin\n")
        assert load_backend(path).executable == "yay-bin"
