"""Unit tests for configuration management."""

from pathlib import Path

import pytest
import yaml

from saveonwrite.config import (
    CodecConfig,
    GuardConfig,
    HashConfig,
    LoggingConfig,
    SaveOnWriteConfig,
    StorageConfig,
    load_config,
)
from saveonwrite.core.hashing import ContentHasher
from saveonwrite.persistence.codecs import JsonCodec
from saveonwrite.persistence.storage import FileStorage


class TestDefaults:
    """Test default configuration values."""

    def test_section_defaults(self):
        """Test every section has sensible defaults."""
        config = SaveOnWriteConfig()

        assert config.hash == HashConfig(algorithm="blake2b")
        assert config.codec == CodecConfig(indent=None, sort_keys=False, encoding="utf-8")
        assert config.guard == GuardConfig(equality_check=False)
        assert config.storage == StorageConfig(create_parents=True)
        assert config.logging == LoggingConfig(level="INFO", format="console", file=None)

    def test_sections_not_shared(self):
        """Test default_factory gives each config its own sections."""
        first = SaveOnWriteConfig()
        second = SaveOnWriteConfig()
        first.codec.indent = 2

        assert second.codec.indent is None


class TestBuilders:
    """Test component factories."""

    def test_build_hasher(self):
        """Test hasher uses the configured algorithm."""
        hasher = SaveOnWriteConfig(hash=HashConfig(algorithm="sha1")).build_hasher()

        assert isinstance(hasher, ContentHasher)
        assert hasher.algorithm == "sha1"

    def test_build_hasher_invalid_algorithm(self):
        """Test an invalid algorithm surfaces when building."""
        with pytest.raises(ValueError):
            SaveOnWriteConfig(hash=HashConfig(algorithm="nope")).build_hasher()

    def test_build_codec(self):
        """Test codec settings are forwarded."""
        codec = SaveOnWriteConfig(codec=CodecConfig(indent=2, sort_keys=True)).build_codec()

        assert isinstance(codec, JsonCodec)
        assert codec.indent == 2
        assert codec.sort_keys is True

    def test_build_storage(self):
        """Test storage settings are forwarded."""
        storage = SaveOnWriteConfig(storage=StorageConfig(create_parents=False)).build_storage()

        assert isinstance(storage, FileStorage)
        assert storage.create_parents is False


class TestFileLoading:
    """Test YAML loading and saving."""

    def test_from_file(self, tmp_path):
        """Test all sections are parsed."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            yaml.dump(
                {
                    "hash": {"algorithm": "sha256"},
                    "codec": {"indent": 2, "sort_keys": True},
                    "guard": {"equality_check": True},
                    "storage": {"create_parents": False},
                    "logging": {"level": "DEBUG", "format": "json", "file": "logs/app.log"},
                }
            )
        )

        config = SaveOnWriteConfig.from_file(config_file)

        assert config.hash.algorithm == "sha256"
        assert config.codec.indent == 2
        assert config.codec.sort_keys is True
        assert config.guard.equality_check is True
        assert config.storage.create_parents is False
        assert config.logging.level == "DEBUG"
        assert config.logging.file == Path("logs/app.log")

    def test_partial_file(self, tmp_path):
        """Test missing sections fall back to defaults."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("guard:\n  equality_check: true\n")

        config = SaveOnWriteConfig.from_file(config_file)

        assert config.guard.equality_check is True
        assert config.hash.algorithm == "blake2b"

    def test_empty_file(self, tmp_path):
        """Test an empty file yields defaults."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        assert SaveOnWriteConfig.from_file(config_file) == SaveOnWriteConfig()

    def test_invalid_yaml(self, tmp_path):
        """Test invalid YAML raises ValueError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("hash: [unclosed")

        with pytest.raises(ValueError, match="Invalid YAML"):
            SaveOnWriteConfig.from_file(config_file)

    def test_non_mapping(self, tmp_path):
        """Test a top-level list raises ValueError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="expected dictionary, got list"):
            SaveOnWriteConfig.from_file(config_file)

    def test_unknown_key(self, tmp_path):
        """Test unknown keys in a section raise ValueError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("hash:\n  colour: blue\n")

        with pytest.raises(ValueError, match="Unknown configuration key"):
            SaveOnWriteConfig.from_file(config_file)

    def test_to_file_round_trip(self, tmp_path):
        """Test a saved config loads back equal."""
        config = SaveOnWriteConfig(
            codec=CodecConfig(indent=4),
            logging=LoggingConfig(level="WARNING", file=Path("out.log")),
        )
        config_file = tmp_path / "nested" / "config.yaml"

        config.to_file(config_file)

        assert SaveOnWriteConfig.from_file(config_file) == config

    def test_to_file_omits_unset_log_file(self, tmp_path):
        """Test a None log file is not written."""
        config_file = tmp_path / "config.yaml"

        SaveOnWriteConfig().to_file(config_file)

        data = yaml.safe_load(config_file.read_text())
        assert "file" not in data["logging"]


class TestLoadConfig:
    """Test load_config helper."""

    def test_defaults_without_file(self):
        """Test no file gives defaults."""
        assert load_config() == SaveOnWriteConfig()

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_loads_file(self, tmp_path):
        """Test an existing file is loaded."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("codec:\n  sort_keys: true\n")

        assert load_config(config_file).codec.sort_keys is True
