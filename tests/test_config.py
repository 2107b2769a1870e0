"""Tests for configuration management."""

import json

import pytest

from pyfstree.config import Config, validate_batch_size, validate_hash_algorithm
from pyfstree.exceptions import TreeConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove pyfstree environment variables for every test."""
    for name in (
        "PYFSTREE_CONFIG_DIR",
        "PYFSTREE_IGNORE",
        "PYFSTREE_HASH_ALGORITHM",
        "PYFSTREE_BATCH_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config(temp_dir):
    """Create a configuration rooted in a temporary directory."""
    return Config(config_dir=temp_dir / "cfg")


class TestConfig:
    """Tests for Config."""

    def test_defaults(self, config):
        """Test defaults when no file or environment is present."""
        assert config.default_exclusions == []
        assert config.hash_algorithm == "sha512"
        assert config.batch_size is None

    def test_config_path(self, config, temp_dir):
        """Test the configuration file location."""
        assert config.get_config_path() == temp_dir / "cfg" / "config.json"

    def test_config_dir_from_environment(self, monkeypatch, temp_dir):
        """Test PYFSTREE_CONFIG_DIR relocates the configuration."""
        monkeypatch.setenv("PYFSTREE_CONFIG_DIR", str(temp_dir / "env"))
        assert Config().get_config_path() == temp_dir / "env" / "config.json"

    def test_save_and_load(self, config):
        """Test saved settings are read back."""
        config.save_default_exclusions(["node_modules", ".git"])
        config.save_hash_algorithm("sha256")
        config.save_batch_size(64)

        assert config.default_exclusions == ["node_modules", ".git"]
        assert config.hash_algorithm == "sha256"
        assert config.batch_size == 64
        data = json.loads(config.get_config_path().read_text())
        assert data["hash_algorithm"] == "sha256"

    def test_save_batch_size_none_clears(self, config):
        """Test saving None restores the descriptor-derived batch size."""
        config.save_batch_size(10)
        config.save_batch_size(None)
        assert config.batch_size is None

    def test_environment_overrides_file(self, monkeypatch, config):
        """Test environment variables take precedence over the file."""
        config.save_default_exclusions(["from-file"])
        config.save_hash_algorithm("sha256")
        monkeypatch.setenv("PYFSTREE_IGNORE", "[a, b]")
        monkeypatch.setenv("PYFSTREE_HASH_ALGORITHM", "md5")
        monkeypatch.setenv("PYFSTREE_BATCH_SIZE", "8")

        assert config.default_exclusions == ["a", "b"]
        assert config.hash_algorithm == "md5"
        assert config.batch_size == 8

    def test_invalid_json(self, config):
        """Test a corrupt file raises TreeConfigError."""
        path = config.get_config_path()
        path.parent.mkdir(parents=True)
        path.write_text("{not json")

        with pytest.raises(TreeConfigError, match="Invalid configuration file"):
            config.hash_algorithm

    def test_non_object_file(self, config):
        """Test a file that is not a JSON object is rejected."""
        path = config.get_config_path()
        path.parent.mkdir(parents=True)
        path.write_text("[1, 2]")

        with pytest.raises(TreeConfigError):
            config.default_exclusions

    def test_invalid_exclusions_type(self, config):
        """Test default_exclusions must be a list of strings."""
        path = config.get_config_path()
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"default_exclusions": "node_modules"}))

        with pytest.raises(TreeConfigError):
            config.default_exclusions

    def test_to_dict(self, config):
        """Test the effective settings summary."""
        data = config.to_dict()
        assert data["hash_algorithm"] == "sha512"
        assert data["config_path"].endswith("config.json")


class TestValidators:
    """Tests for value validators."""

    def test_known_algorithm(self):
        """Test hashlib algorithms are accepted."""
        assert validate_hash_algorithm("sha1") == "sha1"

    def test_unknown_algorithm(self):
        """Test unknown algorithms are rejected."""
        with pytest.raises(TreeConfigError, match="Unknown hash algorithm"):
            validate_hash_algorithm("nope")

    def test_variable_length_algorithm(self):
        """Test shake digests are rejected."""
        with pytest.raises(TreeConfigError):
            validate_hash_algorithm("shake_256")

    def test_batch_size(self):
        """Test batch sizes are coerced to positive integers."""
        assert validate_batch_size("16") == 16
        with pytest.raises(TreeConfigError):
            validate_batch_size(0)
        with pytest.raises(TreeConfigError):
            validate_batch_size("many")
