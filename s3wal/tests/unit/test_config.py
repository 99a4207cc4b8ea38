"""Tests for configuration loading."""

import pytest

from s3wal.utils.config import Config, get_config, reset_config

ENV_VARS = [
    "AWS_BUCKET_NAME",
    "AWS_PREFIX",
    "AWS_REGION",
    "AWS_ENDPOINT_URL",
    "S3WAL_DELETE_BATCH_SIZE",
    "LOG_LEVEL",
    "LOG_FORMAT",
]


class TestConfig:
    """Test Config layering."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch, tmp_path):
        """Clear environment overrides and run outside any .env file."""
        for name in ENV_VARS:
            # setenv first so values exported by load_dotenv are undone
            monkeypatch.setenv(name, "")
            monkeypatch.delenv(name)
        monkeypatch.chdir(tmp_path)
        reset_config()
        yield
        reset_config()

    def test_defaults(self):
        """Test built-in defaults."""
        config = Config()

        assert config.get("storage.prefix") == "wal"
        assert config.get("storage.delete_batch_size") == 1000
        assert config.get("storage.bucket") is None
        assert config.get("logging.level") == "INFO"

    def test_missing_key_returns_default(self):
        """Test dot-notation lookup of unknown keys."""
        config = Config()

        assert config.get("storage.nope", "fallback") == "fallback"
        assert config.get("nope.deeper") is None

    def test_yaml_file_overrides_defaults(self, tmp_path):
        """Test merging a user configuration file."""
        path = tmp_path / "s3wal.yaml"
        path.write_text("storage:\n  bucket: from-file\n  delete_batch_size: 500\n")

        config = Config(str(path))

        assert config.get("storage.bucket") == "from-file"
        assert config.get("storage.delete_batch_size") == 500
        assert config.get("storage.prefix") == "wal"

    def test_empty_yaml_file(self, tmp_path):
        """Test that an empty file leaves defaults alone."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert Config(str(path)).get("storage.prefix") == "wal"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        """Test that environment variables win over files."""
        path = tmp_path / "s3wal.yaml"
        path.write_text("storage:\n  bucket: from-file\n")
        monkeypatch.setenv("AWS_BUCKET_NAME", "from-env")
        monkeypatch.setenv("AWS_PREFIX", "tenant/wal")
        monkeypatch.setenv("S3WAL_DELETE_BATCH_SIZE", "100")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        config = Config(str(path))

        assert config.get("storage.bucket") == "from-env"
        assert config.get("storage.prefix") == "tenant/wal"
        assert config.get("storage.delete_batch_size") == 100
        assert config.get("logging.level") == "DEBUG"

    def test_set_and_to_dict(self):
        """Test setting values and copying the tree."""
        config = Config()
        config.set("storage.region", "eu-west-1")
        snapshot = config.to_dict()
        snapshot["storage"]["region"] = "changed"

        assert config.get("storage.region") == "eu-west-1"

    def test_instances_do_not_share_state(self):
        """Test that defaults are copied per instance."""
        first = Config()
        first.set("storage.prefix", "changed")

        assert Config().get("storage.prefix") == "wal"

    def test_global_config(self):
        """Test the module-level singleton."""
        assert get_config() is get_config()
        first = get_config()
        reset_config()
        assert get_config() is not first

    def test_dotenv_file_sets_storage(self, tmp_path):
        """Test reading AWS_* settings from a .env file."""
        env_file = tmp_path / "settings.env"
        env_file.write_text(
            "AWS_BUCKET_NAME=bucket-from-dotenv\n"
            "AWS_PREFIX=dotenv/wal\n"
            "AWS_REGION=eu-central-1\n"
        )

        config = Config(env_file=str(env_file))

        assert config.get("storage.bucket") == "bucket-from-dotenv"
        assert config.get("storage.prefix") == "dotenv/wal"
        assert config.get("storage.region") == "eu-central-1"

    def test_dotenv_in_working_directory_is_found(self, tmp_path):
        """Test that a .env next to the tool is loaded by default."""
        (tmp_path / ".env").write_text("AWS_BUCKET_NAME=local-bucket\n")

        assert Config().get("storage.bucket") == "local-bucket"

    def test_environment_wins_over_dotenv(self, tmp_path, monkeypatch):
        """Test that real environment variables are not overridden."""
        env_file = tmp_path / ".env"
        env_file.write_text("AWS_BUCKET_NAME=from-dotenv\nAWS_PREFIX=dotenv/wal\n")
        monkeypatch.setenv("AWS_BUCKET_NAME", "from-environment")

        config = Config(env_file=str(env_file))

        assert config.get("storage.bucket") == "from-environment"
        assert config.get("storage.prefix") == "dotenv/wal"

    def test_missing_explicit_dotenv_raises_error(self, tmp_path):
        """Test that an explicit .env path must exist."""
        with pytest.raises(FileNotFoundError):
            Config(env_file=str(tmp_path / "missing.env"))

    def test_invalid_batch_size_names_variable(self, monkeypatch):
        """Test that a non-numeric batch size is reported clearly."""
        monkeypatch.setenv("S3WAL_DELETE_BATCH_SIZE", "abc")

        with pytest.raises(ValueError, match="S3WAL_DELETE_BATCH_SIZE"):
            Config()
