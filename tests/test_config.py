"""Unit tests for configuration loading."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError
from sqlbackup.config import AppConfig, DatabaseConfig, DumpConfig
from sqlbackup.models.dump import Section


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("MYSQL_HOST", "MYSQL_PORT", "MYSQL_DATABASE", "MYSQL_USER", "MYSQL_PASSWORD",
                "DUMP_TABLES", "DUMP_SHOW", "DUMP_BATCH_SIZE", "DUMP_FOLDER"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(Path(__file__).parent)


class TestDatabaseConfig:
    """Tests for DatabaseConfig."""

    def test_defaults(self):
        config = DatabaseConfig(database="acme")
        assert config.host == "localhost"
        assert config.port == 3306
        assert config.user == "root"
        assert config.password == ""

    def test_database_required(self):
        with pytest.raises(ValidationError):
            DatabaseConfig()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("MYSQL_DATABASE", "acme")
        monkeypatch.setenv("MYSQL_PORT", "3307")
        config = DatabaseConfig()
        assert config.database == "acme"
        assert config.port == 3307

    def test_connection_url_escapes_credentials(self):
        config = DatabaseConfig(database="acme", user="bob", password="p@ss/word")
        url = config.connection_url
        assert url.drivername == "mysql+pymysql"
        assert url.password == "p@ss/word"
        assert url.query["charset"] == "utf8mb4"
        assert "p%40ss%2Fword" in url.render_as_string(hide_password=False)


class TestDumpConfig:
    """Tests for DumpConfig."""

    def test_defaults(self):
        config = DumpConfig()
        assert config.tables == []
        assert config.show == []
        assert config.batch_size == 1000
        assert config.sections.is_default
        assert config.object_filter.is_empty

    def test_comma_strings(self):
        config = DumpConfig(tables="wp_*, mytable1", show="tables,data")
        assert config.tables == ["wp_*", "mytable1"]
        assert config.show == [Section.TABLES, Section.DATA]

    def test_lists(self):
        config = DumpConfig(tables=["wp_*"], show=["PROCEDURES"])
        assert config.object_filter.patterns == ["wp_*"]
        assert config.sections.sections == frozenset({Section.ROUTINES})

    def test_env_comma_strings(self, monkeypatch):
        monkeypatch.setenv("DUMP_TABLES", "wp_*,log")
        monkeypatch.setenv("DUMP_SHOW", "TABLES,DATA")
        config = DumpConfig()
        assert config.tables == ["wp_*", "log"]
        assert config.show == [Section.TABLES, Section.DATA]

    def test_unknown_section(self):
        with pytest.raises(ValidationError):
            DumpConfig(show="TABLES,INDEXES")

    def test_batch_size_positive(self):
        with pytest.raises(ValidationError):
            DumpConfig(batch_size=0)

    def test_output_folder(self, tmp_path):
        assert DumpConfig(folder=tmp_path).output_folder == tmp_path
        assert DumpConfig().output_folder.exists()


class TestAppConfig:
    """Tests for AppConfig."""

    def test_from_args(self):
        config = AppConfig.from_args(database="acme", tables="wp_*", show="DATA", batch_size=10, folder="/tmp/x")
        assert config.database.database == "acme"
        assert config.dump.tables == ["wp_*"]
        assert config.dump.show == [Section.DATA]
        assert config.dump.batch_size == 10
        assert config.dump.folder == Path("/tmp/x")
        assert config.log_level == "INFO"

    def test_args_override_env(self, monkeypatch):
        monkeypatch.setenv("MYSQL_DATABASE", "from_env")
        monkeypatch.setenv("MYSQL_HOST", "db.internal")
        config = AppConfig.from_args(database="from_args")
        assert config.database.database == "from_args"
        assert config.database.host == "db.internal"

    def test_verbose_sets_debug(self):
        config = AppConfig.from_args(database="acme", verbose=True)
        assert config.verbose is True
        assert config.log_level == "DEBUG"

    def test_from_env_file(self, tmp_path):
        env_file = tmp_path / "backup.env"
        env_file.write_text("MYSQL_DATABASE=envdb\nDUMP_SHOW=VIEWS\n")
        try:
            config = AppConfig.from_env(str(env_file))
        finally:
            # load_dotenv writes straight into os.environ
            os.environ.pop("MYSQL_DATABASE", None)
            os.environ.pop("DUMP_SHOW", None)
        assert config.database.database == "envdb"
        assert config.dump.show == [Section.VIEWS]
