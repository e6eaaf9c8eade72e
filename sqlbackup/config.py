"""Configuration management for SQL Backup."""

import tempfile
from pathlib import Path
from typing import Annotated, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode
from sqlalchemy.engine import URL

from .models.dump import ObjectFilter, Section, SectionSelection, split_list


class DatabaseConfig(BaseSettings):
    """MySQL connection configuration."""

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=3306, description="Database port")
    database: str = Field(..., description="Database name")
    user: str = Field(default="root", description="Database user")
    password: str = Field(default="", description="Database password")
    charset: str = Field(default="utf8mb4", description="Connection character set")

    class Config:
        env_prefix = "MYSQL_"
        env_file = ".env"
        extra = "ignore"
        frozen = True

    @property
    def connection_url(self) -> URL:
        """Get SQLAlchemy connection URL for the pymysql driver."""
        return URL.create(
            "mysql+pymysql",
            username=self.user,
            password=self.password or None,
            host=self.host,
            port=self.port,
            database=self.database,
            query={"charset": self.charset},
        )


class DumpConfig(BaseSettings):
    """Configuration for what a dump contains and where it goes."""

    # Exact names or prefix wildcards ("wp_*"); empty = every table and view
    tables: Annotated[list[str], NoDecode] = Field(
        default=[],
        description="Tables and views to include"
    )

    # Empty = every section
    show: Annotated[list[Section], NoDecode] = Field(
        default=[],
        description="Sections to generate (DB, TABLES, VIEWS, ROUTINES, DATA)"
    )

    batch_size: int = Field(
        default=1000,
        gt=0,
        description="Maximum rows per INSERT statement"
    )

    folder: Optional[Path] = Field(
        default=None,
        description="Destination folder of backup files (default: system temp dir)"
    )

    db_charset: str = Field(default="utf8mb4", description="Character set of CREATE DATABASE")
    db_collation: str = Field(default="utf8mb4_general_ci", description="Collation of CREATE DATABASE")

    class Config:
        env_prefix = "DUMP_"
        extra = "ignore"

    @field_validator("tables", mode="before")
    @classmethod
    def _split_tables(cls, value):
        return split_list(value)

    @field_validator("show", mode="before")
    @classmethod
    def _parse_sections(cls, value):
        return [Section.parse(name) for name in split_list(value)]

    @property
    def object_filter(self) -> ObjectFilter:
        return ObjectFilter(patterns=list(self.tables))

    @property
    def sections(self) -> SectionSelection:
        return SectionSelection(sections=frozenset(self.show))

    @property
    def output_folder(self) -> Path:
        """Folder for backup files, falling back to the temp directory."""
        return self.folder if self.folder else Path(tempfile.gettempdir())


class AppConfig(BaseSettings):
    """Main application configuration."""

    database: DatabaseConfig
    dump: DumpConfig = Field(default_factory=DumpConfig)

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    verbose: bool = Field(default=False, description="Verbose output")

    class Config:
        env_prefix = "APP_"
        extra = "ignore"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "AppConfig":
        """Load configuration from environment and .env file."""
        if env_file and Path(env_file).exists():
            from dotenv import load_dotenv
            load_dotenv(env_file)

        return cls(
            database=DatabaseConfig(),
            dump=DumpConfig(),
        )

    @classmethod
    def from_args(
        cls,
        host: Optional[str] = None,
        port: Optional[int] = None,
        database: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        tables: Optional[str] = None,
        show: Optional[str] = None,
        folder: Optional[str] = None,
        batch_size: Optional[int] = None,
        verbose: bool = False,
    ) -> "AppConfig":
        """Create configuration from command line arguments."""
        # Only pass arguments that are not None to allow Pydantic to use env vars/defaults
        db_kwargs = {}
        if host is not None: db_kwargs["host"] = host
        if port is not None: db_kwargs["port"] = port
        if database is not None: db_kwargs["database"] = database
        if user is not None: db_kwargs["user"] = user
        if password is not None: db_kwargs["password"] = password

        dump_kwargs = {}
        if tables is not None: dump_kwargs["tables"] = tables
        if show is not None: dump_kwargs["show"] = show
        if folder is not None: dump_kwargs["folder"] = Path(folder)
        if batch_size is not None: dump_kwargs["batch_size"] = batch_size

        extra = {"verbose": True, "log_level": "DEBUG"} if verbose else {}
        return cls(
            database=DatabaseConfig(**db_kwargs),
            dump=DumpConfig(**dump_kwargs),
            **extra,
        )
