"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (MEMORYBANK__SECTION__KEY)
3. Project YAML (.memorybank/config.yaml)
4. Global YAML (~/.config/memorybank/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    MEMORYBANK__<SECTION>__<KEY>=<VALUE>

Examples:
    MEMORYBANK__LOGGING__LEVEL=DEBUG
    MEMORYBANK__ANALYSIS__DEPTH=deep
    MEMORYBANK__ANALYSIS__MAX_FILE_SIZE_KB=256
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from memorybank.config.constants import (
    GITHUB_DIR,
    INDEX_DOCUMENT_NAME,
    MEMORY_BANK_DIRNAME,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
AnalysisDepth = Literal["shallow", "medium", "deep"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        MEMORYBANK__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every parsed file.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class AnalysisConfig(BaseModel):
    """Source analysis configuration.

    Env vars:
        MEMORYBANK__ANALYSIS__DEPTH: Default analysis depth preset
        MEMORYBANK__ANALYSIS__MAX_FILE_SIZE_KB: Skip parsing files larger than this
    """

    depth: AnalysisDepth = Field(
        default="medium",
        description="Directory depth preset: shallow=2, medium=4, deep=6 levels.",
    )
    max_file_size_kb: int = Field(
        default=512,
        description="Source files larger than this are counted but not parsed.",
    )
    excluded_dirs: list[str] = Field(
        default_factory=list,
        description="Extra directory names to prune in addition to the built-in set.",
    )

    @field_validator("max_file_size_kb")
    @classmethod
    def validate_max_file_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"max_file_size_kb must be positive, got {v}")
        return v


class MemoryBankConfig(BaseModel):
    """Memory bank layout, relative to the project root.

    Env vars:
        MEMORYBANK__MEMORY_BANK__DIRECTORY: Memory bank directory
        MEMORYBANK__MEMORY_BANK__INDEX_DOCUMENT: Index document path
    """

    directory: str = Field(
        default=f"{GITHUB_DIR}/{MEMORY_BANK_DIRNAME}",
        description="Memory bank directory relative to the project root.",
    )
    index_document: str = Field(
        default=f"{GITHUB_DIR}/{INDEX_DOCUMENT_NAME}",
        description="Index document expected to reference every memory bank file.",
    )

    @field_validator("directory", "index_document")
    @classmethod
    def validate_relative(cls, v: str) -> str:
        if Path(v).is_absolute() or ".." in Path(v).parts:
            raise ValueError(f"Path must be relative to the project root: {v}")
        return v

    def memory_bank_dir(self, project_root: Path) -> Path:
        return project_root / self.directory

    def index_path(self, project_root: Path) -> Path:
        return project_root / self.index_document


class MemoryBankSettings(BaseModel):
    """Root configuration for memorybank.

    All settings can be configured via:
    1. Environment variables: MEMORYBANK__SECTION__KEY
    2. YAML config files (project or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    memory_bank: MemoryBankConfig = Field(default_factory=MemoryBankConfig)
