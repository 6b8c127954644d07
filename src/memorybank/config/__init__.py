"""Config module exports."""

from memorybank.config.loader import load_config
from memorybank.config.models import (
    AnalysisConfig,
    LoggingConfig,
    MemoryBankConfig,
    MemoryBankSettings,
)

__all__ = [
    "load_config",
    "AnalysisConfig",
    "LoggingConfig",
    "MemoryBankConfig",
    "MemoryBankSettings",
]
