"""Engine configuration loaded from environment variables."""
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv


def _parse_bool(value: str | bool | None) -> bool:
    """Parse boolean value from various formats."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes", "on", "enabled")
    return bool(value)


def _getenv(key: str, default: str = "") -> str:
    """Get environment variable with default."""
    return os.getenv(key, default)


def load_environment(env_file: Optional[Path] = None) -> Optional[Path]:
    """Load a .env file into the process environment.

    Existing environment variables are never overridden.

    Args:
        env_file: Explicit file to load. If None, searches the current and
            parent directories.

    Returns:
        The file that was loaded, or None
    """
    candidates = [env_file] if env_file else [Path(".env"), Path("../.env")]
    for env_path in candidates:
        if env_path is not None and env_path.exists():
            load_dotenv(env_path, override=False)
            return env_path
    return None


@dataclass
class WorkflowConfig:
    """Workflow engine configuration loaded from environment variables."""

    # ========== Error Policy ==========
    continue_on_error: bool = field(
        default_factory=lambda: _parse_bool(_getenv("WORKFLOW_CONTINUE_ON_ERROR", "true"))
    )
    skip_incompatible: bool = field(
        default_factory=lambda: _parse_bool(_getenv("WORKFLOW_SKIP_INCOMPATIBLE", "true"))
    )

    # ========== Commit Behaviour ==========
    auto_commit: bool = field(default_factory=lambda: _parse_bool(_getenv("WORKFLOW_AUTO_COMMIT", "true")))

    # ========== Language Detection ==========
    default_source_language: str = field(
        default_factory=lambda: _getenv("WORKFLOW_DEFAULT_SOURCE_LANGUAGE", "en")
    )
    source_language_meta_key: str = field(
        default_factory=lambda: _getenv("WORKFLOW_SOURCE_LANGUAGE_META_KEY", "_polytrans_source_language")
    )

    # ========== Virtual Workflows ==========
    enable_virtual_workflows: bool = field(
        default_factory=lambda: _parse_bool(_getenv("WORKFLOW_ENABLE_VIRTUAL", "false"))
    )

    # ========== Logging ==========
    log_level: str = field(default_factory=lambda: _getenv("LOG_LEVEL", "INFO").upper())
    log_dir: Path = field(default_factory=lambda: Path(_getenv("LOG_DIR", "./logs")))
    log_to_file: bool = field(default_factory=lambda: _parse_bool(_getenv("LOG_TO_FILE", "false")))

    def __post_init__(self):
        """Normalise values that may arrive as raw strings."""
        self.default_source_language = self.default_source_language.strip() or "en"
        if isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "continue_on_error": self.continue_on_error,
            "skip_incompatible": self.skip_incompatible,
            "auto_commit": self.auto_commit,
            "default_source_language": self.default_source_language,
            "source_language_meta_key": self.source_language_meta_key,
            "enable_virtual_workflows": self.enable_virtual_workflows,
            "log_level": self.log_level,
            "log_dir": str(self.log_dir),
            "log_to_file": self.log_to_file,
        }


# Singleton instance with thread-safe initialization
_config_instance: Optional[WorkflowConfig] = None
_config_lock = threading.Lock()


def get_config() -> WorkflowConfig:
    """Get global config instance (singleton pattern, thread-safe)."""
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                load_environment()
                _config_instance = WorkflowConfig()
    return _config_instance


def reset_config() -> None:
    """Drop the cached config instance (useful for testing)."""
    global _config_instance
    with _config_lock:
        _config_instance = None


__all__ = ["WorkflowConfig", "get_config", "load_environment", "reset_config"]
