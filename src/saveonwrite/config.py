"""Configuration management for saveonwrite."""

from dataclasses import asdict, dataclass, field
from pathlib import Path

import yaml

from .core.hashing import DEFAULT_ALGORITHM, ContentHasher
from .observability.logger import configure_logging
from .persistence.codecs import JsonCodec
from .persistence.storage import FileStorage


@dataclass
class HashConfig:
    """Content digest configuration."""

    algorithm: str = DEFAULT_ALGORITHM  # Any fixed-size hashlib algorithm


@dataclass
class CodecConfig:
    """JSON encoding configuration."""

    indent: int | None = None
    sort_keys: bool = False
    encoding: str = "utf-8"


@dataclass
class GuardConfig:
    """Access guard configuration."""

    equality_check: bool = False  # Fall back to == when digests match


@dataclass
class StorageConfig:
    """File storage configuration."""

    create_parents: bool = True


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "console"  # console or json
    file: Path | None = None

    def apply(self) -> None:
        """Configure structlog and stdlib logging from this section."""
        configure_logging(
            level=self.level,
            json_logs=self.format == "json",
            log_file=self.file,
        )


@dataclass
class SaveOnWriteConfig:
    """
    Complete configuration for saveonwrite.

    This combines all configuration sections.
    """

    hash: HashConfig = field(default_factory=HashConfig)
    codec: CodecConfig = field(default_factory=CodecConfig)
    guard: GuardConfig = field(default_factory=GuardConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def build_hasher(self) -> ContentHasher:
        """Create the content hasher described by the hash section."""
        return ContentHasher(self.hash.algorithm)

    def build_codec(self) -> JsonCodec:
        """Create the JSON codec described by the codec section."""
        return JsonCodec(
            indent=self.codec.indent,
            sort_keys=self.codec.sort_keys,
            encoding=self.codec.encoding,
        )

    def build_storage(self) -> FileStorage:
        """Create the file storage described by the storage section."""
        return FileStorage(create_parents=self.storage.create_parents)

    @classmethod
    def from_file(cls, config_path: Path) -> "SaveOnWriteConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML config file

        Returns:
            SaveOnWriteConfig instance

        Raises:
            ValueError: If the file is not valid YAML or not a mapping
        """
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}") from e

        # An empty file loads as None
        if data is None:
            data = {}

        if not isinstance(data, dict):
            raise ValueError(
                f"Invalid configuration file structure in {config_path}: "
                f"expected dictionary, got {type(data).__name__}"
            )

        logging_data = dict(data.get("logging") or {})
        if logging_data.get("file"):
            logging_data["file"] = Path(logging_data["file"])

        try:
            return cls(
                hash=HashConfig(**(data.get("hash") or {})),
                codec=CodecConfig(**(data.get("codec") or {})),
                guard=GuardConfig(**(data.get("guard") or {})),
                storage=StorageConfig(**(data.get("storage") or {})),
                logging=LoggingConfig(**logging_data),
            )
        except TypeError as e:
            raise ValueError(f"Unknown configuration key in {config_path}: {e}") from e

    def to_file(self, config_path: Path) -> None:
        """
        Save configuration to YAML file.

        Args:
            config_path: Path to save config file
        """
        data = asdict(self)
        data["logging"] = {
            k: str(v) if isinstance(v, Path) else v
            for k, v in data["logging"].items()
            if v is not None
        }

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def load_config(config_file: Path | None = None) -> SaveOnWriteConfig:
    """
    Load configuration from file, or defaults when no file is given.

    Args:
        config_file: Optional path to YAML config file

    Returns:
        SaveOnWriteConfig instance

    Raises:
        FileNotFoundError: If config_file is specified but doesn't exist
    """
    if config_file:
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_file}")
        return SaveOnWriteConfig.from_file(config_file)
    return SaveOnWriteConfig()
