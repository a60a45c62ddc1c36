#!/usr/bin/env python3

"""
Configuration management for the gene scoring pipeline.

Centralized configuration with support for file-based configuration
and environment variable overrides.
"""

import os
import json
from dataclasses import dataclass, asdict, field
from typing import Optional, Dict, Any, List, Set

import yaml

from .data_structures import ModeOfInheritance, PriorityKind
from .exceptions import ConfigurationError
from .scoring import SCORING_MODES


def _parse_bool(value: str) -> bool:
    return value.lower() in ('true', '1', 'yes')


def _parse_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(',') if item.strip()]


def _parse_timeout(value: str) -> Optional[float]:
    return None if value.lower() in ('', 'none') else float(value)


@dataclass
class PipelineConfig:
    """Centralized configuration for the gene scoring pipeline."""

    # Scoring
    scoring_mode: str = 'raw'
    modes_of_inheritance: List[str] = field(default_factory=list)

    # Regulatory variant reassignment
    enable_regulatory_reassignment: bool = True
    reassignment_priority_kind: str = 'HIPHIVE'

    # Inheritance analysis
    parallel_workers: int = 1
    inheritance_check_timeout: Optional[float] = None  # seconds

    # Performance settings
    memory_limit_mb: int = 4096
    batch_size: int = 1000
    enable_memory_monitoring: bool = True

    debug_mode: bool = False

    @classmethod
    def from_file(cls, config_path: str) -> 'PipelineConfig':
        """Load configuration from file (JSON or YAML)."""
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r') as f:
                if config_path.lower().endswith(('.yaml', '.yml')):
                    config_data = yaml.safe_load(f)
                else:
                    config_data = json.load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML configuration file format: {e}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid configuration file format: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error loading configuration: {e}")

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}")
        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'PipelineConfig':
        """Create configuration from dictionary."""
        # Filter out unknown keys
        known_keys = set(cls.__dataclass_fields__.keys())
        filtered_dict = {k: v for k, v in config_dict.items() if k in known_keys}

        try:
            return cls(**filtered_dict)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration parameters: {e}")

    @classmethod
    def from_env(cls) -> 'PipelineConfig':
        """Load configuration from environment variables."""
        config = cls()

        env_mappings = {
            'GENE_SCORING_SCORING_MODE': ('scoring_mode', str),
            'GENE_SCORING_MODES_OF_INHERITANCE': ('modes_of_inheritance', _parse_list),
            'GENE_SCORING_ENABLE_REGULATORY_REASSIGNMENT': ('enable_regulatory_reassignment', _parse_bool),
            'GENE_SCORING_REASSIGNMENT_PRIORITY_KIND': ('reassignment_priority_kind', str),
            'GENE_SCORING_PARALLEL_WORKERS': ('parallel_workers', int),
            'GENE_SCORING_INHERITANCE_CHECK_TIMEOUT': ('inheritance_check_timeout', _parse_timeout),
            'GENE_SCORING_MEMORY_LIMIT_MB': ('memory_limit_mb', int),
            'GENE_SCORING_BATCH_SIZE': ('batch_size', int),
            'GENE_SCORING_DEBUG_MODE': ('debug_mode', _parse_bool),
        }

        for env_var, (field_name, converter) in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value:
                try:
                    setattr(config, field_name, converter(env_value))
                except (ValueError, TypeError) as e:
                    raise ConfigurationError(f"Invalid environment variable {env_var}: {e}")

        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def save_to_file(self, config_path: str) -> None:
        """Save configuration to file."""
        config_dict = self.to_dict()

        try:
            with open(config_path, 'w') as f:
                if config_path.lower().endswith(('.yaml', '.yml')):
                    yaml.safe_dump(config_dict, f, default_flow_style=False)
                else:
                    json.dump(config_dict, f, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Error saving configuration: {e}")

    def get_modes_of_inheritance(self) -> Set[ModeOfInheritance]:
        return {ModeOfInheritance[name] for name in self.modes_of_inheritance}

    def get_reassignment_priority_kind(self) -> PriorityKind:
        return PriorityKind[self.reassignment_priority_kind]

    def validate(self) -> None:
        """Validate configuration parameters."""
        if self.scoring_mode not in SCORING_MODES:
            raise ConfigurationError(f"scoring_mode must be one of {', '.join(SCORING_MODES)}")

        unknown_modes = [name for name in self.modes_of_inheritance
                         if name not in ModeOfInheritance.__members__]
        if unknown_modes:
            raise ConfigurationError(f"Unknown modes of inheritance: {', '.join(unknown_modes)}")

        if self.reassignment_priority_kind not in PriorityKind.__members__:
            raise ConfigurationError(f"Unknown priority kind: {self.reassignment_priority_kind}")

        if self.parallel_workers < 1:
            raise ConfigurationError("parallel_workers must be >= 1")

        if self.inheritance_check_timeout is not None and self.inheritance_check_timeout <= 0:
            raise ConfigurationError("inheritance_check_timeout must be > 0")

        if self.memory_limit_mb < 100:
            raise ConfigurationError("memory_limit_mb must be >= 100")

        if self.batch_size < 1:
            raise ConfigurationError("batch_size must be >= 1")

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.modes_of_inheritance = list(self.modes_of_inheritance)
        self.validate()


def load_config(config_path: Optional[str] = None,
                use_env: bool = True) -> PipelineConfig:
    """
    Load configuration with priority: file > environment > defaults.

    Args:
        config_path: Path to configuration file (optional)
        use_env: Whether to load environment variables

    Returns:
        PipelineConfig: Loaded configuration
    """
    config = PipelineConfig()

    if use_env:
        env_config = PipelineConfig.from_env()
        for field_name in PipelineConfig.__dataclass_fields__.keys():
            env_value = getattr(env_config, field_name)
            if env_value != getattr(config, field_name):
                setattr(config, field_name, env_value)

    if config_path:
        file_config = PipelineConfig.from_file(config_path)
        for field_name in PipelineConfig.__dataclass_fields__.keys():
            setattr(config, field_name, getattr(file_config, field_name))

    config.validate()
    return config
