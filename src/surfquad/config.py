"""
Configuration management for surfquad.

Loads YAML configuration with defaults for every section.
"""

import os
from dataclasses import dataclass, field

import yaml


@dataclass
class QuadrangulationConfig:
    """Configuration for the quadrangulation stage."""
    dual_quadrangulation: bool = False  # quads on extrema only, one per saddle


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class OutputConfig:
    """Configuration for written results."""
    write_report: bool = True
    indent: int = 2


@dataclass
class PipelineConfig:
    """Complete run configuration."""
    quadrangulation: QuadrangulationConfig = field(default_factory=QuadrangulationConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


SECTIONS = ("quadrangulation", "tracing", "output")


def load_config(config_path=None):
    """
    Load configuration from YAML file.

    Falls back to defaults for any missing values.
    """
    config = PipelineConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        config = _merge_config(config, yaml_data)

    return config


def _merge_config(config, yaml_data):
    """Merge YAML data into config dataclass, ignoring unknown keys."""
    for section in SECTIONS:
        if section not in yaml_data:
            continue
        target = getattr(config, section)
        for key, value in (yaml_data[section] or {}).items():
            if hasattr(target, key):
                setattr(target, key, value)

    return config


def save_default_config(path):
    """Save default configuration to YAML file for reference."""
    config = PipelineConfig()

    yaml_data = {
        "quadrangulation": {
            "dual_quadrangulation": config.quadrangulation.dual_quadrangulation,
        },
        "tracing": {
            "enabled": config.tracing.enabled,
            "level": config.tracing.level,
            "json_output": config.tracing.json_output,
        },
        "output": {
            "write_report": config.output.write_report,
            "indent": config.output.indent,
        },
    }

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
