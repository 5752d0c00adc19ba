"""
tspsom - Pydantic Configuration Schema

Validates config.yaml against a typed schema at load time.  Catches
typos, type errors, and invalid ranges before they turn into a silently
degenerate training run.

# ---- Changelog ----
# [2026-10-02] Initial creation.
#   What: Pydantic v2 models mirroring every section of config.yaml
#         (training, ring, render).  load_and_validate() replaces a raw
#         yaml.safe_load() in main.py.
#   How:  BaseModel with Field() constraints.  Unknown keys are ignored
#         (not rejected), so a config written for a newer version still
#         loads.  Default (lax) coercion, so "remove_distance: 1" is
#         accepted as a float.
# [2026-10-17] Reject non-mapping YAML.
#   What: A top-level list or scalar, or a non-mapping "tspsom:" value,
#         now logs an error and yields defaults instead of raising.
#         Only pydantic ValidationError is caught around validation.
# -------------------
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger("tspsom.config")


class TrainingConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    iterations: int = Field(10000, gt=0)
    print_every: int = Field(1000, ge=0)
    seed: Optional[int] = Field(None, ge=0)
    prune: bool = False
    debug_level: int = Field(0, ge=0)


class RingConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    spread: int = Field(3, ge=0)
    remove_distance: float = Field(1.0, ge=0.0)


class RenderConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    enabled: bool = True
    output_dir: str = "img"
    width: int = Field(1024, gt=0)
    height: int = Field(768, gt=0)
    radius_ratio: float = Field(0.005, gt=0.0, lt=0.5)


class TspSomConfig(BaseModel):
    """Top-level validated config schema for config.yaml -> tspsom: key."""
    model_config = ConfigDict(extra="ignore")

    training: TrainingConfig = TrainingConfig()
    ring: RingConfig = RingConfig()
    render: RenderConfig = RenderConfig()


def validate_config(raw: Dict[str, Any]) -> TspSomConfig:
    """Validate a raw config dict against the schema.

    Args:
        raw: The dict from yaml.safe_load(f).get("tspsom", {}).

    Returns:
        Validated TspSomConfig with defaults filled in.

    Raises:
        pydantic.ValidationError: If config values are invalid.
    """
    return TspSomConfig.model_validate(raw)


def load_and_validate(config_path: str = "config.yaml") -> Dict[str, Any]:
    """Load config.yaml, validate it, and return it as a plain dict.

    Args:
        config_path: Path to config.yaml.

    Returns:
        Validated config as a dict.  Defaults if the file is missing or
        fails validation.
    """
    import yaml

    p = Path(config_path)
    if not p.exists():
        logger.warning("Config not found at %s, using defaults", config_path)
        return TspSomConfig().model_dump()

    with open(p, "r") as f:
        raw = yaml.safe_load(f)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        logger.error("Config %s is not a mapping - using defaults", config_path)
        return TspSomConfig().model_dump()

    tspsom_raw = raw.get("tspsom") or {}
    if not isinstance(tspsom_raw, dict):
        logger.error("Config key 'tspsom' is not a mapping - using defaults")
        return TspSomConfig().model_dump()

    try:
        validated = validate_config(tspsom_raw)
        logger.info("Config validated successfully from %s", config_path)
        return validated.model_dump()
    except ValidationError as e:
        logger.error("Config validation failed: %s - using defaults", e)
        return TspSomConfig().model_dump()
