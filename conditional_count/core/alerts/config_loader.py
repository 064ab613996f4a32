"""
Condition Definition Loader

Loads and parses YAML condition definitions from configs/alerts/ directory.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class ConditionDefinition(BaseModel):
    """One alert condition as declared in YAML."""
    id: str = Field(..., description="Unique condition ID")
    title: Optional[str] = Field(default=None, description="Display title")
    stream_id: str = Field(..., description="Stream the condition watches")
    enabled: bool = Field(default=True, description="Condition enabled")
    created_at: Optional[datetime] = Field(default=None)
    creator_user_id: Optional[str] = Field(default=None)
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Raw condition parameters")
    tags: List[str] = Field(default_factory=list, description="Condition tags for categorization")


class ConditionConfigFile(BaseModel):
    """Root structure of a condition YAML file."""
    version: str = Field(default="1.0", description="Config version")
    conditions: List[ConditionDefinition] = Field(default_factory=list)


class AlertConfigLoader:
    """
    Loads condition definitions from YAML files.

    Searches for config files in:
    1. <config_path>/alerts/*.yml
    2. <config_path>/alerts/*.yaml
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config loader.

        Args:
            config_path: Base path for configs. Defaults to ./configs
        """
        self.config_path = Path(config_path) if config_path else Path("./configs")
        self.alerts_path = self.config_path / "alerts"
        self._cache: Optional[List[ConditionDefinition]] = None

    def load_all_conditions(self, force_reload: bool = False) -> List[ConditionDefinition]:
        """
        Load all condition definitions from YAML files.

        Files that fail to parse are logged and skipped; duplicate ids keep
        the first definition seen.

        Args:
            force_reload: Force reload from disk, ignoring cache

        Returns:
            List of ConditionDefinition objects
        """
        if self._cache is not None and not force_reload:
            return self._cache

        conditions: List[ConditionDefinition] = []
        seen_ids = set()

        if not self.alerts_path.exists():
            logger.warning(f"Alerts config path not found: {self.alerts_path}")
            self._cache = conditions
            return conditions

        config_files = sorted(self.alerts_path.glob("*.yml")) + sorted(self.alerts_path.glob("*.yaml"))
        for config_file in config_files:
            try:
                file_conditions = self._load_config_file(config_file)
            except (OSError, TypeError, yaml.YAMLError, ValidationError) as e:
                logger.error(f"Failed to load condition config {config_file}: {e}")
                continue

            for condition in file_conditions:
                if condition.id in seen_ids:
                    logger.warning(f"Duplicate condition id {condition.id} in {config_file.name}, skipping")
                    continue
                seen_ids.add(condition.id)
                conditions.append(condition)
            logger.info(f"Loaded {len(file_conditions)} conditions from {config_file.name}")

        self._cache = conditions
        logger.info(f"Total conditions loaded: {len(conditions)}")
        return conditions

    def _load_config_file(self, file_path: Path) -> List[ConditionDefinition]:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        if not data:
            return []
        if not isinstance(data, dict):
            raise TypeError(f"top level must be a mapping, got {type(data).__name__}")

        return ConditionConfigFile(**data).conditions

    def get_condition_by_id(self, condition_id: str) -> Optional[ConditionDefinition]:
        for condition in self.load_all_conditions():
            if condition.id == condition_id:
                return condition
        return None

    def get_conditions_for_stream(self, stream_id: str) -> List[ConditionDefinition]:
        return [c for c in self.load_all_conditions() if c.stream_id == stream_id]

    def get_conditions_by_tag(self, tag: str) -> List[ConditionDefinition]:
        return [c for c in self.load_all_conditions() if tag in c.tags]

    def get_enabled_conditions(self) -> List[ConditionDefinition]:
        return [c for c in self.load_all_conditions() if c.enabled]

    def clear_cache(self) -> None:
        """Clear cached definitions; the next load reads from disk."""
        self._cache = None
