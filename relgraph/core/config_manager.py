"""
Configuration Management

Single authoritative configuration manager for the relation graph engine.
Values come from dataclass defaults, an optional YAML file and RELGRAPH_*
environment variables (a local .env file is honoured), in that order.
"""

import os
import threading
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema
import yaml
from dotenv import load_dotenv


@dataclass
class LayoutConfig:
    """Force simulation constants."""
    width: float = 800.0
    height: float = 600.0
    min_height: float = 260.0
    link_distance: float = 130.0
    link_strength: float = 0.7
    charge_strength: float = -260.0
    min_repulsion_distance: float = 1.0
    collide_padding: float = 4.0
    collide_strength: float = 0.7
    center_strength: float = 0.1
    velocity_decay: float = 0.4
    alpha_start: float = 1.0
    alpha_min: float = 0.001
    alpha_decay: Optional[float] = None
    drag_alpha_target: float = 0.2
    reheat_alpha: float = 0.3
    cooling_threshold: float = 0.1
    seed: int = 42
    seed_radius: float = 50.0
    tick_interval: float = 1.0 / 60.0

    def __post_init__(self):
        if self.alpha_decay is None:
            # Reaches alpha_min from 1.0 in roughly 300 ticks
            self.alpha_decay = 1.0 - self.alpha_min ** (1.0 / 300.0)

    @property
    def center(self) -> tuple:
        return (self.width / 2.0, max(self.min_height, self.height) / 2.0)


@dataclass
class RadiusConfig:
    """Clamped affine radius ``clamp(base + degree * slope, min_radius, max_radius)``."""
    base: float
    slope: float
    min_radius: float
    max_radius: float

    def radius_for(self, degree: int) -> float:
        return max(self.min_radius, min(self.max_radius, self.base + degree * self.slope))


def _default_radii() -> Dict[str, RadiusConfig]:
    return {
        "source": RadiusConfig(base=10.0, slope=0.8, min_radius=12.0, max_radius=24.0),
        "target": RadiusConfig(base=7.0, slope=0.6, min_radius=9.0, max_radius=18.0),
    }


def radius_rule(radii: Dict[str, RadiusConfig], category: str) -> RadiusConfig:
    """Radius rule for a node category, falling back to the target-side rule."""
    return radii.get(category) or radii["target"]


@dataclass
class ViewConfig:
    """Zoom and pan limits."""
    min_scale: float = 0.5
    max_scale: float = 6.0
    wheel_sensitivity: float = 0.002


@dataclass
class RenderConfig:
    """Colors and stroke widths used by the renderer."""
    label_colors: Dict[str, str] = field(default_factory=lambda: {
        "Gold Medal": "#fdd10d",
        "Silver Medal": "#C0C0C0",
        "Bronze Medal": "#a45506",
    })
    default_edge_color: str = "#000000"
    node_colors: Dict[str, str] = field(default_factory=lambda: {
        "source": "#69b3a2",
        "target": "#1f77b4",
    })
    category_names: Dict[str, str] = field(default_factory=lambda: {
        "source": "Country",
        "target": "Discipline",
    })
    edge_width_base: float = 1.5
    edge_width_slope: float = 0.3
    edge_width_max: float = 6.0
    edge_opacity: float = 0.9
    title: str = "Country, Discipline, and Medal Graph"


@dataclass
class RecordSchemaConfig:
    """Column mapping from tabular rows to relation records."""
    source_column: str = "country"
    target_column: str = "discipline"
    label_column: str = "medal_type"
    detail_columns: List[str] = field(default_factory=lambda: ["name", "event"])


@dataclass
class SystemConfig:
    """System-level configuration."""
    log_level: str = "INFO"
    environment: str = "development"


class ConfigurationError(Exception):
    """Configuration-related error."""
    pass


CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "layout": {
            "type": "object",
            "properties": {
                "width": {"type": "number", "exclusiveMinimum": 0},
                "height": {"type": "number", "exclusiveMinimum": 0},
                "link_distance": {"type": "number", "minimum": 0},
                "link_strength": {"type": "number", "minimum": 0, "maximum": 1},
                "collide_strength": {"type": "number", "minimum": 0, "maximum": 1},
                "center_strength": {"type": "number", "minimum": 0, "maximum": 1},
                "velocity_decay": {"type": "number", "minimum": 0, "maximum": 1},
                "alpha_start": {"type": "number", "exclusiveMinimum": 0},
                "alpha_min": {"type": "number", "exclusiveMinimum": 0},
                "alpha_decay": {"type": "number", "exclusiveMinimum": 0, "exclusiveMaximum": 1},
                "drag_alpha_target": {"type": "number", "minimum": 0},
                "reheat_alpha": {"type": "number", "exclusiveMinimum": 0},
                "min_repulsion_distance": {"type": "number", "exclusiveMinimum": 0},
                "tick_interval": {"type": "number", "exclusiveMinimum": 0},
                "seed": {"type": "integer"}
            }
        },
        "radii": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "base": {"type": "number"},
                    "slope": {"type": "number", "minimum": 0},
                    "min_radius": {"type": "number", "exclusiveMinimum": 0},
                    "max_radius": {"type": "number", "exclusiveMinimum": 0}
                },
                "required": ["base", "slope", "min_radius", "max_radius"]
            }
        },
        "view": {
            "type": "object",
            "properties": {
                "min_scale": {"type": "number", "exclusiveMinimum": 0},
                "max_scale": {"type": "number", "exclusiveMinimum": 0},
                "wheel_sensitivity": {"type": "number", "exclusiveMinimum": 0}
            }
        },
        "records": {
            "type": "object",
            "properties": {
                "source_column": {"type": "string", "minLength": 1},
                "target_column": {"type": "string", "minLength": 1},
                "label_column": {"type": "string", "minLength": 1},
                "detail_columns": {"type": "array", "items": {"type": "string"}}
            }
        }
    }
}


class ConfigurationManager:
    """
    Configuration manager for the relation graph engine.

    Loads the YAML file when present, applies environment overrides and
    validates the result against ``CONFIG_SCHEMA``.
    """

    ENV_MAPPINGS = {
        'RELGRAPH_CANVAS_WIDTH': ('layout', 'width'),
        'RELGRAPH_CANVAS_HEIGHT': ('layout', 'height'),
        'RELGRAPH_LINK_DISTANCE': ('layout', 'link_distance'),
        'RELGRAPH_LINK_STRENGTH': ('layout', 'link_strength'),
        'RELGRAPH_CHARGE_STRENGTH': ('layout', 'charge_strength'),
        'RELGRAPH_VELOCITY_DECAY': ('layout', 'velocity_decay'),
        'RELGRAPH_ALPHA_MIN': ('layout', 'alpha_min'),
        'RELGRAPH_SEED': ('layout', 'seed'),
        'RELGRAPH_TICK_INTERVAL': ('layout', 'tick_interval'),
        'RELGRAPH_MIN_SCALE': ('view', 'min_scale'),
        'RELGRAPH_MAX_SCALE': ('view', 'max_scale'),
        'RELGRAPH_SOURCE_COLUMN': ('records', 'source_column'),
        'RELGRAPH_TARGET_COLUMN': ('records', 'target_column'),
        'RELGRAPH_LABEL_COLUMN': ('records', 'label_column'),
        'RELGRAPH_LOG_LEVEL': ('system', 'log_level'),
        'RELGRAPH_ENVIRONMENT': ('system', 'environment'),
    }

    def __init__(self, config_path: Optional[str] = None, load_env: bool = True):
        self.config_path = Path(config_path) if config_path else None
        self.config_data: Dict[str, Any] = {}
        self.environment_vars: Dict[str, str] = {}

        self.layout: LayoutConfig = LayoutConfig()
        self.radii: Dict[str, RadiusConfig] = _default_radii()
        self.view: ViewConfig = ViewConfig()
        self.render: RenderConfig = RenderConfig()
        self.records: RecordSchemaConfig = RecordSchemaConfig()
        self.system: SystemConfig = SystemConfig()

        self._load_config()
        if load_env:
            load_dotenv()
            self._load_environment_variables()
        self.validate_config_with_schema()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if self.config_path is None:
            return
        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")
        try:
            with open(self.config_path, 'r') as f:
                self.config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to load configuration: {e}")

        if not isinstance(self.config_data, dict):
            raise ConfigurationError("Configuration file must contain a mapping")
        self._populate_config_objects()

    def _populate_config_objects(self) -> None:
        """Populate configuration objects from loaded data."""
        try:
            if 'layout' in self.config_data:
                self.layout = LayoutConfig(**self.config_data['layout'])

            if 'radii' in self.config_data:
                radii = _default_radii()
                for category, values in self.config_data['radii'].items():
                    radii[category] = RadiusConfig(**values)
                self.radii = radii

            if 'view' in self.config_data:
                self.view = ViewConfig(**self.config_data['view'])

            if 'render' in self.config_data:
                self.render = RenderConfig(**self.config_data['render'])

            if 'records' in self.config_data:
                self.records = RecordSchemaConfig(**self.config_data['records'])

            if 'system' in self.config_data:
                self.system = SystemConfig(**self.config_data['system'])
        except TypeError as e:
            raise ConfigurationError(f"Unknown configuration key: {e}")

    def _load_environment_variables(self) -> None:
        """Load configuration overrides from environment variables."""
        for env_var, (section, key) in self.ENV_MAPPINGS.items():
            value = os.environ.get(env_var)
            if value is not None:
                self.environment_vars[env_var] = value

                config_obj = getattr(self, section)
                target_type = type(getattr(config_obj, key))
                try:
                    converted_value = self._convert_type(value, target_type)
                except ValueError:
                    raise ConfigurationError(f"Invalid value for {env_var}: {value!r}")
                setattr(config_obj, key, converted_value)

    def _convert_type(self, value: str, target_type: type) -> Any:
        """Convert string value to target type."""
        if target_type == bool:
            return value.lower() in ('true', '1', 'yes', 'on')
        elif target_type == int:
            return int(value)
        elif target_type == float:
            return float(value)
        else:
            return value

    def to_dict(self) -> Dict[str, Any]:
        """Convert all sections to a plain dictionary."""
        return {
            'layout': asdict(self.layout),
            'radii': {category: asdict(radius) for category, radius in self.radii.items()},
            'view': asdict(self.view),
            'render': asdict(self.render),
            'records': asdict(self.records),
            'system': asdict(self.system),
        }

    def validate_config_with_schema(self) -> None:
        """Validate configuration against the JSON schema."""
        try:
            jsonschema.validate(self.to_dict(), CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e.message}")

        if self.view.min_scale > self.view.max_scale:
            raise ConfigurationError("view.min_scale must not exceed view.max_scale")
        for category, radius in self.radii.items():
            if radius.min_radius > radius.max_radius:
                raise ConfigurationError(f"radii.{category}.min_radius must not exceed max_radius")

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key using dot notation."""
        keys = key.split('.')
        if keys[0] not in ('layout', 'radii', 'view', 'render', 'records', 'system'):
            return default

        obj = getattr(self, keys[0])
        for part in keys[1:]:
            if isinstance(obj, dict) and part in obj:
                obj = obj[part]
            elif hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                return default
        return obj


# Global configuration instance
_config_instance: Optional[ConfigurationManager] = None
_config_lock = threading.Lock()


def get_config() -> ConfigurationManager:
    """Get global configuration instance."""
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = ConfigurationManager()
    return _config_instance


def load_config(config_path: Optional[str] = None, force_reload: bool = False) -> ConfigurationManager:
    """Load configuration from file."""
    global _config_instance
    if force_reload or _config_instance is None:
        with _config_lock:
            _config_instance = ConfigurationManager(config_path)
    return _config_instance


def validate_config() -> Dict[str, Any]:
    """Validate current configuration."""
    config = get_config()
    try:
        config.validate_config_with_schema()
        return {"status": "valid", "errors": [], "warnings": []}
    except ConfigurationError as e:
        return {"status": "invalid", "errors": [str(e)], "warnings": []}
