import yaml
from typing import Dict, Any
from .models import LOG_LEVELS, MapperConfig, ViewConfig

# @intent:responsibility 設定ファイルの内容が不正であることを表します。
class ConfigError(ValueError):
    pass

class ConfigLoader:
    def load_from_file(self, path: str) -> MapperConfig:
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")
        return self._parse_config(data or {})

    def _parse_config(self, data: Dict[str, Any]) -> MapperConfig:
        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be a mapping.")

        arch = str(data.get("architecture", "GB")).upper()

        origin = None
        if data.get("origin") is not None:
            origin = self._parse_int(data.get("origin"))

        label_format = data.get("label_format", MapperConfig.label_format)
        try:
            label_format.format(0)
        except (AttributeError, IndexError, KeyError, ValueError):
            raise ConfigError(f"Invalid label_format: {label_format!r}")

        # Parse View
        view_data = data.get("view", {}) or {}
        rows = self._parse_int(view_data.get("rows", ViewConfig.rows))
        if rows < 1:
            raise ConfigError(f"view.rows must be positive: {rows}")

        keymap = data.get("keymap", {}) or {}
        if not isinstance(keymap, dict):
            raise ConfigError("keymap must be a mapping of command name to key.")

        log_level = str(data.get("log_level", "WARNING")).upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(f"Invalid log_level: {log_level} (expected one of {', '.join(LOG_LEVELS)})")

        return MapperConfig(
            architecture=arch,
            origin=origin,
            label_format=label_format,
            log_level=log_level,
            view=ViewConfig(rows=rows),
            keymap={str(k): str(v) for k, v in keymap.items()}
        )

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ConfigError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                if value.lower().startswith("0x"):
                    return int(value, 16)
                return int(value)
            except ValueError:
                pass
        raise ConfigError(f"Invalid integer format: {value}")
