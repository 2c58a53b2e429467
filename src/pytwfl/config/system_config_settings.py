# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import logging
from pathlib import Path

from pytwfl.analysis.model.detection import DetectionConfig
from pytwfl.config.config_manager import ConfigManager
from pytwfl.lib.constants import (
    DEFAULT_FIRST_WAVE_SIGMA,
    DEFAULT_LINE_LENGTH_KM,
    DEFAULT_MIN_SAMPLES_BETWEEN_WAVES,
    DEFAULT_SAMPLING_INTERVAL_MS,
    DEFAULT_SECOND_WAVE_SIGMA,
    DEFAULT_WAVE_SPEED_KM_PER_MS,
)
from pytwfl.lib.types import FileNameStr


class SystemConfigSettings:
    """Provides dynamically reloaded system configuration via class properties."""
    _cfg        = ConfigManager()
    _logger     = logging.getLogger("SystemConfigSettings")

    _DEFAULT_LOG_LEVEL: str                 = "INFO"
    _DEFAULT_LOG_DIR: str                   = "logs"
    _DEFAULT_LOG_FILENAME: str              = "pytwfl.log"
    _DEFAULT_LOG_TO_CONSOLE: bool           = False
    _DEFAULT_LOG_ROTATE: bool               = False

    @classmethod
    def _config_path(cls, *path: str) -> str:
        """Return dotted path for logging."""
        return ".".join(path)

    @classmethod
    def _get_str(cls, default: str, *path: str) -> str:
        value = cls._cfg.get(*path)
        if value is None:
            cls._logger.error(
                "Missing configuration value for '%s'; using default '%s'",
                cls._config_path(*path),
                default,
            )
            return default
        if not isinstance(value, str):
            coerced = str(value)
            cls._logger.error(
                "Non-string configuration value for '%s': %r; using coerced '%s'",
                cls._config_path(*path),
                value,
                coerced,
            )
            return coerced
        if value == "":
            cls._logger.error(
                "Empty configuration value for '%s'; using default '%s'",
                cls._config_path(*path),
                default,
            )
            return default
        return value

    @classmethod
    def _get_int(cls, default: int, *path: str) -> int:
        value = cls._cfg.get(*path)
        if value is None:
            cls._logger.error(
                "Missing configuration value for '%s'; using default %d",
                cls._config_path(*path),
                default,
            )
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            cls._logger.error(
                "Invalid integer configuration value for '%s': %r; using default %d",
                cls._config_path(*path),
                value,
                default,
            )
            return default

    @classmethod
    def _get_float(cls, default: float, *path: str) -> float:
        value = cls._cfg.get(*path)
        if value is None:
            cls._logger.error(
                "Missing configuration value for '%s'; using default %s",
                cls._config_path(*path),
                default,
            )
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            cls._logger.error(
                "Invalid float configuration value for '%s': %r; using default %s",
                cls._config_path(*path),
                value,
                default,
            )
            return default

    @classmethod
    def _get_bool(cls, default: bool, *path: str) -> bool:
        value = cls._cfg.get(*path)
        if isinstance(value, bool):
            return value
        if value is None:
            cls._logger.error(
                "Missing configuration value for '%s'; using default %s",
                cls._config_path(*path),
                default,
            )
            return default

        text = str(value).strip().lower()
        if text in ("1", "true", "yes", "on"):
            return True
        if text in ("0", "false", "no", "off"):
            return False

        cls._logger.error(
            "Invalid boolean configuration value for '%s': %r; using default %s",
            cls._config_path(*path),
            value,
            default,
        )
        return default

    # Detection
    @classmethod
    def sampling_interval_ms(cls) -> float:
        return cls._get_float(DEFAULT_SAMPLING_INTERVAL_MS, "detection", "sampling_interval_ms")

    @classmethod
    def wave_speed_km_per_ms(cls) -> float:
        return cls._get_float(DEFAULT_WAVE_SPEED_KM_PER_MS, "detection", "wave_speed_km_per_ms")

    @classmethod
    def line_length_km(cls) -> float:
        return cls._get_float(DEFAULT_LINE_LENGTH_KM, "detection", "line_length_km")

    @classmethod
    def first_wave_sigma(cls) -> float:
        return cls._get_float(DEFAULT_FIRST_WAVE_SIGMA, "detection", "first_wave_sigma")

    @classmethod
    def second_wave_sigma(cls) -> float:
        return cls._get_float(DEFAULT_SECOND_WAVE_SIGMA, "detection", "second_wave_sigma")

    @classmethod
    def min_samples_between_waves(cls) -> int:
        return cls._get_int(DEFAULT_MIN_SAMPLES_BETWEEN_WAVES, "detection", "min_samples_between_waves")

    @classmethod
    def detection_config(cls) -> DetectionConfig:
        """
        Build a DetectionConfig from the ``detection`` section.

        Missing or unparsable keys fall back to the built-in defaults. Values that
        parse but are out of range (e.g. a negative speed) raise ``ValidationError``.
        """
        return DetectionConfig(
            sampling_interval_ms        =   cls.sampling_interval_ms(),
            wave_speed_km_per_ms        =   cls.wave_speed_km_per_ms(),
            line_length_km              =   cls.line_length_km(),
            first_wave_sigma            =   cls.first_wave_sigma(),
            second_wave_sigma           =   cls.second_wave_sigma(),
            min_samples_between_waves   =   cls.min_samples_between_waves(),
        )

    # Logging
    @classmethod
    def log_level(cls) -> str:
        return cls._get_str(cls._DEFAULT_LOG_LEVEL, "logging", "log_level")

    @classmethod
    def log_dir(cls) -> str:
        return cls._get_str(cls._DEFAULT_LOG_DIR, "logging", "log_dir")

    @classmethod
    def log_filename(cls) -> FileNameStr:
        return cls._get_str(cls._DEFAULT_LOG_FILENAME, "logging", "log_filename")

    @classmethod
    def log_to_console(cls) -> bool:
        return cls._get_bool(cls._DEFAULT_LOG_TO_CONSOLE, "logging", "log_to_console")

    @classmethod
    def log_rotate(cls) -> bool:
        return cls._get_bool(cls._DEFAULT_LOG_ROTATE, "logging", "log_rotate")

    @classmethod
    def initialize_directories(cls) -> None:
        """
        Create necessary directories if they do not exist.
        """
        Path(cls.log_dir()).mkdir(parents=True, exist_ok=True)

    @classmethod
    def reload(cls) -> None:
        """
        Reload the configuration settings.
        """
        cls._cfg.reload()
        cls.initialize_directories()
