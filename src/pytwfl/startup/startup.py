# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

from pytwfl.config.log_config import LoggerConfigurator
from pytwfl.config.system_config_settings import SystemConfigSettings


class StartUp:
    """
    Class to handle the startup process of the PyTWFL application.
    It initializes the system configuration settings and prepares the environment.
    """

    @classmethod
    def initialize(cls, log_level: str | None = None, to_console: bool | None = None) -> LoggerConfigurator:
        """
        Initialize the system configuration settings and set up logging.
        This method should be called at the start of the application.

        ``log_level`` and ``to_console`` override the configured values when given.
        """
        SystemConfigSettings.initialize_directories()

        level = log_level if log_level else SystemConfigSettings.log_level()
        console = to_console if to_console is not None else SystemConfigSettings.log_to_console()

        return LoggerConfigurator(SystemConfigSettings.log_dir(),
                                  SystemConfigSettings.log_filename(),
                                  level,
                                  to_console=console,
                                  rotate=SystemConfigSettings.log_rotate())
