# core/errors.py
from __future__ import annotations


class PluginError(RuntimeError):
    """Base for every failure that aborts a plugin run."""


class ToolNotFoundError(PluginError):
    def __init__(self, executable: str):
        self.executable = executable
        super().__init__(f"Unable to invoke periphery executable '{executable}'. Is it installed?")


class PathNotFoundError(PluginError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File or directory does not exist at path '{path}'")


class ConfigurationError(PluginError):
    pass


class ScanFailedError(PluginError):
    def __init__(self, message: str = "The scan could not be completed successfully", output: str = ""):
        self.output = output
        super().__init__(message)


class MalformedOutputError(PluginError):
    pass
