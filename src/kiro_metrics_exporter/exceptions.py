"""Exceptions raised by the export pipeline."""


class ExporterError(Exception):
    """Base class for export errors."""


class DirectoryNotFoundError(ExporterError):
    """The records root directory does not exist."""

    def __init__(self, path):
        super().__init__(f"Records directory not found: {path}")
        self.path = path


class StoragePathError(ExporterError):
    """The storage path prefix is not of the form scheme://bucket/basePath."""


class UnknownWindowError(ExporterError):
    """No export window is registered under the requested name."""


class ConfigError(ExporterError):
    """Required configuration values are missing or invalid."""
