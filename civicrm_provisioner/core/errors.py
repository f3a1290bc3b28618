"""
Provisioning errors — the failure taxonomy shared by all services.

Services raise these; nothing retries them. The provisioning use case
is the only place that catches ``ProvisionError``, records which step
failed and stops the run.
"""

from __future__ import annotations


class ProvisionError(Exception):
    """Base class for every failure that aborts a provisioning step."""


class VersionParseError(ProvisionError):
    """The package version carries no MAJOR.MINOR.PATCH release number."""


class FetchError(ProvisionError):
    """A URL could not be opened or read."""


class ExtractError(ProvisionError):
    """An archive is corrupt, empty, or in an unsupported format."""


class FilesystemError(ProvisionError):
    """A copy, mirror, write or remove operation failed."""


class SubprocessError(ProvisionError):
    """The external asset-build command failed."""


class ExtensionInstallError(ProvisionError):
    """An extension could not be placed under its declared name."""
