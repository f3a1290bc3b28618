"""
Domain models — Pydantic types for the provisioner.

    from civicrm_provisioner.core.models import ProvisionSettings, PackageEvent, Receipt
"""

from civicrm_provisioner.core.models.action import Action, Receipt
from civicrm_provisioner.core.models.package import (
    InstalledPackage,
    PackageEvent,
    parse_release_version,
)
from civicrm_provisioner.core.models.settings import (
    CIVICRM_PACKAGE,
    CivicrmExtra,
    ProvisionSettings,
)

__all__ = [
    # action.py
    "Action",
    "Receipt",
    # package.py
    "InstalledPackage",
    "PackageEvent",
    "parse_release_version",
    # settings.py
    "CIVICRM_PACKAGE",
    "CivicrmExtra",
    "ProvisionSettings",
]
