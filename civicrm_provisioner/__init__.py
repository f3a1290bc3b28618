"""CiviCRM provisioner — completes a civicrm-core install after the package manager."""

__version__ = "0.1.0"
