"""Services — the provisioning steps and the filesystem/archive helpers they share."""
