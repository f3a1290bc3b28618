"""Configuration — locate and load provision.yml / composer.json."""
