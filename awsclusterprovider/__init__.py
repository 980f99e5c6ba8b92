"""API types, tags, EC2 filters, converters and machine bookkeeping for Kubernetes clusters on AWS."""

__version__ = "0.1.0"

__all__ = [
    "converters",
    "filters",
    "machine_state",
    "provider_config",
    "register",
    "tags",
    "types",
]