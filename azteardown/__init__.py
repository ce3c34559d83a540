"""Azure Teardown - dependency-ordered cleanup of Azure virtual machines."""

__version__ = "0.3.0"
