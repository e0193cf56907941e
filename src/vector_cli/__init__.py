"""Vector CLI: manage sites, environments and deployments on the Vector platform."""

__version__ = "0.1.0"
