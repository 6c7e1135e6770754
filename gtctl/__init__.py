"""Building blocks for configuring and running GreptimeDB clusters on bare metal."""

__version__ = "0.1.0"