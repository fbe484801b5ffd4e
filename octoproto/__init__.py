"""Octopus box protocol: request packing, response parsing, packet framing, connection options and mock fixtures."""

__version__ = "0.1.0"