"""Devbox provisioner (Python-first, fail-fast).

Provisions a development environment onto a target root:
- Base resolution by name
- One package-manager transaction
- Trust-store refresh
- Non-root development user

The same recipe renders to a Dockerfile or builds through docker.
"""

__all__ = []
