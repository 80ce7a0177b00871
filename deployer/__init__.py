"""Deployer - release and deployment control plane.

Resolves per-application and per-infrastructure descriptors, renders
environment-specific Helm values files and drives ``helm``, ``docker``
and ``trivy`` to release applications and converge cluster namespaces.
"""

try:
    from importlib.metadata import version

    __version__ = version("deployer")
except Exception:
    __version__ = "1.0.0"

__all__ = ["__version__"]
