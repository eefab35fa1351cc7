"""Nova installer: turns a Debian Testing system into the Nova GNOME desktop.

Core design goals:
- Idempotent steps (safe to re-run)
- Package names probed against the index, never assumed
- Decisions made up front; unattended runs need no front end
- Centralized logging to /var/log/nova-install.log
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
