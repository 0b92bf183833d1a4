"""rapidreporter -- Exploratory-testing session capture and export.

This package records timestamped, categorised notes and screenshots
during a timed exploratory-testing session and exports them as a
self-contained Markdown report folder. The UI is an external
collaborator; this package provides the session model, the
multi-monitor region capture protocol, and the report renderer and
packager.
"""

__version__ = "0.1.0"
