"""
moodle-image - tooling for a single-container Moodle deployment

Inspects the deployment artifacts (Dockerfile, nginx, PHP, supervisor, cron,
entrypoint, CI workflow, README) and tracks pinned versions against upstream.

Architecture:
- Inspection Context: Static artifact checks and version-token consistency
- Drift Context: Upstream version polling, README badges, tracking issues
"""

__version__ = "0.1.0"
