"""
Drift Context

Responsibilities:
- Polls upstream endpoints for the latest PHP release and Moodle stable branch
- Compares them against the versions pinned in the Dockerfile
- Refreshes README version badges
- Opens or updates the tracking issue on GitHub

Owns: Upstream polling, drift reports, README badge updates, issue tracking
Never: Edits the Dockerfile (version bumps stay manual)
"""
