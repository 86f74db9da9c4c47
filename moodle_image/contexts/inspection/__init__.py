"""
Inspection Context

Responsibilities:
- Verifies deployment artifacts exist, are non-empty and carry required content
- Extracts version tokens (PHP runtime, Moodle branch, database support)
- Cross-checks tokens between Dockerfile, supervisord.conf and README badges
- Validates supervisor programs, cron schedule and CI workflow conventions

Owns: Artifact checks, version extraction, badge parsing
Never: Modifies artifacts (README updates belong to the drift context)
"""
