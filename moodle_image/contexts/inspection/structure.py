"""
Structural checks for supervisor, cron and CI workflow artifacts.

These go one step beyond substring matching: supervisord.conf is read as INI,
the crontab line by line, and the workflow's shell snippets are scanned for
curl invocations and string comparisons.
"""

import configparser
import re
from dataclasses import dataclass
from typing import Dict, List, Sequence

from moodle_image.contexts.inspection.exceptions import ContentCheckError
from moodle_image.contexts.inspection.patterns import CronPatterns, WorkflowPatterns

SUPERVISOR_SOURCE = "supervisord.conf"
CRON_SOURCE = "crontab"
WORKFLOW_SOURCE = "scheduled-version-check.yml"

CRON_TIME_FIELDS = 5
TRUTHY = {"true", "yes", "on", "1"}


# =============================================================================
# SUPERVISOR
# =============================================================================


def parse_supervisor_programs(supervisor_text: str) -> Dict[str, Dict[str, str]]:
    """
    Map program name -> settings for every [program:x] section.

    Interpolation is disabled so supervisor's own %(program_name)s
    expansions are kept verbatim.
    """
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        parser.read_string(supervisor_text, source=SUPERVISOR_SOURCE)
    except configparser.Error as e:
        raise ContentCheckError(f"Supervisor configuration is not valid INI: {e}", SUPERVISOR_SOURCE) from e

    return {
        section.split(":", 1)[1]: dict(parser[section])
        for section in parser.sections()
        if section.startswith("program:")
    }


def check_supervisor_programs(supervisor_text: str, required_programs: Sequence[str]) -> None:
    """
    Verify each required program has a command and restarts automatically.

    Raises:
        ContentCheckError: If a program is missing, has no command, or lacks autorestart=true
    """
    programs = parse_supervisor_programs(supervisor_text)

    for name in required_programs:
        if name not in programs:
            raise ContentCheckError(
                f"Supervisor should define program '{name}'",
                SUPERVISOR_SOURCE,
                expected=f"[program:{name}]",
            )

        settings = programs[name]
        if not settings.get("command", "").strip():
            raise ContentCheckError(
                f"Supervisor program '{name}' should declare a command", SUPERVISOR_SOURCE
            )
        if settings.get("autorestart", "").strip().lower() not in TRUTHY:
            raise ContentCheckError(
                f"Supervisor program '{name}' should restart automatically",
                SUPERVISOR_SOURCE,
                expected="autorestart=true",
                snippet=f"autorestart={settings.get('autorestart', '')}",
            )


# =============================================================================
# CRON
# =============================================================================


@dataclass
class CronEntry:
    """A scheduled line from a crontab."""

    schedule: str
    command: str
    line_number: int


def parse_crontab(cron_text: str, system_crontab: bool = True) -> List[CronEntry]:
    """
    Parse schedule lines, skipping comments, blanks and VAR=value lines.

    In a system crontab (/etc/cron.d) the user field precedes the command and
    is kept as part of it.

    Raises:
        ContentCheckError: If a line has fewer than 5 time fields plus a command
    """
    entries = []
    for line_number, raw_line in enumerate(cron_text.splitlines(), 1):
        line = raw_line.strip()
        if not line or line.startswith("#") or re.match(CronPatterns.ENVIRONMENT_ASSIGNMENT, line):
            continue

        if re.match(CronPatterns.SPECIAL_SCHEDULE, line):
            schedule, command = line.split(None, 1)
            entries.append(CronEntry(schedule, command, line_number))
            continue

        fields = line.split(None, CRON_TIME_FIELDS)
        minimum_fields = CRON_TIME_FIELDS + 1
        if len(fields) < minimum_fields:
            raise ContentCheckError(
                f"Cron line {line_number} should have {CRON_TIME_FIELDS} time fields and a command",
                CRON_SOURCE,
                snippet=line,
            )

        schedule = " ".join(fields[:CRON_TIME_FIELDS])
        command = fields[CRON_TIME_FIELDS]
        if system_crontab and len(command.split()) < 2:
            raise ContentCheckError(
                f"Cron line {line_number} should name a user and a command",
                CRON_SOURCE,
                snippet=line,
            )
        entries.append(CronEntry(schedule, command, line_number))

    return entries


def check_cron_schedule(cron_text: str, required_command: str = "admin/cli/cron.php") -> List[CronEntry]:
    """
    Verify the crontab is well formed and runs the Moodle cron.

    Returns:
        Parsed entries

    Raises:
        ContentCheckError: If a line is malformed or no entry runs required_command
    """
    entries = parse_crontab(cron_text)
    if not any(required_command in entry.command for entry in entries):
        raise ContentCheckError("Cron schedule should run the Moodle cron", CRON_SOURCE, expected=required_command)
    return entries


# =============================================================================
# WORKFLOW
# =============================================================================


@dataclass
class StringComparison:
    """A shell test comparing two strings ([ "$A" != "$B" ])."""

    left: str
    operator: str
    right: str

    @property
    def text(self) -> str:
        return f"[ {self.left} {self.operator} {self.right} ]"


def _logical_lines(workflow_text: str) -> List[str]:
    """Workflow lines with backslash continuations joined."""
    return re.sub(WorkflowPatterns.LINE_CONTINUATION, " ", workflow_text).splitlines()


def find_curl_commands(workflow_text: str) -> List[str]:
    """
    Every logical line that runs curl as a command.

    Comments, step names and lines that merely mention curl (apt-get install
    curl, echo "curl failed") are not commands.
    """
    commands = []
    for line in _logical_lines(workflow_text):
        command = re.sub(WorkflowPatterns.RUN_PREFIX, "", line)
        if command.startswith("#"):
            continue
        if re.search(WorkflowPatterns.CURL_COMMAND, command):
            commands.append(line.strip())
    return commands


def find_string_comparisons(workflow_text: str) -> List[StringComparison]:
    """Every [ a = b ] / [ a != b ] / [[ a == b ]] test in the workflow."""
    return [
        StringComparison(*match.groups())
        for line in _logical_lines(workflow_text)
        for match in re.finditer(WorkflowPatterns.STRING_COMPARISON, line)
    ]


def is_literal_variable_reference(operand: str) -> bool:
    """True if operand mentions a variable inside single quotes, so it never expands."""
    return operand.startswith("'") and "$" in operand


def check_workflow_timeouts(workflow_text: str) -> None:
    """
    Verify every curl call bounds both connection and total time.

    Raises:
        ContentCheckError: If there is no curl call or one lacks a timeout flag
    """
    commands = find_curl_commands(workflow_text)
    if not commands:
        raise ContentCheckError("Workflow should fetch upstream versions with curl", WORKFLOW_SOURCE, expected="curl")

    for command in commands:
        for flag in ("--connect-timeout", "--max-time"):
            if flag not in command:
                raise ContentCheckError(
                    f"Workflow curl call should set {flag}", WORKFLOW_SOURCE, expected=flag, snippet=command
                )


def check_workflow_comparisons(workflow_text: str) -> List[StringComparison]:
    """
    Verify version comparisons expand their variables.

    A comparison such as [ '$LATEST' != "$CURRENT" ] compares the literal
    text $LATEST and can never detect a change; neither can
    [ "LATEST" != "CURRENT" ], which compares two constants.

    Returns:
        The comparisons found

    Raises:
        ContentCheckError: If there are no comparisons or one never sees a variable's value
    """
    comparisons = find_string_comparisons(workflow_text)
    if not comparisons:
        raise ContentCheckError(
            "Workflow should compare pinned and upstream versions",
            WORKFLOW_SOURCE,
            expected='[ "$LATEST" != "$CURRENT" ]',
        )

    for comparison in comparisons:
        if not any("$" in operand for operand in (comparison.left, comparison.right)):
            raise ContentCheckError(
                "Workflow comparison should reference a variable",
                WORKFLOW_SOURCE,
                expected='[ "$LATEST" != "$CURRENT" ]',
                snippet=comparison.text,
            )
        for operand in (comparison.left, comparison.right):
            if is_literal_variable_reference(operand):
                raise ContentCheckError(
                    "Workflow comparison should expand variables (use double quotes)",
                    WORKFLOW_SOURCE,
                    snippet=comparison.text,
                )
    return comparisons
