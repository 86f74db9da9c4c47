"""
Artifact presence and content checks.

Each check reads an artifact as plain text and raises an ArtifactCheckError
subclass on failure; orchestration (collecting results, logging) lives in
inspector.py.
"""

import re
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from moodle_image.contexts.inspection.exceptions import (
    ArtifactMissingError,
    ContentCheckError,
    EmptyArtifactError,
    UnreadableArtifactError,
)
from moodle_image.contexts.inspection.patterns import DockerfilePatterns


@dataclass
class ArtifactSpec:
    """
    One deployment artifact and the content it must carry.

    Attributes:
        name: Config key (e.g., "dockerfile")
        path: Path relative to the project root
        description: Human-readable name used in messages
        required_substrings: Substrings that must all appear
        required_prefix: Text the file must start with (e.g., a shebang)
    """

    name: str
    path: Path
    description: str
    required_substrings: List[str] = field(default_factory=list)
    required_prefix: Optional[str] = None

    @classmethod
    def from_config(cls, name: str, config: Dict[str, Any]) -> "ArtifactSpec":
        return cls(
            name=name,
            path=Path(config["path"]),
            description=config.get("description", name),
            required_substrings=list(config.get("required_substrings", [])),
            required_prefix=config.get("required_prefix"),
        )


def artifact_specs(config: Dict[str, Any]) -> Dict[str, ArtifactSpec]:
    """Build ArtifactSpecs from the "artifacts" section of artifacts.yaml."""
    return {name: ArtifactSpec.from_config(name, entry) for name, entry in config["artifacts"].items()}


def read_artifact(path: Path, description: Optional[str] = None) -> str:
    """
    Read an artifact that must exist and be non-empty.

    Raises:
        ArtifactMissingError: If path does not exist
        EmptyArtifactError: If the file has no non-whitespace content
        UnreadableArtifactError: If the file is not valid UTF-8
    """
    if not path.is_file():
        raise ArtifactMissingError(path, description)

    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise UnreadableArtifactError(path, description, reason=e.reason) from e
    if not content.strip():
        raise EmptyArtifactError(path, description)
    return content


def check_required_content(content: str, spec: ArtifactSpec) -> None:
    """
    Verify content carries every required substring and the required prefix.

    Raises:
        ContentCheckError: On the first missing substring or a wrong prefix
    """
    for substring in spec.required_substrings:
        if substring not in content:
            raise ContentCheckError(
                f"{spec.description} should contain required text", spec.path, expected=substring
            )

    if spec.required_prefix and not content.startswith(spec.required_prefix):
        first_line = content.splitlines()[0] if content else ""
        raise ContentCheckError(
            f"{spec.description} should start with {spec.required_prefix!r}",
            spec.path,
            expected=spec.required_prefix,
            snippet=first_line,
        )


def _join_continuations(text: str) -> str:
    return re.sub(r'\\\n', " ", text)


def copy_sources(dockerfile_text: str) -> List[str]:
    """
    Local source paths referenced by COPY/ADD instructions.

    Multi-stage copies (--from=...) and remote URLs are skipped. JSON-form
    instructions are read the same way as shell form.

    Examples:
        >>> copy_sources("COPY php/moodle.ini /etc/php/8.3/fpm/conf.d/99-moodle.ini")
        ['php/moodle.ini']

    Raises:
        ContentCheckError: If a shell-form instruction has unbalanced quotes
    """
    sources = []
    for line in _join_continuations(dockerfile_text).splitlines():
        match = re.match(DockerfilePatterns.COPY_INSTRUCTION, line, flags=re.IGNORECASE)
        if not match:
            continue

        arguments = match.group(2)
        if arguments.startswith("["):
            tokens = [token.strip().strip('"') for token in arguments.strip("[]").split(",")]
        else:
            try:
                tokens = shlex.split(arguments)
            except ValueError as e:
                raise ContentCheckError(
                    f"Dockerfile {match.group(1).upper()} instruction cannot be parsed: {e}",
                    "Dockerfile",
                    snippet=line.strip(),
                ) from e

        if any(token.startswith("--from") for token in tokens):
            continue

        paths = [token for token in tokens if not token.startswith("--")]
        for source in paths[:-1]:
            if re.match(r'^[a-z]+://', source):
                continue
            sources.append(source)
    return sources


def check_recipe_references(dockerfile_text: str, project_root: Path) -> List[Path]:
    """
    Verify every file the Dockerfile copies in exists and is non-empty.

    Directory sources must exist; glob sources must match at least one file.

    Returns:
        Resolved paths of the referenced artifacts

    Raises:
        ArtifactMissingError: If a referenced source does not exist
        EmptyArtifactError: If a referenced file is empty
        ContentCheckError: If a COPY/ADD instruction cannot be parsed
    """
    referenced = []
    for source in copy_sources(dockerfile_text):
        if source in (".", "./"):
            continue

        if any(char in source for char in "*?["):
            matches = sorted(project_root.glob(source))
            if not matches:
                raise ArtifactMissingError(project_root / source, "Dockerfile COPY source")
            referenced.extend(matches)
            continue

        path = project_root / source
        if path.is_dir():
            referenced.append(path)
            continue
        read_artifact(path, "Dockerfile COPY source")
        referenced.append(path)
    return referenced
