#!/usr/bin/env python3
"""
ProjectLoader.py — Scratch project documents to typed targets

Locates a Scratch 3 project document (a local ``project.json`` or a project
URL resolved through the on-disk cache) and decodes the parts of it the
compiler needs: per target, its name, stage flag, variables, lists and block
map. Everything else in the document (costumes, sounds, monitors) is ignored.

Architecture:
- get_project_id / cache_path: URL handling and cache layout
- parse_project: JSON document -> Project
- load_project: Source resolution (file path or URL) + parse
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import urlparse

from ..diagnostics import InvalidProjectError, codes
from .BlockModel import Block, parse_blocks

# Variable/list id -> (display name, initial value)
Declarations = Dict[str, Tuple[str, Any]]


@dataclass
class Target:
    """One sprite or the stage."""
    name: str
    is_stage: bool = False
    variables: Declarations = field(default_factory=dict)
    lists: Declarations = field(default_factory=dict)
    blocks: Dict[str, Block] = field(default_factory=dict)


@dataclass
class Project:
    targets: List[Target] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)

    def target(self, name: str) -> Optional[Target]:
        for target in self.targets:
            if target.name == name:
                return target
        return None


# ----------------------------------------------------------------------
# URLs and cache
# ----------------------------------------------------------------------

def get_project_id(url: str) -> int:
    """
    Extract the numeric project id from a Scratch project URL.

    Examples:
        https://scratch.mit.edu/projects/1182094620/        -> 1182094620
        https://scratch.mit.edu/projects/1234567890/editor  -> 1234567890
        https://scratch.mit.edu/users/username/             -> InvalidProjectError
    """
    segments = urlparse(url).path.split("/")
    if "projects" not in segments:
        raise InvalidProjectError(codes.INVALID_URL, reason=f"no 'projects' segment in '{url}'")

    position = segments.index("projects") + 1
    candidate = segments[position] if position < len(segments) else ""
    if not candidate.isdigit():
        raise InvalidProjectError(codes.INVALID_URL, reason=f"no project id in '{url}'")
    return int(candidate)


def cache_path(project_id: int, cache_dir: Union[str, Path]) -> Path:
    return Path(cache_dir) / f"projects-{project_id}.json"


def is_project_url(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


# ----------------------------------------------------------------------
# Document decoding
# ----------------------------------------------------------------------

def _declarations(raw: Any, target_name: str, kind: str) -> Declarations:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise InvalidProjectError(reason=f"{kind} of target '{target_name}' is not an object")

    declared: Declarations = {}
    for decl_id, entry in raw.items():
        if not isinstance(entry, (list, tuple)) or len(entry) < 2:
            raise InvalidProjectError(
                reason=f"{kind[:-1]} '{decl_id}' of target '{target_name}' is not a [name, value] pair")
        declared[decl_id] = (str(entry[0]), entry[1])
    return declared


def _parse_target(raw: Any, position: int) -> Target:
    if not isinstance(raw, dict):
        raise InvalidProjectError(reason=f"target #{position} is not an object")
    if "name" not in raw:
        raise InvalidProjectError(reason=f"target #{position} has no name")

    name = str(raw["name"])
    raw_blocks = raw.get("blocks") or {}
    if not isinstance(raw_blocks, dict):
        raise InvalidProjectError(reason=f"blocks of target '{name}' is not an object")

    return Target(
        name=name,
        is_stage=bool(raw.get("isStage", False)),
        variables=_declarations(raw.get("variables"), name, "variables"),
        lists=_declarations(raw.get("lists"), name, "lists"),
        blocks=parse_blocks(raw_blocks),
    )


def parse_project(document: Any) -> Project:
    """
    Decode a project document.

    Only the structure needed to build typed records is checked; a missing
    or mistyped ``targets`` array, target name or declaration pair raises
    InvalidProjectError (PRJ003). Malformed blocks are decoded tolerantly.
    """
    if not isinstance(document, dict):
        raise InvalidProjectError(reason="document is not a JSON object")
    raw_targets = document.get("targets")
    if not isinstance(raw_targets, list):
        raise InvalidProjectError(reason="'targets' is missing or not an array")

    targets = [_parse_target(raw, i) for i, raw in enumerate(raw_targets)]
    meta = document.get("meta") if isinstance(document.get("meta"), dict) else {}
    return Project(targets=targets, meta=dict(meta))


def read_project_file(path: Union[str, Path]) -> Project:
    path = Path(path)
    if not path.is_file():
        raise InvalidProjectError(codes.PROJECT_NOT_FOUND, reason=f"no such file '{path}'")
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InvalidProjectError(reason=f"'{path}' is not valid JSON ({e.msg}, line {e.lineno})") from e
    return parse_project(document)


def load_project(source: Union[str, Path], cache_dir: Union[str, Path] = Path(".screcel") / "cache") -> Project:
    """
    Load a project from a JSON file path or a Scratch project URL.

    URLs are resolved against ``cache_dir``; downloading is not performed,
    so an uncached project raises InvalidProjectError (PRJ002).
    """
    if isinstance(source, str) and is_project_url(source):
        project_id = get_project_id(source)
        cached = cache_path(project_id, cache_dir)
        if not cached.is_file():
            raise InvalidProjectError(
                codes.PROJECT_NOT_FOUND,
                reason=f"project {project_id} is not cached at '{cached}'")
        return read_project_file(cached)
    return read_project_file(source)
