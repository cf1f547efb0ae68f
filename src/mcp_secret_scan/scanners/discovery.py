"""MCP configuration discovery.

Turns command-line paths (or nothing at all) into a flat list of candidate
configuration files. The scanner itself never walks the filesystem.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAMES = ("mcp.json", ".mcp.json", "claude_desktop_config.json", "mcp-config.json")
DEFAULT_SKIP_DIRS = ("node_modules",)
DEFAULT_MAX_DEPTH = 5


@dataclass
class Targets:
    """Files to scan plus notices for paths that were not expanded."""
    files: List[Path] = field(default_factory=list)
    notices: List[str] = field(default_factory=list)


def expand_location(location: str, cwd: Optional[Path] = None) -> Path:
    """Expand ``~`` and resolve relative locations against ``cwd``."""
    path = Path(os.path.expanduser(location))
    if not path.is_absolute():
        path = (cwd or Path.cwd()) / path
    return path


def existing_default_locations(locations: Iterable[str], cwd: Optional[Path] = None) -> List[Path]:
    """Return the default locations that exist and are readable."""
    found = []
    for location in locations:
        path = expand_location(location, cwd)
        if path.is_file() and os.access(path, os.R_OK):
            found.append(path)
        else:
            logger.debug(f"No config at {path}")
    return found


def find_configs_recursive(root: Path,
                           config_names: Sequence[str] = DEFAULT_CONFIG_NAMES,
                           max_depth: int = DEFAULT_MAX_DEPTH,
                           skip_dirs: Sequence[str] = DEFAULT_SKIP_DIRS,
                           _depth: int = 0) -> List[Path]:
    """Find MCP config files under ``root``, skipping hidden and vendored directories."""
    if _depth > max_depth:
        return []

    results = []
    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
    except OSError as e:
        logger.debug(f"Cannot list {root}: {e}")
        return results

    for entry in entries:
        if entry.is_file() and entry.name in config_names:
            results.append(entry)
        elif entry.is_dir() and not entry.name.startswith(".") and entry.name not in skip_dirs:
            results.extend(find_configs_recursive(entry, config_names, max_depth, skip_dirs, _depth + 1))
    return results


def resolve_targets(paths: Iterable[str],
                    recursive: bool = False,
                    config_names: Sequence[str] = DEFAULT_CONFIG_NAMES,
                    max_depth: int = DEFAULT_MAX_DEPTH,
                    skip_dirs: Sequence[str] = DEFAULT_SKIP_DIRS) -> Targets:
    """Resolve command-line paths into files to scan.

    Directories are only walked when ``recursive`` is set. Paths that do not
    exist are passed through so the scanner reports them as unreadable.
    """
    targets = Targets()
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            if recursive:
                found = find_configs_recursive(path, config_names, max_depth, skip_dirs)
                logger.info(f"Found {len(found)} config(s) under {path}")
                targets.files.extend(found)
            else:
                targets.notices.append(f"{raw} is a directory. Use --recursive to scan it.")
        else:
            targets.files.append(path)
    return targets
