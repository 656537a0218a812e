"""Line-oriented editing of containerd registry mirror blocks.

containerd reads registry mirrors from tables of the form::

    [plugins."io.containerd.grpc.v1.cri".registry.mirrors."registry.k8s.io"]
      endpoint = ["http://10.0.0.1:5000"]

Declaring the same table twice makes the document invalid TOML, so existing
blocks for an upstream are stripped before a fresh one is appended. Editing
is done on text rather than through a TOML round-trip so that every other
section, comment and ordering in the file is preserved as written.
"""

import tomllib
from enum import Enum
from typing import Any, Dict, List, Tuple

CRI_PLUGIN = "io.containerd.grpc.v1.cri"


class _ScanState(Enum):
    PASSTHROUGH = "passthrough"
    SKIPPING = "skipping"


def mirror_table_header(upstream: str) -> str:
    """Return the exact table header line for an upstream's mirror block."""
    return f'[plugins."{CRI_PLUGIN}".registry.mirrors."{upstream}"]'


def render_mirror_block(upstream: str, endpoint: str) -> str:
    """Render the canonical mirror block, preceded by a blank line.

    Args:
        upstream: Registry name being mirrored
        endpoint: Mirror URL, including scheme

    Returns:
        Block text ending in a newline
    """
    return f'\n{mirror_table_header(upstream)}\n  endpoint = ["{endpoint}"]\n'


def strip_mirror_blocks(text: str, upstream: str) -> Tuple[str, int]:
    """Remove every mirror block for ``upstream`` from a TOML document.

    A block starts at a line that is exactly the table header and runs until
    the next line opening a table in column 0, or the end of the document.
    Headers for other registries, indented headers and everything outside the
    matched blocks are kept unchanged and in order.

    Args:
        text: Document text
        upstream: Registry name whose blocks are removed

    Returns:
        Tuple of the filtered text and the number of blocks removed
    """
    header = mirror_table_header(upstream)
    state = _ScanState.PASSTHROUGH
    kept: List[str] = []
    removed = 0

    for line in text.splitlines(keepends=True):
        if line.rstrip("\r\n") == header:
            state = _ScanState.SKIPPING
            removed += 1
            continue
        if state is _ScanState.SKIPPING and line.startswith("["):
            state = _ScanState.PASSTHROUGH
        if state is _ScanState.PASSTHROUGH:
            kept.append(line)

    return "".join(kept), removed


def patch_mirror(text: str, upstream: str, endpoint: str) -> Tuple[str, int]:
    """Strip existing blocks for ``upstream`` and append a fresh one.

    Trailing blank lines are collapsed before the block is appended, so
    patching an already patched document returns it unchanged.

    Returns:
        Tuple of the patched text and the number of stale blocks removed
    """
    stripped, removed = strip_mirror_blocks(text, upstream)
    stripped = stripped.rstrip("\r\n")
    if stripped:
        stripped += "\n"
    return stripped + render_mirror_block(upstream, endpoint), removed


def parse_toml(text: str) -> Dict[str, Any]:
    """Parse a TOML document.

    Raises:
        tomllib.TOMLDecodeError: If the document is not valid TOML
    """
    return tomllib.loads(text)


def find_mirror_endpoints(text: str, upstream: str) -> List[str]:
    """Return the endpoints registered for ``upstream`` in a TOML document.

    Returns an empty list when no mirror is configured for it.

    Raises:
        tomllib.TOMLDecodeError: If the document is not valid TOML
    """
    doc = parse_toml(text)
    try:
        mirror = doc["plugins"][CRI_PLUGIN]["registry"]["mirrors"][upstream]
    except (KeyError, TypeError):
        return []
    endpoints = mirror.get("endpoint", []) if isinstance(mirror, dict) else []
    return [str(e) for e in endpoints]
