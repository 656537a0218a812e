"""Tests for mirror block editing."""

import tomllib

import pytest
from conftest import DEFAULT_CONFIG, MIRROR_HEADER

from containerd_mirror.mirror_blocks import (
    find_mirror_endpoints,
    mirror_table_header,
    patch_mirror,
    render_mirror_block,
    strip_mirror_blocks,
)

UPSTREAM = "registry.k8s.io"

DOCKER_HUB_BLOCK = """[plugins."io.containerd.grpc.v1.cri".registry.mirrors."docker.io"]
  endpoint = ["https://mirror.gcr.io"]
"""


def _block(endpoint: str) -> str:
    return f'{MIRROR_HEADER}\n  endpoint = ["{endpoint}"]\n'


class TestHeaderAndBlock:
    """Tests for rendering headers and blocks."""

    def test_header_literal(self) -> None:
        """The header names the CRI plugin and quotes the upstream."""
        assert mirror_table_header(UPSTREAM) == MIRROR_HEADER

    def test_render_block(self) -> None:
        """The block is preceded by a blank line and ends with a newline."""
        block = render_mirror_block(UPSTREAM, "http://10.0.0.1:5000")
        assert block == f'\n{MIRROR_HEADER}\n  endpoint = ["http://10.0.0.1:5000"]\n'


class TestStripMirrorBlocks:
    """Tests for strip_mirror_blocks."""

    def test_no_block_passes_through(self) -> None:
        """A document without the block is returned unchanged."""
        text, removed = strip_mirror_blocks(DEFAULT_CONFIG, UPSTREAM)
        assert text == DEFAULT_CONFIG
        assert removed == 0

    def test_block_at_end_of_file(self) -> None:
        """A trailing block is removed up to the end of the document."""
        text, removed = strip_mirror_blocks(DEFAULT_CONFIG + "\n" + _block("http://old:5000"), UPSTREAM)
        assert removed == 1
        assert MIRROR_HEADER not in text
        assert "http://old:5000" not in text
        assert text == DEFAULT_CONFIG + "\n"

    def test_block_followed_by_other_section(self) -> None:
        """Skipping stops at the next table header, which is kept."""
        source = _block("http://old:5000") + DOCKER_HUB_BLOCK
        text, removed = strip_mirror_blocks(source, UPSTREAM)
        assert removed == 1
        assert text == DOCKER_HUB_BLOCK

    def test_duplicate_blocks_are_all_removed(self) -> None:
        """Every occurrence is removed, including back-to-back headers."""
        source = (
            "version = 2\n\n"
            + _block("http://one:5000")
            + _block("http://two:5000")
            + "\n"
            + DOCKER_HUB_BLOCK
            + "\n"
            + _block("http://three:5000")
        )
        text, removed = strip_mirror_blocks(source, UPSTREAM)
        assert removed == 3
        assert MIRROR_HEADER not in text
        assert text == "version = 2\n\n" + DOCKER_HUB_BLOCK + "\n"

    def test_other_sections_keep_their_order(self) -> None:
        """Sections around a removed block stay in their original order."""
        source = "[a]\nx = 1\n" + _block("http://old:5000") + "[b]\ny = 2\n[c]\nz = 3\n"
        text, _ = strip_mirror_blocks(source, UPSTREAM)
        assert text == "[a]\nx = 1\n[b]\ny = 2\n[c]\nz = 3\n"

    def test_only_exact_header_matches(self) -> None:
        """Headers for other upstreams or with extra text are not matched."""
        near_misses = (
            '[plugins."io.containerd.grpc.v1.cri".registry.mirrors."registry.k8s.io.example"]\n'
            '  endpoint = ["http://a"]\n'
            '[plugins."io.containerd.grpc.v1.cri".registry.mirrors."registry.k8s.io"] # note\n'
            '  endpoint = ["http://b"]\n'
        )
        text, removed = strip_mirror_blocks(near_misses, UPSTREAM)
        assert removed == 0
        assert text == near_misses

    def test_indented_lines_do_not_end_block(self) -> None:
        """Only a header in column 0 ends a block being skipped."""
        source = _block("http://old:5000") + '  [plugins."nested"]\n  k = 1\n[after]\n'
        text, removed = strip_mirror_blocks(source, UPSTREAM)
        assert removed == 1
        assert text == "[after]\n"

    def test_crlf_line_endings(self) -> None:
        """Headers are matched regardless of the line terminator."""
        source = f'{MIRROR_HEADER}\r\n  endpoint = ["http://old"]\r\n[other]\r\n'
        text, removed = strip_mirror_blocks(source, UPSTREAM)
        assert removed == 1
        assert text == "[other]\r\n"


class TestPatchMirror:
    """Tests for patch_mirror."""

    def test_appends_block_to_default_config(self) -> None:
        """A fresh block is appended and the result parses."""
        patched, removed = patch_mirror(DEFAULT_CONFIG, UPSTREAM, "http://10.0.0.1:5000")
        assert removed == 0
        assert patched.startswith(DEFAULT_CONFIG.rstrip("\n"))
        assert patched.count(MIRROR_HEADER) == 1
        assert find_mirror_endpoints(patched, UPSTREAM) == ["http://10.0.0.1:5000"]

    def test_replaces_existing_endpoint(self) -> None:
        """An existing block is replaced rather than duplicated."""
        source = DEFAULT_CONFIG + "\n" + _block("http://old:5000")
        patched, removed = patch_mirror(source, UPSTREAM, "http://new:5000")
        assert removed == 1
        assert patched.count(MIRROR_HEADER) == 1
        assert find_mirror_endpoints(patched, UPSTREAM) == ["http://new:5000"]

    def test_patching_is_idempotent(self) -> None:
        """Patching twice yields byte-identical text."""
        once, _ = patch_mirror(DEFAULT_CONFIG, UPSTREAM, "http://10.0.0.1:5000")
        twice, removed = patch_mirror(once, UPSTREAM, "http://10.0.0.1:5000")
        assert removed == 1
        assert twice == once

    def test_missing_trailing_newline(self) -> None:
        """A document without a final newline still gets a well-formed block."""
        patched, _ = patch_mirror("version = 2", UPSTREAM, "http://r:5000")
        assert patched == f'version = 2\n\n{MIRROR_HEADER}\n  endpoint = ["http://r:5000"]\n'

    def test_empty_document(self) -> None:
        """An empty document becomes just the block."""
        patched, removed = patch_mirror("", UPSTREAM, "http://r:5000")
        assert removed == 0
        assert find_mirror_endpoints(patched, UPSTREAM) == ["http://r:5000"]


class TestFindMirrorEndpoints:
    """Tests for find_mirror_endpoints."""

    def test_no_mirror(self) -> None:
        """No mirror configured yields an empty list."""
        assert find_mirror_endpoints(DEFAULT_CONFIG, UPSTREAM) == []

    def test_other_upstream_ignored(self) -> None:
        """Mirrors for other registries are not reported."""
        assert find_mirror_endpoints(DOCKER_HUB_BLOCK, UPSTREAM) == []
        assert find_mirror_endpoints(DOCKER_HUB_BLOCK, "docker.io") == ["https://mirror.gcr.io"]

    def test_invalid_toml_raises(self) -> None:
        """Invalid documents raise the parser error."""
        with pytest.raises(tomllib.TOMLDecodeError):
            find_mirror_endpoints("[broken\n", UPSTREAM)
