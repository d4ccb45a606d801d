"""Pytest configuration and shared fixtures."""

import tempfile
from pathlib import Path

import pytest

SAMPLE_TYPESCRIPT = """\
// Greeting module
import { format } from "./format";
import * as path from 'node:path';

/**
 * Build a greeting.
 */
export function greet(name: string): string {
    const prefix = "Hello"; // trailing note
    return `${prefix}, ${name}! ${"inner"}`;
}

const fs = require("fs");
const empty = "";
const again = "Hello";
const config = { "mode": "strict", retries: 3 };
"""

SAMPLE_TYPESCRIPT_REWRITTEN = """\
import { format } from "0";
import * as path from '1';

export function greet(name: string): string {
    const prefix = "2";
    return `${prefix}, ${name}! ${"3"}`;
}

const fs = require("4");
const empty = "5";
const again = "6";
const config = { "mode": "7", retries: 3 };
"""

SAMPLE_TYPESCRIPT_MAPPING = {
    "0": "./format",
    "1": "node:path",
    "2": "Hello",
    "3": "inner",
    "4": "fs",
    "5": "",
    "6": "Hello",
    "7": "strict",
}


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_typescript_file(temp_dir: Path) -> Path:
    """Create a sample TypeScript file for testing."""
    filepath = temp_dir / "sample.ts"
    filepath.write_text(SAMPLE_TYPESCRIPT, encoding="utf-8")
    return filepath


@pytest.fixture
def greeting_source() -> str:
    """The three-line greeting program."""
    return (
        'const name = "World";\n'
        "console.log(`Hello, ${name}!`);\n"
        'const greeting = "Welcome";\n'
    )


@pytest.fixture
def sample_typescript() -> str:
    """Sample source with comments, imports, templates and an object key."""
    return SAMPLE_TYPESCRIPT


@pytest.fixture
def sample_rewritten() -> str:
    """Expected rewritten form of the sample source."""
    return SAMPLE_TYPESCRIPT_REWRITTEN


@pytest.fixture
def sample_mapping() -> dict[str, str]:
    """Expected mapping for the sample source."""
    return dict(SAMPLE_TYPESCRIPT_MAPPING)
