"""Helpers for building synthetic project trees in tests."""

from __future__ import annotations

import json
from pathlib import Path

COMPLIANT_PYPROJECT = "\n".join(
    [
        "[build-system]",
        'requires = ["setuptools>=68"]',
        'build-backend = "setuptools.build_meta"',
        "",
        "[project]",
        'name = "weather-agent"',
        'version = "0.1.0"',
        'dependencies = ["agents-sdk"]',
        "",
        "[tool.pytest.ini_options]",
        'testpaths = ["tests"]',
        "",
        "[tool.coverage.report]",
        "fail_under = 85",
        "",
    ]
)

DEPLOY_NOTEBOOK = json.dumps(
    {
        "cells": [
            {
                "cell_type": "code",
                "metadata": {},
                "source": [
                    "from src.agents.agent import build_agent\n",
                    "agent = build_agent()\n",
                ],
                "outputs": [],
                "execution_count": None,
            }
        ],
        "metadata": {},
        "nbformat": 4,
        "nbformat_minor": 5,
    },
    indent=1,
)


def write_file(root: Path, rel_path: str, content: str) -> Path:
    target = root / rel_path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target


def write_bytes(root: Path, rel_path: str, content: bytes) -> Path:
    target = root / rel_path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    return target


def build_compliant_project(tmp_path: Path) -> Path:
    """Create a project tree that satisfies every built-in rule."""
    root = tmp_path / "project"
    root.mkdir()
    write_file(
        root,
        "src/agents/agent.py",
        "\n".join(
            [
                '"""Weather agent."""',
                "",
                "from src.tools.forecast import get_forecast",
                "",
                "",
                "def build_agent():",
                '    return {"name": "weather", "tools": [get_forecast]}',
                "",
            ]
        ),
    )
    write_file(
        root,
        "src/tools/forecast.py",
        "def get_forecast(city: str) -> str:\n    return f\"Sunny in {city}\"\n",
    )
    write_file(
        root,
        "tests/test_agent.py",
        "\n".join(
            [
                "from src.agents.agent import build_agent",
                "",
                "",
                "def test_build_agent():",
                '    assert build_agent()["name"] == "weather"',
                "",
            ]
        ),
    )
    write_file(root, "pyproject.toml", COMPLIANT_PYPROJECT)
    write_file(root, "deploy/deploy.ipynb", DEPLOY_NOTEBOOK)
    return root


def build_agent_only_project(tmp_path: Path) -> Path:
    """Create a project holding nothing but ``src/agents/agent.py``."""
    root = tmp_path / "agent-only"
    root.mkdir()
    write_file(root, "src/agents/agent.py", "def build_agent():\n    return None\n")
    return root
