"""
Pytest configuration and fixtures for bmml tests.
"""

from __future__ import annotations

import logging
import textwrap
from pathlib import Path
from typing import Any, Callable, Generator

import pytest
import yaml

from bmml.config import reset_config
from bmml.loader import DocumentLoader
from bmml.validator import clear_validator_cache


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Fresh config and caches for each test; ignore any BMML_* in the env."""
    for key in ("BMML_LOG_LEVEL", "BMML_OUTPUT_FORMAT", "BMML_FAIL_ON_WARNINGS", "BMML_SCHEMA_DIR"):
        monkeypatch.delenv(key, raising=False)
    levels = {name: logging.getLogger(name).level for name in ("bmml", "bmml.events")}
    reset_config()
    DocumentLoader.clear_cache()
    clear_validator_cache()
    yield
    reset_config()
    DocumentLoader.clear_cache()
    clear_validator_cache()
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


# ============================================================================
# Document Fixtures
# ============================================================================


META = {"name": "Test Business", "portfolio": "explore", "stage": "ideation"}


@pytest.fixture
def v2_doc() -> dict:
    """Minimal consistent v2 document: one segment, one VP, one fit."""
    return {
        "version": "2.0",
        "meta": dict(META),
        "customer_segments": [
            {
                "id": "cs-a",
                "name": "Segment A",
                "pains": [{"id": "pain-late", "description": "Deliveries are late"}],
            },
        ],
        "value_propositions": [
            {
                "id": "vp-x",
                "name": "Fast delivery",
                "pain_relievers": [{"id": "pr-fast", "name": "Same-day courier"}],
            },
        ],
        "fits": [
            {
                "id": "fit-x-a",
                "for": {"value_propositions": ["vp-x"], "customer_segments": ["cs-a"]},
                "mappings": [["pr-fast", "pain-late"]],
            },
        ],
    }


@pytest.fixture
def v1_doc() -> dict:
    """Minimal consistent v1 document: one segment, one VP, one fit."""
    return {
        "version": "1.0",
        "meta": dict(META),
        "customer_segments": [
            {
                "id": "cs-a",
                "name": "Segment A",
                "pains": [{"id": "pain-late", "description": "Deliveries are late"}],
            },
        ],
        "value_propositions": [
            {
                "id": "vp-x",
                "name": "Fast delivery",
                "products_services": [
                    {"id": "ps-courier", "type": "service", "description": "Courier"},
                ],
            },
        ],
        "fits": [
            {
                "id": "fit-x-a",
                "value_proposition": "vp-x",
                "customer_segment": "cs-a",
                "pain_relievers": [{"pain": "pain-late", "through": ["ps-courier"]}],
            },
        ],
    }


@pytest.fixture
def write_doc(tmp_path: Path) -> Callable[..., Path]:
    """Write a document (dict or YAML text) to a temp file and return its path."""

    def _write(doc: Any, name: str = "model.bmml") -> Path:
        path = tmp_path / name
        if isinstance(doc, str):
            path.write_text(textwrap.dedent(doc), encoding="utf-8")
        else:
            path.write_text(yaml.safe_dump(doc, sort_keys=False), encoding="utf-8")
        return path

    return _write
