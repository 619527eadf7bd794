"""Tests for duodebate/output.py."""

from pathlib import Path

import pytest

from duodebate.models import DebateResult, DebateStatus, Role, Turn
from duodebate.output import _slug, save_to_file


def test_slug_basic():
    assert _slug("Write a haiku about autumn!") == "write-a-haiku-about-autumn"


def test_slug_max_len():
    assert len(_slug("a" * 100)) <= 40


def test_slug_special_chars():
    result = _slug("API vs. SDK (2024)")
    assert "." not in result
    assert "(" not in result
    assert ")" not in result


@pytest.fixture
def sample_debate_result() -> DebateResult:
    transcript = (
        Turn(Role.PROPOSER, "Old pond, frog jumps in", 1, "openai", DebateStatus.ONGOING),
        Turn(Role.CHALLENGER, "Needs a season word.", 1, "gemini", DebateStatus.ONGOING),
        Turn(Role.PROPOSER, "Added an autumn kigo.", 2, "openai", DebateStatus.READY),
    )
    return DebateResult(
        prompt="Write a haiku about autumn",
        transcript=transcript,
        final_status=DebateStatus.READY,
        total_iterations=1,
        final_draft="Autumn pond, a frog",
        sources=("https://example.com/basho",),
    )


def test_save_to_file_creates_file(tmp_path: Path, sample_debate_result: DebateResult):
    saved = save_to_file(sample_debate_result, tmp_path / "output")
    assert saved.exists()
    assert saved.suffix == ".md"


def test_save_to_file_creates_output_dir(tmp_path: Path, sample_debate_result: DebateResult):
    output_dir = tmp_path / "nested" / "output"
    assert not output_dir.exists()
    save_to_file(sample_debate_result, output_dir)
    assert output_dir.exists()


def test_save_to_file_content(tmp_path: Path, sample_debate_result: DebateResult):
    content = save_to_file(sample_debate_result, tmp_path).read_text(encoding="utf-8")
    assert "# DuoDebate: Write a haiku about autumn" in content
    assert "**Status:** READY" in content
    assert "**Iterations:** 1" in content
    assert "### Iteration 1: Proposer (openai)" in content
    assert "### Iteration 1: Challenger (gemini)" in content
    assert "Needs a season word." in content
    assert "## Final Draft" in content
    assert "Autumn pond, a frog" in content


def test_save_to_file_lists_sources(tmp_path: Path, sample_debate_result: DebateResult):
    content = save_to_file(sample_debate_result, tmp_path).read_text(encoding="utf-8")
    assert "## Sources" in content
    assert "- https://example.com/basho" in content


def test_save_to_file_without_sources(tmp_path: Path):
    result = DebateResult(
        prompt="Task",
        transcript=(Turn(Role.PROPOSER, "Error processing response: bad", 1, "openai", DebateStatus.ERROR),),
        final_status=DebateStatus.MAX_ITERATIONS,
        total_iterations=0,
        final_draft="",
    )
    content = save_to_file(result, tmp_path).read_text(encoding="utf-8")
    assert "## Sources" not in content
    assert "*Status: ERROR*" in content


def test_save_to_file_filename_has_slug(tmp_path: Path, sample_debate_result: DebateResult):
    saved = save_to_file(sample_debate_result, tmp_path)
    assert "haiku" in saved.name
