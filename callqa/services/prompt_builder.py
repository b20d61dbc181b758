"""Prompt assembly for the call analysis request.

The SOP rubric is business policy, so it lives in a Markdown file shipped
under ``callqa/rubrics`` (or a path from settings) rather than in code. A
rubric file may start with ``key: value`` header lines closed by ``---``;
``name`` and ``version`` are recognised there.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path

from callqa.domain.errors import ConfigurationError

DEFAULT_RUBRIC_FILE = "archival_designs.md"
UNVERSIONED = "unversioned"

TASK_INSTRUCTION = (
    "Analyze the attached audio file of a sales call between the sales agent and a customer.\n"
    "\n"
    "Perform the following tasks:\n"
    "1. Generate a diarized transcript. Label the agent's turns \"Salesperson\" and the "
    "customer's turns \"Prospect\", with MM:SS timestamps in chronological order.\n"
    "2. Analyze the sentiment/engagement of the customer throughout the call as roughly "
    "15-20 points ordered by time, each scored from 0 to 100.\n"
    "3. Create a coaching card evaluating the agent STRICTLY against the provided SOP rules.\n"
    "\n"
    "Return the data strictly in JSON format matching the provided schema."
)


@dataclass(frozen=True)
class SopRubric:
    """Standard operating procedure the agent is evaluated against."""

    name: str
    version: str
    text: str = field(repr=False)


def parse_rubric(content: str, *, default_name: str = "rubric") -> SopRubric:
    """Split an optional ``key: value`` header from the rubric body."""

    header: dict[str, str] = {}
    body = content
    head, separator, rest = content.partition("\n---\n")
    if separator:
        lines = [line.strip() for line in head.splitlines() if line.strip()]
        if lines and all(":" in line for line in lines):
            for line in lines:
                key, _, value = line.partition(":")
                header[key.strip().lower()] = value.strip()
            body = rest

    text = body.strip()
    if not text:
        raise ConfigurationError(f"Rubric '{default_name}' is empty")
    return SopRubric(
        name=header.get("name") or default_name,
        version=header.get("version") or UNVERSIONED,
        text=text,
    )


def load_rubric(path: str | Path | None = None) -> SopRubric:
    """Load the configured rubric, or the packaged default when ``path`` is empty."""

    try:
        if not path:
            source = resources.files("callqa") / "rubrics" / DEFAULT_RUBRIC_FILE
            content = source.read_text(encoding="utf-8")
            default_name = Path(DEFAULT_RUBRIC_FILE).stem
        else:
            rubric_path = Path(path)
            content = rubric_path.read_text(encoding="utf-8")
            default_name = rubric_path.stem
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Unable to load SOP rubric: {exc}") from exc

    return parse_rubric(content, default_name=default_name)


def build_prompt(rubric_text: str) -> str:
    """Concatenate the SOP rubric with the fixed task instruction."""

    return f"{rubric_text.strip()}\n\n{TASK_INSTRUCTION}\n"


__all__ = [
    "SopRubric",
    "TASK_INSTRUCTION",
    "build_prompt",
    "load_rubric",
    "parse_rubric",
]
