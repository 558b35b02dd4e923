"""
Grouping and summarizing of repetitive output lines.

Used at report time, after a task has completed, when its cognitive load
is high and summarization is enabled. Lines are clustered by a similarity
key, error groups are shown before warning groups before everything else,
and groups larger than the sample size are cut down to a sample plus one
"... K similar <key>" line.
"""

import re

from fo.design.system import LineContext, LineType, OutputLine

MIN_GROUPABLE_LENGTH = 10

# path-like-token:line-number, e.g. "handler.go:42" or "src/app.py:7"
SOURCE_LOCATION = re.compile(r"([^/\s]+\.[a-zA-Z0-9]+:\d+)")


def group_key(line: OutputLine) -> str:
    """Similarity key used to cluster output lines."""
    line_type = line.type.value
    content = line.content

    if len(content) < MIN_GROUPABLE_LENGTH:
        return f"short_{line_type}"

    words = content.split()
    if line.type in (LineType.ERROR, LineType.WARNING):
        match = SOURCE_LOCATION.search(content)
        if match:
            return f"{line_type}_{match.group(1)}"
        return f"{line_type}_" + "_".join(words[:2])

    return f"{line_type}_{words[0] if words else ''}"


def group_similar_lines(lines: list[OutputLine]) -> dict[str, list[OutputLine]]:
    """
    Cluster lines by group key.

    Groups keep the order in which their key first appeared, and lines
    inside a group keep arrival order.
    """
    groups: dict[str, list[OutputLine]] = {}
    for line in lines:
        groups.setdefault(group_key(line), []).append(line)
    return groups


def _group_rank(lines: list[OutputLine]) -> int:
    line_type = lines[0].type
    if line_type == LineType.ERROR:
        return 0
    if line_type == LineType.WARNING:
        return 1
    return 2


def ordered_groups(groups: dict[str, list[OutputLine]]) -> list[tuple[str, list[OutputLine]]]:
    """Error groups, then warning groups, then the rest, each in first-appearance order."""
    # sorted() is stable, so first-appearance order survives within each rank
    return sorted(groups.items(), key=lambda item: _group_rank(item[1]))


def summarize_group(
    key: str,
    lines: list[OutputLine],
    sample_size: int,
    enabled: bool = True,
) -> list[OutputLine]:
    """
    Cut a group down to its first sample_size lines plus one summary line.

    Groups no larger than sample_size, or with summarization disabled, come
    back unchanged. The original lines are never modified.
    """
    if not enabled or len(lines) <= sample_size:
        return list(lines)

    hidden = len(lines) - sample_size
    summary = OutputLine(
        content=f"... {hidden} similar {key}",
        type=LineType.SUMMARY,
        timestamp=lines[-1].timestamp,
        indentation=1,
        context=LineContext(
            cognitive_load=lines[0].context.cognitive_load,
            importance=3,
            is_summary=True,
        ),
    )
    return [*lines[:sample_size], summary]


def summarize_lines(lines: list[OutputLine], sample_size: int, enabled: bool = True) -> list[OutputLine]:
    """Group, order and summarize lines into the flat sequence to render."""
    result: list[OutputLine] = []
    for key, group in ordered_groups(group_similar_lines(lines)):
        result.extend(summarize_group(key, group, sample_size, enabled))
    return result
