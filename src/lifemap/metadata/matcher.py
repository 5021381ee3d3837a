"""Execution filter matching.

Matching is structural: groupId and artifactId compare by exact string
equality, the version must fall in the filter's version range and the goal
must be one of the filter's goals. Absent or empty fields match anything, so
a filter with every field absent selects every execution.
"""

from __future__ import annotations

from lifemap.metadata.models import ExecutionFilter, MojoExecutionKey


def matches(execution_filter: ExecutionFilter, execution: MojoExecutionKey) -> bool:
    """Return True when ``execution`` is selected by ``execution_filter``.

    Args:
        execution_filter: Declarative filter (fields may be absent)
        execution: Concrete mojo execution

    Returns:
        bool: all present filter fields match
    """
    if execution_filter.group_id is not None and execution_filter.group_id != execution.group_id:
        return False
    if execution_filter.artifact_id is not None and execution_filter.artifact_id != execution.artifact_id:
        return False
    if execution_filter.goals and execution.goal not in execution_filter.goals:
        return False
    version_range = execution_filter.parsed_range
    if version_range is not None and not version_range.contains(execution.version or ""):
        return False
    return True
