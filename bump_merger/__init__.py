"""Dependency-bump auto merger.

Approves and merges open pull requests from a dependency bot when:
- every check run concluded ``success`` or ``neutral``
- every commit status context (latest entry) is ``success``
- the version bump parsed from the title is within the configured threshold
"""

__version__ = "1.0.0"
