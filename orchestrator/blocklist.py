"""
Regex blocklist gate applied at the strictest safe-search tier.

Rules run on Python's backtracking `re` engine, so a pathological rule such as
"(a+)+$" can take exponential time on a crafted query. The check is blocking;
async callers run it in a worker thread (see ResultResolver) and rule authors
should avoid nested quantifiers.
"""

import re

from orchestrator.errors import FilterRuleError
from utils.logger import get_logger

logger = get_logger(__name__)


def is_match_from_filter_list(file_path: str, query: str) -> bool:
    """
    Check whether the query matches any regex rule in a filter list file.

    Each non-blank line is compiled on its own. A rule that fails to compile
    fails the whole check rather than being skipped.

    Args:
        file_path: Path to the line-oriented rules file
        query: Search query to check

    Returns:
        True on the first matching rule, False when no rule matches

    Raises:
        FilterRuleError: If the file can't be read or a rule is not a valid regex
    """
    try:
        with open(file_path, encoding="utf-8") as rules:
            for line_no, line in enumerate(rules, start=1):
                rule = line.rstrip("\r\n")
                if not rule.strip():
                    continue
                try:
                    pattern = re.compile(rule)
                except re.error as e:
                    logger.error(
                        f"Invalid filter rule at {file_path}:{line_no}: {e}",
                        extra={"extra_fields": {"path": file_path, "line": line_no}},
                    )
                    raise FilterRuleError(
                        f"Invalid filter rule on line {line_no}: {e}",
                        path=file_path,
                        line_no=line_no,
                    ) from e
                if pattern.search(query):
                    return True
    except OSError as e:
        raise FilterRuleError(f"Unable to read filter list {file_path}: {e}", path=file_path) from e

    return False
