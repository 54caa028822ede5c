from typing import Dict, Mapping
import logging

logger = logging.getLogger(__name__)

# user-facing messages
ERROR_MESSAGES = {
    "bad_query": "Invalid listing parameters.",
    "bad_submission": "Invalid submission.",
    "quiz_mismatch": "Quiz ID mismatch",
}


def clean_query_args(args: Mapping[str, str]) -> Dict[str, str]:
    """
    Drop blank query-string values so model defaults apply.

    `?search=&page=2` becomes `{"page": "2"}`.
    """
    cleaned = {}
    for key, value in args.items():
        if value is None:
            continue
        value = value.strip()
        if not value:
            logger.debug("Ignoring blank query parameter %s", key)
            continue
        cleaned[key] = value
    return cleaned
