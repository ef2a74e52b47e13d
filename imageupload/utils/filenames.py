import re

UNSAFE_CHARS = re.compile(r'[<>:"|?*/\\\x00-\x1f]')
WHITESPACE = re.compile(r"\s+")
REPEATED_UNDERSCORES = re.compile(r"_{2,}")

PLACEHOLDER_NAME = "unnamed_file"


def sanitize_file_name(file_name: str) -> str:
    """
    Normalize a raw file name into something safe to embed in a storage key.

    Never fails: anything that reduces to an empty string becomes
    ``unnamed_file``. Applying it twice gives the same result as once.
    """
    sanitized = UNSAFE_CHARS.sub("_", file_name or "")
    sanitized = WHITESPACE.sub("_", sanitized)
    sanitized = REPEATED_UNDERSCORES.sub("_", sanitized)
    sanitized = sanitized.strip("_")

    if sanitized.startswith("."):
        sanitized = "file_" + sanitized[1:]
        sanitized = REPEATED_UNDERSCORES.sub("_", sanitized).rstrip("_")

    if not sanitized:
        sanitized = PLACEHOLDER_NAME

    return sanitized
