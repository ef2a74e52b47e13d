import asyncio
import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

from ..schemas.common import DOCX_CONTENT_TYPE, PDF_CONTENT_TYPE
from ..schemas.uploads import SecurityConfig, ValidationResult
from ..utils.files import SelectedFile

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255
HEADER_BYTES = 32

RESERVED_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{i}" for i in range(1, 10)]
    + [f"LPT{i}" for i in range(1, 10)]
)
INVALID_CHARS = re.compile(r'[<>:"|?*\x00-\x1f]')

# Image signatures; any match passes unless the config asks for strict matching.
IMAGE_SIGNATURES: Dict[str, List[Tuple[int, bytes]]] = {
    "image/jpeg": [(0, b"\xff\xd8\xff")],
    "image/png": [(0, b"\x89PNG\r\n\x1a\n")],
    "image/gif": [(0, b"GIF8")],
    "image/webp": [(0, b"RIFF")],
}

# Only consulted in strict mode.
STRICT_SIGNATURES: Dict[str, List[Tuple[int, bytes]]] = {
    **IMAGE_SIGNATURES,
    "image/webp": [(0, b"RIFF"), (8, b"WEBP")],
    PDF_CONTENT_TYPE: [(0, b"%PDF-")],
    DOCX_CONTENT_TYPE: [(0, b"PK\x03\x04")],
}


def format_size(num_bytes: int) -> str:
    """Human-readable size, e.g. ``10MB``, ``1.5MB``, ``500KB``."""
    for unit, factor in (("MB", 1024 * 1024), ("KB", 1024)):
        if num_bytes >= factor:
            value = f"{num_bytes / factor:.1f}".rstrip("0").rstrip(".")
            return f"{value}{unit}"
    return f"{num_bytes}B"


def validate_file_name(file_name: str) -> ValidationResult:
    """
    Rejects names that could escape a directory, smuggle a null byte, hit a
    Windows device name, carry shell-hostile characters, exceed 255 chars or
    hide themselves behind a leading dot.
    """
    if "../" in file_name or "..\\" in file_name:
        return ValidationResult.fail("File name contains path traversal characters")

    if "\0" in file_name:
        return ValidationResult.fail("File name contains null bytes")

    if file_name.split(".")[0].upper() in RESERVED_NAMES:
        return ValidationResult.fail("File name is a reserved system name")

    if INVALID_CHARS.search(file_name):
        return ValidationResult.fail("File name contains invalid characters")

    if len(file_name) > MAX_NAME_LENGTH:
        return ValidationResult.fail(f"File name is too long (max {MAX_NAME_LENGTH} characters)")

    if file_name.startswith("."):
        return ValidationResult.fail("Hidden files are not allowed")

    return ValidationResult.ok()


def validate_file_size(size: int, max_size: int) -> ValidationResult:
    if size <= 0:
        return ValidationResult.fail("File is empty")
    if size > max_size:
        return ValidationResult.fail(f"File size exceeds maximum limit of {format_size(max_size)}")
    return ValidationResult.ok()


def validate_file_type(file_name: str, content_type: str, config: SecurityConfig) -> ValidationResult:
    # MIME type and extension must both be allowed; neither is a fallback for the other.
    if content_type not in config.allowed_mime_types:
        return ValidationResult.fail(
            f"File type {content_type or 'unknown'} is not allowed. "
            f"Allowed types: {', '.join(config.allowed_mime_types)}"
        )

    lowered = file_name.lower()
    if not any(lowered.endswith(ext.lower()) for ext in config.allowed_extensions):
        return ValidationResult.fail(
            f"File extension is not allowed. Allowed extensions: {', '.join(config.allowed_extensions)}"
        )

    return ValidationResult.ok()


def _matches(head: bytes, signature: List[Tuple[int, bytes]]) -> bool:
    return all(head[offset:offset + len(magic)] == magic for offset, magic in signature)


def check_header_bytes(head: bytes, content_type: str, strict: bool = False) -> ValidationResult:
    """
    Magic-byte check on the first bytes of a file.

    Loose mode accepts the bytes if they look like any known image, whatever
    the declared type says. Strict mode requires the declared type's own
    signature. Declared types with no signature entry are exempt.
    """
    table = STRICT_SIGNATURES if strict else IMAGE_SIGNATURES
    if content_type not in table:
        return ValidationResult.ok()

    if strict:
        if _matches(head, table[content_type]):
            return ValidationResult.ok()
        return ValidationResult.fail(f"File content does not match declared type {content_type}")

    if any(_matches(head, sig) for sig in table.values()):
        return ValidationResult.ok()
    return ValidationResult.fail("File does not appear to be a valid image")


async def validate_file_header(file: SelectedFile, config: Optional[SecurityConfig] = None) -> ValidationResult:
    config = config or SecurityConfig()
    try:
        head = await asyncio.to_thread(file.read_head, HEADER_BYTES)
    except OSError as e:
        logger.warning("Could not read header of %s: %s", file.name, e)
        return ValidationResult.fail("Could not read file for validation")
    return check_header_bytes(head, file.type, strict=config.strict_signatures)


Check = Callable[[SelectedFile, SecurityConfig], ValidationResult]

SYNC_CHECKS: List[Check] = [
    lambda f, c: validate_file_name(f.name),
    lambda f, c: validate_file_size(f.size, c.max_file_size),
    lambda f, c: validate_file_type(f.name, f.type, c),
]


async def validate_file(file: SelectedFile, config: Optional[SecurityConfig] = None) -> ValidationResult:
    """
    Runs name, size, type and magic-byte checks in that order and returns the
    first failure. The header read only happens once the cheap checks pass.
    """
    config = config or SecurityConfig()

    for check in SYNC_CHECKS:
        result = check(file, config)
        if not result.is_valid:
            return result

    return await validate_file_header(file, config)
