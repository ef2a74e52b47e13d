import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .core.config import settings
from .core.errors import UploadError
from .schemas.uploads import UploadEvent
from .services.orchestrator import UploadOrchestrator, default_security_config
from .services.upload_api import PresignedUploader, UploadApiClient
from .utils.files import SelectedFile

logger = logging.getLogger("imageupload")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imageupload",
        description="Validate files locally and upload them through presigned URLs.",
    )
    parser.add_argument("files", nargs="+", help="files to upload")
    parser.add_argument("--api-base-url", default=None, help="grant endpoint base URL")
    parser.add_argument("--direct", action="store_true", help="write straight to the S3 bucket instead")
    parser.add_argument("--max-size", type=int, default=None, help="maximum file size in bytes")
    parser.add_argument(
        "--allowed-type", action="append", dest="allowed_types", default=None,
        help="allowed MIME type (repeatable)",
    )
    parser.add_argument("--strict-signatures", action="store_true",
                        help="require magic bytes to match the declared type")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def print_event(event: UploadEvent) -> None:
    suffix = f" -> {event.url}" if event.url else ""
    print(f"[{event.status}] {event.name} ({event.size} bytes){suffix}")


def print_notice(error: UploadError) -> None:
    print(f"[rejected] {error}", file=sys.stderr)


def make_uploader(args: argparse.Namespace):
    if args.direct:
        from .services.aws import S3DirectUploader
        return S3DirectUploader()
    return PresignedUploader(UploadApiClient(base_url=args.api_base_url))


async def run(args: argparse.Namespace) -> int:
    files: List[SelectedFile] = []
    for path in args.files:
        try:
            files.append(SelectedFile.from_path(path))
        except OSError as e:
            print(f"[rejected] {path}: {e.strerror or e}", file=sys.stderr)
            return 1

    config = default_security_config()
    if args.strict_signatures:
        config = config.model_copy(update={"strict_signatures": True})

    orchestrator = UploadOrchestrator(
        make_uploader(args),
        security_config=config,
        on_status=print_event,
        on_notice=print_notice,
    )
    report = await orchestrator.submit(
        files,
        max_file_size=args.max_size,
        allowed_types=args.allowed_types,
    )
    for task in report.failed:
        print(f"[error] {task.error}", file=sys.stderr)
    return 0 if report.all_succeeded else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(run(args))
    except RuntimeError as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
