"""Command-line entry point: run the API server or classify text from the shell.

Usage:
    python -m conotate serve [--host HOST] [--port PORT]
    python -m conotate classify "buy milk tomorrow"
    python -m conotate capture "/idea robot butler"
"""

import argparse
import asyncio
import json
import logging
import sys

from conotate.config import get_settings

logger = logging.getLogger(__name__)


def _serve(args: argparse.Namespace) -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "conotate.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level="debug" if args.verbose else "info",
    )


async def _classify(text: str) -> dict[str, object]:
    from conotate.api.dependencies import get_classifier, get_library_store, get_model_client

    sections = get_library_store().list_sections()
    result = await get_classifier().classify(text, sections)
    client = get_model_client()
    if client is not None:
        await client.aclose()
    return result.to_record()


async def _capture(text: str) -> dict[str, object]:
    from conotate.api.dependencies import get_model_client, get_notebook

    notebook = get_notebook()
    try:
        note, result, created = await notebook.capture(text)
        await notebook.drain()
    finally:
        client = get_model_client()
        if client is not None:
            await client.aclose()
    output: dict[str, object] = {"note": note.to_record(), **result.to_record()}
    if created is not None:
        output["createdSection"] = created.to_record()
    return output


def main() -> None:
    parser = argparse.ArgumentParser(description="Conotate note classification")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None, help="Bind address (default: from config/env)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: from config/env)")

    classify = sub.add_parser("classify", help="Classify text without storing it")
    classify.add_argument("text")

    capture = sub.add_parser("capture", help="Classify text and store it as a note")
    capture.add_argument("text")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if args.command == "serve":
        _serve(args)
        return

    try:
        if args.command == "classify":
            output = asyncio.run(_classify(args.text))
        else:
            output = asyncio.run(_capture(args.text))
    except ValueError as e:
        logger.error("%s", e)
        sys.exit(1)
    print(json.dumps(output, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
