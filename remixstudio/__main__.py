"""
Remix Studio Main Entry Point

    python -m remixstudio serve [--port 8000]
    python -m remixstudio remix --owner O --board B --prompt P [--quiet]
"""

import argparse
import asyncio
import contextlib
import sys
from pathlib import Path

from remixstudio.core.config import load_config, set_config
from remixstudio.core.exceptions import RemixStudioError
from remixstudio.core.logging_config import ROOT_LOGGER_NAME, LogContext, LogLevel, get_logger, setup_logging
from remixstudio.core.startup import validate_environment


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="remixstudio",
        description="Remix Studio - connector-driven creative remixes",
    )
    parser.add_argument("--config", "-c", type=str, help="Path to configuration file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--skip-validation",
        action="store_true",
        help="Skip API key validation at startup"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000, help="Port for the API server (default: 8000)")

    remix = subparsers.add_parser("remix", help="Run one remix against the workspace store")
    remix.add_argument("--owner", type=str, default="", help="Workspace owner (blank for guest)")
    remix.add_argument("--board", type=str, required=True, help="Remix board id")
    remix.add_argument("--prompt", type=str, required=True, help="Creative goal")
    remix.add_argument(
        "--allow-partial",
        action="store_true",
        help="Keep successful variations when some briefs fail"
    )
    remix.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors while the remix runs"
    )
    return parser


def main(argv=None) -> int:
    """Main entry point for Remix Studio."""
    args = build_parser().parse_args(argv)

    setup_logging(level=LogLevel.DEBUG if args.debug else LogLevel.INFO, verbose=args.debug)
    logger = get_logger("main")

    try:
        config = load_config(Path(args.config) if args.config else None)
    except RemixStudioError as e:
        print(f"Could not load config: {e}")
        return 1
    set_config(config)

    if not args.skip_validation:
        validation_result = validate_environment(config)
        for warning in validation_result.warnings:
            logger.warning(warning)
        if not validation_result.valid:
            print("\nEnvironment validation failed. Missing required configuration:")
            for error in validation_result.errors:
                print(f"  - {error}")
            print("\nRun with --skip-validation to bypass (not recommended)")
            return 1

    if args.command == "serve":
        from remixstudio.api.main import start_server
        start_server(host=args.host, port=args.port, reload=args.debug)
        return 0

    try:
        return asyncio.run(run_remix(args, config))
    except RemixStudioError as e:
        logger.error(f"Remix failed: {e}")
        print(f"Error: {e.user_message}")
        return 1


async def run_remix(args, config) -> int:
    """Headless remix: load, run, save, print the generated labels."""
    from remixstudio.graph.layout import truncate_remix_prompt
    from remixstudio.llm.gemini_client import GeminiService
    from remixstudio.pipelines.remix_pipeline import RemixPipeline
    from remixstudio.storage.workspace_store import JsonWorkspaceStore

    store = JsonWorkspaceStore(config.storage.workspace_dir)
    graph = await store.load_graph(args.owner)

    quiet = LogContext(get_logger(ROOT_LOGGER_NAME), LogLevel.WARNING) if args.quiet else contextlib.nullcontext()
    with quiet:
        async with GeminiService(config=config.models) as service:
            result = await RemixPipeline(service, config.pipeline).run(
                graph, args.board, args.prompt, progress=print, allow_partial=args.allow_partial
            )
    await store.save(args.owner, graph.to_dict())

    print(f"\nRemix: {truncate_remix_prompt(result.board.remix_prompt or '')}")
    for element in result.board.elements:
        print(f"  @{element.label}")
    for outcome in result.failures:
        print(f"  failed brief {outcome.task.id}: {outcome.error.user_message}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
