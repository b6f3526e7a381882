# src/main.py — v2
"""CLI entry point: serve, ask, image, sweep, prewarm, verify-cache, providers.

Usage:
    breedlens serve [--host HOST] [--port PORT]
    breedlens ask "How much exercise?" --breed "Border Collie" --species dog
    breedlens image goldenretriever dog [--name "Golden Retriever"]
    breedlens sweep [--dry-run] [--force]
    breedlens prewarm [--species dog|cat]
    breedlens verify-cache [--force-recheck]
    breedlens providers
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from breedlens.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from breedlens.config.settings import ConfigurationError, load_settings

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    _setup_logging(settings, args.verbose)

    if args.command == "serve":
        return _cmd_serve(args, settings)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="breedlens",
        description=f"BreedLens v{__version__} - pet breed Q&A and breed images",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- serve ---
    p_serve = subparsers.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default=None, help="Bind address (default: SERVER_HOST)")
    p_serve.add_argument("--port", type=int, default=None, help="Port (default: SERVER_PORT)")
    p_serve.set_defaults(func=_cmd_serve)

    # --- ask ---
    p_ask = subparsers.add_parser("ask", help="Ask a breed question")
    p_ask.add_argument("question", help="Question text")
    p_ask.add_argument("--breed", default=None, help="Breed name for context")
    p_ask.add_argument("--species", choices=("dog", "cat"), default=None)
    p_ask.add_argument("--image-url", default=None, help="Image to ask about (vision)")
    p_ask.set_defaults(func=_cmd_ask)

    # --- image ---
    p_image = subparsers.add_parser("image", help="Resolve a breed image")
    p_image.add_argument("breed_id", help="Breed identity token, e.g. goldenretriever")
    p_image.add_argument("species", choices=("dog", "cat"))
    p_image.add_argument("--name", default="", help="Human-readable breed name")
    p_image.set_defaults(func=_cmd_image)

    # --- sweep ---
    p_sweep = subparsers.add_parser("sweep", help="Remove expired and orphaned cache files")
    p_sweep.add_argument(
        "--dry-run", action="store_true",
        help="Preview only, don't delete",
    )
    p_sweep.add_argument(
        "--force", action="store_true",
        help="Delete all cached images",
    )
    p_sweep.set_defaults(func=_cmd_sweep)

    # --- prewarm ---
    p_prewarm = subparsers.add_parser("prewarm", help="Cache images for popular breeds")
    p_prewarm.add_argument("--species", choices=("dog", "cat"), default=None)
    p_prewarm.set_defaults(func=_cmd_prewarm)

    # --- verify-cache ---
    p_verify = subparsers.add_parser("verify-cache", help="Re-verify cached images")
    p_verify.add_argument(
        "--force-recheck", action="store_true",
        help="Re-verify images that already have a judgment",
    )
    p_verify.set_defaults(func=_cmd_verify_cache)

    # --- providers ---
    p_providers = subparsers.add_parser("providers", help="Show configured LLM providers")
    p_providers.set_defaults(func=_cmd_providers)

    return parser


def _cmd_serve(args: argparse.Namespace, settings) -> int:
    """Run the FastAPI app under uvicorn (blocking)."""
    import uvicorn

    from breedlens.api.server import create_app

    app = create_app(settings)
    uvicorn.run(
        app,
        host=args.host or settings.server_host,
        port=args.port or settings.server_port,
        log_config=None,  # keep our handlers
    )
    return 0


async def _cmd_ask(args: argparse.Namespace, settings) -> int:
    from breedlens.api.facade import ask, build_services

    services = build_services(settings)
    response = await ask(
        services,
        question=args.question,
        breed_name=args.breed,
        species=args.species,
        image_url=args.image_url,
        use_vision=bool(args.image_url),
    )
    print(response.answer)
    if response.provider_used:
        print(f"\n  (answered by {response.provider_used}; tried: {', '.join(response.attempted_chain)})")
    return 1 if response.degraded else 0


async def _cmd_image(args: argparse.Namespace, settings) -> int:
    from breedlens.api.facade import build_services, resolve_image

    services = build_services(settings)
    result = await resolve_image(services, args.breed_id, args.species, name=args.name)
    print(json.dumps(result.model_dump(by_alias=True), indent=2))
    return 0


async def _cmd_sweep(args: argparse.Namespace, settings) -> int:
    from breedlens.cache.cache_factory import create_cache_store
    from breedlens.cache.maintenance import sweep_cache

    if args.force:
        logger.warning("Force mode enabled. All cached images will be deleted!")

    store = create_cache_store(settings)
    report = await sweep_cache(store, dry_run=args.dry_run, force=args.force)

    print("\nSummary:")
    print(f"  Total images scanned: {report.scanned}")
    print(f"  Images deleted:       {report.deleted_count}")
    print(f"  Images kept:          {report.kept_count}")
    print(f"  Dangling entries:     {len(report.dangling_entries)}")
    print(f"  Total cache size:     {report.total_bytes / 1024 / 1024:.2f} MB")
    print(f"  Space freed:          {report.freed_bytes / 1024 / 1024:.2f} MB")
    if report.dry_run:
        print("\nThis was a dry run. Re-run without --dry-run to actually delete files.")
    return 0


async def _cmd_prewarm(args: argparse.Namespace, settings) -> int:
    from breedlens.api.facade import build_services
    from breedlens.cache.maintenance import default_prewarm_queries, prewarm

    services = build_services(settings)
    queries = default_prewarm_queries(settings)
    if args.species:
        queries = [q for q in queries if q.species == args.species]

    report = await prewarm(services.pipeline, queries)
    print(f"\nPre-warm complete: {len(report.cached)}/{report.requested} cached")
    for label in report.placeholders:
        print(f"  placeholder: {label}")
    return 0


async def _cmd_verify_cache(args: argparse.Namespace, settings) -> int:
    from breedlens.api.facade import build_services
    from breedlens.cache.maintenance import verify_cache

    services = build_services(settings)
    if not services.verifier.available:
        logger.error("No vision-capable LLM provider configured")
        return 1

    report = await verify_cache(services.store, services.verifier, force_recheck=args.force_recheck)
    for r in report.results:
        mark = {"verified": "OK  ", "failed": "FAIL", "skipped": "SKIP"}[r.status]
        print(f"  {mark} {r.filename} ({r.confidence}%) {r.reasoning}")
    summary = report.summary()
    print(
        f"\nTotal {summary['total']}: {summary['verified']} verified, "
        f"{summary['failed']} failed, {summary['skipped']} skipped"
    )
    return 0


async def _cmd_providers(args: argparse.Namespace, settings) -> int:
    from breedlens.llm.registry import ProviderRegistry

    registry = ProviderRegistry.from_settings(settings)
    print(f"\n{'#':<3} {'provider':<12} {'configured':<11} {'vision':<7} timeout")
    for row in registry.stats():
        print(
            f"{row['priority']:<3} {row['name']:<12} "
            f"{'yes' if row['configured'] else 'no':<11} "
            f"{'yes' if row['vision'] else 'no':<7} {row['timeout_ms']}ms"
        )
    return 0 if registry.eligible() else 1


def _setup_logging(settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from breedlens.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        stream=sys.stderr,
    )


if __name__ == "__main__":
    sys.exit(main())
