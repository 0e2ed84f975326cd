"""Command line entry point: ``scenerag query|similar|reindex|serve``."""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from loguru import logger

from scenerag.config.settings import SceneRAGConfig
from scenerag.container import build_services
from scenerag.exceptions import SceneRAGException
from scenerag.utils.logging_config import log_manager


def _print_results(results) -> None:
    print(json.dumps([result.to_document() for result in results], indent=2))


async def _run(args: argparse.Namespace, config: SceneRAGConfig) -> None:
    services = build_services(config)
    try:
        if args.command == "query":
            _print_results(await services.search.query_scenes(
                args.text, campaign_id=args.campaign, limit=args.limit
            ))
        elif args.command == "similar":
            _print_results(await services.search.find_similar_scenes(
                args.scene_id, limit=args.limit, campaign_id=args.campaign
            ))
        elif args.command == "reindex":
            print(json.dumps(await services.indexer.reindex_all(args.campaign), indent=2))
    finally:
        await services.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scenerag", description="Scene search over advertising videos.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    query = subparsers.add_parser("query", help="Search scenes with a natural-language query")
    query.add_argument("text", type=str, help="Query text, e.g. 'energetic car scenes' or 'campaign:abc product:shoes'")
    query.add_argument("--campaign", type=str, default=None, help="Restrict to one campaign id")
    query.add_argument("--limit", type=int, default=None, help="Maximum number of results")

    similar = subparsers.add_parser("similar", help="Find scenes similar to a scene")
    similar.add_argument("scene_id", type=str, help="Source scene id")
    similar.add_argument("--campaign", type=str, default=None, help="Restrict to one campaign id")
    similar.add_argument("--limit", type=int, default=5, help="Maximum number of results (default: 5)")

    reindex = subparsers.add_parser("reindex", help="Regenerate scene embeddings")
    reindex.add_argument("--campaign", type=str, default=None, help="Only scenes of this campaign")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = SceneRAGConfig()
    log_manager.configure(config.logging)

    if args.command == "serve":
        import uvicorn
        from scenerag.api import create_app

        uvicorn.run(create_app(), host=args.host, port=args.port)
        return 0

    try:
        asyncio.run(_run(args, config))
    except SceneRAGException as e:
        logger.error(f"{e.error_code}: {e.message}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
