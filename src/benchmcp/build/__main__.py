"""
Command line entry point of the bundler

    python -m benchmcp.build [--clean] [--watch] [--minify]
"""

import argparse
import logging
import sys
import time

from ..common.errors import BenchMCPError
from ..server.config import ConfigManager
from .bundler import Bundler

logger = logging.getLogger("benchmcp.build")


def create_bundler(config: ConfigManager, minify: bool = False, project_root: str = ".") -> Bundler:
    return Bundler(
        source_dir=config.get("build.source_dir"),
        output_dir=config.get("build.output_dir"),
        bundle_name=config.get("build.bundle_name"),
        restricted_modules=config.get("build.restricted_modules"),
        vendor=config.get("build.vendor") or (),
        production=minify or config.is_production,
        project_root=project_root,
    )


def build_once(bundler: Bundler) -> bool:
    try:
        bundler.build()
        return True
    except BenchMCPError as e:
        logger.error(f"Build failed: {e}")
        return False


def watch(bundler: Bundler, interval: float = 1.0) -> None:
    """Rebuild whenever an input changes, until interrupted"""
    logger.info("Watching for changes...")
    previous = bundler.snapshot()
    try:
        while True:
            time.sleep(interval)
            current = bundler.snapshot()
            if current != previous:
                changed = sorted(path for path in set(current) | set(previous)
                                 if current.get(path) != previous.get(path))
                logger.info(f"File changed: {', '.join(changed)}")
                bundler.clean()
                build_once(bundler)
                previous = current
    except KeyboardInterrupt:
        logger.info("Watch mode stopped")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="benchmcp-build", description="Bundle the Bench MCP plugin")
    parser.add_argument("--clean", action="store_true", help="remove the output directory first")
    parser.add_argument("--watch", action="store_true", help="rebuild when a source file changes")
    parser.add_argument("--minify", action="store_true", help="production build")
    parser.add_argument("--config", help="YAML configuration file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    try:
        config = ConfigManager(args.config)
    except BenchMCPError as e:
        logger.error(f"Build failed: {e}")
        return 1
    bundler = create_bundler(config, minify=args.minify)

    if args.clean:
        bundler.clean()

    success = build_once(bundler)
    if args.watch and success:
        watch(bundler)
    return 0 if success else 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
