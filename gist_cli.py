#!/usr/bin/env python3
"""
Command line interface for tar-gist.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional, Tuple

from gist_configs import COMPRESSION_ALGORITHMS, GistConfig
from gist_errors import TarGistError
from pipeline.stages.reader import extract_archive, list_archive
from tar_gist import TarGistPipeline

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> Tuple[argparse.ArgumentParser, argparse.Namespace]:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="tar-gist",
        description="Store files in a GitHub Gist as a compressed tar archive",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tar-gist -c docs setup.py        # Upload docs/ and setup.py
  tar-gist -t -f 1a2b3c            # List the files in gist 1a2b3c
  tar-gist -x -f 1a2b3c -C /tmp    # Extract gist 1a2b3c into /tmp
        """
    )

    parser.add_argument('-C', dest='directory', default='',
                        help='change to directory before doing anything')
    parser.add_argument('-f', dest='gist_id', default='',
                        help='GitHub Gist id')
    parser.add_argument('-c', dest='compress', action='store_true',
                        help='compress files')

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument('-x', dest='extract', action='store_true',
                            help='extract files')
    mode_group.add_argument('-t', dest='list', action='store_true',
                            help='list files')

    parser.add_argument('--compression', choices=COMPRESSION_ALGORITHMS,
                        help='compression algorithm for -c (default: gzip)')
    parser.add_argument('--public', action='store_true', default=None,
                        help='create a public gist')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log pipeline progress')
    parser.add_argument('paths', nargs='*',
                        help='files and directories to compress')

    return parser, parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser, args = parse_arguments(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = GistConfig.from_env(compression=args.compression, public=args.public)

        if args.directory:
            os.chdir(args.directory)

        pipeline = TarGistPipeline(config)

        if args.extract or args.list:
            if not args.gist_id:
                print("error: flag: -f must be provided with -x or -t", file=sys.stderr)
                return 1

            reader = pipeline.fetch(args.gist_id)
            if args.extract:
                extract_archive(reader, '.',
                                preserve_mode=config.preserve_mode,
                                allow_unsafe_paths=config.allow_unsafe_paths)
            else:
                for line in list_archive(reader):
                    print(line)

        elif args.compress:
            if not args.paths:
                print("error: flag: nothing to compress", file=sys.stderr)
                return 1

            record = pipeline.publish(args.paths)
            print(f"ID: {record.id}")
            print(f"URL: {record.url}")

        else:
            parser.print_help()

    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return 1
    except TarGistError as e:
        logger.info(f"Failure details: {e.log_context()}")
        print(f"error: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
