#!/usr/bin/env python3
"""
Clean URL command line tool
"""

import sys
from cleanurls import CleanUrls, CleanUrlsError, DictConfigSource
from cleanurls.resolvers import MemoryEntityStore
from cleanurls.storage import FilePathCache, MemoryPathCache


def main(argv=None):
    import argparse
    parser = argparse.ArgumentParser(
        description='Clean platform URLs into readable paths, or resolve clean paths back.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python clean_url.py --snapshot site.json http://lms.example.com/course/view.php?id=2
  python clean_url.py --snapshot site.json --unclean http://lms.example.com/course/art101
  python clean_url.py --snapshot site.json --no-usernames http://lms.example.com/user/profile.php?id=3
        """
    )
    parser.add_argument('url', help='Absolute URL to transform')
    parser.add_argument('--unclean', action='store_true', help='Resolve a clean URL instead of cleaning')
    parser.add_argument('--snapshot', help='Entity snapshot JSON file')
    parser.add_argument('--wwwroot', default='http://localhost', help='Public site root')
    parser.add_argument('--dirroot', help='Platform code directory, to avoid shadowing real files')
    parser.add_argument('--cache-dir', help='Use a file cache in this directory')
    parser.add_argument('--no-usernames', action='store_true', help='Keep usernames out of clean URLs')
    parser.add_argument('--cleaning-off', action='store_true', help='Switch cleaning off')
    args = parser.parse_args(argv)

    config_source = DictConfigSource()
    config_source.set('cleaningon', not args.cleaning_off)
    config_source.set('cleanusernames', not args.no_usernames)

    try:
        store = MemoryEntityStore.load_snapshot(args.snapshot) if args.snapshot else MemoryEntityStore()
        cache = FilePathCache(args.cache_dir) if args.cache_dir else MemoryPathCache()
        engine = CleanUrls(
            wwwroot=args.wwwroot,
            store=store,
            cache=cache,
            config_source=config_source,
            dirroot=args.dirroot,
        )
        result = engine.unclean(args.url) if args.unclean else engine.clean(args.url)
    except CleanUrlsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
