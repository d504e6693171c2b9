from __future__ import annotations

import argparse
import sys
from typing import IO, Optional, Sequence

from .main import Feed


def build_example(*, default_attributes: bool = False) -> Feed:
    feed = Feed(default_attributes=default_attributes)
    feed.set_title("Books")
    feed.set_author("Fergus")

    entry = feed.new_entry()
    entry.set_author("Shelagh Delaney")
    entry.set_title("Taste of Honey")
    entry.new_field("content", "Hello World").put("type", "text/html")
    return feed


def main(argv: Optional[Sequence[str]] = None, output: Optional[IO[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="atombuilder", description="Write an example Atom feed to stdout."
    )
    parser.add_argument(
        "--default-attributes",
        action="store_true",
        help="declare the default namespaces on the feed tag",
    )
    args = parser.parse_args(argv)

    out = output if output is not None else sys.stdout
    build_example(default_attributes=args.default_attributes).write(out)
    out.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
