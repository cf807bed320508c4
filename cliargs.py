"""Example CLI: read a service configuration file and let command line options override it."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from pydantic import BaseModel

from confoverlay import Diagnostics, apply_overlays, block, decode_body, extract_cli_options, implied_body_schema, label
from confoverlay.logger import Logger
from confoverlay.syntax import parse_config_file

USAGE = """\
%(prog)s [options] <config-file>

Configuration overrides:
  --io_mode=MODE
      Override the io_mode configuration argument.

  --service.TYPE.NAME.listen_addr=ADDR
      Override the listen address for the service with the given TYPE and NAME.
"""


class ServiceConfig(BaseModel):
    type: str = label()
    name: str = label()
    listen_addr: str


class Config(BaseModel):
    io_mode: str
    services: list[ServiceConfig] = block(alias="service", default_factory=list)


def parse_args(args: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="cliargs", usage=USAGE)
    parser.add_argument("config", help="Path to the configuration file.")
    parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Produce JSON output instead of human-oriented output.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log how overlays are applied.",
    )
    return parser.parse_args(args)


def print_config(config: Config) -> None:
    print(f"The IO mode is {config.io_mode!r}\n")
    for svc in config.services:
        print(f"- Service {svc.type!r} {svc.name!r}:")
        print(f"  The listen address is {svc.listen_addr}\n")


def write_diagnostics(diags: Diagnostics) -> None:
    for diag in diags:
        print(diag, file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)

    # First pull out the options that name settings in the configuration schema,
    # like --io_mode=foo or --service.foo.bar.listen_addr=blah. What's left is
    # handled as ordinary command line options.
    root_schema = implied_body_schema(Config)
    overlays, args, diags = extract_cli_options(argv, root_schema)
    options = parse_args(args)
    if options.verbose:
        Logger(config={"name": "confoverlay", "level": logging.DEBUG})

    config: Config | None = None
    file, more_diags = parse_config_file(options.config)
    diags.extend(more_diags)
    if file is not None:
        body = apply_overlays(file.body, *overlays)
        config, more_diags = decode_body(body, Config)
        diags.extend(more_diags)

    write_diagnostics(diags)

    if config is not None:
        if options.json:
            print(config.model_dump_json(indent=2))
        else:
            print_config(config)

    return 1 if diags.has_errors() else 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
