import sys
import os
import argparse
from .demangle import DemanglingService, DECODER_CHOICES
from .engine import FilterEngine
from .exceptions import ConfigError
from .utils.config import ConfigManager
from .utils.console import warn, error
from .utils.source import StreamLineSource, ListLineSource, FollowLineSource


DESCRIPTION = (
    "Searches input stream for Microsoft Visual C++ decorated symbol names "
    "and replaces them with their undecorated equivalent."
)


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="msvcfilt",
        usage="%(prog)s [OPTIONS] <decorated string>...",
        description=DESCRIPTION,
        epilog="Uses STDIN rather than <decorated string> if not set.",
        add_help=False,
    )
    parser.add_argument("symbols", nargs="*", metavar="decorated string", help="Lines to filter instead of STDIN")
    parser.add_argument("-h", "-help", "--help", action="help", help="Display this help and exit.")
    parser.add_argument(
        "-keep", "--keep", action="store_true",
        help="Does not replace the original, decorated symbol name. "
             "Instead, the undecorated name will be inserted after it.",
    )
    parser.add_argument("--follow", metavar="FILE", help="Filter FILE, then keep filtering lines appended to it")
    parser.add_argument("--decoder", choices=DECODER_CHOICES, help="Symbol decoder to use (default: auto)")
    parser.add_argument("--undname", metavar="PATH", help="External undecorator for the 'undname' decoder")
    parser.add_argument("--quiet", action="store_true", help="Don't warn when no symbol decoder is available")
    return parser


def _decoder_config(args, config: ConfigManager) -> dict:
    return {
        "decoder": args.decoder or config.get("decoder", "auto"),
        "undname": args.undname or config.get("undname"),
    }


def _keep_setting(args, config: ConfigManager) -> bool:
    if args.keep:
        return True
    keep = config.get("keep", False)
    if not isinstance(keep, bool):
        raise ConfigError(f"Config value 'keep' must be true or false, got {keep!r}")
    return keep


def _byte_transparent(stream):
    """
    Decode as UTF-8 but carry undecodable bytes through as surrogates, so
    input in any other encoding comes back out byte for byte.
    """
    reconfigure = getattr(stream, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(encoding="utf-8", errors="surrogateescape")
    return stream


def _build_source(args):
    if args.follow:
        return FollowLineSource(args.follow)
    if args.symbols:
        return ListLineSource(args.symbols)
    return StreamLineSource(_byte_transparent(sys.stdin))


def run():
    parser = _build_parser()
    args = parser.parse_intermixed_args()

    if args.follow and args.symbols:
        parser.error("--follow cannot be combined with decorated strings")

    config = ConfigManager()

    try:
        keep = _keep_setting(args, config)
        demangler = DemanglingService.get_instance(_decoder_config(args, config))
    except ConfigError as e:
        error(str(e))
        sys.exit(1)

    if not demangler.available and not args.quiet:
        warn(f"Symbol decoder unavailable ({demangler.error}); input is passed through unchanged.")

    try:
        source = _build_source(args)
    except FileNotFoundError as e:
        error(str(e))
        sys.exit(1)

    engine = FilterEngine(
        source, demangler, keep_original=keep, sink=_byte_transparent(sys.stdout),
        log_file=config.get("log_file", ""),
    )

    try:
        engine.run()
    except KeyboardInterrupt:
        sys.exit(130)
    except BrokenPipeError:
        # Downstream closed the pipe (e.g. `| head`); silence the flush at exit
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        sys.exit(0)
    except Exception as e:
        error(str(e))
        sys.exit(1)
    finally:
        source.close()
        demangler.shutdown()

if __name__ == "__main__":
    run()
