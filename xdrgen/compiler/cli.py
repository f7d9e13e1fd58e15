"""Command line entry point: `xdrgen spec.x`."""
from __future__ import annotations
import argparse, sys
from pathlib import Path

from xdrgen.internals import errors as er
from xdrgen.internals.report import Reporter
from xdrgen.internals.version import print_banner
from xdrgen.backend.derives import DERIVE_NAMES
from xdrgen.compiler.config import CompilerConfig, ConfigError, load_config, load_config_file
from xdrgen.compiler.pipeline import CompilationError, compile_file, generate


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="xdrgen", description="XDR (RFC 4506) to Python compiler")

    ap.add_argument("source", help="Path to the XDR specification (.x)")
    ap.add_argument("-o", "--out-dir", metavar="DIR",
                    help="Directory for the generated module (default: next to the source)")
    ap.add_argument("--stdout", action="store_true",
                    help="Write the generated module to stdout instead of a file")
    ap.add_argument("--module", metavar="NAME",
                    help="Generated module name (default: <stem>_xdr)")
    ap.add_argument("--config", metavar="FILE",
                    help="Configuration file (default: xdrgen.toml or [tool.xdrgen] in pyproject.toml)")
    ap.add_argument("--extended", action="store_true",
                    help="Accept constant arithmetic and '%%' passthrough lines")
    ap.add_argument("--derive", action="append", choices=DERIVE_NAMES, default=[],
                    help="Enable a derive (repeatable)")
    ap.add_argument("--json", action="append_const", dest="derive", const="json",
                    help="Shorthand for --derive json")
    ap.add_argument("--schema", action="append_const", dest="derive", const="schema",
                    help="Shorthand for --derive schema")
    ap.add_argument("--enum-string", action="append_const", dest="derive", const="enum_string",
                    help="Shorthand for --derive enum_string")
    ap.add_argument("--format", action="store_true",
                    help="Reformat the generated module with black")
    ap.add_argument("--exclude", action="append", default=[], metavar="NAME",
                    help="Resolve NAME but do not generate it (repeatable)")
    ap.add_argument("--header", action="append", default=[], metavar="FILE",
                    help="Specification whose definitions are referenced but not generated (repeatable)")
    ap.add_argument("--preamble", metavar="FILE",
                    help="File whose contents are inserted after the generated imports")
    ap.add_argument("--runtime-module", metavar="MODULE",
                    help="Module imported as the XDR runtime (default: xdrgen.runtime)")
    ap.add_argument("--dump-parse", action="store_true", help="Print raw Lark tree")
    ap.add_argument("-q", "--quiet", action="store_true", help="Suppress the banner and progress output")
    return ap


def _apply_overrides(config: CompilerConfig, args: argparse.Namespace) -> CompilerConfig:
    if args.module:
        config.module = args.module
    for name in args.derive:
        if name not in config.derives:
            config.derives.append(name)
    if args.format:
        config.format = True
    if args.extended:
        config.extended_grammar = True
    config.exclude.extend(args.exclude)
    config.headers.extend(args.header)
    if args.runtime_module:
        config.runtime_module = args.runtime_module
    if args.preamble:
        config.preamble = Path(args.preamble).read_text(encoding="utf-8")
    config.validate()
    return config


def main(argv: list[str] | None = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    if not args.quiet:
        print_banner(sys.stderr if args.stdout else None)

    src_path = Path(args.source)
    reporter = Reporter(filename=str(src_path))

    try:
        if args.config:
            config = load_config_file(Path(args.config))
        else:
            config = load_config(Path.cwd())
        config = _apply_overrides(config, args)
    except ConfigError as e:
        er.emit(reporter, er.ERR.XE3002, None, reason=str(e))
        reporter.print()
        return 2
    except OSError as e:
        er.emit(reporter, er.ERR.XE3001, None, path=args.preamble, reason=e.strerror or str(e))
        reporter.print()
        return 2

    try:
        if args.stdout:
            try:
                source = src_path.read_text(encoding="utf-8")
            except OSError as e:
                er.emit(reporter, er.ERR.XE3001, None, path=str(src_path), reason=e.strerror or str(e))
                raise CompilationError(reporter) from e
            reporter.source = source
            reporter.add_source(str(src_path), source)
            text = generate(source, config, filename=str(src_path), reporter=reporter,
                            base=src_path.parent, dump_parse=args.dump_parse)
            sys.stdout.write(text)
        else:
            outdir = Path(args.out_dir) if args.out_dir else None
            target = compile_file(src_path, config, outdir=outdir, reporter=reporter,
                                  dump_parse=args.dump_parse)
            if not args.quiet:
                print(f"wrote {target}")
    except CompilationError:
        _report(reporter, args.quiet)
        return 2

    if reporter.has_warnings:
        _report(reporter, args.quiet)
        return 1
    return 0


def _report(reporter: Reporter, quiet: bool) -> None:
    reporter.print()
    if not quiet:
        print(f"{reporter.filename}: {reporter.summary()}", file=sys.stderr)


if __name__ == "__main__":
    raise SystemExit(main())
