"""Compilation pipeline: parse, resolve and generate one specification.

API:
    from xdrgen.compiler.pipeline import generate, compile_file
    text = generate(source, config)            # raises CompilationError
    path = compile_file(Path("proto.x"), config, outdir=Path("build"))
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from xdrgen.internals import errors as er
from xdrgen.internals.parser import parse_source, parse_header, merge_headers
from xdrgen.internals.parse_errors import handle_parse_exception
from xdrgen.internals.report import Reporter
from xdrgen.semantics.ast import Specification
from xdrgen.semantics.ast_builder import XdrSyntaxError
from xdrgen.semantics.semantic_analyzer import SemanticAnalyzer, ResolvedSpecification
from xdrgen.backend.codegen_python import PythonCodegen
from xdrgen.backend.formatting import FormattingError, format_source
from xdrgen.compiler.config import CompilerConfig


class CompilationError(Exception):
    """Compilation failed; `reporter` holds every diagnostic."""

    def __init__(self, reporter: Reporter) -> None:
        self.reporter = reporter
        errors = reporter.errors
        first = str(errors[0]) if errors else "compilation failed"
        extra = f" (and {len(errors) - 1} more)" if len(errors) > 1 else ""
        super().__init__(f"{first}{extra}")

    @property
    def diagnostics(self):
        return self.reporter.items


def _load_headers(config: CompilerConfig, reporter: Reporter,
                  base: Optional[Path]) -> List[Specification]:
    headers: List[Specification] = []
    for name in config.headers:
        path = Path(name)
        if not path.is_absolute() and base is not None:
            path = base / path
        try:
            src = path.read_text(encoding="utf-8")
        except OSError as e:
            er.emit(reporter, er.ERR.XE3001, None, path=str(path), reason=e.strerror or str(e))
            continue
        reporter.add_source(str(path), src)
        try:
            headers.append(parse_header(src, str(path), extended=config.extended_grammar))
        except XdrSyntaxError as e:
            handle_parse_exception(e, reporter, filename=str(path))
    return headers


def _check_excludes(config: CompilerConfig, resolved: ResolvedSpecification,
                    reporter: Reporter) -> None:
    names = {d.name for d in resolved.definitions}
    for name in config.exclude:
        if name not in names:
            er.emit(reporter, er.ERR.XW3004, None, name=name)


def resolve(source: str, config: CompilerConfig, reporter: Reporter,
            base: Optional[Path] = None, dump_parse: bool = False) -> Optional[ResolvedSpecification]:
    """Parse and resolve `source` plus its configured headers.

    Returns:
        The resolved specification, or None when errors were reported.
    """
    headers = _load_headers(config, reporter, base)
    try:
        spec = parse_source(source, extended=config.extended_grammar, dump_parse=dump_parse)
    except XdrSyntaxError as e:
        handle_parse_exception(e, reporter)
        return None
    if reporter.has_errors:
        return None

    spec = merge_headers(spec, headers)
    resolved = SemanticAnalyzer(reporter, reporter.filename).check(spec)
    if resolved is not None:
        _check_excludes(config, resolved, reporter)
    return resolved


def generate(source: str, config: Optional[CompilerConfig] = None, filename: str = "<input>",
             reporter: Optional[Reporter] = None, base: Optional[Path] = None,
             dump_parse: bool = False) -> str:
    """Compile XDR source text to Python source text.

    Args:
        source: XDR specification text.
        config: Compiler configuration; defaults apply when omitted.
        filename: Name used in diagnostics and the generated header.
        reporter: Receives diagnostics; a fresh one is created when omitted.
        base: Directory relative header paths are resolved against.
        dump_parse: Print the Lark parse tree.

    Returns:
        The generated module source.

    Raises:
        CompilationError: Any error was reported.
    """
    config = config or CompilerConfig()
    if reporter is None:
        reporter = Reporter(source=source, filename=filename)

    resolved = resolve(source, config, reporter, base=base, dump_parse=dump_parse)
    if resolved is None:
        raise CompilationError(reporter)

    text = PythonCodegen(resolved, config, source_name=Path(filename).name).generate()

    if config.format:
        try:
            text = format_source(text)
        except FormattingError as e:
            er.emit(reporter, er.ERR.XE3003, None, reason=str(e))
            raise CompilationError(reporter) from e
    return text


def compile_file(path: Path, config: Optional[CompilerConfig] = None,
                 outdir: Optional[Path] = None, reporter: Optional[Reporter] = None,
                 dump_parse: bool = False) -> Path:
    """Compile a `.x` file and write `<module>.py` next to it or into `outdir`.

    Returns:
        Path of the written module.

    Raises:
        CompilationError: The file could not be read or compiled.
    """
    config = config or CompilerConfig()
    path = Path(path)
    if reporter is None:
        reporter = Reporter(filename=str(path))
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as e:
        er.emit(reporter, er.ERR.XE3001, None, path=str(path), reason=e.strerror or str(e))
        raise CompilationError(reporter) from e
    reporter.source = source
    reporter.add_source(str(path), source)

    text = generate(source, config, filename=str(path), reporter=reporter, base=path.parent,
                    dump_parse=dump_parse)

    target_dir = outdir if outdir is not None else path.parent
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / f"{config.module_name(path).split('.')[-1]}.py"
    target.write_text(text, encoding="utf-8")
    return target
