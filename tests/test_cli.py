"""Tests for the xdrgen command line."""
import pytest

from xdrgen.compiler.cli import main


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def write_spec(workdir, text, name="proto.x"):
    path = workdir / name
    path.write_text(text)
    return path


def test_writes_module_next_to_source(workdir, capsys):
    src = write_spec(workdir, "struct Point { int x; int y; };")
    assert main([str(src)]) == 0
    target = workdir / "proto_xdr.py"
    assert "class Point" in target.read_text()
    out = capsys.readouterr().out
    assert "xdrgen XDR Interface Compiler" in out
    assert f"wrote {target}" in out


def test_out_dir_and_module_name(workdir):
    src = write_spec(workdir, "const A = 1;")
    assert main([str(src), "-o", str(workdir / "build"), "--module", "pkg.consts", "-q"]) == 0
    assert (workdir / "build" / "consts.py").exists()


def test_stdout_keeps_banner_off_stdout(workdir, capsys):
    src = write_spec(workdir, "enum E { A };")
    assert main([str(src), "--stdout"]) == 0
    captured = capsys.readouterr()
    assert captured.out.startswith("# GENERATED CODE")
    assert "xdrgen XDR Interface Compiler" in captured.err
    assert not (workdir / "proto_xdr.py").exists()


def test_quiet_prints_nothing(workdir, capsys):
    src = write_spec(workdir, "const A = 1;")
    assert main([str(src), "-q"]) == 0
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


def test_derive_flags(workdir, capsys):
    src = write_spec(workdir, "enum E { A };")
    assert main([str(src), "--stdout", "-q", "--json", "--enum-string"]) == 0
    out = capsys.readouterr().out
    assert "def to_json_E" in out
    assert "def from_str" in out
    assert "JSON_SCHEMA_DEFINITIONS" not in out


def test_errors_exit_2(workdir, capsys):
    src = write_spec(workdir, "struct S { Missing m; };")
    assert main([str(src), "-q"]) == 2
    err = capsys.readouterr().err
    assert "[XE2002]" in err
    assert "proto.x:1:" in err
    assert not (workdir / "proto_xdr.py").exists()


def test_syntax_error_exit_2(workdir, capsys):
    src = write_spec(workdir, "struct S { int a }")
    assert main([str(src), "-q"]) == 2
    err = capsys.readouterr().err
    assert "proto.x:1:18: error [XE1001]: unexpected '}', expected " in err
    assert not (workdir / "proto_xdr.py").exists()


def test_bad_character_exit_2(workdir, capsys):
    src = write_spec(workdir, "const A = 1;\nconst B = @;")
    assert main([str(src), "-q"]) == 2
    assert "proto.x:2:11: error [XE1002]: unexpected character '@'." in capsys.readouterr().err


def test_truncated_source_exit_2(workdir, capsys):
    src = write_spec(workdir, "struct S { int a;")
    assert main([str(src), "-q"]) == 2
    err = capsys.readouterr().err
    assert "[XE1003]: unexpected end of input, expected " in err
    assert "'}'" in err


def test_warnings_exit_1(workdir, capsys):
    src = write_spec(workdir, "enum K { A, B };\nunion U switch (K k) { case A: void; };")
    assert main([str(src), "-q"]) == 1
    assert "[XW2036]" in capsys.readouterr().err
    assert (workdir / "proto_xdr.py").exists()


def test_missing_source(workdir, capsys):
    assert main([str(workdir / "absent.x"), "-q"]) == 2
    assert "[XE3001]" in capsys.readouterr().err


def test_bad_config_file(workdir, capsys):
    write_spec(workdir, 'colour = "blue"\n', name="xdrgen.toml")
    src = write_spec(workdir, "const A = 1;")
    assert main([str(src), "-q"]) == 2
    assert "[XE3002]" in capsys.readouterr().err


def test_config_file_option(workdir, capsys):
    cfg = write_spec(workdir, 'derives = ["schema"]\n', name="custom.toml")
    src = write_spec(workdir, "struct S { int a; };")
    assert main([str(src), "--config", str(cfg), "--stdout", "-q"]) == 0
    assert "JSON_SCHEMA_DEFINITIONS" in capsys.readouterr().out


def test_excluded_name_missing_warns(workdir, capsys):
    src = write_spec(workdir, "const A = 1;")
    assert main([str(src), "-q", "--exclude", "Nope"]) == 1
    assert "[XW3004]" in capsys.readouterr().err


def test_header_and_preamble(workdir, capsys):
    write_spec(workdir, "struct Clock { hyper t; };", name="clock.x")
    preamble = write_spec(workdir, "from clocks import Clock, pack_Clock, unpack_Clock\n", name="pre.py")
    src = write_spec(workdir, "struct Event { Clock at; };")
    args = [str(src), "--stdout", "-q", "--header", "clock.x", "--preamble", str(preamble)]
    assert main(args) == 0
    out = capsys.readouterr().out
    assert "class Clock" not in out
    assert "from clocks import Clock" in out


def test_unknown_derive_rejected_by_argparse(workdir):
    src = write_spec(workdir, "const A = 1;")
    with pytest.raises(SystemExit) as exc:
        main([str(src), "--derive", "yaml"])
    assert exc.value.code == 2
