from pathlib import Path

import pytest

from gouml import cli
from gouml.analysis import package_path_to_uml

A_GO = """package a

type IA interface  {
	Add()
	Add2(i int) int
	Add3(i int, j,k int) (int,int)
	Add4(i int) (int)
}

type SA struct {
}

func (this * SA) Add(){}

func (this * SA) Add2(int)(int){
	return 0
}

func (this * SA) Add3(i int, j int, k int)(int, int){
	return 0,0
}

func (this * SA) Add4(i int)int{
	return 0
}
"""

B_GO = """package b

type SB struct {
}
"""


@pytest.fixture
def tree(tmp_path: Path):
    gopath = tmp_path / "gopath"
    code = gopath / "src" / "example.com" / "proj"
    (code / "a").mkdir(parents=True)
    (code / "a" / "a.go").write_text(A_GO, encoding="utf-8")
    (code / "b").mkdir()
    (code / "b" / "b.go").write_text(B_GO, encoding="utf-8")
    return gopath, code, tmp_path / "out.puml"


def _args(gopath: Path, code: Path, out: Path, *extra: str) -> list[str]:
    return ["--codedir", str(code), "--gopath", str(gopath), "--outputfile", str(out), *extra]


def test_writes_diagram_to_output_file(tree):
    gopath, code, out = tree
    assert cli.main(_args(gopath, code, out)) == 0
    text = out.read_text(encoding="utf-8")
    assert text.startswith("@startuml\n")
    assert text.endswith("@enduml")
    pkg = package_path_to_uml("example.com/proj/a")
    assert f"{pkg}.IA <|- {pkg}.SA\n" in text
    assert "class SB" in text


def test_ignored_directory_is_left_out(tree):
    gopath, code, out = tree
    assert cli.main(_args(gopath, code, out, "--ignoredir", str(code / "b"))) == 0
    text = out.read_text(encoding="utf-8")
    assert "class SA" in text
    assert "class SB" not in text


def test_no_arguments_prints_example(capsys):
    assert cli.main([]) == 1
    out = capsys.readouterr().out
    assert "--codedir" in out
    assert "--outputfile" in out


def test_missing_required_option_exits_with_one(tree):
    gopath, code, _ = tree
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--codedir", str(code), "--gopath", str(gopath)])
    assert excinfo.value.code == 1


def test_code_dir_outside_gopath_is_rejected(tree, tmp_path):
    gopath, _, out = tree
    outside = tmp_path / "elsewhere"
    outside.mkdir()
    with pytest.raises(SystemExit) as excinfo:
        cli.main(_args(gopath, outside, out))
    assert str(outside) in excinfo.value.code
    assert not out.exists()


def test_ignore_dir_outside_code_dir_is_rejected(tree, tmp_path):
    gopath, code, out = tree
    stray = str(tmp_path / "stray")
    with pytest.raises(SystemExit) as excinfo:
        cli.main(_args(gopath, code, out, "--ignoredir", stray))
    assert stray in excinfo.value.code
    assert not out.exists()


def test_missing_code_dir_is_reported(tree):
    gopath, code, out = tree
    missing = code / "nothing-here"
    with pytest.raises(SystemExit) as excinfo:
        cli.main(_args(gopath, missing, out))
    assert str(missing) in excinfo.value.code