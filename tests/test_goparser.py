import textwrap

import pytest

from gouml.goparser import (
    ArrayType,
    ChanType,
    Ellipsis,
    Field,
    FuncType,
    GoSyntaxError,
    Ident,
    ImportSpec,
    InterfaceType,
    MapType,
    SelectorExpr,
    StarExpr,
    StructType,
    TypeSpec,
    parse_file,
    parse_source,
)

A_GO = textwrap.dedent(
    """\
    package a

    type IA interface  {
    \tAdd()
    \tAdd2(i int) int
    \tAdd3(i int, j,k int) (int,int)
    \tAdd4(i int) (int)
    }

    type SA struct {
    }

    func (this * SA) Add(){}

    func (this * SA) Add2(int)(int){
    \treturn 0
    }

    func (this * SA) Add3(i int, j int, k int)(int, int){
    \treturn 0,0
    }

    func (this * SA) Add4(i int)int{
    \treturn 0
    }
    """
)

B_STRUCT_GO = textwrap.dedent(
    """\
    package b

    import (
    \tsub2 "git.oschina.net/jscode/go-package-plantuml/testdata/b/sub"
    \ta "sync"
    \t"git.oschina.net/jscode/go-package-plantuml/testdata/b/suba"
    )

    type SB struct {
    }

    func (this  SB) Add(a sub2.SubSA, locker a.Locker, b B, subsa1 suba.SubSa1){}
    """
)

B_INTERFACE_GO = textwrap.dedent(
    """\
    package b

    import "sync"
    import sub2 "git.oschina.net/jscode/go-package-plantuml/testdata/b/sub"
    import . "git.oschina.net/jscode/go-package-plantuml/testdata/b/suba"

    type B struct {}

    type IA interface  {
    \tAdd(a sub2.SubSA, locker sync.Locker, b B, subsa1 SubSa1)
    }
    """
)

UML_A_GO = textwrap.dedent(
    """\
    package a

    import (
    \t"sync"
    \t"git.oschina.net/jscode/go-package-plantuml/testdata/uml/sub2"
    )

    type IA interface  {
    \tAdd()
    }

    type SA struct {
    \ta int
    \tb sync.Mutex
    \tc sub2.Sub2A
    \tm map[string]sub2.Sub2A
    }

    func (this * SA) Add(){}
    """
)

MISC_GO = textwrap.dedent(
    """\
    package misc

    import (
    \t"fmt"
    \t_ "embed"
    )

    const (
    \tA = iota
    \tB
    )

    var handlers = map[string]func(){
    \t"x": func() { fmt.Println("}") },
    }

    type (
    \tPair struct {
    \t\t*Base
    \t\tio.Reader `json:"r"`
    \t\tLeft, Right int `json:"v"`
    \t\tCh <-chan []*Item
    \t\tOut chan<- [4]byte
    \t\tCb func(string, ...interface{}) (n int, err error)
    \t}
    \tName = string
    )

    func (p Pair) Format(args ...string) string {
    \ts := "{"
    \treturn s + fmt.Sprint(args)
    }

    func helper() {}
    """
)

INT = Ident("int")


def test_package_name_and_declarations_of_a():
    go_file = parse_source(A_GO)
    assert go_file.name == "a"
    assert go_file.imports == ()
    assert [spec.name for spec in go_file.type_specs] == ["IA", "SA"]
    assert [func.name for func in go_file.func_decls] == ["Add", "Add2", "Add3", "Add4"]


def test_interface_methods_group_parameter_names():
    methods = parse_source(A_GO).type_specs[0].type.methods
    assert [m.names for m in methods] == [("Add",), ("Add2",), ("Add3",), ("Add4",)]
    assert methods[0].type == FuncType((), ())
    assert methods[1].type == FuncType((Field(("i",), INT),), (Field((), INT),))
    assert methods[2].type == FuncType(
        (Field(("i",), INT), Field(("j", "k"), INT)),
        (Field((), INT), Field((), INT)),
    )
    assert methods[3].type.results == (Field((), INT),)


def test_pointer_receiver_and_unnamed_params():
    funcs = parse_source(A_GO).func_decls
    assert funcs[0].recv == (Field(("this",), StarExpr(Ident("SA"))),)
    assert funcs[1].type.params == (Field((), INT),)
    assert funcs[1].type.results == (Field((), INT),)


def test_empty_struct():
    sa = parse_source(A_GO).type_specs[1]
    assert sa == TypeSpec("SA", StructType(()), False)


def test_aliased_imports_and_value_receiver():
    go_file = parse_source(B_STRUCT_GO)
    assert go_file.imports == (
        ImportSpec("sub2", "git.oschina.net/jscode/go-package-plantuml/testdata/b/sub"),
        ImportSpec("a", "sync"),
        ImportSpec(None, "git.oschina.net/jscode/go-package-plantuml/testdata/b/suba"),
    )
    add = go_file.func_decls[0]
    assert add.recv == (Field(("this",), Ident("SB")),)
    assert add.type.params[0] == Field(
        ("a",), SelectorExpr(Ident("sub2"), Ident("SubSA"))
    )
    assert add.type.params[2] == Field(("b",), Ident("B"))


def test_separate_import_lines_and_dot_import():
    go_file = parse_source(B_INTERFACE_GO)
    assert [spec.name for spec in go_file.imports] == [None, "sub2", "."]
    assert go_file.imports[0].path == "sync"
    method = go_file.type_specs[1].type.methods[0]
    assert method.type.params[3] == Field(("subsa1",), Ident("SubSa1"))


def test_struct_fields_with_selectors_and_map():
    sa = parse_source(UML_A_GO).type_specs[1].type
    sub2a = SelectorExpr(Ident("sub2"), Ident("Sub2A"))
    assert sa.fields == (
        Field(("a",), INT),
        Field(("b",), SelectorExpr(Ident("sync"), Ident("Mutex"))),
        Field(("c",), sub2a),
        Field(("m",), MapType(Ident("string"), sub2a)),
    )


def test_skips_values_and_keeps_grouped_types():
    go_file = parse_source(MISC_GO)
    assert go_file.imports == (ImportSpec(None, "fmt"), ImportSpec("_", "embed"))
    assert [spec.name for spec in go_file.type_specs] == ["Pair", "Name"]
    assert go_file.type_specs[1] == TypeSpec("Name", Ident("string"), True)
    assert [func.name for func in go_file.func_decls] == ["Format", "helper"]
    assert go_file.func_decls[1].recv is None


def test_embedded_fields_tags_and_channels():
    fields = parse_source(MISC_GO).type_specs[0].type.fields
    assert fields[0] == Field((), StarExpr(Ident("Base")))
    assert fields[1] == Field((), SelectorExpr(Ident("io"), Ident("Reader")), '`json:"r"`')
    assert fields[2] == Field(("Left", "Right"), INT, '`json:"v"`')
    assert fields[3].type == ChanType(ArrayType(StarExpr(Ident("Item"))), "recv")
    assert fields[4].type == ChanType(ArrayType(Ident("byte"), "4"), "send")


def test_func_type_field_with_variadic_and_named_results():
    cb = parse_source(MISC_GO).type_specs[0].type.fields[5]
    assert cb.names == ("Cb",)
    assert cb.type == FuncType(
        (Field((), Ident("string")), Field((), Ellipsis(InterfaceType(())))),
        (Field(("n",), INT), Field(("err",), Ident("error"))),
    )


def test_variadic_method_param():
    fmt_decl = parse_source(MISC_GO).func_decls[0]
    assert fmt_decl.type.params == (Field(("args",), Ellipsis(Ident("string"))),)
    assert fmt_decl.type.results == (Field((), Ident("string")),)


def test_block_comment_with_newline_ends_declaration():
    go_file = parse_source("package p\ntype T int /* c\n */ type U int\n")
    assert [spec.name for spec in go_file.type_specs] == ["T", "U"]


def test_generic_function_type_parameters_are_skipped():
    go_file = parse_source("package p\nfunc Map[T any](xs []T) {}\n")
    func = go_file.func_decls[0]
    assert func.name == "Map"
    assert func.type.params == (Field(("xs",), ArrayType(Ident("T"))),)


def test_missing_package_clause():
    with pytest.raises(GoSyntaxError):
        parse_source("func f() {}\n")


def test_mixed_named_and_unnamed_parameters():
    with pytest.raises(GoSyntaxError, match="mixed named and unnamed"):
        parse_source("package p\nfunc f(a int, b) {}\n")


def test_unexpected_character_reports_file_and_line():
    with pytest.raises(GoSyntaxError) as info:
        parse_source("package p\n$\n", "x.go")
    assert info.value.line == 2
    assert info.value.filename == "x.go"
    assert "x.go" in str(info.value)


def test_unterminated_body():
    with pytest.raises(GoSyntaxError):
        parse_source("package p\nfunc f() {\n")


def test_parse_file_matches_parse_source(tmp_path):
    path = tmp_path / "a.go"
    path.write_text(A_GO, encoding="utf-8")
    assert parse_file(path) == parse_source(A_GO)
    assert parse_file(str(path)).name == "a"