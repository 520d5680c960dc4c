# gouml

`gouml` reads a tree of Go source files and writes a PlantUML class diagram
describing it:

- every struct, drawn as a class inside a namespace named after its package
  path, with its fields;
- every interface, with its method signatures;
- dependencies between structs found in struct fields: embedding (`-|>`),
  plain references (`--->`), and slices or maps of other structs
  (`---> "*"`);
- implementation arrows (`<|-`) from an interface to every struct whose
  method set contains all of the interface's method signatures.

Files whose names end in `test.go` are skipped, and files are visited in
sorted order. Package paths are worked out from the `src` directory under
your GOPATH, or from the vendor directory when one is configured.

The output is plain PlantUML text between `@startuml` and `@enduml`.

## Installation

```
pip install .
```

No third-party libraries are needed.

## Command line

```
gouml --codedir /work/gopath/src/example.com/project \
      --gopath /work/gopath \
      --outputfile /tmp/result \
      --ignoredir /work/gopath/src/example.com/project/vendor
```

Options (the first three are required):

- `--codedir` – the directory to scan; it must start with the GOPATH directory.
- `--gopath` – the GOPATH directory.
- `--outputfile` – where the diagram is saved.
- `--ignoredir` – a directory to leave out of the scan; it must start with the
  code directory. May be given more than once.

`<codedir>/vendor` is always used to resolve imported package names.
Run with no arguments to print a usage example (exit status 1). Invalid
options, a missing directory or a Go file that cannot be parsed stop the
command with an error message.

### Demo command

```
gouml-demo /work/gopath/src/example.com/project /work/gopath --output /tmp/uml.txt
```

This analyses the code, saves the diagram (by default to `uml.txt` in the
temporary directory) and prints it. With `--ignore-vendor`, the code's
`vendor` directory is used to resolve imports but is left out of the diagram.

## Library use

```python
from gouml.analysis import Config, analyze_code

config = Config(
    code_dir="/work/gopath/src/example.com/project",
    gopath_dir="/work/gopath",
)
tool = analyze_code(config)

print(tool.uml())
tool.output_to_file("/tmp/uml.txt")
```

`Config` also takes `vendor_dir` and `ignore_dirs`. `analyze_code` raises
`FileNotFoundError` when the code or GOPATH directory does not exist.

The returned `AnalysisTool` exposes `interface_metas`, `struct_metas`,
`type_alias_metas` and `dependency_relations`; `find_interface_impls`
returns the structs implementing a given interface. Helpers in
`gouml.analysis` include `package_path_to_uml` (the namespace name used in
the diagram), `find_go_package_name_in_dir` and
`parse_package_name_from_go_file`. `gouml.demo.run_demo` is the function
behind the demo command.

Other modules:

- `gouml.goparser` – `parse_source` and `parse_file` read the package clause,
  imports, type declarations and function signatures of a Go file into small
  dataclasses; function bodies and `var`/`const` declarations are skipped.
  Bad input raises `GoSyntaxError`.
- `gouml.stdlib` – `standard_package_names()` maps Go standard library import
  paths to their package names.
- `gouml.closest` – `levenshtein` and `closest_choice` for edit-distance
  matching.
- `gouml.logkit` – a small structured logger (levels, hooks, fields, text and
  JSON formatters, a shared standard logger in `gouml.logkit.exported`),
  which the analysis uses for its progress messages.

## What it does not do

`gouml` produces PlantUML text only; it does not render diagrams to images.
It does not type-check the code: method sets are compared by signature text,
and type names that cannot be resolved are written as they appear.

## Running the tests

```
pip install .[test]
pytest
```