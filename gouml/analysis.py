"""Analyse a tree of Go sources and describe its types as a PlantUML class diagram."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Sequence, Union

from gouml.goparser import (
    ArrayType,
    ChanType,
    Ellipsis,
    Field,
    FuncDecl,
    FuncType,
    GoSyntaxError,
    Ident,
    InterfaceType,
    MapType,
    ParenExpr,
    SelectorExpr,
    StarExpr,
    StructType,
    TypeSpec,
    parse_file,
)
from gouml.logkit import exported as log
from gouml.stdlib import standard_package_names

__all__ = [
    "Config",
    "InterfaceMeta",
    "StructMeta",
    "TypeAliasMeta",
    "ImportMeta",
    "DependencyRelation",
    "AnalysisTool",
    "analyze_code",
    "has_prefix_in_some_element",
    "find_go_package_name_in_dir",
    "parse_package_name_from_go_file",
    "package_path_to_uml",
]

_BASE_TYPES = frozenset(
    {
        "bool", "byte", "int", "int8", "int16", "int32", "int64",
        "uint", "uint8", "uint16", "uint32", "uint64",
        "float32", "float64", "complex64", "complex128",
        "string", "uintptr", "rune", "error",
    }
)

PathLike = Union[str, "os.PathLike[str]"]


@dataclass
class Config:
    """Where the code to analyse lives and which directories to skip."""

    code_dir: str
    gopath_dir: str
    vendor_dir: str = ""
    ignore_dirs: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.code_dir = os.fspath(self.code_dir) if self.code_dir else ""
        self.gopath_dir = os.fspath(self.gopath_dir) if self.gopath_dir else ""
        self.vendor_dir = os.fspath(self.vendor_dir) if self.vendor_dir else ""
        self.ignore_dirs = [os.fspath(d) for d in self.ignore_dirs]


def has_prefix_in_some_element(value: str, prefixes: Iterable[str]) -> bool:
    """Return True if ``value`` starts with any of ``prefixes``."""
    return any(value.startswith(prefix) for prefix in prefixes)


def parse_package_name_from_go_file(filepath: PathLike) -> str:
    """Return the package name declared in a Go file, or "" if it cannot be read."""
    try:
        return parse_file(filepath).name
    except (GoSyntaxError, OSError, UnicodeDecodeError) as exc:
        log.error(f"failed to parse file {os.fspath(filepath)}, {exc}")
        return ""


def find_go_package_name_in_dir(dirpath: PathLike) -> str:
    """Return the package name of the first parsable Go file in ``dirpath``."""
    try:
        entries = sorted(os.scandir(dirpath), key=lambda e: e.name)
    except OSError as exc:
        log.error(f"failed to list directory {os.fspath(dirpath)}, {exc}")
        return ""
    for entry in entries:
        if not entry.is_dir() and entry.name.endswith(".go"):
            name = parse_package_name_from_go_file(os.path.join(dirpath, entry.name))
            if name:
                return name
    return ""


def package_path_to_uml(package_path: str) -> str:
    """Turn a package path into a PlantUML namespace name."""
    return package_path.replace("/", "\\\\").replace("-", "_")


@dataclass
class InterfaceMeta:
    file_path: str
    package_path: str
    name: str
    method_signs: list[str] = field(default_factory=list)
    uml: str = ""

    def unique_name_uml(self) -> str:
        return package_path_to_uml(self.package_path) + "." + self.name


@dataclass
class StructMeta:
    file_path: str
    package_path: str
    name: str
    method_signs: list[str] = field(default_factory=list)
    uml: str = ""

    def unique_name_uml(self) -> str:
        return package_path_to_uml(self.package_path) + "." + self.name

    def impl_interface_uml(self, interface_meta: InterfaceMeta) -> str:
        """Return the diagram line saying this struct implements ``interface_meta``."""
        return f"{interface_meta.unique_name_uml()} <|- {self.unique_name_uml()}\n"


@dataclass
class TypeAliasMeta:
    file_path: str
    package_path: str
    name: str
    target_type_name: str = ""


@dataclass
class ImportMeta:
    alias: str
    path: str


@dataclass
class DependencyRelation:
    source: StructMeta
    target: StructMeta
    uml: str


def _walk_files(root: str) -> Iterator[str]:
    """Yield every file below ``root`` in lexical order, depth first."""
    try:
        entries = sorted(os.scandir(root), key=lambda e: e.name)
    except OSError:
        return
    for entry in entries:
        path = os.path.join(root, entry.name)
        if entry.is_dir(follow_symlinks=False):
            yield from _walk_files(path)
        else:
            yield path


class AnalysisTool:
    """Collects interfaces, structs and their relations from a Go source tree."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self.current_file = ""
        self.current_package_path = ""
        self.current_file_imports: list[ImportMeta] = []
        self.interface_metas: list[InterfaceMeta] = []
        self.struct_metas: list[StructMeta] = []
        self.type_alias_metas: list[TypeAliasMeta] = []
        self.package_names: dict[str, str] = {}
        self.dependency_relations: list[DependencyRelation] = []

    # driving the analysis

    def analyze(self) -> None:
        """Scan the code directory: first the types, then fields and methods."""
        config = self.config
        if not config.code_dir or not os.path.exists(config.code_dir):
            raise FileNotFoundError(f"code directory not found: {config.code_dir}")
        if not config.gopath_dir or not os.path.exists(config.gopath_dir):
            raise FileNotFoundError(f"GOPATH directory not found: {config.gopath_dir}")

        self.interface_metas = []
        self.struct_metas = []
        self.type_alias_metas = []
        self.package_names = {}
        self.dependency_relations = []

        for path, name in standard_package_names().items():
            self._map_package_name(path, name)

        sources = list(self._source_files())
        for path in sources:
            log.info("parsing " + path)
            self._visit_types_in_file(path)
        for path in sources:
            log.info("parsing " + path)
            self._visit_funcs_in_file(path)

    def _source_files(self) -> Iterator[str]:
        ignore = self.config.ignore_dirs
        for path in _walk_files(self.config.code_dir):
            if not path.endswith(".go") or path.endswith("test.go"):
                continue
            if ignore and has_prefix_in_some_element(path, ignore):
                continue
            yield path

    def _init_file(self, path: str) -> None:
        log.debug("path=", path)
        self.current_file = path
        self.current_package_path = self._filepath_to_package_path(path)
        if not self.current_package_path:
            log.errorf("empty package path, current file=%s", self.current_file)

    def _parse(self, path: str):
        try:
            return parse_file(path)
        except (GoSyntaxError, OSError, UnicodeDecodeError) as exc:
            log.error(f"failed to parse {path}: {exc}")
            raise

    def _map_package_name(self, package_path: str, package_name: str) -> None:
        if not package_path or not package_name:
            log.errorf(
                "cannot map package, package name=%s, package path=%s, current file=%s",
                package_name, package_path, self.current_file,
            )
            return
        self.package_names.setdefault(package_path, package_name)

    def _filepath_to_package_path(self, filepath: str) -> str:
        directory = os.path.dirname(filepath)
        vendor_dir = self.config.vendor_dir
        if vendor_dir and directory.startswith(vendor_dir):
            return directory.removeprefix(vendor_dir).removeprefix("/")
        if self.config.gopath_dir:
            src_dir = os.path.normpath(os.path.join(self.config.gopath_dir, "src"))
            if directory.startswith(src_dir):
                return directory.removeprefix(src_dir).removeprefix("/")
        log.errorf("cannot determine package path, filepath=%s", directory)
        return ""

    # first pass: declared types

    def _visit_types_in_file(self, path: str) -> None:
        self._init_file(path)
        go_file = self._parse(path)
        self._map_package_name(self.current_package_path, go_file.name)
        for spec in go_file.type_specs:
            self._visit_type_spec(spec)

    def _visit_type_spec(self, spec: TypeSpec) -> None:
        location = (self.current_file, self.current_package_path, spec.name)
        if isinstance(spec.type, InterfaceType):
            self.interface_metas.append(InterfaceMeta(*location))
        elif isinstance(spec.type, StructType):
            self.struct_metas.append(StructMeta(*location))
        else:
            self.type_alias_metas.append(TypeAliasMeta(*location))

    # second pass: fields, interface methods and struct methods

    def _visit_funcs_in_file(self, path: str) -> None:
        self._init_file(path)
        go_file = self._parse(path)

        self.current_file_imports = []
        for spec in go_file.imports:
            if spec.name is not None:
                alias = spec.name
            elif spec.path in self.package_names:
                alias = self.package_names[spec.path]
            else:
                alias = self._find_alias_by_package_path(spec.path)
            log.debugf(
                "current file=%s package path=%s, alias=%s", self.current_file, spec.path, alias
            )
            self.current_file_imports.append(ImportMeta(alias=alias, path=spec.path))

        for spec in go_file.type_specs:
            if isinstance(spec.type, InterfaceType):
                self._visit_interface_functions(spec.name, spec.type)
            elif isinstance(spec.type, StructType):
                self._visit_struct_fields(spec.name, spec.type)

        for func_decl in go_file.func_decls:
            self._visit_func(func_decl)

    def _visit_interface_functions(self, name: str, interface_type: InterfaceType) -> None:
        meta = self._find_interface(self.current_package_path, name)
        if meta is None:
            return
        meta.method_signs = [
            self._method_sign(method.names[0], method.type)
            for method in interface_type.methods
            if isinstance(method.type, FuncType)
        ]
        meta.uml = self._namespaced(
            "interface " + name + " " + self._interface_body(interface_type)
        )

    def _visit_struct_fields(self, name: str, struct_type: StructType) -> None:
        source = self._find_struct(self.current_package_path, name)
        if source is None:
            return
        source.uml = self._namespaced("class " + name + " " + self._struct_body(struct_type))
        for struct_field in struct_type.fields:
            self._visit_struct_field(source, struct_field)

    def _visit_struct_field(self, source: StructMeta, struct_field: Field) -> None:
        target, is_array = self._dependency_target(struct_field.type)
        if target is None:
            return
        names = ",".join(struct_field.names)
        if not names:
            uml = f"{source.unique_name_uml()} -|> {target.unique_name_uml()}"
        elif is_array:
            uml = f'{source.unique_name_uml()} ---> "*" {target.unique_name_uml()} : {names}'
        else:
            uml = f"{source.unique_name_uml()} ---> {target.unique_name_uml()} : {names}"
        self.dependency_relations.append(DependencyRelation(source, target, uml))

    def _dependency_target(self, expr) -> tuple[Optional[StructMeta], bool]:
        match expr:
            case Ident(name=name):
                return self._find_struct_by_alias("", name), False
            case StarExpr(x=inner):
                return self._dependency_target(inner)
            case ArrayType(elt=elt):
                return self._dependency_target(elt)[0], True
            case MapType(value=value):
                return self._dependency_target(value)[0], True
            case SelectorExpr(x=x, sel=sel):
                alias = self._type_to_string(x, False)
                return self._find_struct_by_alias(alias, self._type_to_string(sel, False)), False
        return None, False

    def _find_struct_by_alias(self, alias: str, struct_name: str) -> Optional[StructMeta]:
        if not alias and struct_name in _BASE_TYPES:
            return None
        package_path = self._find_package_path_by_alias(alias, struct_name)
        if package_path:
            return self._find_struct(package_path, struct_name)
        return None

    def _visit_func(self, func_decl: FuncDecl) -> None:
        log.debug("func name=", func_decl.name)
        struct_name = ""
        for receiver in func_decl.recv or ():
            match receiver.type:
                case Ident(name=name) | StarExpr(x=Ident(name=name)):
                    struct_name = name
        if not struct_name:
            return
        meta = self._find_struct(self.current_package_path, struct_name)
        if meta is not None:
            meta.method_signs.append(self._method_sign(func_decl.name, func_decl.type))

    # rendering types

    def _namespaced(self, body: str) -> str:
        return f"namespace {package_path_to_uml(self.current_package_path)} {{\n {body} \n}}"

    def _struct_body(self, struct_type: StructType) -> str:
        lines = "".join("  " + self._field_to_string(f) + "\n" for f in struct_type.fields)
        return "{\n" + lines + "}"

    def _interface_body(self, interface_type: InterfaceType) -> str:
        lines = "".join(
            "  " + ",".join(method.names) + self._params_results(method.type) + "\n"
            for method in interface_type.methods
            if isinstance(method.type, FuncType)
        )
        return " {\n" + lines + "}"

    @staticmethod
    def _signature_tail(func_type: FuncType, render: Callable[[Field], str]) -> str:
        text = "(" + ",".join(render(f) for f in func_type.params) + ")"
        results = ",".join(render(f) for f in func_type.results)
        if len(func_type.results) >= 2:
            results = f"({results})"
        return text + results

    def _params_results(self, func_type: FuncType) -> str:
        return self._signature_tail(func_type, self._field_to_string)

    def _method_sign(self, method_name: str, func_type: FuncType) -> str:
        return method_name + self._signature_tail(func_type, self._field_in_method_sign)

    def _field_in_method_sign(self, sign_field: Field) -> str:
        count = len(sign_field.names) or 1
        return ",".join([self._type_to_string(sign_field.type, True)] * count)

    def _field_to_string(self, struct_field: Field) -> str:
        names = ",".join(struct_field.names) + " " if struct_field.names else ""
        return names + self._type_to_string(struct_field.type, False)

    def _type_to_string(self, expr, qualify: bool) -> str:
        match expr:
            case Ident(name=name):
                return self._add_package_path_when_struct(name) if qualify else name
            case StarExpr(x=inner):
                return "*" + self._type_to_string(inner, qualify)
            case ArrayType(elt=elt):
                return "[]" + self._type_to_string(elt, qualify)
            case MapType(key=key, value=value):
                return (
                    "map[" + self._type_to_string(key, qualify) + "]"
                    + self._type_to_string(value, qualify)
                )
            case ChanType(value=value):
                return "chan " + self._type_to_string(value, qualify)
            case FuncType():
                return "func" + self._params_results(expr)
            case InterfaceType():
                return "interface " + self._interface_body(expr).replace("\n", " ")
            case SelectorExpr(x=x, sel=sel):
                if qualify:
                    package = self._find_package_path_by_alias(
                        self._selector_base(x), sel.name
                    )
                    return package + "." + sel.name
                return self._type_to_string(x, True) + "." + sel.name
            case StructType():
                return "struct " + self._struct_body(expr).replace("\n", " ")
            case Ellipsis(elt=elt):
                return "... " + self._type_to_string(elt, qualify)
            case ParenExpr(x=inner):
                return " (" + self._type_to_string(inner, qualify) + ")"
        log.error("typeToString ", type(expr).__name__, " file=", self.current_file)
        return ""

    def _selector_base(self, expr) -> str:
        if isinstance(expr, Ident):
            return expr.name
        log.error("selector base ", type(expr).__name__, " file=", self.current_file)
        return ""

    def _add_package_path_when_struct(self, type_name: str) -> str:
        search = {self.current_package_path}
        search.update(m.path for m in self.current_file_imports if m.alias == ".")
        for meta in (*self.struct_metas, *self.interface_metas):
            if meta.package_path in search and meta.name == type_name:
                return meta.package_path + "." + type_name
        return type_name

    # resolving names

    def _find_alias_by_package_path(self, package_path: str) -> str:
        result = ""
        if self.config.vendor_dir:
            candidate = os.path.join(self.config.vendor_dir, package_path)
            if os.path.exists(candidate):
                result = find_go_package_name_in_dir(candidate)
        if self.config.gopath_dir:
            candidate = os.path.join(self.config.gopath_dir, "src", package_path)
            if os.path.exists(candidate):
                result = find_go_package_name_in_dir(candidate)
        log.debugf("package path=%s, alias=%s", package_path, result)
        return result

    def _declared_in_current_package(self, type_name: str) -> bool:
        path = self.current_package_path
        return (
            self._find_struct(path, type_name) is not None
            or self._find_interface(path, type_name) is not None
        )

    def _alias_in_current_package(self, type_name: str) -> bool:
        return self._find_type_alias(self.current_package_path, type_name) is not None

    def _warn_unresolved(self, alias: str, type_name: str, matched: int) -> None:
        imports = json.dumps([{"Alias": m.alias, "Path": m.path} for m in self.current_file_imports])
        log.warn(
            f"cannot find full package path, package name {alias}, type name={type_name}, "
            f"in file {self.current_file}, matched imports={matched}, imports={imports}"
        )

    def _find_package_path_by_alias(self, alias: str, type_name: str) -> str:
        if not alias:
            if self._declared_in_current_package(type_name):
                return self.current_package_path
            if self._alias_in_current_package(type_name):
                return ""
            dot_imports = [m for m in self.current_file_imports if m.alias == "."]
            self._warn_unresolved(alias, type_name, len(dot_imports))
            return alias

        if any(m.path == alias for m in self.current_file_imports):
            return alias
        matched = [m for m in self.current_file_imports if m.alias == alias]
        if len(matched) == 1:
            return matched[0].path
        if len(matched) > 1:
            if self._declared_in_current_package(type_name):
                return matched[0].path
            if self._alias_in_current_package(type_name):
                return ""
        self._warn_unresolved(alias, type_name, len(matched))
        return alias

    def _find_struct(self, package_path: str, name: str) -> Optional[StructMeta]:
        return next(
            (m for m in self.struct_metas if m.name == name and m.package_path == package_path),
            None,
        )

    def _find_interface(self, package_path: str, name: str) -> Optional[InterfaceMeta]:
        return next(
            (m for m in self.interface_metas if m.name == name and m.package_path == package_path),
            None,
        )

    def _find_type_alias(self, package_path: str, name: str) -> Optional[TypeAliasMeta]:
        return next(
            (m for m in self.type_alias_metas if m.name == name and m.package_path == package_path),
            None,
        )

    # results

    def find_interface_impls(self, interface_meta: InterfaceMeta) -> list[StructMeta]:
        """Return the structs whose methods include every method of ``interface_meta``."""
        wanted = set(interface_meta.method_signs)
        return [s for s in self.struct_metas if wanted <= set(s.method_signs)]

    def uml(self) -> str:
        """Return the whole PlantUML class diagram."""
        lines: list[str] = [meta.uml + "\n" for meta in self.struct_metas]
        lines += [meta.uml + "\n" for meta in self.interface_metas]
        lines += [relation.uml + "\n" for relation in self.dependency_relations]
        for interface_meta in self.interface_metas:
            lines += [
                struct.impl_interface_uml(interface_meta)
                for struct in self.find_interface_impls(interface_meta)
            ]
        return "@startuml\n" + "".join(lines) + "@enduml"

    def output_to_file(self, path: PathLike) -> None:
        """Write the diagram to ``path``."""
        Path(path).write_text(self.uml(), encoding="utf-8")
        log.infof("result saved to %s", os.fspath(path))


def analyze_code(config: Config) -> AnalysisTool:
    """Analyse the code described by ``config`` and return the result."""
    tool = AnalysisTool(config)
    tool.analyze()
    return tool