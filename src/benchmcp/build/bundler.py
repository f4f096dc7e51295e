"""
benchmcp bundler

Packs the plugin into a single zip application the host's plugin loader can
run. While staging, every module is rewritten:

- imports of restricted modules go through ``_bundle_compat``, which asks the
  host for the module before falling back to a normal import
- ``__DEV__`` and ``__ICON__`` become literals
- in production, docstrings are stripped and constant ``if`` branches folded

The pure-Python libraries named in ``vendor`` are copied into the bundle as
well and get the same import rewrite, so the HTTP server stack also loads
``socket`` and ``os`` through the host. Their code is not otherwise changed.
Libraries with native extensions cannot be imported from a zip application
and are refused.
"""

import ast
import base64
import importlib.machinery
import importlib.util
import logging
import os
import shutil
import tempfile
import tokenize
import zipapp
from typing import Dict, Iterable, List, Optional

from ..common.errors import BuildError

logger = logging.getLogger(__name__)

COMPAT_MODULE = "_bundle_compat"

DEFAULT_RESTRICTED_MODULES = ("os", "pathlib", "shutil", "subprocess", "socket")

ASSETS = ("icon.svg", "about.md")

# HTTP server stack bundled with the plugin
DEFAULT_VENDOR = ("uvicorn", "starlette", "anyio", "mcp")

NATIVE_SUFFIXES = tuple(importlib.machinery.EXTENSION_SUFFIXES)

COMPAT_SHIM = '''"""Loads restricted modules through the host when it provides a loader"""

import builtins
import importlib


def require_native(name):
    loader = getattr(builtins, "require_native_module", None)
    if loader is not None:
        return loader(name)
    return importlib.import_module(name)


def require_attribute(module, name):
    try:
        return getattr(require_native(module), name)
    except AttributeError:
        return require_native(f"{module}.{name}")
'''


def _compat_call(function: str, *args: str) -> ast.Call:
    return ast.Call(
        func=ast.Attribute(value=ast.Name(id=COMPAT_MODULE, ctx=ast.Load()), attr=function, ctx=ast.Load()),
        args=[ast.Constant(value=arg) for arg in args],
        keywords=[],
    )


def _assign(target: str, value: ast.expr) -> ast.Assign:
    return ast.Assign(targets=[ast.Name(id=target, ctx=ast.Store())], value=value)


class RestrictedImportTransformer(ast.NodeTransformer):
    """Rewrite ``import os`` into ``os = _bundle_compat.require_native("os")``

    Star imports from a restricted module cannot be rewritten: they fail the
    build when ``strict`` and are left as they are otherwise.
    """

    def __init__(self, restricted: Iterable[str], strict: bool = True):
        self.restricted = tuple(restricted)
        self.strict = strict
        self.rewritten = 0

    def is_restricted(self, module: Optional[str]) -> bool:
        if not module:
            return False
        return any(module == name or module.startswith(name + ".") for name in self.restricted)

    def visit_Import(self, node: ast.Import):
        kept = []
        statements: List[ast.stmt] = []
        for alias in node.names:
            if not self.is_restricted(alias.name):
                kept.append(alias)
                continue
            self.rewritten += 1
            if alias.asname:
                statements.append(_assign(alias.asname, _compat_call("require_native", alias.name)))
                continue
            top = alias.name.split(".")[0]
            if top != alias.name:
                statements.append(ast.Expr(value=_compat_call("require_native", alias.name)))
            statements.append(_assign(top, _compat_call("require_native", top)))

        if kept:
            statements.insert(0, ast.Import(names=kept))
        return [ast.copy_location(statement, node) for statement in statements]

    def visit_ImportFrom(self, node: ast.ImportFrom):
        if node.level or not self.is_restricted(node.module):
            return node
        if any(alias.name == "*" for alias in node.names):
            if self.strict:
                raise BuildError(f"Star import from restricted module {node.module!r} cannot be bundled")
            logger.warning(f"Keeping star import from {node.module}")
            return node
        statements = []
        for alias in node.names:
            statements.append(_assign(
                alias.asname or alias.name,
                _compat_call("require_attribute", node.module, alias.name),
            ))
        self.rewritten += 1
        return [ast.copy_location(statement, node) for statement in statements]


class ConstantTransformer(ast.NodeTransformer):
    """Replace compile-time constant names with their literal values"""

    def __init__(self, constants: Dict[str, object]):
        self.constants = constants

    def visit_Name(self, node: ast.Name):
        if isinstance(node.ctx, ast.Load) and node.id in self.constants:
            return ast.copy_location(ast.Constant(value=self.constants[node.id]), node)
        return node

    def visit_Assign(self, node: ast.Assign):
        if (len(node.targets) == 1 and isinstance(node.targets[0], ast.Name)
                and node.targets[0].id in self.constants):
            node.value = ast.copy_location(ast.Constant(value=self.constants[node.targets[0].id]), node.value)
            return node
        return self.generic_visit(node)


class ProductionTransformer(ast.NodeTransformer):
    """Strip docstrings and fold ``if`` statements with a constant test"""

    def _strip_docstring(self, node):
        body = node.body
        if (body and isinstance(body[0], ast.Expr) and isinstance(body[0].value, ast.Constant)
                and isinstance(body[0].value.value, str)):
            node.body = body[1:]
        return node

    def visit_Module(self, node):
        return self.generic_visit(self._strip_docstring(node))

    def visit_ClassDef(self, node):
        return self.generic_visit(self._strip_docstring(node))

    def visit_FunctionDef(self, node):
        return self.generic_visit(self._strip_docstring(node))

    def visit_AsyncFunctionDef(self, node):
        return self.generic_visit(self._strip_docstring(node))

    def visit_If(self, node: ast.If):
        self.generic_visit(node)
        if isinstance(node.test, ast.Constant):
            return node.body if node.test.value else node.orelse
        return node


def ensure_bodies(tree: ast.AST) -> ast.AST:
    """Give every emptied block a ``pass``"""
    for node in ast.walk(tree):
        body = getattr(node, "body", None)
        if isinstance(body, list) and not body and not isinstance(node, ast.Module):
            node.body = [ast.Pass()]
    return tree


def _insert_compat_import(tree: ast.Module) -> None:
    index = 0
    for index, statement in enumerate(tree.body):
        is_docstring = (index == 0 and isinstance(statement, ast.Expr)
                        and isinstance(statement.value, ast.Constant)
                        and isinstance(statement.value.value, str))
        is_future = isinstance(statement, ast.ImportFrom) and statement.module == "__future__"
        if not (is_docstring or is_future):
            break
    else:
        index = len(tree.body)
    tree.body.insert(index, ast.Import(names=[ast.alias(name=COMPAT_MODULE)]))


def icon_constant(project_root: str) -> str:
    """The icon as a base64 data URL, or its file name when it is missing"""
    path = os.path.join(project_root, "icon.svg")
    try:
        with open(path, "rb") as f:
            encoded = base64.b64encode(f.read()).decode("ascii")
    except OSError:
        return "icon.svg"
    return f"data:image/svg+xml;base64,{encoded}"


def _walk_files(root: str) -> List[str]:
    files = []
    for directory, dirs, names in os.walk(root):
        dirs[:] = sorted(d for d in dirs if d != "__pycache__" and not d.startswith("."))
        for name in sorted(names):
            if name.endswith((".pyc", ".pyo")):
                continue
            files.append(os.path.join(directory, name))
    return files


def vendor_location(name: str) -> str:
    """Directory of the installed package ``name``, or its file for a single module

    Raises:
        BuildError: the library is not installed or is not a Python source module
    """
    try:
        spec = importlib.util.find_spec(name)
    except (ImportError, ValueError) as e:
        raise BuildError(f"Cannot vendor {name!r}: {e}") from e
    if spec is None:
        raise BuildError(f"Cannot vendor {name!r}: it is not installed")
    if spec.submodule_search_locations:
        return list(spec.submodule_search_locations)[0]
    if spec.origin and spec.origin.endswith(".py"):
        return spec.origin
    raise BuildError(f"Cannot vendor {name!r}: {spec.origin} is not a Python source module")


class Bundler:
    """Build the plugin bundle

    Args:
        source_dir: package directory to bundle
        output_dir: where the bundle and the assets are written
        bundle_name: file name of the zip application
        restricted_modules: modules loaded through the host
        production: strip docstrings and fold dead branches
        project_root: directory holding ``icon.svg`` and ``about.md``
        entry_point: ``module:function`` run when the bundle is executed
        vendor: installed pure-Python libraries bundled alongside the package
    """

    def __init__(self, source_dir: str, output_dir: str = "dist", bundle_name: str = "mcp.pyz",
                 restricted_modules: Iterable[str] = DEFAULT_RESTRICTED_MODULES,
                 production: bool = False, project_root: str = ".",
                 entry_point: Optional[str] = None, vendor: Iterable[str] = ()):
        self.source_dir = os.path.abspath(source_dir)
        self.output_dir = os.path.abspath(output_dir)
        self.bundle_name = bundle_name
        self.restricted_modules = tuple(restricted_modules)
        self.production = production
        self.project_root = os.path.abspath(project_root)
        self.package = os.path.basename(self.source_dir.rstrip(os.sep))
        self.entry_point = entry_point or f"{self.package}.server.server:run"
        self.vendor = tuple(vendor)

    @property
    def bundle_path(self) -> str:
        return os.path.join(self.output_dir, self.bundle_name)

    def constants(self) -> Dict[str, object]:
        return {"__DEV__": not self.production, "__ICON__": icon_constant(self.project_root)}

    def transform_source(self, source: str, filename: str = "<bundle>", vendored: bool = False) -> str:
        """Rewrite one module

        Vendored modules only get the restricted import rewrite.

        Raises:
            BuildError: the module does not parse or cannot be rewritten
        """
        try:
            tree = ast.parse(source, filename=filename)
        except SyntaxError as e:
            raise BuildError(f"Cannot parse {filename}: {e}") from e

        imports = RestrictedImportTransformer(self.restricted_modules, strict=not vendored)
        tree = imports.visit(tree)
        if imports.rewritten:
            _insert_compat_import(tree)

        if not vendored:
            tree = ConstantTransformer(self.constants()).visit(tree)
            if self.production:
                tree = ProductionTransformer().visit(tree)
        tree = ensure_bodies(tree)
        ast.fix_missing_locations(tree)
        return ast.unparse(tree) + "\n"

    def _source_files(self) -> List[str]:
        return _walk_files(self.source_dir)

    def stage(self, staging_dir: str) -> List[str]:
        """Write the rewritten package, the vendored libraries and the shim into ``staging_dir``"""
        if not os.path.isdir(self.source_dir):
            raise BuildError(f"Source directory not found: {self.source_dir}")

        written = []
        for path in self._source_files():
            relative = os.path.relpath(path, self.source_dir)
            target = os.path.join(staging_dir, self.package, relative)
            os.makedirs(os.path.dirname(target), exist_ok=True)
            if path.endswith(".py"):
                with tokenize.open(path) as f:
                    source = f.read()
                with open(target, "w", encoding="utf-8") as f:
                    f.write(self.transform_source(source, relative))
            else:
                shutil.copyfile(path, target)
            written.append(relative)

        for name in self.vendor:
            written += self.stage_vendored(name, staging_dir)

        with open(os.path.join(staging_dir, f"{COMPAT_MODULE}.py"), "w", encoding="utf-8") as f:
            f.write(COMPAT_SHIM)
        logger.debug(f"Staged {len(written)} files from {self.source_dir}")
        return written

    def stage_vendored(self, name: str, staging_dir: str) -> List[str]:
        """Copy the installed library ``name`` into ``staging_dir``

        Modules that do not parse are copied unchanged.

        Raises:
            BuildError: the library is missing or ships native extensions
        """
        location = vendor_location(name)
        if os.path.isfile(location):
            files = [(location, f"{name}.py")]
        else:
            files = [(path, os.path.join(name, os.path.relpath(path, location)))
                     for path in _walk_files(location)]

        native = [relative for path, relative in files if path.endswith(NATIVE_SUFFIXES)]
        if native:
            raise BuildError(f"Cannot vendor {name!r}: native extensions cannot load from a zip "
                             f"application ({', '.join(native)})")

        written = []
        for path, relative in files:
            target = os.path.join(staging_dir, relative)
            os.makedirs(os.path.dirname(target), exist_ok=True)
            if path.endswith(".py"):
                with tokenize.open(path) as f:
                    source = f.read()
                try:
                    source = self.transform_source(source, relative, vendored=True)
                except BuildError as e:
                    logger.warning(f"Copying {relative} unchanged: {e}")
                with open(target, "w", encoding="utf-8") as f:
                    f.write(source)
            else:
                shutil.copyfile(path, target)
            written.append(relative)
        logger.info(f"Vendored {name} ({len(written)} files)")
        return written

    def copy_assets(self) -> List[str]:
        """Copy ``icon.svg`` and ``about.md`` next to the bundle, skipping missing ones"""
        copied = []
        for asset in ASSETS:
            source = os.path.join(self.project_root, asset)
            if not os.path.isfile(source):
                continue
            shutil.copyfile(source, os.path.join(self.output_dir, asset))
            copied.append(asset)
            logger.info(f"Copied {asset}")
        return copied

    def build(self) -> str:
        """Build the bundle and return its path

        Raises:
            BuildError: staging or archiving failed
        """
        mode = "production" if self.production else "development"
        logger.info(f"Building {self.bundle_name} ({mode})")
        try:
            os.makedirs(self.output_dir, exist_ok=True)
            with tempfile.TemporaryDirectory(prefix="benchmcp-build-") as staging_dir:
                self.stage(staging_dir)
                zipapp.create_archive(
                    staging_dir,
                    target=self.bundle_path,
                    main=self.entry_point,
                    compressed=self.production,
                )
        except OSError as e:
            raise BuildError(f"Failed to write {self.bundle_path}: {e}") from e
        except zipapp.ZipAppError as e:
            raise BuildError(f"Failed to create {self.bundle_name}: {e}") from e

        self.copy_assets()
        logger.info(f"Build completed: {self.bundle_path}")
        return self.bundle_path

    def clean(self) -> None:
        if os.path.isdir(self.output_dir):
            logger.info(f"Cleaning output directory: {self.output_dir}")
            shutil.rmtree(self.output_dir)

    def snapshot(self) -> Dict[str, float]:
        """Modification times of every input of the build"""
        paths = self._source_files() + [os.path.join(self.project_root, asset) for asset in ASSETS]
        times = {}
        for path in paths:
            try:
                times[path] = os.path.getmtime(path)
            except OSError:
                continue
        return times
