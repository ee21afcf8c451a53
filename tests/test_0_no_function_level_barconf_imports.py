"""Guard: no function-level `import barconf` inside src/.

A function-level `import barconf.x.y` shadows the module-level `barconf`
binding for the ENTIRE enclosing function, causing UnboundLocalError on
any `barconf.` reference that precedes the import statement.

This file is named with `test_0_` so it runs first.
"""

import ast
import os


_SRC_ROOT = os.path.join(os.path.dirname(__file__), "..", "src", "barconf")


def _find_function_level_barconf_imports():
    """Walk all .py files and flag `import barconf.*` inside functions/methods."""
    violations = []
    for dirpath, _dirs, files in os.walk(_SRC_ROOT):
        for fname in files:
            if not fname.endswith(".py"):
                continue
            path = os.path.join(dirpath, fname)
            with open(path, encoding="utf-8") as f:
                tree = ast.parse(f.read(), filename=path)

            rel = os.path.relpath(path, _SRC_ROOT)
            for node in ast.walk(tree):
                if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                    continue
                for child in ast.walk(node):
                    if isinstance(child, ast.Import):
                        names = [alias.name for alias in child.names]
                    elif isinstance(child, ast.ImportFrom):
                        names = [child.module or ""]
                    else:
                        continue
                    for name in names:
                        if name.startswith("barconf"):
                            violations.append(f"{rel}:{child.lineno} function-level import of {name}")
    return violations


def test_source_tree_exists():
    assert os.path.isfile(os.path.join(_SRC_ROOT, "commands.py"))


def test_no_function_level_barconf_imports():
    violations = _find_function_level_barconf_imports()
    assert violations == [], (
        "Function-level `import barconf.*` shadows the module binding and "
        "causes UnboundLocalError. Move these to module level:\n"
        + "\n".join(f"  {v}" for v in violations)
    )
