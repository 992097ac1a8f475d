from __future__ import annotations

import ast
import re
import sys
import tomllib
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
DISTRIBUTIONS = {"pydantic_settings": "pydantic-settings"}


def imported_roots(package: Path) -> set[str]:
    roots: set[str] = set()
    for path in package.rglob("*.py"):
        for node in ast.walk(ast.parse(path.read_text())):
            if isinstance(node, ast.Import):
                roots.update(alias.name.split(".")[0] for alias in node.names)
            elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
                roots.add(node.module.split(".")[0])
    return roots


def test_every_third_party_import_is_declared():
    project = tomllib.loads((ROOT / "pyproject.toml").read_text())["project"]
    declared = {re.split(r"[<>=!~\[ ]", requirement)[0].lower() for requirement in project["dependencies"]}

    third_party = {
        root
        for root in imported_roots(ROOT / "src" / "tokend")
        if root not in sys.stdlib_module_names and root not in {"tokend", "__future__"}
    }

    assert {"starlette", "botocore"} <= third_party
    missing = {DISTRIBUTIONS.get(root, root) for root in third_party} - declared
    assert missing == set()
