"""
Namespace tree for generated declarations.

Declarations are collected per namespace and rendered with child
namespaces in sorted key order, so the output only depends on the bundle
contents and not on the order definitions appear in it.
"""

from typing import Dict, Iterable, List, Optional

INDENT = "    "


class Module:
    """One namespace of the generated code."""

    def __init__(self, prelude: Optional[List[str]] = None):
        # Lines injected at the top of the namespace body
        self.prelude: List[str] = list(prelude or [])
        self.items: List[str] = []
        self.modules: Dict[str, "Module"] = {}

    def add(self, declaration: str) -> None:
        """Append a rendered declaration to this namespace."""
        self.items.append(declaration.strip("\n"))

    def is_empty(self) -> bool:
        return not self.prelude and not self.items and not self.modules

    def render(self) -> str:
        """Render prelude, then child namespaces, then declarations."""
        blocks: List[str] = []

        if self.prelude:
            blocks.append("\n".join(self.prelude))

        for name in sorted(self.modules):
            child = self.modules[name]
            body = child.render() if not child.is_empty() else "pass"
            blocks.append(f"class {name}:\n{indent(body)}")

        blocks.extend(self.items)

        return "\n\n\n".join(blocks)


class ModuleTree:
    """Root of the namespace tree built during one generation pass."""

    def __init__(self, default_prelude: Optional[Iterable[str]] = None):
        self.default_prelude: List[str] = list(default_prelude or [])
        self.root = Module()

    def get_or_create(self, path: Iterable[str]) -> Module:
        """
        Walk the tree along path, creating missing namespaces.

        New namespaces receive a copy of the default prelude. An empty path
        returns the root.
        """
        module = self.root
        for segment in path:
            child = module.modules.get(segment)
            if child is None:
                child = Module(self.default_prelude)
                module.modules[segment] = child
            module = child
        return module

    def namespaces(self) -> List[str]:
        """Dotted names of every namespace in render order."""
        names: List[str] = []

        def walk(module: Module, prefix: List[str]):
            for name in sorted(module.modules):
                path = prefix + [name]
                names.append(".".join(path))
                walk(module.modules[name], path)

        walk(self.root, [])
        return names

    def render(self) -> str:
        return self.root.render()


def indent(text: str, level: int = 1) -> str:
    """Indent non-blank lines of text."""
    prefix = INDENT * level
    return "\n".join(prefix + line if line.strip() else "" for line in text.split("\n"))
