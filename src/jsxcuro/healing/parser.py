#!/usr/bin/env python3
"""
JSXCURO PARSER - The Examiner
-----------------------------
Thin adapter over tree-sitter's JavaScript grammar (JSX included). The
parser is error-recovering: it always returns a tree, marking the regions it
could not make sense of with ERROR or MISSING nodes, which is exactly what
the final classification and the reference scan need.

Author: JsxCuro Team
Date: 2026-01-16
"""

from dataclasses import dataclass
from typing import List, Optional, Set, Iterator

import tree_sitter_javascript as tsjavascript
from tree_sitter import Language, Parser, Node, Tree

JS_LANGUAGE = Language(tsjavascript.language())

ELEMENT_NODES = ("jsx_opening_element", "jsx_self_closing_element")
DECLARATION_NODES = ("function_declaration", "class_declaration", "variable_declarator")
REFERENCE_NODES = ("identifier", "shorthand_property_identifier")


@dataclass
class ParseReport:
    ok: bool
    error_count: int = 0
    first_error: Optional[str] = None


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal without recursion (deeply nested markup is common)."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def node_text(node: Node) -> str:
    return node.text.decode("utf8", errors="replace")


class JsxParser:
    """Parses component text and answers structural questions about it."""

    def __init__(self):
        self.parser = Parser(JS_LANGUAGE)

    def parse(self, text: str) -> Tree:
        # Lone surrogates (valid in str, not in UTF-8) reach tree-sitter as invalid bytes
        return self.parser.parse(text.encode("utf8", errors="surrogatepass"))

    def check(self, text: str) -> ParseReport:
        """Counts error and missing nodes; ok means a clean tree."""
        root = self.parse(text).root_node
        if not root.has_error:
            return ParseReport(ok=True)

        errors = [n for n in walk(root) if n.type == "ERROR" or n.is_missing]
        first = None
        if errors:
            row, col = errors[0].start_point
            kind = f"missing '{errors[0].type}'" if errors[0].is_missing else "syntax error"
            first = f"{kind} at line {row + 1}, column {col + 1}"
        return ParseReport(ok=False, error_count=len(errors), first_error=first)

    def references(self, text: str) -> Set[str]:
        """Every identifier used in code. Strings, comments and JSX text never count."""
        root = self.parse(text).root_node
        return {node_text(n) for n in walk(root) if n.type in REFERENCE_NODES}

    def element_names(self, text: str) -> List[str]:
        """Capitalised element names in document order (`Card.Header` yields `Card`)."""
        root = self.parse(text).root_node
        names = []
        for node in walk(root):
            if node.type not in ELEMENT_NODES:
                continue
            name_node = node.child_by_field_name("name")
            if name_node is None:
                continue
            name = node_text(name_node).split(".", 1)[0]
            if name[:1].isupper() and name not in names:
                names.append(name)
        return names

    def declared_names(self, text: str) -> Set[str]:
        """Function, class and variable names declared at any level of the file."""
        root = self.parse(text).root_node
        declared = set()
        for node in walk(root):
            if node.type in DECLARATION_NODES:
                name_node = node.child_by_field_name("name")
                if name_node is not None and name_node.type == "identifier":
                    declared.add(node_text(name_node))
        return declared

    def imported_names(self, text: str) -> Set[str]:
        root = self.parse(text).root_node
        imported = set()
        for node in walk(root):
            if node.type == "import_statement":
                imported.update(node_text(n) for n in walk(node) if n.type == "identifier")
        return imported

    def bound_names(self, text: str) -> Set[str]:
        return self.declared_names(text) | self.imported_names(text)
