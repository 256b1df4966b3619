#!/usr/bin/env python3
"""
JSXCURO STRUCTURER - The Architect (Phase 2)
--------------------------------------------
Owns the ordered chain of text fixers that turn truncated, partially
streamed JSX into syntactically plausible code.

Every fixer is a pure text -> text function and is a no-op on well-formed
input. Order is load-bearing: each fixer may assume the invariants the
earlier ones established (complete tags before attribute repair, closed
expression containers before tag balancing, and so on). All of them read
the recovery information produced by the JsxLexer rather than guessing
with line regexes.

Author: JsxCuro Team
Date: 2026-01-16
"""

import re
from typing import Callable, List, Tuple

from jsxcuro.healing.lexer import (
    JsxLexer, LexResult, Frame, Token, closer_for, MARKUP, JS_FRAMES
)

Edit = Tuple[int, int, str]

RETURN_KEYWORD = re.compile(r"\breturn\b")
TERNARY_MARK = re.compile(r"(?<![?.])\?(?![?.])")
DANGLING_OPERATOR = re.compile(r"(=>|&&|\|\||\?\?|[=?:])\s*$")

# Body given to a component that never returns
FALLBACK_RETURN = "return null;"

# Object literal assigned to a binding, and a line that starts a return statement
OBJECT_ASSIGNMENT = re.compile(r"(?<![=!<>])=\s*\{")
RETURN_LINE = re.compile(r"[ \t]*return\b(?!\s*:)")

# Attribute value normalisation
EMPTY_CLASS = re.compile(r"(\bclass(?:Name)?\s*=\s*)\{\s*\}")
BARE_STYLE = re.compile(r"(\bstyle\s*=\s*)\{(\s*[A-Za-z_$][\w$]*\s*:[^{}]*)\}")
STYLE_OBJECT = re.compile(r"(\bstyle\s*=\s*\{\{)([^{}]*)(\}\})")
DANGLING_PROPERTY = re.compile(r",?\s*[A-Za-z_$][\w$-]*\s*:\s*$")
CLASS_CALL_COMMA = re.compile(r"(\b(?:cn|clsx|classNames|twMerge)\([^()]*?),\s*\)")


def apply_edits(text: str, edits: List[Edit]) -> str:
    """Applies non-overlapping (start, end, replacement) edits back to front."""
    for start, end, replacement in sorted(edits, key=lambda e: (e[0], e[1]), reverse=True):
        text = text[:start] + replacement + text[end:]
    return text


class JsxStructurer:
    """
    The surgical unit of the healing pipeline. `fixers` lists the chain in
    execution order as (name, callable) pairs.
    """

    def __init__(self, lexer: JsxLexer):
        self.lexer = lexer
        self.fixers: List[Tuple[str, Callable[[str], str]]] = [
            ("line_join", self.join_broken_lines),
            ("dangling_tag", self.close_dangling_tags),
            ("dangling_attribute", self.close_dangling_attributes),
            ("brace_balance", self.balance_braces),
            ("return_wrap", self.wrap_return_statements),
            ("dynamic_expression", self.repair_dynamic_expressions),
            ("attribute_value", self.repair_attribute_values),
            ("fragment_closure", self.close_fragments),
            ("tag_stack", self.balance_tag_stack),
            ("function_brace", self.balance_function_braces),
        ]

    # --- 1. LINE JOIN ---

    def join_broken_lines(self, text: str) -> str:
        """
        Merges a line with the next when an opening tag (attribute list,
        inline style object, attribute expression) is unterminated across the
        line break, or a quoted string is broken by it. Literals left open at
        the very end of the text are sealed.
        """
        for _ in range(text.count("\n") + 1):
            lexed = self.lexer.lex(text)
            newlines = self._joinable_newlines(text, lexed)
            if not newlines:
                break
            text = apply_edits(text, [self._join_edit(text, pos) for pos in newlines])
        return self._seal_literals(text)

    def _joinable_newlines(self, text: str, lexed: LexResult) -> List[int]:
        positions = []
        for token in lexed.tokens:
            if token.kind == "open" and not token.closed and not token.multiline_literal:
                start = token.start
                while True:
                    nl = text.find("\n", start, token.end)
                    if nl == -1:
                        break
                    positions.append(nl)
                    start = nl + 1
            elif token.kind == "string" and not token.closed and text[token.end:token.end + 1] == "\n":
                positions.append(token.end)
        return positions

    def _join_edit(self, text: str, pos: int) -> Edit:
        start = pos
        while start > 0 and text[start - 1] in " \t":
            start -= 1
        end = pos + 1
        while end < len(text) and text[end] in " \t":
            end += 1
        return start, end, " "

    def _seal_literals(self, text: str) -> str:
        lexed = self.lexer.lex(text)
        if not lexed.tokens:
            return text
        last = lexed.tokens[-1]
        if last.closed or last.end != len(text):
            return text

        if last.kind in ("string", "template"):
            backslashes = len(text) - len(text.rstrip("\\"))
            if backslashes % 2:
                text = text[:-1]
            return text + last.name
        if last.kind == "comment":
            return text + "*/"
        return text

    # --- 2. DANGLING TAG CLOSURE ---

    def close_dangling_tags(self, text: str) -> str:
        """
        Completes opening tags cut off mid-attribute, completes truncated
        closing tags, drops a lone '<' at the end and rewrites void elements
        such as <img> or <br> into self-closing form.
        """
        lexed = self.lexer.lex(text)
        edits = []
        for token in lexed.tokens:
            if token.kind == "stub":
                edits.append((token.start, token.end, ""))
            elif token.kind == "close" and not token.closed:
                edits.append((token.end, token.end, ">"))
            elif token.kind == "open" and not token.closed:
                if not self._has_expression(token.pending):
                    edits.append(self._terminate_tag(text, token))
            elif token.kind == "open" and self.lexer.is_void(token.name):
                body = text[token.start:token.end - 1].rstrip()
                edits.append((token.start + len(body), token.end, " />"))
        return apply_edits(text, edits)

    def _has_expression(self, pending: str) -> bool:
        return any(c in ")}]" for c in pending)

    def _terminate_tag(self, text: str, token: Token) -> Edit:
        # 1. Cut inside a quoted attribute value: close the quote first
        if token.pending:
            return token.end, token.end, token.pending + self._tag_end(token.name, False)

        segment = text[token.start:token.end]
        head = segment.rstrip()
        tail_ws = segment[len(head):]

        # 2. Attribute name with no value yet
        if head.endswith("="):
            head = head[:-1].rstrip()

        # 3. Half-written self-closer
        self_closing = head.endswith("/")
        if self_closing:
            head = head[:-1].rstrip()

        # 4. Tag name cut at a separator (<Card. / <svg:)
        if len(head) > 1 and head[-1] in ".:-":
            head = head.rstrip(".:-")
        return token.start + len(head), token.end, self._tag_end(token.name, self_closing) + tail_ws

    def _tag_end(self, name: str, self_closing: bool) -> str:
        return " />" if self_closing or self.lexer.is_void(name) else ">"

    # --- 3. DANGLING ATTRIBUTE CLOSURE ---

    def close_dangling_attributes(self, text: str) -> str:
        """
        Closes attribute expressions left open (attr={... -> attr={...}),
        giving a dangling arrow or logical operator a null operand, then
        terminates the tag.
        """
        lexed = self.lexer.lex(text)
        edits = []
        for token in lexed.tokens:
            if token.kind != "open" or token.closed or not self._has_expression(token.pending):
                continue
            head = text[token.start:token.end].rstrip()
            completion = ""
            if token.pending[0] not in "\"'`":
                completion = self._operand_for(head)
            edits.append((
                token.start + len(head), token.end,
                completion + token.pending + self._tag_end(token.name, False)
            ))
        return apply_edits(text, edits)

    def _operand_for(self, code: str) -> str:
        match = DANGLING_OPERATOR.search(code.rstrip())
        if not match:
            return ""
        return " null : null" if match.group(1) == "?" else " null"

    # --- 4. BRACE BALANCING ---

    def balance_braces(self, text: str) -> str:
        """
        Appends the closers for braces (and the parens/brackets nested in
        them) still open at the end of plain JavaScript. An object literal
        that runs into the next `return` statement is closed in place
        instead. Markup left open on top is left to the later fixers.
        """
        lexed = self.lexer.lex(text)
        tail = lexed.open_tail(JS_FRAMES)
        if not tail or not any(f.kind == "{" for f in tail):
            return text

        # 1. `const data = {` never closed before `return`: close it there
        closed = self._close_object_before_return(text, lexed)
        if closed != text:
            return closed

        # 2. Surplus closers at the very end, then everything still open
        text, lexed = self._trim_trailing_strays(text, lexed)
        tail = lexed.open_tail(JS_FRAMES)
        return text + self._suffix(text, lexed, self._close_js(text, lexed, tail))

    def _close_object_before_return(self, text: str, lexed: LexResult) -> str:
        code = self.lexer.code_only(text, lexed)
        for match in OBJECT_ASSIGNMENT.finditer(code):
            depth = 0
            for k in range(match.end() - 1, len(code)):
                c = code[k]
                if c == "{":
                    depth += 1
                elif c == "}":
                    depth -= 1
                    if depth == 0:
                        break
                elif c == "\n" and depth == 1 and RETURN_LINE.match(code, k + 1):
                    line_start = text.rfind("\n", 0, match.start()) + 1
                    indent = re.match(r"[ \t]*", text[line_start:]).group(0)
                    return apply_edits(text, [(k + 1, k + 1, indent + "};\n")])
        return text

    def _close_js(self, text: str, lexed: LexResult, frames: List[Frame]) -> str:
        code = self.lexer.code_only(text, lexed)
        closers = self._operand_at_end(text, code)
        for frame in frames:
            closers += self._paren_operand(text, frame) + self._js_closer(frame)
        return closers

    def _paren_operand(self, text: str, frame: Frame) -> str:
        """An empty `return (` or `=> (` still needs an expression."""
        if frame.kind != "(" or text[frame.start + 1:].strip():
            return ""
        if frame.return_paren or text[:frame.start].rstrip().endswith("=>"):
            return "null"
        return ""

    def _js_closer(self, frame: Frame) -> str:
        if frame.kind == "(":
            return ");" if frame.return_paren else ")"
        if frame.kind == "{" and frame.declaration:
            return "\n}"
        return closer_for(frame)

    def _operand_at_end(self, text: str, code: str) -> str:
        stripped = text.rstrip()
        if not stripped:
            return ""
        last = len(stripped) - 1
        if code[last] != text[last]:
            # Text ends in a literal, comment or markup
            return ""
        return self._operand_for(code[:last + 1])

    def _trim_trailing_strays(self, text: str, lexed: LexResult):
        strays = set(lexed.stray_closers)
        if not strays:
            return text, lexed

        # 1. Walk back over whitespace and semicolons collecting surplus closers
        k = len(text) - 1
        removed = []
        while k >= 0:
            if text[k] in " \t\r\n;":
                k -= 1
                continue
            if k in strays:
                removed.append((k, k + 1, ""))
                k -= 1
                continue
            break
        if not removed:
            return text, lexed

        # 2. Drop them and re-lex so callers see the new stack
        text = apply_edits(text, removed)
        return text, self.lexer.lex(text)

    def _suffix(self, text: str, lexed: LexResult, suffix: str) -> str:
        """Keeps appended closers out of a trailing line comment."""
        if suffix and lexed.tokens:
            last = lexed.tokens[-1]
            if last.kind == "comment" and last.end == len(text) and text.startswith("//", last.start):
                return "\n" + suffix
        return suffix

    # --- 5. RETURN WRAPPING ---

    def wrap_return_statements(self, text: str) -> str:
        """Normalises a bare `return <markup>` into `return (<markup>);`."""
        lexed = self.lexer.lex(text)
        code = self.lexer.code_only(text, lexed)
        edits = []
        for match in RETURN_KEYWORD.finditer(code):
            k = match.end()
            while k < len(text) and text[k] in " \t\r\n":
                k += 1
            token = lexed.token_at(k)
            if token is None or token.kind not in ("open", "self", "frag_open") or not token.closed:
                continue

            gap = text[match.end():k]
            # The paren stays on the return line so the statement cannot end early
            opener = " (" + gap.lstrip(" \t") if "\n" in gap else " ("
            edits.append((match.end(), k, opener))

            end = token.end if token.kind == "self" else lexed.elements.get(token.start)
            if end is not None:
                closer = ")" if text[end:].lstrip(" \t").startswith(";") else ");"
                edits.append((end, end, closer))
        return apply_edits(text, edits)

    # --- 6. DYNAMIC EXPRESSIONS ---

    def repair_dynamic_expressions(self, text: str) -> str:
        """
        Completes conditional, logical and iteration expressions sitting in
        markup position: a ternary missing its ':' branch, a dangling '&&',
        a '.map(' cut off inside its callback.
        """
        lexed = self.lexer.lex(text)
        edits = []
        for start, end in lexed.expressions:
            content = text[start + 1:end]
            if not content.strip():
                continue
            completion = self._complete_expression(content)
            if completion:
                pos = start + 1 + len(content.rstrip())
                edits.append((pos, pos, completion))

        suffix = ""
        open_exprs = [idx for idx, f in enumerate(lexed.stack) if f.kind == "expr"]
        if open_exprs:
            for frame in reversed(lexed.stack[open_exprs[0]:]):
                current = text + suffix
                if frame.kind == "expr":
                    suffix += self._complete_expression(current[frame.start + 1:]) + "}"
                elif frame.kind in MARKUP:
                    suffix += closer_for(frame)
                else:
                    operand = self._paren_operand(current, frame)
                    if not operand:
                        operand = self._operand_at_end(current, self.lexer.code_only(current))
                    suffix += operand + self._js_closer(frame).lstrip("\n")

        text = apply_edits(text, edits)
        if suffix:
            text += self._suffix(text, self.lexer.lex(text), suffix)
        return text

    def _complete_expression(self, content: str) -> str:
        code = self.lexer.code_only(content)
        if not code.strip():
            return ""
        operand = self._operand_at_end(content, code)
        if operand:
            return operand
        if len(TERNARY_MARK.findall(code)) > code.count(":"):
            return " : null"
        return ""

    # --- 7. ATTRIBUTE VALUES ---

    def repair_attribute_values(self, text: str) -> str:
        """
        Normalises class-list and style-object attribute expressions:
        className={} -> className="", style={a: 1} -> style={{a: 1}},
        dangling style properties and trailing commas in cn()/clsx() calls.
        """
        lexed = self.lexer.lex(text)
        edits = []
        for token in lexed.tokens:
            if token.kind not in ("open", "self") or not token.closed:
                continue
            segment = text[token.start:token.end]
            repaired = EMPTY_CLASS.sub(r'\1""', segment)
            repaired = BARE_STYLE.sub(r"\1{{\2}}", repaired)
            repaired = STYLE_OBJECT.sub(self._tidy_style, repaired)
            repaired = CLASS_CALL_COMMA.sub(r"\1)", repaired)
            if repaired != segment:
                edits.append((token.start, token.end, repaired))
        return apply_edits(text, edits)

    def _tidy_style(self, match) -> str:
        inner = DANGLING_PROPERTY.sub("", match.group(2))
        return match.group(1) + inner + match.group(3)

    # --- 8. FRAGMENTS ---

    def close_fragments(self, text: str) -> str:
        """Drops unmatched '</>' closers and closes '<>' left open at the end."""
        lexed = self.lexer.lex(text)
        edits = [(t.start, t.end, "") for t in lexed.unmatched if t.kind == "frag_close"]
        tail = lexed.open_tail(("frag",))
        text = apply_edits(text, edits)
        if tail:
            text += "</>" * len(tail)
        return text

    # --- 9. TAG STACK ---

    def balance_tag_stack(self, text: str) -> str:
        """
        Replays the lexer's tag stack: synthesized closers are inserted where
        a closing tag skipped over open children, unmatched closing tags are
        dropped, and tags still open at the end are closed LIFO.
        """
        lexed = self.lexer.lex(text)
        edits = [(pos, pos, closers) for pos, closers in lexed.implicit_closers]
        edits.extend((t.start, t.end, "") for t in lexed.unmatched)
        suffix = "".join(closer_for(f) for f in lexed.open_tail(MARKUP))
        return apply_edits(text, edits) + suffix

    # --- 10. FUNCTION BRACES ---

    def balance_function_braces(self, text: str) -> str:
        """
        Balances the enclosing declaration: trailing surplus closers are
        removed, remaining open constructs are closed, and a component body
        without any return gets a best-effort `return null;`.
        """
        # 1. Surplus closers at the end
        lexed = self.lexer.lex(text)
        text, lexed = self._trim_trailing_strays(text, lexed)
        code = self.lexer.code_only(text, lexed)

        # 2. Closed component bodies that never return
        edits = []
        for decl in lexed.declarations:
            if not decl.block or decl.body_end is None:
                continue
            body = code[decl.body_start + 1:decl.body_end - 1]
            if RETURN_KEYWORD.search(body) or FALLBACK_RETURN in text[decl.body_start:decl.body_end]:
                continue
            close = decl.body_end - 1
            line_start = text.rfind("\n", 0, close) + 1
            if text[line_start:close].strip():
                edits.append((close, close, FALLBACK_RETURN + " "))
            else:
                edits.append((line_start, line_start, "  " + FALLBACK_RETURN + "\n"))

        # 3. Close whatever is still open, innermost first
        suffix = self._operand_at_end(text, code) if lexed.stack else ""
        for frame in reversed(lexed.stack):
            if frame.kind in JS_FRAMES:
                if frame.kind == "{" and frame.declaration and \
                        not RETURN_KEYWORD.search(code[frame.start + 1:]) and \
                        FALLBACK_RETURN not in text[frame.start:]:
                    suffix += "\n  " + FALLBACK_RETURN
                suffix += self._paren_operand(text + suffix, frame) + self._js_closer(frame)
            else:
                suffix += closer_for(frame)

        text = apply_edits(text, edits)
        if suffix:
            text += self._suffix(text, self.lexer.lex(text), suffix)
        return text
