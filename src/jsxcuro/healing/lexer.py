#!/usr/bin/env python3
"""
JSXCURO LEXER - Tolerant JSX Tokenizer (Phase 1.1)
--------------------------------------------------
Walks partially generated JSX in a single forward pass and records, instead
of rejecting, everything that is broken: literals that never terminate,
tags cut off mid-attribute, closers with no opener, and the stack of
constructs still open when the text runs out.

The fixers in the Structurer never re-parse on their own; they read this
recovery information and rewrite the text around it.

Author: JsxCuro Team
Date: 2026-01-16
"""

import re
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Iterable

from jsxcuro.core.config import VOID_ELEMENTS

TAG_NAME = re.compile(r"[A-Za-z][\w.:-]*")

# Capitalised component declaration ending at the brace/paren that opens its body
DECLARATION_OPEN = re.compile(
    r"(?:export\s+(?:default\s+)?)?(?:async\s+)?"
    r"(?:function\s+(?P<fn>[A-Z][\w$]*)\s*\([^()]*\)"
    r"|(?:const|let|var)\s+(?P<arrow>[A-Z][\w$]*)\s*=\s*(?:async\s*)?(?:\([^()]*\)|[\w$]+)\s*=>)"
    r"\s*(?P<open>[{(])"
)

MARKUP = ("tag", "frag")
JS_FRAMES = ("{", "(", "[")
OPENER_FOR = {"}": "{", ")": "(", "]": "["}
CLOSER_FOR = {"{": "}", "(": ")", "[": "]", '"': '"', "'": "'", "`": "`"}

# A '<' after one of these starts markup rather than a comparison
TAG_PRECEDERS = set("(,=?:{}[>&|;!")
TAG_KEYWORDS = {"return", "yield", "default", "case", "else"}


@dataclass
class Token:
    """
    A non-code span. Kinds: string, template, comment, text (JSX children),
    open, self, close, frag_open, frag_close, stub (a lone '<' at the end).
    """
    kind: str
    start: int
    end: int
    name: str = ""                  # tag name, or quote char for strings
    closed: bool = True
    pending: str = ""               # closers an unterminated opening tag is waiting for
    multiline_literal: bool = False  # a template literal inside the tag spans lines


@dataclass
class Frame:
    """A construct that has been opened: '{', '(', '[', 'expr', 'tag' or 'frag'."""
    kind: str
    start: int
    name: str = ""
    return_paren: bool = False
    declaration: Optional[str] = None
    decl_start: int = 0


@dataclass
class Declaration:
    name: str
    start: int
    body_start: int
    body_end: Optional[int]         # offset just past the closer; None when unterminated
    block: bool                     # '{' body rather than a '(' expression body


@dataclass
class LexResult:
    text: str
    tokens: List[Token] = field(default_factory=list)
    stack: List[Frame] = field(default_factory=list)
    unmatched: List[Token] = field(default_factory=list)
    stray_closers: List[int] = field(default_factory=list)
    implicit_closers: List[Tuple[int, str]] = field(default_factory=list)
    elements: Dict[int, int] = field(default_factory=dict)
    element_spans: List[Tuple[int, int]] = field(default_factory=list)
    expressions: List[Tuple[int, int]] = field(default_factory=list)
    declarations: List[Declaration] = field(default_factory=list)

    def open_tail(self, kinds: Iterable[str]) -> List[Frame]:
        """Frames at the top of the stack whose kinds are all in `kinds`, top first."""
        kinds = tuple(kinds)
        tail = []
        for frame in reversed(self.stack):
            if frame.kind not in kinds:
                break
            tail.append(frame)
        return tail

    def token_at(self, offset: int) -> Optional[Token]:
        starts = [t.start for t in self.tokens]
        idx = bisect_right(starts, offset) - 1
        if idx >= 0 and self.tokens[idx].start == offset:
            return self.tokens[idx]
        return None

    @property
    def balanced(self) -> bool:
        return not self.stack and not self.stray_closers and not self.unmatched


def closer_for(frame: Frame) -> str:
    if frame.kind == "tag":
        return f"</{frame.name}>"
    if frame.kind == "frag":
        return "</>"
    if frame.kind == "expr":
        return "}"
    return CLOSER_FOR[frame.kind]


class JsxLexer:
    """
    Splits JSX into literal, comment and markup tokens while keeping a stack
    of open constructs. Two modes alternate: JavaScript (strings, comments,
    brackets, markup where an expression may start) and JSX children (text,
    '{' expression containers, nested tags).
    """

    def __init__(self, void_elements: Iterable[str] = VOID_ELEMENTS):
        self.void_elements = frozenset(void_elements)

    def is_void(self, name: str) -> bool:
        return name == name.lower() and name in self.void_elements

    def lex(self, text: str) -> LexResult:
        result = LexResult(text=text)
        declaration_opens = {m.start("open"): m for m in DECLARATION_OPEN.finditer(text)}
        n = len(text)
        i = 0

        while i < n:
            stack = result.stack
            if stack and stack[-1].kind in MARKUP:
                i = self._lex_children(text, i, result)
                continue

            ch = text[i]
            if ch == '"' or ch == "'":
                i = self._lex_string(text, i, result)
            elif ch == "`":
                i = self._lex_template(text, i, result)
            elif text.startswith("//", i):
                end = text.find("\n", i)
                end = n if end == -1 else end
                result.tokens.append(Token("comment", i, end))
                i = end
            elif text.startswith("/*", i):
                end = text.find("*/", i + 2)
                closed = end != -1
                end = end + 2 if closed else n
                result.tokens.append(Token("comment", i, end, closed=closed))
                i = end
            elif ch in JS_FRAMES:
                self._open_frame(text, i, result, declaration_opens)
                i += 1
            elif ch in OPENER_FOR:
                self._close_frame(i, ch, result)
                i += 1
            elif ch == "<" and self._markup_allowed(text, i):
                i = self._lex_tag(text, i, result)
            else:
                i += 1

        # --- END OF TEXT: whatever is still open stays on the stack ---
        for frame in result.stack:
            if frame.kind in MARKUP:
                result.element_spans.append((frame.start, n))
            if frame.declaration:
                result.declarations.append(Declaration(
                    frame.declaration, frame.decl_start, frame.start, None, frame.kind == "{"
                ))
        result.declarations.sort(key=lambda d: d.start)
        return result

    def code_only(self, text: str, lexed: Optional[LexResult] = None) -> str:
        """
        Returns `text` with every literal, comment and markup region blanked
        to spaces (newlines kept), so offsets still line up with the source.
        """
        lexed = lexed or self.lex(text)
        chars = list(text)

        def blank(start, end):
            for k in range(start, end):
                if chars[k] != "\n":
                    chars[k] = " "

        for token in lexed.tokens:
            blank(token.start, token.end)
        for start, end in lexed.element_spans:
            blank(start, end)
        return "".join(chars)

    # --- JSX children ---

    def _lex_children(self, text: str, i: int, result: LexResult) -> int:
        n = len(text)
        ch = text[i]
        if ch == "{":
            result.stack.append(Frame("expr", i))
            return i + 1
        if ch == "<" and (self._tag_follows(text, i) or self._is_stub(text, i)):
            return self._lex_tag(text, i, result)

        j = i + 1
        while j < n and text[j] not in "{<":
            j += 1
        result.tokens.append(Token("text", i, j))
        return j

    # --- JavaScript ---

    def _lex_string(self, text: str, i: int, result: LexResult) -> int:
        quote = text[i]
        n = len(text)
        j = i + 1
        while j < n:
            c = text[j]
            if c == "\\":
                j += 2
                continue
            if c == quote:
                result.tokens.append(Token("string", i, j + 1, name=quote))
                return j + 1
            if c == "\n":
                # Quoted JS strings cannot span lines
                result.tokens.append(Token("string", i, j, name=quote, closed=False))
                return j
            j += 1
        result.tokens.append(Token("string", i, n, name=quote, closed=False))
        return n

    def _lex_template(self, text: str, i: int, result: LexResult) -> int:
        n = len(text)
        j = i + 1
        while j < n:
            c = text[j]
            if c == "\\":
                j += 2
                continue
            if c == "`":
                result.tokens.append(Token("template", i, j + 1, name="`"))
                return j + 1
            j += 1
        result.tokens.append(Token("template", i, n, name="`", closed=False))
        return n

    def _open_frame(self, text: str, i: int, result: LexResult, declaration_opens: dict):
        frame = Frame(text[i], i)
        if frame.kind == "(" and self._preceding_word(text, i) == "return":
            frame.return_paren = True
        match = declaration_opens.get(i)
        if match:
            frame.declaration = match.group("fn") or match.group("arrow")
            frame.decl_start = match.start()
        result.stack.append(frame)

    def _close_frame(self, i: int, ch: str, result: LexResult):
        stack = result.stack
        top = stack[-1] if stack else None
        wanted = ("{", "expr") if ch == "}" else (OPENER_FOR[ch],)
        if top is None or top.kind not in wanted:
            result.stray_closers.append(i)
            return

        stack.pop()
        if top.kind == "expr":
            result.expressions.append((top.start, i))
        if top.declaration:
            result.declarations.append(Declaration(
                top.declaration, top.decl_start, top.start, i + 1, top.kind == "{"
            ))

    def _preceding_word(self, text: str, i: int) -> str:
        k = i - 1
        while k >= 0 and text[k] in " \t\r\n":
            k -= 1
        end = k + 1
        while k >= 0 and (text[k].isalnum() or text[k] in "_$"):
            k -= 1
        return text[k + 1:end]

    def _markup_allowed(self, text: str, i: int) -> bool:
        if not (self._tag_follows(text, i) or self._is_stub(text, i)):
            return False
        k = i - 1
        while k >= 0 and text[k] in " \t\r\n":
            k -= 1
        if k < 0:
            return True
        prev = text[k]
        if prev in TAG_PRECEDERS:
            return True
        if prev.isalnum() or prev in "_$":
            return self._preceding_word(text, i) in TAG_KEYWORDS
        return False

    # --- Markup ---

    def _tag_follows(self, text: str, i: int) -> bool:
        nxt = text[i + 1:i + 2]
        if nxt == ">" or (nxt.isalpha() and nxt.isascii()):
            return True
        if nxt == "/":
            after = text[i + 2:i + 3]
            return after == ">" or (after.isalpha() and after.isascii())
        return False

    def _is_stub(self, text: str, i: int) -> bool:
        return text[i:] in ("<", "</")

    def _lex_tag(self, text: str, i: int, result: LexResult) -> int:
        n = len(text)
        if not self._tag_follows(text, i):
            result.tokens.append(Token("stub", i, n, closed=False))
            return n
        if text.startswith("</", i):
            return self._lex_closing(text, i, result)
        if text.startswith("<>", i):
            result.tokens.append(Token("frag_open", i, i + 2))
            result.stack.append(Frame("frag", i))
            return i + 2
        return self._lex_opening(text, i, result)

    def _lex_opening(self, text: str, i: int, result: LexResult) -> int:
        n = len(text)
        match = TAG_NAME.match(text, i + 1)
        name = match.group()
        j = match.end()
        nest: List[str] = []
        multiline = False
        token = None

        while j < n:
            c = text[j]
            if nest:
                top = nest[-1]
                if top in "\"'`":
                    if c == "\\":
                        j += 2
                        continue
                    if c == top:
                        nest.pop()
                    elif c == "\n" and top == "`":
                        multiline = True
                elif c in "\"'`{([":
                    nest.append(c)
                elif c in OPENER_FOR and OPENER_FOR[c] == top:
                    nest.pop()
                j += 1
                continue

            if c == ">":
                token = Token("open", i, j + 1, name=name)
                break
            if c == "/" and text.startswith("/>", j):
                token = Token("self", i, j + 2, name=name)
                break
            if c == "<":
                # Another tag starts before this one ended
                break
            if c in "\"'{":
                nest.append(c)
            j += 1

        if token is None:
            pending = "".join(CLOSER_FOR[c] for c in reversed(nest))
            token = Token("open", i, min(j, n), name=name, closed=False, pending=pending)
        token.multiline_literal = multiline
        result.tokens.append(token)

        if token.kind == "open" and token.closed and not self.is_void(name):
            result.stack.append(Frame("tag", i, name=name))
        return token.end

    def _lex_closing(self, text: str, i: int, result: LexResult) -> int:
        n = len(text)
        if text.startswith("</>", i):
            token = Token("frag_close", i, i + 3)
            result.tokens.append(token)
            self._match_closer(token, result)
            return token.end

        match = TAG_NAME.match(text, i + 2)
        name = match.group()
        j = match.end()
        while j < n and text[j] in " \t\r\n":
            j += 1
        if j < n and text[j] == ">":
            token = Token("close", i, j + 1, name=name)
            result.tokens.append(token)
            self._match_closer(token, result)
        else:
            token = Token("close", i, j, name=name, closed=False)
            result.tokens.append(token)
        return token.end

    def _match_closer(self, token: Token, result: LexResult):
        """
        Pops back to the matching open tag within the run of markup frames on
        top of the stack. Skipped tags get synthesized closers; a closer with
        no match in that run is recorded as unmatched.
        """
        stack = result.stack
        wanted = "frag" if token.kind == "frag_close" else "tag"
        idx = len(stack) - 1
        while idx >= 0 and stack[idx].kind in MARKUP:
            frame = stack[idx]
            if frame.kind == wanted and (wanted == "frag" or frame.name == token.name):
                break
            idx -= 1
        else:
            result.unmatched.append(token)
            return

        skipped = stack[idx + 1:]
        if skipped:
            closers = "".join(closer_for(f) for f in reversed(skipped))
            result.implicit_closers.append((token.start, closers))
            for frame in skipped:
                result.element_spans.append((frame.start, token.start))

        frame = stack[idx]
        result.element_spans.append((frame.start, token.end))
        result.elements[frame.start] = token.end
        del stack[idx:]
