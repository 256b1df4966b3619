#!/usr/bin/env python3
"""
JSXCURO CLASSIFIER - The Triage Nurse
-------------------------------------
Decides whether component text is complete enough to be used.

Two modes:
  * streaming-lenient: cheap regex checks, safe to call on every progress
    poll while an artifact is still streaming. Never parses.
  * final: tag balance and structural balance from the lexer, then a real
    parse with tree-sitter. A tree that still has error nodes does not
    overturn the structural verdict; it is reported as a parse failure.

Author: JsxCuro Team
Date: 2026-01-16
"""

import re
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from jsxcuro.healing.lexer import JsxLexer
from jsxcuro.healing.parser import JsxParser

logger = logging.getLogger("jsxcuro.classifier")

NAMED_DECLARATION = re.compile(r"\bfunction\s+[A-Z][\w$]*|\b(?:const|let|var)\s+[A-Z][\w$]*\s*=")
RETURN_STATEMENT = re.compile(r"\breturn\b")
OPENING_TAG = re.compile(r"<[A-Za-z]")
# `const Badge = () => <span />` returns its markup without a return keyword
ARROW_TO_MARKUP = re.compile(
    r"\b(?:const|let|var)\s+[A-Z][\w$]*\s*=\s*(?:async\s*)?(?:\([^()]*\)|[\w$]+)\s*=>\s*<"
)


@dataclass
class Completeness:
    complete: bool
    mode: str                               # 'streaming' or 'final'
    reasons: List[str] = field(default_factory=list)
    parse_ok: Optional[bool] = None         # None when no parse was attempted
    parse_error: Optional[str] = None


class CompletenessClassifier:

    def __init__(self, lexer: Optional[JsxLexer] = None, parser: Optional[JsxParser] = None):
        self.lexer = lexer or JsxLexer()
        self.parser = parser or JsxParser()

    def is_streaming_complete(self, text: str) -> bool:
        """Declaration + return + at least one opening tag. No parsing."""
        return bool(
            NAMED_DECLARATION.search(text)
            and RETURN_STATEMENT.search(text)
            and OPENING_TAG.search(text)
        )

    def classify_streaming(self, text: str) -> Completeness:
        reasons = []
        if not NAMED_DECLARATION.search(text):
            reasons.append("no named declaration")
        if not RETURN_STATEMENT.search(text):
            reasons.append("no return statement")
        if not OPENING_TAG.search(text):
            reasons.append("no opening tag")
        return Completeness(complete=not reasons, mode="streaming", reasons=reasons)

    def classify_final(self, text: str) -> Completeness:
        lexed = self.lexer.lex(text)
        reasons = []

        # --- PHASE 1: TAG BALANCE ---
        opens = closes = selfs = 0
        for token in lexed.tokens:
            if token.kind in ("open", "frag_open") and not self.lexer.is_void(token.name):
                opens += 1
            elif token.kind == "self":
                opens += 1
                selfs += 1
            elif token.kind in ("close", "frag_close") and token.closed:
                closes += 1
        if opens > closes + selfs:
            reasons.append(f"{opens} opening tags but only {closes} closing tags")

        # --- PHASE 2: STRUCTURAL BALANCE ---
        if lexed.stack:
            kinds = ", ".join(f.name or f.kind for f in lexed.stack)
            reasons.append(f"unclosed constructs: {kinds}")
        if lexed.stray_closers or lexed.unmatched:
            reasons.append("unmatched closers")
        if any(not t.closed for t in lexed.tokens):
            reasons.append("unterminated literal or tag")

        code = self.lexer.code_only(text, lexed)
        expression_bodied = any(not d.block for d in lexed.declarations) or \
            bool(ARROW_TO_MARKUP.search(text))
        if not RETURN_STATEMENT.search(code) and not expression_bodied:
            reasons.append("no return statement")

        verdict = Completeness(complete=not reasons, mode="final", reasons=reasons)

        # --- PHASE 3: REAL PARSE (error-recovering) ---
        try:
            report = self.parser.check(text)
        except ValueError as e:
            logger.warning(f"Parser rejected input outright: {e}")
            verdict.parse_ok = False
            verdict.parse_error = str(e)
            return verdict

        verdict.parse_ok = report.ok
        if not report.ok:
            verdict.parse_error = report.first_error or f"{report.error_count} syntax errors"
        return verdict
