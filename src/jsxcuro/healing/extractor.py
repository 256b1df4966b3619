#!/usr/bin/env python3
"""
JSXCURO EXTRACTOR - The Cartographer
------------------------------------
Pulls named component declarations out of artifact text:

    function Hero() { ... }              export default function Hero() { ... }
    const Hero = () => { ... }           const Hero = ({ title }) => ( ... )
    const Hero = () => <section>...</section>

both closed and still streaming. When a streaming buffer holds nothing but
bare markup between boundary markers, a minimal declaration is synthesized
around it so the preview always has something to mount.

Author: JsxCuro Team
Date: 2026-01-16
"""

import re
import logging
from typing import Dict, List, Optional, Tuple

from jsxcuro.core.models import FunctionDefinition
from jsxcuro.healing.classifier import CompletenessClassifier
from jsxcuro.healing.pipeline import HealingPipeline
from jsxcuro.healing.scanner import MarkerScanner

logger = logging.getLogger("jsxcuro.extractor")

# Arrow component whose body is markup without a wrapping paren
ARROW_TO_MARKUP = re.compile(
    r"(?:export\s+(?:default\s+)?)?(?:const|let|var)\s+(?P<name>[A-Z][\w$]*)\s*=\s*"
    r"(?:async\s*)?(?:\([^()]*\)|[\w$]+)\s*=>\s*(?=<)"
)


def synthesize_declaration(name: str, markup: str) -> str:
    """Wraps bare markup as `function Name() { return (<>...</>); }`."""
    lines = markup.strip("\n").split("\n")
    body = "\n".join(("      " + line.strip()) if line.strip() else "" for line in lines)
    return f"function {name}() {{\n  return (\n    <>\n{body}\n    </>\n  );\n}}"


class FunctionExtractor:

    def __init__(self, pipeline: Optional[HealingPipeline] = None,
                 classifier: Optional[CompletenessClassifier] = None,
                 scanner: Optional[MarkerScanner] = None):
        self.pipeline = pipeline or HealingPipeline()
        self.lexer = self.pipeline.lexer
        self.classifier = classifier or CompletenessClassifier(self.lexer)
        self.scanner = scanner or self.pipeline.scanner

    def extract(self, text: str, streaming: bool = False) -> Dict[str, FunctionDefinition]:
        """
        Returns name -> FunctionDefinition, first declaration per name wins.
        In streaming mode each content is a repaired copy judged leniently;
        otherwise the declaration is taken as-is and classified strictly.
        """
        found: Dict[str, FunctionDefinition] = {}
        for name, start, end, closed in self.locate(text):
            if name in found:
                continue
            content = text[start:end]
            if streaming:
                content = self.pipeline.repair(content)
                complete = closed and self.classifier.is_streaming_complete(content)
            else:
                complete = closed and self.classifier.classify_final(content).complete
            found[name] = FunctionDefinition(name, content, complete, is_streaming=streaming)

        if not found and streaming:
            found = self._synthesize_from_markers(text)
        return found

    def locate(self, text: str) -> List[Tuple[str, int, int, bool]]:
        """(name, start, end, closed) for every declaration, in text order."""
        lexed = self.lexer.lex(text)
        located = []
        for decl in lexed.declarations:
            closed = decl.body_end is not None
            located.append((decl.name, decl.start, decl.body_end if closed else len(text), closed))

        code = self.lexer.code_only(text, lexed)
        for match in ARROW_TO_MARKUP.finditer(text):
            if code[match.start()] != text[match.start()]:
                continue
            token = lexed.token_at(match.end())
            if token is None:
                continue
            if token.kind == "self" and token.closed:
                end = token.end
            else:
                end = lexed.elements.get(token.start)
            located.append((match.group("name"), match.start(),
                            end if end is not None else len(text), end is not None))

        located.sort(key=lambda item: item[1])
        return located

    def _synthesize_from_markers(self, text: str) -> Dict[str, FunctionDefinition]:
        markers = self.scanner.scan(text, final=True)
        found: Dict[str, FunctionDefinition] = {}
        for idx, marker in enumerate(markers):
            if marker.kind != "START" or marker.artifact_name in found:
                continue
            end = len(text)
            for later in markers[idx + 1:]:
                if later.kind == "END" and later.artifact_name == marker.artifact_name:
                    end = later.span[0]
                    break
            markup = text[marker.span[1]:end]
            if "<" not in markup:
                continue

            logger.debug(f"Synthesizing a declaration around bare markup for {marker.artifact_name}")
            content = self.pipeline.repair(synthesize_declaration(marker.artifact_name, markup))
            found[marker.artifact_name] = FunctionDefinition(
                marker.artifact_name, content,
                complete=self.classifier.is_streaming_complete(content),
                is_streaming=True, synthesized=True,
            )
        return found
