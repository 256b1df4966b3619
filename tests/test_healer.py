import pytest

from jsxcuro.healing.classifier import CompletenessClassifier
from jsxcuro.healing.lexer import JsxLexer
from jsxcuro.healing.pipeline import HealingPipeline

# (truncated or malformed input, expected repair)
REPAIR_CASES = [
    # dangling tags
    ('<div className="p-4', '<div className="p-4"></div>'),
    ('const x = <img src="a.png">;', 'const x = <img src="a.png" />;'),
    ("<div><span>text</div>", "<div><span>text</span></div>"),
    ("<div>a</span></div>", "<div>a</div>"),
    # attribute expressions
    ("<button onClick={() => setOpen(!open)", "<button onClick={() => setOpen(!open)}></button>"),
    ("<div onClick={() =>", "<div onClick={() => null}></div>"),
    # dynamic expressions
    ("<div>{open ? <A />", "<div>{open ? <A /> : null}</div>"),
    ("<div>{a &&", "<div>{a && null}</div>"),
    # attribute values
    ("<div className={}>x</div>", '<div className="">x</div>'),
    ('<div style={color: "red"}>x</div>', '<div style={{color: "red"}}>x</div>'),
    ('<div style={{color: "red", size: }}>x</div>', '<div style={{color: "red"}}>x</div>'),
    ('<div className={cn("a", "b",)}>x</div>', '<div className={cn("a", "b")}>x</div>'),
    # fragments
    ("<>\n  <A />\n</>\n</>", "<>\n  <A />\n</>\n"),
    # returns and function bodies
    ("function Card() {\n  return <div>Hi</div>;\n}", "function Card() {\n  return (<div>Hi</div>);\n}"),
    ("function Empty() {\n  const x = 1;\n}", "function Empty() {\n  const x = 1;\n  return null;\n}"),
    ("function Hero({ title }) {", "function Hero({ title }) {\n  return null;\n}"),
    ("function Hero() {\n  return (\n    <div>\n      <h1>Hi",
     "function Hero() {\n  return (\n    <div>\n      <h1>Hi</h1></div>);\n}"),
    ("function Card() {\n  return (\n    <div>Hi", "function Card() {\n  return (\n    <div>Hi</div>);\n}"),
]


@pytest.mark.parametrize("broken, expected", REPAIR_CASES)
def test_repairs(pipeline, broken, expected):
    assert pipeline.repair(broken) == expected


def test_dangling_object_property_gets_an_operand(pipeline):
    repaired = pipeline.repair('const styles = {\n  color: "red",\n  size:')
    assert repaired.endswith("size: null}")


def test_unterminated_string_is_sealed(pipeline):
    repaired = pipeline.repair('const label = "Hello')
    assert repaired == 'const label = "Hello"'


def test_attribute_split_across_lines_is_joined(pipeline):
    repaired = pipeline.repair('<div\n  className="a"')
    assert repaired == '<div className="a"></div>'


def test_well_formed_multiline_attributes_are_left_alone(pipeline):
    text = '<div\n  className="a"\n  id="b">x</div>'
    assert pipeline.repair(text) == text


def test_trailing_lone_angle_bracket_is_dropped(pipeline):
    assert pipeline.repair("<div>Hi</div>\n<") == "<div>Hi</div>\n"


def test_closers_stay_out_of_a_trailing_comment(pipeline):
    repaired = pipeline.repair("const config = {\n  a: 1, // first")
    assert repaired.endswith("// first\n}")


def test_object_literal_is_closed_before_return(pipeline):
    broken = "function Stats() {\n  const data = {\n    name: \"test\"\n  return (<div>{data.name}</div>);\n}\n"
    repaired = pipeline.repair(broken)

    assert repaired == (
        "function Stats() {\n  const data = {\n    name: \"test\"\n  };\n"
        "  return (<div>{data.name}</div>);\n}\n"
    )
    assert CompletenessClassifier().classify_final(repaired).parse_ok is True


def test_pipeline_records_applied_fixers(pipeline):
    context = pipeline.run('<div className="p-4', "Box")

    assert context.artifact_name == "Box"
    assert "dangling_tag" in context.applied_fixers
    assert "tag_stack" in context.applied_fixers
    assert context.converged is True
    assert context.changed is True
    assert context.diagnostics == []


def test_cleanup_strips_bom_crlf_fences_and_markers(pipeline):
    raw = "\ufeff```jsx\r\n/// START Card\r\nconst a = 1;\r\n/// END Card\r\n```\r\n"
    context = pipeline.run(raw)
    assert context.cleaned_text == "const a = 1;\n"
    assert context.repaired_text == "const a = 1;\n"


# --- Lexer recovery information ---

def test_lexer_reports_open_stack_and_unmatched():
    lexed = JsxLexer().lex("<div><span>x</b>")

    assert [f.name for f in lexed.stack] == ["div", "span"]
    assert [t.name for t in lexed.unmatched] == ["b"]
    assert lexed.balanced is False


def test_lexer_treats_comparison_as_code():
    lexed = JsxLexer().lex("const ok = a < b && c > d;")
    assert lexed.balanced
    assert not any(t.kind in ("open", "self") for t in lexed.tokens)


def test_void_elements_are_not_stacked():
    lexed = JsxLexer().lex("<div><br><img src='a'></div>")
    assert lexed.balanced


def test_code_only_blanks_literals_and_markup():
    text = 'const a = "}"; const b = <div>{x}</div>;'
    code = JsxLexer().code_only(text)

    assert len(code) == len(text)
    assert '"' not in code
    assert "<div>" not in code
    assert code.startswith("const a =")
