from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import BaseModel

from hb_render import Renderer, render_template
from hb_sdk import PartialNotFoundError, RenderConfig, RenderDepthError, SafeString, Template
from hb_sdk.build import block, mustache, partial, template


class Author(BaseModel):
    name: str
    books: list[str]


def test_sequence_sections_expose_position_data() -> None:
    tree = template(
        block(
            "people",
            body=[mustache("@index"), ":", mustache("name"), block("@first", body=["(first)"]), block("@last", body=["(last)"]), " "],
        )
    )
    context = {"people": [{"name": "Alan"}, {"name": "Yehuda"}, {"name": "Ada"}]}
    assert render_template(tree, context) == "0:Alan(first) 1:Yehuda 2:Ada(last) "


def test_empty_sequence_renders_inverse() -> None:
    tree = template(block("people", body=["x"], inverse=["none"]))
    assert render_template(tree, {"people": []}) == "none"


def test_mapping_section_substitutes_context() -> None:
    tree = template(block("person", body=[mustache("name"), "/", mustache("../title")]))
    assert render_template(tree, {"title": "Dr", "person": {"name": "Who"}}) == "Who/Dr"


def test_true_section_keeps_context() -> None:
    tree = template(block("ok", body=[mustache("name")]))
    assert render_template(tree, {"ok": True, "name": "kept"}) == "kept"


@pytest.mark.parametrize("value", [False, None, 0, "", [], {}])
def test_falsy_sections_render_inverse(value) -> None:
    tree = template(block("value", body=["yes"], inverse=["no"]))
    assert render_template(tree, {"value": value}) == "no"


def test_missing_values_render_empty() -> None:
    tree = template("[", mustache("nope"), mustache("a.b.c"), mustache("../up"), block("gone", body=["x"]), "]")
    assert render_template(tree, {"a": {}}) == "[]"


def test_escaping_rules() -> None:
    context = {"html": "<b>&</b>", "safe": SafeString("<i>ok</i>")}
    tree = template(mustache("html"), mustache("html", escaped=False), mustache("safe"))
    assert render_template(tree, context) == "&lt;b&gt;&amp;&lt;/b&gt;<b>&</b><i>ok</i>"
    assert render_template(template(mustache("html")), context, config=RenderConfig(escape=False)) == "<b>&</b>"


def test_partials_render_with_their_own_context() -> None:
    partials = {
        "user": template(mustache("greeting"), " ", mustache("name")),
        "plain": {"body": [{"type": "text", "text": "plain:"}, {"type": "mustache", "name": {"type": "path", "segments": ["title"]}}]},
    }
    tree = template(partial("user", "person", greeting="title"), "|", partial("plain"))
    context = {"title": "Hello", "person": {"name": "Ann"}}
    assert render_template(tree, context, partials=partials) == "Hello Ann|plain:Hello"


def test_missing_partial_raises() -> None:
    with pytest.raises(PartialNotFoundError) as excinfo:
        render_template(template(partial("absent")))
    assert excinfo.value.name == "absent"


def test_depth_limit() -> None:
    tree = template(partial("loop"))
    with pytest.raises(RenderDepthError):
        render_template(tree, partials={"loop": tree}, config=RenderConfig(max_depth=16))

    nested = template(block("a", body=[block("a", body=["deep"])]))
    assert render_template(nested, {"a": True}, config=RenderConfig(max_depth=3)) == "deep"
    with pytest.raises(RenderDepthError):
        render_template(nested, {"a": True}, config=RenderConfig(max_depth=2))


def test_template_given_as_mapping() -> None:
    raw = {"body": [{"type": "text", "text": "Hi "}, {"type": "mustache", "name": {"type": "path", "segments": ["name"]}}]}
    assert render_template(raw, {"name": "you"}) == "Hi you"
    assert isinstance(Template.model_validate(raw), Template)


def test_pydantic_models_as_context() -> None:
    tree = template(mustache("name"), ": ", block("books", body=[mustache("this"), ";"]), mustache("books.length"))
    assert render_template(tree, Author(name="Le Guin", books=["Earthsea", "Lathe"])) == "Le Guin: Earthsea;Lathe;2"


def test_concurrent_renders_share_a_renderer(builtin_registry) -> None:
    renderer = Renderer(builtin_registry)
    tree = template(block("each", "items", body=[mustache("this"), ","]))

    def run(n: int) -> str:
        return renderer.render(tree, {"items": list(range(n))})

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(run, range(40)))
    assert results == ["".join(f"{i}," for i in range(n)) for n in range(40)]


def _nested_blocks(name: str, levels: int):
    node = block(name, body=["core"])
    for _ in range(levels - 1):
        node = block(name, body=[node])
    return template(node)


def test_default_depth_limit_is_reachable() -> None:
    assert render_template(_nested_blocks("a", 60), {"a": True}) == "core"
    with pytest.raises(RenderDepthError):
        render_template(_nested_blocks("a", 250), {"a": True})


def test_default_depth_limit_applies_to_block_helpers(registry) -> None:
    registry.register("form", lambda options: options.render_body(), options=True)
    assert render_template(_nested_blocks("form", 50), helpers=registry) == "core"
    with pytest.raises(RenderDepthError):
        render_template(_nested_blocks("form", 150), helpers=registry)


def test_stack_exhaustion_reports_depth_error(registry) -> None:
    registry.register("form", lambda options: options.render_body(), options=True)
    config = RenderConfig(max_depth=100_000)
    with pytest.raises(RenderDepthError):
        render_template(_nested_blocks("a", 3000), {"a": True}, config=config)
    with pytest.raises(RenderDepthError):
        render_template(_nested_blocks("form", 3000), helpers=registry, config=config)


def test_renderer_copies_plain_helper_mappings(registry) -> None:
    helpers = {"greet": registry.register("greet", lambda: "hi")}
    renderer = Renderer(helpers)
    helpers["greet"] = registry.register("greet", lambda: "changed", replace=True)
    assert renderer.render(template(mustache("greet"))) == "hi"
