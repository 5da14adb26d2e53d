from rapidworker.context import UNSET, Context


def test_environment_variables_win_on_collision():
    context = Context.create({"x": 1, "only_test": "t"}, {"x": 2, "only_env": "e"})
    assert context.get("x") == 2
    assert context.get("only_test") == "t"
    assert context.get("only_env") == "e"


def test_missing_key_returns_unset():
    context = Context.create({}, {})
    assert context.get("nope") is UNSET
    assert "nope" not in context


def test_set_is_visible_to_later_reads():
    context = Context.create({"a": 1}, None)
    context.set("a", 10)
    context.set("b", {"nested": [1, 2]})
    assert context.get("a") == 10
    assert context.get("b") == {"nested": [1, 2]}
    assert len(context) == 2


def test_create_does_not_alias_sources():
    test_vars = {"a": 1}
    context = Context.create(test_vars, {})
    context.set("a", 2)
    assert test_vars == {"a": 1}
