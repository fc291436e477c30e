"""Tests for command resolution along the scope chain."""

import gc

from player.engine.actions import Scope


class TestExplicitCommand:
    def test_command_dispatches_exec_once(self, resolver, recorder, root):
        child = root.new(functions={"nav::next": {"action": {"type": "set"}}})
        resolver.resolve(child, "nav::next")

        assert recorder.of_type("exec") == [{"type": "exec", "command": "nav::next"}]
        assert recorder.of_type("set") == []

    def test_command_runs_against_root_scope(self, resolver, recorder, root):
        child = root.new()
        resolver.resolve(child, "nav::next")
        assert recorder.calls[0][1] == "app"

    def test_command_never_walks_to_default(self, resolver, recorder, root):
        resolver.resolve(root.new(), "a::b")
        assert len(recorder.calls) == 1


class TestDispatchSyntax:
    def test_extracts_event_name(self, resolver, recorder, root):
        child = root.new(scope_id="widget")
        resolver.resolve(child, "dispatch('submitted')")

        assert recorder.calls == [("dispatch", "widget", {"type": "dispatch", "name": "submitted"})]

    def test_double_quotes(self, resolver, recorder, root):
        resolver.resolve(root, 'dispatch("hint")')
        assert recorder.of_type("dispatch") == [{"type": "dispatch", "name": "hint"}]

    def test_multiple_arguments_rejected(self, resolver, recorder, root):
        resolver.resolve(root, "dispatch('a', 'b')")
        assert recorder.calls == []

    def test_nested_call_rejected(self, resolver, recorder, root):
        resolver.resolve(root, "dispatch(dispatch('a'))")
        assert recorder.calls == []

    def test_plain_name_containing_dispatch_is_a_function(self, resolver, recorder, root):
        root.functions["dispatchAll"] = {"action": {"type": "set", "property": "x"}}
        resolver.resolve(root, "dispatchAll")
        assert recorder.of_type("set") == [{"type": "set", "property": "x"}]


class TestFunctionLookup:
    def test_local_function(self, resolver, recorder, root):
        scope = root.new(functions={"foo": {"action": {"type": "exec", "command": "X"}}})
        resolver.resolve(scope, "foo")

        assert recorder.of_type("exec") == [{"type": "exec", "command": "X"}]

    def test_function_found_in_ancestor_runs_in_ancestor(self, resolver, recorder, root):
        middle = root.new(scope_id="middle", functions={"foo": {"action": {"type": "set"}}})
        leaf = middle.new(scope_id="leaf")
        resolver.resolve(leaf, "foo")

        assert recorder.calls == [("set", "middle", {"type": "set"})]

    def test_nearest_definition_wins(self, resolver, recorder, root):
        root.functions["foo"] = {"action": {"type": "exec", "command": "root"}}
        child = root.new(functions={"foo": {"action": {"type": "exec", "command": "child"}}})
        resolver.resolve(child.new(), "foo")

        assert recorder.of_type("exec") == [{"type": "exec", "command": "child"}]

    def test_falsy_payload_is_skipped(self, resolver, recorder, root):
        root.functions["foo"] = {"action": {"type": "set"}}
        child = root.new(functions={"foo": None})
        resolver.resolve(child, "foo")
        assert recorder.of_type("set") == [{"type": "set"}]

    def test_sequence_runs_in_order(self, resolver, recorder, root):
        root.functions["many"] = {
            "action": [
                {"type": "set", "property": "a"},
                {"type": "exec", "command": "b::c"},
                {"type": "set", "property": "d"},
            ]
        }
        resolver.resolve(root, "many")
        assert [t for t, _, _ in recorder.calls] == ["set", "exec", "set"]


class TestDefaultCommand:
    def test_unresolved_name_fires_default_once(self, resolver, recorder, root):
        leaf = root.new().new()
        resolver.resolve(leaf, "bar")

        assert recorder.calls == [("exec", "app", {"type": "exec", "command": "slide::default"})]

    def test_default_name_is_not_recursive(self, resolver, recorder, root):
        resolver.resolve(root.new(), "default")
        assert recorder.calls == []

    def test_default_function_may_still_be_defined(self, resolver, recorder, root):
        root.functions["default"] = {"action": {"type": "set"}}
        resolver.resolve(root.new(), "default")
        assert recorder.of_type("set") == [{"type": "set"}]

    def test_empty_name_is_noop(self, resolver, recorder, root):
        resolver.resolve(root, "")
        resolver.resolve(root, None)
        assert recorder.calls == []


class TestTornDownScopes:
    def test_destroyed_scope_falls_through_to_default(self, resolver, recorder, root):
        scope = root.new(functions={"foo": {"action": {"type": "set"}}})
        scope.destroy()
        resolver.resolve(scope, "foo")

        assert recorder.of_type("set") == []
        assert recorder.of_type("exec") == [{"type": "exec", "command": "slide::default"}]

    def test_destroyed_parent_cuts_the_chain(self, resolver, recorder, root):
        root.functions["foo"] = {"action": {"type": "set"}}
        middle = root.new()
        leaf = middle.new()
        middle.destroy()
        resolver.resolve(leaf, "foo")

        assert recorder.of_type("set") == []
        assert len(recorder.of_type("exec")) == 1

    def test_collected_parent_counts_as_absent(self, resolver, recorder, root):
        orphan_parent = Scope(functions={"foo": {"action": {"type": "set"}}})
        leaf = orphan_parent.new()
        del orphan_parent
        gc.collect()

        resolver.resolve(leaf, "foo")
        assert recorder.of_type("set") == []
        assert len(recorder.of_type("exec")) == 1

    def test_scope_outside_the_tree_reaches_default(self, resolver, recorder):
        detached = Scope().new()
        resolver.resolve(detached, "missing")
        assert len(recorder.of_type("exec")) == 1
