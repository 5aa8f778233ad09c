import pytest

from bcplkit.labels import Fixup, LabelError, LabelManager, ScopeType


@pytest.fixture
def manager():
    return LabelManager()


def test_generated_labels_use_prefix_and_are_unique(manager):
    labels = [manager.generate_label("L") for _ in range(5)]
    assert len(set(labels)) == 5
    assert all(label.startswith("L_") for label in labels)


def test_function_scope_return_label(manager):
    manager.push_scope(ScopeType.FUNCTION)
    assert manager.current_return_label() == "return_0"
    assert manager.current_end_label() == manager.current_return_label()


def test_valof_scope_labels(manager):
    manager.push_scope(ScopeType.VALOF)
    assert manager.current_resultis_label().startswith("resultis_")
    assert manager.current_end_label().startswith("valof_end_")


def test_loop_and_switch_labels(manager):
    manager.push_scope(ScopeType.LOOP)
    manager.push_scope(ScopeType.SWITCHON)
    assert manager.current_repeat_label().startswith("repeat_")
    assert manager.current_endcase_label().startswith("endcase_")
    assert manager.current_end_label().startswith("switch_end_")
    manager.pop_scope()
    assert manager.current_end_label().startswith("loop_end_")


def test_nested_lookup_finds_innermost(manager):
    manager.push_scope(ScopeType.LOOP)
    outer = manager.current_repeat_label()
    manager.push_scope(ScopeType.LOOP)
    inner = manager.current_repeat_label()
    assert inner != outer
    manager.push_scope(ScopeType.COMPOUND)
    assert manager.current_repeat_label() == inner
    manager.pop_scope()
    manager.pop_scope()
    assert manager.current_repeat_label() == outer


def test_missing_context_errors(manager):
    with pytest.raises(LabelError):
        manager.current_resultis_label()
    with pytest.raises(LabelError):
        manager.current_repeat_label()
    with pytest.raises(LabelError):
        manager.current_endcase_label()
    with pytest.raises(LabelError):
        manager.current_end_label()
    with pytest.raises(LabelError):
        manager.current_return_label()


def test_pop_empty_raises(manager):
    with pytest.raises(LabelError):
        manager.pop_scope()


def test_push_pop_depth(manager):
    manager.push_scope(ScopeType.COMPOUND)
    manager.push_scope(ScopeType.VALOF)
    assert manager.depth == 2
    manager.pop_scope()
    manager.pop_scope()
    assert manager.depth == 0


def test_global_label_definition(manager):
    manager.define_label("start", 16)
    assert manager.label_position("start") == 16
    assert manager.label_address("start") == 16
    with pytest.raises(LabelError):
        manager.define_label("start", 32)


def test_local_label_conflicts_with_global(manager):
    manager.define_label("g", 4)
    manager.push_scope(ScopeType.FUNCTION)
    with pytest.raises(LabelError):
        manager.define_label("g", 8)


def test_local_label_duplicate_and_scope_exit(manager):
    manager.push_scope(ScopeType.FUNCTION)
    manager.define_label("loc", 40)
    with pytest.raises(LabelError):
        manager.define_label("loc", 44)
    manager.push_scope(ScopeType.COMPOUND)
    assert manager.label_position("loc") == 40
    manager.pop_scope()
    manager.pop_scope()
    assert manager.label_position("loc") is None


def test_unknown_label(manager):
    assert manager.label_position("nowhere") is None
    with pytest.raises(LabelError):
        manager.label_address("nowhere")


def test_fixups_are_taken_in_order_and_cleared(manager):
    manager.request_label_fixup("a", 0)
    manager.request_label_fixup("b", 4)
    assert manager.take_fixups() == [Fixup(0, "a"), Fixup(4, "b")]
    assert manager.take_fixups() == []