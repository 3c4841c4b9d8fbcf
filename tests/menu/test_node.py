import sys
from pathlib import Path


ROOT_DIR = Path(__file__).resolve().parents[2]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import pytest

from inlinemenu.exceptions import ConstructionError, SelfNavigationError
from inlinemenu.menu import Change, MenuNode


def _tree() -> MenuNode:
    main = MenuNode('Main menu', 'main')
    main.add_submenu('First', id='a', button_id='goA')
    main.add_submenu('Second', id='b', button_id='goB')
    main.add_submenu('Third', id='c', button_id='goC')
    return main


def test_child_paths_and_indices():
    main = _tree()
    a = main.get_child_by_path('/main/a/')

    assert main.path == '/main/'
    assert a.path == '/main/a/'
    assert [node.index for node in main.registry.by_index] == [0, 1, 2, 3]
    assert main.last_menu_index == 3
    assert a.parent is main
    assert a.root is main
    assert a.values is main.values


def test_submenu_button_navigates_to_child():
    main = _tree()

    button = main.buttons['goA']
    assert button.navigate_to == 'a'
    assert button.path == '/main/goA'
    assert main.get_button_by_path('/main/goA') is button


def test_duplicate_menu_id_is_rejected():
    main = _tree()

    with pytest.raises(ConstructionError):
        MenuNode('Again', 'a', parent=main)


def test_duplicate_button_id_is_rejected():
    main = MenuNode('Main', 'main')
    main.add_button('One', 'x')

    with pytest.raises(ConstructionError):
        main.add_button('Two', 'x')


@pytest.mark.parametrize('menu_id', ['', '   ', 'a/b', '.hidden'])
def test_invalid_ids_are_rejected(menu_id):
    with pytest.raises(ConstructionError):
        MenuNode('Main', menu_id)


def test_empty_text_is_rejected():
    with pytest.raises(ConstructionError):
        MenuNode('   ', 'main')

    main = MenuNode('Main', 'main')
    with pytest.raises(ConstructionError):
        main.add_button('')


def test_self_navigation_button_is_rejected():
    main = _tree()
    a = main.get_child_by_path('/main/a/')

    with pytest.raises(SelfNavigationError):
        a.add_navigation_button('Me', 'a', 'me')
    with pytest.raises(SelfNavigationError):
        a.add_navigation_button('Me', './', 'me')

    assert 'me' not in a.buttons


def test_fluent_builder_returns_to_menu():
    main = MenuNode('Main', 'main')

    result = main.add_button('Refresh', 'refresh').on_press(lambda press: None).set_full(True).end()

    assert result is main
    assert main.buttons['refresh'].full is True


def test_setting_same_value_is_a_no_op():
    main = MenuNode('Main', 'main')
    button = main.add_button('Hello', 'hello')
    main.clear_changes()

    button.set_text('Hello')
    button.set_hidden(False)
    button.set_full(False)
    main.text = 'Main'

    assert not button.is_changed
    assert not main.is_changed


def test_button_change_marks_menu_layout_not_text():
    main = MenuNode('Main', 'main')
    button = main.add_button('Hello', 'hello')
    main.clear_changes()

    button.set_text('Bye')

    assert button.has_change(Change.TEXT)
    assert main.has_change(Change.LAYOUT)
    assert not main.has_change(Change.TEXT)


def test_computed_state_makes_tree_impure():
    main = _tree()
    a = main.get_child_by_path('/main/a/')

    a.add_button('Maybe').set_hidden(lambda: True)

    assert not a.is_pure
    assert not main.is_pure
    assert main.get_child_by_path('/main/b/').is_pure


def test_detach_renumbers_indices():
    main = _tree()
    b = main.get_child_by_path('/main/b/')
    c = main.get_child_by_path('/main/c/')

    b.detach()

    assert c.index == 2
    assert main.registry.get_by_index(2) is c
    assert b not in main.registry
    assert b.parent is None
    assert 'b' not in [child.id for child in main.children]
    assert b.registry is not main.registry
    assert b.path == '/b/'


def test_detach_root_clears_values():
    main = _tree()
    main.values.push('goA', 1)

    main.detach()

    assert len(main.values) == 0
    assert len(main.registry) == 0


def test_attach_shares_registry():
    main = _tree()
    extra = MenuNode('Extra', 'extra')
    extra.add_submenu('Deep', id='deep')

    extra.attach(main)

    assert extra.registry is main.registry
    assert main.get_child_by_path('/main/extra/deep/') is not None
    assert main.registry.get_by_index(5).id == 'deep'


def test_set_extra_drops_reply_markup():
    main = MenuNode('Main', 'main').set_extra({'parse_mode': 'HTML', 'reply_markup': object()})

    assert main.extra == {'parse_mode': 'HTML'}


def test_end_menu_returns_parent_or_self():
    main = _tree()
    a = main.get_child_by_path('/main/a/')

    assert a.end_menu() is main
    assert main.end_menu() is main


def test_get_child_with_index():
    main = _tree()

    assert main.get_child_with_index(0) is main
    assert main.get_child_with_index(2).id == 'b'
    assert main.get_child_with_index(4) is None
    assert main.get_child_with_index(-1) is None


def test_change_flag_queries():
    main = MenuNode('Main', 'main')
    main.clear_changes()
    main.mark_change(Change.TEXT | Change.LAYOUT)

    assert main.has_changes(Change.TEXT, Change.LAYOUT)
    assert not main.has_changes(Change.TEXT, Change.DRAW)
    assert main.has_any_change(Change.DRAW, Change.LAYOUT)
    assert not main.has_any_change(Change.DRAW, Change.VISIBILITY)
