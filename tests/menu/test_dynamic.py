import pytest

from inlinemenu.exceptions import ConstructionError
from inlinemenu.menu import DynamicMenuLifecycle, MenuNode, ValueStack


def test_value_stack_replaces_existing_slot():
    values = ValueStack()

    assert values.push('a', 1) == 1
    assert values.push('b', 2) == 2
    assert values.push('a', 3) == 2

    assert values.keys() == ['a', 'b']
    assert values[0] == 3
    assert values['b'] == 2
    assert list(values) == [3, 2]
    assert 'a' in values
    assert values.get('missing', 'default') == 'default'


async def test_dynamic_submenu_built_from_values():
    main = MenuNode('Main', 'main')
    main.values.push('color', 'red')
    child = main.add_dynamic_submenu('Open', lambda values: {'text': f'Color: {values["color"]}'}, button_id='open')

    rendered = await child.render()

    assert child.id == 'main.open'
    assert child.path == '/main/main.open/'
    assert rendered.text == 'Color: red'


async def test_async_builder():
    async def builder(values):
        return {'text': 'Async', 'buttons': {'x': 'X'}}

    main = MenuNode('Main', 'main')
    child = main.add_dynamic_submenu('Open', builder, id='dyn')

    rendered = await child.render()

    assert rendered.text == 'Async'
    assert list(child.buttons) == ['x']


async def test_builder_returning_junk_raises():
    main = MenuNode('Main', 'main')
    child = main.add_dynamic_submenu('Open', lambda values: 42, id='dyn')

    with pytest.raises(ConstructionError):
        await child.render()


async def test_rebuild_keeps_id_path_and_values():
    calls = []

    def builder(values):
        calls.append(values.get('pick'))
        return {'text': f'Built {len(calls)}'}

    main = MenuNode('Main', 'main')
    child = main.add_dynamic_submenu('Open', builder, id='dyn', button_id='open')
    await child.render()
    main.values.push('pick', 7)

    replacement = DynamicMenuLifecycle.rebuild(child)
    rendered = await replacement.render()

    assert replacement is not child
    assert replacement.id == child.id
    assert replacement.path == '/main/dyn/'
    assert replacement.parent is main
    assert main.get_child_by_path('/main/dyn/') is replacement
    assert rendered.text == 'Built 2'
    assert calls == [None, 7]
    assert replacement.owner_button_id == 'open'


def test_rebuild_static_menu_is_rejected():
    main = MenuNode('Main', 'main')
    child = main.add_submenu('Static', id='static')

    with pytest.raises(ConstructionError):
        DynamicMenuLifecycle.rebuild(child)


def test_attach_to_button_replaces_previous_instance():
    main = MenuNode('Main', 'main')
    button = main.add_button('Pick', 'pick')

    first = DynamicMenuLifecycle.attach_to_button(button, {'text': 'First'})
    path = first.path
    second = DynamicMenuLifecycle.attach_to_button(button, {'text': 'Second'})

    assert first.id == second.id == 'main.pick'
    assert second.path == path == '/main/main.pick/'
    assert first.parent is None
    assert first not in main.registry
    assert button.dynamic_menu is second
    assert [child.id for child in main.children] == ['main.pick']


def test_attached_menu_is_excluded_from_layout():
    main = MenuNode('Main', 'main')
    button = main.add_button('Pick', 'pick')
    DynamicMenuLifecycle.attach_to_button(button, {'text': 'Ephemeral'})

    layout = main.to_layout()

    assert list(layout.buttons) == ['pick']
    assert layout.buttons['pick'].navigate is None


async def test_materialize_builds_content_in_place():
    main = MenuNode('Main', 'main')
    main.values.push('name', 'Bob')
    child = main.add_dynamic_submenu(
        'Open',
        lambda values: {'text': f'Hi {values["name"]}', 'buttons': {'ok': 'OK'}},
        id='dyn',
    )

    result = await DynamicMenuLifecycle.materialize(child)

    assert result is child
    assert child.text == 'Hi Bob'
    assert list(child.buttons) == ['ok']


def test_attach_marks_button_slot_when_button_does_not_navigate_there():
    main = MenuNode('Main', 'main')
    button = main.add_button('Pick', 'pick')
    node = MenuNode('Picked', 'picked')

    DynamicMenuLifecycle.attach(node, main, button)

    assert node.parent is main
    assert node.path == '/main/picked/'
    assert node.owner_button_id == 'pick'
    assert button.dynamic_menu_id == 'picked'


def test_attach_leaves_static_navigation_alone():
    main = MenuNode('Main', 'main')
    button = main.add_button('Go', 'go').set_navigate('picked')
    node = MenuNode('Picked', 'picked')

    DynamicMenuLifecycle.attach(node, main, button)

    assert button.navigate_to == 'picked'
    assert button.dynamic_menu_id is None
