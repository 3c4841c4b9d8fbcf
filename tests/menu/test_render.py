from inlinemenu.menu import MenuNode, RenderAction, RenderedButton, decide_render, diff_keyboards
from inlinemenu.menu.render import KeyboardChangeKind, RenderedMenu


def _menu(text: str, *rows: tuple[RenderedButton, ...]) -> RenderedMenu:
    return RenderedMenu(id='main', path='/main/', index=0, text=text, rows=tuple(rows))


async def test_full_buttons_get_their_own_row():
    main = MenuNode('Main', 'main')
    main.add_button('A', 'a')
    main.add_button('B', 'b')
    main.add_button('C', 'c').set_full(True)
    main.add_button('D', 'd')

    rendered = await main.render()

    assert [[button.id for button in row] for row in rendered.rows] == [['a', 'b'], ['c'], ['d']]
    assert rendered.find('a').callback_data == '/main/a'


async def test_pure_menu_render_is_cached():
    main = MenuNode('Main', 'main')
    main.add_button('A', 'a')

    first = await main.render()
    second = await main.render()

    assert first is second
    assert not main.is_changed


async def test_soft_render_keeps_change_flags():
    main = MenuNode('Main', 'main')
    main.add_button('A', 'a')

    await main.render(soft=True)

    assert main.is_changed
    assert main.last_render is None


async def test_computed_state_is_evaluated_each_render():
    visible = {'value': True}
    main = MenuNode('Main', 'main')
    main.add_button('A', 'a').set_hidden(lambda: not visible['value'])

    first = await main.render()
    visible['value'] = False
    second = await main.render()

    assert first.find('a').hidden is False
    assert second.find('a').hidden is True


async def test_async_computed_state():
    async def is_full():
        return True

    main = MenuNode('Main', 'main')
    main.add_button('A', 'a').set_full(is_full)

    rendered = await main.render()

    assert rendered.find('a').full is True


async def test_url_wins_over_action():
    main = MenuNode('Main', 'main')
    main.add_button('Site', 'site').set_url('https://example.com').on_press(lambda press: None)

    rendered = await main.render()

    button = rendered.find('site')
    assert button.url == 'https://example.com'
    assert button.callback_data is None


def test_diff_detects_text_change_only():
    old = ((RenderedButton('a', 'A'), RenderedButton('b', 'B')),)
    new = ((RenderedButton('a', 'A'), RenderedButton('b', 'Bee')),)

    changes = diff_keyboards(old, new)

    assert len(changes) == 1
    assert changes[0].kind is KeyboardChangeKind.CHANGED
    assert changes[0].button_id == 'b'
    assert changes[0].field == 'text'


def test_diff_detects_moves_additions_and_removals():
    old = ((RenderedButton('a', 'A'), RenderedButton('b', 'B')),)
    new = ((RenderedButton('b', 'B'),), (RenderedButton('c', 'C'),))

    kinds = {(change.kind, change.button_id) for change in diff_keyboards(old, new)}

    assert kinds == {
        (KeyboardChangeKind.REMOVED, 'a'),
        (KeyboardChangeKind.MOVED, 'b'),
        (KeyboardChangeKind.ADDED, 'c'),
    }


def test_decide_render():
    row = (RenderedButton('a', 'A'),)
    previous = _menu('Main', row)

    assert decide_render(None, previous) is RenderAction.REPLACE
    assert decide_render(previous, previous, needs_draw=True) is RenderAction.REPLACE
    assert decide_render(previous, previous, is_active=False) is RenderAction.REPLACE
    assert decide_render(previous, _menu('Other', row)) is RenderAction.REPLACE
    assert decide_render(previous, _menu('Main', (RenderedButton('a', 'B'),))) is RenderAction.PATCH_KEYBOARD
    assert decide_render(previous, _menu('Main', row)) is RenderAction.NONE
