import pytest

from inlinemenu.services.dispatcher import ActionResult, Step, StepKind, StepSequence, is_result_like, is_sequence


@pytest.mark.parametrize(
    'value',
    [
        {'text': 'Hi'},
        {'hide': True},
        {'hidden': lambda: True},
        {'navigate': 2},
        {'navigate': '/main/'},
        {'closeWith': 'Bye'},
        {'update': True},
        {'value': None},
        ActionResult(close=True),
    ],
)
def test_result_like_values(value):
    assert is_result_like(value)


@pytest.mark.parametrize('value', [None, 42, 'text', {'navigate': True}, {'text': 5}, {'other': 1}, {'menu': None}])
def test_not_result_like_values(value):
    assert not is_result_like(value)


def test_coerce_maps_aliases():
    result = ActionResult.coerce({'hide': True, 'closeWith': '  Bye  ', 'text': ' Hi '})

    assert result.hidden is True
    assert result.close_with == 'Bye'
    assert result.text == 'Hi'
    assert not result.has_value


def test_explicit_none_value_counts_as_value():
    assert ActionResult.coerce({'value': None}).has_value


def test_malformed_result_is_ignored():
    assert ActionResult.coerce({'text': 'Hi', 'close': 'yes please'}) is None


class _Countdown(StepSequence):
    def __init__(self, start: int):
        super().__init__()
        self.current = start

    async def produce(self, sent):
        if self.current == 0:
            return self.finish('done')
        self.current -= 1
        return {'text': f'Left {self.current}'}


async def test_custom_sequence_transitions():
    sequence = _Countdown(2)

    steps = [await sequence.advance() for _ in range(4)]

    assert [step.kind for step in steps] == [StepKind.RESULT, StepKind.RESULT, StepKind.DONE, StepKind.DONE]
    assert steps[0].payload.text == 'Left 1'
    assert steps[2] == Step(StepKind.DONE, 'done')
    assert sequence.done


async def test_generator_return_value_is_reported():
    def steps():
        received = yield 'ask'
        return received * 2

    sequence = StepSequence(steps())

    first = await sequence.advance()
    last = await sequence.advance(21)

    assert first == Step(StepKind.VALUE, 'ask')
    assert last == Step(StepKind.DONE, 42)


def test_is_sequence():
    async def agen():
        yield 1

    def gen():
        yield 1

    assert is_sequence(gen())
    assert is_sequence(agen())
    assert is_sequence(StepSequence())
    assert not is_sequence([1, 2])
