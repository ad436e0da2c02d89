import base64
import io

import pytest
from PIL import Image

from games.ai_drawing import CollageError, build_collage, label_drawings


@pytest.fixture()
def drawing(party):
    def start(names=('Alice', 'Bob')):
        for name in names:
            party.join(name)
        return party.start('ai-drawing')
    return start


def test_drawings_go_to_presenter_only(party, drawing, png):
    state = drawing()
    image = png()

    party.act('Alice', 'submit-drawing', image_data=image)

    assert state.phase == 'drawing'
    assert party.emitter.events('drawing:image', to='tv') == [
        {'participant_id': party.ids['Alice'], 'image_data': image}
    ]
    snapshot = party.emitter.last_state('sid-bob')
    assert snapshot['game_state']['submitted_ids'] == [party.ids['Alice']]
    assert image not in str(snapshot)


def test_invalid_drawings_are_ignored(party, drawing):
    state = drawing()

    party.act('Alice', 'submit-drawing', image_data='not base64!!')
    party.act('Alice', 'submit-drawing', image_data=42)

    assert state.images == {}
    assert party.emitter.events('drawing:image') == []


def test_all_drawings_in_starts_judging(party, drawing, png, fake_ai):
    state = drawing()
    party.act('Alice', 'submit-drawing', image_data=png('red'))
    party.act('Bob', 'submit-drawing', image_data='data:image/png;base64,' + png('blue'))

    assert state.phase == 'judging'
    assert state.labels == {'A': party.ids['Alice'], 'B': party.ids['Bob']}

    party.scheduler.run_spawned()

    assert state.phase == 'results'
    assert [(r.label, r.rank) for r in state.results] == [('A', 1), ('B', 2)]
    assert state.results[1].participant_id == party.ids['Bob']
    assert fake_ai.judge.calls == [(state.word, {'A': 'Alice', 'B': 'Bob'})]
    assert party.emitter.last_state('tv')['game_state']['phase'] == 'results'


def test_judging_failure_can_be_retried(party, drawing, png, fake_ai):
    state = drawing()
    fake_ai.judge.error = 'vision model down'
    party.act('Alice', 'submit-drawing', image_data=png())
    party.act('Bob', 'submit-drawing', image_data=png())
    party.scheduler.run_spawned()

    assert state.phase == 'error'
    assert state.error_message == 'Judging failed: vision model down'

    fake_ai.judge.error = None
    party.act('Bob', 'retry-judging')
    assert state.phase == 'error'

    party.act('Alice', 'retry-judging')
    assert state.phase == 'judging'
    party.scheduler.run_spawned()
    assert state.phase == 'results'
    assert len(state.results) == 2


def test_result_arriving_after_game_end_is_discarded(party, drawing, png):
    state = drawing()
    party.act('Alice', 'submit-drawing', image_data=png())
    party.act('Bob', 'submit-drawing', image_data=png())
    party.hub.end_game(party.sids['Alice'])
    party.emitter.clear()

    party.scheduler.run_spawned()

    assert party.session.game_state is None
    assert state.results == []
    assert party.emitter.sent == []


def test_time_running_out_without_drawings_skips_judge(party, drawing, fake_ai):
    state = drawing()

    party.scheduler.advance(60)

    assert state.phase == 'results'
    assert state.results == []
    assert fake_ai.judge.calls == []


def test_time_running_out_judges_submitted_drawings(party, drawing, png):
    state = drawing()
    party.act('Alice', 'submit-drawing', image_data=png())

    party.scheduler.advance(60)
    assert state.phase == 'judging'
    assert state.labels == {'A': party.ids['Alice']}


def test_leaving_player_can_complete_drawing_phase(party, drawing, png):
    state = drawing(names=('Alice', 'Bob', 'Carol'))
    party.act('Alice', 'submit-drawing', image_data=png())
    party.act('Bob', 'submit-drawing', image_data=png())

    party.disconnect('Carol')
    assert state.phase == 'judging'


def test_next_round_picks_new_word(party, drawing, png):
    state = drawing()
    first_word = state.word
    party.act('Alice', 'submit-drawing', image_data=png())
    party.act('Bob', 'submit-drawing', image_data=png())
    party.scheduler.run_spawned()

    party.act('Alice', 'next-round')

    assert state.phase == 'drawing'
    assert state.round_number == 2
    assert state.word != first_word
    assert state.images == {}
    assert state.time_remaining == 60


def test_collage_lays_out_grid(png):
    collage = build_collage([(label, png()) for label in 'ABCD'])

    with Image.open(io.BytesIO(base64.b64decode(collage))) as image:
        assert image.format == 'PNG'
        assert image.size == (1200, 800)


def test_collage_rejects_unreadable_images():
    with pytest.raises(CollageError):
        build_collage([('A', base64.b64encode(b'not an image').decode('ascii'))])

    with pytest.raises(CollageError):
        build_collage([])


def test_labels_follow_submission_order():
    assert label_drawings({'p1': 'x', 'p2': 'y', 'p3': 'z'}) == {'A': 'p1', 'B': 'p2', 'C': 'p3'}
