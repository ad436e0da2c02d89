from types import SimpleNamespace

import pytest

from ai import (
    AIError, DrawingJudge, ImageGenerator, OpenAIClient, SpeechResult, SpeechSynthesizer,
    Storyteller, estimate_duration_ms
)
from ai.client import APIKeyError
from ai.storyteller import fallback_questions
from games import Announcer, GameRegistry
from sessions import Broadcaster, Session


class FakeCompletions:
    def __init__(self, replies):
        self.replies = list(replies)
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        message = SimpleNamespace(content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=None)


def make_client(*replies):
    client = OpenAIClient(api_key='test-key')
    client.base_delay = 0
    completions = FakeCompletions(replies)
    client.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return client, completions


class FakeJSONClient:
    def __init__(self, data=None, error=None):
        self.data = data
        self.error = error
        self.calls = []

    def generate_json(self, messages, schema_name, schema, **kwargs):
        self.calls.append((messages, schema_name))
        if self.error:
            raise self.error
        return self.data


class FakeText:
    def __init__(self, data=None, error=None):
        self.data = data
        self.error = error
        self.prompts = []

    def complete_json(self, prompt, name, schema, max_tokens=800):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.data


# OpenAI client

def test_client_without_key_is_unavailable(monkeypatch):
    monkeypatch.delenv('OPENAI_API_KEY', raising=False)
    client = OpenAIClient()

    assert not client.is_available()
    assert client.get_status()['available'] is False
    with pytest.raises(APIKeyError):
        client.generate_json([], 'anything', {})

    response = client.generate_completion([{'role': 'user', 'content': 'hi'}])
    assert not response.success


def test_generate_json_requests_schema_and_parses():
    client, completions = make_client('{"rankings": []}')

    assert client.generate_json([{'role': 'user', 'content': 'x'}], 'drawing_rankings', {'type': 'object'}) == {
        'rankings': []
    }
    response_format = completions.requests[0]['response_format']
    assert response_format['type'] == 'json_schema'
    assert response_format['json_schema']['name'] == 'drawing_rankings'


def test_generate_json_rejects_invalid_json():
    client, _ = make_client('not json')

    with pytest.raises(AIError):
        client.generate_json([], 'broken', {})


def test_transient_errors_are_retried():
    client, completions = make_client(RuntimeError('connection reset'), '{"ok": true}')

    assert client.generate_json([], 'retry', {}) == {'ok': True}
    assert len(completions.requests) == 2


def test_persistent_errors_raise_after_retries():
    client, completions = make_client(*[RuntimeError('down')] * 3)

    with pytest.raises(AIError):
        client.generate_json([], 'retry', {})
    assert len(completions.requests) == 3


# Drawing judge

def test_judge_keeps_known_labels_sorted_by_rank():
    client = FakeJSONClient({'rankings': [
        {'label': 'b', 'rank': 1, 'reason': 'Very clear'},
        {'label': 'A', 'rank': 2, 'reason': 'Nice colors'},
        {'label': 'Z', 'rank': 3, 'reason': 'Not in the contest'},
        {'label': 'B', 'rank': 4, 'reason': 'Duplicate'}
    ]})
    judge = DrawingJudge(client)

    rankings = judge.rank('Cat', 'Y29sbGFnZQ==', {'A': 'Alice', 'B': 'Bob'})

    assert [(r.label, r.rank, r.reason) for r in rankings] == [('B', 1, 'Very clear'), ('A', 2, 'Nice colors')]
    content = client.calls[0][0][0]['content']
    assert 'Cat' in content[0]['text']
    assert content[1]['image_url']['url'] == 'data:image/png;base64,Y29sbGFnZQ=='


def test_judge_without_usable_rankings_fails():
    judge = DrawingJudge(FakeJSONClient({'rankings': [{'label': 'Q', 'rank': 1, 'reason': ''}]}))

    with pytest.raises(AIError):
        judge.rank('Cat', 'eA==', {'A': 'Alice'})


# Storyteller

def test_questions_fall_back_when_generation_fails():
    storyteller = Storyteller(FakeText(error=AIError('down')))
    assert storyteller.generate_questions(3) == fallback_questions(3)


def test_questions_are_padded_and_trimmed():
    padded = Storyteller(FakeText({'questions': ['Who is the hero?']})).generate_questions(3)
    assert padded[0] == 'Who is the hero?'
    assert padded[1:] == fallback_questions(3)[1:]

    trimmed = Storyteller(FakeText({'questions': ['A?', 'B?', 'C?']})).generate_questions(2)
    assert trimmed == ['A?', 'B?']


def test_continuing_story_is_in_prompt():
    text = FakeText({'questions': ['Where?']})
    Storyteller(text).generate_questions(1, previous_story='The dragon slept.')

    assert 'The dragon slept.' in text.prompts[0]


def test_write_story_uses_text_when_image_prompt_missing():
    text = FakeText({'text': '  The dragon flew to the moon.  ', 'image_prompt': ''})
    story = Storyteller(text).write_story([('Alice', 'Who?', 'a dragon')])

    assert story.text == 'The dragon flew to the moon.'
    assert story.image_prompt == story.text
    assert 'Alice: Who? -> "a dragon"' in text.prompts[0]


def test_write_story_without_text_fails():
    with pytest.raises(AIError):
        Storyteller(FakeText({'text': '', 'image_prompt': 'x'})).write_story([('Alice', 'Who?', 'me')])


# Images and speech

def test_image_prompt_gets_style():
    prompts = []
    client = SimpleNamespace(generate_image=lambda prompt: prompts.append(prompt) or 'aW1n')

    assert ImageGenerator(client, style='watercolor').generate('A castle') == 'aW1n'
    assert prompts == ['A castle. Style: watercolor.']

    with pytest.raises(AIError):
        ImageGenerator(client).generate('   ')


def test_duration_estimate_is_bounded():
    assert estimate_duration_ms('') == 1000
    assert estimate_duration_ms('one two three four five') == 2000
    assert estimate_duration_ms('word ' * 1000) == 30000


def test_speech_failure_returns_estimate():
    def fail(text):
        raise AIError('quota exceeded')

    result = SpeechSynthesizer(SimpleNamespace(synthesize_speech=fail)).synthesize('Hello there everyone')

    assert not result.success
    assert result.error == 'quota exceeded'
    assert result.audio_b64 is None
    assert result.duration_ms == estimate_duration_ms('Hello there everyone')


# Announcer

def test_announcement_without_speech_is_text_only(emitter, scheduler):
    session = Session(code='ABC123', presenter_sid='tv')
    announcer = Announcer(Broadcaster(emitter, GameRegistry()), scheduler)

    estimated = announcer.announce(session, 'Welcome to the party')

    assert estimated == estimate_duration_ms('Welcome to the party')
    assert [event for event, _, _ in emitter.sent] == ['host:speak-start']
    assert scheduler.spawned == []


def test_failed_speech_reports_error_to_presenter(emitter, scheduler):
    session = Session(code='ABC123', presenter_sid='tv')
    speech = SimpleNamespace(synthesize=lambda text: SpeechResult(
        text=text, duration_ms=1200, success=False, error='voice unavailable'))
    announcer = Announcer(Broadcaster(emitter, GameRegistry()), scheduler, speech)

    announcer.announce(session, 'Round two')
    scheduler.run_spawned()

    start = emitter.events('host:speak-start', to='tv')[0]
    error = emitter.events('host:speak-error', to='tv')[0]
    assert error == {'message_id': start['message_id'], 'error': 'voice unavailable', 'duration_ms': 1200}
    assert emitter.events('host:audio') == []
