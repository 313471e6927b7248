from conftest import NOW
from trivia import get_bot
from trivia.services.game import keys


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_reply_envelope_and_bad_token(post):
    data = post('!t', token='wrong')
    assert data == {
        'text': 'Invalid token',
        'link_names': 1,
        'username': 'trebekbot',
        'icon_emoji': ':trebek:',
    }


def test_blacklisted_channel(post):
    assert post('!t', channel_name='random')['text'] == "Sorry, can't play in this channel."
    assert post('!t', channel_name='general')['text'] == "Sorry, can't play in this channel."


def test_unknown_command_is_silent(post):
    assert post('trebekbot sing a song')['text'] == ''


def test_full_round_flow(post, store):
    question = post('!t')['text']
    assert question == "The category is `mountains` for $500: `Earth's highest peak`"
    # Repeat request inside the announcement window says nothing
    assert post('jeopardy me', timestamp=NOW + 1)['text'] == ''

    assert post('!h', timestamp=NOW + 2)['text'] == 'M............ (hints used: 1)'
    assert post('!a Kilimanjaro', user_id='U2', user_name='ken', timestamp=NOW + 3)['text'] == \
        'Kilimanjaro is incorrect, Ken.'

    reply = post('!a What is Mount Everest?', timestamp=NOW + 4)['text']
    assert reply == (
        "That is correct, *Alex*. The answer was `Mount Everest`. "
        "You have earned $400 (adjusted from: $500). Your total score is $400."
    )
    # Late duplicate answer and hint are absorbed by the answer shush
    assert post('!a mount everest', user_id='U2', user_name='ken', timestamp=NOW + 5)['text'] == ''
    assert post('!h', timestamp=NOW + 5)['text'] == ''
    store.delete(keys.answer_shush_key('C1'))
    assert post('!h', timestamp=NOW + 20)['text'] == 'There is no active question. Type "!t" to get a question.'

    assert post('trebekbot what is my score')['text'] == 'Alex, your score is $400.'
    assert post('!top')['text'] == "Let's take a look at the top scores:\n\n1. Alex Trebek: $400"


def test_time_up(post):
    post('!t')
    reply = post('!a mount everest', timestamp=NOW + 45)['text']
    assert reply == "That is correct, Alex, but time's up! Remember, you have 30 seconds to answer."
    assert post('trebekbot what is my score')['text'] == 'Alex, your score is $0.'


def test_skip_reveals_and_starts_next_round(post):
    post('!t')
    assert post('!skip', timestamp=NOW + 3)['text'] == (
        "The answer is `Mount Everest`.\n"
        "The category is `rivers` for $200: `It flows past Memphis`"
    )
    assert post('!a the mississippi', timestamp=NOW + 6)['text'].startswith('That is correct, *Alex*.')


def test_skip_without_round(post):
    assert post('!skip')['text'] == (
        "There was no active question. Here's a new one:\n"
        "The category is `mountains` for $500: `Earth's highest peak`"
    )


def test_leaderboards(post, ledger):
    ledger.add_score('U1', 1000)
    ledger.add_score('U3', -10000)
    assert post('trebekbot show me the leaderboard')['text'].endswith('1. Alex Trebek: $1,000\n2. Brad Rutter: -$10,000')
    assert post('trebekbot show the loserboard')['text'].startswith(
        "Let's take a look at the bottom scores:\n\n1. Brad Rutter: -$10,000"
    )


def test_help_mentions_answer_window(post):
    text = post('trebekbot help')['text']
    assert 'You have 30 seconds to answer.' in text
    assert 'trebekbot show the loserboard' in text


def test_reset_requires_admin(post, ledger):
    ledger.add_score('U2', 600)
    assert post('trebekbot reset', user_id='U2', user_name='ken')['text'] == ''
    assert ledger.get_score('U2') == 600


def test_admin_reset(post, ledger, store):
    post('!t')
    ledger.add_score('U2', 600)
    text = post('trebekbot reset')['text']
    assert text == (
        'The final scores for this round are:\n\n1. Ken Jennings: $600'
        '\n\nStarting a new round of jeopardy'
    )
    assert ledger.all_scores() == []
    assert store.get(keys.round_key('C1')) is None


def test_question_source_failure_replies_empty(post, questions):
    questions.fail = True
    assert post('!t')['text'] == ''


def test_corrupt_round_replies_empty(post, store):
    store.set(keys.round_key('C1'), 'not json')
    assert post('!h')['text'] == ''


def test_reset_cli(flask_app, ledger):
    ledger.add_score('U1', 100)
    get_bot(flask_app).rounds.start_or_repeat('C1', NOW)
    result = flask_app.test_cli_runner().invoke(args=['trivia-reset', '--channel', 'C1'])
    assert result.exit_code == 0
    assert 'Channel C1 has been reset!' in result.output
    assert ledger.all_scores() == []


def test_late_skip_is_silent(post, flask_app, monkeypatch):
    post('!t')
    rounds = get_bot(flask_app).rounds
    stale = rounds.load_state('C1')
    assert post('!skip', timestamp=NOW + 3)['text'].endswith('`It flows past Memphis`')
    monkeypatch.setattr(rounds, 'load_state', lambda channel_id: stale)
    assert post('!skip', timestamp=NOW + 3)['text'] == ''
    monkeypatch.undo()
    assert rounds.load_state('C1').round.id == 102


def test_hint_after_expiry_reveals_answer(post, store):
    post('!t')
    assert post('!h', timestamp=NOW + 40)['text'] == "Time's up! The correct answer was `Mount Everest`."
    assert store.get(keys.round_key('C1')) is None
