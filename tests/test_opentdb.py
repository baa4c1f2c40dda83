import aiohttp

from quiz.providers.opentdb import OPENTDB_URL, OpenTDBProvider, parse_question

SAMPLE = {
    "response_code": 0,
    "results": [
        {
            "type": "multiple",
            "difficulty": "easy",
            "category": "Entertainment: Music",
            "question": "Which band recorded &quot;Bohemian Rhapsody&quot;?",
            "correct_answer": "Queen",
            "incorrect_answers": ["ABBA", "The Beatles", "Simon &amp; Garfunkel"],
        }
    ],
}


class FakeResponse:
    def __init__(self, status=200, payload=None, error=None):
        self.status = status
        self._payload = payload
        self._error = error

    async def __aenter__(self):
        if self._error:
            raise self._error
        return self

    async def __aexit__(self, *exc):
        return False

    async def json(self):
        return self._payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.closed = False
        self.requests = []

    def get(self, url, params=None):
        self.requests.append((url, params))
        return self.response


def test_parse_question_keeps_raw_text():
    question = parse_question(SAMPLE)

    assert question.question == "Which band recorded &quot;Bohemian Rhapsody&quot;?"
    assert question.correct_answer == "Queen"
    assert question.incorrect_answers == ["ABBA", "The Beatles", "Simon &amp; Garfunkel"]
    assert question.difficulty == "easy"
    assert question.all_answers[0] == "Queen"


def test_parse_question_rejects_error_codes():
    assert parse_question({"response_code": 5, "results": []}) is None
    assert parse_question({"response_code": 0, "results": []}) is None
    assert parse_question({}) is None


def test_parse_question_rejects_malformed_result():
    assert parse_question({"response_code": 0, "results": [{"question": "?"}]}) is None


async def test_get_question_requests_one_multiple_choice():
    session = FakeSession(FakeResponse(payload=SAMPLE))
    provider = OpenTDBProvider(session=session, min_interval=0)

    question = await provider.get_question()

    assert question.correct_answer == "Queen"
    assert session.requests == [(OPENTDB_URL, {"amount": "1", "type": "multiple"})]
    assert provider.get_statistics()["requests_made"] == 1


async def test_get_question_http_error_returns_none():
    provider = OpenTDBProvider(session=FakeSession(FakeResponse(status=503)), min_interval=0)

    assert await provider.get_question() is None
    assert provider.failures == 1


async def test_get_question_network_error_returns_none():
    error = aiohttp.ClientConnectionError("connection refused")
    provider = OpenTDBProvider(session=FakeSession(FakeResponse(error=error)), min_interval=0)

    assert await provider.get_question() is None


async def test_cleanup_leaves_injected_session_open():
    session = FakeSession(FakeResponse(payload=SAMPLE))
    provider = OpenTDBProvider(session=session, min_interval=0)

    await provider.cleanup()

    assert session.closed is False
