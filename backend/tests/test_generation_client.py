import json
import unittest

import requests

from app.config import Settings
from app.services.generation import (
    EmptyResponse,
    GeneratedTerm,
    GenerationClient,
    MalformedResponse,
    ServiceUnavailable,
)
from app.utils.retry import poll_until


def make_settings(**overrides) -> Settings:
    values = {
        "VOCAB_DATABASE_URL": "sqlite:///:memory:",
        "VOCAB_GENERATION_BASE_URL": "http://llm.test/",
        "VOCAB_READINESS_MAX_ATTEMPTS": 3,
        "VOCAB_READINESS_INTERVAL_MS": 0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeResponse:
    def __init__(self, status_code: int = 200, body=None) -> None:
        self.status_code = status_code
        self._body = body

    def json(self):
        return self._body

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeHttpSession:
    def __init__(self, health=None, completions=None) -> None:
        self.health = list(health or [200])
        self.completions = list(completions or [])
        self.health_calls = 0
        self.urls: list[str] = []
        self.payloads: list[dict] = []
        self.closed = False

    def get(self, url, timeout=None):
        self.health_calls += 1
        self.urls.append(url)
        status = self.health.pop(0) if len(self.health) > 1 else self.health[0]
        if isinstance(status, Exception):
            raise status
        return FakeResponse(status)

    def post(self, url, json=None, timeout=None):
        self.urls.append(url)
        self.payloads.append(json)
        item = self.completions.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, FakeResponse):
            return item
        return FakeResponse(200, {"content": item})

    def close(self) -> None:
        self.closed = True


TERMS_JSON = json.dumps(
    [
        {"term": "API", "definition": "A set of rules that lets programs talk to each other"},
        {"term": "REST", "definition": "An architectural style for networked applications"},
    ]
)


class ReadinessTests(unittest.TestCase):
    def test_wait_for_ready_polls_until_healthy(self) -> None:
        http = FakeHttpSession(health=[503, requests.ConnectionError("refused"), 200])
        client = GenerationClient(make_settings(VOCAB_READINESS_MAX_ATTEMPTS=5), session=http)

        client.wait_for_ready()

        self.assertEqual(http.health_calls, 3)
        self.assertEqual(http.urls[0], "http://llm.test/health")

    def test_wait_for_ready_raises_after_budget(self) -> None:
        http = FakeHttpSession(health=[503])
        client = GenerationClient(make_settings(), session=http)

        with self.assertRaises(ServiceUnavailable):
            client.wait_for_ready(max_attempts=4, interval_ms=0)
        self.assertEqual(http.health_calls, 4)

    def test_readiness_is_checked_once_for_consecutive_calls(self) -> None:
        http = FakeHttpSession(completions=["First story.", "Second story."])
        client = GenerationClient(make_settings(), session=http)

        client.generate_story("API", "rules", "en", "Web Development")
        client.generate_story("REST", "style", "en", "Web Development")

        self.assertEqual(http.health_calls, 1)

    def test_connection_error_forces_new_readiness_check(self) -> None:
        http = FakeHttpSession(completions=[requests.ConnectionError("reset"), "Story."])
        client = GenerationClient(make_settings(), session=http)

        with self.assertRaises(requests.ConnectionError):
            client.generate_story("API", "rules", "en", "Web Development")
        client.generate_story("API", "rules", "en", "Web Development")

        self.assertEqual(http.health_calls, 2)

    def test_poll_until_sleeps_between_attempts(self) -> None:
        outcomes = iter([False, False, True])
        sleeps: list[float] = []

        ready = poll_until(lambda: next(outcomes), max_attempts=5, interval_ms=250, sleep=sleeps.append)

        self.assertTrue(ready)
        self.assertEqual(sleeps, [0.25, 0.25])

    def test_poll_until_reports_failure(self) -> None:
        calls: list[int] = []

        def check() -> bool:
            calls.append(1)
            return False

        self.assertFalse(poll_until(check, max_attempts=2, interval_ms=0))
        self.assertEqual(len(calls), 2)


class GenerateTermsTests(unittest.TestCase):
    def test_sends_completion_payload(self) -> None:
        http = FakeHttpSession(completions=[TERMS_JSON])
        client = GenerationClient(make_settings(), session=http)

        client.generate_terms("en", "Web Development")

        payload = http.payloads[0]
        self.assertEqual(http.urls[-1], "http://llm.test/completion")
        self.assertEqual(set(payload), {"prompt", "temperature", "max_tokens", "stop"})
        self.assertIn("exactly 5", payload["prompt"])
        self.assertIn("Web Development", payload["prompt"])

    def test_parses_fenced_and_commented_array(self) -> None:
        raw = (
            "Here are the terms you asked for:\n"
            "```json\n"
            "[\n"
            "  // networking basics\n"
            '  {"term": "API", "definition": "Rules for programs"},\n'
            "  /* architecture */\n"
            '  {"term": "REST", "definition": "A style for web services"},\n'
            "]\n"
            "```\n"
            "Hope this helps!"
        )
        client = GenerationClient(make_settings(), session=FakeHttpSession(completions=[raw]))

        terms = client.generate_terms("en", "Web Development")

        self.assertEqual(
            terms,
            [
                GeneratedTerm(term="API", definition="Rules for programs"),
                GeneratedTerm(term="REST", definition="A style for web services"),
            ],
        )

    def test_definitions_may_contain_comment_markers(self) -> None:
        raw = json.dumps(
            [
                {"term": "Comment", "definition": "In JavaScript a line comment starts with // and ends at the line end"},
                {"term": "Block comment", "definition": "Text between /* and */ is ignored"},
            ]
        )
        client = GenerationClient(make_settings(), session=FakeHttpSession(completions=[raw]))

        terms = client.generate_terms("en", "Web Development")

        self.assertEqual(
            [term.definition for term in terms],
            [
                "In JavaScript a line comment starts with // and ends at the line end",
                "Text between /* and */ is ignored",
            ],
        )

    def test_rejects_malformed_responses(self) -> None:
        for raw in ["not json", "[]", '[{"term":"x"}]', '{"term": "x", "definition": "y"}', ""]:
            with self.subTest(raw=raw):
                client = GenerationClient(make_settings(), session=FakeHttpSession(completions=[raw]))
                with self.assertRaises(MalformedResponse):
                    client.generate_terms("en", "Web Development")

    def test_drops_duplicates_and_caps_count(self) -> None:
        items = [{"term": f"Term {index}", "definition": f"Definition {index}"} for index in range(4)]
        items.insert(1, {"term": "term 0", "definition": "Duplicate"})
        client = GenerationClient(
            make_settings(VOCAB_TERMS_PER_LIST=3),
            session=FakeHttpSession(completions=[json.dumps(items)]),
        )

        terms = client.generate_terms("en", "Data Science")

        self.assertEqual([term.term for term in terms], ["Term 0", "Term 1", "Term 2"])

    def test_http_errors_are_not_retried(self) -> None:
        http = FakeHttpSession(completions=[FakeResponse(500, {"error": "boom"})])
        client = GenerationClient(make_settings(), session=http)

        with self.assertRaises(requests.HTTPError):
            client.generate_terms("en", "DevOps")
        self.assertEqual(len(http.payloads), 1)


class GenerateStoryTests(unittest.TestCase):
    def test_story_is_trimmed(self) -> None:
        http = FakeHttpSession(completions=["  Alex called the API at dawn.  \n"])
        client = GenerationClient(make_settings(), session=http)

        story = client.generate_story("API", "rules", "en", "Web Development")

        self.assertEqual(story, "Alex called the API at dawn.")
        self.assertEqual(http.payloads[0]["stop"], ["\n\n", "###"])

    def test_empty_story_raises(self) -> None:
        client = GenerationClient(make_settings(), session=FakeHttpSession(completions=["   "]))
        with self.assertRaises(EmptyResponse):
            client.generate_story("API", "rules", "en", "Web Development")

    def test_batch_absorbs_per_term_failures(self) -> None:
        http = FakeHttpSession(completions=["Story A.", "", requests.Timeout("slow"), "Story D."])
        client = GenerationClient(make_settings(), session=http)
        terms = [GeneratedTerm(term=name, definition="d") for name in ["A", "B", "C", "D"]]

        stories = client.generate_stories_for_terms(terms, "en", "Cloud Computing")

        self.assertEqual(stories, {"A": "Story A.", "B": "", "C": "", "D": "Story D."})
        self.assertEqual(len(http.payloads), 4)

    def test_batch_raises_when_service_never_ready(self) -> None:
        http = FakeHttpSession(health=[503])
        client = GenerationClient(make_settings(), session=http)

        with self.assertRaises(ServiceUnavailable):
            client.generate_stories_for_terms([GeneratedTerm("A", "d")], "en", "Blockchain")
        self.assertEqual(http.payloads, [])

    def test_empty_batch_makes_no_calls(self) -> None:
        http = FakeHttpSession()
        client = GenerationClient(make_settings(), session=http)

        self.assertEqual(client.generate_stories_for_terms([], "en", "DevOps"), {})
        self.assertEqual(http.health_calls, 0)


if __name__ == "__main__":
    unittest.main()
