import os

os.environ.setdefault("ENVIRONMENT", "testing")

import pytest

from talentmatch.models.models import Candidate, Job


class FakeLLM:
    """Stands in for OllamaLLMClient; records prompts and replays canned text"""

    def __init__(self, response="", error=None):
        self.response = response
        self.error = error
        self.calls = []

    def generate(self, prompt, **kwargs):
        self.calls.append((prompt, kwargs))
        if self.error is not None:
            raise self.error
        if callable(self.response):
            return self.response(prompt)
        return self.response


@pytest.fixture
def fake_llm():
    return FakeLLM


@pytest.fixture
def react_job():
    return Job(
        id=1,
        title="Frontend Developer",
        description="We're looking for a React expert to join our team.",
        requirements="3+ years React",
    )


@pytest.fixture
def candidates():
    return [
        Candidate(
            id=10,
            name="Ada Lovelace",
            email="ada@example.com",
            skills="React, CSS",
            experience="4 years building React dashboards",
            resume_text="Senior Frontend Engineer with React and CSS",
        ),
        Candidate(
            id=11,
            name="Guido Rossi",
            email="guido@example.com",
            skills="Python",
            experience="6 years of Django",
        ),
    ]


def make_candidates(n, start=1):
    return [
        Candidate(id=i, name=f"Candidate {i}", email=f"c{i}@example.com", skills="Python", experience="2 years")
        for i in range(start, start + n)
    ]


@pytest.fixture
def candidate_factory():
    return make_candidates
