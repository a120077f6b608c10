"""Shared test fixtures and SSE helpers."""

import asyncio
import json
from typing import Any, Iterable, List, Optional

import httpx
import pytest

from legalinsight.utils.sse_utils import delta_chunk


def sse_line(content: Optional[str] = None, finish_reason: Optional[str] = None) -> str:
    return f"data: {json.dumps(delta_chunk(content, finish_reason))}\n"


def sse_body(fragments: Iterable[str], finish: bool = True) -> str:
    """Build an SSE body from content fragments, terminated by [DONE]."""
    body = "".join(sse_line(fragment) for fragment in fragments)
    if finish:
        body += "data: [DONE]\n"
    return body


class ChunkedStream(httpx.AsyncByteStream):
    """Async byte stream yielding pre-split chunks, optionally with a delay."""

    def __init__(self, chunks: List[bytes], delay: float = 0.0):
        self.chunks = chunks
        self.delay = delay
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            if self.delay:
                await asyncio.sleep(self.delay)
            yield chunk

    async def aclose(self) -> None:
        self.closed = True


def split_bytes(data: bytes, size: int) -> List[bytes]:
    return [data[i:i + size] for i in range(0, len(data), size)]


class RecordingHandler:
    """MockTransport handler that records requests and returns a fixed response."""

    def __init__(self, status_code: int = 200, body: Any = None, chunks: Optional[List[bytes]] = None, delay: float = 0.0):
        self.status_code = status_code
        self.body = body
        self.chunks = chunks
        self.delay = delay
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json=self.body or {"error": "failed"})
        return httpx.Response(
            200,
            headers={"Content-Type": "text/event-stream"},
            stream=ChunkedStream(self.chunks or [], delay=self.delay),
        )


@pytest.fixture
def hello_stream() -> str:
    return (
        'data: {"choices":[{"delta":{"content":"Hel"}}]}\n'
        'data: {"choices":[{"delta":{"content":"lo"}}]}\n'
        "data: [DONE]\n"
    )


@pytest.fixture
def full_analysis_json() -> dict:
    return {
        "classification": {
            "primaryDomain": "Criminal",
            "secondaryDomains": ["Cyber"],
            "proceduralStage": "FIR registered",
            "complexityScore": 0.8,
            "confidenceScore": 0.9,
        },
        "legalProvisions": {
            "coreSection": "Section 420 IPC",
            "applicableSections": ["Section 406 IPC"],
            "misusedSections": [],
            "constitutionalAngles": ["Article 21"],
        },
        "factEvidence": {
            "keyFacts": ["Payment made online"],
            "evidenceStrength": "Strong",
            "courtRequirements": ["Bank statements"],
            "gaps": ["No written contract"],
        },
        "jurisdiction": {
            "correctForum": "Judicial Magistrate First Class",
            "alternativeForums": ["Consumer Commission"],
            "limitationStatus": "Borderline",
            "limitationDetails": "Three years from the date of offence",
        },
        "proceduralPath": {
            "steps": [{"step": "File complaint", "timeline": "1 week", "notes": "Attach receipts"}],
            "totalTimeline": "12-18 months",
            "urgentActions": ["Preserve chats"],
        },
        "riskOutcome": {
            "successProbability": "HIGH",
            "riskFactors": ["Delay"],
            "tacticalConsiderations": ["Seek mediation"],
            "strengthFactors": ["Documentary trail"],
        },
        "precedents": {
            "settledPrinciples": ["Dishonest intention at inception"],
            "relevantCases": [{"name": "Hridaya Ranjan v. State of Bihar", "citation": "(2000) 4 SCC 168", "relevance": "Cheating ingredients"}],
            "judicialAttitude": "Strict",
        },
        "winningStrategy": {
            "overview": "Prove intent at inception.",
            "keyArguments": [{"argument": "Intent", "howToPresent": "Show timeline", "whyItWorks": "Meets ingredients"}],
            "exactWordsToUse": ["The accused never intended to deliver"],
            "thingsToAvoidSaying": ["I trusted him blindly"],
            "courtBehaviorTips": ["Address the court as Your Honour"],
            "documentsToPrepare": ["Bank statements"],
            "questionsToPrepareFor": [{"question": "Why the delay?", "suggestedAnswer": "Awaiting refund"}],
            "openingStatement": "May it please the court.",
            "closingStatement": "The ingredients are made out.",
        },
    }
