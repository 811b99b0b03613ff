"""Shared fixtures: a scripted analysis engine and JSON reply builders."""

import asyncio
import json
from typing import Any, Dict, List, Optional

import pytest

from codesentinel.config import ReviewConfig


class FakeEngine:
    """
    AnalysisEngine stand-in that routes on the system prompt.

    Each route holds a reply string, an Exception to raise, or a list of
    those consumed in order. `delays` makes a route await before replying,
    so tests can observe overlap (`peak_in_flight`) and cancellation.
    """

    def __init__(
        self,
        primary: Any = "",
        security: Any = "",
        second_pass: Any = "",
        delays: Optional[Dict[str, float]] = None,
    ):
        self.routes = {
            "primary": primary,
            "security": security,
            "second_pass": second_pass,
        }
        self.delays = delays or {}
        self.calls: List[Dict[str, Any]] = []
        self.cancelled: List[str] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    def _route(self, system_prompt: str) -> str:
        if "SECOND-PASS" in system_prompt:
            return "second_pass"
        if "security expert" in system_prompt:
            return "security"
        return "primary"

    def calls_for(self, route: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["route"] == route]

    async def generate(
        self,
        prompt: str,
        system_prompt: str = "",
        max_tokens: Optional[int] = None,
    ) -> str:
        route = self._route(system_prompt)
        self.calls.append({
            "route": route,
            "prompt": prompt,
            "system_prompt": system_prompt,
            "max_tokens": max_tokens,
        })

        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.delays.get(route):
                await asyncio.sleep(self.delays[route])
        except asyncio.CancelledError:
            self.cancelled.append(route)
            raise
        finally:
            self.in_flight -= 1

        reply = self.routes[route]
        if isinstance(reply, list):
            reply = reply.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


def analysis_json(issues: List[Dict[str, Any]], confidence: int, summary: str = "ok") -> str:
    return json.dumps({"issues": issues, "confidence": confidence, "summary": summary})


def fenced(payload: str) -> str:
    return f"Here is my review:\n```json\n{payload}\n```\nThanks."


@pytest.fixture
def config() -> ReviewConfig:
    """Default thresholds with the regex pre-scan off, so engine replies are the only issues."""
    return ReviewConfig(confidence_threshold=80, quick_scan_enabled=False)


@pytest.fixture
def make_engine():
    return FakeEngine


@pytest.fixture
def make_analysis():
    return analysis_json


@pytest.fixture
def wrap_fenced():
    return fenced
