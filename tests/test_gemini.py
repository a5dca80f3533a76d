import threading

import pytest
from pybreaker import CircuitBreakerError

from listing_match.services import gemini


@pytest.mark.asyncio
async def test_model_call_runs_off_the_event_loop(monkeypatch):
    threads = []

    def mock_generate(model_name, prompt):
        threads.append(threading.current_thread())
        return 'Here you go: {"summary": "Ljus trea", "totalScore": 8}'

    monkeypatch.setattr(gemini, "_generate", mock_generate)
    text = await gemini.generate_text("prompt")

    assert gemini.extract_json(text) == {"summary": "Ljus trea", "totalScore": 8}
    assert threads and threads[0] is not threading.main_thread()


@pytest.mark.asyncio
async def test_open_circuit_falls_back_without_retrying(monkeypatch):
    calls = []

    def mock_generate(model_name, prompt):
        calls.append(model_name)
        raise CircuitBreakerError("open")

    monkeypatch.setattr(gemini, "_generate", mock_generate)
    analysis = await gemini.generate_property_analysis({"id": "p-1", "title": "Etta"}, None)

    assert analysis == gemini.fallback_analysis()
    # one attempt per model, primary then fallback
    assert calls == [gemini.settings.GEMINI_MODEL, gemini.settings.GEMINI_FALLBACK_MODEL]


def test_extract_json_ignores_text_without_an_object():
    assert gemini.extract_json("no json here") is None
    assert gemini.extract_json("[1, 2]") is None
    assert gemini.extract_json(None) is None
