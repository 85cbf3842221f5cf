import httpx
import pytest

from studymate.core.errors import GenerationError
from studymate.services.generation import GenerationProxy
from studymate.services.llm import OllamaClient
from studymate.views import APOLOGY_MESSAGE, DashboardView, DoubtSolverView


async def _solver(store, hub, proxy):
    view = DoubtSolverView(store, hub=hub, proxy=proxy)
    await view.mount()
    return view


@pytest.mark.asyncio
async def test_submit_question_persists_then_answers(store, hub, make_proxy):
    proxy, llm = make_proxy(replies=["Entropy measures disorder."])
    dashboard = DashboardView(store, hub=hub)
    await dashboard.mount()
    view = await _solver(store, hub, proxy)

    doubt = await view.submit_question("What is entropy?", "Physics")
    await hub.flush()

    assert [m.sender for m in doubt.messages] == ["user", "ai"]
    assert doubt.messages[1].content == "Entropy measures disorder."
    assert view.selected.id == doubt.id
    assert view.notifications[-1].title == "Answer generated"
    assert llm.calls[0][1] == 0.3

    stored = store.get_doubt(doubt.id)
    assert [m.content for m in stored.messages] == ["What is entropy?", "Entropy measures disorder."]

    assert [d.id for d in dashboard.recent_doubts] == [doubt.id]
    assert dashboard.recent_doubts[0].answered is False
    assert dashboard.notifications[-1].title == "New doubt added"


@pytest.mark.asyncio
async def test_failed_answer_keeps_question_and_appends_apology(store, hub, make_proxy):
    proxy, _ = make_proxy(error=GenerationError("Gemini API error: overloaded", status_code=502))
    view = await _solver(store, hub, proxy)

    doubt = await view.submit_question("Explain recursion")

    assert [m.sender for m in doubt.messages] == ["user", "ai"]
    assert doubt.messages[-1].content == APOLOGY_MESSAGE
    stored = store.get_doubt(doubt.id)
    assert stored.question == "Explain recursion"
    assert stored.messages[-1].content == APOLOGY_MESSAGE

    n = view.notifications[-1]
    assert n.title == "Error generating answer"
    assert n.destructive
    assert "overloaded" in n.description
    assert view.generating is False


@pytest.mark.asyncio
async def test_empty_question_is_blocked(store, hub, make_proxy):
    proxy, llm = make_proxy()
    view = await _solver(store, hub, proxy)

    assert await view.submit_question("   ") is None
    assert store.list_doubts() == []
    assert llm.calls == []
    assert view.notifications[-1].destructive


@pytest.mark.asyncio
async def test_follow_up_sends_conversation_context(store, hub, make_proxy):
    proxy, llm = make_proxy(replies=["First answer", "Second answer"])
    view = await _solver(store, hub, proxy)
    await view.submit_question("What is a vector?", "Math")

    doubt = await view.send_message("And a scalar?")

    assert [m.content for m in doubt.messages] == [
        "What is a vector?",
        "First answer",
        "And a scalar?",
        "Second answer",
    ]
    prompt = llm.calls[1][0]
    assert "And a scalar?" in prompt
    assert "This is a follow-up question. Previous conversation:\n" in prompt
    assert "USER: What is a vector?\n\nAI: First answer\n\nUSER: And a scalar?" in prompt

    stamps = [m.timestamp for m in store.get_doubt(doubt.id).messages]
    assert stamps == sorted(stamps)


@pytest.mark.asyncio
async def test_send_message_without_selection_is_ignored(store, hub, make_proxy):
    proxy, llm = make_proxy()
    view = await _solver(store, hub, proxy)
    assert await view.send_message("hello?") is None
    assert llm.calls == []


@pytest.mark.asyncio
async def test_mark_solved_updates_dashboard(store, hub, make_proxy):
    proxy, _ = make_proxy(replies=["answer"])
    dashboard = DashboardView(store, hub=hub)
    await dashboard.mount()
    view = await _solver(store, hub, proxy)
    doubt = await view.submit_question("Q?")
    await hub.flush()

    solved = await view.mark_solved(doubt.id)
    await hub.flush()

    assert solved.solved is True
    assert [d.id for d in view.solved()] == [doubt.id]
    assert view.unsolved() == []
    assert dashboard.recent_doubts[0].answered is True
    assert dashboard.notifications[-1].title == "Doubt solved"


@pytest.mark.asyncio
async def test_search_and_select(store, hub, make_proxy):
    store.create_doubt("How do enzymes work?", "Biology")
    store.create_doubt("What is inflation?", "Economics")
    proxy, _ = make_proxy()
    view = await _solver(store, hub, proxy)

    assert [d.question for d in view.search("ENZYME")] == ["How do enzymes work?"]
    assert [d.subject for d in view.search("economics")] == ["Economics"]
    assert len(view.search("")) == 2

    target = view.search("inflation")[0]
    assert view.select(target.id).id == target.id
    assert view.select("missing") is None
    assert view.selected.id == target.id


@pytest.mark.asyncio
async def test_dashboard_keeps_latest_two_of_five(store, hub, make_proxy):
    for i in range(6):
        store.create_doubt(f"Q{i}")
    dashboard = DashboardView(store, hub=hub)
    await dashboard.mount()

    assert [d.question for d in dashboard.recent_doubts] == ["Q5", "Q4"]


@pytest.mark.asyncio
async def test_malformed_provider_body_becomes_apology_not_crash(store, hub, monkeypatch):
    real_client = httpx.Client

    def client_factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(lambda r: httpx.Response(200, text="<html>proxy error</html>"))
        return real_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "Client", client_factory)
    proxy = GenerationProxy(OllamaClient(base_url="http://ollama.test", model="m"))
    view = await _solver(store, hub, proxy)

    doubt = await view.submit_question("Why is the sky blue?")

    assert [m.content for m in doubt.messages] == ["Why is the sky blue?", APOLOGY_MESSAGE]
    assert view.notifications[-1].title == "Error generating answer"
    assert view.notifications[-1].destructive
    assert not view.busy
