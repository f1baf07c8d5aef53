import httpx
import pytest
import respx
from httpx import Response
from langchain_core.messages import AIMessage, HumanMessage

from memory_bridge.history import SessionChatHistory
from memory_bridge.memory import WindowedChatMemory
from memory_bridge.transport.http import HttpTransport

API_URL = "https://memory.test/webhook/memory"

CONVERSATION = [
    HumanMessage(content="hi"),
    AIMessage(content="hello"),
    HumanMessage(content="how are you"),
    AIMessage(content="fine"),
]


@pytest.fixture
def history(memory_transport) -> SessionChatHistory:
    return SessionChatHistory(memory_transport, "s1")


@pytest.mark.asyncio
async def test_window_is_trailing_suffix(history):
    memory = WindowedChatMemory(history, k=2)
    await history.aadd_messages(CONVERSATION)

    assert await history.aget_messages() == CONVERSATION

    variables = await memory.aload_memory_variables({"input": "next"})
    assert variables == {"chat_history": [HumanMessage(content="how are you"), AIMessage(content="fine")]}


@pytest.mark.asyncio
@pytest.mark.parametrize("k, expected", [(1, 1), (3, 3), (4, 4), (10, 4)])
async def test_window_length_is_min_of_k_and_history(history, k, expected):
    await history.aadd_messages(CONVERSATION)
    memory = WindowedChatMemory(history, k=k)

    window = await memory.abuffer_as_messages()

    assert window == CONVERSATION[len(CONVERSATION) - expected:]


@pytest.mark.asyncio
async def test_default_window_size_is_ten(history):
    await history.aadd_messages([HumanMessage(content=str(i)) for i in range(15)])
    memory = WindowedChatMemory(history)

    window = await memory.abuffer_as_messages()

    assert memory.k == 10
    assert [m.content for m in window] == [str(i) for i in range(5, 15)]


@pytest.mark.asyncio
async def test_zero_window_surfaces_nothing(history, fake_backend):
    await history.aadd_messages(CONVERSATION)
    memory = WindowedChatMemory(history, k=0)

    assert await memory.aload_memory_variables({}) == {"chat_history": []}
    assert "get" not in fake_backend.actions()


@pytest.mark.asyncio
async def test_negative_window_is_clamped(history):
    await history.aadd_messages(CONVERSATION)
    memory = WindowedChatMemory(history, k=-3)

    assert memory.k == 0
    assert await memory.abuffer_as_messages() == []


@pytest.mark.asyncio
async def test_window_does_not_evict_backend_history(history, fake_backend):
    memory = WindowedChatMemory(history, k=2)
    await history.aadd_messages(CONVERSATION)

    await memory.aload_memory_variables({})

    assert len(fake_backend.sessions["s1"]) == 4


@pytest.mark.asyncio
async def test_transcript_mode(history):
    await history.aadd_messages(CONVERSATION[:2])
    memory = WindowedChatMemory(history, k=10, return_messages=False)

    variables = await memory.aload_memory_variables({})

    assert variables == {"chat_history": "Human: hi\nAI: hello"}


@pytest.mark.asyncio
async def test_custom_memory_key(history):
    memory = WindowedChatMemory(history, memory_key="history")

    assert memory.memory_variables == ["history"]
    assert await memory.aload_memory_variables({}) == {"history": []}


@pytest.mark.asyncio
async def test_save_context_writes_human_then_ai(history, fake_backend):
    memory = WindowedChatMemory(history, k=10)

    await memory.asave_context({"input": "hi"}, {"output": "hello"})

    assert fake_backend.sessions["s1"] == [
        {"type": "human", "content": "hi"},
        {"type": "ai", "content": "hello"},
    ]


@pytest.mark.asyncio
async def test_save_context_does_not_merge_same_role(history):
    memory = WindowedChatMemory(history, k=10)

    await memory.asave_context({"input": "a"}, {"output": "b"})
    await memory.asave_context({"input": "a"}, {"output": "b"})

    assert len(await history.aget_messages()) == 4


@pytest.mark.asyncio
async def test_save_context_without_input_key_uses_single_key(history):
    memory = WindowedChatMemory(history, input_key=None, output_key=None)

    await memory.asave_context({"question": "why?", "chat_history": []}, {"answer": "because"})

    assert await history.aget_messages() == [HumanMessage(content="why?"), AIMessage(content="because")]


@pytest.mark.asyncio
async def test_save_context_missing_key_raises_before_writing(history, fake_backend):
    memory = WindowedChatMemory(history)

    with pytest.raises(ValueError, match="input"):
        await memory.asave_context({"question": "hi"}, {"output": "hello"})

    assert fake_backend.requests == []


@pytest.mark.asyncio
async def test_clear(history):
    memory = WindowedChatMemory(history)
    await memory.asave_context({"input": "hi"}, {"output": "hello"})

    await memory.aclear()

    assert await memory.aload_memory_variables({}) == {"chat_history": []}


def test_sync_surface(history):
    memory = WindowedChatMemory(history, k=1)

    memory.save_context({"input": "hi"}, {"output": "hello"})

    assert memory.load_memory_variables({}) == {"chat_history": [AIMessage(content="hello")]}
    memory.clear()
    assert memory.load_memory_variables({}) == {"chat_history": []}


@pytest.mark.asyncio
async def test_timeout_gives_empty_window_and_writes_still_attempted():
    memory = WindowedChatMemory(SessionChatHistory(HttpTransport(API_URL), "s1"), k=5)

    async with respx.mock:
        route = respx.post(API_URL).mock(side_effect=[httpx.ReadTimeout("timed out"), Response(200), Response(200)])

        variables = await memory.aload_memory_variables({"input": "hi"})
        await memory.asave_context({"input": "hi"}, {"output": "hello"})

        assert variables == {"chat_history": []}
        assert route.call_count == 3
