from types import SimpleNamespace
from unittest.mock import MagicMock

from library_app.services.assistant import (BACKEND_ERROR, CANNOT_PROCESS, NOT_CONFIGURED,
                                            LibrarianAssistant)


def completion(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


def test_without_api_key():
    assert LibrarianAssistant(api_key="").ask("hello") == NOT_CONFIGURED


def test_answer_from_backend():
    client = MagicMock()
    client.chat.completions.create.return_value = completion("Try Berkhof's Systematic Theology.")
    assistant = LibrarianAssistant(api_key="", model="test-model", client=client)

    assert assistant.ask("theology intro?") == "Try Berkhof's Systematic Theology."
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["messages"][0]["role"] == "system"
    assert kwargs["messages"][1] == {"role": "user", "content": "theology intro?"}


def test_empty_answer():
    client = MagicMock()
    client.chat.completions.create.return_value = completion("")
    assert LibrarianAssistant(client=client).ask("?") == CANNOT_PROCESS


def test_backend_error():
    client = MagicMock()
    client.chat.completions.create.side_effect = RuntimeError("timeout")
    assert LibrarianAssistant(client=client).ask("?") == BACKEND_ERROR
