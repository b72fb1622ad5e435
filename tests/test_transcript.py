import re

import pytest

from cryptosandbox.common.protocol import Message, MessageType
from cryptosandbox.env import Environment
from cryptosandbox.main import main
from cryptosandbox.storage.transcript import TranscriptLog, compute_transcript_hash, read_entries

LINE = re.compile(
    r"^sender: '[^']*'; receiver: '[^']*'; message type: '(Message|Public key)'; "
    r"message text: '[^']*'; session key: '\d+'; timestamp: '\d+(\.\d+)?s'$"
)


def test_transcript_log_appends_lines(tmp_path):
    path = tmp_path / "logs" / "log.txt"
    message = Message(sender="Alice", session_key=1, receiver="Bob", body="42", timestamp=2_000_000_000)

    with TranscriptLog(str(path)) as log:
        log.append(message)
        log.append(message)
        assert log.message_count == 2
    assert log.closed

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines == [message.to_transcript_line()] * 2
    assert lines[0].endswith("timestamp: '2s'")


def test_transcript_log_appends_to_existing_file(tmp_path):
    path = tmp_path / "log.txt"
    path.write_text("", encoding="utf-8")
    message = Message(sender="Alice", session_key=0, body="hi")

    with TranscriptLog(str(path)) as log:
        log.append(message)
    with TranscriptLog(str(path)) as log:
        log.append(message)

    assert read_entries(str(path)) == [message, message]


def test_environment_records_every_delivery(tmp_path, shift_cipher):
    path = tmp_path / "log.txt"

    with Environment.from_file(str(path), shift_cipher) as env:
        alice = env.create_user("Alice")
        bob = env.create_user("Bob")
        env.send_message(bob.create_keys())
        env.send_message(alice.create_message("Bob", "Hello, Bob!"))
    assert env.transcript.closed

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert all(LINE.match(line) for line in lines)

    entries = read_entries(str(path))
    assert entries[0].message_type == MessageType.PUBLIC_KEY
    assert entries[0].receiver == ""
    assert entries[1].sender == "Alice"
    assert entries[1].receiver == "Bob"
    # The transcript only ever sees ciphertext
    assert "Hello" not in lines[1]


def test_rejected_messages_are_not_recorded(tmp_path, shift_cipher):
    path = tmp_path / "log.txt"
    with Environment.from_file(str(path), shift_cipher) as env:
        env.create_user("Alice")
        with pytest.raises(LookupError):
            env.send_message(Message(sender="Alice", session_key=1, receiver="Bob", body="x"))
    assert path.read_text(encoding="utf-8") == ""


def test_caller_owned_transcript_stays_open(tmp_path, shift_cipher):
    with TranscriptLog(str(tmp_path / "log.txt")) as log:
        with Environment(shift_cipher, transcript=log) as env:
            alice = env.create_user("Alice")
            env.send_message(alice.create_keys())
        assert not log.closed
        assert log.message_count == 1


def test_transcript_failure_does_not_break_delivery(tmp_path, shift_cipher):
    log = TranscriptLog(str(tmp_path / "log.txt"))
    log.close()
    env = Environment(shift_cipher, transcript=log)
    alice = env.create_user("Alice")

    env.send_message(alice.create_keys())

    assert len(alice.messages) == 1


def test_compute_transcript_hash(tmp_path):
    path = tmp_path / "log.txt"
    with TranscriptLog(str(path)) as log:
        log.append(Message(sender="Alice", session_key=0, body="hi", timestamp=1))
    first = compute_transcript_hash(str(path))
    assert len(first) == 64

    with TranscriptLog(str(path)) as log:
        log.append(Message(sender="Alice", session_key=0, body="hi", timestamp=1))
    assert compute_transcript_hash(str(path)) != first


def test_demo_writes_transcript(tmp_path, capsys):
    path = tmp_path / "demo_log.txt"
    assert main(["--log", str(path), "--log-level", "WARNING"]) == 0

    out = capsys.readouterr().out
    assert "got a message from user 'Alice': 'Hello, Bob!'" in out

    entries = read_entries(str(path))
    assert [entry.message_type for entry in entries] == [
        MessageType.PUBLIC_KEY, MessageType.MESSAGE, MessageType.PUBLIC_KEY
    ]
    assert [entry.session_key for entry in entries] == [1, 1, 2]


def test_demo_rejects_bad_log_level_setting(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("SANDBOX_LOG_LEVEL", "BOGUS")
    path = tmp_path / "demo_log.txt"

    assert main(["--log", str(path)]) == 1
    assert "Invalid settings" in capsys.readouterr().out
    assert not path.exists()


def test_demo_rejects_bad_log_level_argument(tmp_path):
    with pytest.raises(SystemExit):
        main(["--log", str(tmp_path / "demo_log.txt"), "--log-level", "BOGUS"])
