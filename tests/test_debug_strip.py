import pytest

from window_summary.debug_strip import strip_debug_blocks, strip_standalone_json_blobs


SAMPLES = [
    'Summary here. __debug__ {"layers": {"a": 1}} Keep going.',
    'Hello ```json\n{"a": 1}\n``` world',
    'Nice day "ght_status": "good", ahead.',
    "All good.\nRaw payload: xyz",
    "Use time_windows[2] wisely.",
    "Note __windows_json__ nothing",
    'Calm start. __windows_json__ [{"name": "A", "score": 8}]\n\n\n\nFocus later.',
]


def test_empty_input():
    assert strip_debug_blocks(None) == ""
    assert strip_debug_blocks("") == ""


def test_marker_blob_removed():
    assert strip_debug_blocks(SAMPLES[0]) == "Summary here. Keep going."


def test_fenced_block_removed():
    assert strip_debug_blocks(SAMPLES[1]) == "Hello world"


def test_leaked_key_value_removed():
    assert strip_debug_blocks(SAMPLES[2]) == "Nice day ahead."


def test_trailing_raw_payload_removed():
    assert strip_debug_blocks(SAMPLES[3]) == "All good."


def test_positional_tokens_survive():
    assert strip_debug_blocks(SAMPLES[4]) == "Use time_windows[2] wisely."


def test_blank_line_runs_collapse():
    assert strip_debug_blocks(SAMPLES[6]) == "Calm start.\n\nFocus later."


@pytest.mark.parametrize("text", SAMPLES)
def test_idempotent(text):
    once = strip_debug_blocks(text)
    assert strip_debug_blocks(once) == once


def test_standalone_blobs():
    assert strip_standalone_json_blobs('Before [{"a": 1}] after') == "Before  after"
    assert strip_standalone_json_blobs('See {"a": 1, "b": 2} now') == "See  now"
    assert strip_standalone_json_blobs('x {"a": 1') == 'x {"a": 1'
    assert strip_standalone_json_blobs("Windows [3] and {4}") == "Windows [3] and {4}"
