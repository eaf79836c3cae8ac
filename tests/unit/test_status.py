"""Status token encoding and decoding."""

import pytest

from tigerclaw.errors import InvalidInputError, StatusDecodeError
from tigerclaw.status import (
    DEFAULT_STATUS,
    Lifecycle,
    WorkflowPhase,
    all_tokens,
    decode,
    encode,
)


@pytest.mark.parametrize("phase", list(WorkflowPhase))
@pytest.mark.parametrize("lifecycle", list(Lifecycle))
def test_every_token_decodes_back(phase, lifecycle):
    status = decode(encode(phase, lifecycle))
    assert (status.phase, status.lifecycle) == (phase, lifecycle)


def test_vocabulary_is_closed():
    tokens = all_tokens()
    assert len(tokens) == 36
    assert len(set(tokens)) == 36
    assert tokens[:3] == ["INIT_RUN", "INIT_DONE", "INIT_ERR"]
    assert tokens[-1] == "CREATIVE_ERR"


def test_encode_uses_wire_names():
    assert encode(WorkflowPhase.INIT, Lifecycle.RUNNING) == "INIT_RUN"
    assert encode(WorkflowPhase.SF, Lifecycle.DONE) == "SF_DONE"
    assert encode(WorkflowPhase.FEED, Lifecycle.ERROR) == "FEED_ERR"
    assert encode(WorkflowPhase.MEM_TAG, Lifecycle.DONE) == "MEM_TAG_DONE"


def test_decode_is_case_insensitive():
    assert decode("init_done") == decode("INIT_DONE")
    assert decode("Mem_Tag_Run").phase is WorkflowPhase.MEM_TAG


@pytest.mark.parametrize("token", ["", "Pending", "COMPLETED", "INIT", "INIT_", "MEMTAG_DONE", "ADV_DONE_X"])
def test_unknown_tokens_fail_to_decode(token):
    with pytest.raises(StatusDecodeError) as exc:
        decode(token)
    assert exc.value.token == token


def test_decode_failure_is_a_value_error():
    with pytest.raises(ValueError):
        decode("nonsense")


def test_context_phase_defaults_to_init():
    status = decode("SF_DONE")
    assert status.phase is WorkflowPhase.SF
    assert status.lifecycle is Lifecycle.DONE
    assert status.context_phase is WorkflowPhase.INIT


def test_context_phase_can_be_supplied():
    status = decode("SF_DONE", WorkflowPhase.SF)
    assert status.context_phase is WorkflowPhase.SF


def test_status_renders_as_token():
    assert str(decode("track_err")) == "TRACK_ERR"
    assert DEFAULT_STATUS.token == "INIT_RUN"


def test_phase_parse():
    assert WorkflowPhase.parse("adv") is WorkflowPhase.ADV
    assert WorkflowPhase.parse(" MEM_TAG ") is WorkflowPhase.MEM_TAG
    with pytest.raises(InvalidInputError):
        WorkflowPhase.parse("SHIP")
