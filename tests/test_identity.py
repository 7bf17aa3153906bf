import hashlib

import pytest

from durapi.identity import CANONICAL_ID_LENGTH, ActorId, resolve_id


def test_canonical_length_string_is_parsed_not_derived(recording_namespace):
    raw = "ab" * 32

    actor_id = resolve_id(recording_namespace, raw)

    assert actor_id.hex == raw
    assert recording_namespace.calls == [("string", raw)]


def test_canonical_length_non_hex_is_rejected_by_namespace(recording_namespace):
    raw = "z" * CANONICAL_ID_LENGTH

    with pytest.raises(ValueError):
        resolve_id(recording_namespace, raw)

    # Still routed to the parser, never treated as a name.
    assert recording_namespace.calls == [("string", raw)]


@pytest.mark.parametrize("name", ["counter", "a" * 63, "a" * 65, "room/42"])
def test_other_lengths_are_names(recording_namespace, name):
    first = resolve_id(recording_namespace, name)
    second = resolve_id(recording_namespace, name)

    assert first == second
    assert first != resolve_id(recording_namespace, name + "-other")
    assert all(call[0] == "name" for call in recording_namespace.calls)


def test_missing_identifier_yields_unique_ids(recording_namespace):
    first = resolve_id(recording_namespace)
    second = resolve_id(recording_namespace)

    assert first != second
    assert recording_namespace.calls == [("unique",), ("unique",)]


def test_empty_string_yields_unique_id(recording_namespace):
    resolve_id(recording_namespace, "")

    assert recording_namespace.calls == [("unique",)]


def test_id_objects_pass_through_unchanged(recording_namespace):
    actor_id = ActorId.unique()

    assert resolve_id(recording_namespace, actor_id) is actor_id
    assert recording_namespace.calls == []


def test_name_derivation_is_stable_across_processes():
    expected = hashlib.sha256(b"rooms:lobby").hexdigest()

    assert ActorId.from_name("lobby", scope="rooms").hex == expected


def test_name_is_not_part_of_equality():
    named = ActorId.from_name("lobby")

    assert named == ActorId.parse(named.hex)
    assert hash(named) == hash(ActorId.parse(named.hex))
    assert named.name == "lobby"


def test_parse_normalizes_case():
    assert ActorId.parse("AB" * 32).hex == "ab" * 32


@pytest.mark.parametrize("raw", ["", "abc", "ab" * 33])
def test_parse_rejects_wrong_length(raw):
    with pytest.raises(ValueError):
        ActorId.parse(raw)


def test_unique_ids_are_canonical():
    actor_id = ActorId.unique()

    assert len(str(actor_id)) == CANONICAL_ID_LENGTH
    assert ActorId.parse(str(actor_id)) == actor_id


def test_dict_round_trip():
    actor_id = ActorId.from_name("lobby")

    restored = ActorId.from_dict(actor_id.to_dict())

    assert restored == actor_id
    assert restored.name == "lobby"
