import string
import uuid

import pytest

from platformkit.errors import AppError
from platformkit.generator import (
    PARSE_UUID_ERROR_CODE,
    err_parse_uuid,
    generate_uuid,
    random_default_number,
    random_default_str,
    random_number,
    random_str,
    uuid_from,
)


def test_random_default_number_in_range():
    for _ in range(200):
        value = random_default_number()
        assert 0 <= value < 100


def test_random_number_in_range():
    for _ in range(200):
        value = random_number(1000, 1010)
        assert 1000 <= value < 1010


def test_random_number_empty_range_raises():
    with pytest.raises(ValueError):
        random_number(5, 5)


def test_random_default_str_length_and_alphabet():
    value = random_default_str()
    assert len(value) == 15
    assert set(value) <= set(string.ascii_letters)


@pytest.mark.parametrize("length", [0, 1, 40])
def test_random_str_length(length):
    value = random_str(length)
    assert len(value) == length
    assert set(value) <= set(string.ascii_letters)


def test_generate_uuid_is_valid_and_unique():
    first = generate_uuid()
    second = generate_uuid()
    assert first != second
    assert str(uuid.UUID(first)) == first
    assert uuid_from(first) == first


def test_uuid_from_normalises_case():
    original = generate_uuid()
    assert uuid_from(original.upper()) == original


def test_uuid_from_invalid_raises():
    with pytest.raises(AppError) as info:
        uuid_from("not-a-uuid")
    assert info.value.code == PARSE_UUID_ERROR_CODE
    assert info.value.message.startswith('Fail create uuid from string = "not-a-uuid". Cause: ')


def test_err_parse_uuid_message():
    err = err_parse_uuid("abc", ValueError("bad"))
    assert err.code == PARSE_UUID_ERROR_CODE
    assert err.message == 'Fail create uuid from string = "abc". Cause: "bad"'