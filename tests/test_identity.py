"""Tests for the seeded identity generator."""
import string

from churnbird.identity import IdentityGenerator, MAX_STRING_LENGTH


def test_string_length_and_alphabet():
    """Strings are 1-31 lowercase letters."""
    identity = IdentityGenerator(7)
    lengths = set()
    for _ in range(2000):
        s = identity.string()
        assert 1 <= len(s) <= MAX_STRING_LENGTH
        assert set(s) <= set(string.ascii_lowercase)
        lengths.add(len(s))

    assert min(lengths) == 1
    assert max(lengths) == MAX_STRING_LENGTH


def test_integer_bounds():
    """integer() is half-open, integer_between() is inclusive."""
    identity = IdentityGenerator(3)
    assert {identity.integer(3) for _ in range(500)} == {0, 1, 2}
    assert {identity.integer_between(1, 3) for _ in range(500)} == {1, 2, 3}
    assert all(isinstance(identity.integer(10), int) for _ in range(10))


def test_letter_restricted_to_prefix():
    """letter(n) only uses the first n letters."""
    identity = IdentityGenerator(11)
    assert {identity.letter(2) for _ in range(200)} == {"a", "b"}


def test_same_seed_same_stream():
    """Two generators with one seed produce identical draws."""
    first = IdentityGenerator(1234)
    second = IdentityGenerator(1234)

    for _ in range(50):
        assert first.string() == second.string()
        assert first.integer(100) == second.integer(100)
    assert first.normals(10) == second.normals(10)


def test_normals():
    """normals(n) returns n plain floats."""
    values = IdentityGenerator(0).normals(1000)
    assert len(values) == 1000
    assert all(isinstance(v, float) for v in values)
    assert abs(sum(values) / len(values)) < 0.2
