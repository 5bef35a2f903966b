import time

import pytest

from src.app.services.passwords import (
    PasswordPolicy,
    dummy_hash,
    hash_password,
    username_violation,
    verify_password,
)
from src.app.services.session_tokens import hash_token, new_session_token


def test_hash_and_verify():
    password_hash = hash_password("SecurePass123!", rounds=4)

    assert password_hash != "SecurePass123!"
    assert verify_password("SecurePass123!", password_hash)
    assert not verify_password("securepass123!", password_hash)


def test_verify_without_hash_is_false():
    assert not verify_password("anything", None, rounds=4)
    assert not verify_password("anything", "not-a-bcrypt-hash")


def test_dummy_hash_uses_requested_cost():
    assert dummy_hash(4).startswith(b"$2b$04$")
    assert dummy_hash(10).startswith(b"$2b$10$")
    assert dummy_hash(10) is dummy_hash(10)


def test_unknown_user_check_as_slow_as_wrong_password():
    rounds = 10
    stored = hash_password("SecurePass123!", rounds=rounds)
    dummy_hash(rounds)

    def timed(password_hash):
        start = time.perf_counter()
        verify_password("Wrong123!", password_hash, rounds=rounds)
        return time.perf_counter() - start

    known = min(timed(stored) for _ in range(3))
    unknown = min(timed(None) for _ in range(3))

    assert unknown > known / 3


@pytest.mark.parametrize(
    "password, expected",
    [
        ("Sh0rt!", "at least 8 characters"),
        ("alllowercase1!", "uppercase"),
        ("ALLUPPERCASE1!", "lowercase"),
        ("NoDigitsHere!", "number"),
        ("NoSymbols123", "special character"),
    ],
)
def test_policy_reports_first_problem(password, expected):
    assert expected in PasswordPolicy().violation(password)


def test_policy_accepts_strong_password():
    assert PasswordPolicy().violation("SecurePass123!") is None


def test_relaxed_policy():
    policy = PasswordPolicy(min_length=4, require_upper=False, symbols="")

    assert policy.violation("abc1") is None


@pytest.mark.parametrize("username", ["bob", "alice_99", "mary-jane", "ABC"])
def test_valid_usernames(username):
    assert username_violation(username) is None


@pytest.mark.parametrize("username", ["ab", "has space", "semi;colon", "émile", ""])
def test_invalid_usernames(username):
    assert username_violation(username) is not None


def test_session_token_is_stored_hashed():
    token, token_hash = new_session_token()

    assert len(token) == 64
    assert token_hash == hash_token(token)
    assert token_hash != token
