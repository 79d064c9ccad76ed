from core.security import hash_password, verify_password

ROUNDS = 4


def test_hash_and_verify():
    hashed = hash_password("s3cret-pass", ROUNDS)

    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong", hashed)


def test_long_password_only_first_72_bytes_count():
    hashed = hash_password("p" * 80, ROUNDS)

    assert verify_password("p" * 80, hashed)
    assert verify_password("p" * 72 + "different", hashed)
    assert not verify_password("p" * 71, hashed)


def test_long_multibyte_password():
    password = "é" * 40  # 80 bytes in UTF-8

    assert verify_password(password, hash_password(password, ROUNDS))


def test_missing_or_malformed_hash_never_matches():
    assert not verify_password("anything", None)
    assert not verify_password("anything", "")
    assert not verify_password("anything", "not-a-bcrypt-hash")
