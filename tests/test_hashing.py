from app.utils.hashing import BCRYPT_ROUNDS, fits_bcrypt, hash_password, verify_password


def test_hash_uses_bcrypt_cost_12():
    digest = hash_password("longenough1")
    assert digest.startswith(f"$2b${BCRYPT_ROUNDS}$")
    assert BCRYPT_ROUNDS == 12
    assert "longenough1" not in digest


def test_verify_roundtrip_and_wrong_password():
    digest = hash_password("longenough1")
    assert verify_password("longenough1", digest)
    assert not verify_password("longenough2", digest)


def test_hash_is_salted():
    assert hash_password("same-password") != hash_password("same-password")


def test_verify_corrupt_hash_is_false():
    assert verify_password("whatever1", "not-a-bcrypt-hash") is False


def test_fits_bcrypt_counts_bytes_not_chars():
    assert fits_bcrypt("a" * 72)
    assert not fits_bcrypt("a" * 73)
    # 3 bytes per char in utf-8
    assert not fits_bcrypt("密" * 25)
