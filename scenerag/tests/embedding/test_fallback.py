import math

from scenerag.embedding.fallback import SPREAD, local_embedding, stable_hash, tokenize


def test_stable_hash_is_fixed_across_runs():
    assert stable_hash("") == 0
    assert stable_hash("a") == 97
    assert stable_hash("ab") == 97 * 31 + 98
    assert 0 <= stable_hash("x" * 100) < 2 ** 32


def test_tokenize_lowercases_and_drops_punctuation():
    assert tokenize("Red CAR, fast-road!") == ["red", "car", "fast", "road"]


def test_local_embedding_is_deterministic_and_normalized():
    first = local_embedding("energetic car chase at night", 128)
    second = local_embedding("energetic car chase at night", 128)
    assert first == second
    assert len(first) == 128
    assert math.isclose(math.sqrt(sum(v * v for v in first)), 1.0, rel_tol=1e-9)


def test_local_embedding_single_word_spreads_over_positions():
    vector = local_embedding("car", 1024)
    assert sum(1 for v in vector if v > 0) == SPREAD


def test_local_embedding_of_empty_text_is_zero_vector():
    assert local_embedding("", 16) == [0.0] * 16
    assert local_embedding("   ...  ", 16) == [0.0] * 16


def test_word_order_changes_weights():
    assert local_embedding("car road", 256) != local_embedding("road car", 256)
