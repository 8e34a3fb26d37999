from luminor.rag.chunker import chunk_text, estimate_tokens


def test_empty_input():
    assert chunk_text("", 500, 50) == []


def test_whitespace_only_input():
    assert chunk_text("  \n\t ", 500, 50) == []


def test_short_text():
    text = "Hello world this is a short text."
    assert chunk_text(text, 500, 50) == [text]


def test_whitespace_is_normalised():
    assert chunk_text("a\n\tb   c", 500, 50) == ["a b c"]


def test_produces_overlap():
    words = [f"w{i}" for i in range(600)]
    chunks = chunk_text(" ".join(words), 500, 50)
    assert len(chunks) >= 2
    assert all(chunks)
    first, second = chunks[0].split(), chunks[1].split()
    assert set(first) & set(second)


def test_covers_all_content():
    words = ["alpha", "beta", "gamma", "delta", "epsilon",
             "zeta", "eta", "theta", "iota", "kappa"]
    chunks = chunk_text(" ".join(words), 5, 1)
    assert chunks
    assert "kappa" in chunks[-1]
    assert chunks[0].split()[0] == "alpha"
    covered = {w for c in chunks for w in c.split()}
    assert covered == set(words)


def test_zero_target_still_progresses():
    chunks = chunk_text("a b c", 0, 0)
    assert chunks == ["a", "b", "c"]


def test_estimate_tokens():
    tokens = estimate_tokens("one two three four")
    assert 4 <= tokens <= 7
    assert tokens == 5


def test_estimate_tokens_empty():
    assert estimate_tokens("") == 0