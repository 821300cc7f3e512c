from docs_agent.document.metrics import length_change, ratio, reading_time, word_count


def test_word_count_ignores_whitespace_runs() -> None:
    assert word_count("  one   two\nthree\t") == 3
    assert word_count("") == 0
    assert word_count(None) == 0


def test_reading_time_buckets() -> None:
    assert reading_time("") == "Less than 1 minute"
    assert reading_time("word " * 150) == "1 minute"
    assert reading_time("word " * 450) == "3 minutes"


def test_ratio_rounds_and_guards_zero() -> None:
    assert ratio(3, 10) == 0.3
    assert ratio(1, 3) == 0.33
    assert ratio(5, 0) == 0.0


def test_length_change_descriptions() -> None:
    assert length_change("", "anything") == "N/A"
    assert length_change("a" * 100, "a" * 102) == "Similar length"
    assert length_change("a" * 100, "a" * 150) == "50.0% longer"
    assert length_change("a" * 100, "a" * 80) == "20.0% shorter"
